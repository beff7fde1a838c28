import json
from datetime import datetime, timezone

import pytest
from flask import Response as FlaskResponse

from jumper import plug_response, ResponseWriteError


def test_reply_success_writes_fixed_envelope():
    res = plug_response()
    raw = res.reply_success("0000000", "OK", "done", None)

    assert raw.get_data(as_text=True) == (
        '{"status":1,"status_number":"0000000","status_code":"OK",'
        '"status_message":"done","data":null}\n'
    )
    assert raw.headers["Content-Type"] == "application/json"
    assert raw.status_code == 200


def test_reply_failed_sets_failure_flag():
    res = plug_response()
    raw = res.reply_failed("4000000", "BAD", "nope", {"field": "name"})

    body = json.loads(raw.get_data(as_text=True))
    assert body == {
        "status": 0,
        "status_number": "4000000",
        "status_code": "BAD",
        "status_message": "nope",
        "data": {"field": "name"},
    }


def test_envelope_keys_keep_fixed_order():
    raw = plug_response().reply(1, "1", "C", "m", {"b": 1, "a": 2})
    body = json.loads(raw.get_data(as_text=True))
    assert list(body) == ["status", "status_number", "status_code", "status_message", "data"]
    assert list(body["data"]) == ["b", "a"]


def test_set_http_code_before_reply():
    res = plug_response()
    raw = res.set_http_code(404).reply_failed("4040000", "NOT_FOUND", "missing")

    assert raw.status_code == 404
    assert json.loads(raw.get_data())["status"] == 0


def test_set_http_code_after_reply_is_ignored():
    res = plug_response()
    res.reply_success("0000000", "OK", "done")

    res.set_http_code(500)
    assert res.response.status_code == 200


def test_reply_writes_only_once():
    res = plug_response()
    res.reply_success("0000000", "OK", "done")

    with pytest.raises(ResponseWriteError):
        res.reply_failed("1", "X", "again")
    assert json.loads(res.response.get_data())["status"] == 1


def test_unserializable_payload_raises_and_leaves_response_unwritten():
    res = plug_response()

    with pytest.raises(ResponseWriteError):
        res.reply_success("0000000", "OK", "done", {"obj": object()})
    assert not res.written

    res.reply_failed("5000000", "ERR", "fallback")
    assert res.written


def test_non_finite_numbers_are_not_written():
    res = plug_response()

    with pytest.raises(ResponseWriteError):
        res.reply_success("0000000", "OK", "done", {"ratio": float("inf")})
    assert not res.written


def test_datetimes_serialize_as_iso_8601():
    at = datetime(2023, 1, 2, 15, 4, 5, tzinfo=timezone.utc)
    raw = plug_response().reply_success("0000000", "OK", "done", {"at": at})
    assert json.loads(raw.get_data())["data"] == {"at": "2023-01-02T15:04:05+00:00"}


def test_wraps_existing_response():
    existing = FlaskResponse(status=201)
    res = plug_response(existing)

    assert res.reply_success("0000000", "OK", "created") is existing
    assert existing.status_code == 201


def test_to_dict_reflects_fields():
    res = plug_response()
    res.reply_success("0000001", "OK", "done", [1, 2])
    assert dict(res.to_dict()) == {
        "status": 1,
        "status_number": "0000001",
        "status_code": "OK",
        "status_message": "done",
        "data": [1, 2],
    }
