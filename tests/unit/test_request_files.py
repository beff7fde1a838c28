import io

import pytest

import jumper.files as files_module
from jumper import (
    File,
    FileOpenError,
    InvalidFileError,
    NoSuchFileError,
    plug_request,
)


def _upload(content, name, content_type="text/plain"):
    return (io.BytesIO(content), name, content_type)


def test_get_file_returns_open_reference(flask_app):
    data = {"file": _upload(b"abc", "a.txt")}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        with req.get_file("file") as f:
            assert isinstance(f, File)
            assert f.filename == "a.txt"
            assert f.content_type == "text/plain"
            assert f.size == 3
            assert f.read() == b"abc"
        assert f.closed


def test_get_file_rejects_multiple_uploads(flask_app):
    data = {"file": [_upload(b"a", "a.txt"), _upload(b"b", "b.txt")]}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        with pytest.raises(InvalidFileError) as excinfo:
            req.get_file("file")
        assert str(excinfo.value) == "invalid file, maybe files instead"


def test_get_files_returns_all_uploads_in_order(flask_app):
    data = {"files": [_upload(b"one", "1.txt"), _upload(b"three", "3.txt")]}
    with flask_app.test_request_context("/", method="PUT", data=data):
        req = plug_request()

        files = req.get_files("files")
        try:
            assert [f.filename for f in files] == ["1.txt", "3.txt"]
            assert [f.size for f in files] == [3, 5]
            assert files[1].read() == b"three"
        finally:
            for f in files:
                f.close()


def test_get_files_rejects_single_upload(flask_app):
    data = {"file": _upload(b"a", "a.txt")}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        with pytest.raises(InvalidFileError) as excinfo:
            req.get_files("file")
        assert str(excinfo.value) == "invalid files, maybe file instead"


def test_missing_file(flask_app):
    with flask_app.test_request_context("/", method="POST", data={"name": "Ann"}):
        req = plug_request()

        assert not req.has_file("file")
        with pytest.raises(NoSuchFileError) as single:
            req.get_file("file")
        assert str(single.value) == "no such file"
        with pytest.raises(NoSuchFileError):
            req.get_files("file")


def test_has_file_requires_every_key(flask_app):
    data = {"a": _upload(b"a", "a.txt"), "b": [_upload(b"b", "b.txt"), _upload(b"c", "c.txt")]}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        assert req.has_file("a", "b")
        assert not req.has_file("a", "c")
        assert req.has_file()


def test_closing_a_handle_does_not_affect_reopening(flask_app):
    data = {"file": _upload(b"abc", "a.txt")}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        first = req.get_file("file")
        assert first.read() == b"abc"
        first.close()

        with req.get_file("file") as again:
            assert again.read() == b"abc"


def test_handles_keep_independent_positions(flask_app):
    data = {"file": _upload(b"hello", "a.txt")}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        with req.get_file("file") as a:
            assert a.read(2) == b"he"
            with req.get_file("file") as b:
                assert b.read() == b"hello"
                assert a.read() == b"llo"
            assert not a.closed


def test_get_files_surfaces_open_errors(flask_app, monkeypatch):
    data = {"files": [_upload(b"a", "a.txt"), _upload(b"b", "b.txt")]}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        calls = []
        real_copy = files_module.copyfileobj

        def failing_copy(src, dst, *args):
            calls.append(src)
            if len(calls) == 2:
                raise OSError("disk full")
            return real_copy(src, dst, *args)

        monkeypatch.setattr(files_module, "copyfileobj", failing_copy)

        with pytest.raises(FileOpenError) as excinfo:
            req.get_files("files")
        assert str(excinfo.value) == "files error"
        assert isinstance(excinfo.value.__cause__, FileOpenError)


def test_get_file_wraps_open_errors(flask_app, monkeypatch):
    data = {"file": _upload(b"a", "a.txt")}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        def failing_copy(src, dst, *args):
            raise OSError("disk full")

        monkeypatch.setattr(files_module, "copyfileobj", failing_copy)

        with pytest.raises(FileOpenError) as excinfo:
            req.get_file("file")
        assert isinstance(excinfo.value.__cause__, OSError)


def test_large_uploads_spool_past_memory_threshold(flask_app):
    flask_app.config["JUMPER_MULTIPART_MEMORY"] = 16
    payload = b"x" * 1024
    data = {"file": _upload(payload, "big.bin", "application/octet-stream")}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        with req.get_file("file") as f:
            assert f.size == 1024
            assert f.read() == payload


def test_save_copies_upload(flask_app, tmp_path):
    data = {"file": _upload(b"saved", "s.txt")}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        target = tmp_path / "out.txt"
        with req.get_file("file") as f:
            f.save(str(target))
        assert target.read_bytes() == b"saved"


def test_save_copies_whole_upload_and_keeps_position(flask_app):
    data = {"file": _upload(b"abcdef", "s.txt")}
    with flask_app.test_request_context("/", method="POST", data=data):
        req = plug_request()

        out = io.BytesIO()
        with req.get_file("file") as f:
            f.read(3)
            f.save(out)
            assert f.tell() == 3
        assert out.getvalue() == b"abcdef"
