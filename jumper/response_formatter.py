import json
import logging
from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Optional

from flask import Response as FlaskResponse

from jumper.errors import ResponseWriteError

logger = logging.getLogger('jumper')

JSON_MIMETYPE = "application/json"

STATUS_FAILED = 0
STATUS_SUCCESS = 1


def _default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class Response:
    """Fixed success/failure JSON envelope written once into a Flask response.

    The body always has the shape::

        {"status": 0|1, "status_number": "...", "status_code": "...",
         "status_message": "...", "data": ...}
    """

    def __init__(self, response: Optional[FlaskResponse] = None):
        self._response = response if response is not None else FlaskResponse()
        self._written = False

        self.status = STATUS_FAILED
        self.status_number = ""
        self.status_code = ""
        self.status_message = ""
        self.data: Any = None

    @property
    def response(self) -> FlaskResponse:
        return self._response

    @property
    def written(self) -> bool:
        return self._written

    def set_http_code(self, code: int) -> "Response":
        """Set the HTTP status; must come before the body is written."""
        if self._written:
            logger.warning(f"Ignoring HTTP status {code}: response body already written")
            return self
        self._response.status_code = code
        return self

    def to_dict(self) -> "OrderedDict[str, Any]":
        return OrderedDict([
            ("status", self.status),
            ("status_number", self.status_number),
            ("status_code", self.status_code),
            ("status_message", self.status_message),
            ("data", self.data),
        ])

    def reply(self, status: int, number: str, code: str, message: str, data: Any = None) -> FlaskResponse:
        """Fill the envelope, serialize it and write it to the response."""
        if self._written:
            raise ResponseWriteError("response already written")

        self._response.headers["Content-Type"] = JSON_MIMETYPE

        self.status = status
        self.status_number = number
        self.status_code = code
        self.status_message = message
        self.data = data

        try:
            body = json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False, allow_nan=False,
                              default=_default)
        except (TypeError, ValueError) as e:
            logger.error(f"Error serializing response envelope: {str(e)}")
            raise ResponseWriteError(f"could not serialize response: {str(e)}") from e

        self._response.set_data(body + "\n")
        self._written = True
        return self._response

    def reply_failed(self, number: str, code: str, message: str, data: Any = None) -> FlaskResponse:
        return self.reply(STATUS_FAILED, number, code, message, data)

    def reply_success(self, number: str, code: str, message: str, data: Any = None) -> FlaskResponse:
        return self.reply(STATUS_SUCCESS, number, code, message, data)


def plug_response(response: Optional[FlaskResponse] = None) -> Response:
    """Wrap a Flask response (a fresh one when omitted) in the JSON envelope."""
    return Response(response)
