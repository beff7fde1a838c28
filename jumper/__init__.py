"""Request/response helpers for Flask handlers.

This package contains:
- request_parser.py: Coalesce query, form, multipart and JSON data into one parameter store
- response_formatter.py: Write the fixed success/failure JSON envelope
- value_scanner.py: Infer arrays and objects from raw string values
- files.py: Uploaded file references
- errors.py: Errors raised by accessors and the envelope
"""

from jumper.errors import (
    JumperError,
    NoSuchFileError,
    InvalidFileError,
    FileOpenError,
    MissingTimeError,
    TimeFormatError,
    StructDecodeError,
    ResponseWriteError,
)
from jumper.files import File
from jumper.request_parser import Request, plug_request
from jumper.response_formatter import Response, plug_response

__all__ = [
    "File",
    "Request",
    "Response",
    "plug_request",
    "plug_response",
    "JumperError",
    "NoSuchFileError",
    "InvalidFileError",
    "FileOpenError",
    "MissingTimeError",
    "TimeFormatError",
    "StructDecodeError",
    "ResponseWriteError",
]
