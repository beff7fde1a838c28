"""Request adapter: one queryable parameter store per incoming request.

Query parameters are always parsed. For PUT, POST, DELETE and PATCH the body
is merged on top according to its content type:

- multipart/form-data: fields go to the parameter store, file parts to the
  file store
- application/x-www-form-urlencoded: fields go to the parameter store
- application/json: the top-level object is merged as-is

Raw string values from query strings and forms go through the value scanner,
so ``ids=[1,2,3]`` is stored as a list and ``name=Ann`` stays a string.

Body parse failures never escape construction. They are logged, kept on
``Request.parse_error`` and reported through the response status code
(400 for forms, 500 for JSON).
"""

import copy
import dataclasses
import io
import json
import logging
import math
import re
import struct
import tempfile
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

from flask import current_app, has_app_context, request as current_request
from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import HTTPException
from werkzeug.formparser import FormDataParser

from jumper.errors import (
    FileOpenError,
    InvalidFileError,
    MissingTimeError,
    NoSuchFileError,
    StructDecodeError,
    TimeFormatError,
)
from jumper.files import File
from jumper.value_scanner import loads, scan_files, scan_multidict
from utils.list_helper import uniquify
from utils.network_utils import extract_client_ip, split_host_port

logger = logging.getLogger('jumper')

BODY_METHODS = frozenset(["PUT", "POST", "DELETE", "PATCH"])

MULTIPART_FORM = "multipart/form-data"
URLENCODED_FORM = "application/x-www-form-urlencoded"
JSON_BODY = "application/json"

DEFAULT_MULTIPART_MEMORY = 32 << 10

TRUE_WORDS = frozenset(["true", "yes", "on"])

RFC3339_PATTERN = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Fractional seconds beyond microseconds are truncated.
    """
    match = RFC3339_PATTERN.match(value)
    if not match:
        raise TimeFormatError()

    stamp, fraction, offset = match.groups()
    fmt = "%Y-%m-%dT%H:%M:%S%z"
    if fraction:
        stamp = f"{stamp}.{fraction[:6].ljust(6, '0')}"
        fmt = "%Y-%m-%dT%H:%M:%S.%f%z"

    try:
        return datetime.strptime(stamp + offset, fmt)
    except ValueError as e:
        raise TimeFormatError() from e


def _to_number(value: Any):
    """Best-effort numeric reading of a stored value, None when there is none."""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 10)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _to_integer(value: Any) -> Optional[int]:
    number = _to_number(value)
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        return int(number)
    return number


def _wrap(number: int, bits: int, signed: bool) -> int:
    """Truncate an integer to a fixed width the way a C-style cast would."""
    number &= (1 << bits) - 1
    if signed and number >> (bits - 1):
        number -= 1 << bits
    return number


def _integer(value: Any, bits: int, signed: bool, default):
    number = _to_integer(value)
    if number is None or (not signed and number < 0):
        return default
    return _wrap(number, bits, signed)


def _to_float(value: Any, default):
    number = _to_number(value)
    if number is None:
        return default
    try:
        return float(number)
    except OverflowError:
        return math.copysign(math.inf, number)


def _single_precision(number: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def _dump_json(value: Any, allow_nan: bool = True) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=allow_nan)


class Request:
    """Uniform view over the query string, form fields, uploads and JSON body."""

    def __init__(self, request, response=None, multipart_memory: Optional[int] = None,
                 trust_proxy_headers: Optional[bool] = None):
        self._request = request
        self._response = response
        self._headers = request.headers
        self._segments: Dict[str, Any] = dict(getattr(request, "view_args", None) or {})
        self._multipart_memory = multipart_memory or DEFAULT_MULTIPART_MEMORY

        self.method: str = request.method
        self.client_ip: str = extract_client_ip(
            request.remote_addr,
            request.headers.get("X-Forwarded-For"),
            trust_proxy_headers,
        )
        self.client_port: str = str(request.environ.get("REMOTE_PORT") or "")
        self.parse_error: Optional[Exception] = None

        params = scan_multidict(request.args)
        files: Dict[str, Any] = {}

        if self.method in BODY_METHODS:
            body_params, files = self._parse_body()
            params.update(body_params)

        self._params: Dict[str, Any] = params
        self._files: Dict[str, Any] = files

    # Body parsing

    def _parse_body(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        mimetype = self._request.mimetype

        if mimetype in (MULTIPART_FORM, URLENCODED_FORM):
            return self._parse_form(mimetype)
        if mimetype == JSON_BODY:
            return self._parse_json(), {}
        return {}, {}

    def _parse_form(self, mimetype: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        parser = FormDataParser(
            stream_factory=self._stream_factory,
            max_form_memory_size=self._request.max_form_memory_size,
            max_content_length=self._request.max_content_length,
            cls=MultiDict,
            silent=False,
            max_form_parts=self._request.max_form_parts,
        )

        try:
            body = self._request.get_data(cache=True)
            _, form, files = parser.parse(
                io.BytesIO(body), mimetype, len(body), self._request.mimetype_params
            )
        except HTTPException as e:
            self._signal(e.code or 400, e)
            return {}, {}
        except ValueError as e:
            self._signal(400, e)
            return {}, {}

        return scan_multidict(form), scan_multidict(files, scan_files)

    def _parse_json(self) -> Dict[str, Any]:
        try:
            body = self._request.get_data(cache=True)
            document = loads(body)
        except HTTPException as e:
            self._signal(e.code or 500, e)
            return {}
        except ValueError as e:
            self._signal(500, e)
            return {}

        if not isinstance(document, dict):
            self._signal(500, ValueError("JSON body must be an object"))
            return {}
        return document

    def _stream_factory(self, total_content_length, content_type, filename, content_length=None):
        return tempfile.SpooledTemporaryFile(max_size=self._multipart_memory, mode="w+b")

    def _signal(self, status_code: int, error: Exception) -> None:
        self.parse_error = error
        logger.warning(
            f"Could not parse {self._request.mimetype} body of {self.method} "
            f"{self._request.path}: {str(error)}"
        )

        if self._response is None:
            return
        if hasattr(self._response, "set_http_code"):
            self._response.set_http_code(status_code)
        else:
            self._response.status_code = status_code

    # URL and transport metadata

    def get_host(self) -> str:
        return split_host_port(self._request.host)[0]

    def get_port(self) -> str:
        return split_host_port(self._request.host)[1]

    def get_scheme(self) -> str:
        return self._request.scheme

    def get_path(self) -> str:
        return self._request.path

    def get_raw_path(self) -> str:
        """Path as it was sent on the wire, still percent-encoded."""
        raw_uri = self._request.environ.get("RAW_URI") or self._request.environ.get("REQUEST_URI")
        if raw_uri:
            return raw_uri.split("?", 1)[0]
        return quote(self._request.path)

    def get_raw_query(self) -> str:
        return self._request.query_string.decode("latin-1")

    def has_user(self) -> bool:
        auth = self._request.authorization
        return auth is not None and auth.type == "basic"

    def get_username(self) -> str:
        if self.has_user():
            return self._request.authorization.username or ""
        return ""

    def get_password(self) -> str:
        if self.has_user():
            return self._request.authorization.password or ""
        return ""

    def get_url(self) -> str:
        return self._request.base_url

    def get_full_url(self) -> str:
        return self._request.url

    def header(self, key: str) -> str:
        return self._headers.get(key, "")

    # Parameter store

    def get_all(self) -> Mapping[str, Any]:
        return MappingProxyType(self._params)

    def append(self, key: str, value: Any) -> None:
        """Add or overwrite a single parameter."""
        self._params = {**self._params, key: value}

    def get(self, key: str) -> str:
        value = self._params.get(key)
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (list, dict)):
            return _dump_json(value)
        return str(value)

    # Path segments

    def get_segment(self, key: str) -> str:
        value = self._segments.get(key)
        return "" if value is None else str(value)

    def get_segment_uint64(self, key: str, default=0):
        return _integer(self._segments.get(key), 64, False, default)

    def get_segment_uint32(self, key: str, default=0):
        return _integer(self._segments.get(key), 32, False, default)

    def get_segment_uint(self, key: str, default=0):
        return self.get_segment_uint64(key, default)

    def get_segment_int64(self, key: str, default=0):
        return _integer(self._segments.get(key), 64, True, default)

    def get_segment_int32(self, key: str, default=0):
        return _integer(self._segments.get(key), 32, True, default)

    def get_segment_int(self, key: str, default=0):
        return self.get_segment_int64(key, default)

    # Lenient numeric and boolean accessors.
    # Absent or unparseable values give ``default``; pass default=None to
    # tell a missing key apart from a real zero.

    def get_uint64(self, key: str, default=0):
        return _integer(self._params.get(key), 64, False, default)

    def get_uint32(self, key: str, default=0):
        return _integer(self._params.get(key), 32, False, default)

    def get_uint(self, key: str, default=0):
        return self.get_uint64(key, default)

    def get_int64(self, key: str, default=0):
        return _integer(self._params.get(key), 64, True, default)

    def get_int32(self, key: str, default=0):
        return _integer(self._params.get(key), 32, True, default)

    def get_int(self, key: str, default=0):
        return self.get_int64(key, default)

    def get_float64(self, key: str, default=0.0):
        return _to_float(self._params.get(key), default)

    def get_float(self, key: str, default=0.0):
        """Single-precision reading of the value."""
        number = self.get_float64(key, None)
        if number is None:
            return default
        return _single_precision(number)

    def get_bool(self, key: str, default=False):
        value = self._params.get(key)
        if isinstance(value, str) and value.strip().lower() in TRUE_WORDS:
            return True
        number = _to_number(value)
        if number is None:
            return default
        return number > 0

    # Timestamps

    def get_time(self, key: str) -> datetime:
        """Strict RFC 3339 accessor.

        Raises MissingTimeError when the key is absent and TimeFormatError when
        the value is not an RFC 3339 string.
        """
        value = self._params.get(key)
        if value is None:
            raise MissingTimeError()
        if not isinstance(value, str):
            raise TimeFormatError()
        return parse_rfc3339(value)

    def get_time_or_none(self, key: str) -> Optional[datetime]:
        try:
            return self.get_time(key)
        except (MissingTimeError, TimeFormatError):
            return None

    # Structured accessors

    def get_array(self, key: str) -> Optional[List[Any]]:
        value = self._params.get(key)
        if isinstance(value, list):
            return copy.deepcopy(value)
        return None

    def get_array_uniquify(self, key: str) -> Optional[List[Any]]:
        value = self.get_array(key)
        if value is None:
            return None
        return uniquify(value)

    def get_map(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._params.get(key)
        if isinstance(value, dict):
            return copy.deepcopy(value)
        return None

    def get_json(self, key: str) -> Optional[bytes]:
        try:
            return _dump_json(self._params.get(key), allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            logger.debug(f"Parameter {key!r} is not JSON serializable: {str(e)}")
            return None

    def get_struct(self, cls=None):
        """Decode the raw request body as JSON, optionally into ``cls``.

        Dataclasses are built from their init fields, unknown keys ignored.
        Any other callable receives the object's keys as keyword arguments.
        """
        try:
            document = loads(self._request.get_data(cache=True))
        except HTTPException as e:
            raise StructDecodeError(f"could not read request body: {str(e)}") from e
        except ValueError as e:
            raise StructDecodeError(f"could not decode request body: {str(e)}") from e

        if cls is None:
            return document
        if not isinstance(document, dict):
            raise StructDecodeError("request body is not a JSON object")

        if dataclasses.is_dataclass(cls):
            names = {field.name for field in dataclasses.fields(cls) if field.init}
            document = {k: v for k, v in document.items() if k in names}

        try:
            return cls(**document)
        except TypeError as e:
            raise StructDecodeError(str(e)) from e

    # Presence predicates

    def has(self, *keys: str) -> bool:
        return all(key in self._params for key in keys)

    def filled(self, *keys: str) -> bool:
        """Like has(), but blank strings, empty lists and nulls do not count."""
        for key in keys:
            if key not in self._params:
                return False
            value = self._params[key]
            if value is None:
                return False
            if isinstance(value, str) and not value.strip():
                return False
            if isinstance(value, list) and not value:
                return False
        return True

    def has_header(self, *keys: str) -> bool:
        return all(key in self._headers for key in keys)

    def header_filled(self, *keys: str) -> bool:
        return all(self._headers.get(key) for key in keys)

    def has_file(self, *keys: str) -> bool:
        return all(self._files.get(key) is not None for key in keys)

    # Files

    def get_file(self, key: str) -> File:
        stored = self._files.get(key)
        if stored is None:
            raise NoSuchFileError()
        if isinstance(stored, list):
            raise InvalidFileError("invalid file, maybe files instead")
        return File.open(stored, self._multipart_memory)

    def get_files(self, key: str) -> List[File]:
        stored = self._files.get(key)
        if stored is None:
            raise NoSuchFileError()
        if not isinstance(stored, list):
            raise InvalidFileError("invalid files, maybe file instead")

        files = []
        for storage in stored:
            try:
                files.append(File.open(storage, self._multipart_memory))
            except FileOpenError as e:
                for opened in files:
                    opened.close()
                raise FileOpenError("files error") from e
        return files


def plug_request(response=None, request=None) -> Request:
    """Build the adapter for the current Flask request.

    ``response`` receives the status code of a body parse failure; it may be
    a jumper Response envelope or any Werkzeug response.
    """
    if request is None:
        request = current_request._get_current_object()

    multipart_memory = None
    trust_proxy_headers = None
    if has_app_context():
        multipart_memory = current_app.config.get("JUMPER_MULTIPART_MEMORY")
        trust_proxy_headers = current_app.config.get("JUMPER_TRUST_PROXY_HEADERS")

    return Request(
        request,
        response,
        multipart_memory=multipart_memory,
        trust_proxy_headers=trust_proxy_headers,
    )
