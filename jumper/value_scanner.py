import json
from typing import Any, List, Optional

from werkzeug.datastructures import FileStorage, MultiDict


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def loads(text) -> Any:
    """Strict json.loads: NaN, Infinity and -Infinity are decode errors."""
    return json.loads(text, parse_constant=_reject_constant)


def identify(value: str) -> Any:
    """Decode a raw string as a JSON array or object, else return it unchanged."""
    try:
        decoded = loads(value)
    except (TypeError, ValueError):
        return value

    # Scalars stay raw: "5" is the string "5", not the number
    if isinstance(decoded, (list, dict)):
        return decoded
    return value


def scan(values: List[str]) -> Any:
    """Collapse the raw values submitted under one field name.

    One value is returned unwrapped, several become an ordered list and
    no value at all gives None.
    """
    if len(values) == 1:
        return identify(values[0])
    if len(values) > 1:
        return [identify(v) for v in values]
    return None


def scan_files(values: List[FileStorage]) -> Optional[Any]:
    if len(values) == 1:
        return values[0]
    if len(values) > 1:
        return list(values)
    return None


def scan_multidict(data: MultiDict, scanner=scan) -> dict:
    """Apply a scanner to every key of a MultiDict, keeping submission order."""
    result = {}
    for key in data.keys():
        scanned = scanner(data.getlist(key))
        if scanned is not None:
            result[key] = scanned
    return result
