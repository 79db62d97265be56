import re
from typing import Any, IO


DEFAULT_CHARSET = "UTF-8"

_CHARSET = re.compile(r"charset\s*=\s*([^\s;]+)", re.IGNORECASE)


def string_map(d: dict[str, Any] | None) -> dict[str, str]:
    """
    A helper method to map all key/value pairs in a dictionary to string.
    """
    if not d:
        return {}
    return {str(k): "" if v is None else str(v) for k, v in d.items()}


def detect_charset(content_type: str | None) -> str:
    """
    Read the charset parameter of a Content-Type value, tolerating case and
    whitespace around '='. Defaults to UTF-8.
    """
    if not content_type:
        return DEFAULT_CHARSET
    match = _CHARSET.search(content_type)
    if match is None:
        return DEFAULT_CHARSET
    return match.group(1).strip("\"'")


def is_stream(value: Any) -> bool:
    return hasattr(value, "read") and callable(value.read)


def force_bytes(body: bytes | bytearray | str | IO[bytes] | None, encoding: str = DEFAULT_CHARSET) -> bytes | None:
    """Materialize a body (bytes, text or a readable stream) as bytes."""
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode(encoding)
    if is_stream(body):
        return body.read()
    raise TypeError(f"cannot read body of type {type(body).__name__}")
