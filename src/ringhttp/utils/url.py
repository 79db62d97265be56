"""
URL model: parse, normalize and unparse request URLs.

Two encoders live here and must not be confused:

* url_encode_illegal_characters() normalizes a raw path or query string. It
  only touches characters that are never legal in a URL and encodes spaces as
  %20. It is idempotent.
* url_encode() encodes a single query/form parameter name or value using the
  form convention (space -> "+") and is applied by the param codec.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote, quote_plus, unquote, urlsplit

from ringhttp.core.exceptions import ConfigurationError


DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}

_ILLEGAL_CHARACTERS = re.compile(r"[^a-zA-Z0-9.\-_~!$&'()*+,;=:@/%?]")

# RFC 3986 userinfo = *( unreserved / pct-encoded / sub-delims / ":" );
# ":" is the user/password separator and is encoded inside each component.
_USER_INFO_SAFE = "!$&'()*+,;="


@dataclass(frozen=True)
class ParsedUrl:
    scheme: str
    server_name: str | None
    server_port: int | None
    uri: str
    query_string: str | None
    user_info: str | None
    url: str


def url_encode_illegal_characters(path_or_query: str | None) -> str | None:
    """
    Percent-encode characters that are illegal anywhere in a URL. Existing
    percent-escapes are left alone so applying this twice is a no-op.
    """
    if path_or_query is None:
        return None
    path_or_query = path_or_query.replace(" ", "%20")
    return _ILLEGAL_CHARACTERS.sub(lambda m: quote(m.group(0), safe=""), path_or_query)


def url_encode(value: Any, encoding: str = "UTF-8", safe: str = "") -> str:
    """Form-style encoding of a single parameter name or value."""
    return quote_plus(str(value), safe=safe, encoding=encoding)


def url_decode(value: str, encoding: str = "UTF-8") -> str:
    return unquote(value, encoding=encoding)


def parse_url(url: str) -> ParsedUrl:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()

    netloc = parts.netloc
    user_info: str | None = None
    if "@" in netloc:
        raw_user_info, _, netloc = netloc.rpartition("@")
        user_info = url_decode(raw_user_info)

    server_name = parts.hostname
    try:
        port = parts.port
    except ValueError as exc:
        raise ConfigurationError(f"invalid port in URL {url!r}") from exc
    if port is not None and DEFAULT_PORTS.get(scheme) == port:
        port = None

    query = parts.query if parts.query or "?" in url.split("#", 1)[0] else None

    return ParsedUrl(
        scheme=scheme,
        server_name=server_name,
        server_port=port,
        uri=url_encode_illegal_characters(parts.path) or "",
        query_string=url_encode_illegal_characters(query),
        user_info=user_info,
        url=url,
    )


def _encode_user_info(user_info: str) -> str:
    user, sep, password = user_info.partition(":")
    encoded = quote(user, safe=_USER_INFO_SAFE)
    if sep:
        encoded += ":" + quote(password, safe=_USER_INFO_SAFE)
    return encoded


def unparse_url(parts: ParsedUrl | Mapping[str, Any]) -> str:
    """
    Build a URL string from parsed parts. The decoded user-info is re-encoded
    component by component, so parse_url(unparse_url(p)).user_info == p.user_info.
    """
    if isinstance(parts, ParsedUrl):
        get = parts.__getattribute__
    else:
        get = lambda key: parts.get(key)  # noqa: E731

    scheme = get("scheme") or "http"
    user_info = get("user_info")
    port = get("server_port")
    query_string = get("query_string")

    url = f"{scheme}://"
    if user_info:
        url += _encode_user_info(user_info) + "@"
    server_name = get("server_name") or ""
    url += f"[{server_name}]" if ":" in server_name else server_name
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        url += f":{port}"
    url += get("uri") or ""
    if query_string is not None:
        url += f"?{query_string}"
    return url
