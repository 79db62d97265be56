from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

from multidict import CIMultiDict, CIMultiDictProxy

from ringhttp.core.exceptions import ConfigurationError
from ringhttp.utils.common import string_map

if TYPE_CHECKING:
    from ringhttp.request_execution.transport.pool import ConnectionManager


Headers = CIMultiDictProxy[str]


class RequestType(str, Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"


def freeze_headers(headers: Mapping[str, Any] | None = None) -> Headers:
    """Return an immutable, case-insensitive view of ``headers``."""
    if isinstance(headers, CIMultiDictProxy):
        return headers
    if isinstance(headers, CIMultiDict):
        return CIMultiDictProxy(headers)
    return CIMultiDictProxy(CIMultiDict(string_map(dict(headers or {}))))


@dataclass(frozen=True)
class ProtocolVersion:
    name: str
    major: int
    minor: int


@dataclass(frozen=True)
class MultipartPart:
    """
    One part of a multipart body.
    • name: form field name
    • content: str, bytes, a readable binary stream or a pathlib.Path
    • filename: filename announced for the part (defaults to Path.name for paths)
    • mime_type: Content-Type of the part
    """
    name: str
    content: Any
    filename: str | None = None
    mime_type: str | None = None


@dataclass(frozen=True)
class Request:
    """
    Immutable description of a single HTTP request as it travels through the
    middleware pipeline. Middleware derive new values with evolve().

    Addressing
    • method: HTTP verb, any string is accepted (e.g. PROPFIND)
    • url: absolute URL, parsed into the fields below by UrlMiddleware
    • scheme, server_name, server_port, uri, query_string, user_info

    Payload
    • query_params / form_params: parameter mappings encoded by the param codec
    • multipart: sequence of MultipartPart
    • headers: case-insensitive headers
    • body, body_encoding, length
    • content_type / accept: format tag ("json", "edn", ...) or a MIME string
    • character_encoding: appended to Content-Type as charset
    • accept_encoding: extra encodings offered besides gzip/deflate

    Coercion
    • as_: how to coerce the response body ("auto", "json", "stream", ...)
    • coerce: which statuses get codec decoding ("unexceptional", "always", "exceptional")
    • multi_param_style: "repeat", "indexed" or "array"
    • flatten_nested_keys / ignore_nested_query_string / flatten_nested_form_params
    • json_opts: keyword arguments for json.dumps
    • transit_opts: {"encode": {"handlers": ...}, "decode": {"handlers": ...}}

    Behaviour
    • throw_exceptions, throw_entire_message, decompress_body, decode_body_headers,
      ignore_unknown_host, capture_socket, insecure, follow_redirects,
      max_redirects, socket_timeout, connection_timeout
    • connection_manager: externally owned pool handle
    • middleware: replaces the pipeline for this request only
    • async_: deliver the response through on_success/on_failure
    • metadata: free-form values for caller-supplied middleware
    """
    method: str | RequestType = RequestType.GET
    url: str | None = None
    scheme: str = "http"
    server_name: str | None = None
    server_port: int | None = None
    uri: str = ""
    query_string: str | None = None
    user_info: str | None = None
    query_params: Mapping[str, Any] | None = None
    form_params: Mapping[str, Any] | None = None
    multipart: Sequence[MultipartPart] | None = None
    headers: Headers = field(default_factory=freeze_headers)
    body: Any = None
    body_encoding: str = "UTF-8"
    length: int | None = None
    content_type: str | None = None
    character_encoding: str | None = None
    accept: str | None = None
    accept_encoding: Sequence[str] | None = None
    as_: str | None = None
    coerce: str = "unexceptional"
    multi_param_style: str = "repeat"
    flatten_nested_keys: Sequence[str] | None = None
    ignore_nested_query_string: bool = False
    flatten_nested_form_params: bool = False
    json_opts: Mapping[str, Any] | None = None
    transit_opts: Mapping[Any, Any] | None = None
    basic_auth: tuple[str, str] | str | None = None
    oauth_token: str | None = None
    throw_exceptions: bool = True
    throw_entire_message: bool = False
    decompress_body: bool = True
    decode_body_headers: bool = False
    ignore_unknown_host: bool = False
    capture_socket: bool = False
    insecure: bool = False
    follow_redirects: bool = True
    max_redirects: int = 10
    socket_timeout: float | None = None
    connection_timeout: float | None = None
    connection_manager: ConnectionManager | None = None
    middleware: Sequence[Callable[..., Any]] | None = None
    async_: bool = False
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CIMultiDictProxy):
            object.__setattr__(self, "headers", freeze_headers(self.headers))
        if self.multipart is not None:
            object.__setattr__(
                self,
                "multipart",
                tuple(p if isinstance(p, MultipartPart) else MultipartPart(**p) for p in self.multipart),
            )

    @property
    def method_name(self) -> str:
        return self.method.value if isinstance(self.method, RequestType) else str(self.method)

    @property
    def host_url(self) -> str | None:
        return self.url or self.server_name

    def evolve(self, **changes: Any) -> "Request":
        return dataclasses.replace(self, **changes)

    def with_headers(self, new_headers: Mapping[str, str]) -> "Request":
        """Return a request with headers added (replacing same-named headers)."""
        headers = CIMultiDict(self.headers)
        for name, value in new_headers.items():
            headers[name] = value
        return self.evolve(headers=CIMultiDictProxy(headers))

    def without_headers(self, *names: str) -> "Request":
        headers = CIMultiDict(self.headers)
        for name in names:
            headers.popall(name, None)
        return self.evolve(headers=CIMultiDictProxy(headers))

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None, **overrides: Any) -> "Request":
        """
        Build a Request from a mapping of options. Keys may be spelled with
        dashes ("throw-exceptions") and "as"/"async" are accepted for the
        fields as_/async_.
        """
        if isinstance(options, Request):
            return options.evolve(**_normalize_keys(overrides)) if overrides else options
        return cls(**_normalize_keys({**(options or {}), **overrides}))

    def with_defaults(self, defaults: Mapping[str, Any]) -> "Request":
        """
        Fill the fields still holding their declared default from ``defaults``.
        Default headers are merged under the request's own headers.
        """
        changes: dict[str, Any] = {}
        for name, value in _normalize_keys(defaults).items():
            current = getattr(self, name)
            if name == "headers":
                merged = CIMultiDict(freeze_headers(value))
                for header in set(current.keys()):
                    merged.popall(header, None)
                merged.extend(current)
                changes[name] = CIMultiDictProxy(merged)
            elif current == _FIELD_DEFAULTS[name]():
                changes[name] = value
        return self.evolve(**changes) if changes else self


_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(Request))
_FIELD_DEFAULTS: dict[str, Callable[[], Any]] = {
    f.name: f.default_factory if f.default is dataclasses.MISSING else (lambda default=f.default: default)
    for f in dataclasses.fields(Request)
}
_ALIASES = {"as": "as_", "async": "async_", "async?": "async_"}


def _normalize_keys(options: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in options.items():
        name = _ALIASES.get(key, key.replace("-", "_").rstrip("?"))
        if name not in _FIELD_NAMES:
            raise ConfigurationError(f"unknown request option: {key!r}")
        normalized[name] = value
    return normalized


@dataclass(frozen=True)
class Response:
    """
    Immutable description of an HTTP response.
    • status: HTTP status code
    • headers: case-insensitive response headers
    • body: byte stream from the transport, the decoded value after coercion
    • reason_phrase / protocol_version: from the status line
    • orig_content_encoding: Content-Encoding removed by decompression
    • request_time: elapsed milliseconds for the downstream pipeline
    • connection_manager: pool handle the request was sent through
    • raw_socket_bytes / raw_socket_str: captured request bytes (capture_socket)
    • request: the request as handed to the transport
    """
    status: int
    headers: Headers = field(default_factory=freeze_headers)
    body: Any = None
    reason_phrase: str | None = None
    protocol_version: ProtocolVersion | None = None
    orig_content_encoding: str | None = None
    request_time: float | None = None
    connection_manager: ConnectionManager | None = None
    raw_socket_bytes: bytes | None = None
    raw_socket_str: str | None = None
    request: Request | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CIMultiDictProxy):
            object.__setattr__(self, "headers", freeze_headers(self.headers))

    def evolve(self, **changes: Any) -> "Response":
        return dataclasses.replace(self, **changes)
