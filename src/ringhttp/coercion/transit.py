"""
Transit body codecs.

Handlers are supplied per request through ``transit_opts``:

    {"encode": {"handlers": {Point: PointWriteHandler}},
     "decode": {"handlers": {"point": PointReadHandler}}}

Write handlers follow transit-python's handler protocol (``tag``, ``rep`` and
``string_rep``); read handlers implement ``from_rep``. The older flat shape
``{"handlers": {Point: PointWriteHandler}}`` is still accepted, for encoding
only.
"""
from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any, Mapping

from transit.reader import Reader
from transit.writer import Writer

from ringhttp.coercion.base import BodyCodec, register_codec

if TYPE_CHECKING:
    from ringhttp.request_execution.models import Request


def transit_handlers(transit_opts: Mapping[Any, Any] | None, direction: str) -> Mapping[Any, Any]:
    """Return the handlers for ``direction`` ("encode" or "decode")."""
    if not transit_opts:
        return {}
    if "encode" in transit_opts or "decode" in transit_opts:
        return (transit_opts.get(direction) or {}).get("handlers") or {}
    # deprecated flat shape
    if direction == "encode":
        handlers = transit_opts.get("handlers") or {}
        return {key: handler for key, handler in handlers.items() if isinstance(key, type)}
    return {}


class TransitCodec(BodyCodec):
    protocol: str
    priority = 10

    def encode(self, value: Any, request: Request) -> bytes:
        buffer: io.StringIO | io.BytesIO = io.StringIO() if self.protocol == "json" else io.BytesIO()
        writer = Writer(buffer, self.protocol)
        for obj_type, handler in transit_handlers(request.transit_opts, "encode").items():
            writer.register(obj_type, handler)
        writer.write(value)
        data = buffer.getvalue()
        return data.encode("utf-8") if isinstance(data, str) else data

    def decode(self, data: bytes, charset: str, request: Request) -> Any:
        reader = Reader(self.protocol)
        for tag, handler in transit_handlers(request.transit_opts, "decode").items():
            reader.register(tag, handler)
        if self.protocol == "json":
            return reader.read(io.StringIO(data.decode(charset)))
        return reader.read(io.BytesIO(data))

    def matches(self, mime: str) -> bool:
        # servers in the wild also send application/transit-json
        return mime in (self.mime_type, self.mime_type.replace("+", "-"))


@register_codec("transit+json")
class TransitJsonCodec(TransitCodec):
    mime_type = "application/transit+json"
    protocol = "json"


@register_codec("transit+msgpack")
class TransitMsgpackCodec(TransitCodec):
    mime_type = "application/transit+msgpack"
    protocol = "msgpack"
