from ringhttp.coercion.base import (
    BodyCodec,
    CodecFactory,
    codec_key,
    detect_codec,
    mime_of,
    register_codec,
    resolve_mime,
)
from ringhttp.coercion.builtin import EdnCodec, FormCodec, JsonCodec
from ringhttp.coercion.transit import (
    TransitJsonCodec,
    TransitMsgpackCodec,
    transit_handlers,
)

__all__ = [
    "BodyCodec",
    "CodecFactory",
    "codec_key",
    "detect_codec",
    "mime_of",
    "register_codec",
    "resolve_mime",
    "EdnCodec",
    "FormCodec",
    "JsonCodec",
    "TransitJsonCodec",
    "TransitMsgpackCodec",
    "transit_handlers",
]
