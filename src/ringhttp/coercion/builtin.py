from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

import edn_format

from ringhttp.coercion.base import BodyCodec, register_codec
from ringhttp.utils.params import form_decode, generate_query_string

if TYPE_CHECKING:
    from ringhttp.request_execution.models import Request


_JSON_MIME = re.compile(r"^application/(?:[^/]+\+)?json$")


@register_codec("json")
class JsonCodec(BodyCodec):
    mime_type = "application/json"
    priority = 20

    def encode(self, value: Any, request: Request) -> str:
        return json.dumps(value, **(request.json_opts or {}))

    def decode(self, data: bytes, charset: str, request: Request) -> Any:
        return json.loads(data.decode(charset))

    def matches(self, mime: str) -> bool:
        return bool(_JSON_MIME.match(mime))


@register_codec("edn")
class EdnCodec(BodyCodec):
    mime_type = "application/edn"
    priority = 30

    def encode(self, value: Any, request: Request) -> str:
        return edn_format.dumps(value)

    def decode(self, data: bytes, charset: str, request: Request) -> Any:
        return edn_format.loads(data.decode(charset))


@register_codec("x-www-form-urlencoded")
class FormCodec(BodyCodec):
    mime_type = "application/x-www-form-urlencoded"
    priority = 40

    def encode(self, value: Any, request: Request) -> str:
        return generate_query_string(value, request.multi_param_style, request.body_encoding)

    def decode(self, data: bytes, charset: str, request: Request) -> Any:
        return form_decode(data.decode(charset), charset)
