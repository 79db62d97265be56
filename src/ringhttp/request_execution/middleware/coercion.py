import logging
from pathlib import Path
from typing import Any

import aiohttp

# builtin and transit register their codecs on import
import ringhttp.coercion.builtin  # noqa: F401
import ringhttp.coercion.transit  # noqa: F401
from ringhttp.coercion.base import CodecFactory, detect_codec
from ringhttp.core.exceptions import ConfigurationError, DecodeError
from ringhttp.request_execution.models import MultipartPart, Request, Response
from ringhttp.request_execution.middleware.pipeline import (
    NEXT_CALL,
    Middleware,
    MiddlewareFactory,
    MiddlewareType,
)
from ringhttp.request_execution.status import is_unexceptional_status
from ringhttp.utils.common import detect_charset, force_bytes, is_stream


TEXT = "text"
AUTO = "auto"
STREAM = "stream"
BYTE_ARRAY = "byte-array"
COERCE_MODES = frozenset({"unexceptional", "always", "exceptional"})


def multipart_form(parts: tuple[MultipartPart, ...], encoding: str) -> aiohttp.FormData:
    """Lay out multipart parts as aiohttp FormData."""
    form = aiohttp.FormData(charset=encoding, default_to_multipart=True)
    for part in parts:
        content: Any = part.content
        filename = part.filename
        if isinstance(content, Path):
            filename = filename or content.name
            content = content.read_bytes()
        form.add_field(part.name, content, filename=filename, content_type=part.mime_type)
    return form


@MiddlewareFactory.register(MiddlewareType.INPUT_COERCION)
class InputCoercionMiddleware(Middleware):
    """
    Turn the outgoing body into something the transport can send: text is
    encoded with body_encoding and multipart parts become FormData (which
    sets its own boundary Content-Type). Bytes and streams pass through.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if request.multipart:
            form = multipart_form(request.multipart, request.body_encoding)
            request = request.without_headers("Content-Type").evolve(body=form)
        elif isinstance(request.body, str):
            request = request.evolve(body=request.body.encode(request.body_encoding))
        return await next_call(request)


@MiddlewareFactory.register(MiddlewareType.OUTPUT_COERCION)
class OutputCoercionMiddleware(Middleware):
    """
    Decode the response body according to request.as_:

        None / "text"      text in the charset of the Content-Type
        "auto"             codec picked from the Content-Type, else text
        "stream"           the transport stream, untouched
        "byte-array"       bytes
        any codec key      that codec ("json", "edn", "transit+json", ...)

    Codec decoding only applies to the statuses selected by request.coerce;
    other responses are decoded as text.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        as_ = request.as_ or TEXT
        if as_ not in (TEXT, AUTO, STREAM, BYTE_ARRAY) and not CodecFactory.is_registered(as_):
            raise ConfigurationError(f"unknown response coercion: {as_!r}")
        if request.coerce not in COERCE_MODES:
            raise ConfigurationError(f"unknown coerce mode: {request.coerce!r}")

        response = await next_call(request)
        if response is None or response.body is None:
            return response
        return response.evolve(body=self._coerce(as_, request, response))

    def _coerce(self, as_: str, request: Request, response: Response) -> Any:
        body = response.body
        if as_ == STREAM:
            return body
        if as_ == BYTE_ARRAY:
            return body.read() if is_stream(body) else body

        data = force_bytes(body)
        content_type = response.headers.get("Content-Type")
        charset = detect_charset(content_type)

        key = detect_codec(content_type) if as_ == AUTO else as_
        if key == TEXT or key is None or not self._codec_applies(request.coerce, response):
            return self._decode_text(data, charset)

        self._logger.debug(f"Decoding {len(data)} byte body with codec {key!r}")
        try:
            return CodecFactory.create(key).decode(data, charset, request)
        except Exception as exc:
            raise DecodeError(f"could not decode response body as {key}: {exc}", body=data) from exc

    @staticmethod
    def _codec_applies(mode: str, response: Response) -> bool:
        unexceptional = is_unexceptional_status(response)
        if mode == "always":
            return True
        if mode == "exceptional":
            return not unexceptional
        return unexceptional

    @staticmethod
    def _decode_text(data: bytes, charset: str) -> str:
        try:
            return data.decode(charset)
        except (UnicodeDecodeError, LookupError) as exc:
            raise DecodeError(f"could not decode response body as {charset} text: {exc}", body=data) from exc
