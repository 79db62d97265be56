# Wrap the downstream call and inspect/modify the response or the raised error
import gzip
import io
import logging
import zlib

from bs4 import BeautifulSoup

from ringhttp.core.exceptions import DecodeError, UnexceptionalStatusError, UnknownHostError
from ringhttp.request_execution.models import Request, Response
from ringhttp.request_execution.middleware.pipeline import (
    NEXT_CALL,
    Middleware,
    MiddlewareFactory,
    MiddlewareType,
)
from ringhttp.request_execution.status import is_unexceptional_status
from ringhttp.utils.common import force_bytes


SUPPORTED_ENCODINGS = "gzip, deflate"


def inflate(data: bytes) -> bytes:
    """Inflate a deflate body, zlib-wrapped or raw."""
    try:
        return zlib.decompress(data)
    except zlib.error:
        return zlib.decompress(data, -zlib.MAX_WBITS)


_DECODERS = {
    "gzip": gzip.decompress,
    "deflate": inflate,
}


@MiddlewareFactory.register(MiddlewareType.DECOMPRESSION)
class DecompressionMiddleware(Middleware):
    """
    Offer gzip and deflate in Accept-Encoding and inflate matching responses.
    Content-Encoding is matched exactly and case-sensitively; anything else
    passes through untouched. A decompressed response loses its
    Content-Encoding header, which is kept as orig_content_encoding.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if request.decompress_body is False:
            return await next_call(request)

        offered = request.headers.get("Accept-Encoding")
        accept_encoding = f"{offered}, {SUPPORTED_ENCODINGS}" if offered else SUPPORTED_ENCODINGS
        response = await next_call(request.with_headers({"Accept-Encoding": accept_encoding}))

        if response is None:
            return response
        encoding = response.headers.get("Content-Encoding")
        decoder = _DECODERS.get(encoding) if encoding else None
        if decoder is None or response.body is None:
            return response

        data = force_bytes(response.body)
        try:
            body = decoder(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise DecodeError(f"could not inflate {encoding} response body: {exc}", body=data) from exc
        headers = response.headers.copy()
        headers.popall("Content-Encoding")
        return response.evolve(
            body=io.BytesIO(body),
            headers=headers,
            orig_content_encoding=encoding,
        )


@MiddlewareFactory.register(MiddlewareType.EXCEPTIONS)
class ExceptionsMiddleware(Middleware):
    """
    Raise UnexceptionalStatusError for responses outside [200, 400) unless
    request.throw_exceptions is False.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        response = await next_call(request)
        if request.throw_exceptions is False or response is None:
            return response
        if not is_unexceptional_status(response):
            raise UnexceptionalStatusError(response, entire_message=request.throw_entire_message)
        return response


@MiddlewareFactory.register(MiddlewareType.UNKNOWN_HOST)
class UnknownHostMiddleware(Middleware):
    """With request.ignore_unknown_host, an unresolvable host yields None instead of an error."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        try:
            return await next_call(request)
        except UnknownHostError as exc:
            if not request.ignore_unknown_host:
                raise
            self._logger.info(f"Ignoring unknown host {exc.host}")
            return None


def headers_from_html(data: bytes) -> dict[str, str]:
    """
    Collect the headers an HTML document declares in its head: every
    <meta http-equiv=... content=...> and the HTML5 <meta charset=...>, which
    becomes a text/html Content-Type.
    """
    soup = BeautifulSoup(data, "html.parser")
    headers: dict[str, str] = {}
    for meta in (soup.head or soup).find_all("meta"):
        http_equiv = meta.get("http-equiv")
        content = meta.get("content")
        if http_equiv and content is not None:
            headers[http_equiv.lower()] = content
        elif meta.get("charset"):
            headers["content-type"] = f"text/html; charset={meta['charset']}"
    return headers


@MiddlewareFactory.register(MiddlewareType.DECODE_BODY_HEADERS)
class BodyHeadersMiddleware(Middleware):
    """
    With request.decode_body_headers, merge the headers declared by meta tags
    of an HTML body into the response headers, the declared values winning.
    Responses without a body, or whose Content-Type is set and is not
    text/html, pass through untouched.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        response = await next_call(request)
        if not request.decode_body_headers or response is None or response.body is None:
            return response
        content_type = response.headers.get("Content-Type")
        if content_type and not content_type.lower().startswith("text/html"):
            return response

        data = force_bytes(response.body)
        declared = headers_from_html(data)
        self._logger.debug(f"Body declared headers: {sorted(declared)}")
        headers = response.headers.copy()
        for name, value in declared.items():
            headers[name] = value
        return response.evolve(body=io.BytesIO(data), headers=headers)
