# Content negotiation - these middleware only translate format tags into headers
from ringhttp.coercion.base import resolve_mime
from ringhttp.request_execution.models import Request, Response
from ringhttp.request_execution.middleware.pipeline import (
    NEXT_CALL,
    Middleware,
    MiddlewareFactory,
    MiddlewareType,
)


@MiddlewareFactory.register(MiddlewareType.ACCEPT)
class AcceptMiddleware(Middleware):
    """Set the Accept header when request.accept names a format."""

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if request.accept:
            request = request.with_headers({"Accept": resolve_mime(request.accept)})
        return await next_call(request)


@MiddlewareFactory.register(MiddlewareType.ACCEPT_ENCODING)
class AcceptEncodingMiddleware(Middleware):
    """Join request.accept_encoding into the Accept-Encoding header."""

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if request.accept_encoding:
            encodings = (
                [request.accept_encoding]
                if isinstance(request.accept_encoding, str)
                else list(request.accept_encoding)
            )
            request = request.with_headers({"Accept-Encoding": ", ".join(encodings)})
        return await next_call(request)


@MiddlewareFactory.register(MiddlewareType.CONTENT_TYPE)
class ContentTypeMiddleware(Middleware):
    """
    Set Content-Type from request.content_type. A format tag is mapped to its
    MIME type and character_encoding, when given, is appended as the charset.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if not request.content_type:
            return await next_call(request)

        content_type = resolve_mime(request.content_type)
        if request.character_encoding:
            content_type = f"{content_type}; charset={request.character_encoding}"
        return await next_call(request.with_headers({"Content-Type": content_type}))
