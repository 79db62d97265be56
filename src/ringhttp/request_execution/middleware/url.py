from ringhttp.request_execution.models import Request, RequestType, Response
from ringhttp.request_execution.middleware.pipeline import (
    NEXT_CALL,
    Middleware,
    MiddlewareFactory,
    MiddlewareType,
)
from ringhttp.utils.url import parse_url


@MiddlewareFactory.register(MiddlewareType.URL)
class UrlMiddleware(Middleware):
    """
    Parse request.url into scheme, server_name, server_port, uri, query_string
    and user_info. Requests addressed through the individual fields pass
    through untouched.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if not request.url:
            return await next_call(request)

        parsed = parse_url(request.url)
        changes = {
            "scheme": parsed.scheme,
            "server_name": parsed.server_name,
            "server_port": parsed.server_port,
            "uri": parsed.uri,
            "query_string": parsed.query_string,
        }
        if parsed.user_info and request.user_info is None:
            changes["user_info"] = parsed.user_info
        return await next_call(request.evolve(**changes))


@MiddlewareFactory.register(MiddlewareType.USER_INFO)
class UserInfoMiddleware(Middleware):
    """Credentials embedded in the URL become basic auth unless basic_auth is already set."""

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if request.user_info and request.basic_auth is None:
            request = request.evolve(basic_auth=request.user_info)
        return await next_call(request)


@MiddlewareFactory.register(MiddlewareType.METHOD)
class MethodMiddleware(Middleware):
    """Normalize the method to an upper-case verb; unknown verbs are kept as strings."""

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        name = request.method_name.upper()
        method = RequestType(name) if name in RequestType.__members__ else name
        if method != request.method:
            request = request.evolve(method=method)
        return await next_call(request)
