import base64

from ringhttp.request_execution.models import Request, Response
from ringhttp.request_execution.middleware.pipeline import (
    NEXT_CALL,
    Middleware,
    MiddlewareFactory,
    MiddlewareType,
)


# Standard middleware - these middleware objects only add request headers

@MiddlewareFactory.register(MiddlewareType.OAUTH)
class BearerTokenMiddleware(Middleware):
    """
    Inject request.oauth_token into the Authorization header.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if request.oauth_token:
            request = request.with_headers({"Authorization": f"Bearer {request.oauth_token}"})
        return await next_call(request)


@MiddlewareFactory.register(MiddlewareType.BASIC_AUTH)
class BasicAuthMiddleware(Middleware):
    """
    Inject request.basic_auth, either a (username, password) pair or a
    "username:password" string, as a Basic Authorization header.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        if not request.basic_auth:
            return await next_call(request)

        if isinstance(request.basic_auth, str):
            raw_credentials = request.basic_auth
        else:
            username, password = request.basic_auth
            raw_credentials = f"{username}:{password}"
        b64_credentials = base64.b64encode(raw_credentials.encode("utf-8")).decode("utf-8")

        return await next_call(
            request.with_headers({"Authorization": f"Basic {b64_credentials}"})
        )
