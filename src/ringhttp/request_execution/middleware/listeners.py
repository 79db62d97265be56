# Middleware components that observe but do not change the request
import logging
import time

from ringhttp.request_execution.models import Request, Response
from ringhttp.request_execution.middleware.pipeline import (
    NEXT_CALL,
    Middleware,
    MiddlewareFactory,
    MiddlewareType,
)


def describe(request: Request) -> str:
    if request.url:
        return request.url
    port = f":{request.server_port}" if request.server_port else ""
    query = f"?{request.query_string}" if request.query_string else ""
    return f"{request.scheme}://{request.server_name}{port}{request.uri}{query}"


@MiddlewareFactory.register(MiddlewareType.LOGGING)
class LoggingMiddleware(Middleware):
    """
    Log the request on the way in and the status (or failure) on the way out.
    Not part of the default pipeline; add it with with_additional_middleware
    or through the middleware section of a client config.
    """

    def __init__(self, level: int = logging.DEBUG) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)
        self._level = level

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        target = describe(request)
        self._logger.log(self._level, f"-> {request.method_name} {target}")
        try:
            result = await next_call(request)
        except Exception as exc:
            self._logger.log(self._level, f"<- FAILED {target}: {type(exc).__name__}: {exc}")
            raise

        if result is None:
            self._logger.log(self._level, f"<- no response {target}")
        else:
            self._logger.log(self._level, f"<- {result.status} {target}")
        return result


@MiddlewareFactory.register(MiddlewareType.REQUEST_TIMING)
class RequestTimingMiddleware(Middleware):
    """
    Measure the elapsed time for the downstream pipeline and store it in
    milliseconds as response.request_time.
    """

    async def __call__(self, request: Request, next_call: NEXT_CALL) -> Response | None:
        start = time.monotonic()
        result = await next_call(request)
        if result is None:
            return result
        duration = time.monotonic() - start
        return result.evolve(request_time=duration * 1000.0)
