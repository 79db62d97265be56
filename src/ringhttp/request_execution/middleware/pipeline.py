from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable, Protocol, Sequence

from ringhttp.core.abstract_factory import TypeAbstractFactory
from ringhttp.request_execution.models import Request, Response


# A terminal handler or any downstream stage. None is a legitimate response
# when ignore_unknown_host swallowed a resolution failure.
NEXT_CALL = Callable[[Request], Awaitable[Response | None]]
MIDDLEWARE_FUNC = Callable[[Request, NEXT_CALL], Awaitable[Response | None]]


class MiddlewareType(str, Enum):
    REQUEST_TIMING = "request_timing"
    UNKNOWN_HOST = "unknown_host"
    URL = "url"
    USER_INFO = "user_info"
    BASIC_AUTH = "basic_auth"
    OAUTH = "oauth"
    FLATTEN_NESTED_PARAMS = "flatten_nested_params"
    QUERY_PARAMS = "query_params"
    EXCEPTIONS = "exceptions"
    OUTPUT_COERCION = "output_coercion"
    DECODE_BODY_HEADERS = "decode_body_headers"
    ACCEPT = "accept"
    ACCEPT_ENCODING = "accept_encoding"
    DECOMPRESSION = "decompression"
    FORM_PARAMS = "form_params"
    CONTENT_TYPE = "content_type"
    INPUT_COERCION = "input_coercion"
    METHOD = "method"
    LOGGING = "logging"


class Middleware(Protocol):
    """
    Middleware transforms a Request before it reaches the transport and the
    Response on its way back. Uses a chain pattern: each middleware receives
    the request and the "next" function in the chain. It can transform the
    request, then await next_call, then transform the response, or
    short-circuit by returning a Response without calling next_call.
    Failures are raised, never returned.
    """

    async def __call__(
        self,
        request: Request,
        next_call: NEXT_CALL
    ) -> Response | None:
        """
        Transform the request and pass it to the next middleware.
        Args:
            request: Current request description.
            next_call: Function to call next middleware in the chain.

        Returns:
            The (possibly transformed) response.
        """
        ...


class MiddlewareFactory(TypeAbstractFactory[MiddlewareType, Middleware]):
    """Registry for Middleware components"""
    ...


def compose(middleware: Sequence[MIDDLEWARE_FUNC], terminal: NEXT_CALL) -> NEXT_CALL:
    """
    Fold middleware around a terminal handler. The first element is outermost:
    compose([m1, m2], t) behaves as m1(m2(t)).
    """
    handler = terminal
    for mw in reversed(middleware):
        next_handler = handler

        async def _wrapped(
            request: Request, *, _mw: MIDDLEWARE_FUNC = mw, _n: NEXT_CALL = next_handler
        ) -> Response | None:
            return await _mw(request, _n)

        handler = _wrapped
    return handler


class MiddlewarePipeline:
    """
    This is an implementation of a middleware interceptor model pipeline. It is
    a hybrid of the wrapper and processing-stage models: the nested call
    structure of the wrapper model with the interceptor concept from the
    processing-stage model. The immutable Request/Response descriptions are the
    data passed between stages.
    """

    def __init__(self, middleware: Sequence[MIDDLEWARE_FUNC] = ()) -> None:
        self._middleware_list: tuple[MIDDLEWARE_FUNC, ...] = tuple(middleware)

    @property
    def middleware(self) -> tuple[MIDDLEWARE_FUNC, ...]:
        return self._middleware_list

    def compose(self, terminal_handler: NEXT_CALL) -> NEXT_CALL:
        return compose(self._middleware_list, terminal_handler)

    async def execute(
        self,
        initial: Request,
        terminal_handler: NEXT_CALL,
    ) -> Response | None:
        """
        Nests the middleware in the order defined in _middleware_list and runs
        the request through them.
        """
        return await self.compose(terminal_handler)(initial)
