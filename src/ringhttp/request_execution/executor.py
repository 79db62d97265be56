import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Callable, Sequence

from ringhttp.core.coroutine import EventLoopThread, TransportLoop
from ringhttp.core.exceptions import ConfigurationError, MissingHostError
from ringhttp.request_execution.middleware.defaults import resolve_middleware
from ringhttp.request_execution.middleware.pipeline import (
    MIDDLEWARE_FUNC,
    NEXT_CALL,
    MiddlewarePipeline,
)
from ringhttp.request_execution.models import Request, Response
from ringhttp.request_execution.transport.base import TransportEngine
from ringhttp.request_execution.transport.engine import AiohttpEngine
from ringhttp.request_execution.transport.pool import default_pool


ON_SUCCESS = Callable[[Response | None], Any]
ON_FAILURE = Callable[[BaseException], Any]

ASYNC_CAPTURE_MESSAGE = "capturing socket traffic does not currently work with async requests"
CUSTOM_CAPTURE_MESSAGE = "capturing sockets cannot be used with custom or insecure connection manager"


class _Dispatch:
    """Set by the terminal just before network I/O begins."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.started = False

    def signal(self) -> None:
        self.started = True
        self._event.set()

    def release(self) -> None:
        self._event.set()

    def wait(self) -> None:
        self._event.wait()


class RequestExecutor:
    """
    RequestExecutor is the gateway between callers and the transport layer. It
    is responsible for the following:
    • Resolves the middleware pipeline for each call (request override, scoped
      override or its own base pipeline) and the default connection pool.
    • Rejects contradictory options before anything reaches the network.
    • Runs the composed pipeline on the transport loop, either blocking for
      the result (sync) or delivering it to exactly one of on_success /
      on_failure (async).

    Failures raised before the terminal begins network I/O propagate to the
    caller in both modes; after that point async failures only reach
    on_failure.
    """

    def __init__(
        self,
        transport: TransportEngine | None = None,
        middleware: Sequence[MIDDLEWARE_FUNC] | None = None,
        defaults: dict[str, Any] | None = None,
        loop_thread: EventLoopThread | None = None,
    ) -> None:
        self.transport = transport or AiohttpEngine()
        self._middleware = tuple(middleware) if middleware is not None else None
        self._defaults = dict(defaults or {})
        self._loop_thread = loop_thread or TransportLoop()
        self._logger = logging.getLogger(self.__class__.__name__)

    def build_request(self, req: Request | dict[str, Any] | None = None, **options: Any) -> Request:
        """Merge executor defaults, the request and keyword options into one Request."""
        if isinstance(req, Request):
            base = req.with_defaults(self._defaults)
        else:
            base = Request.from_options({**self._defaults, **(req or {})})
        return Request.from_options(base, **options) if options else base

    def request(
        self,
        req: Request | dict[str, Any] | None = None,
        on_success: ON_SUCCESS | None = None,
        on_failure: ON_FAILURE | None = None,
        **options: Any,
    ) -> Response | None:
        """
        Execute a request. Without callbacks the response is returned (or an
        error raised); with callbacks None is returned and the outcome is
        delivered to exactly one of them, exactly once.
        """
        request = self.build_request(req, **options)
        is_async = request.async_ or on_success is not None or on_failure is not None
        request = self._prepare(request, is_async, on_success, on_failure)
        pipeline = MiddlewarePipeline(resolve_middleware(request, self._middleware))

        if not is_async:
            if self._loop_thread.in_loop_thread():
                raise ConfigurationError(
                    "synchronous requests cannot be made from the transport loop thread; "
                    "pass on_success/on_failure instead"
                )
            return self._loop_thread.run(pipeline.execute(request, self._terminal(None)))

        assert on_success is not None and on_failure is not None
        self._dispatch_async(pipeline, request, on_success, on_failure)
        return None

    def _prepare(
        self,
        request: Request,
        is_async: bool,
        on_success: ON_SUCCESS | None,
        on_failure: ON_FAILURE | None,
    ) -> Request:
        if not request.host_url:
            raise MissingHostError()
        if is_async and (on_success is None or on_failure is None):
            raise ConfigurationError("async requests need both on_success and on_failure")

        if request.connection_manager is None:
            pool = default_pool.get()
            if pool is not None:
                request = request.evolve(connection_manager=pool)

        if request.capture_socket:
            if is_async:
                raise ConfigurationError(ASYNC_CAPTURE_MESSAGE)
            if request.connection_manager is not None or request.insecure:
                raise ConfigurationError(CUSTOM_CAPTURE_MESSAGE)
        return request

    def _terminal(self, dispatch: _Dispatch | None) -> NEXT_CALL:
        transport = self.transport

        async def terminal(request: Request) -> Response | None:
            if dispatch is not None:
                dispatch.signal()
            return await transport.send(request)

        return terminal

    def _dispatch_async(
        self,
        pipeline: MiddlewarePipeline,
        request: Request,
        on_success: ON_SUCCESS,
        on_failure: ON_FAILURE,
    ) -> None:
        dispatch = _Dispatch()
        coroutine = pipeline.execute(request, self._terminal(dispatch))

        future: asyncio.Future[Any] | concurrent.futures.Future[Any]
        if self._loop_thread.in_loop_thread():
            # An eager task runs up to its first real suspension right here,
            # so failures before the terminal are visible immediately.
            future = asyncio.Task(coroutine, loop=self._loop_thread.loop, eager_start=True)
        else:
            future = self._loop_thread.submit(coroutine)
            future.add_done_callback(lambda _: dispatch.release())
            dispatch.wait()

        if future.done() and not dispatch.started:
            # never reached the network: fail in the caller
            future.result()

        deliver = self._deliver(on_success, on_failure)
        if isinstance(future, concurrent.futures.Future):
            # callbacks always run on the transport loop, even if the
            # response arrived before the callback was attached
            loop = self._loop_thread.loop
            future.add_done_callback(lambda done: loop.call_soon_threadsafe(deliver, done))
        else:
            future.add_done_callback(deliver)

    def _deliver(self, on_success: ON_SUCCESS, on_failure: ON_FAILURE) -> Callable[[Any], None]:
        logger = self._logger

        def deliver(future: Any) -> None:
            try:
                response = future.result()
            except (Exception, asyncio.CancelledError) as exc:
                callback, value = on_failure, exc
            else:
                callback, value = on_success, response
            try:
                callback(value)
            except Exception:
                logger.exception(f"Uncaught error in {getattr(callback, '__name__', 'callback')}")

        return deliver
