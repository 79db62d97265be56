import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Callable, Coroutine, TypeVar

from ringhttp.core.singleton import SingletonMeta


T = TypeVar('T')


class EventLoopThread:
    """
    Utility for hosting a long-lived asyncio event loop in its own dedicated
    thread.

    Synchronous call sites cannot await, yet aiohttp sessions and connectors are
    bound to the loop that created them. EventLoopThread owns that loop and
    takes care of:

      • Creating a dedicated daemon thread.
      • Creating and configuring an asyncio event loop in that thread.
      • Keeping the loop alive via `run_forever()` until stop() is requested.
      • Accepting coroutines from any thread through submit()/run().

    Typical usage:
      • loop_thread = EventLoopThread("transport")
      • future = loop_thread.submit(coro)       # concurrent.futures.Future
      • result = loop_thread.run(coro)          # blocks the calling thread
      • loop_thread.stop()
    """

    def __init__(self, name: str = "ringhttp") -> None:
        self._name = name
        self._logger = logging.getLogger(f"{self.__class__.__name__}[{name}]")

        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready_event = threading.Event()
        self._start_lock = threading.Lock()

    def start(self) -> None:
        """
        Start an idempotent background event loop thread.
        """
        with self._start_lock:
            if self._thread is not None and self._thread.is_alive():
                return

            self._ready_event.clear()
            self._thread = threading.Thread(
                target=self._run_event_loop,
                name=f"{self._name}-loop-thread",
                daemon=True
            )
            self._thread.start()

            # Wait for initialization
            if not self._ready_event.wait(timeout=10):
                raise TimeoutError(f"{self._name} event loop failed to start within 10 seconds")

        self._logger.debug("Event loop thread started")

    def _run_event_loop(self) -> None:
        """
        The thread target: create an asyncio event loop and keep it alive until
        stop() is called.
        """
        loop = asyncio.new_event_loop()
        self._loop = loop
        asyncio.set_event_loop(loop)
        try:
            loop.call_soon(self._ready_event.set)
            loop.run_forever()

            # Give pending tasks a chance to finish after the loop stops
            pending = asyncio.all_tasks(loop)
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        finally:
            loop.close()
            self._loop = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or not self.is_running:
            self.start()
        assert self._loop is not None
        return self._loop

    def in_loop_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    def submit(self, coroutine: Coroutine[Any, Any, T]) -> "concurrent.futures.Future[T]":
        """Schedule a coroutine on the loop from any other thread."""
        return asyncio.run_coroutine_threadsafe(coroutine, self.loop)

    def run(self, coroutine: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine on the loop and block the calling thread for its result."""
        if self.in_loop_thread():
            coroutine.close()
            raise RuntimeError(f"{self._name}: blocking on the loop thread would deadlock")
        return self.submit(coroutine).result()

    def call(self, fn: Callable[..., T], *args: Any) -> T:
        """
        Run a plain callable on the loop thread, for objects such as aiohttp
        connectors that must be created while their loop is running.
        """
        if self.in_loop_thread():
            return fn(*args)

        async def _invoke() -> T:
            return fn(*args)

        return self.submit(_invoke()).result()

    def stop(self) -> None:
        """Stop the loop and join the thread."""
        if self._loop is None:
            self._logger.warning("Not running")
            return

        self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread and not self.in_loop_thread():
            self._thread.join(timeout=5)
            if self._thread.is_alive():
                self._logger.warning("Thread did not stop gracefully")
            else:
                self._logger.debug("Stopped")

    @property
    def is_running(self) -> bool:
        """Check if the loop thread is running."""
        return self._thread is not None and self._thread.is_alive()


class TransportLoop(EventLoopThread, metaclass=SingletonMeta):
    """The process-wide loop every aiohttp session and pool handle lives on."""

    def __init__(self) -> None:
        super().__init__("transport")
