import logging
import ssl
from contextvars import ContextVar
from types import TracebackType
from typing import Any
from typing_extensions import Self

from aiohttp import ClientSession, TCPConnector
from pydantic import ValidationError

from ringhttp.config.models.transport import PoolConfig, TlsConfig
from ringhttp.core.coroutine import TransportLoop
from ringhttp.core.exceptions import ConfigurationError


def build_ssl_context(cfg: TlsConfig) -> ssl.SSLContext:
    context = ssl.create_default_context(purpose=ssl.Purpose.SERVER_AUTH)

    if not cfg.verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    if cfg.ca_bundle:
        context.load_verify_locations(cafile=str(cfg.ca_bundle))

    if cfg.client_cert:
        context.load_cert_chain(
            certfile=str(cfg.client_cert),
            keyfile=str(cfg.client_key) if cfg.client_key else None,
        )

    return context


class ConnectionManager:
    """
    An externally owned pool of keep-alive connections: an aiohttp
    TCPConnector and the ClientSession bound to it, both living on the
    process-wide transport loop. Requests carrying the handle in
    connection_manager are routed through its session. The creator shuts the
    pool down with shutdown_manager().
    """

    def __init__(
        self,
        keepalive_timeout: float = 5.0,
        insecure: bool = False,
        limit: int = 100,
        limit_per_host: int = 0,
        ttl_dns_cache: int | None = 10,
        tls: TlsConfig | None = None,
    ) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)
        self.keepalive_timeout = keepalive_timeout
        self.insecure = insecure
        self.limit = limit
        self.limit_per_host = limit_per_host
        self.ttl_dns_cache = ttl_dns_cache
        self.tls = tls

        self._connector: TCPConnector | None = None
        self._session: ClientSession | None = None

    def _ssl_argument(self) -> ssl.SSLContext | bool:
        if self.insecure:
            return False
        if self.tls and self.tls.enabled:
            return build_ssl_context(self.tls)
        return True

    def open(self) -> None:
        """Create the connector and session. Must run on the transport loop thread."""
        if self._session is not None:
            return
        self._connector = TCPConnector(
            limit=self.limit,
            limit_per_host=self.limit_per_host,
            ttl_dns_cache=self.ttl_dns_cache,
            keepalive_timeout=self.keepalive_timeout,
            ssl=self._ssl_argument(),
        )
        self._session = ClientSession(connector=self._connector, auto_decompress=False)
        self._logger.debug(f"Opened pool (limit={self.limit}, keepalive={self.keepalive_timeout}s)")

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
        self._connector = None
        self._logger.debug("Pool shut down")

    @property
    def session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            raise ConfigurationError(f"{self.__class__.__name__} has been shut down")
        return self._session

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        shutdown_manager(self)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{self.__class__.__name__} {state} limit={self.limit}>"


# Pool handle installed by with_connection_pool / with_async_connection_pool
default_pool: ContextVar[ConnectionManager | None] = ContextVar("ringhttp_default_pool", default=None)


def make_reusable_conn_manager(**config: Any) -> ConnectionManager:
    """
    Create a reusable pool. Accepts the PoolConfig options: timeout, insecure,
    limit, limit_per_host, ttl_dns_cache and tls.
    """
    try:
        cfg = PoolConfig.model_validate(config)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid connection pool options: {exc}") from exc
    manager = ConnectionManager(**cfg.to_runtime_args())
    TransportLoop().call(manager.open)
    return manager


def make_reusable_async_conn_manager(**config: Any) -> ConnectionManager:
    """
    Create a reusable pool for async requests. A pool handle serves sync and
    async requests alike; same options as make_reusable_conn_manager.
    """
    return make_reusable_conn_manager(**config)


def shutdown_manager(manager: ConnectionManager | None) -> None:
    """
    Close every connection of the pool. Called from the transport loop thread
    (e.g. inside a callback) the close is scheduled instead of awaited.
    """
    if manager is None:
        return
    loop_thread = TransportLoop()
    if loop_thread.in_loop_thread():
        loop_thread.loop.create_task(manager.close())
        return
    loop_thread.run(manager.close())
