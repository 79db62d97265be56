from abc import ABC, abstractmethod
from typing import Any, Callable

from ringhttp.config.models.client import ClientConfig
from ringhttp.config.models.middleware import MiddlewareConfigModel
from ringhttp.config.models.transport import PoolConfig, TransportEngineModel
from ringhttp.request_execution.executor import RequestExecutor
from ringhttp.request_execution.middleware.pipeline import (
    MiddlewareFactory,
    MiddlewareType,
    MIDDLEWARE_FUNC,
)
from ringhttp.request_execution.transport.base import (
    TransportEngine,
    TransportEngineFactory,
    TransportEngineType,
)
from ringhttp.request_execution.transport.pool import ConnectionManager, make_reusable_conn_manager


class RuntimeFactory(ABC):

    @staticmethod
    @abstractmethod
    def build_factory(cfg: Any, *args, **kwargs) -> Callable[[], Any]: ...


class TransportRuntimeFactory(RuntimeFactory):

    @staticmethod
    def build_factory(cfg: TransportEngineModel) -> Callable[[], TransportEngine]:

        def factory() -> TransportEngine:
            return TransportEngineFactory.create(TransportEngineType(cfg.type), **cfg.to_runtime_args())

        return factory


class MiddlewareRuntimeFactory(RuntimeFactory):

    @staticmethod
    def build_factory(cfg: MiddlewareConfigModel) -> Callable[[], MIDDLEWARE_FUNC]:

        def factory() -> MIDDLEWARE_FUNC:
            return MiddlewareFactory.create(MiddlewareType(cfg.type), **cfg.to_runtime_args())

        return factory

    @staticmethod
    def get_factories(mw_cfgs: list[MiddlewareConfigModel]) -> list[Callable[[], MIDDLEWARE_FUNC]]:

        return [MiddlewareRuntimeFactory.build_factory(cfg) for cfg in mw_cfgs]


class PoolRuntimeFactory(RuntimeFactory):

    @staticmethod
    def build_factory(cfg: PoolConfig) -> Callable[[], ConnectionManager]:

        def factory() -> ConnectionManager:
            return make_reusable_conn_manager(**dict(cfg))

        return factory


class ExecutorRuntimeFactory(RuntimeFactory):
    """
    Build a RequestExecutor from a ClientConfig. A configured pool is opened
    when the executor is built and travels with every request as its default
    connection_manager; the caller shuts it down with shutdown_manager().
    """

    @staticmethod
    def build_factory(cfg: ClientConfig) -> Callable[[], RequestExecutor]:

        def factory() -> RequestExecutor:
            defaults = cfg.defaults.to_runtime_args()
            if cfg.pool is not None:
                defaults["connection_manager"] = PoolRuntimeFactory.build_factory(cfg.pool)()

            middleware = None
            if cfg.middleware is not None:
                middleware = [build() for build in MiddlewareRuntimeFactory.get_factories(cfg.middleware)]

            return RequestExecutor(
                transport=TransportRuntimeFactory.build_factory(cfg.transport)(),
                middleware=middleware,
                defaults=defaults,
            )

        return factory
