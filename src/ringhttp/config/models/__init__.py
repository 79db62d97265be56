from ringhttp.config.models.client import ClientConfig, RequestDefaultsModel
from ringhttp.config.models.middleware import (
    LoggingMiddlewareModel,
    MiddlewareConfigModel,
    MiddlewareConfigUnion,
    SimpleMiddlewareModel,
)
from ringhttp.config.models.transport import PoolConfig, TlsConfig, TransportEngineModel

__all__ = [
    "ClientConfig",
    "RequestDefaultsModel",
    "LoggingMiddlewareModel",
    "MiddlewareConfigModel",
    "MiddlewareConfigUnion",
    "SimpleMiddlewareModel",
    "PoolConfig",
    "TlsConfig",
    "TransportEngineModel",
]
