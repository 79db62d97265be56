from ringhttp.config.loader import ConfigLoader
from ringhttp.config.models import (
    ClientConfig,
    LoggingMiddlewareModel,
    MiddlewareConfigModel,
    MiddlewareConfigUnion,
    PoolConfig,
    RequestDefaultsModel,
    SimpleMiddlewareModel,
    TlsConfig,
    TransportEngineModel,
)

__all__ = [
    "ConfigLoader",
    "ClientConfig",
    "LoggingMiddlewareModel",
    "MiddlewareConfigModel",
    "MiddlewareConfigUnion",
    "PoolConfig",
    "RequestDefaultsModel",
    "SimpleMiddlewareModel",
    "TlsConfig",
    "TransportEngineModel",
]
