"""
ringhttp: a declarative HTTP client built on a composable middleware
pipeline and an aiohttp transport.
"""
from ringhttp.client import (
    DefaultClient,
    delete,
    get,
    head,
    options,
    patch,
    post,
    put,
    request,
    reuse_pool,
    with_async_connection_pool,
    with_connection_pool,
)
from ringhttp.coercion.base import BodyCodec, register_codec
from ringhttp.config.loader import ConfigLoader
from ringhttp.core.exceptions import (
    ConfigurationError,
    DecodeError,
    ErrorType,
    HttpClientError,
    MissingHostError,
    RequestTimeoutError,
    TransportError,
    UnexceptionalStatusError,
    UnknownHostError,
)
from ringhttp.core.logging import configure_logging, set_transport_logging_level
from ringhttp.request_execution.executor import RequestExecutor
from ringhttp.request_execution.middleware.defaults import (
    DEFAULT_MIDDLEWARE,
    with_additional_middleware,
    with_middleware,
)
from ringhttp.request_execution.models import MultipartPart, Request, RequestType, Response
from ringhttp.request_execution.status import (
    is_client_error,
    is_conflict,
    is_redirect,
    is_server_error,
    is_success,
    is_unexceptional_status,
)
from ringhttp.request_execution.transport.pool import (
    ConnectionManager,
    make_reusable_async_conn_manager,
    make_reusable_conn_manager,
    shutdown_manager,
)
from ringhttp.utils.common import detect_charset
from ringhttp.utils.url import parse_url, unparse_url

__all__ = [
    "DefaultClient",
    "delete",
    "get",
    "head",
    "options",
    "patch",
    "post",
    "put",
    "request",
    "reuse_pool",
    "with_async_connection_pool",
    "with_connection_pool",
    "BodyCodec",
    "register_codec",
    "ConfigLoader",
    "ConfigurationError",
    "DecodeError",
    "ErrorType",
    "HttpClientError",
    "MissingHostError",
    "RequestTimeoutError",
    "TransportError",
    "UnexceptionalStatusError",
    "UnknownHostError",
    "configure_logging",
    "set_transport_logging_level",
    "RequestExecutor",
    "DEFAULT_MIDDLEWARE",
    "with_additional_middleware",
    "with_middleware",
    "MultipartPart",
    "Request",
    "RequestType",
    "Response",
    "is_client_error",
    "is_conflict",
    "is_redirect",
    "is_server_error",
    "is_success",
    "is_unexceptional_status",
    "ConnectionManager",
    "make_reusable_async_conn_manager",
    "make_reusable_conn_manager",
    "shutdown_manager",
    "detect_charset",
    "parse_url",
    "unparse_url",
]
