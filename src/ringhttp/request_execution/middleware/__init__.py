from ringhttp.request_execution.middleware.pipeline import (
    MIDDLEWARE_FUNC,
    NEXT_CALL,
    Middleware,
    MiddlewareFactory,
    MiddlewarePipeline,
    MiddlewareType,
    compose,
)
from ringhttp.request_execution.middleware.defaults import (
    DEFAULT_MIDDLEWARE,
    DEFAULT_ORDER,
    build_middleware,
    current_middleware,
    resolve_middleware,
    with_additional_middleware,
    with_middleware,
)
from ringhttp.request_execution.middleware.coercion import (
    InputCoercionMiddleware,
    OutputCoercionMiddleware,
)
from ringhttp.request_execution.middleware.common import (
    BasicAuthMiddleware,
    BearerTokenMiddleware,
)
from ringhttp.request_execution.middleware.interceptors import (
    BodyHeadersMiddleware,
    DecompressionMiddleware,
    ExceptionsMiddleware,
    UnknownHostMiddleware,
)
from ringhttp.request_execution.middleware.listeners import (
    LoggingMiddleware,
    RequestTimingMiddleware,
)
from ringhttp.request_execution.middleware.negotiation import (
    AcceptEncodingMiddleware,
    AcceptMiddleware,
    ContentTypeMiddleware,
)
from ringhttp.request_execution.middleware.params import (
    FlattenNestedParamsMiddleware,
    FormParamsMiddleware,
    QueryParamsMiddleware,
)
from ringhttp.request_execution.middleware.url import (
    MethodMiddleware,
    UrlMiddleware,
    UserInfoMiddleware,
)

__all__ = [
    "MIDDLEWARE_FUNC",
    "NEXT_CALL",
    "Middleware",
    "MiddlewareFactory",
    "MiddlewarePipeline",
    "MiddlewareType",
    "compose",
    "DEFAULT_MIDDLEWARE",
    "DEFAULT_ORDER",
    "build_middleware",
    "current_middleware",
    "resolve_middleware",
    "with_additional_middleware",
    "with_middleware",
    "InputCoercionMiddleware",
    "OutputCoercionMiddleware",
    "BasicAuthMiddleware",
    "BearerTokenMiddleware",
    "BodyHeadersMiddleware",
    "DecompressionMiddleware",
    "ExceptionsMiddleware",
    "UnknownHostMiddleware",
    "LoggingMiddleware",
    "RequestTimingMiddleware",
    "AcceptEncodingMiddleware",
    "AcceptMiddleware",
    "ContentTypeMiddleware",
    "FlattenNestedParamsMiddleware",
    "FormParamsMiddleware",
    "QueryParamsMiddleware",
    "MethodMiddleware",
    "UrlMiddleware",
    "UserInfoMiddleware",
]
