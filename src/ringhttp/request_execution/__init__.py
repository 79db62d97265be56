from ringhttp.request_execution.executor import RequestExecutor
from ringhttp.request_execution.models import (
    MultipartPart,
    ProtocolVersion,
    Request,
    RequestType,
    Response,
)
from ringhttp.request_execution.status import (
    is_client_error,
    is_conflict,
    is_redirect,
    is_server_error,
    is_success,
    is_unexceptional_status,
)

__all__ = [
    "RequestExecutor",
    "MultipartPart",
    "ProtocolVersion",
    "Request",
    "RequestType",
    "Response",
    "is_client_error",
    "is_conflict",
    "is_redirect",
    "is_server_error",
    "is_success",
    "is_unexceptional_status",
]
