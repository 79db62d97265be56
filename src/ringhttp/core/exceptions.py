from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ringhttp.request_execution.models import Response


class ErrorType(str, Enum):
    """Discriminator stored under ``error.data["type"]``."""
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    UNEXCEPTIONAL_STATUS = "unexceptional-status"
    DECODE = "decode"


class HttpClientError(Exception):
    """Base class for every error raised by ringhttp."""

    error_type: ErrorType

    def __init__(self, message: str, **data: Any) -> None:
        super().__init__(message)
        self.data: dict[str, Any] = {"type": self.error_type, **data}


class ConfigurationError(HttpClientError, ValueError):
    """Contradictory or missing request options. Always raised before any network activity."""
    error_type = ErrorType.CONFIGURATION


class MissingHostError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("Host URL cannot be None")


class TransportError(HttpClientError):
    """Connection level failure surfaced by the terminal transport."""
    error_type = ErrorType.TRANSPORT


class UnknownHostError(TransportError):
    def __init__(self, host: str | None) -> None:
        super().__init__(f"Unknown host: {host}", host=host)
        self.host = host


class RequestTimeoutError(TransportError):
    pass


class UnexceptionalStatusError(HttpClientError):
    """
    Raised by ExceptionsMiddleware for a well-formed response whose status lies
    outside [200, 400).
    """
    error_type = ErrorType.UNEXCEPTIONAL_STATUS

    def __init__(self, response: Response, entire_message: bool = False) -> None:
        if entire_message:
            message = f"request failed: {response!r}"
        else:
            message = f"request failed with status {response.status}"
        super().__init__(
            message,
            status=response.status,
            headers=response.headers,
            body=response.body,
        )
        self.response = response
        self.status = response.status


class DecodeError(HttpClientError):
    """The response body could not be decoded into the requested representation."""
    error_type = ErrorType.DECODE

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message, body=body)
        self.body = body
