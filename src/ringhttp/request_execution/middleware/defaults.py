"""
The default pipeline and its scoped overrides.

Overrides live in context variables, so nested with-blocks unwind in stack
order and concurrent threads or tasks never see each other's middleware.
Entries of a middleware list may be middleware objects, plain coroutine
functions ``async (request, next_call)`` or registered MiddlewareType names.
"""
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterable, Iterator, Sequence

# every middleware module registers itself with MiddlewareFactory on import
import ringhttp.request_execution.middleware.coercion  # noqa: F401
import ringhttp.request_execution.middleware.common  # noqa: F401
import ringhttp.request_execution.middleware.interceptors  # noqa: F401
import ringhttp.request_execution.middleware.listeners  # noqa: F401
import ringhttp.request_execution.middleware.negotiation  # noqa: F401
import ringhttp.request_execution.middleware.params  # noqa: F401
import ringhttp.request_execution.middleware.url  # noqa: F401
from ringhttp.core.exceptions import ConfigurationError
from ringhttp.request_execution.middleware.pipeline import (
    MIDDLEWARE_FUNC,
    MiddlewareFactory,
    MiddlewareType,
)
from ringhttp.request_execution.models import Request


# Outermost first. Decompression sits inside output coercion so decoders see
# inflated bytes, and body header parsing sits between them so the charset of
# an HTML meta tag reaches the text decoder. Exceptions sit outside output
# coercion so errors carry the decoded body.
DEFAULT_ORDER: tuple[MiddlewareType, ...] = (
    MiddlewareType.REQUEST_TIMING,
    MiddlewareType.UNKNOWN_HOST,
    MiddlewareType.URL,
    MiddlewareType.USER_INFO,
    MiddlewareType.BASIC_AUTH,
    MiddlewareType.OAUTH,
    MiddlewareType.FLATTEN_NESTED_PARAMS,
    MiddlewareType.QUERY_PARAMS,
    MiddlewareType.EXCEPTIONS,
    MiddlewareType.OUTPUT_COERCION,
    MiddlewareType.DECODE_BODY_HEADERS,
    MiddlewareType.ACCEPT,
    MiddlewareType.ACCEPT_ENCODING,
    MiddlewareType.DECOMPRESSION,
    MiddlewareType.FORM_PARAMS,
    MiddlewareType.CONTENT_TYPE,
    MiddlewareType.INPUT_COERCION,
    MiddlewareType.METHOD,
)


def as_middleware(item: MIDDLEWARE_FUNC | MiddlewareType | str) -> MIDDLEWARE_FUNC:
    """Instantiate registered middleware names; callables are returned as is."""
    if not isinstance(item, str):
        return item
    try:
        key = MiddlewareType(item)
    except ValueError:
        raise ConfigurationError(f"unknown middleware: {item!r}") from None
    return MiddlewareFactory.create(key)


def build_middleware(items: Iterable[MIDDLEWARE_FUNC | MiddlewareType | str]) -> tuple[MIDDLEWARE_FUNC, ...]:
    return tuple(as_middleware(item) for item in items)


DEFAULT_MIDDLEWARE: tuple[MIDDLEWARE_FUNC, ...] = build_middleware(DEFAULT_ORDER)

_override: ContextVar[tuple[MIDDLEWARE_FUNC, ...] | None] = ContextVar(
    "ringhttp_middleware", default=None
)
_additional: ContextVar[tuple[MIDDLEWARE_FUNC, ...]] = ContextVar(
    "ringhttp_additional_middleware", default=()
)


@contextmanager
def with_middleware(middleware: Sequence[MIDDLEWARE_FUNC | MiddlewareType | str]) -> Iterator[None]:
    """
    Replace the pipeline for requests issued inside the block. Additional
    middleware from enclosing blocks do not apply to the replacement.
    """
    override_token = _override.set(build_middleware(middleware))
    additional_token = _additional.set(())
    try:
        yield
    finally:
        _additional.reset(additional_token)
        _override.reset(override_token)


@contextmanager
def with_additional_middleware(
    middleware: Sequence[MIDDLEWARE_FUNC | MiddlewareType | str],
) -> Iterator[None]:
    """Prepend middleware to the active pipeline for requests issued inside the block."""
    token = _additional.set(build_middleware(middleware) + _additional.get())
    try:
        yield
    finally:
        _additional.reset(token)


def current_middleware(
    base: Sequence[MIDDLEWARE_FUNC] | None = None,
) -> tuple[MIDDLEWARE_FUNC, ...]:
    """The pipeline active in the calling context."""
    override = _override.get()
    if override is not None:
        pipeline = override
    elif base is not None:
        pipeline = tuple(base)
    else:
        pipeline = DEFAULT_MIDDLEWARE
    return _additional.get() + pipeline


def resolve_middleware(
    request: Request,
    base: Sequence[MIDDLEWARE_FUNC] | None = None,
) -> tuple[MIDDLEWARE_FUNC, ...]:
    """A pipeline carried by the request wins over the scoped and base pipelines."""
    if request.middleware is not None:
        return _additional.get() + build_middleware(request.middleware)
    return current_middleware(base)
