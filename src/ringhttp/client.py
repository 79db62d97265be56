"""
Public request functions.

    import ringhttp

    response = ringhttp.get("http://example.com/api", as_="json")
    ringhttp.post(url, form_params={"q": "x"}, on_success=print, on_failure=log)

Every function accepts the Request options as keyword arguments. Passing
on_success and on_failure switches to async delivery: the call returns None
and exactly one callback fires once the response (or error) is available.
"""
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from ringhttp.core.singleton import SingletonMeta
from ringhttp.request_execution.executor import ON_FAILURE, ON_SUCCESS, RequestExecutor
from ringhttp.request_execution.models import Request, RequestType, Response
from ringhttp.request_execution.transport.pool import (
    ConnectionManager,
    default_pool,
    make_reusable_async_conn_manager,
    make_reusable_conn_manager,
    shutdown_manager,
)


class DefaultClient(RequestExecutor, metaclass=SingletonMeta):
    """The executor behind the module-level request functions."""


def request(
    req: Request | Mapping[str, Any] | None = None,
    on_success: ON_SUCCESS | None = None,
    on_failure: ON_FAILURE | None = None,
    **options: Any,
) -> Response | None:
    """Execute a request described by ``req`` and/or keyword options."""
    return DefaultClient().request(
        dict(req) if isinstance(req, Mapping) else req, on_success, on_failure, **options
    )


def _verb_request(
    method: RequestType,
    url: str,
    on_success: ON_SUCCESS | None,
    on_failure: ON_FAILURE | None,
    options: dict[str, Any],
) -> Response | None:
    return request({"method": method, "url": url, **options}, on_success, on_failure)


def get(url: str, on_success: ON_SUCCESS | None = None, on_failure: ON_FAILURE | None = None,
        **options: Any) -> Response | None:
    return _verb_request(RequestType.GET, url, on_success, on_failure, options)


def head(url: str, on_success: ON_SUCCESS | None = None, on_failure: ON_FAILURE | None = None,
         **options: Any) -> Response | None:
    return _verb_request(RequestType.HEAD, url, on_success, on_failure, options)


def post(url: str, on_success: ON_SUCCESS | None = None, on_failure: ON_FAILURE | None = None,
         **options: Any) -> Response | None:
    return _verb_request(RequestType.POST, url, on_success, on_failure, options)


def put(url: str, on_success: ON_SUCCESS | None = None, on_failure: ON_FAILURE | None = None,
        **options: Any) -> Response | None:
    return _verb_request(RequestType.PUT, url, on_success, on_failure, options)


def patch(url: str, on_success: ON_SUCCESS | None = None, on_failure: ON_FAILURE | None = None,
          **options: Any) -> Response | None:
    return _verb_request(RequestType.PATCH, url, on_success, on_failure, options)


def delete(url: str, on_success: ON_SUCCESS | None = None, on_failure: ON_FAILURE | None = None,
           **options: Any) -> Response | None:
    return _verb_request(RequestType.DELETE, url, on_success, on_failure, options)


def options(url: str, on_success: ON_SUCCESS | None = None, on_failure: ON_FAILURE | None = None,
            **opts: Any) -> Response | None:
    return _verb_request(RequestType.OPTIONS, url, on_success, on_failure, opts)


@contextmanager
def with_connection_pool(**config: Any) -> Iterator[ConnectionManager]:
    """
    Route every request issued inside the block through one reusable pool.
    The pool is shut down when the block exits, normally or not.
    """
    manager = make_reusable_conn_manager(**config)
    token = default_pool.set(manager)
    try:
        yield manager
    finally:
        default_pool.reset(token)
        shutdown_manager(manager)


@contextmanager
def with_async_connection_pool(**config: Any) -> Iterator[ConnectionManager]:
    """Like with_connection_pool; the pool serves callback requests as well."""
    manager = make_reusable_async_conn_manager(**config)
    token = default_pool.set(manager)
    try:
        yield manager
    finally:
        default_pool.reset(token)
        shutdown_manager(manager)


def reuse_pool(
    req: Request | Mapping[str, Any],
    response: Response | None,
) -> Request | dict[str, Any]:
    """Point ``req`` at the pool an earlier response was received through."""
    manager = response.connection_manager if response is not None else None
    if isinstance(req, Request):
        return req.evolve(connection_manager=manager) if manager is not None else req
    if manager is None:
        return dict(req)
    return {**req, "connection_manager": manager}
