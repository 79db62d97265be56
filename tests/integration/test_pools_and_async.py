"""Integration tests for reusable pools and callback delivery"""
import threading

import pytest

import ringhttp
from ringhttp import (
    ConfigurationError,
    UnexceptionalStatusError,
    UnknownHostError,
)
from tests.assertions import assert_status_error


class Outcome:
    def __init__(self):
        self.successes = []
        self.failures = []
        self.threads = []
        self.done = threading.Event()

    def on_success(self, response):
        self.successes.append(response)
        self.threads.append(threading.current_thread().name)
        self.done.set()

    def on_failure(self, error):
        self.failures.append(error)
        self.threads.append(threading.current_thread().name)
        self.done.set()

    def wait(self, timeout: float = 5):
        assert self.done.wait(timeout), "no callback fired"


@pytest.mark.integration
class TestConnectionPools:

    def test_with_connection_pool(self, base_url):
        """
        GIVEN a with_connection_pool block
        WHEN requests are issued inside it
        THEN they travel through the pool and keep their connection alive
        """
        with ringhttp.with_connection_pool(timeout=2, limit=4) as manager:
            first = ringhttp.get(f"{base_url}/connection", as_="json")
            second = ringhttp.get(f"{base_url}/connection", as_="json")
            third = ringhttp.get(f"{base_url}/get")

        assert first.connection_manager is manager
        assert second.connection_manager is manager
        assert first.body == {"connection": None}
        assert second.body == {"connection": None}
        assert third.body == "get"
        assert manager.closed

    def test_explicit_pool_never_closes_connection(self, base_url):
        manager = ringhttp.make_reusable_conn_manager()
        try:
            responses = [
                ringhttp.get(f"{base_url}/connection", connection_manager=manager, as_="json") for _ in range(2)
            ]
        finally:
            ringhttp.shutdown_manager(manager)

        assert [r.body for r in responses] == [{"connection": None}] * 2

    def test_pool_released_after_error(self, base_url):
        with pytest.raises(UnexceptionalStatusError):
            with ringhttp.with_connection_pool() as manager:
                ringhttp.get(f"{base_url}/status/500")

        assert manager.closed

    def test_explicit_pool_handle(self, base_url):
        manager = ringhttp.make_reusable_conn_manager(timeout=1)
        try:
            response = ringhttp.get(f"{base_url}/get", connection_manager=manager)
            again = ringhttp.request(ringhttp.reuse_pool({"url": f"{base_url}/get"}, response))
        finally:
            ringhttp.shutdown_manager(manager)

        assert response.connection_manager is manager
        assert again.connection_manager is manager

    def test_reuse_pool_without_pool_is_noop(self, base_url):
        response = ringhttp.get(f"{base_url}/get")

        assert ringhttp.reuse_pool({"url": "x"}, response) == {"url": "x"}
        assert ringhttp.reuse_pool({"url": "x"}, None) == {"url": "x"}

    def test_shut_down_pool_rejected(self, base_url):
        manager = ringhttp.make_reusable_conn_manager()
        ringhttp.shutdown_manager(manager)

        with pytest.raises(ConfigurationError, match="shut down"):
            ringhttp.get(f"{base_url}/get", connection_manager=manager)

    def test_capture_socket_refused_in_pool(self, base_url):
        with ringhttp.with_connection_pool():
            with pytest.raises(ConfigurationError, match="custom or insecure"):
                ringhttp.get(f"{base_url}/get", capture_socket=True)


@pytest.mark.integration
class TestAsyncRequests:

    def test_success_callback(self, base_url):
        outcome = Outcome()

        assert ringhttp.get(f"{base_url}/json", outcome.on_success, outcome.on_failure, as_="json") is None
        outcome.wait()

        assert outcome.successes[0].body == {"foo": "bar", "items": [1, 2, 3]}
        assert outcome.failures == []
        assert outcome.threads == ["transport-loop-thread"]

    def test_status_error_callback(self, base_url):
        outcome = Outcome()

        ringhttp.get(f"{base_url}/status/500", outcome.on_success, outcome.on_failure)
        outcome.wait()

        assert_status_error(outcome.failures[0], 500)
        assert outcome.successes == []

    def test_unknown_host_callback(self):
        outcome = Outcome()

        ringhttp.get("http://does-not-exist.invalid/", outcome.on_success, outcome.on_failure)
        outcome.wait()

        assert isinstance(outcome.failures[0], UnknownHostError)

    def test_ignored_unknown_host_delivers_none(self):
        outcome = Outcome()

        ringhttp.get(
            "http://does-not-exist.invalid/", outcome.on_success, outcome.on_failure, ignore_unknown_host=True
        )
        outcome.wait()

        assert outcome.successes == [None]

    def test_async_pool(self, base_url):
        with ringhttp.with_async_connection_pool(limit=2) as manager:
            outcomes = [Outcome() for _ in range(3)]
            for outcome in outcomes:
                ringhttp.get(f"{base_url}/get", outcome.on_success, outcome.on_failure)
            for outcome in outcomes:
                outcome.wait()
            blocking = ringhttp.get(f"{base_url}/get")

        assert manager.closed
        assert blocking.connection_manager is manager
        assert all(o.successes[0].connection_manager is manager for o in outcomes)

    def test_chained_request_from_callback(self, base_url):
        """
        GIVEN a success callback that issues a follow-up async request
        WHEN the first response arrives on the transport loop
        THEN the follow-up is dispatched from the loop thread and delivered too
        """
        follow_up = Outcome()

        def on_first(response):
            ringhttp.get(f"{base_url}/json", follow_up.on_success, follow_up.on_failure, as_="json")

        first = Outcome()
        ringhttp.get(f"{base_url}/get", on_first, first.on_failure)
        follow_up.wait()

        assert follow_up.successes[0].body["foo"] == "bar"
        assert first.failures == []

    def test_sync_request_from_callback_fails(self, base_url):
        errors = []
        finished = threading.Event()

        def on_first(response):
            try:
                ringhttp.get(f"{base_url}/get")
            except ConfigurationError as exc:
                errors.append(exc)
            finally:
                finished.set()

        ringhttp.get(f"{base_url}/get", on_first, lambda error: finished.set())

        assert finished.wait(5)
        assert len(errors) == 1
