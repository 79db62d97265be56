"""Unit tests for RequestExecutor sync and async delivery"""
import asyncio
import logging
import threading

import pytest

from ringhttp.core.exceptions import (
    ConfigurationError,
    MissingHostError,
    TransportError,
    UnexceptionalStatusError,
)
from ringhttp.request_execution.executor import (
    ASYNC_CAPTURE_MESSAGE,
    CUSTOM_CAPTURE_MESSAGE,
    RequestExecutor,
)
from ringhttp.request_execution.middleware import with_additional_middleware, with_middleware
from ringhttp.request_execution.models import Request
from ringhttp.request_execution.transport.pool import default_pool
from tests.fixtures.request_execution import FakeTransportEngine


URL = "http://example.com/items"


class Outcome:
    """Collects async callback invocations and lets the test wait for the first one."""

    def __init__(self):
        self.successes = []
        self.failures = []
        self.done = threading.Event()

    def on_success(self, response):
        self.successes.append(response)
        self.done.set()

    def on_failure(self, error):
        self.failures.append(error)
        self.done.set()

    def wait(self):
        assert self.done.wait(timeout=5), "no callback fired"


def barrier(transport_loop):
    """Return once every callback already queued on the loop has run."""
    transport_loop.run(asyncio.sleep(0))


@pytest.fixture
def executor(fake_transport, transport_loop):
    return RequestExecutor(transport=fake_transport, loop_thread=transport_loop)


@pytest.mark.unit
class TestSyncRequests:

    def test_returns_coerced_response(self, transport_loop):
        """
        GIVEN a transport answering with a text body
        WHEN a sync request is made
        THEN the decoded response is returned
        """
        transport = FakeTransportEngine(headers={"Content-Type": "text/plain"}, body=b"hello")
        executor = RequestExecutor(transport=transport, loop_thread=transport_loop)

        response = executor.request({"url": URL})

        assert response.status == 200
        assert response.body == "hello"
        assert response.request_time is not None

    def test_terminal_sees_fully_prepared_request(self, executor, fake_transport):
        executor.request({"url": URL, "method": "post", "query_params": {"a": 1}, "form_params": {"b": 2}})

        sent = fake_transport.last_request
        assert sent.method_name == "POST"
        assert sent.server_name == "example.com"
        assert sent.query_string == "a=1"
        assert sent.body == b"b=2"
        assert sent.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert sent.headers["Accept-Encoding"] == "gzip, deflate"

    def test_charset_declared_in_html_decodes_body(self, transport_loop):
        """
        GIVEN an HTML body whose charset is only declared in a meta tag
        WHEN a request with decode_body_headers is made
        THEN the body is decoded with the declared charset
        """
        html = (
            '<html><head><meta http-equiv="Content-Type" content="text/html; charset=Shift_JIS"></head>'
            "<body>こんにちは</body></html>"
        )
        transport = FakeTransportEngine(headers={"Content-Type": "text/html"}, body=html.encode("shift_jis"))
        executor = RequestExecutor(transport=transport, loop_thread=transport_loop)

        response = executor.request({"url": URL, "decode_body_headers": True})

        assert response.body == html
        assert response.headers["Content-Type"] == "text/html; charset=Shift_JIS"

    def test_status_error_raised(self, transport_loop):
        executor = RequestExecutor(transport=FakeTransportEngine(status=404), loop_thread=transport_loop)

        with pytest.raises(UnexceptionalStatusError) as exc_info:
            executor.request({"url": URL})

        assert exc_info.value.status == 404

    def test_transport_error_raised(self, transport_loop):
        executor = RequestExecutor(
            transport=FakeTransportEngine(error=TransportError("connection refused")),
            loop_thread=transport_loop,
        )

        with pytest.raises(TransportError, match="connection refused"):
            executor.request(url=URL)

    def test_defaults_merge_under_options(self, fake_transport, transport_loop):
        executor = RequestExecutor(
            transport=fake_transport,
            defaults={"as": "json", "accept": "json"},
            loop_thread=transport_loop,
        )

        request = executor.build_request({"url": URL}, as_="text")

        assert request.as_ == "text"
        assert request.accept == "json"

    def test_defaults_apply_to_request_instances(self, fake_transport, transport_loop):
        """
        GIVEN an executor with default options and a default pool
        WHEN it is handed a Request instance rather than an options mapping
        THEN the defaults fill every field the Request left at its default
        """
        pool = object()
        executor = RequestExecutor(
            transport=fake_transport,
            defaults={
                "oauth_token": "tok",
                "throw_exceptions": False,
                "connection_manager": pool,
                "headers": {"X-Client": "ringhttp", "X-Trace": "default"},
            },
            loop_thread=transport_loop,
        )

        request = executor.build_request(Request(url=URL, headers={"X-Trace": "mine"}))

        assert request.oauth_token == "tok"
        assert request.throw_exceptions is False
        assert request.connection_manager is pool
        assert request.headers["X-Client"] == "ringhttp"
        assert request.headers.getall("X-Trace") == ["mine"]

    def test_request_instance_values_win_over_defaults(self, fake_transport, transport_loop):
        pool, explicit = object(), object()
        executor = RequestExecutor(
            transport=fake_transport,
            defaults={"oauth_token": "tok", "connection_manager": pool},
            loop_thread=transport_loop,
        )

        request = executor.build_request(Request(url=URL, oauth_token="other", connection_manager=explicit))

        assert request.oauth_token == "other"
        assert request.connection_manager is explicit

    def test_sync_call_from_loop_thread_refused(self, executor, transport_loop):
        async def call_from_loop():
            return executor.request({"url": URL})

        with pytest.raises(ConfigurationError, match="transport loop thread"):
            transport_loop.run(call_from_loop())


@pytest.mark.unit
class TestRequestValidation:

    def test_missing_host_checked_first(self, executor, fake_transport):
        """
        GIVEN a request without a host and with other invalid options
        WHEN it is executed
        THEN MissingHostError wins and nothing is sent
        """
        with pytest.raises(MissingHostError, match="Host URL cannot be None"):
            executor.request({"capture_socket": True, "async": True})

        assert fake_transport.requests == []

    def test_async_needs_both_callbacks(self, executor):
        with pytest.raises(ConfigurationError, match="both on_success and on_failure"):
            executor.request({"url": URL, "async": True})

        with pytest.raises(ConfigurationError):
            executor.request({"url": URL}, on_success=print)

    def test_capture_socket_refused_for_async(self, executor):
        outcome = Outcome()

        with pytest.raises(ConfigurationError) as exc_info:
            executor.request({"url": URL, "capture_socket": True}, outcome.on_success, outcome.on_failure)

        assert str(exc_info.value) == ASYNC_CAPTURE_MESSAGE

    @pytest.mark.parametrize("option", [{"insecure": True}, {"connection_manager": object()}])
    def test_capture_socket_refused_for_custom_pools(self, executor, option):
        with pytest.raises(ConfigurationError) as exc_info:
            executor.request({"url": URL, "capture_socket": True, **option})

        assert str(exc_info.value) == CUSTOM_CAPTURE_MESSAGE

    def test_capture_socket_refused_inside_default_pool(self, executor):
        token = default_pool.set(object())
        try:
            with pytest.raises(ConfigurationError, match="custom or insecure"):
                executor.request({"url": URL, "capture_socket": True})
        finally:
            default_pool.reset(token)


@pytest.mark.unit
class TestAsyncRequests:

    def test_success_delivered_once(self, executor):
        outcome = Outcome()

        result = executor.request({"url": URL}, outcome.on_success, outcome.on_failure)
        outcome.wait()

        assert result is None
        assert len(outcome.successes) == 1
        assert outcome.successes[0].status == 200
        assert outcome.failures == []

    def test_async_flag_alone_is_not_enough(self, executor):
        with pytest.raises(ConfigurationError):
            executor.request(url=URL, async_=True)

    def test_post_dispatch_failure_goes_to_on_failure(self, transport_loop):
        """
        GIVEN a transport that fails after dispatch began
        WHEN an async request is made
        THEN the call returns None and on_failure receives the error
        """
        executor = RequestExecutor(
            transport=FakeTransportEngine(error=TransportError("reset")), loop_thread=transport_loop
        )
        outcome = Outcome()

        assert executor.request({"url": URL}, outcome.on_success, outcome.on_failure) is None
        outcome.wait()

        assert outcome.successes == []
        assert isinstance(outcome.failures[0], TransportError)

    def test_status_error_goes_to_on_failure(self, transport_loop):
        executor = RequestExecutor(transport=FakeTransportEngine(status=503), loop_thread=transport_loop)
        outcome = Outcome()

        executor.request({"url": URL}, outcome.on_success, outcome.on_failure)
        outcome.wait()

        assert isinstance(outcome.failures[0], UnexceptionalStatusError)

    def test_pre_dispatch_failure_raised_in_caller(self, executor, fake_transport, transport_loop):
        """
        GIVEN options rejected by middleware before the terminal is reached
        WHEN an async request is made
        THEN the error is raised to the caller and no callback fires
        """
        outcome = Outcome()

        with pytest.raises(ConfigurationError, match="unknown response coercion"):
            executor.request({"url": URL, "as": "yaml"}, outcome.on_success, outcome.on_failure)

        barrier(transport_loop)
        assert not outcome.done.is_set()
        assert fake_transport.requests == []

    def test_callback_errors_are_logged(self, executor, transport_loop, caplog):
        def exploding(response):
            raise ValueError("callback bug")

        with caplog.at_level(logging.ERROR, logger="RequestExecutor"):
            executor.request({"url": URL}, exploding, lambda error: None)
            barrier(transport_loop)
            barrier(transport_loop)

        assert "Uncaught error in exploding" in caplog.text

    def test_async_from_loop_thread(self, executor, transport_loop):
        outcome = Outcome()

        async def call_from_loop():
            return executor.request({"url": URL}, outcome.on_success, outcome.on_failure)

        assert transport_loop.run(call_from_loop()) is None
        outcome.wait()

        assert outcome.successes[0].status == 200

    def test_pre_dispatch_failure_from_loop_thread(self, executor, transport_loop):
        outcome = Outcome()

        async def call_from_loop():
            return executor.request({"url": URL, "as": "yaml"}, outcome.on_success, outcome.on_failure)

        with pytest.raises(ConfigurationError):
            transport_loop.run(call_from_loop())

        barrier(transport_loop)
        assert not outcome.done.is_set()


@pytest.mark.unit
class TestPipelineResolution:

    def test_default_pool_applied(self, executor, fake_transport):
        pool = object()
        token = default_pool.set(pool)
        try:
            response = executor.request({"url": URL})
        finally:
            default_pool.reset(token)

        assert fake_transport.last_request.connection_manager is pool
        assert response.connection_manager is pool

    def test_explicit_pool_wins(self, executor, fake_transport):
        explicit = object()
        token = default_pool.set(object())
        try:
            executor.request({"url": URL, "connection_manager": explicit})
        finally:
            default_pool.reset(token)

        assert fake_transport.last_request.connection_manager is explicit

    def test_base_middleware_replaces_defaults(self, fake_transport, transport_loop):
        calls = []

        async def record(request, next_call):
            calls.append(request.url)
            return await next_call(request)

        executor = RequestExecutor(transport=fake_transport, middleware=[record], loop_thread=transport_loop)
        response = executor.request({"url": URL})

        assert calls == [URL]
        # nothing decoded the body without the default pipeline
        assert response.body.read() == b""

    def test_scoped_middleware_is_read_in_calling_thread(self, executor):
        calls = []

        async def record(request, next_call):
            calls.append("scoped")
            return await next_call(request)

        with with_additional_middleware([record]):
            executor.request({"url": URL})
        executor.request({"url": URL})

        assert calls == ["scoped"]

    def test_request_middleware_wins_over_scope(self, executor):
        calls = []

        async def scoped(request, next_call):
            calls.append("scoped")
            return await next_call(request)

        async def per_request(request, next_call):
            calls.append("request")
            return await next_call(request)

        with with_middleware([scoped]):
            executor.request({"url": URL, "middleware": [per_request]})

        assert calls == ["request"]
