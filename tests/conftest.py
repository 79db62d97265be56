import pytest

from ringhttp.core.coroutine import TransportLoop
from tests.fixtures.configs.client import (
    pool_config,
    minimal_client_config,
    full_client_config,
)
from tests.fixtures.request_execution import FakeTransportEngine
from tests.fixtures.server import LocalServer


@pytest.fixture
def dummy_headers():
    return {
        "Content-Type": "application/json",
        "Authorization": "Bearer dummy-token"
    }


@pytest.fixture
def fake_transport():
    return FakeTransportEngine()


@pytest.fixture(scope="session")
def transport_loop():
    loop_thread = TransportLoop()
    loop_thread.start()
    return loop_thread


@pytest.fixture(scope="session")
def http_server():
    server = LocalServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def base_url(http_server):
    return http_server.base_url


__all__ = [
    'pool_config',
    'minimal_client_config',
    'full_client_config',
]
