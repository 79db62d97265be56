"""Unit tests for SSL/TLS context configuration"""
import ssl
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ringhttp.config.models.transport import TlsConfig
from ringhttp.request_execution.transport.pool import ConnectionManager, build_ssl_context
from tests.fixtures.request_execution.transport import tls_config_disabled


@pytest.mark.unit
@pytest.mark.transport
class TestSSLContextCreation:
    """Tests for SSL context building"""

    @patch("ringhttp.request_execution.transport.pool.ssl.create_default_context")
    def test_build_ssl_context_creates_default_context(self, mock_create):
        """
        GIVEN TLS config with verify enabled
        WHEN build_ssl_context is called
        THEN it should create default SSL context
        """
        mock_ctx = MagicMock(spec=ssl.SSLContext)
        mock_create.return_value = mock_ctx

        ctx = build_ssl_context(TlsConfig(enabled=True, verify=True))

        mock_create.assert_called_once_with(purpose=ssl.Purpose.SERVER_AUTH)
        assert ctx is mock_ctx

    def test_build_ssl_context_with_verify_disabled(self):
        """
        GIVEN TLS config with verify=False
        WHEN build_ssl_context is called
        THEN it should disable verification
        """
        ctx = build_ssl_context(TlsConfig(enabled=True, verify=False))

        assert ctx.verify_mode == ssl.CERT_NONE
        assert ctx.check_hostname is False

    def test_build_ssl_context_with_verify_enabled(self):
        ctx = build_ssl_context(TlsConfig(enabled=True))

        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.check_hostname is True

    @patch("ringhttp.request_execution.transport.pool.ssl.create_default_context")
    def test_loads_custom_ca_bundle_and_client_cert(self, mock_create):
        """
        GIVEN TLS config with a CA bundle and a client certificate
        WHEN build_ssl_context is called
        THEN both are loaded into the context
        """
        mock_ctx = MagicMock(spec=ssl.SSLContext)
        mock_create.return_value = mock_ctx
        tls = TlsConfig(
            enabled=True,
            ca_bundle=Path("/path/to/ca-bundle.crt"),
            client_cert=Path("/path/to/client.crt"),
            client_key=Path("/path/to/client.key"),
        )

        build_ssl_context(tls)

        mock_ctx.load_verify_locations.assert_called_once_with(cafile="/path/to/ca-bundle.crt")
        mock_ctx.load_cert_chain.assert_called_once_with(
            certfile="/path/to/client.crt",
            keyfile="/path/to/client.key",
        )


@pytest.mark.unit
@pytest.mark.transport
class TestPoolSslArgument:
    """Tests for the ssl argument a pool hands to its connector"""

    def test_default_verifies(self):
        assert ConnectionManager()._ssl_argument() is True

    def test_insecure_disables_verification(self):
        assert ConnectionManager(insecure=True, tls=TlsConfig(enabled=True))._ssl_argument() is False

    def test_disabled_tls_config_ignored(self):
        assert ConnectionManager(tls=tls_config_disabled())._ssl_argument() is True

    def test_enabled_tls_config_builds_context(self):
        assert isinstance(ConnectionManager(tls=TlsConfig(enabled=True))._ssl_argument(), ssl.SSLContext)
