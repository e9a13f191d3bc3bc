"""Unit tests for wiring the webhook from settings."""

from unittest.mock import MagicMock, patch

import pytest

from config_version_webhook import app
from config_version_webhook.errors import ConfigurationError
from config_version_webhook.settings import Settings


@pytest.fixture
def settings_factory(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    def factory(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return Settings()

    return factory


@patch("config_version_webhook.app.get_kubernetes_client", return_value=MagicMock())
def test_build_webhook_server_plain_http(mock_client, settings_factory):
    settings = settings_factory(
        WEBHOOK_TLS_ENABLED="false",
        WEBHOOK_PORT="9000",
        WEBHOOK_PATH="/admit",
        CONFLICT_RETRIES="5",
    )

    server = app.build_webhook_server(settings)

    assert server.ssl_context is None
    assert server.port == 9000
    assert server.path == "/admit"
    (route,) = [r for r in server.app.router.routes() if r.method == "POST"]
    assert route.resource.canonical == "/admit"
    webhook = route.handler.__self__
    assert webhook.mutation_service.tracker.conflict_retries == 5


@patch("config_version_webhook.app.get_kubernetes_client", return_value=MagicMock())
def test_build_webhook_server_missing_certs(mock_client, settings_factory, tmp_path):
    settings = settings_factory(WEBHOOK_CERT_DIR=str(tmp_path / "certs"))

    with pytest.raises(ConfigurationError, match="tls.crt"):
        app.build_webhook_server(settings)


def test_main_exits_on_configuration_error():
    with (
        patch("config_version_webhook.app.configure_logging"),
        patch(
            "config_version_webhook.app.serve",
            side_effect=ConfigurationError("no cluster"),
        ),
        pytest.raises(SystemExit) as exc_info,
    ):
        app.main()

    assert exc_info.value.code == 1
