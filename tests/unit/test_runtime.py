"""Unit tests for the herald.runtime module."""

from __future__ import annotations

from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from herald.api.config import ApiConfig, Environment
from herald.common.env import EnvConfigError
from herald.runtime import _parse_port, build_dependencies, create_app
from tests.helpers.discord_sink import WEBHOOK_URL
from tests.helpers.femtologging_capture import WARNING_LEVELS, capture_femto_logs


@pytest.fixture
def client() -> falcon.testing.TestClient:
    """Create a test client for the Herald runtime app."""
    return falcon.testing.TestClient(create_app())


class TestParsePort:
    """Tests for HERALD_PORT validation."""

    @pytest.mark.parametrize(("raw", "expected"), [("1", 1), ("3000", 3000)])
    def test_valid_ports(self, raw: str, expected: int) -> None:
        """Integers within the TCP range are accepted."""
        assert _parse_port(raw) == expected, "port should round-trip"

    @pytest.mark.parametrize("raw", ["0", "65536", "http", ""])
    def test_invalid_ports_exit(self, raw: str) -> None:
        """Anything else stops the process with status 1."""
        with pytest.raises(SystemExit) as excinfo:
            _parse_port(raw)
        assert excinfo.value.code == 1, "expected exit status 1"


class TestHealthOnlyMode:
    """Tests for the runtime without a Discord webhook."""

    def test_create_app_returns_falcon_app(self) -> None:
        """create_app returns a Falcon ASGI App instance."""
        assert isinstance(create_app(), falcon.asgi.App), "expected Falcon app"

    def test_health_returns_json(self, client: falcon.testing.TestClient) -> None:
        """GET /health answers with JSON."""
        result = client.simulate_get("/health")
        assert result.status_code == HTTPStatus.OK, "expected HTTP 200"
        content_type = result.headers.get("content-type", "")
        assert content_type.startswith("application/json"), "expected JSON"

    def test_webhook_not_routed(self, client: falcon.testing.TestClient) -> None:
        """POST /linear-webhook is unavailable until Discord is configured."""
        result = client.simulate_post("/linear-webhook")
        assert result.status_code == HTTPStatus.NOT_FOUND, "expected HTTP 404"

    def test_missing_webhook_is_logged(self) -> None:
        """Starting without a Discord webhook is announced."""
        with capture_femto_logs("herald.runtime") as capture:
            create_app()
            capture.wait_for_count(2)

        messages = [r.message for r in capture.records if r.level in WARNING_LEVELS]
        assert any("health-only mode" in m for m in messages), (
            "health-only warning expected"
        )


class TestRelayMode:
    """Tests for the runtime with a Discord webhook configured."""

    def test_webhook_routed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The webhook endpoint exists once a Discord webhook is set."""
        monkeypatch.setenv("HERALD_DISCORD_WEBHOOK_URL", WEBHOOK_URL)
        client = falcon.testing.TestClient(create_app())
        result = client.simulate_get("/linear-webhook")
        assert result.status_code == HTTPStatus.METHOD_NOT_ALLOWED, (
            "expected HTTP 405"
        )

    def test_configuration_warnings_are_logged(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Risky settings are reported at startup."""
        monkeypatch.setenv("HERALD_DISCORD_WEBHOOK_URL", WEBHOOK_URL)
        monkeypatch.setenv("HERALD_VERIFY_SIGNATURES", "false")
        with capture_femto_logs("herald.runtime") as capture:
            create_app()
            capture.wait_for_count(1)

        assert any(
            "Webhook signature verification is disabled" in r.message
            for r in capture.records
        ), "configuration warning expected"

    def test_production_rejects_insecure_webhook(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Production refuses a plain-HTTP Discord webhook."""
        monkeypatch.setenv("HERALD_DISCORD_WEBHOOK_URL", "http://discord.test/hook")
        with pytest.raises(EnvConfigError, match="HERALD_DISCORD_WEBHOOK_URL"):
            build_dependencies(ApiConfig(environment=Environment.PRODUCTION))

    def test_dependencies_follow_configuration(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Delivery settings come from the environment; limiting follows config."""
        monkeypatch.setenv("HERALD_DISCORD_WEBHOOK_URL", WEBHOOK_URL)
        deps = build_dependencies(ApiConfig(rate_limiting=False))
        assert deps.relay_service is not None, "relay service expected"
        assert deps.delivery_config is not None, "delivery config expected"
        assert deps.delivery_config.webhook_url == WEBHOOK_URL, "URL from env"
        assert deps.ingress_limiter is None, "limiting disabled"
