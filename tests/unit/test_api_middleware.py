"""Unit tests for herald.api.middleware.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_middleware.py

"""

from __future__ import annotations

from http import HTTPStatus

import falcon
import falcon.asgi
import falcon.testing
import pytest

from herald.api.middleware import (
    PayloadSizeLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from herald.relay.metrics import MetricsCollector
from tests.helpers.femtologging_capture import WARNING_LEVELS, capture_femto_logs


class _EchoResource:
    """Resource that answers GET and POST with the body length."""

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Answer with an empty JSON object."""
        resp.media = {}
        resp.status = HTTPStatus.OK

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Echo the number of bytes received."""
        body = await req.stream.read()
        resp.media = {"received": len(body)}
        resp.status = HTTPStatus.OK


class _UnauthorizedResource:
    """Resource that always rejects the caller."""

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Raise 401 to trigger security logging."""
        raise falcon.HTTPUnauthorized(title="Unauthorized")


@pytest.fixture
def metrics() -> MetricsCollector:
    """Return a fresh metrics collector."""
    return MetricsCollector()


@pytest.fixture
def client(metrics: MetricsCollector) -> falcon.testing.TestClient:
    """Build a test client with the standard middleware stack."""
    app = falcon.asgi.App(  # type: ignore[no-matching-overload]  # Falcon stubs
        middleware=[
            RequestLoggingMiddleware(),
            SecurityHeadersMiddleware(),
            PayloadSizeLimitMiddleware(max_bytes=1024, metrics=metrics),
        ]
    )
    app.add_route("/linear-webhook", _EchoResource())
    app.add_route("/health", _EchoResource())
    app.add_route("/other", _EchoResource())
    app.add_route("/private", _UnauthorizedResource())
    return falcon.testing.TestClient(app)


class TestSecurityHeadersMiddleware:
    """Tests for SecurityHeadersMiddleware."""

    def test_every_response_gets_defensive_headers(
        self, client: falcon.testing.TestClient
    ) -> None:
        """Content sniffing and framing are disabled everywhere."""
        result = client.simulate_get("/other")
        assert result.headers["X-Content-Type-Options"] == "nosniff", (
            "nosniff header expected"
        )
        assert result.headers["X-Frame-Options"] == "DENY", "DENY header expected"
        assert "Cache-Control" not in result.headers, (
            "ordinary routes should stay cacheable"
        )

    @pytest.mark.parametrize("path", ["/health", "/linear-webhook"])
    def test_operational_routes_are_uncacheable(
        self, client: falcon.testing.TestClient, path: str
    ) -> None:
        """Webhook and health responses are marked no-store."""
        result = client.simulate_get(path)
        assert result.headers["Cache-Control"].startswith("no-store"), (
            f"{path} should be uncacheable"
        )


class TestPayloadSizeLimitMiddleware:
    """Tests for PayloadSizeLimitMiddleware."""

    def test_small_body_passes(self, client: falcon.testing.TestClient) -> None:
        """Bodies within the ceiling reach the resource."""
        result = client.simulate_post("/linear-webhook", body=b"x" * 1024)
        assert result.status == falcon.HTTP_200, "expected HTTP 200"
        assert result.json == {"received": 1024}, "body should reach the resource"

    def test_oversized_body_is_413(
        self, client: falcon.testing.TestClient, metrics: MetricsCollector
    ) -> None:
        """A declared length above the ceiling is rejected and counted."""
        result = client.simulate_post("/linear-webhook", body=b"x" * 1025)
        assert result.status == falcon.HTTP_413, "expected HTTP 413"
        assert metrics.snapshot()["security"]["oversized_request"] == 1, (
            "oversized request should be counted"
        )


class TestRequestLoggingMiddleware:
    """Tests for RequestLoggingMiddleware."""

    def test_logs_method_path_and_status(
        self, client: falcon.testing.TestClient
    ) -> None:
        """Every request is logged at INFO with its status."""
        with capture_femto_logs("herald.api.middleware") as capture:
            client.simulate_get("/other")
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "INFO", "requests should log at INFO"
        assert record.message.startswith("GET /other 200 "), "unexpected log line"

    def test_security_statuses_are_warned(
        self, client: falcon.testing.TestClient
    ) -> None:
        """Rejected callers are also logged at WARNING."""
        with capture_femto_logs("herald.api.middleware") as capture:
            client.simulate_get("/private")
            capture.wait_for_count(2)

        warnings = [r for r in capture.records if r.level in WARNING_LEVELS]
        assert len(warnings) == 1, "expected one security warning"
        assert "answered 401" in warnings[0].message, "status should be logged"
