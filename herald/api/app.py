"""Application factory for the Herald Falcon ASGI application.

This module provides ``create_app()`` which builds and configures the
Falcon ASGI application with health endpoints and, when relay
dependencies are available, the Linear webhook endpoint.

Usage
-----
Create a health-only app (no Discord webhook configured)::

    app = create_app()

Create a full app with the webhook endpoint::

    from herald.api.app import AppDependencies, create_app

    deps = AppDependencies(
        relay_service=relay_service,
        delivery=delivery_client,
        delivery_config=delivery_config,
        metrics=metrics,
    )
    app = create_app(deps, config=ApiConfig.from_env())

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from herald.api.config import ApiConfig
from herald.api.errors import register_error_handlers
from herald.api.health.resources import (
    DetailedHealthResource,
    HealthResource,
    ReadyResource,
)
from herald.api.ingress import IngressRateLimiter, IngressRateLimitMiddleware
from herald.api.middleware import (
    PayloadSizeLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from herald.relay.metrics import MetricsCollector

if typ.TYPE_CHECKING:
    from herald.discord.client import DeliveryClient
    from herald.discord.config import DeliveryConfig
    from herald.relay.service import RelayService

__all__ = ["WEBHOOK_PATH", "AppDependencies", "create_app"]

WEBHOOK_PATH = "/linear-webhook"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    When ``relay_service``, ``delivery`` and ``delivery_config`` are all
    provided, the application includes the webhook endpoint and, when
    enabled, the detailed health and metrics endpoints. Otherwise only
    health endpoints are registered.

    Attributes
    ----------
    relay_service
        Pipeline handling webhook requests.
    delivery
        Discord client shared with the relay service; read for its quota.
    delivery_config
        Delivery settings summarised by ``/metrics/config``.
    metrics
        Process-wide counters.
    ingress_limiter
        Limiter to use instead of one built from the configuration.

    """

    relay_service: RelayService | None = None
    delivery: DeliveryClient | None = None
    delivery_config: DeliveryConfig | None = None
    metrics: MetricsCollector = dc.field(default_factory=MetricsCollector)
    ingress_limiter: IngressRateLimiter | None = None


def _has_relay_deps(deps: AppDependencies) -> bool:
    """Return True when deps provide the full relay pipeline."""
    return (
        deps.relay_service is not None
        and deps.delivery is not None
        and deps.delivery_config is not None
    )


def create_app(
    dependencies: AppDependencies | None = None,
    *,
    config: ApiConfig | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies.  When ``None`` or incomplete,
        only ``/health`` and ``/ready`` are available.
    config
        API settings; defaults apply when omitted.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies or AppDependencies()
    config = config or ApiConfig()
    metrics = deps.metrics

    limiter: IngressRateLimiter | None = None
    if config.rate_limiting:
        limiter = deps.ingress_limiter or IngressRateLimiter(
            config.max_requests_per_minute
        )

    middleware: list[object] = [
        RequestLoggingMiddleware(),
        SecurityHeadersMiddleware(),
        PayloadSizeLimitMiddleware(
            max_bytes=config.max_payload_bytes, metrics=metrics
        ),
    ]
    if limiter is not None:
        middleware.append(
            IngressRateLimitMiddleware(limiter, paths={WEBHOOK_PATH}, metrics=metrics)
        )

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    # Health endpoints are always available
    app.add_route("/health", HealthResource(metrics))
    app.add_route("/ready", ReadyResource())

    if _has_relay_deps(deps):
        _add_relay_routes(app, deps, config, limiter)

    register_error_handlers(app, production=config.is_production)
    return app


def _add_relay_routes(
    app: falcon.asgi.App,
    deps: AppDependencies,
    config: ApiConfig,
    limiter: IngressRateLimiter | None,
) -> None:
    """Register the webhook route and the optional operational routes."""
    from herald.api.webhook.resources import LinearWebhookResource

    relay_service = typ.cast("RelayService", deps.relay_service)
    delivery = typ.cast("DeliveryClient", deps.delivery)
    delivery_config = typ.cast("DeliveryConfig", deps.delivery_config)

    app.add_route(
        WEBHOOK_PATH,
        LinearWebhookResource(
            relay_service,
            timeout_s=config.request_timeout_s,
            max_payload_bytes=config.max_payload_bytes,
            metrics=deps.metrics,
        ),
    )

    if config.detailed_health:
        app.add_route(
            "/health/detailed",
            DetailedHealthResource(
                deps.metrics,
                delivery,
                signature_verification=config.verify_signatures
                and bool(config.webhook_secret),
            ),
        )

    if config.metrics_endpoints:
        from herald.api.monitoring.resources import (
            ConfigSummaryResource,
            MetricsResource,
            RateLimitsResource,
        )

        app.add_route("/metrics", MetricsResource(deps.metrics))
        app.add_route("/metrics/rate-limits", RateLimitsResource(limiter, delivery))
        app.add_route(
            "/metrics/config", ConfigSummaryResource(config, delivery_config)
        )
