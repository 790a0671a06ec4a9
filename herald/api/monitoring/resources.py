"""Metrics, rate-limit and configuration endpoints for operators.

These routes are registered only when ``HERALD_METRICS_ENDPOINTS`` is set
and never expose secrets.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from herald.common.time import utcnow

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.api.config import ApiConfig
    from herald.api.ingress import IngressRateLimiter
    from herald.discord.client import DeliveryClient
    from herald.discord.config import DeliveryConfig
    from herald.relay.metrics import MetricsCollector

__all__ = ["ConfigSummaryResource", "MetricsResource", "RateLimitsResource"]

_MS_PER_SECOND = 1000


class MetricsResource:
    """``GET /metrics``: every counter held by the collector."""

    def __init__(self, metrics: MetricsCollector) -> None:
        """Initialise the resource with the shared collector."""
        self._metrics = metrics

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /metrics requests."""
        resp.media = {**self._metrics.snapshot(), "timestamp": utcnow().isoformat()}
        resp.status = HTTPStatus.OK


class RateLimitsResource:
    """``GET /metrics/rate-limits``: ingress limiter and Discord quota.

    Parameters
    ----------
    limiter
        Ingress limiter, or ``None`` when ingress limiting is disabled.
    delivery
        Client whose remembered Discord quota is reported.

    """

    def __init__(
        self, limiter: IngressRateLimiter | None, delivery: DeliveryClient
    ) -> None:
        """Initialise the resource with both rate-limit sources."""
        self._limiter = limiter
        self._delivery = delivery

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /metrics/rate-limits requests."""
        ingress: dict[str, object] = {"enabled": self._limiter is not None}
        if self._limiter is not None:
            ingress.update(self._limiter.stats())
        resp.media = {
            "ingress": ingress,
            "discord": self._delivery.rate_limit_snapshot().to_dict(),
            "timestamp": utcnow().isoformat(),
        }
        resp.status = HTTPStatus.OK


class ConfigSummaryResource:
    """``GET /metrics/config``: secret-free configuration summary."""

    def __init__(self, api_config: ApiConfig, delivery_config: DeliveryConfig) -> None:
        """Initialise the resource with both configuration objects."""
        self._api_config = api_config
        self._delivery_config = delivery_config

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /metrics/config requests."""
        delivery = self._delivery_config
        resp.media = {
            "api": self._api_config.summary(),
            "delivery": {
                "webhook_configured": bool(delivery.webhook_url),
                "max_retries": delivery.max_retries,
                "retry_delay_ms": round(delivery.retry_delay_s * _MS_PER_SECOND),
                "timeout_ms": round(delivery.timeout_s * _MS_PER_SECOND),
                "rate_limit_buffer_ms": round(
                    delivery.rate_limit_buffer_s * _MS_PER_SECOND
                ),
                "username": delivery.username,
            },
        }
        resp.status = HTTPStatus.OK
