"""Health probe resources for liveness, readiness and detailed status.

``/health`` and ``/ready`` are always registered. ``/health/detailed`` is
registered only when enabled because it exposes delivery counters and the
remembered Discord quota.

Usage
-----
Register health endpoints on the Falcon app::

    from herald.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource(metrics))
    app.add_route("/ready", ReadyResource())

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

from herald.common.time import utcnow
from herald.relay.metrics import HealthStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.discord.client import DeliveryClient
    from herald.relay.metrics import MetricsCollector

__all__ = ["DetailedHealthResource", "HealthResource", "ReadyResource"]

SERVICE_NAME = "herald"


def _status_code(status: HealthStatus) -> HTTPStatus:
    if status is HealthStatus.UNHEALTHY:
        return HTTPStatus.SERVICE_UNAVAILABLE
    return HTTPStatus.OK


class HealthResource:
    """Liveness probe reporting the failure-rate health status.

    Responds with HTTP 200 unless the service is unhealthy, in which case
    it responds with HTTP 503.

    Parameters
    ----------
    metrics
        Collector whose failure rates determine the status; without one the
        service always reports healthy.

    """

    def __init__(self, metrics: MetricsCollector | None = None) -> None:
        """Initialise the resource with an optional metrics collector."""
        self._metrics = metrics

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with liveness status.

        """
        status = (
            HealthStatus.HEALTHY
            if self._metrics is None
            else self._metrics.health_status()
        )
        resp.media = {
            "status": str(status),
            "service": SERVICE_NAME,
            "timestamp": utcnow().isoformat(),
        }
        resp.status = _status_code(status)


class ReadyResource:
    """Readiness probe resource returning ``{"status": "ready"}``.

    Always responds with HTTP 200 to indicate the service can accept
    traffic.  No parameters or request body are expected.

    """

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = {"status": "ready"}
        resp.status = HTTPStatus.OK


class DetailedHealthResource:
    """Extended health view with counters and the Discord quota.

    Parameters
    ----------
    metrics
        Collector supplying the summary.
    delivery
        Client whose remembered quota is reported.
    signature_verification
        Whether inbound signatures are being verified.

    """

    def __init__(
        self,
        metrics: MetricsCollector,
        delivery: DeliveryClient,
        *,
        signature_verification: bool,
    ) -> None:
        """Initialise the resource with its data sources."""
        self._metrics = metrics
        self._delivery = delivery
        self._signature_verification = signature_verification

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health/detailed requests."""
        summary = self._metrics.summary()
        status = HealthStatus(summary["status"])
        resp.media = {
            **summary,
            "service": SERVICE_NAME,
            "timestamp": utcnow().isoformat(),
            "signature_verification": self._signature_verification,
            "discord_rate_limit": self._delivery.rate_limit_snapshot().to_dict(),
        }
        resp.status = _status_code(status)
