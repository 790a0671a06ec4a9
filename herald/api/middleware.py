"""Falcon middleware for request logging, security headers and body limits.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(
        middleware=[
            RequestLoggingMiddleware(),
            SecurityHeadersMiddleware(),
            PayloadSizeLimitMiddleware(max_bytes=1024 * 1024),
        ]
    )

"""

from __future__ import annotations

import time
import typing as typ

import falcon

from herald.logging import get_logger, log_info, log_warning
from herald.relay.metrics import SecurityEvent

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.relay.metrics import MetricsCollector

__all__ = [
    "PayloadSizeLimitMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]

logger = get_logger(__name__)

_SECURITY_STATUSES = frozenset({401, 403, 413, 429})
_NO_STORE_PREFIXES = ("/linear-webhook", "/health", "/metrics")
_NO_STORE = "no-store, no-cache, must-revalidate, private"


class RequestLoggingMiddleware:
    """Log method, path, status and duration of every request.

    Responses that reject a client for security reasons are additionally
    logged at WARNING together with the client address.
    """

    def __init__(self, *, clock: typ.Callable[[], float] = time.monotonic) -> None:
        """Initialise the middleware with a monotonic clock."""
        self._clock = clock

    async def process_request(self, req: Request, _resp: Response) -> None:
        """Stamp the request start time."""
        req.context.started_at = self._clock()

    async def process_response(
        self,
        req: Request,
        resp: Response,
        _resource: object,
        _req_succeeded: bool,  # noqa: FBT001 - Falcon middleware signature
    ) -> None:
        """Log the completed request."""
        started = getattr(req.context, "started_at", None)
        duration_ms = 0.0 if started is None else (self._clock() - started) * 1000
        status = falcon.http_status_to_code(resp.status)
        log_info(
            logger,
            "%s %s %d %.1fms",
            req.method,
            req.path,
            status,
            duration_ms,
        )
        if status in _SECURITY_STATUSES:
            log_warning(
                logger,
                "Security event: %s %s answered %d for client %s",
                req.method,
                req.path,
                status,
                req.remote_addr,
            )


class SecurityHeadersMiddleware:
    """Add defensive headers to every response.

    Webhook, health and metrics responses are also marked uncacheable.
    """

    async def process_response(
        self,
        req: Request,
        resp: Response,
        _resource: object,
        _req_succeeded: bool,  # noqa: FBT001 - Falcon middleware signature
    ) -> None:
        """Set the headers on ``resp``."""
        resp.set_header("X-Content-Type-Options", "nosniff")
        resp.set_header("X-Frame-Options", "DENY")
        if req.path.startswith(_NO_STORE_PREFIXES):
            resp.set_header("Cache-Control", _NO_STORE)


class PayloadSizeLimitMiddleware:
    """Reject requests whose declared body exceeds ``max_bytes``.

    Bodies sent without a ``Content-Length`` are bounded again when the
    webhook resource reads them.

    Parameters
    ----------
    max_bytes
        Largest accepted body.
    metrics
        Optional collector counting rejections.

    """

    def __init__(
        self, *, max_bytes: int, metrics: MetricsCollector | None = None
    ) -> None:
        """Initialise the middleware."""
        self._max_bytes = max_bytes
        self._metrics = metrics

    async def process_request(self, req: Request, _resp: Response) -> None:
        """Raise 413 when the declared length is over the ceiling.

        Raises
        ------
        falcon.HTTPContentTooLarge
            If ``Content-Length`` exceeds ``max_bytes``.

        """
        length = req.content_length
        if length is None or length <= self._max_bytes:
            return
        if self._metrics is not None:
            self._metrics.record_security_event(SecurityEvent.OVERSIZED_REQUEST)
        raise falcon.HTTPContentTooLarge(
            title="Payload Too Large",
            description=f"Request body exceeds {self._max_bytes} bytes",
        )
