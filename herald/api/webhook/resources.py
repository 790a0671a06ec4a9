"""Webhook resource receiving Linear events.

``POST /linear-webhook`` reads the raw body, relays it through the pipeline
within the request budget, and reports the delivery outcome.

Usage
-----
Register the resource on the Falcon app::

    app.add_route(
        "/linear-webhook",
        LinearWebhookResource(service, timeout_s=30.0, max_payload_bytes=1 << 20),
    )

"""

from __future__ import annotations

import asyncio
import typing as typ

import falcon

from herald.api.errors import RequestTimeoutError
from herald.linear.signature import SIGNATURE_HEADER
from herald.relay.metrics import SecurityEvent

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.relay.metrics import MetricsCollector
    from herald.relay.service import RelayService

__all__ = ["LinearWebhookResource"]


class LinearWebhookResource:
    """Relay one Linear webhook to Discord per request.

    Parameters
    ----------
    service
        Pipeline that verifies, decodes, transforms and delivers.
    timeout_s
        Processing budget; on expiry in-flight delivery is cancelled.
    max_payload_bytes
        Largest accepted body.
    metrics
        Optional collector counting oversized bodies.

    """

    def __init__(
        self,
        service: RelayService,
        *,
        timeout_s: float,
        max_payload_bytes: int,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """Configure the resource with its pipeline and limits."""
        self._service = service
        self._timeout_s = timeout_s
        self._max_payload_bytes = max_payload_bytes
        self._metrics = metrics

    async def _read_body(self, req: Request) -> bytes:
        """Read at most one byte past the ceiling and reject larger bodies."""
        body = await req.stream.read(self._max_payload_bytes + 1)
        if len(body) > self._max_payload_bytes:
            if self._metrics is not None:
                self._metrics.record_security_event(SecurityEvent.OVERSIZED_REQUEST)
            raise falcon.HTTPContentTooLarge(
                title="Payload Too Large",
                description=f"Request body exceeds {self._max_payload_bytes} bytes",
            )
        return body

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /linear-webhook.

        Parameters
        ----------
        req
            Falcon request carrying the raw Linear payload.
        resp
            Falcon response populated with the delivery outcome.

        Raises
        ------
        RequestTimeoutError
            If processing exceeds the request budget.

        """
        try:
            async with asyncio.timeout(self._timeout_s):
                body = await self._read_body(req)
                result = await self._service.relay(
                    body, req.get_header(SIGNATURE_HEADER)
                )
        except TimeoutError as exc:
            raise RequestTimeoutError(self._timeout_s) from exc

        resp.status = falcon.HTTP_200
        resp.media = {
            "status": "delivered",
            "type": result.envelope.type_name,
            "action": str(result.envelope.action),
            "attempts": result.receipt.attempts,
        }
