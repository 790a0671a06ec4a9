"""Relay pipeline: verify, decode, transform and deliver one Linear event.

Usage
-----
Build a service from its collaborators and relay a raw request body:

>>> service = RelayService(
...     RelayDependencies(
...         verifier=SignatureVerifier(secret),
...         transformer=EntityTransformer(),
...         delivery=DeliveryClient(DeliveryConfig(webhook_url=url)),
...     ),
...     metrics=MetricsCollector(),
... )
>>> result = await service.relay(raw_body, request.get_header("Linear-Signature"))

"""

from __future__ import annotations

import dataclasses as dc
import time
import typing as typ

from herald.discord.errors import DeliveryError, DeliveryExhaustedError
from herald.linear.decoder import decode_envelope
from herald.linear.errors import PayloadValidationError, WebhookAuthenticationError
from herald.relay.metrics import SecurityEvent
from herald.relay.observability import RelayEventLogger

if typ.TYPE_CHECKING:
    from herald.discord.client import DeliveryClient, DeliveryReceipt
    from herald.embeds.transformer import EntityTransformer
    from herald.linear.models import EventEnvelope
    from herald.linear.signature import SignatureVerifier
    from herald.relay.metrics import MetricsCollector

__all__ = ["RelayDependencies", "RelayResult", "RelayService"]

_HTTP_RATE_LIMITED = 429


@dc.dataclass(frozen=True, slots=True)
class RelayDependencies:
    """Pipeline stages used by :class:`RelayService`.

    Attributes
    ----------
    verifier
        Authenticates raw request bodies.
    transformer
        Builds notification messages from decoded events.
    delivery
        Sends messages to Discord; compaction happens inside.

    """

    verifier: SignatureVerifier
    transformer: EntityTransformer
    delivery: DeliveryClient


@dc.dataclass(frozen=True, slots=True)
class RelayResult:
    """A relayed event and the receipt of its delivery."""

    envelope: EventEnvelope
    receipt: DeliveryReceipt


def _was_rate_limited(error: DeliveryError) -> bool:
    if isinstance(error, DeliveryExhaustedError):
        return error.last_error.status_code == _HTTP_RATE_LIMITED
    return error.status_code == _HTTP_RATE_LIMITED


def _attempts(error: DeliveryError) -> int:
    if isinstance(error, DeliveryExhaustedError):
        return error.attempts
    return 1


class RelayService:
    """Run one inbound webhook through the relay pipeline.

    Stages run strictly in order and each may suspend on I/O. A failure in
    one stage stops the pipeline and propagates to the caller unchanged, so
    the HTTP layer decides the response status.
    """

    def __init__(
        self,
        dependencies: RelayDependencies,
        *,
        metrics: MetricsCollector | None = None,
        event_logger: RelayEventLogger | None = None,
        monotonic: typ.Callable[[], float] = time.monotonic,
    ) -> None:
        """Configure the service with its stages and optional telemetry."""
        self._verifier = dependencies.verifier
        self._transformer = dependencies.transformer
        self._delivery = dependencies.delivery
        self._metrics = metrics
        self._events = event_logger or RelayEventLogger()
        self._monotonic = monotonic

    def _record_security(self, event: SecurityEvent) -> None:
        if self._metrics is not None:
            self._metrics.record_security_event(event)

    def accept(self, raw_body: bytes, signature_header: str | None) -> EventEnvelope:
        """Verify and decode ``raw_body`` without delivering it.

        Raises
        ------
        WebhookAuthenticationError
            If the signature is missing, invalid or stale.
        PayloadValidationError
            If the body is not a valid Linear event.

        """
        try:
            self._verifier.require(raw_body, signature_header)
        except WebhookAuthenticationError as exc:
            self._record_security(SecurityEvent.SIGNATURE_FAILED)
            self._events.log_rejected(exc)
            raise
        try:
            envelope = decode_envelope(raw_body, signature_header=signature_header)
        except PayloadValidationError as exc:
            self._record_security(SecurityEvent.INVALID_PAYLOAD)
            self._events.log_rejected(exc)
            raise
        self._events.log_received(envelope)
        return envelope

    async def relay(self, raw_body: bytes, signature_header: str | None) -> RelayResult:
        """Verify, decode, transform and deliver one webhook.

        Parameters
        ----------
        raw_body
            Request body exactly as received.
        signature_header
            Value of the ``Linear-Signature`` header, if any.

        Returns
        -------
        RelayResult
            The decoded event and its delivery receipt.

        Raises
        ------
        WebhookAuthenticationError
            If the signature is missing, invalid or stale.
        PayloadValidationError
            If the body is not a valid Linear event.
        DeliveryError
            If Discord rejected the message or every attempt failed.

        """
        started = self._monotonic()
        envelope = self.accept(raw_body, signature_header)
        message = self._transformer.transform(envelope)

        try:
            receipt = await self._delivery.send(message)
        except DeliveryError as exc:
            duration = self._monotonic() - started
            self._events.log_failed(envelope, exc, duration_s=duration)
            if self._metrics is not None:
                self._metrics.record_delivery(
                    succeeded=False,
                    elapsed_s=duration,
                    attempts=_attempts(exc),
                    rate_limited=_was_rate_limited(exc),
                )
                self._metrics.record_webhook(
                    envelope.type_name,
                    str(envelope.action),
                    processing_s=duration,
                    succeeded=False,
                )
            raise

        duration = self._monotonic() - started
        self._events.log_delivered(
            envelope, attempts=receipt.attempts, duration_s=duration
        )
        if self._metrics is not None:
            self._metrics.record_delivery(
                succeeded=True,
                elapsed_s=receipt.elapsed_s,
                attempts=receipt.attempts,
                rate_limited=receipt.rate_limited,
            )
            self._metrics.record_webhook(
                envelope.type_name,
                str(envelope.action),
                processing_s=duration,
                succeeded=True,
            )
        return RelayResult(envelope=envelope, receipt=receipt)
