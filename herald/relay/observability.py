"""Structured log events for the relay pipeline."""

from __future__ import annotations

import enum
import typing as typ

from herald.discord.observability import categorize_delivery_error
from herald.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from herald.linear.models import EventEnvelope

logger = get_logger(__name__)


class RelayEventType(enum.StrEnum):
    """Structured log event types for relayed webhooks."""

    EVENT_RECEIVED = "relay.event.received"
    EVENT_DELIVERED = "relay.event.delivered"
    EVENT_REJECTED = "relay.event.rejected"
    EVENT_FAILED = "relay.event.failed"


class RelayEventLogger:
    """Emit structured relay events via femtologging."""

    def log_received(self, envelope: EventEnvelope) -> None:
        """Log a verified and decoded event."""
        log_info(
            logger,
            "[%s] type=%s action=%s webhook_id=%s",
            RelayEventType.EVENT_RECEIVED,
            envelope.type_name,
            envelope.action,
            envelope.webhook_id,
        )

    def log_delivered(
        self,
        envelope: EventEnvelope,
        *,
        attempts: int,
        duration_s: float,
    ) -> None:
        """Log an event delivered to Discord."""
        log_info(
            logger,
            "[%s] type=%s action=%s attempts=%d duration_seconds=%.3f",
            RelayEventType.EVENT_DELIVERED,
            envelope.type_name,
            envelope.action,
            attempts,
            duration_s,
        )

    def log_rejected(self, error: BaseException) -> None:
        """Log an inbound request refused before delivery.

        Parameters
        ----------
        error
            Authentication or validation failure raised by the pipeline.

        """
        log_warning(
            logger,
            "[%s] error_type=%s error_message=%s",
            RelayEventType.EVENT_REJECTED,
            type(error).__name__,
            str(error),
        )

    def log_failed(
        self,
        envelope: EventEnvelope,
        error: BaseException,
        *,
        duration_s: float,
    ) -> None:
        """Log an accepted event that could not be delivered."""
        log_error(
            logger,
            "[%s] type=%s action=%s duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            RelayEventType.EVENT_FAILED,
            envelope.type_name,
            envelope.action,
            duration_s,
            type(error).__name__,
            categorize_delivery_error(error),
            str(error),
            exc_info=error,
        )
