"""Structured delivery events and error categorisation.

All events are emitted through femtologging as ``[event] key=value`` lines
so log aggregators can parse attempt counts, waits and failure categories.
"""

from __future__ import annotations

import enum
import typing as typ

from herald.discord.errors import DeliveryError, DeliveryExhaustedError
from herald.logging import get_logger, log_debug, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from herald.discord.ratelimit import RateLimitSnapshot

logger = get_logger(__name__)

_HTTP_RATE_LIMITED = 429
_HTTP_SERVER_ERROR_THRESHOLD = 500


class DeliveryEventType(enum.StrEnum):
    """Structured log event types for webhook deliveries."""

    ATTEMPT_STARTED = "delivery.attempt.started"
    ATTEMPT_FAILED = "delivery.attempt.failed"
    RATE_LIMITED = "delivery.rate_limited"
    SUCCEEDED = "delivery.succeeded"
    EXHAUSTED = "delivery.exhausted"
    PACED = "delivery.paced"


class ErrorCategory(enum.StrEnum):
    """Categories for delivery failures in alerts."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    NETWORK = "network"
    UNKNOWN = "unknown"


def categorize_delivery_error(exc: BaseException) -> ErrorCategory:
    """Categorise a delivery failure for alert routing.

    Exhausted deliveries are categorised by their final attempt.
    """
    if isinstance(exc, DeliveryExhaustedError):
        return categorize_delivery_error(exc.last_error)
    if not isinstance(exc, DeliveryError):
        return ErrorCategory.UNKNOWN
    if exc.status_code is None:
        return ErrorCategory.NETWORK
    if exc.status_code == _HTTP_RATE_LIMITED:
        return ErrorCategory.RATE_LIMITED
    if exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD:
        return ErrorCategory.TRANSIENT
    return ErrorCategory.CLIENT_ERROR


class DeliveryEventLogger:
    """Emit structured delivery events via femtologging."""

    def log_attempt_started(self, *, attempt: int, max_attempts: int) -> None:
        """Log the start of one delivery attempt."""
        log_debug(
            logger,
            "[%s] attempt=%d max_attempts=%d",
            DeliveryEventType.ATTEMPT_STARTED,
            attempt,
            max_attempts,
        )

    def log_paced(self, *, delay_s: float, remaining: int | None) -> None:
        """Log a wait imposed before sending."""
        log_debug(
            logger,
            "[%s] delay_seconds=%.3f remaining=%s",
            DeliveryEventType.PACED,
            delay_s,
            remaining,
        )

    def log_attempt_failed(
        self,
        *,
        attempt: int,
        max_attempts: int,
        error: DeliveryError,
        delay_s: float | None,
    ) -> None:
        """Log a failed attempt and the wait before the next one.

        Parameters
        ----------
        attempt
            Number of the failed attempt, starting at 1.
        max_attempts
            Total attempts allowed for the message.
        error
            Classified failure.
        delay_s
            Backoff before the next attempt, or ``None`` when no retry
            follows.

        """
        delay_text = "None" if delay_s is None else f"{delay_s:.3f}"
        log_warning(
            logger,
            "[%s] attempt=%d max_attempts=%d status_code=%s retryable=%s "
            "error_category=%s retry_in_seconds=%s error_message=%s",
            DeliveryEventType.ATTEMPT_FAILED,
            attempt,
            max_attempts,
            error.status_code,
            error.retryable,
            categorize_delivery_error(error),
            delay_text,
            str(error),
        )

    def log_rate_limited(
        self, *, retry_after_s: float | None, snapshot: RateLimitSnapshot
    ) -> None:
        """Log a 429 response together with the reported quota."""
        log_warning(
            logger,
            "[%s] retry_after_seconds=%s bucket=%s scope=%s",
            DeliveryEventType.RATE_LIMITED,
            retry_after_s,
            snapshot.bucket,
            snapshot.scope,
        )

    def log_succeeded(
        self, *, attempt: int, status_code: int, elapsed_s: float
    ) -> None:
        """Log a delivered message."""
        log_info(
            logger,
            "[%s] attempt=%d status_code=%d duration_seconds=%.3f",
            DeliveryEventType.SUCCEEDED,
            attempt,
            status_code,
            elapsed_s,
        )

    def log_exhausted(self, error: DeliveryExhaustedError) -> None:
        """Log a message abandoned after its final attempt."""
        log_error(
            logger,
            "[%s] attempts=%d error_category=%s error_message=%s",
            DeliveryEventType.EXHAUSTED,
            error.attempts,
            categorize_delivery_error(error),
            str(error.last_error),
        )
