"""In-process counters for webhook processing and Discord delivery.

The collector is owned by the composition root and shared by the webhook
resource, the relay service and the monitoring endpoints. Counters live for
the lifetime of the process and are lost on restart.
"""

from __future__ import annotations

import collections
import enum
import threading
import time
import typing as typ

__all__ = ["HealthStatus", "MetricsCollector", "SecurityEvent", "format_uptime"]

_RECENT_SAMPLES = 100
_UNHEALTHY_FAILURE_RATE = 0.5
_DEGRADED_FAILURE_RATE = 0.1
_SECONDS_PER_HOUR = 3600
_SECONDS_PER_MINUTE = 60


class HealthStatus(enum.StrEnum):
    """Overall service health derived from failure rates."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class SecurityEvent(enum.StrEnum):
    """Rejected inbound requests counted for security monitoring."""

    SIGNATURE_FAILED = "signature_failed"
    RATE_LIMITED = "rate_limited"
    INVALID_PAYLOAD = "invalid_payload"
    OVERSIZED_REQUEST = "oversized_request"


def _mean(samples: typ.Iterable[float]) -> float:
    values = list(samples)
    if not values:
        return 0.0
    return sum(values) / len(values)


def _rate(part: int, total: int) -> float:
    return part / total if total else 0.0


def format_uptime(seconds: float) -> str:
    """Render ``seconds`` as ``"<h>h <m>m <s>s"``."""
    whole = int(seconds)
    hours, rest = divmod(whole, _SECONDS_PER_HOUR)
    minutes, secs = divmod(rest, _SECONDS_PER_MINUTE)
    return f"{hours}h {minutes}m {secs}s"


class MetricsCollector:
    """Thread-safe counters for the relay pipeline.

    Parameters
    ----------
    clock
        Monotonic clock used for uptime; injectable for tests.

    """

    def __init__(self, *, clock: typ.Callable[[], float] = time.monotonic) -> None:
        """Initialise empty counters and record the start time."""
        self._clock = clock
        self._started = clock()
        self._lock = threading.Lock()
        self._webhooks_total = 0
        self._webhooks_succeeded = 0
        self._webhooks_failed = 0
        self._by_type: collections.Counter[str] = collections.Counter()
        self._by_action: collections.Counter[str] = collections.Counter()
        self._processing_s: collections.deque[float] = collections.deque(
            maxlen=_RECENT_SAMPLES
        )
        self._deliveries_total = 0
        self._deliveries_succeeded = 0
        self._deliveries_failed = 0
        self._retries = 0
        self._sink_rate_limit_hits = 0
        self._delivery_s: collections.deque[float] = collections.deque(
            maxlen=_RECENT_SAMPLES
        )
        self._security: collections.Counter[SecurityEvent] = collections.Counter()

    @property
    def uptime_s(self) -> float:
        """Seconds since the collector was created."""
        return self._clock() - self._started

    def record_webhook(
        self,
        type_name: str,
        action: str,
        *,
        processing_s: float,
        succeeded: bool,
    ) -> None:
        """Count one processed webhook and its processing time."""
        with self._lock:
            self._webhooks_total += 1
            if succeeded:
                self._webhooks_succeeded += 1
            else:
                self._webhooks_failed += 1
            self._by_type[type_name] += 1
            self._by_action[action] += 1
            self._processing_s.append(processing_s)

    def record_delivery(
        self,
        *,
        succeeded: bool,
        elapsed_s: float,
        attempts: int = 1,
        rate_limited: bool = False,
    ) -> None:
        """Count one Discord delivery.

        Parameters
        ----------
        succeeded
            Whether the message was delivered.
        elapsed_s
            Time spent delivering, retries and waits included.
        attempts
            Attempts made; every attempt after the first counts as a retry.
        rate_limited
            Whether Discord answered at least one attempt with 429.

        """
        with self._lock:
            self._deliveries_total += 1
            if succeeded:
                self._deliveries_succeeded += 1
            else:
                self._deliveries_failed += 1
            self._retries += max(attempts - 1, 0)
            if rate_limited:
                self._sink_rate_limit_hits += 1
            self._delivery_s.append(elapsed_s)

    def record_security_event(self, event: SecurityEvent) -> None:
        """Count one rejected inbound request."""
        with self._lock:
            self._security[event] += 1

    def health_status(self) -> HealthStatus:
        """Classify health from webhook and delivery failure rates.

        Either rate above one half is unhealthy; either rate above one tenth
        is degraded.
        """
        with self._lock:
            worst = max(
                _rate(self._webhooks_failed, self._webhooks_total),
                _rate(self._deliveries_failed, self._deliveries_total),
            )
        if worst > _UNHEALTHY_FAILURE_RATE:
            return HealthStatus.UNHEALTHY
        if worst > _DEGRADED_FAILURE_RATE:
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def summary(self) -> dict[str, typ.Any]:
        """Return the compact view used by the detailed health endpoint."""
        status = self.health_status()
        with self._lock:
            return {
                "status": str(status),
                "uptime": format_uptime(self.uptime_s),
                "webhooks": {
                    "total": self._webhooks_total,
                    "success_rate": round(
                        _rate(self._webhooks_succeeded, self._webhooks_total), 4
                    ),
                    "avg_processing_ms": round(_mean(self._processing_s) * 1000, 1),
                },
                "deliveries": {
                    "total": self._deliveries_total,
                    "success_rate": round(
                        _rate(self._deliveries_succeeded, self._deliveries_total), 4
                    ),
                    "avg_delivery_ms": round(_mean(self._delivery_s) * 1000, 1),
                },
                "security": {"total_issues": sum(self._security.values())},
            }

    def snapshot(self) -> dict[str, typ.Any]:
        """Return every counter as a JSON-compatible mapping."""
        status = self.health_status()
        with self._lock:
            return {
                "status": str(status),
                "uptime_seconds": round(self.uptime_s, 3),
                "webhooks": {
                    "total": self._webhooks_total,
                    "succeeded": self._webhooks_succeeded,
                    "failed": self._webhooks_failed,
                    "by_type": dict(self._by_type),
                    "by_action": dict(self._by_action),
                    "avg_processing_ms": round(_mean(self._processing_s) * 1000, 1),
                },
                "deliveries": {
                    "total": self._deliveries_total,
                    "succeeded": self._deliveries_succeeded,
                    "failed": self._deliveries_failed,
                    "retries": self._retries,
                    "rate_limit_hits": self._sink_rate_limit_hits,
                    "avg_delivery_ms": round(_mean(self._delivery_s) * 1000, 1),
                },
                "security": {
                    str(event): self._security[event] for event in SecurityEvent
                },
            }
