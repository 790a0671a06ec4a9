"""Pipeline orchestration and in-process metrics for the relay.

Public API
----------
RelayService
    Runs verify, decode, transform and deliver for one webhook.
MetricsCollector
    Counters behind the health and metrics endpoints.
"""

from __future__ import annotations

from herald.relay.metrics import HealthStatus, MetricsCollector, SecurityEvent
from herald.relay.observability import RelayEventLogger
from herald.relay.service import RelayDependencies, RelayResult, RelayService

__all__ = [
    "HealthStatus",
    "MetricsCollector",
    "RelayDependencies",
    "RelayEventLogger",
    "RelayResult",
    "RelayService",
    "SecurityEvent",
]
