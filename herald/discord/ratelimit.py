"""Discord rate-limit telemetry and the pacing decision derived from it.

Discord reports the state of the quota bucket that served a request through
``X-RateLimit-*`` response headers. The client remembers the most recent
report and consults it before each send; the live response always wins.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = [
    "RateLimitSnapshot",
    "pacing_delay",
    "parse_rate_limit_headers",
    "parse_retry_after",
]

# Assumed distance to the reset when Discord reported no reset time.
_UNKNOWN_RESET_S = 1.0
_LOW_QUOTA = 1


def _int_or_none(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _float_or_none(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw.strip())
    except ValueError:
        return None


@dc.dataclass(frozen=True, slots=True)
class RateLimitSnapshot:
    """Quota state reported by one Discord response.

    Attributes
    ----------
    limit
        Requests allowed in the current window.
    remaining
        Requests left in the current window.
    reset
        Epoch time in seconds at which the window resets.
    reset_after
        Seconds until the window resets.
    bucket
        Identifier of the quota partition the headers describe.
    scope
        ``user``, ``global`` or ``shared`` on 429 responses.

    """

    limit: int | None = None
    remaining: int | None = None
    reset: float | None = None
    reset_after: float | None = None
    bucket: str | None = None
    scope: str | None = None

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when no telemetry was reported."""
        return self == RateLimitSnapshot()

    def to_dict(self) -> dict[str, object]:
        """Return the snapshot as a JSON-compatible mapping."""
        return dc.asdict(self)


def parse_rate_limit_headers(headers: cabc.Mapping[str, str]) -> RateLimitSnapshot:
    """Read the ``X-RateLimit-*`` headers of a response.

    Missing or unparsable headers leave the matching attribute ``None``.
    ``headers`` is expected to look up names case-insensitively, as
    :class:`httpx.Headers` does.
    """
    return RateLimitSnapshot(
        limit=_int_or_none(headers.get("X-RateLimit-Limit")),
        remaining=_int_or_none(headers.get("X-RateLimit-Remaining")),
        reset=_float_or_none(headers.get("X-RateLimit-Reset")),
        reset_after=_float_or_none(headers.get("X-RateLimit-Reset-After")),
        bucket=headers.get("X-RateLimit-Bucket") or None,
        scope=headers.get("X-RateLimit-Scope") or None,
    )


def parse_retry_after(headers: cabc.Mapping[str, str]) -> float | None:
    """Return ``Retry-After`` in seconds when present and numeric."""
    value = _float_or_none(headers.get("Retry-After"))
    if value is None or value < 0:
        return None
    return value


def pacing_delay(
    snapshot: RateLimitSnapshot,
    *,
    now: float,
    last_send: float | None,
    buffer_s: float,
) -> float:
    """Return how long to wait before the next send, in seconds.

    When the remembered quota is nearly spent the wait runs until the reset
    time plus ``buffer_s``. Otherwise consecutive sends are spaced at least
    ``buffer_s`` apart.

    Parameters
    ----------
    snapshot
        Most recently observed quota.
    now
        Current epoch time in seconds.
    last_send
        Epoch time of the previous send, or ``None`` before the first one.
    buffer_s
        Safety margin and minimum spacing, in seconds.

    Returns
    -------
    float
        Non-negative delay in seconds.

    """
    if snapshot.remaining is not None and snapshot.remaining <= _LOW_QUOTA:
        reset = snapshot.reset if snapshot.reset is not None else now + _UNKNOWN_RESET_S
        return max(0.0, reset - now + buffer_s)

    if last_send is None:
        return 0.0
    elapsed = now - last_send
    if elapsed < buffer_s:
        return buffer_s - elapsed
    return 0.0
