"""Retry delay calculation for webhook deliveries."""

from __future__ import annotations

import random
import typing as typ

__all__ = ["MAX_BACKOFF_S", "compute_backoff_delay"]

MAX_BACKOFF_S = 30.0
_JITTER_RATIO = 0.25


def compute_backoff_delay(
    attempt: int,
    *,
    base_s: float,
    retry_after_s: float | None = None,
    buffer_s: float = 0.0,
    rng: typ.Callable[[], float] = random.random,
) -> float:
    """Return the wait before the next attempt, in seconds.

    A ``Retry-After`` value supplied by Discord is authoritative: the delay is
    that value plus ``buffer_s`` and is not capped. Otherwise the delay grows
    as ``base_s * 2 ** (attempt - 1)`` with up to 25% jitter either way, is
    never shorter than ``base_s`` and never longer than :data:`MAX_BACKOFF_S`.

    Parameters
    ----------
    attempt
        Number of the attempt that just failed, starting at 1.
    base_s
        Base delay in seconds.
    retry_after_s
        Wait requested by Discord, if any.
    buffer_s
        Safety margin added to ``retry_after_s``.
    rng
        Source of uniform floats in ``[0, 1)``; injectable for tests.

    Returns
    -------
    float
        Delay in seconds.

    Examples
    --------
    >>> compute_backoff_delay(3, base_s=1.0, rng=lambda: 0.5)
    4.0
    >>> compute_backoff_delay(1, base_s=1.0, retry_after_s=5.0, buffer_s=0.1)
    5.1

    """
    if retry_after_s is not None and retry_after_s > 0:
        return retry_after_s + buffer_s

    exponential = base_s * 2 ** max(attempt - 1, 0)
    jitter = exponential * _JITTER_RATIO * (rng() * 2 - 1)
    return min(max(base_s, exponential + jitter), MAX_BACKOFF_S)
