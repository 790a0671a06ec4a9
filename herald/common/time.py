"""Common time utilities."""

from __future__ import annotations

import datetime as dt

_MILLIS_PER_SECOND = 1000


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def epoch_millis(moment: dt.datetime) -> int:
    """Return ``moment`` as integer milliseconds since the Unix epoch."""
    return int(moment.timestamp() * _MILLIS_PER_SECOND)


def parse_iso_timestamp(value: str | None) -> dt.datetime | None:
    """Parse an ISO 8601 timestamp, returning ``None`` when it is unusable.

    Linear timestamps use a trailing ``Z``; naive values are treated as UTC.
    """
    if not value:
        return None
    try:
        parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed


def format_day(value: str | None) -> str | None:
    """Render an ISO timestamp or date as ``YYYY-MM-DD``.

    Unparseable input is returned unchanged so nothing is silently lost.
    """
    if not value:
        return None
    parsed = parse_iso_timestamp(value)
    if parsed is None:
        return value
    return parsed.date().isoformat()


__all__ = ["epoch_millis", "format_day", "parse_iso_timestamp", "utcnow"]
