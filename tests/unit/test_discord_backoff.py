"""Unit tests for retry delay calculation."""

from __future__ import annotations

import pytest

from herald.discord.backoff import MAX_BACKOFF_S, compute_backoff_delay


class TestComputeBackoffDelay:
    """Tests for compute_backoff_delay."""

    @pytest.mark.parametrize(
        ("attempt", "expected"),
        [(1, 1.0), (2, 2.0), (3, 4.0), (4, 8.0)],
    )
    def test_doubles_per_attempt_without_jitter(
        self, attempt: int, expected: float
    ) -> None:
        """A mid-range random draw yields the exponential base."""
        delay = compute_backoff_delay(attempt, base_s=1.0, rng=lambda: 0.5)
        assert delay == pytest.approx(expected), "unexpected exponential delay"

    def test_jitter_stays_within_a_quarter(self) -> None:
        """Jitter moves the delay by at most 25% either way."""
        low = compute_backoff_delay(3, base_s=1.0, rng=lambda: 0.0)
        high = compute_backoff_delay(3, base_s=1.0, rng=lambda: 0.999999)
        assert low == pytest.approx(3.0), "lowest draw should subtract 25%"
        assert high == pytest.approx(5.0, abs=1e-4), "highest draw should add 25%"

    def test_never_shorter_than_base(self) -> None:
        """Negative jitter on the first attempt is clamped to the base."""
        delay = compute_backoff_delay(1, base_s=1.0, rng=lambda: 0.0)
        assert delay == pytest.approx(1.0), "delay fell below the base"

    def test_capped_at_maximum(self) -> None:
        """Late attempts are capped."""
        delay = compute_backoff_delay(12, base_s=1.0, rng=lambda: 0.999999)
        assert delay == MAX_BACKOFF_S, "delay should be capped"

    def test_retry_after_is_authoritative(self) -> None:
        """A Retry-After value plus the buffer replaces the backoff."""
        delay = compute_backoff_delay(
            1, base_s=1.0, retry_after_s=2.0, buffer_s=0.1, rng=lambda: 0.5
        )
        assert delay == pytest.approx(2.1), "expected retry-after plus buffer"

    def test_retry_after_is_not_capped(self) -> None:
        """Discord's requested wait is honoured even when long."""
        delay = compute_backoff_delay(1, base_s=1.0, retry_after_s=120.0)
        assert delay == pytest.approx(120.0), "retry-after must not be capped"

    def test_zero_retry_after_falls_back_to_backoff(self) -> None:
        """A zero Retry-After is treated as absent."""
        delay = compute_backoff_delay(
            2, base_s=1.0, retry_after_s=0.0, rng=lambda: 0.5
        )
        assert delay == pytest.approx(2.0), "expected exponential delay"
