"""Unit tests for delivery errors and their categorisation."""

from __future__ import annotations

import pytest

from herald.discord.errors import (
    DeliveryError,
    DeliveryExhaustedError,
    FatalDeliveryError,
    RetryableDeliveryError,
)
from herald.discord.observability import ErrorCategory, categorize_delivery_error


class TestDeliveryErrorFactories:
    """Tests for the DeliveryError factory methods."""

    @pytest.mark.parametrize(
        ("status_code", "error_type"),
        [
            (500, RetryableDeliveryError),
            (503, RetryableDeliveryError),
            (400, FatalDeliveryError),
            (404, FatalDeliveryError),
        ],
    )
    def test_http_error_retryability(
        self, status_code: int, error_type: type[DeliveryError]
    ) -> None:
        """Server errors are retryable; other statuses are fatal."""
        error = DeliveryError.http_error(status_code)
        assert type(error) is error_type, "wrong error class"
        assert error.status_code == status_code, "status should be kept"

    def test_http_error_message_includes_reason(self) -> None:
        """The reason phrase is appended when present."""
        error = DeliveryError.http_error(400, "Bad Request")
        assert str(error) == "Discord API error 400: Bad Request", "wrong message"

    @pytest.mark.parametrize(
        ("retry_after_s", "expected"),
        [
            (2.0, "Discord rate limited. Retry after: 2s"),
            (0.25, "Discord rate limited. Retry after: 0.25s"),
            (None, "Discord rate limited. Retry after: unknowns"),
        ],
    )
    def test_rate_limited_message(
        self, retry_after_s: float | None, expected: str
    ) -> None:
        """Rate limit errors quote the requested wait."""
        error = DeliveryError.rate_limited(retry_after_s)
        assert str(error) == expected, "unexpected rate limit message"
        assert error.retryable, "rate limits should be retryable"
        assert error.status_code == 429, "rate limits carry status 429"

    def test_network_and_timeout_errors_are_retryable(self) -> None:
        """Transport failures carry no status and may be retried."""
        network = DeliveryError.network_error("connection refused")
        timeout = DeliveryError.timeout()
        assert str(network) == "Network error: connection refused", "wrong message"
        assert str(timeout) == "Discord request timed out", "wrong message"
        assert network.retryable, "network errors should be retryable"
        assert timeout.status_code is None, "timeouts have no status"

    def test_exhausted_error_wraps_last_failure(self) -> None:
        """The aggregate error names the attempt count and final error."""
        last = DeliveryError.http_error(502, "Bad Gateway")
        exhausted = DeliveryExhaustedError.after(4, last)
        assert str(exhausted) == (
            "Discord webhook failed after 4 attempts. "
            "Last error: Discord API error 502: Bad Gateway"
        ), "unexpected exhausted message"
        assert exhausted.attempts == 4, "attempt count should be kept"
        assert exhausted.last_error is last, "last error should be kept"
        assert not exhausted.retryable, "exhausted deliveries are final"


class TestCategorizeDeliveryError:
    """Tests for categorize_delivery_error."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (DeliveryError.rate_limited(1.0), ErrorCategory.RATE_LIMITED),
            (DeliveryError.http_error(503), ErrorCategory.TRANSIENT),
            (DeliveryError.http_error(401), ErrorCategory.CLIENT_ERROR),
            (DeliveryError.network_error("reset"), ErrorCategory.NETWORK),
            (DeliveryError.timeout(), ErrorCategory.NETWORK),
            (ValueError("boom"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, error: BaseException, expected: ErrorCategory) -> None:
        """Errors map onto alert categories by status."""
        assert categorize_delivery_error(error) is expected, "wrong category"

    def test_exhausted_uses_final_attempt(self) -> None:
        """Exhausted deliveries take the category of their last failure."""
        exhausted = DeliveryExhaustedError.after(
            3, DeliveryError.rate_limited(None)
        )
        assert categorize_delivery_error(exhausted) is ErrorCategory.RATE_LIMITED, (
            "exhausted should inherit the last error's category"
        )
