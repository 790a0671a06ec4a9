"""Unit tests for structured delivery log events."""

from __future__ import annotations

from herald.discord.errors import DeliveryError, DeliveryExhaustedError
from herald.discord.observability import DeliveryEventLogger, DeliveryEventType
from herald.discord.ratelimit import RateLimitSnapshot
from tests.helpers.femtologging_capture import WARNING_LEVELS, capture_femto_logs

LOGGER_NAME = "herald.discord.observability"


class TestDeliveryEventLogger:
    """Tests for DeliveryEventLogger."""

    def test_succeeded_is_info(self) -> None:
        """Successful deliveries log attempts, status and duration."""
        with capture_femto_logs(LOGGER_NAME) as capture:
            DeliveryEventLogger().log_succeeded(
                attempt=2, status_code=204, elapsed_s=2.1
            )
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "INFO", "success should log at INFO"
        assert record.message == (
            f"[{DeliveryEventType.SUCCEEDED}] attempt=2 status_code=204 "
            "duration_seconds=2.100"
        ), "unexpected success message"

    def test_attempt_failed_includes_category_and_delay(self) -> None:
        """Failed attempts log the category and the upcoming wait."""
        with capture_femto_logs(LOGGER_NAME) as capture:
            DeliveryEventLogger().log_attempt_failed(
                attempt=1,
                max_attempts=4,
                error=DeliveryError.rate_limited(2.0),
                delay_s=2.1,
            )
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level in WARNING_LEVELS, "failures should log at WARNING"
        assert "error_category=rate_limited" in record.message, "category missing"
        assert "retry_in_seconds=2.100" in record.message, "delay missing"

    def test_rate_limited_reports_bucket(self) -> None:
        """429 responses log the bucket and scope Discord reported."""
        with capture_femto_logs(LOGGER_NAME) as capture:
            DeliveryEventLogger().log_rate_limited(
                retry_after_s=2.0,
                snapshot=RateLimitSnapshot(bucket="abcd", scope="shared"),
            )
            capture.wait_for_count(1)

        assert "bucket=abcd scope=shared" in capture.records[0].message, (
            "bucket and scope should be logged"
        )

    def test_exhausted_is_error(self) -> None:
        """Abandoned messages log at ERROR with the last failure."""
        exhausted = DeliveryExhaustedError.after(
            4, DeliveryError.http_error(502, "Bad Gateway")
        )
        with capture_femto_logs(LOGGER_NAME) as capture:
            DeliveryEventLogger().log_exhausted(exhausted)
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "ERROR", "exhaustion should log at ERROR"
        assert record.message == (
            f"[{DeliveryEventType.EXHAUSTED}] attempts=4 error_category=transient "
            "error_message=Discord API error 502: Bad Gateway"
        ), "unexpected exhausted message"
