"""Unit tests for the femtologging wrapper.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from herald.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


class TestNormalizeLogLevel:
    """Tests for normalize_log_level."""

    @pytest.mark.parametrize(
        ("raw", "expected_level", "expected_invalid"),
        [
            ("debug", "DEBUG", False),
            ("  warn ", "WARN", False),
            ("TRACE", "TRACE", False),
            (None, "INFO", True),
            ("", "INFO", True),
            ("verbose", "INFO", True),
        ],
    )
    def test_normalizes_and_flags(
        self,
        raw: str | None,
        expected_level: str,
        *,
        expected_invalid: bool,
    ) -> None:
        """Known levels are upper-cased; anything else falls back to INFO."""
        level, invalid = normalize_log_level(raw)
        assert level == expected_level, f"{raw!r} should normalize to {expected_level}"
        assert invalid is expected_invalid, f"wrong invalid flag for {raw!r}"


class TestFormatLogMessage:
    """Tests for eager percent formatting."""

    def test_interpolates_arguments(self) -> None:
        """Arguments are interpolated with percent formatting."""
        message = format_log_message("[%s] attempt=%d", "delivery", 2)
        assert message == "[delivery] attempt=2", "unexpected formatted message"

    def test_leaves_template_without_arguments_untouched(self) -> None:
        """A literal percent sign needs no escaping when there are no args."""
        message = format_log_message("failure rate above 50%")
        assert message == "failure rate above 50%", "template should be unchanged"


class TestLogHelpers:
    """Tests for the level-specific helpers."""

    def test_log_debug_emits_debug(self) -> None:
        """log_debug formats the message and emits DEBUG."""
        logger = _FakeLogger()
        log_debug(logger, "paced %.1fs", 0.5)
        assert logger.calls == [("DEBUG", "paced 0.5s", None, False)], (
            "Expected DEBUG entry with formatted message."
        )

    def test_log_info_formats_and_passes_level(self) -> None:
        """log_info formats messages and emits INFO level."""
        logger = _FakeLogger()
        log_info(logger, "delivered %s", "Issue")
        assert logger.calls == [("INFO", "delivered Issue", None, False)], (
            "Expected INFO entry with formatted message."
        )

    def test_log_warning_forwards_exc_info(self) -> None:
        """log_warning forwards exc_info to the logger."""
        logger = _FakeLogger()
        exc = ValueError("boom")
        log_warning(logger, "warning: %s", "oops", exc_info=exc)
        assert logger.calls == [("WARNING", "warning: oops", exc, False)], (
            "Expected WARNING entry with exc_info."
        )

    def test_log_exception_passes_exc_info(self) -> None:
        """log_exception logs at ERROR with the exception attached."""
        logger = _FakeLogger()
        exc = RuntimeError("boom")
        log_exception(logger, "failed", exc)
        assert logger.calls == [("ERROR", "failed", exc, False)], (
            "Expected ERROR entry with exc_info."
        )


@pytest.mark.parametrize(
    ("input_level", "expected_normalized", "expected_invalid"),
    [
        ("DEBUG", "DEBUG", False),
        ("loud", "INFO", True),
    ],
)
def test_configure_logging(
    monkeypatch: pytest.MonkeyPatch,
    input_level: str,
    expected_normalized: str,
    *,
    expected_invalid: bool,
) -> None:
    """configure_logging normalizes input levels and configures femtologging."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("herald.logging.basicConfig", fake_basic_config)

    normalized, invalid = configure_logging(input_level)

    assert normalized == expected_normalized, "unexpected normalized level"
    assert invalid is expected_invalid, "unexpected invalid flag"
    assert captured.get("level") == expected_normalized, (
        f"Expected basicConfig to use {expected_normalized}."
    )
    assert captured.get("force") is False, "Expected basicConfig to keep handlers."
