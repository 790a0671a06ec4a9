"""Unit tests for environment variable parsing helpers."""

from __future__ import annotations

import pytest

from herald.common.env import (
    EnvConfigError,
    env_bool,
    env_choice,
    env_int,
    env_required,
    env_str,
)
from herald.common.time import epoch_millis, format_day, parse_iso_timestamp


class TestEnvInt:
    """Tests for bounded integer parsing."""

    def test_returns_default_when_unset(self) -> None:
        """An unset variable yields the default."""
        assert env_int("HERALD_TEST_INT", default=3, minimum=0, maximum=10) == 3, (
            "expected default"
        )

    def test_blank_value_counts_as_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Whitespace-only values fall back to the default."""
        monkeypatch.setenv("HERALD_TEST_INT", "   ")
        assert env_int("HERALD_TEST_INT", default=3, minimum=0, maximum=10) == 3, (
            "blank value should use the default"
        )

    def test_parses_value_in_range(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A value inside the range is returned as an int."""
        monkeypatch.setenv("HERALD_TEST_INT", " 7 ")
        assert env_int("HERALD_TEST_INT", default=3, minimum=0, maximum=10) == 7, (
            "expected parsed value"
        )

    @pytest.mark.parametrize("raw", ["11", "-1", "three", "2.5"])
    def test_rejects_invalid_values(
        self, monkeypatch: pytest.MonkeyPatch, raw: str
    ) -> None:
        """Out-of-range and non-integer values raise EnvConfigError."""
        monkeypatch.setenv("HERALD_TEST_INT", raw)
        with pytest.raises(EnvConfigError) as excinfo:
            env_int("HERALD_TEST_INT", default=3, minimum=0, maximum=10)
        assert excinfo.value.name == "HERALD_TEST_INT", "error should name variable"
        assert "between 0 and 10" in str(excinfo.value), "error should state range"


class TestEnvBool:
    """Tests for boolean flag parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("YES", True), ("1", True), ("off", False), ("0", False)],
    )
    def test_accepts_common_spellings(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, *, expected: bool
    ) -> None:
        """Recognised spellings map to booleans case-insensitively."""
        monkeypatch.setenv("HERALD_TEST_FLAG", raw)
        assert env_bool("HERALD_TEST_FLAG", default=not expected) is expected, (
            f"{raw!r} should parse as {expected}"
        )

    def test_rejects_unknown_spelling(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Unrecognised spellings raise EnvConfigError."""
        monkeypatch.setenv("HERALD_TEST_FLAG", "maybe")
        with pytest.raises(EnvConfigError, match="HERALD_TEST_FLAG"):
            env_bool("HERALD_TEST_FLAG", default=True)


class TestEnvStrings:
    """Tests for string, required and choice parsing."""

    def test_env_str_strips(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Values are stripped of surrounding whitespace."""
        monkeypatch.setenv("HERALD_TEST_STR", "  Linear Bot ")
        assert env_str("HERALD_TEST_STR", "x") == "Linear Bot", "value not stripped"

    def test_env_required_raises_when_missing(self) -> None:
        """A missing required variable raises with value None."""
        with pytest.raises(EnvConfigError) as excinfo:
            env_required("HERALD_TEST_REQUIRED")
        assert excinfo.value.value is None, "missing value should be None"
        assert "required" in str(excinfo.value), "message should say required"

    def test_env_choice_lowercases(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Choices are matched case-insensitively."""
        monkeypatch.setenv("HERALD_TEST_CHOICE", "Production")
        value = env_choice(
            "HERALD_TEST_CHOICE",
            default="development",
            choices=frozenset({"development", "production"}),
        )
        assert value == "production", "expected lower-cased choice"

    def test_env_choice_rejects_unknown(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Values outside the choices raise EnvConfigError."""
        monkeypatch.setenv("HERALD_TEST_CHOICE", "staging")
        with pytest.raises(EnvConfigError, match="staging"):
            env_choice(
                "HERALD_TEST_CHOICE",
                default="development",
                choices=frozenset({"development", "production"}),
            )


class TestTimeHelpers:
    """Tests for ISO timestamp helpers."""

    def test_parse_iso_timestamp_accepts_trailing_z(self) -> None:
        """Linear's trailing ``Z`` parses as UTC."""
        parsed = parse_iso_timestamp("2025-01-15T10:00:00.000Z")
        assert parsed is not None, "expected a datetime"
        assert epoch_millis(parsed) == 1736935200000, "unexpected epoch millis"

    def test_parse_iso_timestamp_rejects_garbage(self) -> None:
        """Unparseable input yields None rather than raising."""
        assert parse_iso_timestamp("next tuesday") is None, "expected None"

    def test_format_day_keeps_unparseable_input(self) -> None:
        """format_day never loses information it cannot parse."""
        assert format_day("2025-02-01T23:59:00Z") == "2025-02-01", "wrong day"
        assert format_day("soon") == "soon", "unparseable input should pass through"
        assert format_day(None) is None, "None should stay None"
