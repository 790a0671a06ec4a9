"""Environment variable parsing shared by the configuration dataclasses.

Every parser reads one variable, falls back to a default when the variable
is unset or blank, and raises :class:`EnvConfigError` naming the variable
when the value is present but unusable.
"""

from __future__ import annotations

import os

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class EnvConfigError(ValueError):
    """Raised when an environment variable holds an invalid value.

    Attributes
    ----------
    name
        Name of the offending environment variable.
    value
        Raw value read from the environment.

    """

    def __init__(self, message: str, *, name: str, value: str | None) -> None:
        """Initialise the error with the offending variable name and value."""
        self.name = name
        self.value = value
        super().__init__(message)

    @classmethod
    def invalid(cls, name: str, value: str, expectation: str) -> EnvConfigError:
        """Create error for a value that does not meet ``expectation``.

        Parameters
        ----------
        name
            Environment variable name.
        value
            Raw value that failed validation.
        expectation
            Human-readable description of accepted values.

        Returns
        -------
        EnvConfigError
            Error describing the rejected value.

        """
        msg = f"{name}={value!r} is invalid: expected {expectation}"
        return cls(msg, name=name, value=value)

    @classmethod
    def missing(cls, name: str) -> EnvConfigError:
        """Create error for a required variable that is not set."""
        msg = f"{name} is required but not set"
        return cls(msg, name=name, value=None)


def _read(name: str) -> str | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def env_str(name: str, default: str) -> str:
    """Return the stripped value of ``name`` or ``default``."""
    raw = _read(name)
    return default if raw is None else raw


def env_required(name: str) -> str:
    """Return the stripped value of ``name``.

    Raises
    ------
    EnvConfigError
        If the variable is unset or blank.

    """
    raw = _read(name)
    if raw is None:
        raise EnvConfigError.missing(name)
    return raw


def env_bool(name: str, *, default: bool) -> bool:
    """Parse a boolean flag such as ``true``/``false`` or ``1``/``0``.

    Raises
    ------
    EnvConfigError
        If the value is not a recognised boolean spelling.

    """
    raw = _read(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise EnvConfigError.invalid(name, raw, "a boolean (true/false)")


def env_int(name: str, *, default: int, minimum: int, maximum: int) -> int:
    """Parse an integer constrained to ``minimum..maximum`` inclusive.

    Parameters
    ----------
    name
        Environment variable name.
    default
        Value returned when the variable is unset.
    minimum
        Smallest accepted value.
    maximum
        Largest accepted value.

    Returns
    -------
    int
        The parsed value or ``default``.

    Raises
    ------
    EnvConfigError
        If the value is not an integer or falls outside the range.

    """
    raw = _read(name)
    if raw is None:
        return default
    expectation = f"an integer between {minimum} and {maximum}"
    try:
        value = int(raw)
    except ValueError as exc:
        raise EnvConfigError.invalid(name, raw, expectation) from exc
    if not minimum <= value <= maximum:
        raise EnvConfigError.invalid(name, raw, expectation)
    return value


def env_choice(name: str, *, default: str, choices: frozenset[str]) -> str:
    """Parse a case-insensitive value restricted to ``choices``."""
    raw = _read(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered not in choices:
        raise EnvConfigError.invalid(name, raw, f"one of {sorted(choices)}")
    return lowered


__all__ = [
    "EnvConfigError",
    "env_bool",
    "env_choice",
    "env_int",
    "env_required",
    "env_str",
]
