"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import os

import pytest

from tests.helpers.discord_sink import FakeClock, RecordedSleep

TEST_WEBHOOK_SECRET = "linear-test-secret"  # noqa: S105 - test fixture value


@pytest.fixture(autouse=True)
def _isolate_herald_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Hide any ``HERALD_*`` variables set in the developer's shell."""
    for name in list(os.environ):
        if name.startswith("HERALD_"):
            monkeypatch.delenv(name)


@pytest.fixture
def webhook_secret() -> str:
    """Return the shared secret used to sign test webhooks."""
    return TEST_WEBHOOK_SECRET


@pytest.fixture
def fake_clock() -> FakeClock:
    """Return a fake epoch clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def recorded_sleep(fake_clock: FakeClock) -> RecordedSleep:
    """Return a sleep that records delays and advances ``fake_clock``."""
    return RecordedSleep(fake_clock)
