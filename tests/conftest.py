"""Shared pytest fixtures for the test suite."""

import logging

import pytest

from tank.lib.alerts import AlertEngine
from tank.lib.config.testing import clear_settings
from tank.lib.state import TelemetryState

# 2024-06-15 12:00:00 UTC
FROZEN_NOW_MS = 1_718_452_800_000


class RecordingDispatcher:
    """Dispatcher double that records messages instead of sending them."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def dispatch(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture(autouse=True)
def configure_caplog(caplog):
    """Ensure caplog captures logs from the tank namespace."""
    caplog.set_level(logging.DEBUG, logger="tank")


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset global settings after each test to avoid cross-test pollution."""
    yield
    clear_settings()


@pytest.fixture
def now():
    """Return a fixed epoch time in milliseconds for deterministic tests."""
    return FROZEN_NOW_MS


@pytest.fixture
def alert_engine():
    """Create an alert engine with low=10, high=90 and a one minute cooldown."""
    return AlertEngine(low_threshold=10, high_threshold=90, cooldown_ms=60_000)


@pytest.fixture
def telemetry(alert_engine):
    """Create a fresh telemetry state."""
    return TelemetryState(alert_engine)


@pytest.fixture
def dispatcher():
    """Create a dispatcher that records messages."""
    return RecordingDispatcher()
