"""Pytest configuration and shared fixtures for picklist tests."""

import asyncio
from unittest.mock import MagicMock

import pytest


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Point settings and log locations at a per-test temp dir."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("PICKLIST_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("PICKLIST_LOG_FILE", raising=False)
    monkeypatch.delenv("PICKLIST_LOG_LEVEL", raising=False)
    return tmp_path


# ---------------------------------------------------------------------------
# Data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fruits():
    return ["Apple", "Orange", "Banana"]


# ---------------------------------------------------------------------------
# Key events
# ---------------------------------------------------------------------------

def make_key(key):
    """Key event double with the stop/prevent_default surface of textual.events.Key."""
    event = MagicMock()
    event.key = key
    return event


@pytest.fixture
def key():
    return make_key


# ---------------------------------------------------------------------------
# Async operation doubles
# ---------------------------------------------------------------------------

class GatedFetch:
    """Fetch operation that resolves only when release() is called.

    Each instance is a distinct operation reference; calls counts invocations.
    """

    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.calls = 0
        self._gate = asyncio.Event()

    def release(self):
        self._gate.set()

    async def __call__(self):
        self.calls += 1
        await self._gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.data)


async def settle(ticks=5):
    """Yield to the event loop a few times so ready tasks run to completion."""
    for _ in range(ticks):
        await asyncio.sleep(0)


@pytest.fixture
def gated():
    return GatedFetch
