"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of conclave.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

from types import SimpleNamespace  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import discord  # noqa: E402
import pytest  # noqa: E402

from conclave.engine.automation import AutomationEngine  # noqa: E402
from conclave.store.engine import RecordStore  # noqa: E402

LOG_CHANNEL_ID = 555000111


# ---------------------------------------------------------------------------
# Store & engine
# ---------------------------------------------------------------------------
@pytest.fixture
def store(tmp_path) -> RecordStore:
    """A freshly initialised store in a temp directory."""
    s = RecordStore(tmp_path / "db.json")
    s.initialize()
    return s


def make_text_channel(channel_id: int = LOG_CHANNEL_ID) -> MagicMock:
    """Create a mock text channel whose ``send`` is awaitable."""
    ch = MagicMock(spec=discord.TextChannel)
    ch.id = channel_id
    ch.send = AsyncMock()
    return ch


def make_client(*, ready: bool = True, channels: dict[int, object] | None = None) -> MagicMock:
    """Create a lightweight mock discord.Client."""
    client = MagicMock()
    client.is_ready.return_value = ready
    channels = channels or {}
    client.get_channel = lambda ch_id: channels.get(ch_id)
    client.fetch_channel = AsyncMock(side_effect=discord.NotFound(
        SimpleNamespace(status=404, reason="Not Found"), "Unknown Channel",
    ))
    return client


@pytest.fixture
def log_channel() -> MagicMock:
    return make_text_channel()


@pytest.fixture
def automation(store, log_channel) -> AutomationEngine:
    """Automation engine bound to a live mock client with a log channel."""
    engine = AutomationEngine(store, log_channel_id=LOG_CHANNEL_ID)
    engine.bind(make_client(channels={LOG_CHANNEL_ID: log_channel}))
    return engine


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------
def make_admin_token(sub: str = "99999", username: str = "FixtureAdmin") -> str:
    """Create an admin JWT.  Usable as both a fixture and a factory function."""
    import jwt

    from conclave.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode(
        {"sub": sub, "username": username, "is_admin": True},
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


@pytest.fixture
def admin_token():
    """Generate a valid admin JWT for use in API integration tests."""
    return make_admin_token()


@pytest.fixture
def client(store, automation):
    """FastAPI TestClient wired to the temp store and mock-bound engine."""
    from fastapi.testclient import TestClient

    from conclave.api.main import app

    app.state.store = store
    app.state.automation = automation
    yield TestClient(app, raise_server_exceptions=False)
    del app.state.store
    del app.state.automation
