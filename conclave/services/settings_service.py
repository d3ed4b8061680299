"""
conclave.services.settings_service — Prefix, Auto-Role & Welcome
=================================================================

Both singletons always exist: a fresh store reads as prefix ``!``, no
auto-role, welcome disabled.
"""

from __future__ import annotations

import logging

from conclave.constants import DEFAULT_PREFIX
from conclave.store.engine import RecordStore
from conclave.store.models import Settings, WelcomeConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_settings(store: RecordStore) -> Settings:
    return store.read().settings


def get_welcome(store: RecordStore) -> WelcomeConfig:
    return store.read().welcome


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def update_settings(
    store: RecordStore,
    *,
    prefix: str | None,
    auto_role_name: str | None,
) -> Settings:
    """Replace both settings.  Blank values fall back to their defaults."""
    snapshot = store.read()
    snapshot.settings = Settings(
        prefix=(prefix or "").strip() or DEFAULT_PREFIX,
        auto_role_name=(auto_role_name or "").strip() or None,
    )
    store.write(snapshot)
    logger.info(
        "Settings updated: prefix=%r auto_role=%r",
        snapshot.settings.prefix, snapshot.settings.auto_role_name,
    )
    return snapshot.settings


def update_welcome(
    store: RecordStore,
    *,
    enabled: bool,
    channel: str | None,
    message: str | None,
) -> WelcomeConfig:
    """Replace the welcome configuration wholesale."""
    snapshot = store.read()
    snapshot.welcome = WelcomeConfig(
        enabled=enabled,
        channel=(channel or "").strip() or None,
        message=message or "",
    )
    store.write(snapshot)
    logger.info(
        "Welcome config updated: enabled=%s channel=%s",
        snapshot.welcome.enabled, snapshot.welcome.channel,
    )
    return snapshot.welcome
