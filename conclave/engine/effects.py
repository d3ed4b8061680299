"""
conclave.engine.effects — Best-effort side effects
===================================================

Chat-platform side effects triggered by automation (role grants, welcome
messages, log-channel notifications) must never block or roll back the
state change that caused them.  Instead of sprinkling ``try/except`` around
every send, they all pass through :func:`best_effort`, the one place where
failures are logged and discarded.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

from conclave.errors import NotificationFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EffectResult:
    """Outcome of one best-effort side effect."""
    name: str
    ok: bool
    error: NotificationFailure | None = None


async def best_effort(name: str, action: Awaitable[Any]) -> EffectResult:
    """Await *action*; on failure log a :class:`NotificationFailure` and move on."""
    try:
        await action
    except Exception as exc:
        failure = NotificationFailure(name, exc)
        logger.warning("Best-effort %s discarded: %s", name, failure)
        return EffectResult(name=name, ok=False, error=failure)
    logger.debug("Best-effort %s delivered", name)
    return EffectResult(name=name, ok=True)
