"""
conclave.api.deps — FastAPI dependency injection
=================================================

The record store and automation engine are created once by the entry
point and parked on ``app.state``; routes receive them through
:func:`get_store` and :func:`get_automation` rather than a module global.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, Request, status
from jwt.exceptions import InvalidTokenError

from conclave.config import ConclaveConfig, load_config
from conclave.engine.automation import AutomationEngine
from conclave.store.engine import RecordStore

_WEAK_SECRETS = frozenset({
    "conclave-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_config() -> ConclaveConfig:
    return load_config()


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_automation(request: Request) -> AutomationEngine:
    return request.app.state.automation


def get_current_admin(
    authorization: Annotated[str | None, Header()] = None,
) -> dict:
    """Validate JWT and return admin user payload. Raises 401 if invalid."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    if not payload.get("is_admin"):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not admin")
    return payload


def admin_name(admin: dict) -> str:
    """Display name recorded as the actor of dashboard decisions."""
    return admin.get("username") or str(admin.get("sub", "admin"))


CurrentAdmin = Annotated[dict, Depends(get_current_admin)]
StoreDep = Annotated[RecordStore, Depends(get_store)]
AutomationDep = Annotated[AutomationEngine, Depends(get_automation)]
