"""
conclave.api.auth — Discord OAuth2 + JWT issuance
==================================================

Only members holding ``admin_role_id`` in the managed guild get a
dashboard token.  OAuth ``state`` values are one-time and short-lived; they
are kept in process memory because the single Conclave process serves both
the redirect and the callback.
"""

from __future__ import annotations

import logging
import os
import secrets
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode

import httpx
import jwt
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from conclave.api.deps import (
    JWT_ALGORITHM,
    JWT_SECRET,
    CurrentAdmin,
    get_config,
)
from conclave.config import ConclaveConfig

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])

DISCORD_API = "https://discord.com/api/v10"
OAUTH_SCOPE = "identify guilds.members.read"
OAUTH_STATE_TTL_SECONDS = 600
TOKEN_TTL_HOURS = 12

# state token → issued at
_pending_states: dict[str, datetime] = {}


def _oauth_env() -> tuple[str, str, str, str]:
    """Return required OAuth env vars or raise a clear 500."""
    client_id = os.getenv("DISCORD_CLIENT_ID", "").strip()
    client_secret = os.getenv("DISCORD_CLIENT_SECRET", "").strip()
    redirect_uri = os.getenv("DISCORD_REDIRECT_URI", "").strip()
    frontend_url = os.getenv("FRONTEND_URL", "").strip()

    missing = [
        name
        for name, value in (
            ("DISCORD_CLIENT_ID", client_id),
            ("DISCORD_CLIENT_SECRET", client_secret),
            ("DISCORD_REDIRECT_URI", redirect_uri),
            ("FRONTEND_URL", frontend_url),
        )
        if not value
    ]
    if missing:
        raise HTTPException(
            status_code=500,
            detail="Discord OAuth is not configured: missing " + ", ".join(missing),
        )

    return client_id, client_secret, redirect_uri, frontend_url


def _prune_states(now: datetime) -> None:
    cutoff = now - timedelta(seconds=OAUTH_STATE_TTL_SECONDS)
    for state, issued in list(_pending_states.items()):
        if issued < cutoff:
            del _pending_states[state]


def issue_state() -> str:
    """Create and remember a one-time OAuth state token."""
    now = datetime.now(UTC)
    _prune_states(now)
    state = secrets.token_urlsafe(32)
    _pending_states[state] = now
    return state


def consume_state(state: str) -> bool:
    """Consume a one-time OAuth state token if valid and unexpired."""
    _prune_states(datetime.now(UTC))
    return _pending_states.pop(state, None) is not None


def issue_admin_token(user_id: str, username: str, avatar: str | None = None) -> str:
    payload = {
        "sub": user_id,
        "username": username,
        "avatar": avatar,
        "is_admin": True,
        "exp": datetime.now(UTC) + timedelta(hours=TOKEN_TTL_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


@router.get("/login")
async def login():
    """Redirect to Discord OAuth2 consent screen."""
    client_id, _, redirect_uri, _ = _oauth_env()
    query = urlencode(
        {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": OAUTH_SCOPE,
            "state": issue_state(),
        }
    )
    return RedirectResponse(f"https://discord.com/oauth2/authorize?{query}")


@router.get("/callback")
async def callback(
    code: str,
    state: str,
    cfg: ConclaveConfig = Depends(get_config),
):
    """Exchange OAuth code for JWT."""
    client_id, client_secret, redirect_uri, frontend_url = _oauth_env()

    if not consume_state(state):
        raise HTTPException(400, "Invalid or expired OAuth state")

    transport = httpx.AsyncHTTPTransport(retries=1)
    async with httpx.AsyncClient(timeout=10, transport=transport) as client:
        token_resp = await client.post(
            f"{DISCORD_API}/oauth2/token",
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": client_id,
                "client_secret": client_secret,
                "scope": OAUTH_SCOPE,
            },
        )
        if token_resp.status_code != 200:
            raise HTTPException(400, "OAuth token exchange failed")

        access_token = token_resp.json().get("access_token")
        if not access_token:
            raise HTTPException(400, "No access token returned")

        headers = {"Authorization": f"Bearer {access_token}"}
        user_resp = await client.get(f"{DISCORD_API}/users/@me", headers=headers)
        member_resp = await client.get(
            f"{DISCORD_API}/users/@me/guilds/{cfg.guild_id}/member",
            headers=headers,
        )

    if user_resp.status_code != 200:
        raise HTTPException(400, "Failed to fetch Discord user")

    user_info = user_resp.json()

    has_admin = False
    if member_resp.status_code == 200:
        role_ids = [int(r) for r in member_resp.json().get("roles", [])]
        has_admin = cfg.admin_role_id in role_ids

    if not has_admin:
        logger.info("Dashboard login refused for %s (no admin role)", user_info.get("id"))
        return RedirectResponse(f"{frontend_url}?auth_error=not_admin")

    token = issue_admin_token(
        user_info["id"],
        user_info.get("username", "Unknown"),
        user_info.get("avatar"),
    )
    logger.info("Dashboard login for %s", user_info.get("username"))
    return RedirectResponse(f"{frontend_url}/auth/callback?token={token}")


@router.get("/me")
async def me(admin: CurrentAdmin):
    """Return the current authenticated admin's info."""
    return {
        "id": admin["sub"],
        "username": admin.get("username", "Unknown"),
        "avatar": admin.get("avatar"),
        "is_admin": True,
    }
