"""
conclave.store.models — Snapshot & Entity Dataclasses
======================================================

The whole persisted state is one :class:`Snapshot` with four sections:

- ``applications`` — ordered list of :class:`Application`
- ``tickets``      — ordered list of :class:`Ticket`
- ``settings``     — singleton :class:`Settings`
- ``welcome``      — singleton :class:`WelcomeConfig`

On disk the document uses camelCase keys (``discordTag``, ``createdAt``,
``autoRoleName``…) so documents written by earlier deployments stay
readable.  A missing section or key loads as its default, never as an error.
"""

from __future__ import annotations

import enum
import secrets
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from conclave.constants import DEFAULT_PREFIX, ID_ALPHABET, WELCOME_PLACEHOLDER


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ApplicationStatus(enum.StrEnum):
    """Well-known application statuses.  Decisions may use other labels."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class TicketStatus(enum.StrEnum):
    OPEN = "Open"
    CLOSED = "Closed"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id(size: int, taken: Iterable[str] = ()) -> str:
    """Return a random nanoid-style token of *size* chars not in *taken*."""
    existing = set(taken)
    while True:
        candidate = "".join(secrets.choice(ID_ALPHABET) for _ in range(size))
        if candidate not in existing:
            return candidate


def _format_ts(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def _parse_ts(value: Any) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class Application:
    """A membership application submitted through the public form."""
    id: str
    name: str
    contact: str
    statement: str
    status: str = ApplicationStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    decision_by: str | None = None
    decision_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicationStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "discordTag": self.contact,
            "about": self.statement,
            "status": str(self.status),
            "createdAt": _format_ts(self.created_at),
            "decisionBy": self.decision_by,
            "decisionAt": _format_ts(self.decision_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Application:
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            contact=data.get("discordTag") or "",
            statement=data.get("about") or "",
            status=data.get("status") or ApplicationStatus.PENDING,
            created_at=_parse_ts(data.get("createdAt")) or utcnow(),
            decision_by=data.get("decisionBy"),
            decision_at=_parse_ts(data.get("decisionAt")),
        )


@dataclass(slots=True)
class Ticket:
    """A support ticket opened from chat or from the dashboard."""
    id: str
    title: str
    description: str | None = None
    requester: str | None = None      # display tag, e.g. "ada#0001"
    requester_id: str | None = None   # Discord snowflake as text
    status: str = TicketStatus.OPEN
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_open(self) -> bool:
        return self.status == TicketStatus.OPEN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "user": self.requester,
            "userId": self.requester_id,
            "status": str(self.status),
            "createdAt": _format_ts(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Ticket:
        requester_id = data.get("userId")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            description=data.get("description"),
            requester=data.get("user"),
            requester_id=str(requester_id) if requester_id is not None else None,
            status=data.get("status") or TicketStatus.OPEN,
            created_at=_parse_ts(data.get("createdAt")) or utcnow(),
        )


@dataclass(slots=True)
class Settings:
    """Bot behaviour editable from the dashboard."""
    prefix: str = DEFAULT_PREFIX
    auto_role_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"prefix": self.prefix, "autoRoleName": self.auto_role_name or ""}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Settings:
        data = data or {}
        return cls(
            prefix=data.get("prefix") or DEFAULT_PREFIX,
            auto_role_name=data.get("autoRoleName") or None,
        )


@dataclass(slots=True)
class WelcomeConfig:
    """Welcome message posted when a member joins."""
    enabled: bool = False
    channel: str | None = None
    message: str = ""

    def render(self, mention: str) -> str:
        return self.message.replace(WELCOME_PLACEHOLDER, mention)

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "channel": self.channel, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> WelcomeConfig:
        data = data or {}
        channel = data.get("channel")
        return cls(
            enabled=bool(data.get("enabled", False)),
            channel=str(channel) if channel else None,
            message=data.get("message") or "",
        )


# ---------------------------------------------------------------------------
# Snapshot — the unit of read and write
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class Snapshot:
    """Complete in-memory copy of everything the store persists."""
    applications: list[Application] = field(default_factory=list)
    tickets: list[Ticket] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    welcome: WelcomeConfig = field(default_factory=WelcomeConfig)

    def find_application(self, app_id: str) -> Application | None:
        return next((a for a in self.applications if a.id == app_id), None)

    def find_ticket(self, ticket_id: str) -> Ticket | None:
        return next((t for t in self.tickets if t.id == ticket_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "applications": [a.to_dict() for a in self.applications],
            "tickets": [t.to_dict() for t in self.tickets],
            "settings": self.settings.to_dict(),
            "welcome": self.welcome.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Snapshot:
        data = data or {}
        return cls(
            applications=[Application.from_dict(a) for a in data.get("applications") or []],
            tickets=[Ticket.from_dict(t) for t in data.get("tickets") or []],
            settings=Settings.from_dict(data.get("settings")),
            welcome=WelcomeConfig.from_dict(data.get("welcome")),
        )
