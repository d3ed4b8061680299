"""
conclave.api.schemas — Request bodies & response shaping
=========================================================
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from conclave.store.models import Application, Settings, Ticket, WelcomeConfig


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------
class ApplicationSubmit(BaseModel):
    name: str
    contact: str
    statement: str


class DecisionBody(BaseModel):
    decision: str = Field(min_length=1)


class TicketCreate(BaseModel):
    title: str = ""
    description: str | None = None


class SettingsUpdate(BaseModel):
    prefix: str | None = None
    auto_role_name: str | None = None


class WelcomeUpdate(BaseModel):
    enabled: bool = False
    channel: str | None = None
    message: str = ""


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
def _iso(value) -> str | None:
    return value.isoformat() if value else None


def application_dict(app: Application) -> dict:
    return {
        "id": app.id,
        "name": app.name,
        "contact": app.contact,
        "statement": app.statement,
        "status": str(app.status),
        "created_at": _iso(app.created_at),
        "decision_by": app.decision_by,
        "decision_at": _iso(app.decision_at),
    }


def application_status_dict(app: Application) -> dict:
    """Public view — no personal details."""
    return {
        "id": app.id,
        "status": str(app.status),
        "decision_by": app.decision_by,
        "decision_at": _iso(app.decision_at),
    }


def ticket_dict(ticket: Ticket) -> dict:
    return {
        "id": ticket.id,
        "title": ticket.title,
        "description": ticket.description,
        "requester": ticket.requester,
        "requester_id": ticket.requester_id,
        "status": str(ticket.status),
        "created_at": _iso(ticket.created_at),
    }


def settings_dict(settings: Settings) -> dict:
    return {"prefix": settings.prefix, "auto_role_name": settings.auto_role_name}


def welcome_dict(welcome: WelcomeConfig) -> dict:
    return {
        "enabled": welcome.enabled,
        "channel": welcome.channel,
        "message": welcome.message,
    }
