"""
conclave.api.routes.admin — Dashboard endpoints (admin JWT required)
=====================================================================

Reads go straight to the record store.  Mutations that the chat side must
hear about (decisions, new tickets) go through the automation engine so
the same log-channel notifications fire as for chat-triggered changes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from conclave.api.deps import AutomationDep, CurrentAdmin, StoreDep, admin_name
from conclave.api.schemas import (
    DecisionBody,
    SettingsUpdate,
    TicketCreate,
    WelcomeUpdate,
    application_dict,
    settings_dict,
    ticket_dict,
    welcome_dict,
)
from conclave.errors import InvalidArgument, InvalidTransition, NotFound
from conclave.services import application_service, settings_service, ticket_service
from conclave.store.engine import run_store

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------
@router.get("/dashboard")
async def dashboard(admin: CurrentAdmin, store: StoreDep):
    """Everything the dashboard home page shows, from one snapshot."""
    snapshot = await run_store(store.read)
    return {
        "applications": [application_dict(a) for a in snapshot.applications],
        "tickets": [ticket_dict(t) for t in snapshot.tickets],
        "settings": settings_dict(snapshot.settings),
        "welcome": welcome_dict(snapshot.welcome),
    }


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------
@router.get("/applications")
async def list_applications(
    admin: CurrentAdmin,
    store: StoreDep,
    status_filter: str | None = Query(None, alias="status"),
):
    apps = await run_store(application_service.list_applications, store, status_filter)
    return {"applications": [application_dict(a) for a in apps]}


@router.get("/applications/{app_id}")
async def get_application(app_id: str, admin: CurrentAdmin, store: StoreDep):
    try:
        app = await run_store(application_service.get_application, store, app_id)
    except NotFound as exc:
        raise HTTPException(404, str(exc))
    return application_dict(app)


@router.post("/applications/{app_id}/decision")
async def decide_application(
    app_id: str,
    body: DecisionBody,
    admin: CurrentAdmin,
    automation: AutomationDep,
):
    try:
        app = await automation.decide_application(
            app_id, decision=body.decision, actor=admin_name(admin),
        )
    except NotFound as exc:
        raise HTTPException(404, str(exc))
    except InvalidTransition as exc:
        logger.info("Decision on %s refused: %s", app_id, exc)
        raise HTTPException(409, str(exc))
    except InvalidArgument as exc:
        raise HTTPException(400, str(exc))
    logger.info("Application %s decided %s by %s", app.id, app.status, admin_name(admin))
    return application_dict(app)


# ---------------------------------------------------------------------------
# Tickets
# ---------------------------------------------------------------------------
@router.get("/tickets")
async def list_tickets(
    admin: CurrentAdmin,
    store: StoreDep,
    status_filter: str | None = Query(None, alias="status"),
):
    tickets = await run_store(ticket_service.list_tickets, store, status_filter)
    return {"tickets": [ticket_dict(t) for t in tickets]}


@router.post("/tickets", status_code=status.HTTP_201_CREATED)
async def create_ticket(body: TicketCreate, admin: CurrentAdmin, automation: AutomationDep):
    ticket = await automation.open_ticket(
        title=body.title,
        description=body.description,
        requester=admin_name(admin),
    )
    logger.info("Dashboard ticket %s opened by %s", ticket.id, admin_name(admin))
    return ticket_dict(ticket)


@router.get("/tickets/{ticket_id}")
async def get_ticket(ticket_id: str, admin: CurrentAdmin, store: StoreDep):
    try:
        ticket = await run_store(ticket_service.get_ticket, store, ticket_id)
    except NotFound as exc:
        raise HTTPException(404, str(exc))
    return ticket_dict(ticket)


@router.post("/tickets/{ticket_id}/close")
async def close_ticket(ticket_id: str, admin: CurrentAdmin, store: StoreDep):
    try:
        ticket = await run_store(ticket_service.close_ticket, store, ticket_id)
    except NotFound as exc:
        raise HTTPException(404, str(exc))
    logger.info("Ticket %s closed from dashboard by %s", ticket.id, admin_name(admin))
    return ticket_dict(ticket)


# ---------------------------------------------------------------------------
# Settings & welcome
# ---------------------------------------------------------------------------
@router.get("/settings")
async def get_settings(admin: CurrentAdmin, store: StoreDep):
    return settings_dict(await run_store(settings_service.get_settings, store))


@router.put("/settings")
async def update_settings(body: SettingsUpdate, admin: CurrentAdmin, store: StoreDep):
    settings = await run_store(
        settings_service.update_settings,
        store,
        prefix=body.prefix,
        auto_role_name=body.auto_role_name,
    )
    logger.info("Settings changed from dashboard by %s", admin_name(admin))
    return settings_dict(settings)


@router.get("/welcome")
async def get_welcome(admin: CurrentAdmin, store: StoreDep):
    return welcome_dict(await run_store(settings_service.get_welcome, store))


@router.put("/welcome")
async def update_welcome(body: WelcomeUpdate, admin: CurrentAdmin, store: StoreDep):
    welcome = await run_store(
        settings_service.update_welcome,
        store,
        enabled=body.enabled,
        channel=body.channel,
        message=body.message,
    )
    logger.info("Welcome config changed from dashboard by %s", admin_name(admin))
    return welcome_dict(welcome)
