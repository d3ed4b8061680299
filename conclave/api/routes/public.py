"""
conclave.api.routes.public — Unauthenticated endpoints
=======================================================

- ``POST /applications`` — public application intake (always creates a
  ``Pending`` record; fields must be present, content is not judged).
- ``GET /applications/{id}/status`` — read-only status lookup by id.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from conclave.api.deps import AutomationDep, StoreDep
from conclave.api.schemas import (
    ApplicationSubmit,
    application_dict,
    application_status_dict,
)
from conclave.errors import NotFound
from conclave.services import application_service
from conclave.store.engine import run_store

router = APIRouter(tags=["public"])
logger = logging.getLogger(__name__)


@router.post("/applications", status_code=status.HTTP_201_CREATED)
async def submit_application(body: ApplicationSubmit, automation: AutomationDep):
    app = await automation.submit_application(
        name=body.name,
        contact=body.contact,
        statement=body.statement,
    )
    logger.info("Public application %s received", app.id)
    return application_dict(app)


@router.get("/applications/{app_id}/status")
async def application_status(app_id: str, store: StoreDep):
    try:
        app = await run_store(application_service.get_application, store, app_id)
    except NotFound:
        raise HTTPException(404, "Not found")
    return application_status_dict(app)
