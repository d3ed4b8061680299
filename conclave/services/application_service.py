"""
conclave.services.application_service — Membership Applications
=================================================================

Every function performs one read → mutate → write against the
:class:`~conclave.store.engine.RecordStore` it is given.  They are
synchronous; async callers go through :func:`~conclave.store.engine.run_store`.

Status only moves forward: ``Pending`` → any decision label.  Replaying a
decision on an already-decided application raises
:class:`~conclave.errors.InvalidTransition` instead of silently succeeding.
"""

from __future__ import annotations

import logging

from conclave.constants import APPLICATION_ID_SIZE
from conclave.errors import InvalidArgument, InvalidTransition, NotFound
from conclave.store.engine import RecordStore
from conclave.store.models import Application, ApplicationStatus, new_id, utcnow

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_applications(store: RecordStore, status: str | None = None) -> list[Application]:
    """All applications in submission order, optionally filtered by *status*."""
    apps = store.read().applications
    if status:
        apps = [a for a in apps if a.status == status]
    return apps


def get_application(store: RecordStore, app_id: str) -> Application:
    app = store.read().find_application(app_id)
    if app is None:
        raise NotFound("Application", app_id)
    return app


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def submit_application(
    store: RecordStore,
    *,
    name: str,
    contact: str,
    statement: str,
) -> Application:
    """Persist a new ``Pending`` application.  Content is never rejected."""
    snapshot = store.read()
    app = Application(
        id=new_id(APPLICATION_ID_SIZE, (a.id for a in snapshot.applications)),
        name=name,
        contact=contact,
        statement=statement,
    )
    snapshot.applications.append(app)
    store.write(snapshot)
    logger.info("Application %s submitted by %s", app.id, app.name or app.contact)
    return app


def decide_application(
    store: RecordStore,
    app_id: str,
    *,
    decision: str,
    actor: str,
) -> Application:
    """Record *decision* on a pending application.

    Raises
    ------
    NotFound
        If *app_id* does not exist.
    InvalidArgument
        If *decision* is blank or ``Pending``.
    InvalidTransition
        If the application was already decided.
    """
    label = (decision or "").strip()
    if not label or label == ApplicationStatus.PENDING:
        raise InvalidArgument(f"Invalid decision: {decision!r}")

    snapshot = store.read()
    app = snapshot.find_application(app_id)
    if app is None:
        raise NotFound("Application", app_id)
    if not app.is_pending:
        raise InvalidTransition(
            f"Application {app_id} is already {app.status}"
        )

    app.status = label
    app.decision_by = actor
    app.decision_at = utcnow()
    store.write(snapshot)
    logger.info("Application %s marked %s by %s", app.id, label, actor)
    return app
