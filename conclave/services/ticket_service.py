"""
conclave.services.ticket_service — Support Tickets
===================================================

Tickets are opened from chat (``createticket``) or from the dashboard and
only ever move ``Open`` → ``Closed``.
"""

from __future__ import annotations

import logging

from conclave.constants import NO_TITLE, TICKET_ID_SIZE
from conclave.errors import NotFound
from conclave.store.engine import RecordStore
from conclave.store.models import Ticket, TicketStatus, new_id

logger = logging.getLogger(__name__)


def list_tickets(store: RecordStore, status: str | None = None) -> list[Ticket]:
    tickets = store.read().tickets
    if status:
        tickets = [t for t in tickets if t.status == status]
    return tickets


def get_ticket(store: RecordStore, ticket_id: str) -> Ticket:
    ticket = store.read().find_ticket(ticket_id)
    if ticket is None:
        raise NotFound("Ticket", ticket_id)
    return ticket


def create_ticket(
    store: RecordStore,
    *,
    title: str,
    description: str | None = None,
    requester: str | None = None,
    requester_id: str | None = None,
) -> Ticket:
    """Persist a new ``Open`` ticket.  A blank title becomes ``No title``."""
    snapshot = store.read()
    ticket = Ticket(
        id=new_id(TICKET_ID_SIZE, (t.id for t in snapshot.tickets)),
        title=title.strip() or NO_TITLE,
        description=description or None,
        requester=requester,
        requester_id=requester_id,
    )
    snapshot.tickets.append(ticket)
    store.write(snapshot)
    logger.info("Ticket %s opened by %s: %s", ticket.id, requester or "dashboard", ticket.title)
    return ticket


def close_ticket(store: RecordStore, ticket_id: str) -> Ticket:
    """Close a ticket.  Closing a closed ticket changes nothing."""
    snapshot = store.read()
    ticket = snapshot.find_ticket(ticket_id)
    if ticket is None:
        raise NotFound("Ticket", ticket_id)
    if ticket.status == TicketStatus.CLOSED:
        return ticket

    ticket.status = TicketStatus.CLOSED
    store.write(snapshot)
    logger.info("Ticket %s closed", ticket.id)
    return ticket
