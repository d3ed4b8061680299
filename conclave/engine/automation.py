"""
conclave.engine.automation — Join Rules & Lifecycle Notifications
==================================================================

Turns lifecycle events into chat-platform side effects, no matter which
front end caused them:

- **member join** → two independent rules, auto-role and welcome message.
  Each rule has its own :func:`~conclave.engine.effects.best_effort`
  boundary, so a failed role grant never stops the welcome message.
- **application submitted / decided, ticket opened** → persist first, then
  post to the log channel if one is configured and the bot is connected.

State changes are never rolled back or delayed by a failed notification.
The engine holds no state of its own; every decision reads the store.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import discord
from discord.abc import Messageable

from conclave.engine.effects import EffectResult, best_effort
from conclave.services import application_service, ticket_service
from conclave.services.embeds import build_decision_embed, build_new_application_embed
from conclave.store.engine import RecordStore, run_store
from conclave.store.models import Application, Snapshot, Ticket

logger = logging.getLogger(__name__)

JoinRule = Callable[[discord.Member, Snapshot], Awaitable[EffectResult | None]]


async def _resolve_text_channel(
    lookup: Any,
    channel_id: int | str,
) -> Messageable:
    """Find *channel_id* via ``get_channel`` then ``fetch_channel``.

    *lookup* is a :class:`discord.Client` or :class:`discord.Guild`.
    Raises if the id is malformed, unknown, or not a text-capable channel.
    """
    snowflake = int(channel_id)
    channel = lookup.get_channel(snowflake) or await lookup.fetch_channel(snowflake)
    if not isinstance(channel, Messageable):
        raise LookupError(f"Channel {snowflake} is not a text channel")
    return channel


class AutomationEngine:
    """Bridges store mutations and gateway events to chat side effects.

    Parameters
    ----------
    store:
        The shared :class:`RecordStore`.
    log_channel_id:
        Channel that receives application and ticket logs, or ``None``.
    """

    def __init__(self, store: RecordStore, *, log_channel_id: int | None = None) -> None:
        self.store = store
        self.log_channel_id = log_channel_id
        self.client: discord.Client | None = None
        self.join_rules: list[JoinRule] = [self._auto_role_rule, self._welcome_rule]

    def bind(self, client: discord.Client) -> None:
        """Attach the chat connection used for log-channel sends."""
        self.client = client

    @property
    def is_live(self) -> bool:
        return self.client is not None and self.client.is_ready()

    # -----------------------------------------------------------------------
    # Member join
    # -----------------------------------------------------------------------
    async def member_joined(self, member: discord.Member) -> list[EffectResult]:
        """Run every join rule against one fresh snapshot."""
        snapshot = await run_store(self.store.read)
        results: list[EffectResult] = []
        for rule in self.join_rules:
            result = await rule(member, snapshot)
            if result is not None:
                results.append(result)
        return results

    async def _auto_role_rule(
        self, member: discord.Member, snapshot: Snapshot,
    ) -> EffectResult | None:
        role_name = snapshot.settings.auto_role_name
        if not role_name:
            return None
        role = discord.utils.get(member.guild.roles, name=role_name)
        if role is None:
            logger.debug("Auto-role %r not found in guild %s", role_name, member.guild.id)
            return None
        return await best_effort(
            "auto_role",
            member.add_roles(role, reason="Conclave: auto-role on join"),
        )

    async def _welcome_rule(
        self, member: discord.Member, snapshot: Snapshot,
    ) -> EffectResult | None:
        welcome = snapshot.welcome
        if not welcome.enabled or not welcome.channel:
            return None

        async def _send() -> None:
            channel = await _resolve_text_channel(member.guild, welcome.channel)
            await channel.send(welcome.render(member.mention))

        return await best_effort("welcome_message", _send())

    # -----------------------------------------------------------------------
    # Log channel
    # -----------------------------------------------------------------------
    async def _log(self, name: str, **send_kwargs: Any) -> EffectResult | None:
        """Post to the log channel.  ``None`` when there is nowhere to post."""
        if self.log_channel_id is None:
            return None
        if not self.is_live:
            logger.debug("Chat connection not ready — skipping %s", name)
            return None

        async def _send() -> None:
            channel = await _resolve_text_channel(self.client, self.log_channel_id)
            await channel.send(**send_kwargs)

        return await best_effort(name, _send())

    async def application_submitted(self, app: Application) -> EffectResult | None:
        return await self._log(
            "application_submitted_log", embed=build_new_application_embed(app),
        )

    async def application_decided(self, app: Application) -> EffectResult | None:
        return await self._log(
            "application_decided_log", embed=build_decision_embed(app),
        )

    async def ticket_opened(self, ticket: Ticket) -> EffectResult | None:
        opener = f"<@{ticket.requester_id}>" if ticket.requester_id else (
            ticket.requester or "dashboard"
        )
        return await self._log(
            "ticket_opened_log",
            content=f"New ticket {ticket.id} by {opener} — {ticket.title}",
        )

    # -----------------------------------------------------------------------
    # Persist-then-notify entry points (dashboard + public intake)
    # -----------------------------------------------------------------------
    async def submit_application(
        self, *, name: str, contact: str, statement: str,
    ) -> Application:
        app = await run_store(
            application_service.submit_application,
            self.store,
            name=name,
            contact=contact,
            statement=statement,
        )
        await self.application_submitted(app)
        return app

    async def decide_application(
        self, app_id: str, *, decision: str, actor: str,
    ) -> Application:
        app = await run_store(
            application_service.decide_application,
            self.store,
            app_id,
            decision=decision,
            actor=actor,
        )
        await self.application_decided(app)
        return app

    async def open_ticket(
        self,
        *,
        title: str,
        description: str | None = None,
        requester: str | None = None,
        requester_id: str | None = None,
    ) -> Ticket:
        ticket = await run_store(
            ticket_service.create_ticket,
            self.store,
            title=title,
            description=description,
            requester=requester,
            requester_id=requester_id,
        )
        await self.ticket_opened(ticket)
        return ticket
