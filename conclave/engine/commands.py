"""
conclave.engine.commands — Prefix Command Dispatcher
=====================================================

Maps prefixed chat text to moderation actions.

Pipeline:
1. Gate: ignore bot authors (including ourselves) and messages outside a guild.
2. Read the prefix from the store; ignore text that does not start with it.
3. Tokenize on whitespace (no quoting) → ``(command, args)``.
4. Look the command up in :data:`COMMANDS`.  Unknown commands are ignored
   silently so a stray ``!`` never produces a noisy reply.
5. Check the command's declared capability and mention arity, then run its
   handler.  :class:`PermissionDenied` / :class:`InvalidArgument` raised by
   the checks become a direct reply in exactly one place.

Every side effect performed is returned as an :class:`Effect`, which keeps
the dispatcher testable without a gateway connection.  Replies to the
sender go through :func:`~conclave.engine.effects.best_effort`; a reply the
platform refuses is reported as a failed ``REPLY`` effect and the remaining
effects (such as the ticket log line) still run.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import discord

from conclave.constants import (
    NO_REASON,
    NO_TITLE,
    REPLY_BANNED,
    REPLY_FAILED,
    REPLY_KICKED,
    REPLY_MENTION_USER,
    REPLY_NO_PERMISSION,
)
from conclave.engine.effects import best_effort
from conclave.errors import InvalidArgument, PermissionDenied
from conclave.services import ticket_service
from conclave.store.engine import RecordStore, run_store

if TYPE_CHECKING:
    from conclave.engine.automation import AutomationEngine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Capabilities & command table
# ---------------------------------------------------------------------------
class Capability(enum.StrEnum):
    """Permissions a sender may hold, derived from Discord guild permissions."""
    BAN_MEMBERS = "ban_members"
    KICK_MEMBERS = "kick_members"


class CommandName(enum.StrEnum):
    CREATE_TICKET = "createticket"
    BAN = "ban"
    KICK = "kick"


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """What a command needs before its handler may run."""
    name: CommandName
    capability: Capability | None = None
    needs_mention: bool = False


COMMANDS: dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(CommandName.CREATE_TICKET),
        CommandSpec(CommandName.BAN, Capability.BAN_MEMBERS, needs_mention=True),
        CommandSpec(CommandName.KICK, Capability.KICK_MEMBERS, needs_mention=True),
    )
}


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    spec: CommandSpec
    args: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        """All arguments joined back together (e.g. a ticket title)."""
        return " ".join(self.args)

    @property
    def reason(self) -> str:
        """Arguments after the mention token, or the default reason."""
        return " ".join(self.args[1:]) or NO_REASON


def parse_command(content: str, prefix: str) -> ParsedCommand | None:
    """Return the recognised command in *content*, or ``None``."""
    if not prefix or not content.startswith(prefix):
        return None
    tokens = content[len(prefix):].split()
    if not tokens:
        return None
    spec = COMMANDS.get(tokens[0].lower())
    if spec is None:
        return None
    return ParsedCommand(spec=spec, args=tuple(tokens[1:]))


# ---------------------------------------------------------------------------
# Inbound message & effects
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class InboundMessage:
    """Platform-neutral view of a chat message."""
    author_id: int
    author_tag: str
    author_is_bot: bool
    guild_id: int | None
    content: str
    reply: Callable[[str], Awaitable[Any]]
    capabilities: frozenset[Capability] = frozenset()
    mentions: list[Any] = field(default_factory=list)

    @classmethod
    def from_discord(cls, message: discord.Message) -> InboundMessage:
        author = message.author
        perms = getattr(author, "guild_permissions", None)
        capabilities: set[Capability] = set()
        if perms is not None:
            if perms.ban_members:
                capabilities.add(Capability.BAN_MEMBERS)
            if perms.kick_members:
                capabilities.add(Capability.KICK_MEMBERS)

        # Only guild members can be banned or kicked.
        mentions = [m for m in message.mentions if isinstance(m, discord.Member)]

        return cls(
            author_id=author.id,
            author_tag=str(author),
            author_is_bot=author.bot,
            guild_id=message.guild.id if message.guild else None,
            content=message.content,
            reply=message.reply,
            capabilities=frozenset(capabilities),
            mentions=mentions,
        )


class EffectKind(enum.StrEnum):
    REPLY = "reply"
    TICKET_CREATED = "ticket_created"
    LOG = "log"
    BAN = "ban"
    KICK = "kick"


@dataclass(frozen=True, slots=True)
class Effect:
    kind: EffectKind
    detail: str = ""
    ok: bool = True


Handler = Callable[[InboundMessage, ParsedCommand], Awaitable[list[Effect]]]


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------
class CommandDispatcher:
    """Parses, authorises and executes prefix commands.

    Parameters
    ----------
    store:
        Shared :class:`RecordStore`; read fresh on every message.
    automation:
        Used for the ticket log-channel notification.
    guild_id:
        The managed community.  Messages from other guilds are ignored.
        ``None`` accepts any guild.
    """

    def __init__(
        self,
        store: RecordStore,
        automation: AutomationEngine,
        *,
        guild_id: int | None = None,
    ) -> None:
        self.store = store
        self.automation = automation
        self.guild_id = guild_id
        self.handlers: dict[CommandName, Handler] = {
            CommandName.CREATE_TICKET: self._create_ticket,
            CommandName.BAN: self._ban,
            CommandName.KICK: self._kick,
        }

    async def dispatch(self, message: InboundMessage) -> list[Effect]:
        # Gate 1: bots, including ourselves
        if message.author_is_bot:
            return []

        # Gate 2: DMs and foreign guilds
        if message.guild_id is None:
            return []
        if self.guild_id is not None and message.guild_id != self.guild_id:
            return []

        settings = (await run_store(self.store.read)).settings
        command = parse_command(message.content, settings.prefix)
        if command is None:
            return []

        logger.info(
            "Command %s from %s (%d args)",
            command.spec.name, message.author_tag, len(command.args),
        )
        try:
            self._check(message, command.spec)
        except (PermissionDenied, InvalidArgument) as exc:
            return [await self._reply(message, str(exc))]

        return await self.handlers[command.spec.name](message, command)

    @staticmethod
    async def _reply(message: InboundMessage, text: str) -> Effect:
        """Answer the sender.  A failed reply is logged and never stops later effects."""
        result = await best_effort("reply", message.reply(text))
        return Effect(EffectKind.REPLY, text, ok=result.ok)

    @staticmethod
    def _check(message: InboundMessage, spec: CommandSpec) -> None:
        if spec.capability is not None and spec.capability not in message.capabilities:
            raise PermissionDenied(REPLY_NO_PERMISSION)
        if spec.needs_mention and not message.mentions:
            raise InvalidArgument(REPLY_MENTION_USER)

    # -----------------------------------------------------------------------
    # Handlers
    # -----------------------------------------------------------------------
    async def _create_ticket(
        self, message: InboundMessage, command: ParsedCommand,
    ) -> list[Effect]:
        ticket = await run_store(
            ticket_service.create_ticket,
            self.store,
            title=command.text or NO_TITLE,
            requester=message.author_tag,
            requester_id=str(message.author_id),
        )
        effects = [
            Effect(EffectKind.TICKET_CREATED, ticket.id),
            await self._reply(message, f"Ticket created: {ticket.id}"),
        ]

        logged = await self.automation.ticket_opened(ticket)
        if logged is not None:
            effects.append(Effect(EffectKind.LOG, ticket.id, ok=logged.ok))
        return effects

    async def _ban(self, message: InboundMessage, command: ParsedCommand) -> list[Effect]:
        target = message.mentions[0]
        return await self._remove(
            message,
            EffectKind.BAN,
            target.ban(reason=command.reason),
            success_reply=REPLY_BANNED,
            target=target,
        )

    async def _kick(self, message: InboundMessage, command: ParsedCommand) -> list[Effect]:
        target = message.mentions[0]
        return await self._remove(
            message,
            EffectKind.KICK,
            target.kick(reason=command.reason),
            success_reply=REPLY_KICKED,
            target=target,
        )

    async def _remove(
        self,
        message: InboundMessage,
        kind: EffectKind,
        request: Awaitable[Any],
        *,
        success_reply: str,
        target: Any,
    ) -> list[Effect]:
        """Await the platform removal and report its outcome to the sender."""
        try:
            await request
        except Exception:
            logger.warning(
                "%s of %s requested by %s failed",
                kind, getattr(target, "id", target), message.author_tag,
                exc_info=True,
            )
            return [Effect(kind, str(getattr(target, "id", "")), ok=False),
                    await self._reply(message, REPLY_FAILED)]

        logger.info("%s of %s by %s", kind, getattr(target, "id", target), message.author_tag)
        return [Effect(kind, str(getattr(target, "id", ""))),
                await self._reply(message, success_reply)]
