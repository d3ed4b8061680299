"""
conclave.bot.core — Bot Instance & Cog Loader
==============================================

Defines :class:`ConclaveBot`, a ``commands.Bot`` subclass that:

1. Stores the shared config (``bot.cfg``), record store (``bot.store``),
   automation engine (``bot.automation``) and command dispatcher
   (``bot.dispatcher``) so every Cog reaches them via ``self.bot.*``.
2. Binds itself to the automation engine, which uses it to reach the log
   channel for notifications triggered from the dashboard.
3. Loads every Cog in :data:`EXTENSIONS`.

Prefix commands are **not** registered with discord.py's command framework:
the prefix lives in the record store and can change at runtime, so the
Moderation cog parses messages itself through the dispatcher.
"""

from __future__ import annotations

import logging

import discord
from discord.ext import commands

from conclave.config import ConclaveConfig
from conclave.engine.automation import AutomationEngine
from conclave.engine.commands import CommandDispatcher
from conclave.store.engine import RecordStore

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "conclave.bot.cogs.moderation",
    "conclave.bot.cogs.membership",
]


class ConclaveBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`ConclaveConfig` from ``config.yaml``.
    store:
        The shared :class:`RecordStore`.
    automation:
        The :class:`AutomationEngine` shared with the dashboard API.
    """

    def __init__(
        self,
        cfg: ConclaveConfig,
        store: RecordStore,
        automation: AutomationEngine,
    ) -> None:
        # Privileged intents (must enable in Developer Portal):
        #   MESSAGE_CONTENT — prefix commands
        #   GUILD_MEMBERS   — join events for auto-role / welcome
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.presences = False

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            description=f"{cfg.community_name} community manager",
        )

        self.cfg = cfg
        self.store = store
        self.automation = automation
        self.dispatcher = CommandDispatcher(store, automation, guild_id=cfg.guild_id)
        automation.bind(self)

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all Cog extensions.  One broken Cog shouldn't take down the bot."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Bot ready: %s (ID: %s)", self.user, self.user.id)

        guild = self.get_guild(self.cfg.guild_id)
        if guild is None:
            logger.warning(
                "Configured guild %d not found — join events will not fire",
                self.cfg.guild_id,
            )
        if self.automation.log_channel_id is None:
            logger.info("No log channel configured — lifecycle logs disabled")

    async def close(self) -> None:
        logger.info("Bot shutting down…")
        await super().close()
