"""
conclave.bot.cogs.moderation — Prefix Commands
===============================================

Feeds every guild message to :class:`~conclave.engine.commands.CommandDispatcher`
(``createticket``, ``ban``, ``kick``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from conclave.engine.commands import InboundMessage

if TYPE_CHECKING:
    from conclave.bot.core import ConclaveBot

logger = logging.getLogger(__name__)


class Moderation(commands.Cog, name="Moderation"):
    """Prefix commands for tickets and member removal."""

    def __init__(self, bot: ConclaveBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        try:
            effects = await self.bot.dispatcher.dispatch(InboundMessage.from_discord(message))
            if effects:
                logger.debug(
                    "Message %s produced %s",
                    message.id, ", ".join(e.kind for e in effects),
                )
        except Exception:
            logger.exception(
                "Error dispatching message %s from user %s",
                message.id,
                message.author.id,
                extra={"event_type": "message", "user_id": message.author.id},
            )


async def setup(bot: ConclaveBot) -> None:
    await bot.add_cog(Moderation(bot))
