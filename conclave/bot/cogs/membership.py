"""
conclave.bot.cogs.membership — Member Join Automation
======================================================

Hands GUILD_MEMBER_ADD to the automation engine (auto-role, welcome
message).  Requires the GUILD_MEMBERS privileged intent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

if TYPE_CHECKING:
    from conclave.bot.core import ConclaveBot

logger = logging.getLogger(__name__)


class Membership(commands.Cog, name="Membership"):
    """Runs join rules for new members."""

    def __init__(self, bot: ConclaveBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        """GUILD_MEMBER_ADD → auto-role + welcome."""
        try:
            if member.guild.id != self.bot.cfg.guild_id:
                return

            results = await self.bot.automation.member_joined(member)
            logger.info(
                "Member joined: %s (ID: %d) — %s",
                member.display_name,
                member.id,
                ", ".join(f"{r.name}={'ok' if r.ok else 'failed'}" for r in results)
                or "no join rules applied",
            )

        except Exception:
            logger.exception(
                "Error processing member_join for %s", member.id,
                extra={"event_type": "member_join", "user_id": member.id},
            )


async def setup(bot: ConclaveBot) -> None:
    await bot.add_cog(Membership(bot))
