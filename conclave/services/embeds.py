"""
conclave.services.embeds — Discord embed builders for the log channel
======================================================================

All embed construction lives here so the automation engine only needs to
supply data — no layout concerns.
"""

from __future__ import annotations

from datetime import datetime

import discord

from conclave.constants import NO_DETAILS, NO_INFO, NOT_AVAILABLE
from conclave.store.models import Application, ApplicationStatus, utcnow

_DECISION_COLORS: dict[str, discord.Color] = {
    ApplicationStatus.APPROVED: discord.Color.green(),
    ApplicationStatus.REJECTED: discord.Color.red(),
}


def build_new_application_embed(
    app: Application,
    timestamp: datetime | None = None,
) -> discord.Embed:
    """Build the ``New Application`` log embed."""
    embed = discord.Embed(
        title="New Application",
        description=app.statement or NO_INFO,
        color=discord.Color.blurple(),
        timestamp=timestamp or utcnow(),
    )
    embed.add_field(name="Name", value=app.name or NOT_AVAILABLE, inline=True)
    embed.add_field(name="ID", value=app.id, inline=True)
    return embed


def build_decision_embed(
    app: Application,
    timestamp: datetime | None = None,
) -> discord.Embed:
    """Build the ``Application <decision>`` log embed."""
    embed = discord.Embed(
        title=f"Application {app.status}",
        description=app.statement or NO_DETAILS,
        color=_DECISION_COLORS.get(app.status, discord.Color.greyple()),
        timestamp=timestamp or app.decision_at or utcnow(),
    )
    embed.add_field(
        name="Applicant",
        value=app.name or app.contact or NOT_AVAILABLE,
        inline=True,
    )
    embed.add_field(
        name="Decision By",
        value=app.decision_by or NOT_AVAILABLE,
        inline=True,
    )
    return embed
