"""
tests/test_automation.py — Automation Engine & Best-Effort Boundary
====================================================================

Tests the join rules (auto-role, welcome), log-channel notifications for
application / ticket lifecycle events, and that no notification failure
ever reaches the caller or undoes a persisted change.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import LOG_CHANNEL_ID, make_client, make_text_channel

from conclave.engine.automation import AutomationEngine
from conclave.engine.effects import best_effort
from conclave.errors import InvalidTransition, NotificationFailure
from conclave.services import settings_service
from conclave.services.embeds import build_decision_embed, build_new_application_embed
from conclave.store.models import Application

WELCOME_CHANNEL_ID = 888


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _make_guild(
    *,
    role_names: list[str] | None = None,
    channels: dict[int, object] | None = None,
) -> MagicMock:
    guild = MagicMock(spec=discord.Guild)
    guild.id = 111
    guild.roles = [SimpleNamespace(id=i, name=n) for i, n in enumerate(role_names or [])]
    channels = channels or {}
    guild.get_channel = lambda ch_id: channels.get(ch_id)
    guild.fetch_channel = AsyncMock(side_effect=discord.NotFound(
        SimpleNamespace(status=404, reason="Not Found"), "Unknown Channel",
    ))
    return guild


def _make_member(guild: MagicMock, member_id: int = 777) -> MagicMock:
    member = MagicMock(spec=discord.Member)
    member.id = member_id
    member.mention = f"<@{member_id}>"
    member.guild = guild
    member.add_roles = AsyncMock()
    return member


def _http_error(status: int = 500) -> discord.HTTPException:
    return discord.HTTPException(SimpleNamespace(status=status, reason="err"), "err")


# ===========================================================================
# best_effort
# ===========================================================================
class TestBestEffort:
    def test_success(self):
        result = run_async(best_effort("x", AsyncMock()()))
        assert result.ok is True
        assert result.error is None

    def test_failure_is_contained(self):
        async def _fail():
            raise RuntimeError("nope")

        result = run_async(best_effort("welcome_message", _fail()))
        assert result.ok is False
        assert isinstance(result.error, NotificationFailure)
        assert result.error.effect == "welcome_message"
        assert isinstance(result.error.cause, RuntimeError)


# ===========================================================================
# Member join
# ===========================================================================
class TestAutoRole:
    def test_grants_configured_role_once(self, store, automation):
        settings_service.update_settings(store, prefix="!", auto_role_name="Member")
        guild = _make_guild(role_names=["Admin", "Member"])
        member = _make_member(guild)

        results = run_async(automation.member_joined(member))

        member.add_roles.assert_awaited_once()
        granted = member.add_roles.await_args.args[0]
        assert granted.name == "Member"
        assert [(r.name, r.ok) for r in results] == [("auto_role", True)]

    def test_no_role_configured(self, store, automation):
        member = _make_member(_make_guild(role_names=["Member"]))
        assert run_async(automation.member_joined(member)) == []
        member.add_roles.assert_not_awaited()

    def test_role_name_must_match_exactly(self, store, automation):
        settings_service.update_settings(store, prefix="!", auto_role_name="member")
        member = _make_member(_make_guild(role_names=["Member"]))
        run_async(automation.member_joined(member))
        member.add_roles.assert_not_awaited()

    def test_grant_failure_swallowed(self, store, automation):
        settings_service.update_settings(store, prefix="!", auto_role_name="Member")
        member = _make_member(_make_guild(role_names=["Member"]))
        member.add_roles.side_effect = _http_error(403)

        results = run_async(automation.member_joined(member))
        assert results[0].ok is False


class TestWelcome:
    def _enable(self, store, channel=str(WELCOME_CHANNEL_ID), message="Welcome {user}!"):
        settings_service.update_welcome(store, enabled=True, channel=channel, message=message)

    def test_sends_rendered_message(self, store, automation):
        self._enable(store)
        channel = make_text_channel(WELCOME_CHANNEL_ID)
        member = _make_member(_make_guild(channels={WELCOME_CHANNEL_ID: channel}))

        run_async(automation.member_joined(member))
        channel.send.assert_awaited_once_with("Welcome <@777>!")

    def test_fetches_uncached_channel(self, store, automation):
        self._enable(store)
        channel = make_text_channel(WELCOME_CHANNEL_ID)
        guild = _make_guild()
        guild.fetch_channel = AsyncMock(return_value=channel)

        run_async(automation.member_joined(_make_member(guild)))
        guild.fetch_channel.assert_awaited_once_with(WELCOME_CHANNEL_ID)
        channel.send.assert_awaited_once()

    def test_disabled(self, store, automation):
        settings_service.update_welcome(
            store, enabled=False, channel=str(WELCOME_CHANNEL_ID), message="hi",
        )
        channel = make_text_channel(WELCOME_CHANNEL_ID)
        member = _make_member(_make_guild(channels={WELCOME_CHANNEL_ID: channel}))
        assert run_async(automation.member_joined(member)) == []
        channel.send.assert_not_awaited()

    def test_enabled_without_channel(self, store, automation):
        settings_service.update_welcome(store, enabled=True, channel=None, message="hi")
        assert run_async(automation.member_joined(_make_member(_make_guild()))) == []

    def test_non_text_channel_is_skipped(self, store, automation):
        self._enable(store)
        category = MagicMock(spec=discord.CategoryChannel)
        member = _make_member(_make_guild(channels={WELCOME_CHANNEL_ID: category}))
        results = run_async(automation.member_joined(member))
        assert [(r.name, r.ok) for r in results] == [("welcome_message", False)]

    def test_unknown_channel_is_skipped(self, store, automation):
        self._enable(store)
        results = run_async(automation.member_joined(_make_member(_make_guild())))
        assert results[0].ok is False

    def test_malformed_channel_id_is_skipped(self, store, automation):
        self._enable(store, channel="general")
        results = run_async(automation.member_joined(_make_member(_make_guild())))
        assert results[0].ok is False


class TestJoinRulesIndependent:
    def test_role_failure_does_not_block_welcome(self, store, automation):
        settings_service.update_settings(store, prefix="!", auto_role_name="Member")
        settings_service.update_welcome(
            store, enabled=True, channel=str(WELCOME_CHANNEL_ID), message="Hi {user}",
        )
        channel = make_text_channel(WELCOME_CHANNEL_ID)
        member = _make_member(
            _make_guild(role_names=["Member"], channels={WELCOME_CHANNEL_ID: channel}),
        )
        member.add_roles.side_effect = _http_error(403)

        results = run_async(automation.member_joined(member))

        channel.send.assert_awaited_once_with("Hi <@777>")
        assert [(r.name, r.ok) for r in results] == [
            ("auto_role", False), ("welcome_message", True),
        ]


# ===========================================================================
# Application lifecycle
# ===========================================================================
class TestApplicationNotifications:
    def test_submit_persists_and_logs(self, store, automation, log_channel):
        app = run_async(automation.submit_application(
            name="Ada", contact="ada#0001", statement="hello",
        ))
        assert store.read().find_application(app.id).status == "Pending"

        log_channel.send.assert_awaited_once()
        embed = log_channel.send.await_args.kwargs["embed"]
        assert embed.title == "New Application"
        assert embed.description == "hello"
        assert [(f.name, f.value) for f in embed.fields] == [("Name", "Ada"), ("ID", app.id)]
        assert embed.timestamp is not None

    def test_decision_emits_exactly_one_notification(self, store, automation, log_channel):
        app = run_async(automation.submit_application(
            name="Ada", contact="ada#0001", statement="hello",
        ))
        log_channel.send.reset_mock()

        decided = run_async(automation.decide_application(
            app.id, decision="Approved", actor="Mod",
        ))

        assert decided.status == "Approved"
        assert decided.decision_by == "Mod"
        assert decided.decision_at is not None
        log_channel.send.assert_awaited_once()
        embed = log_channel.send.await_args.kwargs["embed"]
        assert embed.title == "Application Approved"
        assert [(f.name, f.value) for f in embed.fields] == [
            ("Applicant", "Ada"), ("Decision By", "Mod"),
        ]

    def test_decision_without_log_channel_emits_nothing(self, store):
        engine = AutomationEngine(store)
        channel = make_text_channel()
        engine.bind(make_client(channels={LOG_CHANNEL_ID: channel}))

        app = run_async(engine.submit_application(name="Ada", contact="", statement=""))
        decided = run_async(engine.decide_application(app.id, decision="Approved", actor="Mod"))

        assert decided.status == "Approved"
        channel.send.assert_not_awaited()
        assert run_async(engine.application_decided(decided)) is None

    def test_not_live_skips_notifications(self, store, log_channel):
        engine = AutomationEngine(store, log_channel_id=LOG_CHANNEL_ID)
        engine.bind(make_client(ready=False, channels={LOG_CHANNEL_ID: log_channel}))
        app = run_async(engine.submit_application(name="Ada", contact="", statement=""))
        assert store.read().find_application(app.id) is not None
        log_channel.send.assert_not_awaited()

    def test_unbound_engine_skips_notifications(self, store):
        engine = AutomationEngine(store, log_channel_id=LOG_CHANNEL_ID)
        app = run_async(engine.submit_application(name="Ada", contact="", statement=""))
        assert run_async(engine.application_submitted(app)) is None

    def test_send_failure_never_rolls_back(self, store, automation, log_channel):
        log_channel.send.side_effect = _http_error()
        app = run_async(automation.submit_application(name="Ada", contact="", statement=""))
        decided = run_async(automation.decide_application(
            app.id, decision="Rejected", actor="Mod",
        ))
        assert decided.status == "Rejected"
        assert store.read().find_application(app.id).status == "Rejected"

    def test_replayed_decision_sends_nothing(self, store, automation, log_channel):
        app = run_async(automation.submit_application(name="Ada", contact="", statement=""))
        run_async(automation.decide_application(app.id, decision="Approved", actor="Mod"))
        log_channel.send.reset_mock()

        with pytest.raises(InvalidTransition):
            run_async(automation.decide_application(app.id, decision="Rejected", actor="X"))
        log_channel.send.assert_not_awaited()


class TestTicketNotifications:
    def test_dashboard_ticket_logs_requester_name(self, store, automation, log_channel):
        ticket = run_async(automation.open_ticket(
            title="Printer on fire", description="help", requester="Mod",
        ))
        assert store.read().find_ticket(ticket.id).description == "help"
        log_channel.send.assert_awaited_once_with(
            content=f"New ticket {ticket.id} by Mod — Printer on fire",
        )


# ===========================================================================
# Embeds
# ===========================================================================
class TestEmbeds:
    def test_new_application_placeholders(self):
        app = Application(id="abc", name="", contact="", statement="")
        embed = build_new_application_embed(app)
        assert embed.description == "No info"
        assert embed.fields[0].value == "N/A"

    def test_decision_falls_back_to_contact(self):
        app = Application(
            id="abc", name="", contact="ada#0001", statement="",
            status="Rejected", decision_by="Mod",
        )
        embed = build_decision_embed(app)
        assert embed.title == "Application Rejected"
        assert embed.description == "No details"
        assert embed.fields[0].value == "ada#0001"
        assert embed.color == discord.Color.red()
