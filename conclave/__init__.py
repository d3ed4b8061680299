"""
Conclave — Community Management for a Single Discord Server
============================================================
Coordinates member applications, support tickets, moderation commands and
onboarding across two front ends that share one record store: an admin
dashboard (FastAPI) and a Discord bot.

Package layout::

    conclave/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Defaults, placeholders, id sizes
    ├── errors.py          # Error taxonomy shared by bot and API
    ├── store/
    │   ├── models.py      # Snapshot + entity dataclasses, JSON mapping
    │   └── engine.py      # Whole-file JSON store + async bridge
    ├── services/
    │   ├── application_service.py  # Submit / decide applications
    │   ├── ticket_service.py       # Open / close tickets
    │   ├── settings_service.py     # Prefix, auto-role, welcome config
    │   └── embeds.py               # Log-channel embed builders
    ├── engine/
    │   ├── effects.py     # Best-effort side-effect boundary
    │   ├── commands.py    # Prefix command parser + dispatcher
    │   └── automation.py  # Join rules + lifecycle notifications
    ├── bot/
    │   ├── __main__.py    # Runs bot + dashboard API in one process
    │   ├── core.py        # Bot subclass, cog loader
    │   └── cogs/
    │       ├── moderation.py  # on_message → CommandDispatcher
    │       └── membership.py  # on_member_join → AutomationEngine
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Store / engine / admin dependencies
        ├── auth.py        # Discord OAuth2 → JWT
        └── routes/        # Public + admin REST endpoints
"""

__version__ = "0.1.0"
