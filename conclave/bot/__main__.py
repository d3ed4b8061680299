"""
conclave.bot.__main__ — Entry point for ``python -m conclave.bot``
==================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Open and initialise the record store.
4. Build the automation engine shared by both front ends.
5. Create the bot and hand the same store + engine to the API.
6. Run the bot and the dashboard API on one event loop.

Run with::

    python -m conclave.bot
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

from conclave.bot.core import ConclaveBot
from conclave.config import ConclaveConfig, load_config
from conclave.engine.automation import AutomationEngine
from conclave.store.engine import open_store

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("conclave")


async def _serve(cfg: ConclaveConfig, token: str) -> None:
    store = open_store(cfg.data_file)
    store.initialize()

    automation = AutomationEngine(store, log_channel_id=cfg.log_channel_id)
    bot = ConclaveBot(cfg=cfg, store=store, automation=automation)

    # Imported late: the API validates JWT_SECRET at import time.
    from conclave.api.main import app

    app.state.store = store
    app.state.automation = automation
    server = uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=cfg.dashboard_port, log_config=None)
    )

    async with bot:
        await asyncio.gather(bot.start(token), server.serve())


def main() -> None:
    """Bootstrap and run Conclave."""

    # 1. Environment variables (secrets).
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    # 2. Soft configuration.
    cfg = load_config()
    logger.info("Config loaded — Community: %s", cfg.community_name)

    # 3-6. Store, engine, bot, API.
    logger.info("Starting Conclave on port %d…", cfg.dashboard_port)
    try:
        asyncio.run(_serve(cfg, token))
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
