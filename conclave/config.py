"""
conclave.config — YAML Configuration Loader
============================================

Reads ``config.yaml`` for **infrastructure-only** settings (Discord identity,
dashboard port, admin role, data file, log channel).  Community-tunable
values (command prefix, auto-role, welcome message) live in the record
store and are edited from the dashboard.

Usage::

    from conclave.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.community_name)    # "Conclave Dev"
    print(cfg.log_channel_id)    # 1468816181854081229 or None
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object — infrastructure/identity only.
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ConclaveConfig:
    """Immutable configuration loaded from ``config.yaml``.

    Prefix, auto-role and welcome settings are *not* here; they are in the
    record store so the dashboard can change them at runtime.
    """

    # Identity
    community_name: str

    # Discord
    guild_id: int  # The one community this instance manages

    # Dashboard
    dashboard_port: int

    # Admin / Hardened Access
    admin_role_id: int  # Discord role required for dashboard access

    # Storage
    data_file: str = "db.json"

    # Optional
    log_channel_id: int | None = None  # Where application/ticket logs go


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> ConclaveConfig:
    """Read *path* and return a :class:`ConclaveConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return ConclaveConfig(
        community_name=raw["community_name"],
        guild_id=int(raw["guild_id"]),
        dashboard_port=int(raw["dashboard_port"]),
        admin_role_id=int(raw["admin_role_id"]),
        data_file=str(raw.get("data_file") or "db.json"),
        log_channel_id=(
            int(raw["log_channel_id"]) if raw.get("log_channel_id") else None
        ),
    )
