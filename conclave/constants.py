"""
conclave.constants — Shared Constants
======================================

Single source of truth for defaults and reply texts.  Import from here
instead of duplicating in cogs, services, and routes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Store defaults
# ---------------------------------------------------------------------------
DEFAULT_PREFIX = "!"
WELCOME_PLACEHOLDER = "{user}"

# nanoid's URL-safe alphabet
ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_-"
APPLICATION_ID_SIZE = 8
TICKET_ID_SIZE = 6

# ---------------------------------------------------------------------------
# Placeholders used when a field is missing
# ---------------------------------------------------------------------------
NO_TITLE = "No title"
NO_REASON = "No reason"
NO_INFO = "No info"
NO_DETAILS = "No details"
NOT_AVAILABLE = "N/A"

# ---------------------------------------------------------------------------
# Chat replies
# ---------------------------------------------------------------------------
REPLY_NO_PERMISSION = "No permission"
REPLY_MENTION_USER = "Mention user"
REPLY_BANNED = "Banned"
REPLY_KICKED = "Kicked"
REPLY_FAILED = "Failed"
