"""
conclave.store.engine — Whole-File Record Store & Async Helper
===============================================================

**Why this file exists:**
All applications, tickets and settings live in one JSON document.  Every
operation reads the whole document, mutates the in-memory
:class:`~conclave.store.models.Snapshot`, and writes the whole document
back.  Writes go to a temporary file that replaces the target in one
``os.replace`` call, so a reader never sees a half-written document.

There is **no locking**.  Two overlapping read→mutate→write sequences race
and the later write wins, discarding whatever the earlier one changed.
Writes are human-paced (dashboard clicks, chat commands), so this is
accepted; ``tests/test_store.py`` pins the behaviour down.

File I/O is synchronous, so the bot and the API call it through
:func:`run_store`, which moves the work to a thread::

    snapshot = await run_store(store.read)
    ticket = await run_store(ticket_service.create_ticket, store, title="Hi")
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import ParamSpec, TypeVar

from conclave.errors import StoreError
from conclave.store.models import Snapshot

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class RecordStore:
    """Durable home of the :class:`Snapshot`.

    Parameters
    ----------
    path:
        Location of the JSON document.  Its directory must exist.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"RecordStore({str(self.path)!r})"

    # -----------------------------------------------------------------------
    # Contract
    # -----------------------------------------------------------------------
    def initialize(self) -> Snapshot:
        """Load (or create) the document and write it back normalised.

        Called once at process start.  Missing sections are filled with
        their defaults so every later reader sees all four sections.
        """
        snapshot = self.read()
        self.write(snapshot)
        logger.info(
            "Record store ready at %s (%d applications, %d tickets)",
            self.path, len(snapshot.applications), len(snapshot.tickets),
        )
        return snapshot

    def read(self) -> Snapshot:
        """Return a fresh :class:`Snapshot` parsed from disk.

        A missing file reads as the default snapshot.

        Raises
        ------
        StoreError
            If the file exists but cannot be read or parsed.
        """
        if not self.path.exists():
            return Snapshot()
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw) if raw.strip() else {}
            return Snapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise StoreError(f"Cannot read record store {self.path}: {exc}") from exc

    def write(self, snapshot: Snapshot) -> None:
        """Serialise *snapshot* and atomically replace the document.

        Raises
        ------
        StoreError
            If the temporary file cannot be written or moved into place.
        """
        payload = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f"Cannot write record store {self.path}: {exc}") from exc
        logger.debug("Record store written (%d bytes)", len(payload))


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------
def open_store(path: str | Path | None = None) -> RecordStore:
    """Build a :class:`RecordStore` from *path* or the ``DATA_FILE`` env var."""
    target = path or os.getenv("DATA_FILE") or "db.json"
    store = RecordStore(target)
    logger.info("Record store → %s", store.path.resolve())
    return store


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_store(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** store function on a background thread.

    Every store call from a cog, the automation engine or an API route goes
    through this wrapper, so the event loop keeps serving gateway events and
    HTTP requests while the file is being read or written.  Each call is a
    suspension point where other handlers may interleave.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
