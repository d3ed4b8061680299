"""
conclave.errors — Error taxonomy
=================================

User-facing errors (:class:`PermissionDenied`, :class:`InvalidArgument`,
:class:`NotFound`, :class:`InvalidTransition`) are recovered where they are
caught and turned into a chat reply or an HTTP response.
:class:`StoreError` propagates.  :class:`NotificationFailure` never leaves
:func:`conclave.engine.effects.best_effort`.
"""

from __future__ import annotations


class ConclaveError(Exception):
    """Base class for all Conclave errors."""


class PermissionDenied(ConclaveError):
    """Sender lacks the capability a command requires."""


class InvalidArgument(ConclaveError):
    """A required argument is missing or cannot be resolved."""


class NotFound(ConclaveError):
    """A referenced application or ticket id does not exist."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class InvalidTransition(ConclaveError):
    """A status change would move a record backwards or sideways."""


class StoreError(ConclaveError, OSError):
    """The durable document could not be read or written."""


class NotificationFailure(ConclaveError):
    """A chat-platform side effect failed.  Logged, never surfaced."""

    def __init__(self, effect: str, cause: BaseException) -> None:
        super().__init__(f"{effect} failed: {cause!r}")
        self.effect = effect
        self.cause = cause
