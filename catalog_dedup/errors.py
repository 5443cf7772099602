"""Exception types raised by the deduplication engine."""

from __future__ import annotations

from typing import Any


class DedupeError(Exception):
    """Base class for all catalog deduplication errors."""


class ConfigurationError(DedupeError):
    """A tunable is out of range. Raised before any record is processed."""


class InvalidRecordError(DedupeError):
    """
    A single input record cannot enter the index.

    Recoverable: the engine catches it, counts ``reason`` and moves on.
    """

    def __init__(self, reason: str, record_id: str | None = None, detail: str | None = None):
        self.reason = reason
        self.record_id = record_id
        self.detail = detail
        msg = f"{reason} (record {record_id or '?'})"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class EmptyInputError(DedupeError):
    """No valid records across all source batches."""

    def __init__(self, message: str, stats: Any = None):
        super().__init__(message)
        self.stats = stats
