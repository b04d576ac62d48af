"""Repository interface for beats and their related records.

Rows are plain dicts shaped like the database tables (``beats``,
``beat_personnel``, ``audit_logs``), so a hosted-database adapter can return
query results without an extra mapping layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

Row = dict[str, Any]


class AbstractBeatRepository(ABC):
    """Interface for beat storage."""

    @abstractmethod
    def list_beats(self) -> list[Row]:
        """Return all beats, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get_beat(self, beat_id: str) -> Row | None:
        raise NotImplementedError

    @abstractmethod
    def insert_beat(self, data: Row) -> Row:
        """Insert a beat and return the stored row (with id and timestamps)."""
        raise NotImplementedError

    @abstractmethod
    def update_beat(self, beat_id: str, changes: Row) -> Row | None:
        """Apply ``changes`` to a beat; return the updated row or None if missing."""
        raise NotImplementedError

    @abstractmethod
    def delete_beat(self, beat_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def add_assignment(self, data: Row) -> Row:
        """Store a ``beat_personnel`` row with personnel info.

        Missing ``acceptance_status`` defaults to ``"pending"``; ``id`` and
        ``assigned_at`` are generated. Called by ``BeatService.assign_personnel``.
        """
        raise NotImplementedError

    @abstractmethod
    def list_assignments(self, beat_id: str) -> list[Row]:
        raise NotImplementedError

    @abstractmethod
    def delete_assignments(self, beat_id: str) -> int:
        """Remove every assignment for a beat; return how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def insert_audit_entry(self, entry: Row) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_audit_entries(self, table_name: str | None = None) -> list[Row]:
        """Return audit entries in insertion order, optionally for one table."""
        raise NotImplementedError
