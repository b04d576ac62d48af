"""Process-local beat repository.

Thread-safe via a single lock. Rows are deep-copied on the way in and out so
callers can never mutate stored state by accident.
"""

from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime, timezone

from app.adapters.storage.base import AbstractBeatRepository, Row


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryBeatRepository(AbstractBeatRepository):
    """Dict-backed implementation of ``AbstractBeatRepository``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._beats: dict[str, Row] = {}
        self._assignments: dict[str, Row] = {}
        self._audit_log: list[Row] = []

    def list_beats(self) -> list[Row]:
        with self._lock:
            beats = copy.deepcopy(list(self._beats.values()))
        # dicts keep insertion order, so reversing gives newest first on ties
        return sorted(reversed(beats), key=lambda row: row["created_at"], reverse=True)

    def get_beat(self, beat_id: str) -> Row | None:
        with self._lock:
            beat = self._beats.get(beat_id)
            return copy.deepcopy(beat) if beat is not None else None

    def insert_beat(self, data: Row) -> Row:
        now = _utcnow_iso()
        row = {"status": "active", **copy.deepcopy(data)}
        row.update(id=str(uuid.uuid4()), created_at=now, updated_at=now)
        with self._lock:
            self._beats[row["id"]] = row
            return copy.deepcopy(row)

    def update_beat(self, beat_id: str, changes: Row) -> Row | None:
        with self._lock:
            beat = self._beats.get(beat_id)
            if beat is None:
                return None
            beat.update(copy.deepcopy(changes))
            return copy.deepcopy(beat)

    def delete_beat(self, beat_id: str) -> bool:
        with self._lock:
            return self._beats.pop(beat_id, None) is not None

    def add_assignment(self, data: Row) -> Row:
        row = {"acceptance_status": "pending", "assigned_at": _utcnow_iso(), **copy.deepcopy(data)}
        row["id"] = str(uuid.uuid4())
        with self._lock:
            self._assignments[row["id"]] = row
            return copy.deepcopy(row)

    def list_assignments(self, beat_id: str) -> list[Row]:
        with self._lock:
            return [copy.deepcopy(a) for a in self._assignments.values() if a["beat_id"] == beat_id]

    def delete_assignments(self, beat_id: str) -> int:
        with self._lock:
            doomed = [key for key, a in self._assignments.items() if a["beat_id"] == beat_id]
            for key in doomed:
                del self._assignments[key]
            return len(doomed)

    def insert_audit_entry(self, entry: Row) -> None:
        with self._lock:
            self._audit_log.append(copy.deepcopy(entry))

    def list_audit_entries(self, table_name: str | None = None) -> list[Row]:
        with self._lock:
            return [
                copy.deepcopy(entry)
                for entry in self._audit_log
                if table_name is None or entry["table_name"] == table_name
            ]
