"""Beat management: CRUD with personnel checks and audit logging.

Every mutation writes an ``audit_logs`` row carrying the old and new data,
the acting caller, and the caller's address and user agent. Deleting a beat
is refused while any assigned person has accepted the assignment; pending
assignments are removed (and audited) first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from app.adapters.storage.base import AbstractBeatRepository, Row
from app.core.errors import NotFoundAppError, ValidationAppError
from app.schemas.beat import BeatAssignmentCreate, BeatCreate, BeatUpdate

logger = logging.getLogger(__name__)

# Request field -> beats column
_COLUMN_BY_FIELD = {
    "name": "name",
    "center_lat": "center_lat",
    "center_lng": "center_lng",
    "radius": "radius_meters",
    "description": "address",
    "unit": "unit",
    "sub_unit": "sub_unit",
    "status": "status",
}

_EMAIL_LOCAL_PART = re.compile(r"(.{2}).*@")


@dataclass(frozen=True)
class AuditContext:
    """Who performed a mutation, and from where."""

    actor: str
    ip_address: str = "unknown"
    user_agent: str = "unknown"


def mask_email(email: str | None) -> str | None:
    """Keep the first two characters of the local part: ``jo***@pnp.gov.ph``."""
    if not email:
        return None
    return _EMAIL_LOCAL_PART.sub(r"\1***@", email, count=1)


def _to_columns(fields: dict[str, Any]) -> Row:
    row: Row = {}
    for field, value in fields.items():
        if isinstance(value, str):
            value = value.strip()
        row[_COLUMN_BY_FIELD[field]] = value
    return row


def _assignment_summary(assignment: Row) -> Row:
    return {
        "personnel_id": assignment.get("personnel_id"),
        "full_name": assignment.get("full_name"),
        "rank": assignment.get("rank"),
        "email": mask_email(assignment.get("email")),
        "acceptance_status": assignment.get("acceptance_status"),
        "assigned_at": assignment.get("assigned_at"),
    }


class BeatService:
    """Business rules for beats on top of a repository."""

    def __init__(self, repository: AbstractBeatRepository) -> None:
        self._repository = repository

    def _audit(
        self,
        context: AuditContext,
        *,
        table_name: str,
        operation: str,
        old_data: Row | None,
        new_data: Row | None,
    ) -> None:
        self._repository.insert_audit_entry(
            {
                "table_name": table_name,
                "operation": operation,
                "old_data": old_data,
                "new_data": new_data,
                "changed_by": context.actor,
                "changed_at": datetime.now(timezone.utc).isoformat(),
                "ip_address": context.ip_address,
                "user_agent": context.user_agent,
            }
        )

    def list_beats(self) -> list[Row]:
        return self._repository.list_beats()

    def get_beat(self, beat_id: str) -> Row:
        """Return a beat.

        Raises:
            NotFoundAppError: If no beat has this id.
        """
        beat = self._repository.get_beat(beat_id)
        if beat is None:
            raise NotFoundAppError(
                code="beat_not_found",
                message="Beat not found",
                details={"beat_id": beat_id},
            )
        return beat

    def create_beat(self, payload: BeatCreate, context: AuditContext) -> Row:
        beat = self._repository.insert_beat(_to_columns(payload.model_dump(exclude_none=True)))
        self._audit(context, table_name="beats", operation="INSERT", old_data=None, new_data=beat)
        logger.info("beat.created", extra={"beat_id": beat["id"], "changed_by": context.actor})
        return beat

    def update_beat(self, beat_id: str, payload: BeatUpdate, context: AuditContext) -> Row:
        """Apply the fields present in ``payload`` and refresh ``updated_at``.

        Raises:
            NotFoundAppError: If no beat has this id.
        """
        original = self.get_beat(beat_id)

        changes = _to_columns(payload.model_dump(exclude_unset=True, exclude_none=True))
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()

        updated = self._repository.update_beat(beat_id, changes)
        if updated is None:
            # Deleted between the read and the write
            raise NotFoundAppError(code="beat_not_found", message="Beat not found", details={"beat_id": beat_id})

        self._audit(context, table_name="beats", operation="UPDATE", old_data=original, new_data=updated)
        logger.info(
            "beat.updated",
            extra={"beat_id": beat_id, "changed_by": context.actor, "fields": sorted(changes)},
        )
        return updated

    def assign_personnel(self, beat_id: str, payload: BeatAssignmentCreate, context: AuditContext) -> Row:
        """Assign a person to an existing beat and audit the new assignment.

        Raises:
            NotFoundAppError: If no beat has this id.
        """
        self.get_beat(beat_id)
        assignment = self._repository.add_assignment(
            {"beat_id": beat_id, **payload.model_dump(exclude_none=True)}
        )
        self._audit(
            context,
            table_name="beat_personnel",
            operation="INSERT",
            old_data=None,
            new_data=assignment,
        )
        logger.info(
            "beat.personnel_assigned",
            extra={"beat_id": beat_id, "assignment_id": assignment["id"], "changed_by": context.actor},
        )
        return assignment

    def delete_beat(self, beat_id: str, context: AuditContext) -> Row:
        """Delete a beat after clearing its pending assignments.

        Returns:
            The beat row as it was before deletion.

        Raises:
            NotFoundAppError: If no beat has this id.
            ValidationAppError: If someone has accepted an assignment to the beat.
        """
        beat = self.get_beat(beat_id)
        assignments = self._repository.list_assignments(beat_id)

        accepted = [a for a in assignments if a.get("acceptance_status") == "accepted"]
        if accepted:
            raise ValidationAppError(
                code="beat_has_active_personnel",
                message="Cannot delete beat with active personnel assignments. Please reassign personnel first.",
                details={"beat_id": beat_id, "accepted_personnel": len(accepted)},
            )

        if assignments:
            self._repository.delete_assignments(beat_id)
            for assignment in assignments:
                self._audit(
                    context,
                    table_name="beat_personnel",
                    operation="DELETE",
                    old_data=assignment,
                    new_data=None,
                )
            logger.info(
                "beat.assignments_removed",
                extra={"beat_id": beat_id, "removed": len(assignments)},
            )

        snapshot = {**beat, "assigned_personnel": [_assignment_summary(a) for a in assignments]}
        self._audit(context, table_name="beats", operation="DELETE", old_data=snapshot, new_data=None)

        self._repository.delete_beat(beat_id)
        logger.info("beat.deleted", extra={"beat_id": beat_id, "changed_by": context.actor})
        return beat
