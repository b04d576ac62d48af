"""Unit tests for BeatService business rules."""

from __future__ import annotations

import pytest

from app.adapters.storage.in_memory import InMemoryBeatRepository
from app.core.errors import NotFoundAppError, ValidationAppError
from app.schemas.beat import BeatAssignmentCreate, BeatCreate, BeatUpdate
from app.services.beat_service import AuditContext, BeatService, mask_email

CONTEXT = AuditContext(actor="abc123", ip_address="203.0.113.7", user_agent="pytest")


@pytest.fixture
def repository() -> InMemoryBeatRepository:
    return InMemoryBeatRepository()


@pytest.fixture
def service(repository: InMemoryBeatRepository) -> BeatService:
    return BeatService(repository)


@pytest.fixture
def beat(service: BeatService) -> dict:
    return service.create_beat(
        BeatCreate(name="Baco Coastal", center_lat=13.35, center_lng=121.1, radius=300),
        CONTEXT,
    )


class TestMaskEmail:
    def test_masks_local_part(self) -> None:
        assert mask_email("maria.santos@example.ph") == "ma***@example.ph"

    def test_none_and_empty(self) -> None:
        assert mask_email(None) is None
        assert mask_email("") is None


def test_audit_entry_records_caller(repository: InMemoryBeatRepository, beat: dict) -> None:
    entry = repository.list_audit_entries()[0]

    assert entry["changed_by"] == "abc123"
    assert entry["ip_address"] == "203.0.113.7"
    assert entry["user_agent"] == "pytest"
    assert entry["old_data"] is None


def test_update_ignores_fields_not_sent(service: BeatService, beat: dict) -> None:
    updated = service.update_beat(beat["id"], BeatUpdate(description="  Pier area "), CONTEXT)

    assert updated["address"] == "Pier area"
    assert updated["radius_meters"] == 300
    assert updated["name"] == "Baco Coastal"


def test_get_missing_raises_not_found(service: BeatService) -> None:
    with pytest.raises(NotFoundAppError) as exc_info:
        service.get_beat("missing")

    assert exc_info.value.code == "beat_not_found"


def test_delete_blocked_by_accepted_assignment(
    service: BeatService, repository: InMemoryBeatRepository, beat: dict
) -> None:
    repository.add_assignment({"beat_id": beat["id"], "personnel_id": "p-1"})
    repository.add_assignment({"beat_id": beat["id"], "personnel_id": "p-2", "acceptance_status": "accepted"})

    with pytest.raises(ValidationAppError) as exc_info:
        service.delete_beat(beat["id"], CONTEXT)

    assert exc_info.value.details == {"beat_id": beat["id"], "accepted_personnel": 1}
    assert len(repository.list_assignments(beat["id"])) == 2


def test_delete_without_assignments(service: BeatService, repository: InMemoryBeatRepository, beat: dict) -> None:
    deleted = service.delete_beat(beat["id"], CONTEXT)

    assert deleted["id"] == beat["id"]
    assert repository.list_beats() == []
    assert repository.list_audit_entries("beat_personnel") == []
    assert repository.list_audit_entries("beats")[-1]["old_data"]["assigned_personnel"] == []


def test_assign_personnel_is_audited(service: BeatService, repository: InMemoryBeatRepository, beat: dict) -> None:
    assignment = service.assign_personnel(
        beat["id"],
        BeatAssignmentCreate(personnel_id=" p-7 ", full_name="Ana Reyes", rank="PSSg"),
        CONTEXT,
    )

    assert assignment["personnel_id"] == "p-7"
    assert assignment["acceptance_status"] == "pending"
    assert "email" not in assignment
    assert repository.list_assignments(beat["id"]) == [assignment]

    entry = repository.list_audit_entries("beat_personnel")[0]
    assert entry["operation"] == "INSERT"
    assert entry["old_data"] is None
    assert entry["new_data"]["id"] == assignment["id"]
    assert entry["changed_by"] == "abc123"


def test_assign_personnel_to_missing_beat(service: BeatService, repository: InMemoryBeatRepository) -> None:
    with pytest.raises(NotFoundAppError):
        service.assign_personnel("missing", BeatAssignmentCreate(personnel_id="p-1"), CONTEXT)

    assert repository.list_audit_entries("beat_personnel") == []
