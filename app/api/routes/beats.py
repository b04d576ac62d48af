from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from app.core.auth import verify_api_key
from app.core.rate_limit import client_address, enforce_rate_limit
from app.schemas.beat import (
    BeatAssignmentCreate,
    BeatAssignmentResponse,
    BeatCreate,
    BeatDeleteResponse,
    BeatResponse,
    BeatUpdate,
)
from app.services.beat_service import AuditContext, BeatService

router = APIRouter(tags=["Beats"])


def get_beat_service(request: Request) -> BeatService:
    """Build the service over the repository owned by the running app."""
    return BeatService(request.app.state.beat_repository)


def get_audit_context(
    request: Request,
    actor: Annotated[str, Depends(verify_api_key)],
) -> AuditContext:
    return AuditContext(
        actor=actor,
        ip_address=client_address(request),
        user_agent=request.headers.get("user-agent") or "unknown",
    )


ServiceDep = Annotated[BeatService, Depends(get_beat_service)]
AuditDep = Annotated[AuditContext, Depends(get_audit_context)]


@router.get(
    "/beats",
    response_model=list[BeatResponse],
    dependencies=[Depends(verify_api_key)],
)
async def list_beats(service: ServiceDep) -> list[dict]:
    """List all beats, newest first."""
    return service.list_beats()


@router.get(
    "/beats/{beat_id}",
    response_model=BeatResponse,
    dependencies=[Depends(verify_api_key)],
)
async def get_beat(beat_id: str, service: ServiceDep) -> dict:
    """Fetch a single beat.

    Raises:
        NotFoundAppError: 404 when the beat does not exist.
    """
    return service.get_beat(beat_id)


@router.post(
    "/beats",
    response_model=BeatResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_beat(payload: BeatCreate, service: ServiceDep, audit: AuditDep) -> dict:
    """Create a beat and record an INSERT audit entry."""
    return service.create_beat(payload, audit)


@router.post(
    "/beats/{beat_id}/personnel",
    response_model=BeatAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_personnel(
    beat_id: str,
    payload: BeatAssignmentCreate,
    service: ServiceDep,
    audit: AuditDep,
) -> dict:
    """Assign a person to a beat; new assignments start as pending unless given."""
    return service.assign_personnel(beat_id, payload, audit)


@router.put(
    "/beats/{beat_id}",
    response_model=BeatResponse,
    dependencies=[Depends(enforce_rate_limit("update"))],
)
async def update_beat(
    beat_id: str,
    payload: BeatUpdate,
    service: ServiceDep,
    audit: AuditDep,
) -> dict:
    """Update the provided fields of a beat.

    Rate limited per client address (5 per minute by default); the limit is
    checked before authentication.
    """
    return service.update_beat(beat_id, payload, audit)


@router.delete(
    "/beats/{beat_id}",
    response_model=BeatDeleteResponse,
    dependencies=[Depends(enforce_rate_limit("delete"))],
)
async def delete_beat(beat_id: str, service: ServiceDep, audit: AuditDep) -> BeatDeleteResponse:
    """Delete a beat.

    Rate limited per client address (3 per minute by default). Refused with
    400 while any assigned person has accepted; pending assignments are
    removed first.
    """
    deleted = service.delete_beat(beat_id, audit)
    return BeatDeleteResponse(
        message="Beat deleted successfully",
        deleted_beat=BeatResponse(**deleted),
    )
