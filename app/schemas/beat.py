"""Pydantic schemas for beat requests and responses."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, StringConstraints

BeatName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
NonBlankText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Latitude = Annotated[float, Field(ge=-90, le=90, description="Latitude of the beat center.")]
Longitude = Annotated[float, Field(ge=-180, le=180, description="Longitude of the beat center.")]
RadiusMeters = Annotated[float, Field(ge=10, le=10_000, description="Geofence radius in meters.")]


class BeatCreate(BaseModel):
    """Payload for creating a beat."""

    name: BeatName
    center_lat: Latitude
    center_lng: Longitude
    radius: RadiusMeters
    description: str | None = Field(
        default=None,
        description="Free-text location description, stored as the beat address.",
    )
    unit: NonBlankText | None = None
    sub_unit: NonBlankText | None = None


class BeatUpdate(BaseModel):
    """Partial update: only fields present in the request body are changed."""

    name: BeatName | None = None
    center_lat: Latitude | None = None
    center_lng: Longitude | None = None
    radius: RadiusMeters | None = None
    description: str | None = None
    unit: NonBlankText | None = None
    sub_unit: NonBlankText | None = None
    status: NonBlankText | None = None


class BeatResponse(BaseModel):
    """A stored beat."""

    id: str
    name: str
    center_lat: float
    center_lng: float
    radius_meters: float
    address: str | None = None
    unit: str | None = None
    sub_unit: str | None = None
    status: str | None = None
    created_at: str
    updated_at: str


class BeatDeleteResponse(BaseModel):
    message: str
    deleted_beat: BeatResponse


class BeatAssignmentCreate(BaseModel):
    """Payload for assigning a person to a beat."""

    personnel_id: NonBlankText
    full_name: str | None = None
    rank: str | None = None
    email: str | None = None
    acceptance_status: Literal["pending", "accepted", "declined"] = "pending"


class BeatAssignmentResponse(BaseModel):
    id: str
    beat_id: str
    personnel_id: str
    full_name: str | None = None
    rank: str | None = None
    email: str | None = None
    acceptance_status: str
    assigned_at: str
