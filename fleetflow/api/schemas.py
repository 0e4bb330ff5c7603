"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from fleetflow.domain.entities import TransitionPayload
from fleetflow.domain.enums import (
    DriverStatus,
    Severity,
    TripStatus,
    VehicleStatus,
    VehicleType,
)


# ── Requests ──────────────────────────────────────────────────────────


class TripCreateRequest(BaseModel):
    vehicle_id: int
    driver_id: int
    cargo_weight: float = Field(
        ..., gt=0, allow_inf_nan=False, description="Cargo weight in kg."
    )
    origin: str = Field(..., min_length=1, max_length=200)
    destination: str = Field(..., min_length=1, max_length=200)
    cargo_description: str = Field("", max_length=500)
    estimated_distance: float = Field(0.0, ge=0, allow_inf_nan=False)
    estimated_fuel_cost: float = Field(0.0, ge=0, allow_inf_nan=False)
    estimated_revenue: float = Field(0.0, ge=0, allow_inf_nan=False)


class TripStatusUpdateRequest(BaseModel):
    status: TripStatus
    note: Optional[str] = Field(None, max_length=500)
    reason: Optional[str] = Field(
        None, max_length=500, description="Required when cancelling."
    )
    end_odometer: Optional[float] = Field(
        None, allow_inf_nan=False, description="Required when completing; km."
    )
    actual_fuel_cost: Optional[float] = Field(None, allow_inf_nan=False)
    actual_revenue: Optional[float] = Field(None, allow_inf_nan=False)

    def to_payload(self) -> TransitionPayload:
        return TransitionPayload(
            note=self.note,
            reason=self.reason,
            end_odometer=self.end_odometer,
            actual_fuel_cost=self.actual_fuel_cost,
            actual_revenue=self.actual_revenue,
        )


class UtilizationRequest(BaseModel):
    cargo_weight: float = Field(..., allow_inf_nan=False)
    vehicle_capacity: float = Field(..., allow_inf_nan=False)


# ── Responses ─────────────────────────────────────────────────────────


class UtilizationResponse(BaseModel):
    percentage: float
    severity: Severity
    allow_dispatch: bool
    overage: float
    message: str

    model_config = {"from_attributes": True}


class TransitionRecordResponse(BaseModel):
    status: TripStatus
    changed_at: datetime
    changed_by: Optional[int] = None
    note: str = ""

    model_config = {"from_attributes": True}


class TripResponse(BaseModel):
    id: int
    trip_code: str
    status: TripStatus
    origin: str
    destination: str
    cargo_weight: float
    cargo_description: str = ""
    vehicle_id: int
    driver_id: int
    estimated_distance: float = 0.0
    estimated_fuel_cost: float = 0.0
    estimated_revenue: float = 0.0
    actual_fuel_cost: Optional[float] = None
    actual_revenue: Optional[float] = None
    start_odometer: Optional[float] = None
    end_odometer: Optional[float] = None
    cancel_reason: Optional[str] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    history: list[TransitionRecordResponse] = []

    model_config = {"from_attributes": True}


class TripCreateResponse(TripResponse):
    utilization: UtilizationResponse


class TripListResponse(BaseModel):
    trips: list[TripResponse]
    total: int
    page: int
    pages: int
    has_next_page: bool
    has_prev_page: bool


class TimelineResponse(BaseModel):
    trip_code: str
    origin: str
    destination: str
    current_status: TripStatus
    allowed_targets: list[TripStatus]
    actions: dict[str, str]
    timeline: list[TransitionRecordResponse]


class LifecycleResponse(BaseModel):
    initial: TripStatus
    terminal: list[TripStatus]
    transitions: dict[str, list[TripStatus]]
    actions: dict[str, str]


class VehicleResponse(BaseModel):
    id: int
    name: str
    license_plate: str
    type: VehicleType
    capacity: float
    odometer: float
    status: VehicleStatus

    model_config = {"from_attributes": True}


class DriverResponse(BaseModel):
    id: int
    name: str
    license_number: str
    license_category: VehicleType
    license_expiry: date
    safety_score: float
    status: DriverStatus

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    error: Optional[str] = None
    field: Optional[str] = None
