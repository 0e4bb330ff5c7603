"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Trip``: ``apply`` only accepts records produced for a
  legal successor (Draft -> Dispatched -> In Transit -> Completed | Cancelled).
- ``TransitionRecord`` is a frozen value object; ``Trip.history`` only grows.
- ``Vehicle`` and ``Driver`` are read-only reference data supplied by the
  registries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from .enums import (
    TRIP_TRANSITIONS,
    DriverStatus,
    TripStatus,
    VehicleStatus,
    VehicleType,
)
from .errors import IllegalTransitionError


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class TransitionRecord:
    status: TripStatus
    timestamp: datetime
    actor_id: Optional[int]
    note: str = ""


@dataclass(frozen=True)
class TransitionPayload:
    """Fields a caller may attach to a status change."""

    note: Optional[str] = None
    reason: Optional[str] = None
    end_odometer: Optional[float] = None
    actual_fuel_cost: Optional[float] = None
    actual_revenue: Optional[float] = None


# ── Reference data ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Vehicle:
    id: Optional[int] = None
    type: VehicleType = VehicleType.TRUCK
    capacity: float = 0.0
    odometer: float = 0.0
    status: VehicleStatus = VehicleStatus.AVAILABLE
    is_retired: bool = False
    name: str = ""


@dataclass(frozen=True)
class Driver:
    id: Optional[int] = None
    license_category: VehicleType = VehicleType.TRUCK
    license_expiry: Optional[date] = None
    safety_score: float = 100.0
    status: DriverStatus = DriverStatus.AVAILABLE
    name: str = ""


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Trip:
    id: Optional[int] = None
    status: TripStatus = TripStatus.DRAFT
    origin: str = ""
    destination: str = ""
    cargo_weight: float = 0.0
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    estimated_distance: float = 0.0
    estimated_fuel_cost: float = 0.0
    estimated_revenue: float = 0.0
    actual_fuel_cost: Optional[float] = None
    actual_revenue: Optional[float] = None
    end_odometer: Optional[float] = None
    cancel_reason: Optional[str] = None
    history: list[TransitionRecord] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return not TRIP_TRANSITIONS[self.status]

    def apply(
        self, record: TransitionRecord, payload: Optional[TransitionPayload] = None
    ) -> None:
        """Append *record* and move to its status, copying payload fields."""
        if record.status not in TRIP_TRANSITIONS.get(self.status, ()):
            raise IllegalTransitionError(
                f"Cannot transition from {self.status.value} to {record.status.value}"
            )
        self.history.append(record)
        self.status = record.status

        if payload is None:
            return
        if record.status == TripStatus.COMPLETED:
            self.end_odometer = payload.end_odometer
            if payload.actual_fuel_cost is not None:
                self.actual_fuel_cost = payload.actual_fuel_cost
            if payload.actual_revenue is not None:
                self.actual_revenue = payload.actual_revenue
        elif record.status == TripStatus.CANCELLED:
            self.cancel_reason = record.note
