"""
Trip Lifecycle State Machine
============================

    Draft --dispatch--> Dispatched --start--> In Transit --complete--> Completed
      |                     |                      |
      +--------cancel-------+---------cancel-------+-----------------> Cancelled

Every function here is pure: no I/O, no shared state.  Callers persisting the
returned ``TransitionRecord`` must hold the trip exclusively (see
``fleetflow.services.dispatch``); two callers validating against the same
stale status could otherwise both succeed.

Check order in ``validate_transition``
--------------------------------------
1. status values are known                     -> ``InvalidStateError``
2. Draft -> Dispatched: cargo fits the vehicle -> ``CapacityExceededError``
3. target is a legal successor                 -> ``IllegalTransitionError``
4. required payload fields are present         -> ``MissingFieldError``
5. payload numbers are in range                -> ``NumericRangeError``
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

from .entities import TransitionPayload, TransitionRecord, Trip, Vehicle
from .enums import (
    FORWARD_SUCCESSOR,
    TERMINAL_STATUSES,
    TRIP_ACTIONS,
    TRIP_TRANSITIONS,
    TripStatus,
)
from .errors import (
    CapacityExceededError,
    IllegalTransitionError,
    InvalidStateError,
    MissingFieldError,
    NumericRangeError,
)
from .utilization import score_utilization


def coerce_status(value: object) -> TripStatus:
    """Return *value* as a ``TripStatus`` or raise ``InvalidStateError``."""
    if isinstance(value, TripStatus):
        return value
    try:
        return TripStatus(value)
    except ValueError:
        raise InvalidStateError(f"Unknown trip status: {value!r}") from None


def next_state(status: object) -> Optional[TripStatus]:
    """Single forward successor of *status*, ``None`` when terminal."""
    return FORWARD_SUCCESSOR[coerce_status(status)]


def allowed_targets(status: object) -> tuple[TripStatus, ...]:
    """Ordered valid next statuses: forward successor first, then Cancelled."""
    return TRIP_TRANSITIONS[coerce_status(status)]


def action_for(target: object) -> str:
    status = coerce_status(target)
    try:
        return TRIP_ACTIONS[status]
    except KeyError:
        raise IllegalTransitionError(
            f"No action leads to {status.value}"
        ) from None


def _is_legal(current: TripStatus, target: TripStatus) -> bool:
    if target == TripStatus.CANCELLED:
        return current not in TERMINAL_STATUSES
    return FORWARD_SUCCESSOR[current] == target


def _check_reading(name: str, value: Optional[float]) -> None:
    if value is None:
        return
    if not math.isfinite(value):
        raise NumericRangeError(name, f"{name} must be a finite number")
    if value < 0:
        raise NumericRangeError(name, f"{name} cannot be negative")


def validate_transition(
    trip: Trip,
    target: object,
    payload: Optional[TransitionPayload] = None,
    *,
    vehicle: Vehicle,
    actor_id: Optional[int],
    timestamp: Optional[datetime] = None,
) -> TransitionRecord:
    """
    Decide whether *trip* may move to *target*.

    Returns the ``TransitionRecord`` to persist, or raises a
    ``DispatchError`` subclass.  With a fixed *timestamp* the result is
    fully determined by the inputs.
    """
    payload = payload or TransitionPayload()
    current = coerce_status(trip.status)
    target = coerce_status(target)

    if current == TripStatus.DRAFT and target == TripStatus.DISPATCHED:
        utilization = score_utilization(trip.cargo_weight, vehicle.capacity)
        if not utilization.allow_dispatch:
            raise CapacityExceededError(utilization)

    if not _is_legal(current, target):
        raise IllegalTransitionError(
            f"Invalid status transition: {current.value} -> {target.value}"
        )

    note = (payload.note or "").strip()

    if target == TripStatus.COMPLETED:
        if payload.end_odometer is None:
            raise MissingFieldError(
                "end_odometer", "end_odometer is required to complete a trip"
            )
        _check_reading("end_odometer", payload.end_odometer)
        if payload.end_odometer < vehicle.odometer:
            raise NumericRangeError(
                "end_odometer",
                f"end_odometer {payload.end_odometer:g} is below the vehicle's "
                f"last reading {vehicle.odometer:g}",
            )
        _check_reading("actual_fuel_cost", payload.actual_fuel_cost)
        _check_reading("actual_revenue", payload.actual_revenue)

    elif target == TripStatus.CANCELLED:
        reason = (payload.reason or "").strip()
        if not reason:
            raise MissingFieldError(
                "reason", "reason is required to cancel a trip"
            )
        note = reason

    return TransitionRecord(
        status=target,
        timestamp=timestamp or datetime.now(timezone.utc),
        actor_id=actor_id,
        note=note,
    )
