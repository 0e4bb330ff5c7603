"""
Dispatch Service
================

Authoritative server-side enforcement of the trip lifecycle.  Client-side
checks in the creation wizard are UX only; every create and status change is
re-validated here before anything is persisted.

Concurrency safety
------------------
* **Redis distributed lock** (``lock:trip:{id}``) rejects a second transition
  for the same trip while one is in flight.
* **SELECT ... FOR UPDATE** on the trip, vehicle and driver rows holds them
  until the service commits, which happens before the lock is released.

Events are published only after the commit, so a listener that refetches on
``fleet_update`` always sees the change.

Side effects per transition
---------------------------
* **create**     -- vehicle and driver go ``On Trip``; driver trip count +1.
* **Completed**  -- vehicle odometer := end odometer; vehicle and driver
  released; driver completed count +1; revenue rolled into the vehicle.
* **Cancelled**  -- vehicle and driver released; driver trip count -1.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.config import settings
from fleetflow.domain.eligibility import check_assignment
from fleetflow.domain.entities import TransitionPayload, TransitionRecord
from fleetflow.domain.enums import DriverStatus, TripStatus, VehicleStatus
from fleetflow.domain.errors import (
    CapacityExceededError,
    ResourceNotFoundError,
    TransitionInProgressError,
)
from fleetflow.domain.lifecycle import coerce_status, validate_transition
from fleetflow.domain.utilization import UtilizationResult
from fleetflow.infrastructure.events import (
    OVERWEIGHT_BLOCKED,
    TRIP_CREATED,
    TRIP_STATUS_CHANGED,
    FleetEventPublisher,
)
from fleetflow.infrastructure.locks import DistributedLock, LockUnavailable
from fleetflow.infrastructure.models import (
    DriverModel,
    TripModel,
    TripStatusHistoryModel,
    VehicleModel,
)
from fleetflow.infrastructure.repositories import (
    DriverRepository,
    TripRepository,
    VehicleRepository,
)

logger = logging.getLogger(__name__)


# ── Public API ────────────────────────────────────────────────────────


async def create_trip(
    session: AsyncSession,
    redis: aioredis.Redis,
    *,
    vehicle_id: int,
    driver_id: int,
    cargo_weight: float,
    origin: str,
    destination: str,
    cargo_description: str = "",
    estimated_distance: float = 0.0,
    estimated_fuel_cost: float = 0.0,
    estimated_revenue: float = 0.0,
    actor_id: Optional[int] = None,
    today: Optional[date] = None,
) -> tuple[TripModel, UtilizationResult]:
    """Create and commit a Draft trip after the assignment checks pass."""
    vehicle = await _load_vehicle(session, vehicle_id)
    driver = await _load_driver(session, driver_id)

    try:
        utilization = check_assignment(
            vehicle.to_entity(),
            driver.to_entity(),
            cargo_weight,
            today=today or date.today(),
        )
    except CapacityExceededError as exc:
        logger.warning(
            "Overweight trip blocked: vehicle=%s cargo=%s capacity=%s",
            vehicle.id, cargo_weight, vehicle.capacity,
        )
        await FleetEventPublisher(redis).publish(
            OVERWEIGHT_BLOCKED,
            vehicle_id=vehicle.id,
            cargo_weight=cargo_weight,
            capacity=vehicle.capacity,
            message=exc.message,
        )
        raise

    created = TransitionRecord(
        status=TripStatus.DRAFT,
        timestamp=datetime.now(timezone.utc),
        actor_id=actor_id,
        note="Trip created",
    )
    trip = TripModel(
        status=TripStatus.DRAFT,
        origin=origin,
        destination=destination,
        cargo_weight=cargo_weight,
        cargo_description=cargo_description,
        vehicle_id=vehicle.id,
        driver_id=driver.id,
        estimated_distance=estimated_distance,
        estimated_fuel_cost=estimated_fuel_cost,
        estimated_revenue=estimated_revenue,
        start_odometer=vehicle.odometer,
        created_by=actor_id,
        history=[TripStatusHistoryModel.from_record(created)],
    )
    trip = await TripRepository(session).create(trip)

    vehicle.status = VehicleStatus.ON_TRIP
    driver.status = DriverStatus.ON_TRIP
    driver.total_trips += 1
    await session.commit()

    logger.info(
        "Trip %s created: %s -> %s (vehicle=%s driver=%s, %s)",
        trip.trip_code, origin, destination, vehicle.id, driver.id,
        utilization.severity.value,
    )
    await FleetEventPublisher(redis).publish(
        TRIP_CREATED, trip_id=trip.id, vehicle_id=vehicle.id, driver_id=driver.id
    )
    return trip, utilization


async def advance_trip(
    session: AsyncSession,
    redis: aioredis.Redis,
    trip_id: int,
    target: TripStatus | str,
    payload: Optional[TransitionPayload] = None,
    *,
    actor_id: Optional[int] = None,
) -> TripModel:
    """Validate, apply and commit one status transition for *trip_id*."""
    payload = payload or TransitionPayload()
    lock = DistributedLock.for_trip(
        redis, trip_id, ttl_seconds=settings.trip_lock_ttl_seconds
    )
    try:
        async with lock:
            trip, previous, record = await _apply_transition(
                session, trip_id, target, payload, actor_id
            )
            await session.commit()
    except LockUnavailable:
        raise TransitionInProgressError(
            f"Another status change for trip {trip_id} is in progress"
        ) from None

    logger.info(
        "Trip %s: %s -> %s by actor=%s",
        trip.trip_code, previous.value, record.status.value, actor_id,
    )
    await FleetEventPublisher(redis).publish(
        TRIP_STATUS_CHANGED,
        trip_id=trip.id,
        previous_status=previous.value,
        status=record.status.value,
        vehicle_id=trip.vehicle_id,
        driver_id=trip.driver_id,
    )
    return trip


# ── Internals ─────────────────────────────────────────────────────────


async def _apply_transition(
    session: AsyncSession,
    trip_id: int,
    target: TripStatus | str,
    payload: TransitionPayload,
    actor_id: Optional[int],
) -> tuple[TripModel, TripStatus, TransitionRecord]:
    trip = await TripRepository(session).get_for_update(trip_id)
    if trip is None:
        raise ResourceNotFoundError("Trip not found")
    vehicle = await _load_vehicle(session, trip.vehicle_id)
    driver = await _load_driver(session, trip.driver_id)

    previous = coerce_status(trip.status)
    entity = trip.to_entity()
    record = validate_transition(
        entity,
        target,
        payload,
        vehicle=vehicle.to_entity(),
        actor_id=actor_id,
    )
    entity.apply(record, payload)

    trip.status = entity.status
    trip.history.append(TripStatusHistoryModel.from_record(record))
    if record.status == TripStatus.COMPLETED:
        _complete(trip, vehicle, driver, record, entity.end_odometer)
        trip.actual_fuel_cost = entity.actual_fuel_cost
        trip.actual_revenue = entity.actual_revenue
        if entity.actual_revenue:
            vehicle.total_revenue = (vehicle.total_revenue or 0.0) + entity.actual_revenue
    elif record.status == TripStatus.CANCELLED:
        _cancel(trip, vehicle, driver, record)

    await session.flush()
    return trip, previous, record


async def _load_vehicle(session: AsyncSession, vehicle_id: int) -> VehicleModel:
    vehicle = await VehicleRepository(session).get_for_update(vehicle_id)
    if vehicle is None:
        raise ResourceNotFoundError("Vehicle not found", field="vehicle_id")
    return vehicle


async def _load_driver(session: AsyncSession, driver_id: int) -> DriverModel:
    driver = await DriverRepository(session).get_for_update(driver_id)
    if driver is None:
        raise ResourceNotFoundError("Driver not found", field="driver_id")
    return driver


def _release(vehicle: VehicleModel, driver: DriverModel) -> None:
    vehicle.status = VehicleStatus.AVAILABLE
    driver.status = DriverStatus.AVAILABLE


def _complete(
    trip: TripModel,
    vehicle: VehicleModel,
    driver: DriverModel,
    record: TransitionRecord,
    end_odometer: float,
) -> None:
    trip.completed_at = record.timestamp
    trip.end_odometer = end_odometer
    vehicle.odometer = end_odometer
    _release(vehicle, driver)
    driver.completed_trips += 1


def _cancel(
    trip: TripModel,
    vehicle: VehicleModel,
    driver: DriverModel,
    record: TransitionRecord,
) -> None:
    trip.cancelled_at = record.timestamp
    trip.cancel_reason = record.note
    _release(vehicle, driver)
    driver.total_trips = max(0, driver.total_trips - 1)
