"""
Trip endpoints
==============

GET   /api/v1/trips                 -- filtered, paginated trip list
POST  /api/v1/trips                 -- create a Draft trip (201)
POST  /api/v1/trips/utilization     -- cargo utilization preview for the wizard
GET   /api/v1/trips/lifecycle       -- transition table and action names
GET   /api/v1/trips/{trip_id}       -- single trip with history
GET   /api/v1/trips/{trip_id}/timeline -- status history and next actions
PATCH /api/v1/trips/{trip_id}/status   -- advance or cancel a trip
"""

import math
from typing import Optional

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.api.dependencies import (
    Actor,
    get_db,
    require_any_permission,
    require_permission,
)
from fleetflow.api.middleware import limiter
from fleetflow.api.schemas import (
    ErrorResponse,
    LifecycleResponse,
    TimelineResponse,
    TransitionRecordResponse,
    TripCreateRequest,
    TripCreateResponse,
    TripListResponse,
    TripResponse,
    TripStatusUpdateRequest,
    UtilizationRequest,
    UtilizationResponse,
)
from fleetflow.config import settings
from fleetflow.domain.enums import TERMINAL_STATUSES, TRIP_TRANSITIONS, TripStatus
from fleetflow.domain.errors import ResourceNotFoundError
from fleetflow.domain.lifecycle import action_for, allowed_targets
from fleetflow.domain.rbac import Permission
from fleetflow.domain.utilization import score_utilization
from fleetflow.infrastructure.redis_client import get_redis
from fleetflow.infrastructure.repositories import TripRepository
from fleetflow.services import dispatch

router = APIRouter(prefix="/trips", tags=["trips"])

_errors = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


@router.get("", response_model=TripListResponse, summary="List trips")
@limiter.limit(settings.rate_limit)
async def list_trips(
    request: Request,
    status: Optional[TripStatus] = None,
    vehicle_id: Optional[int] = None,
    driver_id: Optional[int] = None,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    actor: Actor = Depends(require_permission(Permission.VIEW_TRIPS)),
    db: AsyncSession = Depends(get_db),
):
    trips, total = await TripRepository(db).list_trips(
        status=status,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
        search=search,
        page=page,
        limit=limit,
    )
    pages = math.ceil(total / limit)
    return TripListResponse(
        trips=[TripResponse.model_validate(t) for t in trips],
        total=total,
        page=page,
        pages=pages,
        has_next_page=page < pages,
        has_prev_page=page > 1,
    )


@router.post(
    "",
    status_code=201,
    response_model=TripCreateResponse,
    summary="Create a trip",
    description=(
        "Checks vehicle and driver availability, license validity and "
        "category, and blocks cargo above the vehicle's capacity."
    ),
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def create_trip(
    request: Request,
    body: TripCreateRequest,
    actor: Actor = Depends(
        require_permission(
            Permission.CREATE_TRIPS, Permission.VIEW_VEHICLES, Permission.VIEW_DRIVERS
        )
    ),
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    trip, utilization = await dispatch.create_trip(
        db,
        redis,
        **body.model_dump(),
        actor_id=actor.id,
    )
    return TripCreateResponse(
        **TripResponse.model_validate(trip).model_dump(),
        utilization=UtilizationResponse.model_validate(utilization),
    )


@router.post(
    "/utilization",
    response_model=UtilizationResponse,
    summary="Score cargo weight against a vehicle capacity",
    responses={422: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def preview_utilization(
    request: Request,
    body: UtilizationRequest,
    actor: Actor = Depends(
        require_any_permission(Permission.CREATE_TRIPS, Permission.MANAGE_VEHICLES)
    ),
):
    return score_utilization(body.cargo_weight, body.vehicle_capacity)


@router.get(
    "/lifecycle",
    response_model=LifecycleResponse,
    summary="Trip state machine",
)
async def get_lifecycle():
    return LifecycleResponse(
        initial=TripStatus.DRAFT,
        terminal=sorted(TERMINAL_STATUSES, key=list(TripStatus).index),
        transitions={s.value: list(t) for s, t in TRIP_TRANSITIONS.items()},
        actions={
            t.value: action_for(t)
            for targets in TRIP_TRANSITIONS.values()
            for t in targets
        },
    )


@router.get(
    "/{trip_id}",
    response_model=TripResponse,
    summary="Get a trip",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_trip(
    request: Request,
    trip_id: int,
    actor: Actor = Depends(require_permission(Permission.VIEW_TRIPS)),
    db: AsyncSession = Depends(get_db),
):
    trip = await TripRepository(db).get_by_id(trip_id)
    if not trip:
        raise ResourceNotFoundError("Trip not found")
    return trip


@router.get(
    "/{trip_id}/timeline",
    response_model=TimelineResponse,
    summary="Get a trip's status history",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_trip_timeline(
    request: Request,
    trip_id: int,
    actor: Actor = Depends(require_permission(Permission.VIEW_TRIPS)),
    db: AsyncSession = Depends(get_db),
):
    trip = await TripRepository(db).get_by_id(trip_id)
    if not trip:
        raise ResourceNotFoundError("Trip not found")
    targets = allowed_targets(trip.status)
    return TimelineResponse(
        trip_code=trip.trip_code,
        origin=trip.origin,
        destination=trip.destination,
        current_status=trip.status,
        allowed_targets=list(targets),
        actions={t.value: action_for(t) for t in targets},
        timeline=[TransitionRecordResponse.model_validate(h) for h in trip.history],
    )


@router.patch(
    "/{trip_id}/status",
    response_model=TripResponse,
    summary="Advance or cancel a trip",
    description=(
        "Draft -> Dispatched -> In Transit -> Completed; any non-terminal "
        "trip may be Cancelled with a reason. Completing requires "
        "end_odometer, which may not be below the vehicle's odometer."
    ),
    responses=_errors,
)
@limiter.limit(settings.rate_limit)
async def advance_trip_status(
    request: Request,
    trip_id: int,
    body: TripStatusUpdateRequest,
    actor: Actor = Depends(require_permission(Permission.CREATE_TRIPS)),
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    return await dispatch.advance_trip(
        db,
        redis,
        trip_id,
        body.status,
        body.to_payload(),
        actor_id=actor.id,
    )
