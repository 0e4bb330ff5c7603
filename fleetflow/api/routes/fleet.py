"""
Fleet lookup endpoints used by the trip creation wizard
========================================================

GET /api/v1/vehicles/available                      -- vehicles free for dispatch
GET /api/v1/drivers/available?license_category=Van  -- drivers free for dispatch
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.api.dependencies import Actor, get_db, require_permission
from fleetflow.api.middleware import limiter
from fleetflow.api.schemas import DriverResponse, VehicleResponse
from fleetflow.config import settings
from fleetflow.domain.enums import VehicleType
from fleetflow.domain.rbac import Permission
from fleetflow.infrastructure.repositories import DriverRepository, VehicleRepository

router = APIRouter(tags=["fleet"])


@router.get(
    "/vehicles/available",
    response_model=list[VehicleResponse],
    summary="List vehicles available for dispatch",
)
@limiter.limit(settings.rate_limit)
async def list_available_vehicles(
    request: Request,
    actor: Actor = Depends(require_permission(Permission.VIEW_VEHICLES)),
    db: AsyncSession = Depends(get_db),
):
    return await VehicleRepository(db).get_available()


@router.get(
    "/drivers/available",
    response_model=list[DriverResponse],
    summary="List drivers available for dispatch",
    description="Pass the selected vehicle's type to get only licensed drivers.",
)
@limiter.limit(settings.rate_limit)
async def list_available_drivers(
    request: Request,
    license_category: Optional[VehicleType] = None,
    actor: Actor = Depends(require_permission(Permission.VIEW_DRIVERS)),
    db: AsyncSession = Depends(get_db),
):
    return await DriverRepository(db).get_available(license_category)
