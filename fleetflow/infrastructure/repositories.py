"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.
"""

from __future__ import annotations

import secrets
import string
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DriverModel, TripModel, VehicleModel
from fleetflow.domain.enums import DriverStatus, TripStatus, VehicleStatus, VehicleType

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_trip_code() -> str:
    """``FF-`` followed by six upper-case alphanumerics."""
    return "FF-" + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))


class TripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, trip: TripModel) -> TripModel:
        if not trip.trip_code:
            trip.trip_code = generate_trip_code()
        self.session.add(trip)
        await self.session.flush()
        # server default; async sessions cannot lazy-load it later
        await self.session.refresh(trip, attribute_names=["created_at"])
        return trip

    async def get_by_id(self, trip_id: int) -> Optional[TripModel]:
        return await self.session.get(TripModel, trip_id)

    async def get_for_update(self, trip_id: int) -> Optional[TripModel]:
        """SELECT ... FOR UPDATE so one transition commits per trip."""
        result = await self.session.execute(
            select(TripModel)
            .where(TripModel.id == trip_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_trips(
        self,
        *,
        status: Optional[TripStatus] = None,
        vehicle_id: Optional[int] = None,
        driver_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[TripModel], int]:
        """Return one page of trips (newest first) and the total match count."""
        filters = []
        if status is not None:
            filters.append(TripModel.status == status)
        if vehicle_id is not None:
            filters.append(TripModel.vehicle_id == vehicle_id)
        if driver_id is not None:
            filters.append(TripModel.driver_id == driver_id)
        if search:
            pattern = f"%{search}%"
            filters.append(
                or_(
                    TripModel.trip_code.ilike(pattern),
                    TripModel.origin.ilike(pattern),
                    TripModel.destination.ilike(pattern),
                )
            )

        total = await self.session.execute(
            select(func.count()).select_from(TripModel).where(*filters)
        )
        result = await self.session.execute(
            select(TripModel)
            .where(*filters)
            .order_by(TripModel.created_at.desc(), TripModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total.scalar() or 0


class VehicleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_update(self, vehicle_id: int) -> Optional[VehicleModel]:
        result = await self.session.execute(
            select(VehicleModel).where(VehicleModel.id == vehicle_id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def get_available(self) -> list[VehicleModel]:
        result = await self.session.execute(
            select(VehicleModel)
            .where(
                VehicleModel.status == VehicleStatus.AVAILABLE,
                VehicleModel.is_retired.is_(False),
            )
            .order_by(VehicleModel.name)
        )
        return list(result.scalars().all())


class DriverRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_update(self, driver_id: int) -> Optional[DriverModel]:
        result = await self.session.execute(
            select(DriverModel).where(DriverModel.id == driver_id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def get_available(
        self, license_category: Optional[VehicleType] = None
    ) -> list[DriverModel]:
        query = select(DriverModel).where(
            DriverModel.status == DriverStatus.AVAILABLE
        )
        if license_category is not None:
            query = query.where(DriverModel.license_category == license_category)
        result = await self.session.execute(query.order_by(DriverModel.name))
        return list(result.scalars().all())
