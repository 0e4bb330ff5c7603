"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 8 sample vehicles (trucks, vans, bikes; one in the shop, one retired)
  - 7 sample drivers (one suspended, one with an expired license)
  - 3 sample trips pushed through the dispatch service (Draft, In Transit,
    Completed) so their history rows match what the API writes
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import func, select

from fleetflow.domain.entities import TransitionPayload
from fleetflow.domain.enums import (
    DriverStatus,
    TripStatus,
    VehicleStatus,
    VehicleType,
)
from fleetflow.infrastructure.database import async_session_factory, engine
from fleetflow.infrastructure.models import DriverModel, VehicleModel
from fleetflow.infrastructure.redis_client import close_redis, get_redis
from fleetflow.services import dispatch

SEED_ACTOR_ID = 1
TODAY = date.today()


VEHICLES = [
    {"name": "Volvo FH16", "license_plate": "TRK-1001", "type": VehicleType.TRUCK, "capacity": 18000, "odometer": 120450},
    {"name": "Tata Prima", "license_plate": "TRK-1002", "type": VehicleType.TRUCK, "capacity": 12000, "odometer": 86300},
    {"name": "Ashok Leyland", "license_plate": "TRK-1003", "type": VehicleType.TRUCK, "capacity": 10000, "odometer": 45210},
    {"name": "Ford Transit", "license_plate": "VAN-2001", "type": VehicleType.VAN, "capacity": 1500, "odometer": 30990},
    {"name": "Mercedes Sprinter", "license_plate": "VAN-2002", "type": VehicleType.VAN, "capacity": 2000, "odometer": 52000},
    {"name": "Honda Cargo", "license_plate": "BIK-3001", "type": VehicleType.BIKE, "capacity": 40, "odometer": 8800},
    # Not dispatchable
    {"name": "Eicher Pro", "license_plate": "TRK-1004", "type": VehicleType.TRUCK, "capacity": 9000, "odometer": 210000, "status": VehicleStatus.IN_SHOP},
    {"name": "Old Canter", "license_plate": "TRK-0999", "type": VehicleType.TRUCK, "capacity": 7000, "odometer": 480000, "status": VehicleStatus.RETIRED, "is_retired": True},
]

DRIVERS = [
    {"name": "Aarav Sharma", "license_number": "DL-TRK-0001", "license_category": VehicleType.TRUCK, "expires_in_days": 400, "safety_score": 96},
    {"name": "Priya Patel", "license_number": "DL-TRK-0002", "license_category": VehicleType.TRUCK, "expires_in_days": 200, "safety_score": 91},
    {"name": "Rohan Mehta", "license_number": "DL-TRK-0003", "license_category": VehicleType.TRUCK, "expires_in_days": 90, "safety_score": 88},
    {"name": "Sneha Gupta", "license_number": "DL-VAN-0001", "license_category": VehicleType.VAN, "expires_in_days": 600, "safety_score": 99},
    {"name": "Vikram Singh", "license_number": "DL-BIK-0001", "license_category": VehicleType.BIKE, "expires_in_days": 30, "safety_score": 84},
    # Not dispatchable
    {"name": "Karan Joshi", "license_number": "DL-VAN-0002", "license_category": VehicleType.VAN, "expires_in_days": 365, "safety_score": 61, "status": DriverStatus.SUSPENDED},
    {"name": "Meera Nair", "license_number": "DL-TRK-0004", "license_category": VehicleType.TRUCK, "expires_in_days": -10, "safety_score": 93},
]

TRIPS = [
    # (vehicle index, driver index, cargo kg, origin, destination, advance to)
    (0, 0, 16500, "Mumbai Port", "Pune Warehouse", TripStatus.COMPLETED),
    (1, 1, 9000, "Nashik Depot", "Surat Hub", TripStatus.IN_TRANSIT),
    (3, 3, 600, "Andheri Store", "Thane DC", TripStatus.DRAFT),
]


async def seed():
    redis = await get_redis()
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(VehicleModel))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Vehicles ──────────────────────────────────────────────────
        vehicle_models = []
        for v in VEHICLES:
            m = VehicleModel(
                name=v["name"],
                license_plate=v["license_plate"],
                type=v["type"],
                capacity=v["capacity"],
                odometer=v["odometer"],
                status=v.get("status", VehicleStatus.AVAILABLE),
                is_retired=v.get("is_retired", False),
            )
            session.add(m)
            vehicle_models.append(m)
        await session.flush()
        print(f"  Created {len(vehicle_models)} vehicles")

        # ── Drivers ───────────────────────────────────────────────────
        driver_models = []
        for d in DRIVERS:
            m = DriverModel(
                name=d["name"],
                license_number=d["license_number"],
                license_category=d["license_category"],
                license_expiry=TODAY + timedelta(days=d["expires_in_days"]),
                safety_score=d["safety_score"],
                status=d.get("status", DriverStatus.AVAILABLE),
            )
            session.add(m)
            driver_models.append(m)
        await session.flush()
        print(f"  Created {len(driver_models)} drivers")

        # ── Trips (through the dispatch service) ──────────────────────
        for v_idx, d_idx, cargo, origin, destination, target in TRIPS:
            vehicle = vehicle_models[v_idx]
            trip, _ = await dispatch.create_trip(
                session,
                redis,
                vehicle_id=vehicle.id,
                driver_id=driver_models[d_idx].id,
                cargo_weight=cargo,
                origin=origin,
                destination=destination,
                actor_id=SEED_ACTOR_ID,
            )
            for status in (TripStatus.DISPATCHED, TripStatus.IN_TRANSIT, TripStatus.COMPLETED):
                if trip.status == target:
                    break
                payload = None
                if status == TripStatus.COMPLETED:
                    payload = TransitionPayload(
                        end_odometer=vehicle.odometer + 150,
                        actual_fuel_cost=4200,
                        actual_revenue=18500,
                    )
                trip = await dispatch.advance_trip(
                    session, redis, trip.id, status, payload, actor_id=SEED_ACTOR_ID
                )
        print(f"  Created {len(TRIPS)} trips")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await close_redis()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
