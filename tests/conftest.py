"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  ``FOR UPDATE`` is a no-op on SQLite; the
production models need no test doubles.  Redis is replaced by ``FakeRedis``,
which implements only the calls the lock and the event publisher make.
"""

from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from fleetflow.domain.enums import DriverStatus, VehicleStatus, VehicleType
from fleetflow.infrastructure.database import Base
from fleetflow.infrastructure.models import DriverModel, VehicleModel

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

DISPATCHER_HEADERS = {"X-Actor-Id": "7", "X-Actor-Role": "dispatcher"}


class FakeRedis:
    """In-memory stand-in for ``redis.asyncio.Redis``."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.published: list[tuple[str, str]] = []

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def eval(self, script, numkeys, key, token):
        if self.store.get(key) == token:
            del self.store[key]
            return 1
        return 0

    async def publish(self, channel, message):
        self.published.append((channel, message))
        return 1


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables on a fresh in-memory database, drop them afterwards."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def fleet(session_factory) -> dict[str, int]:
    """Seed reference data and return the ids by nickname."""
    next_year = date.today() + timedelta(days=365)
    rows = {
        "truck": VehicleModel(
            name="Volvo FH16", license_plate="TRK-1001", type=VehicleType.TRUCK,
            capacity=5000, odometer=1000,
        ),
        "van": VehicleModel(
            name="Ford Transit", license_plate="VAN-2001", type=VehicleType.VAN,
            capacity=1500, odometer=300,
        ),
        "shop_truck": VehicleModel(
            name="Eicher Pro", license_plate="TRK-1004", type=VehicleType.TRUCK,
            capacity=9000, odometer=0, status=VehicleStatus.IN_SHOP,
        ),
        "truck_driver": DriverModel(
            name="Aarav Sharma", license_number="DL-TRK-0001",
            license_category=VehicleType.TRUCK, license_expiry=next_year,
        ),
        "van_driver": DriverModel(
            name="Sneha Gupta", license_number="DL-VAN-0001",
            license_category=VehicleType.VAN, license_expiry=next_year,
        ),
        "expired_driver": DriverModel(
            name="Meera Nair", license_number="DL-TRK-0004",
            license_category=VehicleType.TRUCK,
            license_expiry=date.today() - timedelta(days=10),
        ),
        "suspended_driver": DriverModel(
            name="Karan Joshi", license_number="DL-TRK-0005",
            license_category=VehicleType.TRUCK, license_expiry=next_year,
            status=DriverStatus.SUSPENDED,
        ),
    }
    async with session_factory() as session:
        session.add_all(rows.values())
        await session.commit()
    return {name: row.id for name, row in rows.items()}


@pytest_asyncio.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite + FakeRedis, acting as a dispatcher."""

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _test_redis():
        return fake_redis

    from fleetflow.api.app import create_app
    from fleetflow.api.dependencies import get_db
    from fleetflow.api.middleware import limiter
    from fleetflow.infrastructure.redis_client import get_redis

    limiter.reset()
    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_redis] = _test_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=DISPATCHER_HEADERS
    ) as ac:
        yield ac
