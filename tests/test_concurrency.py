"""
Concurrency safety tests.

Demonstrates:
1. The per-trip distributed lock rejects a second in-flight transition.
2. Distributed lock prevents simultaneous acquire and only releases its own token.
3. Event publishing never fails the caller when Redis is down.
4. Events are published only once the service has committed.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.domain.enums import TripStatus
from fleetflow.domain.errors import TransitionInProgressError
from fleetflow.infrastructure.events import (
    TRIP_CREATED,
    TRIP_STATUS_CHANGED,
    FleetEventPublisher,
)
from fleetflow.infrastructure.locks import DistributedLock, LockUnavailable
from fleetflow.services import dispatch


class TestDistributedLock:
    """Tests the Redis distributed lock logic (mocked Redis)."""

    @pytest.mark.asyncio
    async def test_acquire_succeeds(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)

        lock = DistributedLock(mock_redis, "test-key", ttl_seconds=10)
        assert await lock.acquire() is True
        mock_redis.set.assert_awaited_once_with(
            "lock:test-key", lock.token, nx=True, ex=10
        )

    @pytest.mark.asyncio
    async def test_acquire_fails_if_held(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        lock = DistributedLock(mock_redis, "test-key", ttl_seconds=10)
        assert await lock.acquire() is False

    @pytest.mark.asyncio
    async def test_release_calls_eval_with_own_token(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        lock = DistributedLock(mock_redis, "test-key", ttl_seconds=10)
        await lock.acquire()
        await lock.release()

        mock_redis.eval.assert_awaited_once()
        assert mock_redis.eval.await_args.args[2:] == ("lock:test-key", lock.token)

    @pytest.mark.asyncio
    async def test_trip_lock_key(self):
        lock = DistributedLock.for_trip(AsyncMock(), 42)
        assert lock.key == "lock:trip:42"

    @pytest.mark.asyncio
    async def test_context_manager_acquire_fail_raises(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=False)

        lock = DistributedLock(mock_redis, "test-key", ttl_seconds=10)
        with pytest.raises(LockUnavailable, match="Could not acquire lock"):
            async with lock:
                pass

    @pytest.mark.asyncio
    async def test_two_holders_cannot_share_a_trip(self, fake_redis):
        first = DistributedLock.for_trip(fake_redis, 1)
        second = DistributedLock.for_trip(fake_redis, 1)
        assert await first.acquire() is True
        assert await second.acquire() is False

        # the loser's release must not free the winner's lock
        await second.release()
        assert await DistributedLock.for_trip(fake_redis, 1).acquire() is False

        await first.release()
        assert await second.acquire() is True


class TestAdvanceTripLocking:
    @pytest.mark.asyncio
    async def test_held_lock_rejects_transition(self, db_session, fake_redis):
        await DistributedLock.for_trip(fake_redis, 5).acquire()

        with pytest.raises(TransitionInProgressError):
            await dispatch.advance_trip(
                db_session, fake_redis, 5, TripStatus.DISPATCHED
            )

    @pytest.mark.asyncio
    async def test_lock_released_after_rejected_transition(
        self, db_session, fake_redis
    ):
        from fleetflow.domain.errors import ResourceNotFoundError

        with pytest.raises(ResourceNotFoundError):
            await dispatch.advance_trip(
                db_session, fake_redis, 999, TripStatus.DISPATCHED
            )
        assert "lock:trip:999" not in fake_redis.store


class TestFleetEvents:
    @pytest.mark.asyncio
    async def test_publish_serialises_event(self, fake_redis):
        publisher = FleetEventPublisher(fake_redis, channel="fleet_update")
        assert await publisher.publish(TRIP_STATUS_CHANGED, trip_id=3) is True
        assert fake_redis.published == [
            ("fleet_update", '{"type": "trip_status_changed", "trip_id": 3}')
        ]

    @pytest.mark.asyncio
    async def test_publish_failure_is_swallowed(self):
        mock_redis = AsyncMock()
        mock_redis.publish = AsyncMock(side_effect=RedisConnectionError("down"))

        publisher = FleetEventPublisher(mock_redis)
        assert await publisher.publish(TRIP_STATUS_CHANGED, trip_id=3) is False


class TestEventsFollowCommit:
    """``fleet_update`` listeners refetch, so events must trail the commit."""

    async def _create(self, session, fake_redis, fleet):
        return await dispatch.create_trip(
            session,
            fake_redis,
            vehicle_id=fleet["truck"],
            driver_id=fleet["truck_driver"],
            cargo_weight=1000,
            origin="Mumbai",
            destination="Pune",
        )

    @pytest.mark.asyncio
    async def test_created_event_published_after_commit(
        self, db_session, fake_redis, fleet
    ):
        published_at_commit = []
        real_commit = AsyncSession.commit

        async def _commit(session):
            published_at_commit.append(len(fake_redis.published))
            await real_commit(session)

        with patch.object(AsyncSession, "commit", _commit):
            await self._create(db_session, fake_redis, fleet)

        assert published_at_commit == [0]
        assert [json.loads(m)["type"] for _, m in fake_redis.published] == [
            TRIP_CREATED
        ]

    @pytest.mark.asyncio
    async def test_failed_create_commit_publishes_nothing(
        self, db_session, fake_redis, fleet
    ):
        failing = AsyncMock(side_effect=SQLAlchemyError("commit failed"))
        with patch.object(AsyncSession, "commit", failing):
            with pytest.raises(SQLAlchemyError):
                await self._create(db_session, fake_redis, fleet)
        assert fake_redis.published == []

    @pytest.mark.asyncio
    async def test_failed_transition_commit_publishes_nothing(
        self, db_session, fake_redis, fleet
    ):
        trip, _ = await self._create(db_session, fake_redis, fleet)
        fake_redis.published.clear()

        failing = AsyncMock(side_effect=SQLAlchemyError("commit failed"))
        with patch.object(AsyncSession, "commit", failing):
            with pytest.raises(SQLAlchemyError):
                await dispatch.advance_trip(
                    db_session, fake_redis, trip.id, TripStatus.DISPATCHED
                )

        assert fake_redis.published == []
        assert f"lock:trip:{trip.id}" not in fake_redis.store
