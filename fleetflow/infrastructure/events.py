"""
Fleet update events.

Published on a Redis pub/sub channel after trips are created or change
status, so dashboards can refetch.  Messages are invalidation hints only:
no ordering or delivery guarantee, and a failed publish never fails the
request that triggered it.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from fleetflow.config import settings

logger = logging.getLogger(__name__)

TRIP_CREATED = "trip_created"
TRIP_STATUS_CHANGED = "trip_status_changed"
OVERWEIGHT_BLOCKED = "overweight_blocked"


class FleetEventPublisher:
    def __init__(self, client: aioredis.Redis, channel: str | None = None):
        self.redis = client
        self.channel = channel or settings.fleet_events_channel

    async def publish(self, event_type: str, **data: Any) -> bool:
        """Publish one event.  Returns False (and logs) if Redis refused it."""
        message = json.dumps({"type": event_type, **data}, default=str)
        try:
            await self.redis.publish(self.channel, message)
        except RedisError:
            logger.warning(
                "Failed to publish %s on %s", event_type, self.channel, exc_info=True
            )
            return False
        return True
