"""Real-time shopping list notifications using Redis pub/sub."""

import json
import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

import redis
import redis.asyncio as aioredis

from recipebook.config import get_settings

if TYPE_CHECKING:
    from redis.asyncio.client import PubSub

logger = logging.getLogger(__name__)
settings = get_settings()

SHOPPING_LIST_CHANNEL = "shopping_list"


class ShoppingListEventType(StrEnum):
    """Event types broadcast to connected clients."""

    SHOPPING_LIST_UPDATED = "shopping_list_updated"


# Synchronous Redis client for use in API endpoints
_sync_redis: redis.Redis | None = None


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for publishing from API endpoints."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


def publish_shopping_list_event(
    event_type: ShoppingListEventType = ShoppingListEventType.SHOPPING_LIST_UPDATED,
    data: dict | None = None,
) -> None:
    """Publish an event to the shopping list channel.

    Fire-and-forget: called after a mutation has been committed, so a
    pub/sub failure is logged and never surfaces to the caller.

    Args:
        event_type: Type of event
        data: Optional event payload
    """
    try:
        redis_client = get_sync_redis()
        message = {
            "type": event_type,
            "timestamp": datetime.now(UTC).isoformat(),
            "data": data or {},
        }
        redis_client.publish(SHOPPING_LIST_CHANNEL, json.dumps(message))
        logger.debug(f"Published {event_type} to {SHOPPING_LIST_CHANNEL}")
    except Exception as e:
        logger.error(f"Failed to publish shopping list event: {e}")


class RealtimeService:
    """Async Redis pub/sub service for WebSocket connections."""

    def __init__(self) -> None:
        self._redis: aioredis.Redis | None = None
        self._pubsub: PubSub | None = None

    async def _get_redis(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(settings.redis_url)
        return self._redis

    async def subscribe(self, channel: str) -> AsyncIterator[dict]:
        """Subscribe to a Redis channel and yield messages."""
        redis_conn = await self._get_redis()
        self._pubsub = redis_conn.pubsub()
        await self._pubsub.subscribe(channel)

        try:
            async for message in self._pubsub.listen():
                if message["type"] == "message":
                    try:
                        data = json.loads(message["data"])
                        yield data
                    except json.JSONDecodeError:
                        logger.warning(f"Invalid JSON in pub/sub message: {message['data']}")
        finally:
            if self._pubsub:
                await self._pubsub.unsubscribe(channel)

    async def cleanup(self) -> None:
        """Clean up Redis connections."""
        if self._pubsub:
            await self._pubsub.close()
        if self._redis:
            await self._redis.close()
