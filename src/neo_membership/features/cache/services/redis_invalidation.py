"""Cross-process membership cache invalidation over Redis pub/sub.

Each process keeps its own MembershipCache. When one process changes a
user's memberships it publishes the user id, and every subscribed process
drops that user's entry.
"""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ....config.settings import MembershipSettings, get_settings
from ....core.exceptions import ConfigurationError, InvalidationBusError
from .membership_cache import MembershipCache

logger = logging.getLogger(__name__)


class RedisInvalidationBus:
    """Publishes and consumes membership invalidation events."""

    def __init__(self, redis_client: Redis, channel: str, node_id: Optional[str] = None):
        """Initialize the bus.

        Args:
            redis_client: Async Redis client
            channel: Pub/sub channel name
            node_id: Identifier of this process; own events are skipped
        """
        self._redis = redis_client
        self.channel = channel
        self.node_id = node_id or str(uuid.uuid4())

    @classmethod
    def from_settings(cls, settings: Optional[MembershipSettings] = None) -> "RedisInvalidationBus":
        settings = settings or get_settings()
        if not settings.redis_url:
            raise ConfigurationError("MEMBERSHIP_REDIS_URL is not configured")
        client = redis.from_url(settings.redis_url, decode_responses=True)
        return cls(client, settings.invalidation_channel)

    async def publish(self, user_id: int) -> bool:
        """Announce that a user's memberships changed.

        Returns:
            True if the event was published
        """
        event_data = {
            "user_id": user_id,
            "source_node": self.node_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        try:
            await self._redis.publish(self.channel, json.dumps(event_data))
            return True
        except RedisError as e:
            logger.error(f"Failed to publish membership invalidation for user {user_id}: {e}")
            return False

    def handle_message(self, message: Dict[str, Any], cache: MembershipCache) -> Optional[int]:
        """Apply one pub/sub message to the cache.

        Returns:
            The invalidated user id, or None if the message was skipped
        """
        if message.get("type") != "message":
            return None

        try:
            event = json.loads(message["data"])
            user_id = int(event["user_id"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed invalidation message: {e}")
            return None

        if event.get("source_node") == self.node_id:
            return None

        cache.invalidate(user_id)
        return user_id

    async def listen(
        self,
        cache: MembershipCache,
        stop: Optional[asyncio.Event] = None,
        poll_timeout: float = 1.0
    ) -> None:
        """Consume invalidation events until ``stop`` is set or the task is cancelled."""
        pubsub = self._redis.pubsub()
        try:
            await pubsub.subscribe(self.channel)
        except RedisError as e:
            logger.error(f"Failed to subscribe to {self.channel}: {e}")
            raise InvalidationBusError(
                f"Cannot subscribe to invalidation channel {self.channel}",
                details={"channel": self.channel}
            ) from e
        logger.info(f"Listening for membership invalidations on {self.channel}")

        try:
            while stop is None or not stop.is_set():
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=poll_timeout
                )
                if message is not None:
                    self.handle_message(message, cache)
        finally:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
            logger.info(f"Stopped listening on {self.channel}")
