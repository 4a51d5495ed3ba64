"""Tests for Redis-backed cache invalidation."""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, MagicMock
from redis.exceptions import ConnectionError as RedisConnectionError

from neo_membership.config.settings import MembershipSettings
from neo_membership.core.exceptions import ConfigurationError, InvalidationBusError
from neo_membership.features.cache.services.membership_cache import MembershipCache
from neo_membership.features.cache.services.redis_invalidation import RedisInvalidationBus


def message(payload) -> dict:
    return {"type": "message", "channel": "membership:invalidate", "data": json.dumps(payload)}


class TestRedisInvalidationBus:
    """Test publishing and applying invalidation events."""

    @pytest.fixture
    def mock_redis(self):
        client = MagicMock()
        client.publish = AsyncMock(return_value=1)
        return client

    @pytest.fixture
    def bus(self, mock_redis):
        return RedisInvalidationBus(mock_redis, "membership:invalidate", node_id="node-a")

    @pytest.mark.asyncio
    async def test_publish(self, bus, mock_redis):
        assert await bus.publish(42) is True

        channel, data = mock_redis.publish.call_args.args
        event = json.loads(data)
        assert channel == "membership:invalidate"
        assert event["user_id"] == 42
        assert event["source_node"] == "node-a"

    @pytest.mark.asyncio
    async def test_publish_failure_reported(self, bus, mock_redis):
        mock_redis.publish.side_effect = RedisConnectionError("connection refused")

        assert await bus.publish(42) is False

    @pytest.mark.asyncio
    async def test_message_from_other_node_invalidates(self, bus):
        cache = MembershipCache()
        await cache.get_groups(42, AsyncMock(return_value={}))

        assert bus.handle_message(message({"user_id": 42, "source_node": "node-b"}), cache) == 42
        assert 42 not in cache

    @pytest.mark.asyncio
    async def test_own_message_ignored(self, bus):
        cache = MembershipCache()
        await cache.get_groups(42, AsyncMock(return_value={}))

        assert bus.handle_message(message({"user_id": 42, "source_node": "node-a"}), cache) is None
        assert 42 in cache

    @pytest.mark.parametrize("raw", [
        {"type": "message", "data": "not json"},
        {"type": "message", "data": json.dumps({"source_node": "node-b"})},
        {"type": "message", "data": json.dumps({"user_id": "abc"})},
        {"type": "subscribe", "data": 1},
    ])
    def test_unusable_messages_skipped(self, bus, raw):
        cache = MagicMock()

        assert bus.handle_message(raw, cache) is None
        cache.invalidate.assert_not_called()

    @pytest.mark.asyncio
    async def test_listen_until_stopped(self, bus, mock_redis):
        cache = MagicMock()
        stop = asyncio.Event()
        pubsub = MagicMock()
        pubsub.subscribe = AsyncMock()
        pubsub.unsubscribe = AsyncMock()
        pubsub.aclose = AsyncMock()

        async def get_message(**kwargs):
            stop.set()
            return message({"user_id": 7, "source_node": "node-b"})

        pubsub.get_message = get_message
        mock_redis.pubsub.return_value = pubsub

        await bus.listen(cache, stop=stop)

        pubsub.subscribe.assert_awaited_once_with("membership:invalidate")
        cache.invalidate.assert_called_once_with(7)
        pubsub.unsubscribe.assert_awaited_once()
        pubsub.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_subscribe_failure_raises(self, bus, mock_redis):
        pubsub = MagicMock()
        pubsub.subscribe = AsyncMock(side_effect=RedisConnectionError("connection refused"))
        mock_redis.pubsub.return_value = pubsub

        with pytest.raises(InvalidationBusError):
            await bus.listen(MagicMock())

    def test_from_settings_requires_redis_url(self):
        with pytest.raises(ConfigurationError):
            RedisInvalidationBus.from_settings(MembershipSettings(redis_url=None))
