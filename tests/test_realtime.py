"""Tests for real-time synchronization service."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import recipebook.services.realtime as realtime_module
from recipebook.services.realtime import (
    SHOPPING_LIST_CHANNEL,
    RealtimeService,
    ShoppingListEventType,
    get_sync_redis,
    publish_shopping_list_event,
)


class TestShoppingListEventType:
    """Tests for ShoppingListEventType enum."""

    def test_update_event_exists(self):
        """Verify the shopping list event type is defined."""
        assert ShoppingListEventType.SHOPPING_LIST_UPDATED == "shopping_list_updated"


class TestGetSyncRedis:
    """Tests for get_sync_redis function."""

    def test_creates_redis_client(self):
        """Test that get_sync_redis creates a Redis client."""
        realtime_module._sync_redis = None

        with patch("recipebook.services.realtime.redis.from_url") as mock_from_url:
            mock_client = MagicMock()
            mock_from_url.return_value = mock_client

            result = get_sync_redis()

            assert result == mock_client
            mock_from_url.assert_called_once()

    def test_reuses_existing_client(self, mock_redis):
        """Test that get_sync_redis reuses existing client."""
        with patch("recipebook.services.realtime.redis.from_url") as mock_from_url:
            result = get_sync_redis()

            assert result == mock_redis
            mock_from_url.assert_not_called()


class TestPublishShoppingListEvent:
    """Tests for publish_shopping_list_event function."""

    def test_publishes_event_to_shopping_list_channel(self, mock_redis):
        """Test that events are published to the shopping list channel."""
        publish_shopping_list_event(data={"ingredient_ids": [1, 2]})

        mock_redis.publish.assert_called_once()
        call_args = mock_redis.publish.call_args
        assert call_args[0][0] == SHOPPING_LIST_CHANNEL == "shopping_list"

        message = json.loads(call_args[0][1])
        assert message["type"] == "shopping_list_updated"
        assert message["data"] == {"ingredient_ids": [1, 2]}
        assert "timestamp" in message

    def test_publishes_event_without_data(self, mock_redis):
        """Test publishing event with no additional data."""
        publish_shopping_list_event()

        message = json.loads(mock_redis.publish.call_args[0][1])
        assert message["data"] == {}

    def test_handles_redis_error_gracefully(self, mock_redis):
        """Test that Redis errors don't crash the publish function."""
        mock_redis.publish.side_effect = Exception("Redis connection failed")

        # Should not raise exception
        publish_shopping_list_event(data={"item_id": 1})

    def test_generation_succeeds_when_redis_is_down(
        self, client, auth_headers, catalog, create_recipe, mock_redis
    ):
        """Test that a publish failure does not fail a committed generation."""
        recipe_id = create_recipe("Bread", {catalog["Flour"]: "500"})
        mock_redis.publish.side_effect = Exception("Redis connection failed")

        response = client.post(
            "/api/v1/shopping-list/from-recipes",
            headers=auth_headers,
            json={"recipe_ids": [recipe_id]},
        )
        assert response.status_code == 201

        items = client.get("/api/v1/shopping-list", headers=auth_headers).json()
        assert [item["name"] for item in items] == ["Flour"]


class TestRealtimeService:
    """Tests for RealtimeService class."""

    def test_init(self):
        """Test RealtimeService initialization."""
        service = RealtimeService()
        assert service._redis is None
        assert service._pubsub is None

    @pytest.mark.asyncio
    async def test_get_redis_creates_connection(self):
        """Test that _get_redis creates a Redis connection."""
        service = RealtimeService()

        with patch("recipebook.services.realtime.aioredis.from_url") as mock_from_url:
            mock_redis = AsyncMock()
            mock_from_url.return_value = mock_redis

            result = await service._get_redis()

            assert result == mock_redis
            mock_from_url.assert_called_once()

    @pytest.mark.asyncio
    async def test_cleanup_closes_connections(self):
        """Test that cleanup closes Redis connections."""
        service = RealtimeService()
        mock_redis = AsyncMock()
        mock_pubsub = AsyncMock()
        service._redis = mock_redis
        service._pubsub = mock_pubsub

        await service.cleanup()

        mock_pubsub.close.assert_called_once()
        mock_redis.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_cleanup_handles_no_connections(self):
        """Test that cleanup works when no connections exist."""
        service = RealtimeService()

        # Should not raise
        await service.cleanup()

    @pytest.mark.asyncio
    async def test_subscribe_skips_control_frames_and_invalid_json(self):
        """Test that subscribe only yields decoded event messages."""
        service = RealtimeService()

        mock_redis = MagicMock()
        mock_pubsub = MagicMock()

        event = {"type": "shopping_list_updated", "data": {"item_id": 3}}

        async def mock_listen():
            yield {"type": "subscribe", "data": 1}  # Subscribe confirmation
            yield {"type": "message", "data": "not valid json"}
            yield {"type": "message", "data": json.dumps(event)}

        mock_pubsub.listen = mock_listen
        mock_pubsub.subscribe = AsyncMock()
        mock_pubsub.unsubscribe = AsyncMock()
        mock_redis.pubsub.return_value = mock_pubsub

        # Directly set the redis connection to bypass _get_redis
        service._redis = mock_redis

        messages = []
        async for msg in service.subscribe(SHOPPING_LIST_CHANNEL):
            messages.append(msg)
            break

        assert messages == [event]
        mock_pubsub.subscribe.assert_called_once_with(SHOPPING_LIST_CHANNEL)


class TestWebSocketEndpoint:
    """Tests for WebSocket endpoint."""

    @pytest.fixture(autouse=True)
    def websocket_session(self, monkeypatch, session_factory):
        """Point the WebSocket's manual session at the test database."""
        monkeypatch.setattr("recipebook.api.websocket.SessionLocal", session_factory)

    def test_websocket_requires_token(self, client):
        """Test that WebSocket connection requires token parameter."""
        from starlette.websockets import WebSocketDisconnect

        with (
            pytest.raises(WebSocketDisconnect),
            client.websocket_connect("/api/v1/ws/shopping-list"),
        ):
            pass

    def test_websocket_rejects_invalid_token(self, client):
        """Test that WebSocket rejects invalid token."""
        from starlette.websockets import WebSocketDisconnect

        with (
            pytest.raises(WebSocketDisconnect),
            client.websocket_connect("/api/v1/ws/shopping-list?token=invalid_token"),
        ):
            pass

    def test_websocket_rejects_nonexistent_user(self, client, auth_headers):
        """Test that WebSocket rejects token for non-existent user."""
        from starlette.websockets import WebSocketDisconnect

        from recipebook.services.auth import create_access_token

        fake_token = create_access_token(user_id=99999, username="ghost")
        with (
            pytest.raises(WebSocketDisconnect),
            client.websocket_connect(f"/api/v1/ws/shopping-list?token={fake_token}"),
        ):
            pass
