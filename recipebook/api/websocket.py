"""WebSocket endpoint for real-time shopping list synchronization."""

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from recipebook.api.dependencies import get_user_from_token
from recipebook.database import SessionLocal
from recipebook.services.realtime import SHOPPING_LIST_CHANNEL, RealtimeService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ws", tags=["websocket"])

PING_INTERVAL_SECONDS = 30


@router.websocket("/shopping-list")
async def websocket_shopping_list_sync(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    """WebSocket endpoint for shopping list updates.

    Authentication via token query parameter (WebSocket doesn't support headers).
    Subscribes to the shopping list Redis channel and forwards every event.
    """
    # Manual DB session for WebSocket (can't use Depends normally)
    db = SessionLocal()
    realtime_service = RealtimeService()
    user_id: int | None = None

    try:
        user = get_user_from_token(db, token)
        if not user:
            await websocket.close(code=4001, reason="Invalid token")
            return
        user_id = user.id

        await websocket.accept()
        logger.info(f"WebSocket connected: user={user_id}")

        async def handle_messages() -> None:
            """Receive messages from Redis and forward to WebSocket."""
            async for message in realtime_service.subscribe(SHOPPING_LIST_CHANNEL):
                try:
                    await websocket.send_json(message)
                except WebSocketDisconnect:
                    break
                except Exception as e:
                    logger.error(f"Error sending WebSocket message: {e}")
                    break

        async def handle_ping() -> None:
            """Send periodic pings to keep connection alive."""
            while True:
                try:
                    await asyncio.sleep(PING_INTERVAL_SECONDS)
                    await websocket.send_json({"type": "ping"})
                except Exception:
                    break

        async def handle_client() -> None:
            """Handle incoming messages from client (pong responses)."""
            while True:
                try:
                    data = await websocket.receive_json()
                    if data.get("type") == "pong":
                        continue  # Keepalive acknowledgment
                except WebSocketDisconnect:
                    break
                except Exception:
                    break

        # Run all handlers concurrently
        await asyncio.gather(
            handle_messages(),
            handle_ping(),
            handle_client(),
            return_exceptions=True,
        )

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: user={user_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
    finally:
        db.close()
        await realtime_service.cleanup()
