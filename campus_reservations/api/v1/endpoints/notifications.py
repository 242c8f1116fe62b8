"""
WebSocket channel for pushed notifications.

Clients connect to ``/ws/notifications?user_id=<id>``; messages sent by
the server are JSON objects with a ``type`` field. Anything the client
sends is ignored.
"""

import asyncio

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from campus_reservations.config.logging import get_logger
from campus_reservations.services.notification import connection_registry

logger = get_logger(__name__)

router = APIRouter(tags=["Notifications"])


@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, user_id: str = Query(..., min_length=1)):
    await websocket.accept()
    connection_registry.register(user_id, websocket, asyncio.get_running_loop())
    try:
        await websocket.send_json({"type": "CONNECTED", "user_id": user_id})
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        connection_registry.unregister(user_id, websocket)
