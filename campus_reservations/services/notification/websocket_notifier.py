"""
WebSocket-backed notification sink.
"""

import asyncio
import json
from concurrent.futures import Future
from typing import Any, Dict

from campus_reservations.config.logging import get_logger
from campus_reservations.services.notification.connection_registry import (
    Connection,
    ConnectionRegistry,
)


class WebSocketNotifier:
    """
    Push JSON messages to connected users.

    Sends are scheduled on the connection's event loop and never awaited,
    so callers on request threads are not blocked by slow clients.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry
        self._logger = get_logger(self.__class__.__name__)

    def send_to_user(self, user_id: str, payload: Dict[str, Any]) -> bool:
        connection = self.registry.get(user_id)
        if connection is None:
            self._logger.debug(
                f"User {user_id} not connected; notification dropped",
                extra={"user_id": user_id, "type": payload.get("type")},
            )
            return False

        try:
            message = json.dumps(payload, default=str)
            self._schedule_send(user_id, connection, message)
        except Exception as e:
            self._logger.warning(
                f"Failed to send notification to {user_id}: {e}",
                extra={"user_id": user_id, "type": payload.get("type")},
            )
            return False

        self._logger.info(
            f"Notification sent to user {user_id}",
            extra={"user_id": user_id, "type": payload.get("type")},
        )
        return True

    def broadcast(self, payload: Dict[str, Any]) -> int:
        """Send to every connected user; returns how many sends were scheduled."""
        delivered = 0
        for user_id in self.registry.connected_users():
            if self.send_to_user(user_id, payload):
                delivered += 1
        return delivered

    def _schedule_send(self, user_id: str, connection: Connection, message: str) -> None:
        coroutine = connection.websocket.send_text(message)
        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        try:
            if running_loop is connection.loop:
                task = running_loop.create_task(coroutine)
                task.add_done_callback(lambda done: self._log_send_result(user_id, connection, done))
            else:
                future = asyncio.run_coroutine_threadsafe(coroutine, connection.loop)
                future.add_done_callback(lambda done: self._log_send_result(user_id, connection, done))
        except Exception:
            coroutine.close()
            raise

    def _log_send_result(self, user_id: str, connection: Connection, done: Future) -> None:
        if done.cancelled():
            return
        error = done.exception()
        if error is not None:
            self._logger.warning(
                f"Notification delivery to {user_id} failed: {error}",
                extra={"user_id": user_id},
            )
            # Drop the dead socket so later sends short-circuit
            self.registry.unregister(user_id, connection.websocket)
