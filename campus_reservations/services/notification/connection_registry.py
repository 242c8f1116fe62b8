"""
Registry of live notification connections keyed by user id.
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from campus_reservations.config.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Connection:
    """A client socket and the event loop that owns it."""

    websocket: Any
    loop: asyncio.AbstractEventLoop


class ConnectionRegistry:
    """
    Thread-safe map of user id -> connection.

    One connection per user: reconnecting replaces the previous entry.
    Connect/disconnect happen on the event loop while sends may come from
    worker threads, so every access goes through a lock.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(self, user_id: str, websocket: Any, loop: asyncio.AbstractEventLoop) -> Connection:
        connection = Connection(websocket=websocket, loop=loop)
        with self._lock:
            replaced = user_id in self._connections
            self._connections[user_id] = connection
        logger.info(
            f"User {user_id} connected" + (" (replaced previous connection)" if replaced else ""),
            extra={"user_id": user_id},
        )
        return connection

    def unregister(self, user_id: str, websocket: Any = None) -> bool:
        """
        Remove a user's connection.

        When ``websocket`` is given, the entry is removed only if it is still
        that socket, so a late disconnect of an old socket cannot drop a
        newer connection.
        """
        with self._lock:
            current = self._connections.get(user_id)
            if current is None:
                return False
            if websocket is not None and current.websocket is not websocket:
                return False
            del self._connections[user_id]
        logger.info(f"User {user_id} disconnected", extra={"user_id": user_id})
        return True

    def get(self, user_id: str) -> Optional[Connection]:
        with self._lock:
            return self._connections.get(user_id)

    def connected_users(self) -> List[str]:
        with self._lock:
            return list(self._connections)

    def snapshot(self) -> Dict[str, Connection]:
        with self._lock:
            return dict(self._connections)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


connection_registry = ConnectionRegistry()
