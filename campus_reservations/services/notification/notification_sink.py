"""
Notification sink interface.

A sink pushes a JSON-serializable payload to one user. Delivery is
best-effort and at most once: ``send_to_user`` reports whether the message
was handed to a live connection and never raises.
"""

from typing import Any, Dict, Protocol, runtime_checkable

from campus_reservations.config.logging import get_logger


@runtime_checkable
class NotificationSink(Protocol):

    def send_to_user(self, user_id: str, payload: Dict[str, Any]) -> bool:
        ...


class NullNotifier:
    """Sink for processes with no connected clients (workers, scripts)."""

    def __init__(self):
        self._logger = get_logger(self.__class__.__name__)

    def send_to_user(self, user_id: str, payload: Dict[str, Any]) -> bool:
        self._logger.debug(
            f"Dropping notification for {user_id}: no transport",
            extra={"user_id": user_id, "type": payload.get("type")},
        )
        return False
