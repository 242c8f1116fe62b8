"""
Notification services: sink interface, connection registry, WebSocket
transport and the workflow dispatcher.
"""

from campus_reservations.services.notification.connection_registry import (
    Connection,
    ConnectionRegistry,
    connection_registry,
)
from campus_reservations.services.notification.notification_dispatcher import NotificationDispatcher
from campus_reservations.services.notification.notification_sink import NotificationSink, NullNotifier
from campus_reservations.services.notification.websocket_notifier import WebSocketNotifier

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "connection_registry",
    "NotificationDispatcher",
    "NotificationSink",
    "NullNotifier",
    "WebSocketNotifier",
]
