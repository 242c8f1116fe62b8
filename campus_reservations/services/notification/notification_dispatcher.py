"""
Workflow notification dispatcher.

Builds the messages sent to approvers and hands them to a
:class:`NotificationSink` once the enclosing transaction has committed.
A failed or undeliverable notification never affects the workflow.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from campus_reservations.config.logging import get_logger
from campus_reservations.models.reservation import Reservation
from campus_reservations.schemas.common.enums import NotificationType
from campus_reservations.services.base.transaction_manager import TransactionContext
from campus_reservations.services.notification.notification_sink import NotificationSink


class NotificationDispatcher:

    def __init__(self, sink: NotificationSink):
        self.sink = sink
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Payloads
    # -------------------------------------------------------------------------

    @staticmethod
    def new_reservation_payload(
        reservation: Reservation,
        resource_name: Optional[str],
        requester_name: Optional[str],
        step_order: int,
        total_steps: int,
        timestamp: datetime,
    ) -> Dict[str, Any]:
        return {
            "type": NotificationType.NEW_RESERVATION.value,
            "reservation_id": reservation.id,
            "resource_id": reservation.resource_id,
            "resource_name": resource_name,
            "purpose": reservation.purpose,
            "requester_name": requester_name,
            "step_order": step_order,
            "total_steps": total_steps,
            "timestamp": timestamp.isoformat(),
        }

    @staticmethod
    def ready_for_approval_payload(
        reservation: Reservation,
        resource_name: Optional[str],
        requester_name: Optional[str],
        step_order: int,
        total_steps: int,
        previous_approver: Optional[str],
        timestamp: datetime,
    ) -> Dict[str, Any]:
        return {
            "type": NotificationType.RESERVATION_READY_FOR_APPROVAL.value,
            "reservation_id": reservation.id,
            "resource_id": reservation.resource_id,
            "resource_name": resource_name,
            "purpose": reservation.purpose,
            "requester_name": requester_name,
            "step_order": step_order,
            "total_steps": total_steps,
            "previous_approver": previous_approver,
            "timestamp": timestamp.isoformat(),
        }

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------

    def notify(self, user_id: str, payload: Dict[str, Any]) -> bool:
        """Send now; returns the sink's delivery flag, False on any error."""
        try:
            delivered = bool(self.sink.send_to_user(user_id, payload))
        except Exception as e:
            self._logger.warning(
                f"Notification sink raised for user {user_id}: {e}",
                exc_info=True,
                extra={"user_id": user_id, "type": payload.get("type")},
            )
            return False

        if not delivered:
            self._logger.info(
                f"Notification to {user_id} not delivered (offline)",
                extra={
                    "user_id": user_id,
                    "type": payload.get("type"),
                    "reservation_id": payload.get("reservation_id"),
                },
            )
        return delivered

    def notify_after_commit(self, ctx: TransactionContext, user_id: str, payload: Dict[str, Any]) -> None:
        ctx.after_commit(lambda: self.notify(user_id, payload))
