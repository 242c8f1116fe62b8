from campus_reservations.services.approval.approval_service import ApprovalService

__all__ = ["ApprovalService"]
