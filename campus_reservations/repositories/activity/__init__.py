from campus_reservations.repositories.activity.activity_log_repository import ActivityLogRepository

__all__ = ["ActivityLogRepository"]
