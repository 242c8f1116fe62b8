from campus_reservations.models.user.user import User

__all__ = ["User"]
