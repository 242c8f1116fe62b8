from campus_reservations.repositories.user.user_repository import UserRepository

__all__ = ["UserRepository"]
