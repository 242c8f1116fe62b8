from campus_reservations.repositories.resource.resource_repository import ResourceRepository

__all__ = ["ResourceRepository"]
