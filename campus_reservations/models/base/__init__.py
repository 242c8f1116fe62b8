from campus_reservations.models.base.base_model import Base, BaseModel
from campus_reservations.models.base.mixins import TimestampMixin

__all__ = ["Base", "BaseModel", "TimestampMixin"]
