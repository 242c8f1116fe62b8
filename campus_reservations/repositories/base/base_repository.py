"""
Base repository with standardized data-access operations.

Repositories never commit. Writes are flushed so generated keys are
available, and the enclosing unit of work decides whether the transaction
commits or rolls back.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from campus_reservations.config.logging import get_logger
from campus_reservations.models.base import Base

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository for one model class.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Read Operations ====================

    def find_by_id(self, entity_id: Any) -> Optional[ModelType]:
        """Find entity by primary key, or None."""
        return self.db.get(self.model, entity_id)

    def exists(self, entity_id: Any) -> bool:
        return self.find_by_id(entity_id) is not None

    # ==================== Write Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """Add entity to the session and flush to obtain its id."""
        self.db.add(entity)
        self.db.flush()
        logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
        return entity

    def create_many(self, entities: List[ModelType]) -> List[ModelType]:
        self.db.add_all(entities)
        self.db.flush()
        return entities
