"""
University resource repository.
"""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from campus_reservations.models.resource import UniversityResource
from campus_reservations.repositories.base.base_repository import BaseRepository


class ResourceRepository(BaseRepository[UniversityResource]):

    def __init__(self, db: Session):
        super().__init__(UniversityResource, db)

    def list_all(self) -> List[UniversityResource]:
        stmt = select(UniversityResource).order_by(UniversityResource.id)
        return list(self.db.scalars(stmt).unique().all())

    def find_for_update(self, resource_id: int) -> Optional[UniversityResource]:
        """
        Load a resource and hold its write lock until the transaction ends.

        Writers locking the same resource run one at a time. Server databases
        lock the row with SELECT ... FOR UPDATE. SQLite has no row locks, so a
        no-op UPDATE of the row takes the database write lock first.
        """
        if self.db.get_bind().dialect.name == "sqlite":
            self.db.execute(
                update(UniversityResource)
                .where(UniversityResource.id == resource_id)
                .values(updated_at=UniversityResource.updated_at)
                .execution_options(synchronize_session=False)
            )
        stmt = (
            select(UniversityResource)
            .where(UniversityResource.id == resource_id)
            .with_for_update()
        )
        return self.db.scalars(stmt).first()
