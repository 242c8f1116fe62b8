"""Database initialization utilities."""
from typing import Optional

from sqlalchemy.engine import Engine

from campus_reservations.config.logging import get_logger
from campus_reservations.db.base import Base

logger = get_logger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create any missing tables.

    Suitable for development and tests; production schemas are managed
    with migrations.
    """
    if bind is None:
        from campus_reservations.db.session import engine as bind

    try:
        Base.metadata.create_all(bind=bind)
        logger.info(f"Database initialized with {len(Base.metadata.tables)} tables")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise

