"""
Base service class providing common functionality for all services.
"""

from abc import ABC
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_reservations.config.logging import get_logger
from campus_reservations.config.settings import settings
from campus_reservations.core.exceptions import BaseAppException
from campus_reservations.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)
from campus_reservations.services.base.transaction_manager import TransactionManager
from campus_reservations.utils.datetime_utils import Clock


class BaseService(ABC):
    """
    Base service with common behaviors:
    - Shared logger, db session and clock
    - Consistent error handling via ServiceResult
    - Scoped transactions through TransactionManager
    """

    def __init__(self, db_session: Session, clock: Optional[Clock] = None):
        """
        Initialize base service.

        Args:
            db_session: SQLAlchemy database session
            clock: Source of "now" in the reference timezone
        """
        self.db: Session = db_session
        self.clock: Clock = clock or Clock(settings.TIMEZONE)
        self.transactions = TransactionManager(db_session)
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _app_failure(self, exc: BaseAppException, operation: str) -> ServiceResult:
        """Convert an expected domain exception to a failed result."""
        self._logger.info(
            f"{operation} refused: {exc.error_code.value}",
            extra={"operation": operation, "error_code": exc.error_code.value},
        )
        return ServiceResult.from_app_exception(exc)

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert an unexpected exception to an opaque failure.

        The full exception is logged; the returned error carries only the
        operation name so storage-layer details never reach clients.
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )

        severity = ErrorSeverity.CRITICAL if isinstance(exception, SQLAlchemyError) else ErrorSeverity.ERROR
        return ServiceResult.failure(
            ServiceError(
                code=ErrorCode.INTERNAL_ERROR,
                message=f"Failed to {operation}",
                severity=severity,
                details={
                    "operation": operation,
                    "entity_ref": str(entity_ref) if entity_ref is not None else None,
                },
                status_code=500,
            )
        )
