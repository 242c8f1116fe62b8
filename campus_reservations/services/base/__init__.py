"""
Base services module.

Provides the foundational service layer components:
- ServiceResult / ServiceError for uniform outcomes
- BaseService with logging and exception conversion
- TransactionManager for scoped commit-or-rollback with after-commit hooks
"""

from campus_reservations.services.base.base_service import BaseService
from campus_reservations.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)
from campus_reservations.services.base.transaction_manager import (
    TransactionContext,
    TransactionManager,
)

__all__ = [
    "BaseService",
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
    "TransactionContext",
    "TransactionManager",
]
