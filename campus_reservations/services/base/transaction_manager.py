"""
Transaction manager utilities for service layer operations.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, List, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from campus_reservations.config.logging import get_logger


@dataclass
class TransactionContext:
    """Context information for one scoped transaction."""

    transaction_id: str = field(default_factory=lambda: str(uuid4()))
    started_at: datetime = field(default_factory=datetime.utcnow)
    committed: bool = False
    rolled_back: bool = False
    completed_at: Optional[datetime] = None
    error: Optional[Exception] = None
    after_commit_hooks: List[Callable[[], None]] = field(default_factory=list)

    def after_commit(self, hook: Callable[[], None]) -> None:
        """
        Register a callable to run once this transaction has committed.

        Hooks are discarded on rollback. Their failures are logged and never
        propagate to the caller.
        """
        self.after_commit_hooks.append(hook)

    @property
    def duration_ms(self) -> Optional[float]:
        """Get transaction duration in milliseconds."""
        if self.completed_at:
            delta = self.completed_at - self.started_at
            return delta.total_seconds() * 1000
        return None


class TransactionManager:
    """
    Scoped unit of work over a SQLAlchemy session.

    ``start()`` yields a :class:`TransactionContext`; leaving the block
    normally commits, leaving it with an exception rolls back every write
    made in the block and re-raises.
    """

    def __init__(self, db_session: Session):
        self.db = db_session
        self._logger = get_logger(self.__class__.__name__)

    @contextmanager
    def start(self) -> Iterator[TransactionContext]:
        """
        Start a new transaction.

        Example:
            with transaction_manager.start() as ctx:
                repository.create(entity)
                ctx.after_commit(lambda: notifier.send_to_user(user_id, payload))
        """
        ctx = TransactionContext()
        self._logger.debug(f"Transaction started: {ctx.transaction_id}")

        try:
            yield ctx
            self._commit(ctx)
        except Exception as exc:
            if not ctx.rolled_back:
                self._rollback(ctx, exc)
            raise
        finally:
            ctx.completed_at = datetime.utcnow()
            self._logger.debug(
                f"Transaction completed: {ctx.transaction_id} "
                f"({'committed' if ctx.committed else 'rolled back'}) "
                f"in {ctx.duration_ms:.2f}ms",
                extra={
                    "transaction_id": ctx.transaction_id,
                    "committed": ctx.committed,
                    "duration_ms": ctx.duration_ms,
                }
            )

        self._run_after_commit_hooks(ctx)

    def _commit(self, ctx: TransactionContext) -> None:
        try:
            self.db.commit()
        except Exception as exc:
            self._logger.error(
                f"Commit failed for transaction {ctx.transaction_id}: {exc}",
                exc_info=True,
                extra={"transaction_id": ctx.transaction_id}
            )
            self._rollback(ctx, exc)
            raise
        ctx.committed = True

    def _rollback(self, ctx: TransactionContext, exc: Exception) -> None:
        ctx.error = exc
        ctx.after_commit_hooks.clear()
        try:
            self.db.rollback()
            ctx.rolled_back = True
            self._logger.debug(
                f"Transaction rolled back: {ctx.transaction_id} - {type(exc).__name__}",
                extra={"transaction_id": ctx.transaction_id}
            )
        except Exception as rollback_exc:
            # Keep the original exception as the one the caller sees
            self._logger.error(
                f"Rollback failed for transaction {ctx.transaction_id}: {rollback_exc}",
                exc_info=True
            )

    def _run_after_commit_hooks(self, ctx: TransactionContext) -> None:
        for hook in ctx.after_commit_hooks:
            try:
                hook()
            except Exception as e:
                self._logger.error(f"After-commit hook failed: {e}", exc_info=True)
        ctx.after_commit_hooks.clear()
