# dormhub/services/common/unit_of_work.py
"""
Unit of Work pattern implementation.

Provides transaction management and repository coordination
for the service layer with SQLAlchemy.
"""
from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dormhub.core.exceptions import ErrorCode
from dormhub.repositories.base import BaseRepository

from .errors import ConflictError, ServiceError

logger = logging.getLogger(__name__)

TRepository = TypeVar("TRepository", bound=BaseRepository)


class TransactionError(ServiceError):
    """Raised when a database transaction fails."""

    error_code = ErrorCode.DATABASE_ERROR

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message, details={"error_type": type(original_error).__name__})
        self.original_error = original_error


def _integrity_conflict(exc: IntegrityError) -> ConflictError:
    return ConflictError(
        "Operation conflicts with existing data",
        details={"constraint": str(getattr(exc, "orig", exc)).splitlines()[0]},
    )


class UnitOfWork(AbstractContextManager["UnitOfWork"]):
    """
    Unit of Work for managing one database transaction.

    Commits automatically on clean exit and rolls back when the block
    raises. Repositories obtained through ``get_repo`` share the session.

    Usage:
        >>> with UnitOfWork(session_factory) as uow:
        ...     rooms = uow.get_repo(RoomRepository)
        ...     room = rooms.get_for_update(room_id)
        ...     room.description = "Corner room"
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        auto_commit: bool = True,
        auto_flush: bool = True,
    ) -> None:
        """
        Initialize Unit of Work.

        Args:
            session_factory: Factory function that returns a new Session
            auto_commit: Whether to auto-commit on successful context exit
            auto_flush: Whether to auto-flush changes before queries
        """
        self._session_factory = session_factory
        self._auto_commit = auto_commit
        self._auto_flush = auto_flush

        self.session: Optional[Session] = None
        self._committed: bool = False
        self._rolled_back: bool = False
        self._repo_cache: dict[Type[BaseRepository], BaseRepository] = {}

    # ------------------------------------------------------------------ #
    # Context manager protocol
    # ------------------------------------------------------------------ #

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork context already entered")

        self.session = self._session_factory()
        self.session.autoflush = self._auto_flush
        self._committed = False
        self._rolled_back = False
        self._repo_cache.clear()

        logger.debug("UnitOfWork session started")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if self.session is None:
            return False

        try:
            if exc_type is None:
                if self._auto_commit and not self._committed and not self._rolled_back:
                    self._commit()
            elif not self._rolled_back:
                self.session.rollback()
                self._rolled_back = True
                logger.warning("UnitOfWork rolled back due to %s", exc_type.__name__)
        finally:
            self.session.close()
            self.session = None
            self._repo_cache.clear()
            logger.debug("UnitOfWork session closed")

        return False

    # ------------------------------------------------------------------ #
    # Transaction control
    # ------------------------------------------------------------------ #

    def _commit(self) -> None:
        try:
            self.session.commit()
            self._committed = True
            logger.debug("UnitOfWork committed")
        except IntegrityError as exc:
            logger.warning("Commit rejected by constraint: %s", exc.orig)
            self.session.rollback()
            self._rolled_back = True
            raise _integrity_conflict(exc) from exc
        except SQLAlchemyError as exc:
            logger.error("Commit failed: %s", exc)
            self.session.rollback()
            self._rolled_back = True
            raise TransactionError("Failed to commit transaction", exc) from exc

    def commit(self) -> None:
        """
        Explicitly commit the current transaction.

        Raises:
            RuntimeError: If called outside of context
            ConflictError: If a uniqueness or check constraint rejects the commit
            TransactionError: If commit fails for any other database reason
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.commit() called outside of context")

        if self._committed:
            logger.warning("commit() called on already-committed transaction")
            return

        if self._rolled_back:
            raise RuntimeError("Cannot commit a rolled-back transaction")

        self._commit()

    def rollback(self) -> None:
        """Explicitly roll back the current transaction."""
        if self.session is None:
            raise RuntimeError("UnitOfWork.rollback() called outside of context")

        if self._rolled_back:
            return

        self.session.rollback()
        self._rolled_back = True
        self._committed = False
        logger.debug("UnitOfWork explicitly rolled back")

    def flush(self) -> None:
        """
        Flush pending changes without committing.

        Raises:
            ConflictError: If a constraint rejects the pending changes
            TransactionError: If flush fails for any other database reason
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.flush() called outside of context")

        try:
            self.session.flush()
        except IntegrityError as exc:
            logger.warning("Flush rejected by constraint: %s", exc.orig)
            raise _integrity_conflict(exc) from exc
        except SQLAlchemyError as exc:
            logger.error("Flush failed: %s", exc)
            raise TransactionError("Failed to flush changes", exc) from exc

    # ------------------------------------------------------------------ #
    # Repository factory
    # ------------------------------------------------------------------ #

    def get_repo(self, repo_cls: Type[TRepository]) -> TRepository:
        """
        Get or create a repository bound to this unit's session.

        Repositories are cached per UnitOfWork instance.
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.get_repo() called outside of context")

        if repo_cls not in self._repo_cache:
            self._repo_cache[repo_cls] = repo_cls(self.session)
        return self._repo_cache[repo_cls]  # type: ignore[return-value]
