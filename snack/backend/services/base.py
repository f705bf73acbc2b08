"""
Base Service.

Services own the business rules. They call repositories, keep the data
invariants (contiguous positions, save counters, single-use codes) inside
the request transaction, and raise application exceptions. They never
commit; the session dependency does that when the request succeeds.
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.exceptions import AuthorizationError, ConflictError, DatabaseError
from snack.backend.core.logging import get_logger

T = TypeVar("T")

# Driver messages for unique violations: SQLite, then PostgreSQL (asyncpg)
_UNIQUE_MARKERS = ("unique constraint failed", "duplicate key value", "uniqueviolation")


def is_unique_violation(error: IntegrityError) -> bool:
    return any(marker in str(error).lower() for marker in _UNIQUE_MARKERS)


class BaseService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Awaitable[T],
        conflict_message: str = "Resource already exists",
    ) -> T:
        """
        Await a repository call, translating SQLAlchemy errors.

        Raises:
            ConflictError: On a unique constraint violation
            DatabaseError: On any other database failure
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning("Database integrity error", extra={"operation": operation, "error": str(e)})
            if is_unique_violation(e):
                raise ConflictError(conflict_message) from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error("Database error", extra={"operation": operation, "error": str(e)})
            raise DatabaseError(f"Database operation failed: {operation}") from e

    def _require_owner(self, owner_id: str, user_id: str | None, message: str = "Permission denied") -> None:
        if user_id is None or owner_id != user_id:
            raise AuthorizationError(message)

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(operation, extra={"service": self.__class__.__name__, **context})

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, extra={"service": self.__class__.__name__, **context})
