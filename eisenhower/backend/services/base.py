"""
Base Service.

Shared plumbing for the auth and note services: the request's session,
a per-service logger, translation of SQLAlchemy failures into application
errors, and required-field checks.
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eisenhower.backend.core.exceptions import (
    ConflictError,
    DatabaseError,
    ValidationError,
)
from eisenhower.backend.core.logging import get_logger

T = TypeVar("T")

_UNIQUE_MARKERS = ("unique", "duplicate")


def _is_unique_violation(error: IntegrityError) -> bool:
    text = str(error.orig if error.orig is not None else error).lower()
    return any(marker in text for marker in _UNIQUE_MARKERS)


class BaseService:
    """
    Base class for services.

    A service works inside the session of a single request and never
    commits; the session dependency commits or rolls back.
    """

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
        Await a database coroutine, translating driver errors.

        Statement parameters are never logged; they may hold password digests
        or refresh tokens.

        Args:
            operation: Name used in logs and error messages
            coro: Coroutine performing the database work
            conflict_message: Message of the ConflictError raised on a unique violation

        Raises:
            ConflictError: On a unique constraint violation
            DatabaseError: On any other SQLAlchemy error
        """
        try:
            return await coro
        except IntegrityError as e:
            unique = _is_unique_violation(e)
            self._logger.warning(
                "Integrity error",
                extra={"operation": operation, "unique_violation": unique},
            )
            if unique:
                raise ConflictError(conflict_message) from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error_type": type(e).__name__},
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e

    def _validate_required(self, fields: dict[str, Any], field_names: list[str]) -> None:
        """
        Reject None or blank-string values for the named fields.

        Raises:
            ValidationError: Listing every missing field under `missing_fields`
        """
        missing = [
            name for name in field_names
            if fields.get(name) is None
            or (isinstance(fields[name], str) and not fields[name].strip())
        ]
        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(operation, extra={"service": self.__class__.__name__, **context})

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, extra={"service": self.__class__.__name__, **context})
