"""Custom exceptions and error categories for the pg-crud admin engine.

This module defines the error taxonomy surfaced to HTTP clients. Every error
carries a stable category, the HTTP status derived from that category, a
human-readable message and optional driver details.
"""

from enum import StrEnum
from typing import Any, ClassVar


class ErrorCategory(StrEnum):
    """Stable error categories reported by the engine."""

    # Client errors (4xx)
    VALIDATION = "ValidationError"
    UNKNOWN_TABLE = "UnknownTableError"
    NOT_FOUND = "NotFoundError"
    FOREIGN_KEY_VIOLATION = "ForeignKeyViolation"
    UNIQUE_VIOLATION = "UniqueViolation"
    REFERENTIAL_DELETE_BLOCKED = "ReferentialDeleteBlocked"

    # Server errors (5xx)
    CATALOG = "CatalogError"
    UNKNOWN_DATABASE = "UnknownDatabaseError"
    INTERNAL = "InternalError"


class ErrorDetail:
    """Structured error detail information."""

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        details: str | None = None,
    ) -> None:
        """Initialize error detail.

        Args:
            category: Error category identifier.
            message: Human-readable error message.
            details: Optional driver message or additional context.
        """
        self.category = category
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert to the response body representation.

        Returns:
            dict: ``{"error": ...}`` plus ``"details"`` when present.
        """
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"ErrorDetail(category={self.category}, message={self.message!r})"


class PgCrudError(Exception):
    """Base exception for all pg-crud errors.

    Subclasses pin ``category`` and ``status_code``; the HTTP layer relies on
    nothing else.
    """

    category: ClassVar[ErrorCategory] = ErrorCategory.INTERNAL
    status_code: ClassVar[int] = 500

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize base error.

        Args:
            message: Human-readable error message.
            details: Optional driver message, never the primary message.
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def to_error_detail(self) -> ErrorDetail:
        """Convert exception to ErrorDetail."""
        return ErrorDetail(category=self.category, message=self.message, details=self.details)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the response body representation."""
        return self.to_error_detail().to_dict()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(category={self.category}, message={self.message!r})"


class ValidationError(PgCrudError):
    """Raised for payload or table-shape problems detected before any write.

    This includes:
    - A required column missing from an insert payload
    - A payload with no usable fields
    - An update or delete against a table without a primary key
    """

    category = ErrorCategory.VALIDATION
    status_code = 400


class UnknownTableError(PgCrudError):
    """Raised when a table is absent from the catalog or the whitelist."""

    category = ErrorCategory.UNKNOWN_TABLE
    status_code = 404

    def __init__(self, table: str) -> None:
        super().__init__(message=f"Unknown table: {table}")
        self.table = table


class NotFoundError(PgCrudError):
    """Raised when an update or delete affected zero rows."""

    category = ErrorCategory.NOT_FOUND
    status_code = 404

    def __init__(self, message: str = "Row not found.", details: str | None = None) -> None:
        super().__init__(message=message, details=details)


class CatalogError(PgCrudError):
    """Raised when the catalog introspection query fails."""

    category = ErrorCategory.CATALOG
    status_code = 500


class DatabaseError(PgCrudError):
    """Base class for translated database-originated failures."""

    category = ErrorCategory.UNKNOWN_DATABASE
    status_code = 500


class ForeignKeyViolation(DatabaseError):
    """Insert or update referenced a row that does not exist."""

    category = ErrorCategory.FOREIGN_KEY_VIOLATION
    status_code = 400


class UniqueViolation(DatabaseError):
    """Insert or update collided with a unique or primary key."""

    category = ErrorCategory.UNIQUE_VIOLATION
    status_code = 409


class ReferentialDeleteBlocked(DatabaseError):
    """Delete or update blocked by a dependent row in another table."""

    category = ErrorCategory.REFERENTIAL_DELETE_BLOCKED
    status_code = 409


class UnknownDatabaseError(DatabaseError):
    """Any database failure without a more specific category."""
