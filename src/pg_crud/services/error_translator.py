"""Translate low-level database failures into the engine's error taxonomy.

Only the SQLSTATE and message of the driver exception are inspected; the raw
exception object never leaves this module except as the ``__cause__`` of the
translated error.
"""

import asyncpg

from pg_crud.models.errors import (
    DatabaseError,
    ForeignKeyViolation,
    ReferentialDeleteBlocked,
    UniqueViolation,
    UnknownDatabaseError,
)

FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
RESTRICT_VIOLATION = "23001"

FOREIGN_KEY_MESSAGE = "Invalid foreign key reference."
UNIQUE_MESSAGE = "Duplicate value violates a unique constraint."
DEPENDENT_ROWS_MESSAGE = "Cannot delete or update this row because dependent records exist."


def driver_details(error: BaseException) -> str:
    """Render the driver message, with its DETAIL line when present."""
    # str() of a PostgresError already carries DETAIL and HINT lines.
    if isinstance(error, asyncpg.PostgresError) and error.args:
        message = str(error.args[0])
    else:
        message = str(error)
    message = message or type(error).__name__
    detail = getattr(error, "detail", None)
    if detail:
        return f"{message} ({detail})"
    return message


def _blocks_referenced_row(error: BaseException, table_name: str | None) -> bool:
    # The violation is reported against the referencing table; a write on the
    # referenced side therefore names a different table than the target.
    referencing_table = getattr(error, "table_name", None)
    if table_name and referencing_table:
        return referencing_table != table_name
    return str(error).lower().startswith("update or delete on table")


def classify(
    error: BaseException,
    fallback_message: str,
    table_name: str | None = None,
    on_delete: bool = False,
) -> DatabaseError:
    """Classify a database failure.

    Args:
        error: Exception raised by the driver or the connection layer.
        fallback_message: Message used for unclassified failures.
        table_name: Table the failed statement wrote to.
        on_delete: Whether the statement was a DELETE, which can only break
            a foreign key from the referenced side.

    Returns:
        DatabaseError: A ForeignKeyViolation (400), UniqueViolation (409),
            ReferentialDeleteBlocked (409) or UnknownDatabaseError (500),
            with the driver message preserved in ``details``.

    Example:
        >>> try:
        ...     await conn.execute(sql, *args)
        ... except asyncpg.PostgresError as e:
        ...     raise classify(e, "Failed to delete row.", "visitors", on_delete=True) from e
    """
    details = driver_details(error)
    sqlstate = getattr(error, "sqlstate", None) if isinstance(error, asyncpg.PostgresError) else None

    if sqlstate == FOREIGN_KEY_VIOLATION:
        if on_delete or _blocks_referenced_row(error, table_name):
            return ReferentialDeleteBlocked(DEPENDENT_ROWS_MESSAGE, details=details)
        return ForeignKeyViolation(FOREIGN_KEY_MESSAGE, details=details)
    if sqlstate == RESTRICT_VIOLATION:
        return ReferentialDeleteBlocked(DEPENDENT_ROWS_MESSAGE, details=details)
    if sqlstate == UNIQUE_VIOLATION:
        return UniqueViolation(UNIQUE_MESSAGE, details=details)
    return UnknownDatabaseError(fallback_message, details=details)
