"""Engine services: row operations and database error translation."""

from pg_crud.services.error_translator import classify
from pg_crud.services.row_operations import CreateResult, RowOperations

__all__ = [
    "classify",
    "CreateResult",
    "RowOperations",
]
