"""Data models module."""

from pg_crud.models.errors import (
    CatalogError,
    DatabaseError,
    ErrorCategory,
    ErrorDetail,
    ForeignKeyViolation,
    NotFoundError,
    PgCrudError,
    ReferentialDeleteBlocked,
    UniqueViolation,
    UnknownDatabaseError,
    UnknownTableError,
    ValidationError,
)
from pg_crud.models.schema import ColumnSchema, SchemaCatalog, TableSchema

__all__ = [
    # Schema models
    "ColumnSchema",
    "TableSchema",
    "SchemaCatalog",
    # Error models
    "ErrorCategory",
    "ErrorDetail",
    "PgCrudError",
    "ValidationError",
    "UnknownTableError",
    "NotFoundError",
    "CatalogError",
    "DatabaseError",
    "ForeignKeyViolation",
    "UniqueViolation",
    "ReferentialDeleteBlocked",
    "UnknownDatabaseError",
]
