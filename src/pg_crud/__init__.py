"""pg-crud - schema-driven CRUD over PostgreSQL.

Introspects live catalog metadata for a whitelist of tables and exposes
generic list/create/update/delete operations over them, with parameterized
statements and a stable error taxonomy.
"""

__version__ = "0.1.0"

from pg_crud.config.settings import Settings, get_settings
from pg_crud.models.errors import (
    CatalogError,
    DatabaseError,
    ErrorCategory,
    NotFoundError,
    PgCrudError,
    UnknownTableError,
    ValidationError,
)
from pg_crud.models.schema import ColumnSchema, SchemaCatalog, TableSchema

__all__ = [
    "__version__",
    # Config
    "Settings",
    "get_settings",
    # Models
    "ColumnSchema",
    "TableSchema",
    "SchemaCatalog",
    # Errors
    "PgCrudError",
    "ValidationError",
    "UnknownTableError",
    "NotFoundError",
    "CatalogError",
    "DatabaseError",
    "ErrorCategory",
]
