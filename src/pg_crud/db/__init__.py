"""Database connection and catalog utilities.

This package provides connection pool management, identifier quoting and
catalog introspection for PostgreSQL.
"""

from pg_crud.db.catalog import CatalogLoader, build_catalog
from pg_crud.db.identifiers import normalize_value, quote_identifier
from pg_crud.db.pool import close_pool, create_pool

__all__ = [
    "CatalogLoader",
    "build_catalog",
    "quote_identifier",
    "normalize_value",
    "create_pool",
    "close_pool",
]
