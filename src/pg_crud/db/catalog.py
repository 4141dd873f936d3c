"""PostgreSQL catalog introspection for the whitelisted tables.

This module builds a fresh SchemaCatalog from ``pg_catalog`` on every call.
A single query joins column metadata with primary key and foreign key
membership; rows are grouped under their table in ordinal order.
"""

import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

import asyncpg
from asyncpg import Pool

from pg_crud.models.errors import CatalogError
from pg_crud.models.schema import ColumnSchema, SchemaCatalog, TableSchema
from pg_crud.observability.metrics import metrics

logger = logging.getLogger(__name__)

CATALOG_QUERY = """
    SELECT
        c.relname AS table_name,
        a.attname AS column_name,
        pg_catalog.format_type(a.atttypid, a.atttypmod) AS column_type,
        pg_catalog.format_type(a.atttypid, NULL) AS data_type,
        NOT a.attnotnull AS is_nullable,
        EXISTS(
            SELECT 1
            FROM pg_index i
            WHERE i.indrelid = c.oid
              AND i.indisprimary
              AND a.attnum = ANY(i.indkey)
        ) AS is_primary,
        a.attidentity AS identity,
        pg_get_expr(ad.adbin, ad.adrelid) AS default_value,
        fk.referenced_table,
        fk.referenced_column
    FROM pg_attribute a
    JOIN pg_class c ON a.attrelid = c.oid
    JOIN pg_namespace n ON c.relnamespace = n.oid
    LEFT JOIN pg_attrdef ad ON a.attrelid = ad.adrelid AND a.attnum = ad.adnum
    LEFT JOIN LATERAL (
        SELECT
            ref_c.relname AS referenced_table,
            ref_a.attname AS referenced_column
        FROM pg_constraint con
        JOIN pg_class ref_c ON con.confrelid = ref_c.oid
        JOIN pg_attribute ref_a
            ON ref_a.attrelid = ref_c.oid
            AND ref_a.attnum = con.confkey[array_position(con.conkey, a.attnum)]
        WHERE con.conrelid = c.oid
          AND con.contype = 'f'  -- foreign key
          AND a.attnum = ANY(con.conkey)
        ORDER BY con.conname
        LIMIT 1
    ) fk ON true
    WHERE n.nspname = $1
      AND c.relname = ANY($2::text[])
      AND c.relkind IN ('r', 'p')  -- regular and partitioned tables
      AND a.attnum > 0
      AND NOT a.attisdropped
    ORDER BY c.relname, a.attnum
"""


def is_auto_increment(identity: str | None, default_value: str | None) -> bool:
    """Identity columns and serial (``nextval``) defaults are engine-generated."""
    if identity in ("a", "d"):
        return True
    return bool(default_value) and default_value.startswith("nextval(")


def build_catalog(rows: Iterable[Mapping[str, Any]], allowed_tables: Iterable[str]) -> SchemaCatalog:
    """Group catalog rows into TableSchemas, dropping non-whitelisted tables.

    Args:
        rows: Catalog rows ordered by table name then ordinal position.
        allowed_tables: Whitelisted table names.

    Returns:
        SchemaCatalog: Catalog restricted to the whitelist.
    """
    allowed = set(allowed_tables)
    columns: dict[str, list[ColumnSchema]] = {}
    primary_keys: dict[str, str | None] = {}

    for row in rows:
        table_name = row["table_name"]
        if table_name not in allowed:
            continue

        column = ColumnSchema(
            name=row["column_name"],
            column_type=row["column_type"],
            data_type=row["data_type"],
            is_nullable=bool(row["is_nullable"]),
            is_primary=bool(row["is_primary"]),
            is_auto_increment=is_auto_increment(row["identity"], row["default_value"]),
            default_value=row["default_value"],
            referenced_table=row["referenced_table"],
            referenced_column=row["referenced_column"],
        )

        columns.setdefault(table_name, []).append(column)
        primary_keys.setdefault(table_name, None)
        # Composite keys: the first primary column wins.
        if column.is_primary and primary_keys[table_name] is None:
            primary_keys[table_name] = column.name

    return SchemaCatalog(
        tables={
            name: TableSchema(
                table_name=name,
                primary_key=primary_keys[name],
                columns=tuple(table_columns),
            )
            for name, table_columns in columns.items()
        }
    )


class CatalogLoader:
    """Loads the whitelisted part of the live catalog.

    Attributes:
        pool: Database connection pool.
        allowed_tables: Whitelisted table names.
        schema_name: Schema holding the exposed tables.

    Example:
        >>> loader = CatalogLoader(pool, {"visitors", "tickets"})
        >>> catalog = await loader.load()
        >>> catalog.get("visitors").primary_key
        'VISITORS_ID'
    """

    def __init__(self, pool: Pool, allowed_tables: Iterable[str], schema_name: str = "public"):
        self.pool = pool
        self.allowed_tables = frozenset(allowed_tables)
        self.schema_name = schema_name

    async def load(self) -> SchemaCatalog:
        """Run the introspection query and build a fresh catalog.

        Returns:
            SchemaCatalog: Whitelisted tables present in the database.

        Raises:
            CatalogError: If the introspection query fails. No partial
                catalog is returned.
        """
        started = time.perf_counter()
        try:
            rows = await self.pool.fetch(
                CATALOG_QUERY, self.schema_name, sorted(self.allowed_tables)
            )
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error("Catalog introspection failed: %s", e)
            raise CatalogError(
                message="Failed to load schema metadata.",
                details=str(e),
            ) from e
        finally:
            metrics.observe_catalog_load_duration(time.perf_counter() - started)

        catalog = build_catalog(rows, self.allowed_tables)
        logger.debug("Loaded catalog with %d tables", len(catalog))
        return catalog
