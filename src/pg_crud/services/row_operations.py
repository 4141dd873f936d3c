"""Generic row operations over whitelisted tables.

This module builds and executes parameterized SELECT/INSERT/UPDATE/DELETE
statements from a freshly loaded catalog entry. Table and column names enter
SQL text only through ``quote_identifier``; payload values are always bound.
"""

import datetime
import decimal
import time
import uuid
from collections.abc import AsyncIterator, Iterable, Iterator, Mapping
from contextlib import asynccontextmanager, contextmanager
from typing import Any

import asyncpg
from asyncpg import Pool
from pydantic import BaseModel, Field

from pg_crud.db.catalog import CatalogLoader
from pg_crud.db.identifiers import normalize_value, placeholder, quote_identifier, to_bind_text
from pg_crud.models.errors import (
    NotFoundError,
    PgCrudError,
    UnknownTableError,
    ValidationError,
)
from pg_crud.models.schema import ColumnSchema, SchemaCatalog, TableSchema
from pg_crud.observability.metrics import metrics
from pg_crud.observability.tracing import get_tracing_logger
from pg_crud.services.error_translator import classify

logger = get_tracing_logger(__name__)

# Failures raised by the driver, the pool, or the network underneath it.
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

CREATED_MESSAGE = "Row created successfully."
UPDATED_MESSAGE = "Row updated successfully."
DELETED_MESSAGE = "Row deleted successfully."


class CreateResult(BaseModel):
    """Outcome of an insert: the re-fetched row, or only the affected count."""

    message: str = Field(default=CREATED_MESSAGE)
    row: dict[str, Any] | None = Field(None, description="Created row, when its key is known")
    affected_rows: int | None = Field(None, description="Rows inserted, when no key is known")

    def to_dict(self) -> dict[str, Any]:
        if self.affected_rows is not None:
            return {"message": self.message, "affectedRows": self.affected_rows}
        return {"message": self.message, "row": self.row}


def affected_rows(status: str | None) -> int:
    """Parse the row count from an asyncpg command status such as ``UPDATE 3``."""
    if not status:
        return 0
    last = status.rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


def serialize_value(value: Any) -> Any:
    """Recursively convert a PostgreSQL value to a JSON-compatible one."""
    if value is None:
        return None
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, datetime.timedelta):
        return str(value)
    if isinstance(value, decimal.Decimal):
        return str(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    return value


def serialize_row(record: Mapping[str, Any]) -> dict[str, Any]:
    return {key: serialize_value(value) for key, value in dict(record).items()}


@contextmanager
def translate_errors(
    fallback_message: str, table_name: str | None = None, on_delete: bool = False
) -> Iterator[None]:
    """Route driver failures through the error translator."""
    try:
        yield
    except DRIVER_ERRORS as e:
        raise classify(e, fallback_message, table_name, on_delete=on_delete) from e


class RowOperations:
    """Schema-driven CRUD engine.

    Every operation reloads the catalog, resolves the table against it, and
    only then validates the payload and builds its statement. No catalog or
    row state survives between calls.

    Example:
        >>> engine = RowOperations(pool, {"visitors", "tickets"})
        >>> result = await engine.create_row(
        ...     "visitors", {"NAME": "Ann", "EMAIL": "a@x.com", "PHONE_NO": "123"}
        ... )
        >>> result.row["VISITORS_ID"]
        1
    """

    def __init__(self, pool: Pool, allowed_tables: Iterable[str], schema_name: str = "public"):
        """Initialize the engine.

        Args:
            pool: asyncpg connection pool shared across requests.
            allowed_tables: Whitelisted table names.
            schema_name: Schema holding the exposed tables.
        """
        self.pool = pool
        self.schema_name = schema_name
        self.catalog_loader = CatalogLoader(pool, allowed_tables, schema_name)

    @property
    def allowed_tables(self) -> frozenset[str]:
        return self.catalog_loader.allowed_tables

    async def load_schema(self) -> SchemaCatalog:
        """Build a fresh catalog of the whitelisted tables."""
        return await self.catalog_loader.load()

    async def list_tables(self) -> list[TableSchema]:
        """Return whitelisted tables sorted by name."""
        async with self._instrument("meta", "*"):
            catalog = await self.load_schema()
            return catalog.sorted_tables()

    async def list_rows(self, table: str) -> list[dict[str, Any]]:
        """Return every row of a table, ordered by primary key when it has one."""
        async with self._instrument("list", table):
            table_schema = await self._resolve_table(table)

            sql = f"SELECT * FROM {self._table_ref(table_schema)}"
            if table_schema.primary_key:
                sql += f" ORDER BY {quote_identifier(table_schema.primary_key)}"

            with translate_errors("Failed to fetch table rows."):
                records = await self.pool.fetch(sql)
            return [serialize_row(record) for record in records]

    async def create_row(self, table: str, payload: Mapping[str, Any]) -> CreateResult:
        """Insert a row built from the known, non-generated payload keys.

        Unknown keys are ignored. Required columns (non-nullable, not
        generated, without default) must be present in the payload before
        anything is sent to the database.

        Args:
            table: Target table name.
            payload: Column name to value mapping.

        Returns:
            CreateResult: The re-fetched row when its primary key is known,
                otherwise the affected row count.

        Raises:
            UnknownTableError: If the table is not whitelisted or absent.
            ValidationError: If a required field is missing or nothing is
                insertable.
            DatabaseError: If the insert or the re-fetch fails.
        """
        async with self._instrument("create", table):
            table_schema = await self._resolve_table(table)
            columns = table_schema.column_map()

            insert_columns: list[str] = []
            placeholders: list[str] = []
            values: list[str | None] = []
            for key, raw_value in payload.items():
                column = columns.get(key)
                if column is None or column.is_auto_increment:
                    continue
                values.append(to_bind_text(normalize_value(raw_value)))
                insert_columns.append(quote_identifier(column.name))
                placeholders.append(placeholder(len(values), column))

            for column in table_schema.columns:
                if column.is_required and column.name not in payload:
                    raise ValidationError(f"Missing required field: {column.name}")

            if not insert_columns:
                raise ValidationError("No valid fields provided for insert.")

            pk = table_schema.primary_key
            pk_column = columns.get(pk) if pk else None
            returns_generated_id = pk_column is not None and pk_column.is_auto_increment

            sql = (
                f"INSERT INTO {self._table_ref(table_schema)} ({', '.join(insert_columns)}) "
                f"VALUES ({', '.join(placeholders)})"
            )

            pk_value: Any = None
            with translate_errors("Failed to create row.", table_schema.table_name):
                if returns_generated_id:
                    sql += f" RETURNING {quote_identifier(pk)}"
                    pk_value = await self.pool.fetchval(sql, *values)
                    inserted = 1
                else:
                    inserted = affected_rows(await self.pool.execute(sql, *values))

            if pk is not None and not returns_generated_id and pk in payload:
                pk_value = normalize_value(payload[pk])

            if pk is None or pk_value is None:
                return CreateResult(affected_rows=inserted)

            # Separate round trip: a failure here surfaces even though the
            # insert is already committed.
            row = await self._fetch_by_primary_key(table_schema, pk_value, "Failed to create row.")
            logger.info("Row created", extra={"table": table_schema.table_name})
            return CreateResult(row=row)

    async def update_row(
        self, table: str, row_id: Any, payload: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Update the known, non-key payload columns of the row with ``row_id``.

        Returns:
            The re-fetched row.

        Raises:
            UnknownTableError: If the table is not whitelisted or absent.
            ValidationError: If the table has no primary key or the payload
                has no updatable fields.
            NotFoundError: If no row matched ``row_id``.
            DatabaseError: If the update or the re-fetch fails.
        """
        async with self._instrument("update", table):
            table_schema = await self._resolve_table(table)
            pk_column = self._require_primary_key(table_schema)
            columns = table_schema.column_map()

            assignments: list[str] = []
            values: list[str | None] = []
            for key, raw_value in payload.items():
                column = columns.get(key)
                if column is None or column.is_primary:
                    continue
                values.append(to_bind_text(normalize_value(raw_value)))
                assignments.append(
                    f"{quote_identifier(column.name)} = {placeholder(len(values), column)}"
                )

            if not assignments:
                raise ValidationError("No valid fields provided for update.")

            await self._check_row_id(pk_column, row_id, "Failed to update row.")

            values.append(to_bind_text(row_id))
            sql = (
                f"UPDATE {self._table_ref(table_schema)} SET {', '.join(assignments)} "
                f"WHERE {quote_identifier(pk_column.name)} = {placeholder(len(values), pk_column)}"
            )

            with translate_errors("Failed to update row.", table_schema.table_name):
                status = await self.pool.execute(sql, *values)

            if affected_rows(status) == 0:
                raise NotFoundError()

            return await self._fetch_by_primary_key(table_schema, row_id, "Failed to update row.")

    async def delete_row(self, table: str, row_id: Any) -> None:
        """Delete the row with ``row_id``.

        Raises:
            UnknownTableError: If the table is not whitelisted or absent.
            ValidationError: If the table has no primary key.
            NotFoundError: If no row matched ``row_id``.
            DatabaseError: If the delete fails, e.g. ReferentialDeleteBlocked.
        """
        async with self._instrument("delete", table):
            table_schema = await self._resolve_table(table)
            pk_column = self._require_primary_key(table_schema)
            await self._check_row_id(pk_column, row_id, "Failed to delete row.")

            sql = (
                f"DELETE FROM {self._table_ref(table_schema)} "
                f"WHERE {quote_identifier(pk_column.name)} = {placeholder(1, pk_column)}"
            )

            with translate_errors(
                "Failed to delete row.", table_schema.table_name, on_delete=True
            ):
                status = await self.pool.execute(sql, to_bind_text(row_id))

            if affected_rows(status) == 0:
                raise NotFoundError()

    async def _resolve_table(self, table: str) -> TableSchema:
        catalog = await self.load_schema()
        table_schema = catalog.get(table)
        if table_schema is None:
            raise UnknownTableError(table)
        return table_schema

    def _require_primary_key(self, table_schema: TableSchema) -> ColumnSchema:
        pk_column = (
            table_schema.get_column(table_schema.primary_key) if table_schema.primary_key else None
        )
        if pk_column is None:
            raise ValidationError(f"Table {table_schema.table_name} has no primary key.")
        return pk_column

    async def _check_row_id(
        self, pk_column: ColumnSchema, row_id: Any, fallback_message: str
    ) -> None:
        """Raise NotFoundError when ``row_id`` is not a valid primary key value.

        An id the server cannot convert to the key type (e.g. ``abc`` for an
        integer key) can match no row.
        """
        sql = f"SELECT {placeholder(1, pk_column)}"
        try:
            await self.pool.fetchval(sql, to_bind_text(row_id))
        except asyncpg.exceptions.DataError as e:
            raise NotFoundError() from e
        except DRIVER_ERRORS as e:
            raise classify(e, fallback_message) from e

    def _table_ref(self, table_schema: TableSchema) -> str:
        return f"{quote_identifier(self.schema_name)}.{quote_identifier(table_schema.table_name)}"

    async def _fetch_by_primary_key(
        self, table_schema: TableSchema, pk_value: Any, fallback_message: str
    ) -> dict[str, Any] | None:
        pk_column = self._require_primary_key(table_schema)
        sql = (
            f"SELECT * FROM {self._table_ref(table_schema)} "
            f"WHERE {quote_identifier(pk_column.name)} = {placeholder(1, pk_column)}"
        )
        with translate_errors(fallback_message):
            record = await self.pool.fetchrow(sql, to_bind_text(pk_value))
        return serialize_row(record) if record is not None else None

    @asynccontextmanager
    async def _instrument(self, operation: str, table: str) -> AsyncIterator[None]:
        # Unknown names never become metric labels.
        label = table if table == "*" or table in self.allowed_tables else "<unknown>"
        started = time.perf_counter()
        try:
            yield
        except PgCrudError as e:
            metrics.increment_operation(operation, label, e.category)
            metrics.increment_error(e.category)
            if e.status_code >= 500:
                logger.error(
                    "%s on %s failed: %s",
                    operation,
                    label,
                    e.message,
                    extra={"category": str(e.category), "details": e.details},
                )
            else:
                logger.warning(
                    "%s on %s rejected: %s",
                    operation,
                    label,
                    e.message,
                    extra={"category": str(e.category)},
                )
            raise
        else:
            metrics.increment_operation(operation, label, "success")
        finally:
            metrics.observe_operation_duration(operation, time.perf_counter() - started)
