"""Pytest configuration and shared fixtures.

The asyncpg pool is always mocked; tests never need a running database.
"""

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from pg_crud.config.settings import reset_settings
from pg_crud.db.catalog import CATALOG_QUERY
from pg_crud.services.row_operations import RowOperations

ALLOWED_TABLES = ["species", "tickets", "visit_log", "visitors"]


def catalog_row(
    table_name: str,
    column_name: str,
    column_type: str,
    data_type: str | None = None,
    *,
    is_nullable: bool = True,
    is_primary: bool = False,
    identity: str = "",
    default_value: str | None = None,
    referenced_table: str | None = None,
    referenced_column: str | None = None,
) -> dict[str, Any]:
    """Build one row shaped like the catalog introspection query output."""
    return {
        "table_name": table_name,
        "column_name": column_name,
        "column_type": column_type,
        "data_type": data_type or column_type,
        "is_nullable": is_nullable,
        "is_primary": is_primary,
        "identity": identity,
        "default_value": default_value,
        "referenced_table": referenced_table,
        "referenced_column": referenced_column,
    }


ZOO_CATALOG_ROWS = [
    catalog_row("secrets", "id", "integer", is_nullable=False, is_primary=True, identity="a"),
    catalog_row("species", "SPECIES_CODE", "character varying(10)", "character varying",
                is_nullable=False, is_primary=True),
    catalog_row("species", "COMMON_NAME", "character varying(80)", "character varying",
                is_nullable=False),
    catalog_row("tickets", "TICKET_ID", "integer", is_nullable=False, is_primary=True,
                default_value="nextval('\"tickets_TICKET_ID_seq\"'::regclass)"),
    catalog_row("tickets", "VISITORS_ID", "integer", is_nullable=False,
                referenced_table="visitors", referenced_column="VISITORS_ID"),
    catalog_row("tickets", "PRICE", "numeric(8,2)", "numeric", is_nullable=False,
                default_value="0"),
    catalog_row("visit_log", "VISITORS_ID", "integer", is_nullable=False,
                referenced_table="visitors", referenced_column="VISITORS_ID"),
    catalog_row("visit_log", "NOTE", "text"),
    catalog_row("visitors", "VISITORS_ID", "integer", is_nullable=False, is_primary=True,
                identity="d"),
    catalog_row("visitors", "NAME", "character varying(100)", "character varying",
                is_nullable=False),
    catalog_row("visitors", "EMAIL", "character varying(100)", "character varying",
                is_nullable=False),
    catalog_row("visitors", "PHONE_NO", "character varying(20)", "character varying",
                is_nullable=False),
    catalog_row("visitors", "MEMBERSHIP_TYPE", "character varying(20)", "character varying"),
]


@pytest.fixture(autouse=True)
def reset_config() -> None:
    """Reset global settings before each test."""
    reset_settings()


@pytest.fixture(autouse=True)
def disable_metrics_for_tests():
    """Disable the metrics server for tests to avoid port conflicts."""
    os.environ["OBSERVABILITY_METRICS_ENABLED"] = "false"
    yield
    # Clean up
    if "OBSERVABILITY_METRICS_ENABLED" in os.environ:
        del os.environ["OBSERVABILITY_METRICS_ENABLED"]


@pytest.fixture
def allowed_tables() -> list[str]:
    """Whitelist used by engine and API tests; excludes the 'secrets' table."""
    return list(ALLOWED_TABLES)


@pytest.fixture
def make_catalog_row():
    """Expose the catalog row builder to tests."""
    return catalog_row


@pytest.fixture
def catalog_rows() -> list[dict[str, Any]]:
    """Catalog rows returned by the mocked introspection query."""
    return list(ZOO_CATALOG_ROWS)


@pytest.fixture
def mock_pool(catalog_rows: list[dict[str, Any]]) -> MagicMock:
    """Create a mock asyncpg pool.

    ``fetch`` answers the catalog query with ``catalog_rows`` and any other
    query with ``pool.table_rows``. ``execute``, ``fetchrow`` and ``fetchval``
    are plain AsyncMocks for tests to configure.
    """
    pool = MagicMock()
    pool.table_rows = []

    async def fetch(sql: str, *args: Any) -> list[dict[str, Any]]:
        if sql == CATALOG_QUERY:
            return catalog_rows
        return pool.table_rows

    pool.fetch = AsyncMock(side_effect=fetch)
    pool.fetchrow = AsyncMock(return_value=None)
    pool.fetchval = AsyncMock(return_value=None)
    pool.execute = AsyncMock(return_value="UPDATE 1")
    return pool



@pytest.fixture
def engine(mock_pool: MagicMock, allowed_tables: list[str]) -> RowOperations:
    """Create a RowOperations engine over the mocked pool."""
    return RowOperations(mock_pool, allowed_tables)
