"""Catalog models describing whitelisted tables.

These are value objects built by the catalog loader on every engine call and
discarded once the call completes. Serialization uses the camelCase field
names of the ``/meta`` contract.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ColumnSchema(BaseModel):
    """Information about a single table column."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., description="Column name")
    column_type: str = Field(..., description="Declared type, e.g. character varying(120)")
    data_type: str = Field(..., description="Base data type tag, e.g. integer")
    is_nullable: bool = Field(..., description="Whether column allows NULL values")
    is_primary: bool = Field(default=False, description="Whether column is in the primary key")
    is_auto_increment: bool = Field(
        default=False, description="Whether the engine generates the value on insert"
    )
    default_value: str | None = Field(None, description="Default value expression")
    referenced_table: str | None = Field(None, description="Foreign key target table")
    referenced_column: str | None = Field(None, description="Foreign key target column")

    @property
    def is_required(self) -> bool:
        """Whether an insert payload must mention this column."""
        return not self.is_nullable and not self.is_auto_increment and self.default_value is None


class TableSchema(BaseModel):
    """A whitelisted table with its columns in catalog ordinal order."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    table_name: str = Field(..., description="Table name")
    primary_key: str | None = Field(None, description="Single primary key column, if any")
    columns: tuple[ColumnSchema, ...] = Field(default_factory=tuple, description="Table columns")

    def column_map(self) -> dict[str, ColumnSchema]:
        """Index columns by name."""
        return {column.name: column for column in self.columns}

    def get_column(self, name: str) -> ColumnSchema | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase metadata contract."""
        return self.model_dump(by_alias=True, mode="json")


class SchemaCatalog(BaseModel):
    """Mapping from table name to TableSchema, restricted to the whitelist."""

    tables: dict[str, TableSchema] = Field(default_factory=dict, description="Tables by name")

    def get(self, table_name: str) -> TableSchema | None:
        """Find a table by exact name.

        Args:
            table_name: Name of the table to find.

        Returns:
            TableSchema if present, None otherwise.
        """
        return self.tables.get(table_name)

    def sorted_tables(self) -> list[TableSchema]:
        """Return tables ordered by name ascending."""
        return [self.tables[name] for name in sorted(self.tables)]

    def __contains__(self, table_name: object) -> bool:
        return table_name in self.tables

    def __len__(self) -> int:
        return len(self.tables)
