"""SQL text helpers for dynamically sourced identifiers and bound values.

Identifiers (table and column names) reach generated SQL text only through
``quote_identifier``. Payload values never appear in SQL text; they are
converted with ``to_bind_text`` and bound as ``$n`` parameters.
"""

import json
from typing import Any

from pg_crud.models.schema import ColumnSchema

IDENTIFIER_QUOTE = '"'


def quote_identifier(name: str) -> str:
    """Quote a table or column name for interpolation into SQL text.

    Embedded quote characters are doubled, so the result is always a single
    delimited identifier regardless of its content.

    Args:
        name: Raw identifier.

    Returns:
        str: Delimited identifier.

    Example:
        >>> quote_identifier('weird"name')
        '"weird""name"'
    """
    escaped = name.replace(IDENTIFIER_QUOTE, IDENTIFIER_QUOTE * 2)
    return f"{IDENTIFIER_QUOTE}{escaped}{IDENTIFIER_QUOTE}"


def normalize_value(value: Any) -> Any:
    """Convert an empty string to None; leave every other value untouched."""
    if value == "" and isinstance(value, str):
        return None
    return value


def to_bind_text(value: Any) -> str | None:
    """Render a normalized payload value as text for a ``$n::text`` parameter."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def placeholder(index: int, column: ColumnSchema) -> str:
    """Build a parameter placeholder cast to the column's base type.

    The value is bound as text and converted by the server's input function,
    so JSON strings and numbers are accepted for any column type. The cast
    targets the unmodified base type so that length limits are enforced on
    assignment instead of silently truncating. ``data_type`` comes from the
    server's ``format_type`` output, never from the request.
    """
    return f"${index}::text::{column.data_type}"
