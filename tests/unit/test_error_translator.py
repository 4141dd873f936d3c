"""Unit tests for database error classification."""

import asyncpg
import pytest

from pg_crud.models.errors import (
    ErrorCategory,
    ForeignKeyViolation,
    ReferentialDeleteBlocked,
    UniqueViolation,
    UnknownDatabaseError,
)
from pg_crud.services.error_translator import classify, driver_details

FALLBACK = "Failed to create row."


class TestClassify:
    """Tests for classify."""

    def test_insert_with_missing_reference(self) -> None:
        error = asyncpg.exceptions.ForeignKeyViolationError(
            'insert or update on table "tickets" violates foreign key constraint '
            '"tickets_VISITORS_ID_fkey"'
        )

        result = classify(error, FALLBACK)

        assert isinstance(result, ForeignKeyViolation)
        assert result.status_code == 400
        assert result.message == "Invalid foreign key reference."

    def test_delete_of_referenced_row(self) -> None:
        error = asyncpg.exceptions.ForeignKeyViolationError(
            'update or delete on table "visitors" violates foreign key constraint '
            '"tickets_VISITORS_ID_fkey" on table "tickets"'
        )

        result = classify(error, "Failed to delete row.")

        assert isinstance(result, ReferentialDeleteBlocked)
        assert result.category == ErrorCategory.REFERENTIAL_DELETE_BLOCKED
        assert result.status_code == 409
        assert result.message == "Cannot delete or update this row because dependent records exist."

    def test_localized_delete_uses_referencing_table(self) -> None:
        error = asyncpg.exceptions.ForeignKeyViolationError(
            "Aktualisieren oder Löschen in Tabelle »visitors« verletzt "
            "Fremdschlüssel-Constraint »tickets_VISITORS_ID_fkey« von Tabelle »tickets«"
        )
        error.table_name = "tickets"

        result = classify(error, "Failed to update row.", "visitors")

        assert isinstance(result, ReferentialDeleteBlocked)
        assert result.status_code == 409

    def test_localized_insert_uses_referencing_table(self) -> None:
        error = asyncpg.exceptions.ForeignKeyViolationError(
            "Einfügen oder Aktualisieren in Tabelle »tickets« verletzt "
            "Fremdschlüssel-Constraint »tickets_VISITORS_ID_fkey«"
        )
        error.table_name = "tickets"

        assert isinstance(classify(error, FALLBACK, "tickets"), ForeignKeyViolation)

    def test_delete_always_blocks_on_foreign_key(self) -> None:
        error = asyncpg.exceptions.ForeignKeyViolationError("Fremdschlüssel-Constraint verletzt")

        result = classify(error, "Failed to delete row.", "visitors", on_delete=True)

        assert isinstance(result, ReferentialDeleteBlocked)

    def test_restrict_violation(self) -> None:
        error = asyncpg.exceptions.RestrictViolationError("restricted")
        assert isinstance(classify(error, FALLBACK), ReferentialDeleteBlocked)

    def test_unique_violation(self) -> None:
        error = asyncpg.exceptions.UniqueViolationError(
            'duplicate key value violates unique constraint "visitors_EMAIL_key"'
        )

        result = classify(error, FALLBACK)

        assert isinstance(result, UniqueViolation)
        assert result.status_code == 409
        assert result.message == "Duplicate value violates a unique constraint."

    def test_other_postgres_error_uses_fallback(self) -> None:
        error = asyncpg.exceptions.InvalidTextRepresentationError(
            'invalid input syntax for type integer: "abc"'
        )

        result = classify(error, FALLBACK)

        assert isinstance(result, UnknownDatabaseError)
        assert result.status_code == 500
        assert result.message == FALLBACK

    def test_non_driver_error(self) -> None:
        result = classify(ConnectionResetError("connection reset"), "Failed to fetch table rows.")

        assert isinstance(result, UnknownDatabaseError)
        assert result.message == "Failed to fetch table rows."
        assert result.details == "connection reset"

    def test_driver_message_kept_as_details_only(self) -> None:
        error = asyncpg.exceptions.UniqueViolationError("duplicate key value")

        body = classify(error, FALLBACK).to_dict()

        assert body["error"] == "Duplicate value violates a unique constraint."
        assert body["details"] == "duplicate key value"


class TestDriverDetails:
    """Tests for driver_details."""

    def test_includes_detail_line(self) -> None:
        error = asyncpg.exceptions.ForeignKeyViolationError("violates foreign key constraint")
        error.detail = 'Key (VISITORS_ID)=(7) is still referenced from table "tickets".'

        assert driver_details(error) == (
            "violates foreign key constraint "
            '(Key (VISITORS_ID)=(7) is still referenced from table "tickets".)'
        )

    def test_empty_message_falls_back_to_type(self) -> None:
        assert driver_details(TimeoutError()) == "TimeoutError"


@pytest.mark.parametrize(
    "error_cls",
    [
        asyncpg.exceptions.UniqueViolationError,
        asyncpg.exceptions.ForeignKeyViolationError,
        asyncpg.exceptions.NotNullViolationError,
    ],
)
def test_result_is_never_the_raw_error(error_cls: type[Exception]) -> None:
    error = error_cls("boom")
    assert classify(error, FALLBACK) is not error
