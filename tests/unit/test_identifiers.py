"""Unit tests for identifier quoting and value binding helpers."""

import pytest

from pg_crud.db.identifiers import normalize_value, placeholder, quote_identifier, to_bind_text
from pg_crud.models.schema import ColumnSchema


class TestQuoteIdentifier:
    """Tests for quote_identifier."""

    def test_plain_name(self) -> None:
        assert quote_identifier("visitors") == '"visitors"'

    def test_preserves_case(self) -> None:
        assert quote_identifier("VISITORS_ID") == '"VISITORS_ID"'

    def test_doubles_embedded_quote(self) -> None:
        assert quote_identifier('we"ird') == '"we""ird"'

    @pytest.mark.parametrize(
        "name",
        [
            'visitors"; DROP TABLE visitors; --',
            '"',
            '""',
            'a" OR "1"="1',
            "name with spaces",
            "semi;colon",
        ],
    )
    def test_result_is_single_delimited_identifier(self, name: str) -> None:
        """Whatever the input, the output is one delimited identifier."""
        quoted = quote_identifier(name)

        assert quoted.startswith('"') and quoted.endswith('"')
        inner = quoted[1:-1]
        # Every quote inside the delimiters comes in an escaped pair.
        assert inner.replace('""', "").count('"') == 0
        # Undoing the escaping gives back the original name.
        assert inner.replace('""', '"') == name

    def test_injection_attempt_stays_inside_identifier(self) -> None:
        table = 'visitors" WHERE 1=1 --'
        sql = f"SELECT * FROM {quote_identifier(table)}"
        assert sql == 'SELECT * FROM "visitors"" WHERE 1=1 --"'


class TestNormalizeValue:
    """Tests for normalize_value."""

    def test_empty_string_becomes_none(self) -> None:
        assert normalize_value("") is None

    @pytest.mark.parametrize("value", [" ", "Ann", 0, False, None, [], {}])
    def test_other_values_unchanged(self, value: object) -> None:
        assert normalize_value(value) == value


class TestToBindText:
    """Tests for to_bind_text."""

    def test_none(self) -> None:
        assert to_bind_text(None) is None

    def test_booleans(self) -> None:
        assert to_bind_text(True) == "true"
        assert to_bind_text(False) == "false"

    def test_numbers(self) -> None:
        assert to_bind_text(42) == "42"
        assert to_bind_text(12.5) == "12.5"

    def test_json_values(self) -> None:
        assert to_bind_text({"a": 1}) == '{"a": 1}'
        assert to_bind_text([1, 2]) == "[1, 2]"

    def test_strings_pass_through(self) -> None:
        assert to_bind_text("a@x.com") == "a@x.com"


def test_placeholder_casts_to_base_type() -> None:
    column = ColumnSchema(
        name="NAME",
        column_type="character varying(100)",
        data_type="character varying",
        is_nullable=False,
    )
    assert placeholder(3, column) == "$3::text::character varying"
