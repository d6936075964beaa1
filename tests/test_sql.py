"""
Test Suite for SQL Rendering

Tests:
- INSERT statement layout and batching
- Literal rendering per column type and dialect
- Literal parsing back to Python values
- Render failures
"""

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from sqlseed.errors import RenderError
from sqlseed.schema.model import Column, ColumnType, Schema, Table
from sqlseed.sql import SQLEmitter, get_dialect, list_dialects, parse_literal, render_literal


@pytest.fixture
def users():
    return Table(
        name="users",
        columns=[
            Column(name="id", type=ColumnType.INTEGER, primary_key=True),
            Column(name="email", type=ColumnType.TEXT),
            Column(name="active", type=ColumnType.BOOLEAN),
        ],
        primary_key=("id",),
    )


@pytest.fixture
def rows():
    return [
        {"id": 1, "email": "ada@example.com", "active": True},
        {"id": 2, "email": "o'brien@example.com", "active": False},
        {"id": 3, "email": None, "active": True},
    ]


class TestSQLEmitter:
    """Test INSERT statement rendering"""

    def test_single_statement(self, users, rows):
        text = SQLEmitter().render_table(users, rows)

        assert text == (
            "-- users: 3 rows\n"
            "INSERT INTO users\n"
            "  (id, email, active)\n"
            "VALUES\n"
            "  (1, 'ada@example.com', TRUE),\n"
            "  (2, 'o''brien@example.com', FALSE),\n"
            "  (3, NULL, TRUE);\n"
        )

    def test_without_header(self, users, rows):
        text = SQLEmitter(include_header=False).render_table(users, rows)
        assert text.startswith("INSERT INTO users\n")
        assert text.endswith(");\n")

    def test_zero_rows(self, users):
        assert SQLEmitter().render_table(users, []) == "-- users: 0 rows\n"

    def test_batching(self, users, rows):
        text = SQLEmitter(rows_per_statement=2).render_table(users, rows)

        assert text.count("INSERT INTO users") == 2
        assert text.count(";\n") == 2
        statements = text.split("\n\n")
        assert "(3, NULL, TRUE);" in statements[1]

    def test_zero_batch_size_means_one_statement(self, users, rows):
        assert SQLEmitter(rows_per_statement=0).render_table(users, rows).count("INSERT INTO") == 1

    def test_negative_batch_size(self):
        with pytest.raises(ValueError):
            SQLEmitter(rows_per_statement=-1)

    def test_quoted_identifiers(self, users, rows):
        text = SQLEmitter(dialect="postgres", quote_identifiers=True).render_table(users, rows)
        assert 'INSERT INTO "users"' in text
        assert '("id", "email", "active")' in text

    def test_mysql_dialect(self, users, rows):
        text = SQLEmitter(dialect="mysql", quote_identifiers=True).render_table(users, rows)
        assert "INSERT INTO `users`" in text
        assert "(1, 'ada@example.com', 1)," in text
        assert "(2, 'o''brien@example.com', 0)," in text

    def test_reserved_words_are_quoted(self):
        table = Table(
            name="order",
            columns=[Column(name="id", type=ColumnType.INTEGER), Column(name="user", type=ColumnType.TEXT)],
        )
        text = SQLEmitter().render_table(table, [{"id": 1, "user": "ada"}])
        assert 'INSERT INTO "order"\n  (id, "user")\n' in text

    def test_names_that_are_not_plain_identifiers_are_quoted(self):
        table = Table(name="order items", columns=[Column(name="unit price", type=ColumnType.INTEGER)])

        text = SQLEmitter().render_table(table, [{"unit price": 5}])
        assert 'INSERT INTO "order items"\n  ("unit price")\n' in text

        text = SQLEmitter(dialect="mysql").render_table(table, [{"unit price": 5}])
        assert "INSERT INTO `order items`" in text

    def test_header_stays_one_comment_line(self):
        table = Table(name="a\nDROP TABLE b", columns=[Column(name="id", type=ColumnType.INTEGER)])
        text = SQLEmitter().render_table(table, [{"id": 1}])
        assert text.splitlines()[0] == "-- a DROP TABLE b: 1 rows"

    def test_sqlite_booleans(self, users, rows):
        text = SQLEmitter(dialect="sqlite").render_table(users, rows)
        assert "(1, 'ada@example.com', 1)," in text

    def test_render_error_names_column(self, users):
        bad_rows = [{"id": "one", "email": "a@b.c", "active": True}]
        with pytest.raises(RenderError) as exc_info:
            SQLEmitter().render_table(users, bad_rows)
        assert exc_info.value.table == "users"
        assert exc_info.value.column == "id"

    def test_missing_value(self, users):
        with pytest.raises(RenderError):
            SQLEmitter().render_table(users, [{"id": 1, "email": "a@b.c"}])

    def test_render_all_keeps_order(self, users, rows):
        tags = Table(name="tags", columns=[Column(name="label", type=ColumnType.TEXT)])
        schema = Schema(tables=[users, tags])
        rendered = SQLEmitter().render_all(schema, {"tags": [{"label": "x"}], "users": rows})
        assert list(rendered) == ["tags", "users"]

    def test_unknown_dialect(self):
        with pytest.raises(ValueError):
            SQLEmitter(dialect="oracle")


class TestLiterals:
    """Test literal rendering and parsing"""

    @pytest.mark.parametrize("column_type, value, expected", [
        (ColumnType.INTEGER, -42, "-42"),
        (ColumnType.DECIMAL, Decimal("12.50"), "12.50"),
        (ColumnType.DECIMAL, Decimal("1E+3"), "1000"),
        (ColumnType.DECIMAL, Decimal("0E-2"), "0.00"),
        (ColumnType.DECIMAL, 7, "7"),
        (ColumnType.DATE, date(2024, 2, 29), "'2024-02-29'"),
        (ColumnType.TIME, time(9, 5, 0), "'09:05:00'"),
        (ColumnType.DATETIME, datetime(2024, 6, 15, 13, 45, 7), "'2024-06-15 13:45:07'"),
        (ColumnType.ENUM, "gold", "'gold'"),
        (ColumnType.TEXT, "", "''"),
        (ColumnType.TEXT, None, "NULL"),
    ])
    def test_render(self, column_type, value, expected):
        assert render_literal(value, Column(name="c", type=column_type)) == expected

    @pytest.mark.parametrize("column_type, value", [
        (ColumnType.INTEGER, True),
        (ColumnType.INTEGER, 1.5),
        (ColumnType.TEXT, 5),
        (ColumnType.DECIMAL, float("nan")),
        (ColumnType.DECIMAL, Decimal("Infinity")),
        (ColumnType.DATE, datetime(2024, 1, 1)),
        (ColumnType.BOOLEAN, 1),
    ])
    def test_type_mismatch(self, column_type, value):
        with pytest.raises(ValueError):
            render_literal(value, Column(name="c", type=column_type))

    @pytest.mark.parametrize("column_type, value", [
        (ColumnType.TEXT, "it's a 'quote'"),
        (ColumnType.TEXT, "back\\slash"),
        (ColumnType.DECIMAL, Decimal("-0.05")),
        (ColumnType.BOOLEAN, False),
        (ColumnType.DATETIME, datetime(1999, 12, 31, 23, 59, 59)),
        (ColumnType.TIME, time(0, 0, 1)),
    ])
    @pytest.mark.parametrize("dialect", ["ansi", "mysql"])
    def test_parse_inverts_render(self, column_type, value, dialect):
        column = Column(name="c", type=column_type)
        assert parse_literal(render_literal(value, column, dialect), column, dialect) == value

    def test_mysql_escapes_backslashes(self):
        column = Column(name="c", type=ColumnType.TEXT)
        assert render_literal("a\\b", column, "mysql") == "'a\\\\b'"
        assert render_literal("a\\b", column, "ansi") == "'a\\b'"

    def test_text_null_is_not_null(self):
        column = Column(name="c", type=ColumnType.TEXT)
        assert render_literal("NULL", column) == "'NULL'"
        assert parse_literal("'NULL'", column) == "NULL"


class TestDialects:
    """Test dialect lookup"""

    def test_known_dialects(self):
        assert list_dialects() == ["ansi", "postgres", "mysql", "sqlite"]
        assert get_dialect(" MySQL ").identifier_quote == "`"

    def test_quote_identifier_doubles_quotes(self):
        assert get_dialect("ansi").quote_identifier('we"ird') == '"we""ird"'

    def test_unknown_dialect(self):
        with pytest.raises(ValueError):
            get_dialect("oracle")
