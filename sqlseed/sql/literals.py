"""
SQL literal rendering

Converts generated Python values to SQL literal text and back. For every
value the engine produces, parse_literal(render_literal(v)) == v.
"""

import math
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from ..schema.model import Column, ColumnType
from .dialects import SQLDialect, get_dialect

NULL = "NULL"

DialectLike = Union[SQLDialect, str]


def _dialect(dialect: DialectLike) -> SQLDialect:
    return dialect if isinstance(dialect, SQLDialect) else get_dialect(dialect)


def quote_string(value: str, dialect: SQLDialect) -> str:
    """Single-quote a string, escaping quotes (and backslashes for MySQL)"""
    if dialect.escape_backslash:
        value = value.replace("\\", "\\\\")
    return "'" + value.replace("'", "''") + "'"


def unquote_string(text: str, dialect: SQLDialect) -> str:
    if len(text) < 2 or text[0] != "'" or text[-1] != "'":
        raise ValueError(f"not a quoted string literal: {text!r}")
    body = text[1:-1]
    if not dialect.escape_backslash:
        return body.replace("''", "'")

    chars = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            chars.append(body[i + 1])
            i += 2
        elif ch == "'" and body[i + 1:i + 2] == "'":
            chars.append("'")
            i += 2
        else:
            chars.append(ch)
            i += 1
    return "".join(chars)


def render_literal(value: Any, column: Column, dialect: DialectLike = "ansi") -> str:
    """
    Render a value as a SQL literal for a column

    Args:
        value: Generated value (None renders as NULL)
        column: Column the value belongs to
        dialect: Target dialect or its name

    Returns:
        Literal text

    Raises:
        ValueError: If the value is not representable or does not match the
            column type
    """
    dialect = _dialect(dialect)
    if value is None:
        return NULL

    column_type = column.type
    if column_type in (ColumnType.TEXT, ColumnType.ENUM):
        if not isinstance(value, str):
            raise ValueError(f"expected text, got {type(value).__name__}")
        return quote_string(value, dialect)

    if column_type == ColumnType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"expected an integer, got {type(value).__name__}")
        return str(value)

    if column_type == ColumnType.DECIMAL:
        if isinstance(value, bool):
            raise ValueError("expected a decimal, got bool")
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise ValueError(f"{value} is not a finite number")
            return format(value, "f")
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"{value} is not a finite number")
            return repr(value)
        raise ValueError(f"expected a decimal, got {type(value).__name__}")

    if column_type == ColumnType.BOOLEAN:
        if not isinstance(value, bool):
            raise ValueError(f"expected a boolean, got {type(value).__name__}")
        return dialect.true_literal if value else dialect.false_literal

    if column_type == ColumnType.DATE:
        if type(value) is not date:
            raise ValueError(f"expected a date, got {type(value).__name__}")
        return f"'{value.isoformat()}'"

    if column_type == ColumnType.TIME:
        if not isinstance(value, time):
            raise ValueError(f"expected a time, got {type(value).__name__}")
        return f"'{value.isoformat(timespec='seconds')}'"

    if column_type == ColumnType.DATETIME:
        if not isinstance(value, datetime):
            raise ValueError(f"expected a datetime, got {type(value).__name__}")
        return f"'{value.isoformat(sep=' ', timespec='seconds')}'"

    raise ValueError(f"unsupported column type {column_type}")


def parse_literal(text: str, column: Column, dialect: DialectLike = "ansi") -> Any:
    """
    Parse literal text produced by render_literal back into a Python value

    Args:
        text: Literal text
        column: Column the literal belongs to
        dialect: Dialect the literal was rendered for

    Returns:
        Python value

    Raises:
        ValueError: If the text is not a valid literal for the column
    """
    dialect = _dialect(dialect)
    text = text.strip()
    if text.upper() == NULL:
        return None

    column_type = column.type
    if column_type in (ColumnType.TEXT, ColumnType.ENUM):
        return unquote_string(text, dialect)

    if column_type == ColumnType.INTEGER:
        return int(text)

    if column_type == ColumnType.DECIMAL:
        try:
            return Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"invalid decimal literal: {text!r}") from e

    if column_type == ColumnType.BOOLEAN:
        upper = text.upper()
        if upper == dialect.true_literal.upper():
            return True
        if upper == dialect.false_literal.upper():
            return False
        raise ValueError(f"invalid boolean literal: {text!r}")

    body = unquote_string(text, dialect)
    if column_type == ColumnType.DATE:
        return date.fromisoformat(body)
    if column_type == ColumnType.TIME:
        return time.fromisoformat(body)
    if column_type == ColumnType.DATETIME:
        return datetime.fromisoformat(body)

    raise ValueError(f"unsupported column type {column_type}")
