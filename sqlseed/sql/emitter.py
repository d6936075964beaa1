"""
SQL INSERT emitter

Renders the rows of a table as multi-row INSERT statements:

    INSERT INTO users
      (id, email)
    VALUES
      (1, 'ada@example.com'),
      (2, 'bob@example.com');

Rendering is all-or-nothing per table: every literal is rendered before any
text is assembled.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..errors import RenderError
from ..schema.model import Schema, Table
from .dialects import SQLDialect, get_dialect
from .literals import render_literal

logger = logging.getLogger(__name__)


class SQLEmitter:
    """
    Renders generated rows as SQL INSERT statements

    Args:
        dialect: Target dialect name
        rows_per_statement: Rows per INSERT (None or 0 = one statement)
        quote_identifiers: Quote every table and column name (reserved words
            and names that are not plain identifiers are always quoted)
        include_header: Start each table's text with a comment line
    """

    def __init__(
        self,
        dialect: str = "ansi",
        rows_per_statement: Optional[int] = None,
        quote_identifiers: bool = False,
        include_header: bool = True,
    ):
        self.dialect: SQLDialect = get_dialect(dialect)
        if rows_per_statement is not None and rows_per_statement < 0:
            raise ValueError("rows_per_statement cannot be negative")
        self.rows_per_statement = rows_per_statement or None
        self.quote_identifiers = quote_identifiers
        self.include_header = include_header

    @classmethod
    def from_config(cls, sql_config) -> 'SQLEmitter':
        return cls(
            dialect=sql_config.dialect,
            rows_per_statement=sql_config.rows_per_statement,
            quote_identifiers=sql_config.quote_identifiers,
            include_header=sql_config.include_header,
        )

    def identifier(self, name: str) -> str:
        """Table or column name, quoted when configured or when required"""
        if self.quote_identifiers or self.dialect.requires_quoting(name):
            return self.dialect.quote_identifier(name)
        return name

    def render_table(self, table: Table, rows: Sequence[Dict[str, Any]]) -> str:
        """
        Render all rows of a table

        Args:
            table: Table definition (column order is taken from it)
            rows: Generated rows

        Returns:
            SQL text ending in a newline

        Raises:
            RenderError: If any value cannot be rendered
        """
        header = f"-- {' '.join(table.name.splitlines())}: {len(rows)} rows"
        if not rows:
            return header + "\n"

        tuples = [self._render_row(table, row) for row in rows]

        batch_size = self.rows_per_statement or len(tuples)
        column_list = ", ".join(self.identifier(name) for name in table.column_names)
        statements = []
        for start in range(0, len(tuples), batch_size):
            batch = tuples[start:start + batch_size]
            statements.append(
                f"INSERT INTO {self.identifier(table.name)}\n"
                f"  ({column_list})\n"
                f"VALUES\n"
                + ",\n".join(f"  ({values})" for values in batch)
                + ";"
            )

        parts = [header] if self.include_header else []
        parts.append("\n\n".join(statements))
        logger.debug(f"Rendered {len(rows)} rows of {table.name} in {len(statements)} statement(s)")
        return "\n".join(parts) + "\n"

    def render_all(self, schema: Schema, rows_by_table: Dict[str, List[Dict[str, Any]]]) -> Dict[str, str]:
        """
        Render every table, keeping the order of rows_by_table

        Returns:
            Mapping of table name to SQL text
        """
        return {
            name: self.render_table(schema.get_table(name), rows)
            for name, rows in rows_by_table.items()
        }

    def _render_row(self, table: Table, row: Dict[str, Any]) -> str:
        literals = []
        for column in table.columns:
            if column.name not in row:
                raise RenderError(table.name, column.name, "value missing from row")
            try:
                literals.append(render_literal(row[column.name], column, self.dialect))
            except ValueError as e:
                raise RenderError(table.name, column.name, str(e)) from e
        return ", ".join(literals)
