"""
Schema Module

Provides the schema model, the document parser and the table dependency
graph used to order generation.
"""

from .model import (
    Schema,
    Table,
    Column,
    ColumnType,
    ForeignKey,
)
from .parser import SchemaParser, parse_schema, parse_check_constraint
from .graph import DependencyGraph

__all__ = [
    "Schema",
    "Table",
    "Column",
    "ColumnType",
    "ForeignKey",
    "SchemaParser",
    "parse_schema",
    "parse_check_constraint",
    "DependencyGraph",
]
