"""
SQL Module

Renders generated rows as INSERT statements for a target dialect.
"""

from .dialects import SQLDialect, DIALECTS, get_dialect, list_dialects
from .literals import render_literal, parse_literal
from .emitter import SQLEmitter

__all__ = [
    "SQLDialect",
    "DIALECTS",
    "get_dialect",
    "list_dialects",
    "render_literal",
    "parse_literal",
    "SQLEmitter",
]
