"""
Generator Registry

Chooses the value generator for each column from its type and optional
generator hint. Resolution happens while planning, so an unusable hint fails
the run before any row is produced.
"""

import logging
from typing import Callable, Dict, Optional

from ..config import Config
from ..errors import SchemaError
from ..schema.model import Column, ColumnType, Table
from .base import ValueGenerator
from .categorical import EnumGenerator
from .numeric import BooleanGenerator, DecimalGenerator, IntegerGenerator, SequenceGenerator
from .pii import PIIGenerator, infer_hint
from .temporal import TEMPORAL_HINTS, DateGenerator, DateTimeGenerator, TimeGenerator, infer_temporal_hint
from .text import EmptyTextGenerator, LoremGenerator

logger = logging.getLogger(__name__)

SEQUENCE_HINTS = {'sequence', 'autoincrement', 'auto-increment', 'serial'}
RANDOM_HINTS = {'random', 'range'}
LOREM_HINTS = {'lorem', 'text', 'words'}
BOOLEAN_HINTS = {'true': True, 'false': False}


def known_hints() -> Dict[str, str]:
    """Every generator hint mapped to the column type it applies to"""
    hints = {column_type.value: column_type.value for column_type in ColumnType}
    for hint in SEQUENCE_HINTS | RANDOM_HINTS:
        hints[hint] = ColumnType.INTEGER.value
    for hint in PIIGenerator.HINTS + tuple(LOREM_HINTS):
        hints[hint] = ColumnType.TEXT.value
    hints[EmptyTextGenerator.name] = ColumnType.TEXT.value
    for hint in BOOLEAN_HINTS:
        hints[hint] = ColumnType.BOOLEAN.value
    for hint in TEMPORAL_HINTS:
        hints[hint] = ColumnType.DATETIME.value
    return hints


class GeneratorRegistry:
    """
    Resolves columns to value generators

    Dispatch is by column type; each type's resolver then interprets the
    hint (None means the type's default).
    """

    def __init__(self, config: Config):
        self.config = config
        self._resolvers: Dict[ColumnType, Callable[[Table, Column, Optional[str]], Optional[ValueGenerator]]] = {
            ColumnType.TEXT: self._resolve_text,
            ColumnType.INTEGER: self._resolve_integer,
            ColumnType.DECIMAL: self._resolve_decimal,
            ColumnType.BOOLEAN: self._resolve_boolean,
            ColumnType.DATE: self._temporal(DateGenerator),
            ColumnType.TIME: self._temporal(TimeGenerator),
            ColumnType.DATETIME: self._temporal(DateTimeGenerator),
            ColumnType.ENUM: self._simple(EnumGenerator),
        }

    def resolve(self, table: Table, column: Column) -> ValueGenerator:
        """
        Get the generator for a column

        Args:
            table: Owning table
            column: Column definition

        Returns:
            Value generator instance

        Raises:
            SchemaError: If the hint is unknown or does not fit the column type
        """
        location = f"schema/table[{table.name}]/column[{column.name}]"
        hint = column.generator

        generator = self._resolvers[column.type](table, column, hint)
        if generator is None:
            if hint in known_hints():
                reason = f"generator '{hint}' cannot produce {column.type.value} values"
            else:
                reason = f"unknown generator '{hint}'"
            raise SchemaError(f"{location}@generator", reason)

        generator.validate(location, column)
        logger.debug(f"{table.name}.{column.name}: {generator.name} generator")
        return generator

    def _simple(self, generator_class) -> Callable:
        def resolver(table: Table, column: Column, hint: Optional[str]) -> Optional[ValueGenerator]:
            if hint is None or hint == generator_class.name:
                return generator_class(self.config)
            return None
        return resolver

    def _temporal(self, generator_class) -> Callable:
        def resolver(table: Table, column: Column, hint: Optional[str]) -> Optional[ValueGenerator]:
            if hint is None:
                return generator_class(self.config, infer_temporal_hint(column.name))
            if hint == generator_class.name:
                return generator_class(self.config)
            if hint in TEMPORAL_HINTS:
                return generator_class(self.config, hint)
            return None
        return resolver

    def _resolve_boolean(self, table: Table, column: Column, hint: Optional[str]) -> Optional[ValueGenerator]:
        if hint is None or hint == BooleanGenerator.name:
            return BooleanGenerator(self.config)
        if hint in BOOLEAN_HINTS:
            return BooleanGenerator(self.config, BOOLEAN_HINTS[hint])
        return None

    def _resolve_integer(self, table: Table, column: Column, hint: Optional[str]) -> Optional[ValueGenerator]:
        if hint is None:
            if table.primary_key == (column.name,) and column.name not in table.foreign_key_columns:
                return SequenceGenerator(self.config, table.name)
            return IntegerGenerator(self.config)
        if hint in SEQUENCE_HINTS:
            return SequenceGenerator(self.config, table.name)
        if hint in RANDOM_HINTS or hint == IntegerGenerator.name:
            return IntegerGenerator(self.config)
        return None

    def _resolve_decimal(self, table: Table, column: Column, hint: Optional[str]) -> Optional[ValueGenerator]:
        if hint is None or hint in RANDOM_HINTS or hint == DecimalGenerator.name:
            return DecimalGenerator(self.config)
        return None

    def _resolve_text(self, table: Table, column: Column, hint: Optional[str]) -> Optional[ValueGenerator]:
        if hint is None:
            hint = infer_hint(column.name)
        if hint in LOREM_HINTS:
            return LoremGenerator(self.config)
        if hint == EmptyTextGenerator.name:
            return EmptyTextGenerator(self.config)
        if hint in PIIGenerator.HINTS:
            return PIIGenerator(self.config, hint)
        return None
