"""
Value generator base classes

A value generator produces one value for one column per call. All randomness
comes from the GenerationContext passed in, never from module state.
"""

import logging
from typing import Any, Callable, Optional

from ..config import Config
from ..context import GenerationContext
from ..errors import UniquenessExhausted
from ..schema.model import Column

logger = logging.getLogger(__name__)


class ValueGenerator:
    """
    Abstract base class for value generators

    Each generator is responsible for producing values of one column kind
    """

    name = "base"

    def __init__(self, config: Config):
        self.config = config

    def validate(self, location: str, column: Column):
        """
        Check at plan time that the column can be generated

        Raises:
            SchemaError: If the column's declaration cannot be satisfied
        """

    def generate(self, context: GenerationContext, column: Column) -> Any:
        """
        Generate one value for a column

        Args:
            context: Generation context holding the random source
            column: Column definition

        Returns:
            Generated scalar value
        """
        raise NotImplementedError("Subclasses must implement generate()")


class UniqueValueSource:
    """
    Draws values that have not been emitted before

    Wraps a generator and retries up to max_attempts times per value.
    """

    def __init__(self, generator: ValueGenerator, table_name: str, column: Column, max_attempts: int):
        self.generator = generator
        self.table_name = table_name
        self.column = column
        self.max_attempts = max_attempts

    def draw(self, context: GenerationContext, claim: Optional[Callable[[Any], bool]] = None) -> Any:
        """
        Draw a fresh value

        Args:
            context: Generation context
            claim: Records a candidate and returns False if it was already
                taken (defaults to the context's per-column unique set)

        Returns:
            Value not seen before for this column
        """
        if claim is None:
            def claim(value):
                return context.claim_unique(self.table_name, self.column.name, value)

        for attempt in range(self.max_attempts):
            value = self.generator.generate(context, self.column)
            if claim(value):
                if attempt:
                    logger.debug(f"{self.table_name}.{self.column.name}: fresh value after {attempt + 1} attempts")
                return value

        raise UniquenessExhausted(self.table_name, self.column.name, self.max_attempts)
