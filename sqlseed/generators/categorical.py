"""
Categorical Data Generator Module

Generates values for enumerated columns by picking uniformly among the
declared literals.
"""

import logging

from ..context import GenerationContext
from ..errors import SchemaError
from ..schema.model import Column
from .base import ValueGenerator

logger = logging.getLogger(__name__)


class EnumGenerator(ValueGenerator):
    """Uniform pick among an enumeration's literals"""

    name = "enum"

    def validate(self, location: str, column: Column):
        if not column.values:
            raise SchemaError(location, "enumeration declares no literals")

    def generate(self, context: GenerationContext, column: Column) -> str:
        return context.choice(column.values)
