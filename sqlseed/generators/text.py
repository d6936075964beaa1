"""
Text Data Generator Module

Generates filler text for columns with no more specific kind: a handful of
lorem ipsum words, cut to the column's maximum length. The `empty` hint
fills a column with empty strings.
"""

import logging

from ..context import GenerationContext
from ..schema.model import Column
from .base import ValueGenerator

logger = logging.getLogger(__name__)


class LoremGenerator(ValueGenerator):
    """Lorem ipsum words truncated to the column length"""

    name = "lorem"

    MIN_WORDS = 3

    def generate(self, context: GenerationContext, column: Column) -> str:
        max_length = column.max_length or self.config.text.max_length
        max_words = max(self.config.text.lorem_max_words, 1)
        num_words = context.randint(min(self.MIN_WORDS, max_words), max_words)

        text = " ".join(context.faker.words(nb=num_words))
        return text[:max_length].rstrip() or text[:max_length]


class EmptyTextGenerator(ValueGenerator):
    """The empty string"""

    name = "empty"

    def generate(self, context: GenerationContext, column: Column) -> str:
        return ""
