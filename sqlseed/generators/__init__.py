"""
Data Generators Module

Provides value generators for each column type:
- Numeric: Integers, sequences, decimals and booleans
- Text: Lorem ipsum filler
- PII: Realistic names, emails, phones, addresses and identifiers
- Temporal: Dates, times and datetimes within a window
- Categorical: Enumerated literals
"""

from .base import ValueGenerator, UniqueValueSource
from .numeric import IntegerGenerator, SequenceGenerator, DecimalGenerator, BooleanGenerator
from .text import LoremGenerator, EmptyTextGenerator
from .pii import PIIGenerator, EmailGenerator, PhoneGenerator, infer_hint
from .temporal import DateGenerator, TimeGenerator, DateTimeGenerator
from .categorical import EnumGenerator
from .registry import GeneratorRegistry

__all__ = [
    "ValueGenerator",
    "UniqueValueSource",
    "GeneratorRegistry",

    # Numeric generators
    "IntegerGenerator",
    "SequenceGenerator",
    "DecimalGenerator",
    "BooleanGenerator",

    # Text generators
    "LoremGenerator",
    "EmptyTextGenerator",

    # PII generators
    "PIIGenerator",
    "EmailGenerator",
    "PhoneGenerator",
    "infer_hint",

    # Temporal generators
    "DateGenerator",
    "TimeGenerator",
    "DateTimeGenerator",

    # Categorical generators
    "EnumGenerator",
]
