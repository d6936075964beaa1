"""
Numeric Data Generator Module

Generates integer, decimal and boolean values:
- Integers uniform within declared bounds (default 0..100)
- Auto-increment sequences for integer keys
- Decimals at a fixed scale, exact and within bounds
- Booleans as a fair coin or a constant

Draws are limited to 64-bit signed integers, the range of the random source.
"""

import logging
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR
from typing import Optional, Tuple

from ..context import GenerationContext
from ..errors import SchemaError
from ..schema.model import Column
from .base import ValueGenerator

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def check_int64(location: str, low: int, high: int, what: str = "bounds"):
    if low < INT64_MIN or high > INT64_MAX:
        raise SchemaError(location, f"{what} {low}..{high} exceed the 64-bit integer range")


class IntegerGenerator(ValueGenerator):
    """Uniform integers within the column's bounds"""

    name = "integer"

    def bounds(self, column: Column) -> Tuple[int, int]:
        """Inclusive range, widening from a single declared bound"""
        span = self.config.numeric.int_max - self.config.numeric.int_min
        low = column.min_value if column.min_value is not None else self.config.numeric.int_min
        high = column.max_value if column.max_value is not None else self.config.numeric.int_max

        if column.max_value is None and high < low:
            high = low + span
        if column.min_value is None and low > high:
            low = high - span
        return int(low), int(high)

    def validate(self, location: str, column: Column):
        check_int64(location, *self.bounds(column))

    def generate(self, context: GenerationContext, column: Column) -> int:
        low, high = self.bounds(column)
        return context.randint(low, high)


class SequenceGenerator(ValueGenerator):
    """
    Auto-increment integers

    Starts at the column's min bound (default 1) and counts up per table.
    """

    name = "sequence"

    def __init__(self, config, table_name: str):
        super().__init__(config)
        self.table_name = table_name

    def generate(self, context: GenerationContext, column: Column) -> int:
        start = column.min_value if column.min_value is not None else 1
        value = context.next_sequence(self.table_name, column.name, start=start)
        if column.max_value is not None and value > column.max_value:
            return column.max_value
        return value


class DecimalGenerator(ValueGenerator):
    """
    Decimals at the column's scale

    Values are drawn as whole multiples of 10^-scale, so they are exact and
    never leave the declared bounds.
    """

    name = "decimal"

    def scale(self, column: Column) -> int:
        return self.config.numeric.decimal_scale if column.scale is None else column.scale

    def units(self, column: Column) -> Tuple[int, int]:
        """Inclusive range of the value expressed in units of 10^-scale"""
        numeric = self.config.numeric
        span = Decimal(str(numeric.decimal_max)) - Decimal(str(numeric.decimal_min))
        low = column.min_value if column.min_value is not None else Decimal(str(numeric.decimal_min))
        high = column.max_value if column.max_value is not None else Decimal(str(numeric.decimal_max))

        if column.max_value is None and high < low:
            high = low + span
        if column.min_value is None and low > high:
            low = high - span

        factor = Decimal(10) ** self.scale(column)
        low_units = int((Decimal(low) * factor).to_integral_value(rounding=ROUND_CEILING))
        high_units = int((Decimal(high) * factor).to_integral_value(rounding=ROUND_FLOOR))
        return low_units, high_units

    def validate(self, location: str, column: Column):
        low, high = self.units(column)
        check_int64(location, low, high, f"bounds in units of 10^-{self.scale(column)}")
        if low > high:
            raise SchemaError(
                location,
                f"no value with {self.scale(column)} decimal places lies within the declared bounds"
            )

    def generate(self, context: GenerationContext, column: Column) -> Decimal:
        low, high = self.units(column)
        return Decimal(context.randint(low, high)).scaleb(-self.scale(column))


class BooleanGenerator(ValueGenerator):
    """Fair coin, or a constant for the `true` and `false` hints"""

    name = "boolean"

    def __init__(self, config, value: Optional[bool] = None):
        super().__init__(config)
        self.value = value

    def generate(self, context: GenerationContext, column: Column) -> bool:
        if self.value is not None:
            return self.value
        return context.chance(0.5)
