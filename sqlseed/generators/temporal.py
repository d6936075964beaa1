"""
Temporal Data Generator Module

Generates dates, times and datetimes:
- Uniform within the column's declared bounds
- Otherwise uniform within a window of temporal.window_years ending at the
  run's anchor
- `now`, `past` and `future` hints relative to the anchor
- Whole-second precision
"""

import logging
from datetime import MAXYEAR, MINYEAR, date, datetime, time, timedelta
from typing import Optional, Tuple

from ..context import GenerationContext
from ..schema.model import Column
from .base import ValueGenerator

logger = logging.getLogger(__name__)

TEMPORAL_HINTS = ('now', 'past', 'future')

# Day offsets from the anchor for the relative hints
PAST_DAYS = (7, 365)
FUTURE_DAYS = (1, 30)


def years_before(moment, years: int):
    """Same calendar position `years` earlier (Feb 29 falls back to Feb 28)"""
    if moment.year - years < MINYEAR:
        return moment.replace(year=MINYEAR, month=1, day=1)
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        return moment.replace(year=moment.year - years, day=28)


def years_after(moment, years: int):
    if moment.year + years > MAXYEAR:
        return moment.replace(year=MAXYEAR, month=12, day=31)
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)


def infer_temporal_hint(column_name: str) -> Optional[str]:
    """Creation and update stamps lie in the past"""
    name = column_name.lower()
    if 'create' in name or 'update' in name:
        return 'past'
    return None


class TemporalGenerator(ValueGenerator):
    """
    Base for generators drawing from a temporal window

    Subclasses convert between their value type and whole units (days or
    seconds) so a window can be sampled with one integer draw.

    A mode of `now`, `past` or `future` replaces the default window; declared
    bounds still take precedence.
    """

    def __init__(self, config, mode: Optional[str] = None):
        super().__init__(config)
        self.mode = mode

    def window(self, context: GenerationContext, column: Column) -> Tuple:
        """
        Inclusive (low, high) range for a column

        A single declared bound is widened by window_years in the open
        direction; with no bounds the window ends at the anchor.
        """
        if self.mode == 'now':
            anchor = self.anchor_value(context)
            return anchor, anchor
        if self.mode is not None and column.min_value is None and column.max_value is None:
            return self.relative_window(context)

        years = self.config.temporal.window_years
        anchor = self.anchor_value(context)

        low, high = column.min_value, column.max_value
        if high is None:
            high = anchor if low is None or low <= anchor else years_after(low, years)
        if low is None:
            low = years_before(high, years)
        return low, high

    def relative_window(self, context: GenerationContext) -> Tuple:
        """Window for the `past` and `future` modes"""
        anchor = self.anchor_value(context)
        if self.mode == 'past':
            nearest, furthest = PAST_DAYS
            return self.shift(anchor, -furthest), self.shift(anchor, -nearest)
        nearest, furthest = FUTURE_DAYS
        return self.shift(anchor, nearest), self.shift(anchor, furthest)

    def shift(self, value, days: int):
        """Move by whole days, stopping at the calendar limits"""
        try:
            return value + timedelta(days=days)
        except OverflowError:
            return years_after(value, MAXYEAR) if days > 0 else years_before(value, MAXYEAR)

    def anchor_value(self, context: GenerationContext):
        raise NotImplementedError

    def to_units(self, value) -> int:
        raise NotImplementedError

    def from_units(self, units: int):
        raise NotImplementedError

    def generate(self, context: GenerationContext, column: Column):
        low, high = self.window(context, column)
        if self.mode == 'now':
            # the anchor, kept inside any declared bounds
            if column.min_value is not None and low < column.min_value:
                return column.min_value
            if column.max_value is not None and high > column.max_value:
                return column.max_value
            return low
        return self.from_units(context.randint(self.to_units(low), self.to_units(high)))


class DateGenerator(TemporalGenerator):
    """Calendar dates"""

    name = "date"

    def anchor_value(self, context: GenerationContext) -> date:
        return context.anchor.date()

    def to_units(self, value: date) -> int:
        return value.toordinal()

    def from_units(self, units: int) -> date:
        return date.fromordinal(units)


class DateTimeGenerator(TemporalGenerator):
    """Timestamps at whole-second precision"""

    name = "datetime"

    EPOCH = datetime(1, 1, 1)

    def anchor_value(self, context: GenerationContext) -> datetime:
        return context.anchor

    def to_units(self, value: datetime) -> int:
        return int((value - self.EPOCH).total_seconds())

    def from_units(self, units: int) -> datetime:
        return self.EPOCH + timedelta(seconds=units)


class TimeGenerator(TemporalGenerator):
    """
    Times of day at whole-second precision

    The relative modes stay within the anchor's day: `past` is before the
    anchor's time of day and `future` after it.
    """

    name = "time"

    def window(self, context: GenerationContext, column: Column) -> Tuple[time, time]:
        bounded = column.min_value is not None or column.max_value is not None
        if self.mode == 'now' or (self.mode is not None and not bounded):
            return super().window(context, column)
        low = column.min_value if column.min_value is not None else time(0, 0, 0)
        high = column.max_value if column.max_value is not None else time(23, 59, 59)
        return low, high

    def relative_window(self, context: GenerationContext) -> Tuple[time, time]:
        anchor = self.anchor_value(context)
        if self.mode == 'past':
            return time(0, 0, 0), anchor
        return anchor, time(23, 59, 59)

    def anchor_value(self, context: GenerationContext) -> time:
        return context.anchor.time()

    def to_units(self, value: time) -> int:
        return value.hour * 3600 + value.minute * 60 + value.second

    def from_units(self, units: int) -> time:
        hours, remainder = divmod(units, 3600)
        minutes, seconds = divmod(remainder, 60)
        return time(hours, minutes, seconds)
