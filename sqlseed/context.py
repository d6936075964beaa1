"""
Generation Context

Per-run state for one generation request: the seeded random source that all
generators draw from, the temporal anchor, and the bookkeeping of values
already emitted (for uniqueness) and of key tuples available to foreign keys.

A context is created for each run and discarded afterwards; nothing in it is
shared between runs.
"""

import secrets
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Hashable, List, Optional, Sequence, Set, Tuple

from numpy.random import Generator, PCG64
from faker import Faker

logger = logging.getLogger(__name__)

KeyTuple = Tuple[Any, ...]


def default_anchor() -> datetime:
    """Today at midnight (UTC), as a naive datetime"""
    now = datetime.now(timezone.utc)
    return datetime(now.year, now.month, now.day)


class GenerationContext:
    """
    Context for deterministic synthetic data generation

    All randomness flows through this context: the numpy generator is seeded
    with the run seed and the Faker instance is seeded from that generator, so
    a fixed seed reproduces the same dataset.

    Attributes:
        seed: Seed of the run (drawn from OS entropy when not given)
        anchor: Instant that closes the default temporal window
        rng: Numpy random generator
        faker: Faker instance for realistic text values
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        anchor: Optional[datetime] = None,
        locale: str = "en_US",
    ):
        """
        Initialize generation context

        Args:
            seed: Base seed for reproducible generation (None = random)
            anchor: End of the default date window (None = today)
            locale: Faker locale for realistic text
        """
        self.seed = secrets.randbits(32) if seed is None else int(seed)
        self.anchor = (anchor or default_anchor()).replace(microsecond=0, tzinfo=None)

        self.rng: Generator = Generator(PCG64(self.seed))
        self.faker = Faker(locale)
        self.faker.seed_instance(int(self.rng.integers(0, 2**32)))

        # (table, column) -> values already emitted for unique columns
        self._unique_values: Dict[Tuple[str, str], Set[Hashable]] = {}
        # table -> primary key tuples already emitted
        self._emitted_keys: Dict[str, Set[KeyTuple]] = {}
        # (table, columns) -> ordered key tuples that foreign keys may reference
        self._key_pools: Dict[Tuple[str, Tuple[str, ...]], List[KeyTuple]] = {}
        # (table, fk columns) -> (key tuples not drawn yet, pool entries seen)
        self._unused_references: Dict[Tuple[str, Tuple[str, ...]], Tuple[List[KeyTuple], int]] = {}
        # (table, column) -> next auto-increment value
        self._sequences: Dict[Tuple[str, str], int] = {}

        logger.debug(f"GenerationContext created (seed={self.seed}, anchor={self.anchor.isoformat()})")

    # ------------------------------------------------------------------
    # Random draws
    # ------------------------------------------------------------------

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high]"""
        return int(self.rng.integers(low, high, endpoint=True))

    def random(self) -> float:
        """Uniform float in [0, 1)"""
        return float(self.rng.random())

    def chance(self, probability: float) -> bool:
        """True with the given probability"""
        if probability <= 0:
            return False
        return self.random() < probability

    def choice(self, options: Sequence[Any]) -> Any:
        """Uniform pick from a non-empty sequence"""
        return options[int(self.rng.integers(0, len(options)))]

    def take(self, options: List[Any]) -> Any:
        """Remove and return a uniform pick from a non-empty list"""
        index = int(self.rng.integers(0, len(options)))
        options[index], options[-1] = options[-1], options[index]
        return options.pop()

    # ------------------------------------------------------------------
    # Uniqueness bookkeeping
    # ------------------------------------------------------------------

    def claim_unique(self, table: str, column: str, value: Hashable) -> bool:
        """
        Record a value for a unique column

        Returns:
            False if the value was already emitted for this column
        """
        seen = self._unique_values.setdefault((table, column), set())
        if value in seen:
            return False
        seen.add(value)
        return True

    def is_taken(self, table: str, column: str, value: Hashable) -> bool:
        """Whether a unique column already emitted the value"""
        return value in self._unique_values.get((table, column), ())

    def claim_key(self, table: str, key: KeyTuple) -> bool:
        """
        Record a primary key tuple

        Returns:
            False if the tuple was already emitted for this table
        """
        emitted = self._emitted_keys.setdefault(table, set())
        if key in emitted:
            return False
        emitted.add(key)
        return True

    def emitted_keys(self, table: str) -> Set[KeyTuple]:
        return self._emitted_keys.get(table, set())

    def next_sequence(self, table: str, column: str, start: int = 1) -> int:
        """Next auto-increment value for a column"""
        value = self._sequences.get((table, column), start)
        self._sequences[(table, column)] = value + 1
        return value

    # ------------------------------------------------------------------
    # Foreign key pools
    # ------------------------------------------------------------------

    def register_pool(self, table: str, columns: Tuple[str, ...]):
        """Start collecting key tuples of a table for the given column set"""
        self._key_pools.setdefault((table, tuple(columns)), [])

    def record_row(self, table: str, row: Dict[str, Any]):
        """Add a finished row's key tuples to every pool registered for its table"""
        for (pool_table, columns), pool in self._key_pools.items():
            if pool_table != table:
                continue
            key = tuple(row[name] for name in columns)
            if any(value is None for value in key):
                continue
            pool.append(key)

    def key_pool(self, table: str, columns: Tuple[str, ...]) -> List[KeyTuple]:
        """Key tuples emitted so far for a registered column set"""
        return self._key_pools.get((table, tuple(columns)), [])

    def unused_references(
        self,
        table: str,
        columns: Tuple[str, ...],
        referenced_table: str,
        referenced_columns: Tuple[str, ...],
    ) -> List[KeyTuple]:
        """
        Referenced key tuples a foreign key has not drawn yet

        Keys added to the referenced pool since the last call (rows of a
        self-referencing table) become available as they are emitted. Callers
        remove what they draw, so each tuple is handed out at most once.
        """
        state_key = (table, tuple(columns))
        pool = self.key_pool(referenced_table, referenced_columns)
        available, seen = self._unused_references.get(state_key, ([], 0))
        available.extend(pool[seen:])
        self._unused_references[state_key] = (available, len(pool))
        return available
