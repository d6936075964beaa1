"""
Row Synthesizer

Turns a schema into rows. Planning comes first and covers everything that can
fail before data exists: the dependency graph and its cycle check, the
generation order, the generator of every column and the row counts. Rows are
then produced table by table in that order, so every foreign key can sample
from keys that were already emitted.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .config import Config
from .context import GenerationContext
from .errors import EmptyReferenceSet, MissingSelfReference, SchemaError, UniquenessExhausted
from .generators import GeneratorRegistry, UniqueValueSource, ValueGenerator
from .schema.graph import DependencyGraph
from .schema.model import ForeignKey, Schema, Table

logger = logging.getLogger(__name__)

GeneratedRow = Dict[str, Any]


@dataclass
class TablePlan:
    """How one table will be generated"""
    table: Table
    row_count: int
    generators: Dict[str, ValueGenerator] = field(default_factory=dict)
    unique_sources: Dict[str, UniqueValueSource] = field(default_factory=dict)
    exclusive_references: List[ForeignKey] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def key_from_references(self) -> bool:
        """Whether part of the primary key is filled by foreign keys"""
        return bool(set(self.table.primary_key) & self.table.foreign_key_columns)


@dataclass
class GenerationPlan:
    """Tables in generation order, each with its resolved generators"""
    tables: List[TablePlan] = field(default_factory=list)

    @property
    def order(self) -> List[str]:
        return [plan.name for plan in self.tables]

    def get(self, name: str) -> Optional[TablePlan]:
        for plan in self.tables:
            if plan.name == name:
                return plan
        return None


class RowSynthesizer:
    """
    Synthesizes referentially consistent rows for a schema

    Features:
    - Topological table order with stable tie-breaking
    - Foreign keys sampled from already emitted keys
    - Uniqueness retries for unique columns and primary keys
    - Row-by-row self references
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize row synthesizer

        Args:
            config: Configuration object (defaults when None)
        """
        self.config = config or Config()
        self.registry = GeneratorRegistry(self.config)

    def plan(self, schema: Schema, row_counts: Optional[Dict[str, int]] = None) -> GenerationPlan:
        """
        Plan generation without producing rows

        Args:
            schema: Parsed schema
            row_counts: Per-table row count overrides

        Returns:
            Generation plan

        Raises:
            CyclicForeignKeys: If tables reference each other in a cycle
            SchemaError: If a generator or row count override is invalid
            EmptyReferenceSet: If a table with rows references a table without
        """
        row_counts = dict(row_counts or {})
        for name, count in row_counts.items():
            if schema.get_table(name) is None:
                raise SchemaError(f"row_counts[{name}]", "no such table")
            if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                raise SchemaError(f"row_counts[{name}]", f"row count must be a non-negative integer, got {count!r}")

        order = DependencyGraph(schema).generation_order()

        plan = GenerationPlan()
        for name in order:
            table = schema.get_table(name)
            table_plan = TablePlan(table=table, row_count=row_counts.get(name, table.row_count))

            max_attempts = self.config.generation.max_unique_attempts
            for column in table.columns:
                generator = self.registry.resolve(table, column)
                table_plan.generators[column.name] = generator
                if column.unique and column.name not in table.foreign_key_columns:
                    table_plan.unique_sources[column.name] = UniqueValueSource(
                        generator, table.name, column, max_attempts
                    )

            table_plan.exclusive_references = [
                fk for fk in table.foreign_keys if self._is_exclusive(table, fk)
            ]
            plan.tables.append(table_plan)

        for table_plan in plan.tables:
            if table_plan.row_count == 0:
                continue
            for fk in table_plan.table.foreign_keys:
                if fk.is_self_reference(table_plan.name):
                    continue
                if plan.get(fk.referenced_table).row_count == 0:
                    raise EmptyReferenceSet(table_plan.name, fk.referenced_table)

        logger.info(f"Planned {len(plan.tables)} tables: {' -> '.join(plan.order)}")
        return plan

    def synthesize(
        self,
        schema: Schema,
        context: GenerationContext,
        row_counts: Optional[Dict[str, int]] = None,
    ) -> Dict[str, List[GeneratedRow]]:
        """
        Generate rows for every table

        Args:
            schema: Parsed schema
            context: Fresh generation context for this run
            row_counts: Per-table row count overrides

        Returns:
            Mapping of table name to rows, in generation order
        """
        plan = self.plan(schema, row_counts)

        for table_name, key_columns in schema.referenced_key_sets().items():
            for columns in key_columns:
                context.register_pool(table_name, columns)

        result: Dict[str, List[GeneratedRow]] = {}
        for table_plan in plan.tables:
            result[table_plan.name] = self._generate_table(table_plan, context)

        total = sum(len(rows) for rows in result.values())
        logger.info(f"Generated {total} rows across {len(result)} tables (seed={context.seed})")
        return result

    def _generate_table(self, plan: TablePlan, context: GenerationContext) -> List[GeneratedRow]:
        table = plan.table
        rows = []

        for _ in range(plan.row_count):
            values: Dict[str, Any] = {}
            if not plan.key_from_references:
                self._fill_foreign_keys(plan, context, values)
            self._fill_primary_key(plan, context, values)
            self._fill_columns(plan, context, values)

            row = {name: values[name] for name in table.column_names}
            context.record_row(table.name, row)
            rows.append(row)

        logger.debug(f"Generated {len(rows)} rows for table {table.name}")
        return rows

    def _fill_primary_key(self, plan: TablePlan, context: GenerationContext, values: Dict[str, Any]):
        table = plan.table
        if not table.primary_key:
            return

        fk_columns = table.foreign_key_columns
        attempts = self.config.generation.max_unique_attempts
        for _ in range(attempts):
            if plan.key_from_references:
                self._fill_foreign_keys(plan, context, values)
            for name in table.primary_key:
                if name in fk_columns:
                    continue
                if name in plan.unique_sources and table.has_composite_key:
                    values[name] = plan.unique_sources[name].draw(context)
                else:
                    values[name] = plan.generators[name].generate(context, table.get_column(name))

            if context.claim_key(table.name, tuple(values[name] for name in table.primary_key)):
                return

        if set(table.primary_key) <= fk_columns and self._scan_references(plan, context, values):
            return

        raise UniquenessExhausted(table.name, ", ".join(table.primary_key), attempts)

    def _scan_references(self, plan: TablePlan, context: GenerationContext, values: Dict[str, Any]) -> bool:
        """
        Walk every combination of referenced keys for a key made of foreign keys

        Random draws stop finding free combinations as a junction table fills
        up. The walk is in pool order, so the result stays deterministic.

        Returns:
            True if an unused key was found and claimed
        """
        table = plan.table
        fixed = [fk for fk in plan.exclusive_references if all(name in values for name in fk.columns)]
        free = [
            fk for fk in table.foreign_keys
            if fk not in fixed and set(fk.columns) & set(table.primary_key)
        ]
        pools = [context.key_pool(fk.referenced_table, fk.referenced_columns) for fk in free]

        for keys in itertools.product(*pools):
            candidate = dict(values)
            for fk, key in zip(free, keys):
                candidate.update(zip(fk.columns, key))
            if context.claim_key(table.name, tuple(candidate[name] for name in table.primary_key)):
                values.update(candidate)
                logger.debug(f"{table.name}: primary key found by walking referenced keys")
                return True
        return False

    def _fill_columns(self, plan: TablePlan, context: GenerationContext, values: Dict[str, Any]):
        table = plan.table
        null_probability = self.config.generation.null_probability

        for column in table.columns:
            if column.name in values:
                continue
            if column.nullable and context.chance(null_probability):
                values[column.name] = None
            elif column.name in plan.unique_sources:
                values[column.name] = plan.unique_sources[column.name].draw(context)
            else:
                values[column.name] = plan.generators[column.name].generate(context, column)

    def _fill_foreign_keys(self, plan: TablePlan, context: GenerationContext, values: Dict[str, Any]):
        for fk in plan.table.foreign_keys:
            # a one-to-one reference is drawn once per row, even across key retries
            if fk in plan.exclusive_references and all(name in values for name in fk.columns):
                continue
            values.update(zip(fk.columns, self._sample_reference(plan, fk, context)))

    def _sample_reference(self, plan: TablePlan, fk: ForeignKey, context: GenerationContext) -> Tuple[Any, ...]:
        """
        Pick a referenced key tuple for one foreign key

        One-to-one references draw without replacement from the referenced
        keys not used yet, so they only fail once every key is taken.
        """
        table = plan.table
        pool = context.key_pool(fk.referenced_table, fk.referenced_columns)
        nullable = all(table.get_column(name).nullable for name in fk.columns)

        if not pool:
            if not fk.is_self_reference(table.name):
                raise EmptyReferenceSet(table.name, fk.referenced_table)
            if nullable:
                return tuple(None for _ in fk.columns)
            raise MissingSelfReference(table.name, fk.columns)

        if fk not in plan.exclusive_references:
            return context.choice(pool)

        unique_columns = [name for name in fk.columns if table.is_unique_column(table.get_column(name))]
        available = context.unused_references(table.name, fk.columns, fk.referenced_table, fk.referenced_columns)
        examined = 0
        while available:
            key = context.take(available)
            examined += 1
            candidate = dict(zip(fk.columns, key))
            if any(context.is_taken(table.name, name, candidate[name]) for name in unique_columns):
                continue
            for name in unique_columns:
                context.claim_unique(table.name, name, candidate[name])
            return key

        if fk.is_self_reference(table.name) and nullable:
            return tuple(None for _ in fk.columns)
        raise UniquenessExhausted(table.name, ", ".join(unique_columns or fk.columns), examined)

    @staticmethod
    def _is_exclusive(table: Table, fk: ForeignKey) -> bool:
        """Whether each referenced key tuple may back at most one row"""
        if table.is_unique_key(fk.columns):
            return True
        return any(table.is_unique_column(table.get_column(name)) for name in fk.columns)
