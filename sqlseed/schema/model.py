"""
Schema Model

In-memory representation of the tables, columns, keys and relationships
that the generator synthesizes rows for.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple


class ColumnType(Enum):
    """Closed set of column kinds the engine knows how to generate"""
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    ENUM = "enum"


@dataclass
class Column:
    """Definition of a single column"""
    name: str
    type: ColumnType
    nullable: bool = False
    unique: bool = False
    primary_key: bool = False
    generator: Optional[str] = None
    position: int = 0

    # Text
    max_length: Optional[int] = None  # None = text.max_length

    # Numeric / temporal bounds, parsed to the column's Python type
    min_value: Optional[Any] = None
    max_value: Optional[Any] = None
    scale: Optional[int] = None  # None = numeric.decimal_scale

    # Enumeration literals
    values: List[str] = field(default_factory=list)


@dataclass
class ForeignKey:
    """Relationship from columns of the owning table to a key of another table"""
    columns: Tuple[str, ...]
    referenced_table: str
    referenced_columns: Tuple[str, ...]

    def is_self_reference(self, table_name: str) -> bool:
        return self.referenced_table == table_name

    def __str__(self) -> str:
        return (
            f"({', '.join(self.columns)}) -> "
            f"{self.referenced_table}({', '.join(self.referenced_columns)})"
        )


@dataclass
class Table:
    """Definition of a table and how many rows to synthesize for it"""
    name: str
    columns: List[Column] = field(default_factory=list)
    row_count: int = 10
    primary_key: Tuple[str, ...] = ()
    foreign_keys: List[ForeignKey] = field(default_factory=list)

    def get_column(self, name: str) -> Optional[Column]:
        """Get column definition by name"""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    @property
    def foreign_key_columns(self) -> Set[str]:
        """Names of every column that takes part in a foreign key"""
        return {name for fk in self.foreign_keys for name in fk.columns}

    @property
    def has_composite_key(self) -> bool:
        return len(self.primary_key) > 1

    def is_unique_column(self, column: Column) -> bool:
        """Unique columns and single-column primary keys never repeat"""
        return column.unique or (column.primary_key and not self.has_composite_key)

    def is_unique_key(self, columns: Tuple[str, ...]) -> bool:
        """Whether the given column set is guaranteed unique in this table"""
        if not columns:
            return False
        if self.primary_key and set(columns) == set(self.primary_key):
            return True
        if len(columns) == 1:
            column = self.get_column(columns[0])
            return column is not None and self.is_unique_column(column)
        return False


@dataclass
class Schema:
    """Ordered collection of table definitions"""
    tables: List[Table] = field(default_factory=list)

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    def get_table(self, name: str) -> Optional[Table]:
        """Get table definition by name"""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @property
    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]

    def referenced_key_sets(self) -> Dict[str, List[Tuple[str, ...]]]:
        """
        Column sets of each table that some foreign key points at

        Returns:
            Mapping of table name to the distinct referenced column tuples
        """
        key_sets: Dict[str, List[Tuple[str, ...]]] = {}
        for table in self.tables:
            for fk in table.foreign_keys:
                targets = key_sets.setdefault(fk.referenced_table, [])
                if fk.referenced_columns not in targets:
                    targets.append(fk.referenced_columns)
        return key_sets
