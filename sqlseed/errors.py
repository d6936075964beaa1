"""
Error Taxonomy

Every stage of the pipeline fails fast with one of these exceptions:
- SchemaError: malformed or invalid schema document
- GenerationError: row synthesis could not satisfy the schema
- RenderError: a generated value could not be written as a SQL literal
- PackagingError: the archive could not be assembled
"""

from typing import Any, Optional, Sequence


class SQLSeedError(Exception):
    """Base class for all engine errors"""


class SchemaError(SQLSeedError):
    """Invalid schema document"""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"{location}: {reason}")


class GenerationError(SQLSeedError):
    """Base class for row synthesis failures"""


class UniquenessExhausted(GenerationError):
    """No fresh value could be produced for a unique column"""

    def __init__(self, table: str, column: str, attempts: int):
        self.table = table
        self.column = column
        self.attempts = attempts
        super().__init__(
            f"Could not produce a unique value for {table}.{column} after {attempts} attempts; "
            f"the requested row count exceeds the column's value space"
        )


class EmptyReferenceSet(GenerationError):
    """A foreign key points at a table that has no rows"""

    def __init__(self, table: str, referenced_table: str):
        self.table = table
        self.referenced_table = referenced_table
        super().__init__(
            f"Table '{table}' references '{referenced_table}', which has no rows to reference"
        )


class CyclicForeignKeys(GenerationError):
    """The foreign-key graph between tables contains a cycle"""

    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(f"Foreign keys form a cycle: {path}")


class MissingSelfReference(GenerationError):
    """A non-nullable self reference has no earlier row to point at"""

    def __init__(self, table: str, columns: Sequence[str]):
        self.table = table
        self.columns = list(columns)
        super().__init__(
            f"Table '{table}' has a non-nullable self reference ({', '.join(self.columns)}) "
            f"but no earlier row exists for the first row to reference"
        )


class RenderError(SQLSeedError):
    """A value could not be rendered as a SQL literal"""

    def __init__(self, table: str, column: Optional[str], reason: str):
        self.table = table
        self.column = column
        self.reason = reason
        target = f"{table}.{column}" if column else table
        super().__init__(f"Cannot render {target}: {reason}")


class PackagingError(SQLSeedError):
    """The archive could not be written"""

    def __init__(self, entry: Optional[str], reason: str):
        self.entry = entry
        self.reason = reason
        target = f"entry '{entry}'" if entry else "archive"
        super().__init__(f"Failed to package {target}: {reason}")


class ValidationFailed(SQLSeedError):
    """Generated data failed the post-generation integrity checks"""

    def __init__(self, report: Any):
        self.report = report
        failed = ", ".join(str(v) for v in report.violations[:5])
        super().__init__(f"Generated data failed integrity validation: {failed}")
