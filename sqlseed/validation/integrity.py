"""
Integrity validation for generated rows

Re-checks generated data against the schema it was generated for:
- Row counts
- NOT NULL columns
- Primary key and unique column uniqueness
- Enumeration domains
- Referential integrity of every foreign key
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from ..errors import ValidationFailed
from ..schema.model import ColumnType, Schema, Table

logger = logging.getLogger(__name__)


# =========================
# REPORT STRUCTURES
# =========================

@dataclass
class IntegrityCheck:
    name: str
    table: str
    passed: bool
    violations: int = 0
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        if self.passed:
            return f"{self.table}: {self.name} ok"
        return f"{self.table}: {self.name} failed ({self.violations} violation(s))"


@dataclass
class IntegrityReport:
    checks: List[IntegrityCheck] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def violations(self) -> List[IntegrityCheck]:
        return [check for check in self.checks if not check.passed]

    def add_check(self, check: IntegrityCheck):
        self.checks.append(check)

    def to_dict(self):
        return {
            "passed": self.passed,
            "checks": [check.__dict__ for check in self.checks],
            "summary": self.summary,
        }


# =========================
# VALIDATOR
# =========================

def rows_to_frame(table: Table, rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """Rows as an object-dtype frame, so None and Python scalars are kept as-is"""
    return pd.DataFrame(rows, columns=table.column_names, dtype=object)


class IntegrityValidator:
    """Checks generated rows against schema constraints"""

    SAMPLE_SIZE = 5

    def validate(
        self,
        schema: Schema,
        tables: Dict[str, List[Dict[str, Any]]],
        expected_counts: Optional[Dict[str, int]] = None,
    ) -> IntegrityReport:
        """
        Run all integrity checks

        Args:
            schema: Schema the rows were generated for
            tables: Mapping of table name to generated rows
            expected_counts: Expected row count per table

        Returns:
            IntegrityReport
        """
        frames = {
            name: rows_to_frame(schema.get_table(name), rows)
            for name, rows in tables.items()
        }

        report = IntegrityReport()
        for table in schema:
            frame = frames.get(table.name)
            if frame is None:
                report.add_check(IntegrityCheck("present", table.name, False, 1))
                continue

            if expected_counts and table.name in expected_counts:
                report.add_check(self._check_row_count(table, frame, expected_counts[table.name]))

            report.checks.extend(self._check_not_null(table, frame))
            report.checks.extend(self._check_unique(table, frame))
            report.checks.extend(self._check_domains(table, frame))
            report.checks.extend(self._check_references(table, frame, frames))

        report.summary = {
            "tables": len(frames),
            "rows": int(sum(len(frame) for frame in frames.values())),
            "checks": len(report.checks),
            "failed": len(report.violations),
        }

        if report.passed:
            logger.info(f"Integrity validation passed ({report.summary['checks']} checks)")
        else:
            logger.warning(f"Integrity validation failed: {report.summary['failed']} check(s)")
        return report

    def validate_or_raise(self, schema: Schema, tables, expected_counts=None) -> IntegrityReport:
        report = self.validate(schema, tables, expected_counts)
        if not report.passed:
            raise ValidationFailed(report)
        return report

    def _check_row_count(self, table: Table, frame: pd.DataFrame, expected: int) -> IntegrityCheck:
        actual = len(frame)
        return IntegrityCheck(
            "row_count", table.name, actual == expected, abs(actual - expected),
            {"expected": expected, "actual": actual}
        )

    def _check_not_null(self, table: Table, frame: pd.DataFrame) -> List[IntegrityCheck]:
        checks = []
        for column in table.columns:
            if column.nullable:
                continue
            nulls = int(frame[column.name].isna().sum())
            checks.append(IntegrityCheck(f"not_null[{column.name}]", table.name, nulls == 0, nulls))
        return checks

    def _check_unique(self, table: Table, frame: pd.DataFrame) -> List[IntegrityCheck]:
        checks = []
        if table.primary_key:
            duplicated = int(frame.duplicated(subset=list(table.primary_key)).sum())
            checks.append(IntegrityCheck(
                f"primary_key[{', '.join(table.primary_key)}]", table.name, duplicated == 0, duplicated
            ))

        for column in table.columns:
            if not column.unique or (column.primary_key and not table.has_composite_key):
                continue
            values = frame[column.name].dropna()
            duplicated = int(values.duplicated().sum())
            checks.append(IntegrityCheck(f"unique[{column.name}]", table.name, duplicated == 0, duplicated))
        return checks

    def _check_domains(self, table: Table, frame: pd.DataFrame) -> List[IntegrityCheck]:
        checks = []
        for column in table.columns:
            if column.type != ColumnType.ENUM:
                continue
            values = frame[column.name].dropna()
            outside = values[~values.isin(column.values)]
            checks.append(IntegrityCheck(
                f"domain[{column.name}]", table.name, outside.empty, len(outside),
                {"sample": outside.head(self.SAMPLE_SIZE).tolist()}
            ))
        return checks

    def _check_references(
        self, table: Table, frame: pd.DataFrame, frames: Dict[str, pd.DataFrame]
    ) -> List[IntegrityCheck]:
        checks = []
        for fk in table.foreign_keys:
            parent = frames.get(fk.referenced_table)
            if parent is None:
                checks.append(IntegrityCheck(f"reference[{fk}]", table.name, False, len(frame)))
                continue

            parent_keys = set(parent[list(fk.referenced_columns)].itertuples(index=False, name=None))
            child_keys = frame[list(fk.columns)].dropna(how="any")
            orphans = [
                key for key in child_keys.itertuples(index=False, name=None)
                if key not in parent_keys
            ]
            checks.append(IntegrityCheck(
                f"reference[{fk}]", table.name, not orphans, len(orphans),
                {"sample": orphans[:self.SAMPLE_SIZE]}
            ))
        return checks
