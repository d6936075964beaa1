"""
Validation Module

Post-generation integrity checks:
- Row counts and NOT NULL constraints
- Primary key and unique constraints
- Enumeration domains
- Referential integrity
"""

from .integrity import (
    IntegrityValidator,
    IntegrityReport,
    IntegrityCheck,
    rows_to_frame,
)

__all__ = [
    "IntegrityValidator",
    "IntegrityReport",
    "IntegrityCheck",
    "rows_to_frame",
]
