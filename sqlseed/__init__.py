"""
sqlseed

Generates synthetic, referentially consistent relational test data from a
table-schema document and packages it as SQL INSERT scripts in a ZIP archive.
"""

__version__ = "1.0.0"
__author__ = "sqlseed Team"

from .config import Config, ConfigLoader, ConfigValidator
from .context import GenerationContext
from .errors import (
    SQLSeedError,
    SchemaError,
    GenerationError,
    UniquenessExhausted,
    EmptyReferenceSet,
    CyclicForeignKeys,
    MissingSelfReference,
    RenderError,
    PackagingError,
    ValidationFailed,
)
from .schema import Schema, SchemaParser, parse_schema
from .synthesizer import RowSynthesizer
from .sql import SQLEmitter
from .archive import ArchivePackager, read_archive
from .orchestrator import DataOrchestrator, GenerationResult, SchemaCache

__all__ = [
    "Config",
    "ConfigLoader",
    "ConfigValidator",
    "GenerationContext",
    "Schema",
    "SchemaParser",
    "parse_schema",
    "RowSynthesizer",
    "SQLEmitter",
    "ArchivePackager",
    "read_archive",
    "DataOrchestrator",
    "GenerationResult",
    "SchemaCache",

    # Errors
    "SQLSeedError",
    "SchemaError",
    "GenerationError",
    "UniquenessExhausted",
    "EmptyReferenceSet",
    "CyclicForeignKeys",
    "MissingSelfReference",
    "RenderError",
    "PackagingError",
    "ValidationFailed",
]
