"""
Data Generation Orchestrator Module

Main orchestration engine that runs one generation request end to end:
schema parsing, row synthesis, integrity validation, SQL rendering and
archive packaging. A request either returns a complete archive or raises.
"""

import time
import logging
import threading
from collections import OrderedDict
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .archive import ArchivePackager, entry_names
from .config import Config, ConfigValidator, get_default_config
from .context import GenerationContext
from .schema.model import Schema
from .schema.parser import SchemaParser
from .sql.emitter import SQLEmitter
from .synthesizer import GenerationPlan, GeneratedRow, RowSynthesizer
from .utils import stable_hash_bytes
from .validation.integrity import IntegrityReport, IntegrityValidator

logger = logging.getLogger(__name__)

Document = Union[str, bytes]


@dataclass
class GenerationResult:
    """Result of data generation"""
    archive: bytes
    filename: str
    schema: Schema
    tables: Dict[str, List[GeneratedRow]]
    sql: Dict[str, str]
    seed: int
    generation_time: float
    manifest: Optional[Dict[str, Any]] = None
    validation: Optional[IntegrityReport] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def order(self) -> List[str]:
        return list(self.tables)

    @property
    def row_counts(self) -> Dict[str, int]:
        return {name: len(rows) for name, rows in self.tables.items()}

    def to_dataframes(self) -> Dict[str, pd.DataFrame]:
        """Generated rows as one DataFrame per table, in generation order"""
        return {
            name: pd.DataFrame(rows, columns=self.schema.get_table(name).column_names)
            for name, rows in self.tables.items()
        }


class SchemaCache:
    """
    Size-bounded LRU of parsed schemas

    Keyed by the SHA-256 of the document bytes and the parser's default row
    count. Safe to share between threads.
    """

    def __init__(self, max_entries: int = 32):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, Schema]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def key_for(document: bytes, default_rows: int) -> str:
        return f"{stable_hash_bytes(document)}:{default_rows}"

    def get(self, key: str) -> Optional[Schema]:
        with self._lock:
            schema = self._entries.get(key)
            if schema is not None:
                self._entries.move_to_end(key)
            return schema

    def put(self, key: str, schema: Schema):
        with self._lock:
            self._entries[key] = schema
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def parse_anchor(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Anchor from an ISO date/datetime string (or date object)"""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValueError(f"Invalid temporal anchor '{value}': expected an ISO date or datetime") from e


class DataOrchestrator:
    """
    Main orchestrator for SQL test data generation

    Coordinates parsing, synthesis, validation, rendering and packaging
    """

    def __init__(self, config: Optional[Config] = None, cache_size: int = 32):
        """
        Initialize the orchestrator

        Args:
            config: Configuration object (uses default if None)
            cache_size: Number of parsed schemas to keep
        """
        self.config = config or get_default_config()
        self.cache = SchemaCache(cache_size)
        self.validator = IntegrityValidator()

        logger.info("DataOrchestrator initialized")

    def parse(self, document: Document) -> Schema:
        """
        Parse a schema document, reusing an earlier parse of identical bytes

        Args:
            document: XML or YAML/JSON schema document

        Returns:
            Parsed schema
        """
        raw = document.encode("utf-8") if isinstance(document, str) else bytes(document)
        default_rows = self.config.generation.default_rows
        key = SchemaCache.key_for(raw, default_rows)

        schema = self.cache.get(key)
        if schema is None:
            schema = SchemaParser(default_rows=default_rows).parse(raw)
            self.cache.put(key, schema)
        else:
            logger.debug("Schema served from cache")
        return schema

    def plan(self, document: Document, row_counts: Optional[Dict[str, int]] = None) -> GenerationPlan:
        """
        Parse and plan without generating rows

        Args:
            document: Schema document
            row_counts: Per-table row count overrides

        Returns:
            Generation plan (order, row counts and generators)
        """
        schema = self.parse(document)
        merged = {**self.config.row_counts, **(row_counts or {})}
        return RowSynthesizer(self.config).plan(schema, merged)

    def generate(
        self,
        document: Document,
        row_counts: Optional[Dict[str, int]] = None,
        seed: Optional[int] = None,
        null_probability: Optional[float] = None,
        dialect: Optional[str] = None,
        rows_per_statement: Optional[int] = None,
        anchor: Union[str, date, datetime, None] = None,
    ) -> GenerationResult:
        """
        Generate SQL test data for a schema document

        Args:
            document: XML or YAML/JSON schema document
            row_counts: Per-table row count overrides
            seed: Random seed (None = configured seed, else OS entropy)
            null_probability: Chance of NULL in nullable columns
            dialect: SQL dialect (ansi, postgres, mysql, sqlite)
            rows_per_statement: Rows per INSERT statement (0 = one statement)
            anchor: End of the default date window (None = today)

        Returns:
            GenerationResult with the archive and the generated rows

        Raises:
            SQLSeedError: If any stage fails (nothing partial is returned)
            ValueError: If an override makes the configuration invalid
        """
        start_time = time.time()

        config = self._effective_config(seed, null_probability, dialect, rows_per_statement, anchor)
        schema = self.parse(document)

        counts = {**config.row_counts, **(row_counts or {})}
        context = GenerationContext(
            seed=config.generation.seed,
            anchor=parse_anchor(config.temporal.anchor),
            locale=config.text.locale,
        )

        synthesizer = RowSynthesizer(config)
        tables = synthesizer.synthesize(schema, context, counts)

        validation = None
        if config.generation.validate_output:
            expected = {name: counts.get(name, schema.get_table(name).row_count) for name in tables}
            validation = self.validator.validate_or_raise(schema, tables, expected)

        emitter = SQLEmitter.from_config(config.sql)
        sql = emitter.render_all(schema, tables)
        files = entry_names(sql)
        artifacts = {files[name]: text for name, text in sql.items()}

        manifest = None
        if config.archive.include_manifest:
            manifest = self._build_manifest(tables, files, context, config)

        archive = ArchivePackager(config.archive.compression).package(artifacts, manifest)

        generation_time = time.time() - start_time
        result = GenerationResult(
            archive=archive,
            filename=config.archive.filename,
            schema=schema,
            tables=tables,
            sql=sql,
            seed=context.seed,
            generation_time=generation_time,
            manifest=manifest,
            validation=validation,
            metadata={
                'dialect': config.sql.dialect,
                'anchor': context.anchor.isoformat(),
                'num_tables': len(tables),
                'num_rows': sum(len(rows) for rows in tables.values()),
                'archive_bytes': len(archive),
            }
        )

        logger.info(f"Generation completed in {generation_time:.2f}s")
        return result

    def _effective_config(self, seed, null_probability, dialect, rows_per_statement, anchor) -> Config:
        """Copy of the configuration with call overrides applied"""
        config = deepcopy(self.config)

        if seed is not None:
            config.generation.seed = seed
        if null_probability is not None:
            config.generation.null_probability = null_probability
        if dialect is not None:
            config.sql.dialect = dialect.strip().lower()
        if rows_per_statement is not None:
            config.sql.rows_per_statement = rows_per_statement
        if anchor is not None:
            config.temporal.anchor = anchor

        is_valid, errors = ConfigValidator.validate(config)
        if not is_valid:
            raise ValueError("Invalid configuration: " + "; ".join(errors))
        return config

    def _build_manifest(
        self,
        tables: Dict[str, List[GeneratedRow]],
        files: Dict[str, str],
        context: GenerationContext,
        config: Config,
    ) -> Dict[str, Any]:
        return {
            "generator": "sqlseed",
            "seed": context.seed,
            "anchor": context.anchor.isoformat(),
            "dialect": config.sql.dialect,
            "tables": [
                {"name": name, "rows": len(rows), "file": files[name]}
                for name, rows in tables.items()
            ],
        }
