"""
Schema Parser

Converts a schema document into a Schema model. Two syntaxes are accepted,
both describing the same nested structure:
- XML (<schema><table><column/>...</table></schema>)
- YAML or JSON mappings ({"tables": [{"name": ..., "columns": [...]}]})

The document is read in one pass into plain mappings; a second pass builds the
model and resolves foreign keys, which may point at tables declared later.
Any problem raises SchemaError and no partial model is returned.
"""

import re
import logging
import xml.etree.ElementTree as ET
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from ..errors import SchemaError
from .model import Column, ColumnType, ForeignKey, Schema, Table

logger = logging.getLogger(__name__)


TYPE_ALIASES: Dict[str, ColumnType] = {
    'text': ColumnType.TEXT,
    'string': ColumnType.TEXT,
    'varchar': ColumnType.TEXT,
    'char': ColumnType.TEXT,
    'int': ColumnType.INTEGER,
    'integer': ColumnType.INTEGER,
    'bigint': ColumnType.INTEGER,
    'smallint': ColumnType.INTEGER,
    'decimal': ColumnType.DECIMAL,
    'dec': ColumnType.DECIMAL,
    'numeric': ColumnType.DECIMAL,
    'float': ColumnType.DECIMAL,
    'double': ColumnType.DECIMAL,
    'real': ColumnType.DECIMAL,
    'bool': ColumnType.BOOLEAN,
    'boolean': ColumnType.BOOLEAN,
    'date': ColumnType.DATE,
    'time': ColumnType.TIME,
    'datetime': ColumnType.DATETIME,
    'timestamp': ColumnType.DATETIME,
    'enum': ColumnType.ENUM,
}

TRUE_STRINGS = {'true', 'yes', '1', 'on'}
FALSE_STRINGS = {'false', 'no', '0', 'off'}

TYPE_PATTERN = re.compile(r'^\s*([a-z_]+)\s*(?:\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\))?\s*$', re.IGNORECASE)
CHECK_IN_PATTERN = re.compile(r'^\s*in\s*\((.+)\)\s*$', re.IGNORECASE | re.DOTALL)
QUOTED_LITERAL_PATTERN = re.compile(r"\s*'((?:[^']|'')*)'\s*(?:,|$)")

TABLE_KEYS = {'name', 'rows', 'row_count', 'columns', 'primary_key', 'foreign_keys'}
COLUMN_KEYS = {
    'name', 'type', 'nullable', 'unique', 'primary_key', 'generator', 'min', 'max',
    'length', 'max_length', 'scale', 'values', 'check', 'references',
}
FOREIGN_KEY_KEYS = {'columns', 'column', 'references', 'referenced_columns', 'referenced_column'}


def _normalize_key(key: Any) -> str:
    return str(key).strip().lower().replace('-', '_')


def _split_names(value: Any, location: str) -> Tuple[str, ...]:
    """Accept 'a, b' or ['a', 'b'] and return a tuple of names"""
    if isinstance(value, str):
        names = [part.strip() for part in value.split(',')]
    elif isinstance(value, (list, tuple)):
        names = [str(part).strip() for part in value]
    else:
        raise SchemaError(location, f"expected a list of column names, got {value!r}")

    if not names or any(not name for name in names):
        raise SchemaError(location, "empty column name in list")
    return tuple(names)


def parse_check_constraint(body: str) -> Optional[List[str]]:
    """
    Extract literals from a check constraint of the form "in ('a', 'b')"

    Args:
        body: Check constraint body

    Returns:
        List of literals, or None if the body has a different shape
    """
    match = CHECK_IN_PATTERN.match(body)
    if not match:
        return None

    inner = match.group(1).strip()
    literals = []
    position = 0
    while position < len(inner):
        literal_match = QUOTED_LITERAL_PATTERN.match(inner, position)
        if not literal_match:
            return None
        literals.append(literal_match.group(1).replace("''", "'"))
        position = literal_match.end()

    return literals or None


class SchemaParser:
    """
    Parses schema documents into Schema models

    Accepts XML or YAML/JSON text (str or UTF-8 bytes).
    """

    def __init__(self, default_rows: int = 10):
        """
        Initialize the parser

        Args:
            default_rows: Row count used for tables that do not declare one
        """
        self.default_rows = default_rows

    def parse(self, document: Union[str, bytes]) -> Schema:
        """
        Parse a schema document

        Args:
            document: Raw document text or bytes

        Returns:
            Validated Schema model
        """
        text = self._decode(document)

        if text.startswith('<'):
            raw = self._read_xml(text)
        else:
            raw = self._read_mapping(text)

        schema = self._build_schema(raw)
        logger.info(f"Parsed schema with {len(schema)} tables")
        return schema

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _decode(self, document: Union[str, bytes]) -> str:
        if isinstance(document, (bytes, bytearray)):
            try:
                document = bytes(document).decode('utf-8-sig')
            except UnicodeDecodeError as e:
                raise SchemaError("document", f"not valid UTF-8 text ({e.reason})") from e
        elif not isinstance(document, str):
            raise SchemaError("document", f"expected text or bytes, got {type(document).__name__}")

        text = document.lstrip('\ufeff').strip()
        if not text:
            raise SchemaError("document", "document is empty")
        return text

    def _read_xml(self, text: str) -> Dict[str, Any]:
        """Read an XML document into the shared mapping structure"""
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise SchemaError("document", f"malformed XML: {e}") from e

        if root.tag != 'schema':
            raise SchemaError(root.tag, "root element must be <schema>")

        tables = []
        for index, element in enumerate(root):
            if element.tag != 'table':
                raise SchemaError(f"schema/{element.tag}", "unexpected element, expected <table>")
            tables.append(self._read_xml_table(element, index))

        return {'tables': tables}

    def _read_xml_table(self, element: ET.Element, index: int) -> Dict[str, Any]:
        table = {_normalize_key(k): v for k, v in element.attrib.items()}
        location = f"schema/table[{table.get('name', index)}]"

        columns = []
        foreign_keys = []
        for child in element:
            if child.tag == 'column':
                column = {_normalize_key(k): v for k, v in child.attrib.items()}
                values = []
                for value in child:
                    if value.tag != 'value':
                        raise SchemaError(
                            f"{location}/column[{column.get('name', '?')}]/{value.tag}",
                            "unexpected element, expected <value>"
                        )
                    values.append(value.text or '')
                if values:
                    column['values'] = values
                columns.append(column)
            elif child.tag == 'foreign-key':
                foreign_keys.append({_normalize_key(k): v for k, v in child.attrib.items()})
            elif child.tag == 'primary-key':
                if 'columns' not in child.attrib:
                    raise SchemaError(f"{location}/primary-key", "missing 'columns' attribute")
                table['primary_key'] = child.attrib['columns']
            else:
                raise SchemaError(f"{location}/{child.tag}", "unexpected element")

        table['columns'] = columns
        if foreign_keys:
            table['foreign_keys'] = foreign_keys
        return table

    def _read_mapping(self, text: str) -> Dict[str, Any]:
        """Read a YAML (or JSON) document into the shared mapping structure"""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SchemaError("document", f"malformed YAML/JSON: {e}") from e

        if isinstance(data, list):
            data = {'tables': data}
        if not isinstance(data, dict):
            raise SchemaError("document", "expected a mapping with a 'tables' list")

        data = {_normalize_key(k): v for k, v in data.items()}
        if 'tables' not in data:
            raise SchemaError("schema", "missing 'tables'")
        if not isinstance(data['tables'], list):
            raise SchemaError("schema/tables", "expected a list of tables")

        tables = []
        for index, table in enumerate(data['tables']):
            if not isinstance(table, dict):
                raise SchemaError(f"schema/table[{index}]", "expected a mapping")
            table = {_normalize_key(k): v for k, v in table.items()}
            location = f"schema/table[{table.get('name', index)}]"

            unknown = set(table) - TABLE_KEYS
            if unknown:
                raise SchemaError(location, f"unknown attribute(s): {', '.join(sorted(unknown))}")

            columns = table.get('columns', [])
            if not isinstance(columns, list):
                raise SchemaError(f"{location}/columns", "expected a list of columns")
            normalized_columns = []
            for col_index, column in enumerate(columns):
                if not isinstance(column, dict):
                    raise SchemaError(f"{location}/column[{col_index}]", "expected a mapping")
                normalized_columns.append({_normalize_key(k): v for k, v in column.items()})
            table['columns'] = normalized_columns

            foreign_keys = table.get('foreign_keys', [])
            if not isinstance(foreign_keys, list):
                raise SchemaError(f"{location}/foreign_keys", "expected a list")
            normalized_fks = []
            for fk_index, fk in enumerate(foreign_keys):
                if not isinstance(fk, dict):
                    raise SchemaError(f"{location}/foreign-key[{fk_index}]", "expected a mapping")
                normalized_fks.append({_normalize_key(k): v for k, v in fk.items()})
            table['foreign_keys'] = normalized_fks

            tables.append(table)

        return {'tables': tables}

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def _build_schema(self, raw: Dict[str, Any]) -> Schema:
        schema = Schema()
        pending_fks: List[Tuple[Table, str, Dict[str, Any]]] = []

        for index, raw_table in enumerate(raw['tables']):
            table, fks = self._build_table(raw_table, index)
            if schema.get_table(table.name) is not None:
                raise SchemaError(f"schema/table[{table.name}]", "duplicate table name")
            schema.tables.append(table)
            pending_fks.extend(fks)

        if not schema.tables:
            raise SchemaError("schema", "schema declares no tables")

        # Look-back pass: references may point at tables declared later
        for table, location, raw_fk in pending_fks:
            table.foreign_keys.append(self._build_foreign_key(schema, table, raw_fk, location))

        return schema

    def _build_table(self, raw: Dict[str, Any], index: int) -> Tuple[Table, List[Tuple[Table, str, Dict[str, Any]]]]:
        name = raw.get('name')
        if not isinstance(name, str) or not name.strip():
            raise SchemaError(f"schema/table[{index}]", "missing table name")
        name = name.strip()
        location = f"schema/table[{name}]"

        rows = raw.get('rows', raw.get('row_count'))
        row_count = self.default_rows if rows is None else self._parse_int(rows, f"{location}@rows")
        if row_count < 0:
            raise SchemaError(f"{location}@rows", "row count cannot be negative")

        raw_columns = raw.get('columns') or []
        if not raw_columns:
            raise SchemaError(location, "table must declare at least one column")

        table = Table(name=name, row_count=row_count)
        pending_fks = []
        for position, raw_column in enumerate(raw_columns):
            column = self._build_column(raw_column, location, position)
            if table.get_column(column.name) is not None:
                raise SchemaError(f"{location}/column[{column.name}]", "duplicate column name")
            table.columns.append(column)

            references = raw_column.get('references')
            if references is not None:
                pending_fks.append((table, f"{location}/column[{column.name}]", {
                    'columns': column.name,
                    'references': references,
                }))

        table.primary_key = self._resolve_primary_key(table, raw.get('primary_key'), location)

        for fk_index, raw_fk in enumerate(raw.get('foreign_keys') or []):
            unknown = set(raw_fk) - FOREIGN_KEY_KEYS
            if unknown:
                raise SchemaError(
                    f"{location}/foreign-key[{fk_index}]",
                    f"unknown attribute(s): {', '.join(sorted(unknown))}"
                )
            pending_fks.append((table, f"{location}/foreign-key[{fk_index}]", raw_fk))

        return table, pending_fks

    def _build_column(self, raw: Dict[str, Any], table_location: str, position: int) -> Column:
        name = raw.get('name')
        if not isinstance(name, str) or not name.strip():
            raise SchemaError(f"{table_location}/column[{position}]", "missing column name")
        name = name.strip()
        location = f"{table_location}/column[{name}]"

        unknown = set(raw) - COLUMN_KEYS
        if unknown:
            raise SchemaError(location, f"unknown attribute(s): {', '.join(sorted(unknown))}")

        if raw.get('type') is None:
            raise SchemaError(location, "missing column type")
        column_type, size, scale = self._parse_type(str(raw['type']), location)

        column = Column(
            name=name,
            type=column_type,
            nullable=self._parse_bool(raw.get('nullable', False), f"{location}@nullable"),
            unique=self._parse_bool(raw.get('unique', False), f"{location}@unique"),
            primary_key=self._parse_bool(raw.get('primary_key', False), f"{location}@primary-key"),
            position=position,
        )

        generator = raw.get('generator')
        if generator is not None:
            column.generator = str(generator).strip().lower().replace('_', '-') or None

        if column_type == ColumnType.TEXT:
            length = raw.get('length', raw.get('max_length', size))
            if length is not None:
                column.max_length = self._parse_int(length, f"{location}@length")
                if column.max_length < 1:
                    raise SchemaError(f"{location}@length", "length must be at least 1")
        elif column_type == ColumnType.DECIMAL:
            scale = raw.get('scale', scale)
            column.scale = None if scale is None else self._parse_int(scale, f"{location}@scale")
            if column.scale is not None and column.scale < 0:
                raise SchemaError(f"{location}@scale", "scale cannot be negative")

        check = raw.get('check')
        if check is not None and column_type in (ColumnType.TEXT, ColumnType.ENUM):
            literals = parse_check_constraint(str(check))
            if literals:
                column.type = ColumnType.ENUM
                column.values = literals

        if 'values' in raw:
            values = raw['values']
            if not isinstance(values, (list, tuple)):
                raise SchemaError(f"{location}@values", "expected a list of literals")
            column.values = [str(value) for value in values]

        if column.type == ColumnType.ENUM:
            if not column.values:
                raise SchemaError(location, "enumeration declares no literals")
            if len(set(column.values)) != len(column.values):
                raise SchemaError(location, "duplicate enumeration literal")
        elif column.values:
            raise SchemaError(f"{location}@values", f"literals are only allowed on enum columns, not {column.type.value}")

        column.min_value = self._parse_bound(raw.get('min'), column, f"{location}@min")
        column.max_value = self._parse_bound(raw.get('max'), column, f"{location}@max")
        if column.min_value is not None and column.max_value is not None and column.min_value > column.max_value:
            raise SchemaError(location, "min is greater than max")

        return column

    def _resolve_primary_key(self, table: Table, declared: Any, location: str) -> Tuple[str, ...]:
        flagged = tuple(column.name for column in table.columns if column.primary_key)

        if declared is not None:
            key = _split_names(declared, f"{location}/primary-key")
            if flagged and set(flagged) != set(key):
                raise SchemaError(f"{location}/primary-key", "conflicts with columns flagged as primary key")
        else:
            key = flagged

        if len(set(key)) != len(key):
            raise SchemaError(f"{location}/primary-key", "column listed twice")

        for name in key:
            column = table.get_column(name)
            if column is None:
                raise SchemaError(f"{location}/primary-key", f"unknown column '{name}'")
            if column.nullable:
                raise SchemaError(f"{location}/column[{name}]", "primary key column cannot be nullable")
            column.primary_key = True

        return key

    def _build_foreign_key(self, schema: Schema, table: Table, raw: Dict[str, Any], location: str) -> ForeignKey:
        references = raw.get('references')
        if not isinstance(references, str) or not references.strip():
            raise SchemaError(location, "missing referenced table")
        references = references.strip()

        referenced_columns = raw.get('referenced_columns', raw.get('referenced_column'))
        # Column shorthand: references="users.id" or references="users(id)"
        shorthand = re.match(r'^([^.(]+)(?:\.(.+)|\((.+)\))$', references)
        if shorthand and referenced_columns is None:
            references = shorthand.group(1).strip()
            referenced_columns = shorthand.group(2) or shorthand.group(3)

        target = schema.get_table(references)
        if target is None:
            raise SchemaError(location, f"foreign key references unknown table '{references}'")

        source = raw.get('columns', raw.get('column'))
        if source is None:
            raise SchemaError(location, "missing foreign key column(s)")
        columns = _split_names(source, location)

        if referenced_columns is None:
            if not target.primary_key:
                raise SchemaError(location, f"table '{target.name}' has no primary key to reference")
            target_columns = target.primary_key
        else:
            target_columns = _split_names(referenced_columns, location)

        if len(columns) != len(target_columns):
            raise SchemaError(location, "foreign key and referenced column counts differ")

        for name in columns:
            if table.get_column(name) is None:
                raise SchemaError(location, f"foreign key uses unknown column '{name}'")
            for fk in table.foreign_keys:
                if name in fk.columns:
                    raise SchemaError(location, f"column '{name}' is already part of another foreign key")

        for name, target_name in zip(columns, target_columns):
            target_column = target.get_column(target_name)
            if target_column is None:
                raise SchemaError(location, f"foreign key references unknown column '{target.name}.{target_name}'")
            source_column = table.get_column(name)
            if source_column.type != target_column.type:
                raise SchemaError(
                    location,
                    f"type mismatch: {table.name}.{name} is {source_column.type.value} "
                    f"but {target.name}.{target_name} is {target_column.type.value}"
                )

        if not target.is_unique_key(target_columns):
            raise SchemaError(
                location,
                f"referenced column(s) {target.name}({', '.join(target_columns)}) are not a primary key or unique"
            )

        return ForeignKey(columns=columns, referenced_table=target.name, referenced_columns=target_columns)

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def _parse_type(self, value: str, location: str) -> Tuple[ColumnType, Optional[int], Optional[int]]:
        match = TYPE_PATTERN.match(value)
        if not match:
            raise SchemaError(location, f"unknown column type '{value}'")

        base = match.group(1).lower()
        if base not in TYPE_ALIASES:
            raise SchemaError(location, f"unknown column type '{value}'")

        column_type = TYPE_ALIASES[base]
        size = int(match.group(2)) if match.group(2) else None
        scale = int(match.group(3)) if match.group(3) else None

        if column_type == ColumnType.TEXT:
            return column_type, size, None
        if column_type == ColumnType.DECIMAL:
            return column_type, size, scale
        if size is not None:
            raise SchemaError(location, f"type '{base}' does not take a size")
        return column_type, None, None

    def _parse_bool(self, value: Any, location: str) -> bool:
        if isinstance(value, bool):
            return value
        lowered = str(value).strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise SchemaError(location, f"expected a boolean, got {value!r}")

    def _parse_int(self, value: Any, location: str) -> int:
        if isinstance(value, bool):
            raise SchemaError(location, f"expected an integer, got {value!r}")
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError as e:
            raise SchemaError(location, f"expected an integer, got {value!r}") from e

    def _parse_bound(self, value: Any, column: Column, location: str) -> Any:
        if value is None:
            return None

        try:
            if column.type == ColumnType.INTEGER:
                return self._parse_int(value, location)
            if column.type == ColumnType.DECIMAL:
                if isinstance(value, bool):
                    raise ValueError(value)
                bound = Decimal(str(value).strip())
                if not bound.is_finite():
                    raise SchemaError(location, f"bound {value!r} is not a finite number")
                return bound
            if column.type == ColumnType.DATE:
                return value if type(value) is date else date.fromisoformat(str(value).strip())
            if column.type == ColumnType.DATETIME:
                if isinstance(value, datetime):
                    return value.replace(microsecond=0, tzinfo=None)
                if type(value) is date:
                    return datetime(value.year, value.month, value.day)
                return datetime.fromisoformat(str(value).strip()).replace(microsecond=0, tzinfo=None)
            if column.type == ColumnType.TIME:
                # YAML reads an unquoted 12:30:00 as base-60 seconds
                if isinstance(value, int) and not isinstance(value, bool):
                    if not 0 <= value < 86400:
                        raise ValueError(value)
                    return time(value // 3600, value % 3600 // 60, value % 60)
                return time.fromisoformat(str(value).strip()).replace(microsecond=0)
        except (ValueError, InvalidOperation) as e:
            raise SchemaError(location, f"invalid bound {value!r} for {column.type.value} column") from e

        raise SchemaError(location, f"bounds are not supported on {column.type.value} columns")


def parse_schema(document: Union[str, bytes], default_rows: int = 10) -> Schema:
    """
    Parse a schema document with default settings

    Args:
        document: XML or YAML/JSON schema text (or UTF-8 bytes)
        default_rows: Row count for tables that do not declare one

    Returns:
        Schema model
    """
    return SchemaParser(default_rows=default_rows).parse(document)
