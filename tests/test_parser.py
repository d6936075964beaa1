"""
Test Suite for the Schema Parser

Tests:
- XML and YAML/JSON documents
- Keys, references and check constraints
- Error locations for invalid documents
- Dependency graph ordering
"""

from datetime import date, time
from decimal import Decimal

import pytest

from sqlseed.errors import CyclicForeignKeys, SchemaError
from sqlseed.schema import (
    ColumnType,
    DependencyGraph,
    SchemaParser,
    parse_check_constraint,
    parse_schema,
)


def table_xml(body: str, name: str = "t", rows: str = "") -> str:
    rows_attr = f' rows="{rows}"' if rows else ""
    return f'<schema><table name="{name}"{rows_attr}>{body}</table></schema>'


class TestXMLDocuments:
    """Test parsing of XML schema documents"""

    @pytest.fixture
    def schema(self, users_orders_xml):
        return parse_schema(users_orders_xml)

    def test_tables_in_declaration_order(self, schema):
        assert schema.table_names == ["users", "orders"]
        assert schema.get_table("users").row_count == 3
        assert schema.get_table("orders").row_count == 5

    def test_column_types(self, schema):
        users = schema.get_table("users")
        assert users.get_column("id").type == ColumnType.INTEGER
        assert users.get_column("email").type == ColumnType.TEXT
        assert users.get_column("email").max_length == 120
        assert users.get_column("signed_up").type == ColumnType.DATE

        orders = schema.get_table("orders")
        assert orders.get_column("total").type == ColumnType.DECIMAL
        assert orders.get_column("total").scale == 2
        assert orders.get_column("total").min_value == Decimal("1")
        assert orders.get_column("paid").type == ColumnType.BOOLEAN

    def test_flags_and_hints(self, schema):
        users = schema.get_table("users")
        assert users.primary_key == ("id",)
        assert users.get_column("id").primary_key
        assert users.get_column("email").unique
        assert users.get_column("email").generator == "email"
        assert schema.get_table("orders").get_column("note").nullable
        assert not users.get_column("email").nullable

    def test_enum_values(self, schema):
        status = schema.get_table("users").get_column("status")
        assert status.type == ColumnType.ENUM
        assert status.values == ["active", "banned"]

    def test_check_constraint_becomes_enum(self, schema):
        tier = schema.get_table("users").get_column("tier")
        assert tier.type == ColumnType.ENUM
        assert tier.values == ["gold", "silver"]

    def test_foreign_key(self, schema):
        orders = schema.get_table("orders")
        assert len(orders.foreign_keys) == 1
        fk = orders.foreign_keys[0]
        assert fk.columns == ("user_id",)
        assert fk.referenced_table == "users"
        assert fk.referenced_columns == ("id",)
        assert orders.foreign_key_columns == {"user_id"}

    def test_default_row_count(self):
        schema = parse_schema(table_xml('<column name="a" type="int"/>'))
        assert schema.get_table("t").row_count == 10

        schema = SchemaParser(default_rows=25).parse(table_xml('<column name="a" type="int"/>'))
        assert schema.get_table("t").row_count == 25

    def test_bytes_with_bom(self, users_orders_xml):
        schema = parse_schema(b"\xef\xbb\xbf" + users_orders_xml.encode("utf-8"))
        assert schema.table_names == ["users", "orders"]

    def test_composite_primary_key(self):
        schema = parse_schema(table_xml(
            '<column name="a" type="int"/><column name="b" type="int"/>'
            '<primary-key columns="a, b"/>'
        ))
        table = schema.get_table("t")
        assert table.primary_key == ("a", "b")
        assert table.has_composite_key
        assert table.get_column("a").primary_key and table.get_column("b").primary_key

    def test_bounds_are_parsed(self):
        schema = parse_schema(table_xml(
            '<column name="d" type="date" min="2020-01-01" max="2020-12-31"/>'
            '<column name="n" type="integer" min="-5" max="5"/>'
        ))
        table = schema.get_table("t")
        assert table.get_column("d").min_value == date(2020, 1, 1)
        assert table.get_column("n").min_value == -5
        assert table.get_column("n").max_value == 5

    def test_yaml_sexagesimal_time_bound(self):
        # unquoted 12:30:00 reaches the parser as 45000 seconds
        schema = parse_schema("""
        tables:
          - name: t
            columns:
              - {name: opens_at, type: time, min: 08:00:00, max: 12:30:00}
        """)
        column = schema.get_table("t").get_column("opens_at")
        assert column.min_value == time(8, 0, 0)
        assert column.max_value == time(12, 30, 0)


class TestMappingDocuments:
    """Test parsing of YAML and JSON schema documents"""

    def test_yaml_with_forward_reference(self, users_orders_yaml):
        schema = parse_schema(users_orders_yaml)
        assert schema.table_names == ["orders", "users"]

        fk = schema.get_table("orders").foreign_keys[0]
        assert fk.referenced_table == "users"
        assert fk.referenced_columns == ("id",)

    def test_json_document(self):
        document = """
        {"tables": [
            {"name": "tags", "rows": 4, "columns": [
                {"name": "id", "type": "integer", "primary_key": true},
                {"name": "label", "type": "enum", "values": ["a", "b"]}
            ]}
        ]}
        """
        schema = parse_schema(document)
        tags = schema.get_table("tags")
        assert tags.row_count == 4
        assert tags.primary_key == ("id",)
        assert tags.get_column("label").values == ["a", "b"]

    def test_reference_defaults_to_primary_key(self):
        document = """
        tables:
          - name: a
            columns: [{name: id, type: int, primary_key: true}]
          - name: b
            columns: [{name: a_id, type: int}]
            foreign_keys: [{columns: a_id, references: a}]
        """
        fk = parse_schema(document).get_table("b").foreign_keys[0]
        assert fk.referenced_columns == ("id",)

    def test_reference_to_unique_column(self):
        document = """
        tables:
          - name: a
            columns:
              - {name: id, type: int, primary_key: true}
              - {name: code, type: text, unique: true}
          - name: b
            columns: [{name: a_code, type: text, references: "a(code)"}]
        """
        fk = parse_schema(document).get_table("b").foreign_keys[0]
        assert fk.referenced_columns == ("code",)


class TestSchemaErrors:
    """Test that invalid documents fail with a location"""

    def assert_error(self, document, location_part):
        with pytest.raises(SchemaError) as exc_info:
            parse_schema(document)
        assert location_part in exc_info.value.location
        return exc_info.value

    def test_malformed_xml(self):
        self.assert_error("<schema><table name='x'>", "document")

    def test_malformed_yaml(self):
        self.assert_error("tables: [unclosed", "document")

    def test_empty_document(self):
        self.assert_error("   ", "document")

    def test_wrong_root(self):
        with pytest.raises(SchemaError):
            parse_schema("<tables/>")

    def test_no_tables(self):
        self.assert_error("<schema/>", "schema")

    def test_missing_table_name(self):
        self.assert_error('<schema><table><column name="a" type="int"/></table></schema>', "table[0]")

    def test_table_without_columns(self):
        self.assert_error(table_xml(""), "schema/table[t]")

    def test_unknown_type(self):
        error = self.assert_error(table_xml('<column name="a" type="blob"/>'), "schema/table[t]/column[a]")
        assert "blob" in error.reason

    def test_duplicate_table(self):
        document = (
            '<schema><table name="t"><column name="a" type="int"/></table>'
            '<table name="t"><column name="a" type="int"/></table></schema>'
        )
        self.assert_error(document, "schema/table[t]")

    def test_duplicate_column(self):
        self.assert_error(
            table_xml('<column name="a" type="int"/><column name="a" type="text"/>'),
            "column[a]"
        )

    def test_malformed_boolean(self):
        self.assert_error(table_xml('<column name="a" type="int" nullable="maybe"/>'), "@nullable")

    def test_malformed_row_count(self):
        self.assert_error(table_xml('<column name="a" type="int"/>', rows="many"), "@rows")

    def test_negative_row_count(self):
        self.assert_error(table_xml('<column name="a" type="int"/>', rows="-1"), "@rows")

    def test_enum_without_literals(self):
        self.assert_error(table_xml('<column name="a" type="enum"/>'), "column[a]")

    def test_min_greater_than_max(self):
        self.assert_error(table_xml('<column name="a" type="int" min="10" max="1"/>'), "column[a]")

    @pytest.mark.parametrize("bound", ["NaN", "Infinity", "-inf"])
    def test_non_finite_decimal_bound(self, bound):
        error = self.assert_error(
            table_xml(f'<column name="a" type="decimal(10, 2)" min="{bound}"/>'), "column[a]@min"
        )
        assert "finite" in error.reason

    def test_time_bound_out_of_day(self):
        self.assert_error("""
        tables:
          - name: t
            columns:
              - {name: opens_at, type: time, max: 90000}
        """, "column[opens_at]@max")

    def test_nullable_primary_key(self):
        self.assert_error(
            table_xml('<column name="a" type="int" primary-key="true" nullable="true"/>'),
            "column[a]"
        )

    def test_unknown_primary_key_column(self):
        self.assert_error(
            table_xml('<column name="a" type="int"/><primary-key columns="b"/>'),
            "primary-key"
        )

    def test_unknown_attribute(self):
        self.assert_error(table_xml('<column name="a" type="int" colour="red"/>'), "column[a]")

    def test_reference_to_unknown_table(self):
        error = self.assert_error(
            table_xml('<column name="a" type="int" references="missing.id"/>'),
            "column[a]"
        )
        assert "missing" in error.reason

    def test_reference_to_unknown_column(self):
        document = (
            '<schema><table name="p"><column name="id" type="int" primary-key="true"/></table>'
            '<table name="c"><column name="p_id" type="int"/>'
            '<foreign-key columns="p_id" references="p" referenced-columns="nope"/></table></schema>'
        )
        self.assert_error(document, "schema/table[c]/foreign-key[0]")

    def test_arity_mismatch(self):
        document = (
            '<schema><table name="p"><column name="id" type="int" primary-key="true"/></table>'
            '<table name="c"><column name="x" type="int"/><column name="y" type="int"/>'
            '<foreign-key columns="x, y" references="p"/></table></schema>'
        )
        error = self.assert_error(document, "schema/table[c]")
        assert "counts differ" in error.reason

    def test_reference_to_non_unique_column(self):
        document = (
            '<schema><table name="p"><column name="id" type="int" primary-key="true"/>'
            '<column name="code" type="text"/></table>'
            '<table name="c"><column name="code" type="text" references="p.code"/></table></schema>'
        )
        error = self.assert_error(document, "schema/table[c]")
        assert "not a primary key or unique" in error.reason

    def test_reference_type_mismatch(self):
        document = (
            '<schema><table name="p"><column name="id" type="int" primary-key="true"/></table>'
            '<table name="c"><column name="p_id" type="text" references="p.id"/></table></schema>'
        )
        self.assert_error(document, "schema/table[c]")


class TestCheckConstraint:
    """Test check constraint literal extraction"""

    def test_in_list(self):
        assert parse_check_constraint("in ('a', 'b')") == ["a", "b"]

    def test_case_and_spacing(self):
        assert parse_check_constraint("  IN('x','y' , 'z') ") == ["x", "y", "z"]

    def test_escaped_quote(self):
        assert parse_check_constraint("in ('it''s', 'ok')") == ["it's", "ok"]

    def test_other_shapes_are_ignored(self):
        assert parse_check_constraint("value > 5") is None
        assert parse_check_constraint("in (1, 2)") is None


class TestDependencyGraph:
    """Test generation order and cycle detection"""

    def test_referenced_tables_first(self, users_orders_yaml):
        schema = parse_schema(users_orders_yaml)
        graph = DependencyGraph(schema)
        assert graph.generation_order() == ["users", "orders"]
        assert graph.dependencies_of("orders") == ["users"]

    def test_ties_keep_declaration_order(self):
        document = """
        tables:
          - name: c
            columns: [{name: id, type: int, primary_key: true}]
          - name: a
            columns: [{name: id, type: int, primary_key: true}]
          - name: b
            columns: [{name: id, type: int, primary_key: true}]
        """
        assert DependencyGraph(parse_schema(document)).generation_order() == ["c", "a", "b"]

    def test_self_reference_is_not_a_cycle(self):
        document = """
        tables:
          - name: employees
            columns:
              - {name: id, type: int, primary_key: true}
              - {name: manager_id, type: int, nullable: true, references: employees.id}
        """
        graph = DependencyGraph(parse_schema(document))
        assert graph.find_cycle() == []
        assert graph.generation_order() == ["employees"]

    def test_cycle_detected(self):
        document = """
        tables:
          - name: a
            columns:
              - {name: id, type: int, primary_key: true}
              - {name: b_id, type: int, references: b.id}
          - name: b
            columns:
              - {name: id, type: int, primary_key: true}
              - {name: a_id, type: int, references: a.id}
        """
        graph = DependencyGraph(parse_schema(document))
        assert set(graph.find_cycle()) == {"a", "b"}
        with pytest.raises(CyclicForeignKeys) as exc_info:
            graph.generation_order()
        assert set(exc_info.value.cycle) == {"a", "b"}
