"""Tests for SQLAlchemy-backed schema introspection."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
from sqlalchemy import Integer, String, create_engine, text
from sqlalchemy.dialects import mysql
from sqlalchemy.types import UserDefinedType

from modeldoc.annotate.column_types import ColumnTypeResolver
from modeldoc.annotate.models import ColumnDescriptor
from modeldoc.config.models import DatabaseConfig
from modeldoc.core.errors import ErrorCode, SchemaError
from modeldoc.schema.ops import SchemaInspector, declared_types, raw_type_name


class _Opaque(UserDefinedType):
    cache_ok = True
    __visit_name__ = "opaque"

    def get_col_spec(self, **kw: object) -> str:
        raise NotImplementedError


class TestRawTypeName:
    def test_compiles_with_dialect(self, sqlite_url: str) -> None:
        inspector = SchemaInspector(DatabaseConfig(connections={"default": sqlite_url}))
        try:
            engine = inspector.engine()
            assert raw_type_name(String(255), engine) == "VARCHAR(255)"
            assert raw_type_name(Integer(), engine) == "INTEGER"
        finally:
            inspector.close()

    def test_uncompilable_type_falls_back_to_visit_name(self, sqlite_url: str) -> None:
        inspector = SchemaInspector(DatabaseConfig(connections={"default": sqlite_url}))
        try:
            assert raw_type_name(_Opaque(), inspector.engine()) == "opaque"
        finally:
            inspector.close()

    def test_mysql_modifiers_are_dropped(self) -> None:
        engine = SimpleNamespace(dialect=mysql.dialect())

        assert raw_type_name(mysql.BIGINT(unsigned=True), engine) == "BIGINT"
        assert raw_type_name(mysql.INTEGER(unsigned=True, zerofill=True), engine) == "INTEGER"
        assert raw_type_name(mysql.VARCHAR(40, collation="utf8mb4_bin"), engine) == "VARCHAR(40)"

    def test_unsigned_integers_document_as_int(self) -> None:
        engine = SimpleNamespace(dialect=mysql.dialect())
        resolver = ColumnTypeResolver()

        assert resolver.resolve(raw_type_name(mysql.BIGINT(unsigned=True), engine)) == "int"


class TestSchemaInspector:
    """Column listing tests."""

    def test_given_table_when_inspected_then_columns_in_order(self, sqlite_url: str) -> None:
        # Given
        inspector = SchemaInspector(DatabaseConfig(connections={"default": sqlite_url}))

        # When
        try:
            columns = inspector.get_columns("users")
        finally:
            inspector.close()

        # Then
        assert [(c.name, c.raw_type, c.nullable) for c in columns] == [
            ("id", "INTEGER", False),
            ("name", "VARCHAR(255)", False),
            ("age", "INTEGER", True),
            ("birth_date", "DATE", True),
            ("created_at", "DATETIME", True),
            ("updated_at", "DATETIME", True),
        ]
        assert all(isinstance(c, ColumnDescriptor) for c in columns)

    def test_named_connection(self, sqlite_url: str) -> None:
        config = DatabaseConfig(default="main", connections={"reporting": sqlite_url})
        inspector = SchemaInspector(config)
        try:
            columns = inspector.get_columns("posts", "reporting")
        finally:
            inspector.close()

        assert [c.name for c in columns] == ["id", "user_id", "title"]

    def test_unknown_connection(self) -> None:
        inspector = SchemaInspector(DatabaseConfig())

        with pytest.raises(SchemaError) as exc_info:
            inspector.get_columns("users")

        assert exc_info.value.code is ErrorCode.UNKNOWN_CONNECTION
        assert exc_info.value.details == {"connection": "default"}

    def test_missing_table(self, sqlite_url: str) -> None:
        inspector = SchemaInspector(DatabaseConfig(connections={"default": sqlite_url}))
        try:
            with pytest.raises(SchemaError) as exc_info:
                inspector.get_columns("invoices")
        finally:
            inspector.close()

        assert exc_info.value.code is ErrorCode.SCHEMA_UNAVAILABLE
        assert exc_info.value.details["table"] == "invoices"

    def test_engine_is_reused(self, sqlite_url: str) -> None:
        inspector = SchemaInspector(DatabaseConfig(connections={"default": sqlite_url}))
        try:
            assert inspector.engine() is inspector.engine("default")
        finally:
            inspector.close()


class TestDeclaredTypes:
    """Catalog type names win over SQLAlchemy's reflected types."""

    @pytest.fixture
    def spatial_url(self, tmp_path: Path) -> str:
        url = f"sqlite:///{tmp_path / 'spatial.sqlite'}"
        engine = create_engine(url)
        with engine.begin() as conn:
            conn.execute(
                text(
                    "CREATE TABLE places ("
                    "id INTEGER PRIMARY KEY, location geometry, starts timestamptz, untyped)"
                )
            )
        engine.dispose()
        return url

    def test_given_unrecognised_sqlite_types_when_inspected_then_declared_names_kept(
        self, spatial_url: str
    ) -> None:
        # Given
        inspector = SchemaInspector(DatabaseConfig(connections={"default": spatial_url}))
        resolver = ColumnTypeResolver()

        # When
        try:
            columns = {c.name: c.raw_type for c in inspector.get_columns("places")}
        finally:
            inspector.close()

        # Then
        assert columns["location"] == "geometry"
        assert columns["starts"] == "timestamptz"
        assert resolver.resolve(columns["location"]) == "string"
        assert resolver.resolve(columns["starts"]) == "string"
        assert resolver.resolve(columns["id"]) == "int"

    def test_untyped_column_falls_back_to_reflected_type(self, spatial_url: str) -> None:
        inspector = SchemaInspector(DatabaseConfig(connections={"default": spatial_url}))
        try:
            columns = {c.name: c.raw_type for c in inspector.get_columns("places")}
        finally:
            inspector.close()

        assert columns["untyped"]

    def test_sqlite_catalog_lookup(self, sqlite_url: str) -> None:
        engine = create_engine(sqlite_url)
        try:
            assert declared_types(engine, "posts") == {
                "id": "INTEGER",
                "user_id": "INTEGER",
                "title": "VARCHAR(255)",
            }
        finally:
            engine.dispose()

    def test_dialect_without_catalog_lookup(self) -> None:
        engine = SimpleNamespace(dialect=SimpleNamespace(name="oracle"))

        assert declared_types(engine, "users") == {}  # type: ignore[arg-type]
