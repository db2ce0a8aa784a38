"""Schema introspection through SQLAlchemy.

One engine per named connection, created on first use. Columns come back in
the order the database reports them.

Column types are reported the way the database catalog declares them
(``bigint``, ``geometry``, ``int4``), not as SQLAlchemy's reflected type.
Reflection loses information on the way: MySQL column modifiers end up in
the compiled name (``BIGINT UNSIGNED``) and SQLite maps any declaration it
does not recognise to ``NUMERIC``.
"""

from __future__ import annotations

import re
import threading
from typing import Any

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError, NoSuchTableError, SQLAlchemyError

from modeldoc.annotate.models import ColumnDescriptor
from modeldoc.config.models import DatabaseConfig
from modeldoc.core.errors import SchemaError
from modeldoc.core.logging import get_logger

log = get_logger("schema.ops")

# Trailing attributes MySQL puts after the type proper
_MODIFIERS = re.compile(
    r"\s+(?:unsigned|zerofill|collate\s+\S+|character\s+set\s+\S+)",
    re.IGNORECASE,
)

_MYSQL_CATALOG = (
    "SELECT column_name, data_type FROM information_schema.columns "
    "WHERE table_schema = DATABASE() AND table_name = :table"
)

_CATALOG_QUERIES = {
    "mysql": _MYSQL_CATALOG,
    "mariadb": _MYSQL_CATALOG,
    "postgresql": (
        "SELECT column_name, udt_name FROM information_schema.columns "
        "WHERE table_schema = current_schema() AND table_name = :table"
    ),
}


def raw_type_name(column_type: Any, engine: Engine) -> str:
    """Dialect spelling of a reflected column type, e.g. ``VARCHAR(255)``.

    Column modifiers (``UNSIGNED``, ``COLLATE ...``) are dropped.
    """
    try:
        compiled = str(column_type.compile(dialect=engine.dialect))
    except (CompileError, NotImplementedError):
        return str(getattr(column_type, "__visit_name__", "")) or "unknown"
    return _MODIFIERS.sub("", compiled).strip()


def declared_types(engine: Engine, table: str) -> dict[str, str]:
    """Column name -> type as declared in the database catalog.

    Empty for dialects without a catalog lookup; callers then fall back to
    :func:`raw_type_name`.
    """
    dialect = engine.dialect.name
    if dialect == "sqlite":
        quoted = engine.dialect.identifier_preparer.quote(table)
        statement, params = text(f"PRAGMA table_xinfo({quoted})"), {}
        name_at, type_at = 1, 2
    elif dialect in _CATALOG_QUERIES:
        statement, params = text(_CATALOG_QUERIES[dialect]), {"table": table}
        name_at, type_at = 0, 1
    else:
        return {}

    with engine.connect() as conn:
        rows = conn.execute(statement, params).all()
    return {str(row[name_at]): str(row[type_at]) for row in rows if row[type_at]}


class SchemaInspector:
    """``SchemaProvider`` backed by SQLAlchemy engines.

    Usage::

        inspector = SchemaInspector(config.database)
        columns = inspector.get_columns("users")
        inspector.close()
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engines: dict[str, Engine] = {}
        self._lock = threading.Lock()

    def engine(self, connection: str | None = None) -> Engine:
        name = connection or self._config.default
        with self._lock:
            if name not in self._engines:
                url = self._config.connections.get(name)
                if url is None:
                    raise SchemaError.unknown_connection(name)
                try:
                    self._engines[name] = create_engine(url)
                except (SQLAlchemyError, ImportError, ValueError) as e:
                    raise SchemaError.unavailable("*", f"cannot connect '{name}': {e}") from e
                log.debug("engine_created", connection=name)
            return self._engines[name]

    def get_columns(self, table: str, connection: str | None = None) -> list[ColumnDescriptor]:
        engine = self.engine(connection)
        try:
            reflected = inspect(engine).get_columns(table)
            declared = declared_types(engine, table) if reflected else {}
        except NoSuchTableError as e:
            raise SchemaError.unavailable(table, "table does not exist") from e
        except SQLAlchemyError as e:
            raise SchemaError.unavailable(table, str(e)) from e

        if not reflected:
            # SQLite reports unknown tables as having no columns
            raise SchemaError.unavailable(table, "table does not exist")

        return [
            ColumnDescriptor(
                name=column["name"],
                raw_type=declared.get(column["name"]) or raw_type_name(column["type"], engine),
                nullable=bool(column.get("nullable", True)),
                default=column.get("default"),
                comment=column.get("comment"),
            )
            for column in reflected
        ]

    def close(self) -> None:
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()
