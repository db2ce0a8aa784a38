"""Storage column type -> PHP native type name.

Total function: anything unrecognized documents as ``string``, which is how
PDO hands such values back.
"""

from __future__ import annotations

import re

_SUFFIX = re.compile(r"\(.*")

_BOOLEAN = frozenset({"bool", "boolean"})

_INTEGER = frozenset(
    {
        "int", "integer", "tinyint", "smallint", "mediumint", "bigint",
        "int1", "int2", "int3", "int4", "int8", "middleint",
        "serial", "serial2", "serial4", "serial8", "smallserial", "bigserial",
        "unsigned big int",
    }
)  # fmt: skip

_FLOAT = frozenset(
    {
        "dec", "decimal", "numeric", "fixed", "number",
        "float", "float4", "float8", "double", "double precision", "real", "money",
    }
)  # fmt: skip

# Known textual families; unknown types resolve to string as well.
_STRING = frozenset(
    {
        # bit strings
        "bit", "bit varying", "varbit",
        # temporal (raw driver values are strings unless cast)
        "date", "time", "timetz", "datetime", "timestamp",
        "timestamp without time zone", "timestamp with time zone",
        "year", "sql_tsi_year", "interval",
        # json
        "json", "jsonb",
        # character
        "char", "character", "nchar", "native character", "nvarchar",
        "varchar", "character varying", "varying character", "varchar2", "varcharacter",
        "char byte", "char varying", "national char", "national character",
        "national varchar", "national character varying", "national char varying",
        "nchar varying", "nchar varchar", "nchar varcharacter",
        "text", "clob", "tinytext", "mediumtext", "longtext", "enum", "set",
        # binary
        "blob", "tinyblob", "mediumblob", "longblob", "bytea",
        "binary", "varbinary", "long varbinary", "raw", "row",
        # identifiers / network
        "uuid", "cidr", "inet", "inet4", "inet6", "macaddr", "macaddr8",
        # geometric / search
        "point", "line", "lseg", "box", "path", "polygon", "circle",
        "tsvector", "tsquery",
        # engine specific
        "xml", "pg_lsn", "pg_snapshot", "txid_snapshot",
    }
)  # fmt: skip


def normalize_column_type(raw_type: str) -> str:
    """Lowercase and drop any ``(length, precision)`` suffix."""
    return _SUFFIX.sub("", raw_type.lower()).strip()


class ColumnTypeResolver:
    """Maps raw storage type names onto PHP native type names."""

    def is_known(self, raw_type: str) -> bool:
        """Whether the type belongs to one of the recognized families."""
        normalized = normalize_column_type(raw_type)
        return any(normalized in family for family in (_BOOLEAN, _INTEGER, _FLOAT, _STRING))

    def resolve(self, raw_type: str) -> str:
        normalized = normalize_column_type(raw_type)

        if normalized in _BOOLEAN:
            return "bool"
        if normalized in _INTEGER:
            return "int"
        if normalized in _FLOAT:
            return "float"
        return "string"
