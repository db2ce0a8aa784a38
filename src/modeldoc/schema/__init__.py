"""Database schema introspection."""

from modeldoc.schema.ops import SchemaInspector, raw_type_name

__all__ = ["SchemaInspector", "raw_type_name"]
