"""Annotation engine: type resolution and docblock generation."""

from modeldoc.annotate.cast_types import CastTypeResolver
from modeldoc.annotate.column_types import ColumnTypeResolver
from modeldoc.annotate.generator import AnnotationGenerator, render_block
from modeldoc.annotate.models import (
    BLANK_LINE,
    AccessorDescriptor,
    AnnotationEntry,
    ColumnDescriptor,
    ModelReflection,
    RelationDescriptor,
    RelationKind,
    SchemaProvider,
    ScopeDescriptor,
    TagKind,
)
from modeldoc.annotate.types import (
    GenericType,
    NamedType,
    NullableType,
    TypeExpression,
    nullable,
)

__all__ = [
    "AnnotationGenerator",
    "CastTypeResolver",
    "ColumnTypeResolver",
    "render_block",
    "BLANK_LINE",
    "AccessorDescriptor",
    "AnnotationEntry",
    "ColumnDescriptor",
    "ModelReflection",
    "RelationDescriptor",
    "RelationKind",
    "SchemaProvider",
    "ScopeDescriptor",
    "TagKind",
    "GenericType",
    "NamedType",
    "NullableType",
    "TypeExpression",
    "nullable",
]
