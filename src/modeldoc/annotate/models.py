"""Descriptors consumed by the annotation generator.

Everything here is built fresh per generation request from schema and
reflection data and thrown away after rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from modeldoc.annotate.types import TypeExpression

# ============================================================================
# COLLABORATOR INPUTS
# ============================================================================


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """One persisted field, in the order schema introspection returned it."""

    name: str
    raw_type: str
    nullable: bool = False
    default: Any = None
    comment: str | None = None


class RelationKind(str, Enum):
    """Closed classification of relation-producing methods.

    TO_ONE: belongsTo, hasOneThrough
    TO_ONE_OR_NONE: hasOne, morphOne
    TO_MANY: hasMany, hasManyThrough, morphMany
    TO_MANY_THROUGH_PIVOT: belongsToMany, morphToMany, morphedByMany
    POLYMORPHIC: morphTo (related model unknown until runtime)
    """

    TO_ONE = "to_one"
    TO_ONE_OR_NONE = "to_one_or_none"
    TO_MANY = "to_many"
    TO_MANY_THROUGH_PIVOT = "to_many_through_pivot"
    POLYMORPHIC = "polymorphic"

    @property
    def is_collection(self) -> bool:
        return self in (RelationKind.TO_MANY, RelationKind.TO_MANY_THROUGH_PIVOT)

    @property
    def is_optional(self) -> bool:
        return self in (RelationKind.TO_ONE_OR_NONE, RelationKind.POLYMORPHIC)


@dataclass(frozen=True, slots=True)
class RelationDescriptor:
    method_name: str
    kind: RelationKind
    related_type_name: str  # fully qualified with leading backslash
    foreign_key_name: str | None = None


@dataclass(frozen=True, slots=True)
class AccessorDescriptor:
    name: str
    declared_type: TypeExpression
    readable: bool
    writable: bool


@dataclass(frozen=True, slots=True)
class ScopeDescriptor:
    name: str
    owner_class_base_name: str


class ModelReflection(Protocol):
    """What the generator needs to know about a model class."""

    def get_casts(self) -> dict[str, str]:
        """Attribute name -> normalized cast specifier."""
        ...

    def get_relations(self) -> list[RelationDescriptor]: ...

    def get_accessors(self) -> list[AccessorDescriptor]: ...

    def get_scopes(self) -> list[ScopeDescriptor]: ...

    def uses_notifiable(self) -> bool: ...


class SchemaProvider(Protocol):
    """Column listing for a table, optionally on a named connection."""

    def get_columns(self, table: str, connection: str | None = None) -> list[ColumnDescriptor]: ...


# ============================================================================
# GENERATOR OUTPUT
# ============================================================================


class TagKind(str, Enum):
    PROPERTY = "@property"
    PROPERTY_READ = "@property-read"
    PROPERTY_WRITE = "@property-write"
    METHOD = "@method"

    @classmethod
    def for_access(cls, readable: bool, writable: bool) -> TagKind:
        if readable and not writable:
            return cls.PROPERTY_READ
        if writable and not readable:
            return cls.PROPERTY_WRITE
        return cls.PROPERTY


@dataclass(frozen=True, slots=True)
class AnnotationEntry:
    """A single docblock tag line.

    For METHOD entries ``name`` holds the literal method signature
    (e.g. ``Builder<static>|User active()``) instead of a property name.
    """

    tag: TagKind
    type: TypeExpression
    name: str
    description: str = ""

    def render(self) -> str:
        target = self.name if self.tag is TagKind.METHOD else f"${self.name}"
        return f"{self.tag.value} {self.type.render()} {target} {self.description}".rstrip()


class _BlankLine:
    """Visual separator before the method section."""

    __slots__ = ()

    def render(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "BLANK_LINE"


BLANK_LINE = _BlankLine()

Entry = AnnotationEntry | _BlankLine
