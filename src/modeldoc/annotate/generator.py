"""Docblock generation for Eloquent models.

Entry order is fixed: columns (schema order), relations (reflection order),
the notifications collection, accessors, then a blank line and the scope
``@method`` tags.
"""

from __future__ import annotations

from collections.abc import Sequence

from modeldoc.annotate.cast_types import CastTypeResolver
from modeldoc.annotate.column_types import ColumnTypeResolver
from modeldoc.annotate.models import (
    BLANK_LINE,
    AnnotationEntry,
    ColumnDescriptor,
    Entry,
    ModelReflection,
    RelationDescriptor,
    RelationKind,
    TagKind,
)
from modeldoc.annotate.types import NamedType, TypeExpression, generic, nullable
from modeldoc.core.logging import get_logger

log = get_logger("annotate.generator")

TIMESTAMP_COLUMNS = ("created_at", "updated_at")

ELOQUENT_COLLECTION = "\\Illuminate\\Database\\Eloquent\\Collection"
ELOQUENT_MODEL = "\\Illuminate\\Database\\Eloquent\\Model"
ELOQUENT_BUILDER = "\\Illuminate\\Database\\Eloquent\\Builder"

NOTIFICATIONS_ENTRY = AnnotationEntry(
    tag=TagKind.PROPERTY_READ,
    type=generic(
        "\\Illuminate\\Notifications\\DatabaseNotificationCollection",
        "int",
        "\\Illuminate\\Notifications\\DatabaseNotification",
    ),
    name="notifications",
)


class AnnotationGenerator:
    """Builds the ``@property``/``@method`` docblock for one model.

    Stateless apart from its resolvers; safe to share between threads.
    """

    def __init__(
        self,
        column_resolver: ColumnTypeResolver | None = None,
        cast_resolver: CastTypeResolver | None = None,
    ) -> None:
        self._column_resolver = column_resolver or ColumnTypeResolver()
        self._cast_resolver = cast_resolver or CastTypeResolver()

    def generate(self, columns: Sequence[ColumnDescriptor], model: ModelReflection) -> str:
        """Generate the docblock text for a model."""
        return render_block(self.build_entries(columns, model))

    def build_entries(
        self, columns: Sequence[ColumnDescriptor], model: ModelReflection
    ) -> list[Entry]:
        entries: list[Entry] = []
        casts = model.get_casts()

        for column in columns:
            type_ = self.resolve_column_type(column, casts)
            if column.nullable:
                type_ = nullable(type_)
            entries.append(
                AnnotationEntry(
                    tag=TagKind.PROPERTY,
                    type=type_,
                    name=column.name,
                    description=column.comment or "",
                )
            )

        nullable_columns = {column.name for column in columns if column.nullable}
        for relation in model.get_relations():
            entries.append(
                AnnotationEntry(
                    tag=TagKind.PROPERTY_READ,
                    type=self.resolve_relation_type(relation, nullable_columns),
                    name=relation.method_name,
                )
            )

        if model.uses_notifiable():
            entries.append(NOTIFICATIONS_ENTRY)

        for accessor in model.get_accessors():
            entries.append(
                AnnotationEntry(
                    tag=TagKind.for_access(accessor.readable, accessor.writable),
                    type=accessor.declared_type,
                    name=accessor.name,
                )
            )

        scopes = model.get_scopes()
        if scopes:
            entries.append(BLANK_LINE)
        for scope in scopes:
            signature = f"{ELOQUENT_BUILDER}<static>|{scope.owner_class_base_name} {scope.name}()"
            entries.append(
                AnnotationEntry(tag=TagKind.METHOD, type=NamedType("static"), name=signature)
            )

        return entries

    def resolve_column_type(
        self, column: ColumnDescriptor, casts: dict[str, str]
    ) -> TypeExpression:
        """Cast first, then the auto-maintained timestamps, then the raw column type."""
        if column.name in casts:
            return self._cast_resolver.resolve(casts[column.name])

        if column.name in TIMESTAMP_COLUMNS:
            return self._cast_resolver.resolve("datetime")

        if not self._column_resolver.is_known(column.raw_type):
            log.debug("unknown_column_type", column=column.name, raw_type=column.raw_type)
        return NamedType(self._column_resolver.resolve(column.raw_type))

    def resolve_relation_type(
        self, relation: RelationDescriptor, nullable_columns: set[str]
    ) -> TypeExpression:
        type_: TypeExpression
        if relation.kind.is_collection:
            type_ = generic(ELOQUENT_COLLECTION, "int", relation.related_type_name)
        elif relation.kind is RelationKind.POLYMORPHIC:
            type_ = NamedType(ELOQUENT_MODEL)
        else:
            type_ = NamedType(relation.related_type_name)

        # An unknown foreign key infers nothing
        if relation.kind.is_optional or relation.foreign_key_name in nullable_columns:
            type_ = nullable(type_)
        return type_


def render_block(entries: Sequence[Entry]) -> str:
    """Serialize entries into a ``/** ... */`` comment."""
    lines = ["/**"]
    for entry in entries:
        lines.append(f" * {entry.render()}".rstrip())
    lines.append(" */")
    return "\n".join(lines)
