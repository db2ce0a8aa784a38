"""Eloquent cast specifier -> type expression.

Rules are tried top to bottom; the first one that returns a type wins and
``mixed`` is the total fallback:

1. parameterized container casts (``AsCollection:App\\Data\\Item``)
2. the fixed cast vocabulary (``int``, ``datetime``, ``encrypted:array``, ...)
3. custom classes/enums/interfaces known to the class-existence predicate
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from modeldoc.annotate.types import MIXED, NamedType, TypeExpression, generic

CASTS_NAMESPACE = "Illuminate\\Database\\Eloquent\\Casts\\"

AS_ARRAY_OBJECT = CASTS_NAMESPACE + "AsArrayObject"
AS_COLLECTION = CASTS_NAMESPACE + "AsCollection"
AS_ENCRYPTED_ARRAY_OBJECT = CASTS_NAMESPACE + "AsEncryptedArrayObject"
AS_ENCRYPTED_COLLECTION = CASTS_NAMESPACE + "AsEncryptedCollection"
AS_ENUM_ARRAY_OBJECT = CASTS_NAMESPACE + "AsEnumArrayObject"
AS_ENUM_COLLECTION = CASTS_NAMESPACE + "AsEnumCollection"
AS_STRINGABLE = CASTS_NAMESPACE + "AsStringable"

# Cast classes that ship with the framework; reflection treats these as
# existing classes even though they are never scanned.
FRAMEWORK_CAST_CLASSES = frozenset(
    {
        AS_ARRAY_OBJECT,
        AS_COLLECTION,
        AS_ENCRYPTED_ARRAY_OBJECT,
        AS_ENCRYPTED_COLLECTION,
        AS_ENUM_ARRAY_OBJECT,
        AS_ENUM_COLLECTION,
        AS_STRINGABLE,
    }
)

SUPPORT_COLLECTION = "\\Illuminate\\Support\\Collection"
ARRAY_OBJECT = "\\ArrayObject"
CARBON = NamedType("\\Illuminate\\Support\\Carbon")
CARBON_IMMUTABLE = NamedType("\\Carbon\\CarbonImmutable")

CAST_VOCABULARY: dict[str, TypeExpression] = {
    "int": NamedType("int"),
    "integer": NamedType("int"),
    "real": NamedType("float"),
    "float": NamedType("float"),
    "double": NamedType("float"),
    "decimal": NamedType("float"),
    "string": NamedType("string"),
    "bool": NamedType("bool"),
    "boolean": NamedType("bool"),
    "object": NamedType("object"),
    "array": generic("array", "array-key", "mixed"),
    "json": generic("array", "array-key", "mixed"),
    "json:unicode": generic("array", "array-key", "mixed"),
    "collection": generic(SUPPORT_COLLECTION, "array-key", "mixed"),
    "date": CARBON,
    "datetime": CARBON,
    "custom_datetime": CARBON,
    "timestamp": CARBON,
    "immutable_date": CARBON_IMMUTABLE,
    "immutable_datetime": CARBON_IMMUTABLE,
    "immutable_custom_datetime": CARBON_IMMUTABLE,
    "hashed": NamedType("string"),
    "encrypted": NamedType("string"),
    "encrypted:array": NamedType("array"),
    "encrypted:json": NamedType("array"),
    "encrypted:object": NamedType("object"),
    "encrypted:collection": NamedType(SUPPORT_COLLECTION),
    AS_STRINGABLE: NamedType("\\Illuminate\\Support\\Stringable"),
    AS_ARRAY_OBJECT: NamedType(ARRAY_OBJECT),
    AS_COLLECTION: NamedType(SUPPORT_COLLECTION),
    AS_ENCRYPTED_ARRAY_OBJECT: NamedType(ARRAY_OBJECT),
    AS_ENCRYPTED_COLLECTION: NamedType(SUPPORT_COLLECTION),
}

# Parameterized containers: cast class -> container type name
CONTAINER_CASTS: tuple[tuple[str, str], ...] = (
    (AS_COLLECTION, SUPPORT_COLLECTION),
    (AS_ENUM_COLLECTION, SUPPORT_COLLECTION),
    (AS_ENUM_ARRAY_OBJECT, ARRAY_OBJECT),
)


@dataclass(frozen=True, slots=True)
class CastRule:
    """A named rule; ``apply`` returns None when the rule does not match."""

    name: str
    apply: Callable[[str], TypeExpression | None]


def normalize_class_name(class_name: str) -> str:
    """Fully qualify a namespaced class name with a leading backslash.

    Names without any namespace separator are left alone.
    """
    if class_name.startswith("\\"):
        return class_name
    if "\\" not in class_name:
        return class_name
    return "\\" + class_name


def _capitalize_segments(class_name: str) -> str:
    parts = class_name.strip(",").lstrip("\\").split("\\")
    return "\\".join(part[:1].upper() + part[1:] for part in parts)


def _container_rule(cast_class: str, container: str) -> CastRule:
    pattern = re.compile(rf"(?<={re.escape(cast_class)}:).+", re.IGNORECASE)

    def apply(specifier: str) -> TypeExpression | None:
        match = pattern.search(specifier)
        if match is None:
            return None
        return generic(container, "int", "\\" + _capitalize_segments(match.group(0)))

    short_name = cast_class.rsplit("\\", 1)[-1]
    return CastRule(name=f"container:{short_name}", apply=apply)


_VOCABULARY_FOLDED = {key.lower(): value for key, value in CAST_VOCABULARY.items()}


def _vocabulary(specifier: str) -> TypeExpression | None:
    if specifier in CAST_VOCABULARY:
        return CAST_VOCABULARY[specifier]
    return _VOCABULARY_FOLDED.get(specifier.lstrip("\\").lower())


class CastTypeResolver:
    """Resolves cast specifiers through an ordered rule table.

    Args:
        class_exists: Read-only predicate telling whether a class, enum or
            interface with the given name exists. Without one, custom casts
            resolve to ``mixed``.
    """

    def __init__(self, class_exists: Callable[[str], bool] | None = None) -> None:
        self._class_exists = class_exists or (lambda _name: False)
        self._rules: tuple[CastRule, ...] = (
            *(_container_rule(cast_class, container) for cast_class, container in CONTAINER_CASTS),
            CastRule(name="vocabulary", apply=_vocabulary),
            CastRule(name="custom_class", apply=self._custom_class),
        )

    @property
    def rules(self) -> tuple[CastRule, ...]:
        return self._rules

    def resolve(self, specifier: str) -> TypeExpression:
        for rule in self._rules:
            resolved = rule.apply(specifier)
            if resolved is not None:
                return resolved
        return MIXED

    def _custom_class(self, specifier: str) -> TypeExpression | None:
        if specifier and self._class_exists(specifier):
            return NamedType(normalize_class_name(specifier))
        return None
