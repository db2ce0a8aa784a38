"""Static Eloquent model reflection.

Reads a model's class declaration, the traits it uses and its indexed
parents from source, and answers the questions the annotation generator
asks: casts, relations, accessors, scopes and whether the model is
notifiable. Relation kinds are classified here, once; the generator only
pattern-matches on ``RelationKind``.

Each probe (one relation method, one accessor, the casts array) that cannot
be evaluated statically is logged at debug level and treated as absent.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from functools import cached_property
from pathlib import Path
from typing import Any

import tree_sitter

from modeldoc.annotate.generator import ELOQUENT_MODEL
from modeldoc.annotate.models import (
    AccessorDescriptor,
    RelationDescriptor,
    RelationKind,
    ScopeDescriptor,
)
from modeldoc.annotate.types import MIXED, NamedType, TypeExpression, nullable
from modeldoc.core.errors import ModelError, ReflectionError, SourceError
from modeldoc.core.logging import get_logger
from modeldoc.php.classes import ClassIndex, ClassInfo
from modeldoc.php.declarations import ClassDeclaration, MethodDeclaration, extract_declarations
from modeldoc.php.names import BUILTIN_TYPES, same_class
from modeldoc.php.naming import lcfirst, snake, table_name_for
from modeldoc.php.parser import PhpParser, node_text
from modeldoc.php.values import is_null_literal, pick_argument, split_arguments

log = get_logger("reflection.ops")

MODEL_BASES = (
    "Illuminate\\Database\\Eloquent\\Model",
    "Illuminate\\Foundation\\Auth\\User",
    "Illuminate\\Database\\Eloquent\\Relations\\Pivot",
    "Illuminate\\Database\\Eloquent\\Relations\\MorphPivot",
)

RELATIONS_NAMESPACE = "Illuminate\\Database\\Eloquent\\Relations\\"

# $this-><method>() -> (relation class, kind)
RELATION_METHODS: dict[str, tuple[str, RelationKind]] = {
    "hasone": ("HasOne", RelationKind.TO_ONE_OR_NONE),
    "morphone": ("MorphOne", RelationKind.TO_ONE_OR_NONE),
    "belongsto": ("BelongsTo", RelationKind.TO_ONE),
    "hasonethrough": ("HasOneThrough", RelationKind.TO_ONE),
    "hasmany": ("HasMany", RelationKind.TO_MANY),
    "hasmanythrough": ("HasManyThrough", RelationKind.TO_MANY),
    "morphmany": ("MorphMany", RelationKind.TO_MANY),
    "belongstomany": ("BelongsToMany", RelationKind.TO_MANY_THROUGH_PIVOT),
    "morphtomany": ("MorphToMany", RelationKind.TO_MANY_THROUGH_PIVOT),
    "morphedbymany": ("MorphToMany", RelationKind.TO_MANY_THROUGH_PIVOT),
    "morphto": ("MorphTo", RelationKind.POLYMORPHIC),
}

RELATION_CLASSES = frozenset(
    RELATIONS_NAMESPACE + relation_class for relation_class, _ in RELATION_METHODS.values()
)

ATTRIBUTE_CLASS = "Illuminate\\Database\\Eloquent\\Casts\\Attribute"
SCOPE_ATTRIBUTE = "Illuminate\\Database\\Eloquent\\Attributes\\Scope"
NOTIFIABLE_TRAIT = "Illuminate\\Notifications\\Notifiable"
SOFT_DELETES_TRAIT = "Illuminate\\Database\\Eloquent\\SoftDeletes"

_LEGACY_ACCESSOR = re.compile(r"^get(.+)Attribute$")
_CLOSURES = frozenset({"arrow_function", "anonymous_function", "anonymous_function_creation_expression"})
_CALL_CHAIN = frozenset({"member_call_expression", "nullsafe_member_call_expression"})


def normalize_cast_type(cast: str, class_exists: Callable[[str], bool]) -> str:
    """Collapse a declared cast the way Eloquent's ``getCastType`` does."""
    if cast.startswith(("date:", "datetime:")):
        return "custom_datetime"
    if cast.startswith(("immutable_date:", "immutable_datetime:")):
        return "immutable_custom_datetime"
    if cast.startswith("decimal:"):
        return "decimal"
    if class_exists(cast):
        return cast
    return cast.strip().lower()


def _cast_string(value: Any) -> str:
    """A declared cast value as a string specifier.

    ``[AsCollection::class, 'App\\Item']`` becomes ``AsCollection:App\\Item``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        head, *arguments = value
        return f"{head}:{','.join(arguments)}" if arguments else head
    raise ReflectionError.failure("cast", f"unsupported cast value {value!r}")


class PhpModelReflector:
    """Reflection over one model class, built from its source.

    Raises:
        ModelError: NOT_FOUND when the class is not indexed, NOT_INSTANTIABLE
            for abstract classes and non-classes, NOT_A_MODEL when no ancestor
            is an Eloquent model base.
    """

    def __init__(self, class_name: str, index: ClassIndex, parser: PhpParser | None = None) -> None:
        self.class_name = class_name.lstrip("\\")
        self._index = index
        self._parser = parser or PhpParser()
        self._parsed: dict[Path, list[ClassDeclaration]] = {}

        info = self._check_model()
        self.declaration = self._load(info)
        self._chain = self._build_chain()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _check_model(self) -> ClassInfo:
        info = self._index.get(self.class_name)
        if info is None:
            raise ModelError.not_found(self.class_name)
        if info.kind != "class" or info.is_abstract:
            raise ModelError.not_instantiable(self.class_name)
        ancestors = self._index.ancestors(self.class_name)
        if not any(same_class(a, base) for a in ancestors for base in MODEL_BASES):
            raise ModelError.not_a_model(self.class_name)
        return info

    def _load(self, info: ClassInfo) -> ClassDeclaration:
        if info.path not in self._parsed:
            self._parsed[info.path] = extract_declarations(self._parser.parse_file(info.path))
        for declaration in self._parsed[info.path]:
            if same_class(declaration.name, info.name):
                return declaration
        raise ReflectionError.failure("declaration", f"{info.name} is no longer in {info.path}")

    def _build_chain(self) -> list[ClassDeclaration]:
        """The class, its traits, then each indexed parent with its traits.

        Earlier entries win when members conflict, which is PHP's order.
        """
        chain: list[ClassDeclaration] = []
        seen: set[str] = set()

        def visit(declaration: ClassDeclaration) -> None:
            seen.add(declaration.name.lower())
            chain.append(declaration)
            for trait in declaration.traits:
                info = self._index.get(trait)
                if info is None or info.kind != "trait" or trait.lower() in seen:
                    continue
                loaded = self._try_load(info)
                if loaded is not None:
                    visit(loaded)

        current: ClassDeclaration | None = self.declaration
        while current is not None:
            visit(current)
            parent = self._index.get(current.parent) if current.parent else None
            if parent is None or parent.kind != "class" or parent.name.lower() in seen:
                break
            current = self._try_load(parent)
        return chain

    def _try_load(self, info: ClassInfo) -> ClassDeclaration | None:
        try:
            return self._load(info)
        except (SourceError, ReflectionError) as e:
            log.debug("ancestor_load_failed", model=self.class_name, ancestor=info.name, error=e.message)
            return None

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    @cached_property
    def methods(self) -> list[MethodDeclaration]:
        """Every visible method, overridden ones removed, in declaration order."""
        found: dict[str, MethodDeclaration] = {}
        for declaration in self._chain:
            for method in declaration.methods:
                found.setdefault(method.name.lower(), method)
        return list(found.values())

    @cached_property
    def traits(self) -> list[str]:
        """Traits used anywhere in the chain, indexed or not."""
        found: list[str] = []
        for declaration in self._chain:
            found.extend(trait for trait in declaration.traits if trait not in found)
        return found

    def find_method(self, name: str) -> MethodDeclaration | None:
        lowered = name.lower()
        return next((m for m in self.methods if m.name.lower() == lowered), None)

    def property_value(self, name: str, default: Any = None) -> Any:
        """Default value of the nearest declaration of a property.

        Missing, valueless or unevaluable properties yield ``default``.
        """
        for declaration in self._chain:
            if name not in declaration.properties:
                continue
            node = declaration.properties[name]
            if node is None:
                return default
            try:
                value = declaration.evaluator.evaluate(node)
            except ReflectionError as e:
                log.debug("property_probe_failed", model=self.class_name, property=name, error=e.message)
                return default
            return default if value is None else value
        return default

    # ------------------------------------------------------------------
    # Table and connection
    # ------------------------------------------------------------------

    @property
    def short_name(self) -> str:
        return self.declaration.short_name

    @property
    def table(self) -> str:
        table = self.property_value("table")
        if isinstance(table, str) and table:
            return table
        return table_name_for(self.class_name)

    @property
    def connection(self) -> str | None:
        connection = self.property_value("connection")
        return connection if isinstance(connection, str) and connection else None

    # ------------------------------------------------------------------
    # Casts
    # ------------------------------------------------------------------

    def get_casts(self) -> dict[str, str]:
        casts: dict[str, str] = {}
        if self.property_value("incrementing", True):
            key_name = self.property_value("primaryKey", "id")
            casts[str(key_name)] = str(self.property_value("keyType", "int"))

        declared = self._declared_casts()
        casts.update(declared)
        if any(same_class(t, SOFT_DELETES_TRAIT) for t in self.traits) and "deleted_at" not in declared:
            casts["deleted_at"] = "datetime"

        return {
            attribute: normalize_cast_type(cast, self._index.class_exists)
            for attribute, cast in casts.items()
        }

    def _declared_casts(self) -> dict[str, str]:
        """``$casts`` merged with the ``casts()`` method, the method winning."""
        casts: dict[str, str] = {}

        for declaration in self._chain:
            if "casts" in declaration.properties:
                node = declaration.properties["casts"]
                if node is not None:
                    casts.update(self._evaluate_casts(declaration, node, "$casts"))
                break

        method = self.find_method("casts")
        if method is not None:
            node = method.returned_expression()
            if node is not None:
                casts.update(self._evaluate_casts(method.owner, node, "casts()"))
        return casts

    def _evaluate_casts(
        self, owner: ClassDeclaration, node: tree_sitter.Node, probe: str
    ) -> dict[str, str]:
        try:
            value = owner.evaluator.evaluate(node)
            if value == []:
                return {}
            if not isinstance(value, dict):
                raise ReflectionError.failure(probe, "not an array of casts")
            return {str(attribute): _cast_string(cast) for attribute, cast in value.items()}
        except ReflectionError as e:
            log.debug("cast_probe_failed", model=self.class_name, probe=probe, error=e.message)
            return {}

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    def get_relations(self) -> list[RelationDescriptor]:
        relations: list[RelationDescriptor] = []
        for method in self.methods:
            declared = self._declared_class(method.return_type, method.owner)
            if declared is None or not any(same_class(declared, c) for c in RELATION_CLASSES):
                continue
            try:
                relation = self._analyze_relation(method)
            except ReflectionError as e:
                log.debug("relation_probe_failed", model=self.class_name, method=method.name, error=e.message)
                continue
            if relation is not None:
                relations.append(relation)
        return relations

    def _analyze_relation(self, method: MethodDeclaration) -> RelationDescriptor | None:
        call = _relation_call(method.returned_expression())
        if call is None:
            return None

        _, kind = RELATION_METHODS[node_text(call.child_by_field_name("name")).lower()]
        positional, named = split_arguments(call.child_by_field_name("arguments"))
        evaluator = method.owner.evaluator

        if kind is RelationKind.POLYMORPHIC:
            name_node = pick_argument(positional, named, 0, "name")
            id_node = pick_argument(positional, named, 2, "id")
            name = method.name if is_null_literal(name_node) else evaluator.evaluate(name_node)
            morph_id = None if is_null_literal(id_node) else evaluator.evaluate(id_node)
            if not morph_id:
                morph_id = f"{snake(str(name))}_id"
            return RelationDescriptor(method.name, kind, ELOQUENT_MODEL, str(morph_id))

        related_node = pick_argument(positional, named, 0, "related")
        if related_node is None:
            raise ReflectionError.failure(f"relation {method.name}", "no related model given")
        related = evaluator.evaluate(related_node)
        if not isinstance(related, str) or not related:
            raise ReflectionError.failure(f"relation {method.name}", "related model is not a class name")
        related = related.lstrip("\\")

        foreign_key: str | None = None
        if _call_name_is(call, "belongsTo"):
            key_node = pick_argument(positional, named, 1, "foreignKey")
            if not is_null_literal(key_node):
                foreign_key = str(evaluator.evaluate(key_node))
            else:
                foreign_key = f"{snake(method.name)}_{self._key_name_of(related)}"

        return RelationDescriptor(method.name, kind, "\\" + related, foreign_key)

    def _key_name_of(self, class_name: str) -> str:
        info = self._index.get(class_name)
        if info is None or info.kind != "class":
            return "id"
        declaration = self._try_load(info)
        if declaration is None or "primaryKey" not in declaration.properties:
            return "id"
        node = declaration.properties["primaryKey"]
        try:
            value = declaration.evaluator.evaluate(node) if node is not None else None
        except ReflectionError:
            return "id"
        return value if isinstance(value, str) and value else "id"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_accessors(self) -> list[AccessorDescriptor]:
        """Legacy ``get<Name>Attribute`` accessors first, then Attribute builders."""
        accessors: list[AccessorDescriptor] = []
        for method in self.methods:
            match = _LEGACY_ACCESSOR.match(method.name)
            if match and match.group(1) != "UseFactory":
                accessors.append(
                    AccessorDescriptor(lcfirst(match.group(1)), MIXED, readable=True, writable=False)
                )

        for method in self.methods:
            declared = self._declared_class(method.return_type, method.owner)
            if declared is None or not same_class(declared, ATTRIBUTE_CLASS):
                continue
            try:
                accessors.append(self._analyze_attribute(method))
            except ReflectionError as e:
                log.debug("accessor_probe_failed", model=self.class_name, method=method.name, error=e.message)
        return accessors

    def _analyze_attribute(self, method: MethodDeclaration) -> AccessorDescriptor:
        expr = method.returned_expression()
        while expr is not None and expr.type in _CALL_CHAIN:
            expr = expr.child_by_field_name("object")
        if expr is None:
            raise ReflectionError.failure(f"accessor {method.name}", "no returned Attribute")

        owner = method.owner
        getter: tree_sitter.Node | None
        setter: tree_sitter.Node | None
        if expr.type == "scoped_call_expression":
            scope = owner.resolve_class(node_text(expr.child_by_field_name("scope")))
            if not same_class(scope, ATTRIBUTE_CLASS):
                raise ReflectionError.unsupported_expression(expr.type, node_text(expr))
            builder = node_text(expr.child_by_field_name("name")).lower()
            positional, named = split_arguments(expr.child_by_field_name("arguments"))
            if builder == "make":
                getter = pick_argument(positional, named, 0, "get")
                setter = pick_argument(positional, named, 1, "set")
            elif builder == "get":
                getter, setter = pick_argument(positional, named, 0, "get"), None
            elif builder == "set":
                getter, setter = None, pick_argument(positional, named, 0, "set")
            else:
                raise ReflectionError.unsupported_expression(expr.type, node_text(expr))
        elif expr.type == "object_creation_expression":
            written = [c for c in expr.named_children if c.type in ("name", "qualified_name")]
            if not written or not same_class(owner.resolve_class(node_text(written[0])), ATTRIBUTE_CLASS):
                raise ReflectionError.unsupported_expression(expr.type, node_text(expr))
            arguments = next((c for c in expr.named_children if c.type == "arguments"), None)
            positional, named = split_arguments(arguments)
            getter = pick_argument(positional, named, 0, "get")
            setter = pick_argument(positional, named, 1, "set")
        else:
            raise ReflectionError.unsupported_expression(expr.type, node_text(expr))

        readable = not is_null_literal(getter)
        writable = not is_null_literal(setter)
        declared_type = self._callback_type(getter, owner) if readable else MIXED
        return AccessorDescriptor(method.name, declared_type, readable=readable, writable=writable)

    def _callback_type(self, callback: tree_sitter.Node | None, owner: ClassDeclaration) -> TypeExpression:
        if callback is None or callback.type not in _CLOSURES:
            return MIXED
        return_type = callback.child_by_field_name("return_type")
        if return_type is None:
            return MIXED
        return _type_expression(return_type, owner)

    # ------------------------------------------------------------------
    # Scopes and traits
    # ------------------------------------------------------------------

    def get_scopes(self) -> list[ScopeDescriptor]:
        scopes: list[ScopeDescriptor] = []
        names: set[str] = set()

        def add(name: str) -> None:
            if name not in names:
                names.add(name)
                scopes.append(ScopeDescriptor(name, self.short_name))

        for method in self.methods:
            if method.name.startswith("scope") and len(method.name) > len("scope"):
                add(lcfirst(method.name[len("scope") :]))
            if any(same_class(attribute, SCOPE_ATTRIBUTE) for attribute in method.attributes):
                add(method.name)
        return scopes

    def uses_notifiable(self) -> bool:
        return any(same_class(trait, NOTIFIABLE_TRAIT) for trait in self.traits)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _declared_class(type_node: tree_sitter.Node | None, owner: ClassDeclaration) -> str | None:
        """Class named by a return type, looking through ``?T``."""
        if type_node is None:
            return None
        type_node = _unwrap_single_union(type_node)
        if type_node.type == "optional_type" and type_node.named_children:
            type_node = type_node.named_children[0]
        if type_node.type != "named_type":
            return None
        return owner.resolve_class(node_text(type_node))


def _unwrap_single_union(node: tree_sitter.Node) -> tree_sitter.Node:
    # Older grammars wrap every declared type in a one-member union_type
    if node.type == "union_type" and len(node.named_children) == 1:
        return node.named_children[0]
    return node


def _call_name_is(call: tree_sitter.Node, name: str) -> bool:
    return node_text(call.child_by_field_name("name")).lower() == name.lower()


def _relation_call(expr: tree_sitter.Node | None) -> tree_sitter.Node | None:
    """The ``$this-><relation>(...)`` call at the root of a call chain."""
    node = expr
    while node is not None and node.type in _CALL_CHAIN:
        target = node.child_by_field_name("object")
        if target is not None and target.type == "variable_name" and node_text(target) == "$this":
            name = node_text(node.child_by_field_name("name")).lower()
            return node if name in RELATION_METHODS else None
        node = target
    return None


def _named_type(node: tree_sitter.Node, owner: ClassDeclaration) -> TypeExpression:
    text = node_text(node).strip()
    lowered = text.lower()
    if lowered in BUILTIN_TYPES:
        return NamedType(lowered)
    if lowered in ("self", "static"):
        return NamedType(lowered)
    return NamedType("\\" + owner.resolve_class(text))


def _type_expression(node: tree_sitter.Node, owner: ClassDeclaration) -> TypeExpression:
    """Declared return type of a get callback.

    ``?T`` and ``T|null`` keep their nullability; other unions and
    intersections are not single named types and document as ``mixed``.
    """
    node = _unwrap_single_union(node)
    if node.type == "optional_type" and node.named_children:
        return nullable(_named_type(node.named_children[0], owner))
    if node.type in ("named_type", "primitive_type"):
        return _named_type(node, owner)
    if node.type == "union_type":
        members = node.named_children
        others = [m for m in members if node_text(m).lower() != "null"]
        if len(members) == 2 and len(others) == 1 and others[0].type in ("named_type", "primitive_type"):
            return nullable(_named_type(others[0], owner))
    return MIXED
