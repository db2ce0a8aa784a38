"""Class-like declarations and their members, read from a parsed PHP file."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path

import tree_sitter

from modeldoc.php.names import RELATIVE_SCOPES, NameContext
from modeldoc.php.parser import ParsedSource, node_text, walk
from modeldoc.php.values import ValueEvaluator

DECLARATION_KINDS: dict[str, str] = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "trait_declaration": "trait",
    "enum_declaration": "enum",
}

# Nested scopes whose return statements belong to someone else
_NESTED_SCOPES = frozenset(
    {
        "anonymous_function",
        "anonymous_function_creation_expression",
        "arrow_function",
        "function_definition",
        "class_declaration",
        "anonymous_class",
    }
)


def _has_modifier(node: tree_sitter.Node, keyword: str) -> bool:
    return any(
        child.type.endswith("modifier") and node_text(child).lower() == keyword
        for child in node.children
    )


def _names_in(node: tree_sitter.Node) -> list[str]:
    return [
        node_text(child)
        for child in node.named_children
        if child.type in ("name", "qualified_name", "relative_name")
    ]


@dataclass
class MethodDeclaration:
    """A method node plus the declaration it was written in."""

    node: tree_sitter.Node
    owner: ClassDeclaration

    @cached_property
    def name(self) -> str:
        return node_text(self.node.child_by_field_name("name"))

    @property
    def is_static(self) -> bool:
        return _has_modifier(self.node, "static")

    @property
    def return_type(self) -> tree_sitter.Node | None:
        return self.node.child_by_field_name("return_type")

    @property
    def body(self) -> tree_sitter.Node | None:
        return self.node.child_by_field_name("body")

    @cached_property
    def attributes(self) -> list[str]:
        """Fully qualified names of the attributes on this method."""
        names: list[str] = []
        for child in self.node.children:
            if child.type != "attribute_list":
                continue
            for attribute in walk(child):
                if attribute.type == "attribute":
                    written = _names_in(attribute)
                    if written:
                        names.append(self.owner.resolve_class(written[0]))
        return names

    def returned_expression(self) -> tree_sitter.Node | None:
        """Expression of the first ``return`` in the body, ignoring closures."""
        if self.body is None:
            return None
        for node in walk(self.body, skip=_NESTED_SCOPES):
            if node.type == "return_statement":
                values = [child for child in node.named_children if child.type != "comment"]
                return values[0] if values else None
        return None


@dataclass
class ClassDeclaration:
    """One class, interface, trait or enum declaration in a parsed file."""

    node: tree_sitter.Node
    parsed: ParsedSource
    names: NameContext
    kind: str

    @cached_property
    def short_name(self) -> str:
        return node_text(self.node.child_by_field_name("name"))

    @cached_property
    def name(self) -> str:
        """Fully qualified name without a leading backslash."""
        if self.names.namespace:
            return f"{self.names.namespace}\\{self.short_name}"
        return self.short_name

    @property
    def path(self) -> Path:
        return self.parsed.path

    @property
    def is_abstract(self) -> bool:
        return _has_modifier(self.node, "abstract")

    @cached_property
    def parent(self) -> str | None:
        if self.kind != "class":
            return None
        for child in self.node.children:
            if child.type == "base_clause":
                written = _names_in(child)
                if written:
                    return self.names.resolve(written[0])
        return None

    @cached_property
    def traits(self) -> list[str]:
        """Traits used directly by this declaration, fully qualified."""
        found: list[str] = []
        for member in self._members():
            if member.type == "use_declaration":
                found.extend(self.names.resolve(name) for name in _names_in(member))
        return found

    @cached_property
    def methods(self) -> list[MethodDeclaration]:
        return [
            MethodDeclaration(node=member, owner=self)
            for member in self._members()
            if member.type == "method_declaration"
        ]

    @cached_property
    def properties(self) -> dict[str, tree_sitter.Node | None]:
        """Property name (without ``$``) -> default value expression."""
        found: dict[str, tree_sitter.Node | None] = {}
        for member in self._members():
            if member.type != "property_declaration":
                continue
            for element in member.named_children:
                if element.type == "property_element":
                    name, value = _property_element(element)
                    if name:
                        found[name] = value
        return found

    @cached_property
    def evaluator(self) -> ValueEvaluator:
        return ValueEvaluator(self.resolve_class)

    def resolve_class(self, written: str) -> str:
        """Resolve a class reference as written inside this declaration."""
        lowered = written.strip().lower()
        if lowered in RELATIVE_SCOPES:
            if lowered == "parent":
                return self.parent or written
            return self.name
        return self.names.resolve(written)

    def _members(self) -> Iterator[tree_sitter.Node]:
        body = self.node.child_by_field_name("body")
        if body is None:
            return iter(())
        return iter(body.named_children)


def _property_element(element: tree_sitter.Node) -> tuple[str, tree_sitter.Node | None]:
    name = ""
    value: tree_sitter.Node | None = None
    seen_equals = False
    for child in element.children:
        if child.type == "variable_name":
            name = node_text(child).lstrip("$")
        elif child.type == "=":
            seen_equals = True
        elif child.type == "property_initializer":
            named = child.named_children
            value = named[0] if named else None
        elif seen_equals and child.is_named and value is None:
            value = child
    return name, value


@dataclass
class _Scope:
    names: NameContext = field(default_factory=NameContext)


def extract_declarations(parsed: ParsedSource) -> list[ClassDeclaration]:
    """All top-level class-like declarations in source order.

    Namespaces (both ``namespace X;`` and braced ``namespace X { }``) and the
    ``use`` imports preceding each declaration are tracked so names resolve
    the way PHP resolves them.
    """
    found: list[ClassDeclaration] = []
    _collect(parsed, parsed.root, _Scope(), found)
    return found


def _collect(
    parsed: ParsedSource,
    container: tree_sitter.Node,
    scope: _Scope,
    found: list[ClassDeclaration],
) -> None:
    for node in container.named_children:
        if node.type == "namespace_definition":
            namespace = node_text(node.child_by_field_name("name")).strip("\\")
            body = node.child_by_field_name("body")
            if body is not None:
                _collect(parsed, body, _Scope(NameContext(namespace=namespace)), found)
            else:
                scope.names = NameContext(namespace=namespace)
        elif node.type == "namespace_use_declaration":
            scope.names.add_use_declaration(node_text(node))
        elif node.type in DECLARATION_KINDS:
            snapshot = NameContext(scope.names.namespace, dict(scope.names.imports))
            found.append(
                ClassDeclaration(
                    node=node,
                    parsed=parsed,
                    names=snapshot,
                    kind=DECLARATION_KINDS[node.type],
                )
            )
