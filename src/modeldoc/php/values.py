"""Static evaluation of constant PHP expressions.

Covers what model classes put in property defaults and ``casts()`` arrays:
scalars, ``X::class``, string concatenation, arrays and the cast helper
calls (``AsCollection::using(X::class)`` and friends). Anything else raises
``ReflectionError.unsupported_expression``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import tree_sitter

from modeldoc.annotate.cast_types import AS_COLLECTION, AS_ENUM_ARRAY_OBJECT, AS_ENUM_COLLECTION
from modeldoc.core.errors import ReflectionError
from modeldoc.php.names import same_class
from modeldoc.php.parser import node_text

ClassResolver = Callable[[str], str]

# Cast class -> static helper that builds a "<Cast>:<arguments>" specifier
CAST_HELPERS: dict[str, str] = {
    AS_COLLECTION: "using",
    AS_ENUM_COLLECTION: "of",
    AS_ENUM_ARRAY_OBJECT: "of",
}

_SINGLE_QUOTED_ESCAPES = {"\\\\": "\\", "\\'": "'"}
_DOUBLE_QUOTED_ESCAPES = {
    "\\\\": "\\",
    '\\"': '"',
    "\\$": "$",
    "\\n": "\n",
    "\\t": "\t",
    "\\r": "\r",
    "\\v": "\v",
    "\\e": "\x1b",
    "\\f": "\f",
    "\\0": "\0",
}
_STRING_PARTS = frozenset({"string_content", "string_value", "escape_sequence"})


def _unsupported(node: tree_sitter.Node) -> ReflectionError:
    return ReflectionError.unsupported_expression(node.type, node_text(node))


def _unescape(body: str, escapes: dict[str, str]) -> str:
    out: list[str] = []
    i = 0
    while i < len(body):
        pair = body[i : i + 2]
        if pair in escapes:
            out.append(escapes[pair])
            i += 2
        else:
            out.append(body[i])
            i += 1
    return "".join(out)


def string_value(node: tree_sitter.Node) -> str:
    """Value of a quoted string literal without interpolation."""
    text = node_text(node)
    if node.type == "encapsed_string":
        if any(child.is_named and child.type not in _STRING_PARTS for child in node.children):
            raise _unsupported(node)
        return _unescape(text[1:-1], _DOUBLE_QUOTED_ESCAPES)
    # 'string' nodes may still carry a b'' prefix
    quote = text.find("'")
    return _unescape(text[quote + 1 : -1], _SINGLE_QUOTED_ESCAPES)


def _integer(text: str) -> int:
    text = text.replace("_", "").lower()
    if len(text) > 1 and text.startswith("0") and text[1].isdigit():
        return int(text, 8)
    return int(text, 0)


def split_arguments(
    arguments: tree_sitter.Node | None,
) -> tuple[list[tree_sitter.Node], dict[str, tree_sitter.Node]]:
    """Positional and named argument expressions of an ``arguments`` node."""
    positional: list[tree_sitter.Node] = []
    named: dict[str, tree_sitter.Node] = {}
    if arguments is None:
        return positional, named

    for argument in arguments.named_children:
        if argument.type != "argument":
            continue
        name_node = argument.child_by_field_name("name")
        values = [child for child in argument.named_children if child != name_node]
        if not values or any(child.type == "variadic_unpacking" for child in argument.children):
            raise _unsupported(argument)
        if name_node is not None:
            named[node_text(name_node)] = values[-1]
        else:
            positional.append(values[-1])
    return positional, named


def pick_argument(
    positional: list[tree_sitter.Node],
    named: dict[str, tree_sitter.Node],
    index: int,
    name: str,
) -> tree_sitter.Node | None:
    if name in named:
        return named[name]
    if index < len(positional):
        return positional[index]
    return None


def is_null_literal(node: tree_sitter.Node | None) -> bool:
    if node is None:
        return True
    return node.type == "null" or (node.type == "name" and node_text(node).lower() == "null")


class ValueEvaluator:
    """Evaluates constant expressions relative to one class declaration.

    Args:
        resolve_class: Maps a class reference as written (``User``,
            ``\\App\\User``, ``self``) to its fully qualified name.
    """

    def __init__(self, resolve_class: ClassResolver) -> None:
        self._resolve_class = resolve_class

    def evaluate(self, node: tree_sitter.Node) -> Any:
        handler = getattr(self, f"_eval_{node.type}", None)
        if handler is None:
            raise _unsupported(node)
        return handler(node)

    def _eval_string(self, node: tree_sitter.Node) -> str:
        return string_value(node)

    def _eval_encapsed_string(self, node: tree_sitter.Node) -> str:
        return string_value(node)

    def _eval_integer(self, node: tree_sitter.Node) -> int:
        return _integer(node_text(node))

    def _eval_float(self, node: tree_sitter.Node) -> float:
        return float(node_text(node).replace("_", ""))

    def _eval_boolean(self, node: tree_sitter.Node) -> bool:
        return node_text(node).lower() == "true"

    def _eval_null(self, node: tree_sitter.Node) -> None:
        return None

    def _eval_name(self, node: tree_sitter.Node) -> Any:
        constants = {"true": True, "false": False, "null": None}
        text = node_text(node).lower()
        if text not in constants:
            raise _unsupported(node)
        return constants[text]

    def _eval_parenthesized_expression(self, node: tree_sitter.Node) -> Any:
        return self.evaluate(node.named_children[0])

    def _eval_unary_op_expression(self, node: tree_sitter.Node) -> Any:
        operand = node.named_children[-1]
        value = self.evaluate(operand)
        operator = node_text(node)[: operand.start_byte - node.start_byte].strip()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if operator == "-":
                return -value
            if operator == "+":
                return value
        if operator == "!":
            return not value
        raise _unsupported(node)

    def _eval_binary_expression(self, node: tree_sitter.Node) -> str:
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        operator = node.child_by_field_name("operator")
        if left is None or right is None or node_text(operator) != ".":
            raise _unsupported(node)
        return f"{_as_php_string(self.evaluate(left))}{_as_php_string(self.evaluate(right))}"

    def _eval_class_constant_access_expression(self, node: tree_sitter.Node) -> str:
        scope, member = node.named_children[0], node.named_children[-1]
        if node_text(member).lower() != "class":
            raise _unsupported(node)
        return self._resolve_class(node_text(scope))

    def _eval_array_creation_expression(self, node: tree_sitter.Node) -> list[Any] | dict[Any, Any]:
        result: dict[Any, Any] = {}
        next_index = 0
        keyed = False
        for element in node.named_children:
            if element.type != "array_element_initializer":
                continue
            if any(child.type in ("...", "variadic_unpacking") for child in element.children):
                raise _unsupported(element)
            parts = element.named_children
            if len(parts) == 2:
                key = self.evaluate(parts[0])
                keyed = True
                if isinstance(key, int):
                    next_index = max(next_index, key + 1)
            elif len(parts) == 1:
                key = next_index
                next_index += 1
            else:
                raise _unsupported(element)
            result[key] = self.evaluate(parts[-1])

        if not keyed:
            return list(result.values())
        return result

    def _eval_scoped_call_expression(self, node: tree_sitter.Node) -> str:
        scope = self._resolve_class(node_text(node.child_by_field_name("scope")))
        method = node_text(node.child_by_field_name("name")).lower()
        for cast_class, helper in CAST_HELPERS.items():
            if same_class(scope, cast_class) and method == helper:
                positional, named = split_arguments(node.child_by_field_name("arguments"))
                values = [self.evaluate(arg) for arg in [*positional, *named.values()]]
                args = ",".join(_as_php_string(value) for value in values if value is not None)
                return f"{cast_class}:{args}"
        raise _unsupported(node)


def _as_php_string(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else ""
    if value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ReflectionError.failure("string conversion", f"cannot convert {type(value).__name__}")
