"""Tests for static evaluation of constant PHP expressions."""

from __future__ import annotations

from typing import Any

import pytest

from modeldoc.annotate.cast_types import AS_COLLECTION, AS_ENUM_COLLECTION
from modeldoc.core.errors import ErrorCode, ReflectionError
from modeldoc.php.declarations import ClassDeclaration, extract_declarations
from modeldoc.php.parser import PhpParser

HEADER = """<?php

namespace App\\Models;

use App\\Enums\\Status;
use Illuminate\\Database\\Eloquent\\Casts\\AsCollection;
use Illuminate\\Database\\Eloquent\\Casts\\AsEnumCollection;

class Demo
{
    protected $value = %s;
}
"""


def _declaration(parser: PhpParser, expression: str) -> ClassDeclaration:
    parsed = parser.parse((HEADER % expression).encode())
    return extract_declarations(parsed)[0]


def _evaluate(parser: PhpParser, expression: str) -> Any:
    declaration = _declaration(parser, expression)
    node = declaration.properties["value"]
    assert node is not None
    return declaration.evaluator.evaluate(node)


class TestScalars:
    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("'users'", "users"),
            ('"users"', "users"),
            ("'it\\'s'", "it's"),
            ('"tab\\there"', "tab\there"),
            ("42", 42),
            ("0x1F", 31),
            ("1_000", 1000),
            ("3.5", 3.5),
            ("-5", -5),
            ("true", True),
            ("FALSE", False),
            ("null", None),
        ],
    )
    def test_literal(self, php_parser: PhpParser, expression: str, expected: Any) -> None:
        assert _evaluate(php_parser, expression) == expected

    def test_concatenation(self, php_parser: PhpParser) -> None:
        assert _evaluate(php_parser, "'user' . '_' . 'id'") == "user_id"

    def test_interpolated_string_is_unsupported(self, php_parser: PhpParser) -> None:
        with pytest.raises(ReflectionError) as exc_info:
            _evaluate(php_parser, '"prefix_{$name}"')

        assert exc_info.value.code is ErrorCode.UNSUPPORTED_EXPRESSION


class TestClassReferences:
    def test_imported_class_constant(self, php_parser: PhpParser) -> None:
        assert _evaluate(php_parser, "Status::class") == "App\\Enums\\Status"

    def test_self_class(self, php_parser: PhpParser) -> None:
        assert _evaluate(php_parser, "self::class") == "App\\Models\\Demo"

    def test_other_constants_unsupported(self, php_parser: PhpParser) -> None:
        with pytest.raises(ReflectionError):
            _evaluate(php_parser, "Status::ACTIVE")


class TestArrays:
    def test_list(self, php_parser: PhpParser) -> None:
        assert _evaluate(php_parser, "['name', 'email']") == ["name", "email"]

    def test_keyed(self, php_parser: PhpParser) -> None:
        result = _evaluate(php_parser, "['is_admin' => 'boolean', 'status' => Status::class]")

        assert result == {"is_admin": "boolean", "status": "App\\Enums\\Status"}

    def test_legacy_array_syntax(self, php_parser: PhpParser) -> None:
        assert _evaluate(php_parser, "array('a' => 1)") == {"a": 1}

    def test_nested(self, php_parser: PhpParser) -> None:
        assert _evaluate(php_parser, "['a' => [1, 2]]") == {"a": [1, 2]}


class TestCastHelpers:
    def test_collection_using(self, php_parser: PhpParser) -> None:
        result = _evaluate(php_parser, "AsCollection::using(Status::class)")

        assert result == f"{AS_COLLECTION}:App\\Enums\\Status"

    def test_enum_collection_of(self, php_parser: PhpParser) -> None:
        result = _evaluate(php_parser, "AsEnumCollection::of(Status::class)")

        assert result == f"{AS_ENUM_COLLECTION}:App\\Enums\\Status"

    def test_unknown_static_call_unsupported(self, php_parser: PhpParser) -> None:
        with pytest.raises(ReflectionError):
            _evaluate(php_parser, "Status::tryFrom('x')")
