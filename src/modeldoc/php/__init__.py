"""Static PHP source analysis on tree-sitter."""

from modeldoc.php.classes import ClassIndex, ClassInfo, ModelFinder
from modeldoc.php.declarations import ClassDeclaration, MethodDeclaration, extract_declarations
from modeldoc.php.names import NameContext
from modeldoc.php.parser import ParsedSource, PhpParser
from modeldoc.php.values import ValueEvaluator

__all__ = [
    "ClassDeclaration",
    "ClassIndex",
    "ClassInfo",
    "MethodDeclaration",
    "ModelFinder",
    "NameContext",
    "ParsedSource",
    "PhpParser",
    "ValueEvaluator",
    "extract_declarations",
]
