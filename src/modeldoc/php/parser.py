"""tree-sitter PHP parsing.

One ``PhpParser`` per thread: tree-sitter parsers carry mutable state and are
not shared between workers. Trees and nodes are read-only once produced.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import tree_sitter
import tree_sitter_php

from modeldoc.core.errors import SourceError

PHP_LANGUAGE = tree_sitter.Language(tree_sitter_php.language_php())


def node_text(node: tree_sitter.Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def walk(node: tree_sitter.Node, *, skip: frozenset[str] = frozenset()) -> Iterator[tree_sitter.Node]:
    """Pre-order traversal. Children of node types in ``skip`` are not entered."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if current is not node and current.type in skip:
            continue
        stack.extend(reversed(current.children))


@dataclass
class ParsedSource:
    """A parsed PHP file: original bytes plus the concrete syntax tree."""

    path: Path
    source: bytes
    tree: tree_sitter.Tree

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        return self.tree.root_node.has_error

    def first_error_line(self) -> int | None:
        """1-based line of the first ERROR or missing node, if any."""
        for node in walk(self.tree.root_node):
            if node.type == "ERROR" or node.is_missing:
                return node.start_point[0] + 1
        return None


class PhpParser:
    """Thin wrapper around a tree-sitter parser bound to the PHP grammar.

    Usage::

        parser = PhpParser()
        parsed = parser.parse_file(Path("app/Models/User.php"))
        if parsed.has_errors:
            ...
    """

    def __init__(self) -> None:
        self._parser = tree_sitter.Parser(PHP_LANGUAGE)

    def parse(self, source: bytes, path: Path | None = None) -> ParsedSource:
        tree = self._parser.parse(source)
        return ParsedSource(path=path or Path("<memory>"), source=source, tree=tree)

    def parse_file(self, path: Path, *, strict: bool = False) -> ParsedSource:
        """Read and parse a file.

        Raises:
            SourceError: READ_ERROR when the file cannot be read; PARSE_ERROR
                when ``strict`` is set and the file has syntax errors.
        """
        try:
            source = path.read_bytes()
        except OSError as e:
            raise SourceError.read_error(str(path), str(e)) from e

        parsed = self.parse(source, path)
        if strict and parsed.has_errors:
            raise SourceError.parse_error(str(path), parsed.first_error_line())
        return parsed
