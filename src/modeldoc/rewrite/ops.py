"""Format-preserving docblock rewriting.

The file is parsed once with tree-sitter. The target declaration's leading
doc comment (or an insertion point before it) is located by byte span and
replaced with a single splice, so every byte outside that span is written
back exactly as it was read.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import tree_sitter

from modeldoc.core.errors import SourceError
from modeldoc.core.logging import get_logger
from modeldoc.php.declarations import ClassDeclaration, extract_declarations
from modeldoc.php.names import same_class
from modeldoc.php.parser import ParsedSource, PhpParser, node_text

log = get_logger("rewrite.ops")


@dataclass(frozen=True, slots=True)
class CommentSpan:
    """Where the new comment goes.

    ``start == end`` means insertion; otherwise the existing doc comment
    occupying ``[start, end)`` is replaced.
    """

    start: int
    end: int
    indent: bytes
    existing: str | None = None

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


def detect_newline(source: bytes) -> bytes:
    return b"\r\n" if b"\r\n" in source else b"\n"


def find_declaration(parsed: ParsedSource, class_name: str | None) -> ClassDeclaration | None:
    """First declaration matching ``class_name``; the first one when None.

    A name without a namespace separator matches on the short name.
    """
    for declaration in extract_declarations(parsed):
        if class_name is None:
            return declaration
        if "\\" in class_name.lstrip("\\"):
            if same_class(declaration.name, class_name):
                return declaration
        elif declaration.short_name.lower() == class_name.lower():
            return declaration
    return None


def _line_indent(source: bytes, offset: int) -> bytes:
    line_start = source.rfind(b"\n", 0, offset) + 1
    prefix = source[line_start:offset]
    return prefix if prefix.strip() == b"" else b""


def locate_comment(parsed: ParsedSource, node: tree_sitter.Node) -> CommentSpan:
    """Doc comment attached to a declaration node.

    Walks back over the comments directly preceding the declaration and picks
    the nearest ``/**`` one, as PHP's reflection does.
    """
    indent = _line_indent(parsed.source, node.start_byte)
    sibling = node.prev_sibling
    while sibling is not None and sibling.type == "comment":
        text = node_text(sibling)
        if text.startswith("/**"):
            return CommentSpan(sibling.start_byte, sibling.end_byte, indent, existing=text)
        sibling = sibling.prev_sibling
    return CommentSpan(node.start_byte, node.start_byte, indent)


def format_comment(comment: str, newline: bytes, indent: bytes) -> bytes:
    """Encode a comment using the file's newline style and indentation."""
    lines = comment.strip().splitlines()
    encoded = [line.encode("utf-8") for line in lines]
    return (newline + indent).join(encoded)


def unindent_comment(comment: str, indent: bytes) -> str:
    """Inverse of :func:`format_comment`: drop the declaration's indentation.

    Lines are rejoined with ``\n`` whatever the file uses.
    """
    prefix = indent.decode("utf-8")
    first, *rest = comment.splitlines() or [""]
    return "\n".join([first, *(line.removeprefix(prefix) for line in rest)])


class SourceRewriter:
    """Reads and replaces the doc comment of a class in a PHP file.

    Usage::

        rewriter = SourceRewriter()
        rewriter.update_declaration_comment(path, block, "App\\Models\\User")
    """

    def __init__(self, parser: PhpParser | None = None) -> None:
        self._parser = parser or PhpParser()

    def _parse(self, source: bytes, path: Path) -> ParsedSource:
        parsed = self._parser.parse(source, path)
        if parsed.has_errors:
            raise SourceError.parse_error(str(path), parsed.first_error_line())
        return parsed

    def _read(self, path: Path) -> ParsedSource:
        try:
            source = path.read_bytes()
        except OSError as e:
            raise SourceError.read_error(str(path), str(e)) from e
        return self._parse(source, path)

    def rewrite_source(
        self,
        source: bytes,
        comment: str,
        class_name: str | None = None,
        *,
        path: Path | None = None,
    ) -> bytes:
        """Return ``source`` with the class's doc comment set to ``comment``.

        Source without a matching class comes back unchanged.

        Raises:
            SourceError: PARSE_ERROR when the source has syntax errors.
        """
        parsed = self._parse(source, path or Path("<memory>"))
        declaration = find_declaration(parsed, class_name)
        if declaration is None:
            log.debug("class_not_in_file", path=str(parsed.path), class_name=class_name)
            return source

        span = locate_comment(parsed, declaration.node)
        newline = detect_newline(source)
        replacement = format_comment(comment, newline, span.indent)
        if span.is_insertion:
            replacement += newline + span.indent
        return source[: span.start] + replacement + source[span.end :]

    def update_declaration_comment(
        self, path: Path, comment: str, class_name: str | None = None
    ) -> None:
        """Rewrite ``path`` in place with the new doc comment.

        Raises:
            SourceError: READ_ERROR when the file cannot be read or written,
                PARSE_ERROR when it has syntax errors.
        """
        try:
            original = path.read_bytes()
        except OSError as e:
            raise SourceError.read_error(str(path), str(e)) from e

        updated = self.rewrite_source(original, comment, class_name, path=path)
        if updated == original:
            log.debug("comment_unchanged", path=str(path))
            return

        try:
            path.write_bytes(updated)
        except OSError as e:
            raise SourceError.read_error(str(path), str(e)) from e
        log.debug("comment_written", path=str(path), bytes=len(updated))

    def read_declaration_comment(self, path: Path, class_name: str | None = None) -> str | None:
        """Current doc comment of the class, or None when it has none."""
        parsed = self._read(path)
        declaration = find_declaration(parsed, class_name)
        if declaration is None:
            return None
        span = locate_comment(parsed, declaration.node)
        if span.existing is None:
            return None
        return unindent_comment(span.existing, span.indent)
