"""Docblock rewriting for PHP source files."""

from modeldoc.rewrite.ops import SourceRewriter, find_declaration, locate_comment

__all__ = ["SourceRewriter", "find_declaration", "locate_comment"]
