"""Wording helpers for CLI summaries."""

from __future__ import annotations


def pluralize(count: int, noun: str, plural: str | None = None) -> str:
    """``1 model`` / ``3 models``; pass ``plural`` for irregular nouns."""
    word = noun if count == 1 else (plural or f"{noun}s")
    return f"{count} {word}"
