"""Docblock drift detection."""

from modeldoc.drift.ops import (
    EditKind,
    EditOperation,
    count_changes,
    diff_lines,
    is_up_to_date,
    longest_common_subsequence,
    split_block,
)

__all__ = [
    "EditKind",
    "EditOperation",
    "count_changes",
    "diff_lines",
    "is_up_to_date",
    "longest_common_subsequence",
    "split_block",
]
