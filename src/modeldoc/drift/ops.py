"""Line diff between a model's current docblock and the generated one.

The edit script comes from a longest-common-subsequence table followed by a
lockstep walk over both line lists and the subsequence. Whether a block is up
to date is decided by normalized line equality alone, never by the script.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum


class EditKind(str, Enum):
    EQUAL = "equal"
    DELETE = "delete"
    INSERT = "insert"


@dataclass(frozen=True, slots=True)
class EditOperation:
    """One line of the edit script."""

    kind: EditKind
    line: str


def split_block(text: str | None) -> list[str]:
    """Split a comment block into lines, dropping surrounding blank lines."""
    if not text:
        return []
    return text.strip().splitlines()


def longest_common_subsequence(a: Sequence[str], b: Sequence[str]) -> list[str]:
    """Classic O(n*m) dynamic programming table, then backtrack."""
    n, m = len(a), len(b)
    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = table[i], table[i + 1]
        for j in range(m - 1, -1, -1):
            if a[i] == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    result: list[str] = []
    i = j = 0
    while i < n and j < m:
        if a[i] == b[j]:
            result.append(a[i])
            i += 1
            j += 1
        elif table[i + 1][j] >= table[i][j + 1]:
            i += 1
        else:
            j += 1
    return result


def diff_lines(current: Sequence[str], expected: Sequence[str]) -> list[EditOperation]:
    """Edit script turning ``current`` into ``expected``.

    Applying the script (keep EQUAL and INSERT lines, drop DELETE lines)
    reproduces ``expected`` exactly.
    """
    common = longest_common_subsequence(current, expected)
    ops: list[EditOperation] = []
    i = j = k = 0

    while i < len(current) or j < len(expected):
        anchor = common[k] if k < len(common) else None
        cur_on_anchor = anchor is not None and i < len(current) and current[i] == anchor
        exp_on_anchor = anchor is not None and j < len(expected) and expected[j] == anchor

        if cur_on_anchor and exp_on_anchor:
            ops.append(EditOperation(EditKind.EQUAL, current[i]))
            i += 1
            j += 1
            k += 1
        elif exp_on_anchor:
            if i < len(current):
                ops.append(EditOperation(EditKind.DELETE, current[i]))
                i += 1
            else:
                ops.append(EditOperation(EditKind.INSERT, expected[j]))
                j += 1
        elif cur_on_anchor:
            ops.append(EditOperation(EditKind.INSERT, expected[j]))
            j += 1
        else:
            if i < len(current):
                ops.append(EditOperation(EditKind.DELETE, current[i]))
                i += 1
            if j < len(expected):
                ops.append(EditOperation(EditKind.INSERT, expected[j]))
                j += 1

    return ops


def is_up_to_date(current_text: str | None, expected_text: str) -> bool:
    return split_block(current_text) == split_block(expected_text)


def count_changes(ops: Sequence[EditOperation]) -> tuple[int, int]:
    """(deletions, insertions) in an edit script."""
    deletions = sum(1 for op in ops if op.kind is EditKind.DELETE)
    insertions = sum(1 for op in ops if op.kind is EditKind.INSERT)
    return deletions, insertions
