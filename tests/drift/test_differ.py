"""Tests for the docblock line differ.

Covers:
- split_block() normalization
- longest_common_subsequence()
- diff_lines() edit scripts
- is_up_to_date() and count_changes()
"""

from modeldoc.drift.ops import (
    EditKind,
    EditOperation,
    count_changes,
    diff_lines,
    is_up_to_date,
    longest_common_subsequence,
    split_block,
)

CURRENT = """/**
 * @property int $id
 * @property string $name
 */"""

EXPECTED = """/**
 * @property int $id
 * @property ?string $name
 */"""


def _apply(ops: list[EditOperation]) -> list[str]:
    return [op.line for op in ops if op.kind is not EditKind.DELETE]


def _original(ops: list[EditOperation]) -> list[str]:
    return [op.line for op in ops if op.kind is not EditKind.INSERT]


class TestSplitBlock:
    def test_none_and_empty(self) -> None:
        assert split_block(None) == []
        assert split_block("") == []

    def test_strips_surrounding_whitespace(self) -> None:
        assert split_block("\n  /**\n */\n\n") == ["/**", " */"]

    def test_crlf(self) -> None:
        assert split_block("/**\r\n * @property int $id\r\n */") == [
            "/**",
            " * @property int $id",
            " */",
        ]


class TestLongestCommonSubsequence:
    def test_identical(self) -> None:
        assert longest_common_subsequence(["a", "b"], ["a", "b"]) == ["a", "b"]

    def test_disjoint(self) -> None:
        assert longest_common_subsequence(["a"], ["b"]) == []

    def test_interleaved(self) -> None:
        result = longest_common_subsequence(["a", "x", "b", "c"], ["a", "b", "y", "c"])

        assert result == ["a", "b", "c"]

    def test_empty_side(self) -> None:
        assert longest_common_subsequence([], ["a"]) == []


class TestDiffLines:
    """Edit script tests."""

    def test_given_one_changed_line_when_diffed_then_one_delete_one_insert(self) -> None:
        # Given
        current = split_block(CURRENT)
        expected = split_block(EXPECTED)

        # When
        ops = diff_lines(current, expected)

        # Then
        assert [op.kind for op in ops] == [
            EditKind.EQUAL,
            EditKind.EQUAL,
            EditKind.DELETE,
            EditKind.INSERT,
            EditKind.EQUAL,
        ]
        assert ops[2].line == " * @property string $name"
        assert ops[3].line == " * @property ?string $name"
        assert count_changes(ops) == (1, 1)

    def test_identical_blocks_are_all_equal(self) -> None:
        lines = split_block(EXPECTED)

        ops = diff_lines(lines, lines)

        assert all(op.kind is EditKind.EQUAL for op in ops)
        assert count_changes(ops) == (0, 0)

    def test_missing_block_is_all_inserts(self) -> None:
        expected = split_block(EXPECTED)

        ops = diff_lines([], expected)

        assert [op.kind for op in ops] == [EditKind.INSERT] * len(expected)
        assert _apply(ops) == expected

    def test_removed_block_is_all_deletes(self) -> None:
        current = split_block(CURRENT)

        ops = diff_lines(current, [])

        assert [op.kind for op in ops] == [EditKind.DELETE] * len(current)

    def test_given_reordered_and_extra_lines_when_applied_then_reproduces_both_sides(self) -> None:
        """The script rebuilds the expected block and the current one."""
        # Given
        current = ["/**", " * @property int $id", " * @property string $legacy", " * @property string $email", " */"]
        expected = [
            "/**",
            " * @property int $id",
            " * @property string $email",
            " * @property-read string $display_name",
            " *",
            " * @method static Builder<static>|User active()",
            " */",
        ]

        # When
        ops = diff_lines(current, expected)

        # Then
        assert _apply(ops) == expected
        assert _original(ops) == current
        assert count_changes(ops) == (1, 3)

    def test_trailing_insertions_after_last_anchor(self) -> None:
        current = ["a", "b"]
        expected = ["a", "b", "c", "d"]

        ops = diff_lines(current, expected)

        assert ops[-2:] == [
            EditOperation(EditKind.INSERT, "c"),
            EditOperation(EditKind.INSERT, "d"),
        ]


class TestIsUpToDate:
    def test_whitespace_around_block_is_ignored(self) -> None:
        assert is_up_to_date("\n" + EXPECTED + "\n", EXPECTED)

    def test_changed_line_is_outdated(self) -> None:
        assert not is_up_to_date(CURRENT, EXPECTED)

    def test_missing_comment_is_outdated(self) -> None:
        assert not is_up_to_date(None, EXPECTED)

    def test_line_endings_do_not_matter(self) -> None:
        assert is_up_to_date(EXPECTED.replace("\n", "\r\n"), EXPECTED)
