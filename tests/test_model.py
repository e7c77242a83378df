"""Tests for the line store, its render/highlight cache and cursor editing."""

import pytest

from sedit.model import CursorPosition, TextModel
from sedit.render import render_text
from sedit.syntax import C_PROFILE, Highlight, highlight_line

C = Highlight.COMMENT
N = Highlight.NORMAL


def assert_cache_consistent(model):
    """Every row's index, render and tags agree with its text and predecessor."""
    in_comment = False
    for i, row in enumerate(model.rows):
        assert row.index == i
        assert row.render == render_text(row.chars)
        assert len(row.render) == len(row.tags)
        tags, ends = highlight_line(model.syntax, row.render, in_comment)
        assert row.tags == tags
        assert row.open_comment == ends
        in_comment = ends


class TestLineStore:

    def test_seed_lines_not_dirty(self):
        model = TextModel(["a", "b"])
        assert model.lines == ["a", "b"]
        assert model.num_lines == 2
        assert model.dirty == 0

    def test_insert_line(self):
        model = TextModel(["a", "c"])
        assert model.insert_line(1, "b")
        assert model.lines == ["a", "b", "c"]
        assert [row.index for row in model.rows] == [0, 1, 2]
        assert model.dirty == 1

    def test_insert_line_at_end(self):
        model = TextModel(["a"])
        assert model.insert_line(1, "b")
        assert model.lines == ["a", "b"]

    @pytest.mark.parametrize("at", [-1, 3])
    def test_insert_line_out_of_bounds_rejected(self, at):
        model = TextModel(["a", "b"])
        assert not model.insert_line(at, "x")
        assert model.lines == ["a", "b"]
        assert model.dirty == 0

    def test_delete_line(self):
        model = TextModel(["a", "b", "c"])
        assert model.delete_line(1)
        assert model.lines == ["a", "c"]
        assert [row.index for row in model.rows] == [0, 1]
        assert model.dirty == 1

    @pytest.mark.parametrize("at", [-1, 2])
    def test_delete_line_out_of_bounds_rejected(self, at):
        model = TextModel(["a", "b"])
        assert not model.delete_line(at)
        assert model.lines == ["a", "b"]
        assert model.dirty == 0

    def test_insert_char(self):
        model = TextModel(["ac"])
        assert model.insert_char(0, 1, "b")
        assert model.lines == ["abc"]
        assert model.rows[0].render == "abc"
        assert model.dirty == 1

    def test_insert_char_at_line_end(self):
        model = TextModel(["ab"])
        assert model.insert_char(0, 2, "c")
        assert model.lines == ["abc"]

    @pytest.mark.parametrize("line,offset", [(1, 0), (0, 3), (0, -1), (-1, 0)])
    def test_insert_char_out_of_bounds_rejected(self, line, offset):
        model = TextModel(["ab"])
        assert not model.insert_char(line, offset, "x")
        assert model.lines == ["ab"]
        assert model.dirty == 0

    def test_delete_char(self):
        model = TextModel(["abc"])
        assert model.delete_char(0, 1)
        assert model.lines == ["ac"]

    def test_delete_char_at_line_length_rejected(self):
        model = TextModel(["abc"])
        assert not model.delete_char(0, 3)
        assert model.lines == ["abc"]
        assert model.dirty == 0

    def test_append_text(self):
        model = TextModel(["ab"])
        assert model.append_text(0, "\tc")
        assert model.lines == ["ab\tc"]
        assert model.rows[0].render == "ab  c"

    def test_split_line(self):
        model = TextModel(["hello world"])
        assert model.split_line(0, 5)
        assert model.lines == ["hello", " world"]

    def test_split_line_at_end_creates_empty_line(self):
        model = TextModel(["abc"])
        assert model.split_line(0, 3)
        assert model.lines == ["abc", ""]

    def test_split_line_out_of_bounds_rejected(self):
        model = TextModel(["abc"])
        assert not model.split_line(0, 4)
        assert not model.split_line(1, 0)
        assert model.lines == ["abc"]
        assert model.dirty == 0

    def test_join_line_with_next(self):
        model = TextModel(["foo", "bar", "baz"])
        assert model.join_line_with_next(0)
        assert model.lines == ["foobar", "baz"]

    def test_join_last_line_rejected(self):
        model = TextModel(["foo", "bar"])
        assert not model.join_line_with_next(1)
        assert model.lines == ["foo", "bar"]
        assert model.dirty == 0

    @pytest.mark.parametrize("k", range(0, 8))
    def test_split_then_join_restores_line(self, k):
        text = "in\tt x;"
        model = TextModel([text, "next"], C_PROFILE)
        before = model.rows[0]
        render, tags = before.render, list(before.tags)
        model.split_line(0, k)
        model.join_line_with_next(0)
        assert model.lines == [text, "next"]
        assert model.rows[0].render == render
        assert model.rows[0].tags == tags

    @pytest.mark.parametrize("offset", range(0, 6))
    def test_insert_then_delete_restores_cache(self, offset):
        text = "if (1"
        model = TextModel([text], C_PROFILE)
        render, tags = model.rows[0].render, list(model.rows[0].tags)
        model.insert_char(0, offset, "\t")
        model.delete_char(0, offset)
        assert model.lines == [text]
        assert model.rows[0].render == render
        assert model.rows[0].tags == tags

    def test_every_mutation_increments_dirty(self):
        model = TextModel(["abc", "def"])
        model.insert_char(0, 0, "x")
        model.delete_char(0, 0)
        model.append_text(1, "g")
        model.insert_line(0, "new")
        model.delete_line(0)
        assert model.dirty == 5

    def test_to_text_adds_trailing_newline(self):
        assert TextModel(["a", "", "b"]).to_text() == "a\n\nb\n"
        assert TextModel([]).to_text() == ""


class TestHighlightCascade:

    def make_comment_doc(self):
        return TextModel(["/* start", "middle", "end */ code", "int x;"], C_PROFILE)

    def test_block_comment_spans_lines(self):
        model = self.make_comment_doc()
        assert model.rows[0].tags == [C] * 8
        assert model.rows[1].tags == [C] * 6
        assert model.rows[2].tags == [C] * 6 + [N] * 5
        assert model.rows[3].tags[:3] == [Highlight.KEYWORD2] * 3

    def test_removing_comment_start_recolors_following_lines(self):
        model = self.make_comment_doc()
        model.delete_char(0, 0)  # "* start"
        assert model.rows[0].tags == [N] * 7
        assert model.rows[1].tags == [N] * 6
        assert model.rows[2].tags == [N] * 11
        assert_cache_consistent(model)

    def test_cascade_stops_at_first_unchanged_line(self):
        model = self.make_comment_doc()
        model.rows[0].chars = "start"
        # Rows 0-2 change state, row 2 still ends outside a comment
        assert model.update_row(0) == 3
        assert_cache_consistent(model)

    def test_cascade_bounded_by_document_length(self):
        lines = ["x"] * 10
        model = TextModel(lines, C_PROFILE)
        model.rows[0].chars = "/*"
        assert model.update_row(0) == 10
        assert all(row.open_comment for row in model.rows)

    def test_edit_without_state_change_highlights_one_row(self):
        model = self.make_comment_doc()
        model.rows[1].chars = "muddle"
        assert model.update_row(1) == 1

    def test_update_row_out_of_range(self):
        model = self.make_comment_doc()
        assert model.update_row(4) == 0
        assert model.update_row(-1) == 0

    def test_inserted_line_inside_comment_is_comment(self):
        model = self.make_comment_doc()
        model.insert_line(1, "inner")
        assert model.rows[1].tags == [C] * 5
        assert_cache_consistent(model)

    def test_inserting_comment_opener_cascades(self):
        model = TextModel(["a", "b", "c"], C_PROFILE)
        model.insert_line(1, "/*")
        assert model.rows[2].tags == [C]
        assert model.rows[3].tags == [C]
        assert_cache_consistent(model)

    def test_deleting_comment_opener_line_cascades(self):
        model = TextModel(["/*", "b", "c"], C_PROFILE)
        model.delete_line(0)
        assert model.rows[0].tags == [N]
        assert model.rows[1].tags == [N]
        assert_cache_consistent(model)

    def test_first_line_never_starts_in_comment(self):
        model = TextModel(["x /*", "y"], C_PROFILE)
        model.delete_line(0)
        assert model.rows[0].tags == [N]
        assert model.rows[0].open_comment is False

    def test_joining_lines_keeps_cache_consistent(self):
        model = self.make_comment_doc()
        model.join_line_with_next(1)
        assert model.lines == ["/* start", "middleend */ code", "int x;"]
        assert_cache_consistent(model)

    def test_set_syntax_rehighlights(self):
        model = TextModel(["/* a", "b */"])
        assert model.rows[0].tags == [N] * 4
        model.set_syntax(C_PROFILE)
        assert model.rows[0].tags == [C] * 4
        assert model.rows[1].tags == [C] * 4
        assert_cache_consistent(model)

    def test_random_edits_keep_cache_consistent(self):
        model = TextModel(["int a = 1; /* x", "\ty */ \"s\"", "// z", "for"], C_PROFILE)
        model.insert_char(1, 0, "/")
        model.insert_char(1, 1, "*")
        assert_cache_consistent(model)
        model.split_line(0, 12)
        assert_cache_consistent(model)
        model.delete_char(0, 11)
        assert_cache_consistent(model)
        model.join_line_with_next(2)
        assert_cache_consistent(model)
        model.delete_line(0)
        assert_cache_consistent(model)


class TestCursorEditing:

    def test_insert_char_at_cursor(self):
        model = TextModel(["ac"])
        model.cursor_position = CursorPosition(0, 1)
        model.insert_char_at_cursor("b")
        assert model.lines == ["abc"]
        assert model.cursor_position == CursorPosition(0, 2)

    def test_insert_char_on_virtual_line_appends_row(self):
        model = TextModel(["a"])
        model.cursor_position = CursorPosition(1, 0)
        model.insert_char_at_cursor("b")
        assert model.lines == ["a", "b"]
        assert model.cursor_position == CursorPosition(1, 1)

    def test_insert_into_empty_document(self):
        model = TextModel()
        model.insert_char_at_cursor("x")
        assert model.lines == ["x"]

    def test_newline_splits_line(self):
        model = TextModel(["abcd"])
        model.cursor_position = CursorPosition(0, 2)
        model.insert_newline_at_cursor()
        assert model.lines == ["ab", "cd"]
        assert model.cursor_position == CursorPosition(1, 0)

    def test_newline_on_virtual_line_appends_empty_row(self):
        model = TextModel(["a"])
        model.cursor_position = CursorPosition(1, 0)
        model.insert_newline_at_cursor()
        assert model.lines == ["a", ""]
        assert model.cursor_position == CursorPosition(2, 0)

    def test_delete_forward(self):
        model = TextModel(["abc"])
        model.cursor_position = CursorPosition(0, 1)
        assert model.delete_char_at_cursor()
        assert model.lines == ["ac"]
        assert model.cursor_position == CursorPosition(0, 1)

    def test_delete_forward_at_line_end_joins(self):
        model = TextModel(["ab", "cd"])
        model.cursor_position = CursorPosition(0, 2)
        assert model.delete_char_at_cursor()
        assert model.lines == ["abcd"]

    def test_delete_forward_at_document_end_is_noop(self):
        model = TextModel(["ab"])
        model.cursor_position = CursorPosition(0, 2)
        assert not model.delete_char_at_cursor()
        assert model.lines == ["ab"]
        assert model.dirty == 0

    def test_delete_forward_on_virtual_line_is_noop(self):
        model = TextModel(["ab"])
        model.cursor_position = CursorPosition(1, 0)
        assert not model.delete_char_at_cursor()
        assert model.lines == ["ab"]

    def test_backspace_erases_previous_char(self):
        model = TextModel(["abc"])
        model.cursor_position = CursorPosition(0, 2)
        assert model.backspace()
        assert model.lines == ["ac"]
        assert model.cursor_position == CursorPosition(0, 1)

    def test_backspace_at_line_start_merges_lines(self):
        model = TextModel(["ab", "cd"])
        model.cursor_position = CursorPosition(1, 0)
        assert model.backspace()
        assert model.lines == ["abcd"]
        assert model.cursor_position == CursorPosition(0, 2)

    def test_backspace_at_document_start_is_noop(self):
        model = TextModel(["ab"])
        assert not model.backspace()
        assert model.lines == ["ab"]
        assert model.cursor_position == CursorPosition(0, 0)

    def test_backspace_on_virtual_line_moves_to_previous_line_end(self):
        model = TextModel(["ab"])
        model.cursor_position = CursorPosition(1, 0)
        assert not model.backspace()
        assert model.lines == ["ab"]
        assert model.cursor_position == CursorPosition(0, 2)


class TestCursorMovement:

    def test_left_wraps_to_previous_line_end(self):
        model = TextModel(["abc", "de"])
        model.cursor_position = CursorPosition(1, 0)
        model.left_char()
        assert model.cursor_position == CursorPosition(0, 3)

    def test_left_at_document_start_stays(self):
        model = TextModel(["abc"])
        model.left_char()
        assert model.cursor_position == CursorPosition(0, 0)

    def test_right_wraps_to_next_line_start(self):
        model = TextModel(["ab", "cd"])
        model.cursor_position = CursorPosition(0, 2)
        model.right_char()
        assert model.cursor_position == CursorPosition(1, 0)

    def test_right_reaches_virtual_line_and_stops(self):
        model = TextModel(["ab"])
        model.cursor_position = CursorPosition(0, 2)
        model.right_char()
        assert model.cursor_position == CursorPosition(1, 0)
        model.right_char()
        assert model.cursor_position == CursorPosition(1, 0)

    def test_down_clamps_offset(self):
        model = TextModel(["abcdef", "ab"])
        model.cursor_position = CursorPosition(0, 5)
        model.down_line()
        assert model.cursor_position == CursorPosition(1, 2)

    def test_down_to_virtual_line_clamps_to_zero(self):
        model = TextModel(["abc"])
        model.cursor_position = CursorPosition(0, 3)
        model.down_line()
        assert model.cursor_position == CursorPosition(1, 0)
        model.down_line()
        assert model.cursor_position == CursorPosition(1, 0)

    def test_up_clamps_offset(self):
        model = TextModel(["a", "abcdef"])
        model.cursor_position = CursorPosition(1, 4)
        model.up_line()
        assert model.cursor_position == CursorPosition(0, 1)

    def test_up_at_first_line_stays(self):
        model = TextModel(["abc"])
        model.cursor_position = CursorPosition(0, 2)
        model.up_line()
        assert model.cursor_position == CursorPosition(0, 2)

    def test_home_and_end(self):
        model = TextModel(["hello"])
        model.cursor_position = CursorPosition(0, 2)
        model.move_end_of_line()
        assert model.cursor_position.char_index == 5
        model.move_beginning_of_line()
        assert model.cursor_position.char_index == 0

    def test_end_on_virtual_line(self):
        model = TextModel(["hello"])
        model.cursor_position = CursorPosition(1, 0)
        model.move_end_of_line()
        assert model.cursor_position == CursorPosition(1, 0)

    def test_set_cursor_clamps(self):
        model = TextModel(["abc", "de"])
        model.set_cursor(10, 10)
        assert model.cursor_position == CursorPosition(2, 0)
        model.set_cursor(1, 10)
        assert model.cursor_position == CursorPosition(1, 2)
        model.set_cursor(-3, -1)
        assert model.cursor_position == CursorPosition(0, 0)


class TestFind:

    def test_find_from_top(self):
        model = TextModel(["alpha", "beta", "gamma beta"])
        assert model.find("beta") == (1, 0)

    def test_find_next_wraps(self):
        model = TextModel(["beta", "x", "a beta"])
        assert model.find("beta", 0, 1) == (2, 2)
        assert model.find("beta", 2, 1) == (0, 0)

    def test_find_backwards_wraps(self):
        model = TextModel(["beta", "x", "a beta"])
        assert model.find("beta", 0, -1) == (2, 2)

    def test_find_missing(self):
        model = TextModel(["alpha"])
        assert model.find("zeta") is None

    def test_find_empty_query_or_document(self):
        assert TextModel(["a"]).find("") is None
        assert TextModel([]).find("a") is None
