"""
Unit tests for the text buffer and its live spans
"""

import logging

import pytest

from decl_reorganizer.core.text_buffer import TextBuffer, TextSpan


class TestTextSpan:
    """Test span bookkeeping"""

    def test_invalid_span(self):
        with pytest.raises(ValueError):
            TextSpan(5, 2)

    def test_length(self):
        assert len(TextSpan(3, 10)) == 7


class TestSpanTracking:
    """Test how edits shift tracked spans"""

    def test_insert_before_span_shifts_it(self):
        buffer = TextBuffer("0123456789")
        span = buffer.create_span(4, 6)

        buffer.insert_text(2, "ab")

        assert (span.start, span.end) == (6, 8)
        assert buffer.get_text(span.start, span.end) == "45"

    def test_insert_at_span_start_shifts_it(self):
        buffer = TextBuffer("0123456789")
        span = buffer.create_span(5, 8)

        buffer.insert_text(5, "ab")

        assert (span.start, span.end) == (7, 10)

    def test_insert_at_span_end_does_not_grow_it(self):
        buffer = TextBuffer("0123456789")
        span = buffer.create_span(2, 5)

        buffer.insert_text(5, "ab")

        assert (span.start, span.end) == (2, 5)

    def test_insert_at_empty_span_keeps_it_empty(self):
        buffer = TextBuffer("0123456789")
        span = buffer.create_span(5, 5)

        buffer.insert_text(5, "ab")

        assert (span.start, span.end) == (7, 7)

    def test_insert_inside_span_grows_it(self):
        buffer = TextBuffer("0123456789")
        span = buffer.create_span(2, 8)

        buffer.insert_text(4, "ab")

        assert (span.start, span.end) == (2, 10)

    def test_delete_before_span_shifts_it(self):
        buffer = TextBuffer("0123456789")
        span = buffer.create_span(6, 8)

        buffer.delete_text(1, 3)

        assert (span.start, span.end) == (4, 6)
        assert buffer.get_text(span.start, span.end) == "67"

    def test_delete_overlapping_span_collapses_inside_positions(self):
        buffer = TextBuffer("0123456789")
        span = buffer.create_span(4, 9)

        buffer.delete_text(3, 6)

        assert (span.start, span.end) == (3, 6)

    def test_delete_whole_span_collapses_it(self):
        buffer = TextBuffer("0123456789")
        span = buffer.create_span(4, 6)

        buffer.delete_text(2, 8)

        assert (span.start, span.end) == (2, 2)

    def test_cursor_follows_edits(self):
        buffer = TextBuffer("0123456789", cursor_offset=6)

        buffer.insert_text(0, "abc")
        buffer.delete_text(0, 1)

        assert buffer.get_cursor_offset() == 8

    def test_set_cursor_is_clamped(self):
        buffer = TextBuffer("abc")

        buffer.set_cursor_offset(50)

        assert buffer.get_cursor_offset() == 3

    def test_invalid_range(self):
        buffer = TextBuffer("abc")

        with pytest.raises(ValueError):
            buffer.delete_text(2, 10)
        with pytest.raises(ValueError):
            buffer.create_span(-1, 2)


class TestLines:
    """Test line helpers"""

    def test_line_start_and_end(self):
        buffer = TextBuffer("first\nsecond\nthird")
        offset = buffer.text.index("cond")

        assert buffer.line_start(offset) == 6
        assert buffer.line_end(offset) == 12
        assert buffer.get_line(offset) == "second"

    def test_line_end_of_last_line(self):
        buffer = TextBuffer("first\nlast")

        assert buffer.line_end(8) == len(buffer)

    def test_offset_of(self):
        buffer = TextBuffer("first\nsecond\nthird")

        assert buffer.offset_of(2, 3) == 9
        assert buffer.offset_of(1) == 0
        with pytest.raises(ValueError):
            buffer.offset_of(10)

    def test_delete_surrounding_blank_lines(self):
        buffer = TextBuffer("a\n\n\nb\n")

        buffer.delete_surrounding_blank_lines(2)

        assert buffer.text == "a\nb\n"

    def test_delete_surrounding_blank_lines_inside_block(self):
        buffer = TextBuffer("class A:\n    x = 1\n\n\n    y = 2\n")

        buffer.delete_surrounding_blank_lines(buffer.text.index("\n    y"))

        assert buffer.text == "class A:\n    x = 1\n    y = 2\n"

    def test_blank_lines_before_outer_scope_are_kept(self):
        text = "class A:\n    x = 1\n\n\ny = 2\n"
        buffer = TextBuffer(text)

        buffer.delete_surrounding_blank_lines(text.index("\n\n") + 1)

        assert buffer.text == text

    def test_delete_surrounding_blank_lines_keeps_code(self):
        buffer = TextBuffer("a\nb\n")

        buffer.delete_surrounding_blank_lines(2)

        assert buffer.text == "a\nb\n"


class TestReformatIndent:
    """Test re-indentation of moved blocks"""

    def test_reindent_to_following_line(self):
        buffer = TextBuffer("class A:\n        x = 1\n        y = 2\n    z = 3\n")
        start = buffer.text.index("        x")
        end = buffer.text.index("y = 2") + len("y = 2")

        buffer.reformat_indent(start, end)

        assert buffer.text == "class A:\n    x = 1\n    y = 2\n    z = 3\n"

    def test_reindent_keeps_relative_indent(self):
        buffer = TextBuffer("def f():\n    pass\n  def g():\n      return 1\n")
        start = buffer.text.index("  def g")
        end = len(buffer) - 1

        buffer.reformat_indent(start, end)

        assert buffer.text == "def f():\n    pass\n    def g():\n        return 1\n"

    def test_reindent_noop_when_aligned(self):
        text = "class A:\n    x = 1\n    y = 2\n"
        buffer = TextBuffer(text)
        start = buffer.text.index("    x")

        buffer.reformat_indent(start, start + len("    x = 1"))

        assert buffer.text == text


class TestUndo:
    """Test undo transactions"""

    def test_transaction_records_one_unit(self):
        buffer = TextBuffer("abc", cursor_offset=1)

        with buffer.undo_transaction("edit"):
            buffer.insert_text(0, "x")
            buffer.delete_text(3, 4)

        assert buffer.text == "xab"
        assert len(buffer.undo_stack) == 1
        assert buffer.undo_stack[0].name == "edit"

        assert buffer.undo() is True
        assert buffer.text == "abc"
        assert buffer.get_cursor_offset() == 1
        assert buffer.undo() is False

    def test_transaction_without_changes_records_nothing(self):
        buffer = TextBuffer("abc")

        with buffer.undo_transaction("noop"):
            pass

        assert buffer.undo_stack == []

    def test_nested_transactions_record_outer_unit(self):
        buffer = TextBuffer("abc")

        with buffer.undo_transaction("outer"):
            with buffer.undo_transaction("inner"):
                buffer.insert_text(0, "x")
            buffer.insert_text(0, "y")

        assert [unit.name for unit in buffer.undo_stack] == ["outer"]

    def test_failed_transaction_keeps_partial_edits(self, caplog):
        buffer = TextBuffer("abc")

        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError):
                with buffer.undo_transaction("broken"):
                    buffer.insert_text(0, "x")
                    raise RuntimeError("boom")

        assert buffer.text == "xabc"
        assert len(buffer.undo_stack) == 1
        assert "broken" in caplog.text

        buffer.undo()
        assert buffer.text == "abc"
