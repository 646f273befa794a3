"""
Text surface used by the reorganizer.

The surface owns the text and every live range into it. Each insert or
delete shifts the tracked spans and the cursor, so callers keep TextSpan
objects instead of absolute integers.
"""

import logging
import weakref
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class TextSpan:
    """Half-open [start, end) range kept up to date by its surface"""

    __slots__ = ("start", "end", "__weakref__")

    def __init__(self, start: int, end: int):
        if start > end:
            raise ValueError(f"Span start {start} is after its end {end}")
        self.start = start
        self.end = end

    def move_to(self, start: int, end: int) -> None:
        if start > end:
            raise ValueError(f"Span start {start} is after its end {end}")
        self.start = start
        self.end = end

    def __len__(self) -> int:
        return self.end - self.start

    def __repr__(self) -> str:
        return f"TextSpan({self.start}, {self.end})"


class TextSurface(ABC):
    """Editing operations the reorganizer needs from a text buffer"""

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def get_text(self, start: int, end: int) -> str:
        pass

    @abstractmethod
    def delete_text(self, start: int, end: int) -> None:
        pass

    @abstractmethod
    def insert_text(self, offset: int, text: str) -> None:
        pass

    @abstractmethod
    def reformat_indent(self, start: int, end: int) -> None:
        """Re-indent the lines of [start, end) to match their context"""
        pass

    @abstractmethod
    def get_cursor_offset(self) -> int:
        pass

    @abstractmethod
    def set_cursor_offset(self, offset: int) -> None:
        pass

    @abstractmethod
    def delete_surrounding_blank_lines(self, offset: int) -> None:
        """Delete the blank lines directly above and below offset's line.

        Blank lines below are kept when the next non-blank line is indented
        less than the line above the blank run.
        """
        pass

    @abstractmethod
    def create_span(self, start: int, end: int) -> TextSpan:
        """Create a span that follows later edits"""
        pass

    @abstractmethod
    def line_start(self, offset: int) -> int:
        pass

    @abstractmethod
    def line_end(self, offset: int) -> int:
        """Offset of the line break ending offset's line (or buffer end)"""
        pass

    def get_line(self, offset: int) -> str:
        return self.get_text(self.line_start(offset), self.line_end(offset))


@dataclass
class UndoUnit:
    """One undoable group of edits"""

    name: str
    text_before: str
    text_after: str
    cursor_before: int


class TextBuffer(TextSurface):
    """In-memory text surface with live spans, cursor and undo history"""

    def __init__(self, text: str = "", cursor_offset: int = 0):
        self._text = text
        self._spans: weakref.WeakSet[TextSpan] = weakref.WeakSet()
        self._cursor = TextSpan(cursor_offset, cursor_offset)
        self._undo_stack: list[UndoUnit] = []
        self._transaction_depth = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def undo_stack(self) -> list[UndoUnit]:
        return list(self._undo_stack)

    def __len__(self) -> int:
        return len(self._text)

    # ============================================================
    # READING
    # ============================================================

    def get_text(self, start: int, end: int) -> str:
        self._check_range(start, end)
        return self._text[start:end]

    def line_start(self, offset: int) -> int:
        return self._text.rfind("\n", 0, offset) + 1

    def line_end(self, offset: int) -> int:
        index = self._text.find("\n", offset)
        return len(self._text) if index == -1 else index

    def offset_of(self, line: int, column: int = 0) -> int:
        """Offset of a 1-based line and 0-based column"""
        offset = 0
        for _ in range(line - 1):
            index = self._text.find("\n", offset)
            if index == -1:
                raise ValueError(f"Line {line} is beyond the end of the buffer")
            offset = index + 1
        return offset + column

    # ============================================================
    # EDITING
    # ============================================================

    def insert_text(self, offset: int, text: str) -> None:
        self._check_range(offset, offset)
        if not text:
            return
        self._text = self._text[:offset] + text + self._text[offset:]
        length = len(text)
        for span in self._tracked():
            was_empty = span.start == span.end
            if span.start >= offset:
                span.start += length
            if span.end > offset or (was_empty and span.end == offset):
                span.end += length

    def delete_text(self, start: int, end: int) -> None:
        self._check_range(start, end)
        if start == end:
            return
        self._text = self._text[:start] + self._text[end:]
        length = end - start
        for span in self._tracked():
            span.start = self._shift_deleted(span.start, start, end, length)
            span.end = self._shift_deleted(span.end, start, end, length)

    def delete_surrounding_blank_lines(self, offset: int) -> None:
        offset = min(offset, len(self._text))
        first = self.line_start(offset)
        while first > 0:
            previous = self.line_start(first - 1)
            if self._text[previous : first - 1].strip():
                break
            first = previous

        last = self.line_start(offset)
        below = last
        while below < len(self._text):
            line_end = self.line_end(below)
            if self._text[below:line_end].strip():
                break
            below = min(line_end + 1, len(self._text))

        # Blank lines before a less indented line separate an enclosing scope
        if first == 0 or below == len(self._text):
            last = below
        elif self._indent_width(below) >= self._indent_width(first - 1):
            last = below

        if last > first:
            self.delete_text(first, last)

    def reformat_indent(self, start: int, end: int) -> None:
        self._check_range(start, end)
        target = self._context_indent(start, end)

        line_starts = []
        position = self.line_start(start)
        while position < end or position == start:
            line_starts.append(position)
            next_break = self._text.find("\n", position)
            if next_break == -1:
                break
            position = next_break + 1

        current = self._leading_whitespace(self.get_line(line_starts[0]))
        if current == target:
            return

        # Bottom-up so the remaining line starts stay valid
        for position in reversed(line_starts):
            line = self.get_line(position)
            if not line.strip() or not line.startswith(current):
                continue
            if current:
                self.delete_text(position, position + len(current))
            self.insert_text(position, target)

    # ============================================================
    # CURSOR AND SPANS
    # ============================================================

    def get_cursor_offset(self) -> int:
        return self._cursor.start

    def set_cursor_offset(self, offset: int) -> None:
        offset = max(0, min(offset, len(self._text)))
        self._cursor.move_to(offset, offset)

    def create_span(self, start: int, end: int) -> TextSpan:
        self._check_range(start, end)
        span = TextSpan(start, end)
        self._spans.add(span)
        return span

    # ============================================================
    # UNDO
    # ============================================================

    @contextmanager
    def undo_transaction(self, name: str):
        """Group all edits made inside the block into one undo unit.

        When the block raises, the edits made so far stay in the buffer and
        are still recorded, so the user can undo them in one step.
        """
        text_before = self._text
        cursor_before = self._cursor.start
        self._transaction_depth += 1
        try:
            yield self
        except Exception:
            logger.exception(f"'{name}' failed, keeping partially applied edits")
            raise
        finally:
            self._transaction_depth -= 1
            if self._transaction_depth == 0 and self._text != text_before:
                self._undo_stack.append(
                    UndoUnit(
                        name=name,
                        text_before=text_before,
                        text_after=self._text,
                        cursor_before=cursor_before,
                    )
                )
                logger.debug(f"Recorded undo unit: {name}")

    def undo(self) -> bool:
        """Revert the most recent undo unit. Existing spans become invalid."""
        if not self._undo_stack:
            return False
        unit = self._undo_stack.pop()
        self._text = unit.text_before
        self._spans = weakref.WeakSet()
        self.set_cursor_offset(unit.cursor_before)
        logger.debug(f"Undid: {unit.name}")
        return True

    # ============================================================
    # HELPERS
    # ============================================================

    def _tracked(self) -> list[TextSpan]:
        return [*self._spans, self._cursor]

    def _check_range(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self._text):
            raise ValueError(
                f"Invalid range ({start}, {end}) for buffer of length "
                f"{len(self._text)}"
            )

    def _context_indent(self, start: int, end: int) -> str:
        """Indentation of the first non-blank line after end, else before start"""
        position = self.line_end(end) + 1
        while position < len(self._text):
            line = self.get_line(position)
            if line.strip():
                return self._leading_whitespace(line)
            position = self.line_end(position) + 1

        position = self.line_start(start)
        while position > 0:
            position = self.line_start(position - 1)
            line = self.get_line(position)
            if line.strip():
                return self._leading_whitespace(line)
        return ""

    def _indent_width(self, offset: int) -> int:
        return len(self._leading_whitespace(self.get_line(offset)))

    @staticmethod
    def _leading_whitespace(line: str) -> str:
        return line[: len(line) - len(line.lstrip(" \t"))]

    @staticmethod
    def _shift_deleted(position: int, start: int, end: int, length: int) -> int:
        if position > end:
            return position - length
        if position > start:
            return start
        return position
