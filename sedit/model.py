from dataclasses import dataclass, field
from typing import Optional

from .render import render_text
from .syntax import Highlight, SyntaxProfile, highlight_line


@dataclass
class CursorPosition:
    line_index: int = 0
    char_index: int = 0


@dataclass
class Row:
    """One document line plus its derived display data.

    ``render`` and ``tags`` are recomputed from ``chars`` by the owning
    model after every change; ``open_comment`` records whether the line
    ends inside an unterminated block comment.
    """
    index: int
    chars: str
    render: str = ""
    tags: list[Highlight] = field(default_factory=list)
    open_comment: bool = False

    @property
    def size(self) -> int:
        return len(self.chars)


class TextModel:
    """Ordered line store with cursor and per-line render/highlight cache.

    Every mutation keeps three things true before it returns:

    - row indices match list positions,
    - the touched row's render and tags reflect its text, and any change
      of its block-comment state has been carried forward to later rows,
    - ``dirty`` has been incremented.

    Calls with out-of-range indices return False and change nothing.
    """

    rows: list[Row]
    cursor_position: CursorPosition
    syntax: Optional[SyntaxProfile]
    dirty: int

    def __init__(self, lines: Optional[list[str]] = None,
                 syntax: Optional[SyntaxProfile] = None):
        self.rows = []
        self.syntax = syntax
        self.cursor_position = CursorPosition()
        self.dirty = 0
        for text in lines or []:
            self.insert_line(self.num_lines, text)
        # Seeding the store is not an edit
        self.dirty = 0

    @property
    def num_lines(self) -> int:
        return len(self.rows)

    @property
    def lines(self) -> list[str]:
        return [row.chars for row in self.rows]

    def to_text(self) -> str:
        """Serialize as newline-terminated lines."""
        return "".join(row.chars + "\n" for row in self.rows)

    def set_syntax(self, syntax: Optional[SyntaxProfile]):
        """Switch profile and re-highlight the whole document."""
        self.syntax = syntax
        for row in self.rows:
            self._highlight_row(row)

    # --- Render/highlight cache ---

    def _starts_in_comment(self, index: int) -> bool:
        # The first line never inherits comment state
        return index > 0 and self.rows[index - 1].open_comment

    def _highlight_row(self, row: Row) -> bool:
        """Recompute tags for one row; return True if its end state changed."""
        tags, open_comment = highlight_line(
            self.syntax, row.render, self._starts_in_comment(row.index)
        )
        row.tags = tags
        changed = open_comment != row.open_comment
        row.open_comment = open_comment
        return changed

    def update_row(self, index: int) -> int:
        """Re-render row ``index`` and highlight forward as far as needed.

        Highlighting moves on to the next row only while the end-of-line
        comment state keeps changing, so at most ``num_lines - index`` rows
        are processed.

        Returns:
            Number of rows highlighted.
        """
        if not 0 <= index < self.num_lines:
            return 0
        row = self.rows[index]
        row.render = render_text(row.chars)
        count = 1
        changed = self._highlight_row(row)
        while changed and index + 1 < self.num_lines:
            index += 1
            count += 1
            changed = self._highlight_row(self.rows[index])
        return count

    def _renumber(self, start: int):
        for i in range(start, self.num_lines):
            self.rows[i].index = i

    # --- Line store operations ---

    def insert_line(self, at: int, text: str) -> bool:
        if not 0 <= at <= self.num_lines:
            return False
        # Start with the state the following row was highlighted against,
        # so a change is detected and cascaded when this row ends differently.
        row = Row(index=at, chars=text, open_comment=self._starts_in_comment(at))
        self.rows.insert(at, row)
        self._renumber(at + 1)
        self.update_row(at)
        self.dirty += 1
        return True

    def delete_line(self, at: int) -> bool:
        if not 0 <= at < self.num_lines:
            return False
        removed = self.rows.pop(at)
        self._renumber(at)
        # The row moving up now follows a different predecessor
        if at < self.num_lines and self._starts_in_comment(at) != removed.open_comment:
            self.update_row(at)
        self.dirty += 1
        return True

    def insert_char(self, line: int, offset: int, ch: str) -> bool:
        if not 0 <= line < self.num_lines:
            return False
        row = self.rows[line]
        if not 0 <= offset <= row.size:
            return False
        row.chars = row.chars[:offset] + ch + row.chars[offset:]
        self.update_row(line)
        self.dirty += 1
        return True

    def delete_char(self, line: int, offset: int) -> bool:
        if not 0 <= line < self.num_lines:
            return False
        row = self.rows[line]
        if not 0 <= offset < row.size:
            return False
        row.chars = row.chars[:offset] + row.chars[offset + 1:]
        self.update_row(line)
        self.dirty += 1
        return True

    def append_text(self, line: int, text: str) -> bool:
        if not 0 <= line < self.num_lines:
            return False
        self.rows[line].chars += text
        self.update_row(line)
        self.dirty += 1
        return True

    def split_line(self, line: int, offset: int) -> bool:
        """Truncate ``line`` at ``offset`` and insert the rest below it."""
        if not 0 <= line < self.num_lines:
            return False
        row = self.rows[line]
        if not 0 <= offset <= row.size:
            return False
        remainder = row.chars[offset:]
        row.chars = row.chars[:offset]
        self.update_row(line)
        self.dirty += 1
        return self.insert_line(line + 1, remainder)

    def join_line_with_next(self, line: int) -> bool:
        """Append the next line's text to ``line`` and delete the next line."""
        if not 0 <= line < self.num_lines - 1:
            return False
        self.append_text(line, self.rows[line + 1].chars)
        return self.delete_line(line + 1)

    # --- Cursor-level editing ---

    def _cursor_row(self) -> Optional[Row]:
        """Row under the cursor, or None on the virtual line past the end."""
        if self.cursor_position.line_index >= self.num_lines:
            return None
        return self.rows[self.cursor_position.line_index]

    def insert_char_at_cursor(self, ch: str):
        pos = self.cursor_position
        if pos.line_index == self.num_lines:
            self.insert_line(self.num_lines, ch)
        else:
            self.insert_char(pos.line_index, pos.char_index, ch)
        pos.char_index += 1

    def insert_newline_at_cursor(self):
        pos = self.cursor_position
        if pos.line_index == self.num_lines:
            self.insert_line(self.num_lines, "")
        else:
            self.split_line(pos.line_index, pos.char_index)
        pos.line_index += 1
        pos.char_index = 0

    def delete_char_at_cursor(self) -> bool:
        """Delete forward; at end of line join with the next line."""
        row = self._cursor_row()
        if row is None:
            return False
        pos = self.cursor_position
        if pos.char_index == row.size:
            # No-op at the true end of the document
            return self.join_line_with_next(pos.line_index)
        return self.delete_char(pos.line_index, pos.char_index)

    def backspace(self) -> bool:
        """Move left, then delete forward."""
        pos = self.cursor_position
        if pos.line_index == 0 and pos.char_index == 0:
            return False
        self.left_char()
        return self.delete_char_at_cursor()

    # --- Cursor movement ---

    def _clamp_char_index(self):
        row = self._cursor_row()
        limit = row.size if row is not None else 0
        if self.cursor_position.char_index > limit:
            self.cursor_position.char_index = limit

    def left_char(self):
        pos = self.cursor_position
        if pos.char_index > 0:
            pos.char_index -= 1
        elif pos.line_index > 0:
            pos.line_index -= 1
            pos.char_index = self.rows[pos.line_index].size

    def right_char(self):
        pos = self.cursor_position
        row = self._cursor_row()
        if row is not None and pos.char_index < row.size:
            pos.char_index += 1
        elif pos.line_index < self.num_lines:
            pos.line_index += 1
            pos.char_index = 0

    def up_line(self):
        if self.cursor_position.line_index > 0:
            self.cursor_position.line_index -= 1
        self._clamp_char_index()

    def down_line(self):
        if self.cursor_position.line_index < self.num_lines:
            self.cursor_position.line_index += 1
        self._clamp_char_index()

    def move_beginning_of_line(self):
        self.cursor_position.char_index = 0

    def move_end_of_line(self):
        row = self._cursor_row()
        if row is not None:
            self.cursor_position.char_index = row.size

    def set_cursor(self, line_index: int, char_index: int):
        """Place the cursor, clamping it to a valid position."""
        line_index = max(0, min(line_index, self.num_lines))
        self.cursor_position = CursorPosition(line_index, max(0, char_index))
        self._clamp_char_index()

    # --- Search ---

    def find(self, query: str, start_line: int = -1,
             direction: int = 1) -> Optional[tuple[int, int]]:
        """Find the next line containing ``query``, wrapping around.

        Args:
            query: Text to look for in the raw line contents.
            start_line: Line of the previous match; -1 starts from the top.
            direction: 1 searches forward, -1 backward.

        Returns:
            (line_index, char_index) of the match, or None.
        """
        if not query or not self.rows:
            return None
        current = start_line
        for _ in range(self.num_lines):
            current += direction
            if current < 0:
                current = self.num_lines - 1
            elif current >= self.num_lines:
                current = 0
            offset = self.rows[current].chars.find(query)
            if offset != -1:
                return current, offset
        return None
