from .model import TextModel
from .render import display_column


class TerminalTextView:
    """Scrolled window of the document on a fixed character grid.

    ``num_rows`` counts text rows only; the status rows are reserved by the
    editor before the view is sized.
    """
    model: TextModel
    num_rows: int
    num_columns: int
    row_offset: int = 0
    col_offset: int = 0
    render_x: int = 0  # Display column of the cursor

    def __init__(self, model: TextModel, num_rows: int, num_columns: int):
        self.model = model
        self.num_rows = num_rows
        self.num_columns = num_columns

    def resize(self, num_rows: int, num_columns: int) -> None:
        self.num_rows = max(1, num_rows)
        self.num_columns = max(1, num_columns)
        self.scroll()

    def _cursor_render_x(self) -> int:
        pos = self.model.cursor_position
        if pos.line_index >= self.model.num_lines:
            return 0
        return display_column(self.model.rows[pos.line_index].chars, pos.char_index)

    def scroll(self) -> None:
        """Move the window just enough to keep the cursor visible."""
        self.render_x = self._cursor_render_x()
        cy = self.model.cursor_position.line_index

        if cy < self.row_offset:
            self.row_offset = cy
        if cy >= self.row_offset + self.num_rows:
            self.row_offset = cy - self.num_rows + 1
        if self.render_x < self.col_offset:
            self.col_offset = self.render_x
        if self.render_x >= self.col_offset + self.num_columns:
            self.col_offset = self.render_x - self.num_columns + 1

    def center_on_line(self, line_index: int) -> None:
        self.row_offset = max(0, line_index - self.num_rows // 2)
        self.scroll()

    def _page(self, delta: int) -> None:
        model = self.model
        line = max(0, min(model.cursor_position.line_index + delta, model.num_lines))
        model.set_cursor(line, model.cursor_position.char_index)
        self.row_offset = max(0, self.row_offset + delta)
        self.scroll()

    def _page_step(self) -> int:
        # One row of the previous screen stays visible
        return max(1, self.num_rows - 1)

    def scroll_page_down(self) -> None:
        self._page(self._page_step())

    def scroll_page_up(self) -> None:
        self._page(-self._page_step())
