"""Terminal interface using Blessed for capabilities and raw byte I/O for input."""

import contextlib
import logging
import os
import select
import sys
import termios
import time
from dataclasses import dataclass
from typing import BinaryIO, Optional

import blessed

from .constants import EditorConstants
from .syntax import Highlight, syntax_to_color
from .view import TerminalTextView

logger = logging.getLogger(__name__)


class TerminalError(RuntimeError):
    """Unrecoverable failure of the terminal device."""

    def __init__(self, operation: str, error: BaseException):
        super().__init__(f"{operation}: {error}")
        self.operation = operation
        self.error = error


@dataclass
class StatusLine:
    """Everything the two status rows show."""
    filename: Optional[str] = None
    modified: bool = False
    num_lines: int = 0
    filetype: Optional[str] = None
    cursor_line: int = 0
    message: str = ""
    message_time: float = 0.0

    def left_text(self) -> str:
        name = (self.filename or "[No Name]")[:EditorConstants.STATUS_FILENAME_WIDTH]
        modified = "(+)" if self.modified else ""
        return f"{name}{modified} -- {self.num_lines} lines"

    def right_text(self) -> str:
        filetype = self.filetype or "no ft"
        return f"{filetype} | {self.cursor_line + 1}/{self.num_lines}"

    def message_visible(self, now: float) -> bool:
        return bool(self.message) and now - self.message_time < EditorConstants.STATUS_MESSAGE_TIMEOUT


class TerminalInterface:
    """Handles terminal I/O: raw byte input, whole-frame output."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None,
                 stdin_fd: Optional[int] = None,
                 stdout: Optional[BinaryIO] = None):
        """Initialize with a terminal instance (or create one).

        ``stdin_fd`` and ``stdout`` default to the process's standard
        streams, looked up on first use.
        """
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._stdin_fd = stdin_fd
        self._stdout = stdout

    @property
    def stdin_fd(self) -> int:
        if self._stdin_fd is None:
            self._stdin_fd = sys.stdin.fileno()
        return self._stdin_fd

    @property
    def stdout(self) -> BinaryIO:
        if self._stdout is None:
            self._stdout = sys.stdout.buffer
        return self._stdout

    # --- Mode handling ---

    def setup(self):
        """Enter fullscreen mode and prepare terminal."""
        self.write(self.term.enter_fullscreen + self.term.clear)
        self.is_fullscreen = True

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self.is_fullscreen:
            self.write(self.term.normal + self.term.exit_fullscreen + self.term.normal_cursor)
            self.is_fullscreen = False

    @contextlib.contextmanager
    def raw_mode(self):
        """Disable line buffering, echo and output processing for the block."""
        try:
            with self.term.raw():
                yield
        except termios.error as exc:
            raise TerminalError("tcsetattr", exc) from exc

    # --- Input ---

    def read_byte(self, timeout: Optional[float] = None) -> Optional[int]:
        """Read one input byte.

        Returns:
            The byte value, or None if nothing arrived within ``timeout``.

        Raises:
            TerminalError: on read failure or end of input.
        """
        fd = self.stdin_fd
        try:
            ready, _, _ = select.select([fd], [], [], timeout)
            if not ready:
                return None
            data = os.read(fd, 1)
        except BlockingIOError:
            return None
        except OSError as exc:
            raise TerminalError("read", exc) from exc
        if not data:
            raise TerminalError("read", EOFError("end of input"))
        return data[0]

    # --- Output ---

    def write(self, data: str) -> None:
        """Write ``data`` to the terminal in a single operation."""
        payload = data.encode(EditorConstants.FILE_ENCODING, errors="replace")
        try:
            self.stdout.write(payload)
            self.stdout.flush()
        except OSError as exc:
            raise TerminalError("write", exc) from exc

    def get_window_size(self) -> tuple[int, int]:
        """Return (rows, columns) of the terminal.

        Asks the OS first; if it cannot tell, moves the cursor as far
        down and right as it goes and reads back its position.
        """
        try:
            size = os.get_terminal_size(self.stdout.fileno())
            if size.columns > 0 and size.lines > 0:
                return size.lines, size.columns
        except (OSError, ValueError):
            pass

        distance = EditorConstants.WINDOW_SIZE_PROBE_DISTANCE
        self.write(self.term.move_right(distance) + self.term.move_down(distance))
        y, x = self.term.get_location(timeout=EditorConstants.CURSOR_REPORT_TIMEOUT)
        if (y, x) == (-1, -1):
            raise TerminalError("get_window_size", OSError("no cursor position report"))
        logger.debug("Window size from cursor report: %d x %d", y + 1, x + 1)
        return y + 1, x + 1

    # --- Frame composition ---

    def _compose_text_row(self, view: TerminalTextView, index: int) -> str:
        row = view.model.rows[index]
        start = view.col_offset
        end = min(len(row.render), start + view.num_columns)
        out = []
        current_color: Optional[int] = None
        for i in range(start, end):
            tag = row.tags[i]
            if tag == Highlight.NORMAL:
                if current_color is not None:
                    out.append(self.term.normal)
                    current_color = None
            else:
                color = syntax_to_color(tag)
                if color != current_color:
                    out.append(self.term.color(color))
                    current_color = color
            out.append(row.render[i])
        out.append(self.term.normal)
        return "".join(out)

    def _compose_status_bar(self, status: StatusLine, width: int) -> str:
        left = status.left_text()[:width]
        right = status.right_text()
        if len(left) + len(right) <= width:
            bar = left + " " * (width - len(left) - len(right)) + right
        else:
            bar = left.ljust(width)
        return self.term.reverse + bar + self.term.normal

    def compose_frame(self, view: TerminalTextView, status: StatusLine,
                      now: Optional[float] = None) -> str:
        """Build the complete output for one screen refresh."""
        if now is None:
            now = time.time()
        term = self.term
        model = view.model
        banner = EditorConstants.WELCOME_BANNER
        out = [term.hide_cursor, term.home]

        for y in range(view.num_rows):
            index = y + view.row_offset
            out.append(term.clear_eol)
            if index < model.num_lines:
                out.append(self._compose_text_row(view, index))
            elif model.num_lines == 0 and y < len(banner):
                out.append(banner[y][:view.num_columns])
            else:
                out.append(EditorConstants.FILLER_GLYPH)
            out.append("\r\n")

        out.append(self._compose_status_bar(status, view.num_columns))
        out.append("\r\n")

        out.append(term.clear_eol)
        if status.message_visible(now):
            out.append(status.message[:view.num_columns])

        out.append(term.move(model.cursor_position.line_index - view.row_offset,
                             view.render_x - view.col_offset))
        out.append(term.normal_cursor)
        return "".join(out)

    def draw_frame(self, view: TerminalTextView, status: StatusLine,
                   now: Optional[float] = None) -> None:
        """Compose a frame and write it in one piece."""
        self.write(self.compose_frame(view, status, now))
