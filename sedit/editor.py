"""Main editor controller: one editing session over one document."""

import logging
import os
import shutil
import signal
import tempfile
import time
from typing import Callable, Optional

from .commands import CommandRegistry
from .constants import EditorConstants
from .keyboard import KeyboardHandler, KeyEvent, KeyType
from .model import CursorPosition, TextModel
from .render import display_column
from .settings_persistence import SettingsPersistence
from .syntax import Highlight, select_syntax
from .terminal import StatusLine, TerminalInterface
from .view import TerminalTextView

logger = logging.getLogger(__name__)

PromptCallback = Callable[[str, KeyEvent], None]


def _is_enter(event: KeyEvent) -> bool:
    return event.key_type == KeyType.CTRL and event.value in ('m', 'j')


def _is_escape(event: KeyEvent) -> bool:
    return event.key_type == KeyType.SPECIAL and event.value == 'escape'


def _is_erase(event: KeyEvent) -> bool:
    if event.key_type == KeyType.CTRL:
        return event.value in ('?', 'h')
    return event.key_type == KeyType.SPECIAL and event.value == 'delete'


class Editor:
    """Owns the document, the view and the terminal for one session."""

    def __init__(self, terminal: Optional[TerminalInterface] = None,
                 settings: Optional[SettingsPersistence] = None):
        """Initialize the editor components."""
        self.terminal = terminal or TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.model = TextModel()
        self.view = TerminalTextView(
            self.model,
            EditorConstants.DEFAULT_ROWS - EditorConstants.STATUS_ROWS,
            EditorConstants.DEFAULT_COLUMNS,
        )
        self.command_registry = CommandRegistry()
        self.settings = settings if settings is not None else SettingsPersistence()
        self.running = False
        self.filename: Optional[str] = None
        self.status_message = ""
        self.status_message_time = 0.0
        self.quit_pending = False
        self._resized = False
        # Incremental search state, reset by find()
        self._find_last_match = -1
        self._find_direction = 1
        self._find_saved_tags: Optional[tuple[int, list[Highlight]]] = None

    def _set_model(self, model: TextModel):
        self.model = model
        self.view.model = model
        self.view.row_offset = 0
        self.view.col_offset = 0

    # --- Main loop ---

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        self._resized = True

    def update_window_size(self):
        rows, columns = self.terminal.get_window_size()
        self.view.resize(rows - EditorConstants.STATUS_ROWS, columns)
        logger.debug("Window size %d x %d", rows, columns)

    def run(self):
        """Run the main editor loop until quit.

        The terminal is restored on every exit path, including
        TerminalError, which is left to propagate.
        """
        self.running = True
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
        try:
            with self.terminal.raw_mode():
                self.terminal.setup()
                try:
                    self.update_window_size()
                    self.set_status_message(EditorConstants.HELP_MESSAGE)
                    while self.running:
                        self.refresh_screen()
                        self.process_keypress()
                finally:
                    self.terminal.cleanup()
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
        self._remember_position()

    def refresh_screen(self):
        if self._resized:
            self._resized = False
            self.update_window_size()
        self.view.scroll()
        self.terminal.draw_frame(self.view, self.status_line())

    def process_keypress(self):
        """Read one key and dispatch it."""
        key_event = self.keyboard.read_key()
        logger.debug("Key %s %r", key_event.key_type.value, key_event.value)
        self.command_registry.execute(self, key_event)

    # --- Status ---

    def set_status_message(self, message: str):
        self.status_message = message
        self.status_message_time = time.time()

    def status_line(self) -> StatusLine:
        return StatusLine(
            filename=self.filename,
            modified=self.model.dirty > 0,
            num_lines=self.model.num_lines,
            filetype=self.model.syntax.name if self.model.syntax else None,
            cursor_line=self.model.cursor_position.line_index,
            message=self.status_message,
            message_time=self.status_message_time,
        )

    # --- Prompt and search ---

    def prompt(self, template: str,
               callback: Optional[PromptCallback] = None) -> Optional[str]:
        """Read a line of input on the message row.

        Args:
            template: Message with one ``{}`` for the text typed so far.
            callback: Called with (text, key) after every key, including
                the one that ends the prompt.

        Returns:
            The entered text, or None if the prompt was cancelled with ESC.
        """
        buffer = ""
        while True:
            self.set_status_message(template.format(buffer))
            self.refresh_screen()
            key_event = self.keyboard.read_key()

            if _is_enter(key_event) and buffer:
                self.set_status_message("")
                if callback:
                    callback(buffer, key_event)
                return buffer
            if _is_escape(key_event):
                self.set_status_message("")
                if callback:
                    callback(buffer, key_event)
                return None
            if _is_erase(key_event):
                buffer = buffer[:-1]
            elif key_event.key_type == KeyType.REGULAR and 32 <= (key_event.code or 0) < 127:
                buffer += key_event.value
            if callback:
                callback(buffer, key_event)

    def _restore_match_tags(self):
        if self._find_saved_tags is None:
            return
        line, tags = self._find_saved_tags
        if line < self.model.num_lines:
            self.model.rows[line].tags = tags
        self._find_saved_tags = None

    def _find_callback(self, query: str, key_event: KeyEvent):
        self._restore_match_tags()

        if _is_enter(key_event) or _is_escape(key_event):
            return
        if key_event.key_type == KeyType.SPECIAL and key_event.value in ('right', 'down'):
            self._find_direction = 1
        elif key_event.key_type == KeyType.SPECIAL and key_event.value in ('left', 'up'):
            self._find_direction = -1
        else:
            # Query changed, search again from the top
            self._find_last_match = -1
            self._find_direction = 1

        match = self.model.find(query, self._find_last_match, self._find_direction)
        if match is None:
            return
        line, offset = match
        self._find_last_match = line
        self.model.set_cursor(line, offset)
        self.view.center_on_line(line)

        row = self.model.rows[line]
        self._find_saved_tags = (line, list(row.tags))
        start = display_column(row.chars, offset)
        end = display_column(row.chars, offset + len(query))
        row.tags[start:end] = [Highlight.MATCH] * (end - start)

    def find(self):
        """Incremental search; ESC returns to where the search started."""
        saved_cursor = CursorPosition(
            self.model.cursor_position.line_index,
            self.model.cursor_position.char_index,
        )
        saved_offsets = (self.view.row_offset, self.view.col_offset)
        self._find_last_match = -1
        self._find_direction = 1
        self._find_saved_tags = None

        query = self.prompt(EditorConstants.SEARCH_PROMPT, self._find_callback)

        if query is None:
            self.model.cursor_position = saved_cursor
            self.view.row_offset, self.view.col_offset = saved_offsets

    # --- File handling ---

    def load_file(self, filename: str):
        """Load a file into the editor.

        A file that does not exist yet opens as an empty document with that
        name. Other errors propagate.
        """
        self.filename = filename
        try:
            with open(filename, 'rb') as f:
                data = f.read()
        except FileNotFoundError:
            logger.info("New file %s", filename)
            lines = []
        else:
            lines = data.decode(EditorConstants.FILE_ENCODING).split('\n')
            # A trailing newline terminates the last line rather than starting one
            if lines and lines[-1] == "":
                lines.pop()
            lines = [line.rstrip('\r\n') for line in lines]

        self._set_model(TextModel(lines, select_syntax(filename)))

        position = self.settings.load_position(filename)
        if position is not None:
            self.model.set_cursor(*position)
        logger.info("Loaded %s: %d lines", filename, self.model.num_lines)

    def save_file(self, filename: str) -> bool:
        """Save the current document to a file atomically.

        Returns:
            True if save succeeded, False otherwise
        """
        content = self.model.to_text().encode(EditorConstants.FILE_ENCODING)

        # Write to a temporary file in the same directory so the rename
        # stays on one filesystem
        dir_name = os.path.dirname(os.path.abspath(filename))
        temp_filename = None
        try:
            fd, temp_filename = tempfile.mkstemp(
                prefix=EditorConstants.ATOMIC_SAVE_PREFIX + os.path.basename(filename) + ".",
                suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
                dir=dir_name,
            )
            with os.fdopen(fd, 'wb') as temp_file:
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            if os.path.exists(filename):
                shutil.copymode(filename, temp_filename)
            else:
                os.chmod(temp_filename, 0o644)
            os.replace(temp_filename, filename)
        except OSError as e:
            logger.warning("Saving %s failed: %s", filename, e)
            self.set_status_message(f"Can't save! I/O error: {e.strerror or e}")
            if temp_filename and os.path.exists(temp_filename):
                try:
                    os.remove(temp_filename)
                except OSError:
                    pass
            return False

        self.model.dirty = 0
        self.set_status_message(f"{len(content)} bytes written to disk")
        logger.info("Saved %s: %d bytes", filename, len(content))
        self._remember_position()
        return True

    def handle_save(self):
        """Handle Ctrl-S save command."""
        if self.filename is None:
            filename = self.prompt(EditorConstants.SAVE_PROMPT)
            if filename is None:
                self.set_status_message("Save aborted")
                return
            self.filename = filename
            self.model.set_syntax(select_syntax(filename))
        self.save_file(self.filename)

    def _remember_position(self):
        if self.filename is None:
            return
        pos = self.model.cursor_position
        self.settings.save_position(self.filename, pos.line_index, pos.char_index)
