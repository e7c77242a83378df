"""Shared test doubles for the terminal layer."""

import contextlib
import io

import pytest

from sedit.editor import Editor
from sedit.settings_persistence import SettingsPersistence
from sedit.terminal import TerminalInterface


class FakeTerm:
    """Stand-in for blessed.Terminal with fixed ANSI capability strings."""

    hide_cursor = '\x1b[?25l'
    normal_cursor = '\x1b[?25h'
    home = '\x1b[H'
    clear = '\x1b[2J'
    clear_eol = '\x1b[K'
    normal = '\x1b[m'
    reverse = '\x1b[7m'
    enter_fullscreen = '\x1b[?1049h'
    exit_fullscreen = '\x1b[?1049l'

    def __init__(self, location=(-1, -1)):
        self.location = location
        self.raw_entered = 0

    def move(self, y, x):
        return f'\x1b[{y + 1};{x + 1}H'

    def color(self, n):
        return f'\x1b[{30 + n}m'

    def move_right(self, n):
        return f'\x1b[{n}C'

    def move_down(self, n):
        return f'\x1b[{n}B'

    def get_location(self, timeout=None):
        return self.location

    @contextlib.contextmanager
    def raw(self):
        self.raw_entered += 1
        yield


class ScriptedTerminal(TerminalInterface):
    """Terminal whose input is a byte script and whose output is captured."""

    # Give up after this many empty polls in a row so a test that runs out
    # of scripted input fails instead of hanging
    MAX_EMPTY_POLLS = 100

    def __init__(self, data=b"", size=(24, 80)):
        super().__init__(terminal=FakeTerm(), stdin_fd=-1, stdout=io.BytesIO())
        self.input = bytearray(data)
        self.size = size
        self.timeouts = []
        self._empty_polls = 0

    def feed(self, data: bytes):
        self.input.extend(data)

    def read_byte(self, timeout=None):
        self.timeouts.append(timeout)
        if not self.input:
            self._empty_polls += 1
            if self._empty_polls > self.MAX_EMPTY_POLLS:
                raise RuntimeError("scripted input exhausted")
            return None
        self._empty_polls = 0
        return self.input.pop(0)

    def get_window_size(self):
        return self.size

    @property
    def output(self) -> str:
        return self.stdout.getvalue().decode('latin-1')


@pytest.fixture
def fake_term():
    return FakeTerm()


@pytest.fixture
def terminal():
    return ScriptedTerminal()


@pytest.fixture
def settings(tmp_path):
    return SettingsPersistence(tmp_path / "state")


@pytest.fixture
def editor(terminal, settings):
    """Editor on a 24x80 scripted terminal (22 text rows)."""
    return Editor(terminal=terminal, settings=settings)
