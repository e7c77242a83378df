"""Keyboard input decoding from raw terminal bytes."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .constants import EditorConstants

logger = logging.getLogger(__name__)

ESC = 0x1b
DEL = 0x7f


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    CTRL = "ctrl"
    SPECIAL = "special"


@dataclass
class KeyEvent:
    """Represents a decoded keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'q' for Ctrl-Q, 'left')
    raw: bytes  # The bytes consumed to produce this event
    code: Optional[int] = None


# ESC [ <digit> ~
_TILDE_SEQUENCES = {
    "1": "home",
    "3": "delete",
    "4": "end",
    "5": "page_up",
    "6": "page_down",
    "7": "home",
    "8": "end",
}

# ESC [ <letter>
_CSI_SEQUENCES = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

# ESC O <letter>
_SS3_SEQUENCES = {
    "H": "home",
    "F": "end",
}


class KeyboardHandler:
    """Decodes bytes from the terminal into one logical key at a time.

    A lone ESC and the start of an escape sequence look the same, so after
    ESC the rest of the sequence must arrive before a short deadline.
    Anything incomplete or unrecognized decodes as a bare ``escape``.
    """

    def __init__(self, terminal_interface):
        """Initialize with a terminal interface providing ``read_byte``."""
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Decode the next key, or return None if no byte arrived in time."""
        b = self.terminal.read_byte(timeout)
        if b is None:
            return None
        if b == ESC:
            return self._decode_escape()
        return self.parse_byte(b)

    def read_key(self) -> KeyEvent:
        """Block until a key arrives, polling with a short timeout."""
        while True:
            event = self.get_key_event(EditorConstants.KEY_POLL_TIMEOUT)
            if event is not None:
                return event

    @staticmethod
    def parse_byte(b: int) -> KeyEvent:
        """Classify a single non-ESC byte."""
        raw = bytes([b])
        if b < 32 or b == DEL:
            # Caret letter, e.g. 0x11 -> 'q' for Ctrl-Q, 0x7f -> '?'
            value = chr(b ^ 0x40).lower()
            return KeyEvent(key_type=KeyType.CTRL, value=value, raw=raw, code=b)
        return KeyEvent(key_type=KeyType.REGULAR, value=chr(b), raw=raw, code=b)

    def _decode_escape(self) -> KeyEvent:
        deadline = time.monotonic() + EditorConstants.ESCAPE_SEQUENCE_TIMEOUT
        consumed = bytearray([ESC])

        def next_char() -> Optional[str]:
            remaining = max(0.0, deadline - time.monotonic())
            b = self.terminal.read_byte(remaining)
            if b is None:
                return None
            consumed.append(b)
            return chr(b)

        def special(name: str) -> KeyEvent:
            return KeyEvent(key_type=KeyType.SPECIAL, value=name, raw=bytes(consumed))

        first = next_char()
        if first is None:
            return special("escape")
        second = next_char()
        if second is None:
            return special("escape")

        name = None
        if first == "[":
            if "0" <= second <= "9":
                if next_char() == "~":
                    name = _TILDE_SEQUENCES.get(second)
            else:
                name = _CSI_SEQUENCES.get(second)
        elif first == "O":
            name = _SS3_SEQUENCES.get(second)

        if name is None:
            logger.debug("Unrecognized escape sequence %r", bytes(consumed))
            return special("escape")
        return special(name)
