"""Display expansion of raw line text.

Raw text stores one character per byte. Before it is drawn or highlighted
each line is expanded into a display string:

- a tab becomes spaces up to the next multiple of the tab stop,
- codes 0..26 become caret notation (``^@``, ``^A`` .. ``^Z``),
- codes 28..31 become ``^?``,
- everything else is copied unchanged.

Rendering and cursor column math both go through :func:`expand_char` so
the cursor can never drift away from the glyph it sits on.
"""

from .constants import EditorConstants


def expand_char(ch: str, column: int) -> str:
    """Return the display cells for ``ch`` when drawn at ``column``."""
    if ch == "\t":
        tab_stop = EditorConstants.TAB_STOP
        return " " * (tab_stop - column % tab_stop)
    code = ord(ch)
    if code <= 26:
        return "^" + chr(ord("@") + code)
    if 28 <= code <= 31:
        return "^?"
    return ch


def render_text(chars: str) -> str:
    """Expand a whole line of raw text into its display string."""
    cells: list[str] = []
    column = 0
    for ch in chars:
        expanded = expand_char(ch, column)
        cells.append(expanded)
        column += len(expanded)
    return "".join(cells)


def display_column(chars: str, char_index: int) -> int:
    """Display column of the cell where ``chars[char_index]`` starts.

    Only the prefix up to the cursor is walked; ``char_index`` may equal
    ``len(chars)`` for the position just past the end of the line.
    """
    column = 0
    for ch in chars[:char_index]:
        column += len(expand_char(ch, column))
    return column
