"""Constants and configuration for the sedit editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Rendering
    TAB_STOP = 4  # Tabs expand to the next multiple of this many cells
    FILLER_GLYPH = "~"  # Drawn on screen rows past the end of the document

    # Keyboard timing
    ESCAPE_SEQUENCE_TIMEOUT = 0.1  # Deadline for the bytes following ESC (seconds)
    KEY_POLL_TIMEOUT = 0.1  # Poll interval while waiting for a key (seconds)

    # Screen layout
    STATUS_ROWS = 2  # Status bar plus message line at the bottom
    STATUS_FILENAME_WIDTH = 20  # Characters of the file name shown in the status bar
    DEFAULT_ROWS = 24  # Used until the real terminal size is known
    DEFAULT_COLUMNS = 80
    WINDOW_SIZE_PROBE_DISTANCE = 999  # Cursor nudge used by the size fallback
    CURSOR_REPORT_TIMEOUT = 1.0  # Seconds to wait for a cursor position report

    # Status messages
    STATUS_MESSAGE_TIMEOUT = 5  # Seconds a status message stays on screen
    HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = search"
    QUIT_WARNING = (
        "WARNING -- File unsaved, changes will be lost. "
        "Press Ctrl-Q again to force quit"
    )
    SAVE_PROMPT = "Save as: {} (ESC to cancel)"
    SEARCH_PROMPT = "Search: {} (Use ESC/Arrows/Enter)"

    # Shown instead of file contents when the document has no lines
    WELCOME_BANNER = (
        "   ___  ___  ___  _  _____ ",
        "  / __|| __||   \\| ||_   _|",
        "  \\__ \\| _| | |) | |  | |  ",
        "  |___/|___||___/|_|  |_|  ",
        "",
        "   sedit -- a small terminal editor",
    )

    # File operations
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary save files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files
    FILE_ENCODING = "latin-1"  # One byte per character, any byte round-trips
