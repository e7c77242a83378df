#!/usr/bin/env python3
"""sedit - A small terminal text editor.

Usage:
    python main.py [filename]

Controls:
    Arrow keys, Home/End, PageUp/PageDown: Move the cursor
    Ctrl-S: Save file
    Ctrl-Q: Quit (press twice to discard unsaved changes)
    Ctrl-F: Search (arrows step between matches, ESC cancels)
    Type to insert text
    Backspace/Delete: Delete character
    Enter: Split line
"""

import sys
from sedit.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
