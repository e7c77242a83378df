"""sedit CLI entry point.

Allows running via `python -m sedit` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import sys
from .version import get_version_string

USAGE = "usage: sedit [--version | --keytest | FILE]"


def _escape_bytes(raw: bytes) -> str:
    """Return a printable representation of raw key bytes."""
    return raw.decode('latin-1').encode('unicode_escape').decode('ascii')


def format_key_event(ev) -> str:
    parts = [f"type={ev.key_type.value}", f"value={ev.value}", f"raw='{_escape_bytes(ev.raw)}'"]
    if ev.code is not None:
        parts.append(f"code={ev.code}")
    return ' '.join(parts)


def run_keyboard_test() -> None:
    """Print decoded key events until ESC, for checking a terminal's sequences."""
    from .terminal import TerminalInterface
    from .keyboard import KeyboardHandler, KeyType

    term = TerminalInterface()
    kb = KeyboardHandler(term)

    # Raw mode turns off output processing, hence the explicit \r\n
    with term.raw_mode():
        term.write("Keyboard test mode -- press keys to see parsed events.\r\n")
        term.write("Quit with ESC.\r\n")
        while True:
            ev = kb.read_key()
            if ev.key_type == KeyType.SPECIAL and ev.value == 'escape':
                term.write("Exiting keyboard test.\r\n")
                break
            term.write(format_key_event(ev) + "\r\n")


def main(argv: list[str] | None = None) -> int:
    # Very small arg parsing to support keyboard test mode, version, and optional filename
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] in ("--version", "-V"):
        print(f"sedit {get_version_string()}")
        return 0
    if args and args[0] in ("--help", "-h"):
        print(USAGE)
        return 0

    from .logging_config import setup_logging
    from .terminal import TerminalError
    setup_logging()

    try:
        if args and args[0] in ('--keytest', '--keyboard-test'):
            run_keyboard_test()
            return 0

        # Lazy import to avoid importing UI deps for --version
        from .editor import Editor
        editor = Editor()
        if args:
            try:
                editor.load_file(args[0])
            except OSError as e:
                print(f"sedit: {args[0]}: {e.strerror or e}", file=sys.stderr)
                return 1
        editor.run()
    except TerminalError as e:
        print(f"sedit: {e.operation}: {e.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
