"""sedit - A small terminal text editor with syntax highlighting."""

from .model import TextModel, Row, CursorPosition
from .view import TerminalTextView
from .syntax import Highlight, SyntaxProfile, select_syntax

__all__ = [
    'TextModel',
    'Row',
    'CursorPosition',
    'TerminalTextView',
    'Highlight',
    'SyntaxProfile',
    'select_syntax',
]
