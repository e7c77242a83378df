"""Syntax profiles and the per-line highlighter."""

import os
import string
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class Highlight(IntEnum):
    """Highlight class of a single display cell."""
    NORMAL = 0
    COMMENT = 1
    STRING = 2
    NUMBER = 3
    MATCH = 4
    KEYWORD1 = 5
    KEYWORD2 = 6


HL_HIGHLIGHT_NUMBERS = 1 << 0
HL_HIGHLIGHT_STRINGS = 1 << 1

# Keywords ending with this marker are highlighted as KEYWORD2 (types)
SECONDARY_KEYWORD_MARKER = "|"

SEPARATORS = ",.()+-/*=~%<>[];{}"


@dataclass(frozen=True)
class SyntaxProfile:
    """Static description of how one language is highlighted."""
    name: str
    filematch: tuple[str, ...]
    keywords: tuple[str, ...]
    singleline_comment_start: str
    multiline_comment_start: str
    multiline_comment_end: str
    flags: int

    @property
    def keyword_entries(self) -> list[tuple[str, Highlight]]:
        """Keywords with the marker stripped, paired with their highlight."""
        entries = []
        for keyword in self.keywords:
            if keyword.endswith(SECONDARY_KEYWORD_MARKER):
                entries.append((keyword[:-1], Highlight.KEYWORD2))
            else:
                entries.append((keyword, Highlight.KEYWORD1))
        return entries

    @property
    def highlight_numbers(self) -> bool:
        return bool(self.flags & HL_HIGHLIGHT_NUMBERS)

    @property
    def highlight_strings(self) -> bool:
        return bool(self.flags & HL_HIGHLIGHT_STRINGS)

    @property
    def has_block_comments(self) -> bool:
        return bool(self.multiline_comment_start and self.multiline_comment_end)


C_PROFILE = SyntaxProfile(
    name="C/C++",
    filematch=(".c", ".h", ".cpp", ".hpp"),
    keywords=(
        "switch", "if", "while", "for", "break", "continue", "return", "else",
        "#include", "#define", "struct", "union", "typedef", "static", "enum",
        "class", "case", "const",
        "int|", "long|", "double|", "float|", "char|", "unsigned|", "signed|",
        "void|",
    ),
    singleline_comment_start="//",
    multiline_comment_start="/*",
    multiline_comment_end="*/",
    flags=HL_HIGHLIGHT_NUMBERS | HL_HIGHLIGHT_STRINGS,
)

PYTHON_PROFILE = SyntaxProfile(
    name="Python",
    filematch=(".py",),
    keywords=(
        "def", "class", "if", "elif", "else", "for", "while", "return",
        "import", "from", "as", "with", "try", "except", "finally", "raise",
        "yield", "lambda", "pass", "break", "continue", "in", "is", "not",
        "and", "or", "global", "nonlocal", "assert", "del",
        "None|", "True|", "False|", "self|", "int|", "str|", "float|",
        "list|", "dict|", "tuple|", "set|", "bytes|", "bool|",
    ),
    singleline_comment_start="#",
    multiline_comment_start="",
    multiline_comment_end="",
    flags=HL_HIGHLIGHT_NUMBERS | HL_HIGHLIGHT_STRINGS,
)

# Highlight database, searched in order
HLDB: tuple[SyntaxProfile, ...] = (C_PROFILE, PYTHON_PROFILE)


def select_syntax(filename: Optional[str]) -> Optional[SyntaxProfile]:
    """Pick the profile whose extensions match ``filename``, if any."""
    if not filename:
        return None
    ext = os.path.splitext(os.path.basename(filename))[1]
    if not ext:
        return None
    for profile in HLDB:
        if ext in profile.filematch:
            return profile
    return None


def is_separator(ch: str) -> bool:
    """True for characters that end a word for number/keyword matching."""
    return ch in string.whitespace or ch == "\0" or ch in SEPARATORS


def highlight_line(
    profile: Optional[SyntaxProfile],
    render: str,
    starts_in_comment: bool = False,
) -> tuple[list[Highlight], bool]:
    """Classify every cell of one rendered line.

    Scans left to right in a single pass. At each cell the first rule that
    applies wins: line comment, string, block comment, number, keyword.

    Args:
        profile: Language profile, or None for plain text.
        render: The line's display string (tabs and control chars expanded).
        starts_in_comment: Whether the previous line ended inside an
            unterminated block comment.

    Returns:
        (tags, ends_in_comment) where tags has one entry per cell of render.
    """
    n = len(render)
    tags = [Highlight.NORMAL] * n
    if profile is None:
        return tags, False

    line_comment = profile.singleline_comment_start
    block_start = profile.multiline_comment_start
    block_end = profile.multiline_comment_end
    block_comments = profile.has_block_comments
    keywords = profile.keyword_entries

    prev_sep = True
    in_string = ""  # the quote character that opened the string
    in_comment = starts_in_comment and block_comments

    i = 0
    while i < n:
        ch = render[i]
        prev_tag = tags[i - 1] if i > 0 else Highlight.NORMAL

        if line_comment and not in_string and not in_comment:
            if render.startswith(line_comment, i):
                tags[i:] = [Highlight.COMMENT] * (n - i)
                break

        if profile.highlight_strings:
            if in_string:
                tags[i] = Highlight.STRING
                if ch == "\\" and i + 1 < n:
                    tags[i + 1] = Highlight.STRING
                    i += 2
                    continue
                if ch == in_string:
                    in_string = ""
                prev_sep = True
                i += 1
                continue
            if ch in ("\"", "'"):
                in_string = ch
                tags[i] = Highlight.STRING
                i += 1
                continue

        if block_comments and not in_string:
            if in_comment:
                if render.startswith(block_end, i):
                    end = i + len(block_end)
                    tags[i:end] = [Highlight.COMMENT] * len(block_end)
                    i = end
                    in_comment = False
                    prev_sep = True
                else:
                    tags[i] = Highlight.COMMENT
                    i += 1
                continue
            if render.startswith(block_start, i):
                end = i + len(block_start)
                tags[i:end] = [Highlight.COMMENT] * len(block_start)
                i = end
                in_comment = True
                continue

        if profile.highlight_numbers:
            is_digit = "0" <= ch <= "9"
            if (is_digit and (prev_sep or prev_tag == Highlight.NUMBER)) or \
               (ch == "." and prev_tag == Highlight.NUMBER):
                tags[i] = Highlight.NUMBER
                prev_sep = False
                i += 1
                continue

        if prev_sep:
            matched = False
            for keyword, tag in keywords:
                end = i + len(keyword)
                if render.startswith(keyword, i) and (end == n or is_separator(render[end])):
                    tags[i:end] = [tag] * len(keyword)
                    i = end
                    matched = True
                    break
            if matched:
                prev_sep = False
                continue

        prev_sep = is_separator(ch)
        i += 1

    return tags, in_comment


# Foreground color index (as taken by blessed's Terminal.color) per class
_COLORS = {
    Highlight.COMMENT: 5,   # magenta
    Highlight.STRING: 6,    # cyan
    Highlight.NUMBER: 3,    # yellow
    Highlight.MATCH: 4,     # blue
    Highlight.KEYWORD1: 1,  # red
    Highlight.KEYWORD2: 2,  # green
}


def syntax_to_color(tag: Highlight) -> int:
    """Map a highlight class to a terminal color index."""
    return _COLORS.get(tag, 7)
