"""
Line scanner - comment and string aware view of a script.

Keyword matching must not be fooled by words inside comments or quoted
strings ('# do this later', puts "the end"). The scanner strips comments and
masks string contents once, so later phases only ever look at code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# First words that open a block terminated by `end`
BLOCK_KEYWORDS = frozenset({"if", "unless", "while", "until", "case", "begin", "def"})

_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*[?!]?")
_QUOTES = ("'", '"')


def strip_comment(text: str) -> str:
    """
    Remove a trailing comment, ignoring '#' inside quoted strings.

    A '#' only starts a comment at the start of the line or after whitespace,
    so note names such as ':c#4' survive.
    """
    quote: str | None = None
    escaped = False
    for i, ch in enumerate(text):
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in _QUOTES:
            quote = ch
        elif ch == "#" and (i == 0 or text[i - 1].isspace()):
            return text[:i]
    return text


def mask_strings(text: str) -> str:
    """Replace the contents of quoted strings with spaces, keeping the quotes."""
    out: list[str] = []
    quote: str | None = None
    escaped = False
    for ch in text:
        if quote:
            if escaped:
                escaped = False
                out.append(" ")
            elif ch == "\\":
                escaped = True
                out.append(" ")
            elif ch == quote:
                quote = None
                out.append(ch)
            else:
                out.append(" ")
            continue
        if ch in _QUOTES:
            quote = ch
        out.append(ch)
    return "".join(out)


@dataclass(frozen=True)
class ScannedLine:
    """One source line: its number, raw text, and comment-free code."""

    number: int  # 1-based
    raw: str
    code: str
    words: tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_blank(self) -> bool:
        """True for empty and comment-only lines."""
        return not self.code

    @property
    def first_word(self) -> str:
        return self.words[0] if self.words else ""

    @property
    def is_opener(self) -> bool:
        """True when this line opens a block that a later `end` closes."""
        if not self.words:
            return False
        if self.first_word in BLOCK_KEYWORDS:
            return True
        return "do" in self.words

    @property
    def is_terminator(self) -> bool:
        """True when this line is a bare block terminator."""
        return self.first_word == "end"

    @property
    def depth_change(self) -> int:
        """Net block depth change caused by this line."""
        if self.is_terminator:
            return -1
        if self.is_opener:
            # One-line blocks (`3.times do play 60 end`) open and close at once
            return 0 if self.words[-1] == "end" else 1
        return 0


def scan_line(number: int, raw: str) -> ScannedLine:
    """Scan a single line."""
    code = strip_comment(raw).strip()
    # Symbols (:do, :end) are values, not keywords
    masked = re.sub(r"(?<![\w:]):[A-Za-z_]\w*", " ", mask_strings(code))
    words = tuple(_WORD_RE.findall(masked))
    return ScannedLine(number=number, raw=raw, code=code, words=words)


def scan(text: str) -> list[ScannedLine]:
    """Scan a whole script into lines."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [scan_line(i + 1, raw) for i, raw in enumerate(normalized.split("\n"))]
