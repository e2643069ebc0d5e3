"""
Block splitter - depth-balanced extraction of loops and nested bodies.

A script is a prelude (top-level lines) plus zero or more named
`live_loop :name do ... end` blocks. The same depth scan extracts the body of
any nested construct (`N.times do`, `with_bpm N do`, `if one_in(N)`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from chuk_mcp_sonic_pi.constants import IMPLICIT_LOOP_NAME
from chuk_mcp_sonic_pi.parser.scanner import ScannedLine, scan

_LIVE_LOOP_RE = re.compile(r"""^live_loop\s+(?::(\w+)|["'](\w+)["'])""")


@dataclass
class Block:
    """A named block and the lines of its body."""

    name: str
    lines: list[ScannedLine]
    start_line: int = 0  # 1-based line of the opener (0 for implicit blocks)


@dataclass
class Script:
    """A split script: the loops in source order and the prelude outside them."""

    loops: list[Block] = field(default_factory=list)
    prelude: list[ScannedLine] = field(default_factory=list)

    @property
    def is_implicit(self) -> bool:
        """True when the script had no named loops."""
        return len(self.loops) == 1 and self.loops[0].start_line == 0


def collect_block(lines: list[ScannedLine], start: int) -> tuple[list[ScannedLine], int]:
    """
    Collect a block body starting just after its opener.

    Depth starts at 1; every opener increments it and every `end` decrements
    it. The block closes when depth returns to zero.

    Args:
        lines: All lines of the enclosing body
        start: Index of the first body line

    Returns:
        (body lines, index of the line after the terminator). An unterminated
        block swallows the remaining lines.
    """
    body: list[ScannedLine] = []
    depth = 1
    i = start
    while i < len(lines):
        line = lines[i]
        depth += line.depth_change
        if depth == 0:
            return body, i + 1
        body.append(line)
        i += 1
    return body, i


def split_else(body: list[ScannedLine]) -> tuple[list[ScannedLine], list[ScannedLine]]:
    """Split an `if` body at its own top-level `else` line."""
    depth = 0
    for i, line in enumerate(body):
        if depth == 0 and line.first_word == "else":
            return body[:i], body[i + 1 :]
        depth += line.depth_change
    return body, []


def loop_name(line: ScannedLine) -> str | None:
    """Return the loop name if the line opens a live_loop."""
    if not line.is_opener:
        return None
    match = _LIVE_LOOP_RE.match(line.code)
    if not match:
        return None
    return match.group(1) or match.group(2)


def split_lines(lines: list[ScannedLine]) -> Script:
    """Split scanned lines into loops and prelude."""
    script = Script()
    i = 0
    while i < len(lines):
        line = lines[i]
        name = loop_name(line)
        if name is None:
            script.prelude.append(line)
            i += 1
            continue
        body, i = collect_block(lines, i + 1)
        script.loops.append(Block(name=name, lines=body, start_line=line.number))

    if not script.loops:
        return Script(loops=[Block(name=IMPLICIT_LOOP_NAME, lines=list(lines))], prelude=[])
    return script


def split_script(text: str) -> Script:
    """
    Split raw script text into named loops.

    If no top-level `live_loop` exists, the whole script becomes the single
    implicit loop named 'main'.
    """
    return split_lines(scan(text))
