"""
Statement classifier - phase one of compilation.

Turns scanned lines into a closed set of statement variants. Nested block
bodies are classified recursively and attached to their opener, so the
evaluator never looks at raw text or counts `end` keywords itself.

Every variant carries the source line it came from. Anything the
classifier does not understand becomes an Unrecognized statement, which is
reported as a warning and otherwise ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from chuk_mcp_sonic_pi.constants import StatementKind
from chuk_mcp_sonic_pi.core.pitch import parse_note
from chuk_mcp_sonic_pi.parser.blocks import collect_block, split_else
from chuk_mcp_sonic_pi.parser.expressions import is_numeric_expression
from chuk_mcp_sonic_pi.parser.scanner import ScannedLine, mask_strings

_NAME = r"[a-zA-Z_]\w*"

_TEMPO_RE = re.compile(r"^use_bpm\b\s*(.+)$")
_SYNTH_RE = re.compile(r"""^use_synth\s+:?["']?(\w+)["']?\s*$""")
_DEFAULTS_RE = re.compile(r"^use_synth_defaults\b\s*(.*)$")
_ASSIGN_RE = re.compile(rf"^({_NAME})\s*=(?!=)\s*(.+)$")
_REPEAT_RE = re.compile(r"^(.+?)\.times\s+do\b")
_WITH_BPM_RE = re.compile(r"^with_bpm\s+(.+?)\s+do\b")
_ONE_IN_RE = re.compile(
    r"^if\s+one_in(?:\s*\(\s*(?P<paren>[^)]*?)\s*\)|\s+(?P<bare>\S+?))\s*(?:then|do)?\s*$"
)
_ONE_IN_SUFFIX_RE = re.compile(r"^(?P<stmt>.+?)\s+if\s+one_in\s*\(\s*(?P<n>[^)]*?)\s*\)\s*$")
_SLEEP_RE = re.compile(r"^sleep\b\s*(.+)$")
_PLAY_CHORD_RE = re.compile(r"^play_chord\b\s*(.+)$")
_PLAY_RE = re.compile(r"^play\b\s*(.+)$")
_SAMPLE_RE = re.compile(r"^sample\b\s*(.+)$")
_RANDOM_RE = re.compile(r"^(rrand_i|rrand)\s*\((.*)\)$")
_CURSOR_RE = re.compile(rf"^({_NAME})\.tick\s*(?:\(\s*\))?$")
_CHOOSE_RE = re.compile(rf"^{_NAME}\.choose\s*(?:\(\s*\))?$")
_OPTION_RE = re.compile(r"^([a-zA-Z_]\w*):\s*(.+)$")
_CALL_RE_CACHE: dict[str, re.Pattern[str]] = {}

_OPEN = "(["
_CLOSE = ")]"


# ============================================================================
# Text helpers
# ============================================================================


def split_top_level(text: str) -> list[str]:
    """
    Split on commas that are not inside brackets or quotes.

    Example:
        split_top_level("chord(:e3, :minor), release: 2")
        == ["chord(:e3, :minor)", "release: 2"]
    """
    items: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None
    for ch in text:
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch in _OPEN:
            depth += 1
        elif ch in _CLOSE:
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail:
        items.append(tail)
    return items


def parse_options(items: Sequence[str]) -> dict[str, str]:
    """Collect `key: value` items into a dict of raw value strings."""
    options: dict[str, str] = {}
    for item in items:
        match = _OPTION_RE.match(item.strip())
        if match:
            options[match.group(1)] = match.group(2).strip()
    return options


def split_arguments(text: str) -> tuple[list[str], dict[str, str]]:
    """Split an argument list into positional items and keyword options."""
    positional: list[str] = []
    keywords: list[str] = []
    for item in split_top_level(text):
        (keywords if _OPTION_RE.match(item) else positional).append(item)
    return positional, parse_options(keywords)


def bracket_balance(text: str) -> int:
    """Open minus close brackets outside quoted strings."""
    masked = mask_strings(text)
    return sum(masked.count(c) for c in _OPEN) - sum(masked.count(c) for c in _CLOSE)


def unwrap_call(text: str, name: str) -> str | None:
    """
    Return the argument text of a call written in any of Ruby's forms.

    `name(args)`, `(name args)`, `(name(args))` and `name args` all give
    `args`. Returns None if the text is not a call to `name`.
    """
    pattern = _CALL_RE_CACHE.get(name)
    if pattern is None:
        pattern = re.compile(rf"^(\()?\s*{name}\b(?:\s*(\())?\s*(.*)$")
        _CALL_RE_CACHE[name] = pattern
    match = pattern.match(text.strip())
    if not match:
        return None
    outer, inner, rest = match.groups()
    rest = rest.strip()
    for wrapped in (inner, outer):
        if wrapped:
            if not rest.endswith(")"):
                return None
            rest = rest[:-1].rstrip()
    if not (inner or outer) and rest.startswith("("):
        return None
    return rest


def list_items(text: str) -> list[str] | None:
    """Items of a `[a, b]`, `(ring a, b)` or `ring(a, b)` literal, else None."""
    stripped = text.strip()
    if stripped.startswith("[") and stripped.endswith("]"):
        return split_top_level(stripped[1:-1])
    args = unwrap_call(stripped, "ring")
    if args is None:
        return None
    return split_top_level(args)


def is_note_literal(text: str) -> bool:
    """True for quoted or symbol note names (':e3', "fs2")."""
    stripped = text.strip()
    return stripped[:1] in (":", "'", '"') and parse_note(stripped) is not None


# ============================================================================
# Statement variants
# ============================================================================


@dataclass(frozen=True)
class Statement:
    """Base for every statement variant."""

    line: ScannedLine

    kind: ClassVar[StatementKind]

    @property
    def text(self) -> str:
        """The trimmed source line."""
        return self.line.raw.strip()


@dataclass(frozen=True)
class TempoChange(Statement):
    """`use_bpm N`"""

    bpm: str

    kind: ClassVar[StatementKind] = StatementKind.TEMPO


@dataclass(frozen=True)
class InstrumentSelect(Statement):
    """`use_synth :name`"""

    name: str

    kind: ClassVar[StatementKind] = StatementKind.INSTRUMENT


@dataclass(frozen=True)
class DefaultsChange(Statement):
    """`use_synth_defaults amp: a, release: r`"""

    options: dict[str, str] = field(default_factory=dict, hash=False)

    kind: ClassVar[StatementKind] = StatementKind.DEFAULTS


@dataclass(frozen=True)
class SequenceAssign(Statement):
    """`x = (ring ...)`, `x = [...]` or `x = chord(...)`"""

    name: str
    items: tuple[str, ...]

    kind: ClassVar[StatementKind] = StatementKind.SEQUENCE_ASSIGN


@dataclass(frozen=True)
class ScaleAssign(Statement):
    """`x = (scale :root, :mode, num_octaves: n)`"""

    name: str
    root: str
    mode: str | None = None
    num_octaves: str | None = None

    kind: ClassVar[StatementKind] = StatementKind.SCALE_ASSIGN


@dataclass(frozen=True)
class RandomAssign(Statement):
    """`x = rrand(low, high)` or `x = rrand_i(low, high)`"""

    name: str
    low: str
    high: str | None = None
    integer: bool = False

    kind: ClassVar[StatementKind] = StatementKind.RANDOM_ASSIGN


@dataclass(frozen=True)
class ValueAssign(Statement):
    """`x = <numeric expression>`, `x = :note` or `x = y.choose`"""

    name: str
    expr: str

    kind: ClassVar[StatementKind] = StatementKind.VALUE_ASSIGN


@dataclass(frozen=True)
class CursorAssign(Statement):
    """`x = y.tick`"""

    name: str
    source: str

    kind: ClassVar[StatementKind] = StatementKind.CURSOR_ASSIGN


@dataclass(frozen=True)
class RepeatBlock(Statement):
    """`N.times do ... end`"""

    count: str
    body: tuple[Statement, ...] = ()

    kind: ClassVar[StatementKind] = StatementKind.REPEAT


@dataclass(frozen=True)
class TempoScope(Statement):
    """`with_bpm N do ... end`"""

    bpm: str
    body: tuple[Statement, ...] = ()

    kind: ClassVar[StatementKind] = StatementKind.TEMPO_SCOPE


@dataclass(frozen=True)
class Conditional(Statement):
    """`if one_in(N) ... [else ...] end`"""

    one_in: str
    body: tuple[Statement, ...] = ()
    else_body: tuple[Statement, ...] = ()

    kind: ClassVar[StatementKind] = StatementKind.CONDITIONAL


@dataclass(frozen=True)
class Wait(Statement):
    """`sleep N`"""

    beats: str

    kind: ClassVar[StatementKind] = StatementKind.WAIT


@dataclass(frozen=True)
class Play(Statement):
    """`play <source>, opts` or `play_chord [notes], opts`"""

    source: str
    options: dict[str, str] = field(default_factory=dict, hash=False)

    kind: ClassVar[StatementKind] = StatementKind.PLAY


@dataclass(frozen=True)
class SampleHit(Statement):
    """`sample :name, opts`"""

    name: str
    options: dict[str, str] = field(default_factory=dict, hash=False)

    kind: ClassVar[StatementKind] = StatementKind.SAMPLE


@dataclass(frozen=True)
class Unrecognized(Statement):
    """A line outside the supported subset."""

    kind: ClassVar[StatementKind] = StatementKind.UNRECOGNIZED


# Kinds that carry nested statement bodies
BLOCK_KINDS = frozenset(
    {StatementKind.REPEAT, StatementKind.TEMPO_SCOPE, StatementKind.CONDITIONAL}
)

# Kinds that make sound or spend time
TIMED_KINDS = frozenset({StatementKind.PLAY, StatementKind.SAMPLE, StatementKind.WAIT})


# ============================================================================
# Classification
# ============================================================================


def _classify_assignment(line: ScannedLine, name: str, rhs: str) -> Statement | None:
    items = list_items(rhs)
    if items is not None:
        return SequenceAssign(line, name=name, items=tuple(items))

    if unwrap_call(rhs, "chord") is not None:
        return SequenceAssign(line, name=name, items=(rhs.strip(),))

    scale_args = unwrap_call(rhs, "scale")
    if scale_args is not None:
        positional, options = split_arguments(scale_args)
        if not positional:
            return None
        return ScaleAssign(
            line,
            name=name,
            root=positional[0],
            mode=positional[1] if len(positional) > 1 else None,
            num_octaves=options.get("num_octaves"),
        )

    random_match = _RANDOM_RE.match(rhs)
    if random_match:
        fn, args = random_match.groups()
        bounds = split_top_level(args)
        if not bounds:
            return None
        return RandomAssign(
            line,
            name=name,
            low=bounds[0],
            high=bounds[1] if len(bounds) > 1 else None,
            integer=fn == "rrand_i",
        )

    cursor_match = _CURSOR_RE.match(rhs)
    if cursor_match:
        return CursorAssign(line, name=name, source=cursor_match.group(1))

    if is_numeric_expression(rhs) or is_note_literal(rhs) or _CHOOSE_RE.match(rhs):
        return ValueAssign(line, name=name, expr=rhs.strip())
    return None


def _classify_play(line: ScannedLine, args: str, as_chord: bool) -> Statement | None:
    items = split_top_level(args)
    if not items or _OPTION_RE.match(items[0]):
        return None
    source = items[0]
    if as_chord and list_items(source) is None:
        source = f"[{source}]"
    return Play(line, source=source, options=parse_options(items[1:]))


def classify_simple(line: ScannedLine, code: str) -> Statement | None:
    """
    Classify a single-line statement.

    Returns None when the code matches no supported form.
    """
    if match := _TEMPO_RE.match(code):
        return TempoChange(line, bpm=match.group(1).strip())
    if match := _SYNTH_RE.match(code):
        return InstrumentSelect(line, name=match.group(1))
    if match := _DEFAULTS_RE.match(code):
        return DefaultsChange(line, options=parse_options(split_top_level(match.group(1))))
    if match := _SLEEP_RE.match(code):
        return Wait(line, beats=match.group(1).strip())
    if match := _PLAY_CHORD_RE.match(code):
        return _classify_play(line, match.group(1), as_chord=True)
    if match := _PLAY_RE.match(code):
        return _classify_play(line, match.group(1), as_chord=False)
    if match := _SAMPLE_RE.match(code):
        items = split_top_level(match.group(1))
        if not items or _OPTION_RE.match(items[0]):
            return None
        return SampleHit(line, name=items[0], options=parse_options(items[1:]))
    if match := _ASSIGN_RE.match(code):
        return _classify_assignment(line, match.group(1), match.group(2))
    return None


# Blocks that define functions rather than run code
_DEFINITION_WORDS = frozenset({"define", "def"})


def _gather(lines: Sequence[ScannedLine], start: int) -> tuple[str, int]:
    """Join continuation lines until brackets balance."""
    code = lines[start].code
    i = start + 1
    while bracket_balance(code) > 0 and i < len(lines):
        code = f"{code} {lines[i].code}"
        i += 1
    return code, i


def _classify_block(line: ScannedLine, body_lines: list[ScannedLine]) -> list[Statement]:
    code = line.code

    if match := _REPEAT_RE.match(code):
        return [RepeatBlock(line, count=match.group(1).strip(), body=tuple(classify(body_lines)))]

    if match := _WITH_BPM_RE.match(code):
        return [TempoScope(line, bpm=match.group(1).strip(), body=tuple(classify(body_lines)))]

    if match := _ONE_IN_RE.match(code):
        then_lines, else_lines = split_else(body_lines)
        return [
            Conditional(
                line,
                one_in=match.group("paren") or match.group("bare") or "",
                body=tuple(classify(then_lines)),
                else_body=tuple(classify(else_lines)),
            )
        ]

    if line.first_word in _DEFINITION_WORDS:
        # Definitions only run when called; their bodies are not played here
        return [Unrecognized(line)]

    if "do" in line.words:
        # Unknown do-block (with_fx, in_thread, ...): report once, run the body inline
        return [Unrecognized(line), *classify(body_lines)]

    # Other keyword blocks (if, def, case, ...) are skipped whole
    return [Unrecognized(line)]


def classify(lines: Sequence[ScannedLine]) -> list[Statement]:
    """
    Classify a block body into statements.

    Blank lines produce nothing. Block openers consume their body and
    terminator; multi-line literals consume their continuation lines.
    """
    statements: list[Statement] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.is_blank:
            i += 1
            continue

        if line.depth_change > 0:
            body_lines, i = collect_block(list(lines), i + 1)
            statements.extend(_classify_block(line, body_lines))
            continue

        code, next_index = _gather(lines, i)

        suffix = _ONE_IN_SUFFIX_RE.match(code)
        if suffix:
            inner = classify_simple(line, suffix.group("stmt"))
            statement: Statement | None = (
                Conditional(line, one_in=suffix.group("n"), body=(inner,)) if inner else None
            )
        else:
            statement = classify_simple(line, code)

        statements.append(statement or Unrecognized(line))
        i = next_index
    return statements


def walk(statements: Sequence[Statement]) -> Iterator[Statement]:
    """Yield every statement, depth first, including nested bodies."""
    for statement in statements:
        yield statement
        if isinstance(statement, (RepeatBlock, TempoScope)):
            yield from walk(statement.body)
        elif isinstance(statement, Conditional):
            yield from walk(statement.body)
            yield from walk(statement.else_body)


def format_warning(block_name: str, statement: Statement) -> str:
    """Warning text for a skipped line."""
    return f'Skipped line in {block_name}: "{statement.text}"'


def collect_warnings(statements: Sequence[Statement], block_name: str) -> list[str]:
    """One warning per unrecognized source line, in source order."""
    return [
        format_warning(block_name, s)
        for s in walk(statements)
        if s.kind is StatementKind.UNRECOGNIZED
    ]
