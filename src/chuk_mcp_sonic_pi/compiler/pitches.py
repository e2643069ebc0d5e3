"""
Pitch sources - what a play statement or sequence literal resolves to.

A pitch source may be a chord expression, a note name, a MIDI number, a list
literal, a bound variable, a round-robin read, or a random pick. Everything
resolves to a list of MIDI numbers; anything unresolvable gives an empty
list, and an empty list produces no event.
"""

from __future__ import annotations

import random
import re
from collections.abc import Iterable, Sequence

from chuk_mcp_sonic_pi.compiler.context import ScopeState
from chuk_mcp_sonic_pi.constants import DEFAULT_CHOOSE_PITCH
from chuk_mcp_sonic_pi.core.chord import chord_to_midi, get_chord_quality
from chuk_mcp_sonic_pi.core.pitch import normalize_symbol, parse_note
from chuk_mcp_sonic_pi.parser.statements import (
    is_note_literal,
    list_items,
    split_top_level,
    unwrap_call,
)

# Symbols that mean "play nothing"
REST_SYMBOLS = frozenset({"r", "rest", "nil"})

# Binding name of the random-scale-degree placeholder
SCALE_PLACEHOLDER = "notes"

_CHOOSE_RE = re.compile(r"^([a-zA-Z_]\w*)\.choose\s*(?:\(\s*\))?$")


def is_rest(token: str) -> bool:
    return normalize_symbol(token).lower() in REST_SYMBOLS


def to_midi(values: Iterable[float]) -> list[int]:
    """Round to MIDI numbers, dropping anything outside 0-127."""
    notes: list[int] = []
    for value in values:
        midi = int(round(value))
        if 0 <= midi <= 127:
            notes.append(midi)
    return notes


def note_value(token: str, state: ScopeState, rng: random.Random) -> float | None:
    """A single pitch-like value: note name, bound scalar or numeric expression."""
    if is_note_literal(token):
        return float(parse_note(token))  # type: ignore[arg-type]
    return state.number(token, rng)


def chord_values(args: str, state: ScopeState, rng: random.Random) -> list[float]:
    """Resolve `chord(tonic, quality)` arguments to pitches."""
    parts = split_top_level(args)
    if not parts:
        return []
    tonic = parts[0]
    quality = parts[1] if len(parts) > 1 else "major"
    if is_note_literal(tonic):
        return [float(n) for n in chord_to_midi(tonic, quality)]
    root = state.number(tonic, rng)
    if root is None:
        return []
    return [float(n) for n in get_chord_quality(quality).get_midi_notes(int(round(root)))]


def resolve_items(items: Sequence[str], state: ScopeState, rng: random.Random) -> list[float]:
    """
    Resolve the items of a sequence literal.

    Chords and bound sequences are flattened in place; rests and
    unresolvable items are dropped.
    """
    values: list[float] = []
    for item in items:
        if is_rest(item):
            continue
        chord_args = unwrap_call(item, "chord")
        if chord_args is not None:
            values.extend(chord_values(chord_args, state, rng))
            continue
        bound = state.sequence(item.strip())
        if bound is not None:
            values.extend(bound)
            continue
        value = note_value(item, state, rng)
        if value is not None:
            values.append(value)
    return values


def _choose(name: str, state: ScopeState, rng: random.Random) -> list[float]:
    pool: Sequence[float] | None = state.sequence(name)
    if name == SCALE_PLACEHOLDER:
        if state.scale is not None:
            pool = state.scale.notes()
        elif not pool:
            return [float(DEFAULT_CHOOSE_PITCH)]
    if not pool:
        return []
    return [rng.choice(list(pool))]


def resolve_pitches(source: str, state: ScopeState, rng: random.Random) -> list[int]:
    """
    Resolve a play statement's pitch source to MIDI notes.

    Args:
        source: The first argument of the play statement
        state: Bindings, cursors and active scale (cursors may advance)
        rng: Random source for `.choose`

    Returns:
        MIDI notes in order; empty if nothing resolves
    """
    text = source.strip()
    if is_rest(text):
        return []

    chord_args = unwrap_call(text, "chord")
    if chord_args is not None:
        return to_midi(chord_values(chord_args, state, rng))

    items = list_items(text)
    if items is not None:
        return to_midi(resolve_items(items, state, rng))

    choose = _CHOOSE_RE.match(text)
    if choose:
        return to_midi(_choose(choose.group(1), state, rng))

    bound = state.sequence(text)
    if bound is not None:
        return to_midi(bound)

    value = note_value(text, state, rng)
    return to_midi([value]) if value is not None else []
