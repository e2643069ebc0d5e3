"""
Pitch primitives - PitchClass, Interval and note-name parsing.

PitchClass represents the 12 chromatic pitches (octave-independent).
Interval represents the distance between pitches in semitones.
parse_note() turns a note symbol such as ':fs4', 'Eb3' or 'c' into a MIDI number.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import ClassVar

# Default octave when a note symbol carries none (C4 = 60)
DEFAULT_OCTAVE = 4

# Display name mappings (module level to avoid IntEnum member issues)
_SHARP_NAMES: list[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
_FLAT_NAMES: list[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Letter -> semitone above C
_LETTER_SEMITONES: dict[str, int] = {"c": 0, "d": 2, "e": 4, "f": 5, "g": 7, "a": 9, "b": 11}

# Accidental spellings -> semitone shift
_ACCIDENTALS: dict[str, int] = {
    "": 0,
    "#": 1,
    "s": 1,
    "sh": 1,
    "sharp": 1,
    "b": -1,
    "f": -1,
    "fl": -1,
    "flat": -1,
}

_NOTE_RE = re.compile(r"^([a-g])(sharp|flat|sh|fl|#|s|b|f)?(\d+)?$")


def normalize_symbol(token: str) -> str:
    """Strip a leading symbol colon, surrounding quotes and whitespace."""
    token = token.strip()
    if token.startswith(":"):
        token = token[1:]
    return token.strip("'\"").strip()


def parse_note(symbol: str, default_octave: int = DEFAULT_OCTAVE) -> int | None:
    """
    Parse a note symbol into a MIDI note number.

    Accepts a letter A-G, an optional accidental (#, s, sh, sharp, b, f, fl,
    flat) and an optional octave. Returns None for anything else.

    Examples:
        parse_note(':c4') == 60
        parse_note('fs3') == parse_note('Gb3') == 54
        parse_note(':e') == 64
    """
    if not symbol:
        return None
    match = _NOTE_RE.match(normalize_symbol(symbol).lower())
    if not match:
        return None
    letter, accidental, octave = match.groups()
    semitone = _LETTER_SEMITONES[letter] + _ACCIDENTALS[accidental or ""]
    octave_num = int(octave) if octave else default_octave
    return 12 * (octave_num + 1) + semitone


class PitchClass(IntEnum):
    """
    The 12 chromatic pitch classes (0-11).

    Octave-independent - C4 and C5 are both PitchClass.C.
    Enharmonic equivalents share the same value (C# == Db == 1).
    """

    C = 0
    Cs = 1  # C# / Db
    D = 2
    Ds = 3  # D# / Eb
    E = 4
    F = 5
    Fs = 6  # F# / Gb
    G = 7
    Gs = 8  # G# / Ab
    A = 9
    As = 10  # A# / Bb
    B = 11

    def spell(self, prefer_flats: bool = False) -> str:
        """Get human-readable name."""
        names = _FLAT_NAMES if prefer_flats else _SHARP_NAMES
        return names[self.value]

    @classmethod
    def from_midi(cls, midi_note: int) -> PitchClass:
        """Extract pitch class from MIDI note number."""
        return cls(midi_note % 12)


def midi_to_name(midi_note: int, prefer_flats: bool = False) -> str:
    """Spell a MIDI note number, e.g. 61 -> 'C#4'."""
    octave = midi_note // 12 - 1
    return f"{PitchClass.from_midi(midi_note).spell(prefer_flats)}{octave}"


class Interval:
    """
    Distance between pitches in semitones.

    Chord qualities are sets of intervals from the root; scale types are
    tuples of steps. Hashable so both can be frozen.
    """

    __slots__ = ("_semitones",)
    _semitones: int

    # Named intervals (class constants)
    UNISON: ClassVar[Interval]
    MINOR_SECOND: ClassVar[Interval]
    MAJOR_SECOND: ClassVar[Interval]
    MINOR_THIRD: ClassVar[Interval]
    MAJOR_THIRD: ClassVar[Interval]
    PERFECT_FOURTH: ClassVar[Interval]
    TRITONE: ClassVar[Interval]
    PERFECT_FIFTH: ClassVar[Interval]
    MINOR_SIXTH: ClassVar[Interval]
    MAJOR_SIXTH: ClassVar[Interval]
    MINOR_SEVENTH: ClassVar[Interval]
    MAJOR_SEVENTH: ClassVar[Interval]
    OCTAVE: ClassVar[Interval]
    MAJOR_NINTH: ClassVar[Interval]
    MINOR_NINTH: ClassVar[Interval]
    ELEVENTH: ClassVar[Interval]
    THIRTEENTH: ClassVar[Interval]

    def __init__(self, semitones: int) -> None:
        """Create an interval with the given number of semitones."""
        object.__setattr__(self, "_semitones", semitones)

    @property
    def semitones(self) -> int:
        """Number of semitones in this interval."""
        return self._semitones

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Interval):
            return NotImplemented
        return bool(self._semitones == other._semitones)

    def __hash__(self) -> int:
        return hash(self._semitones)

    def __repr__(self) -> str:
        return f"Interval({self._semitones})"


# Initialize class constants after class is defined
Interval.UNISON = Interval(0)
Interval.MINOR_SECOND = Interval(1)
Interval.MAJOR_SECOND = Interval(2)
Interval.MINOR_THIRD = Interval(3)
Interval.MAJOR_THIRD = Interval(4)
Interval.PERFECT_FOURTH = Interval(5)
Interval.TRITONE = Interval(6)
Interval.PERFECT_FIFTH = Interval(7)
Interval.MINOR_SIXTH = Interval(8)
Interval.MAJOR_SIXTH = Interval(9)
Interval.MINOR_SEVENTH = Interval(10)
Interval.MAJOR_SEVENTH = Interval(11)
Interval.OCTAVE = Interval(12)
Interval.MINOR_NINTH = Interval(13)
Interval.MAJOR_NINTH = Interval(14)
Interval.ELEVENTH = Interval(17)
Interval.THIRTEENTH = Interval(21)
