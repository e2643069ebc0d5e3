"""
Chord primitives - ChordQuality and the chord-name table.

Chords are stacks of intervals measured from the root.
chord_to_midi() resolves a tonic symbol plus a quality name
(':major', "'m7'", ':sus4', ...) into an ascending list of MIDI notes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .pitch import Interval, normalize_symbol, parse_note


@dataclass(frozen=True)
class ChordQuality:
    """
    A chord quality defined by its intervals from the root.

    Intervals are measured from the root, not stacked.
    For example, a major triad is root + M3 + P5 (0, 4, 7 semitones).

    Immutable and hashable.
    """

    intervals: frozenset[Interval]
    name: str = ""

    MAJOR: ClassVar[ChordQuality]

    def get_midi_notes(self, root_midi: int) -> list[int]:
        """
        Get MIDI note numbers for this chord.

        Args:
            root_midi: MIDI note number for the root

        Returns:
            List of MIDI note numbers, sorted ascending
        """
        sorted_intervals = sorted(self.intervals, key=lambda i: i.semitones)
        return [root_midi + interval.semitones for interval in sorted_intervals]

    def __str__(self) -> str:
        return self.name or f"ChordQuality({self.intervals})"


def _quality(name: str, *semitones: int) -> ChordQuality:
    return ChordQuality(frozenset(Interval(s) for s in semitones), name)


_P1 = Interval.UNISON.semitones
_m3 = Interval.MINOR_THIRD.semitones
_M3 = Interval.MAJOR_THIRD.semitones
_P5 = Interval.PERFECT_FIFTH.semitones
_m7 = Interval.MINOR_SEVENTH.semitones
_M7 = Interval.MAJOR_SEVENTH.semitones
_M9 = Interval.MAJOR_NINTH.semitones

ChordQuality.MAJOR = _quality("major", _P1, _M3, _P5)

_MINOR = _quality("minor", _P1, _m3, _P5)
_DOM7 = _quality("7", _P1, _M3, _P5, _m7)
_MAJ7 = _quality("major7", _P1, _M3, _P5, _M7)
_MIN7 = _quality("m7", _P1, _m3, _P5, _m7)

# Quality name -> interval set. Several spellings share one quality.
CHORD_QUALITIES: dict[str, ChordQuality] = {
    "1": _quality("1", _P1),
    "5": _quality("5", _P1, _P5),
    "major": ChordQuality.MAJOR,
    "M": ChordQuality.MAJOR,
    "minor": _MINOR,
    "m": _MINOR,
    "7": _DOM7,
    "dom7": _DOM7,
    "major7": _MAJ7,
    "M7": _MAJ7,
    "maj7": _MAJ7,
    "m7": _MIN7,
    "minor7": _MIN7,
    "sus2": _quality("sus2", _P1, Interval.MAJOR_SECOND.semitones, _P5),
    "sus4": _quality("sus4", _P1, Interval.PERFECT_FOURTH.semitones, _P5),
    "6": _quality("6", _P1, _M3, _P5, Interval.MAJOR_SIXTH.semitones),
    "m6": _quality("m6", _P1, _m3, _P5, Interval.MAJOR_SIXTH.semitones),
    "9": _quality("9", _P1, _M3, _P5, _m7, _M9),
    "m9": _quality("m9", _P1, _m3, _P5, _m7, _M9),
    "maj9": _quality("maj9", _P1, _M3, _P5, _M7, _M9),
    "add9": _quality("add9", _P1, _M3, _P5, _M9),
    "11": _quality("11", _P1, _M3, _P5, _m7, _M9, Interval.ELEVENTH.semitones),
    "13": _quality("13", _P1, _M3, _P5, _m7, _M9, Interval.THIRTEENTH.semitones),
    "dim": _quality("dim", _P1, _m3, Interval.TRITONE.semitones),
    "dim7": _quality("dim7", _P1, _m3, Interval.TRITONE.semitones, Interval.MAJOR_SIXTH.semitones),
    "m7b5": _quality("m7b5", _P1, _m3, Interval.TRITONE.semitones, _m7),
    "aug": _quality("aug", _P1, _M3, Interval.MINOR_SIXTH.semitones),
}


def get_chord_quality(name: str | None) -> ChordQuality:
    """Look up a chord quality by name; unknown names give the major triad."""
    if not name:
        return ChordQuality.MAJOR
    return CHORD_QUALITIES.get(normalize_symbol(name), ChordQuality.MAJOR)


def chord_to_midi(tonic: str, quality: str | None = "major") -> list[int]:
    """
    Resolve a chord expression to MIDI notes.

    Args:
        tonic: Root note symbol (':e3', 'C', ...)
        quality: Quality name; unknown qualities fall back to major

    Returns:
        Ascending MIDI notes, or an empty list if the tonic is not a note
    """
    root = parse_note(tonic)
    if root is None:
        return []
    return get_chord_quality(quality).get_midi_notes(root)
