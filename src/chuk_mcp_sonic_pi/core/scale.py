"""
Scale primitives - ScaleType and Scale.

Scales are interval patterns from a root. A Scale is a ScaleType applied to a
concrete root note and spread over one or more octaves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .pitch import Interval, normalize_symbol, parse_note

# Ten octaves span the whole MIDI range
MAX_SCALE_OCTAVES = 10


@dataclass(frozen=True)
class ScaleType:
    """
    A scale defined by its interval pattern.

    The intervals are from one degree to the next (not cumulative).
    A major scale is: W W H W W W H (2 2 1 2 2 2 1 semitones)

    Immutable and hashable.
    """

    intervals: tuple[Interval, ...]
    name: str = ""

    # Common scale types (defined after class)
    MAJOR: ClassVar[ScaleType]
    NATURAL_MINOR: ClassVar[ScaleType]
    HARMONIC_MINOR: ClassVar[ScaleType]
    MELODIC_MINOR: ClassVar[ScaleType]
    DORIAN: ClassVar[ScaleType]
    PHRYGIAN: ClassVar[ScaleType]
    LYDIAN: ClassVar[ScaleType]
    MIXOLYDIAN: ClassVar[ScaleType]
    LOCRIAN: ClassVar[ScaleType]
    MAJOR_PENTATONIC: ClassVar[ScaleType]
    MINOR_PENTATONIC: ClassVar[ScaleType]
    BLUES_MAJOR: ClassVar[ScaleType]
    BLUES_MINOR: ClassVar[ScaleType]
    WHOLE_TONE: ClassVar[ScaleType]
    CHROMATIC: ClassVar[ScaleType]

    def __post_init__(self) -> None:
        # Validate that intervals sum to an octave (12 semitones)
        total = sum(i.semitones for i in self.intervals)
        if total != 12:
            raise ValueError(f"Scale intervals must sum to 12 semitones, got {total}")

    def offsets(self) -> list[int]:
        """Semitone offsets of each degree from the root, within one octave."""
        offsets = [0]
        for interval in self.intervals[:-1]:  # Don't include last (octave return)
            offsets.append(offsets[-1] + interval.semitones)
        return offsets

    def __str__(self) -> str:
        return self.name or f"ScaleType({self.intervals})"

    @classmethod
    def from_name(cls, name: str | None) -> ScaleType:
        """Look up a scale by mode name; unknown modes give minor pentatonic."""
        if not name:
            return cls.MINOR_PENTATONIC
        return SCALE_TYPES.get(normalize_symbol(name).lower(), cls.MINOR_PENTATONIC)


def _steps(*semitones: int) -> tuple[Interval, ...]:
    return tuple(Interval(s) for s in semitones)


ScaleType.MAJOR = ScaleType(_steps(2, 2, 1, 2, 2, 2, 1), "major")
ScaleType.NATURAL_MINOR = ScaleType(_steps(2, 1, 2, 2, 1, 2, 2), "minor")
ScaleType.HARMONIC_MINOR = ScaleType(_steps(2, 1, 2, 2, 1, 3, 1), "harmonic_minor")
ScaleType.MELODIC_MINOR = ScaleType(_steps(2, 1, 2, 2, 2, 2, 1), "melodic_minor")
ScaleType.DORIAN = ScaleType(_steps(2, 1, 2, 2, 2, 1, 2), "dorian")
ScaleType.PHRYGIAN = ScaleType(_steps(1, 2, 2, 2, 1, 2, 2), "phrygian")
ScaleType.LYDIAN = ScaleType(_steps(2, 2, 2, 1, 2, 2, 1), "lydian")
ScaleType.MIXOLYDIAN = ScaleType(_steps(2, 2, 1, 2, 2, 1, 2), "mixolydian")
ScaleType.LOCRIAN = ScaleType(_steps(1, 2, 2, 1, 2, 2, 2), "locrian")
ScaleType.MAJOR_PENTATONIC = ScaleType(_steps(2, 2, 3, 2, 3), "major_pentatonic")
ScaleType.MINOR_PENTATONIC = ScaleType(_steps(3, 2, 2, 3, 2), "minor_pentatonic")
ScaleType.BLUES_MAJOR = ScaleType(_steps(2, 1, 1, 3, 2, 3), "blues_major")
ScaleType.BLUES_MINOR = ScaleType(_steps(3, 2, 1, 1, 3, 2), "blues_minor")
ScaleType.WHOLE_TONE = ScaleType(_steps(2, 2, 2, 2, 2, 2), "whole_tone")
ScaleType.CHROMATIC = ScaleType(_steps(*([1] * 12)), "chromatic")

# Mode name -> scale type
SCALE_TYPES: dict[str, ScaleType] = {
    "major": ScaleType.MAJOR,
    "ionian": ScaleType.MAJOR,
    "minor": ScaleType.NATURAL_MINOR,
    "aeolian": ScaleType.NATURAL_MINOR,
    "natural_minor": ScaleType.NATURAL_MINOR,
    "harmonic_minor": ScaleType.HARMONIC_MINOR,
    "melodic_minor": ScaleType.MELODIC_MINOR,
    "dorian": ScaleType.DORIAN,
    "phrygian": ScaleType.PHRYGIAN,
    "lydian": ScaleType.LYDIAN,
    "mixolydian": ScaleType.MIXOLYDIAN,
    "locrian": ScaleType.LOCRIAN,
    "major_pentatonic": ScaleType.MAJOR_PENTATONIC,
    "minor_pentatonic": ScaleType.MINOR_PENTATONIC,
    "blues_major": ScaleType.BLUES_MAJOR,
    "blues_minor": ScaleType.BLUES_MINOR,
    "whole_tone": ScaleType.WHOLE_TONE,
    "whole": ScaleType.WHOLE_TONE,
    "chromatic": ScaleType.CHROMATIC,
}


@dataclass(frozen=True)
class Scale:
    """
    A concrete scale: a root MIDI note, a scale type and an octave span.

    Examples:
        Scale(52, ScaleType.MINOR_PENTATONIC).notes() == [52, 55, 57, 59, 62]
    """

    root: int
    scale_type: ScaleType
    num_octaves: int = 1

    def notes(self) -> list[int]:
        """Ascending MIDI notes, degrees repeated 12 semitones higher per octave."""
        offsets = self.scale_type.offsets()
        notes: list[int] = []
        for octave in range(max(1, self.num_octaves)):
            base = self.root + octave * Interval.OCTAVE.semitones
            notes.extend(base + offset for offset in offsets)
        return notes

    def __str__(self) -> str:
        return f"{self.root} {self.scale_type}"


def build_scale(
    root: int | float | str, mode: str | None = None, num_octaves: float | None = None
) -> Scale | None:
    """
    Build a Scale from a root and a mode name.

    The root is a MIDI number or a note symbol. Octave counts are rounded
    down and kept within 1-10; a missing count means one octave.
    Returns None when the root is not a note.
    """
    root_midi = parse_note(root) if isinstance(root, str) else int(round(root))
    if root_midi is None:
        return None
    octaves = 1 if num_octaves is None else max(1, min(int(num_octaves), MAX_SCALE_OCTAVES))
    return Scale(root_midi, ScaleType.from_name(mode), octaves)
