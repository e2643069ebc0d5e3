"""
Core music primitives - the theory tables and the time model.

These are pure functions and immutable values that everything else composes on:
- PitchClass, Interval, parse_note: note names to MIDI numbers
- ChordQuality, chord_to_midi: chord-quality interval sets
- ScaleType, Scale, build_scale: scale-mode interval sets
- TimePoint, Envelope: beat/second positions and note defaults
- velocity_from_amp, clamp_duration: amplitude and duration policy
"""

from chuk_mcp_sonic_pi.core.chord import (
    CHORD_QUALITIES,
    ChordQuality,
    chord_to_midi,
    get_chord_quality,
)
from chuk_mcp_sonic_pi.core.pitch import (
    Interval,
    PitchClass,
    midi_to_name,
    normalize_symbol,
    parse_note,
)
from chuk_mcp_sonic_pi.core.rhythm import (
    Envelope,
    TimePoint,
    beats_to_seconds,
    clamp_duration,
    velocity_from_amp,
)
from chuk_mcp_sonic_pi.core.scale import SCALE_TYPES, Scale, ScaleType, build_scale

__all__ = [
    # Pitch
    "PitchClass",
    "Interval",
    "parse_note",
    "normalize_symbol",
    "midi_to_name",
    # Chord
    "ChordQuality",
    "CHORD_QUALITIES",
    "chord_to_midi",
    "get_chord_quality",
    # Scale
    "ScaleType",
    "Scale",
    "SCALE_TYPES",
    "build_scale",
    # Rhythm
    "TimePoint",
    "Envelope",
    "beats_to_seconds",
    "clamp_duration",
    "velocity_from_amp",
]
