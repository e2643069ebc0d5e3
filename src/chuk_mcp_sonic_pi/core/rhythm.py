"""
Rhythm primitives - TimePoint, Envelope and the amplitude/duration policy.

Time in a script is tracked in two domains at once: beats (what the script
says) and seconds (what the listener hears). The mapping between them depends
on the tempo active when the time was spent, so both are carried together.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

# Duration clamp range in beats
MIN_DURATION_BEATS = 0.05
MAX_DURATION_BEATS = 16.0

# Velocity range (0-1 float)
MIN_VELOCITY = 0.05
MAX_VELOCITY = 1.0

# Amplitude range accepted before mapping
MAX_AMP = 2.0


def seconds_per_beat(bpm: float) -> float:
    """Length of one beat in seconds at the given tempo."""
    return 60.0 / bpm


def beats_to_seconds(beats: float, bpm: float) -> float:
    """Convert a beat count to seconds at the given tempo."""
    return beats * seconds_per_beat(bpm)


def clamp_duration(
    duration: float | None,
    low: float = MIN_DURATION_BEATS,
    high: float = MAX_DURATION_BEATS,
) -> float | None:
    """Clamp a beat duration into [low, high]; None for non-numbers."""
    if duration is None or isinstance(duration, bool):
        return None
    try:
        value = float(duration)
    except (TypeError, ValueError):
        return None
    if value != value:  # NaN
        return None
    return min(max(value, low), high)


def velocity_from_amp(amp: float | str | None) -> float | None:
    """
    Map an amplitude (roughly 0-2) to a velocity in [0.05, 1.0].

    amp 0 -> 0.5, amp 1 -> 1.0; anything louder saturates.
    Returns None when no usable amplitude is given.
    """
    if amp is None or isinstance(amp, bool):
        return None
    try:
        value = float(amp)
    except (TypeError, ValueError):
        return None
    if value != value:  # NaN
        return None
    value = max(0.0, min(value, MAX_AMP))
    return max(MIN_VELOCITY, min(MAX_VELOCITY, value / 2 + 0.5))


@dataclass(frozen=True)
class TimePoint:
    """
    A position or span measured in beats and seconds together.

    Immutable; arithmetic returns new points.
    """

    beats: float = 0.0
    seconds: float = 0.0

    ZERO: ClassVar[TimePoint]

    def advance(self, beats: float, bpm: float) -> TimePoint:
        """Move forward by a beat count spent at the given tempo."""
        return TimePoint(self.beats + beats, self.seconds + beats_to_seconds(beats, bpm))

    def scaled(self, n: int | float) -> TimePoint:
        """Multiply both domains (e.g. the i-th repetition of a cycle)."""
        return TimePoint(self.beats * n, self.seconds * n)

    def __add__(self, other: TimePoint) -> TimePoint:
        if not isinstance(other, TimePoint):
            return NotImplemented
        return TimePoint(self.beats + other.beats, self.seconds + other.seconds)

    def __sub__(self, other: TimePoint) -> TimePoint:
        if not isinstance(other, TimePoint):
            return NotImplemented
        return TimePoint(self.beats - other.beats, self.seconds - other.seconds)

    def __str__(self) -> str:
        return f"{self.beats:g} beats / {self.seconds:.3f}s"


TimePoint.ZERO = TimePoint(0.0, 0.0)


@dataclass(frozen=True)
class Envelope:
    """Default loudness and length for notes in a scope."""

    velocity: float
    duration_beats: float

    def with_overrides(
        self, velocity: float | None = None, duration_beats: float | None = None
    ) -> Envelope:
        """Return a copy with any given field replaced."""
        return Envelope(
            velocity=self.velocity if velocity is None else velocity,
            duration_beats=self.duration_beats if duration_beats is None else duration_beats,
        )
