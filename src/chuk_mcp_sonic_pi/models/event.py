"""
Preview models - compile options, timed events and the compile result.

These are the public shapes of the compiler: what a caller passes in and
what comes back. Events are immutable once produced.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from chuk_mcp_sonic_pi.constants import DEFAULT_BARS, MAX_BARS
from chuk_mcp_sonic_pi.core.pitch import midi_to_name
from chuk_mcp_sonic_pi.core.rhythm import (
    MAX_DURATION_BEATS,
    MAX_VELOCITY,
    MIN_DURATION_BEATS,
    MIN_VELOCITY,
    TimePoint,
)


class CompileOptions(BaseModel):
    """
    Caller configuration for one compilation.

    Misuse is clamped rather than rejected: bar counts are kept within
    [1, MAX_BARS] and a non-positive tempo override is ignored.
    """

    bars: int = Field(DEFAULT_BARS, description="Preview length in bars (1-64)")
    tempo_override: float | None = Field(None, description="Force this tempo (BPM)")
    seed: int | None = Field(None, description="Seed for rrand/one_in/choose draws")

    @field_validator("bars", mode="before")
    @classmethod
    def clamp_bars(cls, v: Any) -> int:
        """Clamp the bar count into the supported range."""
        try:
            bars = int(v)
        except (TypeError, ValueError):
            bars = DEFAULT_BARS
        return max(1, min(bars, MAX_BARS))

    @field_validator("tempo_override", mode="before")
    @classmethod
    def drop_bad_tempo(cls, v: Any) -> float | None:
        """Ignore overrides that are not positive numbers."""
        if v is None:
            return None
        try:
            tempo = float(v)
        except (TypeError, ValueError):
            return None
        return tempo if tempo > 0 else None


class Event(BaseModel):
    """
    A single timed note produced by a play or sample statement.

    Durations are computed from the tempo active when the event was
    scheduled, which may differ from the global tempo.
    """

    kind: Literal["note"] = Field("note", description="Event kind")
    pitches: list[int] = Field(..., min_length=1, description="MIDI pitches, in order")
    instrument_id: str = Field(..., description="drum:<id>, sample:<name> or synth:<name>")
    is_percussion: bool = Field(False, description="True for mapped drum samples")

    start_beat: float = Field(..., ge=0, description="Start position in beats")
    duration_beats: float = Field(
        ..., ge=MIN_DURATION_BEATS, le=MAX_DURATION_BEATS, description="Length in beats"
    )
    start_second: float = Field(..., ge=0, description="Start position in seconds")
    duration_second: float = Field(..., ge=0, description="Length in seconds")

    velocity: float = Field(..., ge=MIN_VELOCITY, le=MAX_VELOCITY, description="0.05-1.0")
    loop_name: str = Field(..., description="Owning loop")
    tempo_at_schedule: float = Field(..., gt=0, description="Tempo when scheduled (BPM)")

    model_config = {"frozen": True}

    @property
    def end_beat(self) -> float:
        """Beat position where the note stops sounding."""
        return self.start_beat + self.duration_beats

    @property
    def end_second(self) -> float:
        """Second position where the note stops sounding."""
        return self.start_second + self.duration_second

    def shifted(self, offset: TimePoint) -> Event:
        """Return a copy moved later by the given offset."""
        return self.model_copy(
            update={
                "start_beat": self.start_beat + offset.beats,
                "start_second": self.start_second + offset.seconds,
            }
        )


class CompileResult(BaseModel):
    """
    The output of compiling a script for preview.

    Events are ordered by start time; warnings list every skipped line.
    """

    tempo: float = Field(..., gt=0, description="Effective tempo (BPM)")
    events: list[Event] = Field(default_factory=list, description="Horizon-filtered events")
    warnings: list[str] = Field(default_factory=list, description="Skipped-line warnings")
    target_beats: float = Field(..., description="Horizon in beats")
    target_seconds: float = Field(..., description="Horizon in seconds")
    bars: int = Field(DEFAULT_BARS, description="Bars rendered")
    loops: list[str] = Field(default_factory=list, description="Loop names, in source order")

    def events_for_loop(self, loop_name: str) -> list[Event]:
        """Events owned by one loop."""
        return [e for e in self.events if e.loop_name == loop_name]

    def summary(self) -> dict[str, Any]:
        """Generate a summary for quick inspection."""
        pitches = [p for e in self.events for p in e.pitches]
        melodic = [p for e in self.events if not e.is_percussion for p in e.pitches]
        return {
            "tempo": self.tempo,
            "bars": self.bars,
            "target_seconds": round(self.target_seconds, 3),
            "total_events": len(self.events),
            "loops": {name: len(self.events_for_loop(name)) for name in self.loops},
            "instruments": sorted({e.instrument_id for e in self.events}),
            "pitch_range": (min(pitches), max(pitches)) if pitches else (0, 0),
            # Drum notes are GM voices, not pitches, so they are left out
            "melodic_range": (
                (midi_to_name(min(melodic)), midi_to_name(max(melodic))) if melodic else None
            ),
            "warnings": len(self.warnings),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for JSON serialization."""
        return self.model_dump(mode="json")

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
