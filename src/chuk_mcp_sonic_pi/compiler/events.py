"""
Event assembler - turns a resolved play/sample statement into an Event.

Durations in seconds use the tempo active when the event is scheduled,
not the global tempo.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from chuk_mcp_sonic_pi.compiler.context import EvaluationContext
from chuk_mcp_sonic_pi.constants import (
    DEFAULT_DURATION_BEATS,
    DEFAULT_SAMPLE_PITCH,
    InstrumentKind,
    map_sample_to_drum,
)
from chuk_mcp_sonic_pi.core.pitch import normalize_symbol
from chuk_mcp_sonic_pi.core.rhythm import (
    TimePoint,
    beats_to_seconds,
    clamp_duration,
    velocity_from_amp,
)
from chuk_mcp_sonic_pi.models.event import Event

Options = Mapping[str, float | None]


def instrument_tag(kind: InstrumentKind, name: str) -> str:
    """Build an instrument id such as 'drum:kick' or 'synth:tb303'."""
    return f"{kind.value}:{name}"


def _velocity(options: Options, ctx: EvaluationContext) -> float:
    velocity = velocity_from_amp(options.get("amp"))
    return ctx.defaults.velocity if velocity is None else velocity


def note_duration(options: Options, ctx: EvaluationContext) -> float:
    """Requested release, else sustain, else the scope default; clamped."""
    for key in ("release", "sustain"):
        value = options.get(key)
        if value is not None:
            break
    else:
        value = ctx.defaults.duration_beats
    duration = clamp_duration(value)
    return DEFAULT_DURATION_BEATS if duration is None else duration


def assemble_note(
    pitches: Sequence[int],
    ctx: EvaluationContext,
    at: TimePoint,
    options: Options,
) -> Event | None:
    """
    Build a synth note event.

    Args:
        pitches: Resolved MIDI notes (a chord has several)
        ctx: Active scope settings
        at: Start position relative to the loop start
        options: Resolved numeric options (amp, release, sustain, ...)

    Returns:
        The event, or None if there are no pitches
    """
    if not pitches:
        return None
    duration = note_duration(options, ctx)
    return Event(
        pitches=list(pitches),
        instrument_id=instrument_tag(InstrumentKind.SYNTH, ctx.instrument or "default"),
        is_percussion=False,
        start_beat=at.beats,
        duration_beats=duration,
        start_second=at.seconds,
        duration_second=beats_to_seconds(duration, ctx.tempo),
        velocity=_velocity(options, ctx),
        loop_name=ctx.loop_name,
        tempo_at_schedule=ctx.tempo,
    )


def assemble_sample(
    sample_name: str,
    ctx: EvaluationContext,
    at: TimePoint,
    options: Options,
) -> Event:
    """
    Build a sample event.

    Drum samples map to a percussion voice and are never shorter than that
    voice's floor. Other samples preview as a plain middle C.
    """
    name = normalize_symbol(sample_name)
    voice = map_sample_to_drum(name)
    requested = clamp_duration(options.get("release"))
    duration = DEFAULT_DURATION_BEATS if requested is None else requested

    if voice is not None:
        pitches = [int(voice.midi)]
        instrument_id = instrument_tag(InstrumentKind.DRUM, voice.id)
        duration = max(duration, voice.min_duration)
    else:
        pitches = [DEFAULT_SAMPLE_PITCH]
        instrument_id = instrument_tag(InstrumentKind.SAMPLE, name)

    return Event(
        pitches=pitches,
        instrument_id=instrument_id,
        is_percussion=voice is not None,
        start_beat=at.beats,
        duration_beats=duration,
        start_second=at.seconds,
        duration_second=beats_to_seconds(duration, ctx.tempo),
        velocity=_velocity(options, ctx),
        loop_name=ctx.loop_name,
        tempo_at_schedule=ctx.tempo,
    )
