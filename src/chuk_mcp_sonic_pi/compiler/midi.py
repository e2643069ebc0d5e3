"""
MIDI export - preview events to a Standard MIDI File.

This module handles conversion from compile results to MIDI files using mido.
All operations are deterministic: same input → same output.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mido import Message, MetaMessage, MidiFile, MidiTrack

if TYPE_CHECKING:
    from chuk_mcp_sonic_pi.models.event import CompileResult, Event


# Standard ticks per beat (quarter note) - industry standard
TICKS_PER_BEAT = 480

# GM Drum channel (0-indexed, so 9 = channel 10)
DRUM_CHANNEL = 9

# Channels available to synths and non-drum samples
MELODIC_CHANNELS = tuple(c for c in range(16) if c != DRUM_CHANNEL)


@dataclass(frozen=True)
class MidiEvent:
    """
    A single MIDI note event.

    This is the lowest-level representation before writing to MIDI.
    All times are in ticks (absolute from start of track).
    """

    pitch: int  # MIDI note number (0-127)
    start_ticks: int  # Absolute start time in ticks
    duration_ticks: int  # Duration in ticks
    velocity: int  # 0-127
    channel: int = 0  # 0-15 (9 = drums)

    def __post_init__(self) -> None:
        """Validate MIDI ranges."""
        if not 0 <= self.pitch <= 127:
            raise ValueError(f"Pitch must be 0-127, got {self.pitch}")
        if not 0 <= self.velocity <= 127:
            raise ValueError(f"Velocity must be 0-127, got {self.velocity}")
        if not 0 <= self.channel <= 15:
            raise ValueError(f"Channel must be 0-15, got {self.channel}")
        if self.start_ticks < 0:
            raise ValueError(f"Start ticks must be >= 0, got {self.start_ticks}")
        if self.duration_ticks < 0:
            raise ValueError(f"Duration ticks must be >= 0, got {self.duration_ticks}")


def events_to_midi(
    events: Sequence[MidiEvent],
    tempo_bpm: float = 60.0,
    ticks_per_beat: int = TICKS_PER_BEAT,
) -> MidiFile:
    """
    Convert a sequence of MidiEvents to a MidiFile.

    Args:
        events: Sequence of MidiEvent objects
        tempo_bpm: Tempo in beats per minute
        ticks_per_beat: Resolution (default 480)

    Returns:
        A mido MidiFile ready to be saved
    """
    mid = MidiFile(ticks_per_beat=ticks_per_beat)
    track = MidiTrack()
    mid.tracks.append(track)

    # Set tempo (microseconds per beat)
    track.append(MetaMessage("set_tempo", tempo=int(60_000_000 / tempo_bpm), time=0))

    messages: list[tuple[int, Message]] = []
    for event in events:
        messages.append(
            (
                event.start_ticks,
                Message(
                    "note_on",
                    channel=event.channel,
                    note=event.pitch,
                    velocity=event.velocity,
                    time=0,
                ),
            )
        )
        messages.append(
            (
                event.start_ticks + event.duration_ticks,
                Message("note_off", channel=event.channel, note=event.pitch, velocity=0, time=0),
            )
        )

    # Note-offs before note-ons at the same tick so retriggered notes are clean
    messages.sort(key=lambda x: (x[0], x[1].type != "note_off"))

    current_time = 0
    for abs_time, msg in messages:
        msg.time = abs_time - current_time
        track.append(msg)
        current_time = abs_time

    track.append(MetaMessage("end_of_track", time=0))
    return mid


def seconds_to_ticks(
    seconds: float, tempo_bpm: float, ticks_per_beat: int = TICKS_PER_BEAT
) -> int:
    """Convert a time in seconds to ticks at a fixed tempo."""
    return int(round(seconds * tempo_bpm / 60.0 * ticks_per_beat))


def velocity_float_to_int(velocity: float) -> int:
    """Convert velocity from 0.0-1.0 range to 1-127."""
    return max(1, min(127, int(round(velocity * 127))))


def assign_channels(events: Sequence[Event]) -> dict[str, int]:
    """
    Map instrument ids to MIDI channels.

    Percussion always uses the GM drum channel. Other instruments take the
    remaining channels in order of first appearance, wrapping if there are
    more than fifteen.
    """
    channels: dict[str, int] = {}
    melodic = 0
    for event in events:
        if event.instrument_id in channels:
            continue
        if event.is_percussion:
            channels[event.instrument_id] = DRUM_CHANNEL
        else:
            channels[event.instrument_id] = MELODIC_CHANNELS[melodic % len(MELODIC_CHANNELS)]
            melodic += 1
    return channels


def result_to_midi(result: CompileResult, ticks_per_beat: int = TICKS_PER_BEAT) -> MidiFile:
    """
    Convert a compile result to a MidiFile.

    Ticks are derived from the second-domain timestamps at the result tempo,
    so notes inside tempo-scoped blocks land where they are heard.

    Args:
        result: Output of compile_code
        ticks_per_beat: MIDI resolution

    Returns:
        A mido MidiFile ready to be saved

    Example:
        result = compile_code(code, CompileOptions(bars=4))
        result_to_midi(result).save("preview.mid")
    """
    channels = assign_channels(result.events)
    midi_events: list[MidiEvent] = []
    for event in result.events:
        start = seconds_to_ticks(event.start_second, result.tempo, ticks_per_beat)
        duration = max(1, seconds_to_ticks(event.duration_second, result.tempo, ticks_per_beat))
        for pitch in event.pitches:
            midi_events.append(
                MidiEvent(
                    pitch=pitch,
                    start_ticks=start,
                    duration_ticks=duration,
                    velocity=velocity_float_to_int(event.velocity),
                    channel=channels[event.instrument_id],
                )
            )
    return events_to_midi(midi_events, tempo_bpm=result.tempo, ticks_per_beat=ticks_per_beat)
