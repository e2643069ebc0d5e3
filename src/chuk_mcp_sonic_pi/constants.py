"""
Constants and enums for the Sonic Pi preview compiler.

No magic strings - use enums and Literal types for constrained values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Literal

# Timing defaults
DEFAULT_BPM = 60.0  # Sonic Pi's tempo when no use_bpm is given
BEATS_PER_BAR = 4
DEFAULT_BARS = 8
MAX_BARS = 64

# Note defaults
DEFAULT_DURATION_BEATS = 1.0  # Sonic Pi's default release
DEFAULT_VELOCITY = 0.8
DEFAULT_SAMPLE_PITCH = 60  # Unmapped samples preview as middle C
DEFAULT_CHOOSE_PITCH = 36  # notes.choose with no active scale -> C2
DEFAULT_ONE_IN = 2  # one_in() with an unusable argument
MAX_REPEAT_ITERATIONS = 10_000  # N.times guard for zero-length bodies

# Implicit loop name when a script has no live_loop blocks
IMPLICIT_LOOP_NAME = "main"

# Engine defaults
DEFAULT_OSC_CUES_PORT = 4560
ENGINE_HOST = "127.0.0.1"
CLIENT_ID = "SONIC_PI_PYTHON_MCP"


class StatementKind(str, Enum):
    """The closed set of statement variants the classifier produces."""

    TEMPO = "tempo"
    INSTRUMENT = "instrument"
    DEFAULTS = "defaults"
    SEQUENCE_ASSIGN = "sequence_assign"
    SCALE_ASSIGN = "scale_assign"
    RANDOM_ASSIGN = "random_assign"
    VALUE_ASSIGN = "value_assign"
    CURSOR_ASSIGN = "cursor_assign"
    REPEAT = "repeat"
    TEMPO_SCOPE = "tempo_scope"
    CONDITIONAL = "conditional"
    WAIT = "wait"
    PLAY = "play"
    SAMPLE = "sample"
    UNRECOGNIZED = "unrecognized"


class InstrumentKind(str, Enum):
    """Prefix of an event's instrument tag."""

    DRUM = "drum"
    SAMPLE = "sample"
    SYNTH = "synth"


class GMDrumNote(IntEnum):
    """General MIDI drum note numbers."""

    KICK = 36
    SNARE = 38
    CLAP = 39
    CLOSED_HIHAT = 42
    PEDAL_HIHAT = 44
    OPEN_HIHAT = 46
    CRASH = 49
    RIDE = 51
    TOM_LOW = 41
    TOM_MID = 47
    TOM_HIGH = 50
    TAMBOURINE = 54
    COWBELL = 56
    MARACAS = 70


@dataclass(frozen=True)
class PercussionVoice:
    """A drum category with its GM pitch and shortest playable length (beats)."""

    id: str
    midi: int
    min_duration: float = 0.1


PERCUSSION_VOICES: dict[str, PercussionVoice] = {
    v.id: v
    for v in (
        PercussionVoice("kick", GMDrumNote.KICK),
        PercussionVoice("snare", GMDrumNote.SNARE, 0.2),
        PercussionVoice("clap", GMDrumNote.CLAP, 0.2),
        PercussionVoice("hat_closed", GMDrumNote.CLOSED_HIHAT, 0.2),
        PercussionVoice("hat_pedal", GMDrumNote.PEDAL_HIHAT),
        PercussionVoice("hat_open", GMDrumNote.OPEN_HIHAT, 0.5),
        PercussionVoice("cymbal", GMDrumNote.CRASH, 0.5),
        PercussionVoice("ride", GMDrumNote.RIDE, 0.5),
        PercussionVoice("tom_low", GMDrumNote.TOM_LOW),
        PercussionVoice("tom_mid", GMDrumNote.TOM_MID),
        PercussionVoice("tom_high", GMDrumNote.TOM_HIGH),
        PercussionVoice("tambourine", GMDrumNote.TAMBOURINE),
        PercussionVoice("cowbell", GMDrumNote.COWBELL),
        PercussionVoice("shaker", GMDrumNote.MARACAS),
    )
}

# Sample names whose category is not obvious from the name
_SAMPLE_ALIASES: dict[str, str] = {
    "drum_cymbal_closed": "hat_closed",
    "drum_cymbal_pedal": "hat_pedal",
    "drum_cymbal_open": "hat_open",
    "drum_roll": "snare",
    "drum_heavy_kick": "kick",
    "drum_splash_hard": "cymbal",
    "drum_splash_soft": "cymbal",
}

# Ordered name rules, first match wins
_SAMPLE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^(bd_|drum_bass_)|kick"), "kick"),
    (re.compile(r"^(sn_|drum_snare_)|snare"), "snare"),
    (re.compile(r"clap|snap"), "clap"),
    (re.compile(r"ride"), "ride"),
    (re.compile(r"hat.*open|open.*hat"), "hat_open"),
    (re.compile(r"hat"), "hat_closed"),
    (re.compile(r"cymbal|crash|splash"), "cymbal"),
    (re.compile(r"tom_lo"), "tom_low"),
    (re.compile(r"tom_hi"), "tom_high"),
    (re.compile(r"tom"), "tom_mid"),
    (re.compile(r"tamb"), "tambourine"),
    (re.compile(r"cowbell"), "cowbell"),
    (re.compile(r"shaker"), "shaker"),
]


def map_sample_to_drum(sample_name: str) -> PercussionVoice | None:
    """
    Resolve a sample name to a percussion voice.

    Returns None for samples that are not drums (loops, ambience, ...).
    """
    name = sample_name.strip().lstrip(":").lower()
    voice_id = _SAMPLE_ALIASES.get(name)
    if voice_id is None:
        for pattern, candidate in _SAMPLE_RULES:
            if pattern.search(name):
                voice_id = candidate
                break
    return PERCUSSION_VOICES.get(voice_id) if voice_id else None


# Schema versions - frozen for v1
SchemaVersion = Literal["preview/v1", "beat-pattern/v1"]


class ErrorMessages:
    """Standardized error messages."""

    LOGS_NOT_FOUND = "Error: Could not parse Sonic Pi log files. Make sure Sonic Pi is running."
    CLIENT_INIT = "Error initializing OSC client: {error}"
    NOT_CONNECTED = "Error: Not connected to Sonic Pi."
    SEND_CODE = "Error sending code: {error}"
    STOP = "Error stopping: {error}"
    PATTERN_NOT_FOUND = "Beat pattern '{name}' not found."


class SuccessMessages:
    """Standardized success messages."""

    CONNECTED_V3 = "Connected to Sonic Pi {version} (v3) on port {port}"
    CONNECTED_V4 = "Connected to Sonic Pi {version} (v4) on port {port} with token authentication"
    CODE_SENT = (
        "Code sent to Sonic Pi successfully. If you don't hear anything, check Sonic Pi for errors."
    )
    STOPPED = "Stopped all Sonic Pi jobs"
    PREVIEW_COMPILED = "Compiled {events} events over {bars} bars at {tempo:g} BPM."
    PATTERN_COPIED = "Beat pattern '{name}' copied to project. Edit its YAML file to customize."
