"""
Pydantic models for the preview compiler and the engine relay.

This module provides:
- CompileOptions: Caller configuration (bars, tempo override, seed)
- Event: A timed note produced by the compiler
- CompileResult: Events, warnings and horizon of one compilation
- ConnectionParams: How to reach a running Sonic Pi
- BeatPattern: A ready-made script from the pattern library
"""

from chuk_mcp_sonic_pi.models.beat_pattern import BeatPattern, BeatPatternMetadata
from chuk_mcp_sonic_pi.models.connection import ConnectionParams
from chuk_mcp_sonic_pi.models.event import CompileOptions, CompileResult, Event

__all__ = [
    "BeatPattern",
    "BeatPatternMetadata",
    "CompileOptions",
    "CompileResult",
    "ConnectionParams",
    "Event",
]
