"""
Loop-horizon expander.

A live loop repeats forever. For preview, one evaluated cycle is replicated
back to back until the render horizon is covered, using the cycle's own
measured length as the period.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from chuk_mcp_sonic_pi.constants import BEATS_PER_BAR
from chuk_mcp_sonic_pi.core.rhythm import TimePoint, beats_to_seconds
from chuk_mcp_sonic_pi.models.event import Event

# Replicated starts this close to the horizon count as on it
HORIZON_TOLERANCE = 1e-9


def fallback_period(tempo: float) -> TimePoint:
    """One bar at the given tempo."""
    return TimePoint(float(BEATS_PER_BAR), beats_to_seconds(BEATS_PER_BAR, tempo))


def cycle_period(length: TimePoint, fallback: TimePoint) -> TimePoint:
    """The repeat period: the measured length unless it is degenerate."""
    if length.beats <= 0 or length.seconds <= 0:
        return fallback
    return length


def expand_loop(
    events: Sequence[Event],
    length: TimePoint,
    horizon: TimePoint,
    fallback: TimePoint,
) -> list[Event]:
    """
    Replicate one cycle's events across the horizon.

    Args:
        events: Events of one evaluated cycle
        length: Measured cycle length
        horizon: Render horizon
        fallback: Period used when the cycle length is zero or negative

    Returns:
        Events of every repetition that start before the horizon, in
        repetition order
    """
    period = cycle_period(length, fallback)
    repetitions = math.ceil(horizon.seconds / period.seconds)
    expanded: list[Event] = []
    for i in range(repetitions):
        offset = period.scaled(i)
        for event in events:
            if event.start_second + offset.seconds >= horizon.seconds - HORIZON_TOLERANCE:
                continue
            expanded.append(event.shifted(offset) if i else event)
    return expanded
