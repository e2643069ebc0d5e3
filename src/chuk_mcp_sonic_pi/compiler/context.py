"""
Evaluation context - the scope records threaded through the evaluator.

State is split by how far it travels:
- EvaluationContext is scope-local (tempo, synth, defaults, time offset).
  Nested scopes receive a fork; nothing flows back to the parent.
- ScopeState is scope-crossing (bindings, round-robin cursors, active
  scale). A nested scope works on a copy and hands its final copy back in
  the BlockResult, which the caller adopts.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field, replace
from typing import Any

from chuk_mcp_sonic_pi.constants import DEFAULT_BPM, DEFAULT_DURATION_BEATS, DEFAULT_VELOCITY
from chuk_mcp_sonic_pi.core.rhythm import Envelope, TimePoint
from chuk_mcp_sonic_pi.core.scale import Scale
from chuk_mcp_sonic_pi.models.event import Event
from chuk_mcp_sonic_pi.parser.expressions import evaluate_number

Binding = float | tuple[float, ...]

_ACCESSOR_RE = re.compile(r"^([a-zA-Z_]\w*)\.(tick|choose|look)\s*(?:\(\s*\))?$")


@dataclass
class ScopeState:
    """Variable bindings, round-robin cursors and the active scale."""

    bindings: dict[str, Binding] = field(default_factory=dict)
    cursors: dict[str, int] = field(default_factory=dict)
    scale: Scale | None = None

    def copy(self) -> ScopeState:
        """Independent copy for a nested scope."""
        return ScopeState(dict(self.bindings), dict(self.cursors), self.scale)

    def bind(self, name: str, value: Binding) -> None:
        self.bindings[name] = value

    def sequence(self, name: str) -> tuple[float, ...] | None:
        """The bound sequence, or None if unbound or scalar."""
        value = self.bindings.get(name)
        return value if isinstance(value, tuple) else None

    def scalar(self, name: str) -> float | None:
        """The bound scalar, or None if unbound or a sequence."""
        value = self.bindings.get(name)
        return None if value is None or isinstance(value, tuple) else value

    def scalars(self) -> dict[str, float]:
        """All scalar bindings, as an expression scope."""
        return {k: v for k, v in self.bindings.items() if not isinstance(v, tuple)}

    def tick(self, name: str) -> float | None:
        """Read the next value of a sequence and advance its cursor."""
        values = self.sequence(name)
        if not values:
            return None
        index = self.cursors.get(name, 0)
        self.cursors[name] = (index + 1) % len(values)
        return values[index % len(values)]

    def look(self, name: str) -> float | None:
        """Read the value the cursor points at without advancing it."""
        values = self.sequence(name)
        if not values:
            return None
        return values[self.cursors.get(name, 0) % len(values)]

    def choose(self, name: str, rng: random.Random) -> float | None:
        """Pick a random element of a sequence."""
        values = self.sequence(name)
        if not values:
            return None
        return rng.choice(values)

    def number(self, expr: str | None, rng: random.Random) -> float | None:
        """
        Resolve a numeric argument.

        Accepts numeric expressions over bound scalars plus the sequence
        accessors `name.tick`, `name.look` and `name.choose`.
        """
        if expr is None:
            return None
        text = expr.strip()
        accessor = _ACCESSOR_RE.match(text)
        if accessor:
            name, method = accessor.groups()
            if method == "tick":
                return self.tick(name)
            if method == "look":
                return self.look(name)
            return self.choose(name, rng)
        return evaluate_number(text, self.scalars(), rng)


@dataclass(frozen=True)
class EvaluationContext:
    """
    Scope-local settings for evaluating one block body.

    Attributes:
        loop_name: Loop that owns every event produced
        tempo: Active tempo (BPM)
        instrument: Selected synth name, or None for the default synth
        defaults: Default velocity and duration for notes
        offset: Where this scope starts, relative to the loop start
        tempo_locked: True when a caller-supplied tempo overrides use_bpm
        horizon_seconds: Preview length; repeats stop once they pass it
        rng: Random source for one_in/rrand/choose
    """

    loop_name: str
    tempo: float = DEFAULT_BPM
    instrument: str | None = None
    defaults: Envelope = Envelope(DEFAULT_VELOCITY, DEFAULT_DURATION_BEATS)
    offset: TimePoint = TimePoint.ZERO
    tempo_locked: bool = False
    horizon_seconds: float | None = None
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    def fork(self, **changes: Any) -> EvaluationContext:
        """Return a child context with the given fields replaced."""
        return replace(self, **changes)


@dataclass
class BlockResult:
    """
    The outcome of evaluating one block body.

    Attributes:
        events: Events with absolute (loop-relative) timestamps
        length: Measured duration; the greater of the time spent waiting and
            the latest note end
        state: Exit bindings and cursors, for the caller to adopt
        context: Exit scope settings (used to seed loops from the prelude)
    """

    events: list[Event]
    length: TimePoint
    state: ScopeState
    context: EvaluationContext
