"""
Block evaluator - phase two of compilation.

Walks classified statements against an EvaluationContext and a ScopeState,
tracking elapsed time in beats and seconds, and produces a BlockResult.

Nested scopes:
- repeat and conditional bodies start at the parent's current position and
  carry bindings/cursors forward (round-robin reads continue across
  iterations)
- tempo-scoped bodies are evaluated from a zero origin under a forked tempo,
  then shifted to the parent's position; the parent's tempo is unchanged
- tempo, synth and defaults set inside any nested scope stay there
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from chuk_mcp_sonic_pi.compiler.context import BlockResult, EvaluationContext, ScopeState
from chuk_mcp_sonic_pi.compiler.events import assemble_note, assemble_sample
from chuk_mcp_sonic_pi.compiler.pitches import note_value, resolve_items, resolve_pitches
from chuk_mcp_sonic_pi.constants import DEFAULT_ONE_IN, MAX_REPEAT_ITERATIONS, StatementKind
from chuk_mcp_sonic_pi.core.pitch import normalize_symbol
from chuk_mcp_sonic_pi.core.rhythm import TimePoint, clamp_duration, velocity_from_amp
from chuk_mcp_sonic_pi.core.scale import build_scale
from chuk_mcp_sonic_pi.models.event import Event
from chuk_mcp_sonic_pi.parser.statements import (
    Conditional,
    CursorAssign,
    DefaultsChange,
    InstrumentSelect,
    Play,
    RandomAssign,
    RepeatBlock,
    SampleHit,
    ScaleAssign,
    SequenceAssign,
    Statement,
    TempoChange,
    TempoScope,
    ValueAssign,
    Wait,
)


class _Frame:
    """Running position and state while one block body is evaluated."""

    def __init__(self, ctx: EvaluationContext, state: ScopeState) -> None:
        self.ctx = ctx
        self.state = state
        self.elapsed = TimePoint.ZERO
        self.events: list[Event] = []

    @property
    def position(self) -> TimePoint:
        """Current position relative to the loop start."""
        return self.ctx.offset + self.elapsed

    def number(self, expr: str | None) -> float | None:
        return self.state.number(expr, self.ctx.rng)

    def options(self, raw: Mapping[str, str]) -> dict[str, float | None]:
        return {key: self.number(value) for key, value in raw.items()}

    def absorb(self, result: BlockResult, events: list[Event] | None = None) -> None:
        """Append a nested result and move past it."""
        self.events.extend(result.events if events is None else events)
        self.elapsed = self.elapsed + result.length
        self.state = result.state

    def result(self) -> BlockResult:
        length = self.elapsed
        if self.events:
            offset = self.ctx.offset
            length = TimePoint(
                max(length.beats, max(e.end_beat for e in self.events) - offset.beats),
                max(length.seconds, max(e.end_second for e in self.events) - offset.seconds),
            )
        return BlockResult(self.events, length, self.state, self.ctx)


class BlockEvaluator:
    """
    Evaluates statement lists into events.

    The evaluator is stateless between calls; everything a block needs is
    passed in, and everything it changes is returned in the BlockResult.
    """

    def __init__(self) -> None:
        self._handlers: dict[StatementKind, Callable[[Any, _Frame], None]] = {
            StatementKind.TEMPO: self._tempo,
            StatementKind.INSTRUMENT: self._instrument,
            StatementKind.DEFAULTS: self._defaults,
            StatementKind.SEQUENCE_ASSIGN: self._sequence,
            StatementKind.SCALE_ASSIGN: self._scale,
            StatementKind.RANDOM_ASSIGN: self._random,
            StatementKind.VALUE_ASSIGN: self._value,
            StatementKind.CURSOR_ASSIGN: self._cursor,
            StatementKind.REPEAT: self._repeat,
            StatementKind.TEMPO_SCOPE: self._tempo_scope,
            StatementKind.CONDITIONAL: self._conditional,
            StatementKind.WAIT: self._wait,
            StatementKind.PLAY: self._play,
            StatementKind.SAMPLE: self._sample,
            StatementKind.UNRECOGNIZED: self._skip,
        }

    def evaluate(
        self,
        statements: Sequence[Statement],
        ctx: EvaluationContext,
        state: ScopeState | None = None,
    ) -> BlockResult:
        """
        Evaluate a block body.

        Args:
            statements: Classified statements of the body
            ctx: Scope settings; ctx.offset places the body within the loop
            state: Bindings and cursors on entry (copied, never mutated)

        Returns:
            BlockResult with events, measured length and exit state
        """
        frame = _Frame(ctx, state.copy() if state is not None else ScopeState())
        for statement in statements:
            self._handlers[statement.kind](statement, frame)
        return frame.result()

    # ------------------------------------------------------------------
    # Scope settings
    # ------------------------------------------------------------------

    def _tempo(self, stmt: TempoChange, frame: _Frame) -> None:
        if frame.ctx.tempo_locked:
            return
        bpm = frame.number(stmt.bpm)
        if bpm is not None and bpm > 0:
            frame.ctx = frame.ctx.fork(tempo=bpm)

    def _instrument(self, stmt: InstrumentSelect, frame: _Frame) -> None:
        frame.ctx = frame.ctx.fork(instrument=normalize_symbol(stmt.name))

    def _defaults(self, stmt: DefaultsChange, frame: _Frame) -> None:
        options = frame.options(stmt.options)
        duration = options.get("release")
        if duration is None:
            duration = options.get("sustain")
        frame.ctx = frame.ctx.fork(
            defaults=frame.ctx.defaults.with_overrides(
                velocity=velocity_from_amp(options.get("amp")),
                duration_beats=clamp_duration(duration),
            )
        )

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def _sequence(self, stmt: SequenceAssign, frame: _Frame) -> None:
        values = resolve_items(stmt.items, frame.state, frame.ctx.rng)
        frame.state.bind(stmt.name, tuple(values))

    def _scale(self, stmt: ScaleAssign, frame: _Frame) -> None:
        root = note_value(stmt.root, frame.state, frame.ctx.rng)
        if root is None:
            return
        scale = build_scale(root, stmt.mode, frame.number(stmt.num_octaves))
        if scale is None:
            return
        frame.state.scale = scale
        frame.state.bind(stmt.name, tuple(float(n) for n in scale.notes()))

    def _random(self, stmt: RandomAssign, frame: _Frame) -> None:
        # Drawn once per evaluation; loop repetitions reuse the value
        low = frame.number(stmt.low)
        low = 0.0 if low is None else low
        high = frame.number(stmt.high)
        high = low if high is None else high
        rng = frame.ctx.rng
        if stmt.integer:
            lo, hi = sorted((int(low), int(high)))
            value = float(rng.randint(lo, hi))
        else:
            value = low + rng.random() * (high - low)
        frame.state.bind(stmt.name, value)

    def _value(self, stmt: ValueAssign, frame: _Frame) -> None:
        aliased = frame.state.sequence(stmt.expr)
        if aliased is not None:
            frame.state.bind(stmt.name, aliased)
            return
        value = note_value(stmt.expr, frame.state, frame.ctx.rng)
        if value is not None:
            frame.state.bind(stmt.name, value)

    def _cursor(self, stmt: CursorAssign, frame: _Frame) -> None:
        value = frame.state.tick(stmt.source)
        if value is not None:
            frame.state.bind(stmt.name, value)

    # ------------------------------------------------------------------
    # Nested blocks
    # ------------------------------------------------------------------

    def _repeat(self, stmt: RepeatBlock, frame: _Frame) -> None:
        count = frame.number(stmt.count)
        iterations = 1 if count is None else max(0, min(int(count), MAX_REPEAT_ITERATIONS))
        horizon = frame.ctx.horizon_seconds
        for _ in range(iterations):
            if horizon is not None and frame.position.seconds >= horizon:
                # Nothing past the horizon is heard
                break
            child = frame.ctx.fork(offset=frame.position)
            frame.absorb(self.evaluate(stmt.body, child, frame.state))

    def _tempo_scope(self, stmt: TempoScope, frame: _Frame) -> None:
        bpm = None if frame.ctx.tempo_locked else frame.number(stmt.bpm)
        if bpm is None or bpm <= 0:
            bpm = frame.ctx.tempo
        child = frame.ctx.fork(tempo=bpm, offset=TimePoint.ZERO)
        result = self.evaluate(stmt.body, child, frame.state)
        at = frame.position
        frame.absorb(result, [event.shifted(at) for event in result.events])

    def _conditional(self, stmt: Conditional, frame: _Frame) -> None:
        # One draw per evaluation, whether or not there is an else branch
        n = frame.number(stmt.one_in)
        denominator = DEFAULT_ONE_IN if n is None else int(n)
        taken = denominator >= 1 and frame.ctx.rng.randrange(denominator) == 0
        body = stmt.body if taken else stmt.else_body
        if body:
            child = frame.ctx.fork(offset=frame.position)
            frame.absorb(self.evaluate(body, child, frame.state))

    # ------------------------------------------------------------------
    # Time and sound
    # ------------------------------------------------------------------

    def _wait(self, stmt: Wait, frame: _Frame) -> None:
        beats = frame.number(stmt.beats)
        if beats is None or beats <= 0:
            return
        frame.elapsed = frame.elapsed.advance(beats, frame.ctx.tempo)

    def _play(self, stmt: Play, frame: _Frame) -> None:
        pitches = resolve_pitches(stmt.source, frame.state, frame.ctx.rng)
        event = assemble_note(pitches, frame.ctx, frame.position, frame.options(stmt.options))
        if event is not None:
            frame.events.append(event)

    def _sample(self, stmt: SampleHit, frame: _Frame) -> None:
        event = assemble_sample(stmt.name, frame.ctx, frame.position, frame.options(stmt.options))
        frame.events.append(event)

    def _skip(self, stmt: Statement, frame: _Frame) -> None:
        """Unrecognized lines are reported by the classifier and otherwise ignored."""
