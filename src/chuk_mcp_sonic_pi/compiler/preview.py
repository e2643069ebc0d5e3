"""
Preview compiler - the orchestrator.

    script text
    → scanned lines → prelude + loops          (parser.blocks)
    → statements + warnings                    (parser.statements)
    → one evaluated cycle per loop             (compiler.evaluator)
    → horizon-expanded, merged event list      (compiler.expander)

Compilation is total: unsupported lines become warnings and never abort the
run. With a seed, or with no random constructs, the output is deterministic.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path

from chuk_mcp_sonic_pi.compiler.context import EvaluationContext, ScopeState
from chuk_mcp_sonic_pi.compiler.evaluator import BlockEvaluator
from chuk_mcp_sonic_pi.compiler.expander import expand_loop, fallback_period
from chuk_mcp_sonic_pi.constants import BEATS_PER_BAR, DEFAULT_BPM, StatementKind
from chuk_mcp_sonic_pi.core.rhythm import TimePoint, beats_to_seconds
from chuk_mcp_sonic_pi.models.event import CompileOptions, CompileResult, Event
from chuk_mcp_sonic_pi.parser.blocks import split_lines
from chuk_mcp_sonic_pi.parser.expressions import evaluate_number
from chuk_mcp_sonic_pi.parser.scanner import ScannedLine, scan
from chuk_mcp_sonic_pi.parser.statements import (
    TIMED_KINDS,
    Statement,
    classify,
    collect_warnings,
    format_warning,
    walk,
)

logger = logging.getLogger(__name__)

# Block name used in warnings for top-level lines outside any loop
PRELUDE_NAME = "prelude"


def extract_global_tempo(lines: list[ScannedLine]) -> float | None:
    """The first literal `use_bpm` value in the script, if any."""
    for line in lines:
        if line.first_word != "use_bpm":
            continue
        bpm = evaluate_number(line.code[len("use_bpm") :])
        if bpm is not None and bpm > 0:
            return bpm
    return None


def _prelude_warnings(statements: list[Statement]) -> list[str]:
    # Unsupported lines, plus sound and time outside any loop
    return [
        format_warning(PRELUDE_NAME, s)
        for s in walk(statements)
        if s.kind in TIMED_KINDS or s.kind is StatementKind.UNRECOGNIZED
    ]


class PreviewCompiler:
    """
    Compiles Sonic Pi scripts to preview events.

    One compiler can be reused; each call to compile() owns its own random
    source and context tree.
    """

    def __init__(self, options: CompileOptions | None = None):
        """
        Initialize the compiler.

        Args:
            options: Bars, tempo override and seed (defaults if omitted)
        """
        self.options = options or CompileOptions()
        self.evaluator = BlockEvaluator()

    def compile(self, code: str) -> CompileResult:
        """
        Compile a script.

        Args:
            code: Sonic Pi source text

        Returns:
            CompileResult with horizon-filtered events and warnings
        """
        options = self.options
        lines = scan(code)
        script = split_lines(lines)

        override = options.tempo_override
        tempo = override or extract_global_tempo(lines) or DEFAULT_BPM
        target_beats = float(options.bars * BEATS_PER_BAR)
        horizon = TimePoint(target_beats, beats_to_seconds(target_beats, tempo))

        rng = random.Random(options.seed)
        warnings: list[str] = []

        seed_ctx = EvaluationContext(
            loop_name=PRELUDE_NAME,
            tempo=tempo,
            tempo_locked=override is not None,
            horizon_seconds=horizon.seconds,
            rng=rng,
        )
        seed_state = ScopeState()
        if script.prelude:
            prelude = classify(script.prelude)
            warnings.extend(_prelude_warnings(prelude))
            # Evaluated for bindings and settings only; its sound is discarded
            result = self.evaluator.evaluate(prelude, seed_ctx, seed_state)
            seed_ctx = result.context.fork(offset=TimePoint.ZERO)
            seed_state = result.state

        events: list[Event] = []
        loop_order: dict[str, int] = {}
        for block in script.loops:
            statements = classify(block.lines)
            warnings.extend(collect_warnings(statements, block.name))

            ctx = seed_ctx.fork(loop_name=block.name)
            cycle = self.evaluator.evaluate(statements, ctx, seed_state)
            expanded = expand_loop(cycle.events, cycle.length, horizon, fallback_period(ctx.tempo))
            logger.debug(
                f"Loop {block.name}: {len(cycle.events)} events per cycle, "
                f"cycle {cycle.length}, {len(expanded)} events in preview"
            )
            loop_order.setdefault(block.name, len(loop_order))
            events.extend(expanded)

        merged = sorted(
            (e for e in events if e.start_second < horizon.seconds),
            key=lambda e: (e.start_second, loop_order[e.loop_name]),
        )
        for warning in warnings:
            logger.debug(warning)

        return CompileResult(
            tempo=tempo,
            events=merged,
            warnings=warnings,
            target_beats=horizon.beats,
            target_seconds=horizon.seconds,
            bars=options.bars,
            loops=list(loop_order),
        )


def compile_code(code: str, options: CompileOptions | None = None) -> CompileResult:
    """
    Convenience function to compile a script.

    Args:
        code: Sonic Pi source text
        options: Bars, tempo override and seed

    Returns:
        CompileResult
    """
    return PreviewCompiler(options).compile(code)


def compile_file(path: str | Path, options: CompileOptions | None = None) -> CompileResult:
    """Read a script file and compile it."""
    code = Path(path).read_text(encoding="utf-8")
    return compile_code(code, options)
