"""
Compilation pipeline - turns classified statements into preview events.

The pipeline:
    Script text → prelude + loops
    → statements (parser)
    → one evaluated cycle per loop (BlockEvaluator)
    → horizon-expanded event list (CompileResult)
    → MIDI File
"""

# Import MIDI first (no circular dependencies)
from chuk_mcp_sonic_pi.compiler.midi import (
    DRUM_CHANNEL,
    TICKS_PER_BEAT,
    MidiEvent,
    events_to_midi,
    result_to_midi,
)


def __getattr__(name: str):
    """Lazy imports for the compiler to keep `import compiler.midi` light."""
    if name in ("PreviewCompiler", "compile_code", "compile_file", "extract_global_tempo"):
        from chuk_mcp_sonic_pi.compiler import preview

        return getattr(preview, name)
    if name in ("BlockEvaluator",):
        from chuk_mcp_sonic_pi.compiler.evaluator import BlockEvaluator

        return BlockEvaluator
    if name in ("EvaluationContext", "ScopeState", "BlockResult"):
        from chuk_mcp_sonic_pi.compiler import context

        return getattr(context, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Preview (lazy loaded)
    "PreviewCompiler",
    "compile_code",
    "compile_file",
    "extract_global_tempo",
    # Evaluation (lazy loaded)
    "BlockEvaluator",
    "BlockResult",
    "EvaluationContext",
    "ScopeState",
    # MIDI
    "DRUM_CHANNEL",
    "TICKS_PER_BEAT",
    "MidiEvent",
    "events_to_midi",
    "result_to_midi",
]
