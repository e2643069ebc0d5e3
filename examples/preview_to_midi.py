#!/usr/bin/env python3
"""
Example: Preview Sonic Pi code offline and export MIDI.

Compiles every built-in beat pattern plus a multi-loop groove to preview
timelines, prints a summary of each, and writes playable MIDI files.
No running Sonic Pi is needed.

Usage:
    python examples/preview_to_midi.py
    # Creates: examples/output/<pattern>.mid and hip_hop_groove.mid
"""

from pathlib import Path

from chuk_mcp_sonic_pi.compiler import compile_code, compile_file, result_to_midi
from chuk_mcp_sonic_pi.models.event import CompileOptions
from chuk_mcp_sonic_pi.patterns import LIBRARY_PATH, BeatPatternRegistry


def main() -> None:
    """Preview the pattern library and the example groove."""
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    registry = BeatPatternRegistry(library_path=LIBRARY_PATH)
    options = CompileOptions(bars=4)

    print("Beat patterns:")
    for meta in registry.list_patterns():
        pattern = registry.get_pattern(meta.name)
        if pattern is None:
            continue
        result = compile_code(pattern.code, options)
        path = output_dir / f"{pattern.name}.mid"
        result_to_midi(result).save(str(path))
        print(f"  {pattern.name:<12} {len(result.events):>3} events at {result.tempo:g} BPM")
        print(f"  {'':<12} -> {path}")

    print("\nGroove (seeded so the melody repeats):")
    groove = compile_file(
        Path(__file__).parent / "hip_hop_groove.rb", CompileOptions(bars=4, seed=42)
    )
    summary = groove.summary()
    for loop_name, count in summary["loops"].items():
        print(f"  {loop_name:<8} {count:>3} events")
    print(f"  instruments: {', '.join(summary['instruments'])}")
    low, high = summary["pitch_range"]
    print(f"  pitch range: {low}-{high}")
    if summary["melodic_range"]:
        print(f"  melodic range: {' to '.join(summary['melodic_range'])}")
    for warning in groove.warnings:
        print(f"  warning: {warning}")

    path = output_dir / "hip_hop_groove.mid"
    result_to_midi(groove).save(str(path))
    print(f"  -> {path}")

    print("\nDone! Open the MIDI files in your DAW to hear them.")


if __name__ == "__main__":
    main()
