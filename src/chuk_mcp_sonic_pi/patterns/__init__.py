"""
Beat patterns - ready-made Sonic Pi scripts.

The built-in library lives in patterns/library/*.yaml; projects can copy a
pattern and edit their own version.
"""

from pathlib import Path

from chuk_mcp_sonic_pi.patterns.registry import BeatPatternRegistry

# Built-in pattern library shipped with the package
LIBRARY_PATH = Path(__file__).parent / "library"

__all__ = [
    "LIBRARY_PATH",
    "BeatPatternRegistry",
]
