"""
MCP tool implementations.

Tools are organized by domain:
- playback - Connect to Sonic Pi, play and stop code
- patterns - Ready-made beat patterns
- preview - Offline event previews and MIDI export
"""

from chuk_mcp_sonic_pi.tools.patterns import register_pattern_tools
from chuk_mcp_sonic_pi.tools.playback import register_playback_tools
from chuk_mcp_sonic_pi.tools.preview import register_preview_tools

__all__ = [
    "register_pattern_tools",
    "register_playback_tools",
    "register_preview_tools",
]
