#!/usr/bin/env python3
"""
Async Sonic Pi MCP Server using chuk-mcp-server

This server lets an assistant make music with Sonic Pi. Code can be sent to
a running Sonic Pi for playback, or compiled offline into a preview timeline
of timed notes that can be inspected or exported as MIDI.

The server provides tools for:
- Connecting to Sonic Pi (3.x and 4.x) and playing/stopping code
- Ready-made beat patterns (blues, rock, hip-hop, electronic)
- Offline previews: event timelines, warnings and MIDI export
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_sonic_pi.engine import SonicPiClient
from chuk_mcp_sonic_pi.engine.log_parser import LOG_DIR_ENV, get_sonic_pi_log_dir
from chuk_mcp_sonic_pi.patterns import LIBRARY_PATH, BeatPatternRegistry
from chuk_mcp_sonic_pi.tools import (
    register_pattern_tools,
    register_playback_tools,
    register_preview_tools,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-sonic-pi")

# Paths - use standard project structure
BASE_PATH = Path.cwd()
PATTERNS_DIR = BASE_PATH / "patterns"
OUTPUT_DIR = BASE_PATH / "output"
LOG_DIR = os.environ.get(LOG_DIR_ENV)

# Create collaborators
sonic_pi_client = SonicPiClient(log_dir=LOG_DIR)
pattern_registry = BeatPatternRegistry(
    library_path=LIBRARY_PATH,
    project_path=PATTERNS_DIR,
)

# Register all tools
playback_tools = register_playback_tools(mcp, sonic_pi_client)
pattern_tools = register_pattern_tools(mcp, pattern_registry)
preview_tools = register_preview_tools(mcp, OUTPUT_DIR)

# Export tool functions for direct access
initialize_sonic_pi = playback_tools["initialize_sonic_pi"]
play_music = playback_tools["play_music"]
stop_music = playback_tools["stop_music"]

list_beat_patterns = pattern_tools["list_beat_patterns"]
get_beat_pattern = pattern_tools["get_beat_pattern"]
copy_beat_pattern_to_project = pattern_tools["copy_beat_pattern_to_project"]

preview_music = preview_tools["preview_music"]
export_preview_midi = preview_tools["export_preview_midi"]

logger.info("CHUK Sonic Pi MCP Server initialized")
logger.info(f"  Library path: {LIBRARY_PATH}")
logger.info(f"  Sonic Pi log dir: {get_sonic_pi_log_dir(LOG_DIR)}")
logger.info(f"  Output dir: {OUTPUT_DIR}")
