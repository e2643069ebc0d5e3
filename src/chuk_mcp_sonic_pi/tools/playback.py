"""
Playback tools - MCP tools that drive a running Sonic Pi.

Tools for connecting to the engine, sending code and stopping playback.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_sonic_pi.engine import SonicPiClient

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def _response(message: str, **extra: Any) -> str:
    """Client results are plain strings; failures start with "Error"."""
    status = "error" if message.startswith("Error") else "success"
    return json.dumps({"status": status, "message": message, **extra})


def register_playback_tools(mcp: ChukMCPServer, client: SonicPiClient) -> dict[str, Any]:
    """
    Register playback tools with the MCP server.

    Args:
        mcp: The MCP server instance
        client: The Sonic Pi OSC client

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def initialize_sonic_pi() -> str:
        """
        Connect to a running Sonic Pi.

        Reads the engine's log files to find its port (and, for 4.x, its
        auth token). Sonic Pi must be open before calling this.

        Returns:
            JSON string with the connection result

        Example:
            initialize_sonic_pi()
        """
        try:
            message = client.initialize()
            params = client.params if client.is_initialized else None
            extra = {"connection": params.model_dump(exclude={"token"})} if params else {}
            return _response(message, **extra)
        except Exception as e:
            logger.exception("Failed to initialize Sonic Pi client")
            return json.dumps({"status": "error", "message": str(e)})

    tools["initialize_sonic_pi"] = initialize_sonic_pi

    @mcp.tool  # type: ignore[arg-type]
    async def play_music(code: str) -> str:
        """
        Play Sonic Pi code.

        Sends the code to Sonic Pi for immediate execution. Use live_loop
        blocks for continuous music and sleep between notes.

        Args:
            code: Sonic Pi source

        Returns:
            JSON string with the send result

        Example:
            play_music(code="live_loop :beat do\\n  sample :bd_haus\\n  sleep 0.5\\nend")
        """
        try:
            if not code.strip():
                return json.dumps({"status": "error", "message": "No code provided"})
            return _response(client.run_code(code))
        except Exception as e:
            logger.exception("Failed to send code to Sonic Pi")
            return json.dumps({"status": "error", "message": str(e)})

    tools["play_music"] = play_music

    @mcp.tool  # type: ignore[arg-type]
    async def stop_music() -> str:
        """
        Stop all music currently playing in Sonic Pi.

        Returns:
            JSON string with the stop result
        """
        try:
            return _response(client.stop())
        except Exception as e:
            logger.exception("Failed to stop Sonic Pi")
            return json.dumps({"status": "error", "message": str(e)})

    tools["stop_music"] = stop_music

    return tools
