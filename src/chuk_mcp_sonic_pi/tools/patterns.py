"""
Beat pattern tools - MCP tools for ready-made scripts.

Tools for listing the pattern library, fetching a pattern's code and
copying a pattern into the project for editing.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_sonic_pi.constants import ErrorMessages, SuccessMessages
from chuk_mcp_sonic_pi.patterns import BeatPatternRegistry

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_pattern_tools(mcp: ChukMCPServer, registry: BeatPatternRegistry) -> dict[str, Any]:
    """
    Register beat pattern tools with the MCP server.

    Args:
        mcp: The MCP server instance
        registry: The beat pattern registry

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def list_beat_patterns(tag: str | None = None) -> str:
        """
        List available beat patterns.

        Args:
            tag: Optional filter by tag (e.g., 'drums', 'shuffle')

        Returns:
            JSON string with list of pattern summaries

        Example:
            list_beat_patterns()
        """
        try:
            patterns = registry.list_patterns(tag=tag)
            return json.dumps(
                {
                    "status": "success",
                    "patterns": [
                        {
                            "name": p.name,
                            "description": p.description,
                            "tempo": p.tempo,
                            "tags": p.tags,
                        }
                        for p in patterns
                    ],
                    "count": len(patterns),
                }
            )
        except Exception as e:
            logger.exception("Failed to list beat patterns")
            return json.dumps({"status": "error", "message": str(e)})

    tools["list_beat_patterns"] = list_beat_patterns

    @mcp.tool  # type: ignore[arg-type]
    async def get_beat_pattern(style: str) -> str:
        """
        Get Sonic Pi code for a beat pattern.

        The code can be passed straight to play_music or preview_music.

        Args:
            style: Pattern name ('blues', 'rock', 'hiphop', 'electronic')

        Returns:
            JSON string with the pattern's code

        Example:
            get_beat_pattern(style="rock")
        """
        try:
            pattern = registry.get_pattern(style)
            if pattern is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.PATTERN_NOT_FOUND.format(name=style),
                        "available": registry.pattern_names(),
                    }
                )
            return json.dumps(
                {
                    "status": "success",
                    "name": pattern.name,
                    "description": pattern.description,
                    "tempo": pattern.tempo,
                    "code": pattern.code,
                }
            )
        except Exception as e:
            logger.exception(f"Failed to get beat pattern {style}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["get_beat_pattern"] = get_beat_pattern

    @mcp.tool  # type: ignore[arg-type]
    async def copy_beat_pattern_to_project(style: str) -> str:
        """
        Copy a library beat pattern into the project patterns directory.

        The copy shadows the library pattern of the same name, so edits to
        the YAML file show up in get_beat_pattern and list_beat_patterns.

        Args:
            style: Pattern name (e.g., 'rock')

        Returns:
            JSON string with the path of the copy

        Example:
            copy_beat_pattern_to_project(style="rock")
        """
        try:
            path = registry.copy_to_project(style)
            if path is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.PATTERN_NOT_FOUND.format(name=style),
                        "available": registry.pattern_names(),
                    }
                )
            return json.dumps(
                {
                    "status": "success",
                    "name": path.stem,
                    "path": str(path),
                    "message": SuccessMessages.PATTERN_COPIED.format(name=path.stem),
                }
            )
        except ValueError as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception(f"Failed to copy beat pattern {style}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["copy_beat_pattern_to_project"] = copy_beat_pattern_to_project

    return tools
