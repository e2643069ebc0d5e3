"""
Preview tools - MCP tools for offline previews.

Tools for compiling Sonic Pi code to an event timeline without an engine,
and for exporting that timeline as a MIDI file.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_sonic_pi.compiler import compile_code, result_to_midi
from chuk_mcp_sonic_pi.constants import DEFAULT_BARS, SuccessMessages
from chuk_mcp_sonic_pi.models.event import CompileOptions

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.-]+")


def _midi_filename(name: str) -> str:
    stem = _UNSAFE_FILENAME.sub("_", Path(name).stem).strip("._") or "preview"
    return f"{stem}.mid"


def register_preview_tools(mcp: ChukMCPServer, output_dir: Path) -> dict[str, Any]:
    """
    Register preview tools with the MCP server.

    Args:
        mcp: The MCP server instance
        output_dir: Directory for exported MIDI files

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def preview_music(
        code: str,
        bars: int = DEFAULT_BARS,
        tempo: float | None = None,
        seed: int | None = None,
        include_events: bool = False,
    ) -> str:
        """
        Compile Sonic Pi code to a preview timeline.

        Runs offline: no engine is needed. Unsupported lines are skipped
        and reported as warnings.

        Args:
            code: Sonic Pi source
            bars: Preview length in bars (1-64)
            tempo: Optional tempo override (BPM)
            seed: Optional seed for rrand/one_in/choose draws
            include_events: Include the full event list

        Returns:
            JSON string with summary, warnings and (optionally) events

        Example:
            preview_music(code="use_bpm 90\\nlive_loop :d do\\n  sample :bd_haus\\n  sleep 1\\nend")
        """
        try:
            options = CompileOptions(bars=bars, tempo_override=tempo, seed=seed)
            result = compile_code(code, options)
            response: dict[str, Any] = {
                "status": "success",
                "summary": result.summary(),
                "warnings": result.warnings,
                "message": SuccessMessages.PREVIEW_COMPILED.format(
                    events=len(result.events), bars=result.bars, tempo=result.tempo
                ),
            }
            if include_events:
                response["events"] = [e.model_dump(mode="json") for e in result.events]
            return json.dumps(response)
        except Exception as e:
            logger.exception("Failed to compile preview")
            return json.dumps({"status": "error", "message": str(e)})

    tools["preview_music"] = preview_music

    @mcp.tool  # type: ignore[arg-type]
    async def export_preview_midi(
        code: str,
        filename: str = "preview",
        bars: int = DEFAULT_BARS,
        tempo: float | None = None,
        seed: int | None = None,
    ) -> str:
        """
        Compile Sonic Pi code and save the preview as a MIDI file.

        Drum samples go to the General MIDI drum channel; synths and other
        samples each get their own channel.

        Args:
            code: Sonic Pi source
            filename: Output filename (without .mid extension)
            bars: Preview length in bars (1-64)
            tempo: Optional tempo override (BPM)
            seed: Optional seed for rrand/one_in/choose draws

        Returns:
            JSON string with the file path and summary

        Example:
            export_preview_midi(code=pattern_code, filename="rock", bars=4)
        """
        try:
            options = CompileOptions(bars=bars, tempo_override=tempo, seed=seed)
            result = compile_code(code, options)

            output_dir.mkdir(parents=True, exist_ok=True)
            output_path = output_dir / _midi_filename(filename)
            result_to_midi(result).save(str(output_path))
            logger.info(f"Saved preview to {output_path}")

            return json.dumps(
                {
                    "status": "success",
                    "path": str(output_path),
                    "summary": result.summary(),
                    "warnings": result.warnings,
                    "message": f"Exported {len(result.events)} events to {output_path.name}",
                }
            )
        except Exception as e:
            logger.exception("Failed to export preview MIDI")
            return json.dumps({"status": "error", "message": str(e)})

    tools["export_preview_midi"] = export_preview_midi

    return tools
