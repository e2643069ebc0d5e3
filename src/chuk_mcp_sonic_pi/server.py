#!/usr/bin/env python3
"""
Entry point for the CHUK Sonic Pi MCP Server.

Runs the MCP server over stdio or http. With --preview it instead compiles
a Sonic Pi script offline, writes a MIDI file next to it and exits.
"""

import argparse
import asyncio
import logging
import os
from pathlib import Path

from chuk_mcp_sonic_pi.constants import DEFAULT_BARS
from chuk_mcp_sonic_pi.engine.log_parser import LOG_DIR_ENV

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_preview(script: Path, bars: int, tempo: float | None, seed: int | None) -> int:
    """Compile a script to <script>.mid; returns the process exit code."""
    from chuk_mcp_sonic_pi.compiler import compile_file, result_to_midi
    from chuk_mcp_sonic_pi.models.event import CompileOptions

    try:
        result = compile_file(script, CompileOptions(bars=bars, tempo_override=tempo, seed=seed))
    except OSError as e:
        logger.error(f"Could not read {script}: {e}")
        return 1

    for warning in result.warnings:
        logger.warning(warning)

    output_path = script.with_suffix(".mid")
    result_to_midi(result).save(str(output_path))
    logger.info(
        f"Wrote {len(result.events)} events over {result.bars} bars "
        f"at {result.tempo:g} BPM to {output_path}"
    )
    return 0


def main() -> None:
    """Main entry point with transport detection."""
    parser = argparse.ArgumentParser(description="CHUK Sonic Pi MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--log-dir",
        help=f"Sonic Pi log directory (default: ${LOG_DIR_ENV} or ~/.sonic-pi/log)",
    )
    parser.add_argument(
        "--preview",
        type=Path,
        metavar="SCRIPT",
        help="Compile a Sonic Pi script to MIDI and exit",
    )
    parser.add_argument("--bars", type=int, default=DEFAULT_BARS, help="Preview length in bars")
    parser.add_argument("--tempo", type=float, help="Preview tempo override (BPM)")
    parser.add_argument("--seed", type=int, help="Preview random seed")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.preview:
        raise SystemExit(run_preview(args.preview, args.bars, args.tempo, args.seed))

    # The server reads the log directory from the environment at import
    if args.log_dir:
        os.environ[LOG_DIR_ENV] = args.log_dir

    from chuk_mcp_sonic_pi.async_server import mcp

    if args.transport == "stdio":
        logger.info("Starting CHUK Sonic Pi MCP Server (stdio)")
        asyncio.run(mcp.run_stdio())
    else:
        logger.info(f"Starting CHUK Sonic Pi MCP Server (http:{args.port})")
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
