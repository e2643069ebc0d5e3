"""
Log parser - discovers how to reach a running Sonic Pi.

Sonic Pi writes its ports (and, from 4.0, an auth token) to log files in
~/.sonic-pi/log when it boots:

- 4.x: spider.log contains `:server_port=>N` and `Token: N`
- 3.x: server-output.log contains `Listen port: N` and `OSC cues port: N`

The 4.x log is preferred when both are present.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from chuk_mcp_sonic_pi.constants import DEFAULT_OSC_CUES_PORT
from chuk_mcp_sonic_pi.models.connection import ConnectionParams

logger = logging.getLogger(__name__)

# Environment variable overriding the log directory
LOG_DIR_ENV = "SONIC_PI_LOG_DIR"

V4_LOG_FILE = "spider.log"
V3_LOG_FILE = "server-output.log"

_V4_PORT_RE = re.compile(r":server_port=>(\d+)")
_V4_TOKEN_RE = re.compile(r"Token:\s*(-?\d+)")
_V4_VERSION_RE = re.compile(r"version ([0-9.]+)")

_V3_VERSION_RE = re.compile(r"This is version ([0-9.]+)")
_V3_LISTEN_RE = re.compile(r"^Listen port:\s*(\d+)")
_V3_CUES_RE = re.compile(r"^OSC cues port:\s*(\d+)")


def get_sonic_pi_log_dir(log_dir: str | Path | None = None) -> Path:
    """
    Resolve the log directory.

    An explicit directory wins, then $SONIC_PI_LOG_DIR, then ~/.sonic-pi/log.
    """
    if log_dir:
        return Path(log_dir)
    env_dir = os.environ.get(LOG_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".sonic-pi" / "log"


def log_directory_exists(log_dir: str | Path | None = None) -> bool:
    """Check whether the Sonic Pi log directory exists."""
    return get_sonic_pi_log_dir(log_dir).is_dir()


def _read_lines(path: Path) -> list[str] | None:
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return None


def parse_v4_log(log_dir: str | Path | None = None) -> ConnectionParams | None:
    """Parse a Sonic Pi 4.x spider.log; None unless both port and token are found."""
    lines = _read_lines(get_sonic_pi_log_dir(log_dir) / V4_LOG_FILE)
    if lines is None:
        return None

    port: int | None = None
    token: int | None = None
    version: str | None = None
    # Later lines win: the log may hold several boots
    for line in lines:
        if match := _V4_PORT_RE.search(line):
            port = int(match.group(1))
        if match := _V4_TOKEN_RE.search(line):
            token = int(match.group(1))
        if match := _V4_VERSION_RE.search(line):
            version = match.group(1)

    if port is None or token is None:
        return None
    return ConnectionParams(port=port, token=token, version=version or "unknown", major_version=4)


def parse_v3_log(log_dir: str | Path | None = None) -> ConnectionParams | None:
    """Parse a Sonic Pi 3.x server-output.log; None unless a listen port is found."""
    lines = _read_lines(get_sonic_pi_log_dir(log_dir) / V3_LOG_FILE)
    if lines is None:
        return None

    listen_port: int | None = None
    cues_port: int | None = None
    version: str | None = None
    for line in lines:
        if match := _V3_VERSION_RE.search(line):
            version = match.group(1)
        if match := _V3_LISTEN_RE.match(line):
            listen_port = int(match.group(1))
        if match := _V3_CUES_RE.match(line):
            cues_port = int(match.group(1))

    if listen_port is None:
        return None
    return ConnectionParams(
        port=listen_port,
        version=version or "unknown",
        major_version=3,
        osc_cues_port=cues_port or DEFAULT_OSC_CUES_PORT,
    )


def parse_sonic_pi_log(log_dir: str | Path | None = None) -> ConnectionParams | None:
    """
    Discover connection parameters from Sonic Pi's logs.

    Tries the 4.x log first and falls back to the 3.x log.

    Args:
        log_dir: Log directory (defaults to $SONIC_PI_LOG_DIR or ~/.sonic-pi/log)

    Returns:
        ConnectionParams, or None if Sonic Pi does not appear to be running
    """
    params = parse_v4_log(log_dir) or parse_v3_log(log_dir)
    if params is None:
        logger.debug(f"No Sonic Pi connection details in {get_sonic_pi_log_dir(log_dir)}")
    return params
