"""
Engine collaborators - finding and talking to a running Sonic Pi.

- log_parser: reads ports and the auth token from Sonic Pi's log files
- client: sends /run-code and /stop-all-jobs over OSC
"""

from chuk_mcp_sonic_pi.engine.client import SonicPiClient
from chuk_mcp_sonic_pi.engine.log_parser import (
    get_sonic_pi_log_dir,
    log_directory_exists,
    parse_sonic_pi_log,
    parse_v3_log,
    parse_v4_log,
)

__all__ = [
    "SonicPiClient",
    "get_sonic_pi_log_dir",
    "log_directory_exists",
    "parse_sonic_pi_log",
    "parse_v3_log",
    "parse_v4_log",
]
