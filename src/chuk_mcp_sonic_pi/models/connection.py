"""
Connection model - how to reach a running Sonic Pi engine.

Sonic Pi 3.x accepts messages on its listen port identified by a client-id
string. Sonic Pi 4.x accepts them on its server port and authenticates with
an integer token printed in its log.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from chuk_mcp_sonic_pi.constants import DEFAULT_OSC_CUES_PORT


class ConnectionParams(BaseModel):
    """Parameters discovered from the engine's log files."""

    port: int = Field(..., gt=0, lt=65536, description="Port that accepts /run-code")
    token: int | None = Field(None, description="Auth token (v4 and later)")
    version: str = Field("unknown", description="Engine version string")
    major_version: int = Field(..., ge=3, description="Protocol major version")
    osc_cues_port: int = Field(DEFAULT_OSC_CUES_PORT, description="Incoming cue port (v3)")

    model_config = {"frozen": True}

    @property
    def uses_token(self) -> bool:
        """True when messages carry the integer token instead of a client id."""
        return self.major_version >= 4 and self.token is not None
