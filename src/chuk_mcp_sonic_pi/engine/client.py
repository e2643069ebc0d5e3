"""
Sonic Pi client - relays code to a running Sonic Pi over OSC.

Two commands are sent, both as OSC messages over UDP to localhost:

    /run-code       [identity, code]
    /stop-all-jobs  [identity]

The identity is the client-id string for 3.x and the integer auth token for
4.x. Failures are reported as result strings starting with "Error", never
raised, so callers can pass them straight back to the user.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pythonosc.udp_client

from chuk_mcp_sonic_pi.constants import CLIENT_ID, ENGINE_HOST, ErrorMessages, SuccessMessages
from chuk_mcp_sonic_pi.engine.log_parser import parse_sonic_pi_log
from chuk_mcp_sonic_pi.models.connection import ConnectionParams

logger = logging.getLogger(__name__)

RUN_CODE_ADDRESS = "/run-code"
STOP_ALL_ADDRESS = "/stop-all-jobs"


class SonicPiClient:
    """
    OSC client for a running Sonic Pi.

    Connection parameters come from the engine's log files on first use;
    they can also be supplied directly.
    """

    def __init__(
        self,
        log_dir: str | Path | None = None,
        params: ConnectionParams | None = None,
        host: str = ENGINE_HOST,
        client_id: str = CLIENT_ID,
    ):
        """
        Initialize the client.

        Args:
            log_dir: Log directory to read connection details from
            params: Known connection details (skips log discovery)
            host: Engine host
            client_id: Identity sent to 3.x engines
        """
        self.log_dir = log_dir
        self.params = params
        self._given_params = params
        self.host = host
        self.client_id = client_id
        self._client: pythonosc.udp_client.SimpleUDPClient | None = None

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    def initialize(self) -> str:
        """
        Discover the engine and open the OSC client.

        Returns:
            A connection message, or an error message
        """
        params = self._given_params or parse_sonic_pi_log(self.log_dir)
        if params is None:
            return ErrorMessages.LOGS_NOT_FOUND

        try:
            self._client = pythonosc.udp_client.SimpleUDPClient(self.host, params.port)
        except OSError as e:
            logger.warning(f"Could not open OSC client: {e}")
            return ErrorMessages.CLIENT_INIT.format(error=e)

        self.params = params
        template = (
            SuccessMessages.CONNECTED_V4 if params.uses_token else SuccessMessages.CONNECTED_V3
        )
        message = template.format(version=params.version, port=params.port)
        logger.info(message)
        return message

    def _identity(self, params: ConnectionParams) -> int | str:
        if params.uses_token:
            return params.token  # type: ignore[return-value]
        return self.client_id

    def _ensure_initialized(self) -> str | None:
        """Initialize on first use; return an error message on failure."""
        if self.is_initialized:
            return None
        result = self.initialize()
        return result if result.startswith("Error") else None

    def run_code(self, code: str) -> str:
        """
        Send code to Sonic Pi for execution.

        Args:
            code: Sonic Pi source

        Returns:
            A success message, or an error message
        """
        error = self._ensure_initialized()
        if error:
            return error
        client, params = self._client, self.params
        if client is None or params is None:
            return ErrorMessages.NOT_CONNECTED
        try:
            client.send_message(RUN_CODE_ADDRESS, [self._identity(params), code])
        except OSError as e:
            logger.warning(f"Failed to send code: {e}")
            return ErrorMessages.SEND_CODE.format(error=e)
        logger.info(f"Sent {len(code)} characters to Sonic Pi")
        return SuccessMessages.CODE_SENT

    def stop(self) -> str:
        """Stop all running jobs in Sonic Pi."""
        error = self._ensure_initialized()
        if error:
            return error
        client, params = self._client, self.params
        if client is None or params is None:
            return ErrorMessages.NOT_CONNECTED
        try:
            client.send_message(STOP_ALL_ADDRESS, [self._identity(params)])
        except OSError as e:
            logger.warning(f"Failed to stop jobs: {e}")
            return ErrorMessages.STOP.format(error=e)
        logger.info("Stopped all Sonic Pi jobs")
        return SuccessMessages.STOPPED

    def close(self) -> None:
        """Drop the OSC client; the next command re-discovers the engine."""
        self._client = None
        self.params = self._given_params
