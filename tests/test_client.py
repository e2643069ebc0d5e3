"""
Tests for the Sonic Pi OSC client.

A local UDP socket stands in for the engine so the messages the client
sends can be decoded and checked.
"""

import socket
from collections.abc import Iterator
from pathlib import Path

import pythonosc.osc_message
import pytest

from chuk_mcp_sonic_pi.constants import CLIENT_ID, ErrorMessages, SuccessMessages
from chuk_mcp_sonic_pi.engine import SonicPiClient
from chuk_mcp_sonic_pi.engine.log_parser import V4_LOG_FILE
from chuk_mcp_sonic_pi.models.connection import ConnectionParams


@pytest.fixture
def engine_socket() -> Iterator[socket.socket]:
    """A UDP socket listening where the engine would."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


def receive(sock: socket.socket) -> pythonosc.osc_message.OscMessage:
    data, _ = sock.recvfrom(65536)
    return pythonosc.osc_message.OscMessage(data)


def v3_params(port: int) -> ConnectionParams:
    return ConnectionParams(port=port, version="3.2.0", major_version=3)


def v4_params(port: int) -> ConnectionParams:
    return ConnectionParams(port=port, token=-2005799440, version="4.0.0", major_version=4)


class TestInitialize:
    """Tests for engine discovery."""

    def test_no_logs(self, log_dir: Path) -> None:
        """Without logs initialization reports an error."""
        client = SonicPiClient(log_dir=log_dir)
        assert client.initialize() == ErrorMessages.LOGS_NOT_FOUND
        assert not client.is_initialized

    def test_from_logs(self, log_dir: Path) -> None:
        """Connection details are read from the log directory."""
        (log_dir / V4_LOG_FILE).write_text(
            "Welcome to Sonic Pi version 4.0.0\nPorts: {:server_port=>30129}\nToken: 7\n"
        )
        client = SonicPiClient(log_dir=log_dir)
        message = client.initialize()
        assert message == SuccessMessages.CONNECTED_V4.format(version="4.0.0", port=30129)
        assert client.is_initialized
        assert client.params is not None
        assert client.params.token == 7

    def test_given_params(self) -> None:
        """Known parameters skip log discovery."""
        client = SonicPiClient(params=v3_params(4557))
        message = client.initialize()
        assert message == SuccessMessages.CONNECTED_V3.format(version="3.2.0", port=4557)


class TestCommands:
    """Tests for the messages sent to the engine."""

    def test_run_code_v3(self, engine_socket: socket.socket) -> None:
        """3.x engines get the client id with the code."""
        port = engine_socket.getsockname()[1]
        client = SonicPiClient(params=v3_params(port))
        assert client.run_code("play 60") == SuccessMessages.CODE_SENT
        message = receive(engine_socket)
        assert message.address == "/run-code"
        assert message.params == [CLIENT_ID, "play 60"]

    def test_run_code_v4(self, engine_socket: socket.socket) -> None:
        """4.x engines get the integer token with the code."""
        port = engine_socket.getsockname()[1]
        client = SonicPiClient(params=v4_params(port))
        assert client.run_code("sample :bd_haus") == SuccessMessages.CODE_SENT
        message = receive(engine_socket)
        assert message.params == [-2005799440, "sample :bd_haus"]

    def test_stop(self, engine_socket: socket.socket) -> None:
        """stop sends /stop-all-jobs with the identity only."""
        port = engine_socket.getsockname()[1]
        client = SonicPiClient(params=v4_params(port))
        assert client.stop() == SuccessMessages.STOPPED
        message = receive(engine_socket)
        assert message.address == "/stop-all-jobs"
        assert message.params == [-2005799440]

    def test_lazy_initialization(self, engine_socket: socket.socket) -> None:
        """Commands initialize the client on first use."""
        port = engine_socket.getsockname()[1]
        client = SonicPiClient(params=v3_params(port))
        assert not client.is_initialized
        client.run_code("play 60")
        assert client.is_initialized

    def test_commands_without_engine(self, log_dir: Path) -> None:
        """Commands report the discovery error when Sonic Pi is not running."""
        client = SonicPiClient(log_dir=log_dir)
        assert client.run_code("play 60") == ErrorMessages.LOGS_NOT_FOUND
        assert client.stop() == ErrorMessages.LOGS_NOT_FOUND

    def test_commands_when_connect_opens_nothing(self, log_dir: Path) -> None:
        """A connect that leaves no OSC client is reported, not sent."""

        class NoSocketClient(SonicPiClient):
            def initialize(self) -> str:
                return "Connected to nothing"

        client = NoSocketClient(log_dir=log_dir)
        assert client.run_code("play 60") == ErrorMessages.NOT_CONNECTED
        assert client.stop() == ErrorMessages.NOT_CONNECTED
        assert not client.is_initialized

    def test_close(self, engine_socket: socket.socket) -> None:
        """close drops the connection until the next command."""
        port = engine_socket.getsockname()[1]
        client = SonicPiClient(params=v3_params(port))
        client.initialize()
        client.close()
        assert not client.is_initialized
        assert client.params is not None
        assert client.params.port == port
