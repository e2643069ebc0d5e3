"""
Tests for MCP tools.

Tests the MCP tool implementations for playback, beat patterns and
previews.
"""

import json
import socket
from collections.abc import Iterator
from pathlib import Path

import pythonosc.osc_message
import pytest

from chuk_mcp_sonic_pi.constants import CLIENT_ID, ErrorMessages
from chuk_mcp_sonic_pi.engine import SonicPiClient
from chuk_mcp_sonic_pi.models.connection import ConnectionParams
from chuk_mcp_sonic_pi.patterns import LIBRARY_PATH, BeatPatternRegistry
from chuk_mcp_sonic_pi.tools import (
    register_pattern_tools,
    register_playback_tools,
    register_preview_tools,
)

BEAT = "use_bpm 120\nlive_loop :beat do\n  sample :bd_haus\n  sleep 1\nend\n"


# Mock MCP server for testing tools
class MockMCPServer:
    """Mock MCP server that just stores registered tools."""

    def __init__(self, name: str):
        self.name = name
        self.tools: dict = {}

    def tool(self, func):
        """Decorator to register a tool."""
        self.tools[func.__name__] = func
        return func


@pytest.fixture
def engine_socket() -> Iterator[socket.socket]:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


class TestPlaybackTools:
    """Tests for playback tools."""

    @pytest.mark.asyncio
    async def test_registers_tools(self, log_dir: Path) -> None:
        """All playback tools are registered with the server."""
        mcp = MockMCPServer("test")
        tools = register_playback_tools(mcp, SonicPiClient(log_dir=log_dir))
        assert set(tools) == {"initialize_sonic_pi", "play_music", "stop_music"}
        assert set(mcp.tools) == set(tools)

    @pytest.mark.asyncio
    async def test_initialize_without_engine(self, log_dir: Path) -> None:
        """Initialization fails cleanly when Sonic Pi is not running."""
        tools = register_playback_tools(MockMCPServer("test"), SonicPiClient(log_dir=log_dir))
        data = json.loads(await tools["initialize_sonic_pi"]())
        assert data["status"] == "error"
        assert data["message"] == ErrorMessages.LOGS_NOT_FOUND
        assert "connection" not in data

    @pytest.mark.asyncio
    async def test_initialize_hides_token(self, engine_socket: socket.socket) -> None:
        """The connection summary never includes the auth token."""
        port = engine_socket.getsockname()[1]
        params = ConnectionParams(port=port, token=99, version="4.0.0", major_version=4)
        tools = register_playback_tools(MockMCPServer("test"), SonicPiClient(params=params))
        data = json.loads(await tools["initialize_sonic_pi"]())
        assert data["status"] == "success"
        assert data["connection"]["port"] == port
        assert data["connection"]["major_version"] == 4
        assert "token" not in data["connection"]

    @pytest.mark.asyncio
    async def test_play_music(self, engine_socket: socket.socket) -> None:
        """play_music relays the code over OSC."""
        port = engine_socket.getsockname()[1]
        params = ConnectionParams(port=port, version="3.2.0", major_version=3)
        tools = register_playback_tools(MockMCPServer("test"), SonicPiClient(params=params))
        data = json.loads(await tools["play_music"](code=BEAT))
        assert data["status"] == "success"
        data_packet, _ = engine_socket.recvfrom(65536)
        message = pythonosc.osc_message.OscMessage(data_packet)
        assert message.address == "/run-code"
        assert message.params == [CLIENT_ID, BEAT]

    @pytest.mark.asyncio
    async def test_play_empty_code(self, log_dir: Path) -> None:
        """Blank code is rejected before contacting the engine."""
        tools = register_playback_tools(MockMCPServer("test"), SonicPiClient(log_dir=log_dir))
        data = json.loads(await tools["play_music"](code="   "))
        assert data["status"] == "error"
        assert data["message"] == "No code provided"

    @pytest.mark.asyncio
    async def test_stop_music(self, engine_socket: socket.socket) -> None:
        """stop_music sends /stop-all-jobs."""
        port = engine_socket.getsockname()[1]
        params = ConnectionParams(port=port, version="3.2.0", major_version=3)
        tools = register_playback_tools(MockMCPServer("test"), SonicPiClient(params=params))
        data = json.loads(await tools["stop_music"]())
        assert data["status"] == "success"
        data_packet, _ = engine_socket.recvfrom(65536)
        assert pythonosc.osc_message.OscMessage(data_packet).address == "/stop-all-jobs"

    @pytest.mark.asyncio
    async def test_stop_without_engine(self, log_dir: Path) -> None:
        """stop_music reports the discovery error."""
        tools = register_playback_tools(MockMCPServer("test"), SonicPiClient(log_dir=log_dir))
        data = json.loads(await tools["stop_music"]())
        assert data["status"] == "error"


class TestPatternTools:
    """Tests for beat pattern tools."""

    @pytest.fixture
    def tools(self) -> dict:
        registry = BeatPatternRegistry(library_path=LIBRARY_PATH)
        return register_pattern_tools(MockMCPServer("test"), registry)

    @pytest.mark.asyncio
    async def test_list_beat_patterns(self, tools: dict) -> None:
        """All library patterns are listed."""
        data = json.loads(await tools["list_beat_patterns"]())
        assert data["status"] == "success"
        assert data["count"] == 4
        names = [p["name"] for p in data["patterns"]]
        assert names == ["blues", "electronic", "hiphop", "rock"]

    @pytest.mark.asyncio
    async def test_list_by_tag(self, tools: dict) -> None:
        """Patterns can be filtered by tag."""
        data = json.loads(await tools["list_beat_patterns"](tag="house"))
        assert [p["name"] for p in data["patterns"]] == ["electronic"]

    @pytest.mark.asyncio
    async def test_get_beat_pattern(self, tools: dict) -> None:
        """A pattern's code is returned."""
        data = json.loads(await tools["get_beat_pattern"](style="Rock"))
        assert data["status"] == "success"
        assert data["name"] == "rock"
        assert data["tempo"] == 120
        assert "use_bpm 120" in data["code"]

    @pytest.mark.asyncio
    async def test_get_unknown_pattern(self, tools: dict) -> None:
        """Unknown styles list what is available."""
        data = json.loads(await tools["get_beat_pattern"](style="polka"))
        assert data["status"] == "error"
        assert data["message"] == "Beat pattern 'polka' not found."
        assert "blues" in data["available"]

    @pytest.mark.asyncio
    async def test_registers_tools(self, tools: dict) -> None:
        """All beat pattern tools are registered."""
        assert set(tools) == {
            "list_beat_patterns",
            "get_beat_pattern",
            "copy_beat_pattern_to_project",
        }

    @pytest.mark.asyncio
    async def test_copy_beat_pattern_to_project(self, temp_dir: Path) -> None:
        """A copied pattern is written to the project and shadows the library."""
        project = temp_dir / "patterns"
        registry = BeatPatternRegistry(library_path=LIBRARY_PATH, project_path=project)
        tools = register_pattern_tools(MockMCPServer("test"), registry)
        data = json.loads(await tools["copy_beat_pattern_to_project"](style="Rock"))
        assert data["status"] == "success"
        assert data["name"] == "rock"
        assert Path(data["path"]) == project / "rock.yaml"
        assert Path(data["path"]).exists()

        meta = registry.get_pattern_metadata("rock")
        assert meta is not None
        assert meta.path == data["path"]

    @pytest.mark.asyncio
    async def test_copy_unknown_pattern(self, temp_dir: Path) -> None:
        """Unknown styles are not copied."""
        registry = BeatPatternRegistry(library_path=LIBRARY_PATH, project_path=temp_dir)
        tools = register_pattern_tools(MockMCPServer("test"), registry)
        data = json.loads(await tools["copy_beat_pattern_to_project"](style="polka"))
        assert data["status"] == "error"
        assert data["message"] == "Beat pattern 'polka' not found."
        assert "rock" in data["available"]
        assert list(temp_dir.glob("*.yaml")) == []

    @pytest.mark.asyncio
    async def test_copy_without_project(self, tools: dict) -> None:
        """Copying needs a project directory."""
        data = json.loads(await tools["copy_beat_pattern_to_project"](style="rock"))
        assert data["status"] == "error"
        assert data["message"] == "No project path configured"


class TestPreviewTools:
    """Tests for preview tools."""

    @pytest.mark.asyncio
    async def test_preview_music(self, temp_dir: Path) -> None:
        """Previews report a summary and warnings."""
        tools = register_preview_tools(MockMCPServer("test"), temp_dir)
        data = json.loads(await tools["preview_music"](code=BEAT, bars=2))
        assert data["status"] == "success"
        assert data["summary"]["total_events"] == 8
        assert data["summary"]["loops"] == {"beat": 8}
        assert data["summary"]["melodic_range"] is None
        assert data["warnings"] == []
        assert data["message"] == "Compiled 8 events over 2 bars at 120 BPM."
        assert "events" not in data

    @pytest.mark.asyncio
    async def test_preview_with_events(self, temp_dir: Path) -> None:
        """Events are included on request."""
        tools = register_preview_tools(MockMCPServer("test"), temp_dir)
        data = json.loads(
            await tools["preview_music"](code=BEAT, bars=1, tempo=60, include_events=True)
        )
        events = data["events"]
        assert len(events) == 4
        assert events[1]["start_second"] == 1.0
        assert events[0]["instrument_id"] == "drum:kick"

    @pytest.mark.asyncio
    async def test_preview_warnings(self, temp_dir: Path) -> None:
        """Unsupported lines are reported."""
        tools = register_preview_tools(MockMCPServer("test"), temp_dir)
        code = 'live_loop :a do\n  puts "hi"\n  play 60\n  sleep 1\nend'
        data = json.loads(await tools["preview_music"](code=code, bars=1))
        assert data["warnings"] == ['Skipped line in a: "puts "hi""']
        assert data["summary"]["warnings"] == 1

    @pytest.mark.asyncio
    async def test_export_preview_midi(self, temp_dir: Path) -> None:
        """Exports are written to the output directory."""
        output_dir = temp_dir / "output"
        tools = register_preview_tools(MockMCPServer("test"), output_dir)
        data = json.loads(await tools["export_preview_midi"](code=BEAT, filename="beat", bars=1))
        assert data["status"] == "success"
        path = Path(data["path"])
        assert path == output_dir / "beat.mid"
        assert path.exists()
        assert path.stat().st_size > 0

    @pytest.mark.asyncio
    async def test_export_sanitizes_filename(self, temp_dir: Path) -> None:
        """Filenames cannot escape the output directory."""
        tools = register_preview_tools(MockMCPServer("test"), temp_dir)
        data = json.loads(
            await tools["export_preview_midi"](code=BEAT, filename="../my beat!", bars=1)
        )
        assert Path(data["path"]).parent == temp_dir
        assert Path(data["path"]).name == "my_beat.mid"
