"""
Tests for Sonic Pi log discovery.
"""

from pathlib import Path

import pytest

from chuk_mcp_sonic_pi.engine import (
    get_sonic_pi_log_dir,
    log_directory_exists,
    parse_sonic_pi_log,
    parse_v3_log,
    parse_v4_log,
)
from chuk_mcp_sonic_pi.engine.log_parser import LOG_DIR_ENV, V3_LOG_FILE, V4_LOG_FILE

V3_LOG = """\
Sonic Pi server booting...
This is version 3.2.0 running on Ruby 3.2.3.
Listen port: 51235
OSC cues port: 4560
"""

V4_LOG = """\
Welcome to Sonic Pi version 4.0.0
Ports: {:server_port=>30129, :gui_port=>30130, :scsynth_port=>30131}
Token: -2005799440
"""


def write_log(log_dir: Path, name: str, text: str) -> None:
    (log_dir / name).write_text(text)


class TestLogDirectory:
    """Tests for log directory resolution."""

    def test_explicit_directory(self, log_dir: Path) -> None:
        """An explicit directory wins."""
        assert get_sonic_pi_log_dir(log_dir) == log_dir
        assert get_sonic_pi_log_dir(str(log_dir)) == log_dir

    def test_environment_override(self, log_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """$SONIC_PI_LOG_DIR is used when no directory is given."""
        monkeypatch.setenv(LOG_DIR_ENV, str(log_dir))
        assert get_sonic_pi_log_dir() == log_dir

    def test_home_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without overrides the directory is under the home folder."""
        monkeypatch.delenv(LOG_DIR_ENV, raising=False)
        assert get_sonic_pi_log_dir() == Path.home() / ".sonic-pi" / "log"

    def test_exists(self, log_dir: Path) -> None:
        """Existence is checked on the resolved directory."""
        assert log_directory_exists(log_dir)
        assert not log_directory_exists(log_dir / "missing")


class TestV3Log:
    """Tests for 3.x server-output.log."""

    def test_parse(self, log_dir: Path) -> None:
        """Listen port, cues port and version are read."""
        write_log(log_dir, V3_LOG_FILE, V3_LOG)
        params = parse_v3_log(log_dir)
        assert params is not None
        assert params.port == 51235
        assert params.osc_cues_port == 4560
        assert params.version == "3.2.0"
        assert params.major_version == 3
        assert params.token is None
        assert not params.uses_token

    def test_default_cues_port(self, log_dir: Path) -> None:
        """A missing cues port defaults to 4560."""
        write_log(log_dir, V3_LOG_FILE, "Listen port: 4557\n")
        params = parse_v3_log(log_dir)
        assert params is not None
        assert params.osc_cues_port == 4560
        assert params.version == "unknown"

    def test_no_listen_port(self, log_dir: Path) -> None:
        """Without a listen port there is nothing to connect to."""
        write_log(log_dir, V3_LOG_FILE, "OSC cues port: 4560\n")
        assert parse_v3_log(log_dir) is None

    def test_missing_file(self, log_dir: Path) -> None:
        """A missing log gives None."""
        assert parse_v3_log(log_dir) is None


class TestV4Log:
    """Tests for 4.x spider.log."""

    def test_parse(self, log_dir: Path) -> None:
        """Server port, token and version are read."""
        write_log(log_dir, V4_LOG_FILE, V4_LOG)
        params = parse_v4_log(log_dir)
        assert params is not None
        assert params.port == 30129
        assert params.token == -2005799440
        assert params.version == "4.0.0"
        assert params.major_version == 4
        assert params.uses_token

    def test_requires_token(self, log_dir: Path) -> None:
        """A port without a token is not enough."""
        write_log(log_dir, V4_LOG_FILE, "Ports: {:server_port=>30129}\n")
        assert parse_v4_log(log_dir) is None

    def test_latest_boot_wins(self, log_dir: Path) -> None:
        """When the log holds several boots the last values are used."""
        write_log(log_dir, V4_LOG_FILE, V4_LOG + "Ports: {:server_port=>40000}\nToken: 12\n")
        params = parse_v4_log(log_dir)
        assert params is not None
        assert (params.port, params.token) == (40000, 12)


class TestDiscovery:
    """Tests for choosing between log versions."""

    def test_prefers_v4(self, log_dir: Path) -> None:
        """The 4.x log is preferred when both exist."""
        write_log(log_dir, V3_LOG_FILE, V3_LOG)
        write_log(log_dir, V4_LOG_FILE, V4_LOG)
        params = parse_sonic_pi_log(log_dir)
        assert params is not None
        assert params.major_version == 4

    def test_falls_back_to_v3(self, log_dir: Path) -> None:
        """An incomplete 4.x log falls back to 3.x."""
        write_log(log_dir, V3_LOG_FILE, V3_LOG)
        write_log(log_dir, V4_LOG_FILE, "booting\n")
        params = parse_sonic_pi_log(log_dir)
        assert params is not None
        assert params.port == 51235

    def test_no_logs(self, log_dir: Path) -> None:
        """An empty directory means Sonic Pi is not running."""
        assert parse_sonic_pi_log(log_dir) is None

    def test_missing_directory(self, temp_dir: Path) -> None:
        """A missing directory is not an error."""
        assert parse_sonic_pi_log(temp_dir / "nowhere") is None
