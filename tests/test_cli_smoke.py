"""Smoke tests for CLI commands.

Tests that CLI commands parse correctly and don't crash. Uses Click's
CliRunner and never opens a real MIDI port.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from twisterfidget.cli.main import cli
from twisterfidget.exceptions import UnknownModeError
from twisterfidget.models import AppConfig, PhotoConfig


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return tmp_path / "config.json"


@pytest.mark.integration
class TestCLIHelp:
    """Test that all commands have working help text."""

    def test_main_help(self, runner):
        """Test main CLI help displays."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Midi Fighter Twister" in result.output
        assert "--mode" in result.output
        assert "--long-press-ms" in result.output

    def test_version_flag(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    @pytest.mark.parametrize("command", ["midi", "config", "modes"])
    def test_subcommand_help(self, runner, command):
        result = runner.invoke(cli, [command, "--help"])
        assert result.exit_code == 0


@pytest.mark.integration
class TestRunCommand:
    """Test the default command with the app mocked out."""

    def test_overrides_reach_the_app(self, runner, config_file, tmp_path):
        with patch("twisterfidget.cli.main.setup_logging", return_value=tmp_path / "log.txt"), \
             patch("twisterfidget.app.FidgetApp") as mock_app:
            result = runner.invoke(
                cli,
                ["--config-file", str(config_file), "--mode", "chase", "--long-press-ms", "800", "--slack-token", "xoxp-9"],
            )

        assert result.exit_code == 0, result.output
        cfg = mock_app.call_args[0][0]
        assert cfg.start_mode == "chase"
        assert cfg.long_press_ms == 800
        assert cfg.photo.token == "xoxp-9"
        mock_app.return_value.run.assert_called_once()
        mock_app.return_value.stop.assert_called_once()

    def test_app_error_exits_with_message(self, runner, config_file, tmp_path):
        with patch("twisterfidget.cli.main.setup_logging", return_value=tmp_path / "log.txt"), \
             patch("twisterfidget.app.FidgetApp") as mock_app:
            mock_app.return_value.run.side_effect = UnknownModeError("nope", ["chase"])
            result = runner.invoke(cli, ["--config-file", str(config_file), "--mode", "nope"])

        assert result.exit_code == 1
        assert "Unknown mode 'nope'" in result.output
        assert "twisterfidget modes" in result.output

    def test_invalid_long_press(self, runner):
        result = runner.invoke(cli, ["--long-press-ms", "0"])
        assert result.exit_code != 0


@pytest.mark.integration
class TestModesCommand:
    """Test the mode listing."""

    def test_lists_modes_with_knobs(self, runner):
        result = runner.invoke(cli, ["modes"])
        assert result.exit_code == 0
        assert "[ 0] simon" in result.output
        assert "[15] normal_linking" in result.output
        assert "mode_select" in result.output
        assert "disabled" in result.output


@pytest.mark.integration
class TestConfigCommands:
    """Test config path/show/validate/reset against a temp file."""

    def test_path(self, runner, config_file):
        result = runner.invoke(cli, ["config", "path", "--path", str(config_file)])
        assert result.exit_code == 0
        assert str(config_file) in result.output

    def test_show_masks_token(self, runner, config_file):
        AppConfig(photo=PhotoConfig(token="xoxp-secret")).save(config_file)

        result = runner.invoke(cli, ["config", "show", "--path", str(config_file)])
        assert result.exit_code == 0
        assert "xoxp-secret" not in result.output
        assert json.loads(result.output)["photo"]["token"] == "****"

    def test_show_broken_file(self, runner, config_file):
        config_file.write_text("{")
        result = runner.invoke(cli, ["config", "show", "--path", str(config_file)])
        assert result.exit_code == 1
        assert "ERROR" in result.output

    def test_validate(self, runner, config_file):
        AppConfig().save(config_file)
        result = runner.invoke(cli, ["config", "validate", "--path", str(config_file)])
        assert result.exit_code == 0
        assert "[OK]" in result.output

        config_file.write_text(json.dumps({"knob_channel": 99}))
        result = runner.invoke(cli, ["config", "validate", "--path", str(config_file)])
        assert result.exit_code == 1
        assert "[FAIL]" in result.output

    def test_reset(self, runner, config_file):
        AppConfig(start_mode="chase").save(config_file)
        result = runner.invoke(cli, ["config", "reset", "--path", str(config_file), "--yes"])
        assert result.exit_code == 0
        assert AppConfig.load_or_default(config_file).start_mode == "mode_select"
        assert config_file.with_suffix(".json.bak").exists()


@pytest.mark.integration
class TestMidiCommands:
    """Test MIDI port listing with mido mocked out."""

    def test_list_marks_twister(self, runner):
        ports = {"input": ["Midi Fighter Twister", "IAC Bus 1"], "output": []}
        with patch("twisterfidget.cli.commands.midi.MidiManager.list_ports", return_value=ports):
            result = runner.invoke(cli, ["midi", "list"])

        assert result.exit_code == 0
        assert "Midi Fighter Twister  <- Twister" in result.output
        assert "IAC Bus 1" in result.output
        assert "No MIDI output ports found." in result.output

    def test_monitor_unknown_device(self, runner):
        with patch("twisterfidget.cli.commands.midi.mido.get_input_names", return_value=["IAC Bus 1"]):
            result = runner.invoke(cli, ["midi", "monitor", "--device", "Twister"])

        assert result.exit_code == 1
        assert "No MIDI device matching 'Twister'" in result.output
        assert "Suggestion:" in result.output

    def test_monitor_without_ports(self, runner):
        with patch("twisterfidget.cli.commands.midi.mido.get_input_names", return_value=[]):
            result = runner.invoke(cli, ["midi", "monitor"])

        assert result.exit_code == 0
        assert "No MIDI input ports found." in result.output
