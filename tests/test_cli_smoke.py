"""Smoke tests for CLI commands.

Uses Click's CliRunner; no MIDI ports are opened.
"""

from pathlib import Path
from unittest.mock import patch

import mido
import pytest
from click.testing import CliRunner

from keycast.cli.commands.midi import describe_event
from keycast.cli.main import cli, resolve_log_path


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def log_args(tmp_path: Path):
    return ["--log-file", str(tmp_path / "keycast.log")]


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "router.yaml"
    path.write_text(
        "out: [csv]\n"
        "in:\n"
        "  pad:\n"
        "    - key: [1, 2]\n"
        "      name: mute\n"
        "      type: toggle\n"
        "    - key: 3\n"
        "      type: fadr\n"
        "pulse:\n"
        "  - name: beat\n"
        "    bpm: 120\n",
        encoding="utf-8",
    )
    return path


@pytest.mark.integration
class TestCLIHelp:

    def test_main_help(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'keycast' in result.output

    def test_version_flag(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert '0.1.0' in result.output

    @pytest.mark.parametrize("command", [["run"], ["check"], ["midi"], ["midi", "monitor"]])
    def test_command_help(self, runner, command):
        result = runner.invoke(cli, command + ['--help'])
        assert result.exit_code == 0


@pytest.mark.integration
class TestCheckCommand:

    def test_valid_config(self, runner, log_args, config_file):
        result = runner.invoke(cli, log_args + ['check', str(config_file)])
        assert result.exit_code == 0, result.output
        assert "pad[1,2] mute: toggle" in result.output
        assert "unknown type 'fadr'" in result.output
        assert "pulse beat: every 500.0 ms" in result.output
        assert "OK" in result.output

    def test_strict_rejects_unknown_types(self, runner, log_args, config_file):
        result = runner.invoke(cli, log_args + ['check', '--strict', str(config_file)])
        assert result.exit_code == 1

    def test_script_compile_error(self, runner, log_args, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("in:\n  pad:\n    - key: 1\n      shape: 'value +'\n", encoding="utf-8")
        result = runner.invoke(cli, log_args + ['check', str(path)])
        assert result.exit_code == 1
        assert "pad_1" in result.output

    def test_invalid_yaml(self, runner, log_args, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("in: [unclosed\n", encoding="utf-8")
        result = runner.invoke(cli, log_args + ['check', str(path)])
        assert result.exit_code == 1
        assert "ERROR" in result.output


@pytest.mark.integration
class TestMidiCommands:

    def test_list(self, runner, log_args):
        ports = {"input": ["nanoKONTROL2"], "output": []}
        with patch("keycast.cli.commands.midi.list_ports", return_value=ports):
            result = runner.invoke(cli, log_args + ['midi', 'list'])
        assert result.exit_code == 0
        assert "[0] nanoKONTROL2" in result.output
        assert "No MIDI output ports found." in result.output

    def test_monitor_unknown_device(self, runner, log_args):
        ports = {"input": ["nanoKONTROL2"], "output": []}
        with patch("keycast.cli.commands.midi.list_ports", return_value=ports):
            result = runner.invoke(cli, log_args + ['midi', 'monitor', '--device', 'Launchpad'])
        assert result.exit_code == 1
        assert "Launchpad" in result.output


@pytest.mark.integration
class TestRunCommand:

    def test_run_reports_load_errors(self, runner, log_args, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("pulse:\n  - name: beat\n", encoding="utf-8")
        result = runner.invoke(cli, log_args + ['run', str(path)])
        assert result.exit_code == 1
        assert "ERROR" in result.output

    def test_run_starts_and_stops(self, runner, log_args, config_file):
        with patch("keycast.cli.commands.run.Orchestrator") as orchestrator_class:
            orchestrator = orchestrator_class.from_file.return_value
            result = runner.invoke(cli, log_args + ['run', str(config_file)])

        assert result.exit_code == 0, result.output
        orchestrator.initialize.assert_called_once()
        orchestrator.run.assert_called_once()
        orchestrator.shutdown.assert_called_once()
        orchestrator.save.assert_not_called()


@pytest.mark.unit
class TestDescribeEvent:

    def test_events(self):
        assert describe_event(mido.Message("note_on", note=36, velocity=90)) == "  -> key 36 value 90"
        assert describe_event(mido.Message("note_off", note=36, velocity=40)) == "  -> key 36 value 0"
        assert describe_event(mido.Message("control_change", control=7, value=3)) == "  -> key 7 value 3"

    def test_non_events(self):
        assert describe_event(mido.Message("clock")) == ""


@pytest.mark.unit
class TestLogPath:

    def test_explicit_file_wins(self, tmp_path: Path):
        assert resolve_log_path(True, tmp_path / "x.log") == tmp_path / "x.log"

    def test_debug_logs_to_cwd(self):
        assert resolve_log_path(True, None) == Path.cwd() / "keycast-debug.log"
