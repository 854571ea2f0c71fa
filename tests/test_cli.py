"""Tests for pie CLI."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from pie import __version__
from pie.cli import cli
from pie.constants import INIT_TEMPLATE
from pie.errors import ContainerError, DockerNotRunningError
from pie.lifecycle import RunResult
from pie.registry import ContainerRow
from pie.run_config import RunOptions


def _ok(name: str = "pie-abc123") -> RunResult:
    return RunResult(name=name, returncode=0)


class TestInit:
    """Tests for pie init."""

    def test_creates_template(self, project_dir: Path) -> None:
        result = CliRunner().invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "Initializing Pie project..." in result.output
        assert "Created pie.yml" in result.output
        assert (project_dir / "pie.yml").read_text() == INIT_TEMPLATE

    def test_refuses_to_overwrite(self, project_dir: Path) -> None:
        (project_dir / "pie.yml").write_text("main: mine.py\n")
        result = CliRunner().invoke(cli, ["init"])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert (project_dir / "pie.yml").read_text() == "main: mine.py\n"

    def test_force_overwrites(self, project_dir: Path) -> None:
        (project_dir / "pie.yml").write_text("main: mine.py\n")
        result = CliRunner().invoke(cli, ["init", "--force"])
        assert result.exit_code == 0
        assert (project_dir / "pie.yml").read_text() == INIT_TEMPLATE

    def test_custom_file(self, project_dir: Path) -> None:
        result = CliRunner().invoke(cli, ["init", "-f", "other.yml"])
        assert result.exit_code == 0
        assert (project_dir / "other.yml").exists()
        assert not (project_dir / "pie.yml").exists()


class TestList:
    """Tests for pie list."""

    def test_table(self) -> None:
        rows = [
            ContainerRow(name="abc123", short_id="0123456789", status="Up 2 minutes"),
            ContainerRow(name="zz9x0q", short_id="aaaaaaaaaa", status="Exited (0)"),
        ]
        with patch("pie.registry.list_containers", return_value=rows):
            result = CliRunner().invoke(cli, ["list"])
        assert result.exit_code == 0
        for text in ("NAME", "ID", "STATUS", "abc123", "0123456789", "zz9x0q"):
            assert text in result.output

    def test_empty(self) -> None:
        with patch("pie.registry.list_containers", return_value=[]):
            result = CliRunner().invoke(cli, ["list"])
        assert result.exit_code == 0
        assert "No Pie containers found" in result.output

    def test_docker_failure(self) -> None:
        with patch(
            "pie.registry.list_containers",
            side_effect=ContainerError("Error listing Docker containers: daemon down"),
        ):
            result = CliRunner().invoke(cli, ["list"])
        assert result.exit_code == 1
        assert "Error listing Docker containers" in result.output


class TestRunById:
    """Tests for pie run <ID>."""

    def test_wrong_length(self) -> None:
        with (
            patch("pie.lifecycle.subprocess.Popen") as mock_popen,
            patch("pie.lifecycle.stop_container") as mock_stop,
        ):
            result = CliRunner().invoke(cli, ["run", "abc"])
        assert result.exit_code == 1
        assert "exactly 6" in result.output
        mock_popen.assert_not_called()
        mock_stop.assert_not_called()

    def test_reattaches(self) -> None:
        with patch("pie.lifecycle.reattach", return_value=_ok()) as mock_reattach:
            result = CliRunner().invoke(cli, ["run", "abc123"])
        assert result.exit_code == 0
        mock_reattach.assert_called_once_with("abc123")

    def test_container_failure_exit_code(self) -> None:
        with patch(
            "pie.lifecycle.reattach",
            side_effect=ContainerError("Error running Docker container pie-abc123", 7),
        ):
            result = CliRunner().invoke(cli, ["run", "abc123"])
        assert result.exit_code == 7


class TestDefaultCommand:
    """Tests for routing `pie [FILE] [flags]` to the run workflow."""

    def test_positional_and_flags(self) -> None:
        with patch("pie.cli.run.run", return_value=_ok()) as mock_run:
            result = CliRunner().invoke(cli, ["script.py", "-p", "3.11", "-d", "{pandas,numpy}"])
        assert result.exit_code == 0
        options = mock_run.call_args[0][0]
        assert options == RunOptions(
            entry="script.py", python_version="3.11", dependencies="{pandas,numpy}"
        )

    def test_no_arguments(self) -> None:
        with patch("pie.cli.run.run", return_value=_ok()) as mock_run:
            result = CliRunner().invoke(cli, [])
        assert result.exit_code == 0
        assert mock_run.call_args[0][0] == RunOptions()

    def test_flags_only(self) -> None:
        with patch("pie.cli.run.run", return_value=_ok()) as mock_run:
            CliRunner().invoke(cli, ["--deps-file", "reqs.txt", "--dispose", "--name", "job"])
        options = mock_run.call_args[0][0]
        assert options.deps_file == "reqs.txt"
        assert options.dispose is True
        assert options.name == "job"

    def test_custom_config_file(self) -> None:
        with patch("pie.cli.run.run", return_value=_ok()) as mock_run:
            CliRunner().invoke(cli, [".", "-f", "ci.yml"])
        options = mock_run.call_args[0][0]
        assert options.entry == "."
        assert options.config_file == "ci.yml"

    def test_subcommand_not_treated_as_file(self) -> None:
        with (
            patch("pie.cli.run.run") as mock_run,
            patch("pie.registry.list_containers", return_value=[]),
        ):
            CliRunner().invoke(cli, ["list"])
        mock_run.assert_not_called()

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("init", "list", "run", "clean"):
            assert command in result.output

    def test_kept_message(self) -> None:
        with patch("pie.cli.run.run", return_value=_ok("pie-keepme")):
            result = CliRunner().invoke(cli, ["main.py"])
        assert "pie-keepme kept" in result.output

    def test_no_kept_message_when_disposed(self) -> None:
        with patch("pie.cli.run.run", return_value=_ok()):
            result = CliRunner().invoke(cli, ["main.py", "--dispose"])
        assert "kept" not in result.output

    def test_interrupted_run_exits_zero(self) -> None:
        interrupted = RunResult(name="pie-abc123", returncode=None, interrupted=True, signal=15)
        with patch("pie.cli.run.run", return_value=interrupted):
            result = CliRunner().invoke(cli, ["main.py"])
        assert result.exit_code == 0
        assert "kept" not in result.output

    def test_docker_not_running(self) -> None:
        with patch("pie.cli.run.run", side_effect=DockerNotRunningError("Docker is not running.")):
            result = CliRunner().invoke(cli, ["main.py"])
        assert result.exit_code == 1
        assert "Error: Docker is not running." in result.output

    def test_container_exit_code_propagates(self) -> None:
        with patch("pie.cli.run.run", side_effect=ContainerError("exit status 2", 2)):
            result = CliRunner().invoke(cli, ["main.py"])
        assert result.exit_code == 2

    def test_malformed_config_file(self, project_dir: Path) -> None:
        (project_dir / "pie.yml").write_text("main: [unclosed\n")
        with patch("pie.cli.run.check_docker") as mock_check:
            result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        assert "pie.yml" in result.output
        mock_check.assert_not_called()
        assert not (project_dir / ".pie").exists()

    def test_debug_flag(self) -> None:
        with (
            patch("pie.cli.run.run", return_value=_ok()),
            patch("pie.cli.set_debug") as mock_debug,
        ):
            CliRunner().invoke(cli, ["--debug"])
        mock_debug.assert_called_once_with(True)


class TestClean:
    """Tests for pie clean."""

    def test_force(self) -> None:
        with patch("pie.registry.remove_containers", return_value=2) as mock_remove:
            result = CliRunner().invoke(cli, ["clean", "--force"])
        assert result.exit_code == 0
        assert "Removed 2 container(s)" in result.output
        mock_remove.assert_called_once()

    def test_confirmation_declined(self) -> None:
        with patch("pie.registry.remove_containers") as mock_remove:
            result = CliRunner().invoke(cli, ["clean"], input="n\n")
        assert result.exit_code == 0
        mock_remove.assert_not_called()

    def test_confirmation_accepted(self) -> None:
        with patch("pie.registry.remove_containers", return_value=0) as mock_remove:
            result = CliRunner().invoke(cli, ["clean"], input="y\n")
        assert result.exit_code == 0
        mock_remove.assert_called_once()
