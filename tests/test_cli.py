"""CLI integration tests for multi.

Tests the CLI using Click's CliRunner. The CLI is defined in multi.cli
with the main group command.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest import mock

import pytest
import yaml
from click.testing import CliRunner

from multi.cli import main


@pytest.fixture
def runner():
    """Create a CliRunner instance."""
    return CliRunner()


@pytest.fixture
def reset_bootstrap(v):
    """Initialize multi outside the CliRunner context.

    The command's init_multi() call then reuses the existing singleton.
    """
    yield


def _local_session(calls):
    def _open(host, command, settings=None, capture=True):
        calls.append((host, command, settings))
        return subprocess.Popen(
            ["sh", "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE if capture else subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )

    return _open


class TestVersionAndHelp:

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "multi, version 1.0.0" in result.output

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "exec" in result.output
        assert "ssh" in result.output
        assert "%t" in result.output

    def test_ssh_help(self, runner):
        result = runner.invoke(main, ["ssh", "--help"])
        assert result.exit_code == 0
        assert "--no-prefix" in result.output
        assert "--identity" in result.output
        assert "--count" in result.output


@pytest.mark.usefixtures("reset_bootstrap")
class TestExecCommand:

    def test_requires_command(self, runner):
        result = runner.invoke(main, ["exec"])
        assert result.exit_code == 1
        assert "must supply a command to run" in result.output

    def test_count(self, runner):
        result = runner.invoke(main, ["exec", "-c", "3", "--", "echo", "job", "%t"])
        assert result.exit_code == 0, result.output
        lines = [line for line in result.output.splitlines() if line.startswith("job")]
        assert sorted(lines) == ["job 0", "job 1", "job 2"]

    def test_input_items(self, runner):
        result = runner.invoke(main, ["exec", "-i", "--", "echo", "%i"], input="a\nb\n")
        assert result.exit_code == 0, result.output
        assert sorted(result.output.splitlines()) == ["a", "b"]

    def test_count_larger_than_input(self, runner):
        result = runner.invoke(main, ["exec", "-i", "-c", "3", "--", "echo", "<%i>"], input="a\n")
        assert result.exit_code == 0, result.output
        assert sorted(result.output.splitlines()) == ["<>", "<>", "<a>"]

    def test_alias(self, runner):
        result = runner.invoke(main, ["e", "--", "echo", "hi"])
        assert result.exit_code == 0
        assert "hi" in result.output

    def test_failures_reported(self, runner):
        result = runner.invoke(main, ["exec", "-c", "2", "-q", "--", "sh", "-c", "exit 2"])
        assert result.exit_code == 1
        assert result.output.count("while running sh -c 'exit 2': exit status 2") == 2
        assert "some commands had errors" in result.output

    def test_quiet(self, runner):
        result = runner.invoke(main, ["exec", "-q", "--", "echo", "hidden"])
        assert result.exit_code == 0
        assert "hidden" not in result.output

    def test_dry_run(self, runner):
        with mock.patch("multi.executors.local.start_process") as mock_start:
            result = runner.invoke(main, ["exec", "-c", "2", "--dry-run", "--", "echo", "%t"])
        assert result.exit_code == 0
        mock_start.assert_not_called()
        assert "[dry-run] job 0: echo 0" in result.output
        assert "[dry-run] job 1: echo 1" in result.output

    def test_command_options_not_parsed(self, runner):
        """Options after the command belong to the command."""
        result = runner.invoke(main, ["exec", "--", "echo", "-q"])
        assert result.exit_code == 0
        assert "-q" in result.output

    def test_does_not_load_config(self, runner):
        """A broken user config never stops a local run."""
        with mock.patch("multi.config.MultiConfig", side_effect=AssertionError("config loaded")):
            result = runner.invoke(main, ["exec", "--", "echo", "hi"])
        assert result.exit_code == 0, result.output
        assert "hi" in result.output

    def test_config_option_is_ssh_only(self, runner):
        result = runner.invoke(main, ["exec", "--config", "x.yaml", "--", "echo", "hi"])
        assert result.exit_code == 2
        assert "No such option" in result.output


@pytest.mark.usefixtures("reset_bootstrap")
class TestSSHCommand:

    def test_requires_hosts_and_command(self, runner, hosts_file):
        result = runner.invoke(main, ["ssh", "--", str(hosts_file)])
        assert result.exit_code == 1
        assert "must supply a host list file and command to run" in result.output

    def test_missing_hosts_file(self, runner, tmp_path: Path):
        result = runner.invoke(main, ["ssh", "--", str(tmp_path / "nope.txt"), "uptime"])
        assert result.exit_code == 1
        assert "Hosts file not found" in result.output

    def test_empty_hosts_file(self, runner, tmp_path: Path):
        empty = tmp_path / "empty.txt"
        empty.write_text("# nothing here\n")

        result = runner.invoke(main, ["ssh", "--", str(empty), "uptime"])
        assert result.exit_code == 1
        assert "No hosts" in result.output

    def test_unreadable_identity(self, runner, hosts_file, tmp_path: Path):
        result = runner.invoke(main, ["ssh", "-d", str(tmp_path / "missing_key"),
                                      "--", str(hosts_file), "uptime"])
        assert result.exit_code == 1
        assert "unable to read private key" in result.output

    def test_runs_on_every_host(self, runner, hosts_file):
        calls = []
        with mock.patch("multi.executors.remote.open_remote_session",
                        side_effect=_local_session(calls)):
            result = runner.invoke(main, ["ssh", "-u", "ops", "--", str(hosts_file), "echo", "%t"])

        assert result.exit_code == 0, result.output
        assert sorted((h, c) for h, c, _ in calls) == [
            ("10.0.0.1:22", "echo 0"),
            ("10.0.0.2:2222", "echo 1"),
            ("10.0.0.3:22", "echo 2"),
        ]
        assert {s.user for _, _, s in calls} == {"ops"}
        assert "[10.0.0.2:2222] 1" in result.output

    def test_count_per_host(self, runner, hosts_file):
        calls = []
        with mock.patch("multi.executors.remote.open_remote_session",
                        side_effect=_local_session(calls)):
            result = runner.invoke(main, ["ssh", "-c", "2", "-r", "--", str(hosts_file), "echo", "%t"])

        assert result.exit_code == 0, result.output
        assert len(calls) == 6
        by_host = {}
        for host, command, _ in calls:
            by_host.setdefault(host, []).append(command)
        assert sorted(by_host["10.0.0.1:22"]) == ["echo 0", "echo 1"]
        assert sorted(by_host["10.0.0.3:22"]) == ["echo 4", "echo 5"]
        assert "[10.0.0." not in result.output

    def test_remote_failure_reported(self, runner, hosts_file):
        with mock.patch("multi.executors.remote.open_remote_session",
                        side_effect=_local_session([])):
            result = runner.invoke(main, ["ssh", "-q", "--", str(hosts_file), "exit", "%t"])

        assert result.exit_code == 1
        assert "executing exit 1 on 10.0.0.2:2222: exit status 1" in result.output
        assert "executing exit 2 on 10.0.0.3:22: exit status 2" in result.output
        assert "some commands had errors" in result.output

    def test_too_much_input(self, runner, hosts_file):
        result = runner.invoke(main, ["ssh", "-i", "--", str(hosts_file), "echo", "%i"],
                               input="a\nb\nc\nd\n")
        assert result.exit_code == 1
        assert "only 3 remote jobs" in result.output

    def test_config_supplies_defaults(self, runner, hosts_file, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump({"ssh": {"user": "fromconfig", "timeout": 7, "no_prefix": True}}, f)

        calls = []
        with mock.patch("multi.executors.remote.open_remote_session",
                        side_effect=_local_session(calls)):
            result = runner.invoke(main, ["ssh", "--config", str(config_file),
                                          "--", str(hosts_file), "echo", "hi"])

        assert result.exit_code == 0, result.output
        settings = {s for _, _, s in calls}
        assert len(settings) == 1
        (only,) = settings
        assert only.user == "fromconfig"
        assert only.connect_timeout == 7
        assert "[10.0.0." not in result.output

    def test_dry_run(self, runner, hosts_file):
        with mock.patch("multi.executors.remote.open_remote_session") as mock_open:
            result = runner.invoke(main, ["s", "--dry-run", "--", str(hosts_file), "uptime"])

        assert result.exit_code == 0
        mock_open.assert_not_called()
        assert "[dry-run] job 0 on 10.0.0.1:22: uptime" in result.output
