"""Tests for the goreload command."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from goreload.cli.main import _overrides, cli

runner = CliRunner()


@pytest.fixture
def go_module(tmp_path: Path) -> Path:
    root = tmp_path / "svc"
    root.mkdir()
    (root / "go.mod").write_text("module svc\n")
    (root / "main.go").write_text("package main\n")
    return root


@pytest.fixture
def mocks() -> Generator[tuple[AsyncMock, MagicMock], None, None]:
    with (
        patch("goreload.cli.main.run_daemon", new_callable=AsyncMock) as run_daemon,
        patch("goreload.cli.main.configure_logging") as configure_logging,
    ):
        run_daemon.return_value = 2
        yield run_daemon, configure_logging


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for key in list(os.environ):
        if key.upper().startswith("GORELOAD__"):
            monkeypatch.delenv(key)


class TestGoReloadCommand:
    """goreload command tests."""

    def test_help_shows_flags_and_epilog(self) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for flag in ("-r, --run", "-d, --debug", "-e, --exclude"):
            assert flag in result.output
        assert "cd workspace, run goreload" in result.output

    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "goreload" in result.output

    def test_missing_manifest_exits_two(
        self, tmp_path: Path, mocks: tuple[AsyncMock, MagicMock]
    ) -> None:
        run_daemon, _ = mocks

        result = runner.invoke(cli, [str(tmp_path)])

        assert result.exit_code == 2
        assert "go.mod" in result.output
        run_daemon.assert_not_called()

    def test_missing_directory_exits_one(
        self, tmp_path: Path, mocks: tuple[AsyncMock, MagicMock]
    ) -> None:
        result = runner.invoke(cli, [str(tmp_path / "nope")])
        assert result.exit_code == 1

    def test_runs_daemon_and_exits_with_its_code(
        self, go_module: Path, mocks: tuple[AsyncMock, MagicMock]
    ) -> None:
        run_daemon, configure_logging = mocks

        result = runner.invoke(cli, [str(go_module), "-r", "./svc", "-e", ".git vendor"])

        assert result.exit_code == 2
        state = run_daemon.call_args.args[0]
        assert state.root == go_module.resolve()
        assert state.run_command == "./svc"
        assert state.build_command == "go build -o svc *.go"
        assert state.exclusions == {state.root / ".git", state.root / "vendor"}
        assert configure_logging.call_args.kwargs["config"].level == "INFO"

    def test_debug_flag_sets_debug_logging(
        self, go_module: Path, mocks: tuple[AsyncMock, MagicMock]
    ) -> None:
        run_daemon, configure_logging = mocks

        runner.invoke(cli, [str(go_module), "-d"])

        assert run_daemon.call_args.args[0].debug
        assert configure_logging.call_args.kwargs["config"].level == "DEBUG"

    def test_debug_flag_overrides_output_levels(
        self, go_module: Path, mocks: tuple[AsyncMock, MagicMock]
    ) -> None:
        _, configure_logging = mocks
        (go_module / ".goreload.yaml").write_text(
            "logging:\n  outputs:\n    - destination: stderr\n      level: INFO\n"
        )

        runner.invoke(cli, [str(go_module), "-d"])

        config = configure_logging.call_args.kwargs["config"]
        assert [output.level for output in config.outputs] == ["DEBUG"]
        assert config.outputs[0].destination == "stderr"

    def test_output_levels_kept_without_debug(
        self, go_module: Path, mocks: tuple[AsyncMock, MagicMock]
    ) -> None:
        _, configure_logging = mocks
        (go_module / ".goreload.yaml").write_text(
            "logging:\n  outputs:\n    - destination: stderr\n      level: WARNING\n"
        )

        runner.invoke(cli, [str(go_module)])

        config = configure_logging.call_args.kwargs["config"]
        assert [output.level for output in config.outputs] == ["WARNING"]

    def test_uses_working_directory_by_default(
        self, go_module: Path, mocks: tuple[AsyncMock, MagicMock], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        run_daemon, _ = mocks
        monkeypatch.chdir(go_module)

        runner.invoke(cli, [])

        assert run_daemon.call_args.args[0].root == go_module.resolve()

    def test_config_file_values_survive_without_flags(
        self, go_module: Path, mocks: tuple[AsyncMock, MagicMock]
    ) -> None:
        run_daemon, _ = mocks
        (go_module / ".goreload.yaml").write_text(
            "run:\n  command: ./svc -v\nbuild:\n  relaunch_on_failure: true\n"
        )

        runner.invoke(cli, [str(go_module)])

        state = run_daemon.call_args.args[0]
        assert state.run_command == "./svc -v"
        assert state.relaunch_on_failure

    def test_invalid_config_reported(
        self, go_module: Path, mocks: tuple[AsyncMock, MagicMock]
    ) -> None:
        (go_module / ".goreload.yaml").write_text("run:\n  shutdown_grace_sec: -4\n")

        result = runner.invoke(cli, [str(go_module)])

        assert result.exit_code == 1
        assert "CONFIG_INVALID_VALUE" in result.output


class TestOverrides:
    """Only flags actually given become overrides."""

    def test_nothing_given(self) -> None:
        assert _overrides(None, False, None, None, None) == {}

    def test_everything_given(self) -> None:
        assert _overrides("./app", True, "a b", "make", False) == {
            "debug": True,
            "run": {"command": "./app"},
            "watch": {"excludes": "a b"},
            "build": {"command": "make", "relaunch_on_failure": False},
        }
