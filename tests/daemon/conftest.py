"""Shared fixtures for daemon tests."""

from __future__ import annotations

import contextlib
import os
import signal
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from goreload.daemon.excludes import ExclusionMatcher
from goreload.daemon.state import DaemonState


@pytest.fixture
def go_root(tmp_path: Path) -> Path:
    """A minimal Go module: go.mod, main.go and a .git directory."""
    root = tmp_path / "app"
    root.mkdir()
    (root / "go.mod").write_text("module app\n\ngo 1.22\n")
    (root / "main.go").write_text("package main\n\nfunc main() {}\n")
    (root / ".git").mkdir()
    return root


@pytest.fixture
def make_state(go_root: Path) -> Generator[Callable[..., DaemonState], None, None]:
    """Build DaemonState instances; any child left running is killed afterwards."""
    states: list[DaemonState] = []

    def _make(**overrides: Any) -> DaemonState:
        values: dict[str, Any] = {
            "root": go_root,
            "name": go_root.name,
            "matcher": ExclusionMatcher([go_root / ".git"]),
            "build_command": "echo built",
            "source_suffix": ".go",
        }
        values.update(overrides)
        state = DaemonState(**values)
        states.append(state)
        return state

    yield _make

    for state in states:
        pid = state.child_pid
        if pid is not None and _is_our_child(pid):
            with contextlib.suppress(OSError):
                os.killpg(pid, signal.SIGKILL)


def _is_our_child(pid: int) -> bool:
    """Guard against signalling the made-up pids some tests use."""
    try:
        stat = Path(f"/proc/{pid}/stat").read_text()
    except OSError:
        return False
    return int(stat.rsplit(")", 1)[1].split()[1]) == os.getpid()
