"""Single-flight rebuild pipeline.

One cycle per relevant write:
1. Send SIGTERM to the process group of the supervised child, if any
2. Run the build command through the shell, capturing combined output
3. If a run command is configured, launch it in a new process group from
   a background supervisor task

The completion slot is released exactly once per cycle: immediately for
non-source writes, skipped relaunches and runs without a run command; from
the supervisor once the child has started or failed to start. The
supervisor keeps awaiting the child after that and compare-and-clears
child_pid when it exits.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import structlog

from goreload.core.console import print_build_output
from goreload.core.logging import clear_cycle_id, set_cycle_id
from goreload.daemon.state import DaemonState

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of one build command invocation."""

    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def signal_group(pid: int, sig: int = signal.SIGTERM) -> None:
    """Signal the process group led by pid."""
    os.killpg(pid, sig)


class RebuildPipeline:
    """Owns the terminate, build, relaunch cycle and the supervised child."""

    def __init__(
        self,
        state: DaemonState,
        *,
        kill_group: Callable[[int, int], None] = signal_group,
        report: Callable[[BuildResult], None] = print_build_output,
    ) -> None:
        self._state = state
        self._kill_group = kill_group
        self._report = report
        self._supervisors: set[asyncio.Task[None]] = set()
        self.builds = 0

    def is_source(self, path: Path) -> bool:
        return str(path).endswith(self._state.source_suffix)

    async def handle_write(self, path: Path) -> None:
        """Run one rebuild cycle for a write to path.

        Returns once the cycle no longer needs the caller; the caller waits
        on the completion slot for the hand-off point.
        """
        state = self._state
        set_cycle_id()
        logger.debug("handleWrite event start", path=str(path), child_pid=state.child_pid)
        # Set once the supervisor owns the release; otherwise it happens here
        handed_off = False
        try:
            if not self.is_source(path):
                logger.debug("not_a_source_file", path=str(path))
                return

            self.terminate_child()

            logger.debug("start compile", command=state.build_command)
            result = await self.build()
            self._report(result)

            if state.run_command is None:
                return
            if not result.ok and not state.relaunch_on_failure:
                logger.info("relaunch_skipped", reason="build_failed", returncode=result.returncode)
                return

            task = asyncio.create_task(
                self._supervise(state.run_command), name="goreload-supervisor"
            )
            self._supervisors.add(task)
            task.add_done_callback(self._supervisors.discard)
            handed_off = True
        finally:
            if not handed_off:
                state.release()
            logger.debug("handleWrite event done")
            clear_cycle_id()

    def terminate_child(self) -> None:
        """SIGTERM the supervised child's process group, if there is one."""
        pid = self._state.child_pid
        if pid is None:
            return
        try:
            self._kill_group(pid, signal.SIGTERM)
        except OSError as e:
            # Already exited; its supervisor clears the pid
            logger.warning("kill_failed", pid=pid, error=str(e))
        else:
            logger.info("kill pid", pid=pid)

    async def build(self) -> BuildResult:
        """Run the build command through the shell and capture its output."""
        self.builds += 1
        try:
            proc = await asyncio.create_subprocess_shell(
                self._state.build_command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=self._state.root,
            )
            stdout_bytes, _ = await proc.communicate()
        except OSError as e:
            logger.error("build_start_failed", error=str(e))
            return BuildResult(returncode=-1, output=f"{e}\n")

        result = BuildResult(
            returncode=proc.returncode if proc.returncode is not None else -1,
            output=stdout_bytes.decode(errors="replace"),
        )
        if not result.ok:
            logger.info("build error", returncode=result.returncode)
        return result

    async def _supervise(self, command: str) -> None:
        state = self._state
        logger.debug("start run program", command=command)
        try:
            # process_group=0 puts the child in its own group so a SIGTERM to
            # the group also reaches anything the command spawns
            proc = await asyncio.create_subprocess_shell(
                command,
                cwd=state.root,
                process_group=0,
            )
        except OSError as e:
            logger.error("run_start_failed", command=command, error=str(e))
            state.release()
            return

        state.set_child(proc.pid)
        logger.debug("run cmd pid", pid=proc.pid)
        state.release()

        returncode = await proc.wait()
        if returncode != 0:
            logger.info("run error", pid=proc.pid, returncode=returncode)
        if not state.clear_child(proc.pid):
            logger.debug("stale_child_exit", pid=proc.pid, current=state.child_pid)

    async def stop(self) -> None:
        """Cancel supervisors still awaiting their child."""
        for task in list(self._supervisors):
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._supervisors.clear()
