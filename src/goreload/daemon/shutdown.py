"""Interrupt handling.

On SIGINT the supervised child's process group gets a SIGTERM (after a short
grace delay in debug mode) and the daemon exits with status 2. The child's
exit is not awaited.
"""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Callable

import structlog

from goreload.core.errors import EXIT_PRECONDITION
from goreload.daemon.pipeline import signal_group
from goreload.daemon.state import DaemonState

logger = structlog.get_logger()

EXIT_INTERRUPTED = EXIT_PRECONDITION


class ShutdownHandler:
    """Waits for an interrupt, then terminates the child."""

    def __init__(
        self,
        state: DaemonState,
        *,
        kill_group: Callable[[int, int], None] = signal_group,
    ) -> None:
        self._state = state
        self._kill_group = kill_group
        self._interrupted = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None

    def install(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._loop.add_signal_handler(signal.SIGINT, self.trigger)

    def uninstall(self) -> None:
        if self._loop is not None:
            self._loop.remove_signal_handler(signal.SIGINT)
            self._loop = None

    def trigger(self) -> None:
        logger.info("shutdown_signal_received")
        self._interrupted.set()

    async def wait(self) -> int:
        """Block until interrupted, terminate the child, return the exit code."""
        await self._interrupted.wait()
        await self.terminate_child()
        return EXIT_INTERRUPTED

    async def terminate_child(self) -> None:
        state = self._state
        if state.child_pid is None:
            return
        if state.debug:
            logger.debug("kill process", pid=state.child_pid)
            await asyncio.sleep(state.shutdown_grace_sec)
        pid = state.child_pid
        if pid is None:
            return
        try:
            self._kill_group(pid, signal.SIGTERM)
        except OSError as e:
            logger.warning("kill_failed", pid=pid, error=str(e))
