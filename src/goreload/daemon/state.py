"""Shared daemon state.

One DaemonState is built at bootstrap and passed by reference to every task.

Single-writer discipline:
- child_pid is written only by the RebuildPipeline (set on launch, and
  compare-and-clear on exit); the ShutdownHandler only reads it
- the completion slot holds at most one token; the pipeline releases it
  exactly once per cycle and the router consumes it before taking the
  next event
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from goreload.core.errors import InternalError
from goreload.daemon.excludes import ExclusionMatcher

logger = structlog.get_logger()


@dataclass
class DaemonState:
    """Process-wide state for one goreload run."""

    root: Path
    name: str
    matcher: ExclusionMatcher
    build_command: str
    source_suffix: str
    run_command: str | None = None
    debug: bool = False
    relaunch_on_failure: bool = False
    shutdown_grace_sec: float = 1.0

    child_pid: int | None = field(default=None, init=False)
    _slot: asyncio.Queue[int] = field(
        default_factory=lambda: asyncio.Queue(maxsize=1), init=False, repr=False
    )

    @property
    def exclusions(self) -> frozenset[Path]:
        return self.matcher.excluded

    def release(self) -> None:
        """Signal that the current rebuild cycle reached its hand-off point."""
        try:
            self._slot.put_nowait(1)
        except asyncio.QueueFull:
            err = InternalError.unexpected("completion slot released twice")
            logger.error("slot_double_release", error=str(err))

    async def wait_released(self) -> None:
        await self._slot.get()

    @property
    def released(self) -> bool:
        """True if a release is pending and not yet consumed."""
        return self._slot.full()

    def set_child(self, pid: int) -> None:
        self.child_pid = pid

    def clear_child(self, pid: int) -> bool:
        """Clear child_pid only if it still names pid.

        A child that exits after a newer one was launched must not erase the
        newer child's pid. Returns True if the pid was cleared.
        """
        if self.child_pid != pid:
            return False
        self.child_pid = None
        return True
