"""Filesystem notifier built on watchfiles.

Design:
- Holds an explicit set of directories, each watched non-recursively
  (one inotify watch per directory); the registry decides what goes in it
- A background pump runs awatch over the current set and pushes FsEvents
  onto an unbounded queue, the router's event channel
- Changing the set restarts awatch so the new directories take effect
- close() stops the pump and enqueues None, the closed marker
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from watchfiles import awatch

from goreload.daemon.events import FsEvent

logger = structlog.get_logger()

# Milliseconds awatch waits for more changes before yielding a batch
DEBOUNCE_MS = 50
# Milliseconds between stop-event checks inside awatch
STEP_MS = 50


@dataclass
class WatchfilesNotifier:
    """Non-recursive watchfiles watcher over a mutable directory set."""

    debounce_ms: int = DEBOUNCE_MS
    step_ms: int = STEP_MS

    events: asyncio.Queue[FsEvent | None] = field(default_factory=asyncio.Queue, init=False)
    _dirs: set[Path] = field(default_factory=set, init=False)
    _restart: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _closed: bool = field(default=False, init=False)
    _pump_task: asyncio.Task[None] | None = field(default=None, init=False)

    @property
    def watched(self) -> frozenset[Path]:
        return frozenset(self._dirs)

    def add(self, path: Path) -> None:
        """Watch path. Adding a watched directory is a no-op."""
        if path in self._dirs:
            return
        self._dirs.add(path)
        self._restart.set()

    def remove(self, path: Path) -> None:
        """Stop watching path. Unknown paths are ignored."""
        if path not in self._dirs:
            return
        self._dirs.discard(path)
        self._restart.set()

    def start(self) -> None:
        if self._pump_task is not None:
            return
        self._pump_task = asyncio.create_task(self._pump(), name="goreload-notifier")

    async def close(self) -> None:
        """Stop watching and close the event channel."""
        if self._closed:
            return
        self._closed = True
        self._restart.set()
        if self._pump_task is not None:
            self._pump_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._pump_task
            self._pump_task = None
        self.events.put_nowait(None)

    async def _pump(self) -> None:
        while not self._closed:
            self._restart.clear()
            dirs = [d for d in self._dirs if d.is_dir()]
            if not dirs:
                await self._restart.wait()
                continue

            logger.debug("watch_dirs_collected", count=len(dirs))
            try:
                async for changes in awatch(
                    *dirs,
                    recursive=False,
                    debounce=self.debounce_ms,
                    step=self.step_ms,
                    stop_event=self._restart,
                    ignore_permission_denied=True,
                    watch_filter=None,
                ):
                    for change, path in sorted(changes, key=lambda c: c[1]):
                        self.events.put_nowait(FsEvent.from_change(change, path))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if self._closed:
                    return
                # A directory can vanish between the is_dir check and the watch setup
                logger.warning("watcher_error", error=str(e))
                await asyncio.sleep(0.1)
