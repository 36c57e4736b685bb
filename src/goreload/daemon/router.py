"""Event router: the single consumer of the notifier's event channel.

- REMOVE: drop the registration for that path
- CREATE: register the subtree rooted at the path (files fail the listing
  step and are a no-op)
- WRITE: run a rebuild cycle and block on the completion slot before the
  next event, so bursts of writes are handled strictly one at a time
- anything else is ignored
"""

from __future__ import annotations

from typing import Protocol

import structlog

from goreload.daemon.events import FsEvent, Op
from goreload.daemon.pipeline import RebuildPipeline
from goreload.daemon.registry import WatchRegistry
from goreload.daemon.state import DaemonState

logger = structlog.get_logger()


class EventChannel(Protocol):
    async def get(self) -> FsEvent | None: ...


class EventRouter:
    """Dispatches filesystem events to the registry and the pipeline."""

    def __init__(
        self,
        events: EventChannel,
        registry: WatchRegistry,
        pipeline: RebuildPipeline,
        state: DaemonState,
    ) -> None:
        self._events = events
        self._registry = registry
        self._pipeline = pipeline
        self._state = state
        self.processed = 0

    async def run(self) -> None:
        """Consume events until the channel is closed."""
        while True:
            event = await self._events.get()
            if event is None:
                logger.info("channel close")
                return
            await self.dispatch(event)

    async def dispatch(self, event: FsEvent) -> None:
        self.processed += 1
        if self._state.matcher.is_excluded(event.path):
            return

        if event.op is Op.REMOVE:
            self._registry.unregister(event.path)
        elif event.op is Op.CREATE:
            added = self._registry.register_tree(event.path)
            if added:
                logger.debug("new_directory_watched", path=str(event.path), count=added)
        elif event.op is Op.WRITE:
            logger.debug("receive", path=str(event.path), op=event.op.name)
            await self._pipeline.handle_write(event.path)
            await self._state.wait_released()
            logger.debug("receive end", path=str(event.path), op=event.op.name)
