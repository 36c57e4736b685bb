"""Daemon bootstrap and lifecycle management."""

from __future__ import annotations

import asyncio
import contextlib
import os
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from goreload.config.models import GoReloadConfig
from goreload.core.errors import StartupError
from goreload.daemon.excludes import ExclusionMatcher, parse_excludes
from goreload.daemon.notifier import WatchfilesNotifier
from goreload.daemon.pipeline import RebuildPipeline
from goreload.daemon.registry import WatchRegistry
from goreload.daemon.router import EventRouter
from goreload.daemon.shutdown import ShutdownHandler
from goreload.daemon.state import DaemonState

logger = structlog.get_logger()

STOP_TIMEOUT_SEC = 2.0


def resolve_root(path: Path | None = None) -> Path:
    """Resolve the watched root, the working directory by default."""
    try:
        root = path if path is not None else Path(os.getcwd())
        return root.resolve(strict=True)
    except OSError as e:
        raise StartupError.workdir_unavailable(str(e)) from e


def derive_build_command(config: GoReloadConfig, name: str) -> str:
    if config.build.command:
        return config.build.command
    return f"{config.build.tool} -o {name} *{config.build.source_suffix}"


def bootstrap(config: GoReloadConfig, root: Path | None = None) -> DaemonState:
    """Validate preconditions and build the shared daemon state.

    Raises:
        StartupError: If the working directory cannot be resolved or the
            build manifest is missing.
    """
    root = resolve_root(root)

    manifest = root / config.build.manifest
    if not manifest.is_file():
        raise StartupError.manifest_missing(str(root), config.build.manifest)

    name = root.name
    excluded = parse_excludes(config.watch.excludes, root)
    logger.debug("exclude list", excludes=sorted(str(p) for p in excluded))

    return DaemonState(
        root=root,
        name=name,
        matcher=ExclusionMatcher(excluded),
        build_command=derive_build_command(config, name),
        source_suffix=config.build.source_suffix,
        run_command=config.run.command or None,
        debug=config.debug,
        relaunch_on_failure=config.build.relaunch_on_failure,
        shutdown_grace_sec=config.run.shutdown_grace_sec,
    )


def _log_router_exit(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("router_failed", error=str(exc), exc_info=exc)


@dataclass
class DaemonController:
    """
    Orchestrates daemon components.

    Components:
    - WatchfilesNotifier: filesystem events for registered directories
    - WatchRegistry: keeps registrations in step with the tree
    - RebuildPipeline: terminate, build, relaunch
    - EventRouter: consumes events, serializes rebuild cycles
    - ShutdownHandler: SIGINT handling
    """

    state: DaemonState

    notifier: WatchfilesNotifier = field(default_factory=WatchfilesNotifier)
    registry: WatchRegistry = field(init=False)
    pipeline: RebuildPipeline = field(init=False)
    router: EventRouter = field(init=False)
    shutdown: ShutdownHandler = field(init=False)
    _router_task: asyncio.Task[None] | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.registry = WatchRegistry(self.notifier, self.state.matcher)
        self.pipeline = RebuildPipeline(self.state)
        self.router = EventRouter(self.notifier.events, self.registry, self.pipeline, self.state)
        self.shutdown = ShutdownHandler(self.state)

    async def start(self) -> None:
        """Register the tree and start consuming events."""
        logger.info("goreload starting", root=str(self.state.root))

        count = self.registry.register_tree(self.state.root)
        if self.state.root not in self.registry:
            raise StartupError.watcher_unavailable(str(self.state.root), "root is not listable")

        self.notifier.start()
        self._router_task = asyncio.create_task(self.router.run(), name="goreload-router")
        self._router_task.add_done_callback(_log_router_exit)
        logger.info("goreload started", watched_dirs=count, build=self.state.build_command)

    async def stop(self) -> None:
        """Stop all components."""
        try:
            async with asyncio.timeout(STOP_TIMEOUT_SEC):
                await self.notifier.close()
                if self._router_task is not None:
                    self._router_task.cancel()
                    # A failed router was already logged by _log_router_exit
                    with contextlib.suppress(asyncio.CancelledError, Exception):
                        await self._router_task
                    self._router_task = None
                await self.pipeline.stop()
        except TimeoutError:
            logger.warning("daemon_stop_timeout", timeout=STOP_TIMEOUT_SEC)
        logger.info("goreload stopped")


async def run_daemon(state: DaemonState) -> int:
    """Run the daemon until interrupted. Returns the exit code."""
    controller = DaemonController(state)
    controller.shutdown.install()
    try:
        await controller.start()
        return await controller.shutdown.wait()
    finally:
        controller.shutdown.uninstall()
        await controller.stop()
