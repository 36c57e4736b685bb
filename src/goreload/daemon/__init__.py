"""goreload daemon - watch, rebuild, restart."""

from goreload.daemon.excludes import ExclusionMatcher
from goreload.daemon.lifecycle import DaemonController, bootstrap, run_daemon
from goreload.daemon.notifier import WatchfilesNotifier
from goreload.daemon.pipeline import RebuildPipeline
from goreload.daemon.registry import WatchRegistry
from goreload.daemon.router import EventRouter
from goreload.daemon.shutdown import ShutdownHandler
from goreload.daemon.state import DaemonState

__all__ = [
    "DaemonController",
    "DaemonState",
    "EventRouter",
    "ExclusionMatcher",
    "RebuildPipeline",
    "ShutdownHandler",
    "WatchRegistry",
    "WatchfilesNotifier",
    "bootstrap",
    "run_daemon",
]
