"""Recursive watch registry.

Design:
- The walk is a pure generator of directories to register, pruned by the
  ExclusionMatcher before recursing
- Registration is a separate fold over that sequence, so the walk can be
  tested without a notifier
- A listing failure (not a directory, permission denied, vanished mid-walk)
  ends that branch silently; directories are routinely created and deleted
  between event delivery and processing
- Each directory is registered at most once
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

import structlog

from goreload.daemon.excludes import ExclusionMatcher

logger = structlog.get_logger()


class Registrar(Protocol):
    """Notifier side of the registry: the set of watched directories."""

    def add(self, path: Path) -> None: ...

    def remove(self, path: Path) -> None: ...


def walk_watch_dirs(path: Path, matcher: ExclusionMatcher) -> Iterator[Path]:
    """Yield path and every directory below it that should be watched.

    Symlinked directories are not followed.
    """
    if matcher.is_excluded(path):
        logger.debug("exclude", path=str(path))
        return

    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        logger.debug("list_dir_failed", path=str(path), error=str(e))
        return

    yield path
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        if is_dir:
            yield from walk_watch_dirs(path / entry.name, matcher)


class WatchRegistry:
    """Keeps the notifier's registrations consistent with the directory tree."""

    def __init__(self, registrar: Registrar, matcher: ExclusionMatcher) -> None:
        self._registrar = registrar
        self._matcher = matcher
        self._watched: set[Path] = set()

    @property
    def watched(self) -> frozenset[Path]:
        return frozenset(self._watched)

    def __contains__(self, path: object) -> bool:
        return path in self._watched

    def register_tree(self, path: Path) -> int:
        """Register path and its non-excluded subdirectories.

        Returns the number of newly registered directories.
        """
        added = 0
        for directory in walk_watch_dirs(path, self._matcher):
            if directory in self._watched:
                continue
            logger.debug("watch target", path=str(directory))
            self._registrar.add(directory)
            self._watched.add(directory)
            added += 1
        return added

    def unregister(self, path: Path) -> None:
        """Drop the registration for exactly this path.

        Directories below it are left alone: once gone they stop producing
        events.
        """
        self._watched.discard(path)
        try:
            self._registrar.remove(path)
        except (KeyError, ValueError, OSError) as e:
            logger.debug("unwatch_failed", path=str(path), error=str(e))
