"""Exclusion matching for the watched tree.

A path is excluded when it equals, or is nested under, one of the configured
exclusion paths. Everything under an excluded directory is pruned from the
walk, so it is never registered and never produces events.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path


def _normalize(path: str | os.PathLike[str]) -> Path:
    return Path(os.path.normpath(os.path.abspath(path)))


def parse_excludes(excludes: str, root: Path) -> frozenset[Path]:
    """Turn a whitespace separated exclusion list into absolute paths under root.

    Absolute entries are kept as given.
    """
    return frozenset(_normalize(root / entry) for entry in excludes.split())


class ExclusionMatcher:
    """Decides whether a path lies inside an excluded subtree."""

    __slots__ = ("_excluded",)

    def __init__(self, excluded: Iterable[str | os.PathLike[str]]) -> None:
        self._excluded = frozenset(_normalize(p) for p in excluded)

    @property
    def excluded(self) -> frozenset[Path]:
        return self._excluded

    def is_excluded(self, path: str | os.PathLike[str]) -> bool:
        if not self._excluded:
            return False
        candidate = _normalize(path)
        if candidate in self._excluded:
            return True
        return any(parent in self._excluded for parent in candidate.parents)

    def __repr__(self) -> str:
        return f"ExclusionMatcher({sorted(str(p) for p in self._excluded)})"
