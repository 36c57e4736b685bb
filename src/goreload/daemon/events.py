"""Filesystem event model shared by the notifier and the router."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from watchfiles import Change


class Op(Enum):
    """Kind of filesystem operation an event reports."""

    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"
    OTHER = "other"


_CHANGE_OPS: dict[Change, Op] = {
    Change.added: Op.CREATE,
    Change.modified: Op.WRITE,
    Change.deleted: Op.REMOVE,
}


@dataclass(frozen=True, slots=True)
class FsEvent:
    """A single (path, operation) notification."""

    path: Path
    op: Op

    @classmethod
    def from_change(cls, change: Change, path: str) -> FsEvent:
        return cls(path=Path(path), op=_CHANGE_OPS.get(change, Op.OTHER))

    def __str__(self) -> str:
        return f'"{self.path}": {self.op.name}'
