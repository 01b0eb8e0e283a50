"""
延迟改动队列

遍历期间只记录改动，遍历结束后按发现顺序一次性应用。
目标节点已被先前改动替换/删除（失效）时跳过该改动，其余照常应用。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from ..tree import NodeKind, SyntaxTree

logger = logging.getLogger(__name__)


class ChangeOp(str, Enum):
    REPLACE = "replace"
    DELETE = "delete"


@dataclass(frozen=True)
class PendingChange:
    target: int
    op: ChangeOp
    payload: Optional[str] = None


@dataclass
class ChangeStats:
    applied: int = 0
    skipped: int = 0


class ChangeSet:
    """Queue of deferred tree mutations keyed by node handle."""

    def __init__(self):
        self._pending: list[PendingChange] = []

    def replace(self, target: int, text: str) -> None:
        self._pending.append(PendingChange(target, ChangeOp.REPLACE, text))

    def delete(self, target: int) -> None:
        self._pending.append(PendingChange(target, ChangeOp.DELETE))

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[PendingChange]:
        return iter(self._pending)

    def apply(self, tree: SyntaxTree) -> ChangeStats:
        stats = ChangeStats()
        for change in self._pending:
            if not tree.is_valid(change.target):
                logger.debug(f"Skipping {change.op.value} of invalidated node {change.target}")
                stats.skipped += 1
                continue
            if change.op is ChangeOp.REPLACE:
                tree.replace(change.target, change.payload or "", NodeKind.TOKEN)
            else:
                tree.delete(change.target)
            stats.applied += 1
        self._pending.clear()
        return stats
