"""
Partition Data Model
====================
Defines the node record of the layout tree and the result type returned by
every tree mutation.

Classes:
    SplitDirection: Axis along which an internal node lays out its children.
    Partition: One node of the tree (leaf cell or split node).
    Outcome: Result category of a mutation.
    TreeChange: Outcome plus the ids touched by the mutation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import List, Optional

from partitionlayout.config import FULL_SIZE
from partitionlayout.model.colors import HslColor


class SplitDirection(StrEnum):
    VERTICAL = "vertical"      # children side by side, sized along x
    HORIZONTAL = "horizontal"  # children stacked, sized along y


@dataclass
class Partition:
    """
    A node of the binary layout tree.

    `parent` and `children` hold ids, never objects; the tree owns all nodes.
    """
    id: str
    color: HslColor
    split: Optional[SplitDirection] = None
    size: float = FULL_SIZE
    children: List[str] = field(default_factory=list)
    parent: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return self.split is None

    @property
    def is_root(self) -> bool:
        return self.parent is None


class Outcome(StrEnum):
    OK = "ok"
    NOT_FOUND = "not found"
    ALREADY_SPLIT = "already split"
    ROOT_REMOVAL_FORBIDDEN = "root removal forbidden"
    NO_PARENT = "no parent"
    OUT_OF_BOUNDS = "out of bounds"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TreeChange:
    """
    Result of a tree mutation.

    Rejected mutations carry an empty `affected` set and never modify the tree.
    """
    outcome: Outcome
    affected: frozenset[str] = frozenset()
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def applied(cls, affected) -> TreeChange:
        return cls(Outcome.OK, frozenset(affected))

    @classmethod
    def rejected(cls, outcome: Outcome, reason: str) -> TreeChange:
        return cls(outcome, frozenset(), reason)
