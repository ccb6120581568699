"""
Tree Controller
===============
Qt-facing owner of the PartitionTree.

Why is this file needed?
------------------------
1. Decoupling: The tree itself knows nothing about Qt. This QObject turns its
   change notifications into Qt signals that widgets can connect to.
2. Routing: Views forward user intents (split, remove, drag-resize) here
   instead of touching the tree directly.

Classes:
    TreeController: Signals + intent methods around one PartitionTree.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from partitionlayout.model.partition import SplitDirection, TreeChange
from partitionlayout.model.tree import PartitionTree

logger = logging.getLogger(__name__)

TreeFactory = Callable[[], PartitionTree]


class TreeController(QObject):
    """Central layout state with signals for canvas/status bar sync."""
    tree_changed = Signal(object)        # TreeChange
    tree_replaced = Signal(object)       # the new PartitionTree
    operation_rejected = Signal(str)     # human-readable reason

    def __init__(self, tree: Optional[PartitionTree] = None, tree_factory: TreeFactory = PartitionTree) -> None:
        super().__init__()
        self._tree_factory = tree_factory
        self._tree: PartitionTree = tree if tree is not None else tree_factory()
        self._tree.ensure_root()
        self._tree.subscribe(self._on_tree_changed)

    @property
    def tree(self) -> PartitionTree:
        return self._tree

    # --- INTENTS ---

    def split(self, partition_id: str, direction: SplitDirection | str) -> TreeChange:
        return self._report(self._tree.split_partition(partition_id, direction))

    def remove(self, partition_id: str) -> TreeChange:
        return self._report(self._tree.remove_partition(partition_id))

    def resize(self, partition_id: str, new_size: float) -> TreeChange:
        return self._report(self._tree.resize_partitions(partition_id, new_size))

    def reset(self) -> None:
        """Drop the current layout and start again from a single root cell."""
        self._tree.unsubscribe(self._on_tree_changed)
        self._tree = self._tree_factory()
        self._tree.ensure_root()
        self._tree.subscribe(self._on_tree_changed)
        logger.info("Layout has been reset.")
        self.tree_replaced.emit(self._tree)

    # --- SLOTS ---

    def _on_tree_changed(self, change: TreeChange) -> None:
        self.tree_changed.emit(change)

    def _report(self, change: TreeChange) -> TreeChange:
        if not change.ok:
            self.operation_rejected.emit(change.reason or str(change.outcome))
        return change
