"""
Partition Tree (Data Model)
===========================
This module defines the central data structure of the layout: a binary tree
of partitions stored as an arena (one dict keyed by id).

Why is this file needed?
------------------------
1. State Management: It holds every partition, the root id and the color pool
   in one place. There is no global instance; whoever needs the tree gets it
   passed in (controller, view, tests).
2. Structure: It splits cells, removes them (collapsing parents that are left
   with a single child) and keeps sibling sizes normalized to 100 %.
3. Notification: Every mutation returns a TreeChange and is broadcast to the
   subscribed listeners, so views decide themselves when to redraw.

Classes:
    TreeInvariantError: Raised by check_invariants().
    PartitionTree: The arena and its mutation API.
"""
from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Set
import uuid

import numpy as np

from partitionlayout.config import FULL_SIZE, MIN_SIZE, MAX_SIZE, SIZE_TOLERANCE
from partitionlayout.model.colors import ColorAllocator
from partitionlayout.model.partition import Partition, SplitDirection, Outcome, TreeChange

logger = logging.getLogger(__name__)

TreeListener = Callable[[TreeChange], None]


class TreeInvariantError(ValueError):
    """The tree structure is inconsistent."""


class PartitionTree:
    """
    Arena of partitions forming a binary layout tree.

    Args:
        colors: Color allocator; a fresh one is created if omitted.
        create_root: Create the root partition immediately.
        min_size: Smallest share a node may get when resized against a single sibling.
        max_size: Largest share a node may get when resized against a single sibling.
    """
    def __init__(
        self,
        colors: Optional[ColorAllocator] = None,
        *,
        create_root: bool = True,
        min_size: float = MIN_SIZE,
        max_size: float = MAX_SIZE,
    ) -> None:
        self._partitions: Dict[str, Partition] = {}
        self._root_id: Optional[str] = None
        self._listeners: List[TreeListener] = []
        self.colors = colors if colors is not None else ColorAllocator()
        self.min_size = min_size
        self.max_size = max_size

        if create_root:
            self.create_partition()

    # ------------------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------------------

    @property
    def partitions(self) -> Mapping[str, Partition]:
        return MappingProxyType(self._partitions)

    @property
    def root_id(self) -> Optional[str]:
        return self._root_id

    @property
    def root(self) -> Optional[Partition]:
        return self._partitions.get(self._root_id) if self._root_id else None

    @property
    def partition_count(self) -> int:
        return len(self._partitions)

    def __len__(self) -> int:
        return len(self._partitions)

    def __contains__(self, partition_id: object) -> bool:
        return partition_id in self._partitions

    def get(self, partition_id: str) -> Optional[Partition]:
        return self._partitions.get(partition_id)

    def walk(self, start_id: Optional[str] = None) -> Iterator[Partition]:
        """Pre-order traversal from `start_id` (default: root)."""
        start_id = start_id or self._root_id
        if start_id is None or start_id not in self._partitions:
            return
        stack = [start_id]
        while stack:
            node = self._partitions[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def leaves(self) -> List[Partition]:
        return [node for node in self.walk() if node.is_leaf]

    def path_to_root(self, partition_id: str) -> List[str]:
        """Ids from `partition_id` up to and including the root."""
        path: List[str] = []
        current = self._partitions.get(partition_id)
        while current is not None:
            path.append(current.id)
            current = self._partitions.get(current.parent) if current.parent else None
        return path

    def depth(self, partition_id: str) -> int:
        if partition_id not in self._partitions:
            raise KeyError(partition_id)
        return len(self.path_to_root(partition_id)) - 1

    def snapshot(self, partition_id: Optional[str] = None) -> Dict[str, Any]:
        """Nested plain-dict dump of a subtree, for logging and debugging."""
        if self._root_id is None:
            return {}
        node = self._partitions[partition_id or self._root_id]
        return {
            "id": node.id,
            "color": node.color.css(),
            "split": str(node.split) if node.split else None,
            "size": node.size,
            "children": [self.snapshot(child_id) for child_id in node.children],
        }

    # ------------------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------------------

    def subscribe(self, listener: TreeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: TreeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, change: TreeChange) -> TreeChange:
        if change.ok:
            for listener in list(self._listeners):
                listener(change)
        else:
            logger.debug(f"Rejected: {change.outcome} ({change.reason})")
        return change

    # ------------------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------------------

    def ensure_root(self) -> str:
        """Create the root partition if the tree is still empty; return the root id."""
        if self._root_id is None:
            return self.create_partition()
        return self._root_id

    def create_partition(self, parent_id: Optional[str] = None, inherit_color: bool = False) -> str:
        """
        Create a partition and return its id.

        Without `parent_id` the new partition becomes the root (only allowed on an
        empty tree). With `parent_id` the partition is appended to an already split
        parent and the sibling sizes are renormalized; leaves are split through
        split_partition() instead.

        Raises:
            KeyError: If `parent_id` does not exist.
            ValueError: If a second root is requested or the parent is a leaf.
        """
        if parent_id is None:
            if self._root_id is not None:
                raise ValueError("The tree already has a root partition.")
        else:
            parent = self._partitions[parent_id]
            if parent.is_leaf:
                raise ValueError(f"Partition '{parent_id}' is a leaf; use split_partition().")

        new_id = self._create(parent_id, inherit_color)
        affected = {new_id}
        if parent_id is None:
            self._root_id = new_id
            logger.info(f"Created root partition {new_id}")
        else:
            affected.update(self._partitions[parent_id].children)
            affected.add(parent_id)
        self._notify(TreeChange.applied(affected))
        return new_id

    def split_partition(self, partition_id: str, direction: SplitDirection | str) -> TreeChange:
        """
        Split a leaf into two children laid out along `direction`.

        The first child keeps the leaf's color, the second one gets a new color.
        Both children end up at 50 %.
        """
        direction = SplitDirection(direction)
        node = self._partitions.get(partition_id)
        if node is None:
            return self._notify(TreeChange.rejected(Outcome.NOT_FOUND, f"No partition '{partition_id}'."))
        if not node.is_leaf:
            return self._notify(TreeChange.rejected(
                Outcome.ALREADY_SPLIT, f"Partition '{partition_id}' is already split {node.split}."
            ))

        node.split = direction
        first_id = self._create(partition_id, inherit_color=True)
        second_id = self._create(partition_id, inherit_color=False)
        node.children = [first_id, second_id]
        self._redistribute(node)

        logger.info(f"Split {partition_id} {direction} -> [{first_id}, {second_id}]")
        return self._notify(TreeChange.applied({partition_id, first_id, second_id}))

    def remove_partition(self, partition_id: str) -> TreeChange:
        """
        Remove a partition (and its subtree) from the tree.

        A parent left without children is removed as well, repeatedly up the chain.
        A parent left with one child collapses: the child takes the parent's slot
        and size in the grandparent, or becomes the new root.
        """
        node = self._partitions.get(partition_id)
        if node is None:
            return self._notify(TreeChange.rejected(Outcome.NOT_FOUND, f"No partition '{partition_id}'."))
        if partition_id == self._root_id:
            return self._notify(TreeChange.rejected(
                Outcome.ROOT_REMOVAL_FORBIDDEN, "The root partition cannot be removed."
            ))

        affected: Set[str] = set()
        target_id = partition_id
        while True:
            target = self._partitions[target_id]
            parent = self._partitions[target.parent]
            parent.children.remove(target_id)
            self._delete_subtree(target_id, affected)
            affected.add(parent.id)

            if not parent.children:
                if parent.id == self._root_id:
                    # The root stays; it simply becomes a leaf again
                    parent.split = None
                    break
                target_id = parent.id
                continue

            if len(parent.children) == 1:
                self._merge_up(parent, affected)
            else:
                self._redistribute(parent)
                affected.update(parent.children)
            break

        logger.info(f"Removed {partition_id} ({len(affected)} partitions affected)")
        return self._notify(TreeChange.applied(affected))

    def resize_partitions(self, partition_id: str, new_size: float) -> TreeChange:
        """
        Move the boundary between a partition and its siblings.

        Args:
            partition_id: The partition being resized.
            new_size: Target share (percent) of the parent's extent for this partition.

        With a single sibling the sibling gets `100 - new_size`; the whole resize is
        rejected when that falls outside [min_size, max_size]. With more siblings the
        size difference is taken from them in proportion to their current sizes.
        """
        node = self._partitions.get(partition_id)
        if node is None:
            return self._notify(TreeChange.rejected(Outcome.NOT_FOUND, f"No partition '{partition_id}'."))
        if node.parent is None:
            return self._notify(TreeChange.rejected(Outcome.NO_PARENT, "The root partition has no siblings."))
        if not math.isfinite(new_size):
            return self._notify(TreeChange.rejected(Outcome.REJECTED, f"Size {new_size!r} is not a number."))

        parent = self._partitions[node.parent]
        siblings = [self._partitions[child_id] for child_id in parent.children if child_id != partition_id]
        if not siblings:
            return self._notify(TreeChange.rejected(Outcome.REJECTED, f"Partition '{partition_id}' has no siblings."))

        if len(siblings) == 1:
            sibling = siblings[0]
            sibling_size = FULL_SIZE - new_size
            if not self.min_size <= sibling_size <= self.max_size:
                return self._notify(TreeChange.rejected(
                    Outcome.OUT_OF_BOUNDS,
                    f"Sibling size {sibling_size:g} outside [{self.min_size:g}, {self.max_size:g}]."
                ))
            node.size = new_size
            sibling.size = sibling_size
        else:
            # Per-sibling sizes are not bounded here
            size_diff = new_size - node.size
            node.size = new_size
            sizes = np.array([sibling.size for sibling in siblings], dtype=np.float64)
            total = sizes.sum()
            if total > 0:
                proportions = sizes / total
            else:
                proportions = np.full(len(siblings), 1.0 / len(siblings))
            for sibling, new_sibling_size in zip(siblings, sizes - size_diff * proportions):
                sibling.size = float(new_sibling_size)

        self._redistribute(parent)
        logger.debug(f"Resized {partition_id} to {node.size:.3f} % in {parent.id}")
        return self._notify(TreeChange.applied(parent.children))

    def redistribute_sizes(self, parent_id: str) -> TreeChange:
        """Scale the children of `parent_id` so their sizes sum to 100."""
        parent = self._partitions.get(parent_id)
        if parent is None:
            return self._notify(TreeChange.rejected(Outcome.NOT_FOUND, f"No partition '{parent_id}'."))
        if not parent.children:
            return self._notify(TreeChange.rejected(Outcome.REJECTED, f"Partition '{parent_id}' has no children."))
        self._redistribute(parent)
        logger.debug(f"Redistributed {len(parent.children)} children of {parent_id}")
        return self._notify(TreeChange.applied(parent.children))

    # ------------------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------------------

    def _create(self, parent_id: Optional[str], inherit_color: bool) -> str:
        parent = self._partitions[parent_id] if parent_id is not None else None
        if inherit_color and parent is not None:
            color = parent.color
            self.colors.acquire(color)
        else:
            color = self.colors.unique_color(avoid=parent.color if parent is not None else None)

        new_id = uuid.uuid4().hex
        self._partitions[new_id] = Partition(id=new_id, color=color, parent=parent_id)
        if parent is not None:
            parent.children.append(new_id)
            self._redistribute(parent)
        return new_id

    def _redistribute(self, parent: Partition) -> None:
        if not parent.children:
            return
        children = [self._partitions[child_id] for child_id in parent.children]
        sizes = np.array([child.size for child in children], dtype=np.float64)
        total = sizes.sum()
        if math.isclose(total, FULL_SIZE, rel_tol=0.0, abs_tol=1e-12):
            return
        if total > 0:
            sizes = sizes * (FULL_SIZE / total)
        else:
            sizes = np.full(len(children), FULL_SIZE / len(children))
        for child, size in zip(children, sizes):
            child.size = float(size)

    def _merge_up(self, parent: Partition, affected: Set[str]) -> None:
        """Replace `parent` by its single remaining child."""
        survivor = self._partitions[parent.children[0]]
        survivor.parent = parent.parent

        if parent.parent is None:
            self._root_id = survivor.id
            survivor.size = FULL_SIZE
            logger.debug(f"Promoted {survivor.id} to root")
        else:
            grandparent = self._partitions[parent.parent]
            slot = grandparent.children.index(parent.id)
            grandparent.children[slot] = survivor.id
            survivor.size = parent.size
            affected.add(grandparent.id)

        self.colors.release(parent.color)
        del self._partitions[parent.id]
        affected.update({parent.id, survivor.id})

    def _delete_subtree(self, partition_id: str, affected: Set[str]) -> None:
        stack = [partition_id]
        while stack:
            node = self._partitions.pop(stack.pop())
            self.colors.release(node.color)
            affected.add(node.id)
            stack.extend(node.children)

    # ------------------------------------------------------------------------------
    # Consistency checks
    # ------------------------------------------------------------------------------

    def check_invariants(self) -> None:
        """
        Verify the structural invariants of the tree.

        Raises:
            TreeInvariantError: Describing the first violated invariant.
        """
        if not self._partitions:
            if self._root_id is not None:
                raise TreeInvariantError(f"Root id '{self._root_id}' set on an empty tree.")
            return

        roots = [node.id for node in self._partitions.values() if node.parent is None]
        if roots != [self._root_id]:
            raise TreeInvariantError(f"Expected single root '{self._root_id}', found {roots}.")

        seen: Set[str] = set()
        stack = [self._root_id]
        while stack:
            node_id = stack.pop()
            if node_id in seen:
                raise TreeInvariantError(f"Partition '{node_id}' is reachable twice.")
            seen.add(node_id)
            node = self._partitions.get(node_id)
            if node is None:
                raise TreeInvariantError(f"Dangling child id '{node_id}'.")

            if node.is_leaf != (not node.children):
                raise TreeInvariantError(f"Partition '{node_id}' split={node.split} with {len(node.children)} children.")
            if node.children and len(node.children) < 2:
                raise TreeInvariantError(f"Split partition '{node_id}' has a single child.")

            for child_id in node.children:
                child = self._partitions.get(child_id)
                if child is not None and child.parent != node_id:
                    raise TreeInvariantError(f"Child '{child_id}' points to parent '{child.parent}', not '{node_id}'.")
            if node.children:
                total = sum(self._partitions[c].size for c in node.children if c in self._partitions)
                if abs(total - FULL_SIZE) > SIZE_TOLERANCE:
                    raise TreeInvariantError(f"Children of '{node_id}' sum to {total}, not {FULL_SIZE:g}.")
            stack.extend(node.children)

        orphans = set(self._partitions) - seen
        if orphans:
            raise TreeInvariantError(f"Unreachable partitions: {sorted(orphans)}.")

        leaf_colors = [node.color for node in self._partitions.values() if node.is_leaf]
        if len(leaf_colors) != len(set(leaf_colors)):
            raise TreeInvariantError("Two leaves share the same color.")
        for node in self._partitions.values():
            if not self.colors.in_use(node.color):
                raise TreeInvariantError(f"Color of '{node.id}' is not registered as used.")
