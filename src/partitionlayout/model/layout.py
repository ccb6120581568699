"""
Layout Geometry
===============
Pure functions mapping the partition tree onto screen rectangles.

Conventions:
    - The root fills the given bounds.
    - A child's extent along its parent's split axis is `size` % of the parent's
      extent on that axis; on the cross axis it takes the full parent extent.
    - VERTICAL splits lay children out left -> right, HORIZONTAL top -> bottom.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, List, Optional

from partitionlayout.config import FULL_SIZE, MIN_SIZE, MAX_SIZE
from partitionlayout.model.partition import SplitDirection
from partitionlayout.model.tree import PartitionTree


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.right and self.y <= py < self.bottom


class ControlAction(StrEnum):
    SPLIT_VERTICAL = "v"
    SPLIT_HORIZONTAL = "h"
    REMOVE = "-"


@dataclass(frozen=True)
class ControlButton:
    partition_id: str
    action: ControlAction
    rect: Rect


@dataclass(frozen=True)
class ResizeHandle:
    """Draggable boundary between `partition_id` and the next sibling."""
    partition_id: str
    parent_id: str
    axis: SplitDirection
    rect: Rect


def compute_layout(tree: PartitionTree, bounds: Rect) -> Dict[str, Rect]:
    """Return the rectangle of every partition, root filling `bounds`."""
    rects: Dict[str, Rect] = {}
    if tree.root_id is None:
        return rects
    rects[tree.root_id] = bounds

    # pre-order: a parent's rect is always known before its children
    for node in tree.walk():
        if node.is_leaf:
            continue
        rect = rects[node.id]
        offset = 0.0
        for child_id in node.children:
            share = tree.partitions[child_id].size / FULL_SIZE
            if node.split is SplitDirection.VERTICAL:
                width = rect.width * share
                rects[child_id] = Rect(rect.x + offset, rect.y, width, rect.height)
                offset += width
            else:
                height = rect.height * share
                rects[child_id] = Rect(rect.x, rect.y + offset, rect.width, height)
                offset += height
    return rects


def size_from_pointer(
    parent_rect: Rect,
    axis: SplitDirection,
    x: float,
    y: float,
    lo: float = MIN_SIZE,
    hi: float = MAX_SIZE,
    start: Optional[float] = None,
) -> float:
    """
    Translate a cursor position into a size (percent of the parent's extent).

    Args:
        parent_rect: Box of the parent partition.
        axis: The parent's split direction.
        x, y: Cursor position.
        lo, hi: Clamp range for the result.
        start: Coordinate the size is measured from; defaults to the parent's origin.

    Returns:
        (cursor - start) / extent * 100 along the axis, clamped to [lo, hi].
    """
    if axis is SplitDirection.VERTICAL:
        origin = parent_rect.x if start is None else start
        extent, position = parent_rect.width, x
    else:
        origin = parent_rect.y if start is None else start
        extent, position = parent_rect.height, y

    if extent <= 0:
        return lo
    size = (position - origin) / extent * FULL_SIZE
    return max(lo, min(size, hi))


def resize_handles(tree: PartitionTree, rects: Dict[str, Rect], thickness: float) -> List[ResizeHandle]:
    """
    Handles on every boundary shared by two siblings.

    Each handle belongs to the sibling before the boundary, so dragging it sets
    that sibling's size.
    """
    handles: List[ResizeHandle] = []
    half = thickness / 2
    for node in tree.walk():
        if node.is_leaf:
            continue
        for child_id in node.children[:-1]:
            rect = rects[child_id]
            if node.split is SplitDirection.VERTICAL:
                handle_rect = Rect(rect.right - half, rect.y, thickness, rect.height)
            else:
                handle_rect = Rect(rect.x, rect.bottom - half, rect.width, thickness)
            handles.append(ResizeHandle(child_id, node.id, node.split, handle_rect))
    return handles


def control_buttons(
    tree: PartitionTree,
    rects: Dict[str, Rect],
    width: float,
    height: float,
    spacing: float,
) -> List[ControlButton]:
    """
    Split/remove buttons centred on each leaf.

    Split nodes get no buttons; the root gets no remove button.
    """
    buttons: List[ControlButton] = []
    for node in tree.leaves():
        actions = [ControlAction.SPLIT_VERTICAL, ControlAction.SPLIT_HORIZONTAL]
        if not node.is_root:
            actions.append(ControlAction.REMOVE)

        cx, cy = rects[node.id].center
        row_width = len(actions) * width + (len(actions) - 1) * spacing
        left = cx - row_width / 2
        for i, action in enumerate(actions):
            button_rect = Rect(left + i * (width + spacing), cy - height / 2, width, height)
            buttons.append(ControlButton(node.id, action, button_rect))
    return buttons


def leaf_at(tree: PartitionTree, rects: Dict[str, Rect], x: float, y: float) -> Optional[str]:
    for node in tree.leaves():
        if rects[node.id].contains(x, y):
            return node.id
    return None


def handle_at(handles: List[ResizeHandle], x: float, y: float) -> Optional[ResizeHandle]:
    for handle in handles:
        if handle.rect.contains(x, y):
            return handle
    return None


def button_at(buttons: List[ControlButton], x: float, y: float) -> Optional[ControlButton]:
    for button in buttons:
        if button.rect.contains(x, y):
            return button
    return None
