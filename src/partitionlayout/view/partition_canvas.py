"""
Partition Canvas
================
Paints the partition tree as nested colored boxes and turns mouse input into
controller intents.

Interaction:
    - Each leaf shows "v" / "h" buttons (split vertically / horizontally) and,
      unless it is the root, a "-" button (remove).
    - Boundaries between siblings can be dragged; the cursor position is
      translated into a size for the sibling before the boundary.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from PySide6.QtCore import Qt, QRectF
from PySide6.QtGui import QColor, QPainter, QPen, QBrush, QMouseEvent, QPaintEvent, QResizeEvent
from PySide6.QtWidgets import QWidget

from partitionlayout.config import (
    HANDLE_THICKNESS, BUTTON_WIDTH, BUTTON_HEIGHT, BUTTON_SPACING, BORDER_COLOR, HANDLE_HOVER_COLOR,
)
from partitionlayout.controller.tree_controller import TreeController
from partitionlayout.model.colors import HslColor
from partitionlayout.model.layout import (
    Rect, ControlAction, ControlButton, ResizeHandle,
    compute_layout, resize_handles, control_buttons, size_from_pointer, handle_at, button_at,
)
from partitionlayout.model.partition import SplitDirection

logger = logging.getLogger(__name__)


def to_qcolor(color: HslColor) -> QColor:
    return QColor.fromHslF(color.hue / 360.0, color.saturation / 100.0, color.lightness / 100.0)


def to_qrectf(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.width, rect.height)


class PartitionCanvas(QWidget):
    def __init__(self, controller: TreeController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.controller = controller

        self.setMouseTracking(True)
        self.setMinimumSize(200, 150)

        self._rects: Dict[str, Rect] = {}
        self._handles: List[ResizeHandle] = []
        self._buttons: List[ControlButton] = []
        self._drag: Optional[ResizeHandle] = None
        self._hover: Optional[ResizeHandle] = None

        self.controller.tree_changed.connect(self.refresh)
        self.controller.tree_replaced.connect(self.refresh)
        self._relayout()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def rects(self) -> Dict[str, Rect]:
        return self._rects

    @property
    def handles(self) -> List[ResizeHandle]:
        return self._handles

    @property
    def buttons(self) -> List[ControlButton]:
        return self._buttons

    def refresh(self, *_) -> None:
        """Recompute geometry and schedule a repaint."""
        self._relayout()
        self.update()

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event: QResizeEvent) -> None:
        self._relayout()
        super().resizeEvent(event)

    def paintEvent(self, event: QPaintEvent) -> None:
        tree = self.controller.tree
        painter = QPainter(self)
        try:
            border_pen = QPen(QColor(BORDER_COLOR), 1)
            for node in tree.leaves():
                rect = to_qrectf(self._rects[node.id])
                painter.fillRect(rect, to_qcolor(node.color))
                painter.setPen(border_pen)
                painter.setBrush(Qt.NoBrush)
                painter.drawRect(rect.adjusted(0, 0, -1, -1))

            active = self._drag or self._hover
            if active is not None:
                painter.fillRect(to_qrectf(active.rect), QColor(HANDLE_HOVER_COLOR))

            painter.setPen(QPen(QColor(BORDER_COLOR), 1))
            painter.setBrush(QBrush(QColor("white")))
            for button in self._buttons:
                rect = to_qrectf(button.rect)
                painter.drawRoundedRect(rect, 4, 4)
                painter.drawText(rect, Qt.AlignCenter, str(button.action))
        finally:
            painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton:
            super().mousePressEvent(event)
            return

        pos = event.position()
        button = button_at(self._buttons, pos.x(), pos.y())
        if button is not None:
            self._trigger(button)
            return

        handle = handle_at(self._handles, pos.x(), pos.y())
        if handle is not None:
            self._drag = handle
            self.update()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        pos = event.position()
        if self._drag is not None:
            self.drag_to(self._drag, pos.x(), pos.y())
            return

        hover = handle_at(self._handles, pos.x(), pos.y())
        if hover != self._hover:
            self._hover = hover
            self._update_cursor()
            self.update()
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if self._drag is not None and event.button() == Qt.LeftButton:
            self._drag = None
            self.update()
            return
        super().mouseReleaseEvent(event)

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def drag_to(self, handle: ResizeHandle, x: float, y: float) -> None:
        """Resize the partition owning `handle` so its far edge follows (x, y)."""
        parent_rect = self._rects.get(handle.parent_id)
        own_rect = self._rects.get(handle.partition_id)
        if parent_rect is None or own_rect is None:
            # the handle belongs to a partition that no longer exists
            self._drag = None
            return
        start = own_rect.x if handle.axis is SplitDirection.VERTICAL else own_rect.y
        new_size = size_from_pointer(parent_rect, handle.axis, x, y, start=start)
        self.controller.resize(handle.partition_id, new_size)

    def _trigger(self, button: ControlButton) -> None:
        logger.debug(f"Button '{button.action}' on {button.partition_id}")
        if button.action is ControlAction.SPLIT_VERTICAL:
            self.controller.split(button.partition_id, SplitDirection.VERTICAL)
        elif button.action is ControlAction.SPLIT_HORIZONTAL:
            self.controller.split(button.partition_id, SplitDirection.HORIZONTAL)
        else:
            self.controller.remove(button.partition_id)

    def _relayout(self) -> None:
        tree = self.controller.tree
        bounds = Rect(0.0, 0.0, float(self.width()), float(self.height()))
        self._rects = compute_layout(tree, bounds)
        self._handles = resize_handles(tree, self._rects, HANDLE_THICKNESS)
        self._buttons = control_buttons(tree, self._rects, BUTTON_WIDTH, BUTTON_HEIGHT, BUTTON_SPACING)
        if self._hover is not None and self._hover not in self._handles:
            self._hover = None
            self._update_cursor()

    def _update_cursor(self) -> None:
        if self._hover is None:
            self.unsetCursor()
        elif self._hover.axis is SplitDirection.VERTICAL:
            self.setCursor(Qt.SplitHCursor)
        else:
            self.setCursor(Qt.SplitVCursor)
