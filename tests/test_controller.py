"""Tests for the Qt controller and the canvas/window wiring."""
import numpy as np
import pytest
from PySide6.QtCore import Qt, QEvent, QPointF
from PySide6.QtGui import QMouseEvent
from PySide6.QtWidgets import QApplication

from partitionlayout.controller.tree_controller import TreeController
from partitionlayout.model.colors import ColorAllocator
from partitionlayout.model.layout import ControlAction
from partitionlayout.model.partition import Outcome, SplitDirection
from partitionlayout.model.tree import PartitionTree
from partitionlayout.view.main_window import MainWindow
from partitionlayout.view.partition_canvas import PartitionCanvas, to_qcolor


def seeded_tree():
    return PartitionTree(ColorAllocator(np.random.default_rng(5)))


def send_mouse(widget, event_type, x, y, buttons=Qt.LeftButton):
    button = Qt.NoButton if event_type == QEvent.MouseMove else Qt.LeftButton
    pos = QPointF(x, y)
    event = QMouseEvent(event_type, pos, widget.mapToGlobal(pos), button, buttons, Qt.NoModifier)
    QApplication.sendEvent(widget, event)


def click(widget, x, y):
    send_mouse(widget, QEvent.MouseButtonPress, x, y)
    send_mouse(widget, QEvent.MouseButtonRelease, x, y, buttons=Qt.NoButton)


@pytest.fixture
def controller(qapp):
    return TreeController(tree_factory=seeded_tree)


@pytest.fixture
def canvas(controller):
    widget = PartitionCanvas(controller)
    widget.resize(400, 300)
    widget.refresh()
    yield widget
    widget.deleteLater()


def test_controller_creates_root_for_empty_tree(qapp):
    controller = TreeController(PartitionTree(create_root=False))
    assert controller.tree.root_id is not None
    assert controller.tree.partition_count == 1


def test_split_emits_tree_changed(controller):
    changes, rejections = [], []
    controller.tree_changed.connect(changes.append)
    controller.operation_rejected.connect(rejections.append)

    change = controller.split(controller.tree.root_id, SplitDirection.VERTICAL)

    assert change.ok
    assert changes == [change]
    assert rejections == []


def test_rejected_intent_emits_reason(controller):
    changes, rejections = [], []
    controller.tree_changed.connect(changes.append)
    controller.operation_rejected.connect(rejections.append)

    change = controller.remove(controller.tree.root_id)

    assert change.outcome is Outcome.ROOT_REMOVAL_FORBIDDEN
    assert changes == []
    assert rejections == ["The root partition cannot be removed."]


def test_resize_goes_through_controller(controller):
    controller.split(controller.tree.root_id, "horizontal")
    first_id, second_id = controller.tree.root.children

    assert controller.resize(first_id, 60).ok
    assert controller.tree.partitions[second_id].size == pytest.approx(40)
    assert not controller.resize(first_id, 95).ok


def test_reset_replaces_tree(controller):
    replaced = []
    controller.tree_replaced.connect(replaced.append)
    old_tree = controller.tree
    controller.split(old_tree.root_id, SplitDirection.VERTICAL)

    controller.reset()

    assert replaced == [controller.tree]
    assert controller.tree is not old_tree
    assert controller.tree.partition_count == 1

    # the old tree no longer reaches the controller
    changes = []
    controller.tree_changed.connect(changes.append)
    old_tree.remove_partition(old_tree.root.children[0])
    assert changes == []


# ------------------------------------------------------------------------------
# Canvas
# ------------------------------------------------------------------------------

def test_canvas_follows_tree_changes(canvas, controller):
    assert len(canvas.rects) == 1
    assert canvas.handles == []

    controller.split(controller.tree.root_id, SplitDirection.VERTICAL)

    assert len(canvas.rects) == 3
    assert len(canvas.handles) == 1
    assert len(canvas.buttons) == 6


def test_clicking_split_button_splits_leaf(canvas, controller):
    button = next(b for b in canvas.buttons if b.action is ControlAction.SPLIT_HORIZONTAL)
    cx, cy = button.rect.center

    click(canvas, cx, cy)

    assert controller.tree.root.split is SplitDirection.HORIZONTAL


def test_clicking_remove_button_removes_leaf(canvas, controller):
    controller.split(controller.tree.root_id, SplitDirection.VERTICAL)
    first_id, second_id = controller.tree.root.children
    button = next(
        b for b in canvas.buttons if b.action is ControlAction.REMOVE and b.partition_id == first_id
    )
    cx, cy = button.rect.center

    click(canvas, cx, cy)

    assert controller.tree.root_id == second_id
    assert len(canvas.rects) == 1


def test_dragging_handle_resizes_partitions(canvas, controller):
    controller.split(controller.tree.root_id, SplitDirection.VERTICAL)
    first_id, second_id = controller.tree.root.children
    handle = canvas.handles[0]

    canvas.drag_to(handle, 300, 150)
    assert controller.tree.partitions[first_id].size == pytest.approx(75)
    assert controller.tree.partitions[second_id].size == pytest.approx(25)

    # dragging past the edge is clamped to 90 %
    canvas.drag_to(handle, 399, 150)
    assert controller.tree.partitions[first_id].size == pytest.approx(90)


def test_mouse_drag_on_handle(canvas, controller):
    controller.split(controller.tree.root_id, SplitDirection.VERTICAL)
    first_id, _ = controller.tree.root.children

    send_mouse(canvas, QEvent.MouseButtonPress, 200, 20)
    send_mouse(canvas, QEvent.MouseMove, 100, 20)
    send_mouse(canvas, QEvent.MouseButtonRelease, 100, 20, buttons=Qt.NoButton)

    assert controller.tree.partitions[first_id].size == pytest.approx(25)


def test_canvas_paints_without_errors(canvas, controller):
    controller.split(controller.tree.root_id, SplitDirection.VERTICAL)
    pixmap = canvas.grab()
    assert not pixmap.isNull()


def test_to_qcolor_matches_hsl(controller):
    color = controller.tree.root.color
    qcolor = to_qcolor(color)
    assert qcolor.hslHueF() * 360 == pytest.approx(color.hue, abs=0.5)
    assert qcolor.hslSaturationF() * 100 == pytest.approx(color.saturation, abs=0.5)
    assert qcolor.lightnessF() * 100 == pytest.approx(color.lightness, abs=0.5)


# ------------------------------------------------------------------------------
# Main window
# ------------------------------------------------------------------------------

def test_main_window_shows_counts_and_rejections(controller):
    window = MainWindow(controller)
    assert window.lbl_count.text() == "Partitions: 1  |  Cells: 1"

    controller.split(controller.tree.root_id, SplitDirection.VERTICAL)
    assert window.lbl_count.text() == "Partitions: 3  |  Cells: 2"

    controller.split(controller.tree.root_id, SplitDirection.VERTICAL)
    assert "already split" in window.statusBar().currentMessage()

    window.act_new.trigger()
    assert window.lbl_count.text() == "Partitions: 1  |  Cells: 1"
    window.deleteLater()
