"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the partition canvas and
the Status Bar.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (like Layout -> New) and controller
   signals to the widgets that display them.
"""
from __future__ import annotations

import logging

from PySide6.QtWidgets import QMainWindow, QLabel
from PySide6.QtGui import QAction

from partitionlayout.controller.tree_controller import TreeController
from partitionlayout.model.partition import TreeChange
from partitionlayout.view.partition_canvas import PartitionCanvas

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Partition Layout"
STATUS_TIMEOUT_MS = 3000


class MainWindow(QMainWindow):
    def __init__(self, controller: TreeController) -> None:
        super().__init__()
        self.controller = controller

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1200, 800)

        # --- CENTRAL CANVAS ---
        self.canvas = PartitionCanvas(self.controller, self)
        self.setCentralWidget(self.canvas)

        # --- STATUS BAR ---
        self.lbl_count = QLabel()
        self.statusBar().addPermanentWidget(self.lbl_count)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        # --- SIGNAL CONNECTIONS ---
        self.controller.tree_changed.connect(self.on_tree_changed)
        self.controller.tree_replaced.connect(self.on_tree_changed)
        self.controller.operation_rejected.connect(self.on_operation_rejected)

        self.update_partition_count()

    def _create_actions(self) -> None:
        self.act_new = QAction("New Layout", self)
        self.act_new.setShortcut("Ctrl+N")
        self.act_new.triggered.connect(self.on_layout_new)

        self.act_exit = QAction("Exit", self)
        self.act_exit.setShortcut("Ctrl+Q")
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        layout_menu = menu_bar.addMenu("&Layout")
        layout_menu.addAction(self.act_new)
        layout_menu.addSeparator()
        layout_menu.addAction(self.act_exit)

    # --- HELPER METHODS ---

    def update_partition_count(self) -> None:
        tree = self.controller.tree
        self.lbl_count.setText(f"Partitions: {tree.partition_count}  |  Cells: {len(tree.leaves())}")

    # --- SLOTS ---

    def on_tree_changed(self, change: TreeChange | object = None) -> None:
        self.update_partition_count()

    def on_operation_rejected(self, reason: str) -> None:
        self.statusBar().showMessage(reason, STATUS_TIMEOUT_MS)

    def on_layout_new(self) -> None:
        self.controller.reset()
        self.statusBar().showMessage("New layout created.", STATUS_TIMEOUT_MS)
