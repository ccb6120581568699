"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) objects and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the layout model (PartitionTree) inside its controller.
2. Instantiates the Main Window (View).
3. Passes the controller into the View so they can communicate.
4. Prevents circular import errors by being the orchestrator.
"""
import logging

from partitionlayout.application import create_app
from partitionlayout.config import LOG_LEVEL
from partitionlayout.controller.tree_controller import TreeController
from partitionlayout.logging_config import setup_logging
from partitionlayout.model.tree import PartitionTree
from partitionlayout.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def main() -> int:
    # 1. Setup Logging (PARTITIONLAYOUT_LOG_LEVEL=DEBUG to see every resize)
    setup_logging(level=LOG_LEVEL)
    logger.info("Starting partition layout editor.")

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the Data Model; the controller creates the root cell
    controller = TreeController(PartitionTree(create_root=False))

    # 4. Initialize the Main Window, passing the controller
    window = MainWindow(controller)
    window.show()

    # 5. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
