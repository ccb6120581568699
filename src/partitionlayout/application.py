from __future__ import annotations

import os
import sys

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import QCoreApplication, QSettings

ORG_ID = "partitionlayout"
APP_ID = "partition-layout"
ORG_DOMAIN = "partitionlayout.local"

VISIBLE_APP_NAME = "Partition Layout"


def create_app(argv: list[str] | None = None) -> QApplication:
    """Create and configure the QApplication instance (or return the running one)."""
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")

    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setOrganizationDomain(ORG_DOMAIN)
    QCoreApplication.setApplicationName(APP_ID)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv if argv is None else argv)

    visible_name = QCoreApplication.translate("App", VISIBLE_APP_NAME)
    app.setApplicationDisplayName(visible_name)

    return app
