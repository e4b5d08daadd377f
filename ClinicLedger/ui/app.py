"""Application setup utilities and custom QApplication for ClinicLedger.

This module provides:
    - set_application_properties: enable high-DPI support
    - Application: subclass of QApplication configuring application metadata and theme
"""
import sys
from typing import Optional, Sequence

from PySide6 import QtCore, QtWidgets


def set_application_properties() -> None:
    """Enables high-dpi pixmaps."""
    QtWidgets.QApplication.setHighDpiScaleFactorRoundingPolicy(
        QtCore.Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )


class Application(QtWidgets.QApplication):
    """Custom QApplication setting the application metadata and theme."""

    def __init__(self, argv: Optional[Sequence[str]] = None) -> None:
        set_application_properties()
        if argv is None:
            argv = sys.argv

        super().__init__(list(argv))

        from .. import __version__
        from ..settings import lib
        self.setApplicationName(lib.app_name)
        self.setOrganizationName('')
        self.setApplicationVersion(__version__)
        self.setQuitOnLastWindowClosed(True)

        from . import ui
        ui.apply_theme()
