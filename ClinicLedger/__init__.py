"""
ClinicLedger: desktop expense report for a clinic management backend.

This package provides:

- :mod:`ClinicLedger.core` – Session access and the clinic expense API client with asynchronous operations.
- :mod:`ClinicLedger.data` – Expense records, filter and pagination state, daily earnings aggregation (:func:`ClinicLedger.data.data.get_daily_earnings`), the report controller, and Qt models and views.
- :mod:`ClinicLedger.ui` – Application signals, theme, and the PySide6 main window.
- :mod:`ClinicLedger.settings` – Report configuration management with schema validation, and currency formatting.
- :mod:`ClinicLedger.log` – In-app logging.

Use :func:`ClinicLedger.exec_` to launch the application.
"""

import sys

from PySide6 import QtCore

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('ClinicLedger requires Python 3.11 or higher.')

__version__ = '0.1.0'
__license__ = 'GPL-3.0'
__description__ = 'ClinicLedger: desktop expense report with filtering, pagination and daily earnings.'

from .log import log

log.setup_logging()


def exec_() -> None:
    """Launch the ClinicLedger GUI application and enter its event loop.

    Initializes the QApplication, shows the main window, and starts the Qt event loop.
    """
    from .ui import app
    from .ui import main
    from .ui.actions import signals
    app = app.Application(sys.argv)
    main.show()

    # Ask components to load their data
    QtCore.QTimer.singleShot(100, signals.initializationRequested)

    sys.exit(app.exec())


if __name__ == '__main__':
    exec_()
