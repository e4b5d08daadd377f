"""Application-wide Qt signals and utility slots for ClinicLedger.

This module provides:
    - open_sign_in slot: opens the clinic web sign-in page in the browser.
    - open_expense_editor slot: opens the web editor for a single expense.
    - Signals: custom Qt signals for configuration changes, session requests,
      expense lifecycle events, and UI actions (showLogs, error).
"""
import logging

from PySide6 import QtCore, QtGui, QtWidgets


def _web_url(path: str) -> QtCore.QUrl:
    from ..settings import lib

    config = lib.settings.get_section('api')

    try:
        base: str = config['web_url']
    except Exception as ex:
        logging.error(f'Error retrieving web url config: {ex}')
        QtWidgets.QMessageBox.critical(None, 'Error', 'Invalid web url configuration.')
        raise

    return QtCore.QUrl(f'{base.rstrip("/")}/{path.lstrip("/")}')


@QtCore.Slot()
def open_sign_in() -> None:
    """
    Opens the clinic sign-in page in the default browser.
    """
    url = _web_url('signin')
    logging.debug(f'Opening sign-in page: {url.toString()}')
    QtGui.QDesktopServices.openUrl(url)


@QtCore.Slot(str)
def open_expense_editor(expense_id: str) -> None:
    """
    Opens the web editor of the given expense in the default browser.
    """
    url = _web_url(f'update-expenses/{expense_id}')
    logging.debug(f'Opening expense editor: {url.toString()}')
    QtGui.QDesktopServices.openUrl(url)


class Signals(QtCore.QObject):
    """Centralized Qt signals for application config, session, and expense events."""
    initializationRequested = QtCore.Signal()

    authenticationRequested = QtCore.Signal()

    configSectionChanged = QtCore.Signal(str)
    metadataChanged = QtCore.Signal(str, object)

    expenseDeleted = QtCore.Signal(str)
    editExpenseRequested = QtCore.Signal(str)

    showLogs = QtCore.Signal()

    error = QtCore.Signal(str)

    def __init__(self):
        super().__init__()
        self._connect_signals()

    def _connect_signals(self):
        self.authenticationRequested.connect(open_sign_in)
        self.editExpenseRequested.connect(open_expense_editor)


signals = Signals()
