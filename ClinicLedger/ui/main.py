"""Main window composition and UI entry points for ClinicLedger.

This module defines:
    - show(): initialize and display the main window
    - MainWindow: the window hosting the expense report and its toolbar actions
"""
import logging
from typing import Optional

from PySide6 import QtWidgets, QtCore, QtGui

from . import ui
from ..data.view.expense import ExpenseReportWidget
from ..settings import lib
from ..ui.actions import signals

widget = None


def show():
    global widget

    if widget is None:
        widget = MainWindow()

    widget.show()


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, report: Optional[ExpenseReportWidget] = None,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ClinicLedgerMainWindow')

        self.toolbar: QtWidgets.QToolBar
        self.report = report
        self._log_dialog: Optional[QtWidgets.QDialog] = None

        self._create_ui()
        self._init_actions()
        self._connect_signals()
        self.update_title()

    def _create_ui(self) -> None:
        if self.report is None:
            self.report = ExpenseReportWidget(parent=self)
        self.report.setObjectName('ClinicLedgerExpenseReport')
        self.setCentralWidget(self.report)

        self.toolbar = QtWidgets.QToolBar(self)
        self.toolbar.setObjectName('ClinicLedgerActionToolBar')
        self.toolbar.setMovable(False)
        self.addToolBar(QtCore.Qt.TopToolBarArea, self.toolbar)

        self.setStatusBar(QtWidgets.QStatusBar(self))

    def _init_actions(self) -> None:
        action = QtGui.QAction('Refresh', self)
        action.setShortcut(QtGui.QKeySequence.Refresh)
        action.setStatusTip('Reload the current page of expenses')
        action.triggered.connect(self.report.controller.fetch)
        self.toolbar.addAction(action)

        action = QtGui.QAction(self)
        action.setSeparator(True)
        self.toolbar.addAction(action)

        action = QtGui.QAction('Sign In', self)
        action.setStatusTip('Open the clinic sign-in page')
        action.triggered.connect(signals.authenticationRequested)
        self.toolbar.addAction(action)

        action = QtGui.QAction('Sign Out', self)
        action.setStatusTip('Forget the saved session')
        action.triggered.connect(self.sign_out)
        self.toolbar.addAction(action)

        action = QtGui.QAction('Logs', self)
        action.setStatusTip('Show the application log')
        action.triggered.connect(signals.showLogs)
        self.toolbar.addAction(action)

    def _connect_signals(self) -> None:
        signals.metadataChanged.connect(self.metadata_changed)
        signals.error.connect(self.show_error)
        signals.showLogs.connect(self.show_logs)

    @QtCore.Slot(str, object)
    def metadata_changed(self, key: str, value: object) -> None:
        if key == 'name':
            self.update_title()

    @QtCore.Slot(str)
    def show_error(self, message: str) -> None:
        self.statusBar().showMessage(message, 5000)

    @QtCore.Slot()
    def update_title(self) -> None:
        name = lib.settings['name']
        self.setWindowTitle(f'{lib.app_name} - {name}' if name else lib.app_name)

    @QtCore.Slot()
    def sign_out(self) -> None:
        self.report.controller.session_provider.sign_out()
        logging.info('Signed out.')
        self.report.controller.fetch()

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(ui.Size.DefaultWidth(1.5), ui.Size.DefaultHeight(1.5))

    @QtCore.Slot()
    def show_logs(self) -> None:
        from ..log import log

        tank = log.get_tank()
        if self._log_dialog is None:
            self._log_dialog = QtWidgets.QDialog(self)
            self._log_dialog.setWindowTitle('Logs')
            QtWidgets.QVBoxLayout(self._log_dialog)
            editor = QtWidgets.QPlainTextEdit(self._log_dialog)
            editor.setReadOnly(True)
            self._log_dialog.layout().addWidget(editor)
            self._log_dialog.resize(ui.Size.DefaultWidth(1.0), ui.Size.DefaultHeight(0.75))

        editor = self._log_dialog.findChild(QtWidgets.QPlainTextEdit)
        editor.setPlainText('\n'.join(tank.get_logs(logging.INFO)) if tank else '')
        editor.moveCursor(QtGui.QTextCursor.End)
        self._log_dialog.show()
        self._log_dialog.raise_()
