"""Expense report widgets.

This module provides:
    - FilterBar: date range and doctor selection with an explicit Search action
    - PaginationBar: page navigation and page size selection
    - ExpensesView: the expense table with Edit and Delete row actions
    - ExpenseReportWidget: the composed report wired to an ExpenseReportController
"""
import logging
from typing import List, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ..controller import ExpenseReportController, State
from ..model.expense import Columns, ExpensesModel, IdRole
from ..records import Doctor
from .chart import EarningsChart
from ...settings import lib
from ...ui import ui
from ...ui.actions import signals


class FilterBar(QtWidgets.QWidget):
    """Filter controls of the expense report.

    Edits are only reported; they are applied when the user clicks Search.

    Signals:
        dateRangeChanged (object, object): The start and end dates, or (None, None) when cleared.
        doctorChanged (object): The selected doctor id, None for all doctors.
        searchRequested (): The user asked to apply the filters.
    """
    dateRangeChanged = QtCore.Signal(object, object)
    doctorChanged = QtCore.Signal(object)
    searchRequested = QtCore.Signal()

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.range_toggle: QtWidgets.QCheckBox
        self.start_edit: QtWidgets.QDateEdit
        self.end_edit: QtWidgets.QDateEdit
        self.doctor_combo: QtWidgets.QComboBox
        self.search_button: QtWidgets.QPushButton

        self._create_ui()
        self._connect_signals()
        self.set_doctors([])

    def _create_ui(self) -> None:
        QtWidgets.QHBoxLayout(self)
        o = ui.Size.Indicator(2.0)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(o)

        self.range_toggle = QtWidgets.QCheckBox('Date range', parent=self)
        self.range_toggle.setChecked(False)
        self.layout().addWidget(self.range_toggle)

        today = QtCore.QDate.currentDate()
        self.start_edit = QtWidgets.QDateEdit(today.addDays(-6), parent=self)
        self.end_edit = QtWidgets.QDateEdit(today, parent=self)
        for editor in (self.start_edit, self.end_edit):
            editor.setCalendarPopup(True)
            editor.setDisplayFormat('yyyy-MM-dd')
            editor.setEnabled(False)
        self.layout().addWidget(self.start_edit)
        self.layout().addWidget(QtWidgets.QLabel('to', parent=self))
        self.layout().addWidget(self.end_edit)

        self.doctor_combo = QtWidgets.QComboBox(parent=self)
        self.doctor_combo.setMinimumWidth(ui.Size.DefaultWidth(0.25))
        self.layout().addWidget(self.doctor_combo)

        self.layout().addStretch(1)

        self.search_button = QtWidgets.QPushButton('Search', parent=self)
        self.layout().addWidget(self.search_button)

    def _connect_signals(self) -> None:
        self.range_toggle.toggled.connect(self.start_edit.setEnabled)
        self.range_toggle.toggled.connect(self.end_edit.setEnabled)
        self.range_toggle.toggled.connect(self.emit_date_range)
        self.start_edit.dateChanged.connect(self.emit_date_range)
        self.end_edit.dateChanged.connect(self.emit_date_range)

        self.doctor_combo.currentIndexChanged.connect(
            lambda _: self.doctorChanged.emit(self.doctor_combo.currentData()))

        self.search_button.clicked.connect(self.searchRequested)

    @QtCore.Slot()
    def emit_date_range(self) -> None:
        if not self.range_toggle.isChecked():
            self.dateRangeChanged.emit(None, None)
            return
        self.dateRangeChanged.emit(self.start_edit.date(), self.end_edit.date())

    @QtCore.Slot(list)
    def set_doctors(self, doctors: List[Doctor]) -> None:
        current = self.doctor_combo.currentData()

        self.doctor_combo.blockSignals(True)
        try:
            self.doctor_combo.clear()
            self.doctor_combo.addItem('All Doctors', None)
            for doctor in doctors:
                self.doctor_combo.addItem(doctor.name, doctor.id)

            idx = self.doctor_combo.findData(current) if current is not None else 0
            self.doctor_combo.setCurrentIndex(max(idx, 0))
        finally:
            self.doctor_combo.blockSignals(False)

        if self.doctor_combo.currentData() != current:
            self.doctorChanged.emit(self.doctor_combo.currentData())


class PaginationBar(QtWidgets.QWidget):
    """Page navigation for the expense table.

    Signals:
        pageRequested (int, int): The requested page and page size.
    """
    pageRequested = QtCore.Signal(int, int)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self._page: int = 1
        self._page_size: int = lib.DEFAULT_PAGE_SIZE
        self._total: int = 0

        self._create_ui()
        self._connect_signals()
        self._update_ui()

    def _create_ui(self) -> None:
        QtWidgets.QHBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(ui.Size.Indicator(2.0))

        self.size_combo = QtWidgets.QComboBox(parent=self)
        for size in lib.PAGE_SIZE_OPTIONS:
            self.size_combo.addItem(f'{size} / page', size)
        self.layout().addWidget(self.size_combo)

        self.layout().addStretch(1)

        self.prev_button = QtWidgets.QPushButton('Previous', parent=self)
        self.layout().addWidget(self.prev_button)

        self.page_label = QtWidgets.QLabel(parent=self)
        self.page_label.setAlignment(QtCore.Qt.AlignCenter)
        self.layout().addWidget(self.page_label)

        self.next_button = QtWidgets.QPushButton('Next', parent=self)
        self.layout().addWidget(self.next_button)

    def _connect_signals(self) -> None:
        self.prev_button.clicked.connect(lambda: self.pageRequested.emit(self._page - 1, self._page_size))
        self.next_button.clicked.connect(lambda: self.pageRequested.emit(self._page + 1, self._page_size))

        @QtCore.Slot(int)
        def size_changed(idx: int) -> None:
            size = self.size_combo.itemData(idx)
            if size is None or size == self._page_size:
                return
            self.pageRequested.emit(1, size)

        self.size_combo.currentIndexChanged.connect(size_changed)

    @property
    def page_count(self) -> int:
        return max(1, -(-self._total // self._page_size))

    @QtCore.Slot(int, int)
    def set_pagination(self, page: int, page_size: int) -> None:
        self._page = page
        self._page_size = page_size
        self._update_ui()

    @QtCore.Slot(object, int)
    def set_total(self, records: object, total_count: int) -> None:
        self._total = max(int(total_count), 0)
        self._update_ui()

    def _update_ui(self) -> None:
        self.page_label.setText(f'Page {self._page} of {self.page_count}')
        self.prev_button.setEnabled(self._page > 1)
        self.next_button.setEnabled(self._page < self.page_count)

        self.size_combo.blockSignals(True)
        idx = self.size_combo.findData(self._page_size)
        if idx >= 0:
            self.size_combo.setCurrentIndex(idx)
        self.size_combo.blockSignals(False)


class ExpensesView(QtWidgets.QTableView):
    """Table view for the fetched page of expenses.

    Signals:
        editRequested (str): Edit action triggered for the expense id.
        deleteRequested (str): Delete action triggered for the expense id.
    """
    editRequested = QtCore.Signal(str)
    deleteRequested = QtCore.Signal(str)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self._placeholder: str = ''

        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)
        self.setShowGrid(False)
        self.setWordWrap(False)

        self.setModel(ExpensesModel(parent=self))
        self._init_section_sizing()
        self._init_actions()

        self.model().modelReset.connect(self.resizeColumnsToContents)

    def _init_section_sizing(self) -> None:
        header = self.horizontalHeader()
        header.setDefaultAlignment(QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter)
        header.setStretchLastSection(False)
        header.setSectionResizeMode(QtWidgets.QHeaderView.Interactive)
        header.setSectionResizeMode(Columns.Patient.value, QtWidgets.QHeaderView.Stretch)
        header.setSectionsMovable(False)

        header = self.verticalHeader()
        header.setDefaultSectionSize(ui.Size.RowHeight(1.0))
        header.setHidden(True)

    def _init_actions(self) -> None:
        action = QtGui.QAction('Edit', self)
        action.setToolTip('Edit the selected expense')
        action.setStatusTip('Edit the selected expense')
        action.triggered.connect(self._emit_for_current(self.editRequested))
        self.addAction(action)
        self.edit_action = action

        action = QtGui.QAction('Delete', self)
        action.setToolTip('Delete the selected expense')
        action.setStatusTip('Delete the selected expense')
        action.setShortcut(QtGui.QKeySequence.Delete)
        action.setShortcutContext(QtCore.Qt.WidgetWithChildrenShortcut)
        action.triggered.connect(self._emit_for_current(self.deleteRequested))
        self.addAction(action)
        self.delete_action = action

    def _emit_for_current(self, signal):
        @QtCore.Slot()
        def emit() -> None:
            expense_id = self.current_expense_id()
            if expense_id:
                signal.emit(expense_id)

        return emit

    def current_expense_id(self) -> Optional[str]:
        index = self.currentIndex()
        if not index.isValid():
            return None
        return self.model().data(index, IdRole)

    def set_placeholder(self, text: str) -> None:
        self._placeholder = text
        self.viewport().update()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        """Draw the table and, if no rows are present, overlay the placeholder message."""
        super().paintEvent(event)
        if not self._placeholder or self.model().rowCount() != 0:
            return

        painter = QtGui.QPainter(self.viewport())
        painter.setPen(ui.Color.DisabledText())
        painter.drawText(self.viewport().rect(), QtCore.Qt.AlignCenter, self._placeholder)
        painter.end()


class ExpenseReportWidget(QtWidgets.QWidget):
    """The expense report: filters, earnings chart, expense table and pagination.

    Args:
        controller: The report controller. When omitted one is created with the
            configured expense API, the file session provider and a thread dispatcher.
    """

    def __init__(self, controller: Optional[ExpenseReportController] = None,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        if controller is None:
            controller = self._default_controller()
        self.controller = controller

        self.filter_bar: FilterBar
        self.chart: EarningsChart
        self.error_label: QtWidgets.QLabel
        self.status_label: QtWidgets.QLabel
        self.table: ExpensesView
        self.pagination_bar: PaginationBar

        self._create_ui()
        self._connect_signals()

        self.pagination_bar.set_pagination(
            self.controller.pagination.current_page,
            self.controller.pagination.page_size,
        )

    def _default_controller(self) -> ExpenseReportController:
        from ...core.service import QThreadDispatcher, get_service
        from ...core.session import session_provider

        return ExpenseReportController(
            get_service(),
            session_provider,
            QThreadDispatcher(parent=self),
            chart_days=lib.settings['chart_days'] or 7,
            page_size=lib.settings['page_size'],
            parent=self,
        )

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(0.5)
        self.layout().setContentsMargins(o, o, o, o)
        self.layout().setSpacing(o)

        self.filter_bar = FilterBar(parent=self)
        self.layout().addWidget(self.filter_bar)

        self.chart = EarningsChart(parent=self)
        self.layout().addWidget(self.chart)

        self.error_label = QtWidgets.QLabel(parent=self)
        self.error_label.setObjectName('errorBanner')
        self.error_label.setWordWrap(True)
        self.error_label.setHidden(True)
        self.layout().addWidget(self.error_label)

        self.status_label = QtWidgets.QLabel(parent=self)
        self.status_label.setHidden(True)
        self.layout().addWidget(self.status_label)

        self.table = ExpensesView(parent=self)
        self.layout().addWidget(self.table, 1)

        self.pagination_bar = PaginationBar(parent=self)
        self.layout().addWidget(self.pagination_bar)

    def _connect_signals(self) -> None:
        c = self.controller

        self.filter_bar.dateRangeChanged.connect(c.set_date_range)
        self.filter_bar.doctorChanged.connect(c.set_doctor)
        self.filter_bar.searchRequested.connect(c.apply_filters)
        self.pagination_bar.pageRequested.connect(c.set_page)

        self.table.deleteRequested.connect(c.request_delete)
        self.table.editRequested.connect(signals.editExpenseRequested)

        c.expensesChanged.connect(self.table.model().init_data)
        c.expensesChanged.connect(self.pagination_bar.set_total)
        c.chartChanged.connect(self.chart.set_series)
        c.paginationChanged.connect(self.pagination_bar.set_pagination)
        c.doctorsChanged.connect(self.filter_bar.set_doctors)
        c.errorChanged.connect(self.set_error)
        c.stateChanged.connect(self.set_state)

        signals.initializationRequested.connect(c.start)

    @QtCore.Slot(str)
    def set_error(self, message: str) -> None:
        self.error_label.setText(message)
        self.error_label.setHidden(not message)

    @QtCore.Slot(str)
    def set_state(self, state: str) -> None:
        logging.debug(f'Expense report state: {state}')
        loading = state == State.Loading
        self.status_label.setText('Loading...' if loading else '')
        self.status_label.setHidden(not loading)

        if state == State.Loaded and self.controller.is_empty:
            self.table.set_placeholder('No Expenses Found')
        else:
            self.table.set_placeholder('')
