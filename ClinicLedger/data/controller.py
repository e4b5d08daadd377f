"""Expense report controller.

Owns the filter and pagination state of the report, issues list and delete requests
against the remote expense source, and publishes the fetched page and its daily
earnings series to the views.

Every fetch is tagged with an increasing request id. Only the response of the latest
dispatched request is applied; responses of superseded requests are dropped.
"""
import enum
import logging
from typing import Any, Callable, List, Optional, Tuple

from PySide6 import QtCore, QtWidgets

from .data import get_chart_series
from .filters import FilterState, PaginationState, build_query
from .records import Doctor, ExpensePage, ExpenseRecord
from ..core.session import SessionProvider
from ..status import status
from ..ui.actions import signals


class State(enum.StrEnum):
    Idle = 'idle'
    Loading = 'loading'
    Loaded = 'loaded'
    Error = 'error'


def confirm_delete(expense_id: str) -> bool:
    """Ask the user to confirm deleting an expense."""
    result = QtWidgets.QMessageBox.question(
        None,
        'Delete Expense',
        'Are you sure?',
        QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        QtWidgets.QMessageBox.No,
    )
    return result == QtWidgets.QMessageBox.Yes


class ExpenseReportController(QtCore.QObject):
    """Filter, paginate and aggregate pipeline behind the expense report.

    Args:
        source: The remote expense source (see :class:`ClinicLedger.core.service.ExpenseSource`).
        session_provider: Queried before every fetch; without a session nothing is fetched.
        dispatcher: Object with ``dispatch(func, on_result, on_error)`` running calls asynchronously.
        confirm: Callable asked before a delete is dispatched.
        today: Callable returning the reference day of the earnings window.
        chart_days: Number of days in the earnings window.
        page_size: Initial page size.

    Signals:
        stateChanged (str): The new :class:`State`.
        expensesChanged (object, int): The record snapshot (tuple) and the total count.
        chartChanged (list, list): Day labels and totals, oldest first.
        paginationChanged (int, int): Current page and page size.
        errorChanged (str): The error message, empty when cleared.
        doctorsChanged (list): Doctors available for filtering.
        signInRequested (): Emitted when a fetch is attempted without a session.
    """
    stateChanged = QtCore.Signal(str)
    expensesChanged = QtCore.Signal(object, int)
    chartChanged = QtCore.Signal(list, list)
    paginationChanged = QtCore.Signal(int, int)
    errorChanged = QtCore.Signal(str)
    doctorsChanged = QtCore.Signal(list)
    signInRequested = QtCore.Signal()

    def __init__(self, source, session_provider: SessionProvider, dispatcher,
                 confirm: Callable[[str], bool] = confirm_delete,
                 today: Optional[Callable[[], Any]] = None,
                 chart_days: int = 7,
                 page_size: Optional[int] = None,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)

        self.source = source
        self.session_provider = session_provider
        self.dispatcher = dispatcher
        self.confirm = confirm
        self.today = today
        self.chart_days = chart_days

        self._state: State = State.Idle
        self._pending_filters = FilterState()
        self._filters = FilterState()
        self._pagination = PaginationState(page_size=page_size) if page_size else PaginationState()

        self._request_id: int = 0
        self._last_query: Optional[dict] = None

        self._records: Tuple[ExpenseRecord, ...] = ()
        self._total_count: int = 0
        self._error: str = ''
        self._doctors: List[Doctor] = []

        self._connect_signals()

    def _connect_signals(self) -> None:
        signals.expenseDeleted.connect(self.on_expense_deleted)

    # Read-only state

    @property
    def state(self) -> State:
        return self._state

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def pending_filters(self) -> FilterState:
        return self._pending_filters

    @property
    def pagination(self) -> PaginationState:
        return self._pagination

    @property
    def records(self) -> Tuple[ExpenseRecord, ...]:
        return self._records

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def error(self) -> str:
        return self._error

    @property
    def doctors(self) -> List[Doctor]:
        return list(self._doctors)

    @property
    def is_empty(self) -> bool:
        return self._state == State.Loaded and not self._records

    @property
    def last_query(self) -> Optional[dict]:
        return self._last_query

    def chart_series(self) -> Tuple[List[str], List[float]]:
        """Labels and totals of the earnings window for the current snapshot."""
        today = self.today() if self.today else None
        return get_chart_series(self._records, today=today, days=self.chart_days)

    # Triggers

    @QtCore.Slot()
    def start(self) -> None:
        """Initial load: fetch doctors and the first page."""
        if not self._require_session():
            return
        self.fetch_doctors()
        self.fetch()

    @QtCore.Slot(object, object)
    def set_date_range(self, start: Any, end: Any) -> None:
        """Edit the pending date range. Takes effect on :meth:`apply_filters`."""
        self._pending_filters = self._pending_filters.with_date_range(start, end)

    @QtCore.Slot(object)
    def set_doctor(self, doctor_id: Optional[str]) -> None:
        """Edit the pending doctor filter. Takes effect on :meth:`apply_filters`."""
        self._pending_filters = self._pending_filters.with_doctor(doctor_id)

    @QtCore.Slot()
    def apply_filters(self) -> None:
        """Commit the pending filters and fetch from the first page."""
        self._filters = self._pending_filters
        self._set_pagination(self._pagination.first_page())
        self.fetch()

    @QtCore.Slot(int, int)
    def set_page(self, page: int, page_size: Optional[int] = None) -> None:
        """Navigate to a page, optionally with a new page size."""
        self._set_pagination(PaginationState(
            current_page=page,
            page_size=page_size or self._pagination.page_size,
        ))
        self.fetch()

    @QtCore.Slot(str)
    def on_expense_deleted(self, expense_id: str) -> None:
        logging.debug(f'Expense "{expense_id}" delete finished, reloading.')
        self.fetch()

    @QtCore.Slot()
    def fetch(self) -> None:
        """Fetch the page described by the current filters and pagination."""
        if not self._require_session():
            return

        query = build_query(self._filters, self._pagination)
        self._request_id += 1
        request_id = self._request_id
        self._last_query = query

        self._set_state(State.Loading)
        logging.debug(f'Fetching expenses #{request_id}: {query}')

        self.dispatcher.dispatch(
            lambda: self.source.list_expenses(query),
            lambda page: self._on_fetch_result(request_id, page),
            lambda ex: self._on_fetch_error(request_id, ex),
        )

    @QtCore.Slot()
    def fetch_doctors(self) -> None:
        self.dispatcher.dispatch(
            self.source.list_doctors,
            self._on_doctors_result,
            self._on_doctors_error,
        )

    @QtCore.Slot(str)
    def request_delete(self, expense_id: str) -> bool:
        """Delete an expense after the user confirms.

        Returns:
            bool: True if the delete was dispatched.
        """
        if not expense_id:
            return False
        if not self.confirm(expense_id):
            logging.debug(f'Delete of expense "{expense_id}" cancelled.')
            return False

        self.dispatcher.dispatch(
            lambda: self.source.delete_expense(expense_id),
            lambda _: self._on_delete_finished(expense_id, None),
            lambda ex: self._on_delete_finished(expense_id, ex),
        )
        return True

    # Results

    def _on_fetch_result(self, request_id: int, page: ExpensePage) -> None:
        if request_id != self._request_id:
            logging.debug(f'Discarding stale expenses response #{request_id} (latest #{self._request_id}).')
            return

        # A delete can leave the current page past the last one
        last_page = self._pagination.page_count(page.total_count)
        if page.is_empty and page.total_count > 0 and self._pagination.current_page > last_page:
            logging.debug(f'Page {self._pagination.current_page} is past the last page {last_page}.')
            self.set_page(last_page)
            return

        self._records = tuple(page.records)
        self._total_count = page.total_count
        self._set_error('')
        self._set_state(State.Loaded)
        self._publish()

    def _on_fetch_error(self, request_id: int, ex: Exception) -> None:
        if request_id != self._request_id:
            logging.debug(f'Discarding stale expenses error #{request_id}: {ex}')
            return

        if isinstance(ex, status.NotAuthenticatedException):
            self.signInRequested.emit()
            signals.authenticationRequested.emit()

        self._records = ()
        self._total_count = 0
        self._set_error(str(ex) or ex.__class__.__name__)
        self._set_state(State.Error)
        self._publish()

    def _on_delete_finished(self, expense_id: str, ex: Optional[Exception]) -> None:
        if ex is not None:
            logging.warning(f'Delete of expense "{expense_id}" failed: {ex}')
        signals.expenseDeleted.emit(expense_id)

    def _on_doctors_result(self, doctors: List[Doctor]) -> None:
        self._doctors = list(doctors)
        self.doctorsChanged.emit(list(self._doctors))

    def _on_doctors_error(self, ex: Exception) -> None:
        logging.error(f'Failed to load doctors: {ex}')
        self._doctors = []
        self.doctorsChanged.emit([])

    # Helpers

    def _require_session(self) -> bool:
        if self.session_provider.current_session() is not None:
            return True
        logging.warning('No session found, sign-in required.')

        # Responses still in flight belong to the previous session
        self._request_id += 1
        self._records = ()
        self._total_count = 0
        self._set_error('')
        self._set_state(State.Idle)
        self._publish()

        self.signInRequested.emit()
        signals.authenticationRequested.emit()
        return False

    def _publish(self) -> None:
        self.expensesChanged.emit(self._records, self._total_count)
        labels, totals = self.chart_series()
        self.chartChanged.emit(labels, totals)

    def _set_state(self, state: State) -> None:
        if state == self._state and state != State.Loading:
            return
        self._state = state
        self.stateChanged.emit(state.value)

    def _set_error(self, message: str) -> None:
        if message == self._error:
            return
        self._error = message
        self.errorChanged.emit(message)

    def _set_pagination(self, pagination: PaginationState) -> None:
        if pagination == self._pagination:
            return
        self._pagination = pagination
        self.paginationChanged.emit(pagination.current_page, pagination.page_size)
