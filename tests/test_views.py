# tests/test_views.py
"""
Tests for the expense report model, widgets and the main window.

The widgets are driven through a controller backed by an in-memory expense
source and a synchronous dispatcher, or a manual one where a fetch has to stay
in flight.

Run:
    python -m unittest tests.test_views
"""
import datetime
from typing import Any, List

from PySide6 import QtCore, QtGui

from ClinicLedger.core.session import Session, StaticSessionProvider
from ClinicLedger.data.controller import ExpenseReportController, State
from ClinicLedger.data.model.expense import Columns, ExpensesModel, IdRole
from ClinicLedger.data.records import Doctor
from ClinicLedger.data.view.chart import EarningsChart
from ClinicLedger.data.view.expense import ExpenseReportWidget, FilterBar, PaginationBar
from ClinicLedger.settings import lib
from ClinicLedger.status import status
from ClinicLedger.ui import ui
from ClinicLedger.ui.actions import signals
from ClinicLedger.ui.main import MainWindow
from tests.base import (
    BaseTestCase,
    FakeExpenseSource,
    ManualDispatcher,
    SyncDispatcher,
    make_record,
    mute_ui_signals,
)

TODAY = datetime.date(2024, 1, 10)


class ExpensesModelTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.model = ExpensesModel()
        self.records = [
            make_record('a1b2c3d4e5f6', datetime.datetime(2024, 1, 5, 10), 1500.0),
            make_record('ffff00001111', datetime.datetime(2024, 1, 6, 9), 0.0),
        ]
        self.model.init_data(self.records, 2)

    def test_shape(self):
        self.assertEqual(self.model.rowCount(), 2)
        self.assertEqual(self.model.columnCount(), len(Columns))
        self.assertEqual(self.model.columnCount(), 8)

    def test_headers(self):
        headers = [
            self.model.headerData(c, QtCore.Qt.Horizontal)
            for c in range(self.model.columnCount())
        ]
        self.assertEqual(headers[:4], ['Id', 'Doctor', 'Patient', 'Date'])
        self.assertEqual(headers[Columns.GrandTotal], 'Grand Total')
        self.assertEqual(self.model.headerData(0, QtCore.Qt.Vertical), '1')

    def test_display_values(self):
        def display(column: Columns) -> Any:
            return self.model.data(self.model.index(0, column), QtCore.Qt.DisplayRole)

        self.assertEqual(display(Columns.Id), 'a1b2c3d')
        self.assertEqual(display(Columns.Doctor), 'Dr. Rao')
        self.assertEqual(display(Columns.Patient), 'Asha - P-001')
        self.assertEqual(display(Columns.Date), '2024-01-05')
        self.assertEqual(display(Columns.Paid), 'Yes')
        self.assertEqual(display(Columns.PaymentMethod), 'Cash')
        self.assertIn('₹', display(Columns.GrandTotal))
        self.assertIn('1,500', display(Columns.GrandTotal))

    def test_id_and_edit_roles(self):
        index = self.model.index(1, Columns.GrandTotal)
        self.assertEqual(self.model.data(index, IdRole), 'ffff00001111')
        self.assertEqual(self.model.data(index, QtCore.Qt.EditRole), 0.0)
        self.assertEqual(
            self.model.data(self.model.index(0, Columns.Date), QtCore.Qt.EditRole),
            datetime.datetime(2024, 1, 5, 10),
        )

    def test_alignment(self):
        alignment = self.model.data(self.model.index(0, Columns.GrandTotal), QtCore.Qt.TextAlignmentRole)
        self.assertTrue(alignment & int(QtCore.Qt.AlignRight))

    def test_empty_page(self):
        self.model.init_data((), 0)
        self.assertEqual(self.model.rowCount(), 0)
        self.assertIsNone(self.model.data(self.model.index(0, 0)))


class FilterBarTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.bar = FilterBar()
        self.ranges: List[tuple] = []
        self.doctors: List[Any] = []
        self.bar.dateRangeChanged.connect(lambda start, end: self.ranges.append((start, end)))
        self.bar.doctorChanged.connect(self.doctors.append)

    def test_date_range_toggle(self):
        self.bar.range_toggle.setChecked(True)
        start, end = self.ranges[-1]
        self.assertIsInstance(start, QtCore.QDate)
        self.assertEqual(end, self.bar.end_edit.date())
        self.assertTrue(self.bar.start_edit.isEnabled())

        self.bar.range_toggle.setChecked(False)
        self.assertEqual(self.ranges[-1], (None, None))
        self.assertFalse(self.bar.start_edit.isEnabled())

    def test_set_doctors(self):
        self.bar.set_doctors([Doctor(id='D1', name='Dr. Rao'), Doctor(id='D2', name='Dr. Iyer')])
        combo = self.bar.doctor_combo
        self.assertEqual(combo.count(), 3)
        self.assertEqual(combo.itemText(0), 'All Doctors')
        self.assertIsNone(combo.itemData(0))
        self.assertEqual(self.doctors, [])

        combo.setCurrentIndex(2)
        self.assertEqual(self.doctors, ['D2'])

    def test_set_doctors_keeps_selection(self):
        doctors = [Doctor(id='D1', name='Dr. Rao'), Doctor(id='D2', name='Dr. Iyer')]
        self.bar.set_doctors(doctors)
        self.bar.doctor_combo.setCurrentIndex(1)

        self.bar.set_doctors(list(reversed(doctors)))
        self.assertEqual(self.bar.doctor_combo.currentData(), 'D1')

        self.bar.set_doctors([doctors[1]])
        self.assertIsNone(self.bar.doctor_combo.currentData())
        self.assertEqual(self.doctors[-1], None)


class PaginationBarTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.bar = PaginationBar()
        self.requests: List[tuple] = []
        self.bar.pageRequested.connect(lambda page, size: self.requests.append((page, size)))
        self.bar.set_pagination(1, 10)
        self.bar.set_total((), 25)

    def test_label_and_buttons(self):
        self.assertEqual(self.bar.page_label.text(), 'Page 1 of 3')
        self.assertFalse(self.bar.prev_button.isEnabled())
        self.assertTrue(self.bar.next_button.isEnabled())

        self.bar.set_pagination(3, 10)
        self.assertEqual(self.bar.page_label.text(), 'Page 3 of 3')
        self.assertTrue(self.bar.prev_button.isEnabled())
        self.assertFalse(self.bar.next_button.isEnabled())

    def test_navigation(self):
        self.bar.next_button.click()
        self.assertEqual(self.requests, [(2, 10)])

        self.bar.set_pagination(2, 10)
        self.bar.prev_button.click()
        self.assertEqual(self.requests[-1], (1, 10))

    def test_page_size_change_returns_to_first_page(self):
        self.bar.set_pagination(2, 10)
        self.bar.size_combo.setCurrentIndex(self.bar.size_combo.findData(20))
        self.assertEqual(self.requests, [(1, 20)])

    def test_set_pagination_does_not_request(self):
        self.bar.set_pagination(1, 50)
        self.assertEqual(self.bar.size_combo.currentData(), 50)
        self.assertEqual(self.requests, [])

    def test_no_records(self):
        self.bar.set_total((), 0)
        self.assertEqual(self.bar.page_label.text(), 'Page 1 of 1')
        self.assertFalse(self.bar.next_button.isEnabled())


class EarningsChartTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.chart = EarningsChart()
        self.chart.resize(400, 240)

    def test_set_series(self):
        self.chart.set_series(['Jan 09', 'Jan 10'], [100, 300])
        self.assertEqual(self.chart.labels, ['Jan 09', 'Jan 10'])
        self.assertEqual(self.chart.totals, [100.0, 300.0])

        bars = self.chart._geom.bars
        self.assertEqual(len(bars), 2)
        self.assertGreater(bars[1].height(), bars[0].height())
        self.assertFalse(self.chart.grab().isNull())

    def test_mismatched_series_is_ignored(self):
        self.chart.set_series(['Jan 10'], [1.0])
        with self.assertLogs(level='ERROR'):
            self.chart.set_series(['Jan 09', 'Jan 10'], [1.0])
        self.assertEqual(self.chart.totals, [1.0])

    def test_all_zero_series(self):
        self.chart.set_series(['a', 'b', 'c'], [0, 0, 0])
        self.assertTrue(all(b.height() == 0 for b in self.chart._geom.bars))
        self.assertFalse(self.chart.grab().isNull())

    def test_empty_series(self):
        self.chart.set_series(['a'], [5])
        self.chart.set_series([], [])
        self.assertEqual(self.chart.totals, [])
        self.assertEqual(self.chart._geom.bars, [])


class ReportWidgetTestCase(BaseTestCase):
    dispatcher_class = SyncDispatcher

    def setUp(self) -> None:
        super().setUp()
        self.source = FakeExpenseSource(
            records=[
                make_record(f'exp{i:04d}xyz', datetime.datetime(2024, 1, 10, 12), 100.0)
                for i in range(25)
            ],
            doctors=[Doctor(id='D1', name='Dr. Rao'), Doctor(id='D2', name='Dr. Iyer')],
        )
        self.session_provider = StaticSessionProvider(Session(token='t'))
        self.dispatcher = self.dispatcher_class()
        self.controller = ExpenseReportController(
            self.source,
            self.session_provider,
            self.dispatcher,
            confirm=lambda expense_id: True,
            today=lambda: TODAY,
        )
        self.widget = ExpenseReportWidget(controller=self.controller)

    def tearDown(self) -> None:
        signals.expenseDeleted.disconnect(self.controller.on_expense_deleted)
        signals.initializationRequested.disconnect(self.controller.start)
        super().tearDown()


class ExpenseReportWidgetTests(ReportWidgetTestCase):

    def test_start_populates_widgets(self):
        self.controller.start()

        self.assertEqual(self.widget.table.model().rowCount(), 10)
        self.assertEqual(self.widget.pagination_bar.page_label.text(), 'Page 1 of 3')
        self.assertEqual(self.widget.filter_bar.doctor_combo.count(), 3)
        self.assertEqual(len(self.widget.chart.labels), 7)
        self.assertEqual(self.widget.chart.totals[-1], 1000.0)
        self.assertTrue(self.widget.status_label.isHidden())
        self.assertTrue(self.widget.error_label.isHidden())

    def test_initialization_signal_starts_controller(self):
        signals.initializationRequested.emit()
        self.assertEqual(self.controller.state, State.Loaded)

    def test_page_navigation(self):
        self.controller.start()
        self.widget.pagination_bar.next_button.click()

        self.assertEqual(self.source.queries[-1]['page'], 2)
        self.assertEqual(self.widget.pagination_bar.page_label.text(), 'Page 2 of 3')

    def test_filters_apply_on_search(self):
        self.controller.start()
        queries = len(self.source.queries)

        self.widget.filter_bar.doctor_combo.setCurrentIndex(1)
        self.widget.filter_bar.range_toggle.setChecked(True)
        self.assertEqual(len(self.source.queries), queries)

        self.widget.filter_bar.search_button.click()
        query = self.source.queries[-1]
        self.assertEqual(query['doctorId'], 'D1')
        self.assertEqual(query['page'], 1)
        self.assertIn('startDate', query)
        self.assertIn('endDate', query)

    def test_empty_result_shows_placeholder(self):
        self.source.records = []
        self.controller.start()

        self.assertEqual(self.widget.table.model().rowCount(), 0)
        self.assertEqual(self.widget.table._placeholder, 'No Expenses Found')
        self.assertEqual(self.widget.chart.totals, [0.0] * 7)

    def test_error_shows_banner(self):
        self.controller.start()
        with mute_ui_signals():
            self.source.fail_with = status.ExpensesFetchException('HTTP 500')
        self.controller.fetch()

        self.assertFalse(self.widget.error_label.isHidden())
        self.assertIn('HTTP 500', self.widget.error_label.text())
        self.assertEqual(self.widget.table.model().rowCount(), 0)
        self.assertEqual(self.widget.table._placeholder, '')

        self.source.fail_with = None
        self.controller.fetch()
        self.assertTrue(self.widget.error_label.isHidden())

    def test_loading_state(self):
        self.widget.set_state(State.Loading.value)
        self.assertFalse(self.widget.status_label.isHidden())
        self.assertEqual(self.widget.status_label.text(), 'Loading...')
        self.assertTrue(self.widget.filter_bar.search_button.isEnabled())

        self.widget.set_state(State.Loaded.value)
        self.assertTrue(self.widget.status_label.isHidden())
        self.assertTrue(self.widget.filter_bar.search_button.isEnabled())

    def test_delete_action_deletes_current_row(self):
        self.controller.start()
        table = self.widget.table
        table.setCurrentIndex(table.model().index(0, 0))
        expense_id = table.current_expense_id()

        table.delete_action.trigger()

        self.assertEqual(self.source.deleted, [expense_id])
        self.assertEqual(self.controller.total_count, 24)
        self.assertNotIn(expense_id, [r.id for r in self.controller.records])

    def test_edit_action_reports_expense_id(self):
        self.controller.start()
        table = self.widget.table
        table.setCurrentIndex(table.model().index(2, 0))
        edited: List[str] = []
        table.editRequested.connect(edited.append)

        with mute_ui_signals():
            table.edit_action.trigger()

        self.assertEqual(edited, [self.controller.records[2].id])


class PendingFetchTests(ReportWidgetTestCase):
    dispatcher_class = ManualDispatcher

    def setUp(self) -> None:
        super().setUp()
        self.controller.start()
        # Doctors arrive, the first page stays in flight
        self.dispatcher.run(0)
        self.assertEqual(self.controller.state, State.Loading)
        self.assertEqual(self.dispatcher.pending, 1)

    def test_search_while_loading_commits_filters(self):
        self.assertTrue(self.widget.filter_bar.search_button.isEnabled())

        self.widget.filter_bar.doctor_combo.setCurrentIndex(1)
        self.widget.filter_bar.search_button.click()

        self.assertEqual(self.controller.filters.doctor_id, 'D1')
        self.assertEqual(self.dispatcher.pending, 2)

        self.dispatcher.run_all()

        self.assertEqual(self.source.queries[-1]['doctorId'], 'D1')
        self.assertEqual(self.controller.last_query['doctorId'], 'D1')
        self.assertEqual(self.controller.state, State.Loaded)
        self.assertTrue(self.widget.status_label.isHidden())

    def test_stale_page_does_not_reach_table(self):
        self.controller.set_page(2)

        # The newer page 2 arrives first, then the original page 1
        self.dispatcher.run(1)
        self.dispatcher.run(0)

        self.assertEqual(self.controller.pagination.current_page, 2)
        self.assertEqual(self.widget.table.model().record(0).id, self.source.records[10].id)


class MainWindowTests(ReportWidgetTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.window = MainWindow(report=self.widget)

    def tearDown(self) -> None:
        signals.metadataChanged.disconnect(self.window.metadata_changed)
        signals.error.disconnect(self.window.show_error)
        signals.showLogs.disconnect(self.window.show_logs)
        super().tearDown()

    def test_title_follows_report_name(self):
        self.assertEqual(self.window.windowTitle(), 'ClinicLedger - Expenses')
        lib.settings['name'] = 'Sunrise Clinic'
        self.assertEqual(self.window.windowTitle(), 'ClinicLedger - Sunrise Clinic')

    def test_sign_out_requests_sign_in(self):
        self.controller.start()
        requested: List[bool] = []
        self.controller.signInRequested.connect(lambda: requested.append(True))

        with mute_ui_signals():
            self.window.sign_out()

        self.assertIsNone(self.session_provider.current_session())
        self.assertEqual(requested, [True])

    def test_sign_out_clears_report(self):
        self.controller.start()
        self.assertEqual(self.widget.table.model().rowCount(), 10)

        with mute_ui_signals():
            self.window.sign_out()

        self.assertEqual(self.controller.state, State.Idle)
        self.assertEqual(self.widget.table.model().rowCount(), 0)
        self.assertEqual(self.widget.pagination_bar.page_label.text(), 'Page 1 of 1')
        self.assertEqual(len(self.widget.chart.labels), 7)
        self.assertEqual(self.widget.chart.totals, [0.0] * 7)

    def test_show_logs(self):
        self.window.show_logs()
        self.assertIsNotNone(self.window._log_dialog)
        self.window._log_dialog.close()


class UITests(BaseTestCase):

    def test_color_follows_theme(self):
        self.assertEqual(ui.Color.Text(), QtGui.QColor(33, 37, 41))
        lib.settings['theme'] = 'dark'
        self.assertEqual(ui.Color.Text(), QtGui.QColor(230, 233, 236))

    def test_color_qss(self):
        self.assertEqual(ui.Color.Error(qss=True), 'rgba(192,57,43,255)')

    def test_size(self):
        self.assertEqual(ui.Size.Margin(apply_scale=False), 16)
        self.assertEqual(ui.Size.Margin(0.5, apply_scale=False), 8)
        self.assertGreaterEqual(ui.Size.Margin(), 16)

    def test_stylesheet(self):
        stylesheet = ui.init_stylesheet()
        self.assertIn('QLabel#errorBanner', stylesheet)
