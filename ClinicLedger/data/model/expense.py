import enum
import logging
from typing import Any, Optional, Sequence

from PySide6 import QtCore, QtGui

from ..records import ExpenseRecord
from ...settings import lib
from ...settings import locale
from ...ui import ui


class Columns(enum.IntEnum):
    Id = 0
    Doctor = 1
    Patient = 2
    Date = 3
    GrandTotal = 4
    Paid = 5
    PaymentMethod = 6
    TotalCost = 7


HEADERS = {
    Columns.Id: 'Id',
    Columns.Doctor: 'Doctor',
    Columns.Patient: 'Patient',
    Columns.Date: 'Date',
    Columns.GrandTotal: 'Grand Total',
    Columns.Paid: 'Paid',
    Columns.PaymentMethod: 'Payment Method',
    Columns.TotalCost: 'Total Cost',
}

IdRole = QtCore.Qt.UserRole + 1


def _format_paid(value: Any) -> str:
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if value is None:
        return ''
    return f'{value}'


class ExpensesModel(QtCore.QAbstractTableModel):
    """
    ExpensesModel displays the fetched page of expense records, one row per record.
    The snapshot is replaced wholesale whenever the report controller publishes a new page.
    """

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._data: tuple[ExpenseRecord, ...] = ()

    @QtCore.Slot(object, int)
    def init_data(self, records: Sequence[ExpenseRecord], total_count: int = 0) -> None:
        self.beginResetModel()
        try:
            self._data = tuple(records or ())
        except TypeError as ex:
            logging.error(f'Failed to load expense records: {ex}')
            self._data = ()
        finally:
            self.endResetModel()

    def record(self, row: int) -> Optional[ExpenseRecord]:
        if 0 <= row < len(self._data):
            return self._data[row]
        return None

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._data)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(Columns)

    def _currency(self, value: float) -> str:
        return locale.format_currency_value(value, lib.settings['locale'] or locale.DEFAULT_LOCALE)

    def _display(self, rec: ExpenseRecord, column: int) -> str:
        if column == Columns.Id:
            return rec.short_id
        if column == Columns.Doctor:
            return rec.doctor.name
        if column == Columns.Patient:
            return rec.patient.display_name if rec.patient else ''
        if column == Columns.Date:
            return rec.created_at.strftime('%Y-%m-%d')
        if column == Columns.GrandTotal:
            return self._currency(rec.grand_total)
        if column == Columns.Paid:
            return _format_paid(rec.paid)
        if column == Columns.PaymentMethod:
            return rec.payment_method
        if column == Columns.TotalCost:
            return self._currency(rec.total_cost)
        return ''

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole):
        """Returns data for the specified index and role.

        Args:
            index (QtCore.QModelIndex): The model index.
            role (int): The data role.

        Returns:
            Any: Data appropriate for the role, or None.
        """
        if not self._data or not index.isValid():
            return None
        rec = self.record(index.row())
        if rec is None:
            return None
        column = index.column()

        if role == QtCore.Qt.DisplayRole:
            return self._display(rec, column)

        if role == IdRole:
            return rec.id

        if role == QtCore.Qt.EditRole:
            if column == Columns.GrandTotal:
                return rec.grand_total
            if column == Columns.TotalCost:
                return rec.total_cost
            if column == Columns.Date:
                return rec.created_at
            return self._display(rec, column)

        if role in (QtCore.Qt.StatusTipRole, QtCore.Qt.ToolTipRole):
            if column == Columns.Id:
                return rec.id
            if column == Columns.Date:
                return rec.created_at.strftime('%Y-%m-%d %H:%M')
            return self._display(rec, column)

        if role == QtCore.Qt.TextAlignmentRole:
            if column in (Columns.GrandTotal, Columns.TotalCost):
                return int(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
            return int(QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter)

        if role == QtCore.Qt.FontRole and column == Columns.GrandTotal:
            font = QtGui.QFont()
            font.setBold(True)
            return font

        if role == QtCore.Qt.ForegroundRole:
            if column == Columns.Id:
                return ui.Color.SecondaryText()
            if column == Columns.GrandTotal and rec.grand_total == 0:
                return ui.Color.DisabledText()

        return None

    def headerData(self, section: int, orientation: QtCore.Qt.Orientation,
                   role: int = QtCore.Qt.DisplayRole) -> Any:
        if role != QtCore.Qt.DisplayRole:
            return None
        if orientation == QtCore.Qt.Horizontal:
            if 0 <= section < self.columnCount():
                return HEADERS[Columns(section)]
        elif orientation == QtCore.Qt.Vertical:
            return f'{section + 1}'
        return None

    def flags(self, index: QtCore.QModelIndex) -> QtCore.Qt.ItemFlags:
        if not index.isValid():
            return QtCore.Qt.NoItemFlags
        return QtCore.Qt.ItemIsEnabled | QtCore.Qt.ItemIsSelectable
