"""Daily earnings bar chart.

This module provides:
    - paint decorator: wraps paint helpers with save/restore and error logging
    - Geometry: container for calculated drawing regions
    - EarningsChart: custom QWidget showing one bar per day of the earnings window
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ...settings import lib
from ...settings import locale
from ...ui import ui


def paint(func):  # type: ignore[valid-type]
    """Decorator to wrap paint helpers with save/restore + exception log."""

    def wrapper(self, painter: QtGui.QPainter) -> None:  # type: ignore[valid-type]
        painter.save()
        try:
            func(self, painter)
        except Exception as ex:
            logging.error(f'EarningsChart: error in {func.__name__}', exc_info=ex)
        painter.restore()

    return wrapper


@dataclass
class Geometry:
    """All pixel-space objects bundled in one container."""
    area: QtCore.QRectF = field(default_factory=QtCore.QRectF)
    bars: list[QtCore.QRectF] = field(default_factory=list)
    slots: list[QtCore.QRectF] = field(default_factory=list)
    baseline_y: float = 0.0
    data_max: float = 0.0


class EarningsChart(QtWidgets.QWidget):
    """Custom QWidget painting the daily earnings of the rolling window as bars.

    The chart is fed through :meth:`set_series` with parallel label and total lists,
    as emitted by the report controller's ``chartChanged`` signal.
    """

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._labels: List[str] = []
        self._totals: List[float] = []

        self._geom: Geometry = Geometry()
        self._hover_index: Optional[int] = None

        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent)
        self.setMouseTracking(True)
        self.setMinimumHeight(ui.Size.RowHeight(6.0))

    @property
    def labels(self) -> List[str]:
        return list(self._labels)

    @property
    def totals(self) -> List[float]:
        return list(self._totals)

    @QtCore.Slot(list, list)
    def set_series(self, labels: List[str], totals: List[float]) -> None:
        if len(labels) != len(totals):
            logging.error(f'Mismatched chart series: {len(labels)} labels, {len(totals)} totals.')
            return
        self._labels = [str(v) for v in labels]
        self._totals = [float(v) for v in totals]
        self._hover_index = None
        self._rebuild_geometry()
        self.update()

    def _rebuild_geometry(self) -> None:
        geom = Geometry()

        o = ui.Size.Margin(1.0)
        label_h = ui.Size.SmallText(2.0)
        geom.area = QtCore.QRectF(self.rect()).adjusted(o, o, -o, -o - label_h)
        geom.baseline_y = geom.area.bottom()
        geom.data_max = max(self._totals) if self._totals else 0.0

        n = len(self._totals)
        if n == 0 or geom.area.width() <= 0 or geom.area.height() <= 0:
            self._geom = geom
            return

        slot_w = geom.area.width() / n
        bar_w = slot_w * 0.6
        for i, total in enumerate(self._totals):
            x = geom.area.left() + slot_w * i
            geom.slots.append(QtCore.QRectF(x, geom.area.top(), slot_w, geom.area.height() + label_h))

            h = (total / geom.data_max) * geom.area.height() if geom.data_max > 0 else 0.0
            geom.bars.append(QtCore.QRectF(
                x + (slot_w - bar_w) / 2.0,
                geom.baseline_y - h,
                bar_w,
                h,
            ))

        self._geom = geom

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(ui.Size.DefaultWidth(1.0), ui.Size.DefaultHeight(0.5))

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        self._rebuild_geometry()
        super().resizeEvent(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        pos = event.position()
        index = next((i for i, r in enumerate(self._geom.slots) if r.contains(pos)), None)
        if index != self._hover_index:
            self._hover_index = index
            if index is not None:
                self.setToolTip(
                    f'{self._labels[index]}: '
                    f'{locale.format_currency_value(self._totals[index], lib.settings["locale"])}'
                )
            else:
                self.setToolTip('')
            self.update()
        super().mouseMoveEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:
        self._hover_index = None
        self.update()
        super().leaveEvent(event)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        self._draw_background(painter)
        self._draw_baseline(painter)
        self._draw_bars(painter)
        self._draw_labels(painter)
        self._draw_legend(painter)
        painter.end()

    @paint
    def _draw_background(self, painter: QtGui.QPainter) -> None:
        painter.fillRect(self.rect(), ui.Color.Surface())

    @paint
    def _draw_baseline(self, painter: QtGui.QPainter) -> None:
        geom = self._geom
        pen = QtGui.QPen(ui.Color.DisabledText())
        pen.setCosmetic(True)
        pen.setWidthF(ui.Size.Separator(1.0))
        painter.setPen(pen)
        painter.drawLine(
            QtCore.QPointF(geom.area.left(), geom.baseline_y),
            QtCore.QPointF(geom.area.right(), geom.baseline_y),
        )

    @paint
    def _draw_bars(self, painter: QtGui.QPainter) -> None:
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        painter.setPen(QtCore.Qt.NoPen)

        color = ui.Color.Earnings()
        r = ui.Size.Indicator(0.5)
        for i, rect in enumerate(self._geom.bars):
            if rect.height() <= 0:
                continue
            painter.setBrush(color.lighter(120) if i == self._hover_index else color)
            painter.drawRoundedRect(rect, r, r)

    @paint
    def _draw_labels(self, painter: QtGui.QPainter) -> None:
        painter.setPen(ui.Color.SecondaryText())
        metrics = painter.fontMetrics()
        for label, slot in zip(self._labels, self._geom.slots):
            rect = QtCore.QRectF(
                slot.left(),
                self._geom.baseline_y + ui.Size.Indicator(1.0),
                slot.width(),
                metrics.height(),
            )
            painter.drawText(rect, QtCore.Qt.AlignHCenter | QtCore.Qt.AlignTop, label)

    @paint
    def _draw_legend(self, painter: QtGui.QPainter) -> None:
        if not self._totals:
            return
        total = sum(self._totals)
        text = f'Earnings: {locale.format_currency_value(total, lib.settings["locale"])}'
        painter.setPen(ui.Color.Text())
        o = ui.Size.Margin(0.5)
        painter.drawText(
            QtCore.QRectF(self.rect()).adjusted(o, o, -o, -o),
            QtCore.Qt.AlignRight | QtCore.Qt.AlignTop,
            text,
        )
