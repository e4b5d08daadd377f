"""Look and feel of the ClinicLedger window.

Provides:
    - Theme: the light and dark themes selectable in the report settings
    - Size: pixel sizes, scaled by the screen's logical DPI
    - Color: the report palette, resolved against the active theme
    - apply_theme: installs the application style sheet
"""
import enum
import logging
import os

from PySide6 import QtWidgets, QtGui

BASE_DPI: float = 96.0


class Theme(enum.StrEnum):
    Light = 'light'
    Dark = 'dark'


def _dpi_scale() -> float:
    app = QtWidgets.QApplication.instance()
    if not app or not app.primaryScreen():
        return 1.0
    return max(app.primaryScreen().logicalDotsPerInch() / BASE_DPI, 1.0)


class Size(enum.Enum):
    """Pixel sizes used by the report widgets."""
    SmallText = 10.0
    MediumText = 12.0
    Indicator = 4.0
    Separator = 1.0
    Margin = 16.0
    RowHeight = 30.0
    DefaultWidth = 720.0
    DefaultHeight = 520.0

    def __call__(self, multiplier=1.0, apply_scale=True):
        """
        Args:
            multiplier (float): Factor applied to the base size.
            apply_scale (bool): Scale by the screen's DPI.

        Returns:
            int: The size in pixels.
        """
        value = float(self.value) * float(multiplier)
        if apply_scale:
            value *= _dpi_scale()
        return round(value)


class Color(enum.Enum):
    """Report palette. Each member maps a theme name to an RGB(A) tuple."""
    Transparent = {'light': (0, 0, 0, 0), 'dark': (0, 0, 0, 0)}
    Window = {'light': (248, 250, 251), 'dark': (36, 40, 44)}
    Surface = {'light': (255, 255, 255), 'dark': (28, 31, 34)}
    Header = {'light': (226, 234, 238), 'dark': (52, 58, 64)}
    Text = {'light': (33, 37, 41), 'dark': (230, 233, 236)}
    SecondaryText = {'light': (84, 94, 104), 'dark': (170, 178, 186)}
    DisabledText = {'light': (150, 158, 166), 'dark': (110, 118, 126)}
    Accent = {'light': (0, 128, 128), 'dark': (64, 180, 172)}
    Earnings = {'light': (46, 139, 87), 'dark': (98, 190, 132)}
    Error = {'light': (192, 57, 43), 'dark': (236, 112, 99)}

    @staticmethod
    def theme():
        """The active theme name, light when the setting is unknown."""
        from ..settings import lib
        theme = lib.settings['theme']
        return theme if theme in [t.value for t in Theme] else Theme.Light.value

    def __call__(self, qss=False):
        """
        Args:
            qss (bool): Return an ``rgba(...)`` string instead of a QColor.
        """
        color = QtGui.QColor(*self.value.get(self.theme(), self.value[Theme.Light.value]))
        if qss:
            return 'rgba({})'.format(','.join(str(c) for c in color.getRgb()))
        return color


STYLESHEET = """
QWidget {{
    background-color: {Window};
    color: {Text};
    font-size: {MediumText}px;
}}
QTableView {{
    background-color: {Surface};
    alternate-background-color: {Window};
    gridline-color: {Header};
    selection-background-color: {Accent};
}}
QHeaderView::section {{
    background-color: {Header};
    color: {SecondaryText};
    padding: {Indicator}px;
    border: none;
}}
QPushButton {{
    background-color: {Accent};
    color: rgba(255,255,255,255);
    border-radius: {Indicator}px;
    padding: {Indicator}px {Margin}px;
}}
QPushButton:disabled {{
    background-color: {Header};
    color: {DisabledText};
}}
QLabel#errorBanner {{
    color: {Error};
}}
"""


def init_stylesheet() -> str:
    """Fill the style sheet template with the active palette and sizes."""
    values = {c.name: c(qss=True) for c in Color}
    values.update({s.name: s() for s in Size})
    return STYLESHEET.format(**values)


def apply_theme() -> None:
    """Install the style sheet on the running application.

    Setting ``CLINICLEDGER_DISABLE_STYLESHEET`` to 1, true or yes skips it.
    """
    app = QtWidgets.QApplication.instance()
    if not app:
        raise RuntimeError('apply_theme() must be called after a QApplication is initiated.')

    if os.environ.get('CLINICLEDGER_DISABLE_STYLESHEET', '').lower() in ('1', 'true', 'yes'):
        logging.warning('Stylesheet disabled by environment variable.')
        return

    app.setStyleSheet(init_stylesheet())
