"""Logging setup for ClinicLedger.

Records go to stdout and to an in-memory ``TankHandler`` that backs the log
dialog of the main window. Qt's own messages are forwarded to the ``Qt`` logger.
"""
import logging
import sys

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from ..ui.actions import signals

LOG_LEVEL = logging.DEBUG
LOG_FORMAT = '[%(asctime)s] <%(module)s> %(levelname)s:  %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

VALID_LEVELS = (
    logging.DEBUG,
    logging.INFO,
    logging.WARNING,
    logging.ERROR,
    logging.CRITICAL,
)

QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def set_logging_level(level):
    """
    Change the level of the root logger and of every installed handler.

    Args:
        level (int): One of ``VALID_LEVELS``.

    Raises:
        ValueError: If ``level`` is not an int or not a standard level.
    """
    if not isinstance(level, int):
        raise ValueError(f'Logging level must be an integer, got {type(level)}.')
    if level not in VALID_LEVELS:
        raise ValueError(f'Invalid logging level {level}, must be one of {VALID_LEVELS}.')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def qt_message_handler(mode, context, message):
    """Forward a Qt message to the ``Qt`` logger. Fatal messages exit the app."""
    level = QT_LEVELS.get(mode, logging.INFO)
    logging.getLogger('Qt').log(level, message.strip())

    if mode == QtMsgType.QtFatalMsg:
        sys.exit(1)


def setup_logging(enable_stream_handler=True, enable_qt_handler=True, log_level=LOG_LEVEL):
    """
    Reset the root logger and install the ClinicLedger handlers.

    Args:
        enable_stream_handler (bool): Also print records to stdout.
        enable_qt_handler (bool): Install :func:`qt_message_handler` for Qt messages.
        log_level (int): Level of the root logger and its handlers.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # Repeated setup must not stack handlers
    root_logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    handlers = [TankHandler()]
    if enable_stream_handler:
        handlers.insert(0, logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        root_logger.addHandler(handler)

    if enable_qt_handler:
        qInstallMessageHandler(qt_message_handler)


def get_tank():
    """Returns the TankHandler installed on the root logger, or None."""
    return next((h for h in logging.getLogger().handlers if isinstance(h, TankHandler)), None)


class TankHandler(logging.Handler):
    """
    Keeps formatted records in memory for the log dialog.

    Records of level ERROR and above also emit ``signals.showLogs`` so the
    dialog pops up when a fetch or delete fails.

    Attributes:
        tank (list[tuple[int, str]]): ``(levelno, message)`` pairs in arrival order.
    """

    def __init__(self):
        super().__init__()
        self.tank = []

    def emit(self, record):
        try:
            self.tank.append((record.levelno, self.format(record)))
        except Exception:
            self.handleError(record)
            return

        if record.levelno >= logging.ERROR:
            signals.showLogs.emit()

    def get_logs(self, level=logging.NOTSET):
        """
        Args:
            level (int): Minimum level of the returned messages.

        Returns:
            list[str]: The stored messages at or above ``level``.
        """
        return [message for levelno, message in self.tank if levelno >= level]

    def clear_logs(self):
        self.tank.clear()
