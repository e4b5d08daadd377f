"""Status definitions and exceptions for ClinicLedger.

This module provides:
    - Status: enumeration of possible application states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - Specific exceptions (e.g., ExpensesFetchException) raised by the expense service
"""
import enum
import logging
from typing import Dict


class Status(enum.StrEnum):
    """Enumeration of application status codes."""
    UnknownStatus = enum.auto()
    Okay = enum.auto()

    # Config status
    ReportConfigNotFound = enum.auto()
    ReportConfigInvalid = enum.auto()

    # Session status
    NotAuthenticated = enum.auto()

    # Remote expense source status
    ServiceUnavailable = enum.auto()
    ExpensesFetchFailed = enum.auto()
    ExpenseDeleteFailed = enum.auto()
    DoctorsFetchFailed = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status. Please check the settings.',
    Status.Okay: 'Everything is okay.',

    Status.ReportConfigNotFound: 'Could not find the report config.',
    Status.ReportConfigInvalid: 'The report config seems to be incomplete, or contains invalid values.',

    Status.NotAuthenticated: 'You are not signed in. Please sign in to view expenses.',

    Status.ServiceUnavailable: 'The expense service is unavailable. Please check your connection.',
    Status.ExpensesFetchFailed: 'Could not load expenses.',
    Status.ExpenseDeleteFailed: 'Could not delete the expense.',
    Status.DoctorsFetchFailed: 'Could not load the list of doctors.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in ClinicLedger.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): User-facing message for the status.

    Args:
        message (str): Optional additional context for the error.
    """
    status = Status.UnknownStatus

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.error(exception_message)

        from ..ui.actions import signals
        signals.error.emit(message or self.status_message)


class UnknownException(BaseStatusException):
    """Exception for an unknown error during status processing."""
    pass


class ReportConfigNotFoundException(BaseStatusException):
    """Exception raised when the report configuration file cannot be found."""
    status = Status.ReportConfigNotFound


class ReportConfigInvalidException(BaseStatusException):
    """Exception raised when the report configuration is invalid or malformed."""
    status = Status.ReportConfigInvalid


class NotAuthenticatedException(BaseStatusException):
    """Exception raised when there is no session or the server rejects it."""
    status = Status.NotAuthenticated


class ServiceUnavailableException(BaseStatusException):
    """Exception raised when the expense service cannot be reached."""
    status = Status.ServiceUnavailable


class ExpensesFetchException(BaseStatusException):
    """Exception raised when listing expenses fails."""
    status = Status.ExpensesFetchFailed


class ExpenseDeleteException(BaseStatusException):
    """Exception raised when deleting an expense fails."""
    status = Status.ExpenseDeleteFailed


class DoctorsFetchException(BaseStatusException):
    """Exception raised when the doctor list cannot be loaded."""
    status = Status.DoctorsFetchFailed
