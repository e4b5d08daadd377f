"""Filter and pagination state, date range normalization and list query building.

The helpers here are pure: they never touch the network or Qt state and are safe to
call before every fetch.
"""
import dataclasses
import datetime
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from PySide6 import QtCore
from dateutil import parser as date_parser

from ..settings.lib import PAGE_SIZE_OPTIONS, DEFAULT_PAGE_SIZE

DATE_FORMAT: str = '%Y-%m-%d'


def _is_unset(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (QtCore.QDate, QtCore.QDateTime)) and (value.isNull() or not value.isValid()):
        return True
    return False


def to_day(value: Any) -> datetime.date:
    """Convert a date-picker value to its local calendar day.

    Args:
        value: A date, datetime, QDate, QDateTime or date string.

    Returns:
        datetime.date: The calendar day.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, QtCore.QDateTime):
        value = value.toLocalTime().date()
    if isinstance(value, QtCore.QDate):
        return datetime.date(value.year(), value.month(), value.day())
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            return to_day(date_parser.parse(value.strip()))
        except (ValueError, OverflowError) as ex:
            raise ValueError(f'Invalid date: {value!r}') from ex
    raise ValueError(f'Invalid date: {value!r}')


def normalize_date_range(start: Any, end: Any) -> Tuple[Optional[str], Optional[str]]:
    """Normalize raw date-picker values to canonical ``YYYY-MM-DD`` strings.

    Clearing either side of the range clears both sides.

    Returns:
        tuple: ``(start_date, end_date)``, both strings or both None.
    """
    if _is_unset(start) or _is_unset(end):
        return None, None
    return to_day(start).strftime(DATE_FORMAT), to_day(end).strftime(DATE_FORMAT)


@dataclass(frozen=True)
class FilterState:
    """The filter selection. None means "no constraint" for every field."""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    doctor_id: Optional[str] = None

    def with_date_range(self, start: Any, end: Any) -> 'FilterState':
        start_date, end_date = normalize_date_range(start, end)
        if start_date and end_date and start_date > end_date:
            logging.warning(f'Start date {start_date} is after end date {end_date}.')
        return dataclasses.replace(self, start_date=start_date, end_date=end_date)

    def with_doctor(self, doctor_id: Optional[str]) -> 'FilterState':
        return dataclasses.replace(self, doctor_id=None if _is_unset(doctor_id) else str(doctor_id))


@dataclass(frozen=True)
class PaginationState:
    """1-indexed page number and page size."""
    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if not isinstance(self.current_page, int) or self.current_page < 1:
            raise ValueError(f'Page must be a positive integer, got {self.current_page!r}.')
        if self.page_size not in PAGE_SIZE_OPTIONS:
            raise ValueError(f'Page size must be one of {PAGE_SIZE_OPTIONS}, got {self.page_size!r}.')

    def first_page(self) -> 'PaginationState':
        return dataclasses.replace(self, current_page=1)

    def page_count(self, total_count: int) -> int:
        """Number of pages for ``total_count`` records, at least 1."""
        return max(1, -(-max(total_count, 0) // self.page_size))


def build_query(filters: FilterState, pagination: PaginationState) -> Dict[str, Any]:
    """Map the filter and pagination state to list-expenses query parameters.

    Unset filter fields are left out so the remote source treats them as no constraint.
    """
    query: Dict[str, Any] = {
        'page': pagination.current_page,
        'pageSize': pagination.page_size,
    }
    if filters.doctor_id:
        query['doctorId'] = filters.doctor_id
    if filters.start_date:
        query['startDate'] = filters.start_date
    if filters.end_date:
        query['endDate'] = filters.end_date
    return query
