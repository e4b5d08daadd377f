"""Earnings aggregation for the expense report chart.

This module reduces the currently fetched page of expense records into a rolling window
of daily earnings. The aggregation is done client side over the records it is given.
"""
import datetime
import logging
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from .records import ExpenseRecord
from ..settings import lib

DEFAULT_WINDOW_DAYS: int = 7
LABEL_FORMAT: str = '%b %d'


def _window(today: datetime.date, days: int) -> List[datetime.date]:
    """Return the ``days`` calendar days ending at ``today``, oldest first."""
    return [today - datetime.timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def _records_frame(records: Optional[Iterable[ExpenseRecord]]) -> pd.DataFrame:
    rows = [{'day': r.created_at, 'grand_total': r.grand_total} for r in (records or ())]
    if not rows:
        return pd.DataFrame({
            'day': pd.Series(dtype='datetime64[ns]'),
            'grand_total': pd.Series(dtype='float64'),
        })
    return pd.DataFrame(rows)


def _conform_day_column(df: pd.DataFrame) -> pd.DataFrame:
    """Truncate creation timestamps to calendar days."""
    df['day'] = pd.to_datetime(df['day'], errors='coerce')
    clean_df = df.dropna(subset=['day'])
    if len(df) != len(clean_df):
        logging.warning(f'Dropped {len(df) - len(clean_df)} expenses with an invalid creation date.')
    clean_df = clean_df.copy()
    clean_df['day'] = clean_df['day'].dt.date
    return clean_df


def _conform_amount_column(df: pd.DataFrame) -> pd.DataFrame:
    df['grand_total'] = pd.to_numeric(df['grand_total'], errors='coerce').fillna(0.0).astype('float64')
    return df


def get_daily_earnings(
        records: Optional[Iterable[ExpenseRecord]],
        today: Optional[datetime.date] = None,
        days: int = DEFAULT_WINDOW_DAYS,
) -> pd.DataFrame:
    """Sum grand totals into one bucket per calendar day of the rolling window.

    Records created outside the window are ignored. An empty or None input yields
    all-zero buckets.

    Args:
        records: The fetched expense records.
        today: The last day of the window. Defaults to the local current date.
        days: Number of days in the window.

    Returns:
        pd.DataFrame: Exactly ``days`` rows ordered oldest to newest, with columns
            ['day', 'label', 'total'].
    """
    if days < 1:
        raise ValueError(f'Window must span at least one day, got {days}.')
    today = today or datetime.date.today()
    if isinstance(today, datetime.datetime):
        today = today.date()

    window = _window(today, days)

    df = (
        _records_frame(records)
        .pipe(_conform_day_column)
        .pipe(_conform_amount_column)
    )
    df = df[df['day'].isin(window)]

    totals = (
        df.groupby('day')['grand_total'].sum()
        .reindex(window, fill_value=0.0)
        .astype('float64')
    )

    out = pd.DataFrame({
        'day': window,
        'label': [day.strftime(LABEL_FORMAT) for day in window],
        'total': totals.values,
    })
    return out[lib.DAILY_EARNINGS_COLUMNS]


def get_chart_series(
        records: Optional[Iterable[ExpenseRecord]],
        today: Optional[datetime.date] = None,
        days: int = DEFAULT_WINDOW_DAYS,
) -> Tuple[List[str], List[float]]:
    """Return parallel ``(labels, totals)`` lists ready for a bar chart."""
    df = get_daily_earnings(records, today=today, days=days)
    return df['label'].tolist(), [float(v) for v in df['total'].tolist()]
