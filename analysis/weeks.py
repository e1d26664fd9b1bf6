"""
analysis/weeks.py
-----------------
Split a date range into ISO weeks (Monday to Sunday).

The weekly snapshots fed to analysis/weekly_series.py are fetched per
week; this gives callers the week boundaries to fetch them by.
"""

from datetime import date, timedelta
from typing import List

import pandas as pd

from reference.models import DateRange


def _as_date(day) -> date:
    return pd.Timestamp(day).date()


def week_start(day) -> date:
    """Monday of the ISO week containing day."""
    day = _as_date(day)
    return day - timedelta(days=day.weekday())


def weeks_from_range(date_from, date_to) -> List[DateRange]:
    """
    Every ISO week overlapping [date_from, date_to], oldest first.

    Accepts anything pandas.Timestamp understands (date, datetime, ISO
    string). Both ends are widened to whole weeks.
    """
    first = week_start(date_from)
    last = _as_date(date_to)
    if last < _as_date(date_from):
        raise ValueError(f"date_to ({last}) is before date_from ({_as_date(date_from)}).")

    mondays = pd.date_range(start=first, end=last, freq="W-MON")
    return [
        DateRange(start=monday.date(), end=(monday + pd.Timedelta(days=6)).date())
        for monday in mondays
    ]
