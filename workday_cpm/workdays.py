"""
Workday calendar arithmetic.

Monday to Friday are working days; Saturday and Sunday are the only
excluded days (no holiday calendar). All inputs are reduced to calendar
dates first, so time-of-day never affects a result.
"""
from __future__ import annotations

from datetime import date, datetime

import numpy as np
import pandas as pd

WEEKMASK = "1111100"
ONE_DAY = np.timedelta64(1, "D")


def to_date(value: object) -> date:
    """Truncate a date-like value to a plain ``datetime.date``."""
    if value is pd.NaT:
        raise ValueError("Cannot use NaT as a schedule date.")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            raise ValueError("Cannot use NaT as a schedule date.")
        return np.datetime64(value, "D").item()
    if isinstance(value, str):
        return pd.Timestamp(value.strip()).date()
    raise TypeError(f"Expected a date, got {type(value).__name__}.")


def _np_day(day: date) -> np.datetime64:
    return np.datetime64(day, "D")


def is_workday(day: date) -> bool:
    return bool(np.is_busday(_np_day(day), weekmask=WEEKMASK))


def add_workdays(day: date, n: int) -> date:
    """
    Advance ``n`` business days from ``day``.

    ``n <= 0`` returns ``day`` unchanged. From a weekend day the first
    step lands on the following Monday.
    """
    if n <= 0:
        return day
    # Rolling a weekend back to Friday makes the first step land on Monday.
    result = np.busday_offset(_np_day(day), n, roll="backward", weekmask=WEEKMASK)
    return result.item()


def subtract_workdays(day: date, n: int) -> date:
    """Move back ``n`` business days from ``day``; ``n <= 0`` is a no-op."""
    if n <= 0:
        return day
    result = np.busday_offset(_np_day(day), -n, roll="forward", weekmask=WEEKMASK)
    return result.item()


def shift_workdays(day: date, n: int) -> date:
    """Apply a signed lag of ``n`` workdays."""
    if n > 0:
        return add_workdays(day, n)
    if n < 0:
        return subtract_workdays(day, -n)
    return day


def next_workday(day: date) -> date:
    """First workday strictly after ``day``."""
    return add_workdays(day, 1)


def first_workday_on_or_after(day: date) -> date:
    result = np.busday_offset(_np_day(day), 0, roll="forward", weekmask=WEEKMASK)
    return result.item()


def finish_date(start: date, duration: int) -> date:
    """Finish of an activity starting on ``start``; a 1-day task ends the same day."""
    if duration <= 0:
        return start
    return add_workdays(start, duration - 1)


def count_workdays(start: date, end: date) -> int:
    """Number of business days in ``[start, end]`` inclusive, 0 when start > end."""
    if start > end:
        return 0
    # busday_count excludes the end bound
    end_exclusive = _np_day(end) + ONE_DAY
    return int(np.busday_count(_np_day(start), end_exclusive, weekmask=WEEKMASK))
