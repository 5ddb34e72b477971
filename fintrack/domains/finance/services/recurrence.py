"""Next-occurrence arithmetic for recurring transactions.

Month and year steps are calendar-aware and clamp to the last day of the
target month: Jan 31 + 1 month is Feb 29 in 2024 (Feb 28 otherwise), and
Feb 29 + 1 year is Feb 28. Later occurrences are always counted from the
anchor date, so a Jan 31 schedule runs Feb 29, Mar 31, Apr 30.
"""

from __future__ import annotations

import datetime as dt
from typing import Union

from dateutil.relativedelta import relativedelta

from fintrack.domains.finance.constants import RecurringInterval

_STEPS = {
    RecurringInterval.DAILY: relativedelta(days=1),
    RecurringInterval.WEEKLY: relativedelta(weeks=1),
    RecurringInterval.MONTHLY: relativedelta(months=1),
    RecurringInterval.YEARLY: relativedelta(years=1),
}

DateLike = Union[dt.date, dt.datetime]


def _as_date(value: DateLike) -> dt.date:
    return value.date() if isinstance(value, dt.datetime) else value


def occurrence(anchor: DateLike, interval: Union[RecurringInterval, str], n: int) -> dt.date:
    """Return the ``n``-th occurrence after ``anchor`` (``n == 0`` is the anchor itself).

    Raises ValueError for an unknown interval or a negative ``n``.
    """
    if n < 0:
        raise ValueError("occurrence index must be non-negative")
    step = _STEPS[RecurringInterval(interval)]
    return _as_date(anchor) + step * n


def advance(start: DateLike, interval: Union[RecurringInterval, str]) -> dt.date:
    """Return the occurrence that follows ``start`` for the given interval.

    Raises ValueError for an unknown interval.
    """
    return occurrence(start, interval, 1)
