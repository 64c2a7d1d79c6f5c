"""Calendar helpers for monthly, quarterly and yearly reporting windows."""

import calendar
from datetime import date, timedelta
from typing import Tuple


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def quarter_bounds(year: int, quarter: int) -> Tuple[date, date]:
    first_month = (quarter - 1) * 3 + 1
    start, _ = month_bounds(year, first_month)
    _, end = month_bounds(year, first_month + 2)
    return start, end


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def month_name(month: int) -> str:
    return calendar.month_name[month]


def month_period_name(year: int, month: int) -> str:
    """E.g. "March 2024"."""
    return f"{month_name(month)} {year}"


def next_month_start(day: date) -> date:
    _, last = month_bounds(day.year, day.month)
    return last + timedelta(days=1)
