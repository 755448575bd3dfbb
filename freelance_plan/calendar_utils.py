"""Calendar helpers for the 12-month cash-flow horizon."""

from __future__ import annotations

import re
from datetime import datetime

import pandas as pd

from freelance_plan.defaults import FORECAST_HORIZON_MONTHS


MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_PERIOD_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def forecast_dates(
    start_month_index: int, start_year: int, periods: int = FORECAST_HORIZON_MONTHS
) -> pd.DatetimeIndex:
    """Month-start dates for each forecast step; ``start_month_index`` is 0-based."""
    start = datetime(int(start_year), int(start_month_index) + 1, 1)
    return pd.date_range(start=start, periods=int(periods), freq="MS")


def period_key(d: pd.Timestamp) -> str:
    return d.strftime("%Y-%m")


def period_label(d: pd.Timestamp) -> str:
    return f"{MONTH_ABBREVIATIONS[d.month - 1]} {d.year}"


def is_period_key(value: str) -> bool:
    match = _PERIOD_KEY_RE.match(str(value).strip())
    return bool(match) and 1 <= int(match.group(2)) <= 12


def quarter_index(calendar_month: int, quarter_start_offset: int = 0) -> int:
    """Quarter (0-3) of a 0-based calendar month, with quarters starting at the offset month."""
    return ((int(calendar_month) - int(quarter_start_offset)) % 12) // 3


def is_quarter_start(calendar_month: int, quarter_start_offset: int = 0) -> bool:
    return (int(calendar_month) - int(quarter_start_offset)) % 3 == 0
