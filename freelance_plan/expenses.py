"""Recurring expenses: free-form parsing, frequency buckets, and timing rules."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from freelance_plan.calendar_utils import is_quarter_start


class ExpenseFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


ANNUALIZATION_FACTORS = {
    ExpenseFrequency.MONTHLY: 12,
    ExpenseFrequency.QUARTERLY: 4,
    ExpenseFrequency.ANNUAL: 1,
}

ANNUAL_UNITS = {"an", "année", "annee", "year", "yr", "annual"}
QUARTERLY_UNITS = {"trimestre", "quarter", "qtr"}

_AMOUNT_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:€|eur|\$)?\s*/", re.IGNORECASE)
_UNIT_RE = re.compile(r"/\s*([^\s/]+)")


@dataclass(frozen=True)
class ExpenseItem:
    name: str
    amount: float
    frequency: ExpenseFrequency = ExpenseFrequency.MONTHLY


def _frequency_from_unit(text: str) -> ExpenseFrequency:
    match = _UNIT_RE.search(text)
    if not match:
        return ExpenseFrequency.MONTHLY
    unit = match.group(1).strip().lower()
    if unit in ANNUAL_UNITS:
        return ExpenseFrequency.ANNUAL
    if unit in QUARTERLY_UNITS:
        return ExpenseFrequency.QUARTERLY
    return ExpenseFrequency.MONTHLY


def parse_expense_line(line: str) -> ExpenseItem:
    """Classify a line such as ``"Coworking: 250€/mois"``.

    The amount defaults to 0 when the line carries no ``<amount>/<unit>`` part
    and the frequency defaults to monthly.
    """
    name, _, rest = str(line).partition(":")
    match = _AMOUNT_RE.search(rest)
    amount = float(match.group(1).replace(",", ".")) if match else 0.0
    return ExpenseItem(name=name.strip(), amount=amount, frequency=_frequency_from_unit(rest))


def parse_expense_lines(lines: Iterable[str]) -> list[ExpenseItem]:
    return [parse_expense_line(line) for line in lines if str(line).strip()]


def validate_expenses(expenses: Iterable[ExpenseItem]) -> list[str]:
    errors: list[str] = []
    for idx, expense in enumerate(expenses):
        label = expense.name or f"expenses[{idx}]"
        if expense.frequency not in ANNUALIZATION_FACTORS:
            errors.append(f"{label}: frequency must be one of monthly/quarterly/annual.")
        try:
            amount = float(expense.amount)
        except (TypeError, ValueError):
            errors.append(f"{label}: amount must be a number.")
            continue
        if not math.isfinite(amount) or amount < 0:
            errors.append(f"{label}: amount must be non-negative.")
    return errors


def total_by_frequency(expenses: Iterable[ExpenseItem], frequency: ExpenseFrequency) -> float:
    return sum(float(e.amount) for e in expenses if e.frequency == frequency)


def annualized_amount(expense: ExpenseItem) -> float:
    return float(expense.amount) * ANNUALIZATION_FACTORS[ExpenseFrequency(expense.frequency)]


def expense_accrual(
    expenses: list[ExpenseItem],
    calendar_month: int,
    step: int,
    initial_investment: float = 0.0,
    quarter_start_offset: int = 0,
) -> float:
    """Expenses booked in one forecast step.

    Monthly items every step, quarterly items on quarter-start months, annual
    items and the initial investment on the first step only.
    """
    accrued = total_by_frequency(expenses, ExpenseFrequency.MONTHLY)
    if is_quarter_start(calendar_month, quarter_start_offset):
        accrued += total_by_frequency(expenses, ExpenseFrequency.QUARTERLY)
    if step == 0:
        accrued += total_by_frequency(expenses, ExpenseFrequency.ANNUAL)
        accrued += float(initial_investment)
    return accrued
