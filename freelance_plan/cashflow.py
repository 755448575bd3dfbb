"""Cash-flow forecaster: 12-month net cash position from expenses, goals and projects."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Sequence

import pandas as pd

from freelance_plan.calendar_utils import forecast_dates, is_period_key, period_key, period_label, quarter_index
from freelance_plan.defaults import DEFAULT_FORECAST_YEAR, FORECAST_HORIZON_MONTHS
from freelance_plan.expenses import ExpenseItem, expense_accrual, validate_expenses
from freelance_plan.results import Outcome, rejected, succeeded


@dataclass(frozen=True)
class DiscreteProjectIncome:
    amount: float
    period_key: str
    name: str = ""


@dataclass(frozen=True)
class CashFlowForecastEntry:
    period_label: str
    period_key: str
    revenue: float
    expenses: float
    net_cashflow: float
    cumulative_cashflow: float


def _finite_non_negative(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number >= 0


def validate_forecast_inputs(
    expenses: Sequence[ExpenseItem],
    initial_investment: float,
    quarterly_revenue_goals: Sequence[float],
    project_incomes: Sequence[DiscreteProjectIncome],
    start_month_index: int,
    start_year: int = DEFAULT_FORECAST_YEAR,
    quarter_start_offset: int = 0,
) -> list[str]:
    errors = validate_expenses(expenses)
    if not _finite_non_negative(initial_investment):
        errors.append("initial_investment must be a non-negative number.")

    if len(quarterly_revenue_goals) != 4:
        errors.append("quarterly_revenue_goals must have exactly 4 entries.")
    for idx, goal in enumerate(quarterly_revenue_goals):
        if not _finite_non_negative(goal):
            errors.append(f"quarterly_revenue_goals[{idx}] must be a non-negative number.")

    for idx, income in enumerate(project_incomes):
        if not _finite_non_negative(income.amount):
            errors.append(f"project_incomes[{idx}] amount must be a non-negative number.")
        if not is_period_key(income.period_key):
            errors.append(f"project_incomes[{idx}] period_key must use the YYYY-MM format.")

    if not isinstance(start_month_index, int) or isinstance(start_month_index, bool) or not 0 <= start_month_index <= 11:
        errors.append("start_month_index must be an integer in [0,11].")
    if not isinstance(start_year, int) or isinstance(start_year, bool) or not 1 <= start_year <= 9998:
        errors.append("start_year must be a valid calendar year.")
    if not isinstance(quarter_start_offset, int) or isinstance(quarter_start_offset, bool) or not 0 <= quarter_start_offset <= 2:
        errors.append("quarter_start_offset must be 0, 1 or 2.")
    return errors


def forecast(
    expenses: Sequence[ExpenseItem],
    initial_investment: float,
    quarterly_revenue_goals: Sequence[float],
    project_incomes: Sequence[DiscreteProjectIncome],
    start_month_index: int,
    start_year: int = DEFAULT_FORECAST_YEAR,
    quarter_start_offset: int = 0,
) -> Outcome:
    """Return an outcome holding the 12 forecast entries, in horizon order."""
    errors = validate_forecast_inputs(
        expenses,
        initial_investment,
        quarterly_revenue_goals,
        project_incomes,
        start_month_index,
        start_year,
        quarter_start_offset,
    )
    if errors:
        return rejected(errors)

    expenses = list(expenses)
    dates = forecast_dates(start_month_index, start_year, FORECAST_HORIZON_MONTHS)
    keys = [period_key(d) for d in dates]

    income_by_key: dict[str, float] = {key: 0.0 for key in keys}
    warnings: list[str] = []
    for idx, income in enumerate(project_incomes):
        key = str(income.period_key).strip()
        if key not in income_by_key:
            label = income.name or f"project_incomes[{idx}]"
            warnings.append(f"{label} ignored because {key} is outside the forecast horizon.")
            continue
        income_by_key[key] += float(income.amount)

    entries: list[CashFlowForecastEntry] = []
    cumulative = 0.0
    for step, d in enumerate(dates):
        calendar_month = (int(start_month_index) + step) % 12
        quarter = quarter_index(calendar_month, quarter_start_offset)
        baseline = float(quarterly_revenue_goals[quarter]) / 3
        accrued = expense_accrual(expenses, calendar_month, step, initial_investment, quarter_start_offset)
        revenue = baseline + income_by_key[keys[step]]
        net = revenue - accrued
        cumulative += net
        entries.append(
            CashFlowForecastEntry(
                period_label=period_label(d),
                period_key=keys[step],
                revenue=revenue,
                expenses=accrued,
                net_cashflow=net,
                cumulative_cashflow=cumulative,
            )
        )
    return succeeded(entries, warnings)


FORECAST_COLUMNS = {
    "period_label": "Period",
    "period_key": "Year_Month_Label",
    "revenue": "Revenue",
    "expenses": "Expenses",
    "net_cashflow": "Net Cash Flow",
    "cumulative_cashflow": "Cumulative Cash Flow",
}


def forecast_frame(entries: Sequence[CashFlowForecastEntry]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(e) for e in entries], columns=list(FORECAST_COLUMNS))
    df = df.rename(columns=FORECAST_COLUMNS)
    df.insert(0, "Step", range(1, len(df) + 1))
    return df
