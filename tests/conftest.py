from __future__ import annotations

from copy import deepcopy

import pytest

from freelance_plan.cashflow import DiscreteProjectIncome
from freelance_plan.defaults import DEFAULT_FORECAST, DEFAULT_RATE_CARD, DEFAULT_SETTINGS
from freelance_plan.expenses import parse_expense_lines
from freelance_plan.schema import settings_from_dict
from freelance_plan.streams import aggregate_rates, rate_card_from_prices


@pytest.fixture
def base_settings():
    settings, _, _ = settings_from_dict(deepcopy(DEFAULT_SETTINGS))
    return settings


@pytest.fixture
def base_rates():
    return aggregate_rates(*rate_card_from_prices(**DEFAULT_RATE_CARD))


@pytest.fixture
def base_forecast_inputs() -> dict:
    return {
        "expenses": parse_expense_lines(DEFAULT_FORECAST["expense_lines"]),
        "initial_investment": DEFAULT_FORECAST["initial_investment"],
        "quarterly_revenue_goals": list(DEFAULT_FORECAST["quarterly_revenue_goals"]),
        "project_incomes": [DiscreteProjectIncome(**p) for p in DEFAULT_FORECAST["project_incomes"]],
        "start_month_index": DEFAULT_FORECAST["start_month_index"],
        "start_year": DEFAULT_FORECAST["start_year"],
    }
