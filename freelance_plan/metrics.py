"""Metric calculations for dashboard and summary outputs."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from freelance_plan.cashflow import CashFlowForecastEntry
from freelance_plan.expenses import ExpenseItem, annualized_amount
from freelance_plan.goal_seek import solve_bounded_scalar
from freelance_plan.streams import STREAM_LABELS, RevenueStream, StreamRates, StreamValues


INITIAL_INVESTMENT_LABEL = "Initial investment"
SALES_MIX_TOLERANCE = 0.1


def _safe_div(a: float, b: float) -> float:
    return float(a / b) if b else 0.0


def annual_totals(
    expenses: Sequence[ExpenseItem], initial_investment: float, quarterly_goals: Sequence[float]
) -> dict:
    revenue = float(sum(float(g) for g in quarterly_goals))
    yearly_expenses = float(sum(annualized_amount(e) for e in expenses)) + float(initial_investment)
    profit = revenue - yearly_expenses
    return {
        "revenue": revenue,
        "expenses": yearly_expenses,
        "profit": profit,
        "margin_pct": _safe_div(profit, revenue) * 100,
    }


def expense_breakdown(expenses: Sequence[ExpenseItem], initial_investment: float) -> pd.DataFrame:
    """Annualized amount per expense name, plus the initial investment."""
    by_name: dict[str, float] = {}
    for expense in expenses:
        by_name[expense.name] = by_name.get(expense.name, 0.0) + annualized_amount(expense)
    if float(initial_investment) > 0:
        by_name[INITIAL_INVESTMENT_LABEL] = float(initial_investment)
    return pd.DataFrame({"Category": list(by_name.keys()), "Annual Amount": list(by_name.values())})


def quarterly_goal_table(quarterly_goals: Sequence[float]) -> pd.DataFrame:
    goals = list(quarterly_goals) + [0.0] * (4 - len(quarterly_goals))
    return pd.DataFrame({"Quarter": ["Q1", "Q2", "Q3", "Q4"], "Revenue Goal": [float(g) for g in goals[:4]]})


def break_even_revenue(fixed_costs: float, revenue_per_unit: float, variable_cost_per_unit: float) -> float:
    """Revenue needed to cover fixed costs; 0 when each unit loses money."""
    unit_margin = float(revenue_per_unit) - float(variable_cost_per_unit)
    if unit_margin <= 0:
        return 0.0
    return float(fixed_costs) / unit_margin * float(revenue_per_unit)


def _first_covered_step(cumulative: Sequence[float]) -> int | None:
    covered = np.flatnonzero(np.asarray(cumulative, dtype=float) >= 0)
    return int(covered[0]) + 1 if len(covered) else None


def break_even_step(entries: Sequence[CashFlowForecastEntry]) -> int | None:
    """First 1-based forecast step whose cumulative cash flow is non-negative."""
    return _first_covered_step([e.cumulative_cashflow for e in entries])


def compute_projection_metrics(df: pd.DataFrame) -> dict:
    revenue_cols = ["Hourly Revenue", "Package Revenue", "Subscription Revenue", "Total Revenue"]
    by_quarter = df.groupby(["Year", "Quarter"], as_index=False)[revenue_cols].sum()
    by_year = df.groupby("Year", as_index=False)[revenue_cols].sum()

    total = df["Total Revenue"].to_numpy(dtype=float)
    prev = np.concatenate(([np.nan], total[:-1]))
    with np.errstate(divide="ignore", invalid="ignore"):
        mom_growth = np.where(prev > 0, (total - prev) / prev * 100, np.nan)

    peak_idx = int(np.argmax(total)) if len(total) else 0
    last = df.iloc[-1]
    return {
        "revenue_by_quarter": by_quarter,
        "revenue_by_year": by_year,
        "month_over_month_growth_pct": pd.Series(mom_growth, index=df["Month"], name="MoM Growth %"),
        "peak_month": int(df.iloc[peak_idx]["Month"]),
        "peak_month_revenue": float(total[peak_idx]) if len(total) else 0.0,
        "final_clients": {
            "hourly": float(last["Hourly Clients"]),
            "packages": float(last["Package Clients"]),
            "subscriptions": float(last["Subscription Clients"]),
        },
        "final_hours_per_week": float(last["Hours Per Week"]),
    }


def compute_forecast_metrics(df: pd.DataFrame) -> dict:
    min_idx = df["Cumulative Cash Flow"].idxmin()
    return {
        "total_revenue": float(df["Revenue"].sum()),
        "total_expenses": float(df["Expenses"].sum()),
        "net_cashflow": float(df["Net Cash Flow"].sum()),
        "ending_cumulative_cashflow": float(df["Cumulative Cash Flow"].iloc[-1]),
        "minimum_cumulative_cashflow": float(df.loc[min_idx, "Cumulative Cash Flow"]),
        "minimum_cumulative_cashflow_period": str(df.loc[min_idx, "Period"]),
        "negative_cash_months": int((df["Cumulative Cash Flow"] < 0).sum()),
        "break_even_step": _first_covered_step(df["Cumulative Cash Flow"].to_numpy()),
    }


# Profitability of an investment followed by periodic net cash flows.
# Rates are annual percentages; ``periods_per_year`` converts them to a rate per cash-flow period.


def _period_rate(rate_percent: float, periods_per_year: int) -> float:
    return float(rate_percent) / 100.0 / int(periods_per_year)


def npv(
    initial_investment: float,
    cash_flows: Sequence[float],
    discount_rate_percent: float,
    periods_per_year: int = 1,
) -> float:
    """Net present value; the first cash flow is discounted by one full period."""
    flows = np.asarray(cash_flows, dtype=float)
    rate = _period_rate(discount_rate_percent, periods_per_year)
    discount = (1.0 + rate) ** np.arange(1, len(flows) + 1)
    return float(np.sum(flows / discount) - float(initial_investment))


def irr(
    initial_investment: float,
    cash_flows: Sequence[float],
    periods_per_year: int = 1,
    lower_bound: float = -99.0,
    upper_bound: float = 1000.0,
) -> float | None:
    """Annual rate (percent) at which NPV is zero, or None when no root lies inside the bounds."""
    result = solve_bounded_scalar(
        lambda rate: npv(initial_investment, cash_flows, rate, periods_per_year),
        0.0,
        lower_bound,
        upper_bound,
        tol=1e-6,
        max_iter=200,
    )
    return result.value


def payback_period(initial_investment: float, cash_flows: Sequence[float]) -> float | None:
    """Fractional number of periods until the investment is recovered; None if it never is."""
    remaining = float(initial_investment)
    if remaining <= 0:
        return 0.0
    for idx, flow in enumerate(cash_flows):
        flow = float(flow)
        if flow > 0 and flow >= remaining:
            return idx + remaining / flow
        remaining -= flow
    return None


def profitability_index(initial_investment: float, npv_value: float) -> float:
    return _safe_div(float(npv_value) + float(initial_investment), float(initial_investment))


def roi_percent(initial_investment: float, cash_flows: Sequence[float]) -> float:
    gain = float(np.sum(np.asarray(cash_flows, dtype=float)))
    return _safe_div(gain - float(initial_investment), float(initial_investment)) * 100


def mirr(
    initial_investment: float,
    cash_flows: Sequence[float],
    finance_rate_percent: float,
    reinvestment_rate_percent: float,
    periods_per_year: int = 1,
) -> float | None:
    """Modified IRR (annual percent).

    Outflows are discounted to period 0 at the finance rate and inflows are
    compounded to the last period at the reinvestment rate. None when there
    is nothing to finance or nothing comes back.
    """
    flows = np.asarray(cash_flows, dtype=float)
    n = len(flows)
    if n == 0:
        return None
    steps = np.arange(1, n + 1)
    finance = 1.0 + _period_rate(finance_rate_percent, periods_per_year)
    reinvest = 1.0 + _period_rate(reinvestment_rate_percent, periods_per_year)
    pv_out = float(initial_investment) + float(np.sum(np.where(flows < 0, -flows, 0.0) / finance**steps))
    fv_in = float(np.sum(np.where(flows > 0, flows, 0.0) * reinvest ** (n - steps)))
    if pv_out <= 0 or fv_in <= 0:
        return None
    per_period = (fv_in / pv_out) ** (1.0 / n) - 1.0
    return per_period * int(periods_per_year) * 100


def forecast_profitability(df: pd.DataFrame, initial_investment: float, discount_rate_percent: float) -> dict:
    """Investment view of a monthly forecast frame.

    The investment is booked in step 1 expenses, so it is added back to that
    step's net cash flow and treated as the period-0 outlay instead.
    """
    flows = df["Net Cash Flow"].to_numpy(dtype=float).copy()
    investment = float(initial_investment)
    if len(flows):
        flows[0] += investment
    npv_value = npv(investment, flows, discount_rate_percent, periods_per_year=12)
    return {
        "roi_pct": roi_percent(investment, flows),
        "npv": npv_value,
        "irr_pct": irr(investment, flows, periods_per_year=12) if investment > 0 else None,
        "mirr_pct": mirr(investment, flows, discount_rate_percent, discount_rate_percent, periods_per_year=12)
        if investment > 0
        else None,
        "payback_months": payback_period(investment, flows),
        "profitability_index": profitability_index(investment, npv_value),
    }


@dataclass(frozen=True)
class ProductMix:
    name: str
    revenue_per_unit: float
    variable_cost_per_unit: float
    sales_mix_percent: float


def multi_product_break_even(fixed_costs: float, products: Sequence[ProductMix]) -> dict:
    """Break-even units and revenue for a weighted sales mix, split back per product."""
    if not products:
        raise ValueError("At least one product is required.")
    mix = np.array([float(p.sales_mix_percent) for p in products]) / 100.0
    if abs(mix.sum() * 100.0 - 100.0) > SALES_MIX_TOLERANCE:
        raise ValueError("Sales mix must add up to 100%.")
    prices = np.array([float(p.revenue_per_unit) for p in products])
    margins = prices - np.array([float(p.variable_cost_per_unit) for p in products])
    weighted_margin = float(np.sum(margins * mix))
    weighted_price = float(np.sum(prices * mix))
    if weighted_margin <= 0 or weighted_price <= 0:
        raise ValueError("Weighted contribution margin must be positive.")

    units = float(fixed_costs) / weighted_margin
    per_product_units = units * mix
    return {
        "break_even_units": units,
        "break_even_revenue": float(fixed_costs) / (weighted_margin / weighted_price),
        "contribution_margin_ratio": weighted_margin / weighted_price,
        "break_even_by_product": pd.DataFrame(
            {
                "Product": [p.name for p in products],
                "Sales Mix %": mix * 100.0,
                "Break-even Units": per_product_units,
                "Break-even Revenue": per_product_units * prices,
            }
        ),
    }


def subscription_break_even(
    fixed_costs: float,
    monthly_price: float,
    variable_cost_per_subscriber: float,
    acquisition_cost: float,
    churn_rate_percent: float,
) -> dict:
    """Subscribers needed to cover monthly fixed costs, with lifetime value against acquisition cost."""
    margin = float(monthly_price) - float(variable_cost_per_subscriber)
    if margin <= 0:
        raise ValueError("Monthly price must exceed the variable cost per subscriber.")
    churn = float(churn_rate_percent) / 100.0
    if churn <= 0:
        raise ValueError("Churn rate must be positive.")

    subscribers = float(fixed_costs) / margin
    ltv = margin / churn
    cac = float(acquisition_cost)
    # months to acquire the break-even base when fixed costs are spent on acquisition
    months = math.ceil(subscribers * cac / float(fixed_costs)) if fixed_costs > 0 and cac > 0 else 0
    return {
        "break_even_subscribers": subscribers,
        "break_even_revenue": subscribers * float(monthly_price),
        "break_even_months": months,
        "lifetime_months": 1.0 / churn,
        "ltv": ltv,
        "cac": cac,
        "ltv_cac_ratio": _safe_div(ltv, cac),
    }


def stream_product_mix(revenue_share: StreamValues, rates: StreamRates) -> list[ProductMix]:
    """Treat each priced stream as a product; unit mix is revenue share divided by unit price."""
    prices = {
        RevenueStream.HOURLY: rates.avg_hourly_rate,
        RevenueStream.PACKAGES: rates.avg_package_price,
        RevenueStream.SUBSCRIPTIONS: rates.avg_subscription_price,
    }
    weights = {
        stream: revenue_share.get(stream) / prices[stream]
        for stream in RevenueStream
        if prices[stream] > 0 and revenue_share.get(stream) > 0
    }
    total = sum(weights.values())
    if not total:
        return []
    return [
        ProductMix(STREAM_LABELS[stream], float(prices[stream]), 0.0, weight / total * 100.0)
        for stream, weight in weights.items()
    ]
