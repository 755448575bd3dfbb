from __future__ import annotations

import math
from dataclasses import replace

import pandas as pd
import pytest

from freelance_plan.cashflow import forecast, forecast_frame
from freelance_plan.expenses import ExpenseFrequency, ExpenseItem
from freelance_plan.metrics import (
    INITIAL_INVESTMENT_LABEL,
    annual_totals,
    break_even_revenue,
    break_even_step,
    compute_forecast_metrics,
    compute_projection_metrics,
    ProductMix,
    expense_breakdown,
    forecast_profitability,
    irr,
    mirr,
    multi_product_break_even,
    npv,
    payback_period,
    profitability_index,
    quarterly_goal_table,
    roi_percent,
    stream_product_mix,
    subscription_break_even,
)
from freelance_plan.projection import project, projection_frame
from freelance_plan.streams import StreamRates, StreamValues


def test_annual_totals_for_default_plan(base_forecast_inputs):
    totals = annual_totals(
        base_forecast_inputs["expenses"],
        base_forecast_inputs["initial_investment"],
        base_forecast_inputs["quarterly_revenue_goals"],
    )
    assert totals["revenue"] == 54000.0
    assert totals["expenses"] == pytest.approx(720.0 + 400.0 + 1200.0 + 3000.0 + 5000.0)
    assert totals["profit"] == pytest.approx(54000.0 - 10320.0)
    assert totals["margin_pct"] == pytest.approx((54000.0 - 10320.0) / 54000.0 * 100)


def test_annual_totals_margin_is_zero_without_revenue():
    totals = annual_totals([ExpenseItem("Rent", 100.0)], 0.0, [0.0, 0.0, 0.0, 0.0])
    assert totals["profit"] == -1200.0
    assert totals["margin_pct"] == 0.0


def test_expense_breakdown_annualizes_and_adds_investment():
    df = expense_breakdown(
        [ExpenseItem("Rent", 100.0), ExpenseItem("Rent", 50.0, ExpenseFrequency.QUARTERLY), ExpenseItem("Insurance", 400.0, ExpenseFrequency.ANNUAL)],
        2500.0,
    )
    amounts = dict(zip(df["Category"], df["Annual Amount"]))
    assert amounts == {"Rent": 1400.0, "Insurance": 400.0, INITIAL_INVESTMENT_LABEL: 2500.0}
    assert INITIAL_INVESTMENT_LABEL not in expense_breakdown([], 0.0)["Category"].tolist()


def test_quarterly_goal_table():
    df = quarterly_goal_table([1.0, 2.0, 3.0, 4.0])
    assert df["Quarter"].tolist() == ["Q1", "Q2", "Q3", "Q4"]
    assert df["Revenue Goal"].sum() == 10.0


def test_break_even_revenue():
    assert break_even_revenue(1000.0, 50.0, 30.0) == pytest.approx(2500.0)
    assert break_even_revenue(1000.0, 30.0, 30.0) == 0.0


def test_break_even_step_matches_forecast_metrics(base_forecast_inputs):
    entries = forecast(**base_forecast_inputs).unwrap()
    metrics = compute_forecast_metrics(forecast_frame(entries))
    assert metrics["break_even_step"] == break_even_step(entries)
    assert metrics["ending_cumulative_cashflow"] == pytest.approx(entries[-1].cumulative_cashflow)
    assert metrics["net_cashflow"] == pytest.approx(metrics["total_revenue"] - metrics["total_expenses"])


def test_break_even_step_is_none_when_cash_never_recovers():
    entries = forecast([ExpenseItem("Rent", 100.0)], 0.0, [0.0] * 4, [], 0).unwrap()
    metrics = compute_forecast_metrics(forecast_frame(entries))
    assert break_even_step(entries) is None
    assert metrics["break_even_step"] is None
    assert metrics["negative_cash_months"] == 12
    assert metrics["minimum_cumulative_cashflow"] == -1200.0
    assert metrics["minimum_cumulative_cashflow_period"] == "Dec 2025"


def test_projection_metrics(base_settings, base_rates):
    df = projection_frame(project(replace(base_settings, months=24), base_rates).unwrap())
    metrics = compute_projection_metrics(df)

    assert len(metrics["revenue_by_year"]) == 2
    assert len(metrics["revenue_by_quarter"]) == 8
    assert metrics["revenue_by_year"]["Total Revenue"].sum() == pytest.approx(df["Total Revenue"].sum())
    growth = metrics["month_over_month_growth_pct"]
    assert math.isnan(growth.iloc[0])
    assert growth.iloc[1] == pytest.approx((df["Total Revenue"].iloc[1] / df["Total Revenue"].iloc[0] - 1) * 100)
    assert metrics["peak_month_revenue"] == pytest.approx(df["Total Revenue"].max())
    assert metrics["final_hours_per_week"] == df["Hours Per Week"].iloc[-1]
    assert metrics["final_clients"]["hourly"] == df["Hourly Clients"].iloc[-1]


def test_break_even_step_agrees_when_first_month_is_negative():
    entries = forecast([], 1500.0, [3000.0] * 4, [], 0).unwrap()
    assert entries[0].cumulative_cashflow == -500.0
    assert break_even_step(entries) == 2
    assert compute_forecast_metrics(forecast_frame(entries))["break_even_step"] == 2


def test_npv_roi_and_payback_on_yearly_flows():
    assert npv(10000.0, [4000.0] * 4, 10.0) == pytest.approx(2679.46, abs=0.01)
    assert npv(10000.0, [4000.0] * 4, 0.0) == pytest.approx(6000.0)
    flows = [20000.0, 25000.0, 30000.0, 35000.0, 40000.0]
    assert roi_percent(100000.0, flows) == pytest.approx(50.0)
    assert payback_period(100000.0, flows) == pytest.approx(3 + 25000.0 / 35000.0)
    assert payback_period(100000.0, [10000.0] * 3) is None
    assert payback_period(0.0, [10000.0]) == 0.0
    assert roi_percent(0.0, flows) == 0.0


def test_npv_uses_period_rate_for_monthly_flows():
    assert npv(0.0, [1200.0], 12.0, periods_per_year=12) == pytest.approx(1200.0 / 1.01)


def test_irr_zeroes_npv_and_is_none_without_outlay():
    rate = irr(10000.0, [4000.0] * 4)
    assert rate == pytest.approx(21.86, abs=0.01)
    assert npv(10000.0, [4000.0] * 4, rate) == pytest.approx(0.0, abs=1e-3)
    assert irr(0.0, [100.0, 100.0]) is None


def test_profitability_index_and_mirr():
    assert profitability_index(10000.0, 2679.46) == pytest.approx(1.267946)
    assert profitability_index(0.0, 100.0) == 0.0
    assert mirr(10000.0, [4000.0] * 4, 10.0, 10.0) == pytest.approx(16.72, abs=0.05)
    assert mirr(0.0, [100.0, 100.0], 10.0, 10.0) is None
    assert mirr(1000.0, [], 10.0, 10.0) is None


def test_forecast_profitability_adds_back_investment_from_first_step():
    df = pd.DataFrame({"Net Cash Flow": [-900.0, 500.0, 500.0, 500.0]})
    result = forecast_profitability(df, 1000.0, 0.0)
    assert result["npv"] == pytest.approx(600.0)
    assert result["roi_pct"] == pytest.approx(60.0)
    assert result["payback_months"] == pytest.approx(2.8)
    assert result["profitability_index"] == pytest.approx(1.6)
    assert result["irr_pct"] > 0
    assert result["mirr_pct"] > 0

    no_investment = forecast_profitability(df, 0.0, 10.0)
    assert no_investment["irr_pct"] is None
    assert no_investment["mirr_pct"] is None
    assert no_investment["payback_months"] == 0.0


def test_multi_product_break_even_splits_by_sales_mix():
    result = multi_product_break_even(
        10000.0,
        [ProductMix("Audit", 100.0, 60.0, 60.0), ProductMix("Workshop", 50.0, 20.0, 40.0)],
    )
    assert result["break_even_units"] == pytest.approx(10000.0 / 36.0)
    assert result["contribution_margin_ratio"] == pytest.approx(0.45)
    assert result["break_even_revenue"] == pytest.approx(10000.0 / 0.45)
    table = result["break_even_by_product"]
    assert table["Product"].tolist() == ["Audit", "Workshop"]
    assert table["Break-even Revenue"].sum() == pytest.approx(result["break_even_revenue"])
    assert table["Break-even Units"].iloc[0] == pytest.approx(10000.0 / 36.0 * 0.6)


@pytest.mark.parametrize(
    "products, message",
    [
        ([ProductMix("A", 100.0, 60.0, 60.0), ProductMix("B", 50.0, 20.0, 30.0)], "Sales mix must add up to 100%."),
        ([ProductMix("A", 100.0, 120.0, 100.0)], "Weighted contribution margin must be positive."),
        ([], "At least one product is required."),
    ],
)
def test_multi_product_break_even_rejects_bad_mix(products, message):
    with pytest.raises(ValueError, match=message):
        multi_product_break_even(1000.0, products)


def test_subscription_break_even():
    result = subscription_break_even(3000.0, 50.0, 10.0, 200.0, 5.0)
    assert result["break_even_subscribers"] == pytest.approx(75.0)
    assert result["break_even_revenue"] == pytest.approx(3750.0)
    assert result["ltv"] == pytest.approx(800.0)
    assert result["lifetime_months"] == pytest.approx(20.0)
    assert result["ltv_cac_ratio"] == pytest.approx(4.0)
    assert result["break_even_months"] == 5
    assert subscription_break_even(3000.0, 50.0, 10.0, 0.0, 5.0)["ltv_cac_ratio"] == 0.0

    with pytest.raises(ValueError, match="variable cost"):
        subscription_break_even(3000.0, 10.0, 10.0, 200.0, 5.0)
    with pytest.raises(ValueError, match="Churn rate"):
        subscription_break_even(3000.0, 50.0, 10.0, 200.0, 0.0)


def test_stream_product_mix_converts_revenue_share_to_unit_mix():
    mix = stream_product_mix(StreamValues(50.0, 50.0, 0.0), StreamRates(100.0, 500.0, 0.0))
    assert [p.name for p in mix] == ["Hourly", "Packages"]
    assert [p.sales_mix_percent for p in mix] == pytest.approx([100 * 5 / 6, 100 / 6])
    assert stream_product_mix(StreamValues(), StreamRates()) == []
    result = multi_product_break_even(6000.0, mix)
    assert result["break_even_revenue"] == pytest.approx(6000.0)
