import json
from copy import deepcopy

import pandas as pd
import plotly.express as px
import streamlit as st

from freelance_plan.calendar_utils import MONTH_ABBREVIATIONS
from freelance_plan.cashflow import DiscreteProjectIncome, forecast, forecast_frame
from freelance_plan.charts import (
    cashflow_figure,
    clients_figure,
    expense_breakdown_figure,
    revenue_by_stream_figure,
    revenue_share_figure,
)
from freelance_plan.defaults import DEFAULT_FORECAST, DEFAULT_RATE_CARD, DEFAULT_SETTINGS
from freelance_plan.expenses import annualized_amount, parse_expense_lines
from freelance_plan.goal_seek import solve_projection_driver
from freelance_plan.growth import CONFIDENCE_FACTORS, GROWTH_METHODS, monthly_distribution, projected_revenue
from freelance_plan.input_metadata import advisory_warnings, help_with_guidance
from freelance_plan.integrity_checks import run_forecast_checks, run_projection_checks
from freelance_plan.metrics import (
    annual_totals,
    compute_forecast_metrics,
    compute_projection_metrics,
    expense_breakdown,
    forecast_profitability,
    multi_product_break_even,
    quarterly_goal_table,
    stream_product_mix,
    subscription_break_even,
)
from freelance_plan.projection import project, projection_frame
from freelance_plan.runtime_logging import (
    append_runtime_event,
    install_global_exception_logging,
    log_outcome,
    read_runtime_events,
    runtime_log_path,
)
from freelance_plan.schema import build_projection_bundle, parse_projection_bundle, settings_from_dict, settings_to_dict
from freelance_plan.sensitivity import (
    DEFAULT_SENSITIVITY_DRIVERS,
    TARGET_OPTIONS,
    available_sensitivity_drivers,
    run_one_way_sensitivity,
)
from freelance_plan.streams import aggregate_rates, rate_card_from_prices


install_global_exception_logging()

st.set_page_config(page_title="Freelance Revenue and Cash Flow Planner", layout="wide")


STREAM_INPUT_LABELS = {"hourly": "Hourly", "packages": "Packages", "subscriptions": "Subscriptions"}

UI_DEFAULTS = {
    "months": DEFAULT_SETTINGS["months"],
    "growth_rate_percent": DEFAULT_SETTINGS["growth_rate_percent"],
    "client_retention_rate_percent": DEFAULT_SETTINGS["client_retention_rate_percent"],
    "initial_hours_per_week": DEFAULT_SETTINGS["initial_hours_per_week"],
    "max_hours_per_week": DEFAULT_SETTINGS["max_hours_per_week"],
    **{f"initial_monthly_clients.{k}": v for k, v in DEFAULT_SETTINGS["initial_monthly_clients"].items()},
    **{f"acquisition_rate.{k}": v for k, v in DEFAULT_SETTINGS["acquisition_rate"].items()},
    "hourly_rates_text": ", ".join(f"{v:g}" for v in DEFAULT_RATE_CARD["hourly_rates"]),
    "package_prices_text": ", ".join(f"{v:g}" for v in DEFAULT_RATE_CARD["packages"]),
    "subscription_prices_text": ", ".join(f"{v:g}" for v in DEFAULT_RATE_CARD["subscriptions"]),
    "start_month_opt": MONTH_ABBREVIATIONS[DEFAULT_FORECAST["start_month_index"]],
    "start_year": DEFAULT_FORECAST["start_year"],
    "quarter_start_offset": 0,
    "initial_investment": DEFAULT_FORECAST["initial_investment"],
    **{f"goal_q{i + 1}": v for i, v in enumerate(DEFAULT_FORECAST["quarterly_revenue_goals"])},
    "expense_lines_text": "\n".join(DEFAULT_FORECAST["expense_lines"]),
    "discount_rate_percent": 10.0,
    "subscription_cac": 200.0,
    "outlook_method": "compound",
    "outlook_confidence": "medium",
    "seasonality_text": "",
    "business_plan_id": "my-freelance-plan",
    "sensitivity_delta": 0.1,
    "sensitivity_drivers": list(DEFAULT_SENSITIVITY_DRIVERS),
    "goal_driver": "avg_hourly_rate",
    "goal_target_value": 60000.0,
    "goal_lower_bound": 0.0,
    "goal_upper_bound": 500.0,
    "goal_seek_result": None,
}

for _key, _value in UI_DEFAULTS.items():
    if _key not in st.session_state:
        st.session_state[_key] = deepcopy(_value)
if "project_incomes_df" not in st.session_state:
    st.session_state["project_incomes_df"] = pd.DataFrame(DEFAULT_FORECAST["project_incomes"])


def _parse_price_list(text: str) -> tuple[list[float], list[str]]:
    prices: list[float] = []
    bad: list[str] = []
    for token in str(text).replace(";", ",").split(","):
        token = token.strip()
        if not token:
            continue
        try:
            prices.append(float(token.replace(" ", "")))
        except ValueError:
            bad.append(token)
    return prices, bad


def _raw_settings_from_state() -> dict:
    raw = {
        key: st.session_state[key]
        for key in (
            "months",
            "growth_rate_percent",
            "client_retention_rate_percent",
            "initial_hours_per_week",
            "max_hours_per_week",
        )
    }
    for group in ("initial_monthly_clients", "acquisition_rate"):
        raw[group] = {stream: st.session_state[f"{group}.{stream}"] for stream in STREAM_INPUT_LABELS}
    return raw


def _apply_settings_to_state(settings_dict: dict) -> None:
    for key, value in settings_dict.items():
        if isinstance(value, dict):
            for stream, stream_value in value.items():
                st.session_state[f"{key}.{stream}"] = float(stream_value)
        elif key == "months":
            st.session_state[key] = int(value)
        else:
            st.session_state[key] = float(value)


# Imported settings are staged and applied before any widget is created.
_pending_settings = st.session_state.pop("_pending_imported_settings", None)
if _pending_settings is not None:
    _apply_settings_to_state(_pending_settings)


def _project_incomes_from_editor(df: pd.DataFrame) -> list[DiscreteProjectIncome]:
    incomes: list[DiscreteProjectIncome] = []
    for row in df.to_dict(orient="records"):
        amount = row.get("amount")
        key = row.get("period_key")
        if (amount is None or pd.isna(amount)) and (key is None or pd.isna(key) or not str(key).strip()):
            continue
        incomes.append(
            DiscreteProjectIncome(
                amount=float(amount) if amount is not None and not pd.isna(amount) else float("nan"),
                period_key="" if key is None or pd.isna(key) else str(key).strip(),
                name="" if row.get("name") is None or pd.isna(row.get("name")) else str(row.get("name")),
            )
        )
    return incomes


@st.cache_data(show_spinner=False)
def _run_sensitivity_cached(settings_json: str, rates_json: str, delta: float, drivers: tuple[str, ...]) -> pd.DataFrame:
    settings, _, _ = settings_from_dict(json.loads(settings_json))
    rates = aggregate_rates(*rate_card_from_prices(**json.loads(rates_json)))
    return run_one_way_sensitivity(settings, rates, delta, drivers=list(drivers))


def _log_once(signature_key: str, payload, level: str, event: str, message: str, context: dict) -> None:
    signature = json.dumps(payload, sort_keys=True, default=str)
    if st.session_state.get(signature_key) != signature:
        append_runtime_event(level=level, event=event, message=message, context=context)
        st.session_state[signature_key] = signature


st.title("Freelance Revenue and Cash Flow Planner")

with st.sidebar:
    st.header("Revenue Projection")
    st.number_input("Projection Months", min_value=1, max_value=120, step=1, key="months")
    st.number_input(
        "Monthly Growth Rate (%)",
        min_value=0.0,
        step=0.5,
        key="growth_rate_percent",
        help=help_with_guidance("growth_rate_percent", "Compounds acquisition each month; hours ramp at half this rate."),
    )
    st.number_input(
        "Client Retention Rate (%)",
        min_value=0.0,
        max_value=100.0,
        step=1.0,
        key="client_retention_rate_percent",
        help=help_with_guidance("client_retention_rate_percent", "Applied to every stream's client count each month."),
    )
    h_left, h_right = st.columns(2)
    with h_left:
        st.number_input(
            "Initial Hours / Week",
            min_value=0.0,
            step=1.0,
            key="initial_hours_per_week",
            help=help_with_guidance("initial_hours_per_week", "Billable hours per hourly client in month 1."),
        )
    with h_right:
        st.number_input(
            "Max Hours / Week",
            min_value=0.0,
            step=1.0,
            key="max_hours_per_week",
            help=help_with_guidance("max_hours_per_week", "Ceiling for the hours ramp."),
        )

    st.subheader("Clients per Stream")
    for stream, label in STREAM_INPUT_LABELS.items():
        c_left, c_right = st.columns(2)
        with c_left:
            st.number_input(
                f"{label} Clients at Start",
                min_value=0.0,
                step=1.0,
                key=f"initial_monthly_clients.{stream}",
                help=help_with_guidance(f"initial_monthly_clients.{stream}", "Active clients in month 1."),
            )
        with c_right:
            st.number_input(
                f"{label} New Clients / Month",
                min_value=0.0,
                step=0.1,
                key=f"acquisition_rate.{stream}",
                help=help_with_guidance(f"acquisition_rate.{stream}", "Clients signed per month before growth."),
            )

    st.subheader("Rate Card")
    st.text_input("Hourly Rates", key="hourly_rates_text", help="Comma-separated hourly rates; the model uses their mean.")
    st.text_input("Package Prices", key="package_prices_text", help="Comma-separated package prices; the model uses their mean.")
    st.text_input(
        "Subscription Prices",
        key="subscription_prices_text",
        help="Comma-separated monthly subscription prices; the model uses their mean.",
    )

    st.header("Cash Flow Forecast")
    f_left, f_right = st.columns(2)
    with f_left:
        st.selectbox("Start Month", list(MONTH_ABBREVIATIONS), key="start_month_opt")
    with f_right:
        st.number_input("Start Year", min_value=2000, max_value=2100, step=1, key="start_year")
    st.selectbox(
        "Quarter Start Offset",
        [0, 1, 2],
        key="quarter_start_offset",
        help="0 means quarters start in Jan/Apr/Jul/Oct; 1 shifts them to Feb/May/Aug/Nov.",
    )
    st.number_input(
        "Initial Investment",
        min_value=0.0,
        step=100.0,
        key="initial_investment",
        help=help_with_guidance("initial_investment", "Booked in the first forecast month."),
    )
    g_cols = st.columns(4)
    for i, col in enumerate(g_cols):
        with col:
            st.number_input(f"Q{i + 1} Goal", min_value=0.0, step=500.0, key=f"goal_q{i + 1}")
    st.text_area(
        "Expenses",
        key="expense_lines_text",
        height=140,
        help="One expense per line, e.g. `Coworking: 250€/mois`, `Assurance: 400€/an`, `Comptable: 300€/trimestre`.",
    )
    st.caption("Project incomes (period key YYYY-MM)")
    project_incomes_df = st.data_editor(
        st.session_state["project_incomes_df"],
        num_rows="dynamic",
        key="project_incomes_editor",
        column_config={
            "name": st.column_config.TextColumn("Project"),
            "amount": st.column_config.NumberColumn("Amount", min_value=0.0),
            "period_key": st.column_config.TextColumn("Period (YYYY-MM)"),
        },
    )


raw_settings = _raw_settings_from_state()
settings, coercion_warnings, _ = settings_from_dict(raw_settings)

rate_card_inputs: dict[str, list[float]] = {}
rate_card_warnings: list[str] = []
for field_name, state_key in (
    ("hourly_rates", "hourly_rates_text"),
    ("packages", "package_prices_text"),
    ("subscriptions", "subscription_prices_text"),
):
    prices, bad_tokens = _parse_price_list(st.session_state[state_key])
    rate_card_inputs[field_name] = prices
    if bad_tokens:
        rate_card_warnings.append(f"{field_name}: ignored non-numeric entries {', '.join(bad_tokens)}.")
rates = aggregate_rates(*rate_card_from_prices(**rate_card_inputs))

input_warnings = coercion_warnings + rate_card_warnings + advisory_warnings({**raw_settings, **rates.as_dict()})
if input_warnings:
    _log_once(
        "_input_warning_log_signature",
        input_warnings,
        "WARNING",
        "input_warnings",
        f"{len(input_warnings)} input warning(s) generated during projection run.",
        {"warnings": input_warnings},
    )
    with st.expander(f"[!] Input Warnings ({len(input_warnings)})", expanded=False):
        for warning in input_warnings:
            st.write(f"- {warning}")

projection_outcome = project(settings, rates)
if not projection_outcome.ok:
    log_outcome("projection_validation_failed", projection_outcome, {"months": settings.months})
    st.error("Input validation error: " + " | ".join(projection_outcome.errors))
    st.stop()

projection = projection_outcome.value
projection_df = projection_frame(projection)
projection_metrics = compute_projection_metrics(projection_df)

expenses = parse_expense_lines(str(st.session_state["expense_lines_text"]).splitlines())
quarterly_goals = [float(st.session_state[f"goal_q{i + 1}"]) for i in range(4)]
forecast_outcome = forecast(
    expenses,
    float(st.session_state["initial_investment"]),
    quarterly_goals,
    _project_incomes_from_editor(project_incomes_df),
    MONTH_ABBREVIATIONS.index(st.session_state["start_month_opt"]),
    int(st.session_state["start_year"]),
    int(st.session_state["quarter_start_offset"]),
)
if not forecast_outcome.ok:
    log_outcome("forecast_validation_failed", forecast_outcome, {"expense_count": len(expenses)})
    forecast_df = pd.DataFrame()
else:
    forecast_df = forecast_frame(forecast_outcome.value)
if forecast_outcome.warnings:
    _log_once(
        "_forecast_warning_log_signature",
        forecast_outcome.warnings,
        "WARNING",
        "forecast_warnings",
        f"{len(forecast_outcome.warnings)} project income(s) outside the horizon.",
        {"warnings": forecast_outcome.warnings},
    )

integrity_findings = run_projection_checks(projection_df, settings, projection.summary, tol=1e-3)
if not forecast_df.empty:
    integrity_findings += run_forecast_checks(forecast_df, tol=1e-3)
if integrity_findings:
    _log_once(
        "_integrity_log_signature",
        integrity_findings,
        "ERROR",
        "integrity_checks_failed",
        f"{len(integrity_findings)} integrity check(s) failed.",
        {"findings": integrity_findings[:25]},
    )
    with st.expander(f"[!] Integrity Findings ({len(integrity_findings)})", expanded=False):
        st.dataframe(pd.DataFrame(integrity_findings), width="stretch", hide_index=True)
else:
    st.caption("Integrity checks: passed.")

projection_tab, cashflow_tab, sens_tab, data_tab = st.tabs(
    ["Revenue Projection", "Cash Flow Forecast", "Sensitivity and Goal Seek", "Import / Export"]
)

with projection_tab:
    summary = projection.summary
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Cumulative Revenue", f"{summary.cumulative_revenue:,.0f}")
    c2.metric("Average Monthly Revenue", f"{summary.average_monthly_revenue:,.0f}")
    c3.metric("Peak Month", f"{projection_metrics['peak_month']}", f"{projection_metrics['peak_month_revenue']:,.0f}")
    c4.metric("Final Hours / Week", f"{projection_metrics['final_hours_per_week']:.1f}")

    for fig in (revenue_by_stream_figure(projection_df), clients_figure(projection_df), revenue_share_figure(summary)):
        if fig is not None:
            st.plotly_chart(fig, width="stretch")
    st.caption("Revenue by year")
    st.dataframe(projection_metrics["revenue_by_year"], width="stretch", hide_index=True)
    st.dataframe(projection_df, width="stretch", hide_index=True)

with cashflow_tab:
    totals = annual_totals(expenses, float(st.session_state["initial_investment"]), quarterly_goals)
    t1, t2, t3, t4 = st.columns(4)
    t1.metric("Annual Revenue Goal", f"{totals['revenue']:,.0f}")
    t2.metric("Annual Expenses", f"{totals['expenses']:,.0f}")
    t3.metric("Annual Profit", f"{totals['profit']:,.0f}")
    t4.metric("Margin", f"{totals['margin_pct']:.1f}%")

    if not forecast_outcome.ok:
        st.error("Forecast validation error: " + " | ".join(forecast_outcome.errors))
    else:
        for warning in forecast_outcome.warnings:
            st.warning(warning)
        forecast_metrics = compute_forecast_metrics(forecast_df)
        m1, m2, m3 = st.columns(3)
        m1.metric("Ending Cumulative Cash", f"{forecast_metrics['ending_cumulative_cashflow']:,.0f}")
        m2.metric(
            "Minimum Cumulative Cash",
            f"{forecast_metrics['minimum_cumulative_cashflow']:,.0f}",
            forecast_metrics["minimum_cumulative_cashflow_period"],
        )
        break_even = forecast_metrics["break_even_step"]
        m3.metric("Break-even Month", "Not reached" if break_even is None else f"Month {break_even}")
        fig = cashflow_figure(forecast_df)
        if fig is not None:
            st.plotly_chart(fig, width="stretch")
        st.dataframe(forecast_df, width="stretch", hide_index=True)

        st.subheader("Investment Profitability")
        st.number_input(
            "Discount Rate (%)",
            min_value=0.0,
            max_value=100.0,
            step=0.5,
            key="discount_rate_percent",
            help="Annual rate used for NPV and as finance and reinvestment rate for MIRR; applied monthly.",
        )
        profitability = forecast_profitability(
            forecast_df, float(st.session_state["initial_investment"]), float(st.session_state["discount_rate_percent"])
        )
        p1, p2, p3, p4, p5 = st.columns(5)
        p1.metric("NPV", f"{profitability['npv']:,.0f}")
        p2.metric("IRR", "n/a" if profitability["irr_pct"] is None else f"{profitability['irr_pct']:.1f}%")
        p3.metric(
            "Payback",
            "Not reached" if profitability["payback_months"] is None else f"{profitability['payback_months']:.1f} months",
        )
        p4.metric("Profitability Index", f"{profitability['profitability_index']:.2f}")
        p5.metric("ROI", f"{profitability['roi_pct']:.1f}%")
        if profitability["mirr_pct"] is not None:
            st.caption(f"MIRR: {profitability['mirr_pct']:.1f}%")

    breakdown = expense_breakdown(expenses, float(st.session_state["initial_investment"]))
    fig = expense_breakdown_figure(breakdown)
    if fig is not None:
        st.plotly_chart(fig, width="stretch")
    st.dataframe(quarterly_goal_table(quarterly_goals), width="stretch", hide_index=True)

    monthly_fixed_costs = sum(annualized_amount(e) for e in expenses) / 12
    with st.expander("Break-even by Stream", expanded=False):
        mix = stream_product_mix(projection.summary.revenue_source_share, rates)
        try:
            by_stream = multi_product_break_even(monthly_fixed_costs * 12, mix)
        except ValueError as exc:
            st.info(f"Break-even by stream unavailable: {exc}")
        else:
            st.metric("Annual Break-even Revenue", f"{by_stream['break_even_revenue']:,.0f}")
            st.dataframe(by_stream["break_even_by_product"], width="stretch", hide_index=True)

    with st.expander("Subscription Unit Economics", expanded=False):
        st.number_input(
            "Acquisition Cost per Subscriber",
            min_value=0.0,
            step=10.0,
            key="subscription_cac",
            help="Spend needed to sign one subscriber. Churn is 100% minus the retention rate.",
        )
        try:
            unit_economics = subscription_break_even(
                monthly_fixed_costs,
                rates.avg_subscription_price,
                0.0,
                float(st.session_state["subscription_cac"]),
                100.0 - settings.client_retention_rate_percent,
            )
        except ValueError as exc:
            st.info(f"Subscription break-even unavailable: {exc}")
        else:
            s1, s2, s3, s4 = st.columns(4)
            s1.metric("Break-even Subscribers", f"{unit_economics['break_even_subscribers']:.1f}")
            s2.metric("Lifetime Value", f"{unit_economics['ltv']:,.0f}")
            s3.metric("LTV / CAC", f"{unit_economics['ltv_cac_ratio']:.1f}")
            s4.metric("Months to Acquire", f"{unit_economics['break_even_months']}")

    with st.expander("Next-Year Revenue Outlook", expanded=False):
        o_left, o_right = st.columns(2)
        with o_left:
            st.selectbox("Growth Method", sorted(GROWTH_METHODS), key="outlook_method")
        with o_right:
            st.selectbox("Confidence", list(CONFIDENCE_FACTORS), key="outlook_confidence")
        st.text_input(
            "Seasonality Factors",
            key="seasonality_text",
            help="Twelve comma-separated weights, January first. Anything else spreads revenue evenly.",
        )
        annual_growth_pct = ((1 + settings.growth_rate_percent / 100) ** 12 - 1) * 100
        history = [((1 + g / 100) ** 12 - 1) * 100 for g in projection_metrics["month_over_month_growth_pct"].dropna()]
        next_year = projected_revenue(
            totals["revenue"],
            annual_growth_pct,
            period_type="annual",
            confidence=st.session_state["outlook_confidence"],
            method=st.session_state["outlook_method"],
            historical=history,
        )
        factors, bad_factors = _parse_price_list(st.session_state["seasonality_text"])
        if bad_factors or (factors and len(factors) != 12):
            st.caption("Seasonality ignored: enter exactly twelve numbers.")
        st.metric("Projected Next-Year Revenue", f"{next_year:,.0f}", f"{next_year - totals['revenue']:,.0f}")
        outlook_df = pd.DataFrame(
            {
                "Month": list(MONTH_ABBREVIATIONS),
                "Revenue": monthly_distribution(next_year, factors if len(factors) == 12 else None),
            }
        )
        st.plotly_chart(px.bar(outlook_df, x="Month", y="Revenue", title="Next-Year Monthly Revenue"), width="stretch")

with sens_tab:
    st.subheader("One-way sensitivity")
    st.multiselect(
        "Sensitivity Drivers",
        available_sensitivity_drivers(),
        key="sensitivity_drivers",
        help="Each driver is shocked low and high while the others stay at their base values.",
    )
    st.slider(
        "Sensitivity Delta Percent",
        min_value=0.01,
        max_value=0.5,
        step=0.01,
        key="sensitivity_delta",
        help="Relative shock applied to each driver.",
    )
    target = st.selectbox("Target metric", TARGET_OPTIONS, help="Output compared across the low and high cases.")
    if st.session_state["sensitivity_drivers"]:
        sens_df = _run_sensitivity_cached(
            json.dumps(settings_to_dict(settings), sort_keys=True),
            json.dumps(rate_card_inputs, sort_keys=True),
            float(st.session_state["sensitivity_delta"]),
            tuple(st.session_state["sensitivity_drivers"]),
        )
        tornado = sens_df.pivot(index="Driver", columns="Case", values=f"Delta {target}").fillna(0).reset_index()
        tdf = tornado.melt(id_vars="Driver", value_vars=["Low", "High"], var_name="Case", value_name="Delta")
        st.plotly_chart(
            px.bar(tdf, x="Delta", y="Driver", color="Case", orientation="h", title=f"Tornado Chart for {target}"),
            width="stretch",
        )
        st.dataframe(sens_df, width="stretch", hide_index=True)

    st.subheader("Goal seek")
    gs_left, gs_right = st.columns(2)
    with gs_left:
        st.selectbox(
            "Adjustable Input",
            available_sensitivity_drivers(),
            key="goal_driver",
            help="Input solved for so cumulative revenue reaches the target.",
        )
        st.number_input("Target Cumulative Revenue", min_value=0.0, step=1000.0, key="goal_target_value")
    with gs_right:
        st.number_input("Lower Bound", min_value=0.0, step=1.0, key="goal_lower_bound")
        st.number_input("Upper Bound", min_value=0.0, step=1.0, key="goal_upper_bound")
    if st.button("Run Goal Seek", help="Bisection search between the bounds."):
        result = solve_projection_driver(
            settings,
            rates,
            st.session_state["goal_driver"],
            float(st.session_state["goal_target_value"]),
            float(st.session_state["goal_lower_bound"]),
            float(st.session_state["goal_upper_bound"]),
        )
        st.session_state["goal_seek_result"] = result
        append_runtime_event(
            level="INFO" if result.status == "solved" else "WARNING",
            event="goal_seek_run",
            message=result.message,
            context={"driver": st.session_state["goal_driver"], "status": result.status, "iterations": result.iterations},
        )
    result = st.session_state.get("goal_seek_result")
    if result is not None:
        if result.status == "solved":
            st.success(f"{result.message} Value: {result.value:,.4f} (cumulative revenue {result.achieved:,.0f}).")
        else:
            st.warning(result.message)

with data_tab:
    st.text_input("Business Plan ID", key="business_plan_id", help="Identifier stored with the exported projection.")
    bundle = build_projection_bundle(st.session_state["business_plan_id"], settings, projection)
    st.download_button(
        "Download Projection JSON",
        json.dumps(bundle, indent=2),
        file_name=f"{st.session_state['business_plan_id']}_projection.json",
        mime="application/json",
        help="Settings plus computed monthly results.",
    )
    st.download_button(
        "Download Projection CSV",
        projection_df.to_csv(index=False),
        file_name="projection.csv",
        mime="text/csv",
        help="Monthly projection table.",
    )
    if not forecast_df.empty:
        st.download_button(
            "Download Forecast CSV",
            forecast_df.to_csv(index=False),
            file_name="cashflow_forecast.csv",
            mime="text/csv",
            help="12-month cash-flow table.",
        )
    import_warnings = st.session_state.get("import_warnings") or []
    if import_warnings:
        st.warning(" | ".join(import_warnings))
    uploaded = st.file_uploader("Import Projection JSON", type=["json"], help="Loads projection settings from a bundle.")
    if uploaded is not None and st.button("Apply Imported Settings", help="Replace the sidebar projection inputs."):
        try:
            raw_json = uploaded.getvalue().decode("utf-8")
        except UnicodeDecodeError as exc:
            append_runtime_event(level="ERROR", event="import_failed", message="Import file is not UTF-8.", exc=exc)
            st.error("Import failed: file is not valid UTF-8 JSON.")
        else:
            imported, _, warnings, unknown = parse_projection_bundle(raw_json)
            if unknown:
                warnings.append(f"Ignored unknown keys: {', '.join(unknown)}.")
            append_runtime_event(
                level="INFO",
                event="projection_imported",
                message="Projection settings imported.",
                context={"warnings": warnings},
            )
            st.session_state["_pending_imported_settings"] = settings_to_dict(imported)
            st.session_state["import_warnings"] = warnings
            st.rerun()

    with st.expander("Runtime Log", expanded=False):
        st.caption(f"Log file: {runtime_log_path()}")
        log_level = st.selectbox("Level", ["All", "INFO", "WARNING", "ERROR"], key="runtime_log_level")
        events = read_runtime_events(limit=50, level=None if log_level == "All" else log_level)
        if events:
            st.dataframe(pd.DataFrame(events)[["timestamp_utc", "level", "event", "message"]], width="stretch", hide_index=True)
        else:
            st.caption("No runtime events logged yet.")
