"""Projection and forecast integrity checks."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from freelance_plan.projection import ProjectionSettings, ProjectionSummary


def _finding(check: str, max_abs_delta: float, period: str, lhs_name: str, rhs_name: str) -> dict[str, Any]:
    return {
        "Check": check,
        "Max Abs Delta": float(max_abs_delta),
        "Period of Max Delta": period,
        "LHS": lhs_name,
        "RHS": rhs_name,
    }


def _period_of_max_delta(df: pd.DataFrame, delta: np.ndarray, label_col: str) -> str:
    if len(delta) == 0:
        return ""
    idx = int(np.argmax(np.abs(delta)))
    if label_col in df.columns and idx < len(df):
        return str(df[label_col].iloc[idx])
    return str(idx)


def _check_series_identity(
    findings: list[dict[str, Any]],
    df: pd.DataFrame,
    label_col: str,
    check_name: str,
    lhs_name: str,
    rhs_name: str,
    lhs: np.ndarray,
    rhs: np.ndarray,
    tol: float,
) -> None:
    delta = np.nan_to_num(np.asarray(lhs, dtype=float) - np.asarray(rhs, dtype=float), nan=0.0)
    if len(delta) == 0:
        return
    max_abs = float(np.max(np.abs(delta)))
    if max_abs > float(tol):
        findings.append(_finding(check_name, max_abs, _period_of_max_delta(df, delta, label_col), lhs_name, rhs_name))


def _check_floor(
    findings: list[dict[str, Any]], df: pd.DataFrame, label_col: str, check_name: str, col: str, floor: float, tol: float
) -> None:
    shortfall = np.minimum(df[col].to_numpy(dtype=float) - floor, 0.0)
    _check_series_identity(findings, df, label_col, check_name, col, f">= {floor:g}", shortfall, np.zeros(len(shortfall)), tol)


def run_projection_checks(
    df: pd.DataFrame,
    settings: ProjectionSettings,
    summary: ProjectionSummary | None = None,
    tol: float = 1e-6,
) -> list[dict[str, Any]]:
    """Return integrity findings for a projection frame (empty list means all checks passed)."""
    if not isinstance(df, pd.DataFrame) or df.empty:
        return [{"Check": "Dataframe not available", "Max Abs Delta": np.nan, "Period of Max Delta": "", "LHS": "", "RHS": ""}]

    findings: list[dict[str, Any]] = []
    label = "Month"

    _check_series_identity(
        findings,
        df,
        label,
        "Revenue identity",
        "Total Revenue",
        "Hourly+Package+Subscription",
        df["Total Revenue"].to_numpy(),
        (df["Hourly Revenue"] + df["Package Revenue"] + df["Subscription Revenue"]).to_numpy(),
        tol,
    )
    _check_series_identity(
        findings,
        df,
        label,
        "Month indexing",
        "Month",
        "1..months",
        df["Month"].to_numpy(),
        np.arange(1, len(df) + 1),
        0.0,
    )
    for col in ("Hourly Clients", "Package Clients", "Subscription Clients", "Hours Per Week"):
        _check_floor(findings, df, label, f"{col} non-negative", col, 0.0, tol)

    hours = df["Hours Per Week"].to_numpy(dtype=float)
    cap = float(settings.max_hours_per_week)
    _check_series_identity(
        findings,
        df,
        label,
        "Hours cap",
        "Hours Per Week",
        "<= max_hours_per_week",
        np.maximum(hours - cap, 0.0),
        np.zeros(len(hours)),
        tol,
    )
    if len(hours) > 1:
        _check_series_identity(
            findings,
            df.iloc[1:].reset_index(drop=True),
            label,
            "Hours ramp monotonic",
            "Hours[t] - Hours[t-1]",
            ">= 0",
            np.minimum(np.diff(hours), 0.0),
            np.zeros(len(hours) - 1),
            tol,
        )

    if summary is not None:
        cumulative = float(df["Total Revenue"].sum())
        _check_series_identity(
            findings,
            df.iloc[-1:],
            label,
            "Cumulative revenue",
            "cumulative_revenue",
            "sum(Total Revenue)",
            np.array([summary.cumulative_revenue]),
            np.array([cumulative]),
            tol,
        )
        share_total = summary.revenue_source_share.total()
        expected_share = 100.0 if summary.cumulative_revenue > 0 else 0.0
        _check_series_identity(
            findings,
            df.iloc[-1:],
            label,
            "Revenue share total",
            "sum(revenue_source_share)",
            f"{expected_share:g}",
            np.array([share_total]),
            np.array([expected_share]),
            tol,
        )

    return findings


def run_forecast_checks(df: pd.DataFrame, tol: float = 1e-6) -> list[dict[str, Any]]:
    """Return integrity findings for a cash-flow forecast frame."""
    if not isinstance(df, pd.DataFrame) or df.empty:
        return [{"Check": "Dataframe not available", "Max Abs Delta": np.nan, "Period of Max Delta": "", "LHS": "", "RHS": ""}]

    findings: list[dict[str, Any]] = []
    label = "Period"

    _check_series_identity(
        findings,
        df,
        label,
        "Net cash flow identity",
        "Net Cash Flow",
        "Revenue - Expenses",
        df["Net Cash Flow"].to_numpy(),
        (df["Revenue"] - df["Expenses"]).to_numpy(),
        tol,
    )
    prev_cumulative = np.concatenate(([0.0], df["Cumulative Cash Flow"].to_numpy()[:-1]))
    _check_series_identity(
        findings,
        df,
        label,
        "Cumulative cash roll-forward",
        "Cumulative Cash Flow",
        "Prior Cumulative + Net Cash Flow",
        df["Cumulative Cash Flow"].to_numpy(),
        prev_cumulative + df["Net Cash Flow"].to_numpy(),
        tol,
    )
    _check_floor(findings, df, label, "Expenses non-negative", "Expenses", 0.0, tol)

    return findings
