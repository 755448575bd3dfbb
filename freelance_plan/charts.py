"""Plotly figures for projection and forecast outputs."""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from freelance_plan.projection import ProjectionSummary
from freelance_plan.streams import STREAM_LABELS, RevenueStream


REVENUE_STREAM_COLUMNS = ["Hourly Revenue", "Package Revenue", "Subscription Revenue"]
CLIENT_COLUMNS = ["Hourly Clients", "Package Clients", "Subscription Clients"]


def revenue_by_stream_figure(df: pd.DataFrame) -> go.Figure | None:
    if df is None or df.empty:
        return None
    melt = df.melt(id_vars=["Month"], value_vars=REVENUE_STREAM_COLUMNS, var_name="Stream", value_name="Revenue")
    return px.area(melt, x="Month", y="Revenue", color="Stream", title="Monthly Revenue by Stream")


def clients_figure(df: pd.DataFrame) -> go.Figure | None:
    if df is None or df.empty:
        return None
    fig = px.line(df, x="Month", y=CLIENT_COLUMNS, title="Active Clients and Billable Hours")
    fig.add_trace(go.Scatter(x=df["Month"], y=df["Hours Per Week"], name="Hours Per Week", yaxis="y2"))
    fig.update_layout(yaxis2=dict(overlaying="y", side="right", title="Hours / week"))
    return fig


def revenue_share_figure(summary: ProjectionSummary) -> go.Figure | None:
    if summary is None or summary.cumulative_revenue <= 0:
        return None
    shares = summary.revenue_source_share
    labels = [STREAM_LABELS[s] for s in RevenueStream]
    values = [shares.get(s) for s in RevenueStream]
    fig = go.Figure(data=[go.Pie(labels=labels, values=values, hole=0.4)])
    fig.update_layout(title="Revenue Share by Stream")
    return fig


def cashflow_figure(df: pd.DataFrame) -> go.Figure | None:
    if df is None or df.empty:
        return None
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df["Period"], y=df["Revenue"], name="Revenue"))
    fig.add_trace(go.Bar(x=df["Period"], y=-df["Expenses"], name="Expenses"))
    fig.add_trace(go.Scatter(x=df["Period"], y=df["Cumulative Cash Flow"], name="Cumulative Cash Flow", mode="lines+markers"))
    fig.update_layout(title="12-Month Cash Flow Forecast", barmode="relative")
    return fig


def expense_breakdown_figure(breakdown: pd.DataFrame) -> go.Figure | None:
    if breakdown is None or breakdown.empty or float(breakdown["Annual Amount"].sum()) <= 0:
        return None
    return px.pie(breakdown, names="Category", values="Annual Amount", title="Annual Expenses by Category")
