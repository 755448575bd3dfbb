"""Revenue projector: month-by-month client and revenue simulation."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field

import pandas as pd

from freelance_plan.defaults import WEEKS_PER_MONTH
from freelance_plan.results import Outcome, rejected, succeeded
from freelance_plan.streams import StreamRates, StreamValues


@dataclass(frozen=True)
class ProjectionSettings:
    months: int = 12
    growth_rate_percent: float = 0.0
    client_retention_rate_percent: float = 100.0
    initial_hours_per_week: float = 0.0
    max_hours_per_week: float = 0.0
    initial_monthly_clients: StreamValues = field(default_factory=StreamValues)
    acquisition_rate: StreamValues = field(default_factory=StreamValues)


@dataclass(frozen=True)
class ProjectionState:
    """Simulation quantities carried from one month to the next."""

    clients: StreamValues
    acquisition_rate: StreamValues
    hours_per_week: float


@dataclass(frozen=True)
class MonthlyProjectionRecord:
    month: int
    hourly_revenue: float
    package_revenue: float
    subscription_revenue: float
    total_revenue: float
    hourly_clients: float
    package_clients: float
    subscription_clients: float
    hours_per_week: float


@dataclass(frozen=True)
class ProjectionSummary:
    cumulative_revenue: float
    average_monthly_revenue: float
    revenue_source_share: StreamValues


@dataclass(frozen=True)
class ProjectionResult:
    monthly: list[MonthlyProjectionRecord]
    summary: ProjectionSummary


def _is_number(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _check_non_negative(errors: list[str], name: str, value) -> None:
    if not _is_number(value):
        errors.append(f"{name} must be a finite number.")
    elif float(value) < 0:
        errors.append(f"{name} must be non-negative.")


def validate_projection_settings(settings: ProjectionSettings, rates: StreamRates) -> list[str]:
    errors: list[str] = []
    months = settings.months
    if not _is_number(months) or not float(months).is_integer():
        errors.append("months must be an integer.")
    elif int(months) < 1:
        errors.append("months must be at least 1.")

    _check_non_negative(errors, "growth_rate_percent", settings.growth_rate_percent)
    _check_non_negative(errors, "client_retention_rate_percent", settings.client_retention_rate_percent)
    if _is_number(settings.client_retention_rate_percent) and float(settings.client_retention_rate_percent) > 100:
        errors.append("client_retention_rate_percent must be in [0,100].")

    _check_non_negative(errors, "initial_hours_per_week", settings.initial_hours_per_week)
    _check_non_negative(errors, "max_hours_per_week", settings.max_hours_per_week)
    if (
        _is_number(settings.initial_hours_per_week)
        and _is_number(settings.max_hours_per_week)
        and float(settings.initial_hours_per_week) > float(settings.max_hours_per_week)
    ):
        errors.append("initial_hours_per_week must be <= max_hours_per_week.")

    for stream, value in settings.initial_monthly_clients.as_dict().items():
        _check_non_negative(errors, f"initial_monthly_clients.{stream}", value)
    for stream, value in settings.acquisition_rate.as_dict().items():
        _check_non_negative(errors, f"acquisition_rate.{stream}", value)
    for name, value in rates.as_dict().items():
        _check_non_negative(errors, name, value)
    return errors


def initial_state(settings: ProjectionSettings) -> ProjectionState:
    return ProjectionState(
        clients=settings.initial_monthly_clients,
        acquisition_rate=settings.acquisition_rate,
        hours_per_week=float(settings.initial_hours_per_week),
    )


def month_revenue(state: ProjectionState, rates: StreamRates) -> tuple[float, float, float]:
    """Return (hourly, package, subscription) revenue for the state's month."""
    hours_per_month = state.hours_per_week * WEEKS_PER_MONTH
    hourly = rates.avg_hourly_rate * hours_per_month * state.clients.hourly
    package = rates.avg_package_price * state.clients.packages
    subscription = rates.avg_subscription_price * state.clients.subscriptions
    return hourly, package, subscription


def advance_state(state: ProjectionState, settings: ProjectionSettings) -> ProjectionState:
    """Apply retention, acquisition, acquisition growth and hours ramp, in that order."""
    growth = float(settings.growth_rate_percent)
    retained = state.clients.scale(float(settings.client_retention_rate_percent) / 100)
    clients = retained.add(state.acquisition_rate)
    acquisition_rate = state.acquisition_rate.scale(1 + growth / 100)

    hours = state.hours_per_week
    max_hours = float(settings.max_hours_per_week)
    if hours < max_hours:
        # Hours ramp at half the general growth rate.
        hours = min(max_hours, hours * (1 + growth / 200))
    return ProjectionState(clients=clients, acquisition_rate=acquisition_rate, hours_per_week=hours)


def _share(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def project(settings: ProjectionSettings, rates: StreamRates) -> Outcome:
    """Simulate ``settings.months`` months and return an outcome holding a ProjectionResult."""
    errors = validate_projection_settings(settings, rates)
    if errors:
        return rejected(errors)

    months = int(settings.months)
    state = initial_state(settings)
    monthly: list[MonthlyProjectionRecord] = []
    hourly_total = 0.0
    packages_total = 0.0
    subscriptions_total = 0.0
    cumulative = 0.0

    for month in range(1, months + 1):
        hourly, package, subscription = month_revenue(state, rates)
        total = hourly + package + subscription
        monthly.append(
            MonthlyProjectionRecord(
                month=month,
                hourly_revenue=hourly,
                package_revenue=package,
                subscription_revenue=subscription,
                total_revenue=total,
                hourly_clients=state.clients.hourly,
                package_clients=state.clients.packages,
                subscription_clients=state.clients.subscriptions,
                hours_per_week=state.hours_per_week,
            )
        )
        hourly_total += hourly
        packages_total += package
        subscriptions_total += subscription
        cumulative += total
        state = advance_state(state, settings)

    summary = ProjectionSummary(
        cumulative_revenue=cumulative,
        average_monthly_revenue=cumulative / months,
        revenue_source_share=StreamValues(
            _share(hourly_total, cumulative),
            _share(packages_total, cumulative),
            _share(subscriptions_total, cumulative),
        ),
    )
    return succeeded(ProjectionResult(monthly=monthly, summary=summary))


PROJECTION_COLUMNS = {
    "month": "Month",
    "hourly_revenue": "Hourly Revenue",
    "package_revenue": "Package Revenue",
    "subscription_revenue": "Subscription Revenue",
    "total_revenue": "Total Revenue",
    "hourly_clients": "Hourly Clients",
    "package_clients": "Package Clients",
    "subscription_clients": "Subscription Clients",
    "hours_per_week": "Hours Per Week",
}


def projection_frame(result: ProjectionResult) -> pd.DataFrame:
    """One row per simulated month, with Year/Quarter helper columns."""
    df = pd.DataFrame([asdict(r) for r in result.monthly], columns=list(PROJECTION_COLUMNS))
    df = df.rename(columns=PROJECTION_COLUMNS)
    month_idx = df["Month"].astype(int) - 1
    df.insert(1, "Year", (month_idx // 12 + 1).astype(int))
    df.insert(2, "Quarter", (month_idx // 3 + 1).astype(int))
    df["Cumulative Revenue"] = df["Total Revenue"].cumsum()
    return df
