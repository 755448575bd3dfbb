"""One-way sensitivity analysis helpers."""

from __future__ import annotations

from dataclasses import replace

import pandas as pd

from freelance_plan.projection import ProjectionResult, ProjectionSettings, project
from freelance_plan.streams import StreamRates


DEFAULT_SENSITIVITY_DRIVERS = [
    "growth_rate_percent",
    "client_retention_rate_percent",
    "acquisition_rate.hourly",
    "acquisition_rate.packages",
    "acquisition_rate.subscriptions",
    "avg_hourly_rate",
    "avg_package_price",
    "avg_subscription_price",
    "initial_hours_per_week",
]

SETTINGS_DRIVERS = {
    "growth_rate_percent",
    "client_retention_rate_percent",
    "initial_hours_per_week",
    "max_hours_per_week",
}
RATE_DRIVERS = {"avg_hourly_rate", "avg_package_price", "avg_subscription_price"}
STREAM_DRIVER_GROUPS = {"initial_monthly_clients", "acquisition_rate"}

TARGET_OPTIONS = [
    "Cumulative Revenue",
    "Average Monthly Revenue",
    "Final Month Revenue",
]


def available_sensitivity_drivers() -> list[str]:
    drivers = set(SETTINGS_DRIVERS) | set(RATE_DRIVERS)
    for group in STREAM_DRIVER_GROUPS:
        for stream in ("hourly", "packages", "subscriptions"):
            drivers.add(f"{group}.{stream}")
    return sorted(drivers)


def driver_value(settings: ProjectionSettings, rates: StreamRates, driver: str) -> float:
    if driver in SETTINGS_DRIVERS:
        return float(getattr(settings, driver))
    if driver in RATE_DRIVERS:
        return float(getattr(rates, driver))
    group, _, stream = driver.partition(".")
    if group in STREAM_DRIVER_GROUPS and stream:
        return float(getattr(getattr(settings, group), stream))
    raise ValueError(f"Unknown sensitivity driver: {driver}")


def apply_driver(
    settings: ProjectionSettings, rates: StreamRates, driver: str, value: float
) -> tuple[ProjectionSettings, StreamRates]:
    """Return copies of settings and rates with one driver replaced."""
    if driver in SETTINGS_DRIVERS:
        return replace(settings, **{driver: float(value)}), rates
    if driver in RATE_DRIVERS:
        return settings, replace(rates, **{driver: float(value)})
    group, _, stream = driver.partition(".")
    if group in STREAM_DRIVER_GROUPS and stream:
        updated = replace(getattr(settings, group), **{stream: float(value)})
        return replace(settings, **{group: updated}), rates
    raise ValueError(f"Unknown sensitivity driver: {driver}")


def _clamp_driver(settings: ProjectionSettings, driver: str, value: float) -> float:
    value = max(value, 0.0)
    if driver == "client_retention_rate_percent":
        return min(value, 100.0)
    if driver == "initial_hours_per_week":
        return min(value, float(settings.max_hours_per_week))
    if driver == "max_hours_per_week":
        return max(value, float(settings.initial_hours_per_week))
    return value


def evaluate_outputs(result: ProjectionResult) -> dict:
    return {
        "Cumulative Revenue": float(result.summary.cumulative_revenue),
        "Average Monthly Revenue": float(result.summary.average_monthly_revenue),
        "Final Month Revenue": float(result.monthly[-1].total_revenue),
    }


def run_one_way_sensitivity(
    settings: ProjectionSettings,
    rates: StreamRates,
    delta_pct: float,
    drivers: list[str] | None = None,
) -> pd.DataFrame:
    base = evaluate_outputs(project(settings, rates).unwrap())

    if drivers is None or len(drivers) == 0:
        drivers = list(DEFAULT_SENSITIVITY_DRIVERS)

    rows = []
    for driver in drivers:
        base_value = driver_value(settings, rates, driver)
        for case, mult in [("Low", 1 - delta_pct), ("High", 1 + delta_pct)]:
            value = _clamp_driver(settings, driver, base_value * mult)
            scenario_settings, scenario_rates = apply_driver(settings, rates, driver, value)
            out = evaluate_outputs(project(scenario_settings, scenario_rates).unwrap())
            rows.append(
                {
                    "Driver": driver,
                    "Case": case,
                    "Driver Value": value,
                    **{k: out[k] for k in base.keys()},
                    **{f"Delta {k}": out[k] - base[k] for k in base.keys()},
                }
            )

    return pd.DataFrame(rows)
