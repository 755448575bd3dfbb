"""Input guidance metadata and advisory range checks."""

from __future__ import annotations

from typing import Any


INPUT_GUIDANCE: dict[str, dict[str, Any]] = {
    "months": {"min": 6, "max": 60, "note": "Freelance plans usually look one to three years ahead."},
    "growth_rate_percent": {"min": 0.0, "max": 15.0, "note": "Monthly growth above 15% rarely holds for a solo business."},
    "client_retention_rate_percent": {"min": 60.0, "max": 98.0, "note": "Share of clients still active the following month."},
    "initial_hours_per_week": {"min": 5.0, "max": 40.0, "note": "Billable hours in the first month."},
    "max_hours_per_week": {"min": 10.0, "max": 50.0, "note": "Sustainable billable ceiling once the pipeline is full."},
    "initial_monthly_clients.hourly": {"min": 0.0, "max": 10.0, "note": "Hourly clients active at launch."},
    "initial_monthly_clients.packages": {"min": 0.0, "max": 10.0, "note": "Package clients active at launch."},
    "initial_monthly_clients.subscriptions": {"min": 0.0, "max": 30.0, "note": "Subscribers at launch."},
    "acquisition_rate.hourly": {"min": 0.0, "max": 5.0, "note": "New hourly clients signed per month."},
    "acquisition_rate.packages": {"min": 0.0, "max": 5.0, "note": "New package clients signed per month."},
    "acquisition_rate.subscriptions": {"min": 0.0, "max": 10.0, "note": "New subscribers per month."},
    "avg_hourly_rate": {"min": 20.0, "max": 200.0, "note": "Typical freelance hourly rate range."},
    "avg_package_price": {"min": 200.0, "max": 15000.0, "note": "Flat price of a typical engagement."},
    "avg_subscription_price": {"min": 20.0, "max": 2000.0, "note": "Monthly retainer or maintenance plan price."},
    "initial_investment": {"min": 0.0, "max": 30000.0, "note": "Equipment, training and launch marketing."},
}


def _fmt(v: float) -> str:
    if abs(v - round(v)) < 1e-9:
        return f"{int(round(v))}"
    return f"{v:.3f}".rstrip("0").rstrip(".")


def help_with_guidance(key: str, base_help: str) -> str:
    g = INPUT_GUIDANCE.get(key)
    if not g:
        return base_help
    return f"{base_help} Reasonable range: {_fmt(g['min'])} to {_fmt(g['max'])}. {g['note']}"


def flatten_inputs(inputs: dict, prefix: str = "") -> dict:
    """Flatten nested per-stream dicts into dotted keys."""
    flat: dict = {}
    for key, value in inputs.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten_inputs(value, prefix=f"{name}."))
        else:
            flat[name] = value
    return flat


def advisory_warnings(inputs: dict) -> list[str]:
    warnings: list[str] = []
    flat = flatten_inputs(inputs)
    for key, g in INPUT_GUIDANCE.items():
        if key not in flat:
            continue
        try:
            v = float(flat[key])
        except (TypeError, ValueError):
            continue
        if v < g["min"] or v > g["max"]:
            warnings.append(
                f"{key}={v:.3f} is outside the recommended range [{_fmt(g['min'])}, {_fmt(g['max'])}]."
            )
    return warnings
