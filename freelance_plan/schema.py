"""Plain-data adapters for projection settings and results."""

from __future__ import annotations

import json
import math
from copy import deepcopy
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from freelance_plan.defaults import DEFAULT_SETTINGS
from freelance_plan.projection import ProjectionResult, ProjectionSettings
from freelance_plan.streams import RevenueStream, StreamValues


SCHEMA_VERSION = 1
PROJECTION_TYPE = "revenue_projection"

# Stored business-plan records use the camelCase names of the web client.
LEGACY_KEY_ALIASES = {
    "growthRate": "growth_rate_percent",
    "clientRetentionRate": "client_retention_rate_percent",
    "initialHoursPerWeek": "initial_hours_per_week",
    "maxHoursPerWeek": "max_hours_per_week",
    "initialMonthlyClients": "initial_monthly_clients",
    "acquisitionRate": "acquisition_rate",
}
STREAM_KEYS = {"initial_monthly_clients", "acquisition_rate"}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _coerce_number(value: Any, default: float, key: str, warnings: list[str]) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        warnings.append(f"{key} invalid and reset to default.")
        return float(default)
    if not math.isfinite(number):
        warnings.append(f"{key} invalid and reset to default.")
        return float(default)
    return number


def _coerce_streams(raw: Any, defaults: dict, key: str, warnings: list[str]) -> StreamValues:
    if not isinstance(raw, dict):
        warnings.append(f"{key} ignored because it is not an object.")
        raw = {}
    values = {}
    for stream in RevenueStream:
        name = stream.value
        values[name] = _coerce_number(raw.get(name, defaults[name]), defaults[name], f"{key}.{name}", warnings)
    return StreamValues.from_dict(values)


def settings_from_dict(raw: dict) -> tuple[ProjectionSettings, list[str], list[str]]:
    """Build settings from a stored record; returns (settings, warnings, unknown_keys)."""
    warnings: list[str] = []
    unknown_keys: list[str] = []
    merged = deepcopy(DEFAULT_SETTINGS)
    payload = raw if isinstance(raw, dict) else {}
    if not isinstance(raw, dict):
        warnings.append("Settings payload is not an object; defaults used.")

    for k, v in payload.items():
        key = LEGACY_KEY_ALIASES.get(k, k)
        if key in merged:
            merged[key] = v
        else:
            unknown_keys.append(k)

    months = _coerce_number(merged["months"], DEFAULT_SETTINGS["months"], "months", warnings)
    settings = ProjectionSettings(
        months=int(months) if float(months).is_integer() else months,
        growth_rate_percent=_coerce_number(
            merged["growth_rate_percent"], DEFAULT_SETTINGS["growth_rate_percent"], "growth_rate_percent", warnings
        ),
        client_retention_rate_percent=_coerce_number(
            merged["client_retention_rate_percent"],
            DEFAULT_SETTINGS["client_retention_rate_percent"],
            "client_retention_rate_percent",
            warnings,
        ),
        initial_hours_per_week=_coerce_number(
            merged["initial_hours_per_week"], DEFAULT_SETTINGS["initial_hours_per_week"], "initial_hours_per_week", warnings
        ),
        max_hours_per_week=_coerce_number(
            merged["max_hours_per_week"], DEFAULT_SETTINGS["max_hours_per_week"], "max_hours_per_week", warnings
        ),
        initial_monthly_clients=_coerce_streams(
            merged["initial_monthly_clients"], DEFAULT_SETTINGS["initial_monthly_clients"], "initial_monthly_clients", warnings
        ),
        acquisition_rate=_coerce_streams(
            merged["acquisition_rate"], DEFAULT_SETTINGS["acquisition_rate"], "acquisition_rate", warnings
        ),
    )
    return settings, warnings, sorted(unknown_keys)


def settings_to_dict(settings: ProjectionSettings) -> dict:
    out = asdict(settings)
    for key in STREAM_KEYS:
        out[key] = getattr(settings, key).as_dict()
    return out


def result_to_dict(result: ProjectionResult) -> dict:
    return {
        "cumulative_revenue": result.summary.cumulative_revenue,
        "average_monthly_revenue": result.summary.average_monthly_revenue,
        "revenue_source_share": result.summary.revenue_source_share.as_dict(),
        "monthly": [asdict(r) for r in result.monthly],
    }


def build_projection_bundle(business_plan_id: str, settings: ProjectionSettings, result: ProjectionResult) -> dict:
    return {
        "type": PROJECTION_TYPE,
        "schema_version": SCHEMA_VERSION,
        "business_plan_id": str(business_plan_id),
        "created_at": _now_iso(),
        "projection_settings": settings_to_dict(settings),
        "projection_results": result_to_dict(result),
    }


def parse_projection_bundle(raw_json: str) -> tuple[ProjectionSettings, dict | None, list[str], list[str]]:
    """Parse a stored bundle (or bare settings JSON) into settings plus stored results."""
    try:
        payload = json.loads(raw_json)
    except json.JSONDecodeError:
        settings, _, _ = settings_from_dict({})
        return settings, None, ["Could not parse projection JSON."], []
    if not isinstance(payload, dict):
        settings, _, _ = settings_from_dict({})
        return settings, None, ["Projection payload is not a JSON object."], []

    if payload.get("type") == PROJECTION_TYPE:
        raw_settings = payload.get("projection_settings", payload.get("projectionSettings", {}))
        settings, warnings, unknown = settings_from_dict(raw_settings)
        version = payload.get("schema_version")
        if version != SCHEMA_VERSION:
            warnings.append(f"Imported schema_version={version}; expected schema_version={SCHEMA_VERSION}.")
        results = payload.get("projection_results")
        return settings, results if isinstance(results, dict) else None, warnings, unknown

    if "projectionSettings" in payload:
        settings, warnings, unknown = settings_from_dict(payload["projectionSettings"])
        warnings.append("Imported web client projection record.")
        results = payload.get("projectionResults")
        return settings, results if isinstance(results, dict) else None, warnings, unknown

    settings, warnings, unknown = settings_from_dict(payload)
    warnings.append("Imported bare settings JSON without bundle metadata.")
    return settings, None, warnings, unknown
