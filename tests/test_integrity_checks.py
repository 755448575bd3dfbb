from __future__ import annotations

from dataclasses import replace

import pandas as pd
import pytest

from freelance_plan.cashflow import forecast, forecast_frame
from freelance_plan.integrity_checks import run_forecast_checks, run_projection_checks
from freelance_plan.projection import project, projection_frame
from freelance_plan.streams import StreamRates


def test_projection_checks_pass_for_base_scenario(base_settings, base_rates):
    result = project(base_settings, base_rates).unwrap()
    assert run_projection_checks(projection_frame(result), base_settings, result.summary, tol=1e-6) == []


def test_projection_checks_pass_for_representative_scenarios(base_settings, base_rates):
    scenarios = [
        (replace(base_settings, months=60, growth_rate_percent=12.0), base_rates),
        (replace(base_settings, client_retention_rate_percent=0.0), base_rates),
        (replace(base_settings, initial_hours_per_week=40.0), base_rates),
        (base_settings, StreamRates()),
    ]
    for settings, rates in scenarios:
        result = project(settings, rates).unwrap()
        findings = run_projection_checks(projection_frame(result), settings, result.summary, tol=1e-6)
        assert findings == [], f"Unexpected integrity findings for {settings}: {findings}"


def test_projection_checks_detect_identity_break(base_settings, base_rates):
    df = projection_frame(project(base_settings, base_rates).unwrap())
    broken = df.copy()
    broken.loc[broken.index[2], "Total Revenue"] += 1.0
    broken.loc[broken.index[3], "Hours Per Week"] = base_settings.max_hours_per_week + 5
    findings = run_projection_checks(broken, base_settings, tol=1e-6)
    check_names = {f["Check"] for f in findings}
    assert "Revenue identity" in check_names
    assert "Hours cap" in check_names
    identity = next(f for f in findings if f["Check"] == "Revenue identity")
    assert identity["Period of Max Delta"] == "3"


def test_projection_checks_detect_negative_clients(base_settings, base_rates):
    df = projection_frame(project(base_settings, base_rates).unwrap())
    df.loc[df.index[0], "Package Clients"] = -1.0
    checks = {f["Check"] for f in run_projection_checks(df, base_settings)}
    assert "Package Clients non-negative" in checks


def test_forecast_checks_pass_and_detect_roll_forward_break(base_forecast_inputs):
    df = forecast_frame(forecast(**base_forecast_inputs).unwrap())
    assert run_forecast_checks(df) == []

    broken = df.copy()
    broken.loc[broken.index[5], "Cumulative Cash Flow"] += 10.0
    findings = run_forecast_checks(broken)
    roll = next(f for f in findings if f["Check"] == "Cumulative cash roll-forward")
    assert roll["Max Abs Delta"] == pytest.approx(10.0)
    assert roll["Period of Max Delta"] == df.loc[df.index[5], "Period"]


def test_missing_frame_reports_single_finding(base_settings):
    for findings in (run_projection_checks(pd.DataFrame(), base_settings), run_forecast_checks(None)):
        assert len(findings) == 1
        assert findings[0]["Check"] == "Dataframe not available"
