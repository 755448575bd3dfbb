from __future__ import annotations

from freelance_plan.input_metadata import INPUT_GUIDANCE, advisory_warnings, flatten_inputs, help_with_guidance


def test_help_with_guidance_appends_range_and_note():
    text = help_with_guidance("growth_rate_percent", "Monthly growth.")
    assert text.startswith("Monthly growth. Reasonable range: 0 to 15.")
    assert INPUT_GUIDANCE["growth_rate_percent"]["note"] in text
    assert help_with_guidance("unknown_key", "Base.") == "Base."


def test_flatten_inputs_uses_dotted_stream_keys():
    flat = flatten_inputs({"months": 12, "acquisition_rate": {"hourly": 1.0}})
    assert flat == {"months": 12, "acquisition_rate.hourly": 1.0}


def test_advisory_warnings_flag_out_of_range_values_only():
    warnings = advisory_warnings(
        {
            "growth_rate_percent": 40.0,
            "client_retention_rate_percent": 90.0,
            "acquisition_rate": {"subscriptions": 25.0},
            "avg_hourly_rate": "n/a",
        }
    )
    assert len(warnings) == 2
    assert warnings[0].startswith("growth_rate_percent=40.000 is outside the recommended range [0, 15]")
    assert warnings[1].startswith("acquisition_rate.subscriptions=25.000")
