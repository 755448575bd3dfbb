from __future__ import annotations

from pathlib import Path

import freelance_plan.runtime_logging as runtime_logging
from freelance_plan.results import rejected, succeeded


def test_runtime_logging_append_and_read(tmp_path, monkeypatch):
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", Path(tmp_path) / "runtime_events.jsonl")

    runtime_logging.append_runtime_event(
        level="warning",
        event="projection_validation_failed",
        message="Projection inputs failed validation.",
        context={"errors": ["months must be at least 1."]},
    )
    events = runtime_logging.read_runtime_events(limit=10)
    assert len(events) == 1
    assert events[0]["event"] == "projection_validation_failed"
    assert events[0]["level"] == "WARNING"
    assert events[0]["context"]["errors"] == ["months must be at least 1."]


def test_runtime_logging_records_exception_details(tmp_path, monkeypatch):
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", Path(tmp_path) / "runtime_events.jsonl")

    try:
        raise ValueError("bad import")
    except ValueError as exc:
        runtime_logging.append_runtime_event("error", "import_failed", "Import failed.", exc=exc)

    event = runtime_logging.read_runtime_events(limit=1)[0]
    assert event["exception_type"] == "ValueError"
    assert event["exception_message"] == "bad import"
    assert "Traceback" in event["traceback"]


def test_runtime_logging_handles_malformed_lines(tmp_path, monkeypatch):
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    log_file = Path(tmp_path) / "runtime_events.jsonl"
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", log_file)

    log_file.parent.mkdir(parents=True, exist_ok=True)
    log_file.write_text('{"event":"ok","level":"INFO","timestamp_utc":"2026-01-01T00:00:00+00:00","message":"ok","context":{}}\nnot-json\n', encoding="utf-8")

    events = runtime_logging.read_runtime_events(limit=10)
    assert len(events) == 2
    assert events[0]["event"] == "ok"
    assert events[1]["event"] == "log_parse_error"


def test_configure_log_root_points_log_file_under_root(tmp_path, monkeypatch):
    monkeypatch.setattr(runtime_logging, "LOG_DIR", runtime_logging.LOG_DIR)
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", runtime_logging.RUNTIME_EVENTS_LOG_FILE)

    root = runtime_logging.configure_log_root(tmp_path / "store")
    assert root == tmp_path / "store"
    assert runtime_logging.RUNTIME_EVENTS_LOG_FILE == tmp_path / "store" / "runtime_events.jsonl"
    assert runtime_logging.configure_log_root("") == Path(".local_store")


def _point_log_at(tmp_path, monkeypatch):
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", Path(tmp_path) / "runtime_events.jsonl")


def test_log_outcome_records_errors_and_warnings_by_level(tmp_path, monkeypatch):
    _point_log_at(tmp_path, monkeypatch)

    assert runtime_logging.log_outcome("projection_validation_failed", rejected(["months must be at least 1."]), {"months": 0})
    assert runtime_logging.log_outcome("forecast_warnings", succeeded([], warnings=["2026-03 is outside the horizon."]))
    assert not runtime_logging.log_outcome("forecast_ok", succeeded([]))

    events = runtime_logging.read_runtime_events(limit=10)
    assert [(e["level"], e["event"]) for e in events] == [
        ("ERROR", "projection_validation_failed"),
        ("WARNING", "forecast_warnings"),
    ]
    assert events[0]["context"] == {"months": 0, "errors": ["months must be at least 1."], "warnings": []}
    assert events[1]["context"]["warnings"] == ["2026-03 is outside the horizon."]


def test_read_runtime_events_filters_level_and_keeps_most_recent(tmp_path, monkeypatch):
    _point_log_at(tmp_path, monkeypatch)
    for i in range(5):
        runtime_logging.append_runtime_event("info", f"run_{i}", "ok")
        runtime_logging.append_runtime_event("error", f"fail_{i}", "bad")

    errors = runtime_logging.read_runtime_events(limit=2, level="error")
    assert [e["event"] for e in errors] == ["fail_3", "fail_4"]
    assert [e["event"] for e in runtime_logging.read_runtime_events(limit=3)] == ["fail_3", "run_4", "fail_4"]
    assert runtime_logging.read_runtime_events(limit=0) == []
