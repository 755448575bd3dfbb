"""JSONL event log for planner runs: validation outcomes, imports and crashes."""

from __future__ import annotations

import json
import os
import sys
import traceback
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from streamlit.runtime.scriptrunner import get_script_run_ctx

from freelance_plan.results import Outcome


LOG_DIR = Path(".local_store")
RUNTIME_EVENTS_LOG_FILE = LOG_DIR / "runtime_events.jsonl"

_STORAGE_ENV_VAR = "FREELANCE_PLAN_STORAGE_ROOT"
_LOG_FILE_NAME = "runtime_events.jsonl"
LEVELS = ("INFO", "WARNING", "ERROR")

_EXCEPTION_HOOK_INSTALLED = False


def _json_default(value: Any):
    if isinstance(value, (set, tuple)):
        return list(value)
    return str(value)


def configure_log_root(path_value: str | Path | None) -> Path:
    """Point the event log at ``<root>/runtime_events.jsonl``; blank means ``.local_store``."""
    global LOG_DIR, RUNTIME_EVENTS_LOG_FILE
    text = str(path_value or "").strip()
    LOG_DIR = Path(os.path.expandvars(os.path.expanduser(text))) if text else Path(".local_store")
    RUNTIME_EVENTS_LOG_FILE = LOG_DIR / _LOG_FILE_NAME
    return LOG_DIR


def runtime_log_path() -> str:
    return str(RUNTIME_EVENTS_LOG_FILE.resolve())


def _event_record(level, event, message, context, exc) -> dict[str, Any]:
    record: dict[str, Any] = {
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "level": str(level).upper(),
        "event": str(event),
        "message": str(message),
        "context": dict(context or {}),
    }
    if exc is not None:
        record.update(
            exception_type=type(exc).__name__,
            exception_message=str(exc),
            traceback="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )
    return record


def append_runtime_event(
    level: str,
    event: str,
    message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> None:
    """Append one event line. A failed write is reported on stderr and never reaches the dashboard."""
    line = json.dumps(_event_record(level, event, message, context, exc), default=_json_default, ensure_ascii=False)
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        with RUNTIME_EVENTS_LOG_FILE.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError as err:
        print(f"runtime log write failed: {err}", file=sys.stderr)


def log_outcome(event: str, outcome: Outcome, context: dict[str, Any] | None = None) -> bool:
    """Record a rejected engine outcome as ERROR, or an accepted one with warnings as WARNING.

    Returns False when there was nothing to record.
    """
    payload = dict(context or {})
    if not outcome.ok:
        payload.update(errors=list(outcome.errors), warnings=list(outcome.warnings))
        append_runtime_event("ERROR", event, f"{len(outcome.errors)} validation error(s).", payload)
        return True
    if outcome.warnings:
        payload["warnings"] = list(outcome.warnings)
        append_runtime_event("WARNING", event, f"{len(outcome.warnings)} warning(s).", payload)
        return True
    return False


def read_runtime_events(limit: int = 200, level: str | None = None) -> list[dict[str, Any]]:
    """Most recent ``limit`` events, oldest first, optionally restricted to one level.

    Malformed lines come back as ``log_parse_error`` events so the log panel
    shows them instead of failing.
    """
    if limit <= 0 or not RUNTIME_EVENTS_LOG_FILE.exists():
        return []
    wanted = str(level).upper() if level else None
    recent: deque[dict[str, Any]] = deque(maxlen=int(limit))
    try:
        with RUNTIME_EVENTS_LOG_FILE.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\n")
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    record = _event_record("ERROR", "log_parse_error", "Malformed log line encountered.", {"line": line}, None)
                if wanted is None or record.get("level") == wanted:
                    recent.append(record)
    except OSError:
        return []
    return list(recent)


def install_global_exception_logging() -> None:
    """Record uncaught exceptions raised inside a Streamlit script run, then defer to the previous hook."""
    global _EXCEPTION_HOOK_INSTALLED
    if _EXCEPTION_HOOK_INSTALLED:
        return
    previous_hook = sys.excepthook

    def _hook(exc_type, exc, exc_tb):
        if get_script_run_ctx() is not None:
            append_runtime_event("ERROR", "uncaught_exception", str(exc), exc=exc)
        previous_hook(exc_type, exc, exc_tb)

    sys.excepthook = _hook
    _EXCEPTION_HOOK_INSTALLED = True


configure_log_root(os.getenv(_STORAGE_ENV_VAR, ""))
