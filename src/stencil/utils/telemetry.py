"""Structured event log (opt-out) written as JSON lines under the log directory."""

from __future__ import annotations

import json
import sys
import time
from functools import lru_cache
from importlib import resources
from typing import Any, Iterator

from jsonschema import Draft202012Validator

from stencil.settings import RuntimeSettings

LEVELS = {"info", "warn", "error"}

_SCHEMA_PACKAGE = "stencil.resources"
_SCHEMA_RESOURCE = "telemetry.schema.json"


def telemetry_enabled(settings: RuntimeSettings) -> bool:
    return settings.telemetry


def record_event(settings: RuntimeSettings, event: str, payload: dict[str, Any] | None = None, **extra: Any) -> None:
    record_structured_event(settings, event, payload=payload, **extra)


def record_structured_event(
    settings: RuntimeSettings,
    event: str,
    *,
    payload: dict[str, Any] | None = None,
    level: str = "info",
    status: str | None = None,
    component: str | None = None,
    duration_ms: float | None = None,
) -> None:
    if not telemetry_enabled(settings):
        return
    record: dict[str, Any] = {
        "ts": time.time(),
        "event": event,
        "payload": payload or {},
        "level": level,
    }
    if status:
        record["status"] = status
    if component:
        record["component"] = component
    if duration_ms is not None:
        record["durationMs"] = duration_ms
    _validate_record(record)
    _validator().validate(record)
    log_path = settings.telemetry_file
    line = json.dumps(record, ensure_ascii=False, default=str) + "\n"
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as fh:
            fh.write(line)
    except OSError as exc:
        # The event is dropped; a command never fails because its log cannot be written.
        print(f"Warning: unable to write telemetry to {log_path}: {exc}", file=sys.stderr)


def iter_events(settings: RuntimeSettings) -> Iterator[dict[str, Any]]:
    log_path = settings.telemetry_file
    if not log_path.exists():
        return
    with log_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                continue


def _validate_record(record: dict[str, Any]) -> None:
    if not isinstance(record.get("event"), str) or not record["event"].strip():
        raise ValueError("Telemetry event must have non-empty string 'event'")
    level = record.get("level", "info")
    if level not in LEVELS:
        raise ValueError(f"Telemetry level '{level}' is not supported")
    record["ts"] = float(record.get("ts", time.time()))


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    resource = resources.files(_SCHEMA_PACKAGE) / _SCHEMA_RESOURCE
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


__all__ = ["iter_events", "record_event", "record_structured_event", "telemetry_enabled"]
