"""
servicehealth.logging
AUTHOR: carter-vin

Structured JSON event logging for ops ingestion

Contract:
- One JSON object per line to stderr (stdout is reserved for console/report output)
- Same line appended to the configured event log file, if any
- Stable event vocabulary (allowlist)
- UTC timestamps only
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from servicehealth.emit import LogTarget, append_log_line

# Event types
VALID_EVENT_TYPES = {
    "health_check_start",
    "check_failed",
    "health_report_written",
    "report_write_failed",
    "health_check_completed",
    "monitor_start",
    "monitor_sample",
    "monitor_alert",
    "monitor_shutdown",
    "monitor_write_failed",
    "log_rotated",
    "endpoint_poll_attempt",
    "endpoint_healthy",
    "endpoint_unhealthy",
    "deploy_start",
    "deploy_step",
    "deploy_warning",
    "deploy_failed",
    "deploy_completed",
}

_event_log: LogTarget | None = None


def _truncate_message(value: str, *, limit: int = 200) -> str:
    """
    Cap message length to keep events compact
    """
    if len(value) <= limit:
        return value
    return value[:limit] + f"...[truncated {len(value) - limit} chars]"


# Time: current in UTC ISO 8601
def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def set_event_log(
    path: Path | None,
    *,
    max_bytes: int | None = None,
    rotate_count: int = 3,
) -> None:
    """
    Route a copy of every event line to `path` (None disables the file copy)

    The file is rotated like the monitor log once it reaches max_bytes.
    """
    global _event_log
    if path is None:
        _event_log = None
        return
    _event_log = LogTarget(path=path, max_bytes=max_bytes, rotate_count=rotate_count)


def _append_to_event_log(line: str) -> dict[str, Any] | None:
    if _event_log is None:
        return None
    try:
        return append_log_line(_event_log, line)
    except OSError as e:
        # Losing the file copy must not take down a health run; stderr still has it
        print(
            json.dumps(
                {"event_log_error": type(e).__name__, "message": str(e)},
                sort_keys=True,
                separators=(",", ":"),
            ),
            file=sys.stderr,
        )
        return None


def emit_event(event_type: str, *, version: str, **fields: Any) -> None:
    """
    Emit structured event line

    Rules:
    - event_type in VALID_EVENT_TYPES
    - event_type, version, timestamp always present
    - sort_keys + compact separators for format
    """
    if event_type not in VALID_EVENT_TYPES:
        raise ValueError(f"invalid event_type: {event_type}")

    if "message" in fields and isinstance(fields["message"], str):
        # Avoid emitting long strings in event fields
        fields["message"] = _truncate_message(fields["message"])

    payload: dict[str, Any] = {
        "event_type": event_type,
        "utc_now": utc_now_iso(),
        "version": version,
        **fields,
    }

    line = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    print(line, file=sys.stderr)
    rotation = _append_to_event_log(line)
    if rotation is not None and event_type != "log_rotated":
        emit_event("log_rotated", version=version, **rotation)
