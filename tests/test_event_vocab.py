"""
Contract test for event vocabulary enforcement.

The logging surface must reject unknown event types to keep aggregation stable.
"""

import json

import pytest

from servicehealth.logging import emit_event, set_event_log


def test_emit_event_rejects_invalid_event_type() -> None:
    """
    Unknown event types must raise ValueError.
    """
    with pytest.raises(ValueError, match="invalid event_type"):
        emit_event("not_a_real_event", version="0.1.0")


def test_emit_event_writes_stderr_and_event_log(capsys, tmp_path) -> None:
    """
    Events go to stderr as one JSON object and are mirrored into the event log
    """
    log_path = tmp_path / "logs" / "health-check.log"
    set_event_log(log_path)
    try:
        emit_event("check_failed", version="0.1.0", check="disk_usage", message="x" * 500)
    finally:
        set_event_log(None)

    captured = capsys.readouterr()
    assert captured.out == ""

    payload = json.loads(captured.err.strip())
    assert payload["event_type"] == "check_failed"
    assert payload["version"] == "0.1.0"
    assert "utc_now" in payload
    assert payload["message"].endswith("...[truncated 300 chars]")

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1]) == payload


def test_event_log_rotates_at_max_bytes(capsys, tmp_path) -> None:
    """
    The event log file copy rotates like the monitor log and reports it
    """
    log_path = tmp_path / "logs" / "deployment.log"
    log_path.parent.mkdir()
    log_path.write_text("x" * 600, encoding="utf-8")

    set_event_log(log_path, max_bytes=500, rotate_count=2)
    try:
        emit_event("deploy_start", version="0.1.0")
    finally:
        set_event_log(None)

    assert (tmp_path / "logs" / "deployment.1.log").read_text(encoding="utf-8") == "x" * 600

    kinds = [json.loads(line)["event_type"] for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert kinds == ["deploy_start", "log_rotated"]

    err_kinds = [json.loads(line)["event_type"] for line in capsys.readouterr().err.splitlines()]
    assert err_kinds == ["deploy_start", "log_rotated"]
