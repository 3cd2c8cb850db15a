"""
Contract tests for report writes and log rotation
"""

import json
from pathlib import Path

from servicehealth.emit import LogTarget, append_log_line, write_report_file


def test_log_rotation_creates_rotated_files(tmp_path: Path) -> None:
    """
    Log rotates when max bytes threshold is reached
    """
    log_path = tmp_path / "monitor.log"
    log_path.write_text("x" * 200, encoding="utf-8")

    target = LogTarget(path=log_path, max_bytes=100, rotate_count=2)

    rotation_info = append_log_line(target, "sample")

    assert rotation_info is not None
    assert rotation_info["rotated_to"].endswith("monitor.1.log")
    assert rotation_info["prior_size_bytes"] == 200

    rotated = tmp_path / "monitor.1.log"
    assert rotated.read_text(encoding="utf-8") == "x" * 200
    assert not (tmp_path / "monitor.2.log").exists()

    assert log_path.read_text(encoding="utf-8") == "sample\n"


def test_no_rotation_below_limit(tmp_path: Path) -> None:
    log_path = tmp_path / "monitor.log"
    target = LogTarget(path=log_path, max_bytes=1000)

    assert append_log_line(target, "one") is None
    assert append_log_line(target, "two") is None
    assert log_path.read_text(encoding="utf-8") == "one\ntwo\n"


def test_write_report_file_replaces_whole_file(tmp_path: Path) -> None:
    """
    Report writes replace the previous report and leave no temp files behind
    """
    path = tmp_path / "nested" / "health-report.json"

    write_report_file(path, json.dumps({"overall_status": "DEGRADED"}))
    write_report_file(path, json.dumps({"overall_status": "HEALTHY"}))

    assert json.loads(path.read_text(encoding="utf-8")) == {"overall_status": "HEALTHY"}
    assert [p.name for p in path.parent.iterdir()] == ["health-report.json"]
