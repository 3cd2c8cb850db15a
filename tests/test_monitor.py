"""
Contract tests for the periodic monitor
"""

import json
import threading
from dataclasses import replace
from pathlib import Path

from servicehealth.config import Settings
from servicehealth.monitor import MonitorSample, run_monitor, take_sample


def _settings(tmp_path: Path) -> Settings:
    return replace(Settings(services_dir=tmp_path), monitor_interval_s=0)


def test_sample_line_format_and_alerts() -> None:
    sample = MonitorSample(
        timestamp="2026-01-01 00:00:00",
        disk_percent=93,
        memory_percent=91.3,
        load_1m="0.42",
        docker_status="running",
    )

    assert sample.to_line() == (
        "[2026-01-01 00:00:00] Disk: 93%, Memory: 91.3%, Load: 0.42, Docker: running"
    )
    assert sample.alerts(90.0) == [
        "[2026-01-01 00:00:00] ALERT: Disk usage is at 93%",
        "[2026-01-01 00:00:00] ALERT: Memory usage is at 91.3%",
    ]
    assert sample.alerts(95.0) == []


def test_monitor_stops_after_max_iterations(tmp_path: Path) -> None:
    """
    Bounded runs write exactly max_iterations sample lines
    """
    sample = MonitorSample("2026-01-01 00:00:00", 50, 40.0, "0.10", "running")
    stop = threading.Event()

    written = run_monitor(_settings(tmp_path), stop, max_iterations=3, sampler=lambda: sample)

    assert written == 3
    lines = (tmp_path / "logs" / "monitor.log").read_text(encoding="utf-8").splitlines()
    assert lines == [sample.to_line()] * 3


def test_monitor_honours_stop_event(tmp_path: Path) -> None:
    """
    Setting the stop event ends the loop without waiting out the interval
    """
    stop = threading.Event()

    def sampler() -> MonitorSample:
        return MonitorSample("2026-01-01 00:00:00", 95, 10.0, "0.10", "stopped")

    settings = replace(_settings(tmp_path), monitor_interval_s=3600)
    stop_after_first = threading.Timer(0.2, stop.set)
    stop_after_first.start()
    try:
        written = run_monitor(settings, stop, sampler=sampler)
    finally:
        stop_after_first.cancel()

    assert written == 1
    lines = (tmp_path / "logs" / "monitor.log").read_text(encoding="utf-8").splitlines()
    assert lines[1] == "[2026-01-01 00:00:00] ALERT: Disk usage is at 95%"


def test_take_sample_degrades_to_unknown(monkeypatch) -> None:
    """
    Unavailable metrics never raise; they show up as unknown
    """
    from servicehealth import monitor
    from servicehealth.errors import MeasurementUnavailable

    def unavailable(*args, **kwargs):
        raise MeasurementUnavailable("no /proc")

    monkeypatch.setattr(monitor, "collect_memory", unavailable)
    monkeypatch.setattr(monitor, "collect_cpu", unavailable)

    def docker_probe() -> bool:
        raise RuntimeError("no systemctl")

    sample = take_sample(docker_probe=docker_probe, clock=lambda: "2026-01-01 00:00:00")

    assert sample.memory_percent is None
    assert sample.load_1m is None
    assert sample.docker_status == "unknown"
    assert "Memory: unknown" in sample.to_line()


def test_monitor_keeps_sampling_when_log_write_fails(tmp_path: Path, capsys) -> None:
    """
    An unwritable monitor log is reported per sample and never ends the loop
    """
    (tmp_path / "logs" / "monitor.log").mkdir(parents=True)
    sample = MonitorSample("2026-01-01 00:00:00", 97, 40.0, "0.10", "running")

    written = run_monitor(_settings(tmp_path), threading.Event(), max_iterations=2, sampler=lambda: sample)

    assert written == 2
    events = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    kinds = [e["event_type"] for e in events]
    assert kinds.count("monitor_write_failed") == 2
    assert kinds.count("monitor_sample") == 2
    assert kinds.count("monitor_alert") == 2
    assert kinds[-1] == "monitor_shutdown"
    assert events[-1]["samples"] == 2
