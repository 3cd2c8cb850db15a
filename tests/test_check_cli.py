"""
Contract tests for the `check` command: exit codes and report file
"""

import json
from pathlib import Path

from typer.testing import CliRunner

from servicehealth import main
from servicehealth.checks import Check, Evaluation
from servicehealth.collectors.disk import DiskResult
from servicehealth.evaluate import Verdict
from servicehealth.logging import set_event_log


def _install_checks(monkeypatch, verdicts: dict[str, Verdict]) -> None:
    def fake_build(settings, **kwargs):
        checks = []
        for name, verdict in verdicts.items():
            value = DiskResult(100, 75, 25) if name == "disk_usage" else None
            checks.append(
                Check(
                    name,
                    "system_resources",
                    lambda verdict=verdict, name=name, value=value: Evaluation(verdict, f"{name}", value),
                )
            )
        return checks

    monkeypatch.setattr(main, "build_default_checks", fake_build)


def _invoke(tmp_path: Path, *extra: str):
    runner = CliRunner()
    try:
        return runner.invoke(main.app, ["check", "--services-dir", str(tmp_path), "--no-color", *extra])
    finally:
        set_event_log(None)


def test_healthy_run_exits_zero_and_writes_report(monkeypatch, tmp_path: Path) -> None:
    _install_checks(monkeypatch, {"disk_usage": Verdict.OK, "docker_version": Verdict.INFO})

    result = _invoke(tmp_path)

    assert result.exit_code == 0
    assert "Overall Status: HEALTHY" in result.output

    report = json.loads((tmp_path / "health-report.json").read_text(encoding="utf-8"))
    assert report["overall_status"] == "HEALTHY"
    assert report["health_percentage"] == 100
    assert report["checks"] == {"total": 1, "passed": 1, "warnings": 0, "failed": 0}
    assert report["system"]["disk_usage_percent"] == 75

    # Events are mirrored into the health-check log
    log_lines = (tmp_path / "logs" / "health-check.log").read_text(encoding="utf-8").splitlines()
    assert json.loads(log_lines[-1])["event_type"] == "health_check_completed"


def test_degraded_run_exits_one(monkeypatch, tmp_path: Path) -> None:
    _install_checks(
        monkeypatch,
        {"disk_usage": Verdict.OK, "memory_usage": Verdict.WARNING, "setup_complete": Verdict.OK},
    )

    result = _invoke(tmp_path)

    assert result.exit_code == 1
    report = json.loads((tmp_path / "health-report.json").read_text(encoding="utf-8"))
    assert report["overall_status"] == "DEGRADED"
    assert report["health_percentage"] == 66


def test_unreachable_endpoint_exits_two(monkeypatch, tmp_path: Path) -> None:
    _install_checks(
        monkeypatch,
        {"disk_usage": Verdict.OK, "api_server_endpoint": Verdict.ERROR, "dns_resolution": Verdict.OK},
    )

    report_path = tmp_path / "out" / "report.json"
    result = _invoke(tmp_path, "--report-path", str(report_path), "--json")

    assert result.exit_code == 2

    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["overall_status"] == "UNHEALTHY"
    assert report["services"]["api_server"] == {"port": 8080, "healthy": False}

    printed = [
        line
        for line in result.output.splitlines()
        if line.startswith("{") and '"event_type"' not in line
    ]
    assert json.loads(printed[-1]) == report
