"""
Contract tests for settings defaults and overrides
"""

from pathlib import Path

from servicehealth.config import DEFAULT_SERVICES_DIR, load_settings


def test_defaults_match_deployment_layout() -> None:
    settings = load_settings()

    assert settings.services_dir == DEFAULT_SERVICES_DIR
    assert [(s.name, s.port) for s in settings.services] == [("api_server", 8080), ("test_runner", 5000)]
    assert settings.report_path == DEFAULT_SERVICES_DIR / "health-report.json"
    assert settings.services[0].health_url == "http://localhost:8080/health"
    assert settings.disk_threshold.classify(85).value == "WARNING"


def test_overrides_follow_services_dir(tmp_path: Path) -> None:
    settings = load_settings(services_dir=tmp_path, monitor_interval_s=5)

    assert settings.report_path == tmp_path / "health-report.json"
    assert settings.monitor_log_path == tmp_path / "logs" / "monitor.log"
    assert settings.monitor_interval_s == 5

    explicit = load_settings(services_dir=tmp_path, report_path=tmp_path / "r.json")
    assert explicit.report_path == tmp_path / "r.json"
