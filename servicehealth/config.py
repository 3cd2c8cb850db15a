"""
servicehealth.config
AUTHOR: carter-vin

Static deployment configuration

Defaults mirror the fixed layout on the test VM:
- services under /opt/test-services
- api_server on 8080, test_runner on 5000
- one compose file driving both containers

Overrides arrive through CLI options (bound to TEST_SERVICES_* env vars).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from servicehealth.evaluate import (
    DISK_THRESHOLD,
    LOAD_THRESHOLD,
    MEMORY_THRESHOLD,
    Threshold,
)

DEFAULT_SERVICES_DIR = Path("/opt/test-services")

ENV_SERVICES_DIR = "TEST_SERVICES_DIR"
ENV_REPORT_PATH = "TEST_SERVICES_REPORT_PATH"
ENV_MONITOR_INTERVAL = "TEST_SERVICES_MONITOR_INTERVAL"


@dataclass(frozen=True)
class ServiceSpec:
    """
    One deployed service
    - name: report key (e.g. "api_server")
    - compose_name: service name inside the compose file
    - label: human label for console output
    """

    name: str
    compose_name: str
    label: str
    port: int
    health_path: str = "/health"

    @property
    def health_url(self) -> str:
        return f"http://localhost:{self.port}{self.health_path}"


DEFAULT_SERVICES: tuple[ServiceSpec, ...] = (
    ServiceSpec(name="api_server", compose_name="api-server", label="API Server", port=8080),
    ServiceSpec(name="test_runner", compose_name="test-runner", label="Test Runner", port=5000),
)


@dataclass(frozen=True)
class Settings:
    services_dir: Path = DEFAULT_SERVICES_DIR
    services: tuple[ServiceSpec, ...] = DEFAULT_SERVICES

    # Thresholds
    disk_threshold: Threshold = DISK_THRESHOLD
    memory_threshold: Threshold = MEMORY_THRESHOLD
    load_threshold: Threshold = LOAD_THRESHOLD

    # Network bounds (seconds)
    endpoint_timeout_s: float = 10.0
    connectivity_timeout_s: float = 10.0
    connectivity_url: str = "https://www.google.com"
    dns_hostname: str = "google.com"
    dns_timeout_s: float = 5.0
    metadata_timeout_s: float = 2.0

    # Log activity window
    recent_log_minutes: int = 10

    # Monitor loop
    monitor_interval_s: int = 300
    monitor_alert_pct: float = 90.0
    monitor_log_max_bytes: int | None = 10 * 1024 * 1024
    monitor_log_rotate_count: int = 7

    # Event logs (health-check.log, deployment.log)
    event_log_max_bytes: int | None = 10 * 1024 * 1024
    event_log_rotate_count: int = 7

    # Deployment polling
    deploy_startup_grace_s: float = 30.0
    deploy_poll_attempts: int = 30
    deploy_poll_timeout_s: float = 5.0
    deploy_poll_interval_s: float = 10.0

    report_path_override: Path | None = field(default=None)

    @property
    def logs_dir(self) -> Path:
        return self.services_dir / "logs"

    @property
    def report_path(self) -> Path:
        if self.report_path_override is not None:
            return self.report_path_override
        return self.services_dir / "health-report.json"

    @property
    def health_log_path(self) -> Path:
        return self.logs_dir / "health-check.log"

    @property
    def deploy_log_path(self) -> Path:
        return self.logs_dir / "deployment.log"

    @property
    def monitor_log_path(self) -> Path:
        return self.logs_dir / "monitor.log"

    @property
    def compose_file(self) -> Path:
        return self.services_dir / "docker-compose.yml"

    @property
    def setup_marker(self) -> Path:
        return self.services_dir / "setup-complete"

    @property
    def deployment_status_path(self) -> Path:
        return self.services_dir / "deployment-status.json"


def load_settings(
    *,
    services_dir: Path | None = None,
    report_path: Path | None = None,
    monitor_interval_s: int | None = None,
) -> Settings:
    """
    Build Settings from defaults plus explicit overrides

    None means "keep the default".
    """
    settings = Settings()
    if services_dir is not None:
        settings = replace(settings, services_dir=Path(services_dir))
    if report_path is not None:
        settings = replace(settings, report_path_override=Path(report_path))
    if monitor_interval_s is not None:
        settings = replace(settings, monitor_interval_s=int(monitor_interval_s))
    return settings
