"""
servicehealth.deploy
AUTHOR: carter-vin

Service deployment flow

Order:
1. verify required files           (fatal)
2. stage env + compose files       (fatal)
3. ensure container daemon         (fatal)
4. stop old stack, prune           (best effort)
5. build each service, start stack (fatal, no retry)
6. grace period, poll /health      (retries live here only)
7. tail container logs             (best effort)
8. write deployment-status.json    (atomic)

Fatal steps raise DeploymentError / ExternalCommandFailed; nothing is rolled back.
"""

from __future__ import annotations

import shutil
import time
from dataclasses import dataclass
from typing import Any, Callable

from servicehealth import VERSION
from servicehealth.collectors.base import run_collector
from servicehealth.collectors.docker import (
    compose_command,
    compose_running_services,
    compose_services,
)
from servicehealth.commands import Runner, first_success, run_command
from servicehealth.config import Settings
from servicehealth.emit import write_report_file
from servicehealth.errors import DeploymentError, MeasurementUnavailable
from servicehealth.logging import emit_event
from servicehealth.model import report_to_json, utc_now_iso
from servicehealth.poll import poll_endpoint

REQUIRED_FILES = (
    "test-runner",
    "api-server",
    "docker/test-runner/Dockerfile",
    "docker/api-server/Dockerfile",
    "configs/docker-compose.yml",
    "configs/test-runner.env",
    "configs/api-server.env",
)

# Copied from configs/ to the services dir root, where compose expects them
STAGED_FILES = (
    "configs/test-runner.env",
    "configs/api-server.env",
    "configs/docker-compose.yml",
)

DOCKER_START_STRATEGIES: tuple[tuple[str, ...], ...] = (
    ("systemctl", "is-active", "--quiet", "docker"),
    ("systemctl", "start", "docker"),
)

DOCKER_SETTLE_S = 5.0
BUILD_TIMEOUT_S = 1800.0
LOG_TAIL_LINES = 20


@dataclass(frozen=True)
class DeploymentResult:
    completed_at: str
    healthy: dict[str, bool]
    services_running: int
    total_services: int

    @property
    def all_healthy(self) -> bool:
        return bool(self.healthy) and all(self.healthy.values())

    @property
    def exit_code(self) -> int:
        return 0 if self.all_healthy else 1


class Deployer:
    """
    Runs the deployment flow against settings.services_dir
    """

    def __init__(
        self,
        settings: Settings,
        *,
        runner: Runner = run_command,
        poller: Callable[..., bool] = poll_endpoint,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.settings = settings
        self.runner = runner
        self.poller = poller
        self.sleep = sleep
        self.clock = clock
        self._compose_base: list[str] | None = None

    # -----------------------------
    # helpers
    # -----------------------------
    def _step(self, step: str, **fields: Any) -> None:
        emit_event("deploy_step", version=VERSION, step=step, **fields)

    def _warn(self, step: str, message: str) -> None:
        emit_event("deploy_warning", version=VERSION, step=step, message=message)

    def _compose_args(self, *extra: str) -> list[str]:
        if self._compose_base is None:
            try:
                self._compose_base = compose_command(runner=self.runner)
            except MeasurementUnavailable as e:
                raise DeploymentError(str(e)) from e
        return self._compose_base + ["-f", str(self.settings.compose_file), *extra]

    def _run_compose(self, *extra: str, timeout: float = 120.0):
        return self.runner(
            self._compose_args(*extra),
            cwd=self.settings.services_dir,
            timeout=timeout,
        )

    # -----------------------------
    # steps
    # -----------------------------
    def verify_required_files(self) -> None:
        self._step("verify_files")
        for rel in REQUIRED_FILES:
            if not (self.settings.services_dir / rel).exists():
                raise DeploymentError(f"Required file not found: {rel}")

    def stage_config_files(self) -> None:
        self._step("stage_files")
        for rel in STAGED_FILES:
            src = self.settings.services_dir / rel
            shutil.copy2(src, self.settings.services_dir / src.name)

    def ensure_docker(self) -> None:
        self._step("ensure_docker")
        outcome = first_success(DOCKER_START_STRATEGIES, runner=self.runner)
        if outcome.winner is not None and outcome.winner.args[1] == "start":
            # Freshly started daemon needs a moment before accepting requests
            self.sleep(DOCKER_SETTLE_S)
        elif outcome.winner is None:
            self._warn("ensure_docker", outcome.describe_failures())

        info = self.runner(["docker", "info"], timeout=30.0)
        if not info.ok:
            raise DeploymentError(f"Docker is not accessible: {info.stderr.strip() or info.returncode}")

    def stop_existing(self) -> None:
        self._step("stop_existing")
        if not self._run_compose("down", "--timeout", "30", timeout=120.0).ok:
            self._warn("stop_existing", "No existing services to stop")
        if not self.runner(["docker", "container", "prune", "-f"], timeout=60.0).ok:
            self._warn("stop_existing", "Container prune failed")

    def build_services(self) -> None:
        for service in self.settings.services:
            self._step("build", service=service.compose_name)
            self._run_compose("build", service.compose_name, timeout=BUILD_TIMEOUT_S).check()

    def start_services(self) -> None:
        self._step("start")
        self._run_compose("up", "-d", timeout=300.0).check()

    def wait_for_health(self) -> dict[str, bool]:
        self._step("startup_grace", seconds=self.settings.deploy_startup_grace_s)
        self.sleep(self.settings.deploy_startup_grace_s)

        healthy: dict[str, bool] = {}
        for service in self.settings.services:
            healthy[service.name] = self.poller(
                service.health_url,
                self.settings.deploy_poll_timeout_s,
                self.settings.deploy_poll_attempts,
                self.settings.deploy_poll_interval_s,
                sleep=self.sleep,
                label=service.label,
            )
        return healthy

    def log_container_logs(self) -> None:
        for service in self.settings.services:
            result = self._run_compose("logs", f"--tail={LOG_TAIL_LINES}", service.compose_name, timeout=30.0)
            if result.ok:
                self._step("container_logs", service=service.compose_name, message=result.stdout[-2000:])
            else:
                self._warn("container_logs", f"Could not retrieve {service.compose_name} logs")

    def _service_counts(self) -> tuple[int, int]:
        running = run_collector(
            "compose_running",
            compose_running_services,
            self.settings.compose_file,
            runner=self.runner,
        )
        declared = run_collector(
            "compose_services",
            compose_services,
            self.settings.compose_file,
            runner=self.runner,
        )
        return (
            len(running.value) if running.ok else 0,
            len(declared.value) if declared.ok else 0,
        )

    def write_status(self, result: DeploymentResult) -> None:
        document = {
            "deployment_completed_at": result.completed_at,
            "services": {
                service.name: {
                    "healthy": result.healthy.get(service.name, False),
                    "port": service.port,
                    "endpoint": service.health_path,
                }
                for service in self.settings.services
            },
            "docker_compose": {
                "services_running": result.services_running,
                "total_services": result.total_services,
            },
        }
        write_report_file(self.settings.deployment_status_path, report_to_json(document, indent=4))

    # -----------------------------
    # flow
    # -----------------------------
    def deploy(self) -> DeploymentResult:
        emit_event("deploy_start", version=VERSION, services_dir=str(self.settings.services_dir))

        self.verify_required_files()
        self.stage_config_files()
        self.ensure_docker()
        self.stop_existing()
        self.build_services()
        self.start_services()

        healthy = self.wait_for_health()
        self.log_container_logs()

        running, total = self._service_counts()
        result = DeploymentResult(
            completed_at=self.clock(),
            healthy=healthy,
            services_running=running,
            total_services=total,
        )
        self.write_status(result)

        emit_event(
            "deploy_completed",
            version=VERSION,
            all_healthy=result.all_healthy,
            healthy=healthy,
        )
        return result
