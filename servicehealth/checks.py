"""
servicehealth.checks
AUTHOR: carter-vin

The static check set for one deployment.

Each Check pairs a name + category with an evaluator. Evaluators:
- measure exactly one quantity (read only)
- map it to a Verdict via a Threshold (numeric) or directly (binary: failure = ERROR)
- may raise; the aggregator converts the failure into the check's `unavailable` verdict
- may return a FanOut (one counted result per item) once a listing is known
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from servicehealth.collectors.cpu import collect_cpu
from servicehealth.collectors.disk import collect_disk
from servicehealth.collectors.docker import (
    compose_running_services,
    docker_running,
    docker_version,
    running_container_names,
)
from servicehealth.collectors.files import (
    collect_log_activity,
    is_writable_dir,
    marker_present,
)
from servicehealth.collectors.memory import collect_memory
from servicehealth.collectors.metadata import collect_instance_metadata
from servicehealth.collectors.network import http_ok, port_listening, resolve_dns
from servicehealth.commands import Runner, run_command
from servicehealth.config import ServiceSpec, Settings
from servicehealth.errors import MeasurementUnavailable
from servicehealth.evaluate import Verdict
from servicehealth.model import (
    CHECK_DISK,
    CHECK_DOCKER_DAEMON,
    CHECK_LOAD,
    CHECK_MEMORY,
    endpoint_check_name,
    port_check_name,
)

# Categories, in console order
CATEGORY_SYSTEM = "system_resources"
CATEGORY_CONTAINER = "container_runtime"
CATEGORY_NETWORK = "network"
CATEGORY_PORTS = "ports"
CATEGORY_SERVICES = "service_health"
CATEGORY_ORCHESTRATION = "orchestration"
CATEGORY_LOGS = "log_files"
CATEGORY_PERMISSIONS = "permissions"

CATEGORY_TITLES = {
    CATEGORY_SYSTEM: "SYSTEM RESOURCES",
    CATEGORY_CONTAINER: "CONTAINER RUNTIME",
    CATEGORY_NETWORK: "NETWORK CONNECTIVITY",
    CATEGORY_PORTS: "PORT AVAILABILITY",
    CATEGORY_SERVICES: "SERVICE HEALTH",
    CATEGORY_ORCHESTRATION: "COMPOSE SERVICES",
    CATEGORY_LOGS: "LOG FILES",
    CATEGORY_PERMISSIONS: "FILE PERMISSIONS",
}


@dataclass(frozen=True)
class Evaluation:
    verdict: Verdict
    detail: str
    value: Optional[Any] = None


@dataclass(frozen=True)
class FanOut:
    """
    Evaluator result that expands into one counted result per (name, evaluation)
    """

    items: tuple[tuple[str, Evaluation], ...]


Evaluator = Callable[[], Union[Evaluation, FanOut]]


@dataclass(frozen=True)
class Check:
    """
    Named unit of health evaluation
    - unavailable: verdict recorded when the evaluator raises
    """

    name: str
    category: str
    evaluator: Evaluator
    unavailable: Verdict = Verdict.ERROR


def _binary(ok: bool, ok_detail: str, error_detail: str, *, value: Any = None) -> Evaluation:
    if ok:
        return Evaluation(Verdict.OK, ok_detail, value if value is not None else True)
    return Evaluation(Verdict.ERROR, error_detail, value if value is not None else False)


# -----------------------------
# System resources
# -----------------------------
def _disk_check(settings: Settings) -> Check:
    def evaluate() -> Evaluation:
        disk = collect_disk("/")
        pct = disk.used_percent
        verdict = settings.disk_threshold.classify(pct)
        detail = f"Disk usage: {pct}%"
        if verdict is Verdict.ERROR:
            detail += " (Critical)"
        return Evaluation(verdict, detail, disk)

    return Check(CHECK_DISK, CATEGORY_SYSTEM, evaluate)


def _memory_check(settings: Settings) -> Check:
    def evaluate() -> Evaluation:
        memory = collect_memory()
        pct = memory.used_percent
        used_mb = memory.mem_used_bytes // (1024 * 1024)
        total_mb = memory.mem_total_bytes // (1024 * 1024)
        return Evaluation(
            settings.memory_threshold.classify(pct),
            f"Memory usage: {pct}% ({used_mb}MB/{total_mb}MB)",
            memory,
        )

    return Check(CHECK_MEMORY, CATEGORY_SYSTEM, evaluate)


def _load_check(settings: Settings) -> Check:
    def evaluate() -> Evaluation:
        cpu = collect_cpu()
        return Evaluation(
            settings.load_threshold.classify(cpu.load_percent),
            f"Load average: {cpu.load_display} ({cpu.load_percent}% of {cpu.cpu_count_logical} CPUs)",
            cpu,
        )

    # A missing load average is not evidence of overload
    return Check(CHECK_LOAD, CATEGORY_SYSTEM, evaluate, unavailable=Verdict.WARNING)


def _metadata_check(settings: Settings) -> Check:
    def evaluate() -> Evaluation:
        meta = collect_instance_metadata(settings.metadata_timeout_s)
        return Evaluation(
            Verdict.INFO,
            f"Instance: {meta.instance_name} (zone {meta.zone}, project {meta.project_id})",
            meta,
        )

    return Check("instance_metadata", CATEGORY_SYSTEM, evaluate, unavailable=Verdict.INFO)


# -----------------------------
# Container runtime
# -----------------------------
def _docker_checks(runner: Runner) -> list[Check]:
    def daemon() -> Evaluation:
        running = docker_running(runner=runner)
        return Evaluation(
            Verdict.OK if running else Verdict.ERROR,
            "Docker daemon is running" if running else "Docker daemon is not running",
            running,
        )

    def version() -> Evaluation:
        value = docker_version(runner=runner)
        return Evaluation(Verdict.INFO, f"Docker version: {value}", value)

    def containers() -> Evaluation:
        names = running_container_names(runner=runner)
        return Evaluation(Verdict.INFO, f"Running containers: {len(names)}", names)

    return [
        Check(CHECK_DOCKER_DAEMON, CATEGORY_CONTAINER, daemon),
        Check("docker_version", CATEGORY_CONTAINER, version, unavailable=Verdict.INFO),
        Check("running_containers", CATEGORY_CONTAINER, containers, unavailable=Verdict.INFO),
    ]


# -----------------------------
# Network
# -----------------------------
def _network_checks(settings: Settings) -> list[Check]:
    def connectivity() -> Evaluation:
        return _binary(
            http_ok(settings.connectivity_url, settings.connectivity_timeout_s),
            "External internet connectivity",
            "No external internet connectivity",
        )

    def dns() -> Evaluation:
        addresses = resolve_dns(settings.dns_hostname, settings.dns_timeout_s)
        return _binary(
            bool(addresses),
            "DNS resolution working",
            "DNS resolution failed",
            value=addresses,
        )

    return [
        Check("external_connectivity", CATEGORY_NETWORK, connectivity),
        Check("dns_resolution", CATEGORY_NETWORK, dns),
    ]


# -----------------------------
# Per-service checks
# -----------------------------
def _port_check(service: ServiceSpec) -> Check:
    def evaluate() -> Evaluation:
        return _binary(
            port_listening(service.port),
            f"{service.label} port {service.port} is listening",
            f"{service.label} port {service.port} is not listening",
        )

    return Check(port_check_name(service.name), CATEGORY_PORTS, evaluate)


def _endpoint_check(service: ServiceSpec, settings: Settings) -> Check:
    def evaluate() -> Evaluation:
        return _binary(
            http_ok(service.health_url, settings.endpoint_timeout_s),
            f"{service.label} endpoint responds",
            f"{service.label} endpoint not responding",
        )

    return Check(endpoint_check_name(service.name), CATEGORY_SERVICES, evaluate)


def compose_service_check_name(compose_name: str) -> str:
    return f"compose_service:{compose_name}"


def _compose_check(settings: Settings, runner: Runner) -> Check:
    """
    One WARNING for a missing compose file or a failed query;
    one OK/ERROR per service once the running list is known
    """

    def evaluate() -> Evaluation | FanOut:
        if not settings.compose_file.is_file():
            return Evaluation(Verdict.WARNING, "Docker Compose file not found")
        running = compose_running_services(settings.compose_file, runner=runner)
        return FanOut(
            tuple(
                (
                    compose_service_check_name(service.compose_name),
                    _binary(
                        service.compose_name in running,
                        f"Compose service '{service.compose_name}' is running",
                        f"Compose service '{service.compose_name}' is not running",
                    ),
                )
                for service in settings.services
            )
        )

    # Query failures mean "no compose services found", not a dead service
    return Check(
        "compose_services",
        CATEGORY_ORCHESTRATION,
        evaluate,
        unavailable=Verdict.WARNING,
    )


# -----------------------------
# Logs + permissions
# -----------------------------
def _log_checks(settings: Settings) -> list[Check]:
    def count() -> Evaluation:
        activity = collect_log_activity(settings.logs_dir, window_minutes=settings.recent_log_minutes)
        return Evaluation(Verdict.INFO, f"Log files found: {activity.log_files}", activity.log_files)

    def recent() -> Evaluation:
        try:
            activity = collect_log_activity(
                settings.logs_dir, window_minutes=settings.recent_log_minutes
            )
        except MeasurementUnavailable:
            return Evaluation(Verdict.WARNING, "Log directory not found")
        if activity.recent_log_files > 0:
            return Evaluation(Verdict.OK, "Recent log activity detected", activity.recent_log_files)
        return Evaluation(Verdict.WARNING, "No recent log activity", 0)

    return [
        Check("log_files", CATEGORY_LOGS, count, unavailable=Verdict.INFO),
        Check("recent_log_activity", CATEGORY_LOGS, recent, unavailable=Verdict.WARNING),
    ]


def _permission_checks(settings: Settings) -> list[Check]:
    def writable() -> Evaluation:
        return _binary(
            is_writable_dir(settings.services_dir),
            "Services directory is writable",
            "Services directory is not writable",
        )

    def setup_complete() -> Evaluation:
        if marker_present(settings.setup_marker):
            return Evaluation(Verdict.OK, "VM setup completed", True)
        return Evaluation(Verdict.WARNING, "VM setup may not be complete", False)

    return [
        Check("services_dir_writable", CATEGORY_PERMISSIONS, writable),
        Check("setup_complete", CATEGORY_PERMISSIONS, setup_complete, unavailable=Verdict.WARNING),
    ]


def build_default_checks(settings: Settings, *, runner: Runner = run_command) -> list[Check]:
    """
    Ordered check set for the deployment described by `settings`
    """
    checks: list[Check] = [
        _disk_check(settings),
        _memory_check(settings),
        _load_check(settings),
        _metadata_check(settings),
    ]
    checks.extend(_docker_checks(runner))
    checks.extend(_network_checks(settings))
    checks.extend(_port_check(service) for service in settings.services)
    checks.extend(_endpoint_check(service, settings) for service in settings.services)
    checks.append(_compose_check(settings, runner))
    checks.extend(_log_checks(settings))
    checks.extend(_permission_checks(settings))
    return checks
