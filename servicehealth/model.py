"""
servicehealth.model
AUTHOR: carter-vin

Report schema + deterministic serialization primitives.

Design goals:
- Explicit structure (no accidental serialization via __dict__)
- Check order preserved for human-readable output
- The report file shape stays fixed for downstream consumers:
  timestamp / overall_status / health_percentage / checks / services / system
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from servicehealth.evaluate import OverallStatus, Tally, Verdict, exit_code_for

# Check names the report document reads measurements from
CHECK_DISK = "disk_usage"
CHECK_MEMORY = "memory_usage"
CHECK_LOAD = "load_average"
CHECK_DOCKER_DAEMON = "docker_daemon"

UNKNOWN = "unknown"


def endpoint_check_name(service_name: str) -> str:
    return f"{service_name}_endpoint"


def port_check_name(service_name: str) -> str:
    return f"{service_name}_port"


@dataclass(frozen=True)
class CheckResult:
    """
    Outcome of one check
    - detail: one human-readable line
    - value: raw measurement (collector result), never serialized as-is
    """

    name: str
    category: str
    verdict: Verdict
    detail: str
    value: Optional[Any] = None


@dataclass(frozen=True)
class Report:
    """
    Aggregate result of one run
    """

    timestamp: str
    results: list[CheckResult]
    tally: Tally
    overall_status: OverallStatus
    health_percentage: int

    @property
    def exit_code(self) -> int:
        return exit_code_for(self.overall_status)

    def result(self, name: str) -> CheckResult | None:
        for item in self.results:
            if item.name == name:
                return item
        return None

    def verdicts(self) -> list[tuple[str, str, str]]:
        """
        (name, verdict, detail) in run order
        """
        return [(r.name, r.verdict.value, r.detail) for r in self.results]


# -----------------------------
# Helpers
# -----------------------------
def utc_now_iso() -> str:
    """
    Current time in ISO 8601 (UTC, second precision, Z suffix)
    """
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _measured(report: Report, name: str) -> Any:
    item = report.result(name)
    return item.value if item is not None else None


def build_report_document(report: Report, services: Iterable[Any]) -> dict[str, Any]:
    """
    Assemble the machine-readable report

    Unavailable numeric metrics serialize as null; the load average string
    falls back to "unknown".
    """
    disk = _measured(report, CHECK_DISK)
    memory = _measured(report, CHECK_MEMORY)
    cpu = _measured(report, CHECK_LOAD)
    docker_running = _measured(report, CHECK_DOCKER_DAEMON)

    services_block: dict[str, Any] = {}
    for service in services:
        endpoint = report.result(endpoint_check_name(service.name))
        services_block[service.name] = {
            "port": service.port,
            "healthy": endpoint is not None and endpoint.verdict is Verdict.OK,
        }

    return {
        "timestamp": report.timestamp,
        "overall_status": report.overall_status.value,
        "health_percentage": report.health_percentage,
        "checks": {
            "total": report.tally.total,
            "passed": report.tally.ok,
            "warnings": report.tally.warning,
            "failed": report.tally.error,
        },
        "services": services_block,
        "system": {
            "disk_usage_percent": disk.used_percent if disk is not None else None,
            "memory_usage_percent": memory.used_percent if memory is not None else None,
            "load_average": cpu.load_display if cpu is not None else UNKNOWN,
            "docker_running": bool(docker_running),
        },
    }


def report_to_json(document: dict[str, Any], *, indent: int | None = None) -> str:
    """
    Serialize a report document

    Rules:
    - sort_keys=True ensures stable key order
    - compact separators unless an indent is requested
    """
    if indent is None:
        return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(document, sort_keys=True, indent=indent, ensure_ascii=False)


# Set valid status check
VALID_STATUS = {s.value for s in OverallStatus}


def validate_document(document: dict[str, Any]) -> None:
    """
    Validate report document structure + content

    Raises ValueError on invalid
    """
    if not document.get("timestamp"):
        raise ValueError("timestamp is empty")

    if document.get("overall_status") not in VALID_STATUS:
        raise ValueError(f"overall_status must be: {sorted(VALID_STATUS)}")

    pct = document.get("health_percentage")
    if not isinstance(pct, int) or not 0 <= pct <= 100:
        raise ValueError("health_percentage must be an integer in 0..100")

    checks = document.get("checks")
    if not isinstance(checks, dict):
        raise ValueError("checks must be a dict")
    if checks.get("total") != checks.get("passed", 0) + checks.get("warnings", 0) + checks.get("failed", 0):
        raise ValueError("checks.total must equal passed + warnings + failed")

    if not isinstance(document.get("services"), dict):
        raise ValueError("services must be a dict")

    system = document.get("system")
    if not isinstance(system, dict):
        raise ValueError("system must be a dict")
    if not isinstance(system.get("docker_running"), bool):
        raise ValueError("system.docker_running must be a bool")
