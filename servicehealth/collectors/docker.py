"""
servicehealth.collectors.docker
AUTHOR: carter-vin

Container runtime collectors (docker CLI via subprocess)

Fallback chains are explicit strategy lists:
- daemon state: systemctl unit state, then `docker info`
- compose binary: standalone docker-compose, then the `docker compose` plugin
"""

from __future__ import annotations

from pathlib import Path

from servicehealth.commands import Runner, first_success, run_command
from servicehealth.errors import MeasurementUnavailable

DAEMON_STRATEGIES: tuple[tuple[str, ...], ...] = (
    ("systemctl", "is-active", "--quiet", "docker"),
    ("docker", "info"),
)

COMPOSE_STRATEGIES: tuple[tuple[str, ...], ...] = (
    ("docker-compose",),
    ("docker", "compose"),
)

UNKNOWN = "unknown"


def docker_running(*, runner: Runner = run_command) -> bool:
    return first_success(DAEMON_STRATEGIES, runner=runner, timeout=15.0).ok


def docker_version(*, runner: Runner = run_command) -> str:
    result = runner(["docker", "--version"], timeout=10.0)
    if not result.ok or not result.stdout.strip():
        return UNKNOWN
    return result.stdout.strip()


def running_container_names(*, runner: Runner = run_command) -> list[str]:
    result = runner(["docker", "ps", "--format", "{{.Names}}"], timeout=15.0)
    if not result.ok:
        raise MeasurementUnavailable(f"docker ps failed: {result.stderr.strip() or result.returncode}")
    return sorted(line.strip() for line in result.stdout.splitlines() if line.strip())


def compose_command(*, runner: Runner = run_command) -> list[str]:
    """
    Resolve the compose invocation prefix
    """
    probes = [list(base) + ["version"] for base in COMPOSE_STRATEGIES]
    outcome = first_success(probes, runner=runner, timeout=10.0)
    if outcome.winner is None:
        raise MeasurementUnavailable(f"no compose command available: {outcome.describe_failures()}")
    return list(outcome.winner.args[:-1])


def _compose_lines(
    compose_file: Path,
    extra: list[str],
    *,
    runner: Runner,
) -> list[str]:
    if not compose_file.is_file():
        raise MeasurementUnavailable(f"compose file not found: {compose_file}")

    base = compose_command(runner=runner)
    result = runner(
        base + ["-f", str(compose_file)] + extra,
        cwd=compose_file.parent,
        timeout=30.0,
    )
    if not result.ok:
        raise MeasurementUnavailable(
            f"compose {' '.join(extra)} failed: {result.stderr.strip() or result.returncode}"
        )
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def compose_services(compose_file: Path, *, runner: Runner = run_command) -> list[str]:
    """
    Services declared in the compose file
    """
    return _compose_lines(compose_file, ["config", "--services"], runner=runner)


def compose_running_services(compose_file: Path, *, runner: Runner = run_command) -> set[str]:
    """
    Compose services with at least one running container
    """
    return set(
        _compose_lines(
            compose_file,
            ["ps", "--services", "--filter", "status=running"],
            runner=runner,
        )
    )
