"""
servicehealth.main
------------
AUTHOR: carter-vin

CLI entrypoint for the test-services VM

Commands:
- check:   one-shot health aggregation, console sections + JSON report, exit 0/1/2(/3)
- monitor: periodic resource sampling until SIGINT/SIGTERM
- deploy:  build/start the compose stack and gate on service health
- poll:    bounded retry against one endpoint
- version: version + runtime env
"""

from __future__ import annotations

import platform
import signal
import sys
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from servicehealth import VERSION
from servicehealth.aggregate import run as run_checks
from servicehealth.checks import build_default_checks
from servicehealth.config import (
    DEFAULT_SERVICES_DIR,
    ENV_MONITOR_INTERVAL,
    ENV_REPORT_PATH,
    ENV_SERVICES_DIR,
    load_settings,
)
from servicehealth.console import ConsolePrinter
from servicehealth.deploy import Deployer
from servicehealth.emit import write_report_file
from servicehealth.errors import DeploymentError
from servicehealth.logging import emit_event, set_event_log
from servicehealth.model import build_report_document, report_to_json, validate_document
from servicehealth.monitor import run_monitor
from servicehealth.poll import poll_endpoint

# Explicit multi-command CLI
app = typer.Typer(
    add_completion=False,
    help="service-health: health checks, monitoring and deployment for the test services VM",
)


# -----------------------------
# DATA CLASSES
# -----------------------------
@dataclass(frozen=True)
class EnvironmentInfo:
    """
    Snapshot of the runtime environment
    """

    python_version: str
    os: str
    machine: str
    utc_now: str


def collect_environment_info() -> EnvironmentInfo:
    return EnvironmentInfo(
        python_version=sys.version.split()[0],
        os=f"{platform.system()} {platform.release()}",
        machine=platform.machine(),
        utc_now=datetime.now(timezone.utc).isoformat(),
    )


# -----------------------------
# ROOT COMMAND BEHAVIOR
# -----------------------------
@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    Root command behavior: print a hint when no subcommand is given
    """
    if ctx.invoked_subcommand is None:
        typer.echo("No command provided. Try: service-health --help")


# -----------------------------
# CLI COMMANDS
# -----------------------------
@app.command()
def version() -> None:
    """
    Print version & runtime env
    """
    env = collect_environment_info()

    typer.echo(f"service-health v{VERSION}")
    typer.echo(f"python={env.python_version}")
    typer.echo(f"os={env.os}")
    typer.echo(f"machine={env.machine}")
    typer.echo(f"utc_now={env.utc_now}")


@app.command("check")
def check(
    services_dir: Path = typer.Option(
        DEFAULT_SERVICES_DIR,
        "--services-dir",
        envvar=ENV_SERVICES_DIR,
        help="Root directory of the deployed services.",
    ),
    report_path: Optional[Path] = typer.Option(
        None,
        "--report-path",
        envvar=ENV_REPORT_PATH,
        help="Where to write the JSON report (default: <services-dir>/health-report.json).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the report JSON instead of the console sections.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored console output.",
    ),
) -> None:
    """
    Run every health check once and write the JSON report

    Exit codes: 0 HEALTHY, 1 DEGRADED, 2 UNHEALTHY, 3 indeterminate.
    """
    settings = load_settings(services_dir=services_dir, report_path=report_path)
    set_event_log(
        settings.health_log_path,
        max_bytes=settings.event_log_max_bytes,
        rotate_count=settings.event_log_rotate_count,
    )

    emit_event("health_check_start", version=VERSION, services_dir=str(settings.services_dir))

    printer = ConsolePrinter(color=not no_color)
    if not as_json:
        printer.header()

    report = run_checks(
        build_default_checks(settings),
        on_result=None if as_json else printer.on_result,
    )

    document = build_report_document(report, settings.services)
    validate_document(document)

    try:
        write_report_file(settings.report_path, report_to_json(document, indent=4))
        emit_event("health_report_written", version=VERSION, report_path=str(settings.report_path))
    except OSError as e:
        # Health verdict stands; the failed write is surfaced as its own event
        emit_event(
            "report_write_failed",
            version=VERSION,
            report_path=str(settings.report_path),
            error_type=type(e).__name__,
            message=str(e),
        )

    if as_json:
        typer.echo(report_to_json(document))
    else:
        printer.summary(report)

    emit_event(
        "health_check_completed",
        version=VERSION,
        overall_status=report.overall_status.value,
        health_percentage=report.health_percentage,
        exit_code=report.exit_code,
    )
    raise typer.Exit(code=report.exit_code)


@app.command("monitor")
def monitor(
    services_dir: Path = typer.Option(
        DEFAULT_SERVICES_DIR,
        "--services-dir",
        envvar=ENV_SERVICES_DIR,
        help="Root directory of the deployed services.",
    ),
    interval: int = typer.Option(
        300,
        "--interval",
        envvar=ENV_MONITOR_INTERVAL,
        help="Seconds between samples.",
        min=1,
    ),
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations",
        help="Stop after this many samples (default: run until signalled).",
        min=1,
    ),
) -> None:
    """
    Sample disk/memory/load/docker state into the monitor log
    """
    settings = load_settings(services_dir=services_dir, monitor_interval_s=interval)
    stop = threading.Event()

    def _request_stop(signum, frame) -> None:
        stop.set()

    previous = {
        signal.SIGTERM: signal.signal(signal.SIGTERM, _request_stop),
        signal.SIGINT: signal.signal(signal.SIGINT, _request_stop),
    }
    try:
        run_monitor(settings, stop, max_iterations=iterations)
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


@app.command("deploy")
def deploy(
    services_dir: Path = typer.Option(
        DEFAULT_SERVICES_DIR,
        "--services-dir",
        envvar=ENV_SERVICES_DIR,
        help="Root directory of the deployed services.",
    ),
) -> None:
    """
    Build and start the service containers, then wait for them to become healthy

    Exit codes: 0 all healthy, 1 failed or unhealthy.
    """
    settings = load_settings(services_dir=services_dir)
    set_event_log(
        settings.deploy_log_path,
        max_bytes=settings.event_log_max_bytes,
        rotate_count=settings.event_log_rotate_count,
    )

    try:
        result = Deployer(settings).deploy()
    except DeploymentError as e:
        emit_event(
            "deploy_failed",
            version=VERSION,
            error_type=type(e).__name__,
            message=str(e),
        )
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=1)

    for service in settings.services:
        state = "healthy" if result.healthy.get(service.name) else "unhealthy"
        typer.echo(f"{service.label} ({service.health_url}): {state}")

    raise typer.Exit(code=result.exit_code)


@app.command("poll")
def poll(
    url: str = typer.Argument(..., help="Endpoint to GET."),
    timeout: float = typer.Option(5.0, "--timeout", help="Per-attempt timeout (seconds).", min=0.1),
    attempts: int = typer.Option(30, "--attempts", help="Maximum attempts.", min=1),
    interval: float = typer.Option(10.0, "--interval", help="Seconds between attempts.", min=0.0),
) -> None:
    """
    Poll an endpoint until it answers; exit 0 when healthy, 1 otherwise
    """
    ok = poll_endpoint(url, timeout, attempts, interval)
    typer.echo("healthy" if ok else "unhealthy")
    raise typer.Exit(code=0 if ok else 1)


if __name__ == "__main__":
    app()
