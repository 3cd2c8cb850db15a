"""
servicehealth.monitor
AUTHOR: carter-vin

Periodic resource monitor

- samples disk %, memory %, 1m load and docker daemon state every interval
- appends one line per sample to the monitor log (+ ALERT lines over the alert level)
- stops when the stop event is set; the wait is interruptible
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from servicehealth import VERSION
from servicehealth.collectors.base import run_collector
from servicehealth.collectors.cpu import collect_cpu
from servicehealth.collectors.disk import collect_disk
from servicehealth.collectors.docker import docker_running
from servicehealth.collectors.memory import collect_memory
from servicehealth.config import Settings
from servicehealth.emit import LogTarget, append_log_line
from servicehealth.logging import emit_event


@dataclass(frozen=True)
class MonitorSample:
    timestamp: str
    disk_percent: Optional[int]
    memory_percent: Optional[float]
    load_1m: Optional[str]
    docker_status: str  # running | stopped | unknown

    def to_line(self) -> str:
        disk = f"{self.disk_percent}%" if self.disk_percent is not None else "unknown"
        memory = f"{self.memory_percent:.1f}%" if self.memory_percent is not None else "unknown"
        return (
            f"[{self.timestamp}] Disk: {disk}, Memory: {memory}, "
            f"Load: {self.load_1m or 'unknown'}, Docker: {self.docker_status}"
        )

    def alerts(self, threshold_pct: float) -> list[str]:
        lines: list[str] = []
        if self.disk_percent is not None and self.disk_percent > threshold_pct:
            lines.append(f"[{self.timestamp}] ALERT: Disk usage is at {self.disk_percent}%")
        if self.memory_percent is not None and self.memory_percent > threshold_pct:
            lines.append(f"[{self.timestamp}] ALERT: Memory usage is at {self.memory_percent:.1f}%")
        return lines


def _local_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def take_sample(
    *,
    docker_probe: Callable[[], bool] = docker_running,
    clock: Callable[[], str] = _local_timestamp,
) -> MonitorSample:
    """
    One monitor sample; unavailable metrics become None / "unknown"
    """
    disk = run_collector("disk", collect_disk, "/")
    memory = run_collector("memory", collect_memory)
    cpu = run_collector("cpu", collect_cpu)
    docker = run_collector("docker", docker_probe)

    if docker.ok:
        docker_status = "running" if docker.value else "stopped"
    else:
        docker_status = "unknown"

    return MonitorSample(
        timestamp=clock(),
        disk_percent=disk.value.used_percent if disk.ok else None,
        memory_percent=memory.value.used_percent_precise if memory.ok else None,
        load_1m=cpu.value.load_display if cpu.ok else None,
        docker_status=docker_status,
    )


def run_monitor(
    settings: Settings,
    stop: threading.Event,
    *,
    max_iterations: int | None = None,
    sampler: Callable[[], MonitorSample] = take_sample,
) -> int:
    """
    Sample until `stop` is set (or max_iterations samples were taken)

    Returns the number of samples taken. A failed log write is reported as a
    monitor_write_failed event and does not end the loop.
    """
    target = LogTarget(
        path=settings.monitor_log_path,
        max_bytes=settings.monitor_log_max_bytes,
        rotate_count=settings.monitor_log_rotate_count,
    )
    interval = settings.monitor_interval_s

    emit_event(
        "monitor_start",
        version=VERSION,
        interval_s=interval,
        log_path=str(target.path),
    )

    samples = 0
    try:
        while not stop.is_set():
            start = time.monotonic()

            sample = sampler()
            alerts = sample.alerts(settings.monitor_alert_pct)
            try:
                rotation = append_log_line(target, sample.to_line())
                if rotation is not None:
                    emit_event("log_rotated", version=VERSION, **rotation)
                for alert in alerts:
                    append_log_line(target, alert)
            except OSError as e:
                # Keep sampling; alerts still reach stderr
                emit_event(
                    "monitor_write_failed",
                    version=VERSION,
                    log_path=str(target.path),
                    error_type=type(e).__name__,
                    message=str(e),
                )

            for alert in alerts:
                emit_event("monitor_alert", version=VERSION, message=alert)

            samples += 1
            emit_event(
                "monitor_sample",
                version=VERSION,
                seq=samples,
                disk_percent=sample.disk_percent,
                memory_percent=sample.memory_percent,
                load_1m=sample.load_1m,
                docker_status=sample.docker_status,
            )

            if max_iterations is not None and samples >= max_iterations:
                break

            elapsed = time.monotonic() - start
            # Event.wait returns early when stop is set
            stop.wait(max(0.0, interval - elapsed))

    finally:
        emit_event("monitor_shutdown", version=VERSION, samples=samples)

    return samples
