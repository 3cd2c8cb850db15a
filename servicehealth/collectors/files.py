"""
servicehealth.collectors.files
AUTHOR: carter-vin

Filesystem collectors: log activity, writability, setup marker
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path

from servicehealth.errors import MeasurementUnavailable


@dataclass(frozen=True)
class LogActivity:
    log_files: int
    recent_log_files: int
    window_minutes: int


def collect_log_activity(
    logs_dir: Path,
    *,
    window_minutes: int = 10,
    now: float | None = None,
) -> LogActivity:
    """
    Count *.log files under logs_dir and those modified within the window
    """
    if not logs_dir.is_dir():
        raise MeasurementUnavailable(f"log directory not found: {logs_dir}")

    cutoff = (time.time() if now is None else now) - window_minutes * 60

    total = 0
    recent = 0
    for path in logs_dir.rglob("*.log"):
        try:
            if not path.is_file():
                continue
            mtime = path.stat().st_mtime
        except OSError:
            # Rotated away between listing and stat
            continue
        total += 1
        if mtime >= cutoff:
            recent += 1

    return LogActivity(log_files=total, recent_log_files=recent, window_minutes=window_minutes)


def is_writable_dir(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.W_OK)


def marker_present(path: Path) -> bool:
    return path.is_file()
