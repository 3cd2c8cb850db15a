"""
servicehealth.collectors.disk
AUTHOR: carter-vin

Disk collector
- shutil.disk_usage for cross-platform support
- percent used rounds up, same as df
"""

from __future__ import annotations

import math
import shutil
from dataclasses import dataclass

from servicehealth.errors import MeasurementUnavailable


@dataclass(frozen=True)
class DiskResult:
    disk_total_bytes: int
    disk_used_bytes: int
    disk_free_bytes: int

    @property
    def used_percent(self) -> int:
        # df computes used / (used + available), reserved blocks excluded
        denominator = self.disk_used_bytes + self.disk_free_bytes
        if denominator <= 0:
            return 0
        return math.ceil(self.disk_used_bytes * 100 / denominator)


def collect_disk(path: str = "/") -> DiskResult:
    """
    Collect disk usage for a given path
    """
    try:
        usage = shutil.disk_usage(path)
    except OSError as e:
        raise MeasurementUnavailable(f"disk usage unavailable for {path}: {e}") from e

    return DiskResult(
        disk_total_bytes=usage.total,
        disk_used_bytes=usage.used,
        disk_free_bytes=usage.free,
    )
