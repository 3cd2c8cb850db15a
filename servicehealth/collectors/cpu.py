"""
servicehealth.collectors.cpu
AUTHOR: carter-vin

CPU collector
- 1m/5m/15m load averages + logical CPU count
- load_percent: 1m load relative to CPU count (100 = one runnable task per CPU)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from servicehealth.errors import MeasurementUnavailable


@dataclass(frozen=True)
class CpuResult:
    loadavg_1m: float
    loadavg_5m: float
    loadavg_15m: float
    cpu_count_logical: int

    @property
    def load_percent(self) -> int:
        return int(self.loadavg_1m * 100 / self.cpu_count_logical)

    @property
    def load_display(self) -> str:
        return f"{self.loadavg_1m:.2f}"


def collect_cpu() -> CpuResult:
    """
    Collect CPU load averages and logical CPU count
    """
    try:
        loadavg_1m, loadavg_5m, loadavg_15m = os.getloadavg()
    except (OSError, AttributeError) as e:
        raise MeasurementUnavailable(f"load average unavailable: {e}") from e

    cpu_count = os.cpu_count()
    if not cpu_count:
        raise MeasurementUnavailable("logical CPU count unavailable")

    return CpuResult(
        loadavg_1m=loadavg_1m,
        loadavg_5m=loadavg_5m,
        loadavg_15m=loadavg_15m,
        cpu_count_logical=cpu_count,
    )
