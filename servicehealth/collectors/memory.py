"""
servicehealth.collectors.memory
AUTHOR: carter-vin

Memory collector
- Linux via /proc/meminfo
- used = MemTotal - MemAvailable (what `free` reports as used)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from servicehealth.errors import MeasurementUnavailable

PROC_MEMINFO = Path("/proc/meminfo")


@dataclass(frozen=True)
class MemoryResult:
    mem_total_bytes: int
    mem_available_bytes: int

    @property
    def mem_used_bytes(self) -> int:
        return max(0, self.mem_total_bytes - self.mem_available_bytes)

    @property
    def used_percent(self) -> int:
        if self.mem_total_bytes <= 0:
            return 0
        return self.mem_used_bytes * 100 // self.mem_total_bytes

    @property
    def used_percent_precise(self) -> float:
        if self.mem_total_bytes <= 0:
            return 0.0
        return round(self.mem_used_bytes * 100.0 / self.mem_total_bytes, 1)


def _parse_meminfo(contents: str) -> dict[str, int]:
    """
    Parse /proc/meminfo into a dict of values in bytes
    """
    values: dict[str, int] = {}
    for line in contents.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        key = parts[0].rstrip(":")
        try:
            value_kb = int(parts[1])
        except ValueError:
            continue
        values[key] = value_kb * 1024
    return values


def collect_memory(meminfo_path: Path = PROC_MEMINFO) -> MemoryResult:
    """
    Collect memory totals from /proc/meminfo
    """
    try:
        contents = meminfo_path.read_text(encoding="utf-8")
    except OSError as e:
        raise MeasurementUnavailable(f"cannot read {meminfo_path}: {e}") from e

    values = _parse_meminfo(contents)

    mem_total = values.get("MemTotal")
    mem_available = values.get("MemAvailable")

    if mem_total is None or mem_available is None:
        raise MeasurementUnavailable("MemAvailable or MemTotal missing in /proc/meminfo")

    return MemoryResult(mem_total_bytes=mem_total, mem_available_bytes=mem_available)
