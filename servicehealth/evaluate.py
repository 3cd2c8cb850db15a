"""
servicehealth.evaluate
AUTHOR: carter-vin

Verdicts, thresholds and overall status derivation

Rules:
- Verdict is four-valued; INFO is recorded but never counted
- Threshold(warn_at, error_at): below warn -> OK, below error -> WARNING, else ERROR
- Any ERROR forces UNHEALTHY (errors are never averaged out)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Verdict(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"
    INFO = "INFO"


class OverallStatus(str, Enum):
    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    UNHEALTHY = "UNHEALTHY"


EXIT_CODES = {
    OverallStatus.HEALTHY.value: 0,
    OverallStatus.DEGRADED.value: 1,
    OverallStatus.UNHEALTHY.value: 2,
}
EXIT_INDETERMINATE = 3


@dataclass(frozen=True)
class Threshold:
    """
    Numeric warn/error cutoff pair

    Invariant: warn_at < error_at
    """

    warn_at: float
    error_at: float

    def __post_init__(self) -> None:
        if not self.warn_at < self.error_at:
            raise ValueError(
                f"threshold warn_at ({self.warn_at}) must be below error_at ({self.error_at})"
            )

    def classify(self, value: float) -> Verdict:
        if value < self.warn_at:
            return Verdict.OK
        if value < self.error_at:
            return Verdict.WARNING
        return Verdict.ERROR


# Percent used
DISK_THRESHOLD = Threshold(warn_at=80, error_at=90)
MEMORY_THRESHOLD = Threshold(warn_at=80, error_at=90)

# 1m load as percent of logical CPUs
LOAD_THRESHOLD = Threshold(warn_at=70, error_at=90)


@dataclass
class Tally:
    """
    Per-run verdict counts

    Built fresh by each aggregation; INFO is ignored.
    """

    ok: int = 0
    warning: int = 0
    error: int = 0

    def add(self, verdict: Verdict) -> None:
        if verdict is Verdict.OK:
            self.ok += 1
        elif verdict is Verdict.WARNING:
            self.warning += 1
        elif verdict is Verdict.ERROR:
            self.error += 1

    @property
    def total(self) -> int:
        return self.ok + self.warning + self.error


def derive_overall_status(tally: Tally) -> OverallStatus:
    if tally.error > 0:
        return OverallStatus.UNHEALTHY
    if tally.warning > 0:
        return OverallStatus.DEGRADED
    return OverallStatus.HEALTHY


def health_percentage(tally: Tally) -> int:
    """
    Integer share of passed checks; 0 when nothing was counted
    """
    if tally.total == 0:
        return 0
    return tally.ok * 100 // tally.total


def exit_code_for(status: OverallStatus | str) -> int:
    """
    Map overall status to a process exit code

    Unknown values map to 3 (indeterminate).
    """
    key = status.value if isinstance(status, OverallStatus) else str(status)
    return EXIT_CODES.get(key, EXIT_INDETERMINATE)
