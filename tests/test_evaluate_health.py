"""
Contract test for threshold verdicts and overall status derivation
"""

import pytest

from servicehealth.evaluate import (
    DISK_THRESHOLD,
    OverallStatus,
    Tally,
    Threshold,
    Verdict,
    derive_overall_status,
    exit_code_for,
    health_percentage,
)

_RANK = {Verdict.OK: 0, Verdict.WARNING: 1, Verdict.ERROR: 2}


@pytest.mark.parametrize(
    ("value", "expected"),
    [(75, Verdict.OK), (80, Verdict.WARNING), (85, Verdict.WARNING), (90, Verdict.ERROR), (95, Verdict.ERROR)],
)
def test_disk_threshold_scenarios(value: int, expected: Verdict) -> None:
    """
    Disk 80/90: below 80 OK, 80..89 WARNING, 90+ ERROR
    """
    assert DISK_THRESHOLD.classify(value) is expected


def test_threshold_verdict_is_monotonic() -> None:
    """
    Increasing the measured value never improves the verdict
    """
    threshold = Threshold(warn_at=70, error_at=90)
    ranks = [_RANK[threshold.classify(value / 2)] for value in range(0, 241)]
    assert ranks == sorted(ranks)


def test_threshold_rejects_inverted_cutoffs() -> None:
    with pytest.raises(ValueError, match="warn_at"):
        Threshold(warn_at=90, error_at=80)
    with pytest.raises(ValueError):
        Threshold(warn_at=50, error_at=50)


def test_single_error_outweighs_many_warnings() -> None:
    """
    1 ERROR + 10 WARNINGs is UNHEALTHY, never DEGRADED
    """
    tally = Tally(ok=3, warning=10, error=1)
    assert derive_overall_status(tally) is OverallStatus.UNHEALTHY


def test_status_derivation_and_exit_codes() -> None:
    assert derive_overall_status(Tally(ok=5)) is OverallStatus.HEALTHY
    assert derive_overall_status(Tally(ok=4, warning=1)) is OverallStatus.DEGRADED

    assert exit_code_for(OverallStatus.HEALTHY) == 0
    assert exit_code_for(OverallStatus.DEGRADED) == 1
    assert exit_code_for(OverallStatus.UNHEALTHY) == 2
    assert exit_code_for("SOMETHING_ELSE") == 3


def test_health_percentage_edges() -> None:
    """
    100 only when nothing warned or failed; 0 when nothing was counted
    """
    assert health_percentage(Tally()) == 0
    assert health_percentage(Tally(ok=7)) == 100
    assert health_percentage(Tally(ok=6, warning=1)) == 6 * 100 // 7
    assert health_percentage(Tally(ok=1, error=2)) == 33


def test_tally_ignores_info() -> None:
    tally = Tally()
    for verdict in (Verdict.OK, Verdict.INFO, Verdict.WARNING, Verdict.INFO, Verdict.ERROR):
        tally.add(verdict)
    assert (tally.ok, tally.warning, tally.error, tally.total) == (1, 1, 1, 3)
