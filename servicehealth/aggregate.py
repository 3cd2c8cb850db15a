"""
servicehealth.aggregate
AUTHOR: carter-vin

Health aggregator

- runs every check exactly once, sequentially, in the given order
- a failing evaluator becomes that check's `unavailable` verdict (never aborts the run)
- a FanOut evaluation contributes one result per item, in item order
- the tally is local to one run; nothing process-wide is mutated
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from servicehealth import VERSION
from servicehealth.checks import Check, FanOut
from servicehealth.collectors.base import run_collector
from servicehealth.evaluate import Tally, derive_overall_status, health_percentage
from servicehealth.logging import emit_event
from servicehealth.model import CheckResult, Report, utc_now_iso


def evaluate_check(check: Check) -> list[CheckResult]:
    outcome = run_collector(check.name, check.evaluator)

    if outcome.ok:
        evaluated = outcome.value
        items = evaluated.items if isinstance(evaluated, FanOut) else ((check.name, evaluated),)
        return [
            CheckResult(
                name=name,
                category=check.category,
                verdict=evaluation.verdict,
                detail=evaluation.detail,
                value=evaluation.value,
            )
            for name, evaluation in items
        ]

    emit_event(
        "check_failed",
        version=VERSION,
        check=check.name,
        error_type=outcome.error_type,
        message=outcome.error_message,
        expected=outcome.expected,
        elapsed_ms=outcome.elapsed_ms,
        verdict=check.unavailable.value,
    )
    return [
        CheckResult(
            name=check.name,
            category=check.category,
            verdict=check.unavailable,
            detail=f"{check.name} unavailable: {outcome.error_message}",
        )
    ]


def run(
    checks: Iterable[Check],
    *,
    on_result: Optional[Callable[[CheckResult], None]] = None,
    clock: Callable[[], str] = utc_now_iso,
) -> Report:
    """
    Evaluate checks and roll verdicts into a Report
    """
    timestamp = clock()
    tally = Tally()
    results: list[CheckResult] = []

    for check in checks:
        for result in evaluate_check(check):
            tally.add(result.verdict)
            results.append(result)
            if on_result is not None:
                on_result(result)

    return Report(
        timestamp=timestamp,
        results=results,
        tally=tally,
        overall_status=derive_overall_status(tally),
        health_percentage=health_percentage(tally),
    )
