"""
servicehealth.collectors.base
AUTHOR: carter-vin

Light result wrapper -> a failing measurement never crashes a health run
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from servicehealth.errors import MeasurementUnavailable


@dataclass(frozen=True)
class CollectorOutcome:
    """
    Normalized collector result
    - ok: false=failure, error details in error fields
    - value: collector result object if ok=true
    - expected: failure was a MeasurementUnavailable (vs an unexpected exception)
    """

    name: str
    ok: bool
    value: Optional[Any] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    expected: bool = False
    elapsed_ms: int = 0


def run_collector(name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> CollectorOutcome:
    """
    Run collector & capture failure as data
    """
    start = time.monotonic()
    try:
        v = fn(*args, **kwargs)
    except MeasurementUnavailable as e:
        return CollectorOutcome(
            name=name,
            ok=False,
            error_type=type(e).__name__,
            error_message=str(e),
            expected=True,
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )
    except Exception as e:
        return CollectorOutcome(
            name=name,
            ok=False,
            error_type=type(e).__name__,
            error_message=str(e),
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )

    return CollectorOutcome(
        name=name,
        ok=True,
        value=v,
        elapsed_ms=int((time.monotonic() - start) * 1000),
    )
