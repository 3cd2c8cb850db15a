"""
servicehealth.poll
AUTHOR: carter-vin

Bounded linear retry against an HTTP endpoint

Worst case wait: max_attempts * timeout_s + (max_attempts - 1) * interval_s.
Exhaustion is reported as False; the caller decides whether it is fatal.
"""

from __future__ import annotations

import time
from typing import Callable

from servicehealth import VERSION
from servicehealth.collectors.network import http_ok
from servicehealth.logging import emit_event


def poll_endpoint(
    url: str,
    timeout_s: float,
    max_attempts: int,
    interval_s: float,
    *,
    probe: Callable[[str, float], bool] = http_ok,
    sleep: Callable[[float], None] = time.sleep,
    label: str | None = None,
) -> bool:
    """
    GET `url` until it succeeds or `max_attempts` are used up

    Sleeps only between attempts.
    """
    name = label or url

    for attempt in range(1, max_attempts + 1):
        try:
            ok = probe(url, timeout_s)
        except Exception as e:
            # A probe blowing up counts as a failed attempt
            ok = False
            emit_event(
                "endpoint_poll_attempt",
                version=VERSION,
                endpoint=name,
                attempt=attempt,
                max_attempts=max_attempts,
                ok=False,
                error_type=type(e).__name__,
                message=str(e),
            )
        else:
            emit_event(
                "endpoint_poll_attempt",
                version=VERSION,
                endpoint=name,
                attempt=attempt,
                max_attempts=max_attempts,
                ok=ok,
            )

        if ok:
            emit_event("endpoint_healthy", version=VERSION, endpoint=name, attempts=attempt)
            return True

        if attempt < max_attempts:
            sleep(interval_s)

    emit_event(
        "endpoint_unhealthy",
        version=VERSION,
        endpoint=name,
        attempts=max_attempts,
    )
    return False
