"""
servicehealth.emit

AUTHOR: carter-vin

OUTPUT:
- report files (health-report.json, deployment-status.json): replaced atomically
- monitor log: append-only text lines with size-based rotation

Design goals:
- Create parent directories if missing
- Readers never observe a half-written report (temp file + os.replace)
- Flush per append so tail can see updates immediately
- Explicit error surfaces (IO errors propagate to the caller)
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class LogTarget:
    """
    Append-only log destination
    - max_bytes: rotate before the append once the file reaches this size (None disables)
    - rotate_count: number of rotated files kept (name.1.log .. name.N.log)
    """

    path: Path
    max_bytes: int | None = None
    rotate_count: int = 3


def write_report_file(path: Path, text: str) -> None:
    """
    Atomically replace `path` with `text` (plus trailing newline)

    Failure semantics:
    - raises on IO errors; the previous report (if any) is left untouched
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def _rotation_path(path: Path, index: int) -> Path:
    """
    Build rotation path with numeric suffix
    """
    return path.with_name(f"{path.stem}.{index}{path.suffix}")


def maybe_rotate(target: LogTarget) -> dict[str, Any] | None:
    """
    Rotate the log file when it exceeds max size

    Returns rotation info, or None when no rotation happened.
    """
    if target.max_bytes is None or target.max_bytes <= 0:
        return None

    if target.rotate_count < 1:
        return None

    if not target.path.exists():
        return None

    prior_size = target.path.stat().st_size
    if prior_size < target.max_bytes:
        return None

    # Rotate oldest first to keep shifts deterministic
    for index in range(target.rotate_count, 1, -1):
        src = _rotation_path(target.path, index - 1)
        dst = _rotation_path(target.path, index)
        if dst.exists():
            dst.unlink()
        if src.exists():
            src.rename(dst)

    first = _rotation_path(target.path, 1)
    if first.exists():
        first.unlink()
    target.path.rename(first)

    return {
        "rotated_to": str(first),
        "prior_size_bytes": prior_size,
    }


def append_log_line(target: LogTarget, line: str) -> dict[str, Any] | None:
    """
    Append a single line (newline added) after rotating if needed

    Returns rotation info when the file was rotated first.
    """
    target.path.parent.mkdir(parents=True, exist_ok=True)
    rotation = maybe_rotate(target)

    with target.path.open(mode="a", encoding="utf-8", newline="\n") as f:
        f.write(line)
        f.write("\n")
        f.flush()

    return rotation
