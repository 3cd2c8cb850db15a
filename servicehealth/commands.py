"""
servicehealth.commands
AUTHOR: carter-vin

External command invocation

- run_command never raises for a missing binary or a timeout; both become
  a CommandResult with a non-zero returncode
- first_success walks an explicit ordered list of strategies and returns
  every attempt, so distinct failure causes stay visible
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from servicehealth.errors import ExternalCommandFailed

RC_NOT_FOUND = 127
RC_TIMEOUT = 124


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "CommandResult":
        """
        Raise ExternalCommandFailed unless the command succeeded
        """
        if not self.ok:
            raise ExternalCommandFailed(self.args, self.returncode, self.stderr)
        return self


Runner = Callable[..., CommandResult]


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = 60.0,
) -> CommandResult:
    """
    Run a command and capture its output as text
    """
    try:
        proc = subprocess.run(
            list(args),
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        return CommandResult(args=tuple(args), returncode=RC_NOT_FOUND, stderr=str(e))
    except subprocess.TimeoutExpired:
        return CommandResult(
            args=tuple(args),
            returncode=RC_TIMEOUT,
            stderr=f"timed out after {timeout}s",
        )

    return CommandResult(
        args=tuple(args),
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


@dataclass(frozen=True)
class StrategyOutcome:
    """
    Result of an ordered fallback chain
    - winner: first successful attempt, or None when all failed
    - attempts: every attempt in order
    """

    winner: CommandResult | None
    attempts: list[CommandResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.winner is not None

    def describe_failures(self) -> str:
        return "; ".join(
            f"{' '.join(a.args)} -> {a.returncode}" + (f" ({a.stderr.strip()})" if a.stderr.strip() else "")
            for a in self.attempts
            if not a.ok
        )


def first_success(
    strategies: Sequence[Sequence[str]],
    *,
    runner: Runner = run_command,
    cwd: Path | None = None,
    timeout: float | None = 30.0,
) -> StrategyOutcome:
    """
    Try each command in order; stop at the first zero exit
    """
    attempts: list[CommandResult] = []
    for args in strategies:
        result = runner(args, cwd=cwd, timeout=timeout)
        attempts.append(result)
        if result.ok:
            return StrategyOutcome(winner=result, attempts=attempts)
    return StrategyOutcome(winner=None, attempts=attempts)
