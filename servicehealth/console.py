"""
servicehealth.console
AUTHOR: carter-vin

Human-readable console output

- a section header whenever the check category changes
- one glyph-prefixed line per check, printed as soon as the check finishes
- final summary block
"""

from __future__ import annotations

import typer

from servicehealth.checks import CATEGORY_TITLES
from servicehealth.evaluate import OverallStatus, Verdict
from servicehealth.model import CheckResult, Report

_GLYPHS = {
    Verdict.OK: ("✅", typer.colors.GREEN),
    Verdict.WARNING: ("⚠️ ", typer.colors.YELLOW),
    Verdict.ERROR: ("❌", typer.colors.RED),
    Verdict.INFO: ("ℹ️ ", typer.colors.BLUE),
}

_STATUS_COLORS = {
    OverallStatus.HEALTHY: typer.colors.GREEN,
    OverallStatus.DEGRADED: typer.colors.YELLOW,
    OverallStatus.UNHEALTHY: typer.colors.RED,
}


def format_result_line(result: CheckResult) -> str:
    glyph, _ = _GLYPHS[result.verdict]
    return f"{glyph} {result.detail}"


class ConsolePrinter:
    """
    Incremental printer; pass `printer.on_result` to aggregate.run
    """

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._category: str | None = None

    def _echo(self, text: str, fg: str | None = None, bold: bool = False) -> None:
        if self.color and (fg or bold):
            text = typer.style(text, fg=fg, bold=bold)
        typer.echo(text)

    def header(self) -> None:
        typer.echo("")
        self._echo("SYSTEM HEALTH CHECK", bold=True)
        typer.echo("=" * 22)

    def on_result(self, result: CheckResult) -> None:
        if result.category != self._category:
            self._category = result.category
            title = CATEGORY_TITLES.get(result.category, result.category.upper())
            typer.echo("")
            self._echo(title, bold=True)
            typer.echo("-" * len(title))

        _, fg = _GLYPHS[result.verdict]
        self._echo(format_result_line(result), fg=fg)

    def summary(self, report: Report) -> None:
        typer.echo("")
        self._echo("HEALTH CHECK SUMMARY", bold=True)
        typer.echo("=" * 24)
        typer.echo(f"Total checks: {report.tally.total}")
        typer.echo(f"Passed: {report.tally.ok}")
        typer.echo(f"Warnings: {report.tally.warning}")
        typer.echo(f"Failed: {report.tally.error}")
        typer.echo(f"Health score: {report.health_percentage}%")
        typer.echo("")
        self._echo(
            f"Overall Status: {report.overall_status.value}",
            fg=_STATUS_COLORS.get(report.overall_status),
            bold=True,
        )
