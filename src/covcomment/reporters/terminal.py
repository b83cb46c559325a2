"""Terminal output for the CLI, rendered with rich."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from covcomment.orchestrator import RunResult

console = Console()

_GOOD_COVERAGE = 80.0
_FAIR_COVERAGE = 60.0


def _coverage_style(percentage: float) -> str:
    """Return a Rich color name for a coverage percentage."""
    if percentage >= _GOOD_COVERAGE:
        return "green"
    if percentage >= _FAIR_COVERAGE:
        return "yellow"
    return "red"


class CLIReporter:
    """Rich terminal output for covcomment commands."""

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    def print_run_summary(self, result: RunResult) -> None:
        """Print what was parsed and where the comment went."""
        table = Table(title="Coverage Comment", show_header=True, header_style="bold cyan")
        table.add_column("Report")
        table.add_column("Result", justify="right")

        parsed = result.parsed
        if parsed.coverage is not None:
            pct = parsed.coverage.overall.percentage
            table.add_row("SimpleCov", f"[{_coverage_style(pct)}]{pct:.2f}%[/]")
        if parsed.coverage_xml is not None:
            pct = parsed.coverage_xml.total
            table.add_row("Cobertura", f"[{_coverage_style(pct)}]{pct:.1f}%[/]")
        if parsed.last_run is not None:
            table.add_row(
                "Last run", f"line {parsed.last_run.line:.1f}% / branch {parsed.last_run.branch:.1f}%"
            )
        if parsed.test_results is not None:
            tests = parsed.test_results
            style = "green" if tests.all_passed else "red"
            table.add_row(
                "Tests",
                f"[{style}]{tests.tests} run, {tests.failures} failed, "
                f"{tests.errors} errors, {tests.skipped} skipped[/]",
            )
        if table.row_count == 0:
            table.add_row("[dim]none found[/dim]", "")

        self.console.print(table)

        if result.posted:
            self.print_success(f"Comment posted: {result.comment_url or 'ok'}")
        for error in result.errors:
            self.print_error(error)


reporter = CLIReporter()
