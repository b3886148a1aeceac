"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from covtree.aggregator import percent
from covtree.models.test_run import TestStatus

if TYPE_CHECKING:
    from covtree.models.coverage import Coverage, PackageCoverage
    from covtree.models.test_run import TestCase, TestRun

console = Console()

_GOOD_COVERAGE = 80.0
_FAIR_COVERAGE = 50.0
_MAX_OUTPUT_LINES = 10

_STATUS_STYLES = {
    TestStatus.PASSED: ("✓", "green"),
    TestStatus.FAILED: ("✗", "red"),
    TestStatus.SKIPPED: ("⊘", "yellow"),
    TestStatus.ERROR: ("⚠", "magenta"),
}


def _coverage_color(pct: float) -> str:
    """Return a Rich color name for a coverage percentage."""
    if pct >= _GOOD_COVERAGE:
        return "green"
    if pct >= _FAIR_COVERAGE:
        return "yellow"
    return "red"


def _format_pct(pct: float, *, bold: bool = False) -> str:
    color = _coverage_color(pct)
    style = f"bold {color}" if bold else color
    return f"[{style}]{pct:.1f}%[/{style}]"


class CLIReporter:
    """Rich terminal output for coverage and test-run reports."""

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    # ── Coverage ─────────────────────────────────────────────────

    def print_coverage(self, report: Coverage, *, show_functions: bool = False) -> None:
        """Print a package/file coverage table, optionally with functions."""
        table = Table(title="Coverage Summary", title_style="bold cyan")
        table.add_column("Package / File", style="bold")
        table.add_column("Statements", justify="right")
        table.add_column("Covered", justify="right")
        table.add_column("Coverage", justify="right")

        for pkg in report.packages:
            table.add_row(
                pkg.name or ".",
                str(pkg.stmts),
                str(pkg.covered_stmts),
                _format_pct(_package_percent(pkg)),
            )
            for file_cov in pkg.files:
                table.add_row(
                    f"  [dim]{file_cov.name}[/dim]",
                    str(file_cov.stmts),
                    str(file_cov.covered_stmts),
                    _format_pct(file_cov.percent),
                )

        table.add_section()
        table.add_row("[bold]Overall[/bold]", "", "", _format_pct(report.percent, bold=True))
        self.console.print(table)

        if show_functions:
            self.print_functions(report)

    def print_functions(self, report: Coverage) -> None:
        """Print one row per function with its coverage and visibility."""
        table = Table(title="Function Coverage", title_style="bold cyan")
        table.add_column("Function", style="bold")
        table.add_column("Location")
        table.add_column("Exported", justify="center")
        table.add_column("Coverage", justify="right")

        for fn in report.functions():
            table.add_row(
                fn.name,
                f"[dim]{fn.file}:{fn.line}[/dim]",
                "" if fn.internal else "✓",
                _format_pct(fn.percent),
            )
        self.console.print(table)

    # ── Test runs ────────────────────────────────────────────────

    def print_test_run(self, run: TestRun, *, failed_only: bool = False) -> None:
        """Print the package → test → subtest tree and a summary line."""
        root = Tree("[bold cyan]Test Run[/bold cyan]")
        for pkg in run.packages:
            icon, color = _STATUS_STYLES[pkg.status]
            branch = root.add(
                f"[{color}]{icon}[/{color}] [bold]{pkg.name}[/bold] [dim]({pkg.elapsed:.2f}s)[/dim]"
            )
            for test in pkg.tests:
                self._add_test(branch, test, failed_only=failed_only)
        self.console.print(root)

        parts = [f"[green]✓ {run.passed} passed[/green]"]
        if run.failed:
            parts.append(f"[red]✗ {run.failed} failed[/red]")
        if run.skipped:
            parts.append(f"[yellow]⊘ {run.skipped} skipped[/yellow]")
        self.console.print(f"  [bold]{run.total}[/bold] tests  {'  '.join(parts)}")

    def _add_test(self, parent: Tree, test: TestCase, *, failed_only: bool) -> None:
        if failed_only and test.status is not TestStatus.FAILED:
            return
        icon, color = _STATUS_STYLES[test.status]
        node = parent.add(
            f"[{color}]{icon}[/{color}] {test.short_name} [dim]({test.elapsed:.2f}s)[/dim]"
        )
        if test.status is TestStatus.FAILED and not test.subtests:
            for line in test.output[-_MAX_OUTPUT_LINES:]:
                node.add(f"[dim]{line.rstrip()}[/dim]")
        for sub in test.subtests:
            self._add_test(node, sub, failed_only=failed_only)


def _package_percent(pkg: PackageCoverage) -> float:
    return percent(pkg.covered_stmts, pkg.stmts)


# Singleton instance for easy import
reporter = CLIReporter()
