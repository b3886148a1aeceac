"""Tests for the terminal (Rich) reporter."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from covtree.adapters.unit.go_test_adapter import GoTestEventReader
from covtree.parser import CoverageParser
from covtree.reporters.terminal import CLIReporter, _coverage_color, _format_pct, reporter

_COVER = (
    "mode: set\n"
    "example.com/p/a.go:1.1,2.2 3 1\n"
    "example.com/p/a.go:3.1,4.2 1 0\n"
    "example.com/q/b.go:1.1,2.2 2 0\n"
)
_FUNC = "example.com/p/a.go:1:\tRun\t75.0%\nexample.com/p/a.go:3:\thelper\t0.0%\n"
_EVENTS = (
    '{"Action":"run","Package":"p","Test":"TestOk"}\n'
    '{"Action":"pass","Package":"p","Test":"TestOk","Elapsed":0.1}\n'
    '{"Action":"run","Package":"p","Test":"TestBad"}\n'
    '{"Action":"output","Package":"p","Test":"TestBad","Output":"boom\\n"}\n'
    '{"Action":"fail","Package":"p","Test":"TestBad","Elapsed":0.1}\n'
    '{"Action":"fail","Package":"p","Elapsed":0.2}\n'
)


@pytest.fixture
def mock_console() -> MagicMock:
    """Return a MagicMock that replaces the console."""
    return MagicMock()


@pytest.fixture
def cli_reporter(mock_console: MagicMock) -> CLIReporter:
    """Return a CLIReporter with a mocked console."""
    r = CLIReporter()
    r.console = mock_console
    return r


def _render(renderable: object) -> str:
    console = Console(width=200, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


# ── Helpers ─────────────────────────────────────────────────────


class TestCoverageColor:
    def test_thresholds(self) -> None:
        assert _coverage_color(100.0) == "green"
        assert _coverage_color(80.0) == "green"
        assert _coverage_color(79.9) == "yellow"
        assert _coverage_color(50.0) == "yellow"
        assert _coverage_color(49.9) == "red"

    def test_format_pct(self) -> None:
        assert _format_pct(75.0) == "[yellow]75.0%[/yellow]"
        assert _format_pct(90.0, bold=True) == "[bold green]90.0%[/bold green]"


# ── Messages ────────────────────────────────────────────────────


class TestMessages:
    def test_success_and_error(self, cli_reporter: CLIReporter, mock_console: MagicMock) -> None:
        cli_reporter.print_success("done")
        cli_reporter.print_error("bad")
        printed = [c.args[0] for c in mock_console.print.call_args_list]
        assert "[green]✓[/green] done" in printed
        assert "[red]✗[/red] bad" in printed

    def test_singleton(self) -> None:
        assert isinstance(reporter, CLIReporter)


# ── Coverage ────────────────────────────────────────────────────


class TestPrintCoverage:
    def test_prints_table_with_packages_and_files(
        self, cli_reporter: CLIReporter, mock_console: MagicMock
    ) -> None:
        report = CoverageParser().stats(_COVER, _FUNC).sorted()
        cli_reporter.print_coverage(report)

        (table,) = [c.args[0] for c in mock_console.print.call_args_list]
        assert isinstance(table, Table)
        text = _render(table)
        assert "example.com/p" in text
        assert "example.com/q/b.go" in text
        assert "50.0%" in text  # overall: 3 of 6
        assert "Overall" in text

    def test_show_functions_adds_table(
        self, cli_reporter: CLIReporter, mock_console: MagicMock
    ) -> None:
        report = CoverageParser().stats(_COVER, _FUNC)
        cli_reporter.print_coverage(report, show_functions=True)

        tables = [c.args[0] for c in mock_console.print.call_args_list]
        assert len(tables) == 2
        text = _render(tables[1])
        assert "Run" in text
        assert "helper" in text
        assert "example.com/p/a.go:3" in text


# ── Test runs ───────────────────────────────────────────────────


class TestPrintTestRun:
    def test_prints_tree_and_summary(
        self, cli_reporter: CLIReporter, mock_console: MagicMock
    ) -> None:
        cli_reporter.print_test_run(GoTestEventReader().read(_EVENTS))

        calls = [c.args[0] for c in mock_console.print.call_args_list]
        tree = calls[0]
        assert isinstance(tree, Tree)
        text = _render(tree)
        assert "TestOk" in text
        assert "TestBad" in text
        assert "boom" in text
        assert "1 failed" in calls[1]

    def test_failed_only_hides_passing(
        self, cli_reporter: CLIReporter, mock_console: MagicMock
    ) -> None:
        cli_reporter.print_test_run(GoTestEventReader().read(_EVENTS), failed_only=True)

        text = _render(mock_console.print.call_args_list[0].args[0])
        assert "TestOk" not in text
        assert "TestBad" in text
