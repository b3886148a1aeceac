"""Renderers for coverage and test-run reports."""

from covtree.reporters.json_reporter import JSONReporter, serialize_coverage, serialize_test_run
from covtree.reporters.terminal import CLIReporter, reporter

__all__ = [
    "CLIReporter",
    "JSONReporter",
    "reporter",
    "serialize_coverage",
    "serialize_test_run",
]
