"""covtree — structured Go coverage and test-run reports."""

from covtree.aggregator import AggregatorOptions, CoverageAggregator, percent
from covtree.models.coverage import Coverage, FileCoverage, FunctionCoverage, PackageCoverage
from covtree.models.test_run import PackageRun, TestCase, TestRun, TestStatus
from covtree.parser import (
    CoverageParseError,
    CoverageParser,
    TestParser,
    cover,
    cover_from_readers,
    tests,
    tests_from_reader,
)

__version__ = "0.1.0"

__all__ = [
    "AggregatorOptions",
    "Coverage",
    "CoverageAggregator",
    "CoverageParseError",
    "CoverageParser",
    "FileCoverage",
    "FunctionCoverage",
    "PackageCoverage",
    "PackageRun",
    "TestCase",
    "TestParser",
    "TestRun",
    "TestStatus",
    "__version__",
    "cover",
    "cover_from_readers",
    "percent",
    "tests",
    "tests_from_reader",
]
