"""Entry points that read Go coverage and test output into covtree reports.

``cover`` generates the function summary with ``go tool cover -func``;
``cover_from_readers`` takes both profiles as already-captured text, which is
useful for profiles that do not belong to the current checkout.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from covtree.adapters.coverage.base import ProfileParseError, normalize_root_module
from covtree.adapters.coverage.go_cover_adapter import GoCoverProfileReader
from covtree.adapters.coverage.go_func_adapter import GoFuncReader
from covtree.adapters.unit.go_test_adapter import GoTestEventReader
from covtree.aggregator import AggregatorOptions, CoverageAggregator
from covtree.utils.subprocess_runner import SubprocessError, run_subprocess

if TYPE_CHECKING:
    from typing import TextIO

    from covtree.models.coverage import Coverage
    from covtree.models.test_run import TestRun

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 60.0
# `go tool cover` rounds its total on its own; allow one 0.1 step.
_TOTAL_TOLERANCE = 0.15


class CoverageParseError(Exception):
    """Raised when coverage input cannot be read, generated or parsed."""


class CoverageParser:
    """Parse cover and function profiles into a :class:`Coverage` report.

    The root module is fixed at construction and handed to both readers, so
    statement and function file names are trimmed the same way.
    """

    def __init__(
        self,
        *,
        root_module: str = "",
        go_binary: str = "go",
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the parser.

        Args:
            root_module: Module path trimmed from file names (e.g. ``github.com/acme/svc``).
            go_binary: Go executable used to generate function summaries.
            timeout: Seconds to wait for ``go tool cover``.
        """
        self.root_module = normalize_root_module(root_module)
        self.go_binary = go_binary
        self.timeout = timeout
        self._cover_reader = GoCoverProfileReader(self.root_module)
        self._func_reader = GoFuncReader(self.root_module)
        self._aggregator = CoverageAggregator(AggregatorOptions(root_module=self.root_module))

    def stats(self, cover_text: str, func_text: str) -> Coverage:
        """Parse both profiles and return the merged report."""
        try:
            statements = self._cover_reader.read(cover_text)
        except ProfileParseError as e:
            raise CoverageParseError(f"couldn't parse cover profile: {e}") from e

        try:
            functions = self._func_reader.read(func_text)
        except ProfileParseError as e:
            raise CoverageParseError(f"couldn't parse func profile: {e}") from e

        report = self._aggregator.aggregate(statements, functions.packages)
        total = functions.total
        if total is not None and abs(total - report.percent) > _TOTAL_TOLERANCE:
            logger.warning(
                "Function summary total %.1f%% differs from computed coverage %.1f%%",
                total,
                report.percent,
            )
        return report

    async def run_func_cover(self, profile: Path) -> str:
        """Run ``go tool cover -func=<profile>`` and return its output."""
        cmd = [self.go_binary, "tool", "cover", f"-func={profile}"]
        try:
            result = await run_subprocess(cmd, timeout=self.timeout)
        except SubprocessError as e:
            detail = e.result.stderr.strip()
            message = f"couldn't get function coverage: {e}"
            if detail:
                message = f"{message}, stderr {detail}"
            raise CoverageParseError(message) from e
        return result.stdout

    async def cover(self, profile: str | Path) -> Coverage:
        """Read *profile*, generate its function summary and merge both."""
        profile_path = Path(profile)
        try:
            cover_text = profile_path.read_text(encoding="utf-8")
        except OSError as e:
            raise CoverageParseError(f"error reading coverage profile: {e}") from e
        func_text = await self.run_func_cover(profile_path)
        return self.stats(cover_text, func_text)


async def cover(
    profile: str | Path,
    *,
    root_module: str = "",
    go_binary: str = "go",
    timeout: float = _DEFAULT_TIMEOUT,
) -> Coverage:
    """Parse a cover profile written by ``go test -coverprofile``.

    The function summary is generated automatically with ``go tool cover``.
    Use :func:`cover_from_readers` to supply an existing summary instead.
    """
    parser = CoverageParser(root_module=root_module, go_binary=go_binary, timeout=timeout)
    return await parser.cover(profile)


def cover_from_readers(
    cover_profile: TextIO | str | None,
    func_profile: TextIO | str | None,
    *,
    root_module: str = "",
) -> Coverage:
    """Parse an already-captured cover profile and function summary.

    Both arguments may be text streams or strings.

    Raises:
        ValueError: If either profile is None.
        CoverageParseError: If either profile is malformed.
    """
    if cover_profile is None:
        raise ValueError("cover profile must not be None")
    if func_profile is None:
        raise ValueError("function profile must not be None")

    parser = CoverageParser(root_module=root_module)
    return parser.stats(_read_text(cover_profile), _read_text(func_profile))


class TestParser:
    """Parse ``go test -json`` output into a :class:`TestRun`."""

    __test__ = False

    def __init__(self) -> None:
        """Initialize with the standard event reader."""
        self._reader = GoTestEventReader()

    def stats(self, out_json: str) -> TestRun:
        return self._reader.read(out_json)


def tests_from_reader(out_json: TextIO | str) -> TestRun:
    """Parse ``go test -json`` output from a stream or string."""
    return TestParser().stats(_read_text(out_json))


def tests(out_file: str | Path) -> TestRun:
    """Parse a file holding ``go test -json`` output.

    Raises:
        OSError: If the file cannot be read.
        TestOutputParseError: If the file holds malformed events.
    """
    text = Path(out_file).read_text(encoding="utf-8")
    return TestParser().stats(text)


def _read_text(source: TextIO | str) -> str:
    if isinstance(source, str):
        return source
    return source.read()
