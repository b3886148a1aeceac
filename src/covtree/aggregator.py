"""Coverage aggregation — merge statement and function data into one tree.

The statement side is authoritative for which packages and files exist.
Function data for a package or file the statement side does not know about
is dropped without error: the two Go tools legitimately disagree on such
sets (e.g. packages without executable statements).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from covtree.models.coverage import Coverage, FileCoverage, FunctionCoverage, PackageCoverage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covtree.adapters.coverage.base import Function, PackageFunctions, PackageStatements

logger = logging.getLogger(__name__)


def percent(num: int, den: int) -> float:
    """Return ``num / den`` as a percentage rounded to one decimal place.

    Halves round away from zero. A zero denominator yields ``0.0``.
    """
    if den == 0:
        return 0.0
    return _round_half_away(num / den * 1000) / 10


def _round_half_away(x: float) -> int:
    # Matches Go's math.Round, including 0.49999999999999994 -> 0.
    whole = math.trunc(x)
    if abs(x - whole) >= 0.5:
        whole += 1 if x > 0 else -1
    return whole


def is_internal(name: str) -> bool:
    """Return True when *name* starts with an ASCII lowercase letter.

    Empty names are treated as exported.
    """
    return bool(name) and "a" <= name[0] <= "z"


def to_functions(functions: Iterable[Function]) -> tuple[FunctionCoverage, ...]:
    """Convert reader function records to report entries, preserving order."""
    return tuple(
        FunctionCoverage(
            name=fn.function,
            percent=fn.percent,
            file=fn.file,
            line=fn.line,
            internal=is_internal(fn.function),
        )
        for fn in functions
    )


@dataclass(frozen=True)
class AggregatorOptions:
    """Construction-time aggregator configuration."""

    root_module: str = ""
    """Module path the readers trim from file names. Never applied by the merge."""


class _PackageBuilder:
    """Mutable package state used only while one report is being built."""

    def __init__(self, stmts: PackageStatements) -> None:
        self.name = stmts.package
        self.files: list[FileCoverage] = [
            FileCoverage(
                name=name,
                percent=file_stmts.percent,
                stmts=file_stmts.stmts,
                covered_stmts=file_stmts.covered_stmts,
            )
            for name, file_stmts in stmts.files.items()
        ]

    def add(self, pkg_fn: PackageFunctions) -> None:
        for name, functions in pkg_fn.files.items():
            for idx, file_cov in enumerate(self.files):
                if file_cov.name == name:
                    self.files[idx] = replace(file_cov, functions=to_functions(functions))
                    break
            else:
                logger.debug("Dropping functions for unknown file %s in %s", name, self.name)

    def build(self) -> PackageCoverage:
        return PackageCoverage(name=self.name, files=tuple(self.files))


class CoverageAggregator:
    """Build a :class:`Coverage` tree from already-parsed reader output.

    Instances hold only read-only options and may be reused, including
    concurrently; every call builds its own tree.
    """

    def __init__(self, options: AggregatorOptions | None = None) -> None:
        """Initialize with optional construction-time options."""
        self._options = options or AggregatorOptions()

    @property
    def options(self) -> AggregatorOptions:
        return self._options

    def aggregate(
        self,
        statements: Iterable[PackageStatements],
        functions: Iterable[PackageFunctions],
    ) -> Coverage:
        """Merge statement and function data into one report.

        Args:
            statements: Per-package statement totals from the statement reader.
            functions: Per-package function records from the function reader.

        Returns:
            The immutable coverage tree. Never raises for mismatched inputs.
        """
        packages: dict[str, _PackageBuilder] = {}
        covered, total = 0, 0
        for pkg in statements:
            packages[pkg.package] = _PackageBuilder(pkg)
            covered += pkg.covered_stmts
            total += pkg.stmts

        for pkg_fn in functions:
            builder = packages.get(pkg_fn.package)
            if builder is None:
                logger.debug("Dropping functions for unknown package %s", pkg_fn.package)
                continue
            builder.add(pkg_fn)

        return Coverage(
            percent=percent(covered, total),
            packages=tuple(builder.build() for builder in packages.values()),
        )
