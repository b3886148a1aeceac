"""Coverage report models.

The tree is built once by :class:`covtree.aggregator.CoverageAggregator` and
is immutable afterwards. Package and file order follow the inputs and carry
no meaning; call :meth:`Coverage.sorted` for a deterministic order.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class FunctionCoverage:
    """Coverage of a single function."""

    name: str
    """Function name as reported by ``go tool cover -func``."""

    percent: float
    """Percentage of the function's statements covered."""

    file: str
    """File the function is declared in."""

    line: int
    """Line the function is declared on."""

    internal: bool
    """True when the function is unexported (lowercase first letter)."""


@dataclass(frozen=True)
class FileCoverage:
    """Coverage of a single source file."""

    name: str
    """File path (trimmed of the root module when configured)."""

    percent: float
    """Percentage of statements covered."""

    stmts: int
    """Total number of statements in the file."""

    covered_stmts: int
    """Number of statements executed at least once."""

    functions: tuple[FunctionCoverage, ...] = ()
    """Functions declared in the file, empty when no function data matched."""


@dataclass(frozen=True)
class PackageCoverage:
    """Coverage of a package."""

    name: str
    """Package import path."""

    files: tuple[FileCoverage, ...] = ()
    """Coverage of each file in the package."""

    def functions(self) -> list[FunctionCoverage]:
        """Return all functions in the package."""
        return [fn for file_cov in self.files for fn in file_cov.functions]

    def file(self, name: str) -> FileCoverage | None:
        """Return the file called *name*, or None."""
        return next((f for f in self.files if f.name == name), None)

    @property
    def stmts(self) -> int:
        return sum(f.stmts for f in self.files)

    @property
    def covered_stmts(self) -> int:
        return sum(f.covered_stmts for f in self.files)


@dataclass(frozen=True)
class Coverage:
    """Coverage statistics parsed from a single test profile."""

    percent: float = 0.0
    """Percent of all statements covered, weighted by statement count."""

    packages: tuple[PackageCoverage, ...] = field(default_factory=tuple)
    """Coverage of each package."""

    def package(self, name: str) -> PackageCoverage | None:
        """Return the package called *name*, or None."""
        return next((p for p in self.packages if p.name == name), None)

    def functions(self) -> list[FunctionCoverage]:
        """Return every function across all packages."""
        return [fn for pkg in self.packages for fn in pkg.functions()]

    def sorted(self) -> Coverage:
        """Return an equal report with packages, files and functions ordered.

        Packages and files are ordered by name, functions by line then name.
        """
        packages = tuple(
            replace(
                pkg,
                files=tuple(
                    replace(
                        file_cov,
                        functions=tuple(
                            sorted(file_cov.functions, key=lambda fn: (fn.line, fn.name))
                        ),
                    )
                    for file_cov in sorted(pkg.files, key=lambda f: f.name)
                ),
            )
            for pkg in sorted(self.packages, key=lambda p: p.name)
        )
        return replace(self, packages=packages)
