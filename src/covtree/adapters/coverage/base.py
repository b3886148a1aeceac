"""Base classes and data models for coverage readers.

Readers sit between raw toolchain text and the aggregator: the statement
reader produces :class:`PackageStatements`, the function reader produces a
:class:`FunctionProfile`. Both apply the same root-module trim so that file
names on either side compare equal.
"""

from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from pathlib import Path

T = TypeVar("T")


class ProfileParseError(ValueError):
    """Raised when a cover profile or function summary is malformed."""

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        """Initialize with a message and the 1-based offending line, if known."""
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


@dataclass
class FileStatements:
    """Statement totals for a single file."""

    stmts: int
    covered_stmts: int
    percent: float


@dataclass
class PackageStatements:
    """Statement totals for every file of a package."""

    package: str
    files: dict[str, FileStatements] = field(default_factory=dict)
    stmts: int = 0
    """Sum of ``stmts`` over all files."""

    covered_stmts: int = 0
    """Sum of ``covered_stmts`` over all files."""

    @classmethod
    def from_files(cls, package: str, files: dict[str, FileStatements]) -> PackageStatements:
        """Build a package record whose aggregates are the sums of *files*."""
        return cls(
            package=package,
            files=files,
            stmts=sum(f.stmts for f in files.values()),
            covered_stmts=sum(f.covered_stmts for f in files.values()),
        )


@dataclass
class Function:
    """One line of ``go tool cover -func`` output."""

    function: str
    file: str
    line: int
    percent: float


@dataclass
class PackageFunctions:
    """Functions of a package, grouped by file in reported order."""

    package: str
    files: dict[str, list[Function]] = field(default_factory=dict)


@dataclass
class FunctionProfile:
    """Parsed function summary."""

    packages: list[PackageFunctions] = field(default_factory=list)
    total: float | None = None
    """Percentage from the summary's ``total:`` line, None when it has none."""


def normalize_root_module(root_module: str) -> str:
    """Return *root_module* without surrounding whitespace or trailing slashes."""
    return root_module.strip().rstrip("/")


def trim_root_module(path: str, root_module: str) -> str:
    """Strip ``root_module/`` from the front of *path*.

    Paths outside the root module are returned unchanged.
    """
    if not root_module:
        return path
    prefix = root_module + "/"
    if path.startswith(prefix):
        return path[len(prefix) :]
    return path


def package_of(path: str) -> str:
    """Return the Go package (import path directory) of a profile file path."""
    return posixpath.dirname(path)


class ProfileReader(ABC, Generic[T]):
    """Abstract base class for readers of Go coverage text output."""

    def __init__(self, root_module: str = "") -> None:
        """Initialize with the root module trimmed from file names."""
        self._root_module = normalize_root_module(root_module)

    @property
    def root_module(self) -> str:
        return self._root_module

    @property
    @abstractmethod
    def name(self) -> str:
        """Reader identifier (e.g. ``'go_cover'``)."""

    @abstractmethod
    def read(self, text: str) -> T:
        """Parse *text* and return the reader's structured output.

        Raises:
            ProfileParseError: If *text* is malformed.
        """

    def parse_file(self, path: Path) -> T:
        """Read *path* as UTF-8 and parse it.

        Raises:
            OSError: If the file cannot be read.
            ProfileParseError: If the content is malformed.
        """
        return self.read(path.read_text(encoding="utf-8"))

    def _trim(self, path: str) -> str:
        return trim_root_module(path, self._root_module)
