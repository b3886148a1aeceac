"""Go function summary reader — parse ``go tool cover -func`` output."""

from __future__ import annotations

import logging
import re

from covtree.adapters.coverage.base import (
    Function,
    FunctionProfile,
    PackageFunctions,
    ProfileParseError,
    ProfileReader,
    package_of,
)

logger = logging.getLogger(__name__)

# "example.com/pkg/file.go:12:	FuncName		85.7%"
_FUNC_LINE_REGEX = re.compile(r"^(.+?):(\d+):\s+(\S*)\s+(\d+(?:\.\d+)?)%$")
# "total:			(statements)	80.0%"
_TOTAL_LINE_REGEX = re.compile(r"^total:\s+\(statements\)\s+(\d+(?:\.\d+)?)%$")


class GoFuncReader(ProfileReader[FunctionProfile]):
    """Function reader for ``go tool cover -func`` summaries."""

    @property
    def name(self) -> str:
        return "go_func"

    def read(self, text: str) -> FunctionProfile:
        """Parse a function summary into per-package, per-file function lists.

        Raises:
            ProfileParseError: On any non-blank line that is neither a function
                line nor the ``total:`` line.
        """
        total: float | None = None
        packages: dict[str, PackageFunctions] = {}

        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            total_match = _TOTAL_LINE_REGEX.match(line)
            if total_match:
                total = float(total_match.group(1))
                continue
            match = _FUNC_LINE_REGEX.match(line)
            if not match:
                raise ProfileParseError(
                    f"malformed function line {line!r}", line_number=line_number
                )
            raw_path, line_s, func_name, percent_s = match.groups()
            file_path = self._trim(raw_path)
            pkg_name = package_of(raw_path)

            pkg = packages.get(pkg_name)
            if pkg is None:
                pkg = packages[pkg_name] = PackageFunctions(package=pkg_name)
            pkg.files.setdefault(file_path, []).append(
                Function(
                    function=func_name,
                    file=file_path,
                    line=int(line_s),
                    percent=float(percent_s),
                )
            )

        logger.debug("Parsed function summary: %d packages, total %s", len(packages), total)
        return FunctionProfile(packages=list(packages.values()), total=total)
