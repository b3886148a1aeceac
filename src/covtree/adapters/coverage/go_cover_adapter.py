"""Go cover profile reader — parse ``go test -coverprofile`` output.

Parses the standard Go cover profile format (mode line, then
file:line.column,line.column numStmts count) into per-package statement
totals for the aggregator.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from covtree.adapters.coverage.base import (
    FileStatements,
    PackageStatements,
    ProfileParseError,
    ProfileReader,
    package_of,
)
from covtree.aggregator import percent

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_MODES = frozenset({"set", "count", "atomic"})

_MODE_LINE_REGEX = re.compile(r"^mode:\s*(\S+)$")

# Cover profile: "file:startLine.startCol,endLine.endCol numStmts count"
_COVER_LINE_REGEX = re.compile(r"^(.+?):(\d+)\.(\d+),(\d+)\.(\d+)\s+(\d+)\s+(\d+)$")


@dataclass
class _Block:
    num_stmts: int
    count: int


# ── Reader ───────────────────────────────────────────────────────


class GoCoverProfileReader(ProfileReader[list[PackageStatements]]):
    """Statement reader for Go cover profiles."""

    @property
    def name(self) -> str:
        return "go_cover"

    def read(self, text: str) -> list[PackageStatements]:
        """Parse cover profile *text* into per-package statement totals.

        Format: first line "mode: set", "mode: count" or "mode: atomic", then
        one line per block: file:startLine.startCol,endLine.endCol numStmts count

        Raises:
            ProfileParseError: On a missing mode line or a malformed block line.
        """
        mode = ""
        # file path -> block range -> merged block
        file_blocks: dict[str, dict[tuple[int, int, int, int], _Block]] = {}

        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            if not mode:
                mode = _parse_mode(line, line_number)
                continue
            match = _COVER_LINE_REGEX.match(line)
            if not match:
                raise ProfileParseError(f"malformed cover block {line!r}", line_number=line_number)
            file_path = match.group(1)
            block_range = (
                int(match.group(2)),
                int(match.group(3)),
                int(match.group(4)),
                int(match.group(5)),
            )
            num_stmts = int(match.group(6))
            count = int(match.group(7))

            blocks = file_blocks.setdefault(file_path, {})
            existing = blocks.get(block_range)
            if existing is None:
                blocks[block_range] = _Block(num_stmts=num_stmts, count=count)
            elif mode == "set":
                existing.count = max(existing.count, count)
            else:
                existing.count += count

        packages: dict[str, dict[str, FileStatements]] = {}
        for file_path, blocks in file_blocks.items():
            stmts = sum(b.num_stmts for b in blocks.values())
            covered = sum(b.num_stmts for b in blocks.values() if b.count > 0)
            packages.setdefault(package_of(file_path), {})[self._trim(file_path)] = (
                FileStatements(stmts=stmts, covered_stmts=covered, percent=percent(covered, stmts))
            )

        logger.debug(
            "Parsed cover profile (mode=%s): %d files in %d packages",
            mode or "none",
            len(file_blocks),
            len(packages),
        )
        return [PackageStatements.from_files(pkg, files) for pkg, files in packages.items()]


def _parse_mode(line: str, line_number: int) -> str:
    match = _MODE_LINE_REGEX.match(line)
    if not match:
        raise ProfileParseError(f"expected 'mode:' line, got {line!r}", line_number=line_number)
    mode = match.group(1)
    if mode not in _MODES:
        raise ProfileParseError(f"unknown cover mode {mode!r}", line_number=line_number)
    return mode
