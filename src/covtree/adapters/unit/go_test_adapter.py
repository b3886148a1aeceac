"""Go test event reader — build a test tree from ``go test -json`` output.

Each line of the stream is a JSON object with Time, Action, Package, Test,
Elapsed and Output fields. Events without a Test field describe the package
itself. Subtests are named ``Parent/child`` and are nested under their parent.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from typing import Any

from covtree.models.test_run import PackageRun, TestCase, TestRun, TestStatus

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_TERMINAL_ACTIONS = {
    "pass": TestStatus.PASSED,
    "fail": TestStatus.FAILED,
    "skip": TestStatus.SKIPPED,
}

# RFC 3339 with up to nanosecond precision; datetime keeps microseconds.
_FRACTION_REGEX = re.compile(r"(\.\d{6})\d+")


class TestOutputParseError(ValueError):
    """Raised when a ``go test -json`` line looks like JSON but is not."""

    __test__ = False

    def __init__(self, message: str, *, line_number: int) -> None:
        """Initialize with a message and the 1-based offending line."""
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number


class _PackageState:
    """Mutable bookkeeping for one package while the stream is read."""

    def __init__(self, run: PackageRun) -> None:
        self.run = run
        self.tests: dict[str, TestCase] = {}

    def test(self, name: str) -> TestCase:
        existing = self.tests.get(name)
        if existing is not None:
            return existing
        case = TestCase(name=name)
        self.tests[name] = case
        parent = self._parent_of(name)
        if parent is None:
            self.run.tests.append(case)
        else:
            parent.subtests.append(case)
        return case

    def _parent_of(self, name: str) -> TestCase | None:
        if "/" not in name:
            return None
        return self.test(name.rsplit("/", 1)[0])


class GoTestEventReader:
    """Reader for the ``go test -json`` event stream."""

    @property
    def name(self) -> str:
        return "gotest"

    def read(self, text: str) -> TestRun:
        """Parse a ``go test -json`` stream into a :class:`TestRun`.

        Lines that do not start with ``{`` (build noise) are skipped, as are
        events that carry no ``Package``, such as ``build-output`` events.

        Raises:
            TestOutputParseError: If a JSON-looking line cannot be decoded.
        """
        packages: dict[str, _PackageState] = {}

        for line_number, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            if not line.startswith("{"):
                logger.debug("Skipping non-JSON test output line %d", line_number)
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError as exc:
                raise TestOutputParseError(str(exc), line_number=line_number) from exc

            pkg_name = str(event.get("Package") or "")
            if not pkg_name:
                logger.debug(
                    "Skipping %s event without a package on line %d",
                    event.get("Action", ""),
                    line_number,
                )
                continue
            state = packages.get(pkg_name)
            if state is None:
                state = packages[pkg_name] = _PackageState(PackageRun(name=pkg_name))
            _apply_event(state, event)

        return TestRun(packages=[state.run for state in packages.values()])


def _apply_event(state: _PackageState, event: dict[str, Any]) -> None:
    action = str(event.get("Action", ""))
    test_name = str(event.get("Test", "") or "")
    timestamp = _parse_time(event.get("Time"))
    run = state.run

    if not test_name:
        if action == "start" or (timestamp is not None and run.started is None):
            run.started = timestamp
        if action == "output":
            run.output.append(str(event.get("Output", "")))
        elif action in _TERMINAL_ACTIONS:
            run.status = _TERMINAL_ACTIONS[action]
            run.elapsed = _to_float(event.get("Elapsed", 0))
            run.finished = timestamp
        return

    case = state.test(test_name)
    if action == "output":
        case.output.append(str(event.get("Output", "")))
    elif action in _TERMINAL_ACTIONS:
        case.status = _TERMINAL_ACTIONS[action]
        case.elapsed = _to_float(event.get("Elapsed", 0))


def _parse_time(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    text = _FRACTION_REGEX.sub(r"\1", value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Ignoring unparseable event time %r", value)
        return None


def _to_float(value: object) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
