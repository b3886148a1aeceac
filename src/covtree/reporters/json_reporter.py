"""JSON reporter — serialize coverage and test-run reports.

The layout is a convenience for downstream tooling, not a stable format.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from covtree.models.coverage import Coverage
    from covtree.models.test_run import TestCase, TestRun

logger = logging.getLogger(__name__)


def serialize_coverage(report: Coverage) -> dict[str, Any]:
    """Serialize a ``Coverage`` tree into a JSON-compatible dict."""
    return {
        "percent": report.percent,
        "packages": [
            {
                "name": pkg.name,
                "files": [
                    {
                        "name": file_cov.name,
                        "percent": file_cov.percent,
                        "stmts": file_cov.stmts,
                        "covered_stmts": file_cov.covered_stmts,
                        "functions": [
                            {
                                "name": fn.name,
                                "percent": fn.percent,
                                "file": fn.file,
                                "line": fn.line,
                                "internal": fn.internal,
                            }
                            for fn in file_cov.functions
                        ],
                    }
                    for file_cov in pkg.files
                ],
            }
            for pkg in report.packages
        ],
    }


def _serialize_test(test: TestCase) -> dict[str, Any]:
    return {
        "name": test.name,
        "status": test.status.value,
        "elapsed": test.elapsed,
        "output": test.output,
        "subtests": [_serialize_test(sub) for sub in test.subtests],
    }


def serialize_test_run(run: TestRun) -> dict[str, Any]:
    """Serialize a ``TestRun`` into a JSON-compatible dict."""
    return {
        "summary": {
            "total": run.total,
            "passed": run.passed,
            "failed": run.failed,
            "skipped": run.skipped,
            "success": run.success,
        },
        "packages": [
            {
                "name": pkg.name,
                "status": pkg.status.value,
                "elapsed": pkg.elapsed,
                "started": pkg.started.isoformat() if pkg.started else None,
                "finished": pkg.finished.isoformat() if pkg.finished else None,
                "tests": [_serialize_test(test) for test in pkg.tests],
            }
            for pkg in run.packages
        ],
    }


class JSONReporter:
    """Generate JSON documents from covtree reports."""

    def generate(
        self,
        output_path: Path,
        *,
        coverage: Coverage | None = None,
        test_run: TestRun | None = None,
    ) -> Path:
        """Write a JSON report file and return its path."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            self.generate_string(coverage=coverage, test_run=test_run),
            encoding="utf-8",
        )
        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(
        self,
        *,
        coverage: Coverage | None = None,
        test_run: TestRun | None = None,
    ) -> str:
        """Return the JSON report as a string."""
        return json.dumps(
            _build_report(coverage=coverage, test_run=test_run),
            indent=2,
            ensure_ascii=False,
        )


def _build_report(
    *,
    coverage: Coverage | None = None,
    test_run: TestRun | None = None,
) -> dict[str, Any]:
    report: dict[str, Any] = {
        "tool": "covtree",
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }
    if coverage is not None:
        report["coverage"] = serialize_coverage(coverage)
    if test_run is not None:
        report["test_run"] = serialize_test_run(test_run)
    return report
