"""Configuration parsing from ``.covtree.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".covtree.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

_REPORT_FORMATS = {"terminal", "json"}


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name, {})
    if not isinstance(section, dict):
        logger.warning("Ignoring non-mapping '%s' section in %s", name, CONFIG_FILE_NAME)
        return {}
    return section


@dataclass
class CoverageConfig:
    """Coverage parsing configuration."""

    root_module: str = ""
    """Go module path trimmed from file names (e.g. github.com/acme/svc)."""

    go_binary: str = "go"
    """Go executable used to run ``go tool cover -func``."""

    func_timeout: float = 60.0
    """Seconds to wait for ``go tool cover -func``."""

    fail_under: float = 0.0
    """Exit non-zero when overall coverage is below this percentage."""

    sort_output: bool = True
    """Order packages, files and functions before rendering."""


@dataclass
class ReportConfig:
    """Reporting and output configuration."""

    format: str = "terminal"
    """Default output format: terminal or json."""

    show_functions: bool = False
    """Include per-function rows in terminal coverage output."""


@dataclass
class CovtreeConfig:
    """Complete covtree configuration from ``.covtree.yml``."""

    root: str
    """Project root directory."""

    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    """Coverage parsing configuration."""

    report: ReportConfig = field(default_factory=ReportConfig)
    """Reporting configuration."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML, after environment variable expansion."""


def _parse_coverage_config(raw: dict[str, Any]) -> CoverageConfig:
    return CoverageConfig(
        root_module=str(raw.get("root_module", os.environ.get("COVTREE_ROOT_MODULE", ""))),
        go_binary=str(raw.get("go_binary", os.environ.get("COVTREE_GO_BINARY", "go"))),
        func_timeout=float(raw.get("func_timeout", 60.0)),
        fail_under=float(raw.get("fail_under", 0.0)),
        sort_output=bool(raw.get("sort_output", True)),
    )


def _parse_report_config(raw: dict[str, Any]) -> ReportConfig:
    return ReportConfig(
        format=str(raw.get("format", "terminal")),
        show_functions=bool(raw.get("show_functions", False)),
    )


def load_config(root: str | Path) -> CovtreeConfig:
    """Load and parse ``.covtree.yml`` from *root*.

    Falls back to defaults and environment variables when the file is
    missing or incomplete.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILE_NAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)

    return CovtreeConfig(
        root=str(root_path),
        coverage=_parse_coverage_config(_section(raw, "coverage")),
        report=_parse_report_config(_section(raw, "report")),
        raw=raw,
    )


def _validate_coverage_config(coverage: CoverageConfig) -> list[str]:
    """Validate coverage settings."""
    max_percentage = 100.0
    errors: list[str] = []

    if not 0.0 <= coverage.fail_under <= max_percentage:
        errors.append(
            f"coverage.fail_under must be between 0 and 100 (got: {coverage.fail_under})"
        )

    if coverage.func_timeout <= 0:
        errors.append(f"coverage.func_timeout must be positive (got: {coverage.func_timeout})")

    if not coverage.go_binary:
        errors.append("coverage.go_binary must not be empty")

    if coverage.root_module != coverage.root_module.strip():
        errors.append("coverage.root_module must not have surrounding whitespace")

    return errors


def _validate_report_config(report: ReportConfig) -> list[str]:
    if report.format not in _REPORT_FORMATS:
        allowed = ", ".join(sorted(_REPORT_FORMATS))
        return [f"report.format must be one of: {allowed} (got: {report.format})"]
    return []


def validate_config(config: CovtreeConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []
    errors.extend(_validate_coverage_config(config.coverage))
    errors.extend(_validate_report_config(config.report))
    return errors
