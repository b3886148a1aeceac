"""covtree CLI — top-level command group."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console

from covtree import __version__
from covtree.adapters.unit.go_test_adapter import TestOutputParseError
from covtree.config import CONFIG_FILE_NAME, CovtreeConfig, load_config, validate_config
from covtree.parser import CoverageParseError, CoverageParser, TestParser
from covtree.reporters.json_reporter import JSONReporter, serialize_coverage, serialize_test_run
from covtree.reporters.terminal import reporter

logger = logging.getLogger(__name__)
console = Console()


def _config_to_dict(config: CovtreeConfig) -> dict[str, Any]:
    """Convert CovtreeConfig to dictionary for display."""
    result = asdict(config)
    # Remove the raw field as it's redundant
    result.pop("raw", None)
    return result


def _load_config_or_abort(path: str) -> CovtreeConfig:
    try:
        return load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e


def _path_option(func: Any) -> Any:
    return click.option(
        "--path",
        default=".",
        type=click.Path(exists=True, file_okay=False, resolve_path=True),
        help="Project root directory (where .covtree.yml lives).",
    )(func)


@click.group()
@click.version_option(version=__version__, prog_name="covtree")
def cli() -> None:
    """covtree — structured Go coverage and test-run reports."""


@cli.command()
@click.argument("profile", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--func-profile",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Existing `go tool cover -func` output. Generated with the Go toolchain when omitted.",
)
@click.option("--root-module", default=None, help="Module path to trim from file names.")
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--show-functions", is_flag=True, help="Also list per-function coverage.")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the JSON report to this file.",
)
@_path_option
def cover(
    profile: str,
    func_profile: str | None,
    root_module: str | None,
    path: str,
    output: str | None,
    *,
    as_json: bool,
    show_functions: bool,
) -> None:
    """Summarize a cover profile by package, file and function.

    Example:
      covtree cover coverage.out --root-module github.com/acme/svc
    """
    config = _load_config_or_abort(path)
    cov_config = config.coverage
    parser = CoverageParser(
        root_module=root_module if root_module is not None else cov_config.root_module,
        go_binary=cov_config.go_binary,
        timeout=cov_config.func_timeout,
    )

    try:
        if func_profile:
            report = parser.stats(
                Path(profile).read_text(encoding="utf-8"),
                Path(func_profile).read_text(encoding="utf-8"),
            )
        else:
            report = asyncio.run(parser.cover(profile))
    except (CoverageParseError, OSError) as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    if cov_config.sort_output:
        report = report.sorted()

    if output:
        JSONReporter().generate(Path(output), coverage=report)

    if as_json or config.report.format == "json":
        click.echo(json.dumps(serialize_coverage(report), indent=2))
    else:
        reporter.print_coverage(
            report, show_functions=show_functions or config.report.show_functions
        )

    if report.percent < cov_config.fail_under:
        reporter.print_error(
            f"Coverage {report.percent:.1f}% is below the required {cov_config.fail_under:.1f}%"
        )
        sys.exit(1)


@cli.command("tests")
@click.argument("events", type=click.Path(exists=True, dir_okay=False))
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--failed-only", is_flag=True, help="Only show failed tests.")
@_path_option
def tests_command(events: str, path: str, *, as_json: bool, failed_only: bool) -> None:
    """Summarize a `go test -json` event stream as a test tree.

    Exits with status 1 when any test failed.

    Example:
      go test -json ./... > events.json && covtree tests events.json
    """
    config = _load_config_or_abort(path)
    try:
        run = TestParser().stats(Path(events).read_text(encoding="utf-8"))
    except (TestOutputParseError, OSError) as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    if as_json or config.report.format == "json":
        click.echo(json.dumps(serialize_test_run(run), indent=2))
    else:
        reporter.print_test_run(run, failed_only=failed_only)

    if not run.success:
        sys.exit(1)


@cli.group("config")
def config_group() -> None:
    """Inspect `.covtree.yml` configuration."""


@config_group.command("show")
@_path_option
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON instead of YAML.")
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration."""
    config_dict = _config_to_dict(_load_config_or_abort(path))
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@_path_option
def config_validate(path: str) -> None:
    """Validate `.covtree.yml` and list any errors."""
    errors = validate_config(_load_config_or_abort(path))
    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{error}[/red]")
    console.print()
    console.print(f"[dim]Fix these errors in {CONFIG_FILE_NAME} and run again.[/dim]")
    raise click.Abort
