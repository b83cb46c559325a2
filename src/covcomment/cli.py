"""covcomment CLI: top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from covcomment import __version__
from covcomment.config import (
    CONFIG_FILENAME,
    ConfigError,
    ReportOptions,
    generate_template,
    load_options,
    validate_options,
)
from covcomment.orchestrator import CoverageCommentPipeline, ReportError, run_report
from covcomment.reporters.outputs import write_step_summary
from covcomment.reporters.terminal import reporter
from covcomment.utils.git import GitHubAPIError

logger = logging.getLogger(__name__)
console = Console()

_LOG_FORMAT = "%(message)s"


def _setup_logging(verbose: bool) -> None:
    """Route all log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # urllib3 connection chatter is noise even in verbose mode
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _report_options(func: Any) -> Any:
    """Options shared by ``run``, ``render`` and ``parse``."""
    options = [
        click.option(
            "--path",
            default=".",
            type=click.Path(exists=True, file_okay=False, resolve_path=True),
            help=f"Directory holding {CONFIG_FILENAME}.",
        ),
        click.option("--coverage-file", default=None, help="SimpleCov JSON summary."),
        click.option("--coverage-xml-file", default=None, help="Cobertura XML coverage report."),
        click.option("--last-run-file", default=None, help="SimpleCov .last_run.json."),
        click.option("--test-results-path", default=None, help="JUnit or RSpec XML results."),
        click.option("--title", default=None, help="Heading of the coverage section."),
        click.option("--issue-number", type=int, default=None, help="Issue or PR to comment on."),
        click.option(
            "--include-file-details", type=click.BOOL, default=None, help="Add the per-file table."
        ),
        click.option(
            "--include-last-run", type=click.BOOL, default=None, help="Add the last-run section."
        ),
        click.option("--hide-badge", type=click.BOOL, default=None, help="Hide coverage badges."),
        click.option("--hide-report", type=click.BOOL, default=None, help="Hide coverage tables."),
        click.option(
            "--multiple-files",
            multiple=True,
            help="'title, coverage-path[, test-results-path]'; repeatable.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load(path: str, overrides: dict[str, Any]) -> ReportOptions:
    """Load and validate options, aborting with a readable message on failure."""
    if not overrides.get("multiple_files"):
        overrides.pop("multiple_files", None)
    else:
        overrides["multiple_files"] = list(overrides["multiple_files"])

    try:
        options = load_options(path, overrides=overrides)
    except ConfigError as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    errors = validate_options(options)
    if errors:
        reporter.print_error(f"Found {len(errors)} configuration error(s):")
        for idx, error in enumerate(errors, start=1):
            console.print(f"  {idx}. [red]{error}[/red]")
        raise click.Abort

    return options


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="covcomment")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """covcomment: post SimpleCov coverage and test results to pull requests."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)


@cli.command()
@_report_options
@click.option("--unique-id", "unique_id_for_comment", default=None, help="Comment id suffix.")
@click.option(
    "--create-new-comment",
    type=click.BOOL,
    default=None,
    help="Always add a new comment instead of editing the previous one.",
)
@click.option("--hide-comment", type=click.BOOL, default=None, help="Compute outputs, do not post.")
@click.option(
    "--step-summary",
    type=click.BOOL,
    default=None,
    help="Append the comment body to $GITHUB_STEP_SUMMARY.",
)
def run(path: str, **overrides: Any) -> None:
    """Parse reports, post the PR comment and export step outputs."""
    options = _load(path, overrides)

    try:
        result = run_report(options)
    except (ReportError, GitHubAPIError) as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    if result.outputs.write() is None:
        reporter.print_info("GITHUB_OUTPUT not set; step outputs were not exported")
    if options.step_summary:
        write_step_summary(result.body)

    reporter.print_run_summary(result)
    if options.hide_comment:
        reporter.print_warning("hide-comment is set; the comment was not posted")
    if not result.success:
        raise click.exceptions.Exit(1)


@cli.command()
@_report_options
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the comment body to this file instead of stdout.",
)
def render(path: str, output: str | None, **overrides: Any) -> None:
    """Build the comment body without posting it."""
    options = _load(path, overrides)
    result = run_report(options, post=False)

    if output:
        Path(output).write_text(result.body, encoding="utf-8")
        reporter.print_success(f"Comment body written to {output}")
    else:
        click.echo(result.body)


@cli.command()
@_report_options
def parse(path: str, **overrides: Any) -> None:
    """Print the parsed reports as JSON."""
    options = _load(path, overrides)
    parsed = CoverageCommentPipeline(options).parse()
    click.echo(json.dumps(asdict(parsed), indent=2, default=str))


@cli.command()
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option("--force", is_flag=True, help=f"Overwrite an existing {CONFIG_FILENAME}.")
def init(path: str, *, force: bool) -> None:
    """Write a commented .covcomment.yml template."""
    try:
        written = generate_template(path, force=force)
    except ConfigError as e:
        reporter.print_error(f"{e}. Use --force to overwrite.")
        raise click.Abort from e

    console.print(f"[green]Config written to[/green]  {written}")
