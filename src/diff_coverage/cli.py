"""
Command-line interface for Diff Coverage.

This module provides the CLI using Click framework for argument parsing
and orchestrates the diff, profile and correlation steps.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from rich.console import Console

from diff_coverage import __version__
from diff_coverage.config import Config, find_config_file, load_config
from diff_coverage.logger import configure_logger

console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__, prog_name="diff-coverage")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (default: search for .diff-coverage.yaml).",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path]) -> None:
    """Diff Coverage - Report test coverage of the lines changed in a branch."""
    ctx.ensure_object(dict)
    if config is None:
        config = find_config_file(Path.cwd())
    try:
        ctx.obj["config"] = load_config(config) if config else Config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()


@cli.command()
@click.option(
    "--profile",
    "-p",
    type=click.Path(path_type=Path),
    help="Path to the coverage profile (default: output.txt).",
)
@click.option(
    "--repo",
    "-r",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Path inside the git repository (default: current directory).",
)
@click.option(
    "--base",
    "-b",
    type=str,
    help="Base branch to compare against (default: main).",
)
@click.option(
    "--remote",
    type=str,
    help='Remote of the base branch (default: origin; "" for a local branch).',
)
@click.option(
    "--no-fetch",
    is_flag=True,
    help="Do not fetch the base branch before diffing.",
)
@click.option(
    "--diff-file",
    "-d",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read a saved diff instead of running git.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json", "markdown"]),
    help="Output format (default: text).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file path. If not specified, prints to stdout.",
)
@click.option(
    "--fail-under",
    type=click.FloatRange(0.0, 100.0),
    help="Exit with status 1 when diff coverage is below this percentage.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
@click.pass_context
def report(
    ctx: click.Context,
    profile: Optional[Path],
    repo: Path,
    base: Optional[str],
    remote: Optional[str],
    no_fetch: bool,
    diff_file: Optional[Path],
    output_format: Optional[str],
    output: Optional[Path],
    fail_under: Optional[float],
    verbose: bool,
) -> None:
    """Compute the coverage percentage of the lines changed against the base branch."""
    from diff_coverage.analyzer.correlator import CoverageCorrelator
    from diff_coverage.output.formatters import get_formatter
    from diff_coverage.parser.diff_parser import DiffParser
    from diff_coverage.vcs.repository import get_diff, open_repository

    config: Config = ctx.obj["config"]
    verbose = verbose or config.output.verbose
    configure_logger("DEBUG" if verbose else None, force=True)

    profile = profile or config.coverage.profile
    base = base or config.git.base_branch
    remote = config.git.remote if remote is None else remote
    output_format = output_format or config.output.format
    fail_under = config.coverage.fail_under if fail_under is None else fail_under

    if verbose:
        console.print(f"[blue]Coverage profile:[/blue] {profile}")
        if diff_file:
            console.print(f"[blue]Using diff file:[/blue] {diff_file}")
        else:
            console.print(f"[blue]Base branch:[/blue] {remote + '/' if remote else ''}{base}")

    try:
        if diff_file:
            diff = DiffParser.parse_file(diff_file, config.diff)
        else:
            repository = open_repository(repo)
            diff = get_diff(
                repository,
                remote=remote,
                base_branch=base,
                limits=config.diff,
                fetch=config.git.fetch and not no_fetch,
            )

        if diff.is_incomplete:
            logger.warning("Diff was truncated at {} files", config.diff.max_files)

        correlator = CoverageCorrelator(config.coverage.source_suffixes)
        result = correlator.compute(diff.files, profile)

        formatter = get_formatter(
            output_format,
            colorize=config.output.colorize and output is None,
            details=verbose,
        )
        formatted_output = formatter.format(result)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise click.Abort()

    if output:
        output.write_text(formatted_output, encoding="utf-8")
        console.print(f"[green]Results written to:[/green] {output}")
    else:
        sys.stdout.write(formatted_output)
        sys.stdout.flush()

    if fail_under is not None and result.percentage < fail_under:
        console.print(
            f"[red]Diff coverage {result.percentage:.2f}% is below {fail_under:.2f}%[/red]"
        )
        ctx.exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})
