"""Command-line entry point for org-pulse."""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import date, datetime, timedelta

import click
from rich.logging import RichHandler

from . import __version__
from .github.exceptions import GitHubAPIError
from .orchestrator import resolve_date_range, run

DEFAULT_CACHE_DIR = "~/.cache/org-pulse"

_RELATIVE_DATE = re.compile(r"^(\d+)([dwmy])$")
_UNIT_DAYS = {"d": 1, "w": 7, "m": 30, "y": 365}


def _parse_relative_date(value: str) -> str | None:
    """Turn "7d", "2w", "3m" or "1y" into a YYYY-MM-DD date that many days ago."""
    match = _RELATIVE_DATE.match(value.strip()) if value else None
    if not match:
        return None
    amount, unit = int(match.group(1)), match.group(2)
    return (datetime.now() - timedelta(days=amount * _UNIT_DAYS[unit])).strftime("%Y-%m-%d")


def _resolve_date(value: str | None) -> str | None:
    if value is None:
        return None
    return _parse_relative_date(value) or value


def _validate_date(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    resolved = _resolve_date(value)
    if resolved is None:
        return None
    try:
        date.fromisoformat(resolved)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD or a relative date like 30d, got {value!r}")
    return resolved


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


@click.command()
@click.argument("org")
@click.option("--token", envvar="GITHUB_TOKEN", required=True, help="GitHub token (or GITHUB_TOKEN).")
@click.option("--since", callback=_validate_date, help="Start date: YYYY-MM-DD or relative (7d, 2w, 3m, 1y).")
@click.option("--until", callback=_validate_date, help="End date: YYYY-MM-DD or relative.")
@click.option("--top", "top_n", default=5, show_default=True, type=click.IntRange(min=1), help="Rows per ranking.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["table", "json", "csv"]), default="table", show_default=True,
)
@click.option("--output", "output_file", type=click.Path(dir_okay=False), help="Write output to a file.")
@click.option("--no-cache", is_flag=True, help="Always fetch fresh data.")
@click.option("--clear-cache", is_flag=True, help="Drop all cached reports before running.")
@click.option(
    "--cache-dir", envvar="ORG_PULSE_CACHE_DIR", default=DEFAULT_CACHE_DIR,
    show_default=True, help="Directory for cached reports.",
)
@click.option("--cache-ttl", default=24.0, show_default=True, type=click.FloatRange(min=0), help="Cache lifetime in hours.")
@click.option("--api-url", envvar="GITHUB_API_URL", help="GitHub API base URL (for GitHub Enterprise).")
@click.option("--concurrency", default=10, show_default=True, type=click.IntRange(min=1), help="Repositories fetched at once.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, prog_name="org-pulse")
def main(
    org: str,
    token: str,
    since: str | None,
    until: str | None,
    top_n: int,
    output_format: str,
    output_file: str | None,
    no_cache: bool,
    clear_cache: bool,
    cache_dir: str,
    cache_ttl: float,
    api_url: str | None,
    concurrency: int,
    verbose: bool,
) -> None:
    """Show GitHub activity statistics for organization ORG."""
    _configure_logging(verbose)
    try:
        resolve_date_range(since, until)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    try:
        asyncio.run(run(
            org=org,
            token=token,
            top_n=top_n,
            since=since,
            until=until,
            output_format=output_format,
            output_file=output_file,
            no_cache=no_cache,
            clear_cache=clear_cache,
            cache_dir=cache_dir,
            cache_ttl=cache_ttl * 3600,
            api_url=api_url,
            max_concurrency=concurrency,
        ))
    except GitHubAPIError as e:
        raise click.ClickException(e.message) from e
