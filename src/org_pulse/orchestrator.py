"""Orchestrator: wires together client, cache, aggregator, and renderer."""

from __future__ import annotations

from datetime import date

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from .aggregator import DEFAULT_MAX_CONCURRENCY, aggregate_org_report
from .cache import DEFAULT_TTL_SECONDS, ReportCache
from .github.client import GitHubClient
from .github.gateway import GitHubGateway
from .models import DateRange
from .renderer import render_csv, render_json, render_report
from .view import OrganizationView


def resolve_date_range(
    since: str | None = None, until: str | None = None, today: date | None = None
) -> DateRange:
    """Build the reporting period; missing bounds fall back to the calendar year."""
    today = today or date.today()
    end = date.fromisoformat(until) if until else date(today.year, 12, 31)
    start = date.fromisoformat(since) if since else date(end.year, 1, 1)
    return DateRange(start, end)


async def run(
    org: str,
    token: str,
    top_n: int = 5,
    since: str | None = None,
    until: str | None = None,
    output_format: str = "table",
    output_file: str | None = None,
    no_cache: bool = False,
    clear_cache: bool = False,
    cache_dir: str | None = None,
    cache_ttl: float = DEFAULT_TTL_SECONDS,
    api_url: str | None = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> None:
    """Main pipeline: fetch data, aggregate, render."""
    date_range = resolve_date_range(since, until)

    cache = None
    if not no_cache:
        cache = ReportCache(directory=cache_dir, ttl_seconds=cache_ttl)
        if clear_cache:
            cache.clear()

    progress = Progress(
        TextColumn("[bold blue]Processing repositories"),
        BarColumn(),
        MofNCompleteColumn(),
        console=Console(stderr=True),
        transient=True,
    )
    task_id = progress.add_task("repos", total=None)

    def on_progress(completed: int, total: int) -> None:
        progress.update(task_id, completed=completed, total=total)

    async with GitHubClient(token=token, base_url=api_url) as client:
        gateway = GitHubGateway(client)
        with progress:
            report = await aggregate_org_report(
                gateway,
                org,
                date_range,
                cache=cache,
                on_progress=on_progress,
                max_concurrency=max_concurrency,
            )

    view = OrganizationView(report)
    if output_format == "json":
        render_json(view, output_file=output_file)
    elif output_format == "csv":
        render_csv(view, output_file=output_file)
    else:
        render_report(view, top_n=top_n, output_file=output_file)
