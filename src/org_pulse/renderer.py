"""Rich-based terminal report renderer with JSON/CSV support."""

from __future__ import annotations

import calendar
import csv
import io
import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .view import OrganizationView


def _format_number(n: int) -> str:
    return f"{n:,}"


def _make_bar(value: int, maximum: int, width: int = 20) -> str:
    filled = round(value / maximum * width) if maximum else 0
    return "\u2588" * filled + "\u2591" * (width - filled)


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console().print(f"Saved to {output_file}")


def render_report(
    view: OrganizationView,
    top_n: int = 5,
    output_file: str | None = None,
) -> None:
    """Render an organization report to the terminal using rich."""
    if output_file:
        string_io = io.StringIO()
        console = Console(file=string_io, force_terminal=False, width=120)
    else:
        console = Console()

    report = view.report
    yearly = view.yearly_stats()

    console.print(Panel(
        Text(
            f"org-pulse: {report.org}\nPeriod: {report.period_start} ~ {report.period_end}",
            justify="center",
        ),
        style="bold cyan",
    ))
    console.print()

    # Failed repos warning
    if report.failed_repos:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] Failed to collect stats for "
            f"{len(report.failed_repos)} repo(s): {', '.join(report.failed_repos)}"
        )
        console.print()

    console.print("[bold]Summary[/bold]")
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("label", style="dim")
    summary.add_column("value", style="bold")
    summary.add_row("Total Stars", _format_number(view.total_stars()))
    summary.add_row("Members", _format_number(view.member_count()))
    summary.add_row(
        "Repositories",
        f"+{yearly.repositories.created} / -{yearly.repositories.archived} (created / archived)",
    )
    summary.add_row("Total Commits", _format_number(yearly.commits))
    summary.add_row(
        "Issues",
        f"{_format_number(yearly.issues.opened)} / {_format_number(yearly.issues.closed)} (opened / closed)",
    )
    summary.add_row(
        "Pull Requests",
        f"{_format_number(yearly.pull_requests.opened)} / "
        f"{_format_number(yearly.pull_requests.closed)} (opened / closed)",
    )
    console.print(summary)
    console.print()

    top_commits = view.top_repositories_by_commits(top_n)
    if top_commits:
        console.print(f"[bold]Top Repositories (top {top_n})[/bold]")
        repo_table = Table(show_header=True, header_style="bold")
        repo_table.add_column("#", justify="right")
        repo_table.add_column("Repo")
        repo_table.add_column("Commits \u25bc", justify="right")
        repo_table.add_column("Stars", justify="right")
        for i, r in enumerate(top_commits, 1):
            repo_table.add_row(str(i), r.name, _format_number(r.commit_count), _format_number(r.stars))
        console.print(repo_table)
        console.print()

    top_stars = view.top_repositories_by_stars(top_n)
    if top_stars:
        console.print(f"[bold]Most Starred Repositories (top {top_n})[/bold]")
        star_table = Table(show_header=True, header_style="bold")
        star_table.add_column("#", justify="right")
        star_table.add_column("Repo")
        star_table.add_column("Stars \u25bc", justify="right")
        for i, r in enumerate(top_stars, 1):
            star_table.add_row(str(i), r.name, _format_number(r.stars))
        console.print(star_table)
        console.print()

    members = view.active_members(top_n)
    if members:
        console.print(f"[bold]Top Organization Members (top {top_n})[/bold]")
        member_table = Table(show_header=True, header_style="bold")
        member_table.add_column("#", justify="right")
        member_table.add_column("Username")
        member_table.add_column("Contributions \u25bc", justify="right")
        for i, m in enumerate(members, 1):
            member_table.add_row(str(i), m.login, _format_number(m.contributions))
        console.print(member_table)
        console.print()

    breakdown = view.pull_request_type_breakdown()
    if breakdown:
        console.print("[bold]Pull Request Types[/bold]")
        type_table = Table(show_header=True, header_style="bold")
        type_table.add_column("Type")
        type_table.add_column("Bar")
        type_table.add_column("PRs", justify="right")
        largest = breakdown[0][1]
        for pr_type, count in breakdown:
            type_table.add_row(pr_type, _make_bar(count, largest), _format_number(count))
        console.print(type_table)
        console.print()

    burnup = view.burnup()
    if any(m.opened or m.closed or m.total for m in burnup):
        console.print("[bold]Issue Burnup[/bold]")
        burnup_table = Table(show_header=True, header_style="bold")
        burnup_table.add_column("Month")
        burnup_table.add_column("Opened", justify="right")
        burnup_table.add_column("Closed", justify="right")
        burnup_table.add_column("Open Issues", justify="right")
        for m in burnup:
            burnup_table.add_row(
                f"{calendar.month_abbr[m.month]} {m.year}",
                _format_number(m.opened),
                _format_number(m.closed),
                _format_number(m.total),
            )
        console.print(burnup_table)
        console.print()

    if output_file:
        _write_to_file(string_io.getvalue(), output_file)


def render_json(view: OrganizationView, output_file: str | None = None) -> None:
    """Render the full report as JSON."""
    content = json.dumps(view.report.to_dict(), indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)


def render_csv(view: OrganizationView, output_file: str | None = None) -> None:
    """Render per-repository stats as CSV."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([
        "repo", "stars", "commits", "issues_opened", "issues_closed",
        "prs_opened", "prs_closed", "available",
    ])
    for r in view.report.repos:
        writer.writerow([
            r.name, r.stars, r.commit_count, r.issues.opened, r.issues.closed,
            r.pull_requests.opened, r.pull_requests.closed, r.available,
        ])
    content = output.getvalue()
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")
