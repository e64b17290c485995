"""Pure statistics over fetched repository records."""

from __future__ import annotations

import calendar
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from .models import (
    ContributorActivity,
    DateRange,
    IssueCounts,
    IssueRecord,
    MonthlyIssueStats,
    PullRequestCounts,
    PullRequestRecord,
    RepoStats,
    RepositoryCounts,
    YearlyStats,
    parse_timestamp,
)

UNKNOWN_PR_TYPE = "unknown"


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _month_end(year: int, month: int) -> datetime:
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=timezone.utc)


def _range_end(date_range: DateRange) -> datetime:
    return datetime(
        date_range.end.year, date_range.end.month, date_range.end.day,
        23, 59, 59, 999999, tzinfo=timezone.utc,
    )


def empty_monthly_series(year: int) -> list[MonthlyIssueStats]:
    return [MonthlyIssueStats(year=year, month=m) for m in range(1, 13)]


def monthly_issue_stats(
    issues: Iterable[IssueRecord], date_range: DateRange
) -> list[MonthlyIssueStats]:
    """Burnup series for the twelve calendar months of ``date_range.end.year``.

    ``opened``/``closed`` only count events inside the range. ``total`` is the
    number of open issues at each month end, counting everything created
    earlier, and holds steady through months without changes.
    """
    year = date_range.end.year
    series = empty_monthly_series(year)
    cutoff = _range_end(date_range)

    # +1 at creation, -1 at closure, applied in time order.
    events: list[tuple[datetime, int]] = []
    for issue in issues:
        if issue.is_pull_request:
            continue
        events.append((_as_utc(issue.created_at), 1))
        if issue.closed_at is not None:
            events.append((_as_utc(issue.closed_at), -1))
    events.sort(key=lambda e: e[0])

    running = 0
    position = 0
    for slot in series:
        month_end = min(_month_end(year, slot.month), cutoff)
        while position < len(events) and events[position][0] <= month_end:
            moment, delta = events[position]
            running += delta
            if date_range.contains(moment):
                if delta > 0:
                    slot.opened += 1
                else:
                    slot.closed += 1
            position += 1
        slot.total = running
    return series


def pr_type(branch_ref: str | None) -> str:
    if not branch_ref or "/" not in branch_ref:
        return UNKNOWN_PR_TYPE
    return branch_ref.split("/", 1)[0].lower()


def categorize_pr_types(prs: Iterable[PullRequestRecord]) -> dict[str, int]:
    """Count closed pull requests by branch prefix ("feature/x" -> "feature")."""
    counts = Counter(pr_type(pr.branch_ref) for pr in prs if pr.state == "closed")
    return dict(counts)


def commits_in_range(contributors: Iterable[ContributorActivity], date_range: DateRange) -> int:
    total = 0
    for contributor in contributors:
        for week in contributor.weeks:
            if date_range.contains(datetime.fromtimestamp(week.week_start, tz=timezone.utc)):
                total += week.commits
    return total


def count_issues(issues: Iterable[IssueRecord], date_range: DateRange) -> IssueCounts:
    counts = IssueCounts()
    for issue in issues:
        if issue.is_pull_request:
            continue
        if date_range.contains(issue.created_at):
            counts.opened += 1
        if date_range.contains(issue.closed_at):
            counts.closed += 1
    return counts


def count_pull_requests(
    prs: Sequence[PullRequestRecord], date_range: DateRange
) -> PullRequestCounts:
    closed_in_range = [
        pr for pr in prs if pr.state == "closed" and date_range.contains(pr.closed_at)
    ]
    return PullRequestCounts(
        opened=sum(1 for pr in prs if date_range.contains(pr.created_at)),
        closed=len(closed_in_range),
        types=categorize_pr_types(closed_in_range),
    )


def merge_monthly_series(
    series_list: Iterable[Sequence[MonthlyIssueStats]], year: int
) -> list[MonthlyIssueStats]:
    merged = empty_monthly_series(year)
    for series in series_list:
        for slot, month in zip(merged, series):
            slot.opened += month.opened
            slot.closed += month.closed
            slot.total += month.total
    return merged


def merge_type_counts(histograms: Iterable[dict[str, int]]) -> dict[str, int]:
    merged: Counter[str] = Counter()
    for histogram in histograms:
        merged.update(histogram)
    return dict(merged)


def yearly_stats(repo_stats: Sequence[RepoStats], date_range: DateRange) -> YearlyStats:
    """Organization totals for the range, summed over repositories."""
    return YearlyStats(
        repositories=RepositoryCounts(
            created=sum(
                1 for r in repo_stats if date_range.contains(parse_timestamp(r.created_at))
            ),
            archived=sum(
                1 for r in repo_stats if date_range.contains(parse_timestamp(r.archived_at))
            ),
        ),
        commits=sum(commits_in_range(r.contributors, date_range) for r in repo_stats),
        issues=IssueCounts(
            opened=sum(r.issues.opened for r in repo_stats),
            closed=sum(r.issues.closed for r in repo_stats),
        ),
        pull_requests=PullRequestCounts(
            opened=sum(r.pull_requests.opened for r in repo_stats),
            closed=sum(r.pull_requests.closed for r in repo_stats),
            types=merge_type_counts(r.pull_requests.types for r in repo_stats),
        ),
    )
