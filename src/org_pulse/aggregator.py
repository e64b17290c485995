"""Aggregates per-repository GitHub data into an organization report."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .cache import ReportCache, cache_key
from .github.gateway import GitHubGateway
from .models import (
    ContributorActivity,
    DateRange,
    IssueRecord,
    MemberContribution,
    OrgReport,
    PullRequestRecord,
    RepoStats,
    RepositorySummary,
)
from .stats import (
    commits_in_range,
    count_issues,
    count_pull_requests,
    empty_monthly_series,
    merge_monthly_series,
    monthly_issue_stats,
    yearly_stats,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

DEFAULT_MAX_CONCURRENCY = 10


@dataclass
class RepoFetchResult:
    """Raw data for one repository, or the reason it is unavailable."""

    summary: RepositorySummary
    contributors: list[ContributorActivity] = field(default_factory=list)
    issues: list[IssueRecord] = field(default_factory=list)
    pull_requests: list[PullRequestRecord] = field(default_factory=list)
    error: str | None = None

    @property
    def available(self) -> bool:
        return self.error is None


def _isoformat(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


async def _fetch_repo(
    gateway: GitHubGateway, org: str, summary: RepositorySummary, date_range: DateRange
) -> RepoFetchResult:
    # All three fetches settle before the repository's slot is released.
    results = await asyncio.gather(
        gateway.get_contributor_stats(org, summary.name),
        gateway.list_issues(org, summary.name, since=date_range.since_timestamp()),
        gateway.list_pull_requests(org, summary.name),
        return_exceptions=True,
    )
    for outcome in results:
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("Failed to collect data for %s/%s: %s", org, summary.name, outcome)
            return RepoFetchResult(summary=summary, error=str(outcome) or type(outcome).__name__)
    contributors, issues, pulls = results
    return RepoFetchResult(
        summary=summary, contributors=contributors, issues=issues, pull_requests=pulls
    )


def build_repo_stats(result: RepoFetchResult, date_range: DateRange) -> RepoStats:
    """Fold one repository's fetch result; unavailable repositories count as zero."""
    summary = result.summary
    stats = RepoStats(
        name=summary.name,
        stars=summary.stars,
        created_at=_isoformat(summary.created_at),
        archived_at=_isoformat(summary.archived_at),
        is_fork=summary.is_fork,
        monthly_issues=empty_monthly_series(date_range.end.year),
        available=result.available,
    )
    if not result.available:
        return stats

    stats.contributors = result.contributors
    stats.commit_count = commits_in_range(result.contributors, date_range)
    stats.issues = count_issues(result.issues, date_range)
    stats.pull_requests = count_pull_requests(result.pull_requests, date_range)
    stats.monthly_issues = monthly_issue_stats(result.issues, date_range)
    return stats


def member_contributions(
    members: list[str], repos: list[RepoStats], date_range: DateRange
) -> list[MemberContribution]:
    """In-range commits per listed member, in member listing order."""
    totals: dict[str, int] = {}
    for repo in repos:
        for contributor in repo.contributors:
            totals[contributor.login] = totals.get(contributor.login, 0) + commits_in_range(
                [contributor], date_range
            )
    return [MemberContribution(login=m, contributions=totals.get(m, 0)) for m in members]


async def aggregate_org_report(
    gateway: GitHubGateway,
    org: str,
    date_range: DateRange | None = None,
    *,
    cache: ReportCache | None = None,
    on_progress: ProgressCallback | None = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> OrgReport:
    """Build the organization report for ``date_range`` (default: this year).

    Member and repository listing failures propagate. Failures while fetching a
    single repository only zero out that repository.
    """
    date_range = date_range or DateRange.current_year()
    key = cache_key(org, date_range)

    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            logger.info("Using cached report for %s", key)
            return cached

    members, all_repos = await asyncio.gather(
        gateway.list_members(org),
        gateway.list_repositories(org),
    )
    repos = [r for r in all_repos if not r.is_fork]
    logger.info(
        "Collecting %d repositories for %s (%d forks skipped)",
        len(repos), org, len(all_repos) - len(repos),
    )

    semaphore = asyncio.Semaphore(max_concurrency)
    total = len(repos)
    completed = 0

    async def process(summary: RepositorySummary) -> RepoFetchResult:
        nonlocal completed
        async with semaphore:
            result = await _fetch_repo(gateway, org, summary, date_range)
        completed += 1
        if on_progress is not None:
            on_progress(completed, total)
        return result

    results = await asyncio.gather(*(process(r) for r in repos))

    repo_stats = [build_repo_stats(result, date_range) for result in results]
    failed_repos = [r.summary.name for r in results if not r.available]
    if failed_repos:
        logger.warning(
            "Failed to collect %d repo(s): %s", len(failed_repos), ", ".join(failed_repos)
        )

    report = OrgReport(
        org=org,
        period_start=date_range.start.isoformat(),
        period_end=date_range.end.isoformat(),
        repos=repo_stats,
        members=member_contributions(members, repo_stats, date_range),
        yearly_stats=yearly_stats(repo_stats, date_range),
        monthly_issue_stats=merge_monthly_series(
            (r.monthly_issues for r in repo_stats), date_range.end.year
        ),
        failed_repos=failed_repos,
        generated_at=datetime.now(timezone.utc).isoformat(),
    )

    if cache is not None:
        cache.save(key, report)
    return report
