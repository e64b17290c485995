"""Typed organization and repository fetches on top of GitHubClient."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..models import (
    ContributorActivity,
    IssueRecord,
    PullRequestRecord,
    RepositorySummary,
    WeeklyCommits,
    parse_timestamp,
)
from .client import GitHubClient
from .exceptions import StatsPendingError
from .paginator import PER_PAGE, Page, paginate

logger = logging.getLogger(__name__)

STATS_MAX_ATTEMPTS = 3
STATS_RETRY_DELAY = 1.0


def parse_repository(data: dict[str, Any]) -> RepositorySummary:
    return RepositorySummary(
        name=data["name"],
        stars=data.get("stargazers_count", 0) or 0,
        created_at=parse_timestamp(data.get("created_at")),
        archived_at=parse_timestamp(data.get("archived_at")),
        is_fork=bool(data.get("fork", False)),
    )


def parse_issue(data: dict[str, Any]) -> IssueRecord:
    return IssueRecord(
        created_at=parse_timestamp(data["created_at"]),
        closed_at=parse_timestamp(data.get("closed_at")),
        state=data.get("state", "open"),
        is_pull_request="pull_request" in data,
    )


def parse_pull_request(data: dict[str, Any]) -> PullRequestRecord:
    head = data.get("head") or {}
    return PullRequestRecord(
        created_at=parse_timestamp(data["created_at"]),
        closed_at=parse_timestamp(data.get("closed_at")),
        state=data.get("state", "open"),
        branch_ref=head.get("ref"),
    )


def parse_contributor(data: dict[str, Any]) -> ContributorActivity | None:
    author = data.get("author")
    if not author or not author.get("login"):
        return None
    return ContributorActivity(
        login=author["login"],
        weeks=[
            WeeklyCommits(week_start=w["w"], commits=w.get("c", 0))
            for w in data.get("weeks", [])
        ],
    )


class GitHubGateway:
    """Organization-level GitHub reads returning model objects."""

    def __init__(
        self,
        client: GitHubClient,
        per_page: int = PER_PAGE,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.per_page = per_page
        self._sleep = sleep

    async def _list(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        async def fetch_page(page: int, per_page: int) -> Page:
            return await self.client.get_page(path, page, per_page, params=params)

        return await paginate(fetch_page, per_page=self.per_page)

    async def list_members(self, org: str) -> list[str]:
        members = await self._list(f"/orgs/{org}/members")
        return [m["login"] for m in members]

    async def list_repositories(self, org: str) -> list[RepositorySummary]:
        repos = await self._list(f"/orgs/{org}/repos", {"type": "all", "sort": "updated"})
        return [parse_repository(r) for r in repos]

    async def list_issues(self, org: str, repo: str, since: str | None = None) -> list[IssueRecord]:
        """List issues (pull requests included, flagged) updated since ``since``."""
        params: dict[str, Any] = {"state": "all"}
        if since:
            params["since"] = since
        issues = await self._list(f"/repos/{org}/{repo}/issues", params)
        return [parse_issue(i) for i in issues]

    async def list_pull_requests(self, org: str, repo: str) -> list[PullRequestRecord]:
        pulls = await self._list(
            f"/repos/{org}/{repo}/pulls",
            {"state": "all", "sort": "created", "direction": "desc"},
        )
        return [parse_pull_request(p) for p in pulls]

    async def get_contributor_stats(self, org: str, repo: str) -> list[ContributorActivity]:
        """Weekly commit counts per contributor over the repository's history.

        GitHub answers 202 while it computes these; the call is retried a fixed
        number of times and then gives up with an empty list.
        """
        path = f"/repos/{org}/{repo}/stats/contributors"
        attempt = 0
        while attempt < STATS_MAX_ATTEMPTS:
            attempt += 1
            try:
                data = await self.client.get_json(path)
            except StatsPendingError:
                logger.debug(
                    "Contributor stats pending for %s/%s (attempt %d/%d)",
                    org, repo, attempt, STATS_MAX_ATTEMPTS,
                )
                if attempt < STATS_MAX_ATTEMPTS:
                    await self._sleep(STATS_RETRY_DELAY)
                continue
            contributors = [parse_contributor(c) for c in data or []]
            return [c for c in contributors if c is not None]

        logger.warning(
            "Contributor stats for %s/%s still pending after %d attempts",
            org, repo, STATS_MAX_ATTEMPTS,
        )
        return []
