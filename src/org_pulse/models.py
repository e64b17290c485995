"""Data models for org-pulse."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from typing import Any


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a GitHub ISO-8601 timestamp ("2024-01-01T00:00:00Z")."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Invalid date range: {self.start} is after {self.end}")

    @classmethod
    def calendar_year(cls, year: int) -> DateRange:
        return cls(date(year, 1, 1), date(year, 12, 31))

    @classmethod
    def current_year(cls, today: date | None = None) -> DateRange:
        today = today or date.today()
        return cls.calendar_year(today.year)

    def contains(self, moment: datetime | date | None) -> bool:
        if moment is None:
            return False
        if isinstance(moment, datetime):
            if moment.tzinfo is not None:
                moment = moment.astimezone(timezone.utc)
            moment = moment.date()
        return self.start <= moment <= self.end

    def since_timestamp(self) -> str:
        return f"{self.start.isoformat()}T00:00:00Z"

    def cache_token(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


@dataclass(frozen=True)
class RepositorySummary:
    name: str
    stars: int
    created_at: datetime | None
    archived_at: datetime | None = None
    is_fork: bool = False


@dataclass
class WeeklyCommits:
    week_start: int  # unix seconds, start of the week
    commits: int


@dataclass
class ContributorActivity:
    login: str
    weeks: list[WeeklyCommits] = field(default_factory=list)


@dataclass(frozen=True)
class IssueRecord:
    created_at: datetime
    closed_at: datetime | None = None
    state: str = "open"
    is_pull_request: bool = False


@dataclass(frozen=True)
class PullRequestRecord:
    created_at: datetime
    closed_at: datetime | None = None
    state: str = "open"
    branch_ref: str | None = None


@dataclass
class MonthlyIssueStats:
    year: int
    month: int
    opened: int = 0
    closed: int = 0
    total: int = 0


@dataclass
class IssueCounts:
    opened: int = 0
    closed: int = 0


@dataclass
class PullRequestCounts:
    opened: int = 0
    closed: int = 0
    types: dict[str, int] = field(default_factory=dict)


@dataclass
class RepositoryCounts:
    created: int = 0
    archived: int = 0


@dataclass
class RepoStats:
    name: str
    stars: int
    created_at: str | None
    archived_at: str | None = None
    is_fork: bool = False
    commit_count: int = 0
    issues: IssueCounts = field(default_factory=IssueCounts)
    pull_requests: PullRequestCounts = field(default_factory=PullRequestCounts)
    monthly_issues: list[MonthlyIssueStats] = field(default_factory=list)
    contributors: list[ContributorActivity] = field(default_factory=list)
    available: bool = True


@dataclass
class MemberContribution:
    login: str
    contributions: int = 0


@dataclass
class YearlyStats:
    repositories: RepositoryCounts = field(default_factory=RepositoryCounts)
    commits: int = 0
    issues: IssueCounts = field(default_factory=IssueCounts)
    pull_requests: PullRequestCounts = field(default_factory=PullRequestCounts)


@dataclass
class OrgReport:
    org: str
    period_start: str
    period_end: str
    repos: list[RepoStats] = field(default_factory=list)
    members: list[MemberContribution] = field(default_factory=list)
    yearly_stats: YearlyStats = field(default_factory=YearlyStats)
    monthly_issue_stats: list[MonthlyIssueStats] = field(default_factory=list)
    failed_repos: list[str] = field(default_factory=list)
    generated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrgReport:
        """Rebuild a report from the output of ``to_dict`` (or its JSON form)."""
        return cls(
            org=data["org"],
            period_start=data["period_start"],
            period_end=data["period_end"],
            repos=[_repo_stats_from_dict(r) for r in data.get("repos", [])],
            members=[MemberContribution(**m) for m in data.get("members", [])],
            yearly_stats=_yearly_stats_from_dict(data.get("yearly_stats", {})),
            monthly_issue_stats=[
                MonthlyIssueStats(**m) for m in data.get("monthly_issue_stats", [])
            ],
            failed_repos=list(data.get("failed_repos", [])),
            generated_at=data.get("generated_at"),
        )


def _pull_request_counts_from_dict(data: dict[str, Any]) -> PullRequestCounts:
    return PullRequestCounts(
        opened=data.get("opened", 0),
        closed=data.get("closed", 0),
        types=dict(data.get("types", {})),
    )


def _repo_stats_from_dict(data: dict[str, Any]) -> RepoStats:
    return RepoStats(
        name=data["name"],
        stars=data["stars"],
        created_at=data.get("created_at"),
        archived_at=data.get("archived_at"),
        is_fork=data.get("is_fork", False),
        commit_count=data.get("commit_count", 0),
        issues=IssueCounts(**data.get("issues", {})),
        pull_requests=_pull_request_counts_from_dict(data.get("pull_requests", {})),
        monthly_issues=[MonthlyIssueStats(**m) for m in data.get("monthly_issues", [])],
        contributors=[
            ContributorActivity(
                login=c["login"],
                weeks=[WeeklyCommits(**w) for w in c.get("weeks", [])],
            )
            for c in data.get("contributors", [])
        ],
        available=data.get("available", True),
    )


def _yearly_stats_from_dict(data: dict[str, Any]) -> YearlyStats:
    return YearlyStats(
        repositories=RepositoryCounts(**data.get("repositories", {})),
        commits=data.get("commits", 0),
        issues=IssueCounts(**data.get("issues", {})),
        pull_requests=_pull_request_counts_from_dict(data.get("pull_requests", {})),
    )
