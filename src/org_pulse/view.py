"""Read-only ranking queries over an OrgReport."""

from __future__ import annotations

from datetime import date

from .models import MemberContribution, MonthlyIssueStats, OrgReport, RepoStats, YearlyStats


class OrganizationView:
    """Presentation-facing queries. Never modifies the wrapped report.

    Rankings sort by a single score; Python's sort is stable, so equal scores
    keep the order the report lists them in.
    """

    def __init__(self, report: OrgReport) -> None:
        self.report = report

    @property
    def org(self) -> str:
        return self.report.org

    def total_stars(self) -> int:
        return sum(r.stars for r in self.report.repos)

    def member_count(self) -> int:
        return len(self.report.members)

    def yearly_stats(self) -> YearlyStats:
        return self.report.yearly_stats

    def top_repositories_by_stars(self, limit: int = 5) -> list[RepoStats]:
        return sorted(self.report.repos, key=lambda r: r.stars, reverse=True)[:limit]

    def top_repositories_by_commits(self, limit: int = 5) -> list[RepoStats]:
        own = [r for r in self.report.repos if not r.is_fork]
        return sorted(own, key=lambda r: r.commit_count, reverse=True)[:limit]

    def top_members_by_contribution(self, limit: int = 5) -> list[MemberContribution]:
        return sorted(self.report.members, key=lambda m: m.contributions, reverse=True)[:limit]

    def active_members(self, limit: int = 5) -> list[MemberContribution]:
        """Top members, leaving out those with no commits in the period."""
        return [m for m in self.top_members_by_contribution(limit) if m.contributions > 0]

    def pull_request_type_breakdown(self) -> list[tuple[str, int]]:
        types = self.report.yearly_stats.pull_requests.types
        return sorted(types.items(), key=lambda item: item[1], reverse=True)

    def burnup(self, today: date | None = None) -> list[MonthlyIssueStats]:
        """Monthly issue series up to the end of the period or the current month."""
        end = min(date.fromisoformat(self.report.period_end), today or date.today())
        return [
            m for m in self.report.monthly_issue_stats
            if (m.year, m.month) <= (end.year, end.month)
        ]
