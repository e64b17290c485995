"""Tests for the orchestrator module."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from org_pulse.models import DateRange, MemberContribution, OrgReport
from org_pulse.orchestrator import resolve_date_range, run
from org_pulse.view import OrganizationView


def _make_report(**kwargs) -> OrgReport:
    defaults = dict(
        org="test-org",
        period_start="2024-01-01",
        period_end="2024-12-31",
        members=[MemberContribution("alice", 7)],
    )
    defaults.update(kwargs)
    return OrgReport(**defaults)


def _mock_client(mock_client_cls):
    mock_client = AsyncMock()
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def test_resolve_date_range_defaults_to_calendar_year():
    assert resolve_date_range(today=date(2026, 5, 4)) == DateRange(date(2026, 1, 1), date(2026, 12, 31))


def test_resolve_date_range_partial_bounds():
    assert resolve_date_range(since="2025-03-01", today=date(2026, 5, 4)) == DateRange(
        date(2025, 3, 1), date(2026, 12, 31)
    )
    assert resolve_date_range(until="2024-06-30", today=date(2026, 5, 4)) == DateRange(
        date(2024, 1, 1), date(2024, 6, 30)
    )


def test_resolve_date_range_rejects_inverted_range():
    with pytest.raises(ValueError):
        resolve_date_range(since="2024-06-01", until="2024-01-01")


@pytest.mark.asyncio
@patch("org_pulse.orchestrator.render_report")
@patch("org_pulse.orchestrator.aggregate_org_report")
@patch("org_pulse.orchestrator.GitHubClient")
async def test_run_table_format(mock_client_cls, mock_aggregate, mock_render):
    """run() should call render_report for table format."""
    _mock_client(mock_client_cls)
    report = _make_report()
    mock_aggregate.return_value = report

    await run(org="test-org", token="fake", output_format="table", no_cache=True)

    mock_aggregate.assert_called_once()
    mock_render.assert_called_once()
    view = mock_render.call_args.args[0]
    assert isinstance(view, OrganizationView)
    assert view.report is report
    assert mock_render.call_args.kwargs == {"top_n": 5, "output_file": None}


@pytest.mark.asyncio
@patch("org_pulse.orchestrator.render_json")
@patch("org_pulse.orchestrator.aggregate_org_report")
@patch("org_pulse.orchestrator.GitHubClient")
async def test_run_json_format(mock_client_cls, mock_aggregate, mock_render_json):
    _mock_client(mock_client_cls)
    mock_aggregate.return_value = _make_report()

    await run(org="test-org", token="fake", output_format="json", no_cache=True)

    mock_render_json.assert_called_once()


@pytest.mark.asyncio
@patch("org_pulse.orchestrator.render_csv")
@patch("org_pulse.orchestrator.aggregate_org_report")
@patch("org_pulse.orchestrator.GitHubClient")
async def test_run_csv_format(mock_client_cls, mock_aggregate, mock_render_csv):
    _mock_client(mock_client_cls)
    mock_aggregate.return_value = _make_report()

    await run(org="test-org", token="fake", output_format="csv", no_cache=True)

    mock_render_csv.assert_called_once()


@pytest.mark.asyncio
@patch("org_pulse.orchestrator.render_report")
@patch("org_pulse.orchestrator.aggregate_org_report")
@patch("org_pulse.orchestrator.GitHubClient")
async def test_run_passes_all_params(mock_client_cls, mock_aggregate, mock_render, tmp_path):
    """run() should pass the range, cache and concurrency through."""
    _mock_client(mock_client_cls)
    mock_aggregate.return_value = _make_report()

    await run(
        org="test-org",
        token="fake",
        since="2024-01-01",
        until="2024-06-30",
        top_n=3,
        cache_dir=str(tmp_path),
        api_url="https://ghe.example.com/api/v3",
        max_concurrency=4,
        output_file="/tmp/out.txt",
    )

    mock_client_cls.assert_called_once_with(token="fake", base_url="https://ghe.example.com/api/v3")
    args = mock_aggregate.call_args.args
    kwargs = mock_aggregate.call_args.kwargs
    assert args[1] == "test-org"
    assert args[2] == DateRange(date(2024, 1, 1), date(2024, 6, 30))
    assert kwargs["cache"].directory == tmp_path
    assert kwargs["max_concurrency"] == 4
    assert callable(kwargs["on_progress"])
    assert mock_render.call_args.kwargs == {"top_n": 3, "output_file": "/tmp/out.txt"}


@pytest.mark.asyncio
@patch("org_pulse.orchestrator.render_report")
@patch("org_pulse.orchestrator.aggregate_org_report")
@patch("org_pulse.orchestrator.GitHubClient")
async def test_run_no_cache(mock_client_cls, mock_aggregate, mock_render):
    _mock_client(mock_client_cls)
    mock_aggregate.return_value = _make_report()

    await run(org="test-org", token="fake", no_cache=True)

    assert mock_aggregate.call_args.kwargs["cache"] is None
