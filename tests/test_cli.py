"""Tests for the CLI module."""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import patch

from click.testing import CliRunner

from org_pulse.cli import _parse_relative_date, _resolve_date, main
from org_pulse.github.exceptions import GitHubAPIError


def test_parse_relative_date_days():
    result = _parse_relative_date("7d")
    expected = (datetime.now() - timedelta(days=7)).strftime("%Y-%m-%d")
    assert result == expected


def test_parse_relative_date_weeks():
    result = _parse_relative_date("2w")
    expected = (datetime.now() - timedelta(weeks=2)).strftime("%Y-%m-%d")
    assert result == expected


def test_parse_relative_date_months():
    result = _parse_relative_date("3m")
    expected = (datetime.now() - timedelta(days=90)).strftime("%Y-%m-%d")
    assert result == expected


def test_parse_relative_date_years():
    result = _parse_relative_date("1y")
    expected = (datetime.now() - timedelta(days=365)).strftime("%Y-%m-%d")
    assert result == expected


def test_parse_relative_date_invalid():
    assert _parse_relative_date("abc") is None
    assert _parse_relative_date("10x") is None
    assert _parse_relative_date("") is None
    assert _parse_relative_date("2024-01-01") is None


def test_resolve_date_none():
    assert _resolve_date(None) is None


def test_resolve_date_relative():
    result = _resolve_date("30d")
    expected = (datetime.now() - timedelta(days=30)).strftime("%Y-%m-%d")
    assert result == expected


def test_resolve_date_absolute():
    assert _resolve_date("2024-01-15") == "2024-01-15"


@patch("org_pulse.cli.run")
@patch("org_pulse.cli.asyncio.run")
def test_main_org_target(mock_asyncio_run, mock_run):
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "fake-token"])
    assert result.exit_code == 0
    mock_asyncio_run.assert_called_once()
    kwargs = mock_run.call_args.kwargs
    assert kwargs["org"] == "myorg"
    assert kwargs["token"] == "fake-token"
    assert kwargs["cache_ttl"] == 24 * 3600


@patch("org_pulse.cli.run")
@patch("org_pulse.cli.asyncio.run")
def test_main_with_relative_since(mock_asyncio_run, mock_run):
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "fake-token", "--since", "7d"])
    assert result.exit_code == 0
    expected = (datetime.now() - timedelta(days=7)).strftime("%Y-%m-%d")
    assert mock_run.call_args.kwargs["since"] == expected


@patch("org_pulse.cli.run")
@patch("org_pulse.cli.asyncio.run")
def test_main_with_all_options(mock_asyncio_run, mock_run):
    runner = CliRunner()
    result = runner.invoke(main, [
        "myorg", "--token", "fake-token",
        "--since", "2024-01-01",
        "--until", "2024-12-31",
        "--top", "3",
        "--format", "json",
        "--output", "/tmp/test-output.json",
        "--no-cache",
        "--cache-ttl", "2",
        "--api-url", "https://ghe.example.com/api/v3",
        "--concurrency", "4",
    ])
    assert result.exit_code == 0, result.output
    kwargs = mock_run.call_args.kwargs
    assert kwargs["top_n"] == 3
    assert kwargs["output_format"] == "json"
    assert kwargs["no_cache"] is True
    assert kwargs["cache_ttl"] == 7200
    assert kwargs["max_concurrency"] == 4


def test_main_invalid_date():
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "fake-token", "--since", "yesterday"])
    assert result.exit_code != 0
    assert "relative date" in result.output


def test_main_inverted_range():
    runner = CliRunner()
    result = runner.invoke(main, [
        "myorg", "--token", "fake-token", "--since", "2024-06-01", "--until", "2024-01-01",
    ])
    assert result.exit_code != 0
    assert "Invalid date range" in result.output


@patch("org_pulse.cli.run")
@patch("org_pulse.cli.asyncio.run")
def test_main_reports_api_errors(mock_asyncio_run, mock_run):
    mock_asyncio_run.side_effect = GitHubAPIError("Invalid or expired GitHub token", 401)
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "bad"])
    assert result.exit_code == 1
    assert "Invalid or expired GitHub token" in result.output


def test_main_missing_token():
    """CLI should fail without token."""
    runner = CliRunner(env={"GITHUB_TOKEN": ""})
    result = runner.invoke(main, ["myorg"], catch_exceptions=False)
    assert result.exit_code != 0


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output.lower()
