"""Tests for the GitHub HTTP client."""

from __future__ import annotations

import httpx
import pytest

from org_pulse.github.client import GitHubClient
from org_pulse.github.exceptions import GitHubAPIError, StatsPendingError

TOKEN = "ghp_test_token_12345"


def _client(handler) -> GitHubClient:
    return GitHubClient(token=TOKEN, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_json_sends_auth_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["accept"] = request.headers["Accept"]
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"login": "acme"})

    async with _client(handler) as client:
        data = await client.get_json("/orgs/acme")

    assert data == {"login": "acme"}
    assert seen["auth"] == f"Bearer {TOKEN}"
    assert seen["accept"] == "application/vnd.github+json"
    assert seen["url"] == "https://api.github.com/orgs/acme"


@pytest.mark.asyncio
async def test_get_page_reads_link_header():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["page"] == "2"
        assert request.url.params["per_page"] == "100"
        assert request.url.params["state"] == "all"
        return httpx.Response(
            200,
            json=[{"id": 1}],
            headers={"Link": '<https://api.github.com/x?page=3>; rel="next", '
                             '<https://api.github.com/x?page=9>; rel="last"'},
        )

    async with _client(handler) as client:
        page = await client.get_page("/repos/acme/web/issues", 2, 100, params={"state": "all"})

    assert page.items == [{"id": 1}]
    assert page.has_next_page is True


@pytest.mark.asyncio
async def test_get_page_last_page():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json=[{"id": 1}],
            headers={"Link": '<https://api.github.com/x?page=1>; rel="first"'},
        )

    async with _client(handler) as client:
        page = await client.get_page("/orgs/acme/repos", 2, 100)

    assert page.has_next_page is False


@pytest.mark.asyncio
async def test_202_raises_stats_pending():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(202)

    async with _client(handler) as client:
        with pytest.raises(StatsPendingError) as exc_info:
            await client.get_json("/repos/acme/web/stats/contributors")

    assert exc_info.value.status_code == 202


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "message"),
    [
        (401, "Invalid or expired GitHub token"),
        (404, "Resource not found"),
        (403, "forbidden"),
        (500, "GitHub API error 500"),
    ],
)
async def test_error_statuses(status, message):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"message": "nope"})

    async with _client(handler) as client:
        with pytest.raises(GitHubAPIError, match=message) as exc_info:
            await client.get_json("/orgs/acme")

    assert exc_info.value.status_code == status


@pytest.mark.asyncio
async def test_rate_limit_exhausted_403():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            403,
            json={"message": "API rate limit exceeded"},
            headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"},
        )

    async with _client(handler) as client:
        with pytest.raises(GitHubAPIError, match="rate limit") as exc_info:
            await client.get_json("/orgs/acme")

    assert exc_info.value.rate_limit_reset == 1700000000


@pytest.mark.asyncio
async def test_transport_error_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(GitHubAPIError, match="connection refused"):
            await client.get_json("/orgs/acme")


@pytest.mark.asyncio
async def test_custom_base_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(200, json=[])

    client = GitHubClient(
        token=TOKEN,
        base_url="https://ghe.example.com/api/v3/",
        transport=httpx.MockTransport(handler),
    )
    async with client:
        await client.get_json("/orgs/acme/members")

    assert seen["url"] == "https://ghe.example.com/api/v3/orgs/acme/members"
