"""Async GitHub REST transport built on httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .exceptions import GitHubAPIError, StatsPendingError
from .paginator import Page
from .rate_limit import RateLimitMonitor

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"


def _raise_for_status(response: httpx.Response, path: str, rate_limit: RateLimitMonitor) -> None:
    """Translate a GitHub error response into GitHubAPIError."""
    status = response.status_code
    if status == 202:
        raise StatsPendingError(path)
    if 200 <= status < 300:
        return
    if status == 401:
        raise GitHubAPIError("Invalid or expired GitHub token", 401)
    if status == 404:
        raise GitHubAPIError(f"Resource not found: {path}", 404)
    if status in (403, 429):
        if rate_limit.is_exhausted or status == 429:
            raise GitHubAPIError(
                "GitHub API rate limit exceeded",
                status,
                rate_limit_reset=rate_limit.reset_timestamp,
            )
        raise GitHubAPIError(f"GitHub API forbidden: {path}", 403)
    raise GitHubAPIError(f"GitHub API error {status}: {path}", status)


class GitHubClient:
    """Authenticated GitHub client exposing "get one" and "get a page" calls.

    Use as an async context manager so the underlying connection pool is
    closed::

        async with GitHubClient(token) as client:
            org = await client.get_json("/orgs/acme")
    """

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        timeout: float = 30.0,
        rate_limit: RateLimitMonitor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.rate_limit = rate_limit or RateLimitMonitor()
        self._http = httpx.AsyncClient(
            base_url=(base_url or DEFAULT_API_URL).rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            },
            timeout=httpx.Timeout(timeout, connect=5.0),
            transport=transport,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        await self.rate_limit.wait_if_needed()
        try:
            response = await self._http.get(path, params=params)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"Request to {path} failed: {e}") from e
        self.rate_limit.update(response)
        logger.debug("GET %s -> %d", response.request.url, response.status_code)
        _raise_for_status(response, path, self.rate_limit)
        return response

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._request(path, params)
        if not response.content:
            return None
        return response.json()

    async def get_page(
        self,
        path: str,
        page: int,
        per_page: int,
        params: dict[str, Any] | None = None,
    ) -> Page:
        query = dict(params or {})
        query.update({"page": page, "per_page": per_page})
        response = await self._request(path, query)
        items = response.json() if response.content else []
        # The Link header carries rel="next" only while more pages remain.
        has_next = "next" in response.links
        return Page(items=items or [], has_next_page=has_next)
