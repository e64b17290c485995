"""Exceptions for GitHub API access."""


class GitHubAPIError(Exception):
    """Error from GitHub API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rate_limit_reset: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.rate_limit_reset = rate_limit_reset  # Unix timestamp when rate limit resets
        super().__init__(message)


class StatsPendingError(GitHubAPIError):
    """GitHub is still computing repository statistics (HTTP 202).

    The statistics endpoints answer 202 with an empty body the first time they
    are hit for a repository and kick off a background job; asking again a
    moment later normally returns the data.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Statistics not ready yet: {path}", status_code=202)
