"""Custom exception hierarchy for the GitHub cache layer."""

from __future__ import annotations

from typing import Optional


class GitHubCacheError(Exception):
    """Base exception for portfolio-github."""


class ConfigurationError(GitHubCacheError):
    """Missing or invalid configuration (e.g. no GitHub token)."""


class ValidationError(GitHubCacheError):
    """Invalid arguments passed to the client or workflow layers."""


class APIError(GitHubCacheError):
    """GitHub API-related errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(APIError):
    """Repository or user does not exist, or is invisible to the token (404)."""


class UnauthorizedError(APIError):
    """Bad or expired credentials (401)."""


class ForbiddenError(APIError):
    """Request refused (403).

    GitHub answers both "rate limit exceeded" and "resource not accessible"
    with a 403; ``rate_limited`` tells them apart.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = 403,
        rate_limited: bool = False,
        reset_at: Optional[int] = None,
    ):
        self.rate_limited = rate_limited
        self.reset_at = reset_at
        super().__init__(message, status_code)


class UpstreamError(APIError):
    """Any other non-2xx response or a network failure."""
