"""TTL policy for the different kinds of cached GitHub data."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum


class CachePolicy(Enum):
    """Resource type -> (policy key, TTL).

    Repository metadata and languages change rarely and GitHub's rate limit
    is the binding constraint, so they live for hours. Rate-limit status must
    stay close to the real remaining quota.
    """

    REPO_INFO = ("repo_info", timedelta(hours=12))
    REPO_LANGUAGES = ("repo_languages", timedelta(hours=12))
    RATE_LIMIT = ("rate_limit", timedelta(minutes=5))

    def __init__(self, key: str, ttl: timedelta) -> None:
        self.key = key
        self.ttl = ttl
