"""Shared fixtures."""

import copy
from datetime import datetime, timedelta

import pytest

from portfolio_github.cache import CacheStore
from portfolio_github.config import Config


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def _repo_payload(full_name: str = "octo/hello", **overrides):
    owner, name = full_name.split("/")
    payload = {
        "full_name": full_name,
        "name": name,
        "owner": {"login": owner},
        "description": "Hello world",
        "html_url": f"https://github.com/{full_name}",
        "homepage": None,
        "language": "Python",
        "topics": ["api", "python"],
        "stargazers_count": 42,
        "forks_count": 7,
        "open_issues_count": 1,
        "private": False,
        "archived": False,
        "updated_at": "2024-05-01T10:00:00Z",
        "pushed_at": "2024-05-01T09:00:00Z",
        "watchers": 42,
    }
    payload.update(overrides)
    return payload


_RATE_LIMIT_PAYLOAD = {
    "resources": {
        "core": {"limit": 5000, "remaining": 4990, "reset": 1714557600, "used": 10},
        "search": {"limit": 30, "remaining": 30, "reset": 1714554060, "used": 0},
    },
    "rate": {"limit": 5000, "remaining": 4990, "reset": 1714557600, "used": 10},
}


@pytest.fixture
def repo_payload():
    """Factory for GitHub repository payloads."""
    return _repo_payload


@pytest.fixture
def rate_limit_payload():
    return copy.deepcopy(_RATE_LIMIT_PAYLOAD)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 12, 0, 0))


@pytest.fixture
def cache(clock):
    return CacheStore(clock=clock)


@pytest.fixture
def config():
    return Config(github_token="test-token")
