"""portfolio-github - TTL-cached GitHub API access for a portfolio site."""

__version__ = "0.1.0"

from .cache import CacheStore
from .cache_keys import build_cache_key
from .cache_policy import CachePolicy
from .cli import cli
from .client import GitHubClient, create_github_client

__all__ = [
    "CachePolicy",
    "CacheStore",
    "GitHubClient",
    "__version__",
    "build_cache_key",
    "cli",
    "create_github_client",
]
