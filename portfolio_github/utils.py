"""Shared helpers for the CLI and web entry points."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

from .cache import CacheStore
from .client import GitHubClient, create_github_client
from .config import Config
from .formatters import JsonFormatter, TableFormatter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str], default_to_warning: bool = False) -> None:
    """Configure root logging once for a command-line or server run.

    Args:
        level: Level name such as ``"DEBUG"``; None keeps the default.
        default_to_warning: Use WARNING instead of INFO when no level is given.
    """
    if level:
        resolved = getattr(logging, level.upper(), logging.INFO)
    else:
        resolved = logging.WARNING if default_to_warning else logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(resolved)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(resolved, logging.WARNING))


def create_command_dependencies(
    config: Optional[Config] = None,
    config_file: Optional[Path] = None,
    cache: Optional[CacheStore] = None,
) -> Tuple[GitHubClient, TableFormatter, JsonFormatter]:
    """Build the client and formatters a CLI command needs."""
    client = create_github_client(config=config, cache=cache, config_file=config_file)
    return client, TableFormatter(), JsonFormatter()
