"""Configuration management for portfolio-github."""

import json
import os
import tomllib
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli_w

from .cache_policy import CachePolicy


def _split_repos(value: str) -> List[str]:
    return [r.strip() for r in value.split(",") if r.strip()]


@dataclass
class Config:
    """Configuration class for portfolio-github."""

    github_token: str = ""
    base_url: str = "https://api.github.com"
    user_agent: str = "portfolio-github/0.1.0"
    timeout: int = 30
    cache_enabled: bool = True
    repo_ttl: int = int(CachePolicy.REPO_INFO.ttl.total_seconds())  # 12 hours
    languages_ttl: int = int(CachePolicy.REPO_LANGUAGES.ttl.total_seconds())  # 12 hours
    rate_limit_ttl: int = int(CachePolicy.RATE_LIMIT.ttl.total_seconds())  # 5 minutes
    repositories: List[str] = field(default_factory=list)
    cron_secret: str = ""

    def ttl_for(self, policy: CachePolicy) -> timedelta:
        """Return the configured TTL for a cache policy."""
        seconds = {
            CachePolicy.REPO_INFO: self.repo_ttl,
            CachePolicy.REPO_LANGUAGES: self.languages_ttl,
            CachePolicy.RATE_LIMIT: self.rate_limit_ttl,
        }[policy]
        return timedelta(seconds=seconds)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance loaded from environment variables.

        Raises:
            ValueError: If the GitHub token is not found in environment.
        """
        github_token = os.getenv('GITHUB_TOKEN')
        if not github_token:
            raise ValueError("GITHUB_TOKEN environment variable is required")

        return cls(
            github_token=github_token,
            base_url=os.getenv('GITHUB_API_URL', cls.base_url),
            user_agent=os.getenv('GITHUB_USER_AGENT', cls.user_agent),
            cache_enabled=os.getenv('PORTFOLIO_GITHUB_CACHE_ENABLED', 'true').lower() == 'true',
            repo_ttl=int(os.getenv('PORTFOLIO_GITHUB_REPO_TTL', str(cls.repo_ttl))),
            languages_ttl=int(os.getenv('PORTFOLIO_GITHUB_LANGUAGES_TTL', str(cls.languages_ttl))),
            rate_limit_ttl=int(os.getenv('PORTFOLIO_GITHUB_RATE_LIMIT_TTL', str(cls.rate_limit_ttl))),
            timeout=int(os.getenv('PORTFOLIO_GITHUB_TIMEOUT', str(cls.timeout))),
            repositories=_split_repos(os.getenv('GITHUB_REPOS', '')),
            cron_secret=os.getenv('CRON_SECRET', ''),
        )

    @classmethod
    def from_file(cls, path: Path) -> 'Config':
        """Load configuration from file.

        Supports JSON and TOML formats based on file extension. The token may
        be omitted from the file; it is usually supplied through the
        environment instead.

        Args:
            path: Path to configuration file.

        Returns:
            Config: Configuration instance loaded from file.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If file format is unsupported.
            json.JSONDecodeError: If JSON file is malformed.
            tomllib.TOMLDecodeError: If TOML file is malformed.
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        data = cls._read_file(path)

        return cls(
            github_token=data.get('github_token', ''),
            base_url=data.get('base_url', cls.base_url),
            user_agent=data.get('user_agent', cls.user_agent),
            timeout=data.get('timeout', cls.timeout),
            cache_enabled=data.get('cache_enabled', cls.cache_enabled),
            repo_ttl=data.get('repo_ttl', cls.repo_ttl),
            languages_ttl=data.get('languages_ttl', cls.languages_ttl),
            rate_limit_ttl=data.get('rate_limit_ttl', cls.rate_limit_ttl),
            repositories=list(data.get('repositories', [])),
            cron_secret=data.get('cron_secret', ''),
        )

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if path.suffix.lower() == '.json':
            with open(path, 'r') as f:
                return json.load(f)
        if path.suffix.lower() in ['.toml', '.tml']:
            with open(path, 'rb') as f:
                return tomllib.load(f)
        raise ValueError(f"Unsupported configuration file format: {path.suffix}")

    @classmethod
    def from_sources(cls, config_file: Optional[Path] = None) -> 'Config':
        """Load configuration from multiple sources with precedence.

        Precedence order (highest to lowest):
        1. Configuration file (if provided)
        2. Environment variables
        3. Default values

        Unlike :meth:`from_env`, a missing token is not an error here; the
        GitHub client refuses to start without one.

        Args:
            config_file: Optional path to configuration file.

        Returns:
            Config: Configuration instance loaded from available sources.
        """
        config_data: Dict[str, Any] = {}

        if os.getenv('GITHUB_TOKEN'):
            config_data['github_token'] = os.getenv('GITHUB_TOKEN')

        if os.getenv('GITHUB_API_URL'):
            config_data['base_url'] = os.getenv('GITHUB_API_URL')

        if os.getenv('GITHUB_USER_AGENT'):
            config_data['user_agent'] = os.getenv('GITHUB_USER_AGENT')

        if os.getenv('PORTFOLIO_GITHUB_CACHE_ENABLED') is not None:
            val = os.getenv('PORTFOLIO_GITHUB_CACHE_ENABLED') or ""
            config_data['cache_enabled'] = val.lower() == 'true'

        for env_name, key in (
            ('PORTFOLIO_GITHUB_REPO_TTL', 'repo_ttl'),
            ('PORTFOLIO_GITHUB_LANGUAGES_TTL', 'languages_ttl'),
            ('PORTFOLIO_GITHUB_RATE_LIMIT_TTL', 'rate_limit_ttl'),
            ('PORTFOLIO_GITHUB_TIMEOUT', 'timeout'),
        ):
            if os.getenv(env_name) is not None:
                config_data[key] = int(os.getenv(env_name) or "0")

        if os.getenv('GITHUB_REPOS'):
            config_data['repositories'] = _split_repos(os.getenv('GITHUB_REPOS') or '')

        if os.getenv('CRON_SECRET'):
            config_data['cron_secret'] = os.getenv('CRON_SECRET')

        # File values win, but only the keys the file actually sets
        if config_file and config_file.exists():
            file_data = cls._read_file(config_file)
            for key in cls.__dataclass_fields__:
                if key in file_data:
                    config_data[key] = file_data[key]

        return cls(**config_data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dict[str, Any]: Configuration as dictionary.
        """
        return {
            'github_token': self.github_token,
            'base_url': self.base_url,
            'user_agent': self.user_agent,
            'timeout': self.timeout,
            'cache_enabled': self.cache_enabled,
            'repo_ttl': self.repo_ttl,
            'languages_ttl': self.languages_ttl,
            'rate_limit_ttl': self.rate_limit_ttl,
            'repositories': list(self.repositories),
            'cron_secret': self.cron_secret,
        }

    def to_file(self, path: Path, exclude_secrets: bool = True) -> None:
        """Save configuration to file.

        Args:
            path: Path where to save configuration file.
            exclude_secrets: Whether to leave the token and cron secret out of the file.

        Raises:
            ValueError: If file format is unsupported.
        """
        data = self.to_dict()

        if exclude_secrets:
            data.pop('github_token', None)
            data.pop('cron_secret', None)

        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix.lower() == '.json':
            with open(path, 'w') as f:
                json.dump(data, f, indent=2)
        elif path.suffix.lower() in ['.toml', '.tml']:
            with open(path, 'wb') as f:
                tomli_w.dump(data, f)
        else:
            raise ValueError(f"Unsupported configuration file format: {path.suffix}")
