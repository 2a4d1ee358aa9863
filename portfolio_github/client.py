"""Async GitHub REST client with a TTL cache in front of every read."""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from .cache import CacheStore
from .cache_keys import build_cache_key
from .cache_policy import CachePolicy
from .config import Config
from .exceptions import (
    ConfigurationError,
    ForbiddenError,
    GitHubCacheError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from .models import (
    CacheStats,
    LanguageMap,
    RateLimitSnapshot,
    RenamedRepository,
    RepositoryError,
    RepositoryMetadata,
    RepositoryReport,
)

logger = logging.getLogger(__name__)

PERMISSIONS = ("pull", "push", "admin")
USERNAME_PATTERN = r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$"
_USERNAME_RE = re.compile(USERNAME_PATTERN)
_REPO_PART_RE = re.compile(r"[A-Za-z0-9_.-]+")

TTLOverride = Optional[Union[timedelta, int, float]]


def _valid_repo_part(part: str) -> bool:
    return bool(_REPO_PART_RE.fullmatch(part)) and part not in (".", "..")


def _validate_full_name(full_name: str) -> str:
    owner, sep, name = (full_name or "").strip().partition("/")
    if not sep or not all(_valid_repo_part(part) for part in (owner, name)):
        raise ValidationError(f"Repository must be given as owner/name, got {full_name!r}")
    return f"{owner}/{name}"


def _validate_username(username: str) -> str:
    username = (username or "").strip()
    if not _USERNAME_RE.fullmatch(username):
        raise ValidationError(f"Invalid GitHub username: {username!r}")
    return username


class GitHubClient:
    """Client for the GitHub REST API.

    Reads (repository, languages, rate limit) go through the cache store;
    collaborator mutations never do. Use as an async context manager, or call
    :meth:`close` when done.
    """

    def __init__(self, config: Config, cache: Optional[CacheStore] = None) -> None:
        if not config.github_token:
            raise ConfigurationError(
                "GitHub token not found. Set GITHUB_TOKEN in your environment or config file."
            )
        self.config = config
        self.cache = cache if cache is not None else CacheStore()
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GitHubClient":
        self._http()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                headers={
                    "Authorization": f"token {self.config.github_token}",
                    "Accept": "application/vnd.github.v3+json",
                    "User-Agent": self.config.user_agent,
                },
            )
        return self._client

    def _caching(self, use_cache: bool) -> bool:
        return use_cache and self.config.cache_enabled

    def _ttl(self, policy: CachePolicy, ttl: TTLOverride) -> Union[timedelta, int, float]:
        return ttl if ttl is not None else self.config.ttl_for(policy)

    async def _request(
        self, method: str, path: str, json: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """Send a request, turning transport failures into :class:`UpstreamError`."""
        try:
            return await self._http().request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Request to {path} timed out: {e}") from e
        except httpx.RequestError as e:
            raise UpstreamError(f"Request error for {path}: {e}") from e

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or "HTTP error"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.text or "HTTP error"

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Map a non-2xx GitHub response onto the exception hierarchy.

        Raises:
            UnauthorizedError: On 401.
            ForbiddenError: On 403 (and 429, which is always a rate limit).
            NotFoundError: On 404.
            UpstreamError: On any other error status.
        """
        status = response.status_code
        if status < 400:
            return

        detail = self._error_detail(response)
        message = f"GitHub API error: {status} - {detail}"

        if status == 401:
            raise UnauthorizedError(message, status)
        if status in (403, 429):
            rate_limited = (
                status == 429
                or response.headers.get("x-ratelimit-remaining") == "0"
                or "rate limit" in detail.lower()
            )
            reset_header = response.headers.get("x-ratelimit-reset")
            reset_at = int(reset_header) if reset_header and reset_header.isdigit() else None
            raise ForbiddenError(message, status, rate_limited=rate_limited, reset_at=reset_at)
        if status == 404:
            raise NotFoundError(message, status)
        raise UpstreamError(message, status)

    async def get_repository(
        self, full_name: str, *, use_cache: bool = True, ttl: TTLOverride = None
    ) -> RepositoryMetadata:
        """Fetch repository metadata, served from cache when fresh.

        Args:
            full_name: Repository as ``owner/name``.
            use_cache: Set to False to force a fresh read (and skip storing it).
            ttl: Override the policy TTL for this entry.

        Raises:
            ValidationError: If ``full_name`` is not ``owner/name``.
            NotFoundError, ForbiddenError, UnauthorizedError, UpstreamError:
                On upstream failure.
        """
        full_name = _validate_full_name(full_name)
        cache_key = build_cache_key("repos", {"repo": full_name})
        caching = self._caching(use_cache)

        if caching:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        logger.info(f"Fetching repository: {full_name}")
        response = await self._request("GET", f"/repos/{full_name}")
        self._raise_for_status(response)

        try:
            repo = RepositoryMetadata.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise UpstreamError(f"Unexpected repository payload for {full_name}: {e}") from e

        if caching:
            self.cache.set(cache_key, repo, self._ttl(CachePolicy.REPO_INFO, ttl))
        return repo

    async def get_repository_languages(
        self, full_name: str, *, use_cache: bool = True, ttl: TTLOverride = None
    ) -> LanguageMap:
        """Fetch the language byte-count breakdown for a repository.

        Language data is cosmetic, so any failure is logged and an empty
        mapping returned instead of raising.
        """
        caching = self._caching(use_cache)
        try:
            full_name = _validate_full_name(full_name)
            cache_key = build_cache_key("languages", {"repo": full_name})

            if caching:
                cached = self.cache.get(cache_key)
                if cached is not None:
                    return dict(cached)

            logger.info(f"Fetching languages for: {full_name}")
            response = await self._request("GET", f"/repos/{full_name}/languages")
            self._raise_for_status(response)
            payload = response.json()
            if not isinstance(payload, dict):
                raise UpstreamError(f"Unexpected languages payload for {full_name}")
            languages: LanguageMap = {str(k): int(v) for k, v in payload.items()}
        except (GitHubCacheError, ValueError, TypeError) as e:
            logger.warning(f"Error fetching languages for {full_name}: {e}")
            return {}

        if caching:
            self.cache.set(cache_key, languages, self._ttl(CachePolicy.REPO_LANGUAGES, ttl))
        return dict(languages)

    async def get_rate_limit(
        self, *, use_cache: bool = True, ttl: TTLOverride = None
    ) -> Optional[RateLimitSnapshot]:
        """Fetch the token's current rate-limit status.

        Returns None instead of raising when GitHub cannot be reached.
        """
        cache_key = build_cache_key("rate_limit")
        caching = self._caching(use_cache)

        if caching:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        try:
            response = await self._request("GET", "/rate_limit")
            self._raise_for_status(response)
            snapshot = RateLimitSnapshot.model_validate(response.json())
        except (GitHubCacheError, ValueError, PydanticValidationError) as e:
            logger.warning(f"Error checking rate limit: {e}")
            return None

        if caching:
            self.cache.set(cache_key, snapshot, self._ttl(CachePolicy.RATE_LIMIT, ttl))
        return snapshot

    async def get_multiple_repositories(
        self, names: Sequence[str], *, use_cache: bool = True, ttl: TTLOverride = None
    ) -> Dict[str, Optional[RepositoryMetadata]]:
        """Fetch several repositories one after another.

        Requests are sequential to stay clear of GitHub's short-burst limits.
        A failed repository maps to None; it never aborts the batch.
        """
        results: Dict[str, Optional[RepositoryMetadata]] = {}
        for name in names:
            try:
                results[name] = await self.get_repository(name, use_cache=use_cache, ttl=ttl)
            except GitHubCacheError as e:
                logger.error(f"Failed to fetch {name}: {e}")
                results[name] = None
        return results

    async def get_repositories_report(
        self, names: Sequence[str], *, use_cache: bool = True, ttl: TTLOverride = None
    ) -> RepositoryReport:
        """Like :meth:`get_multiple_repositories`, plus a summary.

        A repository is reported as renamed when GitHub follows the redirect
        and answers with a different ``full_name`` than the one requested.
        """
        report = RepositoryReport()
        summary = report.summary
        for name in names:
            summary.total += 1
            try:
                repo = await self.get_repository(name, use_cache=use_cache, ttl=ttl)
            except GitHubCacheError as e:
                logger.error(f"Failed to fetch {name}: {e}")
                report.results[name] = None
                summary.failed += 1
                summary.errors.append(RepositoryError(repo_name=name, error=str(e)))
                continue

            report.results[name] = repo
            summary.successful += 1
            if repo.full_name.lower() != name.strip().lower():
                logger.info(f"Repository {name} was renamed to {repo.full_name}")
                summary.renamed += 1
                summary.renamed_repos.append(RenamedRepository(original=name, new=repo.full_name))
        return report

    async def add_collaborator(
        self, full_name: str, username: str, permission: str = "pull"
    ) -> bool:
        """Invite ``username`` to the repository with the given permission.

        GitHub answering 422 "already a collaborator" counts as success, so
        repeated grants are idempotent.

        Raises:
            ValidationError: On a bad repository name, username or permission.
            APIError: On any other upstream failure.
        """
        full_name = _validate_full_name(full_name)
        username = _validate_username(username)
        if permission not in PERMISSIONS:
            raise ValidationError(
                f"Permission must be one of {', '.join(PERMISSIONS)}, got {permission!r}"
            )

        logger.info(f"Adding {username} to {full_name} with {permission} permission")
        response = await self._request(
            "PUT",
            f"/repos/{full_name}/collaborators/{username}",
            json={"permission": permission},
        )
        if response.status_code == 422 and "already a collaborator" in response.text.lower():
            logger.info(f"{username} is already a collaborator on {full_name}")
            return True
        self._raise_for_status(response)
        return True

    async def remove_collaborator(self, full_name: str, username: str) -> None:
        """Remove ``username`` from the repository's collaborators.

        Raises:
            ValidationError: On a bad repository name or username.
            APIError: On upstream failure.
        """
        full_name = _validate_full_name(full_name)
        username = _validate_username(username)

        logger.info(f"Removing {username} from {full_name}")
        response = await self._request("DELETE", f"/repos/{full_name}/collaborators/{username}")
        self._raise_for_status(response)

    def get_cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()

    def clear_cache_entry(self, key: str) -> None:
        self.cache.delete(key)


def create_github_client(
    config: Optional[Config] = None,
    cache: Optional[CacheStore] = None,
    config_file: Optional[Path] = None,
) -> GitHubClient:
    """Build a client from the ambient configuration.

    Raises:
        ConfigurationError: If no GitHub token is configured.
    """
    if config is None:
        config = Config.from_sources(config_file)
    return GitHubClient(config, cache if cache is not None else CacheStore())
