"""FastAPI app exposing the cache-management, project and access endpoints."""

from __future__ import annotations

import hmac
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional, Sequence

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .access import AccessGrantService
from .cache import CacheStore
from .client import USERNAME_PATTERN, GitHubClient
from .config import Config
from .exceptions import ConfigurationError
from .models import ShowcaseProject
from .projects import ProjectService
from .token_store import InMemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)


class GrantRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=39, pattern=USERNAME_PATTERN)
    token: str = Field(..., min_length=1)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_github_client(request: Request) -> Optional[GitHubClient]:
    """The process-wide client, or None when no token is configured."""
    return request.app.state.github


def require_github_client(
    client: Optional[GitHubClient] = Depends(get_github_client),
) -> GitHubClient:
    if client is None:
        raise HTTPException(status_code=401, detail="GitHub token not found")
    return client


def get_token_store(request: Request) -> TokenStore:
    return request.app.state.token_store


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_projects(request: Request) -> List[ShowcaseProject]:
    return request.app.state.projects


def create_app(
    config: Optional[Config] = None,
    cache: Optional[CacheStore] = None,
    token_store: Optional[TokenStore] = None,
    projects: Optional[Sequence[ShowcaseProject]] = None,
) -> FastAPI:
    """Build the app; the cache and client are created once per process in the lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cfg = config if config is not None else Config.from_sources()
        app.state.config = cfg
        app.state.cache = cache if cache is not None else CacheStore()
        app.state.token_store = token_store if token_store is not None else InMemoryTokenStore()
        app.state.projects = (
            list(projects)
            if projects is not None
            else ProjectService.projects_from_repositories(cfg.repositories)
        )
        try:
            app.state.github = GitHubClient(cfg, app.state.cache)
        except ConfigurationError as e:
            logger.warning(f"{e} Serving fallback project data.")
            app.state.github = None

        yield

        if app.state.github is not None:
            await app.state.github.close()

    app = FastAPI(
        title="portfolio-github",
        description="Cached GitHub data for the portfolio site",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/api/github/cache")
    async def get_cache_info(client: GitHubClient = Depends(require_github_client)) -> dict:
        stats = client.get_cache_stats()
        rate_limit = await client.get_rate_limit()
        return {
            "cache": stats.model_dump(),
            "rateLimit": rate_limit.model_dump(mode="json") if rate_limit else None,
            "timestamp": _timestamp(),
        }

    @app.delete("/api/github/cache")
    async def clear_cache(
        key: Optional[str] = Query(None, description="Clear only this cache key"),
        client: GitHubClient = Depends(require_github_client),
    ) -> dict:
        if key:
            client.clear_cache_entry(key)
            return {"message": f"Cleared cache for key: {key}", "timestamp": _timestamp()}
        client.clear_cache()
        return {"message": "Cleared all cache", "timestamp": _timestamp()}

    @app.get("/api/github")
    async def get_projects_data(
        client: Optional[GitHubClient] = Depends(get_github_client),
        showcase: List[ShowcaseProject] = Depends(get_projects),
    ) -> dict:
        if client is None:
            cards = ProjectService.fallback_projects(showcase)
        else:
            logger.debug(f"Cache stats: {client.get_cache_stats()}")
            cards = await ProjectService(client).build_projects(showcase)
        return {"projects": [card.model_dump(mode="json") for card in cards]}

    @app.get("/api/revoke-collaborators")
    async def revoke_collaborators(
        authorization: Optional[str] = Header(None),
        cfg: Config = Depends(get_config),
        client: GitHubClient = Depends(require_github_client),
        store: TokenStore = Depends(get_token_store),
    ) -> dict:
        expected = f"Bearer {cfg.cron_secret}"
        if not cfg.cron_secret or not hmac.compare_digest(authorization or "", expected):
            raise HTTPException(status_code=401, detail="Unauthorized")

        report = await AccessGrantService(client, store).revoke_expired()
        return {"success": True, **report.model_dump()}

    @app.post("/api/repository/{slug}/access")
    async def grant_repository_access(
        slug: str,
        payload: GrantRequest,
        client: GitHubClient = Depends(require_github_client),
        store: TokenStore = Depends(get_token_store),
    ) -> JSONResponse:
        result = await AccessGrantService(client, store).grant_access(
            payload.username, payload.token, slug
        )
        status_code = 200 if result.granted else 400
        return JSONResponse(status_code=status_code, content=result.model_dump())

    return app
