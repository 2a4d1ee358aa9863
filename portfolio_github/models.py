"""Data models for portfolio-github using Pydantic for validation."""

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Permission = Literal["pull", "push", "admin"]
LanguageMap = Dict[str, int]


class RepositoryOwner(BaseModel):
    """Owner of a GitHub repository."""

    model_config = ConfigDict(extra="allow")

    login: str = Field(..., description="User or organization login")
    html_url: Optional[str] = Field(None, description="Profile URL")


class RepositoryMetadata(BaseModel):
    """Subset of GitHub's ``GET /repos/{owner}/{repo}`` response.

    Unknown fields are kept so callers can still reach anything GitHub
    returns that is not modelled here.
    """

    model_config = ConfigDict(extra="allow")

    full_name: str = Field(..., description="owner/name")
    name: str = Field(..., description="Repository name")
    owner: Optional[RepositoryOwner] = Field(None, description="Repository owner")
    description: Optional[str] = Field(None, description="Repository description")
    html_url: str = Field(..., description="Web URL of the repository")
    homepage: Optional[str] = Field(None, description="Project homepage")
    language: Optional[str] = Field(None, description="Primary language")
    topics: List[str] = Field(default_factory=list, description="Repository topics")
    stargazers_count: int = Field(default=0, ge=0)
    forks_count: int = Field(default=0, ge=0)
    open_issues_count: int = Field(default=0, ge=0)
    private: bool = Field(default=False)
    archived: bool = Field(default=False)
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")
    pushed_at: Optional[datetime] = Field(None, description="Last push timestamp")


class RateLimitWindow(BaseModel):
    """Quota for one rate-limit bucket."""

    limit: int = Field(..., ge=0)
    remaining: int = Field(..., ge=0)
    reset: int = Field(..., description="Window reset as a UNIX timestamp")
    used: int = Field(default=0, ge=0)

    @property
    def reset_at(self) -> datetime:
        return datetime.fromtimestamp(self.reset)


class RateLimitResources(BaseModel):
    model_config = ConfigDict(extra="allow")

    core: RateLimitWindow
    search: Optional[RateLimitWindow] = None
    graphql: Optional[RateLimitWindow] = None


class RateLimitSnapshot(BaseModel):
    """GitHub's ``GET /rate_limit`` response."""

    resources: RateLimitResources
    rate: Optional[RateLimitWindow] = None


class CacheStats(BaseModel):
    """Current cache occupancy."""

    size: int = Field(..., ge=0, description="Number of stored entries")
    keys: List[str] = Field(default_factory=list, description="Stored cache keys")


class RenamedRepository(BaseModel):
    original: str
    new: str


class RepositoryError(BaseModel):
    repo_name: str
    error: str


class RepositoryReportSummary(BaseModel):
    total: int = Field(default=0, ge=0)
    successful: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    renamed: int = Field(default=0, ge=0)
    renamed_repos: List[RenamedRepository] = Field(default_factory=list)
    errors: List[RepositoryError] = Field(default_factory=list)


class RepositoryReport(BaseModel):
    """Batch fetch results plus a summary of what succeeded, failed or moved."""

    results: Dict[str, Optional[RepositoryMetadata]] = Field(default_factory=dict)
    summary: RepositoryReportSummary = Field(default_factory=RepositoryReportSummary)


class ShowcaseProject(BaseModel):
    """A project as defined in the CMS, before GitHub enrichment."""

    title: str = Field(..., min_length=1)
    repo_name: str = Field(..., description="owner/name of the backing repository")
    description: str = Field(default="")
    fallback_tags: List[str] = Field(default_factory=list)
    image: Optional[str] = None
    demo_url: Optional[str] = None

    @field_validator("repo_name")
    @classmethod
    def validate_repo_name(cls, v: str) -> str:
        """Ensure the repository is given as owner/name."""
        owner, sep, name = v.partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Repository must be given as owner/name, got {v!r}")
        return v


class ProjectCard(BaseModel):
    """A showcase project enriched with GitHub data (or fallback values)."""

    title: str
    repo_name: str
    description: str = ""
    image: Optional[str] = None
    demo_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    repo_url: str
    stars: int = Field(default=0, ge=0)
    forks: int = Field(default=0, ge=0)
    language: Optional[str] = None
    languages: LanguageMap = Field(default_factory=dict)
    last_updated: datetime
    is_from_github: bool = False


class AccessToken(BaseModel):
    """A one-time token granting temporary read access to a repository."""

    id: str
    project_slug: str
    expire_at: datetime
    is_used: bool = False
    used_at: Optional[datetime] = None
    used_by: Optional[str] = None
    revoked: bool = False

    @field_validator("expire_at", "used_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps are taken to be UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class GrantResult(BaseModel):
    """Outcome of a collaborator grant (or token check)."""

    granted: bool
    reason: Optional[str] = None
    repo_name: Optional[str] = None


class RevokeReport(BaseModel):
    """Outcome of an expired-access sweep."""

    removed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
