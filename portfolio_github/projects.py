"""Service layer turning CMS project definitions into showcase cards."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Sequence

from .client import GitHubClient
from .exceptions import GitHubCacheError
from .models import ProjectCard, ShowcaseProject

logger = logging.getLogger(__name__)

MAX_TAGS = 6

# Topics too generic to be worth a badge
NOISE_TOPICS = frozenset(
    {
        "awesome",
        "awesome list",
        "list",
        "curated",
        "collection",
        "hacktoberfest",
        "good first issue",
        "help wanted",
        "documentation",
        "docs",
        "readme",
        "template",
        "boilerplate",
    }
)

PRIORITY_TOPICS = [
    "typescript",
    "javascript",
    "react",
    "nextjs",
    "nodejs",
    "discord",
    "bot",
    "music",
    "api",
    "database",
    "postgresql",
    "mongodb",
    "docker",
    "aws",
    "vercel",
    "tailwind",
    "css",
    "html",
]


def format_topics(topics: Iterable[str]) -> List[str]:
    """Turn kebab-case GitHub topics into Title Case tags.

    Generic topics are dropped and at most ``MAX_TAGS`` are kept.

    Examples:
        >>> format_topics(["next-js", "hacktoberfest", "api"])
        ['Next Js', 'Api']
    """
    formatted = []
    for topic in topics:
        if not topic:
            continue
        title = " ".join(word[:1].upper() + word[1:] for word in topic.split("-"))
        if title.lower() in NOISE_TOPICS:
            continue
        formatted.append(title)
    return formatted[:MAX_TAGS]


def sort_topics_by_priority(topics: Iterable[str]) -> List[str]:
    """Priority topics first (in priority order), the rest alphabetically."""

    def sort_key(topic: str) -> tuple[int, str]:
        lowered = topic.lower()
        if lowered in PRIORITY_TOPICS:
            return (PRIORITY_TOPICS.index(lowered), "")
        return (len(PRIORITY_TOPICS), lowered)

    return sorted(topics, key=sort_key)


def fallback_card(project: ShowcaseProject) -> ProjectCard:
    """Static card used when GitHub data is unavailable."""
    return ProjectCard(
        title=project.title,
        repo_name=project.repo_name,
        description=project.description,
        image=project.image,
        demo_url=project.demo_url,
        tags=list(project.fallback_tags),
        repo_url=f"https://github.com/{project.repo_name}",
        last_updated=datetime.now(timezone.utc),
        is_from_github=False,
    )


async def fetch_repository_with_fallback(
    client: GitHubClient, project: ShowcaseProject
) -> ProjectCard:
    """Merge GitHub data into ``project``, or fall back to its static card."""
    try:
        repo, languages = await asyncio.gather(
            client.get_repository(project.repo_name),
            client.get_repository_languages(project.repo_name),
        )
    except GitHubCacheError as e:
        logger.warning(f"Using fallback data for {project.repo_name}: {e}")
        return fallback_card(project)

    if repo.topics:
        tags = sort_topics_by_priority(format_topics(repo.topics))
    else:
        tags = list(project.fallback_tags)

    return ProjectCard(
        title=project.title,
        repo_name=project.repo_name,
        description=project.description or repo.description or "",
        image=project.image,
        demo_url=project.demo_url or repo.homepage or None,
        tags=tags,
        repo_url=repo.html_url,
        stars=repo.stargazers_count,
        forks=repo.forks_count,
        language=repo.language,
        languages=languages,
        last_updated=repo.updated_at or datetime.now(timezone.utc),
        is_from_github=True,
    )


class ProjectService:
    """High-level operations for building the portfolio's project list."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    async def build_projects(self, projects: Sequence[ShowcaseProject]) -> List[ProjectCard]:
        """Return one card per project, in input order.

        Projects are resolved one at a time; each one's repository and
        language lookups run concurrently.
        """
        cards: List[ProjectCard] = []
        for project in projects:
            cards.append(await fetch_repository_with_fallback(self.client, project))
        return cards

    @staticmethod
    def fallback_projects(projects: Sequence[ShowcaseProject]) -> List[ProjectCard]:
        """Cards built without touching GitHub (e.g. no token configured)."""
        return [fallback_card(p) for p in projects]

    @staticmethod
    def projects_from_repositories(repo_names: Iterable[str]) -> List[ShowcaseProject]:
        """Minimal project definitions for a plain list of ``owner/name`` strings."""
        projects = []
        for repo_name in repo_names:
            name = repo_name.split("/", 1)[-1]
            title = " ".join(part.capitalize() for part in name.replace("_", "-").split("-") if part)
            projects.append(ShowcaseProject(title=title or repo_name, repo_name=repo_name))
        return projects
