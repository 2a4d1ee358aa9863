"""Unit tests for showcase project assembly."""

from unittest.mock import AsyncMock

import pytest

from portfolio_github.exceptions import NotFoundError
from portfolio_github.models import RepositoryMetadata, ShowcaseProject
from portfolio_github.projects import (
    ProjectService,
    fetch_repository_with_fallback,
    format_topics,
    sort_topics_by_priority,
)


@pytest.fixture
def project():
    return ShowcaseProject(
        title="Modern Portfolio",
        repo_name="octo/portfolio",
        description="My portfolio",
        fallback_tags=["Next.js", "TypeScript"],
        demo_url=None,
    )


@pytest.fixture
def mock_client(repo_payload):
    client = AsyncMock()
    client.get_repository.return_value = RepositoryMetadata.model_validate(
        repo_payload(
            "octo/portfolio",
            topics=["tailwind", "typescript", "portfolio", "hacktoberfest"],
            homepage="https://example.dev",
        )
    )
    client.get_repository_languages.return_value = {"TypeScript": 900, "CSS": 100}
    return client


class TestTopics:
    """Test cases for topic formatting."""

    def test_format_topics_title_cases_and_filters(self):
        assert format_topics(["next-js", "hacktoberfest", "good-first-issue", "api"]) == [
            "Next Js",
            "Api",
        ]

    def test_format_topics_limits_count(self):
        topics = [f"topic-{i}" for i in range(10)]
        assert len(format_topics(topics)) == 6

    def test_sort_by_priority(self):
        assert sort_topics_by_priority(["Zebra", "Tailwind", "Alpha", "Typescript", "React"]) == [
            "Typescript",
            "React",
            "Tailwind",
            "Alpha",
            "Zebra",
        ]


class TestFetchWithFallback:
    """Test cases for merging GitHub data into project cards."""

    @pytest.mark.asyncio
    async def test_github_data_merged(self, mock_client, project):
        card = await fetch_repository_with_fallback(mock_client, project)

        assert card.is_from_github is True
        assert card.stars == 42
        assert card.languages == {"TypeScript": 900, "CSS": 100}
        assert card.tags == ["Typescript", "Tailwind", "Portfolio"]
        assert card.demo_url == "https://example.dev"
        assert card.repo_url == "https://github.com/octo/portfolio"

    @pytest.mark.asyncio
    async def test_fallback_tags_when_no_topics(self, mock_client, project, repo_payload):
        mock_client.get_repository.return_value = RepositoryMetadata.model_validate(
            repo_payload("octo/portfolio", topics=[])
        )
        card = await fetch_repository_with_fallback(mock_client, project)
        assert card.tags == ["Next.js", "TypeScript"]

    @pytest.mark.asyncio
    async def test_repository_failure_uses_static_card(self, mock_client, project):
        mock_client.get_repository.side_effect = NotFoundError("missing", 404)

        card = await fetch_repository_with_fallback(mock_client, project)

        assert card.is_from_github is False
        assert card.stars == 0
        assert card.tags == ["Next.js", "TypeScript"]
        assert card.repo_url == "https://github.com/octo/portfolio"


class TestProjectService:
    """Test cases for ProjectService."""

    @pytest.mark.asyncio
    async def test_build_projects_keeps_order(self, mock_client, project):
        other = ShowcaseProject(title="Other", repo_name="octo/other")
        mock_client.get_repository.side_effect = [
            mock_client.get_repository.return_value,
            NotFoundError("missing", 404),
        ]

        cards = await ProjectService(mock_client).build_projects([project, other])

        assert [c.title for c in cards] == ["Modern Portfolio", "Other"]
        assert [c.is_from_github for c in cards] == [True, False]

    def test_projects_from_repositories(self):
        projects = ProjectService.projects_from_repositories(["octo/discord-bot_dashboard"])
        assert projects[0].title == "Discord Bot Dashboard"
        assert projects[0].repo_name == "octo/discord-bot_dashboard"

    def test_fallback_projects(self, project):
        cards = ProjectService.fallback_projects([project])
        assert cards[0].is_from_github is False
        assert cards[0].languages == {}
