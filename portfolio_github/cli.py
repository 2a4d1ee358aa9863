"""Command-line interface for portfolio-github using Click."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable

import click

from . import utils
from .client import GitHubClient
from .config import Config
from .exceptions import ConfigurationError, GitHubCacheError
from .formatters import BaseFormatter

logger = logging.getLogger(__name__)

LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]

format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
)
no_cache_option = click.option(
    "--no-cache", is_flag=True, help="Bypass the cache and force a fresh read"
)


def _run(
    ctx: click.Context,
    output_format: str,
    action: Callable[[GitHubClient, BaseFormatter], Awaitable[str]],
) -> None:
    """Build the client, run ``action`` and echo its output.

    Library errors are turned into ClickExceptions so the user sees a short
    message instead of a traceback.
    """
    config: Config = ctx.obj["config"]

    async def _main() -> str:
        client, table_formatter, json_formatter = utils.create_command_dependencies(config)
        formatter = json_formatter if output_format.lower() == "json" else table_formatter
        async with client as c:
            return await action(c, formatter)

    try:
        output = asyncio.run(_main())
    except ConfigurationError as e:
        raise click.ClickException(
            "GITHUB_TOKEN is required. Set it in your environment and try again."
        ) from e
    except GitHubCacheError as e:
        raise click.ClickException(str(e)) from e
    click.echo(output.rstrip("\n"))


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON or TOML configuration file",
    envvar="PORTFOLIO_GITHUB_CONFIG",
)
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Set logging level",
    envvar="PORTFOLIO_GITHUB_LOG_LEVEL",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Path | None, log_level: str | None) -> None:
    """portfolio-github - cached GitHub data for the portfolio site.

    Subcommands:
      - repo: repository metadata
      - languages: language breakdown of a repository
      - rate-limit: remaining GitHub API quota
      - repos: fetch several repositories and summarize the results
      - serve: run the HTTP API

    Authentication:
      Set GITHUB_TOKEN environment variable with a personal access token.
    """
    utils.configure_logging(log_level, default_to_warning=True)
    try:
        config = Config.from_sources(config_file)
    except (ValueError, OSError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    ctx.obj = {"config": config}


@cli.command("repo")
@click.argument("full_name", required=True)
@format_option
@no_cache_option
@click.pass_context
def repo_command(ctx: click.Context, full_name: str, output_format: str, no_cache: bool) -> None:
    """Show metadata for a repository given as owner/name."""

    async def action(client: GitHubClient, formatter: BaseFormatter) -> str:
        repo = await client.get_repository(full_name, use_cache=not no_cache)
        return formatter.format_repository(repo)

    _run(ctx, output_format, action)


@cli.command("languages")
@click.argument("full_name", required=True)
@format_option
@click.pass_context
def languages_command(ctx: click.Context, full_name: str, output_format: str) -> None:
    """Show the language breakdown of a repository (empty on failure)."""

    async def action(client: GitHubClient, formatter: BaseFormatter) -> str:
        languages = await client.get_repository_languages(full_name)
        return formatter.format_languages(languages, repo_name=full_name)

    _run(ctx, output_format, action)


@cli.command("rate-limit")
@format_option
@click.pass_context
def rate_limit_command(ctx: click.Context, output_format: str) -> None:
    """Show the token's remaining GitHub API quota."""

    async def action(client: GitHubClient, formatter: BaseFormatter) -> str:
        snapshot = await client.get_rate_limit(use_cache=False)
        return formatter.format_rate_limit(snapshot)

    _run(ctx, output_format, action)


@cli.command("repos")
@click.argument("names", nargs=-1, required=False)
@format_option
@no_cache_option
@click.pass_context
def repos_command(
    ctx: click.Context, names: tuple[str, ...], output_format: str, no_cache: bool
) -> None:
    """Fetch several repositories one by one and summarize the results.

    Defaults to the repositories configured in GITHUB_REPOS.
    """
    config: Config = ctx.obj["config"]
    targets = list(names) or list(config.repositories)
    if not targets:
        raise click.UsageError("Give at least one owner/name or set GITHUB_REPOS")

    async def action(client: GitHubClient, formatter: BaseFormatter) -> str:
        report = await client.get_repositories_report(targets, use_cache=not no_cache)
        return formatter.format_report(report)

    _run(ctx, output_format, action)


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
@click.pass_context
def serve_command(ctx: click.Context, host: str, port: int) -> None:
    """Run the HTTP API (cache management, projects, access grants)."""
    import uvicorn

    from .web import create_app

    config: Config = ctx.obj["config"]
    uvicorn.run(create_app(config=config), host=host, port=port, log_config=None)
