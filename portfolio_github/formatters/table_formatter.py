"""Table output formatter using Rich."""

from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from ..models import LanguageMap, RateLimitSnapshot, RepositoryMetadata, RepositoryReport
from .base import BaseFormatter


class TableFormatter(BaseFormatter):
    """Formats output as Rich tables."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the table formatter.

        Args:
            console: Rich console instance. If None, creates a new one.
        """
        self.console = console or Console(width=200)

    def _render(self, table: Table) -> str:
        with self.console.capture() as capture:
            self.console.print(table)
        return capture.get()

    def format_repository(self, repo: RepositoryMetadata, **kwargs: Any) -> str:
        table = Table(title=repo.full_name, box=box.SIMPLE_HEAVY, show_header=False)
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", style="white", overflow="fold")

        table.add_row("Description", repo.description or "-")
        table.add_row("URL", repo.html_url)
        table.add_row("Homepage", repo.homepage or "-")
        table.add_row("Language", repo.language or "-")
        table.add_row("Topics", ", ".join(repo.topics) if repo.topics else "-")
        table.add_row("Stars", self._fmt_k(repo.stargazers_count))
        table.add_row("Forks", self._fmt_k(repo.forks_count))
        table.add_row("Open issues", str(repo.open_issues_count))
        table.add_row("Updated", repo.updated_at.isoformat() if repo.updated_at else "-")
        return self._render(table)

    def format_languages(self, languages: LanguageMap, **kwargs: Any) -> str:
        """Format languages as a table with byte counts and percentages.

        Args:
            languages: Mapping of language name to bytes of code
            **kwargs: Additional options:
                - repo_name: str - Repository name for table title
        """
        repo_name = kwargs.get("repo_name", "Repository")
        table = Table(title=f"Languages for {repo_name}", box=box.SIMPLE_HEAVY)
        table.add_column("Language", style="cyan")
        table.add_column("Bytes", justify="right")
        table.add_column("Share", justify="right")

        total = sum(languages.values())
        for name, size in sorted(languages.items(), key=lambda kv: kv[1], reverse=True):
            share = f"{size / total * 100:.1f}%" if total else "-"
            table.add_row(name, f"{size:,}", share)

        if not languages:
            table.add_row("-", "-", "-")
        return self._render(table)

    def format_rate_limit(self, snapshot: Optional[RateLimitSnapshot], **kwargs: Any) -> str:
        if snapshot is None:
            return "Rate limit information is unavailable.\n"

        table = Table(title="GitHub Rate Limit", box=box.SIMPLE_HEAVY)
        table.add_column("Resource", style="cyan")
        table.add_column("Limit", justify="right")
        table.add_column("Used", justify="right")
        table.add_column("Remaining", justify="right")
        table.add_column("Resets", justify="right")

        windows = [("core", snapshot.resources.core)]
        if snapshot.resources.search is not None:
            windows.append(("search", snapshot.resources.search))
        if snapshot.resources.graphql is not None:
            windows.append(("graphql", snapshot.resources.graphql))

        for name, window in windows:
            remaining_style = "bold red" if window.remaining == 0 else "green"
            table.add_row(
                name,
                str(window.limit),
                str(window.used),
                f"[{remaining_style}]{window.remaining}[/{remaining_style}]",
                window.reset_at.strftime("%H:%M:%S"),
            )
        return self._render(table)

    def format_report(self, report: RepositoryReport, **kwargs: Any) -> str:
        table = Table(title="Repositories", box=box.SIMPLE_HEAVY)
        table.add_column("Requested", style="cyan", no_wrap=True)
        table.add_column("Resolved", style="white", no_wrap=True)
        table.add_column("Language", justify="left")
        table.add_column("Stars", justify="right")
        table.add_column("Forks", justify="right")

        for name, repo in report.results.items():
            if repo is None:
                table.add_row(name, "[red]failed[/red]", "-", "-", "-")
                continue
            table.add_row(
                name,
                repo.full_name,
                repo.language or "-",
                self._fmt_k(repo.stargazers_count),
                self._fmt_k(repo.forks_count),
            )

        output = self._render(table)
        s = report.summary
        output += (
            f"Total: {s.total}  Successful: {s.successful}  "
            f"Failed: {s.failed}  Renamed: {s.renamed}\n"
        )
        for renamed in s.renamed_repos:
            output += f"  {renamed.original} -> {renamed.new}\n"
        for error in s.errors:
            output += f"  {error.repo_name}: {error.error}\n"
        return output

    @staticmethod
    def _fmt_k(value: int) -> str:
        if value >= 1000:
            return f"{value / 1000:.1f}K"
        return str(value)
