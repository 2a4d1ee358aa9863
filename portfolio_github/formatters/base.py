"""Base formatter abstract class."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..models import LanguageMap, RateLimitSnapshot, RepositoryMetadata, RepositoryReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format_repository(self, repo: RepositoryMetadata, **kwargs: Any) -> str:
        """Format a single repository for output.

        Args:
            repo: RepositoryMetadata to format
            **kwargs: Additional formatting options

        Returns:
            Formatted string ready for output
        """
        pass

    @abstractmethod
    def format_languages(self, languages: LanguageMap, **kwargs: Any) -> str:
        """Format a language byte-count breakdown.

        Args:
            languages: Mapping of language name to bytes of code
            **kwargs: Additional formatting options (e.g. repo_name)

        Returns:
            Formatted string ready for output
        """
        pass

    @abstractmethod
    def format_rate_limit(self, snapshot: Optional[RateLimitSnapshot], **kwargs: Any) -> str:
        """Format a rate-limit snapshot (None when it could not be fetched)."""
        pass

    @abstractmethod
    def format_report(self, report: RepositoryReport, **kwargs: Any) -> str:
        """Format the result of a batch repository fetch."""
        pass
