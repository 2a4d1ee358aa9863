"""JSON output formatter."""

import json
from typing import Any, Optional

from ..models import LanguageMap, RateLimitSnapshot, RepositoryMetadata, RepositoryReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Formats output as JSON."""

    def format_repository(self, repo: RepositoryMetadata, **kwargs: Any) -> str:
        return json.dumps(repo.model_dump(mode="json"), indent=2)

    def format_languages(self, languages: LanguageMap, **kwargs: Any) -> str:
        return json.dumps(languages, indent=2)

    def format_rate_limit(self, snapshot: Optional[RateLimitSnapshot], **kwargs: Any) -> str:
        """Format the snapshot as JSON; ``null`` when unavailable."""
        if snapshot is None:
            return "null"
        return json.dumps(snapshot.model_dump(mode="json"), indent=2)

    def format_report(self, report: RepositoryReport, **kwargs: Any) -> str:
        return json.dumps(report.model_dump(mode="json"), indent=2, default=str)
