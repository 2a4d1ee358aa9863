"""Access-token storage interface used by the collaborator-grant workflow.

The real store lives in the site's database layer; this module only defines
the operations the workflow needs, plus an in-memory implementation used in
tests and local development.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Set

from .models import AccessToken


class TokenStore(Protocol):
    """Persistence operations consumed by :class:`~portfolio_github.access.AccessGrantService`."""

    def find_project_repo(self, slug: str) -> Optional[str]:
        """Return the ``owner/name`` repository behind a project slug."""
        ...

    def get_token(self, token_id: str) -> Optional[AccessToken]:
        ...

    def claim(self, token_id: str) -> bool:
        """Reserve an unused token for one in-flight grant.

        Returns False if the token is already used or reserved. The check and
        the reservation must happen atomically.
        """
        ...

    def release(self, token_id: str) -> None:
        """Drop a reservation made by :meth:`claim` without using the token."""
        ...

    def mark_used(self, token_id: str, username: str, at: datetime) -> None:
        ...

    def list_expired_used(self, now: datetime) -> List[AccessToken]:
        """Used tokens whose access window has closed and were not yet revoked."""
        ...

    def mark_revoked(self, token_id: str) -> None:
        ...


class InMemoryTokenStore:
    """Dict-backed :class:`TokenStore`."""

    def __init__(self) -> None:
        self._projects: Dict[str, str] = {}
        self._tokens: Dict[str, AccessToken] = {}
        self._claimed: Set[str] = set()
        self._lock = threading.Lock()

    def add_project(self, slug: str, repo_name: str) -> None:
        with self._lock:
            self._projects[slug] = repo_name

    def add_token(self, token: AccessToken) -> None:
        with self._lock:
            self._tokens[token.id] = token

    def find_project_repo(self, slug: str) -> Optional[str]:
        return self._projects.get(slug)

    def get_token(self, token_id: str) -> Optional[AccessToken]:
        return self._tokens.get(token_id)

    def claim(self, token_id: str) -> bool:
        with self._lock:
            token = self._tokens.get(token_id)
            if token is None or token.is_used or token_id in self._claimed:
                return False
            self._claimed.add(token_id)
            return True

    def release(self, token_id: str) -> None:
        with self._lock:
            self._claimed.discard(token_id)

    def mark_used(self, token_id: str, username: str, at: datetime) -> None:
        with self._lock:
            self._claimed.discard(token_id)
            token = self._tokens[token_id]
            self._tokens[token_id] = token.model_copy(
                update={"is_used": True, "used_at": at, "used_by": username}
            )

    def list_expired_used(self, now: datetime) -> List[AccessToken]:
        return [
            t for t in self._tokens.values() if t.is_used and not t.revoked and t.expire_at < now
        ]

    def mark_revoked(self, token_id: str) -> None:
        with self._lock:
            token = self._tokens[token_id]
            self._tokens[token_id] = token.model_copy(update={"revoked": True})
