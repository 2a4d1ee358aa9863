"""Token-gated temporary collaborator access."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .client import GitHubClient
from .exceptions import GitHubCacheError, NotFoundError
from .models import GrantResult, RevokeReport
from .token_store import TokenStore

logger = logging.getLogger(__name__)

GRANT_PERMISSION = "pull"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AccessGrantService:
    """Validate a one-time token, add the collaborator, then burn the token."""

    def __init__(
        self,
        client: GitHubClient,
        token_store: TokenStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.client = client
        self.token_store = token_store
        self._clock = clock

    def _now(self) -> datetime:
        now = self._clock()
        return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)

    def check_token(self, token: str, slug: str) -> GrantResult:
        """Check that ``token`` is an unused, unexpired token for project ``slug``."""
        if not token or not slug:
            return GrantResult(granted=False, reason="Missing parameters")

        repo_name = self.token_store.find_project_repo(slug)
        if repo_name is None:
            return GrantResult(granted=False, reason="Project not found")

        access_token = self.token_store.get_token(token)
        if (
            access_token is None
            or access_token.project_slug != slug
            or access_token.is_used
            or access_token.expire_at <= self._now()
        ):
            return GrantResult(granted=False, reason="Invalid or expired token")

        return GrantResult(granted=True, repo_name=repo_name)

    async def grant_access(self, username: str, token: str, slug: str) -> GrantResult:
        """Grant ``username`` read access to the project's repository.

        The token is reserved before GitHub is called, so concurrent requests
        cannot spend it twice. It is only marked used once GitHub accepted the
        invitation; a failed grant releases it for a retry.
        """
        if not username or not token or not slug:
            return GrantResult(granted=False, reason="Missing parameters")

        check = self.check_token(token, slug)
        if not check.granted or check.repo_name is None:
            return check
        if not self.token_store.claim(token):
            return GrantResult(granted=False, reason="Invalid or expired token")

        granted = False
        try:
            await self.client.add_collaborator(check.repo_name, username, GRANT_PERMISSION)
            self.token_store.mark_used(token, username.strip(), self._now())
            granted = True
        except GitHubCacheError as e:
            logger.error(f"Failed to grant {username} access to {check.repo_name}: {e}")
            return GrantResult(
                granted=False,
                reason="Error granting GitHub permissions",
                repo_name=check.repo_name,
            )
        finally:
            if not granted:
                self.token_store.release(token)

        logger.info(f"Granted {username} {GRANT_PERMISSION} access to {check.repo_name}")
        return GrantResult(granted=True, repo_name=check.repo_name)

    async def revoke_expired(self, now: Optional[datetime] = None) -> RevokeReport:
        """Remove collaborators whose token has expired.

        Each removal is independent: a failure is logged and counted, and the
        sweep moves on to the next token.
        """
        if now is None:
            now = self._now()
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        report = RevokeReport()

        for access_token in self.token_store.list_expired_used(now):
            username = access_token.used_by
            repo_name = self.token_store.find_project_repo(access_token.project_slug)
            if not username or not repo_name:
                report.skipped += 1
                continue

            try:
                await self.client.remove_collaborator(repo_name, username)
            except NotFoundError:
                # Already gone; nothing left to revoke
                logger.info(f"{username} is no longer a collaborator on {repo_name}")
                self.token_store.mark_revoked(access_token.id)
                report.skipped += 1
                continue
            except GitHubCacheError as e:
                logger.error(f"Failed to remove {username} from {repo_name}: {e}")
                report.failed += 1
                continue

            self.token_store.mark_revoked(access_token.id)
            report.removed += 1

        return report
