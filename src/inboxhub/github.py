"""Summary: GitHub adapter for notifications, assigned issues, and open pull requests.

Importance: Three independent REST reads share one GitHub token.
Alternatives: Use PyGithub or the GraphQL API.
"""

from __future__ import annotations

from typing import Any

import aiohttp

from inboxhub.http_client import request_json
from inboxhub.models import IntegrationCredential, Provider
from inboxhub.normalizers import normalize_github_issue, normalize_github_notification
from inboxhub.providers import InboxFeed, ProviderAdapter, ProviderRecord


PULL_REQUEST_QUERY = "is:pr is:open involves:@me"


class GithubAdapter(ProviderAdapter):
    provider = Provider.GITHUB

    def __init__(self, session: aiohttp.ClientSession, base_url: str, user_agent: str) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent

    def feeds(self) -> tuple[InboxFeed, ...]:
        return (
            InboxFeed(
                "notifications",
                "github_notifications",
                self.list_notifications,
                normalize_github_notification,
            ),
            InboxFeed("issues", "github_issues", self.list_assigned_issues, normalize_github_issue),
            InboxFeed("pulls", "github_prs", self.search_open_pull_requests, normalize_github_issue),
        )

    async def list_notifications(self, credential: IntegrationCredential) -> list[ProviderRecord]:
        payload = await self._get(
            credential, "/notifications", {"all": False, "participating": False}
        )
        return list(payload or [])

    async def list_assigned_issues(self, credential: IntegrationCredential) -> list[ProviderRecord]:
        """Summary: List open issues assigned to the token owner.

        Importance: The /issues endpoint also returns pull requests; those are left to the PR feed.
        Alternatives: Search issues with an assignee qualifier.
        """

        payload = await self._get(credential, "/issues", {"filter": "assigned", "state": "open"})
        return [item for item in payload or [] if "pull_request" not in item]

    async def search_open_pull_requests(
        self, credential: IntegrationCredential
    ) -> list[ProviderRecord]:
        payload = await self._get(credential, "/search/issues", {"q": PULL_REQUEST_QUERY})
        return list((payload or {}).get("items") or [])

    async def _get(
        self, credential: IntegrationCredential, endpoint: str, params: dict[str, Any]
    ) -> Any:
        return await request_json(
            self._session,
            "github",
            "GET",
            f"{self._base_url}{endpoint}",
            headers={
                "Authorization": f"token {credential.access_token}",
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": self._user_agent,
            },
            params=params,
        )
