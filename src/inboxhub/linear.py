"""Summary: Linear adapter for issues assigned to the token owner.

Importance: Reads assigned issues through the Linear GraphQL API.
Alternatives: Use a generated GraphQL client.
"""

from __future__ import annotations

import aiohttp

from inboxhub.http_client import ProviderRequestError, request_json
from inboxhub.models import IntegrationCredential, Provider
from inboxhub.normalizers import normalize_linear_issue
from inboxhub.providers import InboxFeed, ProviderAdapter, ProviderRecord


ASSIGNED_ISSUES_QUERY = """
query AssignedIssues($first: Int!) {
  issues(filter: { assignee: { isMe: { eq: true } } }, first: $first) {
    nodes {
      id
      identifier
      title
      description
      url
      createdAt
      state { name }
      creator { name email displayName avatarUrl }
    }
  }
}
""".strip()


class LinearAdapter(ProviderAdapter):
    provider = Provider.LINEAR

    def __init__(self, session: aiohttp.ClientSession, api_url: str, page_size: int = 50) -> None:
        self._session = session
        self._api_url = api_url
        self._page_size = page_size

    def feeds(self) -> tuple[InboxFeed, ...]:
        return (InboxFeed("assigned", "linear_issues", self.list_assigned_issues, normalize_linear_issue),)

    async def list_assigned_issues(self, credential: IntegrationCredential) -> list[ProviderRecord]:
        """Summary: List issues whose assignee is the authenticated user.

        Importance: GraphQL errors arrive with a 200 status and are raised explicitly.
        Alternatives: Treat partial GraphQL data as success.
        """

        payload = await request_json(
            self._session,
            "linear",
            "POST",
            self._api_url,
            headers={"Authorization": f"Bearer {credential.access_token}"},
            json_body={"query": ASSIGNED_ISSUES_QUERY, "variables": {"first": self._page_size}},
        )
        if payload.get("errors"):
            messages = "; ".join(error.get("message", "") for error in payload["errors"])
            raise ProviderRequestError("linear", messages or "GraphQL error")
        issues = ((payload.get("data") or {}).get("issues") or {}).get("nodes") or []
        return list(issues)
