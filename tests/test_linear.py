"""Summary: Tests for the Linear adapter."""

from __future__ import annotations

import pytest

from inboxhub import linear
from inboxhub.http_client import ProviderRequestError
from inboxhub.linear import ASSIGNED_ISSUES_QUERY, LinearAdapter
from inboxhub.models import IntegrationCredential, Provider


CREDENTIAL = IntegrationCredential(user_id=1, provider=Provider.LINEAR, access_token="lin_api_token")


@pytest.mark.asyncio
async def test_list_assigned_issues_posts_graphql(monkeypatch) -> None:
    calls = []

    async def fake_request_json(session, provider, method, url, *, headers=None, params=None, json_body=None):
        calls.append((method, url, headers, json_body))
        return {"data": {"issues": {"nodes": [{"id": "i1", "identifier": "ENG-1", "title": "Task"}]}}}

    monkeypatch.setattr(linear, "request_json", fake_request_json)

    issues = await LinearAdapter(None, "https://api.linear.app/graphql", page_size=10).list_assigned_issues(
        CREDENTIAL
    )

    assert [issue["identifier"] for issue in issues] == ["ENG-1"]
    method, url, headers, body = calls[0]
    assert method == "POST"
    assert url == "https://api.linear.app/graphql"
    assert headers == {"Authorization": "Bearer lin_api_token"}
    assert body == {"query": ASSIGNED_ISSUES_QUERY, "variables": {"first": 10}}


@pytest.mark.asyncio
async def test_graphql_errors_raise(monkeypatch) -> None:
    """Summary: Verify GraphQL errors fail the feed instead of returning partial data.

    Importance: Linear reports auth failures with a 200 status.
    Alternatives: Return whatever nodes came back.
    """

    async def fake_request_json(session, provider, method, url, *, headers=None, params=None, json_body=None):
        return {"errors": [{"message": "Authentication required"}], "data": None}

    monkeypatch.setattr(linear, "request_json", fake_request_json)

    with pytest.raises(ProviderRequestError, match="Authentication required"):
        await LinearAdapter(None, "https://api.linear.app/graphql").list_assigned_issues(CREDENTIAL)


@pytest.mark.asyncio
async def test_missing_data_returns_empty_list(monkeypatch) -> None:
    async def fake_request_json(session, provider, method, url, *, headers=None, params=None, json_body=None):
        return {"data": {"issues": None}}

    monkeypatch.setattr(linear, "request_json", fake_request_json)

    assert await LinearAdapter(None, "https://api.linear.app/graphql").list_assigned_issues(CREDENTIAL) == []
