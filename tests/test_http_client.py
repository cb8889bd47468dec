"""Summary: Tests for the shared provider request helpers.

Importance: Every adapter relies on the same error translation and query encoding.
Alternatives: Exercise the helpers only through adapter tests.
"""

from __future__ import annotations

import pytest

from inboxhub.http_client import ProviderRequestError, _stringify_params, request_json


class FakeResponse:
    def __init__(self, status: int, payload=None, body: str = "", reason: str = "OK") -> None:
        self.status = status
        self.reason = reason
        self._payload = payload
        self._body = body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def text(self) -> str:
        return self._body

    async def json(self, content_type=None):
        return self._payload


class FakeSession:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        return self.response


def test_stringify_params_encodes_bools_and_drops_none() -> None:
    assert _stringify_params({"a": True, "b": False, "c": None, "d": 20, "e": "x"}) == {
        "a": "true",
        "b": "false",
        "d": "20",
        "e": "x",
    }
    assert _stringify_params(None) is None


@pytest.mark.asyncio
async def test_request_json_returns_payload() -> None:
    session = FakeSession(FakeResponse(200, payload={"ok": True}))

    payload = await request_json(session, "slack", "GET", "https://slack.com/api/auth.test", params={"pretty": True})

    assert payload == {"ok": True}
    method, url, kwargs = session.requests[0]
    assert method == "GET"
    assert kwargs["params"] == {"pretty": "true"}


@pytest.mark.asyncio
async def test_request_json_raises_on_error_status() -> None:
    """Summary: Verify non-2xx responses become ProviderRequestError with the status.

    Importance: The aggregator logs one error type per failed feed.
    Alternatives: Let aiohttp raise ClientResponseError.
    """

    session = FakeSession(FakeResponse(401, body='{"message":"Bad credentials"}', reason="Unauthorized"))

    with pytest.raises(ProviderRequestError) as excinfo:
        await request_json(session, "github", "GET", "https://api.github.com/notifications")

    assert excinfo.value.status == 401
    assert excinfo.value.provider == "github"
    assert str(excinfo.value) == 'github API request failed: {"message":"Bad credentials"}'


@pytest.mark.asyncio
async def test_request_json_falls_back_to_reason() -> None:
    session = FakeSession(FakeResponse(503, reason="Service Unavailable"))

    with pytest.raises(ProviderRequestError, match="Service Unavailable"):
        await request_json(session, "linear", "POST", "https://api.linear.app/graphql")
