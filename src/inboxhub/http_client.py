"""Summary: Shared aiohttp session and JSON request helpers for provider adapters.

Importance: Gives every adapter the same timeout policy and error translation.
Alternatives: Let each adapter create its own session and handle errors inline.
"""

from __future__ import annotations

from typing import Any

import aiohttp
from aiohttp import ClientTimeout


class ProviderRequestError(RuntimeError):
    """Summary: Raised when a provider API call fails.

    Importance: Gives the aggregator one error type to log per failed feed.
    Alternatives: Surface raw aiohttp response errors.
    """

    def __init__(self, provider: str, message: str, status: int | None = None) -> None:
        super().__init__(f"{provider} API request failed: {message}")
        self.provider = provider
        self.status = status


def create_client_session(timeout_seconds: float, **kwargs: Any) -> aiohttp.ClientSession:
    """Summary: Create an aiohttp session bounded by a total request timeout.

    Importance: A hung provider socket cannot outlive the session timeout.
    Alternatives: Rely on the per-feed asyncio timeout alone.
    """

    timeout = ClientTimeout(total=timeout_seconds, connect=min(timeout_seconds, 5))
    return aiohttp.ClientSession(timeout=timeout, **kwargs)


async def request_json(
    session: aiohttp.ClientSession,
    provider: str,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json_body: dict[str, Any] | None = None,
) -> Any:
    """Summary: Send a request and decode the JSON response.

    Importance: Translates non-2xx responses into ProviderRequestError with the vendor's error body.
    Alternatives: Call session methods directly in every adapter.
    """

    async with session.request(
        method,
        url,
        headers=headers,
        params=_stringify_params(params),
        json=json_body,
    ) as response:
        if response.status >= 400:
            error_body = await response.text()
            raise ProviderRequestError(
                provider, error_body or response.reason or str(response.status), response.status
            )
        return await response.json(content_type=None)


def _stringify_params(params: dict[str, Any] | None) -> dict[str, str] | None:
    # aiohttp rejects bool query values.
    if params is None:
        return None
    normalized: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            normalized[key] = "true" if value else "false"
        else:
            normalized[key] = str(value)
    return normalized
