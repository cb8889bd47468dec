"""Summary: Slack adapter for unread channel messages.

Importance: Collects messages posted since the user's last read marker across joined channels.
Alternatives: Use the slack_sdk AsyncWebClient.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from inboxhub.http_client import ProviderRequestError, request_json
from inboxhub.models import IntegrationCredential, Provider
from inboxhub.normalizers import normalize_slack_message
from inboxhub.providers import InboxFeed, ProviderAdapter, ProviderRecord


logger = logging.getLogger(__name__)


class SlackAdapter(ProviderAdapter):
    """Summary: Reads unread Slack messages using a user token.

    Importance: Tags each message with channel and author profile before normalization.
    Alternatives: Subscribe to the Events API and store messages as they arrive.
    """

    provider = Provider.SLACK

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        channel_limit: int = 20,
        history_limit: int = 20,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._channel_limit = channel_limit
        self._history_limit = history_limit

    def feeds(self) -> tuple[InboxFeed, ...]:
        return (InboxFeed("unread", "slack_messages", self.list_unread_messages, normalize_slack_message),)

    async def list_unread_messages(self, credential: IntegrationCredential) -> list[ProviderRecord]:
        """Summary: List unread messages across every channel the user is a member of.

        Importance: Channel order follows conversations.list; message order follows history.
        Alternatives: Only read direct messages.
        """

        token = credential.access_token
        listing = await self._call(
            token,
            "conversations.list",
            {
                "types": "public_channel,private_channel,im,mpim",
                "exclude_archived": True,
                "limit": 200,
            },
        )
        channels = [
            channel
            for channel in listing.get("channels") or []
            if channel.get("is_member") or channel.get("is_im")
        ][: self._channel_limit]
        per_channel = await asyncio.gather(
            *(self._channel_unread(token, channel) for channel in channels)
        )
        messages = [message for batch in per_channel for message in batch]
        profiles = await self._profiles(token, {m["user"] for m in messages if m.get("user")})
        for message in messages:
            profile = profiles.get(message.get("user") or "")
            if profile is not None:
                message["user_profile"] = profile
        return messages

    async def _channel_unread(
        self, token: str, channel: dict[str, Any]
    ) -> list[ProviderRecord]:
        channel_id = channel["id"]
        info = await self._call(token, "conversations.info", {"channel": channel_id})
        last_read = (info.get("channel") or {}).get("last_read") or "0"
        history = await self._call(
            token,
            "conversations.history",
            {"channel": channel_id, "oldest": last_read, "limit": self._history_limit},
        )
        channel_name = channel.get("name") or channel.get("user")
        return [
            {**message, "channel": channel_id, "channel_name": channel_name}
            for message in history.get("messages") or []
            if message.get("ts")
        ]

    async def _profiles(self, token: str, user_ids: set[str]) -> dict[str, dict[str, Any]]:
        ordered = sorted(user_ids)
        results = await asyncio.gather(
            *(self._call(token, "users.info", {"user": user_id}) for user_id in ordered),
            return_exceptions=True,
        )
        profiles: dict[str, dict[str, Any]] = {}
        for user_id, result in zip(ordered, results):
            if isinstance(result, Exception):
                # Messages still render without an author profile.
                logger.warning("Slack profile lookup failed for %s: %s", user_id, result)
                continue
            profiles[user_id] = (result.get("user") or {}).get("profile") or {}
        return profiles

    async def _call(self, token: str, method: str, params: dict[str, Any]) -> dict[str, Any]:
        payload = await request_json(
            self._session,
            "slack",
            "GET",
            f"{self._base_url}/{method}",
            headers={"Authorization": f"Bearer {token}"},
            params=params,
        )
        if not payload.get("ok"):
            raise ProviderRequestError("slack", f"{method}: {payload.get('error', 'unknown_error')}")
        return payload
