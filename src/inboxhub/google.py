"""Summary: Google Calendar and Gmail adapter.

Importance: Reads today's events and unread mail with one shared Google credential.
Alternatives: Use the google-api-python-client discovery SDK.
"""

from __future__ import annotations

import asyncio
import urllib.parse
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import aiohttp

from inboxhub.http_client import request_json
from inboxhub.models import IntegrationCredential, Provider
from inboxhub.normalizers import normalize_calendar_event, normalize_gmail_message
from inboxhub.providers import InboxFeed, ProviderAdapter, ProviderRecord


GMAIL_METADATA_HEADERS = ("From", "Subject", "Date")


class GoogleAdapter(ProviderAdapter):
    """Summary: Reads Google Calendar and Gmail using OAuth access tokens.

    Importance: Calendar and mail are independent feeds over the same credential.
    Alternatives: Split Calendar and Gmail into separate providers.
    """

    provider = Provider.GOOGLE

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        calendar_id: str,
        timezone_name: str,
        max_results: int,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._calendar_id = calendar_id
        self._timezone_name = timezone_name
        self._max_results = max_results

    def feeds(self) -> tuple[InboxFeed, ...]:
        return (
            InboxFeed("calendar", "calendar_events", self.list_todays_events, normalize_calendar_event),
            InboxFeed("gmail", "emails", self.list_unread_emails, normalize_gmail_message),
        )

    async def list_todays_events(self, credential: IntegrationCredential) -> list[ProviderRecord]:
        """Summary: List events on the calendar for the current local day.

        Importance: Expands recurring events so each occurrence is listed in start order.
        Alternatives: List upcoming events without a day bound.
        """

        time_min, time_max = day_bounds_utc(datetime.now(timezone.utc), self._timezone_name)
        calendar_id = urllib.parse.quote(self._calendar_id, safe="")
        payload = await request_json(
            self._session,
            "google",
            "GET",
            f"{self._base_url}/calendar/v3/calendars/{calendar_id}/events",
            headers=_auth_headers(credential),
            params={
                "timeMin": time_min,
                "timeMax": time_max,
                "singleEvents": True,
                "orderBy": "startTime",
            },
        )
        return list(payload.get("items") or [])

    async def list_unread_emails(self, credential: IntegrationCredential) -> list[ProviderRecord]:
        """Summary: List unread Gmail messages with subject and sender headers.

        Importance: The list endpoint only returns IDs, so metadata is fetched per message.
        Alternatives: Fetch full message bodies.
        """

        payload = await request_json(
            self._session,
            "google",
            "GET",
            f"{self._base_url}/gmail/v1/users/me/messages",
            headers=_auth_headers(credential),
            params={"q": "is:unread", "maxResults": self._max_results},
        )
        message_ids = [item["id"] for item in payload.get("messages") or [] if item.get("id")]
        # gather keeps list order.
        return list(
            await asyncio.gather(
                *(self._get_message_metadata(credential, message_id) for message_id in message_ids)
            )
        )

    async def _get_message_metadata(
        self, credential: IntegrationCredential, message_id: str
    ) -> ProviderRecord:
        query = urllib.parse.urlencode(
            [("format", "metadata")] + [("metadataHeaders", name) for name in GMAIL_METADATA_HEADERS]
        )
        return await request_json(
            self._session,
            "google",
            "GET",
            f"{self._base_url}/gmail/v1/users/me/messages/{message_id}?{query}",
            headers=_auth_headers(credential),
        )


def day_bounds_utc(now: datetime, timezone_name: str) -> tuple[str, str]:
    """Summary: Compute the UTC start and end of the local day containing ``now``.

    Importance: "Today" follows the user's time zone, not the server's.
    Alternatives: Use UTC day boundaries.
    """

    zone = ZoneInfo(timezone_name)
    local_day = now.astimezone(zone).date()
    start = datetime.combine(local_day, time.min, tzinfo=zone)
    end = start + timedelta(days=1) - timedelta(milliseconds=1)
    return (
        _isoformat_z(start.astimezone(timezone.utc)),
        _isoformat_z(end.astimezone(timezone.utc)),
    )


def _isoformat_z(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _auth_headers(credential: IntegrationCredential) -> dict[str, str]:
    return {"Authorization": f"Bearer {credential.access_token}", "Accept": "application/json"}
