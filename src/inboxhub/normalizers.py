"""Summary: Pure mappings from provider records to NormalizedItem.

Importance: Each provider payload is validated at the boundary before it reaches the inbox bundle.
Alternatives: Trust provider payloads and read keys ad hoc.
"""

from __future__ import annotations

import hashlib
from datetime import date, datetime, timezone
from email.utils import parseaddr
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from inboxhub.models import ItemType, ItemUser, NormalizedItem


class _ProviderRecord(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# Gmail


class GmailHeader(_ProviderRecord):
    name: str
    value: str = ""


class GmailPayload(_ProviderRecord):
    headers: list[GmailHeader] = Field(default_factory=list)


class GmailMessage(_ProviderRecord):
    id: str
    thread_id: str | None = Field(default=None, alias="threadId")
    snippet: str = ""
    internal_date: str | None = Field(default=None, alias="internalDate")
    payload: GmailPayload = Field(default_factory=GmailPayload)

    def header(self, name: str) -> str:
        for item in self.payload.headers:
            if item.name.lower() == name.lower():
                return item.value
        return ""


def normalize_gmail_message(record: dict[str, Any]) -> NormalizedItem:
    """Summary: Map a Gmail message (metadata format) to an email item.

    Importance: Surfaces subject, snippet, and sender for unread mail.
    Alternatives: Fetch full bodies and summarize them.
    """

    message = GmailMessage.model_validate(record)
    sender_name, sender_email = parseaddr(message.header("From"))
    created_at = None
    if message.internal_date:
        created_at = datetime.fromtimestamp(int(message.internal_date) / 1000, tz=timezone.utc)
    return NormalizedItem(
        id=message.id,
        type=ItemType.EMAIL,
        title=message.header("Subject") or "(no subject)",
        text=message.snippet,
        created_at=created_at,
        user=ItemUser(
            name=sender_name or None,
            email=sender_email or None,
            avatar=avatar_from_email(sender_email),
        ),
        raw=record,
    )


# Google Calendar


class CalendarTime(_ProviderRecord):
    date_time: datetime | None = Field(default=None, alias="dateTime")
    all_day: date | None = Field(default=None, alias="date")

    def as_text(self) -> str:
        if self.date_time:
            return self.date_time.isoformat()
        if self.all_day:
            return self.all_day.isoformat()
        return ""

    def as_datetime(self) -> datetime | None:
        if self.date_time:
            return self.date_time
        if self.all_day:
            return datetime(
                self.all_day.year, self.all_day.month, self.all_day.day, tzinfo=timezone.utc
            )
        return None


class CalendarPerson(_ProviderRecord):
    email: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")


class CalendarEvent(_ProviderRecord):
    id: str
    summary: str | None = None
    location: str | None = None
    start: CalendarTime = Field(default_factory=CalendarTime)
    end: CalendarTime = Field(default_factory=CalendarTime)
    attendees: list[CalendarPerson] = Field(default_factory=list)
    organizer: CalendarPerson | None = None


def describe_event(event: CalendarEvent) -> str:
    """Summary: Render a one-line description of a calendar event.

    Importance: Gives the inbox a readable line with time, place, and attendees.
    Alternatives: Leave formatting to the client.
    """

    title = event.summary or "Untitled event"
    text = f"{title} - {event.start.as_text()} to {event.end.as_text()}"
    if event.location:
        text += f" at {event.location}"
    emails = [person.email for person in event.attendees if person.email]
    if emails:
        text += f" with {', '.join(emails)}"
    return text


def normalize_calendar_event(record: dict[str, Any]) -> NormalizedItem:
    event = CalendarEvent.model_validate(record)
    organizer = event.organizer or CalendarPerson()
    return NormalizedItem(
        id=event.id,
        type=ItemType.CALENDAR,
        title=event.summary or "Event",
        text=describe_event(event),
        created_at=event.start.as_datetime(),
        user=ItemUser(
            name=organizer.display_name,
            email=organizer.email,
            avatar=avatar_from_email(organizer.email),
        ),
        raw=record,
    )


# Slack


class SlackProfile(_ProviderRecord):
    real_name: str | None = None
    display_name: str | None = None
    email: str | None = None
    image_72: str | None = None


class SlackMessage(_ProviderRecord):
    ts: str
    text: str = ""
    user: str | None = None
    channel: str
    channel_name: str | None = None
    user_profile: SlackProfile | None = None


def normalize_slack_message(record: dict[str, Any]) -> NormalizedItem:
    """Summary: Map a channel history message to a Slack item.

    Importance: The adapter tags each message with its channel before normalization.
    Alternatives: Group Slack messages per channel.
    """

    message = SlackMessage.model_validate(record)
    profile = message.user_profile or SlackProfile()
    title = f"#{message.channel_name}" if message.channel_name else "Slack message"
    return NormalizedItem(
        id=f"{message.channel}-{message.ts}",
        type=ItemType.SLACK,
        title=title,
        text=message.text,
        created_at=datetime.fromtimestamp(float(message.ts), tz=timezone.utc),
        user=ItemUser(
            name=profile.real_name,
            email=profile.email,
            username=profile.display_name or message.user,
            avatar=profile.image_72 or avatar_from_email(profile.email),
        ),
        raw=record,
    )


# GitHub


class GithubAccount(_ProviderRecord):
    login: str
    avatar_url: str | None = None


class GithubRepository(_ProviderRecord):
    full_name: str
    owner: GithubAccount | None = None


class GithubSubject(_ProviderRecord):
    title: str
    type: str = ""
    url: str | None = None


class GithubNotification(_ProviderRecord):
    id: str
    reason: str = ""
    updated_at: datetime | None = None
    subject: GithubSubject
    repository: GithubRepository


class GithubIssue(_ProviderRecord):
    id: int
    number: int
    title: str
    body: str | None = None
    html_url: str = ""
    created_at: datetime | None = None
    user: GithubAccount | None = None
    repository_url: str | None = None


def normalize_github_notification(record: dict[str, Any]) -> NormalizedItem:
    notification = GithubNotification.model_validate(record)
    owner = notification.repository.owner
    text = f"{notification.subject.type or 'Update'} in {notification.repository.full_name}"
    if notification.reason:
        text += f" ({notification.reason.replace('_', ' ')})"
    return NormalizedItem(
        id=notification.id,
        type=ItemType.GITHUB,
        title=notification.subject.title,
        text=text,
        created_at=notification.updated_at,
        user=ItemUser(
            username=owner.login if owner else None,
            avatar=owner.avatar_url if owner else None,
        ),
        raw=record,
    )


def normalize_github_issue(record: dict[str, Any]) -> NormalizedItem:
    """Summary: Map an issue or pull request search result to a GitHub item.

    Importance: Issues and pull requests share one REST shape.
    Alternatives: Use separate item types for issues and pull requests.
    """

    issue = GithubIssue.model_validate(record)
    repository = _repository_from_url(issue.repository_url)
    title = f"{repository}#{issue.number}: {issue.title}" if repository else issue.title
    return NormalizedItem(
        id=str(issue.id),
        type=ItemType.GITHUB,
        title=title,
        text=(issue.body or "").strip()[:280] or issue.html_url,
        created_at=issue.created_at,
        user=ItemUser(
            username=issue.user.login if issue.user else None,
            avatar=issue.user.avatar_url if issue.user else None,
        ),
        raw=record,
    )


def _repository_from_url(url: str | None) -> str | None:
    if not url or "/repos/" not in url:
        return None
    return url.split("/repos/", 1)[1]


# Linear


class LinearUser(_ProviderRecord):
    name: str | None = None
    email: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")


class LinearState(_ProviderRecord):
    name: str


class LinearIssue(_ProviderRecord):
    id: str
    identifier: str
    title: str
    description: str | None = None
    url: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    state: LinearState | None = None
    creator: LinearUser | None = None


def normalize_linear_issue(record: dict[str, Any]) -> NormalizedItem:
    issue = LinearIssue.model_validate(record)
    creator = issue.creator or LinearUser()
    text = (issue.description or "").strip()[:280]
    if not text:
        text = issue.state.name if issue.state else ""
    return NormalizedItem(
        id=issue.id,
        type=ItemType.LINEAR,
        title=f"{issue.identifier}: {issue.title}",
        text=text,
        created_at=issue.created_at,
        user=ItemUser(
            name=creator.name,
            email=creator.email,
            username=creator.display_name,
            avatar=creator.avatar_url or avatar_from_email(creator.email),
        ),
        raw=record,
    )


def avatar_from_email(email: str | None) -> str | None:
    """Summary: Build a Gravatar URL for an email address.

    Importance: Gives items an avatar when the provider payload has none.
    Alternatives: Render initials on the client.
    """

    if not email:
        return None
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?d=identicon"
