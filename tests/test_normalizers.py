"""Summary: Tests for provider record normalization.

Importance: Ensures each provider payload maps onto the shared item shape.
Alternatives: Validate normalization only via live provider calls.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from inboxhub.models import ItemType
from inboxhub.normalizers import (
    avatar_from_email,
    normalize_calendar_event,
    normalize_github_issue,
    normalize_github_notification,
    normalize_gmail_message,
    normalize_linear_issue,
    normalize_slack_message,
)


def test_normalize_gmail_message_reads_headers() -> None:
    """Summary: Verify subject, sender, and timestamp come from Gmail metadata.

    Importance: Unread mail is the most visible inbox section.
    Alternatives: Show the snippet only.
    """

    record = {
        "id": "18c1",
        "threadId": "18c0",
        "snippet": "Quarterly numbers attached",
        "internalDate": "1700000000000",
        "payload": {
            "headers": [
                {"name": "From", "value": "Ada Lovelace <ada@example.com>"},
                {"name": "Subject", "value": "Q3 report"},
            ]
        },
    }
    item = normalize_gmail_message(record)
    assert item.id == "18c1"
    assert item.type is ItemType.EMAIL
    assert item.title == "Q3 report"
    assert item.text == "Quarterly numbers attached"
    assert item.user.name == "Ada Lovelace"
    assert item.user.email == "ada@example.com"
    assert item.user.avatar == avatar_from_email("ada@example.com")
    assert item.created_at == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
    assert item.raw is record


def test_normalize_gmail_message_without_subject() -> None:
    item = normalize_gmail_message({"id": "1"})
    assert item.title == "(no subject)"
    assert item.created_at is None
    assert item.user.email is None


def test_normalize_gmail_message_requires_id() -> None:
    with pytest.raises(ValidationError):
        normalize_gmail_message({"snippet": "no id"})


def test_normalize_calendar_event_describes_event() -> None:
    record = {
        "id": "evt1",
        "summary": "Standup",
        "location": "Room 4",
        "start": {"dateTime": "2026-10-19T09:00:00+01:00"},
        "end": {"dateTime": "2026-10-19T09:15:00+01:00"},
        "attendees": [{"email": "a@example.com"}, {"email": "b@example.com"}],
        "organizer": {"email": "lead@example.com", "displayName": "Team Lead"},
    }
    item = normalize_calendar_event(record)
    assert item.type is ItemType.CALENDAR
    assert item.title == "Standup"
    assert item.text == (
        "Standup - 2026-10-19T09:00:00+01:00 to 2026-10-19T09:15:00+01:00"
        " at Room 4 with a@example.com, b@example.com"
    )
    assert item.created_at is not None
    assert item.created_at.hour == 9
    assert item.user.name == "Team Lead"


def test_normalize_all_day_calendar_event() -> None:
    item = normalize_calendar_event(
        {"id": "evt2", "start": {"date": "2026-10-19"}, "end": {"date": "2026-10-20"}}
    )
    assert item.title == "Event"
    assert item.text == "Untitled event - 2026-10-19 to 2026-10-20"
    assert item.created_at == datetime(2026, 10, 19, tzinfo=timezone.utc)


def test_normalize_slack_message_uses_channel_and_profile() -> None:
    record = {
        "ts": "1700000000.000100",
        "text": "deploy is green",
        "user": "U123",
        "channel": "C42",
        "channel_name": "releases",
        "user_profile": {"real_name": "Grace Hopper", "display_name": "grace", "image_72": "https://img/72"},
    }
    item = normalize_slack_message(record)
    assert item.id == "C42-1700000000.000100"
    assert item.type is ItemType.SLACK
    assert item.title == "#releases"
    assert item.text == "deploy is green"
    assert item.user.username == "grace"
    assert item.user.avatar == "https://img/72"


def test_normalize_slack_message_without_profile() -> None:
    item = normalize_slack_message({"ts": "1.0", "text": "hi", "user": "U9", "channel": "D1"})
    assert item.title == "Slack message"
    assert item.user.username == "U9"
    assert item.user.avatar is None


def test_normalize_github_notification() -> None:
    record = {
        "id": "9001",
        "reason": "review_requested",
        "updated_at": "2026-10-18T12:00:00Z",
        "subject": {"title": "Fix flaky test", "type": "PullRequest"},
        "repository": {
            "full_name": "octo/app",
            "owner": {"login": "octo", "avatar_url": "https://avatars/octo"},
        },
    }
    item = normalize_github_notification(record)
    assert item.type is ItemType.GITHUB
    assert item.title == "Fix flaky test"
    assert item.text == "PullRequest in octo/app (review requested)"
    assert item.user.username == "octo"


def test_normalize_github_issue_prefixes_repository() -> None:
    record = {
        "id": 77,
        "number": 12,
        "title": "Crash on start",
        "body": "  Stack trace attached  ",
        "html_url": "https://github.com/octo/app/issues/12",
        "created_at": "2026-10-01T08:00:00Z",
        "user": {"login": "reporter"},
        "repository_url": "https://api.github.com/repos/octo/app",
    }
    item = normalize_github_issue(record)
    assert item.id == "77"
    assert item.title == "octo/app#12: Crash on start"
    assert item.text == "Stack trace attached"
    assert item.user.username == "reporter"


def test_normalize_github_issue_falls_back_to_url() -> None:
    item = normalize_github_issue(
        {"id": 1, "number": 2, "title": "Empty", "html_url": "https://github.com/x/y/pull/2"}
    )
    assert item.title == "Empty"
    assert item.text == "https://github.com/x/y/pull/2"


def test_normalize_linear_issue() -> None:
    record = {
        "id": "abc",
        "identifier": "ENG-42",
        "title": "Ship inbox",
        "description": None,
        "createdAt": "2026-10-10T10:00:00.000Z",
        "state": {"name": "In Progress"},
        "creator": {"name": "Linus", "email": "linus@example.com"},
    }
    item = normalize_linear_issue(record)
    assert item.type is ItemType.LINEAR
    assert item.title == "ENG-42: Ship inbox"
    assert item.text == "In Progress"
    assert item.user.avatar == avatar_from_email("linus@example.com")


def test_avatar_from_email_is_case_insensitive() -> None:
    assert avatar_from_email(" Ada@Example.com ") == avatar_from_email("ada@example.com")
    assert avatar_from_email(None) is None
    assert avatar_from_email("ada@example.com").startswith("https://www.gravatar.com/avatar/")
