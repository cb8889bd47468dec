"""Summary: Domain model dataclasses for InboxHub.

Importance: Defines the credential, item, and bundle shapes shared by the store, adapters, and aggregator.
Alternatives: Pass provider payload dictionaries through the whole pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Provider(str, Enum):
    """Summary: Third-party services a user can connect.

    Importance: Replaces stringly-typed provider names with a fixed set.
    Alternatives: Accept free-form provider names from the store.
    """

    GOOGLE = "google"
    SLACK = "slack"
    GITHUB = "github"
    LINEAR = "linear"
    FIGMA = "figma"
    NOTION = "notion"


class ItemType(str, Enum):
    EMAIL = "email"
    SLACK = "slack"
    GITHUB = "github"
    LINEAR = "linear"
    CALENDAR = "calendar"


@dataclass(frozen=True)
class User:
    """Summary: Represents an account owner.

    Importance: Integrations and inbox bundles are scoped to a user.
    Alternatives: Key everything by an external identity provider ID.
    """

    display_name: str
    email: str


@dataclass(frozen=True)
class IntegrationCredential:
    """Summary: One connected third-party account for one user.

    Importance: Carries the tokens an adapter needs to call a provider on the user's behalf.
    Alternatives: Let each adapter read tokens from storage itself.
    """

    user_id: int
    provider: Provider
    access_token: str
    refresh_token: str | None = None
    expires_at: str | None = None


@dataclass(frozen=True)
class ItemUser:
    name: str | None = None
    email: str | None = None
    username: str | None = None
    avatar: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "name": self.name,
            "email": self.email,
            "username": self.username,
            "avatar": self.avatar,
        }


@dataclass(frozen=True)
class NormalizedItem:
    """Summary: Display-ready representation of one piece of inbox content.

    Importance: Gives the UI one shape regardless of which provider produced the item.
    Alternatives: Render provider payloads directly in the client.
    """

    id: str
    type: ItemType
    title: str
    text: str
    created_at: datetime | None = None
    user: ItemUser = field(default_factory=ItemUser)
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "text": self.text,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "user": self.user.to_dict(),
            "raw": self.raw,
        }


@dataclass(frozen=True)
class InboxBundle:
    """Summary: Merged per-user inbox across every connected provider.

    Importance: The single value the aggregator caches and returns to callers.
    Alternatives: Return one response per provider and merge on the client.
    """

    last_updated: datetime
    emails: tuple[NormalizedItem, ...] = ()
    calendar_events: tuple[NormalizedItem, ...] = ()
    slack_messages: tuple[NormalizedItem, ...] = ()
    linear_issues: tuple[NormalizedItem, ...] = ()
    github_notifications: tuple[NormalizedItem, ...] = ()
    github_issues: tuple[NormalizedItem, ...] = ()
    github_prs: tuple[NormalizedItem, ...] = ()

    def section_counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in BUNDLE_SECTIONS}

    def to_dict(self) -> dict[str, Any]:
        """Summary: Serialize the bundle using the client-facing camelCase keys.

        Importance: Keeps the JSON shape stable for existing inbox clients.
        Alternatives: Expose snake_case keys and migrate clients.
        """

        payload: dict[str, Any] = {
            key: [item.to_dict() for item in getattr(self, name)]
            for name, key in BUNDLE_SECTIONS.items()
        }
        payload["lastUpdated"] = self.last_updated.isoformat()
        return payload


# Bundle attribute -> JSON key.
BUNDLE_SECTIONS: dict[str, str] = {
    "emails": "emails",
    "calendar_events": "calendarEvents",
    "slack_messages": "slackMessages",
    "linear_issues": "linearIssues",
    "github_notifications": "githubNotifications",
    "github_issues": "githubIssues",
    "github_prs": "githubPRs",
}
