"""Summary: Application services for InboxHub.

Importance: Orchestrates user and integration management around the inbox aggregator.
Alternatives: Call the store and aggregator directly from each entrypoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from inboxhub.inbox import InboxAggregator
from inboxhub.models import IntegrationCredential, Provider, User
from inboxhub.storage.sqlite_store import SqliteStore, StoredIntegration, StoredUser


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserService:
    store: SqliteStore

    def create_user(self, display_name: str, email: str) -> int:
        """Summary: Create or ensure a user exists.

        Importance: Integrations need an owning user record.
        Alternatives: Trust user IDs issued by an external identity provider.
        """

        user_id = self.store.ensure_user(User(display_name=display_name, email=email))
        logger.info("Ensured user %s (%s).", user_id, email)
        return user_id

    def get_user(self, user_id: int) -> StoredUser | None:
        return self.store.get_user(user_id)


@dataclass(frozen=True)
class IntegrationService:
    """Summary: Manages a user's connected provider credentials.

    Importance: Changing integrations drops the cached inbox so the next poll reflects them.
    Alternatives: Wait for the cache entry to expire.
    """

    store: SqliteStore
    aggregator: InboxAggregator

    def connect(
        self,
        user_id: int,
        provider: Provider,
        access_token: str,
        refresh_token: str | None = None,
        expires_at: str | None = None,
    ) -> None:
        self.store.upsert_integration(
            IntegrationCredential(
                user_id=user_id,
                provider=provider,
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=expires_at,
            )
        )
        self.aggregator.invalidate(user_id)
        logger.info("Connected %s for user %s.", provider.value, user_id)

    def disconnect(self, user_id: int, provider: Provider) -> bool:
        removed = self.store.delete_integration(user_id, provider)
        if removed:
            self.aggregator.invalidate(user_id)
            logger.info("Disconnected %s for user %s.", provider.value, user_id)
        return removed

    def list_integrations(self, user_id: int) -> list[StoredIntegration]:
        return self.store.list_integrations(user_id)

