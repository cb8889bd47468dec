"""Summary: Inbox aggregation across a user's connected providers.

Importance: Fans out concurrent provider reads, isolates each failure, and caches the merged bundle.
Alternatives: Query providers serially on every request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Mapping, Protocol

from inboxhub.cache import TtlCache
from inboxhub.models import (
    BUNDLE_SECTIONS,
    InboxBundle,
    IntegrationCredential,
    NormalizedItem,
    Provider,
)
from inboxhub.providers import InboxFeed, ProviderAdapter


logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_SECONDS = 30.0
DEFAULT_PROVIDER_TIMEOUT_SECONDS = 8.0


class IntegrationSource(Protocol):
    def find_all_for_user(self, user_id: int) -> list[IntegrationCredential]:
        ...


def cache_key(user_id: int) -> str:
    return f"inbox-data-{user_id}"


class InboxAggregator:
    """Summary: Builds fresh-enough inbox bundles for users.

    Importance: One flaky integration never blanks out the rest of the inbox.
    Alternatives: Fail the whole request when any provider fails.
    """

    def __init__(
        self,
        store: IntegrationSource,
        adapters: Mapping[Provider, ProviderAdapter],
        cache: TtlCache[InboxBundle],
        freshness_seconds: float = DEFAULT_FRESHNESS_SECONDS,
        provider_timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Summary: Wire the aggregator to its store, adapters, and cache.

        Importance: The cache is injected so each app or test owns its own instance.
        Alternatives: Import a module-level cache singleton.
        """

        for provider, adapter in adapters.items():
            if adapter.provider is not provider:
                raise ValueError(f"Adapter for {adapter.provider.value} registered as {provider.value}")
            for feed in adapter.feeds():
                if feed.section not in BUNDLE_SECTIONS:
                    raise ValueError(f"Unknown inbox section: {feed.section}")
        self._store = store
        self._adapters = dict(adapters)
        self._cache = cache
        self._freshness_seconds = freshness_seconds
        self._provider_timeout_seconds = provider_timeout_seconds
        self._clock = clock
        self._in_flight: dict[str, asyncio.Task[InboxBundle]] = {}

    async def get_messages(self, user_id: int) -> InboxBundle:
        """Summary: Return the user's inbox bundle, refreshing it when the cached one is stale.

        Importance: Concurrent cache misses for the same user share a single refresh.
        Alternatives: Let every concurrent miss query providers independently.
        """

        key = cache_key(user_id)
        cached = self._cache.get(key)
        if cached is not None and self._is_fresh(cached):
            logger.debug("Serving cached inbox for user %s.", user_id)
            return cached
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(user_id, key))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            logger.debug("Joining in-flight inbox refresh for user %s.", user_id)
        # A cancelled caller must not cancel the refresh other callers wait on.
        return await asyncio.shield(task)

    def invalidate(self, user_id: int) -> None:
        self._cache.delete(cache_key(user_id))

    async def _refresh(self, user_id: int, key: str) -> InboxBundle:
        logger.info("Refreshing inbox for user %s.", user_id)
        # Store failures propagate: without credentials there is no partial result.
        credentials = await asyncio.to_thread(self._store.find_all_for_user, user_id)
        connected = {credential.provider: credential for credential in credentials}
        logger.info("Found %s integrations for user %s.", len(connected), user_id)

        jobs = []
        for provider, credential in connected.items():
            adapter = self._adapters.get(provider)
            if adapter is None:
                logger.debug("No inbox adapter for %s; skipping for user %s.", provider.value, user_id)
                continue
            for feed in adapter.feeds():
                jobs.append(self._run_feed(user_id, provider, feed, credential))
        for provider in self._adapters:
            if provider not in connected:
                logger.debug("%s not connected for user %s.", provider.value, user_id)

        sections: dict[str, list[NormalizedItem]] = {name: [] for name in BUNDLE_SECTIONS}
        for section, items in await asyncio.gather(*jobs):
            sections[section].extend(items)

        bundle = InboxBundle(
            last_updated=datetime.fromtimestamp(self._clock(), tz=timezone.utc),
            **{name: tuple(items) for name, items in sections.items()},
        )
        self._cache.set(key, bundle, ttl=self._freshness_seconds)
        logger.info(
            "Inbox refreshed for user %s: %s",
            user_id,
            ", ".join(f"{name}={count}" for name, count in bundle.section_counts().items()),
        )
        return bundle

    async def _run_feed(
        self,
        user_id: int,
        provider: Provider,
        feed: InboxFeed,
        credential: IntegrationCredential,
    ) -> tuple[str, tuple[NormalizedItem, ...]]:
        """Summary: Fetch and normalize one feed, converting any failure into an empty section.

        Importance: Failures are recovered at the feed boundary so siblings keep running.
        Alternatives: Use gather(return_exceptions=True) and sort results afterwards.
        """

        try:
            records = await asyncio.wait_for(
                feed.fetch(credential), timeout=self._provider_timeout_seconds
            )
            items = tuple(feed.normalize(record) for record in records)
        except asyncio.TimeoutError:
            logger.error(
                "Timed out after %.1fs fetching %s %s for user %s.",
                self._provider_timeout_seconds,
                provider.value,
                feed.name,
                user_id,
            )
            return feed.section, ()
        except Exception as exc:
            logger.error(
                "Error fetching %s %s for user %s: %s",
                provider.value,
                feed.name,
                user_id,
                exc,
                exc_info=True,
            )
            return feed.section, ()
        logger.info(
            "Retrieved %s %s %s items for user %s.", len(items), provider.value, feed.name, user_id
        )
        return feed.section, items

    def _is_fresh(self, bundle: InboxBundle) -> bool:
        age = self._clock() - bundle.last_updated.timestamp()
        return age < self._freshness_seconds

    def _forget(self, key: str, task: asyncio.Task[InboxBundle]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled() and task.exception() is not None:
            # Retrieve the exception so an abandoned refresh does not warn at shutdown.
            logger.debug("Inbox refresh for %s failed: %s", key, task.exception())
