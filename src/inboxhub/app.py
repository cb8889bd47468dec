"""Summary: Application factory wiring core services.

Importance: Centralizes dependency creation for the CLI and API layers.
Alternatives: Instantiate services manually in each entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass

import aiohttp

from inboxhub.cache import TtlCache
from inboxhub.config import AppConfig
from inboxhub.github import GithubAdapter
from inboxhub.google import GoogleAdapter
from inboxhub.inbox import InboxAggregator
from inboxhub.linear import LinearAdapter
from inboxhub.models import InboxBundle, Provider
from inboxhub.providers import ProviderAdapter
from inboxhub.services import IntegrationService, UserService
from inboxhub.slack import SlackAdapter
from inboxhub.storage.sqlite_store import SqliteStore


@dataclass(frozen=True)
class AppServices:
    """Summary: Bundle of core services for InboxHub.

    Importance: Simplifies passing dependencies to UI or API layers.
    Alternatives: Use a dependency injection container.
    """

    store: SqliteStore
    aggregator: InboxAggregator
    users: UserService
    integrations: IntegrationService
    config: AppConfig


def build_adapters(
    config: AppConfig, session: aiohttp.ClientSession
) -> dict[Provider, ProviderAdapter]:
    """Summary: Bind every provider with inbox content to its adapter.

    Importance: Providers missing from this table (Figma, Notion) are connected but contribute nothing.
    Alternatives: Discover adapters through entry points.
    """

    adapters: list[ProviderAdapter] = [
        GoogleAdapter(
            session,
            base_url=config.google_api_base_url,
            calendar_id=config.calendar_id,
            timezone_name=config.calendar_timezone,
            max_results=config.gmail_max_results,
        ),
        SlackAdapter(session, base_url=config.slack_api_base_url),
        GithubAdapter(
            session,
            base_url=config.github_api_base_url,
            user_agent=config.github_user_agent,
        ),
        LinearAdapter(session, api_url=config.linear_api_url),
    ]
    return {adapter.provider: adapter for adapter in adapters}


def build_services(
    config: AppConfig,
    session: aiohttp.ClientSession,
    cache: TtlCache[InboxBundle] | None = None,
) -> AppServices:
    """Summary: Build core services from configuration.

    Importance: Provides a single construction path for the application.
    Alternatives: Instantiate services directly within the CLI entrypoint.
    """

    store = SqliteStore(config.db_path)
    store.initialize()
    aggregator = InboxAggregator(
        store=store,
        adapters=build_adapters(config, session),
        cache=cache if cache is not None else TtlCache(),
        freshness_seconds=config.inbox_cache_ttl_seconds,
        provider_timeout_seconds=config.provider_timeout_seconds,
    )
    return AppServices(
        store=store,
        aggregator=aggregator,
        users=UserService(store=store),
        integrations=IntegrationService(store=store, aggregator=aggregator),
        config=config,
    )
