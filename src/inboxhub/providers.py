"""Summary: Provider adapter interface for inbox feeds.

Importance: Standardizes how each connected provider contributes sections to the inbox bundle.
Alternatives: Branch on provider names inside the aggregator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from inboxhub.models import IntegrationCredential, NormalizedItem, Provider


ProviderRecord = dict[str, Any]


@dataclass(frozen=True)
class InboxFeed:
    """Summary: One read operation of a provider and the bundle section it fills.

    Importance: Lets the aggregator fetch, normalize, and isolate failures per feed.
    Alternatives: Have adapters return already-normalized items.
    """

    name: str
    section: str
    fetch: Callable[[IntegrationCredential], Awaitable[list[ProviderRecord]]]
    normalize: Callable[[ProviderRecord], NormalizedItem]


class ProviderAdapter(ABC):
    """Summary: Abstract read-only adapter for one provider.

    Importance: Each concrete adapter is bound to exactly one Provider value.
    Alternatives: One generic HTTP adapter configured per provider.
    """

    provider: Provider

    @abstractmethod
    def feeds(self) -> tuple[InboxFeed, ...]:
        """Summary: Return the feeds this provider contributes to the inbox.

        Importance: Feeds sharing one credential run concurrently.
        Alternatives: Expose a single fetch method per adapter.
        """
