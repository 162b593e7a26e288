"""Source protocol for pluggable market providers (Polymarket Gamma, test fakes, ...)."""

from __future__ import annotations

from typing import Protocol

from predagg.models import EventGroup, RawBinaryMarket


class MarketSourceProtocol(Protocol):
    """What the aggregator and lookup need from a provider.

    Implementations never raise on transport failure: list fetches resolve to
    ``[]`` and single-item fetches to ``None``.
    """

    async def fetch_trending(self, limit: int = 100, offset: int = 0) -> list[RawBinaryMarket]: ...

    async def fetch_event_groups(self, limit: int = 500, offset: int = 0) -> list[EventGroup]: ...

    async def fetch_market_or_event(self, item_id: str) -> RawBinaryMarket | EventGroup | None: ...

    async def fetch_event(self, event_id: str) -> EventGroup | None: ...

    async def search_events(
        self, query: str, limit_per_type: int = 50, search_tags: bool = False
    ) -> list[EventGroup]: ...

    async def scan_events_for_market(
        self, market_id: str, max_pages: int = 10, page_size: int = 100
    ) -> EventGroup | None: ...
