"""Point lookups: cache first, then search results, then the provider directly."""

from __future__ import annotations

import structlog

from predagg.config import DEFAULT_ENGINE_CONFIG, EngineConfig, Settings
from predagg.engine.cache import MarketCache
from predagg.errors import NotFoundError
from predagg.ingestion.base import MarketSourceProtocol
from predagg.ingestion.polymarket.normalize import normalize_condition_id
from predagg.models import EventGroup, RawBinaryMarket, SynthesizedMarket
from predagg.synthesis import synthesize_item, wrap_binary_market

log = structlog.get_logger(__name__)


class MarketLookup:
    """Resolve a market id (event id, condition id, or slug) to a SynthesizedMarket."""

    def __init__(
        self,
        source: MarketSourceProtocol,
        cache: MarketCache,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        event_scan_max_pages: int = 10,
        event_scan_page_size: int = 100,
        search_lookup_limit: int = 100,
    ) -> None:
        self.source = source
        self.cache = cache
        self.config = config
        self.event_scan_max_pages = event_scan_max_pages
        self.event_scan_page_size = event_scan_page_size
        self.search_lookup_limit = search_lookup_limit

    @classmethod
    def from_settings(cls, source: MarketSourceProtocol, cache: MarketCache, settings: Settings) -> MarketLookup:
        return cls(
            source,
            cache,
            config=settings.engine_config,
            event_scan_max_pages=settings.event_scan_max_pages,
            event_scan_page_size=settings.event_scan_page_size,
        )

    async def find_by_id(self, market_id: str) -> SynthesizedMarket:
        """Raises NotFoundError once cache, search cache and provider are exhausted."""
        market_id = (market_id or "").strip()
        if not market_id:
            raise NotFoundError(market_id)
        market = self.cache.find(market_id)
        if market is not None:
            return market
        market = self.cache.find_in_search(market_id)
        if market is not None:
            log.debug("lookup_search_cache_hit", market_id=market_id)
            return market
        log.info("lookup_direct_fetch", market_id=market_id)
        market = await self._fetch_direct(market_id)
        if market is not None:
            return market
        log.info("lookup_not_found", market_id=market_id)
        raise NotFoundError(market_id)

    async def _fetch_direct(self, market_id: str) -> SynthesizedMarket | None:
        item: RawBinaryMarket | EventGroup | None = await self.source.fetch_market_or_event(market_id)
        if item is None:
            item = await self.source.fetch_event(market_id)
        if item is None:
            item = await self._search_event(market_id)
        if item is None:
            item = await self.source.scan_events_for_market(
                market_id,
                max_pages=self.event_scan_max_pages,
                page_size=self.event_scan_page_size,
            )
        if item is None:
            return None
        market = synthesize_item(item, self.config)
        if isinstance(item, EventGroup) and (market is None or not market.matches_id(market_id)):
            # The id named one member of an event that did not synthesize around it
            wanted = normalize_condition_id(market_id)
            for member in item.markets:
                if member.id == wanted or member.gamma_id == market_id:
                    return wrap_binary_market(member)
        return market

    async def _search_event(self, market_id: str) -> EventGroup | None:
        """Provider search for market_id, keeping only an event whose id or slug is exactly it."""
        events = await self.source.search_events(market_id, limit_per_type=self.search_lookup_limit)
        for event in events:
            if event.event_id == market_id or event.slug == market_id:
                log.info("lookup_search_hit", market_id=market_id, event_id=event.event_id)
                return event
        return None
