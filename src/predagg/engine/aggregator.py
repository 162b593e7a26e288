"""Refresh orchestrator - fetch both sources, synthesize, merge, rank, commit."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence

import structlog

from predagg.config import DEFAULT_ENGINE_CONFIG, EngineConfig, Settings
from predagg.engine.cache import MarketCache, MarketSnapshot, SearchSnapshot
from predagg.errors import NoMarketsAvailableError
from predagg.ingestion.base import MarketSourceProtocol
from predagg.models import EventGroup, RawBinaryMarket, SynthesizedMarket
from predagg.ranking import rank_profitable, rank_trending
from predagg.synthesis import is_groupable, merge_markets, synthesize_event, synthesize_item
from predagg.synthesis.synthesizer import is_active_member

log = structlog.get_logger(__name__)


def build_markets(
    trending: Sequence[RawBinaryMarket],
    events: Sequence[EventGroup],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[SynthesizedMarket]:
    """Pure pipeline over one fetch: group, synthesize, then merge with trending."""
    synthesized: list[SynthesizedMarket] = []
    standalone: list[RawBinaryMarket] = []
    for event in events:
        if is_groupable(event.markets, config.max_group_size):
            market = synthesize_event(event, config)
            if market is not None:
                synthesized.append(market)
        else:
            standalone.extend(m for m in event.markets if is_active_member(m, config.min_active_volume))
    return merge_markets(trending, synthesized, standalone)


class MarketAggregator:
    """Runs refresh and search cycles against a source and commits into a MarketCache.

    The cache is owned by the caller and may be shared with a MarketLookup.
    Refresh cadence is up to the caller; nothing here schedules itself.
    """

    def __init__(
        self,
        source: MarketSourceProtocol,
        cache: MarketCache | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        trending_limit: int = 100,
        events_limit: int = 500,
        search_limit_per_type: int = 50,
    ) -> None:
        self.source = source
        self.cache = cache if cache is not None else MarketCache()
        self.config = config
        self.trending_limit = trending_limit
        self.events_limit = events_limit
        self.search_limit_per_type = search_limit_per_type

    @classmethod
    def from_settings(
        cls, source: MarketSourceProtocol, settings: Settings, cache: MarketCache | None = None
    ) -> MarketAggregator:
        return cls(
            source,
            cache=cache,
            config=settings.engine_config,
            trending_limit=settings.trending_limit,
            events_limit=settings.events_limit,
            search_limit_per_type=settings.search_limit_per_type,
        )

    async def refresh(self) -> MarketSnapshot:
        """Fetch, rebuild and commit. Returns the snapshot installed afterwards.

        Raises NoMarketsAvailableError when both sources return nothing; the
        previously installed snapshot stays in place.
        """
        ticket = self.cache.next_generation()
        started = time.monotonic()
        trending, events = await asyncio.gather(
            self.source.fetch_trending(limit=self.trending_limit),
            self.source.fetch_event_groups(limit=self.events_limit),
        )
        if not trending and not events:
            log.error("no_markets_available", generation=ticket)
            raise NoMarketsAvailableError("both market sources returned no data")

        markets = build_markets(trending, events, self.config)
        snapshot = MarketSnapshot(
            generation=ticket,
            markets=tuple(markets),
            trending=tuple(rank_trending(markets, config=self.config)),
            profitable=tuple(rank_profitable(markets, config=self.config)),
            fetched_at=time.time(),
        )
        if not self.cache.commit(snapshot):
            log.info(
                "refresh_stale_discarded",
                generation=ticket,
                installed_generation=self.cache.generation,
            )
            return self.cache.snapshot
        log.info(
            "refresh_committed",
            generation=ticket,
            trending_source=len(trending),
            events_source=len(events),
            markets=len(markets),
            multi_outcome=sum(1 for m in markets if m.is_multi_outcome),
            elapsed_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return snapshot

    async def search(self, query: str) -> list[SynthesizedMarket]:
        """Provider search; results replace the search cache consulted by lookup."""
        ticket = self.cache.next_search_generation()
        events = await self.source.search_events(query, limit_per_type=self.search_limit_per_type)
        results: list[SynthesizedMarket] = []
        seen: set[str] = set()
        for event in events:
            market = synthesize_item(event, self.config)
            if market is None or market.id in seen:
                continue
            seen.add(market.id)
            results.append(market)
        committed = self.cache.commit_search(
            SearchSnapshot(generation=ticket, query=query, markets=tuple(results))
        )
        log.info("search_done", query=query, events=len(events), markets=len(results), committed=committed)
        return results
