"""Caller-owned market cache with generation-checked, all-or-nothing commits."""

from __future__ import annotations

from dataclasses import dataclass, field

from predagg.ingestion.polymarket.normalize import normalize_condition_id
from predagg.models import SynthesizedMarket


@dataclass(frozen=True)
class MarketSnapshot:
    """One refresh cycle's output. Never mutated after construction."""

    generation: int = 0
    markets: tuple[SynthesizedMarket, ...] = ()
    trending: tuple[SynthesizedMarket, ...] = ()
    profitable: tuple[SynthesizedMarket, ...] = ()
    fetched_at: float | None = None  # epoch seconds

    @property
    def available(self) -> bool:
        return bool(self.markets)


@dataclass(frozen=True)
class SearchSnapshot:
    generation: int = 0
    query: str | None = None
    markets: tuple[SynthesizedMarket, ...] = ()


def _find(markets: tuple[SynthesizedMarket, ...], market_id: str) -> SynthesizedMarket | None:
    normalized = normalize_condition_id(market_id)
    for m in markets:
        if m.matches_id(market_id) or m.matches_id(normalized):
            return m
    return None


@dataclass
class MarketCache:
    """Last committed snapshot plus the last search results.

    Each fetch takes a ticket from a monotonically increasing counter before it
    starts. A commit is accepted only if its ticket is newer than the installed
    snapshot, so a slow response can never overwrite a collection installed by a
    more recent request. Readers always see a whole snapshot: installation is a
    single reference swap.
    """

    _issued: int = 0
    _snapshot: MarketSnapshot = field(default_factory=MarketSnapshot)
    _search_issued: int = 0
    _search: SearchSnapshot = field(default_factory=SearchSnapshot)

    @property
    def snapshot(self) -> MarketSnapshot:
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    @property
    def search_snapshot(self) -> SearchSnapshot:
        return self._search

    def next_generation(self) -> int:
        self._issued += 1
        return self._issued

    def next_search_generation(self) -> int:
        self._search_issued += 1
        return self._search_issued

    def commit(self, snapshot: MarketSnapshot) -> bool:
        """Install snapshot unless a newer one is already installed. Returns True if installed."""
        if snapshot.generation <= self._snapshot.generation:
            return False
        self._snapshot = snapshot
        return True

    def commit_search(self, search: SearchSnapshot) -> bool:
        if search.generation <= self._search.generation:
            return False
        self._search = search
        return True

    def find(self, market_id: str) -> SynthesizedMarket | None:
        """Look market_id up in the merged collection (trending/profitable are subsets)."""
        return _find(self._snapshot.markets, market_id)

    def find_in_search(self, market_id: str) -> SynthesizedMarket | None:
        return _find(self._search.markets, market_id)
