"""Refresh orchestration, caller-owned cache, and point lookup."""

from predagg.engine.aggregator import MarketAggregator, build_markets
from predagg.engine.cache import MarketCache, MarketSnapshot, SearchSnapshot
from predagg.engine.lookup import MarketLookup

__all__ = [
    "MarketAggregator",
    "MarketCache",
    "MarketLookup",
    "MarketSnapshot",
    "SearchSnapshot",
    "build_markets",
]
