"""Trending and profitable orderings over the merged market collection."""

from __future__ import annotations

import math
from collections.abc import Sequence

from predagg.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from predagg.models import SynthesizedMarket


def trending_score(market: SynthesizedMarket, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> float:
    """24h volume, boosted for markets with more than two outcomes."""
    boost = config.trending_multi_outcome_boost if market.is_multi_outcome else 1.0
    return market.volume_24h * boost


def profitable_score(market: SynthesizedMarket, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> float:
    """Price spread (in points) plus log volume; 0 for markets with fewer than two tokens."""
    if len(market.tokens) < 2:
        return 0.0
    prices = [t.price for t in market.tokens]
    spread = max(prices) - min(prices)
    score = spread * 100 + math.log(market.volume + 1)
    if market.is_multi_outcome:
        score *= config.profitable_multi_outcome_boost
    return score


def rank_trending(
    markets: Sequence[SynthesizedMarket],
    limit: int | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[SynthesizedMarket]:
    """Top markets by trending score, descending. Ties keep merge order."""
    limit = config.rank_limit if limit is None else limit
    ranked = sorted(markets, key=lambda m: trending_score(m, config), reverse=True)
    return ranked[:limit]


def rank_profitable(
    markets: Sequence[SynthesizedMarket],
    limit: int | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[SynthesizedMarket]:
    """Top markets by profitable score, descending; non-positive scores are excluded."""
    limit = config.rank_limit if limit is None else limit
    scored = [(profitable_score(m, config), m) for m in markets]
    scored = [(s, m) for s, m in scored if s > 0]
    scored.sort(key=lambda sm: sm[0], reverse=True)
    return [m for _, m in scored[:limit]]


def filter_markets(
    markets: Sequence[SynthesizedMarket],
    category: str | None = None,
    query: str | None = None,
) -> list[SynthesizedMarket]:
    """Local filter by category (exact, case-insensitive) and free-text query.

    The query matches question, description and outcome labels.
    """
    wanted_category = category.strip().lower() if category else None
    needle = query.strip().lower() if query else None

    def allowed(m: SynthesizedMarket) -> bool:
        if wanted_category and (m.category or "").lower() != wanted_category:
            return False
        if needle:
            haystack = [m.question, m.description or "", *m.outcomes]
            if not any(needle in text.lower() for text in haystack):
                return False
        return True

    return [m for m in markets if allowed(m)]
