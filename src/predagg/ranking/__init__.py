"""Market scoring and ordering."""

from predagg.ranking.ranker import (
    filter_markets,
    profitable_score,
    rank_profitable,
    rank_trending,
    trending_score,
)

__all__ = [
    "filter_markets",
    "profitable_score",
    "rank_profitable",
    "rank_trending",
    "trending_score",
]
