"""EventGroup -> SynthesizedMarket. Binary sub-markets folded into one multi-outcome market."""

from __future__ import annotations

import structlog

from predagg.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from predagg.models import EventGroup, RawBinaryMarket, SynthesizedMarket, Token
from predagg.synthesis.extractor import extract_entity_name
from predagg.synthesis.grouping import is_groupable

log = structlog.get_logger(__name__)

DEFAULT_PRICE = 0.5


def _clamp(p: float) -> float:
    return min(1.0, max(0.0, p))


def is_active_member(market: RawBinaryMarket, min_volume: float = 0.0) -> bool:
    """Open, not explicitly inactive, and traded (volume strictly above min_volume)."""
    return market.active is not False and not market.closed and market.volume_total > min_volume


def yes_price_and_token(market: RawBinaryMarket) -> tuple[float, str]:
    """(Yes probability, Yes token id). Looks the Yes label up by name.

    A member without a Yes outcome prices at 0.5 and keeps its first token.
    """
    idx = market.outcome_index("yes")
    if idx is None:
        return DEFAULT_PRICE, market.token_ids[0]
    return _clamp(market.outcome_prices[idx]), market.token_ids[idx]


def _latest(values: list[str | None]) -> str | None:
    present = [v for v in values if v]
    return max(present) if present else None


def wrap_binary_market(market: RawBinaryMarket) -> SynthesizedMarket:
    """One atomic market as a two-outcome SynthesizedMarket (its own outcomes and tokens)."""
    prices = [_clamp(p) for p in market.outcome_prices]
    tokens = [
        Token(token_id=tid, outcome_label=label, price=price, image=market.image)
        for label, price, tid in zip(market.outcome_labels, prices, market.token_ids)
    ]
    return SynthesizedMarket(
        id=market.id,
        question=market.question,
        outcomes=list(market.outcome_labels),
        outcome_prices=prices,
        tokens=tokens,
        volume=market.volume_total,
        volume_24h=market.volume_24h,
        liquidity=market.liquidity,
        category=market.category,
        end_date=market.end_date,
        active=market.active and not market.closed,
        closed=market.closed,
        slug=market.slug,
        image=market.image,
        description=market.description,
        source_ids=[market.id],
    )


def synthesize_event(
    event: EventGroup, config: EngineConfig = DEFAULT_ENGINE_CONFIG
) -> SynthesizedMarket | None:
    """Fold an event's active Yes/No members into one market, one outcome per member.

    Returns None when no member is active (open, traded). Provider placeholder
    members ("Person A", "Other") carry no volume and are dropped by that filter.
    With a single active member left, that member is returned as a plain binary
    market so every emitted market keeps at least two outcomes.
    """
    active = [m for m in event.markets if is_active_member(m, config.min_active_volume)]
    if not active:
        log.debug("event_dropped", event_id=event.event_id, reason="no_active_members")
        return None
    if len(active) == 1:
        single = wrap_binary_market(active[0])
        if single.category is None:
            single.category = event.category
        return single

    outcomes: list[str] = []
    prices: list[float] = []
    tokens: list[Token] = []
    for m in active:
        label = extract_entity_name(m.question)
        price, token_id = yes_price_and_token(m)
        outcomes.append(label)
        prices.append(price)
        tokens.append(Token(token_id=token_id, outcome_label=label, price=price, image=m.image))

    return SynthesizedMarket(
        id=event.event_id,
        question=event.title or active[0].question,
        outcomes=outcomes,
        outcome_prices=prices,
        tokens=tokens,
        volume=sum(m.volume_total for m in active),
        volume_24h=sum(m.volume_24h for m in active),
        liquidity=sum(m.liquidity for m in active),
        category=event.category or active[0].category,
        end_date=_latest([m.end_date for m in active]),
        active=any(m.active for m in event.markets),
        closed=all(m.closed for m in event.markets),
        slug=event.slug,
        image=event.image,
        description=event.description,
        source_ids=[m.id for m in active],
    )


def synthesize_item(
    item: RawBinaryMarket | EventGroup, config: EngineConfig = DEFAULT_ENGINE_CONFIG
) -> SynthesizedMarket | None:
    """Single-item path used by lookup: the same rules the refresh cycle applies.

    Groupable events are synthesized; other events resolve to their first active
    member (or first member) as a binary market; plain markets are wrapped.
    """
    if isinstance(item, RawBinaryMarket):
        return wrap_binary_market(item)
    if is_groupable(item.markets, config.max_group_size):
        return synthesize_event(item, config)
    if not item.markets:
        return None
    active = [m for m in item.markets if is_active_member(m, config.min_active_volume)]
    return wrap_binary_market((active or item.markets)[0])
