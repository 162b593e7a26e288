"""Gamma API JSON -> canonical RawBinaryMarket / EventGroup.

Gamma returns ``outcomes``, ``outcomePrices`` and ``clobTokenIds`` either as
JSON-encoded strings or as plain arrays, and spells ids and volumes several
ways. Everything is normalized here so the rest of the package only ever sees
the strict models.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from predagg.errors import MalformedMarketError
from predagg.models import EventGroup, RawBinaryMarket

log = structlog.get_logger(__name__)

DEFAULT_OUTCOME_LABELS = ("Yes", "No")
DEFAULT_OUTCOME_PRICES = (0.5, 0.5)


def normalize_condition_id(s: str) -> str:
    """Canonicalize condition_id for matching (Gamma uses 0x + 64 hex, case varies)."""
    s = (s or "").strip()
    if not s:
        return s
    if s.startswith("0x"):
        return "0x" + s[2:].lower()
    return s.lower() if len(s) == 64 and all(c in "0123456789abcdefABCDEF" for c in s) else s


def _float(s: str | float | None) -> float:
    if s is None:
        return 0.0
    try:
        return float(s)
    except (TypeError, ValueError):
        return 0.0


def _json_list(value: str | list[Any] | None) -> list[Any] | None:
    """Decode a field that may be a JSON-encoded array or an array. None if unusable."""
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value:
        try:
            decoded = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return None
        return decoded if isinstance(decoded, list) else None
    return None


def _clamp_price(p: float) -> float:
    return min(1.0, max(0.0, p))


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def parse_raw_market(raw: dict[str, Any]) -> RawBinaryMarket:
    """Convert a Gamma market object to RawBinaryMarket.

    Unparseable outcome labels default to Yes/No and unparseable prices to
    0.5/0.5. Raises MalformedMarketError when the record has no id, does not
    have exactly two outcomes, has a price list of the wrong length, or carries
    no token ids (such a market is not tradable).
    """
    if not isinstance(raw, dict):
        raise MalformedMarketError("market record is not an object")
    condition_id = normalize_condition_id(
        str(raw.get("conditionId") or raw.get("condition_id") or "")
    )
    gamma_id = _optional_str(raw.get("id"))
    market_id = condition_id or gamma_id
    if not market_id:
        raise MalformedMarketError("market has no condition id or id")

    labels = _json_list(raw.get("outcomes"))
    if labels is None:
        labels = list(DEFAULT_OUTCOME_LABELS)
    if len(labels) != 2:
        raise MalformedMarketError(f"{market_id}: expected 2 outcomes, got {len(labels)}")

    prices_raw = _json_list(raw.get("outcomePrices") or raw.get("outcome_prices"))
    if prices_raw is None:
        prices = list(DEFAULT_OUTCOME_PRICES)
    elif len(prices_raw) != 2:
        raise MalformedMarketError(f"{market_id}: expected 2 prices, got {len(prices_raw)}")
    else:
        prices = [_clamp_price(_float(p)) for p in prices_raw]

    token_ids = _json_list(raw.get("clobTokenIds") or raw.get("clob_token_ids"))
    if not token_ids or len(token_ids) != 2 or not all(token_ids):
        raise MalformedMarketError(f"{market_id}: missing clob token ids")

    volume_total = _float(raw.get("volumeNum") or raw.get("volume"))
    volume_24h = _float(raw.get("volume24hr") or raw.get("volume_24hr"))
    liquidity = _float(raw.get("liquidityNum") or raw.get("liquidity"))
    return RawBinaryMarket(
        id=market_id,
        gamma_id=gamma_id,
        question=str(raw.get("question") or ""),
        outcome_labels=(str(labels[0]), str(labels[1])),
        outcome_prices=(prices[0], prices[1]),
        token_ids=(str(token_ids[0]), str(token_ids[1])),
        volume_total=volume_total,
        volume_24h=volume_24h,
        liquidity=liquidity,
        end_date=_optional_str(raw.get("end_date_iso") or raw.get("endDateIso") or raw.get("endDate")),
        active=raw.get("active") is not False,
        closed=bool(raw.get("closed", False)),
        slug=_optional_str(raw.get("slug")),
        category=_optional_str(raw.get("category")),
        image=_optional_str(raw.get("image") or raw.get("icon")),
        description=_optional_str(raw.get("description")),
    )


def parse_markets(rows: list[Any]) -> list[RawBinaryMarket]:
    """Parse a list of market objects, skipping malformed records."""
    markets = []
    for row in rows:
        try:
            markets.append(parse_raw_market(row))
        except MalformedMarketError as e:
            log.warning("skip_market", error=str(e))
    return markets


def is_event_payload(raw: Any) -> bool:
    """Gamma single-item responses are events when they carry a ``markets`` array."""
    return isinstance(raw, dict) and isinstance(raw.get("markets"), list)


def parse_event_group(raw: dict[str, Any]) -> EventGroup | None:
    """Convert a Gamma event object to EventGroup. None when it has no id."""
    if not isinstance(raw, dict):
        return None
    event_id = _optional_str(raw.get("id") or raw.get("event_id"))
    if not event_id:
        log.warning("skip_event", reason="missing_id", slug=raw.get("slug"))
        return None
    category = _optional_str(raw.get("category"))
    members = parse_markets(raw.get("markets") or [])
    for m in members:
        # Members inherit the event category when they carry none
        if m.category is None and category is not None:
            m.category = category
    return EventGroup(
        event_id=event_id,
        title=str(raw.get("title") or ""),
        slug=_optional_str(raw.get("slug")),
        category=category,
        image=_optional_str(raw.get("image") or raw.get("icon")),
        description=_optional_str(raw.get("description")),
        markets=members,
    )


def parse_event_groups(rows: list[Any]) -> list[EventGroup]:
    groups = []
    for row in rows:
        group = parse_event_group(row)
        if group is not None:
            groups.append(group)
    return groups
