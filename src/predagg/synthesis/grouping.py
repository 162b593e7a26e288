"""Decide whether an event's binary sub-markets form one multi-outcome market."""

from __future__ import annotations

from collections.abc import Sequence

from predagg.models import RawBinaryMarket

MIN_GROUP_SIZE = 2
MAX_GROUP_SIZE = 25

_YES_NO = frozenset({"yes", "no"})


def is_yes_no_market(market: RawBinaryMarket) -> bool:
    """Exactly two outcomes labelled Yes and No (any case)."""
    labels = [label.strip().lower() for label in market.outcome_labels]
    return len(labels) == 2 and set(labels) == _YES_NO


def is_groupable(members: Sequence[RawBinaryMarket], max_size: int = MAX_GROUP_SIZE) -> bool:
    """All-or-nothing: 2..max_size members, every one a strict Yes/No market."""
    if len(members) < MIN_GROUP_SIZE or len(members) > max_size:
        return False
    return all(is_yes_no_market(m) for m in members)
