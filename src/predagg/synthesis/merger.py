"""Merge synthesized event markets with the volume-ranked atomic markets, deduplicated."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from predagg.models import RawBinaryMarket, SynthesizedMarket
from predagg.synthesis.synthesizer import wrap_binary_market

log = structlog.get_logger(__name__)


def merge_markets(
    trending: Sequence[RawBinaryMarket],
    synthesized: Sequence[SynthesizedMarket],
    standalone: Iterable[RawBinaryMarket] = (),
) -> list[SynthesizedMarket]:
    """Synthesized markets first, then trending markets not folded into them, in order.

    ``standalone`` (members of events that could not be grouped) is appended
    last under the same rule. No condition id is emitted twice.
    """
    seen: set[str] = set()
    merged: list[SynthesizedMarket] = []

    for market in synthesized:
        ids = set(market.source_ids)
        if ids & seen:
            log.debug("merge_skip_duplicate", market_id=market.id)
            continue
        seen |= ids
        merged.append(market)

    skipped = 0
    for raw in [*trending, *standalone]:
        if raw.id in seen:
            skipped += 1
            continue
        seen.add(raw.id)
        merged.append(wrap_binary_market(raw))

    log.debug("merged", synthesized=len(synthesized), total=len(merged), deduplicated=skipped)
    return merged
