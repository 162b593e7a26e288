"""Multi-outcome synthesis from event members."""

import pytest

from predagg.config import EngineConfig
from predagg.synthesis.synthesizer import (
    synthesize_event,
    synthesize_item,
    wrap_binary_market,
    yes_price_and_token,
)
from tests.factories import event, raw_market


def _election():
    return event(
        "ev1",
        "Who will win the election?",
        [
            raw_market("c1", "Will Alice Adams win the election?", yes=0.55, volume=5000, volume_24h=500, liquidity=10),
            raw_market("c2", "Will Bob Brown win the election?", yes=0.30, volume=3000, volume_24h=300, liquidity=20),
            raw_market("c3", "Will Carol Cruz win the election?", yes=0.15, volume=1000, volume_24h=100, liquidity=30),
        ],
        category="Politics",
    )


def test_synthesizes_one_outcome_per_member():
    m = synthesize_event(_election())
    assert m is not None
    assert m.id == "ev1"
    assert m.question == "Who will win the election?"
    assert m.outcomes == ["Alice Adams", "Bob Brown", "Carol Cruz"]
    assert m.outcome_prices == [0.55, 0.30, 0.15]
    assert [t.token_id for t in m.tokens] == ["c1-t0", "c2-t0", "c3-t0"]
    assert [t.outcome_label for t in m.tokens] == m.outcomes
    assert m.volume == 9000
    assert m.volume_24h == 900
    assert m.liquidity == 60
    assert m.category == "Politics"
    assert m.source_ids == ["c1", "c2", "c3"]
    assert m.active and not m.closed
    assert m.is_multi_outcome


def test_zero_volume_member_is_dropped_not_defaulted():
    ev = _election()
    ev.markets[1] = raw_market("c2", "Will Person B win the election?", volume=0)
    m = synthesize_event(ev)
    assert m is not None
    assert len(m.outcomes) == 2
    assert "c2" not in m.source_ids
    assert m.outcomes == ["Alice Adams", "Carol Cruz"]


def test_all_zero_volume_event_is_dropped():
    ev = event("ev2", "Placeholder", [raw_market(f"p{i}", volume=0) for i in range(3)])
    assert synthesize_event(ev) is None


def test_closed_and_inactive_members_are_dropped():
    ev = _election()
    ev.markets[0] = raw_market("c1", "Will Alice Adams win the election?", closed=True)
    ev.markets[1] = raw_market("c2", "Will Bob Brown win the election?", active=False)
    m = synthesize_event(ev)
    # One member left: emitted as a plain binary market
    assert m is not None
    assert m.id == "c3"
    assert m.outcomes == ["Yes", "No"]
    assert m.category == "Politics"


def test_yes_price_looked_up_by_label_not_position():
    member = raw_market("x", labels=("No", "Yes"), yes=0.2)  # No=0.2, Yes=0.8
    price, token = yes_price_and_token(member)
    assert price == pytest.approx(0.8)
    assert token == "x-t1"


def test_member_without_yes_defaults_to_half_and_is_kept():
    ev = event(
        "ev3",
        "Match winner",
        [
            raw_market("a", "Will Lakers win?", yes=0.7),
            raw_market("b", "Will Celtics win?", labels=("Over", "Under"), yes=0.9),
        ],
    )
    m = synthesize_event(ev)
    assert m is not None
    assert m.outcome_prices == [0.7, 0.5]
    assert m.tokens[1].token_id == "b-t0"


def test_prices_within_unit_interval():
    m = synthesize_event(_election())
    assert all(0 <= p <= 1 for p in m.outcome_prices)
    assert all(0 <= t.price <= 1 for t in m.tokens)


def test_question_falls_back_to_first_member():
    ev = _election()
    ev.title = ""
    assert synthesize_event(ev).question == "Will Alice Adams win the election?"


def test_idempotent():
    ev = _election()
    assert synthesize_event(ev) == synthesize_event(ev)


def test_min_active_volume_is_configurable():
    cfg = EngineConfig(min_active_volume=2000)
    m = synthesize_event(_election(), cfg)
    assert m.source_ids == ["c1", "c2"]


def test_wrap_binary_market_keeps_own_outcomes():
    raw = raw_market("solo", "Will it rain?", yes=0.25, labels=("Yes", "No"))
    m = wrap_binary_market(raw)
    assert m.id == "solo"
    assert m.outcomes == ["Yes", "No"]
    assert m.outcome_prices == [0.25, 0.75]
    assert [t.token_id for t in m.tokens] == ["solo-t0", "solo-t1"]
    assert m.source_ids == ["solo"]


def test_synthesize_item_paths():
    assert synthesize_item(raw_market("solo")).id == "solo"
    assert synthesize_item(_election()).id == "ev1"
    ungroupable = event(
        "ev4",
        "Lakers vs Celtics",
        [raw_market("g1", labels=("Lakers", "Celtics")), raw_market("g2", labels=("Over", "Under"))],
    )
    assert synthesize_item(ungroupable).id == "g1"
    assert synthesize_item(event("ev5", "Empty", [])) is None
