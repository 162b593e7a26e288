"""Merge of synthesized event markets with trending atomic markets."""

from predagg.synthesis.merger import merge_markets
from predagg.synthesis.synthesizer import synthesize_event
from tests.factories import event, raw_market


def _synth():
    ev = event(
        "ev1",
        "Who wins?",
        [raw_market("c1", "Will Alice win?"), raw_market("c2", "Will Bob win?"), raw_market("c3", "Will Carl win?")],
    )
    return synthesize_event(ev)


def test_synthesized_first_then_remaining_trending_in_order():
    synth = _synth()
    trending = [raw_market("t1"), raw_market("c2"), raw_market("t2"), raw_market("t3")]
    merged = merge_markets(trending, [synth])
    assert [m.id for m in merged] == ["ev1", "t1", "t2", "t3"]


def test_no_condition_id_twice():
    synth = _synth()
    trending = [raw_market("c1"), raw_market("t1"), raw_market("t1"), raw_market("c3")]
    standalone = [raw_market("t1"), raw_market("s1"), raw_market("c2")]
    merged = merge_markets(trending, [synth], standalone)
    ids = [cid for m in merged for cid in m.source_ids]
    assert len(ids) == len(set(ids))
    assert [m.id for m in merged] == ["ev1", "t1", "s1"]


def test_trending_wrapped_as_binary():
    merged = merge_markets([raw_market("t1", yes=0.35)], [])
    assert len(merged) == 1
    only = merged[0]
    assert only.outcomes == ["Yes", "No"]
    assert only.outcome_prices == [0.35, 0.65]
    assert len(only.tokens) == 2


def test_dropped_event_contributes_nothing():
    ev = event("ev0", "Placeholder", [raw_market(f"p{i}", volume=0) for i in range(3)])
    synthesized = [m for m in [synthesize_event(ev)] if m is not None]
    assert merge_markets([], synthesized) == []


def test_overlapping_synthesized_markets_keep_first():
    a = _synth()
    b = a.model_copy(update={"id": "ev-dup"})
    merged = merge_markets([], [a, b])
    assert [m.id for m in merged] == ["ev1"]


def test_event_id_does_not_consume_matching_market_id():
    # Market without a condition id falls back to its numeric Gamma id
    ev = event("777", "Who wins?", [raw_market("c1", "Will Alice win?"), raw_market("c2", "Will Bob win?")])
    merged = merge_markets([raw_market("777")], [synthesize_event(ev)])
    assert [m.source_ids for m in merged] == [["c1", "c2"], ["777"]]
