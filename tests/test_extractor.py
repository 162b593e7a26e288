"""Outcome label extraction rule table."""

import pytest

from predagg.synthesis.extractor import (
    MAX_LABEL_LENGTH,
    RULES,
    extract_entity_name,
    fallback_label,
    match_rule,
)


def test_documented_examples():
    assert extract_entity_name("Will the Lakers win the NBA Finals?") == "Lakers"
    assert extract_entity_name("Will Team A win by 10-15 points?") == "10-15 points"
    assert extract_entity_name("Will there be a draw?") == "Draw"


def test_rule_table_order():
    assert [r.name for r in RULES] == [
        "draw",
        "negated_win",
        "superlative",
        "margin_range",
        "count",
        "ordinal_placement",
        "geographic",
        "price_between",
        "price_below",
        "price_above",
        "no_endorsement",
        "endorsement",
        "dated_win",
        "generic_subject",
        "price_target_up",
        "price_target_down",
    ]


@pytest.mark.parametrize(
    "question, rule, label",
    [
        ("Will Juventus vs. Milan end in a draw?", "draw", "Draw"),
        ("Will Spain not win the World Cup?", "negated_win", "Not win"),
        ("Will the Democrats have the largest share of seats?", "superlative", "Democrats"),
        ("Will Nvidia be the largest company in the world?", "superlative", "Nvidia"),
        ("Will Candidate X win by 5%-10%?", "margin_range", "5%-10%"),
        ("Will the Lakers win 50 games?", "count", "50 games"),
        ("Will Ferrari finish second?", "ordinal_placement", "Ferrari"),
        ("Will the Democrats win Arizona in the 2024 election?", "geographic", "Arizona"),
        ("Will the GOP win North Carolina in the Senate race?", "geographic", "North Carolina"),
        ("Will Bitcoin be between $90,000 and $95,000 on Friday?", "price_between", "$90,000-$95,000"),
        ("Will the price of Ethereum be less than $2,500 on June 1?", "price_below", "<$2,500"),
        ("Will Bitcoin close above $100k?", "price_above", ">$100K"),
        ("Will Trump endorse no one?", "no_endorsement", "No endorsement"),
        ("Will Trump endorse Smith for governor?", "endorsement", "Smith"),
        ("Will Arsenal win on March 5?", "dated_win", "Arsenal"),
        ("Will Gavin Newsom be elected President?", "generic_subject", "Gavin Newsom"),
        ("Will Real Madrid win the Champions League in the 2025 season?", "generic_subject", "Real Madrid"),
        ("Will Bitcoin reach $150,000 in December?", "price_target_up", "↑ $150,000"),
        ("Will Ethereum dip to $1,800 in March?", "price_target_down", "↓ $1,800"),
    ],
)
def test_each_rule(question, rule, label):
    matched = match_rule(question)
    assert matched is not None
    assert matched.name == rule
    assert extract_entity_name(question) == label


def test_first_matching_rule_wins():
    # Both the draw rule and the negated rule match; draw sits higher.
    assert extract_entity_name("Will there be a draw or will Spain not win?") == "Draw"


def test_year_is_not_a_count():
    assert match_rule("Will Trump win 2028 election?").name == "generic_subject"
    assert extract_entity_name("Will Trump win 2028 election?") == "Trump"


def test_fallback_strips_will_and_question_mark():
    assert match_rule("Will inflation cool this year?") is None
    assert extract_entity_name("Will inflation cool this year?") == "inflation cool this year"
    assert extract_entity_name("Will the Fed cut rates?") == "Fed cut rates"


def test_fallback_truncates_with_ellipsis():
    question = "Will " + "a very long question about something unusual " * 3 + "?"
    label = extract_entity_name(question)
    assert len(label) <= MAX_LABEL_LENGTH
    assert label.endswith("...")


@pytest.mark.parametrize("question", ["", "   ", "?", "Will the?"])
def test_always_non_empty(question):
    assert extract_entity_name(question)
    assert fallback_label(question)


def test_whitespace_is_normalized():
    assert extract_entity_name("  Will   the Lakers\n win the NBA Finals?  ") == "Lakers"


def test_deterministic():
    q = "Will the GOP win North Carolina in the Senate race?"
    assert extract_entity_name(q) == extract_entity_name(q)


def test_competition_phrasing_keeps_distinct_team_labels():
    questions = [
        "Will Real Madrid win the Champions League in the 2025 season?",
        "Will Arsenal win the Champions League in the 2025 season?",
        "Will Bayern Munich win the Champions League in the 2025 season?",
    ]
    assert [extract_entity_name(q) for q in questions] == ["Real Madrid", "Arsenal", "Bayern Munich"]
