"""Groupability of event members."""

from predagg.synthesis.grouping import MAX_GROUP_SIZE, is_groupable, is_yes_no_market
from tests.factories import raw_market


def test_needs_at_least_two_members():
    assert not is_groupable([])
    assert not is_groupable([raw_market("a")])
    assert is_groupable([raw_market("a"), raw_market("b")])


def test_yes_no_labels_case_insensitive_any_order():
    members = [
        raw_market("a", labels=("YES", "no")),
        raw_market("b", labels=("No", "Yes")),
    ]
    assert is_groupable(members)


def test_one_non_yes_no_member_disqualifies_group():
    members = [
        raw_market("a"),
        raw_market("b"),
        raw_market("c", labels=("Lakers", "Celtics")),
    ]
    assert not is_yes_no_market(members[2])
    assert not is_groupable(members)


def test_size_cap():
    members = [raw_market(f"m{i}") for i in range(MAX_GROUP_SIZE)]
    assert is_groupable(members)
    members.append(raw_market("one-too-many"))
    assert not is_groupable(members)
    assert is_groupable(members, max_size=MAX_GROUP_SIZE + 1)
