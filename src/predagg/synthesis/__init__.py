"""Outcome label extraction, groupability, multi-outcome synthesis and merge."""

from predagg.synthesis.extractor import RULES, ExtractionRule, extract_entity_name, match_rule
from predagg.synthesis.grouping import MAX_GROUP_SIZE, is_groupable
from predagg.synthesis.merger import merge_markets
from predagg.synthesis.synthesizer import synthesize_event, synthesize_item, wrap_binary_market

__all__ = [
    "RULES",
    "ExtractionRule",
    "MAX_GROUP_SIZE",
    "extract_entity_name",
    "is_groupable",
    "match_rule",
    "merge_markets",
    "synthesize_event",
    "synthesize_item",
    "wrap_binary_market",
]
