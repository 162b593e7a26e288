"""Outcome label extraction from free-text market questions.

Gamma sub-markets carry no structured per-outcome name, only a question such as
"Will the Lakers win the NBA Finals?". The label shown for that outcome in a
synthesized market ("Lakers") is recovered by an ordered table of pattern
rules: the first rule whose pattern matches produces the label, and nothing
after it is consulted. More specific phrasings sit above more general ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

MAX_LABEL_LENGTH = 50
ELLIPSIS = "..."

_PRICE = r"\$\d[\d,]*(?:\.\d+)?[kmbt]?\b"
_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?"
_SUBJECT = r"^will\s+(?:the\s+)?(?P<subject>.+?)"

_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_WILL_RE = re.compile(r"^will\s+(?:the\s+)?", re.IGNORECASE)


@dataclass(frozen=True)
class ExtractionRule:
    """One (pattern, transform) entry of the extraction table."""

    name: str
    pattern: re.Pattern[str]
    extract: Callable[[re.Match[str]], str]

    def apply(self, question: str) -> str | None:
        """Label for question, or None when the pattern does not match."""
        m = self.pattern.search(question)
        if m is None:
            return None
        return self.extract(m)


def _literal(text: str) -> Callable[[re.Match[str]], str]:
    return lambda m: text


def _group(name: str) -> Callable[[re.Match[str]], str]:
    return lambda m: m.group(name)


def _format_price(text: str) -> str:
    """'$100k' -> '$100K'; plain amounts are kept as written."""
    text = text.strip()
    if text and text[-1] in "kmbt":
        return text[:-1] + text[-1].upper()
    return text


def _price_range(m: re.Match[str]) -> str:
    return f"{_format_price(m.group('low'))}-{_format_price(m.group('high'))}"


def _price_with(prefix: str) -> Callable[[re.Match[str]], str]:
    return lambda m: f"{prefix}{_format_price(m.group('price'))}"


def _rule(
    name: str,
    pattern: str,
    extract: Callable[[re.Match[str]], str],
    flags: int = re.IGNORECASE,
) -> ExtractionRule:
    return ExtractionRule(name=name, pattern=re.compile(pattern, flags), extract=extract)


RULES: tuple[ExtractionRule, ...] = (
    _rule("draw", r"\bdraw\b|\bend\s+in\s+a\s+tie\b", _literal("Draw")),
    _rule("negated_win", r"\bnot\s+win\b", _literal("Not win")),
    _rule(
        "superlative",
        _SUBJECT + r"\s+(?:have|has|be|win|get)\s+the\s+"
        r"(?:largest|biggest|most|highest|lowest|smallest|fewest|best|worst)\b",
        _group("subject"),
    ),
    _rule(
        "margin_range",
        r"\bwin\s+by\s+(?P<range>\d+(?:\.\d+)?%?\s*[-–]\s*\d+(?:\.\d+)?%?"
        r"(?:\s+(?:points?|pts|goals?|runs?|seats?|votes?|percent|percentage\s+points))?)",
        _group("range"),
    ),
    _rule(
        "count",
        r"\bwin\s+(?P<count>(?:at\s+least\s+|more\s+than\s+|fewer\s+than\s+|exactly\s+)?"
        r"(?!(?:19|20)\d\d\b)\d+(?:\+|\s*[-–]\s*\d+)?\s+(?:or\s+more\s+)?[a-z][a-z-]*)",
        _group("count"),
    ),
    _rule(
        "ordinal_placement",
        _SUBJECT + r"\s+finish\s+(?:in\s+)?(?:the\s+)?"
        r"(?:1st|2nd|3rd|\d+th|first|second|third|fourth|fifth|last|top\s+\d+)\b",
        _group("subject"),
    ),
    # Place names are matched case-sensitively on their capitals
    _rule(
        "geographic",
        r"\b[Ww]in\s+(?P<place>[A-Z][\w.'-]*(?:\s+[A-Z][\w.'-]*)*)\s+in\s+the\b",
        _group("place"),
        flags=0,
    ),
    _rule("price_between", rf"\bbetween\s+(?P<low>{_PRICE})\s+and\s+(?P<high>{_PRICE})", _price_range),
    _rule(
        "price_below",
        rf"\b(?:less\s+than|lower\s+than|below|under)\s+(?P<price>{_PRICE})",
        _price_with("<"),
    ),
    _rule(
        "price_above",
        rf"\b(?:more\s+than|greater\s+than|higher\s+than|above|over)\s+(?P<price>{_PRICE})",
        _price_with(">"),
    ),
    _rule(
        "no_endorsement",
        r"\bendorse\s+(?:no\s+one|nobody|no\s+candidate)\b|\bnot\s+endorse\b|\bno\s+endorsement\b",
        _literal("No endorsement"),
    ),
    _rule(
        "endorsement",
        r"\bendorse\s+(?:the\s+)?(?P<endorsee>.+?)(?=\s+(?:for|in|before|by|as|on)\b|\?|$)",
        _group("endorsee"),
    ),
    _rule(
        "dated_win",
        _SUBJECT + rf"\s+win\b.*?\b(?:on|by|before)\s+"
        rf"(?:{_MONTH}\s+\d{{1,2}}|\d{{1,2}}/\d{{1,2}}|\d{{4}}-\d{{2}}-\d{{2}})",
        _group("subject"),
    ),
    _rule(
        "generic_subject",
        _SUBJECT + r"\s+(?:win|be\s+elected|be\s+the|become)\b",
        _group("subject"),
    ),
    _rule(
        "price_target_up",
        rf"\b(?:reach|hit|exceed|surpass|rise\s+to|climb\s+to)\s+(?P<price>{_PRICE})",
        _price_with("↑ "),
    ),
    _rule(
        "price_target_down",
        rf"\b(?:dip|drop|fall|sink|crash)\s+(?:to\s+)?(?P<price>{_PRICE})",
        _price_with("↓ "),
    ),
)


def _clean(label: str) -> str:
    label = _WHITESPACE_RE.sub(" ", label).strip()
    return label.strip(" ?.,!;:\"'")


def _truncate(label: str, max_length: int = MAX_LABEL_LENGTH) -> str:
    if len(label) <= max_length:
        return label
    return label[: max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS


def fallback_label(question: str) -> str:
    """Question minus leading 'Will [the]' and trailing '?', at most 50 chars."""
    text = _WHITESPACE_RE.sub(" ", question or "").strip()
    text = _LEADING_WILL_RE.sub("", text)
    text = text.rstrip("?").strip()
    if not text:
        text = _WHITESPACE_RE.sub(" ", question or "").strip() or "Unknown"
    return _truncate(text)


def match_rule(question: str, rules: tuple[ExtractionRule, ...] = RULES) -> ExtractionRule | None:
    """First rule whose pattern matches question, or None (fallback applies)."""
    text = _WHITESPACE_RE.sub(" ", question or "").strip()
    for rule in rules:
        if rule.pattern.search(text) is not None:
            return rule
    return None


def extract_entity_name(question: str, rules: tuple[ExtractionRule, ...] = RULES) -> str:
    """Short outcome label for a sub-market question. Always non-empty.

    >>> extract_entity_name("Will the Lakers win the NBA Finals?")
    'Lakers'
    """
    text = _WHITESPACE_RE.sub(" ", question or "").strip()
    for rule in rules:
        label = rule.apply(text)
        if label is None:
            continue
        label = _clean(label)
        return _truncate(label) if label else fallback_label(text)
    return fallback_label(text)
