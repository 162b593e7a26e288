"""Canonical schema (Pydantic) - raw provider records and synthesized view-models."""

from predagg.models.market import EventGroup, RawBinaryMarket, SynthesizedMarket, Token

__all__ = [
    "RawBinaryMarket",
    "EventGroup",
    "SynthesizedMarket",
    "Token",
]
