"""predagg - Polymarket market aggregation, multi-outcome synthesis and ranking."""

__version__ = "0.1.0"
