"""Polymarket Gamma API source."""

from predagg.ingestion.polymarket.gamma import GAMMA_API_BASE, GammaMarketSource

__all__ = ["GAMMA_API_BASE", "GammaMarketSource"]
