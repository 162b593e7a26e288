"""Error taxonomy for fetching, parsing and lookup."""

from __future__ import annotations


class PredaggError(Exception):
    """Base class for all predagg errors."""


class FetchFailure(PredaggError):
    """HTTP, network, timeout or invalid-JSON failure on one provider endpoint."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"{endpoint}: {reason}")
        self.endpoint = endpoint
        self.reason = reason


class MalformedMarketError(PredaggError):
    """A raw provider record cannot be turned into a RawBinaryMarket."""


class NotFoundError(PredaggError):
    """Market lookup exhausted every source without a match."""

    def __init__(self, market_id: str) -> None:
        super().__init__(f"market not found: {market_id}")
        self.market_id = market_id


class NoMarketsAvailableError(PredaggError):
    """Both source endpoints came back empty during a refresh."""
