"""RawBinaryMarket, EventGroup, Token, SynthesizedMarket - canonical entities."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class RawBinaryMarket(BaseModel):
    """One atomic two-outcome market as returned by the provider, normalized."""

    id: str  # condition id, falling back to the provider's numeric id
    gamma_id: str | None = None
    question: str = ""
    outcome_labels: tuple[str, str] = ("Yes", "No")
    outcome_prices: tuple[float, float] = (0.5, 0.5)
    token_ids: tuple[str, str]
    volume_total: float = 0.0
    volume_24h: float = 0.0
    liquidity: float = 0.0
    end_date: str | None = None
    active: bool = True
    closed: bool = False
    slug: str | None = None
    category: str | None = None
    image: str | None = None
    description: str | None = None

    def outcome_index(self, label: str) -> int | None:
        """Index of an outcome label (case-insensitive), or None."""
        wanted = label.strip().lower()
        for i, name in enumerate(self.outcome_labels):
            if name.strip().lower() == wanted:
                return i
        return None


class EventGroup(BaseModel):
    """Provider event grouping related binary markets under one topic."""

    event_id: str
    title: str = ""
    slug: str | None = None
    category: str | None = None
    image: str | None = None
    description: str | None = None
    markets: list[RawBinaryMarket] = Field(default_factory=list)


class Token(BaseModel):
    """Tradable outcome token owned by one synthesized market."""

    token_id: str
    outcome_label: str
    price: float = Field(..., ge=0, le=1, description="Probability/price in [0, 1]")
    image: str | None = None


class SynthesizedMarket(BaseModel):
    """View-model market emitted by the engine (binary or multi-outcome)."""

    id: str
    question: str = ""
    outcomes: list[str] = Field(default_factory=list)
    outcome_prices: list[float] = Field(default_factory=list)
    tokens: list[Token] = Field(default_factory=list)
    volume: float = 0.0
    volume_24h: float = 0.0
    liquidity: float = 0.0
    category: str | None = None
    end_date: str | None = None
    active: bool = True
    closed: bool = False
    slug: str | None = None
    image: str | None = None
    description: str | None = None
    source_ids: list[str] = Field(default_factory=list)  # condition ids folded in

    @model_validator(mode="after")
    def _check_parallel_arrays(self) -> SynthesizedMarket:
        if len(self.outcomes) < 2:
            raise ValueError("a market needs at least two outcomes")
        if len(self.outcome_prices) != len(self.outcomes):
            raise ValueError("outcome_prices must parallel outcomes")
        if any(p < 0 or p > 1 for p in self.outcome_prices):
            raise ValueError("outcome prices must lie in [0, 1]")
        if self.tokens and len(self.tokens) != len(self.outcomes):
            raise ValueError("tokens must parallel outcomes")
        return self

    @property
    def is_multi_outcome(self) -> bool:
        return len(self.outcomes) > 2

    def matches_id(self, market_id: str) -> bool:
        """True if market_id names this market, one of its members, or its slug."""
        if not market_id:
            return False
        return market_id == self.id or market_id in self.source_ids or market_id == self.slug
