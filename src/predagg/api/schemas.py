"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from predagg.models import SynthesizedMarket


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"
    generation: int = 0
    markets: int = 0
    fetched_at: float | None = None


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. no_markets, not_found")


# --- Markets ---
class MarketsListResponse(BaseModel):
    markets: list[SynthesizedMarket]
    total: int
    generation: int = Field(0, description="Refresh generation the list was taken from")
    fetched_at: float | None = None


class SearchResponse(BaseModel):
    query: str
    markets: list[SynthesizedMarket]
    total: int


class RefreshResponse(BaseModel):
    generation: int
    markets: int
    trending: int
    profitable: int
    fetched_at: float | None = None
