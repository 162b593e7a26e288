"""FastAPI service exposing the merged, ranked market collection."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from predagg.api.schemas import (
    ErrorResponse,
    HealthResponse,
    MarketsListResponse,
    RefreshResponse,
    SearchResponse,
)
from predagg.config import Settings, get_settings
from predagg.engine import MarketAggregator, MarketCache, MarketLookup, MarketSnapshot
from predagg.errors import NoMarketsAvailableError, NotFoundError
from predagg.ingestion.base import MarketSourceProtocol
from predagg.ingestion.polymarket import GammaMarketSource
from predagg.models import SynthesizedMarket
from predagg.ranking import filter_markets

log = structlog.get_logger(__name__)

# Set by run_api() before uvicorn imports the app.
_config_profile: str | None = None


async def _poll_refresh(aggregator: MarketAggregator, interval_sec: float, stop: asyncio.Event) -> None:
    """Refresh every interval_sec until stop is set. Failures keep the last snapshot."""
    while not stop.is_set():
        try:
            await aggregator.refresh()
        except NoMarketsAvailableError:
            log.warning("poll_refresh_empty")
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval_sec)
        except asyncio.TimeoutError:
            pass


def create_app(
    profile: str | None = None,
    source: MarketSourceProtocol | None = None,
    cache: MarketCache | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the app. ``source``, ``cache`` and ``settings`` may be injected (tests, embedding)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_settings = settings or get_settings(profile if profile is not None else _config_profile)
        owned_source = None
        market_source = source
        if market_source is None:
            owned_source = GammaMarketSource(
                base_url=app_settings.gamma_api_base,
                timeout=app_settings.request_timeout_sec,
                user_agent=app_settings.user_agent,
            )
            market_source = owned_source
        market_cache = cache if cache is not None else MarketCache()
        app.state.aggregator = MarketAggregator.from_settings(market_source, app_settings, cache=market_cache)
        app.state.lookup = MarketLookup.from_settings(market_source, market_cache, app_settings)

        poll_task = None
        poll_stop = asyncio.Event()
        if app_settings.refresh_interval_sec > 0:
            poll_task = asyncio.create_task(
                _poll_refresh(app.state.aggregator, app_settings.refresh_interval_sec, poll_stop)
            )

        yield

        if poll_task is not None:
            poll_stop.set()
            await poll_task
        if owned_source is not None:
            await owned_source.aclose()

    app = FastAPI(title="predagg API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    _register_routes(app)
    return app


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def _no_markets() -> JSONResponse:
    return _error_json("no_markets", "No markets available", status_code=503)


async def _current_snapshot(request: Request) -> MarketSnapshot | None:
    """Installed snapshot; refresh once on demand if nothing has been committed yet."""
    aggregator: MarketAggregator = request.app.state.aggregator
    snapshot = aggregator.cache.snapshot
    if snapshot.generation == 0:
        try:
            snapshot = await aggregator.refresh()
        except NoMarketsAvailableError:
            return None
    return snapshot if snapshot.available else None


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse)
    def health(request: Request) -> HealthResponse:
        snapshot = request.app.state.aggregator.cache.snapshot
        return HealthResponse(
            status="ok",
            generation=snapshot.generation,
            markets=len(snapshot.markets),
            fetched_at=snapshot.fetched_at,
        )

    @app.get(
        "/markets",
        response_model=MarketsListResponse,
        responses={503: {"model": ErrorResponse}},
    )
    async def markets_list(
        request: Request,
        limit: int = Query(100, ge=1, le=500),
        offset: int = Query(0, ge=0),
        category: str | None = Query(None),
        q: str | None = Query(None, description="Filter on question, description and outcomes"),
    ):
        """Merged collection, synthesized multi-outcome markets first."""
        snapshot = await _current_snapshot(request)
        if snapshot is None:
            return _no_markets()
        markets = filter_markets(snapshot.markets, category=category, query=q)
        return MarketsListResponse(
            markets=markets[offset : offset + limit],
            total=len(markets),
            generation=snapshot.generation,
            fetched_at=snapshot.fetched_at,
        )

    @app.get("/markets/trending", response_model=MarketsListResponse, responses={503: {"model": ErrorResponse}})
    async def markets_trending(request: Request, limit: int = Query(100, ge=1, le=100)):
        snapshot = await _current_snapshot(request)
        if snapshot is None:
            return _no_markets()
        markets = list(snapshot.trending[:limit])
        return MarketsListResponse(
            markets=markets, total=len(markets), generation=snapshot.generation, fetched_at=snapshot.fetched_at
        )

    @app.get("/markets/profitable", response_model=MarketsListResponse, responses={503: {"model": ErrorResponse}})
    async def markets_profitable(request: Request, limit: int = Query(100, ge=1, le=100)):
        snapshot = await _current_snapshot(request)
        if snapshot is None:
            return _no_markets()
        markets = list(snapshot.profitable[:limit])
        return MarketsListResponse(
            markets=markets, total=len(markets), generation=snapshot.generation, fetched_at=snapshot.fetched_at
        )

    @app.get("/markets/{market_id}", response_model=SynthesizedMarket, responses={404: {"model": ErrorResponse}})
    async def market_detail(request: Request, market_id: str):
        """Event id, condition id or slug."""
        lookup: MarketLookup = request.app.state.lookup
        try:
            return await lookup.find_by_id(market_id)
        except NotFoundError:
            return _error_json("not_found", f"Market not found: {market_id}")

    @app.get("/search", response_model=SearchResponse)
    async def search(request: Request, q: str = Query(..., min_length=1)) -> SearchResponse:
        markets = await request.app.state.aggregator.search(q)
        return SearchResponse(query=q, markets=markets, total=len(markets))

    @app.post("/refresh", response_model=RefreshResponse, responses={503: {"model": ErrorResponse}})
    async def refresh(request: Request):
        try:
            snapshot = await request.app.state.aggregator.refresh()
        except NoMarketsAvailableError:
            return _no_markets()
        return RefreshResponse(
            generation=snapshot.generation,
            markets=len(snapshot.markets),
            trending=len(snapshot.trending),
            profitable=len(snapshot.profitable),
            fetched_at=snapshot.fetched_at,
        )


app = create_app()


def run_api(host: str = "127.0.0.1", port: int = 8000, profile: str | None = None) -> None:
    global _config_profile
    _config_profile = profile
    import uvicorn
    uvicorn.run("predagg.api.main:app", host=host, port=port, reload=False)
