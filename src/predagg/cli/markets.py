"""Markets subcommand: list, trending, profitable, show, search."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer

from predagg.config import Settings
from predagg.engine import MarketAggregator, MarketCache, MarketLookup, MarketSnapshot
from predagg.errors import NoMarketsAvailableError, NotFoundError
from predagg.ingestion.polymarket import GammaMarketSource
from predagg.models import SynthesizedMarket
from predagg.ranking import filter_markets

app = typer.Typer(help="Fetch, synthesize and rank markets")

T = TypeVar("T")


def _run(settings: Settings, job: Callable[[MarketAggregator, MarketLookup], Awaitable[T]]) -> T:
    """Run job against a fresh source and cache, closing the HTTP client afterwards."""

    async def runner() -> T:
        async with GammaMarketSource(
            base_url=settings.gamma_api_base,
            timeout=settings.request_timeout_sec,
            user_agent=settings.user_agent,
        ) as source:
            cache = MarketCache()
            aggregator = MarketAggregator.from_settings(source, settings, cache=cache)
            lookup = MarketLookup.from_settings(source, cache, settings)
            return await job(aggregator, lookup)

    return asyncio.run(runner())


def _refresh_or_exit(settings: Settings) -> MarketSnapshot:
    async def job(aggregator: MarketAggregator, lookup: MarketLookup) -> MarketSnapshot:
        return await aggregator.refresh()

    try:
        return _run(settings, job)
    except NoMarketsAvailableError:
        typer.echo("No markets available (Gamma API returned nothing).")
        raise typer.Exit(code=1)


def _echo_rows(markets: list[SynthesizedMarket] | tuple[SynthesizedMarket, ...]) -> None:
    for m in markets:
        question = (m.question or "")[:60]
        kind = f"{len(m.outcomes)}-way" if m.is_multi_outcome else "binary"
        typer.echo(f"  {m.id[:20]:<20}  {m.volume_24h:>12.0f}  {kind:<7}  {question}")
    typer.echo(f"Total: {len(markets)} markets")


def _echo_market(m: SynthesizedMarket) -> None:
    typer.echo(m.question)
    typer.echo(f"  id: {m.id}  category: {m.category or '-'}  ends: {m.end_date or '-'}")
    typer.echo(f"  volume: {m.volume:.0f}  24h: {m.volume_24h:.0f}  liquidity: {m.liquidity:.0f}")
    for i, outcome in enumerate(m.outcomes):
        token = m.tokens[i].token_id if m.tokens else "-"
        typer.echo(f"  {m.outcome_prices[i] * 100:5.1f}%  {outcome:<40}  {token}")


@app.command("list")
def list_markets(
    ctx: typer.Context,
    category: str | None = typer.Option(None, "--category", "-c", help="Only this category"),
    query: str | None = typer.Option(None, "--query", "-q", help="Filter on question/outcomes"),
    limit: int = typer.Option(50, "--limit", "-n", help="Max rows to print"),
) -> None:
    """Merged collection (multi-outcome markets first)."""
    snapshot = _refresh_or_exit(ctx.obj["settings"])
    markets = filter_markets(snapshot.markets, category=category, query=query)
    _echo_rows(markets[:limit])


@app.command("trending")
def trending(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", help="Max rows to print"),
) -> None:
    """Markets ranked by boosted 24h volume."""
    snapshot = _refresh_or_exit(ctx.obj["settings"])
    _echo_rows(snapshot.trending[:limit])


@app.command("profitable")
def profitable(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", help="Max rows to print"),
) -> None:
    """Markets ranked by price spread and log volume."""
    snapshot = _refresh_or_exit(ctx.obj["settings"])
    _echo_rows(snapshot.profitable[:limit])


@app.command("show")
def show(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Event id, condition id or slug"),
    refresh: bool = typer.Option(
        False, "--refresh/--no-refresh", help="Load the merged collection first and resolve from it"
    ),
) -> None:
    """Show one market with its outcomes and token ids."""

    async def job(aggregator: MarketAggregator, lookup: MarketLookup) -> SynthesizedMarket:
        if refresh:
            try:
                await aggregator.refresh()
            except NoMarketsAvailableError:
                typer.echo("No markets available; resolving from the provider.", err=True)
        return await lookup.find_by_id(market_id)

    try:
        market = _run(ctx.obj["settings"], job)
    except NotFoundError:
        typer.echo(f"Market not found: {market_id}")
        raise typer.Exit(code=1)
    _echo_market(market)


@app.command("search")
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search text"),
) -> None:
    """Provider search; each matching event is synthesized."""

    async def job(aggregator: MarketAggregator, lookup: MarketLookup) -> list[SynthesizedMarket]:
        return await aggregator.search(query)

    _echo_rows(_run(ctx.obj["settings"], job))
