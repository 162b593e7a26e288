"""Polymarket Gamma API client - trending markets, events, single-item and search fetches."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from predagg.errors import FetchFailure, MalformedMarketError
from predagg.ingestion.polymarket.normalize import (
    is_event_payload,
    normalize_condition_id,
    parse_event_group,
    parse_event_groups,
    parse_markets,
    parse_raw_market,
)
from predagg.models import EventGroup, RawBinaryMarket

log = structlog.get_logger(__name__)

GAMMA_API_BASE = "https://gamma-api.polymarket.com"
DEFAULT_TIMEOUT_SEC = 30.0


class GammaMarketSource:
    """Async read-only client for the Gamma endpoints the engine consumes.

    Every public fetch resolves to an empty result (``[]`` or ``None``) on
    HTTP, network, timeout or decoding failure and logs ``fetch_failed``.
    Nothing is retried here; retry cadence belongs to the caller.
    """

    venue_id = "polymarket"

    def __init__(
        self,
        base_url: str = GAMMA_API_BASE,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        client: httpx.AsyncClient | None = None,
        user_agent: str = "predagg/0.1",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json", "User-Agent": user_agent},
        )

    async def __aenter__(self) -> GammaMarketSource:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET base_url + path and decode JSON. Raises FetchFailure."""
        url = self.base_url + path
        try:
            resp = await self._client.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise FetchFailure(path, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchFailure(path, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise FetchFailure(path, f"invalid JSON: {e}") from e

    async def _get_list(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        try:
            data = await self._get_json(path, params)
        except FetchFailure as e:
            log.warning("fetch_failed", endpoint=e.endpoint, error=e.reason)
            return []
        if isinstance(data, dict):
            data = data.get("data", [])
        return data if isinstance(data, list) else []

    async def fetch_trending(self, limit: int = 100, offset: int = 0) -> list[RawBinaryMarket]:
        """Active, open markets ranked by 24h volume (descending)."""
        params = {
            "limit": limit,
            "offset": offset,
            "order": "volume24hr",
            "ascending": "false",
            "active": "true",
            "closed": "false",
        }
        rows = await self._get_list("/markets", params)
        markets = parse_markets(rows)
        log.debug("fetched_trending", rows=len(rows), markets=len(markets))
        return markets

    async def fetch_event_groups(self, limit: int = 500, offset: int = 0) -> list[EventGroup]:
        """Open events, newest first, each with its member binary markets."""
        params = {
            "limit": limit,
            "offset": offset,
            "order": "id",
            "ascending": "false",
            "closed": "false",
        }
        rows = await self._get_list("/events", params)
        groups = parse_event_groups(rows)
        log.debug("fetched_events", rows=len(rows), events=len(groups))
        return groups

    async def fetch_all(
        self, trending_limit: int = 100, events_limit: int = 500
    ) -> tuple[list[RawBinaryMarket], list[EventGroup]]:
        """Fire both list fetches concurrently and await both."""
        trending, events = await asyncio.gather(
            self.fetch_trending(limit=trending_limit),
            self.fetch_event_groups(limit=events_limit),
        )
        return trending, events

    async def fetch_market_or_event(self, item_id: str) -> RawBinaryMarket | EventGroup | None:
        """GET /markets/{id}. The response is either a market or an event with ``markets``."""
        try:
            data = await self._get_json(f"/markets/{item_id}")
        except FetchFailure as e:
            log.info("fetch_failed", endpoint=e.endpoint, error=e.reason)
            return None
        if is_event_payload(data):
            return parse_event_group(data)
        try:
            return parse_raw_market(data)
        except MalformedMarketError as e:
            log.warning("skip_market", error=str(e))
            return None

    async def fetch_event(self, event_id: str) -> EventGroup | None:
        """GET /events/{id}."""
        try:
            data = await self._get_json(f"/events/{event_id}")
        except FetchFailure as e:
            log.info("fetch_failed", endpoint=e.endpoint, error=e.reason)
            return None
        return parse_event_group(data)

    async def search_events(
        self, query: str, limit_per_type: int = 50, search_tags: bool = False
    ) -> list[EventGroup]:
        """GET /public-search and return the matching events."""
        params = {
            "q": query,
            "limit_per_type": limit_per_type,
            "search_tags": str(search_tags).lower(),
        }
        try:
            data = await self._get_json("/public-search", params)
        except FetchFailure as e:
            log.warning("fetch_failed", endpoint=e.endpoint, error=e.reason)
            return []
        events = data.get("events") if isinstance(data, dict) else None
        return parse_event_groups(events or [])

    async def scan_events_for_market(
        self, market_id: str, max_pages: int = 10, page_size: int = 100
    ) -> EventGroup | None:
        """Page through open events looking for one that holds market_id.

        Matches the member's condition id or Gamma id. Stops at the first empty
        page or after max_pages.
        """
        wanted = normalize_condition_id(market_id)
        for page in range(max_pages):
            rows = await self._get_list(
                "/events",
                {"limit": page_size, "offset": page * page_size, "closed": "false"},
            )
            if not rows:
                break
            for group in parse_event_groups(rows):
                for m in group.markets:
                    if m.id == wanted or m.gamma_id == market_id:
                        log.info("event_scan_hit", market_id=market_id, event_id=group.event_id, page=page)
                        return group
        return None
