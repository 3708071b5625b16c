"""Helpers for interacting with the public CoinGecko API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from cryptodash.config.settings import Settings, get_settings


logger = logging.getLogger("cryptodash.coingecko")

VS_CURRENCY = "usd"
MARKETS_PER_PAGE = 100


class MarketDataError(Exception):
    """Upstream market data could not be fetched or was not in the expected shape."""


@asynccontextmanager
async def _client(client: Optional[httpx.AsyncClient], timeout: float) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(timeout=timeout) as owned:
        yield owned


async def _get_json(
    path: str,
    params: dict[str, Any],
    client: Optional[httpx.AsyncClient],
    settings: Optional[Settings],
) -> Any:
    settings = settings or get_settings()
    url = f"{settings.COINGECKO_BASE_URL}{path}"
    try:
        async with _client(client, settings.HTTP_TIMEOUT_SECONDS) as http:
            response = await http.get(url, params=params)
            response.raise_for_status()
            return response.json()
    except httpx.HTTPStatusError as exc:
        raise MarketDataError(f"CoinGecko returned HTTP {exc.response.status_code} for {path}") from exc
    except httpx.HTTPError as exc:
        raise MarketDataError(f"Unable to reach CoinGecko: {exc!r}") from exc
    except ValueError as exc:
        raise MarketDataError(f"CoinGecko returned a non-JSON body for {path}") from exc


async def fetch_raw_markets(
    client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
) -> list[dict[str, Any]]:
    """Return page 1 of the top assets by market cap, priced in USD."""

    params = {
        "vs_currency": VS_CURRENCY,
        "order": "market_cap_desc",
        "per_page": MARKETS_PER_PAGE,
        "page": 1,
        "sparkline": "false",
        "price_change_percentage": "24h",
    }
    data = await _get_json("/coins/markets", params, client, settings)
    if not isinstance(data, list):
        raise MarketDataError(f"Expected a list of market records, got {type(data).__name__}")

    logger.debug("markets fetched | records=%d", len(data))
    return data


async def fetch_raw_coin(
    coin_id: str,
    client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
) -> dict[str, Any]:
    """Return the single-asset payload with market data (no tickers/community/developer data)."""

    params = {
        "localization": "false",
        "tickers": "false",
        "market_data": "true",
        "community_data": "false",
        "developer_data": "false",
        "sparkline": "false",
    }
    data = await _get_json(f"/coins/{coin_id}", params, client, settings)
    if not isinstance(data, dict):
        raise MarketDataError(f"Expected a coin object for '{coin_id}', got {type(data).__name__}")
    return data
