"""Normalize raw CoinGecko payloads into AssetSummary / AssetDetail."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import ValidationError

from cryptodash.schemas.assets import AssetDetail, AssetSummary
from cryptodash.services.coingecko import VS_CURRENCY, MarketDataError


NO_DESCRIPTION = "No description available"


def to_asset_summary(record: dict[str, Any]) -> AssetSummary:
    if not isinstance(record, dict):
        raise MarketDataError(f"Malformed market record: {record!r:.120}")

    try:
        return AssetSummary(
            id=record.get("id"),
            symbol=record.get("symbol"),
            name=record.get("name"),
            current_price=record.get("current_price"),
            market_cap=record.get("market_cap"),
            market_cap_rank=record.get("market_cap_rank"),
            total_volume=record.get("total_volume"),
            price_change_24h_pct=record.get("price_change_percentage_24h"),
            high_24h=record.get("high_24h"),
            low_24h=record.get("low_24h"),
            image_url=record.get("image"),
            last_updated=record.get("last_updated"),
        )
    except ValidationError as exc:
        raise MarketDataError(f"Malformed market record '{record.get('id')}': {exc.error_count()} invalid field(s)") from exc


def to_asset_summaries(records: Iterable[dict[str, Any]]) -> list[AssetSummary]:
    return [to_asset_summary(r) for r in records]


def _in_currency(market_data: dict[str, Any], key: str) -> Optional[float]:
    # CoinGecko nests per-currency values: {"current_price": {"usd": 1.0, ...}}
    value = market_data.get(key)
    if isinstance(value, dict):
        return value.get(VS_CURRENCY)
    return value


def _description(coin: dict[str, Any]) -> str:
    description = coin.get("description")
    if description is None:
        return NO_DESCRIPTION
    if not isinstance(description, dict):
        raise MarketDataError(f"Coin '{coin.get('id')}' has a malformed description")
    return description.get("en") or NO_DESCRIPTION


def _first_homepage(coin: dict[str, Any]) -> Optional[str]:
    links = coin.get("links")
    if links is None:
        return None
    if not isinstance(links, dict):
        raise MarketDataError(f"Coin '{coin.get('id')}' has malformed links")
    homepages = links.get("homepage") or []
    if not isinstance(homepages, list):
        raise MarketDataError(f"Coin '{coin.get('id')}' has malformed links")
    return next((h for h in homepages if h), None)


def to_asset_detail(coin: dict[str, Any]) -> AssetDetail:
    market_data = coin.get("market_data")
    if not isinstance(market_data, dict):
        raise MarketDataError(f"Coin '{coin.get('id')}' has no market_data")

    description = _description(coin)
    image = coin.get("image") or {}

    try:
        return AssetDetail(
            id=coin.get("id"),
            symbol=coin.get("symbol"),
            name=coin.get("name"),
            description=description,
            current_price=_in_currency(market_data, "current_price"),
            market_cap=_in_currency(market_data, "market_cap"),
            market_cap_rank=market_data.get("market_cap_rank") or coin.get("market_cap_rank"),
            total_volume=_in_currency(market_data, "total_volume"),
            price_change_24h_pct=market_data.get("price_change_percentage_24h"),
            price_change_7d_pct=market_data.get("price_change_percentage_7d"),
            price_change_30d_pct=market_data.get("price_change_percentage_30d"),
            high_24h=_in_currency(market_data, "high_24h"),
            low_24h=_in_currency(market_data, "low_24h"),
            all_time_high=_in_currency(market_data, "ath"),
            all_time_low=_in_currency(market_data, "atl"),
            circulating_supply=market_data.get("circulating_supply"),
            total_supply=market_data.get("total_supply"),
            image_url=image.get("large") if isinstance(image, dict) else None,
            homepage=_first_homepage(coin),
            last_updated=market_data.get("last_updated"),
        )
    except ValidationError as exc:
        raise MarketDataError(f"Malformed coin payload '{coin.get('id')}': {exc.error_count()} invalid field(s)") from exc
