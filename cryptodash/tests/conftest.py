from __future__ import annotations

from typing import Any

import pytest


def make_market_record(coin_id: str, symbol: str, name: str, price: float = 1.0, **overrides: Any) -> dict[str, Any]:
    record = {
        "id": coin_id,
        "symbol": symbol,
        "name": name,
        "image": f"https://assets.coingecko.com/coins/images/{coin_id}/large.png",
        "current_price": price,
        "market_cap": price * 1_000_000,
        "market_cap_rank": 1,
        "total_volume": price * 50_000,
        "high_24h": price * 1.05,
        "low_24h": price * 0.95,
        "price_change_percentage_24h": 2.5,
        "last_updated": "2024-03-01T12:00:00.000Z",
    }
    record.update(overrides)
    return record


def make_coin_payload(coin_id: str = "bitcoin", symbol: str = "btc", name: str = "Bitcoin", **market_overrides: Any) -> dict[str, Any]:
    market_data = {
        "current_price": {"usd": 64321.5, "eur": 59000.0},
        "market_cap": {"usd": 1_260_000_000_000},
        "market_cap_rank": 1,
        "total_volume": {"usd": 35_000_000_000},
        "high_24h": {"usd": 65000.0},
        "low_24h": {"usd": 63000.0},
        "ath": {"usd": 73738.0},
        "atl": {"usd": 67.81},
        "price_change_percentage_24h": 1.25,
        "price_change_percentage_7d": -3.5,
        "price_change_percentage_30d": 12.0,
        "circulating_supply": 19_650_000.0,
        "total_supply": 21_000_000.0,
        "last_updated": "2024-03-01T12:00:00.000Z",
    }
    market_data.update(market_overrides)
    return {
        "id": coin_id,
        "symbol": symbol,
        "name": name,
        "description": {"en": f"{name} is a cryptocurrency."},
        "image": {"thumb": "t.png", "small": "s.png", "large": "l.png"},
        "links": {"homepage": ["https://bitcoin.org", "", ""]},
        "market_data": market_data,
    }


@pytest.fixture()
def market_records() -> list[dict[str, Any]]:
    return [
        make_market_record("bitcoin", "btc", "Bitcoin", 64321.5, market_cap_rank=1),
        make_market_record("ethereum", "eth", "Ethereum", 3400.25, market_cap_rank=2),
        make_market_record("wrapped-bitcoin", "wbtc", "Wrapped Bitcoin", 64300.0, market_cap_rank=15),
        make_market_record("shiba-inu", "shib", "Shiba Inu", 0.00002512, market_cap_rank=12),
    ]


@pytest.fixture()
def coin_payload() -> dict[str, Any]:
    return make_coin_payload()


@pytest.fixture()
def record_factory():
    return make_market_record


@pytest.fixture()
def coin_factory():
    return make_coin_payload
