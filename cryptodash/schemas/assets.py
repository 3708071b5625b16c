"""Pydantic models for normalized CoinGecko assets."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AssetSummary(BaseModel):
    """One row of the top-100 market list."""

    id: str = Field(..., min_length=1, description="CoinGecko id, e.g. bitcoin")
    symbol: str = Field(..., description="Upper-cased ticker, e.g. BTC")
    name: str
    current_price: Optional[float] = Field(None, ge=0)
    market_cap: Optional[float] = Field(None, ge=0)
    market_cap_rank: Optional[int] = Field(None, gt=0)
    total_volume: Optional[float] = Field(None, ge=0)
    price_change_24h_pct: Optional[float] = None
    high_24h: Optional[float] = Field(None, ge=0)
    low_24h: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    last_updated: Optional[str] = None

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, value: str) -> str:
        return value.upper()


class AssetDetail(AssetSummary):
    """Expanded single-asset data shown in the detail panel."""

    description: str = "No description available"
    price_change_7d_pct: Optional[float] = None
    price_change_30d_pct: Optional[float] = None
    all_time_high: Optional[float] = Field(None, ge=0)
    all_time_low: Optional[float] = Field(None, ge=0)
    circulating_supply: Optional[float] = Field(None, ge=0)
    total_supply: Optional[float] = Field(None, ge=0)
    homepage: Optional[str] = None
