"""Pydantic models for the rendered dashboard view."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


ViewStatus = Literal["loading", "error", "no_results", "ready"]


class AssetCard(BaseModel):
    """One tile of the asset grid, with display-ready strings."""

    id: str
    name: str
    symbol: str
    rank: Optional[int] = None
    image_url: Optional[str] = None
    price: str
    change_24h: str
    change_direction: Literal["up", "down", "flat"]
    market_cap: str
    volume_24h: str


class DetailStat(BaseModel):
    label: str
    value: str


class DetailPanel(BaseModel):
    """Expanded view of the selected asset."""

    id: str
    name: str
    symbol: str
    image_url: Optional[str] = None
    description: str
    price: str
    change_24h: str
    change_7d: str
    change_30d: str
    stats: List[DetailStat] = Field(default_factory=list)
    homepage: Optional[str] = None


class DashboardView(BaseModel):
    status: ViewStatus
    refreshing: bool = False
    error: Optional[str] = Field(None, description="Refresh error banner; stale cards stay visible")
    last_updated: Optional[str] = None
    search_term: str = ""
    no_results_message: Optional[str] = None
    total_assets: int = 0
    visible_assets: int = 0
    cards: List[AssetCard] = Field(default_factory=list)
    pending_selection: Optional[str] = None
    detail_error: Optional[str] = None
    detail: Optional[DetailPanel] = None


class SearchRequest(BaseModel):
    term: str = Field("", max_length=200, description="Case-insensitive name/symbol filter")
