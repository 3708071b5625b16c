"""Build the DashboardView model from a ViewState."""

from __future__ import annotations

from datetime import tzinfo
from typing import Callable, Optional

from cryptodash.schemas.assets import AssetDetail, AssetSummary
from cryptodash.schemas.view import AssetCard, DashboardView, DetailPanel, DetailStat
from cryptodash.services.filtering import filter_assets
from cryptodash.services.formatting import (
    format_change,
    format_magnitude,
    format_price,
    format_supply,
    format_timestamp,
)
from cryptodash.services.view_state import ViewState

NOT_AVAILABLE = "N/A"


def _or_na(value: Optional[float], fmt: Callable[[float], str]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return fmt(value)


def _usd(value: float) -> str:
    return f"${format_price(value)}"


def _signed(pct: float) -> str:
    return format_change(pct, "signed")


def _direction(pct: Optional[float]) -> str:
    if pct is None:
        return "flat"
    return "up" if pct >= 0 else "down"


def build_card(asset: AssetSummary) -> AssetCard:
    return AssetCard(
        id=asset.id,
        name=asset.name,
        symbol=asset.symbol,
        rank=asset.market_cap_rank,
        image_url=asset.image_url,
        price=_or_na(asset.current_price, _usd),
        change_24h=_or_na(asset.price_change_24h_pct, lambda p: format_change(p, "arrow")),
        change_direction=_direction(asset.price_change_24h_pct),
        market_cap=_or_na(asset.market_cap, format_magnitude),
        volume_24h=_or_na(asset.total_volume, format_magnitude),
    )


def build_detail(detail: AssetDetail) -> DetailPanel:
    stats = [
        DetailStat(label="Market Cap", value=_or_na(detail.market_cap, format_magnitude)),
        DetailStat(label="24h High", value=_or_na(detail.high_24h, _usd)),
        DetailStat(label="24h Low", value=_or_na(detail.low_24h, _usd)),
        DetailStat(label="24h Volume", value=_or_na(detail.total_volume, format_magnitude)),
        DetailStat(label="All Time High", value=_or_na(detail.all_time_high, _usd)),
        DetailStat(label="All Time Low", value=_or_na(detail.all_time_low, _usd)),
    ]

    circulating = format_supply(detail.circulating_supply, detail.symbol)
    if circulating:
        stats.append(DetailStat(label="Circulating Supply", value=circulating))
    total = format_supply(detail.total_supply, detail.symbol)
    if total:
        stats.append(DetailStat(label="Total Supply", value=total))

    return DetailPanel(
        id=detail.id,
        name=detail.name,
        symbol=detail.symbol,
        image_url=detail.image_url,
        description=detail.description,
        price=_or_na(detail.current_price, _usd),
        change_24h=_or_na(detail.price_change_24h_pct, _signed),
        change_7d=_or_na(detail.price_change_7d_pct, _signed),
        change_30d=_or_na(detail.price_change_30d_pct, _signed),
        stats=stats,
        homepage=detail.homepage,
    )


def build_dashboard_view(state: ViewState, tz: Optional[tzinfo] = None) -> DashboardView:
    visible = filter_assets(state.assets, state.search_term)

    if state.error:
        status = "error"
    elif not state.assets and (state.loading or state.last_updated_at is None):
        status = "loading"
    elif not visible:
        status = "no_results"
    else:
        status = "ready"

    no_results_message = None
    if status == "no_results":
        no_results_message = f'No cryptocurrencies found matching "{state.search_term}"'

    last_updated = None
    if state.last_updated_at is not None:
        last_updated = format_timestamp(state.last_updated_at, tz=tz)

    return DashboardView(
        status=status,
        refreshing=state.loading,
        error=state.error,
        last_updated=last_updated,
        search_term=state.search_term,
        no_results_message=no_results_message,
        total_assets=len(state.assets),
        visible_assets=len(visible),
        cards=[build_card(a) for a in visible],
        pending_selection=state.pending_selection,
        detail_error=state.detail_error,
        detail=build_detail(state.selected) if state.selected is not None else None,
    )
