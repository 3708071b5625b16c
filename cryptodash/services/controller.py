"""Refresh controller and detail fetcher for the dashboard view state."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from cryptodash.schemas.assets import AssetSummary
from cryptodash.services.assets import to_asset_detail, to_asset_summaries
from cryptodash.services.coingecko import MarketDataError, fetch_raw_coin, fetch_raw_markets
from cryptodash.services.filtering import filter_assets
from cryptodash.services.view_state import REFRESH_ERROR_MESSAGE, ViewState, detail_error_message
from cryptodash.utils.time import utcnow

logger = logging.getLogger("cryptodash.controller")


class DashboardController:
    """
    Owns a ViewState and drives it from CoinGecko responses and user actions.

    The fetch callables default to the live CoinGecko helpers; tests and the
    snapshot script swap them out.
    """

    def __init__(
        self,
        state: Optional[ViewState] = None,
        *,
        fetch_markets: Callable[[], Awaitable[list[dict[str, Any]]]] = fetch_raw_markets,
        fetch_coin: Callable[[str], Awaitable[dict[str, Any]]] = fetch_raw_coin,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.state = state if state is not None else ViewState()
        self._fetch_markets = fetch_markets
        self._fetch_coin = fetch_coin
        self._clock = clock

    async def refresh(self) -> Optional[bool]:
        """
        One refresh cycle. Returns True when a successful response was applied,
        False when the fetch failed, and None when a newer refresh superseded
        this one. Failures are recorded on the state, never raised.
        """
        seq = self.state.start_load()
        try:
            raw = await self._fetch_markets()
            assets = to_asset_summaries(raw)
        except MarketDataError as exc:
            logger.warning("market refresh failed | seq=%d | err=%s", seq, exc)
            if not self.state.load_error(seq, REFRESH_ERROR_MESSAGE):
                logger.debug("stale refresh failure discarded | seq=%d latest=%d", seq, self.state.refresh_seq)
                return None
            return False

        if not self.state.load_success(seq, assets, self._clock()):
            logger.debug("stale refresh response discarded | seq=%d latest=%d", seq, self.state.refresh_seq)
            return None

        logger.info("market refresh applied | seq=%d | assets=%d", seq, len(assets))
        return True

    async def retry(self) -> Optional[bool]:
        return await self.refresh()

    async def fetch_detail(self, asset_id: str) -> bool:
        seq = self.state.start_select(asset_id)
        try:
            raw = await self._fetch_coin(asset_id)
            detail = to_asset_detail(raw)
        except MarketDataError as exc:
            logger.warning("detail fetch failed | id=%s | seq=%d | err=%s", asset_id, seq, exc)
            self.state.select_error(seq, detail_error_message(asset_id))
            return False

        if not self.state.select(seq, detail):
            logger.debug("stale detail response discarded | id=%s | seq=%d latest=%d", asset_id, seq, self.state.detail_seq)
            return False
        return True

    def deselect(self) -> None:
        self.state.deselect()

    def set_search(self, term: str) -> None:
        self.state.search_change(term)

    def visible_assets(self, term: Optional[str] = None) -> list[AssetSummary]:
        return filter_assets(self.state.assets, self.state.search_term if term is None else term)
