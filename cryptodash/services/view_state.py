# cryptodash/services/view_state.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from cryptodash.schemas.assets import AssetDetail, AssetSummary


REFRESH_ERROR_MESSAGE = (
    "Failed to fetch crypto prices. Please check your internet connection and try again."
)


def detail_error_message(asset_id: str) -> str:
    return f"Failed to load details for {asset_id}."


@dataclass
class ViewState:
    """
    Dashboard state owned by one DashboardController.

    Every mutation goes through one of the named transitions below. List and
    detail requests each carry a sequence number; a completion is applied only
    when it matches the latest number issued for its kind, so the most recently
    *requested* response wins. Transitions that discard a stale completion
    return False.
    """

    assets: List[AssetSummary] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    search_term: str = ""
    selected: Optional[AssetDetail] = None
    last_updated_at: Optional[datetime] = None
    pending_selection: Optional[str] = None
    detail_error: Optional[str] = None
    refresh_seq: int = 0
    detail_seq: int = 0

    # ----------------------------
    # list refresh
    # ----------------------------
    def start_load(self) -> int:
        self.refresh_seq += 1
        self.loading = True
        self.error = None
        return self.refresh_seq

    def load_success(self, seq: int, assets: Iterable[AssetSummary], at: datetime) -> bool:
        if seq != self.refresh_seq:
            return False
        self.assets = list(assets)
        self.last_updated_at = at
        self.error = None
        self.loading = False
        return True

    def load_error(self, seq: int, message: str = REFRESH_ERROR_MESSAGE) -> bool:
        if seq != self.refresh_seq:
            return False
        self.error = message
        self.loading = False
        return True

    # ----------------------------
    # detail selection
    # ----------------------------
    def start_select(self, asset_id: str) -> int:
        self.detail_seq += 1
        self.pending_selection = asset_id
        self.detail_error = None
        return self.detail_seq

    def select(self, seq: int, detail: AssetDetail) -> bool:
        if seq != self.detail_seq:
            return False
        self.selected = detail
        self.pending_selection = None
        self.detail_error = None
        return True

    def select_error(self, seq: int, message: str) -> bool:
        # selected is left as it was
        if seq != self.detail_seq:
            return False
        self.pending_selection = None
        self.detail_error = message
        return True

    def deselect(self) -> None:
        self.detail_seq += 1
        self.selected = None
        self.pending_selection = None
        self.detail_error = None

    # ----------------------------
    # search
    # ----------------------------
    def search_change(self, term: str) -> None:
        self.search_term = term or ""
