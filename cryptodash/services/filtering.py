from __future__ import annotations

from typing import Sequence

from cryptodash.schemas.assets import AssetSummary


def filter_assets(assets: Sequence[AssetSummary], term: str) -> list[AssetSummary]:
    """
    Case-insensitive substring match on name or symbol.
    An empty term keeps everything, in order; no match yields [].
    """
    needle = (term or "").lower()
    if not needle:
        return list(assets)
    return [a for a in assets if needle in a.name.lower() or needle in a.symbol.lower()]
