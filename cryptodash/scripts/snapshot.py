# cryptodash/scripts/snapshot.py
from __future__ import annotations

import argparse
import asyncio
import json
from typing import Optional

from cryptodash.schemas.view import DashboardView
from cryptodash.services.controller import DashboardController
from cryptodash.services.view import build_dashboard_view


async def take_snapshot(
    *,
    search: str = "",
    asset_id: Optional[str] = None,
    controller: Optional[DashboardController] = None,
) -> DashboardView:
    controller = controller or DashboardController()
    ok = await controller.refresh()
    controller.set_search(search)
    if ok and asset_id:
        await controller.fetch_detail(asset_id)
    return build_dashboard_view(controller.state)


def render_table(view: DashboardView, limit: int = 20) -> str:
    lines = []
    if view.last_updated:
        lines.append(f"Last updated: {view.last_updated}")
    if view.error:
        lines.append(f"ERROR: {view.error}")
    if view.no_results_message:
        lines.append(view.no_results_message)

    if view.cards:
        lines.append(f"{'#':>4}  {'Name':<22} {'Symbol':<8} {'Price':>18} {'24h':>10} {'Market Cap':>12} {'Volume 24h':>12}")
        for card in view.cards[:limit]:
            rank = f"{card.rank}" if card.rank is not None else "-"
            lines.append(
                f"{rank:>4}  {card.name[:22]:<22} {card.symbol[:8]:<8} {card.price:>18} "
                f"{card.change_24h:>10} {card.market_cap:>12} {card.volume_24h:>12}"
            )
        if len(view.cards) > limit:
            lines.append(f"... {len(view.cards) - limit} more")

    if view.detail_error:
        lines.append(view.detail_error)
    if view.detail is not None:
        d = view.detail
        lines.append("")
        lines.append(f"{d.name} ({d.symbol})  {d.price}")
        lines.append(f"24h: {d.change_24h}  7d: {d.change_7d}  30d: {d.change_30d}")
        for stat in d.stats:
            lines.append(f"  {stat.label:<20} {stat.value}")
        if d.homepage:
            lines.append(f"  {'Homepage':<20} {d.homepage}")

    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(description="Print one crypto dashboard snapshot")
    parser.add_argument("--search", default="", help="Filter by name or symbol")
    parser.add_argument("--asset", default=None, help="CoinGecko id to show details for, e.g. bitcoin")
    parser.add_argument("--limit", type=int, default=20, help="Rows to print in table mode")
    parser.add_argument("--json", action="store_true", help="Print the view model as JSON")
    args = parser.parse_args()

    view = asyncio.run(take_snapshot(search=args.search, asset_id=args.asset))

    if args.json:
        print(json.dumps(view.model_dump(), ensure_ascii=False))
    else:
        print(render_table(view, limit=max(1, args.limit)))

    raise SystemExit(1 if view.error else 0)


if __name__ == "__main__":
    main()
