from __future__ import annotations

import json
import sys

import pytest

from cryptodash.scripts import snapshot
from cryptodash.services.coingecko import MarketDataError
from cryptodash.services.controller import DashboardController


def _controller(market_records, coin_factory, fail=False) -> DashboardController:
    async def fetch_markets():
        if fail:
            raise MarketDataError("offline")
        return market_records

    async def fetch_coin(asset_id):
        return coin_factory(asset_id, "btc", "Bitcoin")

    return DashboardController(fetch_markets=fetch_markets, fetch_coin=fetch_coin)


@pytest.mark.asyncio
async def test_take_snapshot_with_search_and_detail(market_records, coin_factory):
    view = await snapshot.take_snapshot(
        search="btc",
        asset_id="bitcoin",
        controller=_controller(market_records, coin_factory),
    )
    assert [c.id for c in view.cards] == ["bitcoin", "wrapped-bitcoin"]
    assert view.detail.id == "bitcoin"

    table = snapshot.render_table(view, limit=1)
    assert "Bitcoin" in table
    assert "... 1 more" in table
    assert "Circulating Supply" in table


@pytest.mark.asyncio
async def test_take_snapshot_skips_detail_after_failed_refresh(market_records, coin_factory):
    view = await snapshot.take_snapshot(
        asset_id="bitcoin",
        controller=_controller(market_records, coin_factory, fail=True),
    )
    assert view.status == "error"
    assert view.detail is None
    assert "ERROR:" in snapshot.render_table(view)


def test_main_prints_json_and_exits_nonzero_on_error(monkeypatch, capsys, market_records, coin_factory):
    controller = _controller(market_records, coin_factory, fail=True)
    real_take_snapshot = snapshot.take_snapshot

    async def fake_take_snapshot(**kwargs):
        return await real_take_snapshot(controller=controller, **kwargs)

    monkeypatch.setattr(snapshot, "take_snapshot", fake_take_snapshot)
    monkeypatch.setattr(sys, "argv", ["cryptodash-snapshot", "--json"])

    with pytest.raises(SystemExit) as exc:
        snapshot.main()

    assert exc.value.code == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "error"
