from __future__ import annotations

import time

import httpx
import pytest
from fastapi.testclient import TestClient

from cryptodash.config.settings import Settings
from cryptodash.main import create_app
from cryptodash.services.coingecko import MarketDataError
from cryptodash.services.controller import DashboardController


def _settings(**overrides) -> Settings:
    values = dict(
        COINGECKO_BASE_URL="https://api.coingecko.invalid/api/v3",
        HTTP_TIMEOUT_SECONDS=1.0,
        POLL_INTERVAL_SECONDS=60,
        POLL_ENABLED=False,
        LOG_LEVEL="INFO",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def upstream(market_records, coin_factory):
    return {"markets": market_records, "fail_markets": False, "coin_factory": coin_factory}


@pytest.fixture()
def dashboard_client(upstream):
    async def fetch_markets():
        if upstream["fail_markets"]:
            raise MarketDataError("CoinGecko returned HTTP 503")
        return upstream["markets"]

    async def fetch_coin(asset_id):
        if asset_id == "missing":
            raise MarketDataError("CoinGecko returned HTTP 404")
        return upstream["coin_factory"](asset_id, asset_id[:4], asset_id.title())

    controller = DashboardController(fetch_markets=fetch_markets, fetch_coin=fetch_coin)
    app = create_app(settings=_settings(), controller=controller)
    with TestClient(app) as client:
        yield client, controller


def test_dashboard_before_first_refresh_is_loading(dashboard_client):
    client, _ = dashboard_client
    resp = client.get("/dashboard")
    assert resp.status_code == 200
    assert resp.json()["status"] == "loading"


def test_refresh_then_search(dashboard_client):
    client, _ = dashboard_client
    body = client.post("/dashboard/refresh").json()
    assert body["status"] == "ready"
    assert body["total_assets"] == 4
    assert body["cards"][0]["symbol"] == "BTC"

    body = client.put("/dashboard/search", json={"term": "bitcoin"}).json()
    assert body["search_term"] == "bitcoin"
    assert [c["id"] for c in body["cards"]] == ["bitcoin", "wrapped-bitcoin"]

    body = client.put("/dashboard/search", json={"term": "nothing-like-this"}).json()
    assert body["status"] == "no_results"
    assert body["no_results_message"] == 'No cryptocurrencies found matching "nothing-like-this"'


def test_refresh_failure_then_retry(dashboard_client, upstream):
    client, _ = dashboard_client
    client.post("/dashboard/refresh")

    upstream["fail_markets"] = True
    body = client.post("/dashboard/refresh").json()
    assert body["status"] == "error"
    assert body["refreshing"] is False
    assert body["error"].startswith("Failed to fetch crypto prices")
    assert len(body["cards"]) == 4

    upstream["fail_markets"] = False
    body = client.post("/dashboard/retry").json()
    assert body["status"] == "ready"
    assert body["error"] is None


def test_assets_endpoint_returns_raw_values(dashboard_client):
    client, _ = dashboard_client
    client.post("/dashboard/refresh")

    rows = client.get("/dashboard/assets", params={"q": "eth"}).json()
    assert [r["id"] for r in rows] == ["ethereum"]
    assert rows[0]["current_price"] == 3400.25

    rows = client.get("/dashboard/assets").json()
    assert len(rows) == 4


def test_select_and_clear_selection(dashboard_client):
    client, _ = dashboard_client
    client.post("/dashboard/refresh")

    body = client.post("/dashboard/assets/ethereum/select").json()
    assert body["detail"]["id"] == "ethereum"
    assert body["detail"]["change_7d"] == "-3.50%"

    body = client.delete("/dashboard/selection").json()
    assert body["detail"] is None


def test_select_unknown_asset_is_404(dashboard_client):
    client, _ = dashboard_client
    client.post("/dashboard/refresh")

    resp = client.post("/dashboard/assets/dogecoin/select")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "unknown_asset"


def test_detail_failure_reports_detail_error(dashboard_client, upstream, record_factory):
    client, _ = dashboard_client
    upstream["markets"] = upstream["markets"] + [record_factory("missing", "mis", "Missing Coin")]
    client.post("/dashboard/refresh")
    client.post("/dashboard/assets/bitcoin/select")

    body = client.post("/dashboard/assets/missing/select").json()
    assert body["detail"]["id"] == "bitcoin"
    assert body["detail_error"] == "Failed to load details for missing."
    assert body["error"] is None


def test_search_body_is_validated(dashboard_client):
    client, _ = dashboard_client
    resp = client.put("/dashboard/search", json={"term": "x" * 500})
    assert resp.status_code == 422


def test_lifespan_runs_startup_refresh_when_polling(market_records):
    async def fetch_markets():
        return market_records

    controller = DashboardController(fetch_markets=fetch_markets)
    app = create_app(settings=_settings(POLL_ENABLED=True), controller=controller)

    with TestClient(app) as client:
        handle = app.state.refresh_loop
        assert handle is not None

        # first tick happens right away; poll the view until it lands
        for _ in range(200):
            if client.get("/dashboard").json()["status"] == "ready":
                break
            time.sleep(0.01)
        assert client.get("/dashboard").json()["status"] == "ready"

    assert app.state.refresh_loop is None
    assert handle.running is False


def test_default_controller_uses_app_settings(monkeypatch, market_records):
    seen = []
    real_async_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url.copy_with(query=None)))
        return httpx.Response(200, json=market_records)

    def fake_async_client(**kwargs):
        return real_async_client(transport=httpx.MockTransport(handler), **kwargs)

    # TestClient is built on httpx.Client, so only the CoinGecko calls see this
    monkeypatch.setattr(httpx, "AsyncClient", fake_async_client)
    app = create_app(settings=_settings(COINGECKO_BASE_URL="https://mirror.example/api"))

    with TestClient(app) as client:
        body = client.post("/dashboard/refresh").json()

    assert body["status"] == "ready"
    assert seen == ["https://mirror.example/api/coins/markets"]
