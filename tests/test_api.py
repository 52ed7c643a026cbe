"""
HTTP API tests using FastAPI's TestClient.

The stock data singleton is swapped for a service wired to fake clients,
so no request leaves the process.
"""

import pytest
from fastapi.testclient import TestClient

from fakes import FakeAlphaVantage, FakeFinnhub, FakeZacks, make_quote
from conftest import make_bars
from stocklens.main import app
from stocklens.services.cache import ResponseCache
from stocklens.services.market_data import FinnhubError, StockDataService
from stocklens.services.market_data import service as service_module


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def use_finnhub(monkeypatch):
    """Install a StockDataService backed by the given fake Finnhub client."""

    def install(finnhub):
        service = StockDataService(
            finnhub=finnhub,
            alpha_vantage=FakeAlphaVantage(),
            zacks=FakeZacks(),
            cache=ResponseCache(enabled=False),
            enable_yahoo_fallback=False,
        )
        monkeypatch.setattr(service_module, "_service_instance", service)
        return service

    return install


# =============================================================================
# HEALTH
# =============================================================================


def test_health(client, use_finnhub):
    use_finnhub(FakeFinnhub())
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root(client):
    assert client.get("/").json()["docs"] == "/docs"


# =============================================================================
# STOCKS
# =============================================================================


def test_search_accepts_query_or_q(client, use_finnhub):
    use_finnhub(FakeFinnhub())

    for params in ({"query": "apple"}, {"q": "apple"}):
        response = client.get("/api/stocks/search", params=params)
        assert response.status_code == 200
        assert response.json() == [{"symbol": "AAPL", "name": "APPLE INC", "type": "Common Stock"}]


def test_search_without_query(client, use_finnhub):
    use_finnhub(FakeFinnhub())
    assert client.get("/api/stocks/search").json() == []


def test_stock_detail(client, use_finnhub):
    use_finnhub(FakeFinnhub(quote=make_quote(), candles=make_bars([100.0 + i for i in range(40)])))

    response = client.get("/api/stocks/aapl")
    body = response.json()

    assert response.status_code == 200
    assert body["quote"]["changePercent"] == 0.79
    assert body["metrics"]["peRatio"] == 29.1
    assert len(body["priceHistory"]) == 40
    assert len(body["macd"]) == 7
    assert body["technicalIndicators"]["sma20"] == pytest.approx(129.5)
    assert body["technicalIndicators"]["sma200"] is None
    assert body["zacksRating"]["rankText"] == "Buy"
    assert body["analystRatings"]["totalAnalysts"] == 6


def test_stock_detail_not_found(client, use_finnhub):
    use_finnhub(FakeFinnhub(quote=None))
    assert client.get("/api/stocks/NOPE").status_code == 404


def test_stock_detail_rate_limited(client, use_finnhub):
    use_finnhub(FakeFinnhub(quote_error=FinnhubError(429, "Rate limit exceeded - please try again later")))

    response = client.get("/api/stocks/AAPL")

    assert response.status_code == 429
    assert response.json()["detail"] == "Rate limit exceeded. Please try again later."


@pytest.mark.parametrize("status", [401, 403])
def test_stock_detail_credential_errors(client, use_finnhub, status):
    use_finnhub(FakeFinnhub(quote_error=FinnhubError(status, "Invalid API key")))

    response = client.get("/api/stocks/AAPL")

    assert response.status_code == status
    assert response.json()["detail"] == "Invalid API key"


def test_stock_detail_unexpected_error(client, use_finnhub):
    use_finnhub(FakeFinnhub(quote_error=RuntimeError("socket closed")))
    assert client.get("/api/stocks/AAPL").status_code == 500


def test_quote(client, use_finnhub):
    use_finnhub(FakeFinnhub(quote=make_quote()))

    body = client.get("/api/stocks/AAPL/quote").json()

    assert body["price"] == 190.5
    assert body["previousClose"] == 189.0


def test_quote_not_found(client, use_finnhub):
    use_finnhub(FakeFinnhub(quote=None))
    assert client.get("/api/stocks/NOPE/quote").status_code == 404


def test_history_and_macd(client, use_finnhub):
    use_finnhub(FakeFinnhub(candles=make_bars([100.0 + i for i in range(40)])))

    history = client.get("/api/stocks/AAPL/history", params={"days": 60}).json()
    macd = client.get("/api/stocks/AAPL/macd").json()

    assert len(history) == 40
    assert set(history[0]) == {"date", "open", "high", "low", "close", "volume"}
    assert macd[0]["date"] == history[33]["date"]
    assert set(macd[0]) == {"date", "macd", "signal", "histogram"}


def test_indicators_null_for_short_history(client, use_finnhub):
    use_finnhub(FakeFinnhub(candles=make_bars([100.0] * 5)))

    response = client.get("/api/stocks/AAPL/indicators")

    assert response.status_code == 200
    assert response.json() is None


# =============================================================================
# WATCHLIST / SHARING
# =============================================================================


def test_watchlist_crud(client):
    response = client.post("/api/watchlist/u1", json={"symbol": "aapl"})
    assert response.status_code == 201
    assert response.json()["symbol"] == "AAPL"
    assert "addedAt" in response.json()

    items = client.get("/api/watchlist/u1").json()
    assert [i["symbol"] for i in items] == ["AAPL"]

    assert client.delete("/api/watchlist/u1/AAPL").json() == {"success": True}
    assert client.delete("/api/watchlist/u1/AAPL").status_code == 404


def test_watchlist_rejects_bad_symbol(client):
    assert client.post("/api/watchlist/u1", json={"symbol": "NOT A TICKER"}).status_code == 400
    assert client.post("/api/watchlist/u1", json={"symbol": ""}).status_code == 422


def test_export_import(client):
    client.post("/api/watchlist/u1", json={"symbol": "AAPL"})
    client.post("/api/watchlist/u1", json={"symbol": "MSFT"})

    export = client.get("/api/watchlist/u1/export").json()
    assert export["symbols"] == ["AAPL", "MSFT"]
    assert export["userId"] == "u1"

    result = client.post("/api/watchlist/u2/import", json=export).json()
    assert result["added"] == ["AAPL", "MSFT"]

    result = client.post(
        "/api/watchlist/u2/import", json={"symbols": ["TSLA", "??"], "replace": True}
    ).json()
    assert result["added"] == ["TSLA"]
    assert result["invalid"] == ["??"]
    assert [i["symbol"] for i in client.get("/api/watchlist/u2").json()] == ["TSLA"]


def test_share_flow(client):
    client.post("/api/watchlist/u1", json={"symbol": "AAPL"})

    response = client.post("/api/watchlist/u1/share", json={"label": "My picks"})
    assert response.status_code == 201
    share_id = response.json()["shareId"]

    shared = client.get(f"/api/share/{share_id}").json()
    assert shared["symbols"] == ["AAPL"]
    assert shared["stockCount"] == 1
    assert [s["shareId"] for s in client.get("/api/watchlist/u1/shares").json()] == [share_id]

    saved = client.post("/api/watchlist/u2/saved", json={"shareId": share_id, "alias": "Alice"})
    assert saved.status_code == 201
    assert client.get("/api/watchlist/u2/saved").json()[0]["alias"] == "Alice"

    assert client.delete(f"/api/watchlist/u1/share/{share_id}").json() == {"success": True}
    assert client.get(f"/api/share/{share_id}").status_code == 404
    assert client.get("/api/watchlist/u2/saved").json() == []


def test_share_empty_watchlist(client):
    assert client.post("/api/watchlist/u1/share", json={}).status_code == 400


def test_save_unknown_share(client):
    response = client.post("/api/watchlist/u2/saved", json={"shareId": "missing"})
    assert response.status_code == 404


def test_remove_saved(client):
    client.post("/api/watchlist/u1", json={"symbol": "AAPL"})
    share_id = client.post("/api/watchlist/u1/share", json={}).json()["shareId"]
    saved_id = client.post("/api/watchlist/u2/saved", json={"shareId": share_id}).json()["id"]

    assert client.delete(f"/api/watchlist/u2/saved/{saved_id}").json() == {"success": True}
    assert client.delete(f"/api/watchlist/u2/saved/{saved_id}").status_code == 404


def test_import_accepts_bare_symbol_list(client):
    client.post("/api/watchlist/u1", json={"symbol": "AAPL"})

    response = client.post("/api/watchlist/u1/import", json=["aapl", "msft", "??"])

    assert response.status_code == 200
    assert response.json() == {
        "added": ["MSFT"],
        "skipped": ["AAPL"],
        "invalid": ["??"],
        "total": 3,
    }
    assert [i["symbol"] for i in client.get("/api/watchlist/u1").json()] == ["AAPL", "MSFT"]


def test_import_rejects_oversized_list(client):
    response = client.post("/api/watchlist/u1/import", json=[f"S{i}" for i in range(501)])
    assert response.status_code == 422
