"""
Market data provider tests. HTTP is replaced by canned payloads.
"""

import pytest

from stocklens.services.market_data.alpha_vantage_adapter import (
    AlphaVantageClient,
    parse_daily_series,
)
from stocklens.services.market_data.finnhub_client import FinnhubClient, FinnhubError
from stocklens.services.market_data.yahoo_adapter import period_for_days
from stocklens.services.market_data.zacks_adapter import parse_zacks_rating


def fake_fetch(responses):
    """Build a FinnhubClient.fetch replacement keyed by endpoint."""

    async def fetch(endpoint, params=None):
        response = responses[endpoint]
        if isinstance(response, Exception):
            raise response
        return response

    return fetch


@pytest.fixture
def finnhub():
    return FinnhubClient(api_key="test-key", base_url="http://finnhub.test")


# =============================================================================
# FINNHUB
# =============================================================================


async def test_search_filters_common_us_stocks(finnhub):
    finnhub.fetch = fake_fetch({
        "/search": {
            "result": [
                {"symbol": "AAPL", "description": "APPLE INC", "type": "Common Stock"},
                {"symbol": "AAPL.MX", "description": "APPLE INC", "type": "Common Stock"},
                {"symbol": "AAPLX", "description": "APPLE ETF", "type": "ETP"},
            ]
        }
    })

    results = await finnhub.search("apple")

    assert [r.symbol for r in results] == ["AAPL"]
    assert results[0].name == "APPLE INC"


async def test_search_caps_results(finnhub):
    finnhub.fetch = fake_fetch({
        "/search": {
            "result": [
                {"symbol": f"T{i}", "description": f"T{i}", "type": "Common Stock"}
                for i in range(25)
            ]
        }
    })

    assert len(await finnhub.search("t")) == 10


async def test_search_error_returns_empty(finnhub):
    finnhub.fetch = fake_fetch({"/search": FinnhubError(500, "boom")})
    assert await finnhub.search("apple") == []


async def test_get_quote(finnhub):
    finnhub.fetch = fake_fetch({
        "/quote": {"c": 190.5, "d": 1.5, "dp": 0.79, "h": 191, "l": 188, "o": 189, "pc": 189, "t": 1700000000},
        "/stock/profile2": {"name": "Apple Inc"},
    })

    quote = await finnhub.get_quote("aapl")

    assert quote.symbol == "AAPL"
    assert quote.name == "Apple Inc"
    assert quote.price == 190.5
    assert quote.change_percent == 0.79
    assert quote.model_dump(by_alias=True)["previousClose"] == 189


async def test_get_quote_without_price_is_none(finnhub):
    finnhub.fetch = fake_fetch({
        "/quote": {"c": 0, "d": None, "dp": None, "h": 0, "l": 0, "o": 0, "pc": 0, "t": 0},
        "/stock/profile2": {},
    })
    assert await finnhub.get_quote("NOPE") is None


@pytest.mark.parametrize("status", [401, 403, 429])
async def test_get_quote_reraises_credential_and_quota_errors(finnhub, status):
    finnhub.fetch = fake_fetch({
        "/quote": FinnhubError(status, "denied"),
        "/stock/profile2": {},
    })
    with pytest.raises(FinnhubError) as exc_info:
        await finnhub.get_quote("AAPL")
    assert exc_info.value.status == status


async def test_get_quote_other_errors_are_none(finnhub):
    finnhub.fetch = fake_fetch({
        "/quote": FinnhubError(404, "Resource not found"),
        "/stock/profile2": {},
    })
    assert await finnhub.get_quote("AAPL") is None


async def test_get_metrics_maps_fields(finnhub):
    finnhub.fetch = fake_fetch({
        "/stock/metric": {
            "metric": {
                "peBasicExclExtraTTM": 29.1,
                "marketCapitalization": 2900000,
                "beta": 1.2,
                "dividendYieldIndicatedAnnual": 0,
                "epsBasicExclExtraItemsTTM": 6.1,
                "52WeekHigh": 199.6,
                "52WeekLow": 164.1,
            }
        }
    })

    metrics = await finnhub.get_metrics("aapl")
    payload = metrics.model_dump(by_alias=True)

    assert metrics.market_cap == 2.9e12
    assert metrics.dividend_yield is None
    assert payload["peRatio"] == 29.1
    assert payload["high52Week"] == 199.6
    assert payload["low52Week"] == 164.1


async def test_get_metrics_error_is_empty(finnhub):
    finnhub.fetch = fake_fetch({"/stock/metric": FinnhubError(500, "boom")})
    metrics = await finnhub.get_metrics("AAPL")
    assert metrics.symbol == "AAPL"
    assert metrics.pe_ratio is None


async def test_get_candles(finnhub):
    finnhub.fetch = fake_fetch({
        "/stock/candle": {
            "s": "ok",
            "t": [1704153600, 1704240000],
            "o": [185.0, 184.0],
            "h": [188.4, 185.9],
            "l": [183.9, 183.4],
            "c": [185.6, 184.3],
            "v": [82488700, 58414500],
        }
    })

    points = await finnhub.get_candles("AAPL", days=30)

    assert [p.date for p in points] == ["2024-01-02", "2024-01-03"]
    assert points[1].close == 184.3
    assert points[0].volume == 82488700


async def test_get_candles_no_data(finnhub):
    finnhub.fetch = fake_fetch({"/stock/candle": {"s": "no_data"}})
    assert await finnhub.get_candles("AAPL") == []


async def test_get_candles_propagates_http_errors(finnhub):
    finnhub.fetch = fake_fetch({"/stock/candle": FinnhubError(403, "restricted")})
    with pytest.raises(FinnhubError):
        await finnhub.get_candles("AAPL")


async def test_analyst_ratings_latest_period(finnhub):
    finnhub.fetch = fake_fetch({
        "/stock/recommendation": [
            {"strongBuy": 12, "buy": 20, "hold": 8, "sell": 1, "strongSell": 0, "period": "2024-02-01"},
            {"strongBuy": 10, "buy": 18, "hold": 9, "sell": 2, "strongSell": 1, "period": "2024-01-01"},
        ]
    })

    rating = await finnhub.get_analyst_ratings("AAPL")

    assert rating.strong_buy == 12
    assert rating.total_analysts == 41


async def test_analyst_ratings_without_coverage(finnhub):
    finnhub.fetch = fake_fetch({
        "/stock/recommendation": [{"strongBuy": 0, "buy": 0, "hold": 0, "sell": 0, "strongSell": 0}]
    })
    assert await finnhub.get_analyst_ratings("TINY") is None


async def test_company_news_skips_incomplete_and_limits(finnhub):
    items = [
        {"id": i, "headline": f"Headline {i}", "url": f"https://news.test/{i}", "source": "Reuters", "datetime": 1700000000 + i}
        for i in range(15)
    ]
    items.insert(0, {"id": 99, "headline": "", "url": "https://news.test/x"})
    finnhub.fetch = fake_fetch({"/company-news": items})

    news = await finnhub.get_company_news("AAPL", days=7, limit=10)

    assert len(news) == 10
    assert news[0].id == 0
    assert news[0].summary is None


# =============================================================================
# ALPHA VANTAGE
# =============================================================================


def test_parse_daily_series_sorts_and_limits():
    payload = {
        "Time Series (Daily)": {
            "2024-01-04": {"1. open": "3", "2. high": "4", "3. low": "2", "4. close": "3.5", "5. volume": "300"},
            "2024-01-02": {"1. open": "1", "2. high": "2", "3. low": "0.5", "4. close": "1.5", "5. volume": "100"},
            "2024-01-03": {"1. open": "2", "2. high": "3", "3. low": "1", "4. close": "2.5", "5. volume": "200"},
        }
    }

    points = parse_daily_series(payload, limit=2)

    assert [p.date for p in points] == ["2024-01-03", "2024-01-04"]
    assert points[-1].close == 3.5
    assert points[-1].volume == 300


@pytest.mark.parametrize("payload", [
    {"Error Message": "Invalid API call."},
    {"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."},
    {},
])
def test_parse_daily_series_error_payloads(payload):
    assert parse_daily_series(payload) == []


async def test_alpha_vantage_without_key_is_empty():
    client = AlphaVantageClient(api_key="")
    assert client.is_configured is False
    assert await client.get_daily_history("AAPL") == []


# =============================================================================
# ZACKS / YAHOO
# =============================================================================


def test_parse_zacks_rating():
    rating = parse_zacks_rating(
        "aapl",
        {"AAPL": {"zacks_rank": "3", "zacks_rank_text": "Hold", "updated": "2024-02-01 10:00:00"}},
    )

    assert rating.rank == 3
    assert rating.rank_text == "Hold"
    assert rating.model_dump(by_alias=True)["updatedAt"] == "2024-02-01 10:00:00"


def test_parse_zacks_rating_fills_missing_text():
    rating = parse_zacks_rating("MSFT", {"MSFT": {"zacks_rank": 1}})
    assert rating.rank_text == "Strong Buy"


@pytest.mark.parametrize("payload", [
    {},
    {"AAPL": {"zacks_rank": ""}},
    {"AAPL": {"zacks_rank": "9"}},
    {"AAPL": "unavailable"},
])
def test_parse_zacks_rating_missing(payload):
    assert parse_zacks_rating("AAPL", payload) is None


@pytest.mark.parametrize("days,period", [(7, "1mo"), (90, "3mo"), (180, "6mo"), (365, "1y")])
def test_period_for_days(days, period):
    assert period_for_days(days) == period
