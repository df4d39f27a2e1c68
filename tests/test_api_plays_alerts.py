import httpx
import pytest

from tests.conftest import global_quote, indicator, yahoo_info
from tradedesk.signals import session as sessions
from tradedesk.signals.schemas import MarketSession


def mover(ticker: str, price: float, change_percent: float, volume: int) -> dict:
    return {
        "ticker": ticker,
        "price": str(price),
        "change_amount": f"{price * change_percent / 100:.4f}",
        "change_percentage": f"{change_percent}%",
        "volume": str(volume),
    }


def intraday(volume: int):
    def respond(request: httpx.Request) -> httpx.Response:
        interval = request.url.params["interval"]
        bars = {
            f"2026-10-16 15:{59 - i:02d}:00": {
                "1. open": "20.0",
                "2. high": "21.0",
                "3. low": "19.0",
                "4. close": "20.5",
                "5. volume": str(volume),
            }
            for i in range(20)
        }
        return httpx.Response(200, json={f"Time Series ({interval})": bars})

    return respond


@pytest.fixture
def market_open(monkeypatch):
    monkeypatch.setattr(sessions, "current_session", lambda now=None: MarketSession.MARKET_OPEN)


@pytest.mark.asyncio
@pytest.mark.usefixtures("market_open")
async def test_plays_ranked_by_confidence_and_volume(client, upstream):
    upstream.alpha_vantage["TOP_GAINERS_LOSERS"] = {
        "top_gainers": [
            mover("ABC", 20.0, 8.0, 2_000_000),
            mover("XYZ", 15.0, 12.0, 500_000),
            mover("PNY", 0.5, 40.0, 9_000_000),
        ],
        "top_losers": [mover("DEF", 10.0, -9.0, 3_000_000)],
    }
    upstream.alpha_vantage["TIME_SERIES_INTRADAY:ABC"] = intraday(100_000)
    upstream.alpha_vantage["TIME_SERIES_INTRADAY:XYZ"] = intraday(400_000)
    upstream.alpha_vantage["TIME_SERIES_INTRADAY:DEF"] = intraday(200_000)
    upstream.alpha_vantage["TIME_SERIES_INTRADAY:SPY"] = intraday(5_000_000)

    resp = await client.get("/api/v1/plays")

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["marketSession"] == "Market Open"
    assert data["dataFrequency"] == "1min"
    assert data["totalMoversAnalyzed"] == 4
    assert data["qualifyingPlays"] == 2
    assert [p["ticker"] for p in data["plays"]] == ["ABC", "DEF"]

    abc, def_ = data["plays"]
    assert abc["strategy"] == "Momentum Continuation"
    assert abc["type"] == "LONG"
    assert abc["stopLoss"] == 19.0
    assert abc["target"] == 22.0
    assert abc["confidence"] == 76
    assert abc["volumeRatio"] == 20.0
    assert def_["strategy"] == "Oversold Bounce"
    assert def_["type"] == "BOUNCE"

    assert data["marketContext"]["SPY"]["price"] == 20.5
    assert "error" in data["marketContext"]["QQQ"]


@pytest.mark.asyncio
async def test_plays_without_movers(client, upstream):
    upstream.alpha_vantage["TOP_GAINERS_LOSERS"] = {"top_gainers": [], "top_losers": []}

    resp = await client.get("/api/v1/plays")

    assert resp.status_code == 200
    data = resp.json()
    assert data["plays"] == []
    assert data["message"] == "No qualifying real-time opportunities available"


@pytest.mark.asyncio
async def test_plays_require_api_key(client, test_settings, monkeypatch):
    monkeypatch.setattr(test_settings, "alpha_vantage_api_key", "")

    resp = await client.get("/api/v1/plays")

    assert resp.status_code == 500
    assert resp.json()["error"] == "CONFIGURATION_ERROR"


@pytest.mark.asyncio
async def test_plays_movers_rate_limited(client, upstream):
    upstream.alpha_vantage["TOP_GAINERS_LOSERS"] = {"Note": "Thank you for using Alpha Vantage!"}

    resp = await client.get("/api/v1/plays")

    assert resp.status_code == 429


@pytest.mark.asyncio
async def test_alerts(client, upstream):
    upstream.yahoo["^VIX"] = yahoo_info(27.0, 24.0)
    upstream.alpha_vantage["GLOBAL_QUOTE:AAPL"] = global_quote("AAPL", 190.0, change_percent=4.2)
    upstream.alpha_vantage["GLOBAL_QUOTE:SPY"] = global_quote("SPY", 580.0, volume=60_000_000)
    upstream.alpha_vantage["RSI:TSLA"] = indicator("RSI", {"RSI": "80.0"})

    resp = await client.get("/api/v1/alerts")

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["marketStatus"] in {"open", "extended", "closed"}
    by_type = {a["type"]: a for a in data["alerts"]}
    assert by_type["market_volatility"]["priority"] == "high"
    assert by_type["price_movement"]["ticker"] == "AAPL"
    assert by_type["volume_spike"]["ticker"] == "SPY"
    assert by_type["technical_extreme"]["action"] == "consider_puts"
    assert [a["priority"] for a in data["alerts"][:2]] == ["high", "high"]
    assert data["alerts"][2]["priority"] == "medium"


@pytest.mark.asyncio
async def test_alerts_require_api_key(client, test_settings, monkeypatch):
    monkeypatch.setattr(test_settings, "alpha_vantage_api_key", "")

    resp = await client.get("/api/v1/alerts")

    assert resp.status_code == 500
