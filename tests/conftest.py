import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tradedesk.config import settings
from tradedesk.exceptions import NotFoundError
from tradedesk.main import app
from tradedesk.market.providers import yahoo_finance

Payload = dict[str, Any] | list[Any] | Callable[[httpx.Request], httpx.Response]


def global_quote(
    symbol: str,
    price: float,
    change: float = 1.5,
    change_percent: float = 1.2,
    volume: int = 1_000_000,
) -> dict:
    return {
        "Global Quote": {
            "01. symbol": symbol,
            "02. open": f"{price - 1:.4f}",
            "03. high": f"{price + 2:.4f}",
            "04. low": f"{price - 2:.4f}",
            "05. price": f"{price:.4f}",
            "06. volume": str(volume),
            "07. latest trading day": "2026-10-16",
            "08. previous close": f"{price - change:.4f}",
            "09. change": f"{change:.4f}",
            "10. change percent": f"{change_percent:.4f}%",
        }
    }


def indicator(function: str, values: dict[str, str]) -> dict:
    return {
        "Meta Data": {"1: Symbol": "TEST"},
        f"Technical Analysis: {function}": {"2026-10-16": values, "2026-10-15": values},
    }


def yahoo_info(price: float, previous_close: float) -> dict:
    return {
        "shortName": "Test",
        "regularMarketPrice": price,
        "regularMarketPreviousClose": previous_close,
        "regularMarketVolume": 0,
        "regularMarketDayHigh": price,
        "regularMarketDayLow": price,
        "regularMarketOpen": price,
    }


class FakeUpstream:
    """Serves canned upstream responses to the shared httpx client.

    Alpha Vantage payloads are keyed by ``function`` or ``function:symbol``;
    anything unregistered answers HTTP 500, so sources fail unless a test
    sets them up.
    """

    def __init__(self) -> None:
        self.alpha_vantage: dict[str, Payload] = {}
        self.stocktwits: dict[str, Payload] = {}
        self.discord_messages: list[dict] | None = None
        self.discord_posts: list[dict] = []
        self.yahoo: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []

    def _respond(self, payload: Payload | None, request: httpx.Request) -> httpx.Response:
        if payload is None:
            return httpx.Response(500, text="upstream down")
        if callable(payload):
            return payload(request)
        return httpx.Response(200, json=payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "www.alphavantage.co":
            function = request.url.params.get("function")
            symbol = request.url.params.get("symbol")
            payload = self.alpha_vantage.get(f"{function}:{symbol}", self.alpha_vantage.get(function))
            return self._respond(payload, request)
        if host == "api.stocktwits.com":
            symbol = request.url.path.rsplit("/", 1)[-1].removesuffix(".json")
            return self._respond(self.stocktwits.get(symbol), request)
        if host == "discord.com":
            if request.method == "POST":
                self.discord_posts.append(json.loads(request.content))
                return httpx.Response(200, json={"id": "msg-1"})
            return self._respond(self.discord_messages, request)
        return httpx.Response(404)

    def ticker_info(self, symbol: str) -> dict:
        if symbol not in self.yahoo:
            raise NotFoundError("Ticker", symbol)
        return self.yahoo[symbol]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    monkeypatch.setattr(settings, "alpha_vantage_api_key", "test-key")
    monkeypatch.setattr(settings, "llm_provider", "openai")
    monkeypatch.setattr(settings, "openai_api_key", "")
    monkeypatch.setattr(settings, "anthropic_api_key", "")
    monkeypatch.setattr(settings, "discord_bot_token", "")
    monkeypatch.setattr(settings, "discord_channel_id", "")
    monkeypatch.setattr(settings, "allow_simulated_quotes", False)
    monkeypatch.setattr(settings, "allow_estimated_options", False)
    return settings


@pytest_asyncio.fixture
async def client(upstream, monkeypatch):
    monkeypatch.setattr(yahoo_finance, "_fetch_ticker_info", upstream.ticker_info)
    http = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    app.state.http_client = http
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    await http.aclose()
