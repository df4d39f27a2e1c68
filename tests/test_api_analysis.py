import asyncio

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from tests.conftest import global_quote, indicator, yahoo_info
from tradedesk.dependencies import get_llm
from tradedesk.main import app

NEWS_FEED = {
    "feed": [
        {"title": "Chipmakers rally", "source": "Wire", "overall_sentiment_score": 0.3},
        {"title": "Guidance raised", "source": "Wire", "overall_sentiment_score": "0.25"},
        {"title": "Supply concerns", "source": "Wire", "overall_sentiment_score": 0.1},
    ]
}


class BrokenChatModel(FakeListChatModel):
    async def ainvoke(self, *args, **kwargs):
        raise RuntimeError("provider unavailable")


class SlowChatModel(FakeListChatModel):
    async def ainvoke(self, *args, **kwargs):
        await asyncio.sleep(1)
        return await super().ainvoke(*args, **kwargs)


def use_llm(llm):
    app.dependency_overrides[get_llm] = lambda: llm
    return llm


@pytest.mark.asyncio
async def test_no_data_skips_the_llm(client):
    llm = use_llm(FakeListChatModel(responses=['{"summary": "should not be used"}']))

    resp = await client.post("/api/v1/analysis", json={"symbol": "AAPL", "type": "analysis"})

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["analysis"] is None
    assert data["message"]
    assert data["dataQuality"]["hasStockData"] is False
    assert data["dataQuality"]["failedSources"] == [
        "movers", "news", "quote", "social", "technicals", "vix"
    ]
    assert all("error" in entry for entry in data["sources"].values())
    assert llm.i == 0


@pytest.mark.asyncio
async def test_smart_plays_analysis(client, upstream):
    upstream.alpha_vantage["NEWS_SENTIMENT"] = NEWS_FEED
    upstream.yahoo["^VIX"] = yahoo_info(18.5, 18.0)
    use_llm(
        FakeListChatModel(
            responses=['```json\n{"marketCondition": "Constructive", "plays": []}\n```']
        )
    )

    resp = await client.post("/api/v1/analysis", json={"type": "smartplays"})

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["type"] == "smartplays"
    assert data["symbol"] is None
    assert data["analysis"] == {"marketCondition": "Constructive", "plays": []}
    quality = data["dataQuality"]
    assert quality["newsArticles"] == 3
    assert quality["sentiment"] == "Bullish"
    assert quality["vixLevel"] == 18.5
    assert data["sources"]["news"]["sentiment"]["score"] == 0.2167


@pytest.mark.asyncio
async def test_unparseable_llm_reply(client, upstream):
    upstream.alpha_vantage["GLOBAL_QUOTE"] = global_quote("AAPL", 187.31)
    use_llm(FakeListChatModel(responses=["I think the stock looks fine."]))

    resp = await client.post("/api/v1/analysis", json={"symbol": "AAPL"})

    assert resp.status_code == 200
    assert resp.json()["analysis"] is None
    assert resp.json()["dataQuality"]["hasStockData"] is True


@pytest.mark.asyncio
async def test_symbol_required_for_stock_analysis(client):
    use_llm(FakeListChatModel(responses=["{}"]))

    resp = await client.post("/api/v1/analysis", json={"type": "analysis"})

    assert resp.status_code == 422
    assert resp.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_llm_failure_is_bad_gateway(client, upstream):
    upstream.alpha_vantage["GLOBAL_QUOTE"] = global_quote("AAPL", 187.31)
    use_llm(BrokenChatModel(responses=[]))

    resp = await client.post("/api/v1/analysis", json={"symbol": "AAPL"})

    assert resp.status_code == 502
    assert resp.json()["error"] == "UPSTREAM_ERROR"


@pytest.mark.asyncio
async def test_llm_timeout(client, upstream, test_settings, monkeypatch):
    upstream.alpha_vantage["GLOBAL_QUOTE"] = global_quote("AAPL", 187.31)
    monkeypatch.setattr(test_settings, "llm_timeout", 0.05)
    use_llm(SlowChatModel(responses=["{}"]))

    resp = await client.post("/api/v1/analysis", json={"symbol": "AAPL"})

    assert resp.status_code == 504
    assert resp.json()["error"] == "UPSTREAM_TIMEOUT"


@pytest.mark.asyncio
async def test_missing_llm_key(client, upstream, test_settings, monkeypatch):
    monkeypatch.setattr(test_settings, "llm_provider", "openai")
    monkeypatch.setattr(test_settings, "openai_api_key", "")

    resp = await client.post("/api/v1/analysis", json={"symbol": "AAPL"})

    assert resp.status_code == 500
    assert "TD_OPENAI_API_KEY" in resp.json()["message"]


@pytest.mark.asyncio
async def test_smart_signal_extreme_rsi(client, upstream):
    upstream.alpha_vantage["GLOBAL_QUOTE"] = global_quote("AAPL", 105.0, change=2.16, change_percent=2.1)
    upstream.alpha_vantage["RSI"] = indicator("RSI", {"RSI": "76.0000"})
    upstream.alpha_vantage["MACD"] = indicator(
        "MACD", {"MACD": "1.2000", "MACD_Signal": "0.8000", "MACD_Hist": "0.4000"}
    )
    upstream.alpha_vantage["SMA"] = indicator("SMA", {"SMA": "100.0000"})
    upstream.alpha_vantage["NEWS_SENTIMENT"] = NEWS_FEED

    resp = await client.get("/api/v1/analysis/signal", params={"symbol": "aapl"})

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["summary"]["overall"] == "Bullish"
    assert data["assessment"] == "Bullish"
    assert data["rsiExtreme"] == "Extremely Overbought"
    assert data["optionsStrategy"]["name"] == "Bear Put Spread"
    assert data["optionsStrategy"]["recommendation"].startswith("Cautionary")
    assert data["sentiment"]["label"] == "Bullish"
    assert data["failedSources"] == []
    assert "**AAPL Smart Analysis**" in data["report"]
