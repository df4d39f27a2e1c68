import pytest

FEED = {
    "feed": [
        {"title": "Recall widens", "source": "Wire", "overall_sentiment_score": -0.4},
        {"title": "Analyst cut", "source": "Desk", "overall_sentiment_score": -0.2},
    ]
}


@pytest.mark.asyncio
async def test_news_with_movers_unavailable(client, upstream):
    upstream.alpha_vantage["NEWS_SENTIMENT"] = FEED

    resp = await client.get("/api/v1/news", params={"symbol": "tsla"})

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["symbol"] == "TSLA"
    assert [a["title"] for a in data["articles"]] == ["Recall widens", "Analyst cut"]
    assert data["sentiment"]["label"] == "Bearish"
    assert data["topGainers"] == []
    assert data["moversError"]
    news_request = next(r for r in upstream.requests if r.url.params["function"] == "NEWS_SENTIMENT")
    assert news_request.url.params["tickers"] == "TSLA"


@pytest.mark.asyncio
async def test_news_merges_symbol_and_tickers(client, upstream):
    upstream.alpha_vantage["NEWS_SENTIMENT"] = {"feed": []}

    resp = await client.get("/api/v1/news", params={"symbol": "aapl", "tickers": "msft, AAPL"})

    assert resp.status_code == 200
    assert resp.json()["sentiment"]["label"] == "Unknown"
    assert upstream.requests[0].url.params["tickers"] == "AAPL,MSFT"


@pytest.mark.asyncio
async def test_news_rejects_too_many_tickers(client):
    resp = await client.get("/api/v1/news", params={"tickers": "A,B,C,D,E,F,G,H,I,J,K"})

    assert resp.status_code == 422
    assert resp.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_movers(client, upstream):
    upstream.alpha_vantage["TOP_GAINERS_LOSERS"] = {
        "top_gainers": [
            {"ticker": "ABC", "price": "12.5", "change_amount": "2.5", "change_percentage": "25%", "volume": "900000"}
        ],
        "top_losers": [],
    }

    resp = await client.get("/api/v1/news/movers")

    assert resp.status_code == 200
    assert resp.json()["topGainers"][0]["changePercent"] == 25.0
