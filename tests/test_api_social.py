import pytest

from tests.conftest import global_quote


def message(content: str, author: str = "trader") -> dict:
    return {"content": content, "author": {"username": author}, "timestamp": "2026-10-16T14:30:00Z"}


def twit(basic: str | None) -> dict:
    return {"entities": {"sentiment": {"basic": basic} if basic else None}}


@pytest.fixture
def discord_configured(test_settings, monkeypatch):
    monkeypatch.setattr(test_settings, "discord_bot_token", "bot-token")
    monkeypatch.setattr(test_settings, "discord_channel_id", "123")


@pytest.mark.asyncio
async def test_discord_requires_configuration(client):
    resp = await client.get("/api/v1/discord/sentiment", params={"symbol": "AAPL"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "CONFIGURATION_ERROR"
    assert "TD_DISCORD_BOT_TOKEN" in resp.json()["message"]


@pytest.mark.asyncio
@pytest.mark.usefixtures("discord_configured")
async def test_discord_sentiment(client, upstream):
    upstream.discord_messages = [
        message("AAPL calls are going to the moon"),
        message("$AAPL breakout, buying more"),
        message("selling my AAPL, looks like a correction"),
        message("AAPL flat today"),
        message("TSLA short squeeze"),
        message("snapple is tasty"),
    ]

    resp = await client.get("/api/v1/discord/sentiment", params={"symbol": "aapl"})

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["symbol"] == "AAPL"
    assert data["totalMessages"] == 4
    assert data["bullishCount"] == 2
    assert data["bearishCount"] == 1
    assert data["neutralCount"] == 1
    assert data["overallSentiment"] == "bullish"
    assert data["confidence"] == 50
    assert data["topKeywords"][0] in {"calls (1)", "moon (1)", "breakout (1)", "correction (1)"}
    assert upstream.requests[0].headers["authorization"] == "Bot bot-token"


@pytest.mark.asyncio
@pytest.mark.usefixtures("discord_configured")
async def test_discord_mentions(client, upstream):
    upstream.discord_messages = [message("NVDA puts printing"), message("nothing here")]

    resp = await client.get("/api/v1/discord/mentions", params={"symbol": "NVDA"})

    data = resp.json()
    assert data["totalFound"] == 1
    assert data["mentions"][0]["sentiment"] == "bearish"


@pytest.mark.asyncio
@pytest.mark.usefixtures("discord_configured")
async def test_post_discord_analysis(client, upstream):
    upstream.alpha_vantage["GLOBAL_QUOTE:AAPL"] = global_quote("AAPL", 187.31, change_percent=1.25)

    resp = await client.post("/api/v1/discord/analysis", params={"symbol": "AAPL"})

    assert resp.status_code == 200, resp.text
    assert resp.json() == {"success": True, "message": "Analysis posted to Discord", "messageId": "msg-1"}
    (post,) = upstream.discord_posts
    assert post["content"] == "**AAPL Analysis Complete**"
    fields = {f["name"]: f["value"] for f in post["embeds"][0]["fields"]}
    assert fields["Current Price"] == "$187.31"
    assert fields["Change"] == "+1.25%"


@pytest.mark.asyncio
async def test_post_discord_analysis_requires_configuration(client, upstream):
    resp = await client.post("/api/v1/discord/analysis", params={"symbol": "AAPL"})

    assert resp.status_code == 500
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_stocktwits_sentiment(client, upstream):
    upstream.stocktwits["TSLA"] = {
        "messages": [twit("Bullish"), twit("Bullish"), twit("Bearish"), twit(None)]
    }

    resp = await client.get("/api/v1/stocktwits", params={"symbol": "tsla"})

    assert resp.status_code == 200
    assert resp.json()["TSLA"] == {
        "symbol": "TSLA",
        "bullishPercentage": 50,
        "bearishPercentage": 25,
        "neutralPercentage": 25,
        "messageCount": 4,
    }


@pytest.mark.asyncio
async def test_stocktwits_failure_is_empty(client):
    resp = await client.get("/api/v1/stocktwits", params={"symbol": "TSLA"})

    assert resp.status_code == 200
    assert resp.json() == {}
