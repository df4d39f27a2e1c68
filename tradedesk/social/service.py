import asyncio
from datetime import UTC, datetime

import structlog

from tradedesk.social.discord import DiscordClient
from tradedesk.social.keywords import KeywordTally, mentions_symbol, message_sentiment
from tradedesk.social.schemas import (
    ChannelMessage,
    DiscordMentions,
    DiscordPostRequest,
    DiscordPostResult,
    DiscordSentiment,
    StockTwitsSentiment,
)
from tradedesk.social.stocktwits import StockTwitsClient

logger = structlog.get_logger()

_RECENT_MESSAGES = 5
_MAX_MENTIONS = 10
_PREVIEW_LENGTH = 100


def _channel_message(message: dict, sentiment: str, preview: bool = False) -> ChannelMessage:
    content = message.get("content", "")
    return ChannelMessage(
        content=content[:_PREVIEW_LENGTH] if preview else content,
        author=(message.get("author") or {}).get("username", "unknown"),
        timestamp=message.get("timestamp", ""),
        sentiment=sentiment,
    )


class SocialService:
    def __init__(self, stocktwits: StockTwitsClient, discord: DiscordClient) -> None:
        self._stocktwits = stocktwits
        self._discord = discord

    @property
    def discord_configured(self) -> bool:
        return self._discord.configured

    def require_discord(self) -> None:
        self._discord.require_configured()

    async def stocktwits_sentiment(self, symbols: list[str]) -> dict[str, StockTwitsSentiment]:
        results = await asyncio.gather(
            *(self._stocktwits.symbol_sentiment(s) for s in symbols), return_exceptions=True
        )
        sentiment: dict[str, StockTwitsSentiment] = {}
        for symbol, result in zip(symbols, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("stocktwits_failed", symbol=symbol, error=str(result))
                continue
            if result is not None:
                sentiment[symbol] = result
        return sentiment

    async def _symbol_messages(self, symbol: str, limit: int) -> list[dict]:
        messages = await self._discord.recent_messages(limit=limit)
        return [m for m in messages if mentions_symbol(m.get("content", ""), symbol)]

    async def discord_sentiment(self, symbol: str) -> DiscordSentiment:
        symbol = symbol.upper().strip()
        logger.info("discord_sentiment", symbol=symbol)
        messages = await self._symbol_messages(symbol, limit=100)

        tally = KeywordTally()
        recent: list[ChannelMessage] = []
        for message in messages:
            sentiment = tally.add(message.get("content", ""))
            if len(recent) < _RECENT_MESSAGES:
                recent.append(_channel_message(message, sentiment, preview=True))

        overall, confidence = tally.overall()
        return DiscordSentiment(
            symbol=symbol,
            total_messages=tally.total,
            bullish_count=tally.bullish,
            bearish_count=tally.bearish,
            neutral_count=tally.neutral,
            overall_sentiment=overall,
            confidence=confidence,
            bullish_percentage=tally.percentage(tally.bullish),
            bearish_percentage=tally.percentage(tally.bearish),
            recent_messages=recent,
            top_keywords=tally.top_keywords(),
            timestamp=datetime.now(UTC).isoformat(),
        )

    async def discord_mentions(self, symbol: str) -> DiscordMentions:
        symbol = symbol.upper().strip()
        messages = await self._symbol_messages(symbol, limit=50)
        mentions = [
            _channel_message(m, message_sentiment(m.get("content", "")))
            for m in messages[:_MAX_MENTIONS]
        ]
        return DiscordMentions(symbol=symbol, mentions=mentions, total_found=len(mentions))

    async def post_analysis(self, request: DiscordPostRequest) -> DiscordPostResult:
        symbol = request.symbol.upper().strip()
        price = f"${request.price:.2f}" if request.price is not None else "N/A"
        if request.change_percent is not None:
            sign = "+" if request.change_percent >= 0 else ""
            change = f"{sign}{request.change_percent:.2f}%"
        else:
            change = "N/A"

        fields = [
            {"name": "Current Price", "value": price, "inline": True},
            {"name": "Change", "value": change, "inline": True},
            {"name": "Sentiment", "value": request.sentiment or "Mixed", "inline": True},
            {"name": "Strategy", "value": request.strategy or "Analyzing...", "inline": False},
        ]
        posted = await self._discord.post_embed(
            content=f"**{symbol} Analysis Complete**",
            title=f"Analysis: {symbol}",
            fields=fields,
        )
        logger.info("discord_analysis_posted", symbol=symbol)
        return DiscordPostResult(
            success=True, message="Analysis posted to Discord", message_id=posted.get("id")
        )
