import httpx
import structlog

from tradedesk.config import settings
from tradedesk.http import request_json
from tradedesk.social.schemas import StockTwitsSentiment

logger = structlog.get_logger()

SOURCE = "StockTwits"
_MESSAGES_ANALYSED = 20


class StockTwitsClient:
    """Public symbol streams; no credentials required."""

    def __init__(self, http: httpx.AsyncClient, base_url: str | None = None) -> None:
        self._http = http
        self._base_url = (base_url or settings.stocktwits_url).rstrip("/")

    async def symbol_sentiment(self, symbol: str) -> StockTwitsSentiment | None:
        """Share of tagged bullish/bearish posts among the latest messages; None when quiet."""
        data = await request_json(
            self._http, "GET", f"{self._base_url}/streams/symbol/{symbol}.json", source=SOURCE
        )
        messages = (data or {}).get("messages") or []
        messages = messages[:_MESSAGES_ANALYSED]
        if not messages:
            return None

        bullish = bearish = neutral = 0
        for message in messages:
            basic = ((message.get("entities") or {}).get("sentiment") or {}).get("basic")
            if basic == "Bullish":
                bullish += 1
            elif basic == "Bearish":
                bearish += 1
            else:
                neutral += 1

        total = len(messages)
        logger.debug("stocktwits_sentiment", symbol=symbol, bullish=bullish, bearish=bearish)
        return StockTwitsSentiment(
            symbol=symbol,
            bullish_percentage=round(bullish / total * 100),
            bearish_percentage=round(bearish / total * 100),
            neutral_percentage=round(neutral / total * 100),
            message_count=total,
        )
