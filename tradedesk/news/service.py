from datetime import UTC, datetime

import structlog

from tradedesk.exceptions import AppError, ValidationError
from tradedesk.market.providers.alpha_vantage import AlphaVantageClient
from tradedesk.news.schemas import Article, Mover, Movers, NewsResponse
from tradedesk.signals.sentiment import aggregate_sentiment, numeric_scores
from tradedesk.signals.schemas import SentimentSnapshot
from tradedesk.signals.thresholds import get_thresholds

logger = structlog.get_logger()

_ARTICLE_LIMIT = 10
_MOVER_LIMIT = 5
_MAX_TICKERS = 10


def _to_float(value: object) -> float:
    try:
        return float(str(value).rstrip("%"))
    except (TypeError, ValueError):
        return 0.0


def parse_movers(items: list[dict] | None) -> list[Mover]:
    movers = []
    for item in items or []:
        if not item.get("ticker"):
            continue
        movers.append(
            Mover(
                ticker=item["ticker"],
                price=_to_float(item.get("price")),
                change_amount=_to_float(item.get("change_amount")),
                change_percent=_to_float(item.get("change_percentage", item.get("change_percent"))),
                volume=int(_to_float(item.get("volume"))),
            )
        )
    return movers


def _article(item: dict) -> Article:
    scores = numeric_scores([item.get("overall_sentiment_score")])
    return Article(
        title=item.get("title", ""),
        summary=item.get("summary"),
        source=item.get("source"),
        url=item.get("url"),
        time_published=item.get("time_published"),
        sentiment_score=scores[0] if scores else None,
        sentiment_label=item.get("overall_sentiment_label"),
        ticker_sentiment=item.get("ticker_sentiment") or [],
    )


def _tickers_param(symbol: str | None, tickers: str | None) -> str | None:
    requested = [t.strip().upper() for t in (tickers or "").split(",") if t.strip()]
    if symbol:
        requested.insert(0, symbol.strip().upper())
    requested = list(dict.fromkeys(requested))
    if len(requested) > _MAX_TICKERS:
        raise ValidationError(f"Maximum {_MAX_TICKERS} tickers allowed per request")
    return ",".join(requested) or None


class NewsService:
    def __init__(self, client: AlphaVantageClient) -> None:
        self._client = client

    async def get_articles(
        self, symbol: str | None = None, tickers: str | None = None
    ) -> tuple[list[Article], SentimentSnapshot]:
        """Latest articles plus the sentiment of the whole feed."""
        feed = await self._client.news_sentiment(tickers=_tickers_param(symbol, tickers))
        scores = numeric_scores(item.get("overall_sentiment_score") for item in feed)
        sentiment = aggregate_sentiment(scores, get_thresholds())
        articles = [_article(item) for item in feed[:_ARTICLE_LIMIT]]
        return articles, sentiment

    async def get_movers(self, limit: int = _MOVER_LIMIT) -> Movers:
        data = await self._client.top_gainers_losers()
        return Movers(
            top_gainers=parse_movers(data.get("top_gainers"))[:limit],
            top_losers=parse_movers(data.get("top_losers"))[:limit],
            most_active=parse_movers(data.get("most_actively_traded"))[:limit],
        )

    async def get_news(self, symbol: str | None = None, tickers: str | None = None) -> NewsResponse:
        logger.info("news_get", symbol=symbol, tickers=tickers)
        articles, sentiment = await self.get_articles(symbol, tickers)

        movers_error = None
        try:
            movers = await self.get_movers()
        except AppError as exc:
            logger.warning("news_movers_failed", error=exc.message)
            movers, movers_error = Movers(), exc.message

        return NewsResponse(
            symbol=symbol.upper() if symbol else None,
            articles=articles,
            sentiment=sentiment,
            top_gainers=movers.top_gainers,
            top_losers=movers.top_losers,
            movers_error=movers_error,
            timestamp=datetime.now(UTC).isoformat(),
        )
