from typing import Any

from tradedesk.schemas import APIModel
from tradedesk.signals.schemas import SentimentSnapshot


class Article(APIModel):
    title: str
    summary: str | None = None
    source: str | None = None
    url: str | None = None
    time_published: str | None = None
    sentiment_score: float | None = None
    sentiment_label: str | None = None
    ticker_sentiment: list[dict[str, Any]] = []


class Mover(APIModel):
    ticker: str
    price: float
    change_amount: float
    change_percent: float
    volume: int


class Movers(APIModel):
    top_gainers: list[Mover] = []
    top_losers: list[Mover] = []
    most_active: list[Mover] = []


class NewsResponse(APIModel):
    symbol: str | None
    articles: list[Article]
    sentiment: SentimentSnapshot
    top_gainers: list[Mover]
    top_losers: list[Mover]
    movers_error: str | None = None
    timestamp: str
