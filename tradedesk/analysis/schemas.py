from enum import StrEnum
from typing import Any

from pydantic import Field

from tradedesk.market.schemas import Quote
from tradedesk.schemas import APIModel
from tradedesk.signals.schemas import (
    MarketSession,
    OptionsStrategy,
    SentimentSnapshot,
    SignalSummary,
    TechnicalSnapshot,
)


class AnalysisType(StrEnum):
    ANALYSIS = "analysis"
    SMART_PLAYS = "smartplays"
    ALERTS = "alerts"


class AnalysisRequest(APIModel):
    symbol: str | None = Field(default=None, max_length=10)
    type: AnalysisType = AnalysisType.ANALYSIS


class DataQuality(APIModel):
    has_stock_data: bool
    top_gainers: int
    top_losers: int
    news_articles: int
    sentiment: str
    vix_level: float | None
    technicals: int
    failed_sources: list[str]


class AnalysisResponse(APIModel):
    type: AnalysisType
    symbol: str | None
    analysis: dict[str, Any] | None
    message: str | None = None
    market_session: MarketSession
    data_quality: DataQuality
    sources: dict[str, Any]
    timestamp: str


class SmartSignal(APIModel):
    symbol: str
    quote: Quote | None
    technicals: TechnicalSnapshot
    sentiment: SentimentSnapshot | None
    summary: SignalSummary
    assessment: str
    reasoning: str
    rsi_extreme: str | None = None
    options_strategy: OptionsStrategy | None
    report: str
    failed_sources: list[str] = []
    timestamp: str
