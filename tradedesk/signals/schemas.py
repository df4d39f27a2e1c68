from enum import StrEnum

from tradedesk.schemas import APIModel


class Bias(StrEnum):
    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"


class SentimentLabel(StrEnum):
    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"
    UNKNOWN = "Unknown"


class Strength(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MarketSession(StrEnum):
    WEEKEND = "Weekend"
    FUTURES_OPEN = "Futures Open"
    PRE_MARKET = "Pre-Market"
    MARKET_OPEN = "Market Open"
    AFTER_HOURS = "After Hours"
    MARKET_CLOSED = "Market Closed"


class MACDValues(APIModel):
    macd: float
    signal: float
    histogram: float | None = None


class BollingerBands(APIModel):
    upper: float
    middle: float
    lower: float


class TechnicalSnapshot(APIModel):
    rsi: float | None = None
    macd: MACDValues | None = None
    sma20: float | None = None
    sma50: float | None = None
    sma200: float | None = None
    bollinger_bands: BollingerBands | None = None
    adx: float | None = None

    def trend_sma(self) -> float | None:
        """The moving average the trend rule compares price against."""
        return self.sma20 if self.sma20 is not None else self.sma50


class Signal(APIModel):
    type: str
    indicator: str
    signal: str
    strength: Strength
    message: str


class SignalSummary(APIModel):
    overall: Bias
    strength: float
    bullish: int
    bearish: int
    total: int
    signals: list[Signal]


class SentimentSnapshot(APIModel):
    score: float | None
    label: SentimentLabel
    article_count: int


class OptionLeg(APIModel):
    action: str  # "buy" / "sell"
    option_type: str  # "call" / "put"
    strike: float


class OptionsStrategy(APIModel):
    name: str
    bias: Bias
    buy_strike: float
    sell_strike: float
    legs: list[OptionLeg]
    recommendation: str


class SessionInfo(APIModel):
    session: MarketSession
    refresh_seconds: int
    update_frequency: str
    eastern_time: str | None = None
