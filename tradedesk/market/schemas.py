from typing import Any

from tradedesk.schemas import APIModel
from tradedesk.signals.schemas import MarketSession, SignalSummary, TechnicalSnapshot


class Quote(APIModel):
    symbol: str
    price: float
    change: float
    change_percent: float
    volume: int
    high: float
    low: float
    open: float
    previous_close: float
    timestamp: str
    latest_trading_day: str | None = None
    is_delayed: bool = False
    data_source: str = "alpha_vantage"
    simulated: bool = False


class EnhancedQuote(Quote):
    market_session: MarketSession
    fetch_strategy: str
    refresh_seconds: int
    update_frequency: str
    proxy_for: str | None = None


class IntradayBar(APIModel):
    timestamp: str
    open: float
    high: float
    low: float
    close: float
    volume: int


class TechnicalsResponse(APIModel):
    symbol: str
    price: float | None
    technicals: TechnicalSnapshot
    trend_strength: str | None = None
    summary: SignalSummary
    timestamp: str


class OptionContract(APIModel):
    strike: float
    expiry: str
    bid: float
    ask: float
    volume: int
    open_interest: int
    is_itm: bool


class OptionsChain(APIModel):
    calls: list[OptionContract]
    puts: list[OptionContract]


class OptionsResponse(APIModel):
    symbol: str
    is_estimated: bool
    mode: str  # "live" / "estimated"
    stock_price: float | None = None
    message: str | None = None
    source: str | None = None
    options: OptionsChain | dict[str, Any]
    timestamp: str


class DashboardItem(APIModel):
    name: str
    symbol: str
    price: float | None = None
    change: float | None = None
    change_percent: float | None = None
    volume: int | None = None
    error: str | None = None


class DashboardResponse(APIModel):
    market_session: MarketSession
    indices: list[DashboardItem]
    futures: list[DashboardItem]
    commentary: str
    refresh_seconds: int
    timestamp: str


class IntelligenceResponse(APIModel):
    market_session: MarketSession
    vix: dict[str, Any]
    indices: dict[str, Any]
    sectors: dict[str, Any]
    social: dict[str, Any]
    discord: dict[str, Any] | None = None
    economic: dict[str, Any]
    overall_sentiment: str
    timestamp: str


class EconomicIndicator(APIModel):
    name: str
    value: float
    date: str
    unit: str | None = None


class EconomicResponse(APIModel):
    indicators: dict[str, EconomicIndicator]
    unavailable: list[str]
    timestamp: str


class MarketConditions(APIModel):
    vix: float | None
    fear_greed: str
    trend: str
    volatility_level: str
    market_session: MarketSession

