from typing import Any, Literal

from tradedesk.schemas import APIModel
from tradedesk.signals.schemas import MarketSession


class Play(APIModel):
    ticker: str
    title: str
    strategy: str
    type: Literal["LONG", "BOUNCE"]
    entry: float
    stop_loss: float
    target: float
    confidence: int
    risk_reward: float
    current_price: float
    change_percent: float
    volume: int
    avg_volume: int
    volume_ratio: float
    market_session: MarketSession
    reasoning: str


class PlaysResponse(APIModel):
    plays: list[Play]
    market_session: MarketSession
    market_context: dict[str, Any]
    data_frequency: str
    total_movers_analyzed: int
    qualifying_plays: int
    message: str | None = None
    timestamp: str
