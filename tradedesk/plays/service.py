"""Rule-based trade setups from the day's biggest movers, confirmed by intraday volume."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from tradedesk.market.overview import error_entry, settle
from tradedesk.market.providers.alpha_vantage import AlphaVantageClient
from tradedesk.market.schemas import IntradayBar
from tradedesk.market.service import INTRADAY_INTERVALS
from tradedesk.news.schemas import Mover
from tradedesk.news.service import parse_movers
from tradedesk.plays.schemas import Play, PlaysResponse
from tradedesk.signals import session as sessions
from tradedesk.signals.schemas import MarketSession

logger = structlog.get_logger()

CONTEXT_INDICES = ["SPY", "QQQ", "IWM"]
MAX_CANDIDATES = 10
MAX_PLAYS = 5
MIN_MOVE_PERCENT = 5.0
MIN_VOLUME = 100_000
MIN_PRICE = 1.0
VOLUME_BARS = 20
MIN_VOLUME_RATIO = 1.5
DEFAULT_INTERVAL = "5min"


@dataclass(frozen=True)
class PlayTemplate:
    strategy: str
    stop_factor: float
    target_factor: float
    base_confidence: float
    confidence_per_point: float
    max_confidence: float

    def confidence(self, change_percent: float) -> float:
        return min(
            self.max_confidence,
            self.base_confidence + self.confidence_per_point * abs(change_percent),
        )


MOMENTUM_CONTINUATION = PlayTemplate("Momentum Continuation", 0.95, 1.10, 60, 2.0, 85)
GAP_UP_FOLLOW_THROUGH = PlayTemplate("Gap Up Follow-Through", 0.97, 1.08, 50, 1.5, 75)
OVERSOLD_BOUNCE = PlayTemplate("Oversold Bounce", 0.92, 1.15, 55, 1.8, 80)


def choose_template(change_percent: float, session: MarketSession) -> PlayTemplate:
    if change_percent < 0:
        return OVERSOLD_BOUNCE
    if session is MarketSession.MARKET_OPEN:
        return MOMENTUM_CONTINUATION
    return GAP_UP_FOLLOW_THROUGH


def is_candidate(mover: Mover) -> bool:
    return (
        abs(mover.change_percent) >= MIN_MOVE_PERCENT
        and mover.volume >= MIN_VOLUME
        and mover.price > MIN_PRICE
    )


def build_play(mover: Mover, bars: list[IntradayBar], session: MarketSession) -> Play | None:
    """Turn a mover into a play, or None when volume is not above the recent average."""
    recent = bars[:VOLUME_BARS]
    if not recent:
        return None
    avg_volume = sum(bar.volume for bar in recent) / len(recent)
    if avg_volume <= 0 or mover.volume <= avg_volume * MIN_VOLUME_RATIO:
        return None

    template = choose_template(mover.change_percent, session)
    entry = mover.price
    stop_loss = entry * template.stop_factor
    target = entry * template.target_factor
    volume_ratio = mover.volume / avg_volume
    move = abs(mover.change_percent)
    return Play(
        ticker=mover.ticker,
        title=f"{template.strategy} - {mover.ticker}",
        strategy=template.strategy,
        type="LONG" if mover.change_percent > 0 else "BOUNCE",
        entry=round(entry, 2),
        stop_loss=round(stop_loss, 2),
        target=round(target, 2),
        confidence=round(template.confidence(mover.change_percent)),
        risk_reward=round((target - entry) / (entry - stop_loss), 2),
        current_price=mover.price,
        change_percent=mover.change_percent,
        volume=mover.volume,
        avg_volume=round(avg_volume),
        volume_ratio=round(volume_ratio, 1),
        market_session=session,
        reasoning=(
            f"{mover.ticker} showing {move:.1f}% move with {mover.volume / 1_000_000:.1f}M volume "
            f"({volume_ratio:.1f}x average). {template.strategy} setup based on "
            f"{session} conditions."
        ),
    )


class PlaysService:
    def __init__(self, client: AlphaVantageClient) -> None:
        self._client = client

    async def _index_context(self, interval: str) -> dict[str, dict]:
        results = await settle(
            *(self._client.intraday(symbol, interval=interval) for symbol in CONTEXT_INDICES)
        )
        context: dict[str, dict] = {}
        for symbol, result in zip(CONTEXT_INDICES, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("plays_index_failed", symbol=symbol, error=str(result))
                context[symbol] = error_entry(result)
            elif result:
                latest = result[0]
                context[symbol] = {
                    "price": latest.close,
                    "volume": latest.volume,
                    "timestamp": latest.timestamp,
                }
        return context

    async def _analyse(
        self, mover: Mover, interval: str, session: MarketSession
    ) -> Play | None:
        bars = await self._client.intraday(mover.ticker, interval=interval)
        return build_play(mover, bars, session)

    async def get_plays(self) -> PlaysResponse:
        self._client.require_configured()
        session = sessions.current_session()
        interval = INTRADAY_INTERVALS.get(session, DEFAULT_INTERVAL)
        logger.info("plays_generate", session=session, interval=interval)

        data = await self._client.top_gainers_losers()
        gainers = parse_movers(data.get("top_gainers"))
        losers = parse_movers(data.get("top_losers"))
        now = datetime.now(UTC).isoformat()

        if not gainers and not losers:
            logger.warning("plays_no_movers")
            return PlaysResponse(
                plays=[],
                market_session=session,
                market_context={},
                data_frequency=interval,
                total_movers_analyzed=0,
                qualifying_plays=0,
                message="No qualifying real-time opportunities available",
                timestamp=now,
            )

        movers = [*gainers, *losers]
        candidates = [m for m in movers[:MAX_CANDIDATES] if is_candidate(m)]
        context, results = await asyncio.gather(
            self._index_context(interval),
            settle(*(self._analyse(m, interval, session) for m in candidates)),
        )

        plays: list[Play] = []
        for mover, result in zip(candidates, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("plays_candidate_failed", ticker=mover.ticker, error=str(result))
            elif result is not None:
                plays.append(result)
        plays.sort(key=lambda p: p.confidence * p.volume_ratio, reverse=True)

        logger.info("plays_generated", qualifying=len(plays), movers=len(movers))
        return PlaysResponse(
            plays=plays[:MAX_PLAYS],
            market_session=session,
            market_context=context,
            data_frequency=interval,
            total_movers_analyzed=len(movers),
            qualifying_plays=len(plays),
            message=None if plays else "No movers passed the volume and price filters",
            timestamp=now,
        )
