"""Threshold alerts over the VIX, a fixed watchlist and the trading session."""

from datetime import UTC, datetime

import structlog

from tradedesk.alerts.schemas import Alert, AlertsResponse, Priority
from tradedesk.market.overview import OverviewService, settle
from tradedesk.market.providers.alpha_vantage import AlphaVantageClient
from tradedesk.market.schemas import Quote
from tradedesk.market.service import MarketService
from tradedesk.signals import session as sessions
from tradedesk.signals.schemas import MarketSession
from tradedesk.signals.technical import EXTREMELY_OVERBOUGHT, classify_rsi_extreme
from tradedesk.signals.thresholds import SignalThresholds, get_thresholds

logger = structlog.get_logger()

WATCHLIST = ["SPY", "QQQ", "AAPL", "TSLA", "NVDA", "MSFT"]
PRICE_MOVE_PERCENT = 3.0
SPY_VOLUME_SPIKE = 50_000_000
VOLUME_SPIKE = 10_000_000
SESSION_WINDOW_MINUTES = 10

_PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def market_status(session: MarketSession) -> str:
    match session:
        case MarketSession.MARKET_OPEN:
            return "open"
        case MarketSession.PRE_MARKET | MarketSession.AFTER_HOURS:
            return "extended"
        case _:
            return "closed"


def vix_alerts(vix: float, stamp: str, t: SignalThresholds) -> list[Alert]:
    if vix > t.vix_high:
        return [
            Alert(
                type="market_volatility",
                priority=Priority.HIGH,
                title="High Volatility Alert",
                message=f"Market volatility (VIX: {vix:.2f}) is high. Expect choppy price action.",
                action="Consider smaller position sizes or defensive strategies.",
                ticker="VIX",
                price=vix,
                timestamp=stamp,
            )
        ]
    if vix < t.vix_calm:
        return [
            Alert(
                type="market_calm",
                priority=Priority.LOW,
                title="Market Calm Alert",
                message=(
                    f"Market volatility (VIX: {vix:.2f}) is low. "
                    "Could precede a breakout or increased complacency."
                ),
                action="Monitor for unusual volume spikes or news events.",
                ticker="VIX",
                price=vix,
                timestamp=stamp,
            )
        ]
    return []


def quote_alerts(quote: Quote, stamp: str) -> list[Alert]:
    alerts = []
    symbol = quote.symbol
    if abs(quote.change_percent) > PRICE_MOVE_PERCENT:
        direction = "up" if quote.change_percent > 0 else "down"
        alerts.append(
            Alert(
                type="price_movement",
                priority=Priority.HIGH,
                title=f"{symbol} Price Alert",
                message=(
                    f"{symbol} is moving significantly ({quote.change_percent:.2f}% {direction}). "
                    f"Current price: ${quote.price:.2f}"
                ),
                action=f"Investigate news and technical levels for {symbol}.",
                ticker=symbol,
                price=quote.price,
                change_percent=quote.change_percent,
                timestamp=stamp,
            )
        )

    threshold = SPY_VOLUME_SPIKE if symbol == "SPY" else VOLUME_SPIKE
    if quote.volume > threshold:
        alerts.append(
            Alert(
                type="volume_spike",
                priority=Priority.MEDIUM,
                title=f"{symbol} Volume Spike",
                message=f"{symbol} showing unusually high volume ({quote.volume:,}).",
                action=f"Analyze {symbol}'s price action and market context.",
                ticker=symbol,
                price=quote.price,
                change_percent=quote.change_percent,
                timestamp=stamp,
            )
        )
    return alerts


def rsi_alert(symbol: str, rsi: float, stamp: str, t: SignalThresholds) -> Alert | None:
    condition = classify_rsi_extreme(rsi, t)
    if condition is None:
        return None
    overbought = condition == EXTREMELY_OVERBOUGHT
    return Alert(
        type="technical_extreme",
        priority=Priority.MEDIUM,
        title=f"RSI Alert: {symbol}",
        message=f"{condition} - RSI at {rsi:.1f}",
        action="consider_puts" if overbought else "consider_calls",
        ticker=symbol,
        timestamp=stamp,
    )


def session_alerts(now: datetime, stamp: str) -> list[Alert]:
    session = sessions.current_session(now)
    if session is MarketSession.MARKET_OPEN:
        if sessions.minutes_since_open(now) < SESSION_WINDOW_MINUTES:
            return [
                Alert(
                    type="market_open",
                    priority=Priority.LOW,
                    title="Market Open",
                    message="The US stock market is now open. Expect initial volatility.",
                    action="Observe opening trends and price action.",
                    timestamp=stamp,
                )
            ]
        if sessions.minutes_until_close(now) <= SESSION_WINDOW_MINUTES:
            return [
                Alert(
                    type="market_close_approach",
                    priority=Priority.LOW,
                    title="Market Close Approaching",
                    message="Less than 10 minutes until market close. Watch for end-of-day moves.",
                    action="Prepare for market close and after-hours trading.",
                    timestamp=stamp,
                )
            ]
        return []
    if session in (MarketSession.PRE_MARKET, MarketSession.AFTER_HOURS):
        return [
            Alert(
                type="extended_hours",
                priority=Priority.LOW,
                title="Extended Hours",
                message=f"Market is in {session.lower()} trading. Volume may be low.",
                action="Monitor for news or earnings reactions.",
                timestamp=stamp,
            )
        ]
    return []


class AlertsService:
    def __init__(
        self, market: MarketService, overview: OverviewService, client: AlphaVantageClient
    ) -> None:
        self._market = market
        self._overview = overview
        self._client = client

    async def get_alerts(self, now: datetime | None = None) -> AlertsResponse:
        self._client.require_configured()
        now = now or datetime.now(UTC)
        stamp = now.isoformat()
        thresholds = get_thresholds()
        session = sessions.current_session(now)
        logger.info("alerts_generate", session=session, watchlist=len(WATCHLIST))

        vix, *rest = await settle(
            self._overview.get_vix(),
            *(self._market.get_quote(symbol) for symbol in WATCHLIST),
            *(self._client.rsi(symbol) for symbol in WATCHLIST),
        )
        quotes, rsis = rest[: len(WATCHLIST)], rest[len(WATCHLIST) :]

        alerts: list[Alert] = []
        if isinstance(vix, Exception):
            logger.warning("alerts_vix_failed", error=str(vix))
        else:
            alerts += vix_alerts(vix.price, stamp, thresholds)

        for symbol, quote, rsi in zip(WATCHLIST, quotes, rsis, strict=True):
            if isinstance(quote, Exception):
                logger.warning("alerts_quote_failed", symbol=symbol, error=str(quote))
            else:
                alerts += quote_alerts(quote, stamp)
            if isinstance(rsi, Exception):
                logger.warning("alerts_rsi_failed", symbol=symbol, error=str(rsi))
            elif alert := rsi_alert(symbol, rsi, stamp, thresholds):
                alerts.append(alert)

        alerts += session_alerts(now, stamp)
        alerts.sort(key=lambda a: _PRIORITY_ORDER[a.priority])

        return AlertsResponse(
            alerts=alerts,
            market_status=market_status(session),
            message=None if alerts else "No real-time alerts at the moment.",
            timestamp=stamp,
        )
