import asyncio
import zlib
from datetime import UTC, date, datetime, timedelta

import structlog

from tradedesk.config import settings
from tradedesk.exceptions import AppError, NotFoundError, ValidationError
from tradedesk.market.providers.alpha_vantage import (
    AlphaVantageClient,
    AlphaVantageProvider,
    quote_from_intraday,
)
from tradedesk.market.schemas import (
    EnhancedQuote,
    OptionContract,
    OptionsChain,
    OptionsResponse,
    Quote,
    TechnicalsResponse,
)
from tradedesk.signals import session as sessions
from tradedesk.signals.options import nearest_strike
from tradedesk.signals.schemas import MarketSession, SignalSummary, TechnicalSnapshot
from tradedesk.signals.technical import classify, is_number
from tradedesk.signals.thresholds import get_thresholds

logger = structlog.get_logger()

FUTURES_PROXIES = {"ES=F": "SPY", "NQ=F": "QQQ", "YM=F": "DIA", "RTY=F": "IWM"}

INTRADAY_INTERVALS = {
    MarketSession.MARKET_OPEN: "1min",
    MarketSession.PRE_MARKET: "5min",
    MarketSession.AFTER_HOURS: "5min",
    MarketSession.FUTURES_OPEN: "5min",
}
_ADX_STRONG_TREND = 25.0
_ESTIMATE_STRIKE_OFFSETS = range(-10, 11, 5)
_ESTIMATE_EXPIRY_DAYS = 14
_MAX_SYMBOL_LENGTH = 10


def normalize_symbol(symbol: str) -> str:
    symbol = symbol.upper().strip()
    if not symbol or len(symbol) > _MAX_SYMBOL_LENGTH:
        raise ValidationError(f"Invalid symbol: '{symbol}'")
    return symbol


def simulated_quote(symbol: str) -> Quote:
    """A fixed placeholder quote, derived from the symbol so repeated calls agree."""
    base = 20 + zlib.crc32(symbol.encode()) % 480
    price = float(base)
    previous = round(price * 0.99, 2)
    return Quote(
        symbol=symbol,
        price=price,
        change=round(price - previous, 2),
        change_percent=round((price - previous) / previous * 100, 4),
        volume=0,
        high=price,
        low=previous,
        open=previous,
        previous_close=previous,
        is_delayed=True,
        data_source="simulated",
        simulated=True,
        timestamp=datetime.now(UTC).isoformat(),
    )


def estimate_options_chain(price: float, today: date | None = None) -> OptionsChain:
    """Intrinsic value plus a flat 2% time value per strike; volumes are unknown (0)."""
    expiry = ((today or datetime.now(UTC).date()) + timedelta(days=_ESTIMATE_EXPIRY_DAYS)).isoformat()
    center = nearest_strike(price)
    calls: list[OptionContract] = []
    puts: list[OptionContract] = []
    for offset in _ESTIMATE_STRIKE_OFFSETS:
        strike = center + offset
        if strike <= 0:
            continue
        time_value = abs(price - strike) * 0.02
        for intrinsic, is_itm, bucket in (
            (max(0.0, price - strike), strike < price, calls),
            (max(0.0, strike - price), strike > price, puts),
        ):
            bucket.append(
                OptionContract(
                    strike=strike,
                    expiry=expiry,
                    bid=round(max(0.01, (intrinsic + time_value) * 0.95), 2),
                    ask=round(max(0.01, intrinsic + time_value * 1.1), 2),
                    volume=0,
                    open_interest=0,
                    is_itm=is_itm,
                )
            )
    return OptionsChain(calls=calls, puts=puts)


class MarketService:
    def __init__(self, client: AlphaVantageClient) -> None:
        self._client = client
        self._provider = AlphaVantageProvider(client)

    async def get_quote(self, symbol: str, entitlement: str = "realtime") -> Quote:
        symbol = normalize_symbol(symbol)
        logger.info("market_get_quote", symbol=symbol, entitlement=entitlement)
        if not self._client.configured and settings.allow_simulated_quotes:
            logger.warning("market_simulated_quote", symbol=symbol)
            return simulated_quote(symbol)
        return await self._provider.get_quote(symbol, entitlement=entitlement)

    async def get_enhanced_quote(self, symbol: str, now: datetime | None = None) -> EnhancedQuote:
        """Session-aware quote: intraday bars, then the global quote, then a futures ETF proxy."""
        symbol = normalize_symbol(symbol)
        self._client.require_configured()
        session = sessions.current_session(now)
        logger.info("market_get_enhanced_quote", symbol=symbol, session=session)

        quote: Quote | None = None
        strategy = ""
        proxy: str | None = None

        interval = INTRADAY_INTERVALS.get(session)
        if interval:
            try:
                bars = await self._client.intraday(symbol, interval=interval, entitlement="realtime")
                if bars:
                    quote = quote_from_intraday(bars, symbol, interval)
                    strategy = f"intraday_{interval}"
            except AppError as exc:
                logger.warning("enhanced_intraday_failed", symbol=symbol, error=exc.message)

        if quote is None:
            try:
                quote = await self._provider.get_quote(symbol)
                strategy = "global_quote"
            except NotFoundError:
                pass
            except AppError as exc:
                logger.warning("enhanced_global_quote_failed", symbol=symbol, error=exc.message)

        if quote is None and symbol in FUTURES_PROXIES:
            proxy = FUTURES_PROXIES[symbol]
            try:
                proxied = await self._provider.get_quote(proxy)
                quote = proxied.model_copy(
                    update={"symbol": symbol, "data_source": f"futures_proxy_{proxy}"}
                )
                strategy = "futures_proxy"
            except AppError as exc:
                logger.warning("enhanced_proxy_failed", symbol=symbol, proxy=proxy, error=exc.message)

        if quote is None:
            raise NotFoundError("Market data", f"{symbol} during {session}")

        return EnhancedQuote(
            **quote.model_dump(),
            market_session=session,
            fetch_strategy=strategy,
            refresh_seconds=sessions.refresh_seconds(session),
            update_frequency=sessions.update_frequency(session),
            proxy_for=proxy,
        )

    async def get_technical_snapshot(self, symbol: str) -> TechnicalSnapshot:
        """Fetch indicators concurrently; each failed one is left empty."""
        names = ("rsi", "macd", "bollinger_bands", "sma20", "sma50", "sma200", "adx")
        results = await asyncio.gather(
            self._client.rsi(symbol),
            self._client.macd(symbol),
            self._client.bbands(symbol),
            self._client.sma(symbol, 20),
            self._client.sma(symbol, 50),
            self._client.sma(symbol, 200),
            self._client.adx(symbol),
            return_exceptions=True,
        )
        values: dict[str, object] = {}
        for name, result in zip(names, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("technical_indicator_failed", symbol=symbol, indicator=name, error=str(result))
                continue
            values[name] = result
        return TechnicalSnapshot(**values)

    async def get_technicals(self, symbol: str) -> TechnicalsResponse:
        symbol = normalize_symbol(symbol)
        logger.info("market_get_technicals", symbol=symbol)
        self._client.require_configured()
        snapshot, quote = await asyncio.gather(
            self.get_technical_snapshot(symbol),
            self._quote_or_none(symbol),
        )
        price = quote.price if quote else None
        summary: SignalSummary = classify(snapshot, price, get_thresholds())
        trend_strength = None
        if is_number(snapshot.adx):
            trend_strength = "Strong" if snapshot.adx > _ADX_STRONG_TREND else "Weak"
        return TechnicalsResponse(
            symbol=symbol,
            price=price,
            technicals=snapshot,
            trend_strength=trend_strength,
            summary=summary,
            timestamp=datetime.now(UTC).isoformat(),
        )

    async def _quote_or_none(self, symbol: str) -> Quote | None:
        try:
            return await self.get_quote(symbol)
        except AppError as exc:
            logger.warning("market_quote_unavailable", symbol=symbol, error=exc.message)
            return None

    async def get_options(self, symbol: str, estimate: bool = False) -> OptionsResponse:
        symbol = normalize_symbol(symbol)
        logger.info("market_get_options", symbol=symbol, estimate=estimate)
        now = datetime.now(UTC).isoformat()

        chain = await self._client.options_chain(symbol)
        if chain is not None:
            function, data = chain
            return OptionsResponse(
                symbol=symbol,
                is_estimated=False,
                mode="live",
                source=f"alpha_vantage_{function.lower()}",
                options=data,
                timestamp=now,
            )

        if not (estimate or settings.allow_estimated_options):
            raise NotFoundError("Options chain", symbol)

        quote = await self.get_quote(symbol)
        return OptionsResponse(
            symbol=symbol,
            is_estimated=True,
            mode="estimated",
            stock_price=quote.price,
            message="Estimated from the stock price and a flat time value; not market prices",
            options=estimate_options_chain(quote.price),
            timestamp=now,
        )
