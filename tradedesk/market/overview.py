"""Multi-source market overviews: dashboard, intelligence, conditions and economics.

Every source is fetched concurrently and may fail on its own; a failure is
reported in place of that source's data and never fails the whole response.
"""

import asyncio
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog

from tradedesk.exceptions import UpstreamError
from tradedesk.market.providers.alpha_vantage import AlphaVantageClient
from tradedesk.market.providers.base import MarketDataProvider
from tradedesk.market.schemas import (
    DashboardItem,
    DashboardResponse,
    EconomicIndicator,
    EconomicResponse,
    IntelligenceResponse,
    MarketConditions,
    Quote,
)
from tradedesk.market.service import MarketService
from tradedesk.signals import session as sessions
from tradedesk.signals.schemas import MarketSession
from tradedesk.signals.thresholds import get_thresholds
from tradedesk.signals.volatility import (
    fear_greed,
    market_trend,
    overall_market_sentiment,
    volatility_level,
)
from tradedesk.social.service import SocialService

logger = structlog.get_logger()

T = TypeVar("T")

VIX_SYMBOL = "^VIX"
DASHBOARD_INDICES = [("SPY", "S&P 500"), ("QQQ", "NASDAQ"), ("DIA", "DOW JONES")]
DASHBOARD_FUTURES = [("SPY", "ES (S&P FUTURES)"), ("QQQ", "NQ (NASDAQ FUTURES)")]
INTELLIGENCE_INDICES = {"^GSPC": "S&P 500", "^IXIC": "NASDAQ", "^DJI": "Dow Jones"}
SECTOR_ETFS = {
    "XLK": "Technology",
    "XLF": "Financial",
    "XLE": "Energy",
    "XLV": "Healthcare",
    "XLI": "Industrial",
}
SOCIAL_SYMBOLS = ["AAPL", "TSLA", "SPY"]
DISCORD_MARKET_SYMBOL = "SPY"

# key: (function, params, display name, unit)
ECONOMIC_SERIES: dict[str, tuple[str, dict[str, str], str, str]] = {
    "fedFundsRate": ("FEDERAL_FUNDS_RATE", {"interval": "monthly"}, "Federal Funds Rate", "%"),
    "cpi": ("CPI", {"interval": "monthly"}, "Consumer Price Index", "index"),
    "unemployment": ("UNEMPLOYMENT", {}, "Unemployment Rate", "%"),
    "treasury10y": (
        "TREASURY_YIELD",
        {"interval": "monthly", "maturity": "10year"},
        "10-Year Treasury Yield",
        "%",
    ),
    "oil": ("WTI", {"interval": "monthly"}, "Crude Oil (WTI)", "USD/barrel"),
    "naturalGas": ("NATURAL_GAS", {"interval": "monthly"}, "Natural Gas", "USD/MMBtu"),
}

_SESSION_COMMENTARY = {
    MarketSession.MARKET_OPEN: (
        "Markets are open. Monitor intraday volatility, volume and key support/resistance levels."
    ),
    MarketSession.PRE_MARKET: (
        "Pre-market trading. Gaps and news catalysts set the tone for the open."
    ),
    MarketSession.AFTER_HOURS: (
        "After-hours trading. Earnings and late news can move thinly traded names."
    ),
    MarketSession.FUTURES_OPEN: (
        "Cash markets are closed. Watch futures and overseas markets for overnight developments."
    ),
}
_DEFAULT_COMMENTARY = "Markets are closed. Review positions and plan for the next session."


async def settle(*aws: Awaitable[T]) -> list[T | Exception]:
    """Await concurrently, returning each result or the exception it raised."""
    return await asyncio.gather(*aws, return_exceptions=True)


def error_entry(error: BaseException) -> dict[str, str]:
    message = getattr(error, "message", None) or str(error) or type(error).__name__
    return {"error": message}


class OverviewService:
    def __init__(
        self,
        market: MarketService,
        index_provider: MarketDataProvider,
        client: AlphaVantageClient,
        social: SocialService,
    ) -> None:
        self._market = market
        self._index_provider = index_provider
        self._client = client
        self._social = social

    async def get_vix(self) -> Quote:
        return await self._index_provider.get_quote(VIX_SYMBOL)

    async def get_dashboard(self) -> DashboardResponse:
        session = sessions.current_session()
        logger.info("market_dashboard", session=session)

        symbols = [symbol for symbol, _ in DASHBOARD_INDICES]
        results = await settle(*(self._market.get_quote(s) for s in symbols), self.get_vix())
        by_symbol = dict(zip([*symbols, VIX_SYMBOL], results, strict=True))

        def item(symbol: str, name: str) -> DashboardItem:
            result = by_symbol[symbol]
            if isinstance(result, Exception):
                logger.warning("dashboard_quote_failed", symbol=symbol, error=str(result))
                return DashboardItem(name=name, symbol=symbol, error="Data unavailable")
            return DashboardItem(
                name=name,
                symbol=symbol,
                price=result.price,
                change=result.change,
                change_percent=result.change_percent,
                volume=result.volume,
            )

        indices = [item(symbol, name) for symbol, name in DASHBOARD_INDICES]
        indices.append(item(VIX_SYMBOL, "VIX"))
        futures = [item(symbol, name) for symbol, name in DASHBOARD_FUTURES]

        return DashboardResponse(
            market_session=session,
            indices=indices,
            futures=futures,
            commentary=_SESSION_COMMENTARY.get(session, _DEFAULT_COMMENTARY),
            refresh_seconds=sessions.refresh_seconds(session),
            timestamp=datetime.now(UTC).isoformat(),
        )

    async def _quotes(self, names: dict[str, str]) -> tuple[dict[str, Any], list[float]]:
        """Per-symbol entries plus the change percentages of the ones that succeeded."""
        results = await settle(*(self._index_provider.get_quote(s) for s in names))
        entries: dict[str, Any] = {}
        changes: list[float] = []
        for (symbol, name), result in zip(names.items(), results, strict=True):
            if isinstance(result, Exception):
                logger.warning("intelligence_quote_failed", symbol=symbol, error=str(result))
                entries[symbol] = {"name": name, **error_entry(result)}
                continue
            entries[symbol] = {
                "name": name,
                "price": result.price,
                "change": result.change,
                "changePercent": result.change_percent,
            }
            changes.append(result.change_percent)
        return entries, changes

    async def _unemployment(self) -> dict[str, Any]:
        observations = await self._client.economic_series("UNEMPLOYMENT")
        (date, rate), *rest = observations
        trend = "STABLE"
        if rest:
            previous = rest[0][1]
            trend = "RISING" if rate > previous else "FALLING" if rate < previous else "STABLE"
        return {"unemploymentRate": rate, "date": date, "trend": trend}

    async def get_intelligence(self) -> IntelligenceResponse:
        session = sessions.current_session()
        thresholds = get_thresholds()
        discord_enabled = self._social.discord_configured
        logger.info("market_intelligence", session=session, discord=discord_enabled)

        vix, indices, sectors, social, economic, discord = await settle(
            self.get_vix(),
            self._quotes(INTELLIGENCE_INDICES),
            self._quotes(SECTOR_ETFS),
            self._social.stocktwits_sentiment(SOCIAL_SYMBOLS),
            self._unemployment(),
            self._social.discord_sentiment(DISCORD_MARKET_SYMBOL) if discord_enabled else _none(),
        )

        fear_greed_label = None
        if isinstance(vix, Exception):
            logger.warning("intelligence_vix_failed", error=str(vix))
            vix_entry = error_entry(vix)
        else:
            fear_greed_label = fear_greed(vix.price, thresholds)
            vix_entry = {
                "price": vix.price,
                "change": vix.change,
                "changePercent": vix.change_percent,
                "sentiment": fear_greed_label,
                "level": volatility_level(vix.price, thresholds),
            }

        index_changes: list[float] = []
        if isinstance(indices, Exception):
            index_entry = error_entry(indices)
        else:
            index_entry, index_changes = indices

        sector_changes: list[float] = []
        if isinstance(sectors, Exception):
            sector_entry = error_entry(sectors)
        else:
            sector_entry, sector_changes = sectors

        if isinstance(social, Exception):
            social_entry = error_entry(social)
        elif not social:
            social_entry = error_entry(UpstreamError("StockTwits", "no messages available"))
        else:
            social_entry = {s: v.model_dump(by_alias=True) for s, v in social.items()}

        if isinstance(economic, Exception):
            logger.warning("intelligence_economic_failed", error=str(economic))
            economic_entry = error_entry(economic)
        else:
            economic_entry = economic

        discord_entry = None
        social_split = None
        if isinstance(discord, Exception):
            logger.warning("intelligence_discord_failed", error=str(discord))
            discord_entry = error_entry(discord)
        elif discord is not None:
            discord_entry = discord.model_dump(by_alias=True)
            if discord.total_messages:
                social_split = (discord.bullish_percentage, discord.bearish_percentage)

        return IntelligenceResponse(
            market_session=session,
            vix=vix_entry,
            indices=index_entry,
            sectors=sector_entry,
            social=social_entry,
            discord=discord_entry,
            economic=economic_entry,
            overall_sentiment=overall_market_sentiment(
                fear_greed_label, index_changes, sector_changes, social_split
            ),
            timestamp=datetime.now(UTC).isoformat(),
        )

    async def get_conditions(self) -> MarketConditions:
        thresholds = get_thresholds()
        vix, sp500 = await settle(self.get_vix(), self._index_provider.get_quote("^GSPC"))
        vix_price = None if isinstance(vix, Exception) else vix.price
        if isinstance(vix, Exception):
            logger.warning("conditions_vix_failed", error=str(vix))
        if isinstance(sp500, Exception):
            logger.warning("conditions_index_failed", error=str(sp500))
        return MarketConditions(
            vix=vix_price,
            fear_greed=fear_greed(vix_price, thresholds) if vix_price is not None else "Unknown",
            trend="Unknown" if isinstance(sp500, Exception) else market_trend(sp500.change_percent),
            volatility_level=(
                volatility_level(vix_price, thresholds) if vix_price is not None else "Unknown"
            ),
            market_session=sessions.current_session(),
        )

    async def get_economic(self) -> EconomicResponse:
        self._client.require_configured()
        keys = list(ECONOMIC_SERIES)
        results = await settle(
            *(self._client.economic_series(fn, **params) for fn, params, _, _ in ECONOMIC_SERIES.values()),
            self._client.crypto_daily("BTC"),
            self._client.fx_daily("EUR", "USD"),
        )

        indicators: dict[str, EconomicIndicator] = {}
        unavailable: list[str] = []
        for key, result in zip(keys, results, strict=False):
            _, _, name, unit = ECONOMIC_SERIES[key]
            if isinstance(result, Exception):
                logger.warning("economic_series_failed", series=key, error=str(result))
                unavailable.append(key)
                continue
            date, value = result[0]
            indicators[key] = EconomicIndicator(name=name, value=value, date=date, unit=unit)

        bitcoin, eurusd = results[len(keys):]
        if isinstance(bitcoin, Exception):
            logger.warning("economic_series_failed", series="bitcoin", error=str(bitcoin))
            unavailable.append("bitcoin")
        else:
            indicators["bitcoin"] = EconomicIndicator(
                name="Bitcoin", value=bitcoin[1], date=bitcoin[0], unit="USD"
            )

        if isinstance(eurusd, Exception) or not eurusd[1]:
            logger.warning("economic_series_failed", series="dollarIndex", error=str(eurusd))
            unavailable.append("dollarIndex")
        else:
            # approximated from EUR/USD alone, not the six-currency basket
            indicators["dollarIndex"] = EconomicIndicator(
                name="US Dollar Index (approx.)",
                value=round(100 / eurusd[1], 2),
                date=eurusd[0],
                unit="index",
            )

        return EconomicResponse(
            indicators=indicators,
            unavailable=unavailable,
            timestamp=datetime.now(UTC).isoformat(),
        )


async def _none() -> None:
    return None
