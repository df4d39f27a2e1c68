"""Alpha Vantage REST client and the normalisers for its response shapes."""

from datetime import UTC, datetime
from typing import Any

import httpx
import structlog

from tradedesk.config import settings
from tradedesk.exceptions import (
    ConfigurationError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
    UpstreamTimeoutError,
)
from tradedesk.http import request_json
from tradedesk.market.providers.base import MarketDataProvider
from tradedesk.market.schemas import IntradayBar, Quote
from tradedesk.signals.schemas import BollingerBands, MACDValues

logger = structlog.get_logger()

SOURCE = "Alpha Vantage"

_OPTIONS_FUNCTIONS = ("REALTIME_OPTIONS", "HISTORICAL_OPTIONS")


def _to_float(value: Any, default: float = 0.0) -> float:
    if value in (None, "", "None", "-"):
        return default
    try:
        return float(str(value).rstrip("%"))
    except ValueError:
        return default


def _to_int(value: Any) -> int:
    return int(_to_float(value))


def _indicator_value(values: dict, key: str, function: str) -> float:
    """A present, numeric indicator value; blanks raise so the field stays empty."""
    value = values.get(key)
    if value in (None, "", "None", "-"):
        raise UpstreamError(SOURCE, f"blank {key} value in {function} response")
    try:
        return float(value)
    except ValueError as exc:
        raise UpstreamError(SOURCE, f"non-numeric {key} value in {function} response") from exc


def normalize_global_quote(raw: dict, symbol: str, entitlement: str | None = None) -> Quote:
    """Convert a ``Global Quote`` block into the canonical quote."""
    return Quote(
        symbol=raw.get("01. symbol", symbol).upper(),
        price=_to_float(raw.get("05. price")),
        change=_to_float(raw.get("09. change")),
        change_percent=_to_float(raw.get("10. change percent")),
        volume=_to_int(raw.get("06. volume")),
        high=_to_float(raw.get("03. high")),
        low=_to_float(raw.get("04. low")),
        open=_to_float(raw.get("02. open")),
        previous_close=_to_float(raw.get("08. previous close")),
        latest_trading_day=raw.get("07. latest trading day"),
        is_delayed=entitlement != "realtime",
        data_source="alpha_vantage",
        timestamp=datetime.now(UTC).isoformat(),
    )


def quote_from_intraday(bars: list[IntradayBar], symbol: str, interval: str) -> Quote:
    """Build a quote from newest-first intraday bars, comparing against the prior bar."""
    latest = bars[0]
    reference = bars[1].close if len(bars) > 1 else latest.open
    change = latest.close - reference
    change_percent = change / reference * 100 if reference else 0.0
    return Quote(
        symbol=symbol.upper(),
        price=latest.close,
        change=round(change, 4),
        change_percent=round(change_percent, 4),
        volume=latest.volume,
        high=latest.high,
        low=latest.low,
        open=latest.open,
        previous_close=reference,
        latest_trading_day=latest.timestamp,
        is_delayed=False,
        data_source=f"alpha_vantage_intraday_{interval}",
        timestamp=datetime.now(UTC).isoformat(),
    )


def _first_key(data: dict, prefix: str) -> str | None:
    return next((key for key in data if key.startswith(prefix)), None)


def _latest(series: dict[str, dict]) -> tuple[str, dict]:
    if not series:
        raise UpstreamError(SOURCE, "empty series in response")
    date = max(series)
    return date, series[date]


class AlphaVantageClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._http = http
        self._api_key = settings.alpha_vantage_api_key if api_key is None else api_key
        self._base_url = base_url or settings.alpha_vantage_url
        self._timeout = timeout or settings.http_timeout

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def require_configured(self) -> None:
        if not self._api_key:
            raise ConfigurationError("TD_ALPHA_VANTAGE_API_KEY", "market data")

    async def query(self, function: str, *, symbol: str | None = None, **params: Any) -> dict:
        self.require_configured()

        query = {"function": function, **{k: v for k, v in params.items() if v is not None}}
        if symbol:
            query["symbol"] = symbol
        query["apikey"] = self._api_key

        data = await request_json(
            self._http, "GET", self._base_url, source=SOURCE, timeout=self._timeout, params=query
        )
        if not isinstance(data, dict):
            raise UpstreamError(SOURCE, f"unexpected {function} payload")
        if "Error Message" in data:
            logger.warning("alpha_vantage_error", function=function, symbol=symbol)
            if symbol:
                raise NotFoundError("Symbol", symbol)
            raise UpstreamError(SOURCE, data["Error Message"])
        if "Note" in data:
            raise RateLimitError(SOURCE, data["Note"])
        if "Information" in data and len(data) == 1:
            info = data["Information"]
            if "rate limit" in info.lower() or "requests per" in info.lower():
                raise RateLimitError(SOURCE, info)
            raise UpstreamError(SOURCE, info)
        return data

    async def global_quote(self, symbol: str, entitlement: str | None = None) -> dict:
        """The raw ``Global Quote`` block, empty when the provider has nothing."""
        data = await self.query("GLOBAL_QUOTE", symbol=symbol, entitlement=entitlement)
        key = _first_key(data, "Global Quote")
        block = data.get(key, {}) if key else {}
        return block if block.get("05. price") else {}

    async def intraday(
        self, symbol: str, interval: str = "5min", entitlement: str | None = None
    ) -> list[IntradayBar]:
        data = await self.query(
            "TIME_SERIES_INTRADAY",
            symbol=symbol,
            interval=interval,
            entitlement=entitlement,
            outputsize="compact",
        )
        series = data.get(f"Time Series ({interval})", {})
        return [
            IntradayBar(
                timestamp=stamp,
                open=_to_float(bar.get("1. open")),
                high=_to_float(bar.get("2. high")),
                low=_to_float(bar.get("3. low")),
                close=_to_float(bar.get("4. close")),
                volume=_to_int(bar.get("5. volume")),
            )
            for stamp, bar in sorted(series.items(), reverse=True)
        ]

    async def _indicator(self, function: str, symbol: str, **params: Any) -> tuple[str, dict]:
        data = await self.query(function, symbol=symbol, interval="daily", **params)
        key = _first_key(data, "Technical Analysis")
        if key is None:
            raise UpstreamError(SOURCE, f"no {function} values for {symbol}")
        return _latest(data[key])

    async def rsi(self, symbol: str, period: int = 14) -> float:
        _, values = await self._indicator("RSI", symbol, time_period=period, series_type="close")
        return _indicator_value(values, "RSI", "RSI")

    async def macd(self, symbol: str) -> MACDValues:
        _, values = await self._indicator("MACD", symbol, series_type="close")
        return MACDValues(
            macd=_indicator_value(values, "MACD", "MACD"),
            signal=_indicator_value(values, "MACD_Signal", "MACD"),
            histogram=_indicator_value(values, "MACD_Hist", "MACD"),
        )

    async def bbands(self, symbol: str, period: int = 20) -> BollingerBands:
        _, values = await self._indicator("BBANDS", symbol, time_period=period, series_type="close")
        return BollingerBands(
            upper=_indicator_value(values, "Real Upper Band", "BBANDS"),
            middle=_indicator_value(values, "Real Middle Band", "BBANDS"),
            lower=_indicator_value(values, "Real Lower Band", "BBANDS"),
        )

    async def sma(self, symbol: str, period: int) -> float:
        _, values = await self._indicator("SMA", symbol, time_period=period, series_type="close")
        return _indicator_value(values, "SMA", "SMA")

    async def adx(self, symbol: str, period: int = 14) -> float:
        _, values = await self._indicator("ADX", symbol, time_period=period)
        return _indicator_value(values, "ADX", "ADX")

    async def news_sentiment(self, tickers: str | None = None, limit: int = 50) -> list[dict]:
        data = await self.query("NEWS_SENTIMENT", tickers=tickers, limit=limit)
        feed = data.get("feed", [])
        return feed if isinstance(feed, list) else []

    async def top_gainers_losers(self) -> dict:
        return await self.query("TOP_GAINERS_LOSERS")

    async def economic_series(self, function: str, **params: Any) -> list[tuple[str, float]]:
        """Newest-first (date, value) observations, skipping "." placeholders."""
        data = await self.query(function, **params)
        observations = [
            (point.get("date", ""), _to_float(point["value"]))
            for point in data.get("data", [])
            if point.get("value") not in (None, "", ".")
        ]
        if not observations:
            raise UpstreamError(SOURCE, f"no {function} observations")
        return observations

    async def crypto_daily(self, symbol: str, market: str = "USD") -> tuple[str, float]:
        data = await self.query("DIGITAL_CURRENCY_DAILY", symbol=symbol, market=market)
        key = _first_key(data, "Time Series")
        if key is None:
            raise UpstreamError(SOURCE, f"no daily series for {symbol}")
        date, bar = _latest(data[key])
        close = bar.get(f"4a. close ({market})", bar.get("4. close"))
        return date, _to_float(close)

    async def fx_daily(self, from_symbol: str, to_symbol: str) -> tuple[str, float]:
        data = await self.query("FX_DAILY", from_symbol=from_symbol, to_symbol=to_symbol)
        key = _first_key(data, "Time Series FX")
        if key is None:
            raise UpstreamError(SOURCE, f"no FX series for {from_symbol}/{to_symbol}")
        date, bar = _latest(data[key])
        return date, _to_float(bar.get("4. close"))

    async def options_chain(self, symbol: str) -> tuple[str, dict] | None:
        """Try the option-chain functions in turn; None when none returns contracts."""
        for function in _OPTIONS_FUNCTIONS:
            try:
                data = await self.query(function, symbol=symbol)
            except (RateLimitError, UpstreamTimeoutError):
                raise
            except (UpstreamError, NotFoundError) as exc:
                logger.info("options_function_unavailable", function=function, error=exc.message)
                continue
            if data.get("data"):
                return function, data
        return None


class AlphaVantageProvider(MarketDataProvider):
    """Quote provider backed by GLOBAL_QUOTE with a realtime-then-delayed fallback."""

    def __init__(self, client: AlphaVantageClient) -> None:
        self._client = client

    async def get_quote(self, symbol: str, entitlement: str | None = "realtime") -> Quote:
        raw = await self._client.global_quote(symbol, entitlement=entitlement)
        used = entitlement
        if not raw and entitlement == "realtime":
            logger.info("quote_entitlement_fallback", symbol=symbol, entitlement="delayed")
            raw = await self._client.global_quote(symbol, entitlement="delayed")
            used = "delayed"
        if not raw:
            raise NotFoundError("Quote", symbol)
        return normalize_global_quote(raw, symbol, used)
