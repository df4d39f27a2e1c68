import asyncio
from datetime import UTC, datetime

import structlog
import yfinance as yf

from tradedesk.exceptions import NotFoundError, UpstreamError
from tradedesk.market.providers.base import MarketDataProvider
from tradedesk.market.schemas import Quote

logger = structlog.get_logger()

SOURCE = "Yahoo Finance"


def _fetch_ticker_info(symbol: str) -> dict:
    """Fetch ticker info synchronously (to be run in a thread)."""
    info = yf.Ticker(symbol).info
    has_no_data = not info or (
        info.get("regularMarketPrice") is None
        and info.get("currentPrice") is None
        and not info.get("shortName")
    )
    if has_no_data:
        raise NotFoundError("Ticker", symbol)
    return info


def _first(info: dict, *keys: str, default: float = 0.0) -> float:
    for key in keys:
        value = info.get(key)
        if value is not None:
            return value
    return default


class YahooFinanceProvider(MarketDataProvider):
    """Index, volatility and sector quotes, which Alpha Vantage does not carry."""

    async def get_quote(self, symbol: str) -> Quote:
        try:
            info = await asyncio.to_thread(_fetch_ticker_info, symbol)
        except NotFoundError:
            raise
        except Exception as exc:
            logger.error("yfinance_quote_error", symbol=symbol, error=str(exc))
            raise UpstreamError(SOURCE, f"failed to fetch quote for {symbol}: {exc}") from exc

        price = _first(info, "regularMarketPrice", "currentPrice")
        prev_close = _first(info, "regularMarketPreviousClose", "previousClose")
        change = round(price - prev_close, 4) if price and prev_close else 0.0
        change_pct = round((change / prev_close) * 100, 4) if prev_close else 0.0

        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_pct,
            volume=int(_first(info, "regularMarketVolume", "volume", default=0)),
            high=_first(info, "regularMarketDayHigh", "dayHigh"),
            low=_first(info, "regularMarketDayLow", "dayLow"),
            open=_first(info, "regularMarketOpen", "open"),
            previous_close=prev_close,
            is_delayed=True,
            data_source="yahoo_finance",
            timestamp=datetime.now(UTC).isoformat(),
        )
