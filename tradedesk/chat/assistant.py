"""Keyword-driven assistant that answers from the smart signal without an LLM."""

import re
from enum import StrEnum
from typing import Any

import structlog

from tradedesk.analysis.schemas import SmartSignal
from tradedesk.analysis.service import AnalysisService
from tradedesk.chat.service import extract_tickers
from tradedesk.signals.narrative import NOT_AVAILABLE, fmt_number
from tradedesk.signals.options import select_strategy
from tradedesk.signals.schemas import Bias, OptionsStrategy

logger = structlog.get_logger()


class Intent(StrEnum):
    STOCK_ANALYSIS = "stock_analysis"
    OPTIONS_STRATEGY = "options_strategy"
    MARKET_SENTIMENT = "market_sentiment"
    TOP_PLAYS = "top_plays"
    TECHNICAL_ANALYSIS = "technical_analysis"
    ENTRY_EXIT = "entry_exit"
    GENERAL_QUESTION = "general_question"


_ANALYSIS_VERBS = re.compile(r"\b(analyze|analyse|analysis|look at|check|review)\b")
# checked in order, first match wins
_INTENT_PATTERNS = [
    (Intent.OPTIONS_STRATEGY, re.compile(r"\b(options?|calls?|puts?|strike|expiration|strateg(y|ies))\b")),
    (Intent.MARKET_SENTIMENT, re.compile(r"\b(market|sentiment|mood|feeling|overall|general)\b")),
    (Intent.TOP_PLAYS, re.compile(r"\b(top|best|plays|opportunities|recommendations|picks)\b")),
    (
        Intent.TECHNICAL_ANALYSIS,
        re.compile(r"\b(technical|rsi|macd|sma|ema|indicators|support|resistance)\b"),
    ),
    (Intent.ENTRY_EXIT, re.compile(r"\b(entry|exit|buy|sell|target|stop|price)\b")),
]

_CANNED = {
    Intent.MARKET_SENTIMENT: (
        "**Market Sentiment**\n\nI read the market through VIX levels, sector rotation, "
        "index moves and social sentiment. Mention a ticker for a symbol-level read."
    ),
    Intent.TOP_PLAYS: (
        "**Top Plays**\n\nThe plays endpoint scans today's movers for volume-confirmed setups "
        "with entries, stops and targets. Ask about a specific ticker for a full breakdown."
    ),
    Intent.TECHNICAL_ANALYSIS: (
        "**Technical Analysis**\n\nI cover RSI, MACD, moving averages and Bollinger Bands. "
        'Mention a ticker, for example "analyze NVDA", for live readings.'
    ),
    Intent.ENTRY_EXIT: (
        "**Entry and Exit Points**\n\nEntries and exits come from technical levels, "
        "risk/reward and volume. Give me a ticker and a direction for specific levels."
    ),
    Intent.GENERAL_QUESTION: (
        "**Smart Assistant**\n\nI work from live market data. Try:\n"
        '- Stock analysis: "Analyze AAPL"\n'
        '- Options strategies: "TSLA bullish options play"\n'
        '- Technical analysis: "NVDA technical indicators"\n'
        '- Market sentiment: "Overall market mood"'
    ),
}

_NO_TICKER = {
    Intent.STOCK_ANALYSIS: (
        "**Smart Analysis**\n\nI can analyze any ticker with real-time price data, "
        "technical indicators and an options strategy. Mention a symbol like AAPL or NVDA."
    ),
    Intent.OPTIONS_STRATEGY: (
        "**Options Strategy**\n\nMention a ticker and a direction, for example "
        '"AAPL bullish options strategy", and I will pick strikes from the live price.'
    ),
}


def classify_intent(message: str, tickers: list[str]) -> Intent:
    text = message.lower()
    if tickers and _ANALYSIS_VERBS.search(text):
        return Intent.STOCK_ANALYSIS
    for intent, pattern in _INTENT_PATTERNS:
        if pattern.search(text):
            return intent
    return Intent.GENERAL_QUESTION


def requested_bias(message: str) -> Bias | None:
    text = message.lower()
    if "bullish" in text or re.search(r"\bcalls?\b", text):
        return Bias.BULLISH
    if "bearish" in text or re.search(r"\bputs?\b", text):
        return Bias.BEARISH
    if "neutral" in text or "iron condor" in text or "straddle" in text:
        return Bias.NEUTRAL
    return None


def strategy_text(symbol: str, price: float, strategy: OptionsStrategy) -> str:
    legs = [
        f"- {leg.action.upper()}: ${leg.strike:g} {leg.option_type}s" for leg in strategy.legs
    ]
    return "\n".join(
        [
            f"**{strategy.bias} Options Strategy for {symbol}**",
            "",
            f"Current Price: {fmt_number(price, prefix='$')}",
            "",
            f"Recommended: {strategy.name}",
            *legs,
            "",
            strategy.recommendation,
            "",
            "Risk Management: position size 2-5% of portfolio, close at 50% profit or 21 DTE.",
        ]
    )


class SmartAssistant:
    def __init__(self, analysis: AnalysisService) -> None:
        self._analysis = analysis

    async def respond(self, message: str) -> tuple[Intent, list[str], str, dict[str, Any] | None]:
        tickers = extract_tickers(message)
        intent = classify_intent(message, tickers)
        logger.info("smart_assistant", intent=intent, tickers=tickers)

        if intent not in _NO_TICKER:
            return intent, tickers, _CANNED[intent], None
        if not tickers:
            return intent, tickers, _NO_TICKER[intent], None

        symbol = tickers[0]
        signal = await self._analysis.smart_signal(symbol)
        if signal.quote is None:
            return intent, tickers, f"Unable to get real-time data for {symbol}. Try another ticker.", None

        if intent is Intent.STOCK_ANALYSIS:
            return intent, tickers, signal.report, _analysis_summary(signal)
        return intent, tickers, *self._options_answer(signal, message)

    def _options_answer(self, signal: SmartSignal, message: str) -> tuple[str, dict[str, Any] | None]:
        price = signal.quote.price
        bias = requested_bias(message)
        if bias is None:
            strategy = select_strategy(signal.summary.overall, price, signal.rsi_extreme)
        else:
            strategy = select_strategy(bias, price)
        if strategy is None:
            return f"No usable price for {signal.symbol}.", None
        return strategy_text(signal.symbol, price, strategy), {
            "symbol": signal.symbol,
            "price": price,
            "optionsStrategy": strategy.model_dump(by_alias=True),
        }


def _analysis_summary(signal: SmartSignal) -> dict[str, Any]:
    snapshot = signal.technicals
    return {
        "symbol": signal.symbol,
        "price": signal.quote.price if signal.quote else None,
        "rsi": snapshot.rsi,
        "sma20": snapshot.sma20,
        "volume": signal.quote.volume if signal.quote else None,
        "overall": signal.summary.overall,
        "assessment": signal.assessment,
        "optionsStrategy": (
            signal.options_strategy.recommendation if signal.options_strategy else NOT_AVAILABLE
        ),
    }
