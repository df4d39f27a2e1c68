"""Text rendering of a classified snapshot, shared by the smart signal and LLM prompts."""

import json
import math

from tradedesk.market.schemas import Quote
from tradedesk.signals.schemas import (
    OptionsStrategy,
    SentimentSnapshot,
    SignalSummary,
    TechnicalSnapshot,
)
from tradedesk.signals.technical import classify_macd, classify_rsi, classify_trend, is_number

NOT_AVAILABLE = "N/A"


def fmt_number(value: float | None, digits: int = 2, prefix: str = "") -> str:
    if value is None or not math.isfinite(value):
        return NOT_AVAILABLE
    return f"{prefix}{value:,.{digits}f}"


def fmt_volume(volume: float | None) -> str:
    if volume is None or not math.isfinite(volume) or volume <= 0:
        return NOT_AVAILABLE
    if volume >= 1_000_000:
        return f"{volume / 1_000_000:.1f}M"
    if volume >= 1_000:
        return f"{volume / 1_000:.0f}K"
    return f"{volume:,.0f}"


def fmt_change(change: float | None, change_percent: float | None) -> str:
    if not is_number(change) or not is_number(change_percent):
        return ""
    sign = "+" if change >= 0 else ""
    return f"({sign}{change:.2f} / {sign}{change_percent:.2f}%)"


def _indicator_lines(snapshot: TechnicalSnapshot, price: float | None) -> list[str]:
    rsi = snapshot.rsi
    rsi_label = f" ({classify_rsi(rsi)})" if is_number(rsi) else ""

    macd = snapshot.macd
    if macd is not None and is_number(macd.macd) and is_number(macd.signal):
        macd_text = f"{classify_macd(macd.macd, macd.signal)} ({macd.macd:.2f} / {macd.signal:.2f})"
    else:
        macd_text = NOT_AVAILABLE

    sma = snapshot.trend_sma()
    sma_name = "SMA 20" if snapshot.sma20 is not None else "SMA 50"
    sma_label = f" ({classify_trend(price, sma)})" if is_number(price) and is_number(sma) else ""

    return [
        f"- RSI (14): {fmt_number(rsi, 1)}{rsi_label}",
        f"- MACD: {macd_text}",
        f"- {sma_name}: {fmt_number(sma, prefix='$')}{sma_label}",
    ]


def build_report(
    symbol: str,
    quote: Quote | None,
    snapshot: TechnicalSnapshot,
    summary: SignalSummary,
    assessment: tuple[str, str],
    strategy: OptionsStrategy | None,
    sentiment: SentimentSnapshot | None = None,
) -> str:
    price = quote.price if quote else None
    label, reasoning = assessment

    lines = [f"**{symbol} Smart Analysis**", ""]
    if quote:
        lines += [
            f"Current Price: {fmt_number(quote.price, prefix='$')} "
            f"{fmt_change(quote.change, quote.change_percent)}".rstrip(),
            f"Volume: {fmt_volume(quote.volume)}",
            f"Range: {fmt_number(quote.low, prefix='$')} - {fmt_number(quote.high, prefix='$')}",
        ]
    else:
        lines.append(f"Current Price: {NOT_AVAILABLE}")

    lines += ["", "Technical Indicators:", *_indicator_lines(snapshot, price)]

    if sentiment is not None:
        score = fmt_number(sentiment.score, 3)
        lines += [
            "",
            f"News Sentiment: {sentiment.label} ({score} across {sentiment.article_count} articles)",
        ]

    lines += [
        "",
        f"Smart Assessment: {label} ({summary.strength:.0f}% of {summary.total} signals agree)",
        reasoning,
        "",
        "Options Strategy:",
        strategy.recommendation if strategy else NOT_AVAILABLE,
        "",
        "Risk Management: position size 1-3% of portfolio, "
        f"stop loss at {fmt_number(price * 0.95 if is_number(price) else None, prefix='$')}",
    ]
    return "\n".join(lines)


def context_json(data: dict) -> str:
    """Serialise aggregated data as prompt context."""
    return json.dumps(data, indent=2, default=str)
