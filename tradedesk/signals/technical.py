"""Rule-based technical-signal classifier.

Each available indicator casts one vote: RSI (oversold is bullish, overbought
is bearish, neutral abstains but still counts towards the total), MACD against
its signal line, and price against its trend moving average. The side with a
strict majority wins; anything else is Neutral.
"""

import math

from tradedesk.signals.schemas import (
    Bias,
    SignalSummary,
    Signal,
    Strength,
    TechnicalSnapshot,
)
from tradedesk.signals.thresholds import DEFAULT_THRESHOLDS, SignalThresholds

OVERBOUGHT = "Overbought"
OVERSOLD = "Oversold"
NEUTRAL = "Neutral"
EXTREMELY_OVERBOUGHT = "Extremely Overbought"
EXTREMELY_OVERSOLD = "Extremely Oversold"
BULLISH_CROSSOVER = "Bullish crossover"
BEARISH = "Bearish"
ABOVE_TREND = "Above trend"
BELOW_TREND = "Below trend"

_MOMENTUM_THRESHOLD = 3.0


def is_number(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def classify_rsi(rsi: float, thresholds: SignalThresholds = DEFAULT_THRESHOLDS) -> str:
    if rsi > thresholds.rsi_overbought:
        return OVERBOUGHT
    if rsi < thresholds.rsi_oversold:
        return OVERSOLD
    return NEUTRAL


def classify_rsi_extreme(
    rsi: float | None, thresholds: SignalThresholds = DEFAULT_THRESHOLDS
) -> str | None:
    """The stricter band used for alerts; None when RSI is inside it."""
    if not is_number(rsi):
        return None
    if rsi > thresholds.rsi_extreme_overbought:
        return EXTREMELY_OVERBOUGHT
    if rsi < thresholds.rsi_extreme_oversold:
        return EXTREMELY_OVERSOLD
    return None


def classify_macd(macd: float, signal: float) -> str:
    return BULLISH_CROSSOVER if macd > signal else BEARISH


def classify_trend(price: float, sma: float) -> str:
    return ABOVE_TREND if price > sma else BELOW_TREND


def _rsi_signal(rsi: float, thresholds: SignalThresholds) -> tuple[Bias, Signal]:
    label = classify_rsi(rsi, thresholds)
    if label == OVERSOLD:
        vote = Bias.BULLISH
    elif label == OVERBOUGHT:
        vote = Bias.BEARISH
    else:
        vote = Bias.NEUTRAL

    if classify_rsi_extreme(rsi, thresholds):
        strength = Strength.HIGH
    elif vote is Bias.NEUTRAL:
        strength = Strength.LOW
    else:
        strength = Strength.MEDIUM

    return vote, Signal(
        type=vote.lower(),
        indicator="RSI",
        signal=label,
        strength=strength,
        message=f"RSI (14) at {rsi:.1f} is {label.lower()}",
    )


def _macd_signal(macd: float, signal: float) -> tuple[Bias, Signal]:
    label = classify_macd(macd, signal)
    vote = Bias.BULLISH if label == BULLISH_CROSSOVER else Bias.BEARISH
    spread = abs(macd - signal)
    strength = Strength.HIGH if spread > 1 else Strength.MEDIUM if spread > 0.25 else Strength.LOW
    return vote, Signal(
        type=vote.lower(),
        indicator="MACD",
        signal=label,
        strength=strength,
        message=f"MACD {macd:.2f} vs signal {signal:.2f}",
    )


def _trend_signal(price: float, sma: float) -> tuple[Bias, Signal]:
    label = classify_trend(price, sma)
    vote = Bias.BULLISH if label == ABOVE_TREND else Bias.BEARISH
    distance = abs(price - sma) / sma * 100 if sma else 0.0
    strength = Strength.HIGH if distance > 5 else Strength.MEDIUM if distance > 2 else Strength.LOW
    return vote, Signal(
        type=vote.lower(),
        indicator="SMA",
        signal=label,
        strength=strength,
        message=f"Price ${price:.2f} is {distance:.1f}% {label.split()[0].lower()} the ${sma:.2f} average",
    )


def classify(
    snapshot: TechnicalSnapshot,
    price: float | None,
    thresholds: SignalThresholds = DEFAULT_THRESHOLDS,
) -> SignalSummary:
    """Vote the available indicators into one overall bias.

    Indicators that are absent (or not finite) are left out of the vote. With
    no indicators at all the result is Neutral with zero strength.
    """
    votes: list[Bias] = []
    signals: list[Signal] = []

    if is_number(snapshot.rsi):
        vote, signal = _rsi_signal(snapshot.rsi, thresholds)
        votes.append(vote)
        signals.append(signal)

    macd = snapshot.macd
    if macd is not None and is_number(macd.macd) and is_number(macd.signal):
        vote, signal = _macd_signal(macd.macd, macd.signal)
        votes.append(vote)
        signals.append(signal)

    sma = snapshot.trend_sma()
    if is_number(price) and is_number(sma):
        vote, signal = _trend_signal(price, sma)
        votes.append(vote)
        signals.append(signal)

    bullish = votes.count(Bias.BULLISH)
    bearish = votes.count(Bias.BEARISH)
    total = len(votes)

    if bullish > bearish:
        overall, majority = Bias.BULLISH, bullish
    elif bearish > bullish:
        overall, majority = Bias.BEARISH, bearish
    else:
        overall, majority = Bias.NEUTRAL, votes.count(Bias.NEUTRAL)

    strength = round(majority / total * 100, 1) if total else 0.0
    return SignalSummary(
        overall=overall,
        strength=strength,
        bullish=bullish,
        bearish=bearish,
        total=total,
        signals=signals,
    )


def assess(summary: SignalSummary, change_percent: float | None) -> tuple[str, str]:
    """Qualify the overall bias with the day's momentum, returning (label, reasoning)."""
    change = change_percent if is_number(change_percent) else 0.0

    if change > _MOMENTUM_THRESHOLD and summary.overall is Bias.BULLISH:
        return (
            "Strong Bullish",
            f"Strong upward momentum with a {change:.1f}% gain and bullish technical indicators.",
        )
    if change < -_MOMENTUM_THRESHOLD and summary.overall is Bias.BEARISH:
        return (
            "Strong Bearish",
            f"Significant downward pressure with a {abs(change):.1f}% decline and bearish technicals.",
        )
    if summary.overall is Bias.BULLISH:
        return (
            "Bullish",
            "Technical indicators suggest upward momentum. Suited to calls or bullish spreads.",
        )
    if summary.overall is Bias.BEARISH:
        return (
            "Bearish",
            "Technical indicators suggest downward pressure. Consider puts or protective strategies.",
        )
    return "Neutral", "Mixed signals; no side has a clear majority."
