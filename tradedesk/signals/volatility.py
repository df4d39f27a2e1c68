"""VIX regimes and broad-market mood votes."""

from collections.abc import Iterable

from tradedesk.signals.thresholds import DEFAULT_THRESHOLDS, SignalThresholds

_INDEX_MOVE = 0.5
_SECTOR_MOVE = 1.0
_SOCIAL_MAJORITY = 60
_STRONG_RATIO = 0.6
_LEAN_RATIO = 0.4


def fear_greed(vix: float, t: SignalThresholds = DEFAULT_THRESHOLDS) -> str:
    if vix < t.vix_calm:
        return "Extreme Greed"
    if vix < t.vix_elevated:
        return "Greed"
    if vix < t.vix_high:
        return "Neutral"
    if vix < t.vix_extreme:
        return "Fear"
    return "Extreme Fear"


def volatility_level(vix: float, t: SignalThresholds = DEFAULT_THRESHOLDS) -> str:
    if vix > t.vix_extreme:
        return "Very High"
    if vix > t.vix_high:
        return "High"
    if vix > t.vix_elevated:
        return "Elevated"
    return "Normal"


def market_trend(change_percent: float) -> str:
    if change_percent > 1:
        return "Strong Bullish"
    if change_percent > 0.5:
        return "Bullish"
    if change_percent > -0.5:
        return "Neutral"
    if change_percent > -1:
        return "Bearish"
    return "Strong Bearish"


def overall_market_sentiment(
    fear_greed_label: str | None,
    index_changes: Iterable[float] = (),
    sector_changes: Iterable[float] = (),
    social_split: tuple[int, int] | None = None,
) -> str:
    """Vote the available sources; each contributes one signal to the total.

    ``social_split`` is (bullish %, bearish %) from a chat channel.
    """
    bullish = bearish = total = 0

    if fear_greed_label is not None:
        total += 1
        if "Greed" in fear_greed_label:
            bullish += 1
        elif "Fear" in fear_greed_label:
            bearish += 1

    for changes, move in ((index_changes, _INDEX_MOVE), (sector_changes, _SECTOR_MOVE)):
        for change in changes:
            total += 1
            if change > move:
                bullish += 1
            elif change < -move:
                bearish += 1

    if social_split is not None:
        total += 1
        if social_split[0] > _SOCIAL_MAJORITY:
            bullish += 1
        elif social_split[1] > _SOCIAL_MAJORITY:
            bearish += 1

    if not total:
        return "NEUTRAL"
    if bullish / total > _STRONG_RATIO:
        return "STRONG BULLISH"
    if bullish / total > _LEAN_RATIO:
        return "BULLISH"
    if bearish / total > _STRONG_RATIO:
        return "STRONG BEARISH"
    if bearish / total > _LEAN_RATIO:
        return "BEARISH"
    return "NEUTRAL"
