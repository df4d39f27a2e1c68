import math
from collections.abc import Iterable

from tradedesk.signals.schemas import SentimentLabel, SentimentSnapshot
from tradedesk.signals.thresholds import DEFAULT_THRESHOLDS, SignalThresholds


def label_score(score: float, thresholds: SignalThresholds = DEFAULT_THRESHOLDS) -> SentimentLabel:
    if score > thresholds.sentiment:
        return SentimentLabel.BULLISH
    if score < -thresholds.sentiment:
        return SentimentLabel.BEARISH
    return SentimentLabel.NEUTRAL


def numeric_scores(values: Iterable[object]) -> list[float]:
    """Keep the entries that are real finite numbers, converting numeric strings."""
    scores: list[float] = []
    for value in values:
        if isinstance(value, bool) or value is None:
            continue
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            continue
        if math.isfinite(number):
            scores.append(number)
    return scores


def aggregate_sentiment(
    scores: list[float], thresholds: SignalThresholds = DEFAULT_THRESHOLDS
) -> SentimentSnapshot:
    if not scores:
        return SentimentSnapshot(score=None, label=SentimentLabel.UNKNOWN, article_count=0)

    # fsum is exact, so the mean does not depend on input order
    average = math.fsum(scores) / len(scores)
    return SentimentSnapshot(
        score=round(average, 4),
        label=label_score(average, thresholds),
        article_count=len(scores),
    )
