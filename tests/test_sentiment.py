import itertools

from tradedesk.signals.schemas import SentimentLabel
from tradedesk.signals.sentiment import aggregate_sentiment, label_score, numeric_scores
from tradedesk.signals.thresholds import SignalThresholds


def test_mean_and_label():
    snapshot = aggregate_sentiment([0.3, 0.25, 0.1])
    assert snapshot.score == 0.2167
    assert snapshot.label is SentimentLabel.BULLISH
    assert snapshot.article_count == 3


def test_order_independent():
    scores = [0.31, -0.07, 0.12, 0.5, -0.44]
    results = {aggregate_sentiment(list(p)).score for p in itertools.permutations(scores)}
    assert len(results) == 1


def test_empty_input_is_unknown():
    snapshot = aggregate_sentiment([])
    assert snapshot.score is None
    assert snapshot.label is SentimentLabel.UNKNOWN
    assert snapshot.article_count == 0


def test_threshold_is_exclusive():
    assert label_score(0.15) is SentimentLabel.NEUTRAL
    assert label_score(-0.15) is SentimentLabel.NEUTRAL
    assert label_score(-0.151) is SentimentLabel.BEARISH


def test_configurable_threshold():
    assert label_score(0.1, SignalThresholds(sentiment=0.05)) is SentimentLabel.BULLISH


def test_numeric_scores_drops_junk():
    assert numeric_scores([0.2, "0.1", None, "n/a", float("nan"), True, float("inf"), -0.3]) == [
        0.2,
        0.1,
        -0.3,
    ]
