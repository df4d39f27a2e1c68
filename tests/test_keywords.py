from tradedesk.social.keywords import KeywordTally, mentions_symbol, message_sentiment


def test_whole_word_matching():
    # "update" and "shortly" contain "up" and "short" but are not keywords
    assert message_sentiment("update coming shortly") == "neutral"
    assert message_sentiment("loading calls, this will moon") == "bullish"
    assert message_sentiment("buying puts, looks like a crash") == "bearish"


def test_symbol_mentions():
    assert mentions_symbol("bought more $TSLA today", "TSLA")
    assert mentions_symbol("tsla to the moon", "TSLA")
    assert not mentions_symbol("TSLAQ is not it", "TSLA")
    assert not mentions_symbol("nothing here", "TSLA")


def test_tally():
    tally = KeywordTally()
    for text in ["moon calls", "rally breakout", "puts", "just watching"]:
        tally.add(text)

    assert (tally.bullish, tally.bearish, tally.neutral) == (2, 1, 1)
    assert tally.overall() == ("bullish", 50)
    assert tally.percentage(tally.bearish) == 25
    assert len(tally.top_keywords()) == 5


def test_empty_tally_is_neutral():
    assert KeywordTally().overall() == ("neutral", 0)
