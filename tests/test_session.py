from datetime import UTC, datetime

import pytest

from tradedesk.signals import session as sessions
from tradedesk.signals.schemas import MarketSession

MON, FRI, SAT, SUN = 0, 4, 5, 6


def test_total_over_the_week():
    for day in range(7):
        for hour in range(24):
            for minute in range(60):
                assert isinstance(sessions.resolve_session(day, hour, minute), MarketSession)


@pytest.mark.parametrize(
    ("day", "hour", "minute", "expected"),
    [
        (SAT, 12, 0, MarketSession.WEEKEND),
        (SUN, 17, 59, MarketSession.WEEKEND),
        (SUN, 18, 0, MarketSession.FUTURES_OPEN),
        (MON, 3, 59, MarketSession.FUTURES_OPEN),
        (MON, 4, 0, MarketSession.PRE_MARKET),
        (MON, 9, 29, MarketSession.PRE_MARKET),
        (MON, 9, 30, MarketSession.MARKET_OPEN),
        (MON, 15, 59, MarketSession.MARKET_OPEN),
        (MON, 16, 0, MarketSession.AFTER_HOURS),
        (MON, 19, 59, MarketSession.AFTER_HOURS),
        (MON, 20, 0, MarketSession.FUTURES_OPEN),
        (FRI, 20, 0, MarketSession.MARKET_CLOSED),
        (FRI, 23, 59, MarketSession.MARKET_CLOSED),
    ],
)
def test_session_boundaries(day, hour, minute, expected):
    assert sessions.resolve_session(day, hour, minute) is expected


def test_refresh_cadence():
    assert sessions.refresh_seconds(MarketSession.MARKET_OPEN) == 30
    assert sessions.update_frequency(MarketSession.MARKET_OPEN) == "Updates every 30 seconds"
    assert sessions.update_frequency(MarketSession.PRE_MARKET) == "Updates every 1 minute"
    assert sessions.update_frequency(MarketSession.FUTURES_OPEN) == "Updates every 2 minutes"
    assert sessions.update_frequency(MarketSession.WEEKEND) == "Updates every 5 minutes"


def test_current_session_converts_to_eastern():
    # 14:35 UTC on a Wednesday in October is 10:35 EDT
    now = datetime(2026, 10, 14, 14, 35, tzinfo=UTC)
    info = sessions.session_info(now)
    assert info.session is MarketSession.MARKET_OPEN
    assert info.eastern_time.startswith("2026-10-14T10:35")
    assert sessions.minutes_since_open(now) == 65
    assert sessions.minutes_until_close(now) == 325
