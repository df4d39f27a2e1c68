import pytest

from tradedesk.market.schemas import IntradayBar
from tradedesk.news.schemas import Mover
from tradedesk.plays.service import build_play, is_candidate
from tradedesk.signals.schemas import MarketSession


def _mover(ticker="ABC", price=20.0, change_percent=8.0, volume=2_000_000) -> Mover:
    return Mover(
        ticker=ticker,
        price=price,
        change_amount=price * change_percent / 100,
        change_percent=change_percent,
        volume=volume,
    )


def _bars(volume: int, count: int = 20) -> list[IntradayBar]:
    return [
        IntradayBar(
            timestamp=f"2026-10-16 15:{59 - i:02d}:00",
            open=20.0,
            high=21.0,
            low=19.0,
            close=20.0,
            volume=volume,
        )
        for i in range(count)
    ]


@pytest.mark.parametrize(
    ("mover", "expected"),
    [
        (_mover(), True),
        (_mover(change_percent=-5.0), True),
        (_mover(change_percent=4.9), False),
        (_mover(volume=99_999), False),
        (_mover(price=1.0), False),
    ],
)
def test_candidate_filters(mover, expected):
    assert is_candidate(mover) is expected


def test_momentum_continuation_during_market_hours():
    play = build_play(_mover(), _bars(100_000), MarketSession.MARKET_OPEN)
    assert play.strategy == "Momentum Continuation"
    assert play.type == "LONG"
    assert (play.entry, play.stop_loss, play.target) == (20.0, 19.0, 22.0)
    assert play.confidence == 76
    assert play.volume_ratio == 20.0
    assert play.risk_reward == 2.0


def test_gap_up_outside_market_hours():
    play = build_play(_mover(change_percent=20.0), _bars(100_000), MarketSession.PRE_MARKET)
    assert play.strategy == "Gap Up Follow-Through"
    assert play.confidence == 75


def test_oversold_bounce():
    play = build_play(_mover(change_percent=-10.0), _bars(100_000), MarketSession.MARKET_OPEN)
    assert play.strategy == "Oversold Bounce"
    assert play.type == "BOUNCE"
    assert play.confidence == 73
    assert (play.stop_loss, play.target) == (18.4, 23.0)


def test_volume_must_exceed_recent_average():
    assert build_play(_mover(volume=1_500_000), _bars(1_000_000), MarketSession.MARKET_OPEN) is None
    assert build_play(_mover(), [], MarketSession.MARKET_OPEN) is None
