import pytest

from tradedesk.market.service import estimate_options_chain
from tradedesk.signals.options import nearest_strike, select_strategy
from tradedesk.signals.schemas import Bias
from tradedesk.signals.technical import EXTREMELY_OVERBOUGHT, EXTREMELY_OVERSOLD


@pytest.mark.parametrize("bias", list(Bias))
@pytest.mark.parametrize("price", [27.49, 99.99, 102.5, 187.31, 4321.0])
def test_strikes_are_distinct_multiples_of_five(bias, price):
    strategy = select_strategy(bias, price)
    assert strategy.buy_strike != strategy.sell_strike
    for leg in strategy.legs:
        assert leg.strike % 5 == 0


def test_templates():
    bull = select_strategy(Bias.BULLISH, 187.31)
    assert (bull.name, bull.buy_strike, bull.sell_strike) == ("Bull Call Spread", 185, 195)

    bear = select_strategy(Bias.BEARISH, 187.31)
    assert (bear.name, bear.buy_strike, bear.sell_strike) == ("Bear Put Spread", 185, 175)

    condor = select_strategy(Bias.NEUTRAL, 187.31)
    assert condor.name == "Iron Condor"
    assert sorted(leg.strike for leg in condor.legs) == [175, 185, 185, 195]


def test_half_rounds_up():
    assert nearest_strike(102.5) == 105
    assert nearest_strike(102.49) == 100


@pytest.mark.parametrize("price", [None, 0, -5, float("nan")])
def test_no_strategy_without_price(price):
    assert select_strategy(Bias.BULLISH, price) is None


def test_extreme_overbought_overrides_bullish_bias():
    strategy = select_strategy(Bias.BULLISH, 105.0, EXTREMELY_OVERBOUGHT)
    assert strategy.name == "Bear Put Spread"
    assert strategy.recommendation.startswith("Cautionary")


def test_extreme_oversold_suggests_bounce():
    strategy = select_strategy(Bias.BEARISH, 42.0, EXTREMELY_OVERSOLD)
    assert strategy.name == "Bull Call Spread"
    assert strategy.recommendation.startswith("Contrarian")


def test_extreme_agreeing_with_bias_keeps_template():
    strategy = select_strategy(Bias.BEARISH, 105.0, EXTREMELY_OVERBOUGHT)
    assert not strategy.recommendation.startswith("Cautionary")


@pytest.mark.parametrize("bias", list(Bias))
@pytest.mark.parametrize("price", [1.2, 3.0, 7.0, 9.99, 12.0])
def test_low_priced_strikes_stay_positive(bias, price):
    strategy = select_strategy(bias, price)
    assert strategy.buy_strike != strategy.sell_strike
    for leg in strategy.legs:
        assert leg.strike >= 5
        assert leg.strike % 5 == 0


def test_bear_put_spread_narrows_under_ten():
    bear = select_strategy(Bias.BEARISH, 7.0)
    assert (bear.buy_strike, bear.sell_strike) == (10, 5)


def test_estimated_chain_uses_strategy_grid():
    chain = estimate_options_chain(187.31)
    assert [c.strike for c in chain.calls] == [175, 180, 185, 190, 195]
    assert nearest_strike(187.31) in [c.strike for c in chain.calls]

    cheap = estimate_options_chain(3.0)
    assert [c.strike for c in cheap.puts] == [5, 10, 15]
