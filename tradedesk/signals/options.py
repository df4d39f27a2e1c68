"""Options-strategy templates keyed by signal bias.

Strikes are plain multiples of $5 derived from the current price. They are
presentation values, not checked against a listed chain.
"""

import math

from tradedesk.signals.schemas import Bias, OptionLeg, OptionsStrategy
from tradedesk.signals.technical import EXTREMELY_OVERBOUGHT, EXTREMELY_OVERSOLD

STRIKE_STEP = 5
SPREAD_WIDTH = 10


def nearest_strike(price: float) -> int:
    # half-up rounding to the step, so 102.5 goes to 105 rather than banker's 100
    return math.floor(price / STRIKE_STEP + 0.5) * STRIKE_STEP


def floor_strike(price: float) -> int:
    return math.floor(price / STRIKE_STEP) * STRIKE_STEP


def _bull_call_spread(price: float) -> OptionsStrategy:
    buy = max(nearest_strike(price), STRIKE_STEP)
    sell = buy + SPREAD_WIDTH
    return OptionsStrategy(
        name="Bull Call Spread",
        bias=Bias.BULLISH,
        buy_strike=buy,
        sell_strike=sell,
        legs=[
            OptionLeg(action="buy", option_type="call", strike=buy),
            OptionLeg(action="sell", option_type="call", strike=sell),
        ],
        recommendation=(
            f"Bull Call Spread: buy the ${buy} calls, sell the ${sell} calls, "
            "2-4 weeks out. Take profits at 50%."
        ),
    )


def _bear_put_spread(price: float) -> OptionsStrategy:
    # short leg never goes below the lowest strike; the spread narrows under $10
    buy = max(floor_strike(price), 2 * STRIKE_STEP)
    sell = max(buy - SPREAD_WIDTH, STRIKE_STEP)
    return OptionsStrategy(
        name="Bear Put Spread",
        bias=Bias.BEARISH,
        buy_strike=buy,
        sell_strike=sell,
        legs=[
            OptionLeg(action="buy", option_type="put", strike=buy),
            OptionLeg(action="sell", option_type="put", strike=sell),
        ],
        recommendation=(
            f"Bear Put Spread: buy the ${buy} puts, sell the ${sell} puts. "
            "Conservative downside play."
        ),
    )


def _iron_condor(price: float) -> OptionsStrategy:
    center = max(nearest_strike(price), 2 * STRIKE_STEP)
    low_wing = max(center - SPREAD_WIDTH, STRIKE_STEP)
    high_wing = center + SPREAD_WIDTH
    return OptionsStrategy(
        name="Iron Condor",
        bias=Bias.NEUTRAL,
        buy_strike=high_wing,
        sell_strike=center,
        legs=[
            OptionLeg(action="sell", option_type="call", strike=center),
            OptionLeg(action="sell", option_type="put", strike=center),
            OptionLeg(action="buy", option_type="call", strike=high_wing),
            OptionLeg(action="buy", option_type="put", strike=low_wing),
        ],
        recommendation=(
            f"Iron Condor: sell the ${center} straddle, buy ${low_wing}/${high_wing} "
            "protection. Profits from low volatility."
        ),
    )


def select_strategy(
    bias: Bias, price: float | None, rsi_extreme: str | None = None
) -> OptionsStrategy | None:
    """Pick the template for ``bias``; an extreme RSI reading overrides it.

    Returns None when there is no usable price.
    """
    if price is None or not math.isfinite(price) or price <= 0:
        return None

    if rsi_extreme == EXTREMELY_OVERBOUGHT and bias is not Bias.BEARISH:
        strategy = _bear_put_spread(price)
        strategy.recommendation = (
            "Cautionary: RSI is extremely overbought, a pullback hedge is favoured. "
            + strategy.recommendation
        )
        return strategy
    if rsi_extreme == EXTREMELY_OVERSOLD and bias is not Bias.BULLISH:
        strategy = _bull_call_spread(price)
        strategy.recommendation = (
            "Contrarian: RSI is extremely oversold, a bounce is favoured. "
            + strategy.recommendation
        )
        return strategy

    match bias:
        case Bias.BULLISH:
            return _bull_call_spread(price)
        case Bias.BEARISH:
            return _bear_put_spread(price)
        case _:
            return _iron_condor(price)
