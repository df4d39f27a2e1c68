"""The one table of numeric cut-offs shared by every signal rule."""

from dataclasses import dataclass

from tradedesk.config import Settings, settings


@dataclass(frozen=True)
class SignalThresholds:
    sentiment: float = 0.15
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    rsi_extreme_overbought: float = 75.0
    rsi_extreme_oversold: float = 25.0
    vix_calm: float = 15.0
    vix_elevated: float = 20.0
    vix_high: float = 25.0
    vix_extreme: float = 30.0

    @classmethod
    def from_settings(cls, config: Settings) -> "SignalThresholds":
        return cls(
            sentiment=config.sentiment_threshold,
            rsi_overbought=config.rsi_overbought,
            rsi_oversold=config.rsi_oversold,
            rsi_extreme_overbought=config.rsi_extreme_overbought,
            rsi_extreme_oversold=config.rsi_extreme_oversold,
            vix_calm=config.vix_calm,
            vix_elevated=config.vix_elevated,
            vix_high=config.vix_high,
            vix_extreme=config.vix_extreme,
        )


DEFAULT_THRESHOLDS = SignalThresholds()


def get_thresholds() -> SignalThresholds:
    return SignalThresholds.from_settings(settings)
