"""Keyword sentiment for chat-channel messages."""

import re
from collections import Counter
from dataclasses import dataclass, field

BULLISH_WORDS = (
    "moon", "calls", "buy", "long", "bull", "up", "rocket",
    "green", "pump", "breakout", "rally", "surge",
)
BEARISH_WORDS = (
    "puts", "short", "sell", "bear", "down", "red",
    "dump", "crash", "drop", "fall", "correction",
)

_WORD_PATTERNS = {
    word: re.compile(rf"\b{word}\b", re.IGNORECASE) for word in BULLISH_WORDS + BEARISH_WORDS
}


def matched_keywords(content: str) -> tuple[list[str], list[str]]:
    bullish = [w for w in BULLISH_WORDS if _WORD_PATTERNS[w].search(content)]
    bearish = [w for w in BEARISH_WORDS if _WORD_PATTERNS[w].search(content)]
    return bullish, bearish


def message_sentiment(content: str) -> str:
    bullish, bearish = matched_keywords(content)
    if len(bullish) > len(bearish):
        return "bullish"
    if len(bearish) > len(bullish):
        return "bearish"
    return "neutral"


def mentions_symbol(content: str, symbol: str) -> bool:
    """Whole-word or cashtag mention of ``symbol``."""
    return re.search(rf"(?<![A-Z0-9])\$?{re.escape(symbol.upper())}(?![A-Z0-9])", content.upper()) is not None


@dataclass
class KeywordTally:
    bullish: int = 0
    bearish: int = 0
    neutral: int = 0
    keywords: Counter = field(default_factory=Counter)

    @property
    def total(self) -> int:
        return self.bullish + self.bearish + self.neutral

    def add(self, content: str) -> str:
        bullish, bearish = matched_keywords(content)
        self.keywords.update(bullish + bearish)
        if len(bullish) > len(bearish):
            self.bullish += 1
            return "bullish"
        if len(bearish) > len(bullish):
            self.bearish += 1
            return "bearish"
        self.neutral += 1
        return "neutral"

    def overall(self) -> tuple[str, int]:
        """Overall label and its share of messages as a whole percentage."""
        if not self.total:
            return "neutral", 0
        if self.bullish > self.bearish and self.bullish > self.neutral:
            label, count = "bullish", self.bullish
        elif self.bearish > self.bullish and self.bearish > self.neutral:
            label, count = "bearish", self.bearish
        else:
            label, count = "neutral", self.neutral
        return label, round(count / self.total * 100)

    def percentage(self, count: int) -> int:
        return round(count / self.total * 100) if self.total else 0

    def top_keywords(self, limit: int = 5) -> list[str]:
        return [f"{word} ({count})" for word, count in self.keywords.most_common(limit)]
