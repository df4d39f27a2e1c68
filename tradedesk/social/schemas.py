from pydantic import Field

from tradedesk.schemas import APIModel


class StockTwitsSentiment(APIModel):
    symbol: str
    bullish_percentage: int
    bearish_percentage: int
    neutral_percentage: int
    message_count: int


class ChannelMessage(APIModel):
    content: str
    author: str
    timestamp: str
    sentiment: str  # "bullish" / "bearish" / "neutral"


class DiscordSentiment(APIModel):
    symbol: str
    total_messages: int
    bullish_count: int
    bearish_count: int
    neutral_count: int
    overall_sentiment: str
    confidence: int
    bullish_percentage: int
    bearish_percentage: int
    recent_messages: list[ChannelMessage]
    top_keywords: list[str]
    timestamp: str


class DiscordMentions(APIModel):
    symbol: str
    mentions: list[ChannelMessage]
    total_found: int


class DiscordPostRequest(APIModel):
    symbol: str = Field(min_length=1, max_length=10)
    price: float | None = None
    change_percent: float | None = None
    sentiment: str | None = None
    strategy: str | None = None


class DiscordPostResult(APIModel):
    success: bool
    message: str
    message_id: str | None = None
