from typing import Any, Literal

from pydantic import Field

from tradedesk.schemas import APIModel


class ChatMessage(APIModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(APIModel):
    message: str = Field(min_length=1, max_length=4000)
    history: list[ChatMessage] = []
    context: str | None = Field(default=None, max_length=4000)


class ChatResponse(APIModel):
    response: str
    tickers: list[str]
    timestamp: str


class SmartChatResponse(APIModel):
    response: str
    analysis: dict[str, Any] | None = None
    intent: str
    tickers: list[str]
    source: str = "smart-assistant"
    timestamp: str
