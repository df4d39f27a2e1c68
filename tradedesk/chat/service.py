"""LLM chat with live quotes injected for tickers mentioned in the message."""

import asyncio
import json
import re
from collections.abc import AsyncGenerator

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from tradedesk.analysis.prompts import CHAT_CONTEXT_TEMPLATE, CHAT_SYSTEM_PROMPT
from tradedesk.analysis.service import LLM_SOURCE, with_timeout
from tradedesk.chat.schemas import ChatMessage, ChatRequest
from tradedesk.config import settings
from tradedesk.exceptions import UpstreamError, UpstreamTimeoutError
from tradedesk.llm.parsing import message_text
from tradedesk.market.schemas import Quote
from tradedesk.market.service import MarketService
from tradedesk.signals.narrative import fmt_change, fmt_number, fmt_volume

logger = structlog.get_logger()

_TICKER = re.compile(r"\b([A-Z]{1,5})\b")
# uppercase words that are not worth a quote lookup
_NOT_TICKERS = frozenset(
    {
        "A", "I", "AI", "AM", "AN", "AND", "ARE", "AS", "AT", "BE", "BUY", "BY", "CEO",
        "DO", "ETF", "FOR", "GO", "HOLD", "IF", "IN", "IPO", "IS", "IT", "ITM", "IV",
        "ME", "MY", "NO", "OF", "OK", "ON", "OR", "OTM", "PUT", "RSI", "SELL", "SMA",
        "SO", "THE", "TO", "UP", "US", "USA", "VS", "WE", "WHAT", "WHY", "MACD", "DTE",
    }
)
_MAX_TICKERS = 3
_MAX_HISTORY = 10


def extract_tickers(message: str, limit: int = _MAX_TICKERS) -> list[str]:
    """Uppercase 1-5 letter words in ``message``, minus common words, first ``limit`` unique."""
    found = [t for t in _TICKER.findall(message) if t not in _NOT_TICKERS]
    return list(dict.fromkeys(found))[:limit]


def quote_line(quote: Quote) -> str:
    return (
        f"{quote.symbol}: {fmt_number(quote.price, prefix='$')} "
        f"{fmt_change(quote.change, quote.change_percent)}, volume {fmt_volume(quote.volume)}"
    )


def _history_message(message: ChatMessage) -> BaseMessage:
    if message.role == "assistant":
        return AIMessage(content=message.content)
    return HumanMessage(content=message.content)


class ChatService:
    def __init__(self, llm: BaseChatModel, market: MarketService) -> None:
        self._llm = llm
        self._market = market

    async def _live_quotes(self, tickers: list[str]) -> list[Quote]:
        results = await asyncio.gather(
            *(
                with_timeout("quote", self._market.get_quote(t), settings.chat_quote_timeout)
                for t in tickers
            ),
            return_exceptions=True,
        )
        quotes = []
        for ticker, result in zip(tickers, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("chat_quote_failed", ticker=ticker, error=str(result))
                continue
            quotes.append(result)
        return quotes

    async def _build_messages(self, request: ChatRequest, tickers: list[str]) -> list[BaseMessage]:
        system = CHAT_SYSTEM_PROMPT
        quotes = await self._live_quotes(tickers) if tickers else []
        if quotes:
            system += "\n\n" + CHAT_CONTEXT_TEMPLATE.format(
                quotes="\n".join(quote_line(q) for q in quotes)
            )
        if request.context:
            system += f"\n\nUser context:\n{request.context}"

        messages: list[BaseMessage] = [SystemMessage(content=system)]
        messages += [_history_message(m) for m in request.history[-_MAX_HISTORY:]]
        messages.append(HumanMessage(content=request.message))
        return messages

    async def chat(self, request: ChatRequest) -> tuple[str, list[str]]:
        tickers = extract_tickers(request.message)
        logger.info("chat_request", tickers=tickers, history=len(request.history))
        messages = await self._build_messages(request, tickers)
        try:
            response = await with_timeout(
                LLM_SOURCE, self._llm.ainvoke(messages), settings.llm_timeout
            )
        except UpstreamTimeoutError:
            logger.error("chat_llm_timeout", timeout=settings.llm_timeout)
            raise
        except Exception as exc:
            logger.error("chat_llm_error", error=str(exc))
            raise UpstreamError(LLM_SOURCE, f"chat failed: {exc}") from exc
        return message_text(response), tickers

    async def chat_stream(self, request: ChatRequest) -> AsyncGenerator[dict, None]:
        """SSE streaming chat: token events, then the full response."""
        tickers = extract_tickers(request.message)
        yield {"event": "status", "data": json.dumps({"step": "starting", "tickers": tickers})}

        try:
            messages = await self._build_messages(request, tickers)
            parts: list[str] = []
            async for chunk in self._llm.astream(messages):
                content = chunk.content
                if content:
                    text = content if isinstance(content, str) else message_text(chunk)
                    parts.append(text)
                    yield {"event": "token", "data": text}
            yield {"event": "response", "data": json.dumps({"response": "".join(parts)})}
        except Exception as exc:
            logger.error("chat_stream_error", error=str(exc))
            yield {"event": "error", "data": json.dumps({"error": str(exc)})}

        yield {"event": "done", "data": ""}
