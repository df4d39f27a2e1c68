from datetime import UTC, datetime

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from tradedesk.chat.schemas import ChatRequest, ChatResponse, SmartChatResponse
from tradedesk.dependencies import ChatServiceDep, SmartAssistantDep

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(request: ChatRequest, service: ChatServiceDep) -> ChatResponse:
    response, tickers = await service.chat(request)
    return ChatResponse(response=response, tickers=tickers, timestamp=datetime.now(UTC).isoformat())


@router.post("/stream", response_class=EventSourceResponse)
async def chat_stream(request: ChatRequest, service: ChatServiceDep) -> EventSourceResponse:
    """Stream chat responses via Server-Sent Events."""
    return EventSourceResponse(service.chat_stream(request))


@router.post("/smart", response_model=SmartChatResponse)
async def smart_chat(request: ChatRequest, assistant: SmartAssistantDep) -> SmartChatResponse:
    """Rule-based assistant; no LLM involved."""
    intent, tickers, text, analysis = await assistant.respond(request.message)
    return SmartChatResponse(
        response=text,
        analysis=analysis,
        intent=intent,
        tickers=tickers,
        timestamp=datetime.now(UTC).isoformat(),
    )
