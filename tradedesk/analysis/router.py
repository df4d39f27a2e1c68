from typing import Annotated

from fastapi import APIRouter, Query

from tradedesk.analysis.schemas import AnalysisRequest, AnalysisResponse, SmartSignal
from tradedesk.dependencies import AIAnalysisServiceDep, AnalysisServiceDep

router = APIRouter()


@router.post("", response_model=AnalysisResponse)
async def analyze(request: AnalysisRequest, service: AIAnalysisServiceDep) -> AnalysisResponse:
    """LLM analysis, smart plays or alerts over the aggregated market context."""
    return await service.analyze(request)


@router.get("/signal", response_model=SmartSignal)
async def smart_signal(
    service: AnalysisServiceDep,
    symbol: Annotated[str, Query(min_length=1, max_length=10)],
) -> SmartSignal:
    return await service.smart_signal(symbol)
