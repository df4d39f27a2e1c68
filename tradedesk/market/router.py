from typing import Annotated, Literal

from fastapi import APIRouter, Query

from tradedesk.dependencies import MarketServiceDep, OverviewServiceDep
from tradedesk.market.schemas import (
    DashboardResponse,
    EconomicResponse,
    EnhancedQuote,
    IntelligenceResponse,
    MarketConditions,
    OptionsResponse,
    Quote,
    TechnicalsResponse,
)
from tradedesk.signals.schemas import SessionInfo
from tradedesk.signals.session import session_info

router = APIRouter()

Symbol = Annotated[str, Query(min_length=1, max_length=10)]


@router.get("/quote", response_model=Quote)
async def get_quote(
    symbol: Symbol,
    service: MarketServiceDep,
    entitlement: Literal["realtime", "delayed"] = "realtime",
) -> Quote:
    return await service.get_quote(symbol, entitlement=entitlement)


@router.get("/quote/enhanced", response_model=EnhancedQuote)
async def get_enhanced_quote(symbol: Symbol, service: MarketServiceDep) -> EnhancedQuote:
    return await service.get_enhanced_quote(symbol)


@router.get("/technicals", response_model=TechnicalsResponse)
async def get_technicals(symbol: Symbol, service: MarketServiceDep) -> TechnicalsResponse:
    return await service.get_technicals(symbol)


@router.get("/options", response_model=OptionsResponse)
async def get_options(
    symbol: Symbol, service: MarketServiceDep, estimate: bool = False
) -> OptionsResponse:
    return await service.get_options(symbol, estimate=estimate)


@router.get("/session", response_model=SessionInfo)
async def get_session() -> SessionInfo:
    return session_info()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(service: OverviewServiceDep) -> DashboardResponse:
    return await service.get_dashboard()


@router.get("/intelligence", response_model=IntelligenceResponse)
async def get_intelligence(service: OverviewServiceDep) -> IntelligenceResponse:
    return await service.get_intelligence()


@router.get("/conditions", response_model=MarketConditions)
async def get_conditions(service: OverviewServiceDep) -> MarketConditions:
    return await service.get_conditions()


@router.get("/economic", response_model=EconomicResponse)
async def get_economic(service: OverviewServiceDep) -> EconomicResponse:
    return await service.get_economic()
