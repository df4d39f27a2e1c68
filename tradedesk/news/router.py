from typing import Annotated

from fastapi import APIRouter, Query

from tradedesk.dependencies import NewsServiceDep
from tradedesk.news.schemas import Movers, NewsResponse

router = APIRouter()


@router.get("", response_model=NewsResponse)
async def get_news(
    service: NewsServiceDep,
    symbol: Annotated[str | None, Query(max_length=10)] = None,
    tickers: Annotated[str | None, Query(description="Comma-separated tickers")] = None,
) -> NewsResponse:
    return await service.get_news(symbol, tickers)


@router.get("/movers", response_model=Movers)
async def get_movers(service: NewsServiceDep) -> Movers:
    return await service.get_movers()
