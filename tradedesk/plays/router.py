from fastapi import APIRouter

from tradedesk.dependencies import PlaysServiceDep
from tradedesk.plays.schemas import PlaysResponse

router = APIRouter()


@router.get("", response_model=PlaysResponse)
async def get_plays(service: PlaysServiceDep) -> PlaysResponse:
    """Top volume-confirmed setups from today's gainers and losers."""
    return await service.get_plays()
