from fastapi import APIRouter

from tradedesk.alerts.schemas import AlertsResponse
from tradedesk.dependencies import AlertsServiceDep

router = APIRouter()


@router.get("", response_model=AlertsResponse)
async def get_alerts(service: AlertsServiceDep) -> AlertsResponse:
    return await service.get_alerts()
