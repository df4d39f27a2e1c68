from enum import StrEnum
from typing import Literal

from tradedesk.schemas import APIModel


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Alert(APIModel):
    type: str
    priority: Priority
    title: str
    message: str
    action: str
    ticker: str | None = None
    price: float | None = None
    change_percent: float | None = None
    timestamp: str


class AlertsResponse(APIModel):
    alerts: list[Alert]
    market_status: Literal["open", "extended", "closed"]
    message: str | None = None
    timestamp: str
