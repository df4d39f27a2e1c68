from abc import ABC, abstractmethod

from tradedesk.market.schemas import Quote


class MarketDataProvider(ABC):
    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote: ...
