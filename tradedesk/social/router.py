from typing import Annotated

from fastapi import APIRouter, Query

from tradedesk.dependencies import AnalysisServiceDep, SocialServiceDep
from tradedesk.social.schemas import (
    DiscordMentions,
    DiscordPostRequest,
    DiscordPostResult,
    DiscordSentiment,
    StockTwitsSentiment,
)

router = APIRouter()

Symbol = Annotated[str, Query(min_length=1, max_length=10)]


@router.get("/discord/sentiment", response_model=DiscordSentiment)
async def discord_sentiment(symbol: Symbol, service: SocialServiceDep) -> DiscordSentiment:
    """Keyword sentiment over recent channel messages that mention the symbol."""
    return await service.discord_sentiment(symbol)


@router.get("/discord/mentions", response_model=DiscordMentions)
async def discord_mentions(symbol: Symbol, service: SocialServiceDep) -> DiscordMentions:
    return await service.discord_mentions(symbol)


@router.post("/discord/analysis", response_model=DiscordPostResult)
async def post_discord_analysis(
    symbol: Symbol,
    service: SocialServiceDep,
    analysis: AnalysisServiceDep,
) -> DiscordPostResult:
    """Run the smart signal for the symbol and post it to the channel."""
    service.require_discord()
    signal = await analysis.smart_signal(symbol)
    request = DiscordPostRequest(
        symbol=signal.symbol,
        price=signal.quote.price if signal.quote else None,
        change_percent=signal.quote.change_percent if signal.quote else None,
        sentiment=signal.assessment,
        strategy=signal.options_strategy.recommendation if signal.options_strategy else None,
    )
    return await service.post_analysis(request)


@router.get("/stocktwits", response_model=dict[str, StockTwitsSentiment])
async def stocktwits_sentiment(symbol: Symbol, service: SocialServiceDep) -> dict:
    return await service.stocktwits_sentiment([symbol.upper().strip()])
