from typing import Annotated

import httpx
from fastapi import Depends, Request
from langchain_core.language_models import BaseChatModel

from tradedesk.alerts.service import AlertsService
from tradedesk.analysis.service import AIAnalysisService, AnalysisService
from tradedesk.chat.assistant import SmartAssistant
from tradedesk.chat.service import ChatService
from tradedesk.llm.factory import LLMFactory
from tradedesk.market.overview import OverviewService
from tradedesk.market.providers.alpha_vantage import AlphaVantageClient
from tradedesk.market.providers.yahoo_finance import YahooFinanceProvider
from tradedesk.market.service import MarketService
from tradedesk.news.service import NewsService
from tradedesk.plays.service import PlaysService
from tradedesk.social.discord import DiscordClient
from tradedesk.social.service import SocialService
from tradedesk.social.stocktwits import StockTwitsClient


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]


def get_alpha_vantage(http: HttpClientDep) -> AlphaVantageClient:
    return AlphaVantageClient(http)


AlphaVantageDep = Annotated[AlphaVantageClient, Depends(get_alpha_vantage)]


def get_llm() -> BaseChatModel:
    return LLMFactory.create()


LLMDep = Annotated[BaseChatModel, Depends(get_llm)]


def get_market_service(client: AlphaVantageDep) -> MarketService:
    return MarketService(client)


def get_news_service(client: AlphaVantageDep) -> NewsService:
    return NewsService(client)


def get_social_service(http: HttpClientDep) -> SocialService:
    return SocialService(StockTwitsClient(http), DiscordClient(http))


MarketServiceDep = Annotated[MarketService, Depends(get_market_service)]
NewsServiceDep = Annotated[NewsService, Depends(get_news_service)]
SocialServiceDep = Annotated[SocialService, Depends(get_social_service)]


def get_overview_service(
    market: MarketServiceDep, client: AlphaVantageDep, social: SocialServiceDep
) -> OverviewService:
    return OverviewService(market, YahooFinanceProvider(), client, social)


OverviewServiceDep = Annotated[OverviewService, Depends(get_overview_service)]


def get_analysis_service(
    market: MarketServiceDep,
    news: NewsServiceDep,
    overview: OverviewServiceDep,
    social: SocialServiceDep,
) -> AnalysisService:
    return AnalysisService(market, news, overview, social)


AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]


def get_ai_analysis_service(analysis: AnalysisServiceDep, llm: LLMDep) -> AIAnalysisService:
    return AIAnalysisService(analysis, llm)


def get_chat_service(llm: LLMDep, market: MarketServiceDep) -> ChatService:
    return ChatService(llm, market)


def get_smart_assistant(analysis: AnalysisServiceDep) -> SmartAssistant:
    return SmartAssistant(analysis)


def get_plays_service(client: AlphaVantageDep) -> PlaysService:
    return PlaysService(client)


def get_alerts_service(
    market: MarketServiceDep, overview: OverviewServiceDep, client: AlphaVantageDep
) -> AlertsService:
    return AlertsService(market, overview, client)


AIAnalysisServiceDep = Annotated[AIAnalysisService, Depends(get_ai_analysis_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
SmartAssistantDep = Annotated[SmartAssistant, Depends(get_smart_assistant)]
PlaysServiceDep = Annotated[PlaysService, Depends(get_plays_service)]
AlertsServiceDep = Annotated[AlertsService, Depends(get_alerts_service)]
