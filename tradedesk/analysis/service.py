import asyncio
import json
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from tradedesk.analysis.prompts import (
    ALERTS_PROMPT,
    ANALYSIS_PROMPT,
    ANALYST_SYSTEM_PROMPT,
    SMART_PLAYS_PROMPT,
)
from tradedesk.analysis.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    AnalysisType,
    DataQuality,
    SmartSignal,
)
from tradedesk.config import settings
from tradedesk.exceptions import UpstreamError, UpstreamTimeoutError, ValidationError
from tradedesk.llm.parsing import message_text, parse_llm_json
from tradedesk.market.overview import SOCIAL_SYMBOLS, OverviewService, error_entry, settle
from tradedesk.market.service import MarketService, normalize_symbol
from tradedesk.news.service import NewsService
from tradedesk.signals import session as sessions
from tradedesk.signals.narrative import build_report, context_json
from tradedesk.signals.options import select_strategy
from tradedesk.signals.schemas import TechnicalSnapshot
from tradedesk.signals.technical import assess, classify, classify_rsi_extreme
from tradedesk.signals.thresholds import get_thresholds
from tradedesk.signals.volatility import volatility_level
from tradedesk.social.service import SocialService

logger = structlog.get_logger()

T = TypeVar("T")

LLM_SOURCE = "LLM"
_MOVERS_FOR_CONTEXT = 10

_PROMPTS = {
    AnalysisType.ANALYSIS: ANALYSIS_PROMPT,
    AnalysisType.SMART_PLAYS: SMART_PLAYS_PROMPT,
    AnalysisType.ALERTS: ALERTS_PROMPT,
}


async def with_timeout(source: str, aw: Awaitable[T], timeout: float) -> T:
    try:
        return await asyncio.wait_for(aw, timeout=timeout)
    except TimeoutError as exc:
        raise UpstreamTimeoutError(source, timeout) from exc


class AnalysisService:
    """Composes the narrower fetchers into one market context and the smart signal."""

    def __init__(
        self,
        market: MarketService,
        news: NewsService,
        overview: OverviewService,
        social: SocialService,
    ) -> None:
        self._market = market
        self._news = news
        self._overview = overview
        self._social = social

    async def _vix(self) -> dict[str, Any]:
        vix = await self._overview.get_vix()
        return {
            "price": vix.price,
            "changePercent": vix.change_percent,
            "level": volatility_level(vix.price, get_thresholds()),
        }

    async def _news_context(self, symbol: str | None) -> dict[str, Any]:
        articles, sentiment = await self._news.get_articles(symbol)
        return {
            "articles": [a.model_dump(by_alias=True, exclude={"ticker_sentiment"}) for a in articles],
            "sentiment": sentiment.model_dump(by_alias=True),
        }

    async def _technicals(self, symbol: str) -> dict[str, Any]:
        snapshot = (await self._market.get_technical_snapshot(symbol)).model_dump(
            by_alias=True, exclude_none=True
        )
        if not snapshot:
            raise UpstreamError("technicals", "no indicators available")
        return snapshot

    async def _social_sentiment(self, symbols: list[str]) -> dict[str, Any]:
        sentiment = await self._social.stocktwits_sentiment(symbols)
        if not sentiment:
            raise UpstreamError("StockTwits", "no sentiment available")
        return {k: v.model_dump(by_alias=True) for k, v in sentiment.items()}

    async def _dump(self, aw: Awaitable[Any]) -> Any:
        result = await aw
        return result.model_dump(by_alias=True, exclude_none=True)

    async def gather_context(self, symbol: str | None) -> dict[str, Any]:
        """Fetch every source concurrently; a failed source becomes an ``{"error": ...}`` entry."""
        timeout = settings.http_timeout
        sources: dict[str, Awaitable[Any]] = {}
        if symbol:
            sources["quote"] = self._dump(self._market.get_quote(symbol))
            sources["technicals"] = self._technicals(symbol)
        sources["news"] = self._news_context(symbol)
        sources["movers"] = self._dump(self._news.get_movers(limit=_MOVERS_FOR_CONTEXT))
        sources["vix"] = self._vix()
        sources["social"] = self._social_sentiment([symbol] if symbol else SOCIAL_SYMBOLS)

        results = await settle(
            *(with_timeout(name, aw, timeout) for name, aw in sources.items())
        )
        context: dict[str, Any] = {}
        for name, result in zip(sources, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("analysis_source_failed", source=name, symbol=symbol, error=str(result))
                context[name] = error_entry(result)
            else:
                context[name] = result
        return context

    async def smart_signal(self, symbol: str) -> SmartSignal:
        """Deterministic signal: classifier, sentiment and strategy, rendered as a report."""
        symbol = normalize_symbol(symbol)
        thresholds = get_thresholds()
        timeout = settings.http_timeout
        logger.info("analysis_smart_signal", symbol=symbol)

        quote, snapshot, news = await settle(
            with_timeout("quote", self._market.get_quote(symbol), timeout),
            with_timeout("technicals", self._market.get_technical_snapshot(symbol), timeout),
            with_timeout("news", self._news.get_articles(symbol), timeout),
        )
        failed = [
            name
            for name, result in (("quote", quote), ("technicals", snapshot), ("news", news))
            if isinstance(result, Exception)
        ]
        if failed:
            logger.warning("smart_signal_partial", symbol=symbol, failed=failed)

        quote = None if isinstance(quote, Exception) else quote
        snapshot = TechnicalSnapshot() if isinstance(snapshot, Exception) else snapshot
        sentiment = None if isinstance(news, Exception) else news[1]
        price = quote.price if quote else None

        summary = classify(snapshot, price, thresholds)
        assessment = assess(summary, quote.change_percent if quote else None)
        rsi_extreme = classify_rsi_extreme(snapshot.rsi, thresholds)
        strategy = select_strategy(summary.overall, price, rsi_extreme)

        return SmartSignal(
            symbol=symbol,
            quote=quote,
            technicals=snapshot,
            sentiment=sentiment,
            summary=summary,
            assessment=assessment[0],
            reasoning=assessment[1],
            rsi_extreme=rsi_extreme,
            options_strategy=strategy,
            report=build_report(symbol, quote, snapshot, summary, assessment, strategy, sentiment),
            failed_sources=failed,
            timestamp=datetime.now(UTC).isoformat(),
        )


def assess_data_quality(context: dict[str, Any]) -> DataQuality:
    def ok(name: str) -> dict[str, Any] | None:
        value = context.get(name)
        return value if isinstance(value, dict) and "error" not in value else None

    news = ok("news") or {}
    movers = ok("movers") or {}
    vix = ok("vix") or {}
    technicals = ok("technicals") or {}
    return DataQuality(
        has_stock_data=ok("quote") is not None,
        top_gainers=len(movers.get("topGainers", [])),
        top_losers=len(movers.get("topLosers", [])),
        news_articles=len(news.get("articles", [])),
        sentiment=news.get("sentiment", {}).get("label", "Unknown"),
        vix_level=vix.get("price"),
        technicals=len(technicals),
        failed_sources=sorted(
            name for name, value in context.items() if isinstance(value, dict) and "error" in value
        ),
    )


class AIAnalysisService:
    def __init__(self, analysis: AnalysisService, llm: BaseChatModel) -> None:
        self._analysis = analysis
        self._llm = llm

    async def analyze(self, request: AnalysisRequest) -> AnalysisResponse:
        symbol = normalize_symbol(request.symbol) if request.symbol else None
        if request.type is AnalysisType.ANALYSIS and not symbol:
            raise ValidationError("A symbol is required for analysis")

        session = sessions.current_session()
        logger.info("ai_analysis", type=request.type, symbol=symbol, session=session)

        context = await self._analysis.gather_context(symbol)
        quality = assess_data_quality(context)
        has_data = (
            quality.has_stock_data
            or quality.top_gainers > 0
            or quality.news_articles > 0
            or quality.vix_level is not None
        )

        analysis: dict[str, Any] | None = None
        message = None
        if not has_data:
            logger.warning("ai_analysis_no_data", type=request.type, symbol=symbol)
            message = "Insufficient market data to generate an analysis"
        else:
            analysis = await self._run_llm(request.type, symbol, session, context)
            if analysis is None:
                message = "The AI response could not be parsed"

        return AnalysisResponse(
            type=request.type,
            symbol=symbol,
            analysis=analysis,
            message=message,
            market_session=session,
            data_quality=quality,
            sources=context,
            timestamp=datetime.now(UTC).isoformat(),
        )

    async def _run_llm(
        self, analysis_type: AnalysisType, symbol: str | None, session: str, context: dict
    ) -> dict[str, Any] | None:
        prompt = _PROMPTS[analysis_type].format(
            subject=symbol or "the overall market",
            context=context_json(context),
            session=session,
        )
        messages = [SystemMessage(content=ANALYST_SYSTEM_PROMPT), HumanMessage(content=prompt)]
        try:
            response = await with_timeout(
                LLM_SOURCE, self._llm.ainvoke(messages), settings.llm_timeout
            )
        except UpstreamTimeoutError:
            logger.error("ai_analysis_timeout", type=analysis_type, symbol=symbol)
            raise
        except Exception as exc:
            logger.error("ai_analysis_llm_error", type=analysis_type, symbol=symbol, error=str(exc))
            raise UpstreamError(LLM_SOURCE, f"analysis failed: {exc}") from exc

        try:
            return parse_llm_json(message_text(response))
        except json.JSONDecodeError as exc:
            logger.warning("ai_analysis_parse_error", type=analysis_type, symbol=symbol, error=str(exc))
            return None
