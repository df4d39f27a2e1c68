from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tradedesk.alerts.router import router as alerts_router
from tradedesk.analysis.router import router as analysis_router
from tradedesk.chat.router import router as chat_router
from tradedesk.config import settings
from tradedesk.exception_handlers import register_exception_handlers
from tradedesk.http import create_http_client
from tradedesk.logging_config import setup_logging
from tradedesk.market.router import router as market_router
from tradedesk.news.router import router as news_router
from tradedesk.plays.router import router as plays_router
from tradedesk.social.router import router as social_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    app.state.http_client = create_http_client()
    logger.info("startup", llm_provider=settings.llm_provider)
    yield
    await app.state.http_client.aclose()


app = FastAPI(
    title="Tradedesk",
    description="Stateless trading assistant: quotes, signals, sentiment and AI analysis",
    version="0.1.0",
    lifespan=lifespan,
)

origins = settings.cors_origin_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(market_router, prefix="/api/v1/market", tags=["market"])
app.include_router(news_router, prefix="/api/v1/news", tags=["news"])
app.include_router(analysis_router, prefix="/api/v1/analysis", tags=["analysis"])
app.include_router(chat_router, prefix="/api/v1/chat", tags=["chat"])
app.include_router(plays_router, prefix="/api/v1/plays", tags=["plays"])
app.include_router(alerts_router, prefix="/api/v1/alerts", tags=["alerts"])
app.include_router(social_router, prefix="/api/v1", tags=["social"])


@app.get("/api/v1/health")
async def health():
    return {"status": "healthy"}
