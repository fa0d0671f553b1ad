"""AdsDesk — FastAPI Application Entry Point.

Facebook Ads dashboard backend: accounts, campaigns, ads, insights and
Telegram notifications over a normalized Graph API layer.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adsdesk.config import settings
from adsdesk.connectors.meta.client import MetaClient
from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.services.account_store import AccountStore
from adsdesk.services.telegram import TelegramNotifier
from adsdesk.api.account_routes import router as account_router
from adsdesk.api.ad_routes import router as ad_router
from adsdesk.api.auth_routes import router as auth_router
from adsdesk.api.campaign_routes import router as campaign_router
from adsdesk.api.insight_routes import router as insight_router
from adsdesk.api.telegram_routes import router as telegram_router
from adsdesk.core.logging import get_logger

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build shared clients on startup and close them on shutdown."""
    logger.info("🚀 AdsDesk starting up...")
    http_client = httpx.AsyncClient(timeout=settings.http_timeout)
    meta_client = MetaClient(http_client, settings)
    app.state.endpoints = MetaEndpoints(meta_client)
    app.state.account_store = AccountStore(settings.accounts_file)
    app.state.notifier = TelegramNotifier(http_client, settings)
    logger.info(f"🌍 Graph API: {settings.graph_base}")
    yield
    await http_client.aclose()
    logger.info("AdsDesk shut down")


app = FastAPI(
    title="AdsDesk",
    description="Facebook Ads dashboard backend: normalized Graph API insights, accounts and alerts.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(account_router)
app.include_router(campaign_router)
app.include_router(ad_router)
app.include_router(insight_router)
app.include_router(auth_router)
app.include_router(telegram_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "adsdesk",
        "version": "1.0.0",
    }


def run() -> None:
    import uvicorn

    uvicorn.run("adsdesk.main:app", host="0.0.0.0", port=8000)
