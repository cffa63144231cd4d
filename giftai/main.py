"""
GiftAI Recommendation Service - FastAPI Application
LLM Provider:
- If OPENAI_API_KEY is set: AI tier (suggestions + product search)
- If no OPENAI_API_KEY: rule-based tier only
"""

import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from giftai import __version__
from giftai.api.chat import router as chat_router
from giftai.api.deps import get_storage, get_llm
from giftai.api.gifts import router as gifts_router
from giftai.api.recommendations import router as recommendations_router
from giftai.api.wishlist import router as wishlist_router
from giftai.config import settings
from giftai.data.catalog import seed_catalog
from giftai.schemas.gift_schemas import HealthResponse


# ============================================
# Logging
# ============================================

logger.remove()
logger.add(
    sys.stderr,
    level=settings.LOG_LEVEL.upper(),
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - {message}"
)


# ============================================
# Lifespan
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed the catalog on startup"""
    logger.info("=" * 50)
    logger.info("Starting GiftAI Recommendation Service")
    logger.info("=" * 50)

    storage = get_storage()
    storage.init_db()
    if settings.SEED_CATALOG:
        seed_catalog(storage)

    logger.info(f"✓ LLM: {'OpenAI (' + settings.OPENAI_MODEL + ')' if settings.llm_enabled else 'disabled, rule-based tier only'}")
    logger.info(f"✓ Product search: {'enabled' if settings.search_enabled else 'disabled (RAPIDAPI_KEY missing)'}")

    yield

    logger.info("Shutting down GiftAI Recommendation Service")


# ============================================
# FastAPI App
# ============================================

app = FastAPI(
    title="GiftAI Recommendation Service",
    description="AI-assisted gift recommendations with product search, wishlists and sharing",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recommendations_router)
app.include_router(chat_router)
app.include_router(gifts_router)
app.include_router(wishlist_router)


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(
        status="healthy",
        service="giftai",
        version=__version__,
        components={
            "llm": "enabled" if get_llm().enabled else "disabled",
            "product_search": "enabled" if settings.search_enabled else "disabled",
            "database": "connected",
        },
        timestamp=datetime.now(timezone.utc),
    )


@app.get("/")
async def root():
    return {
        "service": "GiftAI Recommendation Service",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


# ============================================
# Main Entry Point
# ============================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "giftai.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_ENV == "development",
        log_level=settings.LOG_LEVEL.lower()
    )
