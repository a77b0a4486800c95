"""
FastAPI Application — Rating & Classification API

Serves norm reference data and evaluates datapoints for the
analysis and report views.

CORS: Configured via environment variables.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from corrosion_risk.config import settings
from .routes import get_registry, router


# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME}")
    logger.info(f"📍 Running in {settings.ENVIRONMENT} mode")
    logger.info(f"📚 Norms registered: {len(get_registry())}")
    yield
    # Shutdown
    logger.info(f"👋 Shutting down {settings.PROJECT_NAME}")


# Application metadata
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Corrosion risk rating and classification API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)


app.include_router(router)


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint — points to docs."""
    return {
        "message": "Corrosion Risk Rating API",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/ping", tags=["Health"])
async def ping():
    """Lightweight heartbeat."""
    return {"status": "ok"}
