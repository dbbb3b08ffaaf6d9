"""
FastAPI entrypoint for the WalletPalz backend application.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from walletpalz.core.config import settings
from walletpalz.core.logging import configure_logging
from walletpalz.api.router import api_router
from walletpalz.db.session import init_db
from walletpalz.services.settings_service import SettingsCache

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"{settings.APP_NAME} API started")
    yield


app = FastAPI(
    title="WalletPalz API",
    description="Backend API for personal finance tracking",
    version="1.0.0",
    lifespan=lifespan,
)

# One settings cache per application, invalidated on settings save
app.state.settings_cache = SettingsCache()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "WalletPalz API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
