"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.enrichment import enrichment_coordinator
from app.routers import gems, lookup
from app.services.geocode_resolver import geocode_resolver
from app.services.hidden_gems_api import hidden_gems_api
from app.services.photo_resolver import photo_resolver
from app.services.storage import storage_client

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.load_on_startup:
        await enrichment_coordinator.fetch_and_enrich()
    yield
    await enrichment_coordinator.aclose()
    for client in (hidden_gems_api, photo_resolver, geocode_resolver, storage_client):
        await client.aclose()
    logger.info("Hidden gems service stopped")


# Create FastAPI app
app = FastAPI(
    title="Hidden Gems API",
    description="Community hidden gems with photo and geocode enrichment",
    version="1.0.0",
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(gems.router, prefix="/api/v1")
app.include_router(lookup.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to Hidden Gems API",
        "version": "1.0.0",
        "docs": "/docs" if settings.environment == "development" else "disabled",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
