"""FastAPI application entry point for FoodMax Import."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from foodmax import __version__
from foodmax.config import settings
from foodmax.services.import_service import create_api_client

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from settings (or an explicit level)."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=settings.log_format,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    configure_logging()
    settings.pending_dir.mkdir(parents=True, exist_ok=True)

    app.state.api_client = None
    if settings.api_enabled:
        app.state.api_client = create_api_client(
            settings.api_base_url,
            token=settings.api_token,
            timeout=settings.api_timeout_seconds,
        )
        logger.info("Persistence API at %s", settings.api_base_url)
    else:
        logger.warning("Persistence API disabled, imported rows will only be stored locally")

    yield

    # Shutdown
    if app.state.api_client is not None:
        await app.state.api_client.aclose()


app = FastAPI(
    title=settings.app_name,
    description="Spreadsheet import and reconciliation for FoodMax",
    version=__version__,
    lifespan=lifespan,
)

# Only allow origins from the whitelist; empty list means same-origin only
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
        max_age=600,
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(
        content={
            "status": "healthy",
            "version": __version__,
            "app_name": settings.app_name,
            "api_enabled": settings.api_enabled,
        }
    )


# Import and include routers
from foodmax.routers import import_router

app.include_router(import_router.router, prefix="/api/import", tags=["Import"])
