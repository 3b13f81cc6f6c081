"""
FastAPI Application Entry Point

This module builds the FastAPI application and configures:
- Service wiring (engine, store, services) on app.state
- API routes
- Middleware (logging, CORS, rate limiting)
- Application metadata

Run with:
    uvicorn shortener.main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shortener import __version__
from shortener.api import endpoints
from shortener.core.container import ServiceContainer, build_container
from shortener.core.logging_config import configure_logging
from shortener.core.rate_limit import limiter
from shortener.core.setting import Settings, settings as default_settings
from shortener.db.session import init_models
from shortener.middleware.logging import add_logging_middleware

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (default: loaded from the environment)
        container: Pre-built services, tests pass one bound to a scratch database
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)
    container = container or build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_models(container.engine)
        logger.info("URL Shortener Service started")
        yield
        await container.dispose()

    app = FastAPI(
        title="URL Shortener Service",
        description="Maps long URLs to short unique codes and resolves them back",
        version=__version__,
        docs_url="/docs",  # Swagger UI documentation
        redoc_url="/redoc",  # ReDoc documentation
        lifespan=lifespan,
    )

    app.state.container = container
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Health endpoints defined before router to match before catch-all route
    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint for health checks."""
        return {
            "message": "URL Shortener Service",
            "version": __version__,
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for monitoring."""
        return {"status": "healthy"}

    app.include_router(endpoints.router, tags=["URL Shortener"])

    return app


app = create_app()
