"""
Tagfolio API

FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from loguru import logger

from tagfolio import __version__
from tagfolio.config import Settings, get_settings
from .schemas import HealthResponse
from .routes import auth_router, records_router
from .middleware import (
    setup_logging,
    setup_exception_handlers,
)
from .dependencies import ServiceContainer


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Opens the database on startup and releases it on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting Tagfolio in {settings.environment} mode")

    try:
        # Touch the database so connection problems surface at startup
        _ = app.state.services.database
        logger.info("Tagfolio started successfully")

        yield

    finally:
        logger.info("Shutting down Tagfolio...")
        app.state.services.close()
        logger.info("Shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.
        services: Prebuilt service container (tests pass isolated ones).

    Returns:
        Configured FastAPI application.

    Raises:
        ConfigurationError: If settings are unsafe for the environment.
    """
    if settings is None:
        settings = get_settings()
    settings.validate()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="Tagfolio",
        description="Private, tagged catalogs for many users.",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.services = services or ServiceContainer(settings)

    # ==========================================================================
    # Middleware
    # ==========================================================================

    setup_logging(app, settings)

    setup_exception_handlers(app)

    # ==========================================================================
    # Routers
    # ==========================================================================

    api_prefix = "/api/v1"

    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(records_router, prefix=api_prefix)

    # ==========================================================================
    # Root Routes
    # ==========================================================================

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Tagfolio",
            "version": __version__,
            "status": "running",
            "docs": "/docs" if settings.debug else None,
        }

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            environment=settings.environment,
        )

    return app


# =============================================================================
# CLI Entry Point
# =============================================================================

def main():
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "tagfolio.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
