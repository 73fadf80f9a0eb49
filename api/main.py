"""
Main FastAPI application for Barista Bot.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .routes import chat, telegram
from .services import get_services, initialize_services, shutdown_services
from config.settings import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Barista Bot starting up...")
    initialize_services()
    logger.info("Barista Bot ready")
    yield
    logger.info("Barista Bot shutting down...")
    await shutdown_services()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        description="Telegram coffee ordering bot backed by Claude.",
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.include_router(telegram.router, prefix="/api/v1", tags=["Telegram"])
    app.include_router(chat.router, prefix="/api/v1", tags=["Chat"])

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "service": settings.brand_name,
            "version": settings.api_version,
            "status": "operational",
            "docs": "/docs",
        }

    # Health check
    @app.get("/health")
    async def health():
        services = get_services()
        return {
            "status": "healthy" if services.is_ready else "degraded",
            "services": services.health(),
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
