"""Main application entrypoint for the video catalog service."""

from fastapi import FastAPI

from videocatalog.api.v1 import routes_health
from videocatalog.api.v1.routes_catalog import router as catalog_router
from videocatalog.core.config import settings
from videocatalog.core.logging import setup_logging


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
    )

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(catalog_router)

    return app


# Export app instance for ASGI servers
app = create_app()
