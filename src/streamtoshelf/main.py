"""FastAPI application factory.

Run with: uvicorn streamtoshelf.main:create_app --factory
"""

from fastapi import FastAPI

from streamtoshelf import __version__
from streamtoshelf.api.exception_handlers import register_exception_handlers
from streamtoshelf.api.routers import api_router, health
from streamtoshelf.config import Settings, get_settings
from streamtoshelf.infrastructure.lifecycle import lifespan
from streamtoshelf.infrastructure.observability import RequestLoggingMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings to run with, read from the environment when None

    Returns:
        Configured app. Services are wired by the lifespan on startup.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Find where to buy music you stream: downloads and physical media.",
        version=__version__,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(api_router, prefix="/api")

    return app
