"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI

from page_templates import __version__
from page_templates.config import Settings, get_settings
from page_templates.core.lifespan import lifespan
from page_templates.middleware.error_handlers import register_error_handlers
from page_templates.routers import view_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use, defaults to the process-wide instance

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Page Templates",
        description="Server-rendered pages from Jinja2 templates with layouts and includes.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()

    register_error_handlers(app)

    app.include_router(view_router.router, tags=["views"])

    return app
