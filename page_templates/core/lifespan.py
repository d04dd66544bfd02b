"""Application lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from page_templates import __version__
from page_templates.config import Settings
from page_templates.filesystem import DirectoryFS
from page_templates.logging_config import get_logger, log_with_context
from page_templates.renderer import TemplateRenderer

logger = get_logger(__name__)


def build_renderer(settings: Settings) -> TemplateRenderer:
    """Create a renderer and register the template tree described by ``settings``.

    Raises:
        PatternException: If a configured pattern matches no files
        TemplateCompileException: If a template cannot be read or parsed
    """
    renderer = TemplateRenderer(
        autoescape=settings.autoescape,
        strict_undefined=settings.strict_undefined,
    )
    fsys = DirectoryFS(settings.templates_dir)

    if settings.layout and settings.includes:
        renderer.add_with_layout_and_includes(fsys, settings.layout, settings.includes, *settings.pages)
    elif settings.layout:
        renderer.add_with_layout(fsys, settings.layout, *settings.pages)
    else:
        renderer.add(fsys, *settings.pages)

    if settings.fragments:
        renderer.add(fsys, *settings.fragments)

    return renderer


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Register all templates before the application accepts traffic.

    Registration errors propagate and abort start-up.
    """
    settings: Settings = app.state.settings

    log_with_context(
        logger,
        "info",
        "Starting page templates application",
        version=__version__,
        templates_dir=str(settings.templates_dir),
        event_type="app_startup",
    )

    app.state.renderer = build_renderer(settings)

    log_with_context(
        logger,
        "info",
        "Templates registered",
        templates=app.state.renderer.names(),
        event_type="templates_registered",
    )

    try:
        yield
    finally:
        log_with_context(logger, "info", "Shutting down page templates application", event_type="app_shutdown")
