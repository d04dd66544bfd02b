"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from page_templates.renderer import TemplateRenderer


async def get_renderer(request: Request) -> TemplateRenderer:
    """
    Get the shared template renderer from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The TemplateRenderer populated during start-up.

    Raises:
        RuntimeError: If the renderer is not initialized.
    """
    renderer: TemplateRenderer | None = getattr(request.app.state, "renderer", None)

    if renderer is None:
        raise RuntimeError("Template renderer not initialized.")

    return renderer
