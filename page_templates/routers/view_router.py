"""Page routes rendering registered templates."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from page_templates import __version__
from page_templates.dependencies import get_renderer
from page_templates.renderer import TemplateRenderer

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, renderer: TemplateRenderer = Depends(get_renderer)):
    """Render the index page."""
    return renderer.template_response(request, "index.html", {"title": "Home", "version": __version__})


@router.get("/pages/{name}", response_class=HTMLResponse)
async def page(name: str, request: Request, renderer: TemplateRenderer = Depends(get_renderer)):
    """Render any registered template by name."""
    return renderer.template_response(request, name, {"title": name, "version": __version__})
