"""Register and render Jinja2 page templates with layouts and includes."""

from importlib.metadata import PackageNotFoundError, version

from page_templates.exceptions import (
    PatternException,
    TemplateCompileException,
    TemplateException,
    TemplateExecutionException,
    TemplateNotFoundException,
)
from page_templates.filesystem import DirectoryFS, MemoryFS, TemplateFS
from page_templates.registry import DEFAULT_TEMPLATE_FUNCS, TemplateRegistry, TemplateUnit
from page_templates.renderer import RequestContext, TemplateRenderer

try:
    __version__ = version("page-templates")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "DEFAULT_TEMPLATE_FUNCS",
    "DirectoryFS",
    "MemoryFS",
    "PatternException",
    "RequestContext",
    "TemplateCompileException",
    "TemplateException",
    "TemplateExecutionException",
    "TemplateFS",
    "TemplateNotFoundException",
    "TemplateRegistry",
    "TemplateRenderer",
    "TemplateUnit",
    "__version__",
]
