"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from page_templates.config import Settings
from page_templates.core.app_factory import create_app
from page_templates.filesystem import DirectoryFS, MemoryFS
from page_templates.renderer import RequestContext

VIEWS_DIR = Path(__file__).parent / "views"


def make_request(path: str = "/", headers: dict[str, str] | None = None) -> Request:
    """Build a bare GET request for exercising render callbacks outside an app."""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "root_path": "",
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    return Request(scope)


@pytest.fixture
def views_fs() -> DirectoryFS:
    """Filesystem over the test template tree."""
    return DirectoryFS(VIEWS_DIR)


@pytest.fixture
def memory_fs() -> MemoryFS:
    """In-memory template tree with a layout, includes and pages."""
    return MemoryFS(
        {
            "layout.html": "<body>{% block content %}{% endblock %}{% include 'nav.html' %}</body>",
            "includes/nav.html": "<nav>{{ data.section }}</nav>",
            "includes/macros.html": "{% macro badge(text) %}[{{ text }}]{% endmacro %}",
            "pages/home.html": "{% block content %}home{% endblock %}",
            "pages/profile.html": (
                "{% block content %}{% import 'macros.html' as m %}{{ m.badge(data.user) }}{% endblock %}"
            ),
            "fragments/hello.html": "hello {{ name }}",
        }
    )


@pytest.fixture
def make_context() -> Callable[..., RequestContext]:
    """Factory for request contexts bound to a bare request."""

    def _make(path: str = "/", headers: dict[str, str] | None = None) -> RequestContext:
        return RequestContext(make_request(path, headers))

    return _make


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at the test template tree."""
    return Settings(
        templates_dir=VIEWS_DIR,
        layout="layout.html",
        includes="includes/*.html",
        pages=["pages/*.html"],
        fragments=["fragments/*.html"],
    )


@pytest.fixture
def test_client(test_settings):
    """FastAPI test client with lifespan context."""
    with TestClient(create_app(test_settings)) as client:
        yield client
