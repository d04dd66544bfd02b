"""Tests for the request-aware template renderer."""

import io
import logging

import pytest
from fastapi import Request, Response

from page_templates.exceptions import TemplateExecutionException
from page_templates.filesystem import MemoryFS
from page_templates.renderer import RequestContext, TemplateRenderer


@pytest.fixture
def renderer(memory_fs):
    """Renderer with the in-memory pages and fragments registered."""
    renderer = TemplateRenderer()
    renderer.add_with_layout_and_includes(memory_fs, "layout.html", "includes/*.html", "pages/*.html")
    renderer.add(memory_fs, "fragments/*.html")
    return renderer


class TestRequestContext:
    """Tests for RequestContext."""

    def test_log_fields(self, make_context):
        """Test request fields include the request id header when present."""
        context = make_context("/pages/home.html", {"X-Request-ID": "req-1"})

        assert context.log_fields() == {"method": "GET", "path": "/pages/home.html", "request_id": "req-1"}

    def test_log_fields_without_request_id(self, make_context):
        """Test the request id is omitted when the header is missing."""
        assert "request_id" not in make_context().log_fields()

    def test_no_content(self, make_context):
        """Test no_content sets the status and empties the response."""
        context = make_context()
        context.no_content(500)

        assert context.committed is True
        assert context.response.status_code == 500
        assert context.response.body == b""

    def test_uses_given_response(self, make_context):
        """Test a handler's response object is the one signalled."""
        response = Response()
        context = RequestContext(make_context().request, response)
        context.no_content(500)

        assert response.status_code == 500


class TestRender:
    """Tests for TemplateRenderer.render."""

    def test_render_writes_output(self, renderer, make_context):
        """Test a registered template renders into the output stream."""
        output = io.StringIO()
        context = make_context()

        renderer.render(output, "hello.html", {"name": "ann"}, context)

        assert output.getvalue() == "hello ann"
        assert context.committed is False
        assert context.response.status_code == 200

    def test_render_unknown_name_signals_server_error(self, renderer, make_context, caplog):
        """Test an unknown name answers 500 with no output instead of raising."""
        output = io.StringIO()
        context = make_context(headers={"X-Request-ID": "req-404"})

        with caplog.at_level(logging.ERROR, logger="page_templates.renderer"):
            result = renderer.render(output, "missing.html", None, context)

        assert result is None
        assert output.getvalue() == ""
        assert context.committed is True
        assert context.response.status_code == 500

        record = caplog.records[-1]
        assert record.event_type == "template_not_found"
        assert record.template == "missing.html"
        assert record.request_id == "req-404"

    def test_render_execution_error_propagates(self, renderer, make_context, caplog):
        """Test execution failures are logged and raised to the caller."""
        context = make_context()

        with caplog.at_level(logging.ERROR, logger="page_templates.renderer"):
            with pytest.raises(TemplateExecutionException) as exc_info:
                renderer.render(io.StringIO(), "home.html", {}, context)

        assert exc_info.value.layout == "layout.html"
        assert context.committed is False
        assert caplog.records[-1].event_type == "template_render_failed"
        assert caplog.records[-1].layout == "layout.html"

    def test_failed_render_does_not_affect_later_calls(self, renderer, make_context):
        """Test a failing call leaves the unit usable."""
        with pytest.raises(TemplateExecutionException):
            renderer.render(io.StringIO(), "home.html", {}, make_context())

        output = io.StringIO()
        renderer.render(output, "home.html", {"section": "main"}, make_context())

        assert output.getvalue() == "<body>home<nav>main</nav></body>"


class TestTemplateResponse:
    """Tests for TemplateRenderer.template_response."""

    def test_html_response(self, renderer, make_context):
        """Test rendered content is wrapped in an HTML response."""
        request: Request = make_context().request

        response = renderer.template_response(request, "hello.html", {"name": "<ann>"}, status_code=201)

        assert response.status_code == 201
        assert response.body == b"hello &lt;ann&gt;"
        assert response.media_type == "text/html"

    def test_unknown_name(self, renderer, make_context):
        """Test an unknown name yields an empty 500 response."""
        response = renderer.template_response(make_context().request, "missing.html")

        assert response.status_code == 500
        assert response.body == b""

    def test_custom_funcs(self, make_context):
        """Test renderer construction accepts custom functions."""
        renderer = TemplateRenderer({"shout": lambda s: s.upper()})
        renderer.add(MemoryFS({"x.html": "{{ shout(word) }}"}), "*.html")

        response = renderer.template_response(make_context().request, "x.html", {"word": "hi"})

        assert response.body == b"HI"
