"""FastAPI-facing template renderer.

TemplateRenderer adds the request-aware ``render`` callback on top of the
registry. An unknown template name is not raised to the caller: it is logged
and turned into a 500 response with no content through the request context.
"""

import io
from typing import Any, TextIO

from fastapi import Request, Response
from fastapi.responses import HTMLResponse

from page_templates.exceptions import TemplateExecutionException, TemplateNotFoundException
from page_templates.logging_config import get_logger, log_with_context
from page_templates.registry import TemplateRegistry

logger = get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"


class RequestContext:
    """Request and response collaborators for a single render call."""

    def __init__(self, request: Request, response: Response | None = None):
        self.request = request
        self.response = response if response is not None else Response()
        self.committed = False

    def log_fields(self) -> dict[str, Any]:
        """Request-scoped fields for structured log entries."""
        fields: dict[str, Any] = {
            "method": self.request.method,
            "path": self.request.url.path,
        }
        request_id = self.request.headers.get(REQUEST_ID_HEADER)
        if request_id:
            fields["request_id"] = request_id
        return fields

    def no_content(self, status_code: int) -> None:
        """Answer the request with ``status_code`` and an empty body."""
        self.response.status_code = status_code
        self.response.body = b""
        self.response.headers["content-length"] = "0"
        self.committed = True


class TemplateRenderer(TemplateRegistry):
    """Template registry with a rendering callback for FastAPI request handlers."""

    def render(self, output: TextIO, name: str, data: Any, context: RequestContext) -> None:
        """Render the template registered under ``name`` into ``output``.

        Args:
            output: Stream the rendered HTML is written to
            name: Name of a registered template
            data: Value made available to the template
            context: Request context used for logging and for the not-found response

        Raises:
            TemplateExecutionException: If the template fails while rendering
        """
        log_with_context(
            logger,
            "debug",
            "Render",
            template=name,
            event_type="template_render_start",
            **context.log_fields(),
        )

        try:
            self.execute(output, name, data)
        except TemplateNotFoundException:
            log_with_context(
                logger,
                "error",
                "Template not found",
                template=name,
                event_type="template_not_found",
                **context.log_fields(),
            )
            context.no_content(500)
        except TemplateExecutionException as e:
            log_with_context(
                logger,
                "error",
                "Render template failed",
                template=e.name,
                layout=e.layout,
                error=e.details["error"],
                event_type="template_render_failed",
                **context.log_fields(),
            )
            raise

    def template_response(
        self,
        request: Request,
        name: str,
        data: Any = None,
        status_code: int = 200,
    ) -> Response:
        """Render ``name`` and wrap the result in an HTMLResponse.

        Returns:
            HTMLResponse with the rendered page, or an empty 500 response when
            no template is registered under ``name``
        """
        context = RequestContext(request, Response(status_code=status_code))
        buffer = io.StringIO()
        self.render(buffer, name, data, context)

        if context.committed:
            return context.response

        return HTMLResponse(content=buffer.getvalue(), status_code=status_code)
