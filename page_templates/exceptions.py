"""Custom exceptions for template registration and rendering."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    TEMPLATE_ERROR = "TEMPLATE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Registration errors
    TEMPLATE_PATTERN = "TEMPLATE_PATTERN"
    TEMPLATE_COMPILE = "TEMPLATE_COMPILE"

    # Rendering errors
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_EXECUTION = "TEMPLATE_EXECUTION"


class TemplateException(Exception):
    """Base exception for template errors with HTTP status code support.

    All template exceptions inherit from this class so a host application
    can map them to responses with a single handler.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TEMPLATE_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize template exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class PatternException(TemplateException):
    """A glob pattern matched no files."""

    def __init__(self, pattern: str, details: dict[str, Any] | None = None):
        self.pattern = pattern
        super().__init__(
            f"template: pattern matches no files: `{pattern}`",
            code=ErrorCode.TEMPLATE_PATTERN,
            details={"pattern": pattern, **(details or {})},
        )


class TemplateCompileException(TemplateException):
    """A template file could not be read or parsed."""

    def __init__(self, filename: str, error: str, details: dict[str, Any] | None = None):
        self.filename = filename
        super().__init__(
            f"failed to parse template {filename}: {error}",
            code=ErrorCode.TEMPLATE_COMPILE,
            details={"filename": filename, "error": error, **(details or {})},
        )


class TemplateNotFoundException(TemplateException):
    """No template unit is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"template not found: {name}",
            code=ErrorCode.TEMPLATE_NOT_FOUND,
            details={"name": name},
        )


class TemplateExecutionException(TemplateException):
    """A compiled template failed while rendering."""

    def __init__(self, name: str, layout: str | None, error: str):
        self.name = name
        self.layout = layout
        super().__init__(
            f"failed to render template {name}: {error}",
            code=ErrorCode.TEMPLATE_EXECUTION,
            details={"name": name, "layout": layout, "error": error},
        )
