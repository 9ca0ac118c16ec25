"""
Centralized exception definitions for the template renderer.
"""
from typing import Optional


class ErrorContext:
    """Context information for errors."""

    def __init__(self, component: str = None, operation: str = None, **kwargs):
        self.component = component
        self.operation = operation
        self.details = kwargs


class RenderError(Exception):
    """Base class for all renderer errors."""

    def __init__(self, message: str, context: ErrorContext = None, details: dict = None):
        super().__init__(message)
        self.context = context or ErrorContext()
        self.details = details or {}

    def __str__(self):
        base_str = super().__str__()
        if self.context.component and self.context.operation:
            return f"{base_str} [in {self.context.component}.{self.context.operation}]"
        return base_str


class ConfigurationError(RenderError):
    """Error in configuration."""
    pass


class TemplateError(RenderError):
    """Error in template handling, tied to a logical template name."""

    def __init__(
        self,
        message: str,
        template_name: str,
        context: ErrorContext = None,
        details: dict = None
    ):
        super().__init__(message, context=context, details=details)
        self.template_name = template_name


class AccessDeniedError(TemplateError):
    """A template path resolved outside of its allowed root directory."""

    def __init__(self, path: str, template_name: Optional[str] = None, root: Optional[str] = None):
        super().__init__(
            f"Access outside of allowed directory: {path}",
            template_name or path,
            context=ErrorContext(component="safety", operation="resolve_safe_path", root=root),
            details={"path": path, "root": root},
        )
        self.path = path


class TemplateReadError(TemplateError):
    """A template file is missing or could not be read."""
    pass
