"""
Error handling utilities and exceptions.
"""
from .exceptions import (
    ErrorContext,
    RenderError,
    ConfigurationError,
    TemplateError,
    AccessDeniedError,
    TemplateReadError,
)

from .handler import ErrorReporter

__all__ = [
    # Exceptions
    'ErrorContext',
    'RenderError',
    'ConfigurationError',
    'TemplateError',
    'AccessDeniedError',
    'TemplateReadError',

    # Error reporting
    'ErrorReporter',
]
