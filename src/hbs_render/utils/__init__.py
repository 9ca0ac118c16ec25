"""
Shared utilities.
"""
from .logging import (
    ConfigLoggerAdapter,
    JsonFormatter,
    configure_logging,
    get_logger,
    to_logging_level,
)

__all__ = [
    "ConfigLoggerAdapter",
    "JsonFormatter",
    "configure_logging",
    "get_logger",
    "to_logging_level",
]
