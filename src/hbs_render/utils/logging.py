"""
Logging utilities: structured formatting and config-driven level gating.
"""
import logging
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO
import logging.handlers

LOG_LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def to_logging_level(level: str) -> int:
    """
    Map a configuration log level name to a stdlib logging level.

    Args:
        level: One of debug, info, warn (or warning), error

    Returns:
        Numeric logging level
    """
    try:
        return LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{level}'. Must be one of: {sorted(LOG_LEVELS)}")


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, **kwargs):
        """Initialize with optional fields."""
        self.additional_fields = kwargs
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if hasattr(record, "template"):
            log_data["template"] = record.template
        if hasattr(record, "layout"):
            log_data["layout"] = record.layout
        if hasattr(record, "duration_ms"):
            log_data["duration_ms"] = record.duration_ms

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        log_data.update(self.additional_fields)
        return json.dumps(log_data)


class ConfigLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that drops records below a configured minimum level.

    The minimum is read through ``level_getter`` on every call so a config
    update takes effect immediately without touching global logger levels.
    """

    def __init__(self, logger: logging.Logger, level_getter: Callable[[], str], extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})
        self._level_getter = level_getter

    def isEnabledFor(self, level: int) -> bool:
        if level < to_logging_level(self._level_getter()):
            return False
        return self.logger.isEnabledFor(level)

    def process(self, msg, kwargs):
        """Add context to log records."""
        kwargs.setdefault("extra", {}).update(self.extra)
        return msg, kwargs


def configure_logging(
    log_level: str = "info",
    log_file: Optional[str] = None,
    structured: bool = False,
    log_to_console: bool = True,
    stream: Optional[TextIO] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> None:
    """
    Configure root logging for applications embedding the renderer.

    Args:
        log_level: Minimum level (debug, info, warn, error)
        log_file: Optional path of a rotating log file
        structured: Emit JSON lines instead of plain text
        log_to_console: Also log to a console stream
        stream: Console stream, stdout by default
        max_bytes: Rotation size of the log file
        backup_count: Number of rotated files to keep
    """
    level = to_logging_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    handlers = []

    if log_file:
        log_path = Path(log_file)
        if log_path.parent != Path("."):
            log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        ))

    if log_to_console:
        handlers.append(logging.StreamHandler(stream or sys.stdout))

    if structured:
        formatter = JsonFormatter(application="hbs_render")
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.debug(f"Logging configured with level: {log_level}")


def get_logger(name: str, level_getter: Optional[Callable[[], str]] = None, **context):
    """
    Get a logger, optionally gated by a configured level.

    Args:
        name: Logger name
        level_getter: Callable returning the current configured level name
        **context: Additional context fields attached to every record

    Returns:
        Logger or adapter
    """
    logger = logging.getLogger(name)

    if level_getter is not None:
        return ConfigLoggerAdapter(logger, level_getter, context)

    return logger
