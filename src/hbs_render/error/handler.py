"""
Central error reporting for the renderer's asynchronous entry points.
"""
import logging
import traceback
from typing import Any, Callable, Dict, List, Optional, Union

from .exceptions import TemplateError

logger = logging.getLogger(__name__)

ErrorObserver = Callable[[BaseException, str, Dict[str, Any]], None]


class ErrorReporter:
    """
    Single sink for failures raised through render and initialization.

    Entry points call ``report`` explicitly before re-raising, so failures
    unrelated to template rendering never end up here.
    """

    def __init__(self, log: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None):
        """
        Initialize the reporter.

        Args:
            log: Logger (or adapter) that receives error records
        """
        self.logger = log or logger
        self._observers: List[ErrorObserver] = []

    def add_observer(self, observer: ErrorObserver) -> None:
        """Register a callback invoked with (error, operation, details)."""
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: ErrorObserver) -> None:
        """Unregister a previously added callback."""
        if observer in self._observers:
            self._observers.remove(observer)

    @staticmethod
    def describe(error: BaseException, operation: str, details: Dict[str, Any]) -> str:
        """
        Build a log message identifying the failing template.

        Args:
            error: The failure being reported
            operation: Entry point that failed
            details: Extra identifying fields (template, layout, duration)

        Returns:
            Human readable description
        """
        if isinstance(error, TemplateError):
            message = f"Template error in {error.template_name}: {error}"
        elif details.get("template"):
            message = f"Error in {operation} for template {details['template']}: {error}"
        else:
            message = f"Error in {operation}: {error}"

        duration_ms = details.get("duration_ms")
        if duration_ms is not None:
            message += f" (failed after {duration_ms:.2f}ms)"
        return message

    def report(self, error: BaseException, operation: str, **details: Any) -> None:
        """
        Log a failure and forward it to every observer.

        The caller remains responsible for re-raising the error.

        Args:
            error: The failure being reported
            operation: Entry point that failed
            **details: Extra identifying fields
        """
        self.logger.error(self.describe(error, operation, details))
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Error details: %s",
                "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            )

        for observer in list(self._observers):
            try:
                observer(error, operation, details)
            except Exception as e:
                self.logger.error(f"Error observer {getattr(observer, '__name__', observer)!r} failed: {e}")
