"""
Built-in Handlebars helpers.

pybars passes the current scope as the first argument of every helper.
"""
from datetime import date, datetime
from typing import Any, Union


def eq(this: Any, a: Any, b: Any) -> bool:
    """Equality test, e.g. ``{{#if (eq status "active")}}``."""
    return a == b


def format_date(this: Any, value: Union[date, datetime, str, None]) -> str:
    """Render a date with the locale's short date format."""
    if value is None:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, date):
        raise TypeError(f"formatDate expects a date, got {type(value).__name__}")
    return value.strftime("%x")


BUILTIN_HELPERS = {
    "eq": eq,
    "formatDate": format_date,
}
