"""
hbs_render: server-side Handlebars rendering with an mtime-validated cache.

The module-level functions operate on a process-default TemplateManager.
Construct a TemplateManager directly for independent configurations.
"""
import logging
from typing import Any, List, Mapping, Optional

from .config import ConfigStore, RenderConfiguration, load_config
from .error import AccessDeniedError, ErrorReporter, RenderError, TemplateError, TemplateReadError
from .templates import TemplateManager
from .templates.handlebars import Helper

__version__ = "0.1.0"

# Configure logging for library use
logging.getLogger(__name__).addHandler(logging.NullHandler())

_default_manager: Optional[TemplateManager] = None


def get_manager() -> TemplateManager:
    """Get the process-default template manager."""
    global _default_manager
    if _default_manager is None:
        _default_manager = TemplateManager()
    return _default_manager


def set_config(new_config: Optional[Mapping[str, Any]] = None, **fields: Any) -> RenderConfiguration:
    """Merge VIEWS_DIR, PARTIALS_DIR, LAYOUTS_DIR or LOG_LEVEL into the configuration."""
    return get_manager().set_config(new_config, **fields)


async def render(template: str, context: Optional[Mapping[str, Any]] = None, layout: Optional[str] = None) -> str:
    """Render a template relative to VIEWS_DIR, optionally inside a layout."""
    return await get_manager().render(template, context, layout)


def clear_cache() -> None:
    get_manager().clear_cache()


def register_helper(name: str, helper: Helper) -> None:
    get_manager().register_helper(name, helper)


def set_caching(enabled: bool) -> None:
    get_manager().set_caching(enabled)


def set_cache_ttl(ttl: float) -> None:
    get_manager().set_cache_ttl(ttl)


async def init_handlebars() -> List[str]:
    """Register partials under PARTIALS_DIR and the built-in helpers."""
    return await get_manager().initialize()


__all__ = [
    "AccessDeniedError",
    "ConfigStore",
    "ErrorReporter",
    "RenderConfiguration",
    "RenderError",
    "TemplateError",
    "TemplateManager",
    "TemplateReadError",
    "clear_cache",
    "get_manager",
    "init_handlebars",
    "load_config",
    "register_helper",
    "render",
    "set_cache_ttl",
    "set_caching",
    "set_config",
    "__version__",
]
