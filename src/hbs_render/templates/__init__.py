"""
Handlebars template loading, caching and rendering.
"""

from .cache import CacheEntry, TemplateCache
from .handlebars import CompiledTemplate, HandlebarsEngine
from .helpers import BUILTIN_HELPERS
from .manager import TemplateManager
from .partials import PartialRegistrar
from .safety import resolve_safe_path

__all__ = [
    'CacheEntry',
    'TemplateCache',
    'CompiledTemplate',
    'HandlebarsEngine',
    'BUILTIN_HELPERS',
    'TemplateManager',
    'PartialRegistrar',
    'resolve_safe_path',
]
