"""
Template manager: mtime-validated template cache, layouts and partials.
"""
import os
import time
from typing import Any, Dict, List, Mapping, Optional, Union

import aiofiles
import aiofiles.os

from ..config.configuration import ConfigStore, RenderConfiguration
from ..error.exceptions import ErrorContext, TemplateReadError
from ..error.handler import ErrorReporter
from ..utils.logging import get_logger
from .cache import TemplateCache
from .handlebars import CompiledTemplate, Helper, HandlebarsEngine
from .helpers import BUILTIN_HELPERS
from .partials import PartialRegistrar
from .safety import resolve_safe_path

DEFAULT_CACHE_TTL = 300000  # milliseconds, stored but not consulted


class TemplateManager:
    """
    Loads, caches and renders Handlebars templates.

    All state (configuration, caches, helpers and partials) belongs to the
    instance, so independent managers do not interfere with each other.
    """

    def __init__(
        self,
        config: Optional[Union[ConfigStore, RenderConfiguration, Mapping[str, Any]]] = None,
        engine: Optional[HandlebarsEngine] = None,
        error_reporter: Optional[ErrorReporter] = None
    ):
        """
        Initialize template manager.

        Args:
            config: Config store, configuration or mapping of settings
            engine: Handlebars engine holding helpers and partials
            error_reporter: Sink for failures at render and initialization
        """
        self.config_store = config if isinstance(config, ConfigStore) else ConfigStore(config)
        self.engine = engine or HandlebarsEngine()
        self.template_cache: TemplateCache[CompiledTemplate] = TemplateCache()
        self.partial_cache: TemplateCache[str] = TemplateCache()
        self.caching_enabled = True
        self.cache_ttl = DEFAULT_CACHE_TTL

        self.logger = get_logger(__name__, level_getter=lambda: self.config.log_level)
        self.error_reporter = error_reporter or ErrorReporter(self.logger)
        self.partial_registrar = PartialRegistrar(self.engine, self.partial_cache, self.logger)

    @property
    def config(self) -> RenderConfiguration:
        return self.config_store.config

    def set_config(self, new_config: Optional[Mapping[str, Any]] = None, **fields: Any) -> RenderConfiguration:
        """Merge settings into the current configuration."""
        return self.config_store.set_config(new_config, **fields)

    def set_caching(self, enabled: bool) -> None:
        """Enable or disable the template cache from the next lookup on."""
        self.caching_enabled = bool(enabled)

    def set_cache_ttl(self, ttl: float) -> None:
        """
        Store a cache TTL in milliseconds.

        Staleness is decided by modification time alone; the TTL is kept
        for callers that read it back but never expires an entry.
        """
        self.cache_ttl = ttl

    def clear_cache(self) -> None:
        """Drop every cached template and partial."""
        self.template_cache.clear()
        self.partial_cache.clear()
        self.logger.debug("Cleared template and partial caches")

    def register_helper(self, name: str, helper: Helper) -> None:
        """Register a helper for templates compiled from now on."""
        self.engine.register_helper(name, helper)

    async def get_template(self, template_path: str) -> CompiledTemplate:
        """
        Get a compiled view template, reusing the cache while its file is unchanged.

        Args:
            template_path: Path relative to the views root

        Returns:
            Compiled template

        Raises:
            AccessDeniedError: If the path escapes the views root
            TemplateReadError: If the file is missing or unreadable
        """
        return await self._load(self.config.views_root, template_path, template_path)

    async def get_layout(self, layout_name: str) -> CompiledTemplate:
        """Get a compiled layout template from the layouts root."""
        cache_key = os.path.join(self.config.layouts_dir, layout_name)
        return await self._load(self.config.layouts_root, layout_name, cache_key)

    async def _load(self, root: str, relative_path: str, cache_key: str) -> CompiledTemplate:
        full_path = resolve_safe_path(root, relative_path, template_name=cache_key)

        try:
            stat_result = await aiofiles.os.stat(full_path)
        except OSError as e:
            raise TemplateReadError(
                f"Failed to read template: {e}",
                cache_key,
                context=ErrorContext(component="manager", operation="get_template", path=full_path),
            ) from e
        mtime = stat_result.st_mtime_ns

        if self.caching_enabled:
            cached = self.template_cache.get(cache_key, mtime)
            if cached is not None:
                self.logger.debug(f"Using cached template: {cache_key}")
                return cached

        source = await self._read(full_path, cache_key)
        compiled = self.engine.compile(source, name=cache_key)
        self.template_cache.set(cache_key, compiled, mtime)
        return compiled

    async def _read(self, full_path: str, template_name: str) -> str:
        try:
            async with aiofiles.open(full_path, mode='r', encoding='utf-8') as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateReadError(
                f"Failed to read template: {e}",
                template_name,
                context=ErrorContext(component="manager", operation="get_template", path=full_path),
            ) from e

    async def render(
        self,
        template_name: str,
        context: Optional[Mapping[str, Any]] = None,
        layout: Optional[str] = None
    ) -> str:
        """
        Render a template, optionally wrapped in a layout.

        The layout receives the render context extended with ``body``, the
        rendered content template.

        Args:
            template_name: Template path relative to the views root
            context: Template rendering context
            layout: Layout name relative to the layouts root

        Returns:
            Rendered output
        """
        start_time = time.perf_counter()
        context = dict(context or {})

        try:
            content_template = await self.get_template(template_name)
            content = content_template(context)

            if layout:
                layout_template = await self.get_layout(layout)
                result = layout_template({**context, "body": content})
            else:
                result = content
        except Exception as e:
            self.error_reporter.report(
                e,
                "render",
                template=template_name,
                layout=layout,
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )
            raise

        render_time = (time.perf_counter() - start_time) * 1000
        extra = {"template": template_name, "layout": layout, "duration_ms": render_time}
        if layout:
            self.logger.debug(f"Template {template_name} with layout {layout} rendered in {render_time:.2f}ms", extra=extra)
        else:
            self.logger.debug(f"Template {template_name} rendered without layout in {render_time:.2f}ms", extra=extra)
        return result

    async def initialize(self) -> List[str]:
        """
        Register all partials under the partials root and the built-in helpers.

        Returns:
            Names of the registered partials

        Raises:
            TemplateReadError: If the partials root cannot be listed
        """
        partials_root = self.config.partials_root
        try:
            names = await self.partial_registrar.register_partials(partials_root)

            for name, helper in BUILTIN_HELPERS.items():
                self.register_helper(name, helper)
        except Exception as e:
            self.error_reporter.report(e, "initialize", partials_dir=partials_root)
            raise

        self.logger.info(f"Template engine initialized successfully with {len(names)} partial(s)")
        return names

    def cache_info(self) -> Dict[str, Any]:
        """Summarize cache contents."""
        return {
            "caching_enabled": self.caching_enabled,
            "cache_ttl": self.cache_ttl,
            "templates": sorted(self.template_cache),
            "partials": sorted(self.partial_cache),
        }
