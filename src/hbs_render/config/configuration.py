"""
Configuration model and process-wide store for the template renderer.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..error.exceptions import ConfigurationError, ErrorContext

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {"debug", "info", "warn", "error"}


class RenderConfiguration(BaseModel):
    """Directories and log level used by a template manager."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    views_dir: str = Field(default="", alias="VIEWS_DIR", description="Root directory of view templates")
    partials_dir: str = Field(default="", alias="PARTIALS_DIR", description="Root directory of partials")
    layouts_dir: str = Field(default="", alias="LAYOUTS_DIR", description="Root directory of layouts")
    log_level: str = Field(default="info", alias="LOG_LEVEL", description="Minimum level of internal log records")

    @field_validator("views_dir", "partials_dir", "layouts_dir", mode="before")
    @classmethod
    def convert_path(cls, value: Any) -> str:
        """Accept Path objects; paths are otherwise not validated."""
        if value is None:
            return ""
        if isinstance(value, Path):
            return str(value)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level."""
        value_lower = value.lower()
        if value_lower == "warning":
            value_lower = "warn"
        if value_lower not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level '{value}'. Must be one of: {sorted(VALID_LOG_LEVELS)}")
        return value_lower

    @property
    def views_root(self) -> str:
        """Absolute views root, resolved against the working directory."""
        return os.path.abspath(self.views_dir)

    @property
    def partials_root(self) -> str:
        """Absolute partials root; relative values live under the views root."""
        return os.path.abspath(os.path.join(self.views_root, self.partials_dir))

    @property
    def layouts_root(self) -> str:
        """Absolute layouts root; relative values live under the views root."""
        return os.path.abspath(os.path.join(self.views_root, self.layouts_dir))


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(value, dict) and key in result and isinstance(result[key], dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def _to_aliases(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Rewrite field names (views_dir) to their aliases (VIEWS_DIR)."""
    aliased = {}
    for key, value in values.items():
        field = RenderConfiguration.model_fields.get(key)
        aliased[field.alias if field is not None and field.alias else key] = value
    return aliased


def ensure_render_config(config: Optional[Union[RenderConfiguration, Mapping[str, Any]]] = None) -> RenderConfiguration:
    """Ensure a valid render configuration."""
    if isinstance(config, RenderConfiguration):
        return config

    try:
        return RenderConfiguration.model_validate(_to_aliases(config or {}))
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            context=ErrorContext(component="config", operation="ensure_render_config"),
        ) from e


class ConfigStore:
    """
    Holds the current configuration.

    Updates never mutate the stored model: the merged result is validated
    into a new instance which then replaces the old one.
    """

    def __init__(self, config: Optional[Union[RenderConfiguration, Mapping[str, Any]]] = None):
        self._config = ensure_render_config(config)

    @property
    def config(self) -> RenderConfiguration:
        return self._config

    def set_config(self, new_config: Optional[Mapping[str, Any]] = None, **fields: Any) -> RenderConfiguration:
        """
        Merge the given fields into the current configuration.

        Args:
            new_config: Mapping keyed by alias (VIEWS_DIR) or field name (views_dir)
            **fields: Same as new_config, as keyword arguments

        Returns:
            The configuration now in effect

        Raises:
            ConfigurationError: If a key is unknown or a value is invalid
        """
        updates = dict(new_config or {})
        updates.update(fields)

        merged = merge_configs(self._config.model_dump(by_alias=True), _to_aliases(updates))
        self._config = ensure_render_config(merged)
        logger.debug(f"Configuration updated: {sorted(updates)}")
        return self._config
