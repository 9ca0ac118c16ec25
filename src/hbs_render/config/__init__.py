"""
Configuration components for the template renderer.
"""
from .configuration import (
    ConfigStore,
    RenderConfiguration,
    ensure_render_config,
    merge_configs,
)
from .loader import (
    find_config_file,
    load_config,
    load_config_file,
    load_configuration_from_env,
)

__all__ = [
    "ConfigStore",
    "RenderConfiguration",
    "ensure_render_config",
    "merge_configs",
    "find_config_file",
    "load_config",
    "load_config_file",
    "load_configuration_from_env",
]
