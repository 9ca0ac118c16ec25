"""
Configuration loading from files and environment variables.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from ..error.exceptions import ConfigurationError
from .configuration import RenderConfiguration, ensure_render_config, merge_configs

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ["hbs_config.yaml", "hbs_config.yml", "hbs_config.json", "config.yaml", "config.yml"]
ENV_KEYS = ["VIEWS_DIR", "PARTIALS_DIR", "LAYOUTS_DIR", "LOG_LEVEL"]


def load_config_file(file_path: str) -> Dict[str, Any]:
    """
    Load configuration from a file (YAML or JSON).

    Args:
        file_path: Path to the configuration file

    Returns:
        Dictionary with configuration

    Raises:
        ConfigurationError: If the file is not found or cannot be parsed
    """
    path = Path(file_path).expanduser()

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    try:
        content = path.read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(f"Error reading config file {file_path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            loaded_config = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            loaded_config = json.loads(content) or {}
        else:
            raise ConfigurationError(f"Unsupported config file format: {file_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML format in {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON format in {file_path}: {e}") from e

    if not isinstance(loaded_config, dict):
        raise ConfigurationError(f"Configuration in {file_path} must be a mapping")

    logger.debug(f"Loaded configuration from {file_path}")
    return loaded_config


def load_configuration_from_env(env_prefix: str = "HBS_") -> Dict[str, Any]:
    """
    Collect configuration values from environment variables.

    Args:
        env_prefix: Prefix of the variables, e.g. HBS_VIEWS_DIR

    Returns:
        Dictionary keyed by configuration alias
    """
    return {
        key: os.environ[f"{env_prefix}{key}"]
        for key in ENV_KEYS
        if f"{env_prefix}{key}" in os.environ
    }


def find_config_file(search_paths: Optional[List[str]] = None) -> Optional[str]:
    """Find the first configuration file in the search paths."""
    if search_paths is None:
        search_paths = [os.getcwd(), str(Path(os.getcwd()) / "config")]

    for directory in search_paths:
        for filename in CONFIG_FILENAMES:
            full_path = os.path.join(directory, filename)
            if os.path.exists(full_path):
                return full_path
    return None


def load_config(
    config_path: Optional[str] = None,
    env_prefix: str = "HBS_",
    search_paths: Optional[List[str]] = None,
    use_dotenv: bool = True
) -> RenderConfiguration:
    """
    Centralized configuration loading from files and environment.

    Args:
        config_path: Path to the configuration file (optional)
        env_prefix: Prefix for environment variables to consider
        search_paths: Directories searched when no config_path is given
        use_dotenv: Load a .env file into the environment first

    Returns:
        RenderConfiguration with environment values taking precedence
    """
    if use_dotenv:
        load_dotenv()

    config: Dict[str, Any] = {}

    if config_path:
        logger.info(f"Loading configuration from specified file: {config_path}")
        config = merge_configs(config, load_config_file(config_path))
    else:
        discovered = find_config_file(search_paths)
        if discovered:
            logger.info(f"Loading configuration from discovered file: {discovered}")
            config = merge_configs(config, load_config_file(discovered))
        else:
            logger.info("No configuration file found, using defaults and environment variables")

    config = merge_configs(config, load_configuration_from_env(env_prefix))
    return ensure_render_config(config)
