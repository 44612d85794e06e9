"""
Option loading from files and environment variables.
"""
import json
import logging
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..error.exceptions import ConfigurationError, ErrorContext
from .options import EngineOptions

logger = logging.getLogger(__name__)

# Options holding mappings are read from the environment as JSON
_JSON_OPTIONS = {"template_options", "locals"}


def load_options_file(config_path: str) -> Dict[str, Any]:
    """
    Load raw options from a YAML or JSON file.

    Args:
        config_path: Path to the options file

    Returns:
        Options dictionary

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    if not os.path.exists(config_path):
        raise ConfigurationError(
            f"Options file not found: {config_path}",
            ErrorContext(component="config", operation="load_options_file")
        )
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Invalid options file {config_path}: {e}",
            ErrorContext(component="config", operation="load_options_file")
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file {config_path} must contain a mapping")
    return data


def load_options_from_env(env_prefix: str = "VIEW_ENGINE_") -> Dict[str, Any]:
    """
    Collect options from environment variables such as ``VIEW_ENGINE_ROOT``.

    Args:
        env_prefix: Prefix for environment variables

    Returns:
        Options dictionary
    """
    config: Dict[str, Any] = {}
    for name in EngineOptions.model_fields:
        raw = os.environ.get(f"{env_prefix}{name.upper()}")
        if raw is None:
            continue
        if name in _JSON_OPTIONS:
            try:
                config[name] = json.loads(raw)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"{env_prefix}{name.upper()} must be a JSON object: {e}") from e
        else:
            config[name] = raw
    return config


def load_options(
    config_path: Optional[str] = None,
    env_prefix: str = "VIEW_ENGINE_",
    **overrides: Any
) -> EngineOptions:
    """
    Build engine options from a file, the environment and explicit overrides.

    Environment variables take precedence over the file; explicit overrides
    that are not None take precedence over both.

    Args:
        config_path: Optional YAML/JSON options file
        env_prefix: Prefix for environment variables
        **overrides: Explicit option values

    Returns:
        Validated EngineOptions
    """
    config: Dict[str, Any] = {}
    if config_path:
        logger.info(f"Loading engine options from {config_path}")
        config.update(load_options_file(config_path))
    config.update(load_options_from_env(env_prefix))
    config.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return EngineOptions(**config)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid engine options: {e}",
            ErrorContext(component="config", operation="load_options")
        ) from e
