"""
Configuration loading utilities for the schema form app.

This module loads config.yaml, merges it over the built-in defaults and
exposes cached lookups for the rest of the application.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("config.yaml")

# Global configuration cache
_config_cache: Optional[Dict[str, Any]] = None


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'Schema Form Studio',
            'version': '1.0.0',
            'debug': False
        },
        'schema': {
            'schemas_dir': 'schemas',
            'primary_schema': 'setting_schema.json',
            'fallback_schema': 'setting_schema.json'
        },
        'ui': {
            'page_title': 'Schema Form',
            'default_language': 'en',
            'languages': ['en', 'ja']
        },
        'drawing': {
            'close_threshold': 10,
            'canvas_width': 400,
            'canvas_height': 200,
            'mode': 'drag',
            'provisional_color': '#FF0000',
            'palette': ['#1f77b4', '#2ca02c', '#9467bd', '#ff7f0e', '#17becf']
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }
    }


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application configuration.

    Results for the default path are cached; call reload_config() to force a
    fresh read.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)

    Returns:
        Complete configuration dictionary
    """
    global _config_cache

    use_cache = config_path is None
    if use_cache and _config_cache is not None:
        return _config_cache

    if config_path is None:
        config_path = CONFIG_FILE

    default_config = get_default_config()
    config = default_config

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
    else:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                user_config = yaml.safe_load(f)

            if user_config is None:
                logger.warning(f"Configuration file is empty: {config_path}")
            elif not isinstance(user_config, dict):
                logger.error(f"Configuration file is not a valid dictionary: {config_path}")
                logger.info("Using default configuration")
            else:
                config = deep_merge(default_config, user_config)
                logger.info(f"Successfully loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error in {config_path}: {e}")
            logger.info("Using default configuration")

        except (IOError, OSError) as e:
            logger.error(f"Failed to read configuration file {config_path}: {e}")
            logger.info("Using default configuration")

    if use_cache:
        _config_cache = config
    return config


def reload_config() -> Dict[str, Any]:
    """
    Force reload of configuration from file.
    Useful for testing or when configuration changes.
    """
    global _config_cache
    _config_cache = None
    return load_config()


def get_config_value(section: str, key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value.

    Args:
        section: Configuration section (e.g., 'drawing', 'ui')
        key: Configuration key within section
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    config = load_config()
    return config.get(section, {}).get(key, default)


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure and required fields.

    Args:
        config: Configuration dictionary to validate

    Returns:
        True if configuration is valid, False otherwise
    """
    required_sections = ['app', 'schema', 'ui', 'drawing', 'logging']

    for section in required_sections:
        if section not in config:
            logger.warning(f"Missing required configuration section: {section}")
            return False

    app = config.get('app', {})
    if 'name' not in app or 'version' not in app:
        logger.warning("Missing required app configuration (name or version)")
        return False

    languages = config.get('ui', {}).get('languages', [])
    if not isinstance(languages, list) or not all(isinstance(lang, str) for lang in languages):
        logger.warning("ui.languages must be a list of language codes")
        return False

    drawing = config.get('drawing', {})
    try:
        threshold = float(drawing.get('close_threshold', 10))
        if threshold <= 0:
            logger.warning("close_threshold must be positive")
            return False
    except (ValueError, TypeError):
        logger.warning("close_threshold must be a valid number")
        return False

    for dimension in ('canvas_width', 'canvas_height'):
        try:
            if int(drawing.get(dimension, 1)) <= 0:
                logger.warning(f"{dimension} must be positive")
                return False
        except (ValueError, TypeError):
            logger.warning(f"{dimension} must be a valid integer")
            return False

    if drawing.get('mode', 'drag') not in ('drag', 'click'):
        logger.warning(f"Unknown drawing mode: {drawing.get('mode')}")
        return False

    palette = drawing.get('palette', [])
    if not isinstance(palette, list) or not palette:
        logger.warning("drawing.palette must be a non-empty list of colors")
        return False

    return True

