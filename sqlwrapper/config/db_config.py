"""
Connection configuration settings.

This module defines the default connection configuration, the schema used to
validate user supplied configuration, and YAML loading with defaults merged in.
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Union
import logging

import yaml
from jsonschema import Draft7Validator

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'database': {
        'url': 'sqlite://',           # SQLAlchemy database URL
        'username': None,             # Merged into the URL when set
        'password': None,
        'options': {},                # Driver connect_args
        'engine_options': {},         # Extra create_engine() arguments
        'strict_errors': False,       # Escalate driver warnings to errors
        'persistent': None,           # True: pooled, False: NullPool, None: engine default
        'mysql_utf8': False,          # SET NAMES utf8 on connect
    },
    'logging': {
        'level': 'INFO',
        'file': None,                 # Optional log file path
    },
}

CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["database"],
    "properties": {
        "database": {
            "type": "object",
            "required": ["url"],
            "properties": {
                "url": {"type": "string", "minLength": 1},
                "username": {"type": ["string", "null"]},
                "password": {"type": ["string", "null"]},
                "options": {"type": "object"},
                "engine_options": {"type": "object"},
                "strict_errors": {"type": "boolean"},
                "persistent": {"type": ["boolean", "null"]},
                "mysql_utf8": {"type": "boolean"}
            }
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
                "file": {"type": ["string", "null"]}
            }
        }
    }
}


def get_default_config() -> Dict[str, Any]:
    """Get a copy of the default configuration dictionary."""
    return deepcopy(DEFAULT_CONFIG)


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate a configuration dictionary against the schema.

    Raises:
        ConfigurationError: If the configuration is invalid, listing every problem
    """
    validator = Draft7Validator(CONFIG_SCHEMA)
    errors = sorted(validator.iter_errors(config), key=lambda e: list(e.path))
    if errors:
        problems = []
        for error in errors:
            location = '.'.join(str(part) for part in error.path) or '<root>'
            problems.append(f"{location}: {error.message}")
        raise ConfigurationError("Invalid configuration: " + '; '.join(problems))
    return True


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_config(result[key], value)
        else:
            result[key] = deepcopy(value)
    return result


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file and merge it over the defaults.

    Args:
        path: Path to the YAML file

    Returns:
        Validated configuration dictionary
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        user_config = yaml.safe_load(f) or {}

    if not isinstance(user_config, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

    config = merge_config(get_default_config(), user_config)
    validate_config(config)
    logger.debug(f"Loaded configuration from {config_path}")
    return config
