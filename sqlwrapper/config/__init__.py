"""
Connection configuration management.

This module handles:
- Default connection settings and schema validation
- YAML configuration loading
- Database logging setup
"""

from .db_config import (
    DEFAULT_CONFIG,
    get_default_config,
    validate_config,
    merge_config,
    load_config,
)
from .logging_config import setup_db_logging, DatabaseLoggerAdapter

__all__ = [
    'DEFAULT_CONFIG',
    'get_default_config',
    'validate_config',
    'merge_config',
    'load_config',
    'setup_db_logging',
    'DatabaseLoggerAdapter'
]
