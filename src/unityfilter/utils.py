"""Utility functions for unityfilter"""

import logging
import os
import sys


ENV_PREFIX = 'UNITYFILTER_'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_int_env(key: str, default: int = 0) -> int:
    """Get integer value from environment variable, return default if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def get_str_env(key: str, default: str) -> str:
    """
    Get string from environment variable, return default if not set.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        String value or default
    """
    return os.getenv(key, default)


def get_bool_env(key: str, default: bool) -> bool:
    """
    Get boolean from environment variable, return default if not set.

    Recognizes: true/false, yes/no, 1/0 (case-insensitive)

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Boolean value or default
    """
    val = os.getenv(key)
    if val is None:
        return default
    val_lower = val.lower()
    if val_lower in ('true', 'yes', '1'):
        return True
    elif val_lower in ('false', 'no', '0'):
        return False
    return default


def get_list_env(key: str, default: list[str]) -> list[str]:
    """Get a comma separated list from environment variable, ignoring empty items."""
    val = os.getenv(key)
    if val is None:
        return list(default)
    return [item.strip() for item in val.split(',') if item.strip()]


def filter_environment() -> dict[str, str]:
    """Return the UNITYFILTER_* variables currently set."""
    return {key: value for key, value in os.environ.items() if key.startswith(ENV_PREFIX)}


def setup_logging(level_name: str):
    """Configure root logging on stderr.

    stdout carries filter data, so log records must never reach it.
    Unknown level names fall back to WARNING.
    """
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
