"""
Configuration management for the Google Maps tools core.

Loads environment variables (optionally from a .env file), exposes typed
accessors for the settings the request core reads, and validates that the
required credential is present.
"""

import os
import logging
from typing import Any, List, Optional
from dotenv import load_dotenv


class ConfigError(Exception):
    """Raised when required configuration is missing or unusable."""
    pass


def load_config(env_path: str = ".env") -> None:
    """
    Load environment variables from a .env file.

    Values in the file override variables already set in the process.

    Args:
        env_path: Path to the .env file (default: ".env")
    """
    logger = logging.getLogger(__name__)

    if os.path.exists(env_path):
        load_dotenv(env_path, override=True)
        logger.info(f"Loaded configuration from {env_path}")
    else:
        logger.warning(f"Configuration file {env_path} not found, using system environment variables only")


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value from environment variables.

    Args:
        key: Environment variable key
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    logger = logging.getLogger(__name__)

    value = os.getenv(key)

    if value is None:
        if default is not None:
            logger.warning(f"Configuration key '{key}' not found, using default value: {default}")
        else:
            logger.warning(f"Configuration key '{key}' not found and no default provided")
        return default

    return value


def get_int_config(key: str, default: int) -> int:
    """
    Get an integer configuration value.

    Unparseable values are logged and replaced by the default; range checks
    are left to the caller.
    """
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default

    try:
        return int(raw.strip())
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Configuration key '{key}' is not an integer ({raw!r}), using default value: {default}"
        )
        return default


def get_bool_config(key: str, default: bool = True) -> bool:
    """
    Get a boolean flag. Only an explicit "false" (any case) turns a
    default-on flag off, and only "true" turns a default-off flag on.
    """
    raw = os.getenv(key)
    if raw is None:
        return default

    value = raw.strip().lower()
    if default:
        return value != "false"
    return value == "true"


def validate_config(required_keys: List[str]) -> None:
    """
    Validate that all required configuration keys are present and non-empty.

    Args:
        required_keys: List of required environment variable keys

    Raises:
        ConfigError: If any required key is missing or empty
    """
    logger = logging.getLogger(__name__)
    missing_keys = []
    empty_keys = []

    for key in required_keys:
        value = os.getenv(key)
        if value is None:
            missing_keys.append(key)
        elif value.strip() == "":
            empty_keys.append(key)

    if missing_keys or empty_keys:
        error_msg = "Configuration validation failed:"
        if missing_keys:
            error_msg += f" Missing keys: {', '.join(missing_keys)}."
        if empty_keys:
            error_msg += f" Empty keys: {', '.join(empty_keys)}."

        logger.error(error_msg)
        raise ConfigError(error_msg)

    logger.info(f"Configuration validation passed for keys: {', '.join(required_keys)}")


def get_api_key(explicit: Optional[str] = None) -> str:
    """
    Resolve the Google Maps API key from an explicit value or GOOGLE_MAPS_API_KEY.

    Raises:
        ConfigError: If no non-empty key is available
    """
    api_key = explicit or os.getenv("GOOGLE_MAPS_API_KEY")
    if not api_key or not api_key.strip():
        raise ConfigError("GOOGLE_MAPS_API_KEY not provided or found in config")
    return api_key.strip()
