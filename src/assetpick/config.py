# src/assetpick/config.py

import os
from typing import Any, Dict, Optional, Tuple

import platformdirs
import yaml

from assetpick.constants import APP_NAME, CONFIG_FILE_NAME
from assetpick.exceptions import ConfigFileError, ConfigValidationError
from assetpick.log_utils import logger

# Get the config directory using platformdirs
CONFIG_DIR = platformdirs.user_config_dir(APP_NAME)
CONFIG_FILE = os.path.join(CONFIG_DIR, CONFIG_FILE_NAME)

DEFAULT_CONFIG: Dict[str, Any] = {
    "GITHUB_TOKEN": None,
    "ALLOW_ENV_TOKEN": True,
    "PLATFORM": None,
    "ARCH": None,
    "LIBC": None,
    "LOG_LEVEL": None,
    "LOG_DIR": None,
    "SHOW_REJECTED": True,
    "CACHE_DIR": None,
}

# Expected type of every known key; None is always accepted
_CONFIG_TYPES: Dict[str, type] = {
    "GITHUB_TOKEN": str,
    "ALLOW_ENV_TOKEN": bool,
    "PLATFORM": str,
    "ARCH": str,
    "LIBC": str,
    "LOG_LEVEL": str,
    "LOG_DIR": str,
    "SHOW_REJECTED": bool,
    "CACHE_DIR": str,
}


def config_exists(directory: Optional[str] = None) -> Tuple[bool, Optional[str]]:
    """
    Return whether an assetpick configuration file exists and its path.

    If `directory` is provided, checks for CONFIG_FILE_NAME inside that directory;
    otherwise checks the platformdirs location (CONFIG_FILE).

    Returns:
        (bool, str|None): Whether a config file was found and its full path.
    """
    config_path = (
        os.path.join(directory, CONFIG_FILE_NAME) if directory else CONFIG_FILE
    )
    if os.path.exists(config_path):
        return True, config_path
    return False, None


def validate_config(config: Any) -> Dict[str, Any]:
    """
    Check a parsed configuration document and merge it over the defaults.

    Unknown keys are kept (and logged at debug level) so newer files still load.

    Raises:
        ConfigValidationError: If the document is not a mapping or a known key has the wrong type.
    """
    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigValidationError(
            "Configuration must be a mapping",
            details=f"got {type(config).__name__}",
        )

    for key, value in config.items():
        expected = _CONFIG_TYPES.get(key)
        if expected is None:
            logger.debug(f"Ignoring unknown configuration key: {key}")
            continue
        if value is not None and not isinstance(value, expected):
            raise ConfigValidationError(
                f"Invalid value for {key}",
                details=f"expected {expected.__name__}, got {type(value).__name__}",
            )

    merged = dict(DEFAULT_CONFIG)
    merged.update(config)
    return merged


def load_config(directory: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the assetpick configuration YAML, falling back to defaults when no file exists.

    Parameters:
        directory (str | None): Optional directory to load the config from instead of CONFIG_DIR.

    Returns:
        dict: The validated configuration merged over DEFAULT_CONFIG.

    Raises:
        ConfigFileError: If the file cannot be read or is not valid YAML.
        ConfigValidationError: If the document fails validation.
    """
    exists, config_path = config_exists(directory)
    if not exists or config_path is None:
        logger.debug("No configuration file found; using defaults")
        return dict(DEFAULT_CONFIG)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigFileError(f"Could not read {config_path}", details=str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(f"Invalid YAML in {config_path}", details=str(e)) from e

    logger.debug(f"Loaded configuration from {config_path}")
    return validate_config(raw)


def save_config(config: Dict[str, Any], directory: Optional[str] = None) -> str:
    """
    Write the configuration as YAML, omitting keys left at None.

    Returns:
        str: Path of the written file.

    Raises:
        ConfigFileError: If the file cannot be written.
    """
    validated = validate_config(config)
    target_dir = directory or CONFIG_DIR
    config_path = os.path.join(target_dir, CONFIG_FILE_NAME)
    document = {key: value for key, value in validated.items() if value is not None}
    try:
        os.makedirs(target_dir, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(document, f, default_flow_style=False, sort_keys=True)
    except OSError as e:
        raise ConfigFileError(f"Could not write {config_path}", details=str(e)) from e
    logger.info(f"Configuration saved to {config_path}")
    return config_path


def runtime_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Extract the platform/arch/libc overrides used by the runtime context provider."""
    return {
        "platform": config.get("PLATFORM"),
        "arch": config.get("ARCH"),
        "libc": config.get("LIBC"),
    }
