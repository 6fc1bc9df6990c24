"""Configuration management for Impot Sim.

Machine-specific preferences live in settings.json:
   - default_year: tax year used when none is given on the command line
   - default_output_format: text, rich, json or csv

Year-specific tax rules are not settings; they ship with the package as
impotsim/tax_rules/{year}.yaml (see impotsim.sdk.taxes.rules).

Config directory resolution:
1. IMPOT_SIM_CONFIG_PATH environment variable (if set)
2. ~/.config/impot-sim/ (XDG_CONFIG_HOME fallback)
"""

import json
import os
from pathlib import Path
from typing import Any


APP_NAME = "impot-sim"
SETTINGS_FILENAME = "settings.json"
CONFIG_PATH_ENV = "IMPOT_SIM_CONFIG_PATH"

OUTPUT_FORMATS = ("text", "rich", "json", "csv")


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. IMPOT_SIM_CONFIG_PATH environment variable
    2. ~/.config/impot-sim/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    # 1. Check environment variable
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    # 2. Fall back to XDG config path
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Args:
        settings: Settings dictionary to save

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json.

    Args:
        key: Setting key (e.g., "default_year", "default_output_format")
        default: Default value if key not found

    Returns:
        Setting value or default
    """
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Args:
        key: Setting key
        value: Value to set

    Returns:
        Path to the saved settings file
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def clear_setting(key: str) -> bool:
    """Remove a setting from settings.json.

    Returns:
        True if the key was present and removed
    """
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True
