"""Configuration management for Salary Calc.

Configuration lives in the config directory:

1. settings.json - Machine-specific settings
   - rates: path to a custom rates YAML (optional)
   - debounce_ms: real-time validation debounce window

2. rates.yaml - Statutory rate overrides (optional)
   - Same schema as the bundled default rates file

Config directory resolution:
1. SALARY_CALC_CONFIG_PATH environment variable (if set)
2. ~/.config/salary-calc/ (XDG_CONFIG_HOME fallback)

Rates resolution:
1. settings.json "rates" key (if set via CLI)
2. rates.yaml in the config directory
3. Bundled default (salarycalc/sdk/contributions/rates.yaml)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)


APP_NAME = "salary-calc"
SETTINGS_FILENAME = "settings.json"
RATES_FILENAME = "rates.yaml"
DEFAULT_DEBOUNCE_MS = 300


class ConfigNotFoundError(Exception):
    """Raised when a configured file cannot be found."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. SALARY_CALC_CONFIG_PATH environment variable
    2. ~/.config/salary-calc/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("SALARY_CALC_CONFIG_PATH")
    if env_path:
        return Path(env_path)

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
        key: Setting key (e.g., "rates", "debounce_ms")
        default: Default value if key not found
    """
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Returns:
        Path to the saved settings file
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_default_rates_path() -> Path:
    """Path to the rates file shipped with the package."""
    return Path(__file__).parent / "contributions" / RATES_FILENAME


def get_rates_path(require_exists: bool = False) -> Path:
    """Get the path to the rates YAML in effect.

    Resolution order:
    1. settings.json "rates" key (if set)
    2. rates.yaml in config directory
    3. Bundled default rates

    Args:
        require_exists: If True, raises ConfigNotFoundError when the
            path configured in settings.json does not exist

    Returns:
        Path to the rates file

    Raises:
        ConfigNotFoundError: If require_exists=True and the custom path is missing
    """
    custom_rates = get_setting("rates")
    if custom_rates:
        rates_path = Path(custom_rates)
        if require_exists and not rates_path.exists():
            raise ConfigNotFoundError(
                f"Rates file not found at configured path: {rates_path}\n\n"
                f"Update with: salary-calc settings rates /path/to/rates.yaml\n"
                f"Or revert to defaults: salary-calc settings rates --clear"
            )
        logger.debug(f"rates: using settings.json path {rates_path}")
        return rates_path

    local_path = get_config_dir() / RATES_FILENAME
    if local_path.exists():
        logger.debug(f"rates: using config dir override {local_path}")
        return local_path

    return get_default_rates_path()


def get_debounce_ms() -> int:
    """Debounce window for real-time validation, in milliseconds."""
    value = get_setting("debounce_ms", DEFAULT_DEBOUNCE_MS)
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        logger.warning(f"settings.json debounce_ms is not an integer: {value!r}")
        return DEFAULT_DEBOUNCE_MS
