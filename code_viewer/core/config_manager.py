# code_viewer/core/config_manager.py

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

# A dedicated logger for the module that manages the viewer's persisted settings.
logger = logging.getLogger(__name__)

# --- Timing Defaults ---
# A 200ms quiet period keeps the list from flickering while the user is still typing.
DEFAULT_DEBOUNCE_MS = 200
# How long a card's copy button keeps showing its "Copied!" confirmation.
DEFAULT_COPY_RESET_MS = 2000
DEFAULT_THEME = "dark_theme.qss"
# Level of the console log handler; the log file always records DEBUG.
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ViewerSettings:
    """The user-tunable settings of the viewer, as stored in settings.json."""
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    copy_reset_ms: int = DEFAULT_COPY_RESET_MS
    theme: str = DEFAULT_THEME
    data_file: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ViewerSettings":
        """
        Builds settings from a raw dictionary. Unknown keys are ignored and
        invalid timings or log levels fall back to their defaults.
        """
        known = {f.name for f in fields(cls)}
        settings = cls(**{k: v for k, v in data.items() if k in known})

        for name, default in (("debounce_ms", DEFAULT_DEBOUNCE_MS), ("copy_reset_ms", DEFAULT_COPY_RESET_MS)):
            value = getattr(settings, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                logger.warning(f"Invalid value for '{name}': {value!r}. Using default {default}.")
                setattr(settings, name, default)
        if not isinstance(settings.theme, str) or not settings.theme:
            settings.theme = DEFAULT_THEME
        level = settings.log_level.upper() if isinstance(settings.log_level, str) else None
        if level not in LOG_LEVELS:
            logger.warning(f"Invalid value for 'log_level': {settings.log_level!r}. Using default {DEFAULT_LOG_LEVEL}.")
            level = DEFAULT_LOG_LEVEL
        settings.log_level = level
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(settings_path: Path) -> ViewerSettings:
    """
    Reads the viewer settings, falling back to defaults for anything missing.

    A missing or corrupt file is never fatal: the viewer simply starts with
    its default settings.
    """
    try:
        if settings_path.exists():
            with open(settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, dict):
                return ViewerSettings.from_dict(data)
            logger.warning(f"Settings file does not hold an object, using defaults: {settings_path}")
    except (OSError, ValueError) as e:
        # ValueError covers both JSONDecodeError and UnicodeDecodeError.
        logger.warning(f"Could not read settings ({settings_path}), using defaults: {e}")
    return ViewerSettings()


def save_settings(settings_path: Path, settings: ViewerSettings) -> bool:
    """
    Writes the viewer settings to disk.

    Returns:
        True on success, False if the file could not be written.
    """
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_path, 'w', encoding='utf-8') as f:
            json.dump(settings.to_dict(), f, indent=2)
        logger.info(f"Settings saved to: {settings_path}")
        return True
    except OSError as e:
        logger.error(f"Could not write settings file at {settings_path}: {e}")
        return False


def update_setting(settings_path: Path, name: str, value: Any) -> bool:
    """Changes a single setting and persists the result."""
    settings = load_settings(settings_path)
    if not hasattr(settings, name):
        logger.error(f"Unknown setting: '{name}'")
        return False
    setattr(settings, name, value)
    return save_settings(settings_path, settings)
