# code_viewer/gui/resources.py

import logging
import sys
from pathlib import Path

from PySide6.QtCore import QDir, QSize
from PySide6.QtGui import QIcon

from code_viewer.core.config_manager import DEFAULT_THEME, load_settings, update_setting

# A dedicated logger for asset-related events, such as missing icons or themes.
logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> Path:
    """
    Gets the absolute path to a resource, working for both development (source)
    and production (PyInstaller bundled executable).
    """
    try:
        # PyInstaller unpacks bundled data into a temporary folder at sys._MEIPASS.
        base_path = Path(sys._MEIPASS)
    except AttributeError:
        # Running from source: the project root is 3 levels up from this file.
        base_path = Path(__file__).resolve().parent.parent.parent

    return base_path / relative_path


# --- Constants defined using the resolver ---
ASSETS_PATH = get_resource_path('assets')
STYLES_PATH = ASSETS_PATH / 'styles'
THEMES_PATH = STYLES_PATH / 'themes'
ICONS_PATH = ASSETS_PATH / 'icons'
CONFIG_PATH = get_resource_path('config')
SETTINGS_FILE_PATH = CONFIG_PATH / 'settings.json'
DEFAULT_DATA_FILE_PATH = CONFIG_PATH / 'snippets.json'

AVAILABLE_THEMES = {
    "dark_theme.qss": "Dark Theme",
    "light_theme.qss": "Light Theme",
}

# Every icon the viewer asks for. validate_assets() reports any that are missing.
REQUIRED_ICONS = [
    "app_icon", "search", "clear", "copy", "copied", "menu", "up-arrow", "settings",
]
# Used in place of any icon that cannot be found.
FALLBACK_ICON_NAME = "app_icon"
ICON_SIZE = QSize(18, 18)

_icon_cache = {}


# --- Asset Management Functions ---

def validate_assets():
    """
    Checks that the themes directory and all required icons are present.
    Missing assets are logged, never fatal.
    """
    logger.info("Validating GUI assets...")

    if not THEMES_PATH.is_dir():
        logger.warning(f"Themes directory not found at: {THEMES_PATH}")

    missing_icons = [name for name in REQUIRED_ICONS if not (ICONS_PATH / f"{name}.svg").exists()]
    if missing_icons:
        logger.warning(f"Missing required icons in '{ICONS_PATH}': {', '.join(missing_icons)}")
    else:
        logger.info("All required icons found.")
    return missing_icons


def get_current_theme() -> str:
    """Returns the theme file name stored in settings.json."""
    theme = load_settings(SETTINGS_FILE_PATH).theme
    if theme not in AVAILABLE_THEMES:
        logger.warning(f"Unknown theme '{theme}' in settings, defaulting to {DEFAULT_THEME}.")
        return DEFAULT_THEME
    return theme


def set_current_theme(theme_filename: str) -> bool:
    """Saves the user's new theme choice to settings.json."""
    if theme_filename not in AVAILABLE_THEMES:
        logger.error(f"Refusing to save unknown theme: {theme_filename}")
        return False
    if update_setting(SETTINGS_FILE_PATH, "theme", theme_filename):
        logger.info(f"User theme changed and saved to: {theme_filename}")
        return True
    return False


def load_stylesheet(theme_filename: str | None = None) -> str:
    """
    Loads the stylesheet of the given theme, or of the theme in settings.json.
    Also registers the "assets:" search path so the QSS can reference icons.
    """
    QDir.addSearchPath("assets", str(ASSETS_PATH))

    theme = theme_filename or get_current_theme()
    theme_path = THEMES_PATH / theme
    if theme_path.exists():
        logger.info(f"Loading theme: {theme}")
        return theme_path.read_text(encoding='utf-8')
    logger.error(f"Failed to load theme file: {theme_path}")
    return ""


def get_icon(name: str) -> QIcon:
    """
    Creates and caches a QIcon from an SVG file, falling back to the app icon
    (or an empty icon) when the file is missing.
    """
    if name in _icon_cache:
        return _icon_cache[name]

    icon_path = ICONS_PATH / f"{name}.svg"
    if not icon_path.exists():
        logger.warning(f"Icon '{name}.svg' not found. Using fallback.")
        if name == FALLBACK_ICON_NAME:
            return QIcon()
        return get_icon(FALLBACK_ICON_NAME)

    icon = QIcon(str(icon_path))
    _icon_cache[name] = icon
    return icon
