"""Application constants and persisted settings"""
import json

from PyQt6.QtCore import QSettings

DEBUG = False

# File watcher debounce interval (ms)
FILE_WATCHER_DEBOUNCE_MS = 150

# Maximum number of changes listed in the save preview
SAVE_PREVIEW_MAX_ITEMS = 3

# Maximum length of a value shown in the save preview
TRUNCATE_PREVIEW = 30

SETTINGS_ORGANIZATION = "DotDiff"
SETTINGS_APPLICATION = "DotDiffStorage"

DEFAULT_SETTING = {
    "debounce_ms": FILE_WATCHER_DEBOUNCE_MS,
    "save_preview_max_items": SAVE_PREVIEW_MAX_ITEMS,
    "debug": DEBUG,
    "log_file": "",
}


def _open_settings(settings=None):
    if settings is None:
        settings = QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)
    return settings


def load_setting(settings=None):
    """Load the stored setting blob merged over the defaults."""
    from utils.logging_setup import get_logger
    logger = get_logger("config")

    setting = dict(DEFAULT_SETTING)
    raw = _open_settings(settings).value("setting", "")
    if not raw:
        logger.debug("No settings found, using defaults")
        return setting

    try:
        loaded = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Error loading settings: {e}")
        return setting

    if not isinstance(loaded, dict):
        logger.warning(f"Ignoring settings of type {type(loaded).__name__}")
        return setting

    setting.update({k: v for k, v in loaded.items() if k in DEFAULT_SETTING})
    logger.debug(f"Settings loaded: {sorted(loaded)}")
    return setting


def save_setting(setting, settings=None):
    """Persist the setting dict as a JSON string."""
    settings = _open_settings(settings)
    settings.setValue("setting", json.dumps(setting))
    settings.sync()
