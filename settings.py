"""JSON-based settings persistence for the holiday calendar."""

import json
import os

_SETTINGS_PATH = os.path.join(os.path.expanduser("~"), ".holiday-calendar-settings.json")

_DEFAULTS = {
    "store_url": "http://localhost:8080",
    "request_timeout": 10.0,
    "week_start": 0,
}

# Environment variable -> settings key
_ENV_OVERRIDES = {
    "HOLIDAY_STORE_URL": "store_url",
    "HOLIDAY_STORE_TIMEOUT": "request_timeout",
}


def _valid_timeout(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def load_settings() -> dict:
    """Load settings from disk, returning defaults for missing keys."""
    settings = dict(_DEFAULTS)
    try:
        with open(_SETTINGS_PATH, "r", encoding="utf-8") as f:
            stored = json.load(f)
        if not isinstance(stored, dict):
            stored = {}
        if isinstance(stored.get("store_url"), str) and stored["store_url"].strip():
            settings["store_url"] = stored["store_url"].strip()
        if _valid_timeout(stored.get("request_timeout")):
            settings["request_timeout"] = float(stored["request_timeout"])
        week_start = stored.get("week_start")
        if isinstance(week_start, int) and not isinstance(week_start, bool) and 0 <= week_start <= 6:
            settings["week_start"] = week_start
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        pass
    return settings


def apply_env_overrides(settings: dict, environ=None) -> dict:
    """Return a copy of ``settings`` with HOLIDAY_STORE_* variables applied."""
    environ = os.environ if environ is None else environ
    result = dict(settings)
    for var, key in _ENV_OVERRIDES.items():
        raw = environ.get(var, "").strip()
        if not raw:
            continue
        if key == "request_timeout":
            try:
                value = float(raw)
            except ValueError:
                continue
            if _valid_timeout(value):
                result[key] = value
        else:
            result[key] = raw
    return result


def save_settings(settings: dict) -> None:
    """Persist settings to disk."""
    with open(_SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)
